"""Main CLI entry point."""

import logging

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler

from .status import dbt, github, links, prefect

# Load environment variables from .env file
load_dotenv()

app = typer.Typer(
    name="status-dashboard",
    help="Status dashboard for GitHub, dbt Cloud and Prefect Cloud",
    add_completion=False,
    context_settings={"help_option_names": ["-h", "--help"]},
)
console = Console()


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logs"),
) -> None:
    """Status dashboard for GitHub, dbt Cloud and Prefect Cloud."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )


app.command(name="github", context_settings={"help_option_names": ["-h", "--help"]})(
    github
)
app.command(name="dbt", context_settings={"help_option_names": ["-h", "--help"]})(dbt)
app.command(name="prefect", context_settings={"help_option_names": ["-h", "--help"]})(
    prefect
)
app.command(name="links", context_settings={"help_option_names": ["-h", "--help"]})(
    links
)


@app.command(context_settings={"help_option_names": ["-h", "--help"]})
def serve(
    host: str = typer.Option("127.0.0.1", "--host", help="Interface to bind"),
    port: int = typer.Option(8000, "--port", "-p", help="Port to listen on"),
    reload: bool = typer.Option(False, "--reload", help="Reload on code changes"),
) -> None:
    """Serve the dashboard JSON API."""
    import uvicorn

    console.print(f"Serving status dashboard API on http://{host}:{port}")
    uvicorn.run("status_dashboard.server:app", host=host, port=port, reload=reload)


@app.command(context_settings={"help_option_names": ["-h", "--help"]})
def version() -> None:
    """Show version information."""
    from status_dashboard import __version__

    console.print(f"Status Dashboard v{__version__}")


if __name__ == "__main__":
    app()
