"""CLI commands printing each integration's dashboard view."""

import asyncio
import json
from datetime import datetime, timezone
from typing import Any

import typer
from rich.console import Console
from rich.table import Table

from ..config import DbtConfig, GitHubConfig, PrefectConfig
from ..dbt_cloud.client import DbtCloudClient, fetch_dbt_runs
from ..errors import RemoteApiError
from ..github_client.client import GitHubClient
from ..github_client.dashboard import fetch_github_data
from ..github_client.models import IssueGroup
from ..links import load_links
from ..prefect_cloud.client import PrefectCloudClient, fetch_prefect_data
from ..utils.date_parser import parse_date_input

console = Console()


def _print_json(data: Any) -> None:
    console.print_json(json.dumps(data))


def _issue_table(title: str, groups: list[IssueGroup]) -> Table:
    table = Table(title=f"{title} ({len(groups)})")
    table.add_column("Issue", style="cyan")
    table.add_column("Title")
    table.add_column("Iteration", style="magenta")
    table.add_column("Sub-issues", justify="right")

    for group in groups:
        reference = f"#{group.number}" if group.number is not None else "-"
        if group.repository:
            reference = f"{group.repository}{reference}"
        title_text = group.title
        if group.is_external_parent:
            title_text = f"{title_text} [dim](parent)[/dim]"
        table.add_row(
            reference,
            title_text,
            group.display_iteration or "",
            str(len(group.sub_issues)),
        )
    return table


def github(
    username: str | None = typer.Option(
        None, "--username", "-u", help="GitHub login (defaults to GITHUB_USERNAME)"
    ),
    token: str | None = typer.Option(
        None, "--token", help="GitHub API token (defaults to GITHUB_TOKEN env var)"
    ),
    as_of: str | None = typer.Option(
        None, "--as-of", help="Classify iterations as of this date (default: now)"
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the raw JSON view"),
) -> None:
    """Show open PRs and issues grouped by iteration."""
    config = GitHubConfig()
    username = username or config.username
    token = token or config.token
    if not username or not token:
        console.print("❌ Error: GITHUB_TOKEN and GITHUB_USERNAME are required")
        raise typer.Exit(1)

    try:
        now = parse_date_input(as_of) if as_of else datetime.now(timezone.utc)
    except ValueError as e:
        console.print(f"❌ Error: {e}")
        raise typer.Exit(1)

    try:
        client = GitHubClient(token=token)
        with console.status(f"Fetching GitHub activity for {username}..."):
            dashboard = asyncio.run(fetch_github_data(client, username, now))
    except RemoteApiError as e:
        console.print(f"❌ Error fetching GitHub data: {e}")
        raise typer.Exit(1)

    if as_json:
        _print_json(dashboard.model_dump(mode="json", by_alias=True))
        return

    prs_table = Table(title=f"Pull Requests ({len(dashboard.prs)})")
    prs_table.add_column("PR", style="cyan")
    prs_table.add_column("Title")
    prs_table.add_column("Categories", style="green")
    for pr in dashboard.prs:
        prs_table.add_row(
            f"{pr.repository or ''}#{pr.number}", pr.title, ", ".join(pr.categories)
        )
    console.print(prs_table)

    console.print(_issue_table("Current Iteration", dashboard.current_iteration))
    console.print(
        _issue_table("Closed This Iteration", dashboard.current_iteration_closed)
    )
    console.print(_issue_table("Future Iterations", dashboard.future_iterations))
    console.print(_issue_table("Backlog", dashboard.backlog))


def dbt(
    as_json: bool = typer.Option(False, "--json", help="Print the raw JSON view"),
) -> None:
    """Show the latest run of each configured dbt Cloud job."""
    config = DbtConfig()
    try:
        config.validate()
    except ValueError as e:
        console.print(f"❌ Error: {e}")
        raise typer.Exit(1)

    client = DbtCloudClient(config.token, config.account_id, config.base_url)
    try:
        runs = asyncio.run(fetch_dbt_runs(client, config.job_ids))
    except RemoteApiError as e:
        console.print(f"❌ Error fetching dbt Cloud runs: {e}")
        raise typer.Exit(1)

    if as_json:
        _print_json([run.model_dump(mode="json", by_alias=True) for run in runs])
        return

    table = Table(title="dbt Cloud Jobs")
    table.add_column("Job", style="cyan")
    table.add_column("Status")
    table.add_column("Freshness")
    table.add_column("Finished")
    table.add_column("Duration", justify="right")
    for run in runs:
        freshness = ""
        if run.freshness:
            freshness = (
                f"[{run.freshness.status_color}]{run.freshness.status}"
                f"[/{run.freshness.status_color}]"
            )
        table.add_row(
            run.job_name,
            f"[{run.status_color}]{run.status}[/{run.status_color}]",
            freshness,
            run.finished_at or "",
            run.duration or "",
        )
    console.print(table)


def prefect(
    as_json: bool = typer.Option(False, "--json", help="Print the raw JSON view"),
) -> None:
    """Show Prefect deployments whose latest run failed."""
    config = PrefectConfig()
    try:
        config.validate()
    except ValueError as e:
        console.print(f"❌ Error: {e}")
        raise typer.Exit(1)

    client = PrefectCloudClient(config.api_key, config.account_id, config.workspace_id)
    try:
        data = asyncio.run(fetch_prefect_data(client, config.tags))
    except RemoteApiError as e:
        console.print(f"❌ Error fetching Prefect data: {e}")
        raise typer.Exit(1)

    if as_json:
        _print_json(data.model_dump(mode="json", by_alias=True))
        return

    summary = Table(title="Prefect Tags")
    summary.add_column("Tag", style="cyan")
    summary.add_column("Healthy", justify="right")
    for tag, counts in data.tag_summary.items():
        summary.add_row(tag, f"{counts.successful}/{counts.total}")
    console.print(summary)

    if not data.deployments:
        console.print("✅ No failing deployments")
        return

    failing = Table(title=f"Failing Deployments ({len(data.deployments)})")
    failing.add_column("Deployment", style="cyan")
    failing.add_column("Flow")
    failing.add_column("State", style="red")
    failing.add_column("Started")
    for deployment in data.deployments:
        latest = deployment.latest_run
        failing.add_row(
            deployment.name,
            deployment.flow_name,
            latest.state_name if latest else "",
            latest.start_time if latest else "",
        )
    console.print(failing)


def links(
    as_json: bool = typer.Option(False, "--json", help="Print the raw JSON view"),
) -> None:
    """Show the configured quick links."""
    loaded = load_links()
    if as_json:
        _print_json(
            [link.model_dump(mode="json", exclude_none=True) for link in loaded]
        )
        return

    table = Table(title="Links")
    table.add_column("Name", style="cyan")
    table.add_column("URL")
    for link in loaded:
        table.add_row(link.name, link.url)
    console.print(table)
