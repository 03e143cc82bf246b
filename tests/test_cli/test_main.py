"""Tests for the status-dashboard CLI."""

import json
import os
import re
from unittest.mock import AsyncMock, patch

import pytest
from typer.testing import CliRunner

from status_dashboard.cli.main import app
from status_dashboard.dbt_cloud.models import DbtRun, FreshnessStatus
from status_dashboard.errors import RemoteApiError
from status_dashboard.github_client.models import GitHubDashboard
from status_dashboard.links import Link

GITHUB_ENV = {"GITHUB_TOKEN": "test_token", "GITHUB_USERNAME": "octocat"}


def strip_ansi(text: str) -> str:
    """Strip ANSI escape codes from text."""
    ansi_escape = re.compile(r"\x1B(?:[@-Z\\-_]|\[[0-?]*[ -/]*[@-~])")
    return ansi_escape.sub("", text)


@pytest.fixture
def runner() -> CliRunner:
    """Create CLI runner for testing."""
    return CliRunner(env={"NO_COLOR": "1", "FORCE_COLOR": "0", "TERM": "dumb"})


def test_version(runner: CliRunner) -> None:
    """Test the version command."""
    result = runner.invoke(app, ["version"])

    assert result.exit_code == 0
    assert "Status Dashboard v" in result.stdout


def test_help_lists_commands(runner: CliRunner) -> None:
    """Test the top-level help lists every command."""
    result = runner.invoke(app, ["-h"])

    assert result.exit_code == 0
    output = strip_ansi(result.stdout)
    for command in ("github", "dbt", "prefect", "links", "serve"):
        assert command in output


class TestGitHubCommand:
    """Test the github command."""

    @patch.dict(os.environ, {}, clear=True)
    def test_missing_credentials(self, runner: CliRunner) -> None:
        """Test missing credentials exit with an error."""
        result = runner.invoke(app, ["github"])

        assert result.exit_code == 1
        assert "GITHUB_TOKEN" in result.stdout

    @patch.dict(os.environ, GITHUB_ENV, clear=True)
    def test_json_output(self, runner: CliRunner) -> None:
        """Test --json prints the camelCase view."""
        with (
            patch("status_dashboard.cli.status.GitHubClient"),
            patch(
                "status_dashboard.cli.status.fetch_github_data",
                AsyncMock(return_value=GitHubDashboard()),
            ) as mock_fetch,
        ):
            result = runner.invoke(
                app, ["github", "--json", "--as-of", "2024-03-15"]
            )

        assert result.exit_code == 0
        data = json.loads(strip_ansi(result.stdout))
        assert data["currentIterationClosed"] == []
        assert data["futureIterations"] == []
        now = mock_fetch.await_args.args[2]
        assert now.isoformat() == "2024-03-15T00:00:00+00:00"

    @patch.dict(os.environ, GITHUB_ENV, clear=True)
    def test_invalid_as_of(self, runner: CliRunner) -> None:
        """Test an unparseable --as-of date exits with an error."""
        result = runner.invoke(app, ["github", "--as-of", "someday"])

        assert result.exit_code == 1
        assert "Unable to parse date" in strip_ansi(result.stdout)

    @patch.dict(os.environ, GITHUB_ENV, clear=True)
    def test_remote_failure(self, runner: CliRunner) -> None:
        """Test a failed aggregation exits with an error."""
        with (
            patch("status_dashboard.cli.status.GitHubClient"),
            patch(
                "status_dashboard.cli.status.fetch_github_data",
                AsyncMock(side_effect=RemoteApiError("GitHub API error: 401", 401)),
            ),
        ):
            result = runner.invoke(app, ["github"])

        assert result.exit_code == 1
        assert "GitHub API error: 401" in strip_ansi(result.stdout)


class TestDbtCommand:
    """Test the dbt command."""

    @patch.dict(os.environ, {}, clear=True)
    def test_not_configured(self, runner: CliRunner) -> None:
        """Test missing settings exit with an error."""
        with patch("status_dashboard.config.load_config", return_value={}):
            result = runner.invoke(app, ["dbt"])

        assert result.exit_code == 1
        assert "DBT_TOKEN" in strip_ansi(result.stdout)

    @patch.dict(
        os.environ,
        {"DBT_TOKEN": "tok", "DBT_ACCOUNT_ID": "42", "DBT_JOB_ID": "7"},
        clear=True,
    )
    def test_table(self, runner: CliRunner) -> None:
        """Test runs are shown in a table."""
        run = DbtRun(
            id=1,
            job_id="7",
            status="Success",
            status_color="green",
            duration="12 minutes",
            freshness=FreshnessStatus(status="Error", status_color="red"),
        )

        with (
            patch("status_dashboard.config.load_config", return_value={}),
            patch(
                "status_dashboard.cli.status.fetch_dbt_runs",
                AsyncMock(return_value=[run]),
            ),
        ):
            result = runner.invoke(app, ["dbt"])

        assert result.exit_code == 0
        output = strip_ansi(result.stdout)
        assert "Production Build" in output
        assert "Success" in output


def test_links_json(runner: CliRunner) -> None:
    """Test links are printed as JSON."""
    links = [Link(name="Docs", url="https://docs.example.com", icon="book")]

    with patch("status_dashboard.cli.status.load_links", return_value=links):
        result = runner.invoke(app, ["links", "--json"])

    assert result.exit_code == 0
    assert json.loads(strip_ansi(result.stdout)) == [
        {"name": "Docs", "url": "https://docs.example.com", "icon": "book"}
    ]
