"""Tests for the dashboard JSON API."""

import os
from datetime import datetime, timezone
from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from status_dashboard.dbt_cloud.models import DbtRun
from status_dashboard.errors import RemoteApiError
from status_dashboard.github_client.models import GitHubDashboard, IssueGroup
from status_dashboard.links import Link
from status_dashboard.prefect_cloud.models import PrefectDashboard, TagSummary
from status_dashboard.server import app

GITHUB_ENV = {"GITHUB_TOKEN": "test_token", "GITHUB_USERNAME": "octocat"}


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


def test_health(client: TestClient) -> None:
    """Test the health route."""
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


class TestGitHubRoute:
    """Test the GitHub route."""

    @patch.dict(os.environ, {}, clear=True)
    def test_not_configured(self, client: TestClient) -> None:
        """Test missing credentials give an empty, unconfigured view."""
        response = client.get("/api/github")

        assert response.status_code == 200
        body = response.json()
        assert body["configured"] is False
        assert "GITHUB_TOKEN" in body["error"]
        assert body["prs"] == []
        assert body["currentIteration"] == []
        assert body["backlog"] == []

    @patch.dict(os.environ, GITHUB_ENV, clear=True)
    def test_success(self, client: TestClient) -> None:
        """Test the assembled view is returned with camelCase keys."""
        group = IssueGroup(
            id=1,
            node_id="I_1",
            number=1,
            title="Epic",
            url="https://github.com/acme/widgets/issues/1",
            display_iteration="Sprint 5",
        )
        dashboard = GitHubDashboard(current_iteration=[group])

        with (
            patch("status_dashboard.server.GitHubClient") as mock_client,
            patch(
                "status_dashboard.server.fetch_github_data",
                AsyncMock(return_value=dashboard),
            ) as mock_fetch,
        ):
            response = client.get("/api/github")

        assert response.status_code == 200
        body = response.json()
        assert body["configured"] is True
        assert body["currentIteration"][0]["nodeId"] == "I_1"
        assert body["currentIteration"][0]["displayIteration"] == "Sprint 5"
        assert body["currentIterationClosed"] == []
        assert "fetchedAt" in body
        mock_client.assert_called_once_with(token="test_token")
        args = mock_fetch.await_args.args
        assert args[1] == "octocat"
        assert args[2].tzinfo == timezone.utc

    @patch.dict(os.environ, GITHUB_ENV, clear=True)
    def test_remote_failure(self, client: TestClient) -> None:
        """Test a failed aggregation is a server error with the message."""
        with (
            patch("status_dashboard.server.GitHubClient"),
            patch(
                "status_dashboard.server.fetch_github_data",
                AsyncMock(side_effect=RemoteApiError("GitHub API error: 403", 403)),
            ),
        ):
            response = client.get("/api/github")

        assert response.status_code == 500
        body = response.json()
        assert body["error"] == "GitHub API error: 403"
        assert body["prs"] == []


class TestDbtRoute:
    """Test the dbt Cloud route."""

    @patch.dict(os.environ, {}, clear=True)
    def test_not_configured(self, client: TestClient) -> None:
        """Test missing settings give an unconfigured response."""
        with patch("status_dashboard.server.load_config", return_value={}):
            response = client.get("/api/dbt")

        assert response.json() == {"configured": False, "runs": []}

    @patch.dict(os.environ, {"DBT_TOKEN": "tok", "DBT_ACCOUNT_ID": "42"}, clear=True)
    def test_runs(self, client: TestClient) -> None:
        """Test the latest runs of the configured jobs are returned."""
        run = DbtRun(
            id=9,
            job_id=101,
            status="Success",
            status_color="green",
            finished_at="2024-03-15 06:12:00+00:00",
        )

        with (
            patch(
                "status_dashboard.server.load_config",
                return_value={"dbt": {"jobs": [101]}},
            ),
            patch(
                "status_dashboard.server.fetch_dbt_runs",
                AsyncMock(return_value=[run]),
            ) as mock_fetch,
        ):
            response = client.get("/api/dbt")

        body = response.json()
        assert body["configured"] is True
        assert body["runs"][0]["statusColor"] == "green"
        assert body["runs"][0]["jobName"] == "Production Build"
        assert mock_fetch.await_args.args[1] == [101]


class TestPrefectRoute:
    """Test the Prefect route."""

    @patch.dict(os.environ, {"PREFECT_API_KEY": "pnu"}, clear=True)
    def test_view(self, client: TestClient) -> None:
        """Test failing deployments and tag summary are returned."""
        settings = {"prefect": {"accountId": "a", "workspaceId": "w", "tags": ["prod"]}}
        data = PrefectDashboard(tag_summary={"prod": TagSummary(total=3, successful=3)})

        with (
            patch("status_dashboard.server.load_config", return_value=settings),
            patch(
                "status_dashboard.server.fetch_prefect_data",
                AsyncMock(return_value=data),
            ),
        ):
            response = client.get("/api/prefect")

        body = response.json()
        assert body["configured"] is True
        assert body["deployments"] == []
        assert body["tagSummary"] == {"prod": {"total": 3, "successful": 3}}
        assert body["tags"] == ["prod"]

    @patch.dict(os.environ, {"PREFECT_API_KEY": "pnu"}, clear=True)
    def test_remote_failure(self, client: TestClient) -> None:
        """Test a failed deployment listing is a server error."""
        settings = {"prefect": {"accountId": "a", "workspaceId": "w", "tags": ["prod"]}}

        with (
            patch("status_dashboard.server.load_config", return_value=settings),
            patch(
                "status_dashboard.server.fetch_prefect_data",
                AsyncMock(side_effect=RemoteApiError("Prefect API error", 502)),
            ),
        ):
            response = client.get("/api/prefect")

        assert response.status_code == 500
        assert response.json()["deployments"] == []


def test_links(client: TestClient) -> None:
    """Test links are served without empty optional fields."""
    links = [Link(name="Runbook", url="https://wiki.example.com/runbook")]

    with patch("status_dashboard.server.load_links", return_value=links):
        response = client.get("/api/links")

    assert response.json() == [
        {"name": "Runbook", "url": "https://wiki.example.com/runbook"}
    ]
