"""Tests for GitHub search query building."""

from datetime import datetime, timezone

from status_dashboard.github_client.search import (
    build_dashboard_queries,
    build_search_query,
)


class TestBuildSearchQuery:
    """Test composing search qualifiers."""

    def test_review_requested(self) -> None:
        """Test open PRs awaiting a user's review."""
        query = build_search_query("pr", "open", review_requested="octocat")
        assert query == "is:pr is:open review-requested:octocat"

    def test_closed_after(self) -> None:
        """Test the closed date qualifier is inclusive."""
        query = build_search_query(
            "issue", "closed", assignee="octocat", closed_after="2024-01-01"
        )
        assert query == "is:issue is:closed assignee:octocat closed:>=2024-01-01"

    def test_bare_query(self) -> None:
        """Test kind and state alone."""
        assert build_search_query("issue", "open") == "is:issue is:open"


class TestBuildDashboardQueries:
    """Test the named dashboard categories."""

    def test_categories_and_order(self) -> None:
        """Test each group lists its categories in attribution order."""
        now = datetime(2024, 3, 15, 12, 0, tzinfo=timezone.utc)

        prs, open_issues, closed_issues = build_dashboard_queries("octocat", now)

        assert list(prs) == ["reviewRequested", "prsMentioned", "prsAssigned"]
        assert list(open_issues) == ["issuesMentioned", "issuesAssigned"]
        assert list(closed_issues) == ["issuesClosedAssigned"]
        assert prs["prsMentioned"] == "is:pr is:open mentions:octocat"
        assert open_issues["issuesAssigned"] == "is:issue is:open assignee:octocat"
        assert (
            closed_issues["issuesClosedAssigned"]
            == "is:issue is:closed assignee:octocat closed:>=2024-02-14"
        )

    def test_custom_window(self) -> None:
        """Test the closed window length can be changed."""
        now = datetime(2024, 3, 15, tzinfo=timezone.utc)

        _, _, closed_issues = build_dashboard_queries(
            "octocat", now, closed_window_days=7
        )

        assert closed_issues["issuesClosedAssigned"].endswith("closed:>=2024-03-08")
