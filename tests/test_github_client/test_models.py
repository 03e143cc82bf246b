"""Tests for GitHub dashboard models."""

from datetime import date, datetime, timezone

from status_dashboard.github_client.models import (
    GitHubDashboard,
    IssueGroup,
    Iteration,
)


class TestIteration:
    """Test Iteration model."""

    def test_window(self) -> None:
        """Test start and end of the iteration window."""
        iteration = Iteration(title="Sprint 1", start_date="2024-03-01", duration=7)

        assert iteration.start_date == date(2024, 3, 1)
        assert iteration.start == datetime(2024, 3, 1, tzinfo=timezone.utc)
        assert iteration.end == datetime(2024, 3, 8, tzinfo=timezone.utc)

    def test_camel_case_input(self) -> None:
        """Test the GraphQL field names are accepted."""
        iteration = Iteration.model_validate(
            {"title": "Sprint 1", "startDate": "2024-03-01", "duration": 7}
        )
        assert iteration.start_date == date(2024, 3, 1)


class TestIssueGroup:
    """Test IssueGroup model."""

    def test_from_issue(self, make_issue) -> None:
        """Test a fetched issue heads its group with all its fields."""
        issue = make_issue("I_1", labels=["bug"], categories=["issuesAssigned"])
        child = make_issue("I_2")

        group = IssueGroup.from_issue(issue, [child])

        assert group.id == issue.id
        assert group.labels == ["bug"]
        assert group.categories == ["issuesAssigned"]
        assert group.updated_at == issue.updated_at
        assert group.sub_issues == [child]
        assert not group.is_external_parent

    def test_external(self, make_issue, make_parent) -> None:
        """Test placeholders only carry the parent's identity."""
        group = IssueGroup.external(make_parent("I_9", number=9), [make_issue("I_1")])

        assert group.is_external_parent
        assert group.number == 9
        assert group.id is None
        assert group.state is None
        assert group.updated_at is None
        assert group.categories == []

    def test_json_uses_camel_case(self, make_issue, make_parent) -> None:
        """Test the serialized group uses the front-end field names."""
        group = IssueGroup.external(make_parent("I_9"), [make_issue("I_1")])
        group.display_iteration = "Sprint 1"

        data = group.model_dump(mode="json", by_alias=True)

        assert data["nodeId"] == "I_9"
        assert data["isExternalParent"] is True
        assert data["displayIteration"] == "Sprint 1"
        assert data["subIssues"][0]["nodeId"] == "I_1"
        assert "updatedAt" in data["subIssues"][0]


class TestGitHubDashboard:
    """Test GitHubDashboard model."""

    def test_empty_view_keys(self) -> None:
        """Test the serialized view exposes every list."""
        data = GitHubDashboard().model_dump(mode="json", by_alias=True)

        assert data == {
            "prs": [],
            "currentIteration": [],
            "currentIterationClosed": [],
            "futureIterations": [],
            "backlog": [],
        }
