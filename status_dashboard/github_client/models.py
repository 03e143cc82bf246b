"""Pydantic models for the GitHub dashboard view.

The search models map onto GitHub's REST search results and the metadata
models onto the GraphQL ``Issue`` node (parent issue and ProjectV2 iteration
field values). Only the fields listed here are carried into the dashboard.
API Reference: https://docs.github.com/en/rest/search/search#search-issues-and-pull-requests
"""

from datetime import date, datetime, time, timedelta, timezone
from enum import Enum

from pydantic import Field

from ..models import DashboardModel

DEFAULT_ITERATION_DAYS = 14


class SearchItem(DashboardModel):
    """A pull request or issue returned by the search API.

    Maps to a GitHub REST API search result item.
    """

    id: int = Field(..., description="Numeric identifier of the issue or PR")
    node_id: str = Field(..., description="Stable GraphQL node identifier")
    number: int = Field(..., description="Issue/PR number within its repository")
    title: str = Field(..., description="Title of the issue or PR")
    url: str = Field(..., description="Browser URL (html_url)")
    state: str = Field(..., description="Current state: 'open' or 'closed'")
    author: str | None = Field(None, description="Login of the author")
    repository: str | None = Field(None, description="Repository as 'owner/name'")
    labels: list[str] = Field(default_factory=list, description="Label names")
    is_pull_request: bool = Field(False, description="Whether the item is a PR")
    updated_at: datetime = Field(..., description="Timestamp of last update")
    closed_at: datetime | None = Field(None, description="Timestamp of closing")
    categories: list[str] = Field(
        default_factory=list,
        description="Names of the queries that matched, in discovery order",
    )


class ParentRef(DashboardModel):
    """Reference to the parent issue of a sub-issue."""

    node_id: str = Field(..., description="Stable GraphQL node identifier")
    number: int = Field(..., description="Issue number within its repository")
    title: str = Field(..., description="Title of the parent issue")
    url: str = Field(..., description="Browser URL of the parent issue")


class Iteration(DashboardModel):
    """A ProjectV2 iteration an issue is assigned to."""

    title: str = Field(..., description="Iteration title, e.g. 'Sprint 12'")
    start_date: date = Field(..., description="First day of the iteration")
    duration: int = Field(
        DEFAULT_ITERATION_DAYS, description="Length of the iteration in days"
    )

    @property
    def start(self) -> datetime:
        """Start of the iteration as an aware UTC datetime."""
        return datetime.combine(self.start_date, time.min, tzinfo=timezone.utc)

    @property
    def end(self) -> datetime:
        """End of the iteration window (inclusive)."""
        return self.start + timedelta(days=self.duration)


class IssueMetadata(DashboardModel):
    """Per-issue enrichment resolved through the GraphQL API."""

    parent: ParentRef | None = None
    iteration: Iteration | None = None


class DashboardIssue(SearchItem):
    """A search item enriched with its parent and iteration."""

    parent: ParentRef | None = Field(None, description="Parent issue, if any")
    iteration: Iteration | None = Field(None, description="Assigned iteration")


class IssueGroup(DashboardModel):
    """A top-level dashboard entry with its sub-issues.

    Either a fetched issue (``is_external_parent`` false, every issue field
    populated) or a placeholder for a parent that was not part of the fetched
    issues, which only carries the parent's identity fields.
    """

    id: int | None = None
    node_id: str
    number: int | None = None
    title: str
    url: str
    state: str | None = None
    author: str | None = None
    repository: str | None = None
    labels: list[str] = Field(default_factory=list)
    updated_at: datetime | None = None
    closed_at: datetime | None = None
    categories: list[str] = Field(default_factory=list)
    parent: ParentRef | None = None
    iteration: Iteration | None = None
    sub_issues: list[DashboardIssue] = Field(default_factory=list)
    is_external_parent: bool = False
    display_iteration: str | None = None

    @classmethod
    def from_issue(
        cls, issue: DashboardIssue, sub_issues: list[DashboardIssue] | None = None
    ) -> "IssueGroup":
        """Build a group headed by a fetched issue."""
        return cls(
            id=issue.id,
            node_id=issue.node_id,
            number=issue.number,
            title=issue.title,
            url=issue.url,
            state=issue.state,
            author=issue.author,
            repository=issue.repository,
            labels=list(issue.labels),
            updated_at=issue.updated_at,
            closed_at=issue.closed_at,
            categories=list(issue.categories),
            parent=issue.parent,
            iteration=issue.iteration,
            sub_issues=list(sub_issues or []),
        )

    @classmethod
    def external(
        cls, parent: ParentRef, sub_issues: list[DashboardIssue]
    ) -> "IssueGroup":
        """Build a placeholder group for a parent that was not fetched."""
        return cls(
            node_id=parent.node_id,
            number=parent.number,
            title=parent.title,
            url=parent.url,
            sub_issues=list(sub_issues),
            is_external_parent=True,
        )


class IterationBucket(str, Enum):
    """Where a group sits relative to the current iteration."""

    CURRENT = "current"
    FUTURE = "future"
    BACKLOG = "backlog"


class GitHubDashboard(DashboardModel):
    """The assembled GitHub view served to the front-end."""

    prs: list[SearchItem] = Field(default_factory=list)
    current_iteration: list[IssueGroup] = Field(default_factory=list)
    current_iteration_closed: list[IssueGroup] = Field(default_factory=list)
    future_iterations: list[IssueGroup] = Field(default_factory=list)
    backlog: list[IssueGroup] = Field(default_factory=list)
