"""GitHub client package for API interaction."""

from .client import GitHubClient
from .dashboard import fetch_github_data
from .models import (
    DashboardIssue,
    GitHubDashboard,
    IssueGroup,
    IssueMetadata,
    Iteration,
    IterationBucket,
    ParentRef,
    SearchItem,
)
from .search import build_dashboard_queries, build_search_query

__all__ = [
    "GitHubClient",
    "fetch_github_data",
    "SearchItem",
    "ParentRef",
    "Iteration",
    "IssueMetadata",
    "DashboardIssue",
    "IssueGroup",
    "IterationBucket",
    "GitHubDashboard",
    "build_dashboard_queries",
    "build_search_query",
]
