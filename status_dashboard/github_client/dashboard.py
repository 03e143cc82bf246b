"""Assembly of the GitHub dashboard view."""

import asyncio
import logging
from datetime import datetime, timedelta

from ..errors import RemoteApiError
from ..utils.date_parser import ensure_utc
from .client import GitHubClient
from .grouping import (
    build_hierarchy,
    bucket_groups,
    classify_iteration,
    deduplicate,
    sort_by_activity,
)
from .models import (
    DashboardIssue,
    GitHubDashboard,
    IssueGroup,
    IterationBucket,
    SearchItem,
)
from .search import CLOSED_WINDOW_DAYS, build_dashboard_queries

logger = logging.getLogger(__name__)


async def _run_searches(
    client: GitHubClient, queries: dict[str, str], is_pull_request: bool
) -> dict[str, list[SearchItem]]:
    """Run named queries concurrently; the first failure aborts them all."""
    results = await asyncio.gather(
        *(
            asyncio.to_thread(client.search, query, is_pull_request)
            for query in queries.values()
        )
    )
    return dict(zip(queries.keys(), results))


async def enrich_issues(
    client: GitHubClient, issues: list[SearchItem]
) -> list[DashboardIssue]:
    """Attach parent and iteration metadata to issues.

    Enrichment is best-effort: if the metadata request fails, the issues are
    returned with no parent and no iteration.
    """
    enriched = [DashboardIssue(**issue.model_dump()) for issue in issues]
    if not enriched:
        return enriched

    try:
        metadata = await client.fetch_issue_metadata(
            [issue.node_id for issue in enriched]
        )
    except RemoteApiError as e:
        logger.warning(
            "Could not fetch metadata for %d issues, continuing without it: %s",
            len(enriched),
            e,
        )
        return enriched

    for issue in enriched:
        issue_metadata = metadata.get(issue.node_id)
        if issue_metadata is not None:
            issue.parent = issue_metadata.parent
            issue.iteration = issue_metadata.iteration
    return enriched


def _closed_in_current_iteration(
    issues: list[DashboardIssue], now: datetime
) -> list[IssueGroup]:
    """Closed issues from the trailing window whose own iteration is current."""
    window_start = ensure_utc(now) - timedelta(days=CLOSED_WINDOW_DAYS)
    groups = []
    for issue in issues:
        if issue.closed_at is not None and ensure_utc(issue.closed_at) < window_start:
            continue
        if classify_iteration(issue.iteration, now) is not IterationBucket.CURRENT:
            continue
        group = IssueGroup.from_issue(issue)
        group.display_iteration = issue.iteration.title if issue.iteration else None
        groups.append(group)
    return sort_by_activity(groups)


async def fetch_github_data(
    client: GitHubClient, username: str, now: datetime
) -> GitHubDashboard:
    """Build the GitHub dashboard for a user.

    Args:
        client: Authenticated GitHubClient instance
        username: Login whose PRs and issues are shown
        now: Reference time for the closed-issue window and iteration buckets

    Returns:
        The assembled dashboard view

    Raises:
        RemoteApiError: If any search query fails
    """
    pr_queries, open_queries, closed_queries = build_dashboard_queries(username, now)

    pr_results, open_results, closed_results = await asyncio.gather(
        _run_searches(client, pr_queries, is_pull_request=True),
        _run_searches(client, open_queries, is_pull_request=False),
        _run_searches(client, closed_queries, is_pull_request=False),
    )

    prs = sorted(
        deduplicate(pr_results),
        key=lambda pr: ensure_utc(pr.updated_at),
        reverse=True,
    )
    open_issues = deduplicate(open_results)
    closed_issues = deduplicate(closed_results)
    logger.info(
        "Fetched %d PRs, %d open issues and %d closed issues for %s",
        len(prs),
        len(open_issues),
        len(closed_issues),
        username,
    )

    # One metadata request covers both groups; a closed issue that also
    # matched an open query shares its metadata
    enriched = await enrich_issues(client, _unique_issues(open_issues, closed_issues))
    by_node_id = {issue.node_id: issue for issue in enriched}
    enriched_open = [_with_categories(by_node_id[i.node_id], i) for i in open_issues]
    enriched_closed = [
        _with_categories(by_node_id[i.node_id], i) for i in closed_issues
    ]

    buckets = bucket_groups(build_hierarchy(enriched_open), now)
    return GitHubDashboard(
        prs=prs,
        current_iteration=buckets[IterationBucket.CURRENT],
        current_iteration_closed=_closed_in_current_iteration(enriched_closed, now),
        future_iterations=buckets[IterationBucket.FUTURE],
        backlog=buckets[IterationBucket.BACKLOG],
    )


def _unique_issues(*groups: list[SearchItem]) -> list[SearchItem]:
    """Concatenate issue lists keeping the first record per node id."""
    seen: dict[str, SearchItem] = {}
    for group in groups:
        for issue in group:
            seen.setdefault(issue.node_id, issue)
    return list(seen.values())


def _with_categories(enriched: DashboardIssue, issue: SearchItem) -> DashboardIssue:
    """Copy enrichment onto a record carrying this group's own fields."""
    return DashboardIssue(
        **issue.model_dump(), parent=enriched.parent, iteration=enriched.iteration
    )
