"""Deduplication, hierarchy reconstruction and iteration bucketing.

These functions are pure: they take already-fetched search results and an
explicit ``now`` and never touch the network or the wall clock.
"""

from collections.abc import Iterable, Mapping, Sequence
from datetime import datetime, timezone
from typing import TypeVar

from ..utils.date_parser import ensure_utc
from .models import (
    DashboardIssue,
    IssueGroup,
    Iteration,
    IterationBucket,
    ParentRef,
    SearchItem,
)

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

ItemT = TypeVar("ItemT", bound=SearchItem)


def merge_duplicates(items: Iterable[ItemT]) -> list[ItemT]:
    """Merge items sharing a node id into one record.

    The first occurrence is kept as the base record; categories of later
    occurrences are appended unless already present. Running this on its own
    output returns an equal list.
    """
    merged: dict[str, ItemT] = {}
    for item in items:
        existing = merged.get(item.node_id)
        if existing is None:
            merged[item.node_id] = item.model_copy(
                update={"categories": list(dict.fromkeys(item.categories))}
            )
            continue
        for category in item.categories:
            if category not in existing.categories:
                existing.categories.append(category)
    return list(merged.values())


def deduplicate(named_results: Mapping[str, Sequence[ItemT]]) -> list[ItemT]:
    """Tag each result with its category name and merge duplicates.

    Args:
        named_results: Ordered mapping of category name to that query's items

    Returns:
        One record per distinct node id, categories in discovery order
    """
    tagged = (
        item.model_copy(update={"categories": [*item.categories, category]})
        for category, items in named_results.items()
        for item in items
    )
    return merge_duplicates(tagged)


def build_hierarchy(issues: Sequence[DashboardIssue]) -> list[IssueGroup]:
    """Rebuild parent/sub-issue groups from a flat list of issues.

    Parentless issues become top-level groups and collect the issues that
    name them as parent. Parents that were not among the top-level issues
    are emitted after them as external-parent placeholders. Every input
    issue appears exactly once, either top-level or as a sub-issue.
    """
    top_level: list[DashboardIssue] = []
    parents: dict[str, ParentRef] = {}
    children: dict[str, list[DashboardIssue]] = {}

    for issue in issues:
        parent = issue.parent
        # An issue listed as its own parent is malformed data; keep it top-level
        if parent is None or parent.node_id == issue.node_id:
            top_level.append(issue)
            continue
        parents.setdefault(parent.node_id, parent)
        children.setdefault(parent.node_id, []).append(issue)

    groups = [
        IssueGroup.from_issue(issue, children.pop(issue.node_id, []))
        for issue in top_level
    ]
    groups.extend(
        IssueGroup.external(parents[parent_id], sub_issues)
        for parent_id, sub_issues in children.items()
    )
    return groups


def resolve_iteration(group: IssueGroup) -> Iteration | None:
    """Return the group's iteration, else that of its first sub-issue with one."""
    if group.iteration is not None:
        return group.iteration
    for sub_issue in group.sub_issues:
        if sub_issue.iteration is not None:
            return sub_issue.iteration
    return None


def classify_iteration(iteration: Iteration | None, now: datetime) -> IterationBucket:
    """Place an iteration relative to ``now``.

    Current when ``start <= now <= start + duration``, future when it starts
    after ``now``, backlog otherwise (including no iteration at all).
    """
    if iteration is None:
        return IterationBucket.BACKLOG

    now = ensure_utc(now)
    if iteration.start <= now <= iteration.end:
        return IterationBucket.CURRENT
    if iteration.start > now:
        return IterationBucket.FUTURE
    return IterationBucket.BACKLOG


def activity_timestamp(group: IssueGroup) -> datetime:
    """Most recent update across the group and its sub-issues."""
    timestamps = [ensure_utc(group.updated_at) if group.updated_at else EPOCH]
    timestamps.extend(ensure_utc(sub.updated_at) for sub in group.sub_issues)
    return max(timestamps)


def sort_by_activity(groups: Iterable[IssueGroup]) -> list[IssueGroup]:
    """Sort groups most recently active first, keeping ties in input order."""
    return sorted(groups, key=activity_timestamp, reverse=True)


def bucket_groups(
    groups: Iterable[IssueGroup], now: datetime
) -> dict[IterationBucket, list[IssueGroup]]:
    """Split groups into iteration buckets, each sorted by activity.

    Every group lands in exactly one bucket and gets ``display_iteration``
    set to the title of the iteration it was classified by.
    """
    buckets: dict[IterationBucket, list[IssueGroup]] = {
        bucket: [] for bucket in IterationBucket
    }
    for group in groups:
        iteration = resolve_iteration(group)
        group.display_iteration = iteration.title if iteration else None
        buckets[classify_iteration(iteration, now)].append(group)

    return {bucket: sort_by_activity(members) for bucket, members in buckets.items()}
