"""GitHub search query building for the dashboard categories."""

from datetime import datetime

from ..utils.date_parser import format_datetime_for_github, relative_date_to_absolute

CLOSED_WINDOW_DAYS = 30


def build_search_query(
    kind: str,
    state: str,
    review_requested: str | None = None,
    mentions: str | None = None,
    assignee: str | None = None,
    closed_after: str | None = None,
) -> str:
    """Build a GitHub search query string.

    Args:
        kind: Item kind, 'pr' or 'issue'
        state: Item state, 'open' or 'closed'
        review_requested: Login whose review is requested
        mentions: Login mentioned in the item
        assignee: Login assigned to the item
        closed_after: ISO date; only items closed on or after this date

    Returns:
        GitHub search query string

    Example:
        >>> build_search_query("issue", "closed", assignee="octocat",
        ...                    closed_after="2024-01-01")
        "is:issue is:closed assignee:octocat closed:>=2024-01-01"
    """
    query_parts = [f"is:{kind}", f"is:{state}"]

    if review_requested:
        query_parts.append(f"review-requested:{review_requested}")
    if mentions:
        query_parts.append(f"mentions:{mentions}")
    if assignee:
        query_parts.append(f"assignee:{assignee}")

    if closed_after:
        query_parts.append(f"closed:>={closed_after}")

    return " ".join(query_parts)


def build_dashboard_queries(
    username: str, now: datetime, closed_window_days: int = CLOSED_WINDOW_DAYS
) -> tuple[dict[str, str], dict[str, str], dict[str, str]]:
    """Build the named search queries for one user's dashboard.

    Returns:
        Tuple of (PR queries, open issue queries, closed issue queries), each
        an ordered mapping of category name to search query. The mapping
        order is the order in which categories are attributed to an item.
    """
    closed_after = format_datetime_for_github(
        relative_date_to_absolute(now, closed_window_days)
    )

    pr_queries = {
        "reviewRequested": build_search_query("pr", "open", review_requested=username),
        "prsMentioned": build_search_query("pr", "open", mentions=username),
        "prsAssigned": build_search_query("pr", "open", assignee=username),
    }
    open_issue_queries = {
        "issuesMentioned": build_search_query("issue", "open", mentions=username),
        "issuesAssigned": build_search_query("issue", "open", assignee=username),
    }
    closed_issue_queries = {
        "issuesClosedAssigned": build_search_query(
            "issue", "closed", assignee=username, closed_after=closed_after
        ),
    }
    return pr_queries, open_issue_queries, closed_issue_queries
