"""Test configuration and fixtures."""

from collections.abc import Callable
from datetime import date, datetime, timezone
from typing import Any

import pytest

from status_dashboard.github_client.models import (
    DashboardIssue,
    Iteration,
    ParentRef,
    SearchItem,
)

NOW = datetime(2024, 3, 15, 12, 0, tzinfo=timezone.utc)


def _item_fields(node_id: str, **overrides: Any) -> dict[str, Any]:
    number = int("".join(c for c in node_id if c.isdigit()) or 1)
    fields: dict[str, Any] = {
        "id": number,
        "node_id": node_id,
        "number": number,
        "title": f"Item {node_id}",
        "url": f"https://github.com/acme/widgets/issues/{number}",
        "state": "open",
        "author": "octocat",
        "repository": "acme/widgets",
        "updated_at": datetime(2024, 1, 1, tzinfo=timezone.utc),
    }
    fields.update(overrides)
    return fields


@pytest.fixture
def now() -> datetime:
    """Fixed reference time for iteration classification."""
    return NOW


@pytest.fixture
def make_item() -> Callable[..., SearchItem]:
    """Factory for search results."""

    def _make(node_id: str, **overrides: Any) -> SearchItem:
        return SearchItem(**_item_fields(node_id, **overrides))

    return _make


@pytest.fixture
def make_issue() -> Callable[..., DashboardIssue]:
    """Factory for enriched issues."""

    def _make(node_id: str, **overrides: Any) -> DashboardIssue:
        return DashboardIssue(**_item_fields(node_id, **overrides))

    return _make


@pytest.fixture
def make_parent() -> Callable[..., ParentRef]:
    """Factory for parent issue references."""

    def _make(node_id: str, number: int = 100) -> ParentRef:
        return ParentRef(
            node_id=node_id,
            number=number,
            title=f"Parent {node_id}",
            url=f"https://github.com/acme/widgets/issues/{number}",
        )

    return _make


@pytest.fixture
def make_iteration() -> Callable[..., Iteration]:
    """Factory for iterations."""

    def _make(start: date, title: str = "Sprint", duration: int = 14) -> Iteration:
        return Iteration(title=title, start_date=start, duration=duration)

    return _make
