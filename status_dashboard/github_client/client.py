"""GitHub API client using PyGitHub for search and GraphQL for metadata."""

import logging
import os
from typing import Any
from urllib.parse import urlparse

import httpx
from github import Auth, Github
from github.GithubException import GithubException
from github.Issue import Issue
from pydantic import ValidationError
from requests.exceptions import RequestException

from ..errors import PartialRemoteError, RemoteApiError
from .models import (
    DEFAULT_ITERATION_DAYS,
    IssueMetadata,
    Iteration,
    ParentRef,
    SearchItem,
)

logger = logging.getLogger(__name__)

GITHUB_GRAPHQL_URL = "https://api.github.com/graphql"
SEARCH_PAGE_SIZE = 100
# GraphQL rejects `nodes(ids:)` lookups with more than 100 ids
METADATA_BATCH_SIZE = 100
DEFAULT_TIMEOUT = 30.0

ISSUE_METADATA_QUERY = """
query IssueMetadata($ids: [ID!]!) {
  nodes(ids: $ids) {
    ... on Issue {
      id
      parent {
        id
        number
        title
        url
      }
      projectItems(first: 10) {
        nodes {
          fieldValues(first: 20) {
            nodes {
              ... on ProjectV2ItemFieldIterationValue {
                title
                startDate
                duration
              }
            }
          }
        }
      }
    }
  }
}
"""


def _repository_from_url(html_url: str) -> str | None:
    """Extract 'owner/name' from an issue or PR browser URL."""
    path_parts = urlparse(html_url).path.strip("/").split("/")
    if len(path_parts) >= 2:
        return f"{path_parts[0]}/{path_parts[1]}"
    return None


def extract_issue_metadata(node: dict[str, Any]) -> IssueMetadata:
    """Extract parent and iteration from a GraphQL Issue node.

    When an issue sits on several projects with an iteration field, the last
    iteration value in response order is used.
    """
    parent = None
    parent_node = node.get("parent")
    if parent_node:
        parent = ParentRef(
            node_id=parent_node["id"],
            number=parent_node["number"],
            title=parent_node["title"],
            url=parent_node["url"],
        )

    iteration = None
    project_items = (node.get("projectItems") or {}).get("nodes") or []
    for item in project_items:
        field_values = ((item or {}).get("fieldValues") or {}).get("nodes") or []
        for value in field_values:
            if value and value.get("startDate"):
                iteration = Iteration(
                    title=value.get("title") or "",
                    start_date=value["startDate"],
                    duration=(
                        DEFAULT_ITERATION_DAYS
                        if value.get("duration") is None
                        else value["duration"]
                    ),
                )

    return IssueMetadata(parent=parent, iteration=iteration)


class GitHubClient:
    """GitHub API client for the dashboard's read-only queries."""

    def __init__(self, token: str | None = None, timeout: float = DEFAULT_TIMEOUT):
        """Initialize GitHub client with authentication.

        Args:
            token: GitHub personal access token. If None, reads from
                GITHUB_TOKEN env var.
            timeout: Seconds to wait for each outbound request.
        """
        self.token = token or os.getenv("GITHUB_TOKEN")
        if not self.token:
            raise ValueError(
                "GitHub token is required. Set GITHUB_TOKEN environment variable."
            )

        self.timeout = timeout
        self.headers = {
            "Authorization": f"Bearer {self.token}",
            "User-Agent": "status-dashboard/0.1.0",
        }

    def _github(self) -> Github:
        """Create a PyGitHub instance for a single search.

        PyGitHub keeps per-request state on its connection, so searches running
        in parallel threads must not share an instance.
        """
        return Github(
            auth=Auth.Token(self.token),
            per_page=SEARCH_PAGE_SIZE,
            timeout=int(self.timeout),
        )

    def _convert_item(self, github_issue: Issue, is_pull_request: bool) -> SearchItem:
        """Convert a PyGitHub search result to our model.

        Only attributes present in the search payload are read, so PyGitHub
        never issues a follow-up request to complete the object.
        """
        user = github_issue.user
        return SearchItem(
            id=github_issue.id,
            node_id=github_issue.node_id,
            number=github_issue.number,
            title=github_issue.title,
            url=github_issue.html_url,
            state=github_issue.state,
            author=user.login if user else None,
            repository=_repository_from_url(github_issue.html_url),
            labels=[label.name for label in github_issue.labels],
            is_pull_request=is_pull_request,
            updated_at=github_issue.updated_at,
            closed_at=github_issue.closed_at,
        )

    def search(self, query: str, is_pull_request: bool = False) -> list[SearchItem]:
        """Run one search query and return its first page of results.

        Args:
            query: GitHub search query string
            is_pull_request: Whether the query only matches pull requests

        Returns:
            Up to 100 SearchItem objects with no categories attached

        Raises:
            RemoteApiError: If the search call fails or times out
        """
        logger.debug("Searching with query: %s", query)
        try:
            page = self._github().search_issues(query).get_page(0)
        except GithubException as e:
            raise RemoteApiError(f"GitHub API error: {e.status}", status=e.status) from e
        except RequestException as e:
            raise RemoteApiError(f"GitHub API request failed: {e}") from e

        return [self._convert_item(issue, is_pull_request) for issue in page]

    async def _graphql(self, query: str, variables: dict[str, Any]) -> dict[str, Any]:
        """POST a GraphQL query and return its ``data`` payload.

        Raises:
            RemoteApiError: On a non-success status, a transport failure, or
                an error payload without data
            PartialRemoteError: On an error payload alongside data
        """
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    GITHUB_GRAPHQL_URL,
                    headers=self.headers,
                    json={"query": query, "variables": variables},
                )
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            raise RemoteApiError(f"GitHub GraphQL error: {status}", status=status) from e
        except httpx.HTTPError as e:
            raise RemoteApiError(f"GitHub GraphQL request failed: {e}") from e

        try:
            payload = response.json()
        except ValueError as e:
            raise RemoteApiError(
                f"GitHub GraphQL returned invalid JSON: {e}",
                status=response.status_code,
            ) from e
        if not isinstance(payload, dict):
            raise RemoteApiError(
                "GitHub GraphQL returned an unexpected payload",
                status=response.status_code,
            )

        data = payload.get("data")
        errors = payload.get("errors")
        if errors:
            if not data:
                raise RemoteApiError(
                    f"GitHub GraphQL error: {errors[0].get('message', errors[0])}"
                )
            raise PartialRemoteError(errors, data)
        return data or {}

    async def fetch_issue_metadata(
        self, node_ids: list[str]
    ) -> dict[str, IssueMetadata]:
        """Batch-fetch parent and iteration metadata for issues.

        Args:
            node_ids: Stable GraphQL node identifiers of the issues

        Returns:
            Mapping of node id to metadata for every node the API resolved

        Raises:
            RemoteApiError: If a metadata request fails
        """
        metadata: dict[str, IssueMetadata] = {}
        for start in range(0, len(node_ids), METADATA_BATCH_SIZE):
            batch = node_ids[start : start + METADATA_BATCH_SIZE]
            try:
                data = await self._graphql(ISSUE_METADATA_QUERY, {"ids": batch})
            except PartialRemoteError as e:
                logger.warning("Proceeding with partial issue metadata: %s", e)
                data = e.data

            nodes = data.get("nodes") if isinstance(data, dict) else None
            for node in nodes or []:
                if not isinstance(node, dict) or not node.get("id"):
                    continue
                try:
                    metadata[node["id"]] = extract_issue_metadata(node)
                except (ValidationError, KeyError, TypeError) as e:
                    logger.warning(
                        "Skipping malformed metadata for issue %s: %s", node["id"], e
                    )

        return metadata
