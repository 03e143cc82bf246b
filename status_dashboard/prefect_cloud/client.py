"""Prefect Cloud (Prefect 3) API client for deployment health."""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any

import httpx

from ..errors import RemoteApiError
from ..utils.date_parser import parse_timestamp
from .models import (
    DeploymentStatus,
    FlowRunSummary,
    LatestFlowRun,
    PrefectDashboard,
    TagSummary,
    state_color,
)

logger = logging.getLogger(__name__)

PREFECT_API_URL = "https://api.prefect.cloud/api"
PREFECT_UI_URL = "https://app.prefect.cloud"
DEFAULT_TIMEOUT = 30.0
RECENT_RUNS_LIMIT = 20
RUN_HISTORY_SIZE = 10

# States of runs that have not executed yet
PENDING_STATES = {"SCHEDULED", "PENDING", "LATE"}
FAILED_STATES = {"FAILED", "CRASHED"}

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _state_type(run: dict[str, Any]) -> str | None:
    return run.get("state_type") or (run.get("state") or {}).get("type")


def has_executed(run: dict[str, Any]) -> bool:
    """Check if a run has actually executed rather than just being scheduled."""
    return (_state_type(run) or "").upper() not in PENDING_STATES


class PrefectCloudClient:
    """Prefect Cloud workspace API client."""

    def __init__(
        self,
        api_key: str,
        account_id: str,
        workspace_id: str,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        """Initialize Prefect Cloud client.

        Args:
            api_key: Prefect Cloud API key
            account_id: Prefect Cloud account identifier
            workspace_id: Prefect Cloud workspace identifier
            timeout: Seconds to wait for each outbound request
        """
        self.account_id = account_id
        self.workspace_id = workspace_id
        self.api_base = (
            f"{PREFECT_API_URL}/accounts/{account_id}/workspaces/{workspace_id}"
        )
        self.timeout = timeout
        self.headers = {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }

    def deployment_url(self, deployment_id: str) -> str:
        """Link to a deployment in the Prefect Cloud UI."""
        return (
            f"{PREFECT_UI_URL}/account/{self.account_id}"
            f"/workspace/{self.workspace_id}/deployments/deployment/{deployment_id}"
        )

    async def _request(
        self, method: str, path: str, body: dict[str, Any] | None = None
    ) -> Any:
        """Send a request to the workspace API and return the decoded body.

        Raises:
            RemoteApiError: On a non-success status or a transport failure
        """
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.request(
                    method, f"{self.api_base}{path}", headers=self.headers, json=body
                )
                response.raise_for_status()
                return response.json()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            raise RemoteApiError(
                f"Prefect API error on {path}: {status} {e.response.text}",
                status=status,
            ) from e
        except httpx.HTTPError as e:
            raise RemoteApiError(f"Prefect request to {path} failed: {e}") from e

    async def fetch_deployments(self, tags: list[str]) -> list[dict[str, Any]]:
        """Fetch deployments carrying any of the given tags."""
        return await self._request(
            "POST",
            "/deployments/filter",
            {
                "deployments": {"tags": {"any_": tags}},
                "sort": "NAME_ASC",
                "limit": 100,
            },
        )

    async def fetch_recent_runs(
        self, deployment_id: str, limit: int = RECENT_RUNS_LIMIT
    ) -> list[dict[str, Any]]:
        """Fetch the most recently started flow runs of a deployment."""
        return await self._request(
            "POST",
            "/flow_runs/filter",
            {
                "flow_runs": {"deployment_id": {"any_": [deployment_id]}},
                "sort": "START_TIME_DESC",
                "limit": limit,
            },
        )

    async def fetch_flow(self, flow_id: str) -> dict[str, Any] | None:
        """Fetch a flow by id, or None if it cannot be retrieved."""
        try:
            return await self._request("GET", f"/flows/{flow_id}")
        except RemoteApiError as e:
            logger.debug("Could not fetch flow %s: %s", flow_id, e)
            return None


async def _deployment_status(
    client: PrefectCloudClient, deployment: dict[str, Any]
) -> DeploymentStatus:
    """Summarize a deployment's executed runs."""
    runs = await client.fetch_recent_runs(deployment["id"])
    executed = sorted(
        (run for run in runs if has_executed(run)),
        key=lambda run: parse_timestamp(run.get("start_time")) or _EPOCH,
        reverse=True,
    )

    latest_run = None
    if executed:
        latest = executed[0]
        latest_state = _state_type(latest)
        latest_run = LatestFlowRun(
            id=latest["id"],
            state=latest_state,
            state_color=state_color(latest_state),
            state_name=latest.get("state_name") or latest_state,
            start_time=latest.get("start_time"),
            end_time=latest.get("end_time"),
            expected_start_time=latest.get("expected_start_time"),
        )

    flow_name = deployment["name"]
    if deployment.get("flow_id"):
        flow = await client.fetch_flow(deployment["flow_id"])
        if flow:
            flow_name = flow["name"]

    run_history = [
        FlowRunSummary(
            id=run["id"],
            state=_state_type(run),
            state_color=state_color(_state_type(run)),
            start_time=run.get("start_time"),
            end_time=run.get("end_time"),
        )
        for run in reversed(executed[:RUN_HISTORY_SIZE])
    ]

    return DeploymentStatus(
        id=deployment["id"],
        name=deployment["name"],
        flow_name=flow_name,
        tags=deployment.get("tags") or [],
        latest_run=latest_run,
        run_history=run_history,
        url=client.deployment_url(deployment["id"]),
    )


async def _safe_deployment_status(
    client: PrefectCloudClient, deployment: dict[str, Any]
) -> DeploymentStatus | None:
    try:
        return await _deployment_status(client, deployment)
    except RemoteApiError as e:
        logger.error("Error fetching runs for deployment %s: %s", deployment["id"], e)
        return None


async def fetch_prefect_data(
    client: PrefectCloudClient, tags: list[str]
) -> PrefectDashboard:
    """Build the Prefect view for the monitored tags.

    Deployments whose runs cannot be fetched are logged and skipped.

    Returns:
        Deployments whose latest executed run failed or crashed, plus a
        per-tag count of deployments and of those that last completed

    Raises:
        RemoteApiError: If the deployments cannot be listed
    """
    deployments = await client.fetch_deployments(tags)
    if not deployments:
        return PrefectDashboard()

    statuses = await asyncio.gather(
        *(_safe_deployment_status(client, deployment) for deployment in deployments)
    )
    valid = [status for status in statuses if status and status.latest_run]

    tag_summary = {tag: TagSummary() for tag in tags}
    for status in valid:
        succeeded = (status.latest_run.state or "").upper() == "COMPLETED"
        for tag in tags:
            if tag in status.tags:
                tag_summary[tag].total += 1
                if succeeded:
                    tag_summary[tag].successful += 1

    failed = [
        status
        for status in valid
        if (status.latest_run.state or "").upper() in FAILED_STATES
    ]
    logger.info(
        "%d of %d monitored deployments are failing", len(failed), len(valid)
    )
    return PrefectDashboard(deployments=failed, tag_summary=tag_summary)
