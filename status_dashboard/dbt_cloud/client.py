"""dbt Cloud API client for latest job run status."""

import asyncio
import logging
from typing import Any

import httpx

from ..errors import RemoteApiError
from .models import DbtRun, FreshnessStatus, run_status

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://cloud.getdbt.com"
DEFAULT_TIMEOUT = 30.0


def _find_freshness_step(run_steps: list[dict[str, Any]]) -> dict[str, Any] | None:
    """Return the source freshness step of a run, if it has one."""
    for step in run_steps:
        if "freshness" in (step.get("name") or "").lower():
            return step
    return None


def _format_duration(run: dict[str, Any]) -> str | None:
    """Prefer dbt's humanized duration, else whole minutes from seconds."""
    if run.get("duration_humanized"):
        return str(run["duration_humanized"])
    duration = run.get("duration")
    if isinstance(duration, (int, float)):
        return f"{round(duration / 60)}m"
    return duration


class DbtCloudClient:
    """dbt Cloud API v2 client."""

    def __init__(
        self,
        token: str,
        account_id: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        """Initialize dbt Cloud client.

        Args:
            token: dbt Cloud service token
            account_id: dbt Cloud account identifier
            base_url: Base URL of the dbt Cloud deployment
            timeout: Seconds to wait for each outbound request
        """
        self.account_id = account_id
        self.api_url = f"{base_url.rstrip('/')}/api/v2"
        self.timeout = timeout
        self.headers = {
            "Authorization": f"Token {token}",
            "Content-Type": "application/json",
        }

    async def fetch_latest_run(self, job_id: int | str) -> DbtRun | None:
        """Fetch the most recently finished run of a job.

        Args:
            job_id: dbt Cloud job definition identifier

        Returns:
            DbtRun, or None when the job has never run

        Raises:
            RemoteApiError: If listing the job's runs fails
        """
        runs_url = f"{self.api_url}/accounts/{self.account_id}/runs/"
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(
                    runs_url,
                    headers=self.headers,
                    params={
                        "job_definition_id": job_id,
                        "limit": 1,
                        "order_by": "-finished_at",
                    },
                )
                response.raise_for_status()
                runs = response.json().get("data") or []
                if not runs:
                    return None

                run = runs[0]
                freshness = await self._fetch_freshness(client, run["id"])
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            raise RemoteApiError(f"dbt Cloud API error: {status}", status=status) from e
        except httpx.HTTPError as e:
            raise RemoteApiError(f"dbt Cloud request failed: {e}") from e

        status = run_status(run.get("status"))
        return DbtRun(
            id=run["id"],
            job_id=job_id,
            status=status.label,
            status_color=status.color,
            finished_at=run.get("finished_at"),
            started_at=run.get("started_at"),
            duration=_format_duration(run),
            job_name=(run.get("job") or {}).get("name") or "Production Build",
            run_url=run.get("href"),
            freshness=freshness,
        )

    async def _fetch_freshness(
        self, client: httpx.AsyncClient, run_id: int
    ) -> FreshnessStatus | None:
        """Fetch run steps and report the freshness step, best-effort."""
        detail_url = f"{self.api_url}/accounts/{self.account_id}/runs/{run_id}/"
        try:
            response = await client.get(
                detail_url,
                headers=self.headers,
                params={"include_related": '["run_steps"]'},
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.warning("Could not fetch run steps for dbt run %s: %s", run_id, e)
            return None

        run_steps = (response.json().get("data") or {}).get("run_steps") or []
        step = _find_freshness_step(run_steps)
        if step is None:
            return None

        status = run_status(step.get("status"))
        return FreshnessStatus(status=status.label, status_color=status.color)


async def fetch_dbt_runs(
    client: DbtCloudClient, job_ids: list[int | str]
) -> list[DbtRun]:
    """Fetch the latest run of every configured job concurrently.

    Jobs that have never run are left out.

    Raises:
        RemoteApiError: If any job's runs cannot be listed
    """
    runs = await asyncio.gather(*(client.fetch_latest_run(job) for job in job_ids))
    return [run for run in runs if run is not None]
