"""Pydantic models for dbt Cloud job runs.

API Reference: https://docs.getdbt.com/dbt-cloud/api-v2#/operations/List%20Runs
"""

from pydantic import Field

from ..models import DashboardModel


class RunStatus(DashboardModel):
    """Label and colour shown for a dbt Cloud run status code."""

    label: str
    color: str


# 1=Queued, 2=Starting, 3=Running, 10=Success, 20=Error, 30=Cancelled
RUN_STATUSES = {
    1: RunStatus(label="Queued", color="gray"),
    2: RunStatus(label="Starting", color="yellow"),
    3: RunStatus(label="Running", color="blue"),
    10: RunStatus(label="Success", color="green"),
    20: RunStatus(label="Error", color="red"),
    30: RunStatus(label="Cancelled", color="gray"),
}
UNKNOWN_STATUS = RunStatus(label="Unknown", color="gray")


def run_status(code: int | None) -> RunStatus:
    """Map a dbt Cloud status code to its label and colour."""
    if code is None:
        return UNKNOWN_STATUS
    return RUN_STATUSES.get(code, UNKNOWN_STATUS)


class FreshnessStatus(DashboardModel):
    """Outcome of the source freshness step of a run."""

    status: str = Field(..., description="Status label of the freshness step")
    status_color: str = Field(..., description="Colour for the status label")


class DbtRun(DashboardModel):
    """The latest run of a dbt Cloud job."""

    id: int = Field(..., description="Run identifier")
    job_id: int | str = Field(..., description="Job definition the run belongs to")
    status: str = Field(..., description="Status label, e.g. 'Success'")
    status_color: str = Field(..., description="Colour for the status label")
    finished_at: str | None = Field(None, description="Finish timestamp")
    started_at: str | None = Field(None, description="Start timestamp")
    duration: str | None = Field(None, description="Human readable duration")
    job_name: str = Field("Production Build", description="Name of the job")
    run_url: str | None = Field(None, description="Link to the run in dbt Cloud")
    freshness: FreshnessStatus | None = Field(
        None, description="Freshness step outcome, when the run has one"
    )
