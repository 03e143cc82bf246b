"""Pydantic models for Prefect Cloud deployments and flow runs.

API Reference: https://docs.prefect.io/latest/api-ref/rest-api/
"""

from pydantic import Field

from ..models import DashboardModel

STATE_COLORS = {
    "COMPLETED": "green",
    "FAILED": "red",
    "CRASHED": "red",
    "CANCELLED": "gray",
    "CANCELLING": "gray",
    "RUNNING": "blue",
    "PENDING": "yellow",
    "SCHEDULED": "yellow",
    "PAUSED": "yellow",
    "LATE": "yellow",
}


def state_color(state: str | None) -> str:
    """Colour for a flow run state type."""
    return STATE_COLORS.get((state or "").upper(), "gray")


class FlowRunSummary(DashboardModel):
    """One executed flow run in a deployment's history."""

    id: str
    state: str | None = None
    state_color: str = "gray"
    start_time: str | None = None
    end_time: str | None = None


class LatestFlowRun(FlowRunSummary):
    """The most recent executed flow run of a deployment."""

    state_name: str | None = None
    expected_start_time: str | None = None


class DeploymentStatus(DashboardModel):
    """A monitored deployment with its latest run and recent history."""

    id: str
    name: str
    flow_name: str
    tags: list[str] = Field(default_factory=list)
    latest_run: LatestFlowRun | None = None
    run_history: list[FlowRunSummary] = Field(
        default_factory=list, description="Up to 10 executed runs, oldest first"
    )
    url: str


class TagSummary(DashboardModel):
    """How many deployments carrying a tag last completed successfully."""

    total: int = 0
    successful: int = 0


class PrefectDashboard(DashboardModel):
    """The assembled Prefect view served to the front-end."""

    deployments: list[DeploymentStatus] = Field(
        default_factory=list,
        description="Deployments whose latest executed run failed or crashed",
    )
    tag_summary: dict[str, TagSummary] = Field(default_factory=dict)
