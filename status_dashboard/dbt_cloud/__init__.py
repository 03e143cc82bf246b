"""dbt Cloud client package for job run status."""

from .client import DbtCloudClient, fetch_dbt_runs
from .models import DbtRun, FreshnessStatus

__all__ = ["DbtCloudClient", "DbtRun", "FreshnessStatus", "fetch_dbt_runs"]
