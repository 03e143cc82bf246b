"""Prefect Cloud client package for deployment health."""

from .client import PrefectCloudClient, fetch_prefect_data
from .models import DeploymentStatus, PrefectDashboard

__all__ = [
    "PrefectCloudClient",
    "DeploymentStatus",
    "PrefectDashboard",
    "fetch_prefect_data",
]
