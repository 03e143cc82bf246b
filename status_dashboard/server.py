"""FastAPI server exposing the dashboard integrations as JSON routes.

Usage:
    uvicorn status_dashboard.server:app --host 127.0.0.1 --port 8000
"""

import logging
from datetime import datetime, timezone
from typing import Any

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import __version__
from .config import DbtConfig, GitHubConfig, PrefectConfig, load_config
from .dbt_cloud.client import DbtCloudClient, fetch_dbt_runs
from .errors import RemoteApiError
from .github_client.client import GitHubClient
from .github_client.dashboard import fetch_github_data
from .github_client.models import GitHubDashboard
from .links import load_links
from .prefect_cloud.client import PrefectCloudClient, fetch_prefect_data

load_dotenv()

logger = logging.getLogger(__name__)

app = FastAPI(title="Status Dashboard API", version=__version__)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET"],
    allow_headers=["*"],
)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _empty_github_view() -> dict[str, Any]:
    return GitHubDashboard().model_dump(mode="json", by_alias=True)


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/api/github")
async def github_endpoint() -> JSONResponse:
    config = GitHubConfig()
    if not config.is_configured():
        return JSONResponse(
            {
                "configured": False,
                "error": "Missing GITHUB_TOKEN or GITHUB_USERNAME in .env",
                **_empty_github_view(),
            }
        )

    now = _now()
    try:
        client = GitHubClient(token=config.token)
        dashboard = await fetch_github_data(client, config.username, now)
    except RemoteApiError as e:
        logger.error("GitHub dashboard failed: %s", e)
        return JSONResponse(
            {"configured": True, "error": str(e), **_empty_github_view()},
            status_code=500,
        )

    return JSONResponse(
        {
            "configured": True,
            **dashboard.model_dump(mode="json", by_alias=True),
            "fetchedAt": now.isoformat(),
        }
    )


@app.get("/api/dbt")
async def dbt_endpoint() -> JSONResponse:
    config = DbtConfig(load_config())
    if not config.is_configured():
        return JSONResponse({"configured": False, "runs": []})

    client = DbtCloudClient(config.token, config.account_id, config.base_url)
    try:
        runs = await fetch_dbt_runs(client, config.job_ids)
    except RemoteApiError as e:
        logger.error("dbt Cloud status failed: %s", e)
        return JSONResponse(
            {"configured": True, "error": str(e), "runs": []}, status_code=500
        )

    return JSONResponse(
        {
            "configured": True,
            "runs": [run.model_dump(mode="json", by_alias=True) for run in runs],
            "fetchedAt": _now().isoformat(),
        }
    )


@app.get("/api/prefect")
async def prefect_endpoint() -> JSONResponse:
    config = PrefectConfig(load_config())
    if not config.is_configured():
        return JSONResponse({"configured": False, "deployments": []})

    client = PrefectCloudClient(config.api_key, config.account_id, config.workspace_id)
    try:
        data = await fetch_prefect_data(client, config.tags)
    except RemoteApiError as e:
        logger.error("Prefect status failed: %s", e)
        return JSONResponse(
            {"configured": True, "error": str(e), "deployments": []},
            status_code=500,
        )

    return JSONResponse(
        {
            "configured": True,
            **data.model_dump(mode="json", by_alias=True),
            "tags": config.tags,
            "fetchedAt": _now().isoformat(),
        }
    )


@app.get("/api/links")
async def links_endpoint() -> list[dict[str, Any]]:
    return [
        link.model_dump(mode="json", by_alias=True, exclude_none=True)
        for link in load_links()
    ]
