"""Configuration for the dashboard integrations.

Secrets come from environment variables (loaded from ``.env`` by the CLI and
the server); non-secret settings come from ``.config.yml``.
"""

import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Optional

import yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = ".config.yml"
DEFAULT_DBT_BASE_URL = "https://cloud.getdbt.com"


def config_path() -> Path:
    """Location of the YAML settings file."""
    return Path(os.getenv("STATUS_DASHBOARD_CONFIG", DEFAULT_CONFIG_FILE))


@lru_cache(maxsize=None)
def load_config(path: Optional[Path] = None) -> dict[str, Any]:
    """Load and cache the YAML settings file.

    A missing or unreadable file is logged and treated as empty.
    """
    path = path or config_path()
    try:
        content = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as e:
        logger.error("Error loading %s: %s", path, e)
        return {}

    if not isinstance(content, dict):
        return {}
    return content


def _section(settings: dict[str, Any], name: str) -> dict[str, Any]:
    value = settings.get(name)
    return value if isinstance(value, dict) else {}


class GitHubConfig:
    """Configuration for the GitHub integration."""

    def __init__(self) -> None:
        """Initialize GitHub configuration from environment variables."""
        self.token: Optional[str] = os.getenv("GITHUB_TOKEN")
        self.username: Optional[str] = os.getenv("GITHUB_USERNAME")

    def is_configured(self) -> bool:
        """Check if GitHub is properly configured."""
        return bool(self.token and self.username)

    def validate(self) -> None:
        """Validate configuration and raise error if invalid."""
        missing = []
        if not self.token:
            missing.append("GITHUB_TOKEN")
        if not self.username:
            missing.append("GITHUB_USERNAME")

        if missing:
            raise ValueError(
                f"Environment variables required for GitHub: {', '.join(missing)}"
            )


class DbtConfig:
    """Configuration for the dbt Cloud integration."""

    def __init__(self, settings: Optional[dict[str, Any]] = None) -> None:
        """Initialize dbt Cloud configuration.

        Jobs come from ``dbt.jobs`` in the settings file; ``DBT_JOB_ID`` is
        used when no jobs are listed there.
        """
        settings = load_config() if settings is None else settings
        self.token: Optional[str] = os.getenv("DBT_TOKEN")
        self.account_id: Optional[str] = os.getenv("DBT_ACCOUNT_ID")
        self.base_url: str = os.getenv("DBT_BASE_URL", DEFAULT_DBT_BASE_URL)
        self.job_ids: list[int | str] = self._job_ids(_section(settings, "dbt"))

    @staticmethod
    def _job_ids(dbt_settings: dict[str, Any]) -> list[int | str]:
        job_ids = []
        for job in dbt_settings.get("jobs") or []:
            # Entries are either bare ids or mappings with an ``id`` key
            job_id = job.get("id") if isinstance(job, dict) else job
            if job_id is not None:
                job_ids.append(job_id)

        if not job_ids and os.getenv("DBT_JOB_ID"):
            job_ids.append(os.environ["DBT_JOB_ID"])
        return job_ids

    def is_configured(self) -> bool:
        """Check if dbt Cloud is properly configured."""
        return bool(self.token and self.account_id and self.job_ids)

    def validate(self) -> None:
        """Validate configuration and raise error if invalid."""
        missing = []
        if not self.token:
            missing.append("DBT_TOKEN")
        if not self.account_id:
            missing.append("DBT_ACCOUNT_ID")
        if not self.job_ids:
            missing.append("DBT_JOB_ID (or dbt.jobs in the settings file)")

        if missing:
            raise ValueError(f"Settings required for dbt Cloud: {', '.join(missing)}")


class PrefectConfig:
    """Configuration for the Prefect Cloud integration."""

    def __init__(self, settings: Optional[dict[str, Any]] = None) -> None:
        """Initialize Prefect configuration from the environment and settings."""
        settings = load_config() if settings is None else settings
        prefect_settings = _section(settings, "prefect")
        self.api_key: Optional[str] = os.getenv("PREFECT_API_KEY")
        self.account_id: str = str(prefect_settings.get("accountId") or "")
        self.workspace_id: str = str(prefect_settings.get("workspaceId") or "")
        self.tags: list[str] = [str(tag) for tag in prefect_settings.get("tags") or []]

    def is_configured(self) -> bool:
        """Check if Prefect Cloud is properly configured."""
        return bool(self.api_key and self.account_id and self.workspace_id and self.tags)

    def validate(self) -> None:
        """Validate configuration and raise error if invalid."""
        missing = []
        if not self.api_key:
            missing.append("PREFECT_API_KEY")
        if not self.account_id:
            missing.append("prefect.accountId")
        if not self.workspace_id:
            missing.append("prefect.workspaceId")
        if not self.tags:
            missing.append("prefect.tags")

        if missing:
            raise ValueError(
                f"Settings required for Prefect Cloud: {', '.join(missing)}"
            )
