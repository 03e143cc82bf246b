"""Quick links shown on the dashboard, read from ``links.yaml``."""

import logging
from pathlib import Path
from typing import Optional

import yaml
from pydantic import Field, ValidationError

from .models import DashboardModel

logger = logging.getLogger(__name__)

DEFAULT_LINKS_FILE = Path("links.yaml")


class Link(DashboardModel):
    """A named link to an external tool or page."""

    name: str = Field(..., description="Text shown for the link")
    url: str = Field(..., description="Target URL")
    description: str | None = Field(None, description="Optional tooltip text")
    icon: str | None = Field(None, description="Optional icon name or URL")


def load_links(path: Optional[Path] = None) -> list[Link]:
    """Load links from a YAML list.

    A missing or unreadable file is logged and yields no links; entries that
    do not describe a link are logged and skipped.
    """
    path = path or DEFAULT_LINKS_FILE
    try:
        entries = yaml.safe_load(path.read_text(encoding="utf-8")) or []
    except (OSError, yaml.YAMLError) as e:
        logger.error("Error loading %s: %s", path, e)
        return []

    if not isinstance(entries, list):
        logger.error("Expected a list of links in %s", path)
        return []

    links = []
    for index, entry in enumerate(entries):
        try:
            links.append(Link.model_validate(entry))
        except ValidationError as e:
            logger.warning("Skipping invalid link #%d in %s: %s", index, path, e)
    return links
