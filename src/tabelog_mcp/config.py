"""Runtime configuration for the Tabelog MCP server.

Values are read once from environment variables at import time. None of them
are required; the defaults target the public English Tabelog site.
"""

from __future__ import annotations

import logging
import os

logger = logging.getLogger(__name__)

# Tool argument defaults
DEFAULT_REGION = "kyoto"
DEFAULT_LIMIT = 10

# Bounds for the configurable cap on `limit`
MIN_LIMIT_CAP = 10
MAX_LIMIT_CAP = 50
DEFAULT_MAX_LIMIT = 20

# Ranked listing path, sorted by rating descending
LISTING_PATH = "/en/{region}/rstLst/RC/?SrtT=rt"

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"Ignoring non-integer value for {name}: {raw!r}")
        return default


def _clamp_max_limit(value: int) -> int:
    """Keep the configured cap within the supported 10..50 range."""
    return max(MIN_LIMIT_CAP, min(value, MAX_LIMIT_CAP))


BASE_URL = os.getenv("TABELOG_BASE_URL", "https://tabelog.com").rstrip("/")
MAX_LIMIT = _clamp_max_limit(_env_int("TABELOG_MAX_LIMIT", DEFAULT_MAX_LIMIT))
WAIT_TIMEOUT_MS = _env_int("TABELOG_WAIT_TIMEOUT_MS", 10_000)
HEADLESS = os.getenv("TABELOG_HEADLESS", "true").lower() in ("true", "1", "yes")
USER_AGENT = os.getenv("TABELOG_USER_AGENT", DEFAULT_USER_AGENT)
SNAPSHOT_DIR = os.getenv("TABELOG_SNAPSHOT_DIR") or None
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
