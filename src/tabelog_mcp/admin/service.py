"""Admin service layer for configuration and stats reporting."""

from __future__ import annotations

from typing import Any

from tabelog_mcp import config
from tabelog_mcp.core.providers import get_provider
from tabelog_mcp.metrics import get_metrics


def get_stats() -> dict[str, Any]:
    """Get server statistics and metrics.

    Returns:
        Dictionary with tool call metrics and browser session state
    """
    stats = get_metrics().to_dict()
    provider = get_provider()
    stats["browser"] = {
        "initialized": bool(getattr(provider, "is_initialized", False)),
    }
    return stats


def get_current_config() -> dict[str, Any]:
    """Get the effective runtime configuration.

    Returns:
        Dictionary with current config values and a note
    """
    return {
        "config": {
            "base_url": config.BASE_URL,
            "default_region": config.DEFAULT_REGION,
            "default_limit": config.DEFAULT_LIMIT,
            "max_limit": config.MAX_LIMIT,
            "wait_timeout_ms": config.WAIT_TIMEOUT_MS,
            "headless": config.HEADLESS,
            "snapshot_dir": config.SNAPSHOT_DIR,
            "log_level": config.LOG_LEVEL,
        },
        "note": "Values are read from environment variables at startup",
    }
