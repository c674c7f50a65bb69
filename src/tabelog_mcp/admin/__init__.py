"""Admin API functionality for monitoring.

This module provides administrative endpoints for:
- Health checks
- Tool call statistics and browser session state
- Effective runtime configuration

The admin module follows a router -> service pattern:
- router.py: HTTP endpoint handlers
- service.py: Business logic for config and stats
"""

from tabelog_mcp.admin.router import (
    api_config_get,
    api_stats,
    health_check,
)
from tabelog_mcp.admin.service import (
    get_current_config,
    get_stats,
)

__all__ = [
    # Router functions
    "api_config_get",
    "api_stats",
    "health_check",
    # Service functions
    "get_current_config",
    "get_stats",
]
