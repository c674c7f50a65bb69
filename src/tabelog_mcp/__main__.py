"""Main entry point for the Tabelog MCP server."""

from __future__ import annotations

import logging
import sys

from tabelog_mcp.config import LOG_LEVEL
from tabelog_mcp.server import run_server


def main() -> None:
    """Main entry point."""
    # Logs go to stderr; stdout carries the stdio transport
    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    # Parse command line arguments
    transport = "streamable-http"
    host = "0.0.0.0"
    port = 8000

    if len(sys.argv) > 1:
        transport = sys.argv[1]
    if len(sys.argv) > 2:
        host = sys.argv[2]
    if len(sys.argv) > 3:
        port = int(sys.argv[3])

    run_server(transport=transport, host=host, port=port)


if __name__ == "__main__":
    main()
