"""MCP server for Tabelog restaurant scraping."""

from __future__ import annotations

import logging
import os
import signal
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import anyio
import anyio.abc
import uvicorn
from mcp import types
from mcp.server.lowlevel import Server
from mcp.server.stdio import stdio_server
from mcp.server.streamable_http_manager import StreamableHTTPSessionManager
from starlette.applications import Starlette
from starlette.routing import Mount, Route
from starlette.types import Receive, Scope, Send

from tabelog_mcp import __version__
from tabelog_mcp.admin.router import api_config_get, api_stats, health_check
from tabelog_mcp.config import LOG_LEVEL
from tabelog_mcp.core.providers import get_provider
from tabelog_mcp.providers import ScraperProvider
from tabelog_mcp.tools.router import register_tabelog_tools

logger = logging.getLogger(__name__)

SERVER_NAME = "tabelog-mcp"
INSTRUCTIONS = (
    "A Tabelog MCP server that looks up the top-rated restaurants for a "
    "region and captures snapshots of the region's ranking page."
)
TRANSPORTS = ("stdio", "streamable-http")
SHUTDOWN_SIGNALS = (signal.SIGINT, signal.SIGTERM)


def create_server(provider: ScraperProvider | None = None) -> Server:
    """Create the MCP server with the Tabelog tools registered.

    The browser session is started as soon as a client finishes the MCP
    handshake, so the first tool call does not pay for the browser launch.

    Args:
        provider: Scraper provider to use (default: the shared provider)

    Returns:
        Configured low-level MCP server
    """
    provider = provider if provider is not None else get_provider()

    server: Server = Server(SERVER_NAME, version=__version__, instructions=INSTRUCTIONS)
    register_tabelog_tools(server, provider)

    async def prewarm_browser(notification: types.InitializedNotification) -> None:
        logger.info("Tabelog MCP client initialized")
        try:
            await provider.initialize()
        except Exception as e:
            logger.error(f"Failed to start browser session: {type(e).__name__}: {e}")

    server.notification_handlers[types.InitializedNotification] = prewarm_browser
    return server


def create_http_app(server: Server) -> Starlette:
    """Create the Starlette app serving MCP at /mcp/ plus the admin routes.

    Args:
        server: MCP server to expose over streamable HTTP

    Returns:
        Starlette application
    """
    # Stateless mode accepts requests without a prior initialize handshake,
    # so clients survive server restarts
    session_manager = StreamableHTTPSessionManager(app=server, stateless=True)

    async def handle_mcp(scope: Scope, receive: Receive, send: Send) -> None:
        await session_manager.handle_request(scope, receive, send)

    @asynccontextmanager
    async def lifespan(app: Starlette) -> AsyncIterator[None]:
        async with session_manager.run():
            yield

    return Starlette(
        routes=[
            Mount("/mcp", app=handle_mcp),
            Route("/healthz", health_check, methods=["GET"]),
            Route("/api/stats", api_stats, methods=["GET"]),
            Route("/api/config", api_config_get, methods=["GET"]),
        ],
        lifespan=lifespan,
    )


async def _close_provider(provider: ScraperProvider) -> None:
    with anyio.CancelScope(shield=True):
        try:
            await provider.close()
        except Exception as e:
            logger.error(f"Error closing browser session: {type(e).__name__}: {e}")


async def _exit_on_signal(
    provider: ScraperProvider,
    *,
    task_status: anyio.abc.TaskStatus[None] = anyio.TASK_STATUS_IGNORED,
) -> None:
    """Close the browser and exit the process on SIGINT/SIGTERM.

    The stdio transport reads stdin in a worker thread that cannot be
    cancelled, so the process exits here instead of unwinding the transport.
    """
    with anyio.open_signal_receiver(*SHUTDOWN_SIGNALS) as signals:
        task_status.started()
        logger.info("Tabelog MCP server ready on stdio")
        async for signum in signals:
            logger.info(f"Received {signal.Signals(signum).name}, shutting down")
            await _close_provider(provider)
            logger.info("Tabelog MCP server stopped")
            logging.shutdown()
            os._exit(0)


async def _stop_on_signal(
    http_server: uvicorn.Server,
    *,
    task_status: anyio.abc.TaskStatus[None] = anyio.TASK_STATUS_IGNORED,
) -> None:
    """Ask uvicorn to shut down gracefully on SIGINT/SIGTERM."""
    with anyio.open_signal_receiver(*SHUTDOWN_SIGNALS) as signals:
        task_status.started()
        async for signum in signals:
            logger.info(f"Received {signal.Signals(signum).name}, shutting down")
            http_server.should_exit = True


async def _run_stdio(server: Server, provider: ScraperProvider) -> None:
    async with anyio.create_task_group() as tg:
        await tg.start(_exit_on_signal, provider)
        async with stdio_server() as (read_stream, write_stream):
            await server.run(read_stream, write_stream, server.create_initialization_options())
        # stdin reached EOF
        tg.cancel_scope.cancel()


async def _run_streamable_http(server: Server, host: str, port: int) -> None:
    config = uvicorn.Config(
        create_http_app(server),
        host=host,
        port=port,
        log_level=LOG_LEVEL.lower(),
    )
    http_server = uvicorn.Server(config)
    async with anyio.create_task_group() as tg:
        # Installed before uvicorn so a signal it re-raises on exit lands here
        await tg.start(_stop_on_signal, http_server)
        await http_server.serve()
        tg.cancel_scope.cancel()


async def serve(
    provider: ScraperProvider,
    transport: str = "streamable-http",
    host: str = "0.0.0.0",
    port: int = 8000,
) -> None:
    """Serve until the transport ends or SIGINT/SIGTERM arrives.

    The provider's browser session is closed on the way out. With the stdio
    transport a signal closes it and exits the process with status 0 directly.

    Args:
        provider: Scraper provider backing the tools
        transport: Transport type ('stdio' or 'streamable-http')
        host: Host to bind to for HTTP
        port: Port to bind to for HTTP
    """
    server = create_server(provider)
    try:
        if transport == "stdio":
            await _run_stdio(server, provider)
        else:
            await _run_streamable_http(server, host, port)
    finally:
        await _close_provider(provider)
    logger.info("Tabelog MCP server stopped")


def run_server(transport: str = "streamable-http", host: str = "0.0.0.0", port: int = 8000) -> None:
    """Run the MCP server.

    Args:
        transport: Transport type ('stdio' or 'streamable-http')
        host: Host to bind to (default: 0.0.0.0)
        port: Port to bind to (default: 8000)

    Raises:
        ValueError: If the transport is not supported
    """
    if transport not in TRANSPORTS:
        raise ValueError(f"Unsupported transport {transport!r}, expected one of {TRANSPORTS}")

    if transport == "stdio":
        logger.info("Starting Tabelog MCP server with stdio transport")
    else:
        logger.info(f"Starting Tabelog MCP server on {host}:{port} with {transport} transport")

    anyio.run(serve, get_provider(), transport, host, port)
