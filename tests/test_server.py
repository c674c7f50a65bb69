"""Integration tests for the MCP server shell."""

from __future__ import annotations

import json
import os
import signal
import socket
import subprocess
import sys
from pathlib import Path
from unittest.mock import Mock

import anyio
import pytest
from mcp.shared.memory import create_connected_server_and_client_session
from starlette.testclient import TestClient

from tabelog_mcp.config import MAX_LIMIT
from tabelog_mcp.metrics import get_metrics
from tabelog_mcp.models import SnapshotResult
from tabelog_mcp.server import create_http_app, create_server, run_server

SRC_DIR = Path(__file__).resolve().parents[1] / "src"


class TestMcpRoundTrip:
    """Tool calls through an in-memory MCP client session."""

    @pytest.mark.asyncio
    async def test_list_tools(self, mock_provider: Mock) -> None:
        server = create_server(mock_provider)

        async with create_connected_server_and_client_session(server) as client:
            result = await client.list_tools()

        assert {tool.name for tool in result.tools} == {"tabelog_top", "tabelog_snapshot"}

    @pytest.mark.asyncio
    async def test_tabelog_top(self, mock_provider: Mock) -> None:
        """Test that an over-large limit is clamped on the way through."""
        server = create_server(mock_provider)

        async with create_connected_server_and_client_session(server) as client:
            result = await client.call_tool("tabelog_top", {"region": "osaka", "limit": 100})

        assert result.isError is False
        mock_provider.scrape_restaurants.assert_awaited_once_with("osaka", MAX_LIMIT, None)
        payload = json.loads(result.content[0].text)
        assert payload["count"] == len(payload["restaurants"])

    @pytest.mark.asyncio
    async def test_failed_snapshot(self, mock_provider: Mock) -> None:
        url = "https://tabelog.com/en/kyoto/rstLst/RC/?SrtT=rt"
        mock_provider.take_snapshot.return_value = SnapshotResult(
            success=False, message="Error taking snapshot: Timeout 30000ms exceeded.", url=url
        )
        server = create_server(mock_provider)

        async with create_connected_server_and_client_session(server) as client:
            result = await client.call_tool("tabelog_snapshot", {})

        assert result.isError is False
        payload = json.loads(result.content[0].text)
        assert payload == {
            "success": False,
            "message": "Error taking snapshot: Timeout 30000ms exceeded.",
            "url": url,
        }

    @pytest.mark.asyncio
    async def test_unknown_tool(self, mock_provider: Mock) -> None:
        """Test that an unknown tool name is an error envelope, not a crash."""
        server = create_server(mock_provider)

        async with create_connected_server_and_client_session(server) as client:
            result = await client.call_tool("foo", {})
            # The session keeps working afterwards
            tools = await client.list_tools()

        assert result.isError is True
        assert "Unknown tool: foo" in result.content[0].text
        assert len(tools.tools) == 2

    @pytest.mark.asyncio
    async def test_initialized_notification_prewarms_browser(self, mock_provider: Mock) -> None:
        server = create_server(mock_provider)

        async with create_connected_server_and_client_session(server) as client:
            await client.list_tools()
            with anyio.fail_after(2):
                while not mock_provider.initialize.await_count:
                    await anyio.sleep(0.01)

        mock_provider.initialize.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_prewarm_failure_does_not_break_session(self, mock_provider: Mock) -> None:
        mock_provider.initialize.side_effect = RuntimeError("chromium missing")
        server = create_server(mock_provider)

        async with create_connected_server_and_client_session(server) as client:
            result = await client.call_tool("tabelog_top", {})

        assert result.isError is False


class TestAdminRoutes:
    """Tests for the HTTP admin endpoints."""

    def test_health_check(self, mock_provider: Mock) -> None:
        client = TestClient(create_http_app(create_server(mock_provider)))

        response = client.get("/healthz")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}

    def test_stats(self, mock_provider: Mock) -> None:
        client = TestClient(create_http_app(create_server(mock_provider)))

        response = client.get("/api/stats")

        assert response.status_code == 200
        stats = response.json()
        assert stats["calls"]["total"] == 0
        assert "initialized" in stats["browser"]

    def test_config(self, mock_provider: Mock) -> None:
        client = TestClient(create_http_app(create_server(mock_provider)))

        response = client.get("/api/config")

        assert response.status_code == 200
        config = response.json()["config"]
        assert config["default_region"] == "kyoto"
        assert config["max_limit"] == MAX_LIMIT
        assert 10 <= config["max_limit"] <= 50


class TestRunServer:
    """Tests for run_server argument handling."""

    def test_unsupported_transport(self) -> None:
        with pytest.raises(ValueError, match="Unsupported transport"):
            run_server(transport="carrier-pigeon")


class TestArgumentValidation:
    """Malformed arguments over the protocol reach the argument models."""

    @pytest.mark.asyncio
    async def test_schema_violation_is_a_tool_error(self, mock_provider: Mock) -> None:
        server = create_server(mock_provider)

        async with create_connected_server_and_client_session(server) as client:
            result = await client.call_tool("tabelog_top", {"limit": 0})

        assert result.isError is True
        assert result.content[0].text.startswith("Error: Invalid arguments for tabelog_top")
        mock_provider.scrape_restaurants.assert_not_awaited()
        assert get_metrics().failed_calls == 1


def _spawn_server(*args: str) -> subprocess.Popen[str]:
    env = dict(os.environ)
    env["PYTHONPATH"] = os.pathsep.join(filter(None, [str(SRC_DIR), env.get("PYTHONPATH")]))
    env["LOG_LEVEL"] = "INFO"
    return subprocess.Popen(
        [sys.executable, "-m", "tabelog_mcp", *args],
        stdin=subprocess.PIPE,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        env=env,
        text=True,
    )


def _read_until(proc: subprocess.Popen[str], marker: str) -> str:
    """Read stderr line by line until `marker` shows up."""
    seen = []
    for line in proc.stderr:
        seen.append(line)
        if marker in line:
            return "".join(seen)
    raise AssertionError(f"{marker!r} was never logged:\n{''.join(seen)}")


def _free_port() -> int:
    with socket.socket() as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


@pytest.mark.skipif(sys.platform == "win32", reason="POSIX signals")
class TestSignalShutdown:
    """SIGTERM stops a running server process cleanly."""

    def test_stdio_exits_with_stdin_open(self) -> None:
        """The stdin reader must not keep the process alive after SIGTERM."""
        proc = _spawn_server("stdio")
        try:
            _read_until(proc, "ready on stdio")
            proc.send_signal(signal.SIGTERM)
            returncode = proc.wait(timeout=15)
            stderr = proc.stderr.read()
        finally:
            if proc.poll() is None:
                proc.kill()
            proc.stdin.close()

        assert returncode == 0
        assert "Tabelog MCP server stopped" in stderr

    def test_streamable_http_shuts_down_gracefully(self) -> None:
        proc = _spawn_server("streamable-http", "127.0.0.1", str(_free_port()))
        try:
            _read_until(proc, "Application startup complete")
            proc.send_signal(signal.SIGTERM)
            returncode = proc.wait(timeout=15)
            stderr = proc.stderr.read()
        finally:
            if proc.poll() is None:
                proc.kill()
            proc.stdin.close()

        assert returncode == 0
        assert "Tabelog MCP server stopped" in stderr
        assert "Traceback" not in stderr
