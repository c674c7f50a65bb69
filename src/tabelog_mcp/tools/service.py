"""Business logic for the Tabelog tools.

Each handler follows the same steps: validate the raw arguments, fill in
defaults, delegate to the provider, and wrap the outcome in a CallToolResult.
Handlers never raise; every failure becomes an error envelope.
"""

from __future__ import annotations

import logging
import time
from typing import Any, TypeVar

from mcp.types import CallToolResult, TextContent
from pydantic import BaseModel, ValidationError

from tabelog_mcp.config import MAX_LIMIT
from tabelog_mcp.exceptions import ArgumentError
from tabelog_mcp.metrics import record_call
from tabelog_mcp.models import TabelogSnapshotArgs, TabelogTopArgs
from tabelog_mcp.providers import ScraperProvider

logger = logging.getLogger(__name__)

TOP_TOOL_NAME = "tabelog_top"
SNAPSHOT_TOOL_NAME = "tabelog_snapshot"

ArgsT = TypeVar("ArgsT", bound=BaseModel)


def text_result(payload: BaseModel) -> CallToolResult:
    """Wrap a result model as pretty-printed JSON text content."""
    return CallToolResult(
        content=[TextContent(type="text", text=payload.model_dump_json(indent=2))],
        isError=False,
    )


def error_result(message: str) -> CallToolResult:
    """Wrap an error message as text content flagged as an error."""
    return CallToolResult(
        content=[TextContent(type="text", text=message)],
        isError=True,
    )


def _format_validation_error(error: ValidationError) -> str:
    parts = []
    for detail in error.errors():
        location = ".".join(str(part) for part in detail["loc"]) or "arguments"
        parts.append(f"{location}: {detail['msg']}")
    return "; ".join(parts)


def parse_arguments(model: type[ArgsT], arguments: Any, tool_name: str) -> ArgsT:
    """Validate raw tool arguments against an argument model.

    Args:
        model: Pydantic model describing the tool's arguments
        arguments: Raw arguments from the tool call (None means no arguments)
        tool_name: Tool name, used in the error message

    Returns:
        Validated argument model

    Raises:
        ArgumentError: If the arguments have the wrong shape
    """
    try:
        return model.model_validate({} if arguments is None else arguments)
    except ValidationError as e:
        raise ArgumentError(
            f"Invalid arguments for {tool_name}: {_format_validation_error(e)}"
        ) from e


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 2)


async def handle_tabelog_top(
    provider: ScraperProvider,
    arguments: Any,
    max_limit: int = MAX_LIMIT,
) -> CallToolResult:
    """Handle a tabelog_top tool call.

    Args:
        provider: Scraper provider to delegate to
        arguments: Raw tool arguments
        max_limit: Cap applied to the requested limit

    Returns:
        CallToolResult with the JSON ListingResult, or an error envelope
    """
    started = time.perf_counter()
    region = None
    try:
        args = parse_arguments(TabelogTopArgs, arguments, TOP_TOOL_NAME)
        request = args.to_request(max_limit)
        region = request.region
        if args.limit > request.limit:
            logger.info(f"Capping {TOP_TOOL_NAME} limit {args.limit} to {request.limit}")

        result = await provider.scrape_restaurants(
            request.region, request.limit, request.price_range
        )
    except Exception as e:
        error_msg = f"{type(e).__name__}: {e}"
        logger.error(f"{TOP_TOOL_NAME} failed: {error_msg}")
        record_call(
            TOP_TOOL_NAME,
            success=False,
            region=region,
            elapsed_ms=_elapsed_ms(started),
            error=error_msg,
        )
        return error_result(f"Error: {e}")

    record_call(
        TOP_TOOL_NAME,
        success=True,
        region=region,
        elapsed_ms=_elapsed_ms(started),
        result_count=result.count,
    )
    return text_result(result)


async def handle_tabelog_snapshot(
    provider: ScraperProvider,
    arguments: Any,
) -> CallToolResult:
    """Handle a tabelog_snapshot tool call.

    A snapshot that fails to load is still a successful call: the envelope
    carries a SnapshotResult with success=false and isError stays False.

    Args:
        provider: Scraper provider to delegate to
        arguments: Raw tool arguments

    Returns:
        CallToolResult with the JSON SnapshotResult, or an error envelope
    """
    started = time.perf_counter()
    region = None
    try:
        args = parse_arguments(TabelogSnapshotArgs, arguments, SNAPSHOT_TOOL_NAME)
        region = args.resolved_region()
        result = await provider.take_snapshot(region)
    except Exception as e:
        error_msg = f"{type(e).__name__}: {e}"
        logger.error(f"{SNAPSHOT_TOOL_NAME} failed: {error_msg}")
        record_call(
            SNAPSHOT_TOOL_NAME,
            success=False,
            region=region,
            elapsed_ms=_elapsed_ms(started),
            error=error_msg,
        )
        return error_result(f"Error: {e}")

    record_call(
        SNAPSHOT_TOOL_NAME,
        success=result.success,
        region=region,
        elapsed_ms=_elapsed_ms(started),
        error=None if result.success else result.message,
    )
    return text_result(result)
