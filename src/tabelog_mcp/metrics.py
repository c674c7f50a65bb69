"""In-process tool call statistics for the admin endpoints.

Nothing here is persisted; counters start from zero with every process.
"""

from __future__ import annotations

from collections import Counter, deque
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any

RECENT_CALLS_KEPT = 50
RECENT_ERRORS_KEPT = 20
RECENT_SHOWN = 10


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class ToolCallRecord:
    """One finished tool call."""

    tool: str
    success: bool
    region: str | None = None
    elapsed_ms: float | None = None
    result_count: int | None = None
    error: str | None = None
    finished_at: datetime = field(default_factory=_utcnow)

    def to_dict(self) -> dict[str, Any]:
        record = asdict(self)
        record["finished_at"] = self.finished_at.isoformat()
        return record


@dataclass
class ServerMetrics:
    """Counters and recent history of tool calls since startup."""

    started_at: datetime = field(default_factory=_utcnow)
    total_calls: int = 0
    successful_calls: int = 0
    failed_calls: int = 0
    restaurants_returned: int = 0
    calls_by_tool: Counter[str] = field(default_factory=Counter)
    elapsed_ms_by_tool: Counter[str] = field(default_factory=Counter)
    recent_calls: deque[ToolCallRecord] = field(
        default_factory=lambda: deque(maxlen=RECENT_CALLS_KEPT)
    )
    recent_errors: deque[ToolCallRecord] = field(
        default_factory=lambda: deque(maxlen=RECENT_ERRORS_KEPT)
    )

    def record_call(
        self,
        tool: str,
        success: bool,
        region: str | None = None,
        elapsed_ms: float | None = None,
        result_count: int | None = None,
        error: str | None = None,
    ) -> None:
        """Add a finished tool call to the counters and history.

        Args:
            tool: Tool name
            success: Whether the call produced a non-error envelope with a usable result
            region: Region slug the call resolved to, if it got that far
            elapsed_ms: Wall time of the call
            result_count: Restaurants returned, for listing calls
            error: Failure description
        """
        record = ToolCallRecord(
            tool=tool,
            success=success,
            region=region,
            elapsed_ms=elapsed_ms,
            result_count=result_count,
            error=error,
        )

        self.total_calls += 1
        self.calls_by_tool[tool] += 1
        if elapsed_ms is not None:
            self.elapsed_ms_by_tool[tool] += elapsed_ms
        self.restaurants_returned += result_count or 0

        self.recent_calls.append(record)
        if success:
            self.successful_calls += 1
        else:
            self.failed_calls += 1
            self.recent_errors.append(record)

    @property
    def uptime_seconds(self) -> float:
        return (_utcnow() - self.started_at).total_seconds()

    def get_success_rate(self) -> float:
        """Percentage of calls that succeeded, 0.0 before the first call."""
        if not self.total_calls:
            return 0.0
        return 100.0 * self.successful_calls / self.total_calls

    def average_elapsed_ms(self) -> dict[str, float]:
        return {
            tool: round(self.elapsed_ms_by_tool[tool] / count, 2)
            for tool, count in self.calls_by_tool.items()
        }

    def to_dict(self) -> dict[str, Any]:
        """Snapshot the metrics as JSON-friendly data, newest history first."""
        uptime = self.uptime_seconds
        return {
            "status": "healthy",
            "uptime": {"seconds": uptime, "formatted": format_duration(uptime)},
            "start_time": self.started_at.isoformat(),
            "calls": {
                "total": self.total_calls,
                "successful": self.successful_calls,
                "failed": self.failed_calls,
                "success_rate": round(self.get_success_rate(), 2),
                "by_tool": dict(self.calls_by_tool),
                "avg_elapsed_ms": self.average_elapsed_ms(),
            },
            "restaurants_returned": self.restaurants_returned,
            "recent_calls": _newest_first(self.recent_calls),
            "recent_errors": _newest_first(self.recent_errors),
        }


def _newest_first(records: deque[ToolCallRecord]) -> list[dict[str, Any]]:
    return [record.to_dict() for record in reversed(list(records)[-RECENT_SHOWN:])]


def format_duration(seconds: float) -> str:
    """Render a duration as its two largest units, e.g. '3h 12m' or '45s'."""
    minutes, secs = divmod(int(seconds), 60)
    hours, minutes = divmod(minutes, 60)
    days, hours = divmod(hours, 24)

    if days:
        return f"{days}d {hours}h"
    if hours:
        return f"{hours}h {minutes}m"
    if minutes:
        return f"{minutes}m {secs}s"
    return f"{secs}s"


_metrics = ServerMetrics()


def get_metrics() -> ServerMetrics:
    """Return the process-wide metrics."""
    return _metrics


def reset_metrics() -> None:
    """Start over with empty metrics."""
    global _metrics
    _metrics = ServerMetrics()


def record_call(
    tool: str,
    success: bool,
    region: str | None = None,
    elapsed_ms: float | None = None,
    result_count: int | None = None,
    error: str | None = None,
) -> None:
    """Record a finished tool call on the process-wide metrics."""
    _metrics.record_call(tool, success, region, elapsed_ms, result_count, error)
