"""
Timing helpers for database calls.

Each measured operation produces one structured ``db_performance`` log record
(plus a ``db_error`` record when it fails), bucketed by latency so slow
queries are easy to filter for in the log stream.
"""

import logging
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, Mapping, MutableMapping, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Latency buckets in milliseconds
FAST_MS = 50
NORMAL_MS = 200
SLOW_MS = 500


@dataclass
class PerformanceMetric:
    operation: str
    duration: float
    success: bool
    timestamp: int
    route: Optional[str] = None


def categorize_duration(duration_ms: float) -> str:
    if duration_ms < FAST_MS:
        return "fast"
    if duration_ms < NORMAL_MS:
        return "normal"
    if duration_ms < SLOW_MS:
        return "slow"
    return "very_slow"


def log_db_performance(metric: PerformanceMetric) -> dict:
    fields = {
        "type": "db_performance",
        "operation": metric.operation,
        "duration_ms": round(metric.duration),
        "route": metric.route,
        "success": metric.success,
        "timestamp": metric.timestamp,
        "performance_category": categorize_duration(metric.duration),
    }
    logger.info("db_performance %s", metric.operation, extra={"fields": fields})
    return fields


async def measure_and_log(
    operation: Callable[[], Awaitable[T]],
    operation_name: str,
    route: Optional[str] = None,
    timings: Optional[MutableMapping[str, float]] = None,
) -> T:
    """Await ``operation`` and log how long it took, success or failure.

    When ``timings`` is given the duration (ms) is also stored under
    ``operation_name`` so it can be reported in response headers.
    """
    start = time.perf_counter()
    timestamp = int(time.time() * 1000)

    def record(success: bool) -> float:
        duration = (time.perf_counter() - start) * 1000
        if timings is not None:
            timings[operation_name] = duration
        log_db_performance(PerformanceMetric(
            operation=operation_name,
            duration=duration,
            success=success,
            timestamp=timestamp,
            route=route,
        ))
        return duration

    try:
        result = await operation()
    except Exception as e:
        duration = record(False)
        logger.error(
            "db_error %s",
            operation_name,
            extra={"fields": {
                "type": "db_error",
                "operation": operation_name,
                "duration_ms": round(duration),
                "route": route,
                "error": str(e) or type(e).__name__,
                "timestamp": timestamp,
            }},
        )
        raise

    record(True)
    return result


def add_timing_headers(response, timings: Mapping[str, float]):
    """Attach Server-Timing and X-DB-Time headers to a response."""
    server_timing = ", ".join(f"{name};dur={duration:.2f}" for name, duration in timings.items())
    if server_timing:
        response.headers["Server-Timing"] = server_timing

    total = sum(timings.values())
    response.headers["X-DB-Time"] = f"{total:.2f}"
    return response
