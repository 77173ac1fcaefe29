"""
Observability Infrastructure

Structured logging and Prometheus metrics for the scheduling engine.
"""

import contextvars
import functools
import inspect
import logging
import sys
import time
import uuid
from collections.abc import Callable
from typing import Any, TypeVar

import structlog
from prometheus_client import REGISTRY, Counter, Histogram

from .config import Settings, settings

# Context variables for correlation tracking
correlation_id_var: contextvars.ContextVar[str] = contextvars.ContextVar(
    "correlation_id", default=""
)

F = TypeVar("F", bound=Callable[..., Any])

# Prometheus metrics
ENGINE_OPERATIONS = Counter(
    "crewplan_engine_operations_total",
    "Total scheduling engine operations",
    ["operation_type", "status"],
)

ENGINE_DURATION = Histogram(
    "crewplan_engine_operation_duration_seconds",
    "Scheduling engine operation duration",
    ["operation_type"],
)

CONFLICTS_DETECTED = Counter(
    "crewplan_conflicts_detected_total",
    "Conflicts produced by full scans",
    ["conflict_type", "severity"],
)

SCAN_CACHE_LOOKUPS = Counter(
    "crewplan_scan_cache_lookups_total",
    "Conflict scan cache lookups",
    ["result"],
)

RESOLUTIONS_APPLIED = Counter(
    "crewplan_resolutions_applied_total",
    "Resolution application attempts",
    ["action", "status"],
)

_COLLECTORS = (
    ENGINE_OPERATIONS,
    ENGINE_DURATION,
    CONFLICTS_DETECTED,
    SCAN_CACHE_LOOKUPS,
    RESOLUTIONS_APPLIED,
)
_metrics_registered = True


class CorrelationIdProcessor:
    """Structlog processor to add correlation ID to all log entries."""

    def __call__(
        self, logger: Any, name: str, event_dict: dict[str, Any]
    ) -> dict[str, Any]:
        correlation_id = correlation_id_var.get("")
        if correlation_id:
            event_dict["correlation_id"] = correlation_id
        return event_dict


def setup_structured_logging(config: Settings | None = None) -> None:
    """Configure structured logging with JSON output and correlation tracking."""
    config = config or settings
    log_level = getattr(logging, config.LOG_LEVEL.upper(), logging.INFO)

    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        CorrelationIdProcessor(),
        structlog.processors.TimeStamper(fmt="ISO"),
        structlog.processors.add_log_level,
        structlog.stdlib.add_logger_name,
    ]

    if config.LOG_FORMAT == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(
            structlog.dev.ConsoleRenderer(colors=config.ENVIRONMENT == "local")
        )

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=log_level,
    )


def setup_metrics(config: Settings | None = None) -> None:
    """Expose the engine metrics on the default registry, or withdraw them."""
    global _metrics_registered
    config = config or settings
    if config.ENABLE_METRICS == _metrics_registered:
        return

    for collector in _COLLECTORS:
        if config.ENABLE_METRICS:
            REGISTRY.register(collector)
        else:
            REGISTRY.unregister(collector)
    _metrics_registered = config.ENABLE_METRICS


def initialize_observability(config: Settings | None = None) -> None:
    """Initialize all observability components."""
    config = config or settings
    setup_structured_logging(config)
    setup_metrics(config)

    get_logger("observability").info(
        "Observability system initialized",
        log_format=config.LOG_FORMAT,
        log_level=config.LOG_LEVEL,
        metrics_enabled=config.ENABLE_METRICS,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)


def set_correlation_id(correlation_id: str | None = None) -> str:
    """Set correlation ID for request tracking."""
    if correlation_id is None:
        correlation_id = str(uuid.uuid4())

    correlation_id_var.set(correlation_id)
    return correlation_id


def get_correlation_id() -> str:
    """Get current correlation ID."""
    return correlation_id_var.get("")


def monitor_performance(operation_type: str) -> Callable[[F], F]:
    """Decorator to monitor function performance with metrics and logging."""

    def decorator(func: F) -> F:
        logger = get_logger(func.__module__)

        def _record(status: str, started: float, error: Exception | None = None) -> None:
            duration = time.perf_counter() - started
            ENGINE_OPERATIONS.labels(operation_type=operation_type, status=status).inc()
            ENGINE_DURATION.labels(operation_type=operation_type).observe(duration)
            if error is None:
                logger.debug(
                    "Operation completed",
                    operation=operation_type,
                    function=func.__name__,
                    duration_seconds=duration,
                )
            else:
                logger.error(
                    "Operation failed",
                    operation=operation_type,
                    function=func.__name__,
                    duration_seconds=duration,
                    error=str(error),
                    error_type=type(error).__name__,
                )

        @functools.wraps(func)
        async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
            started = time.perf_counter()
            try:
                result = await func(*args, **kwargs)
            except Exception as e:
                _record("error", started, e)
                raise
            _record("success", started)
            return result

        @functools.wraps(func)
        def sync_wrapper(*args: Any, **kwargs: Any) -> Any:
            started = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                _record("error", started, e)
                raise
            _record("success", started)
            return result

        if inspect.iscoroutinefunction(func):
            return async_wrapper  # type: ignore[return-value]
        return sync_wrapper  # type: ignore[return-value]

    return decorator
