import pytest
import structlog
from prometheus_client import REGISTRY
from structlog.testing import capture_logs

from crewplan.core.config import Settings
from crewplan.core.observability import (
    get_correlation_id,
    get_logger,
    initialize_observability,
    monitor_performance,
    set_correlation_id,
    setup_metrics,
)


def _operations(operation_type: str, status: str) -> float:
    return (
        REGISTRY.get_sample_value(
            "crewplan_engine_operations_total",
            {"operation_type": operation_type, "status": status},
        )
        or 0.0
    )


def test_sync_success_is_counted():
    @monitor_performance("test_sync")
    def double(value):
        return value * 2

    before = _operations("test_sync", "success")

    assert double(4) == 8
    assert _operations("test_sync", "success") == before + 1


@pytest.mark.asyncio
async def test_async_failure_is_logged_and_reraised():
    @monitor_performance("test_async")
    async def explode():
        raise RuntimeError("boom")

    before = _operations("test_async", "error")

    with capture_logs() as logs:
        with pytest.raises(RuntimeError, match="boom"):
            await explode()

    assert _operations("test_async", "error") == before + 1
    [entry] = [log for log in logs if log["event"] == "Operation failed"]
    assert entry["log_level"] == "error"
    assert entry["error_type"] == "RuntimeError"
    assert entry["operation"] == "test_async"


def test_correlation_id_roundtrip():
    generated = set_correlation_id()
    assert get_correlation_id() == generated

    assert set_correlation_id("req-42") == "req-42"
    assert get_correlation_id() == "req-42"


def test_log_level_setting_filters_events():
    initialize_observability(Settings(LOG_LEVEL="WARNING", LOG_FORMAT="console"))
    logger = get_logger("crewplan.tests")

    with capture_logs() as logs:
        logger.info("Routine scan")
        logger.warning("Capacity warning")

    assert structlog.is_configured()
    assert [e["event"] for e in logs] == ["Capacity warning"]


def test_disabled_metrics_are_withdrawn_from_registry():
    @monitor_performance("test_toggle")
    def noop():
        return None

    noop()
    try:
        setup_metrics(Settings(ENABLE_METRICS=False))
        assert (
            REGISTRY.get_sample_value(
                "crewplan_engine_operations_total",
                {"operation_type": "test_toggle", "status": "success"},
            )
            is None
        )
    finally:
        setup_metrics(Settings(ENABLE_METRICS=True))

    assert _operations("test_toggle", "success") >= 1
