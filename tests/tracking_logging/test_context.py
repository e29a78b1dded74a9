"""Tests for logging context managers."""

import asyncio
import logging

import pytest

from trip_tracking.tracking_logging import ContextFilter, LogContext, log_context, log_trip_context


@pytest.fixture
def logger():
    logger = logging.getLogger("test.context")
    logger.setLevel(logging.DEBUG)
    return logger


@pytest.fixture
def captured_records(logger):
    """Capture log records passed through a ContextFilter."""
    records: list[logging.LogRecord] = []

    class RecordCapture(logging.Handler):
        def emit(self, record: logging.LogRecord) -> None:
            records.append(record)

    handler = RecordCapture()
    handler.addFilter(ContextFilter())
    logger.addHandler(handler)
    yield records
    logger.removeHandler(handler)


@pytest.mark.unit
class TestLogContext:
    def test_log_context_adds_extra_fields(self, logger, captured_records):
        with log_context(driver_id="driver-123", action="start"):
            logger.info("Test message")

        record = captured_records[0]
        assert record.driver_id == "driver-123"
        assert record.action == "start"

    def test_fields_removed_after_context_exits(self, logger, captured_records):
        with log_context(trip_id="trip-001"):
            pass
        logger.info("Outside")

        assert not hasattr(captured_records[0], "trip_id")
        assert LogContext.get() == {}

    def test_nested_contexts_restore_outer_fields(self, logger, captured_records):
        with log_context(trip_id="outer"):
            with log_context(trip_id="inner", action="complete"):
                logger.info("inner")
            logger.info("outer")

        assert captured_records[0].trip_id == "inner"
        assert captured_records[1].trip_id == "outer"
        assert not hasattr(captured_records[1], "action")

    def test_explicit_extra_wins_over_context(self, logger, captured_records):
        with log_context(trip_id="ctx"):
            logger.info("msg", extra={"trip_id": "explicit"})

        assert captured_records[0].trip_id == "explicit"

    def test_log_trip_context_sets_correlation_id(self, logger, captured_records):
        with log_trip_context("trip-777", action="start"):
            logger.info("msg")

        record = captured_records[0]
        assert record.trip_id == "trip-777"
        assert record.correlation_id == "trip-777"
        assert record.action == "start"

    def test_set_and_clear(self):
        LogContext.set(driver_id="d1")
        LogContext.set(trip_id="t1")
        assert LogContext.get() == {"driver_id": "d1", "trip_id": "t1"}
        LogContext.clear()
        assert LogContext.get() == {}

    async def test_concurrent_tasks_do_not_share_context(self, logger, captured_records):
        async def track(trip_id: str) -> None:
            with log_trip_context(trip_id):
                await asyncio.sleep(0)
                logger.info(trip_id)

        await asyncio.gather(track("a"), track("b"))

        assert {r.getMessage(): r.trip_id for r in captured_records} == {"a": "a", "b": "b"}
