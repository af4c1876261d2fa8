"""End-to-end checks for the structlog JSON logging pipeline."""

import io
import json
import logging

import pytest
import structlog


@pytest.fixture()
def json_stream():
    """Attach a stream handler using the configured JSON formatter to the root logger."""
    formatter = next(
        handler.formatter
        for handler in logging.getLogger().handlers
        if isinstance(handler.formatter, structlog.stdlib.ProcessorFormatter)
    )
    stream = io.StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(formatter)
    root = logging.getLogger()
    root.addHandler(handler)
    try:
        yield stream
    finally:
        root.removeHandler(handler)


def _lines(stream):
    return [json.loads(line) for line in stream.getvalue().splitlines() if line.strip()]


class TestJsonLogging:
    def test_structlog_event_rendered_as_json(self, json_stream):
        structlog.get_logger("modules.orders.services").info(
            "order.operation_applied", order_id="order-1", new_status="CONFIRMED"
        )
        [line] = _lines(json_stream)
        assert line["event"] == "order.operation_applied"
        assert line["order_id"] == "order-1"
        assert line["level"] == "info"
        assert line["logger"] == "modules.orders.services"
        assert "timestamp" in line

    def test_stdlib_logger_goes_through_same_pipeline(self, json_stream):
        logging.getLogger("modules.orders").warning("plain message")
        [line] = _lines(json_stream)
        assert line["event"] == "plain message"
        assert line["level"] == "warning"

    def test_customer_email_masked_in_output(self, json_stream):
        structlog.get_logger("modules.orders.services").info(
            "order.created", customer_email="john.doe@example.com"
        )
        output = json_stream.getvalue()
        assert "john.doe@example.com" not in output
        assert "***MASKED***" in output

    def test_engine_logs_applied_operation(self, json_stream, engine, order_with_item):
        engine.confirm_order(order_with_item.id)
        events = [line["event"] for line in _lines(json_stream)]
        assert "order.operation_applied" in events
