"""Unit tests for the order event handlers wired in OrdersConfig.ready()."""

from __future__ import annotations

import pytest

from modules.orders.events import ORDER_EVENTS, OrderCancelled, OrderConfirmed
from modules.orders.handlers import (
    OrderCancelledHandler,
    OrderEventLogHandler,
    order_cancelled_handler,
    order_event_log_handler,
)
from shared.infrastructure.bus import event_bus

pytestmark = pytest.mark.unit


class TestWiring:
    def test_log_handler_subscribed_to_every_order_event(self):
        for event_class in ORDER_EVENTS:
            assert order_event_log_handler in event_bus._handlers[event_class]

    def test_cancelled_handler_subscribed(self):
        assert order_cancelled_handler in event_bus._handlers[OrderCancelled]


class TestHandlers:
    def test_log_handler_writes_event(self, caplog):
        with caplog.at_level("INFO", logger="modules.orders.handlers"):
            OrderEventLogHandler().handle(OrderConfirmed(aggregate_id="order-42"))
        messages = " ".join(r.getMessage() for r in caplog.records)
        assert "order.event.published" in messages
        assert "order-42" in messages

    def test_cancelled_handler_logs_reason(self, caplog):
        with caplog.at_level("INFO", logger="modules.orders.handlers"):
            OrderCancelledHandler().handle(
                OrderCancelled(aggregate_id="order-42", reason="Out of stock")
            )
        messages = " ".join(r.getMessage() for r in caplog.records)
        assert "order.event.cancelled" in messages
        assert "Out of stock" in messages
