"""Event handlers for Orders domain events."""

from __future__ import annotations

import structlog

from shared.domain.bus import IEventHandler
from shared.domain.events import DomainEvent

logger = structlog.get_logger(__name__)


class OrderEventLogHandler(IEventHandler[DomainEvent]):
    """Writes one structured log line per published order event."""

    def handle(self, event: DomainEvent) -> None:
        logger.info(
            "order.event.published",
            event_name=event.event_name,
            event_id=str(event.event_id),
            order_id=event.aggregate_id,
        )


class OrderCancelledHandler(IEventHandler[DomainEvent]):
    def handle(self, event: DomainEvent) -> None:
        logger.info(
            "order.event.cancelled",
            order_id=event.aggregate_id,
            reason=getattr(event, "reason", ""),
        )


order_event_log_handler = OrderEventLogHandler()
order_cancelled_handler = OrderCancelledHandler()
