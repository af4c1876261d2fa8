"""Django ORM implementation of the Order repository.

Satisfies ``IOrderRepository`` using Django's QuerySet API.
``save`` runs in ``transaction.atomic()`` so the order row, its item rows,
new history rows and the outbox rows for its pending domain events are
committed together or not at all.

Concurrency control is optimistic: the order row carries a ``version``
and updates are conditional on it (``UPDATE ... WHERE version = n``), so
writers in other processes cannot overwrite each other.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import structlog
from django.conf import settings
from django.db import IntegrityError, transaction

from modules.core.models import OutboxEvent
from modules.orders.entities import LineItem, Order, StatusChange
from modules.orders.exceptions import ConcurrentOrderUpdate
from modules.orders.models import OrderItemRecord, OrderRecord, OrderStatusHistory
from modules.orders.money import Money
from modules.orders.repositories.interfaces import IOrderRepository

logger = structlog.get_logger(__name__)


class OrderDjangoRepository(IOrderRepository):
    """Concrete Order repository backed by Django ORM."""

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def get_by_id(self, id: str) -> Optional[Order]:
        """Load the aggregate with items and history (3 queries, no N+1)."""
        with transaction.atomic():
            record = (
                OrderRecord.objects.prefetch_related("items", "status_history")
                .filter(id=id)
                .first()
            )
            return _to_entity(record) if record is not None else None

    def list(self, status: Optional[str] = None) -> List[Order]:
        """List orders in creation order with eager-loaded relations."""
        queryset = OrderRecord.objects.prefetch_related("items", "status_history")
        if status is not None:
            queryset = queryset.filter(status=status)
        with transaction.atomic():
            return [_to_entity(record) for record in queryset.order_by("created_at", "id")]

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    def save(self, entity: Order) -> Order:
        """Persist the aggregate with a compare-and-swap on ``version``."""
        new_version = entity.version + 1
        try:
            with transaction.atomic():
                if entity.version == 0:
                    OrderRecord.objects.create(
                        **_order_fields(entity),
                        id=entity.id,
                        version=new_version,
                        created_at=entity.created_at,
                    )
                else:
                    updated = OrderRecord.objects.filter(
                        id=entity.id, version=entity.version
                    ).update(**_order_fields(entity), version=new_version)
                    if not updated:
                        raise self._stale(entity)

                self._replace_items(entity)
                self._append_history(entity)
                event_count = self._write_outbox(entity)
        except IntegrityError as exc:
            # Two creators raced on the same id.
            raise self._stale(entity) from exc

        entity.version = new_version
        logger.info(
            "order.saved",
            order_id=entity.id,
            version=entity.version,
            event_count=event_count,
        )
        return entity

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _replace_items(entity: Order) -> None:
        OrderItemRecord.objects.filter(order_id=entity.id).delete()
        # Objects are saved one by one so OrderItemRecord.save keeps subtotal in sync.
        for position, item in enumerate(entity.items):
            OrderItemRecord(
                order_id=entity.id,
                position=position,
                product_id=item.product_id,
                product_name=item.product_name,
                quantity=item.quantity,
                unit_price=item.unit_price.amount,
            ).save()

    @staticmethod
    def _append_history(entity: Order) -> None:
        persisted = OrderStatusHistory.objects.filter(order_id=entity.id).count()
        OrderStatusHistory.objects.bulk_create(
            [
                OrderStatusHistory(
                    order_id=entity.id,
                    sequence=sequence,
                    old_status=change.old_status,
                    new_status=change.new_status,
                    notes=change.notes,
                    changed_at=change.changed_at,
                )
                for sequence, change in enumerate(entity.history)
                if sequence >= persisted
            ]
        )

    @staticmethod
    def _write_outbox(entity: Order) -> int:
        topic = getattr(settings, "ORDER_EVENTS_TOPIC", "orders")
        rows = OutboxEvent.objects.bulk_create(
            [OutboxEvent.from_domain_event(event, topic) for event in entity.domain_events]
        )
        return len(rows)

    @staticmethod
    def _stale(entity: Order) -> ConcurrentOrderUpdate:
        logger.warning(
            "order.stale_write",
            order_id=entity.id,
            expected_version=entity.version,
        )
        return ConcurrentOrderUpdate(
            f"Order {entity.id} was modified concurrently "
            f"(expected version {entity.version})."
        )


# ---------------------------------------------------------------------------
# Mapping
# ---------------------------------------------------------------------------


def _order_fields(entity: Order) -> Dict[str, Any]:
    return {
        "customer_id": entity.customer_id,
        "customer_name": entity.customer_name,
        "customer_email": entity.customer_email,
        "shipping_address": entity.shipping_address,
        "status": str(entity.status),
        "total_amount": entity.total_amount.amount,
        "tracking_number": entity.tracking_number,
        "cancellation_reason": entity.cancellation_reason,
        "updated_at": entity.updated_at,
    }


def _to_entity(record: OrderRecord) -> Order:
    return Order(
        id=record.id,
        customer_id=record.customer_id,
        customer_name=record.customer_name,
        customer_email=record.customer_email,
        shipping_address=record.shipping_address,
        status=record.status,
        items=[
            LineItem(
                product_id=item.product_id,
                product_name=item.product_name,
                quantity=item.quantity,
                unit_price=Money.of(item.unit_price),
            )
            for item in record.items.all()
        ],
        tracking_number=record.tracking_number,
        cancellation_reason=record.cancellation_reason,
        history=[
            StatusChange(
                old_status=change.old_status,
                new_status=change.new_status,
                changed_at=change.changed_at,
                notes=change.notes,
            )
            for change in record.status_history.all()
        ],
        created_at=record.created_at,
        updated_at=record.updated_at,
        version=record.version,
    )

