"""Order lifecycle engine (Use Cases).

The engine is the only writer of orders.  Every mutation follows the same
unit of work:

    acquire per-order lock → load → guard → mutate copy → save → release
    → publish domain events

Guards run in memory before anything is written, so a rejected request
has no visible effect.  Mutations on different orders never contend;
mutations on the same order are serialized by ``OrderLockRegistry`` and,
across processes, by the repository's version check.

Failures (all subclasses of ``OrderError``):
- InvalidOrderInput, InvalidOrderStatus, EmptyOrder, DuplicateOrderItem,
  OrderNotFound, OrderItemNotFound, OrderBusy.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any, Callable, List, Optional

import structlog
import uuid6
from django.conf import settings
from django.utils import timezone

from modules.orders import guards
from modules.orders.constants import OrderStatus
from modules.orders.entities import LineItem, Order
from modules.orders.exceptions import InvalidOrderInput, OrderError, OrderNotFound
from modules.orders.locks import OrderLockRegistry
from shared.infrastructure.bus import event_bus as default_event_bus

if TYPE_CHECKING:
    from modules.orders.repositories.interfaces import IOrderRepository
    from shared.domain.bus import IEventBus

logger = structlog.get_logger(__name__)

# Sentinel so ``timeout=None`` can still mean "wait forever".
_DEFAULT_TIMEOUT: Any = object()


class OrderLifecycleEngine:
    """Application service for the order lifecycle.

    Receives its collaborators via constructor injection (DIP).
    ``lock_timeout`` is the default deadline, in seconds, for acquiring an
    order's lock; ``None`` waits indefinitely.  It defaults to the
    ``ORDER_LOCK_TIMEOUT`` setting.
    """

    def __init__(
        self,
        order_repository: IOrderRepository,
        event_bus: Optional[IEventBus] = None,
        lock_registry: Optional[OrderLockRegistry] = None,
        lock_timeout: Any = _DEFAULT_TIMEOUT,
        clock: Callable[[], datetime] = timezone.now,
    ) -> None:
        self._order_repo = order_repository
        self._event_bus = event_bus if event_bus is not None else default_event_bus
        self._locks = lock_registry if lock_registry is not None else OrderLockRegistry()
        if lock_timeout is _DEFAULT_TIMEOUT:
            lock_timeout = getattr(settings, "ORDER_LOCK_TIMEOUT", None)
        self._lock_timeout: Optional[float] = lock_timeout
        self._clock = clock

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def create_order(
        self,
        customer_id: str,
        customer_name: str,
        customer_email: Optional[str] = None,
        shipping_address: Optional[str] = None,
    ) -> Order:
        """Open a new order in ``CREATED`` with no items and a zero total.

        Raises:
            InvalidOrderInput: empty customer id or name.
        """
        order = Order.create(
            order_id=str(uuid6.uuid7()),
            customer_id=customer_id,
            customer_name=customer_name,
            customer_email=customer_email,
            shipping_address=shipping_address,
            now=self._clock(),
        )
        self._order_repo.save(order)
        events = order.pull_domain_events()

        logger.info("order.created", order_id=order.id, customer_id=order.customer_id)
        self._event_bus.publish_all(events)
        return order

    def add_item(
        self,
        order_id: str,
        product_id: str,
        product_name: str,
        quantity: int,
        unit_price: Any,
        timeout: Any = _DEFAULT_TIMEOUT,
    ) -> Order:
        """Append a line item to a ``CREATED`` order.

        Raises:
            OrderNotFound, InvalidOrderStatus, InvalidOrderInput,
            DuplicateOrderItem, OrderBusy.
        """

        def mutation(order: Order, now: datetime) -> None:
            # Status is judged before the payload, as for every guard.
            guards.ensure_items_mutable(order)
            order.add_item(
                LineItem.create(product_id, product_name, quantity, unit_price), now
            )

        return self._apply(order_id, "add_item", mutation, timeout)

    def remove_item(
        self, order_id: str, product_id: str, timeout: Any = _DEFAULT_TIMEOUT
    ) -> Order:
        """Remove a line item from a ``CREATED`` order.

        Raises:
            OrderNotFound, InvalidOrderStatus, OrderItemNotFound, OrderBusy.
        """
        return self._apply(
            order_id,
            "remove_item",
            lambda order, now: order.remove_item(product_id, now),
            timeout,
        )

    def confirm_order(self, order_id: str, timeout: Any = _DEFAULT_TIMEOUT) -> Order:
        """``CREATED → CONFIRMED``; the order must have at least one item."""
        return self._apply(
            order_id, "confirm", lambda order, now: order.confirm(now), timeout
        )

    def process_order(self, order_id: str, timeout: Any = _DEFAULT_TIMEOUT) -> Order:
        """``CONFIRMED → PROCESSED``."""
        return self._apply(
            order_id, "process", lambda order, now: order.process(now), timeout
        )

    def ship_order(
        self, order_id: str, tracking_number: str, timeout: Any = _DEFAULT_TIMEOUT
    ) -> Order:
        """``PROCESSED → SHIPPED``, recording the tracking number."""
        return self._apply(
            order_id,
            "ship",
            lambda order, now: order.ship(tracking_number, now),
            timeout,
        )

    def deliver_order(self, order_id: str, timeout: Any = _DEFAULT_TIMEOUT) -> Order:
        """``SHIPPED → DELIVERED``."""
        return self._apply(
            order_id, "deliver", lambda order, now: order.deliver(now), timeout
        )

    def cancel_order(
        self, order_id: str, reason: str, timeout: Any = _DEFAULT_TIMEOUT
    ) -> Order:
        """Cancel an order that has not shipped yet, recording the reason."""
        return self._apply(
            order_id,
            "cancel",
            lambda order, now: order.cancel(reason, now),
            timeout,
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_order(self, order_id: str) -> Order:
        """Retrieve a single order by ID.  Cheap and safe to poll.

        Raises:
            OrderNotFound: if the order does not exist.
        """
        order = self._order_repo.get_by_id(order_id)
        if order is None:
            raise OrderNotFound(f"Order {order_id} not found.")
        return order

    def list_orders(self, status: Optional[str] = None) -> List[Order]:
        """Return all orders in creation order, optionally filtered by status.

        Raises:
            InvalidOrderInput: *status* is not a known order status.
        """
        if status is not None and status not in OrderStatus.values:
            raise InvalidOrderInput(f"Unknown order status: {status!r}.")
        return self._order_repo.list(status=status)

    # ------------------------------------------------------------------
    # Unit of work
    # ------------------------------------------------------------------

    def _apply(
        self,
        order_id: str,
        operation: str,
        mutation: Callable[[Order, datetime], Any],
        timeout: Any,
    ) -> Order:
        if timeout is _DEFAULT_TIMEOUT:
            timeout = self._lock_timeout
        log = logger.bind(order_id=order_id, operation=operation)

        with self._locks.hold(order_id, timeout=timeout):
            order = self.get_order(order_id)
            previous_status = order.status
            try:
                mutation(order, self._clock())
            except OrderError as exc:
                log.warning(
                    "order.operation_rejected",
                    status=str(order.status),
                    error_code=exc.code,
                    reason=str(exc),
                )
                raise
            self._order_repo.save(order)
            events = order.pull_domain_events()

        log.info(
            "order.operation_applied",
            old_status=str(previous_status),
            new_status=str(order.status),
            item_count=len(order.items),
            total_amount=str(order.total_amount),
        )
        self._event_bus.publish_all(events)
        return order

