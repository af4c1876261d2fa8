"""Order aggregate and its line items.

The ``Order`` exclusively owns its ``LineItem`` children.  Every mutator
runs its guard first and only then touches state, so a rejected call
leaves the aggregate exactly as it was.  ``total_amount`` is derived from
the items and cannot be assigned.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, List, Optional

from modules.orders import guards
from modules.orders.constants import TERMINAL_STATES, OrderStatus
from modules.orders.events import (
    ItemAddedToOrder,
    ItemRemovedFromOrder,
    OrderCancelled,
    OrderConfirmed,
    OrderCreated,
    OrderDelivered,
    OrderProcessed,
    OrderShipped,
)
from modules.orders.exceptions import InvalidOrderInput
from modules.orders.money import Money
from shared.domain.events import DomainEventMixin


@dataclass(frozen=True)
class LineItem:
    """A product line within an order.

    ``unit_price`` is a snapshot taken when the item is added.
    """

    product_id: str
    product_name: str
    quantity: int
    unit_price: Money

    @classmethod
    def create(
        cls,
        product_id: Any,
        product_name: Any,
        quantity: Any,
        unit_price: Any,
    ) -> LineItem:
        """Validate raw input and build a line item.

        Raises:
            InvalidOrderInput: empty strings, quantity < 1, price <= 0.
        """
        return cls(
            product_id=guards.require_text(product_id, "Product id"),
            product_name=guards.require_text(product_name, "Product name"),
            quantity=guards.require_quantity(quantity),
            unit_price=guards.require_unit_price(unit_price),
        )

    @property
    def subtotal(self) -> Money:
        return self.unit_price * self.quantity


@dataclass(frozen=True)
class StatusChange:
    """One entry of the append-only status audit trail."""

    old_status: Optional[str]
    new_status: str
    changed_at: datetime
    notes: str = ""


@dataclass(eq=False)
class Order(DomainEventMixin):
    """Order aggregate root."""

    id: str
    customer_id: str
    customer_name: str
    created_at: datetime
    updated_at: datetime
    customer_email: Optional[str] = None
    shipping_address: Optional[str] = None
    status: str = OrderStatus.CREATED
    items: List[LineItem] = field(default_factory=list)
    tracking_number: Optional[str] = None
    cancellation_reason: Optional[str] = None
    history: List[StatusChange] = field(default_factory=list)
    version: int = 0

    # ------------------------------------------------------------------
    # Factory
    # ------------------------------------------------------------------

    @classmethod
    def create(
        cls,
        order_id: str,
        customer_id: Any,
        customer_name: Any,
        now: datetime,
        customer_email: Optional[str] = None,
        shipping_address: Optional[str] = None,
    ) -> Order:
        """Open a new order in ``CREATED`` with no items.

        Optional contact fields are normalised: blank strings become ``None``.
        """
        order = cls(
            id=order_id,
            customer_id=guards.require_text(customer_id, "Customer id"),
            customer_name=guards.require_text(customer_name, "Customer name"),
            customer_email=_optional_text(customer_email),
            shipping_address=_optional_text(shipping_address),
            created_at=now,
            updated_at=now,
        )
        order.history.append(
            StatusChange(
                old_status=None,
                new_status=OrderStatus.CREATED,
                changed_at=now,
                notes="Order created",
            )
        )
        order.add_domain_event(
            OrderCreated(
                aggregate_id=order.id,
                customer_id=order.customer_id,
                customer_name=order.customer_name,
                customer_email=order.customer_email,
                shipping_address=order.shipping_address,
            )
        )
        return order

    # ------------------------------------------------------------------
    # Derived state
    # ------------------------------------------------------------------

    @property
    def total_amount(self) -> Money:
        return sum((item.subtotal for item in self.items), Money.zero())

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATES

    def find_item(self, product_id: str) -> Optional[LineItem]:
        for item in self.items:
            if item.product_id == product_id:
                return item
        return None

    def can_transition_to(self, new_status: str) -> bool:
        return guards.can_transition(self.status, new_status)

    # ------------------------------------------------------------------
    # Line items
    # ------------------------------------------------------------------

    def add_item(self, item: LineItem, now: datetime) -> None:
        guards.ensure_can_add_item(self, item)
        self.items.append(item)
        self.updated_at = now
        self.add_domain_event(
            ItemAddedToOrder(
                aggregate_id=self.id,
                product_id=item.product_id,
                product_name=item.product_name,
                quantity=item.quantity,
                unit_price=item.unit_price.amount,
            )
        )

    def remove_item(self, product_id: str, now: datetime) -> LineItem:
        guards.ensure_can_remove_item(self, product_id)
        removed = self.find_item(product_id)
        self.items = [item for item in self.items if item.product_id != product_id]
        self.updated_at = now
        self.add_domain_event(
            ItemRemovedFromOrder(aggregate_id=self.id, product_id=product_id)
        )
        return removed

    # ------------------------------------------------------------------
    # Status transitions
    # ------------------------------------------------------------------

    def confirm(self, now: datetime) -> None:
        guards.ensure_can_confirm(self)
        self._move_to(OrderStatus.CONFIRMED, now)
        self.add_domain_event(OrderConfirmed(aggregate_id=self.id))

    def process(self, now: datetime) -> None:
        guards.ensure_transition(self, OrderStatus.PROCESSED)
        self._move_to(OrderStatus.PROCESSED, now)
        self.add_domain_event(OrderProcessed(aggregate_id=self.id))

    def ship(self, tracking_number: Any, now: datetime) -> None:
        tracking_number = guards.ensure_can_ship(self, tracking_number)
        self.tracking_number = tracking_number
        self._move_to(OrderStatus.SHIPPED, now, notes=f"Tracking {tracking_number}")
        self.add_domain_event(
            OrderShipped(aggregate_id=self.id, tracking_number=tracking_number)
        )

    def deliver(self, now: datetime) -> None:
        guards.ensure_transition(self, OrderStatus.DELIVERED)
        self._move_to(OrderStatus.DELIVERED, now)
        self.add_domain_event(OrderDelivered(aggregate_id=self.id))

    def cancel(self, reason: Any, now: datetime) -> None:
        reason = guards.ensure_can_cancel(self, reason)
        self.cancellation_reason = reason
        self._move_to(OrderStatus.CANCELLED, now, notes=reason)
        self.add_domain_event(OrderCancelled(aggregate_id=self.id, reason=reason))

    def _move_to(self, new_status: str, now: datetime, notes: str = "") -> None:
        self.history.append(
            StatusChange(
                old_status=self.status,
                new_status=new_status,
                changed_at=now,
                notes=notes,
            )
        )
        self.status = new_status
        self.updated_at = now

    # ------------------------------------------------------------------
    # Display
    # ------------------------------------------------------------------

    def __str__(self) -> str:
        return f"{self.id} ({self.status})"


def _optional_text(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise InvalidOrderInput("Optional contact fields must be strings.")
    return value.strip() or None
