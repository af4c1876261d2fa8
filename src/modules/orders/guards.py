"""Transition guards for the order lifecycle.

Two layers, both pure (no I/O, no mutation):

- ``can_*`` predicates answer whether an operation is legal for the
  order's current state.  Presentation layers project these, they never
  re-implement them.
- ``ensure_*`` / ``require_*`` checks raise the typed failure for the
  first violated condition.  Status is always checked before input.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from modules.orders.constants import (
    CANCELLABLE_STATES,
    ITEM_MUTABLE_STATES,
    MAX_ITEM_QUANTITY,
    VALID_TRANSITIONS,
    OrderStatus,
)
from modules.orders.exceptions import (
    DuplicateOrderItem,
    EmptyOrder,
    InvalidOrderInput,
    InvalidOrderStatus,
    OrderItemNotFound,
)
from modules.orders.money import MAX_AMOUNT, Money

if TYPE_CHECKING:
    from modules.orders.entities import LineItem, Order


# ---------------------------------------------------------------------------
# Predicates
# ---------------------------------------------------------------------------


def can_transition(current: str, target: str) -> bool:
    """Check whether *target* is a legal successor of *current*."""
    return target in VALID_TRANSITIONS.get(current, set())


def can_add_items(order: Order) -> bool:
    return order.status in ITEM_MUTABLE_STATES


def can_remove_items(order: Order) -> bool:
    return order.status in ITEM_MUTABLE_STATES and bool(order.items)


def can_confirm(order: Order) -> bool:
    return can_transition(order.status, OrderStatus.CONFIRMED) and bool(order.items)


def can_process(order: Order) -> bool:
    return can_transition(order.status, OrderStatus.PROCESSED)


def can_ship(order: Order) -> bool:
    return can_transition(order.status, OrderStatus.SHIPPED)


def can_cancel(order: Order) -> bool:
    return order.status in CANCELLABLE_STATES


def can_deliver(order: Order) -> bool:
    return can_transition(order.status, OrderStatus.DELIVERED)


# ---------------------------------------------------------------------------
# Input checks
# ---------------------------------------------------------------------------


def require_text(value: Any, field_name: str) -> str:
    """Return *value* stripped, or raise if it is not a non-blank string."""
    if not isinstance(value, str) or not value.strip():
        raise InvalidOrderInput(f"{field_name} is required.")
    return value.strip()


def require_quantity(quantity: Any) -> int:
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise InvalidOrderInput("Quantity must be an integer.")
    if quantity < 1:
        raise InvalidOrderInput("Quantity must be at least 1.")
    if quantity > MAX_ITEM_QUANTITY:
        raise InvalidOrderInput(f"Quantity must be at most {MAX_ITEM_QUANTITY}.")
    return quantity


def require_unit_price(unit_price: Any) -> Money:
    try:
        price = Money.of(unit_price)
    except (TypeError, ValueError, ArithmeticError) as exc:
        raise InvalidOrderInput(f"Invalid unit price: {exc}") from exc
    if price.is_zero:
        raise InvalidOrderInput("Unit price must be greater than zero.")
    return price


# ---------------------------------------------------------------------------
# State checks
# ---------------------------------------------------------------------------


def ensure_transition(order: Order, target: str) -> None:
    if not can_transition(order.status, target):
        raise InvalidOrderStatus(
            f"Cannot transition from {order.status} to {target}."
        )


def ensure_items_mutable(order: Order) -> None:
    if not can_add_items(order):
        raise InvalidOrderStatus(
            f"Cannot change items of an order in status {order.status}."
        )


def ensure_can_add_item(order: Order, item: LineItem) -> None:
    ensure_items_mutable(order)
    if order.find_item(item.product_id) is not None:
        raise DuplicateOrderItem(
            f"Product {item.product_id} is already in order {order.id}."
        )
    try:
        order.total_amount + item.subtotal
    except ValueError as exc:
        raise InvalidOrderInput(
            f"Line {item.product_id} would exceed the maximum amount of {MAX_AMOUNT}."
        ) from exc


def ensure_can_remove_item(order: Order, product_id: str) -> None:
    ensure_items_mutable(order)
    if order.find_item(product_id) is None:
        raise OrderItemNotFound(
            f"Product {product_id} is not in order {order.id}."
        )


def ensure_can_confirm(order: Order) -> None:
    ensure_transition(order, OrderStatus.CONFIRMED)
    if not order.items:
        raise EmptyOrder(f"Cannot confirm order {order.id} without items.")


def ensure_can_ship(order: Order, tracking_number: Any) -> str:
    ensure_transition(order, OrderStatus.SHIPPED)
    return require_text(tracking_number, "Tracking number")


def ensure_can_cancel(order: Order, reason: Any) -> str:
    if not can_cancel(order):
        raise InvalidOrderStatus(f"Cannot cancel order in status {order.status}.")
    return require_text(reason, "Cancellation reason")
