"""Order DTOs for callers of the lifecycle engine.

Framework-agnostic, immutable (``frozen=True``) Pydantic v2 views of the
Order aggregate, used by the CLI and by any transport layer.

- ``LineItemOutputDTO``: one line item with its subtotal.
- ``StatusHistoryDTO``: one status history entry.
- ``OrderActionsDTO``: which operations the current status allows.
- ``OrderOutputDTO``: the full order.

``OrderActionsDTO`` is computed from ``modules.orders.guards``; UIs must
render their buttons from it instead of re-deriving the rules.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, List, Optional

from pydantic import BaseModel, ConfigDict

from modules.orders import guards

if TYPE_CHECKING:
    from modules.orders.entities import LineItem, Order, StatusChange


class LineItemOutputDTO(BaseModel):
    """Immutable DTO for a single order line item."""

    model_config = ConfigDict(frozen=True)

    product_id: str
    product_name: str
    quantity: int
    unit_price: Decimal
    subtotal: Decimal

    @classmethod
    def from_entity(cls, item: LineItem) -> LineItemOutputDTO:
        return cls(
            product_id=item.product_id,
            product_name=item.product_name,
            quantity=item.quantity,
            unit_price=item.unit_price.amount,
            subtotal=item.subtotal.amount,
        )


class StatusHistoryDTO(BaseModel):
    """Immutable DTO for an order status history entry."""

    model_config = ConfigDict(frozen=True)

    old_status: Optional[str]
    new_status: str
    notes: str
    changed_at: datetime

    @classmethod
    def from_entity(cls, change: StatusChange) -> StatusHistoryDTO:
        return cls(
            old_status=str(change.old_status) if change.old_status else None,
            new_status=str(change.new_status),
            notes=change.notes,
            changed_at=change.changed_at,
        )


class OrderActionsDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    can_add_items: bool
    can_remove_items: bool
    can_confirm: bool
    can_process: bool
    can_ship: bool
    can_cancel: bool
    can_deliver: bool

    @classmethod
    def from_entity(cls, order: Order) -> OrderActionsDTO:
        return cls(
            can_add_items=guards.can_add_items(order),
            can_remove_items=guards.can_remove_items(order),
            can_confirm=guards.can_confirm(order),
            can_process=guards.can_process(order),
            can_ship=guards.can_ship(order),
            can_cancel=guards.can_cancel(order),
            can_deliver=guards.can_deliver(order),
        )


class OrderOutputDTO(BaseModel):
    """Immutable DTO for a complete order."""

    model_config = ConfigDict(frozen=True)

    id: str
    customer_id: str
    customer_name: str
    customer_email: Optional[str]
    shipping_address: Optional[str]
    status: str
    total_amount: Decimal
    tracking_number: Optional[str]
    cancellation_reason: Optional[str]
    created_at: datetime
    updated_at: datetime
    items: List[LineItemOutputDTO]
    history: List[StatusHistoryDTO]
    actions: OrderActionsDTO

    @classmethod
    def from_entity(cls, order: Order) -> OrderOutputDTO:
        """Build an output DTO from an Order aggregate."""
        return cls(
            id=order.id,
            customer_id=order.customer_id,
            customer_name=order.customer_name,
            customer_email=order.customer_email,
            shipping_address=order.shipping_address,
            status=str(order.status),
            total_amount=order.total_amount.amount,
            tracking_number=order.tracking_number,
            cancellation_reason=order.cancellation_reason,
            created_at=order.created_at,
            updated_at=order.updated_at,
            items=[LineItemOutputDTO.from_entity(item) for item in order.items],
            history=[StatusHistoryDTO.from_entity(h) for h in order.history],
            actions=OrderActionsDTO.from_entity(order),
        )
