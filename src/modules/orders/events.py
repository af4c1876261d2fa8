"""Domain events for the Orders bounded context."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from shared.domain.events import DomainEvent


@dataclass(frozen=True, kw_only=True)
class OrderCreated(DomainEvent):
    """Raised when an order is created."""

    customer_id: str
    customer_name: str
    customer_email: Optional[str] = None
    shipping_address: Optional[str] = None


@dataclass(frozen=True, kw_only=True)
class ItemAddedToOrder(DomainEvent):
    """Raised when a line item is appended to an order."""

    product_id: str
    product_name: str
    quantity: int
    unit_price: Decimal


@dataclass(frozen=True, kw_only=True)
class ItemRemovedFromOrder(DomainEvent):
    """Raised when a line item is removed from an order."""

    product_id: str


@dataclass(frozen=True)
class OrderConfirmed(DomainEvent):
    """Raised when an order is confirmed."""


@dataclass(frozen=True)
class OrderProcessed(DomainEvent):
    """Raised when an order is processed."""


@dataclass(frozen=True, kw_only=True)
class OrderShipped(DomainEvent):
    """Raised when an order is handed to the carrier."""

    tracking_number: str


@dataclass(frozen=True)
class OrderDelivered(DomainEvent):
    """Raised when a shipped order is delivered."""


@dataclass(frozen=True, kw_only=True)
class OrderCancelled(DomainEvent):
    """Raised when an order is cancelled."""

    reason: str


ORDER_EVENTS = (
    OrderCreated,
    ItemAddedToOrder,
    ItemRemovedFromOrder,
    OrderConfirmed,
    OrderProcessed,
    OrderShipped,
    OrderDelivered,
    OrderCancelled,
)
