"""Order domain exceptions.

Raised by the guards and the lifecycle engine when a request cannot be
applied.  Every failure leaves the order untouched and is safe to retry.
Callers map ``code`` to their own status/message format.
"""

from __future__ import annotations


class OrderError(Exception):
    """Base class for all order lifecycle failures."""

    code = "ORDER_ERROR"


class InvalidOrderInput(OrderError):
    """A required field is missing or malformed."""

    code = "INVALID_INPUT"


class InvalidOrderStatus(OrderError):
    """The operation is not legal for the order's current status."""

    code = "INVALID_STATE"


class EmptyOrder(OrderError):
    """Confirmation was attempted on an order without line items."""

    code = "EMPTY_ORDER"


class DuplicateOrderItem(OrderError):
    """The order already has a line item for this product."""

    code = "DUPLICATE_ITEM"


class OrderNotFound(OrderError):
    """The requested order does not exist."""

    code = "NOT_FOUND"


class OrderItemNotFound(OrderError):
    """The order has no line item for the requested product."""

    code = "NOT_FOUND"


class OrderBusy(OrderError):
    """The order could not be locked before the caller's deadline."""

    code = "BUSY"


class ConcurrentOrderUpdate(OrderBusy):
    """The stored order changed since it was loaded (stale version)."""
