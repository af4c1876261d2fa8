"""Order domain constants.

Defines status choices and the only legal edges of the order lifecycle
state machine:

    CREATED   --confirm--> CONFIRMED
    CONFIRMED --process--> PROCESSED
    PROCESSED --ship-----> SHIPPED
    SHIPPED   --deliver--> DELIVERED
    {CREATED, CONFIRMED, PROCESSED} --cancel--> CANCELLED
"""

from django.db import models


class OrderStatus(models.TextChoices):
    CREATED = "CREATED", "Created"
    CONFIRMED = "CONFIRMED", "Confirmed"
    PROCESSED = "PROCESSED", "Processed"
    SHIPPED = "SHIPPED", "Shipped"
    DELIVERED = "DELIVERED", "Delivered"
    CANCELLED = "CANCELLED", "Cancelled"


VALID_TRANSITIONS: dict[str, set[str]] = {
    OrderStatus.CREATED: {OrderStatus.CONFIRMED, OrderStatus.CANCELLED},
    OrderStatus.CONFIRMED: {OrderStatus.PROCESSED, OrderStatus.CANCELLED},
    OrderStatus.PROCESSED: {OrderStatus.SHIPPED, OrderStatus.CANCELLED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED},
    OrderStatus.DELIVERED: set(),
    OrderStatus.CANCELLED: set(),
}

TERMINAL_STATES: set[str] = {OrderStatus.DELIVERED, OrderStatus.CANCELLED}

# Line items may only change while the order is still being assembled.
ITEM_MUTABLE_STATES: set[str] = {OrderStatus.CREATED}

CANCELLABLE_STATES: set[str] = {
    OrderStatus.CREATED,
    OrderStatus.CONFIRMED,
    OrderStatus.PROCESSED,
}

# States that carry a tracking number.
SHIPPED_STATES: set[str] = {OrderStatus.SHIPPED, OrderStatus.DELIVERED}

# Largest quantity of a single line; fits a PositiveIntegerField on every backend.
MAX_ITEM_QUANTITY = 2_147_483_647
