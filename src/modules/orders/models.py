"""Persistence models for the Order aggregate.

These rows back ``OrderDjangoRepository`` only; the lifecycle rules live
in ``modules.orders.entities`` and ``modules.orders.guards``.

- ``OrderRecord`` keeps the domain identity as its primary key and the
  domain timestamps verbatim (no ``auto_now``), plus an optimistic
  ``version`` counter.
- ``OrderItemRecord`` keeps the line position so item order survives a
  round trip.  ``subtotal`` is stored for reporting and always equals
  ``quantity * unit_price``.
- Amount columns use ``money.MAX_DIGITS`` so any ``Money`` fits and reads
  back unchanged.
- ``OrderStatusHistory`` is an append-only audit trail.
"""

from __future__ import annotations

from decimal import Decimal

from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

from modules.core.models import BaseModel
from modules.orders.constants import MAX_ITEM_QUANTITY, OrderStatus
from modules.orders.money import DECIMAL_PLACES, MAX_DIGITS


class OrderRecord(models.Model):
    """Stored state of an Order aggregate root."""

    id: models.CharField = models.CharField(primary_key=True, max_length=64)
    customer_id: models.CharField = models.CharField(max_length=255)
    customer_name: models.CharField = models.CharField(max_length=255)
    customer_email: models.CharField = models.CharField(  # noqa: DJ01
        max_length=255, null=True, blank=True
    )
    shipping_address: models.TextField = models.TextField(  # noqa: DJ01
        null=True, blank=True
    )
    status: models.CharField = models.CharField(
        max_length=20,
        choices=OrderStatus.choices,
        default=OrderStatus.CREATED,
    )
    total_amount: models.DecimalField = models.DecimalField(
        max_digits=MAX_DIGITS,
        decimal_places=DECIMAL_PLACES,
        default=Decimal("0.00"),
    )
    tracking_number: models.CharField = models.CharField(  # noqa: DJ01
        max_length=255, null=True, blank=True
    )
    cancellation_reason: models.TextField = models.TextField(  # noqa: DJ01
        null=True, blank=True
    )
    version: models.PositiveIntegerField = models.PositiveIntegerField(default=0)
    created_at: models.DateTimeField = models.DateTimeField()
    updated_at: models.DateTimeField = models.DateTimeField()

    class Meta:
        db_table = "orders"
        ordering = ["created_at", "id"]
        indexes = [
            models.Index(fields=["status"], name="orders_status_idx"),
            models.Index(fields=["created_at"], name="orders_created_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.id} ({self.status})"


class OrderItemRecord(BaseModel):
    """Stored line item of an order."""

    order: models.ForeignKey = models.ForeignKey(
        "orders.OrderRecord",
        on_delete=models.CASCADE,
        related_name="items",
    )
    position: models.PositiveIntegerField = models.PositiveIntegerField()
    product_id: models.CharField = models.CharField(max_length=255)
    product_name: models.CharField = models.CharField(max_length=255)
    quantity: models.PositiveIntegerField = models.PositiveIntegerField(
        validators=[MinValueValidator(1), MaxValueValidator(MAX_ITEM_QUANTITY)],
    )
    unit_price: models.DecimalField = models.DecimalField(
        max_digits=MAX_DIGITS,
        decimal_places=DECIMAL_PLACES,
    )
    subtotal: models.DecimalField = models.DecimalField(
        max_digits=MAX_DIGITS,
        decimal_places=DECIMAL_PLACES,
        editable=False,
    )

    class Meta:
        db_table = "order_items"
        ordering = ["position"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity__gte=1),
                name="order_items_quantity_positive",
            ),
            models.UniqueConstraint(
                fields=["order", "product_id"],
                name="order_items_unique_product",
            ),
        ]

    def save(self, *args, **kwargs) -> None:
        self.subtotal = self.quantity * self.unit_price
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return f"{self.product_name} x{self.quantity} (${self.subtotal})"


class OrderStatusHistory(BaseModel):
    """Append-only audit trail for order status transitions.

    ``sequence`` is the entry's index in the aggregate's history list.
    """

    order: models.ForeignKey = models.ForeignKey(
        "orders.OrderRecord",
        on_delete=models.CASCADE,
        related_name="status_history",
    )
    sequence: models.PositiveIntegerField = models.PositiveIntegerField()
    old_status: models.CharField = models.CharField(  # noqa: DJ01
        max_length=20,
        choices=OrderStatus.choices,
        null=True,
        blank=True,
    )
    new_status: models.CharField = models.CharField(
        max_length=20,
        choices=OrderStatus.choices,
    )
    notes: models.TextField = models.TextField(blank=True, default="")
    changed_at: models.DateTimeField = models.DateTimeField()

    class Meta:
        db_table = "order_status_history"
        ordering = ["sequence"]
        constraints = [
            models.UniqueConstraint(
                fields=["order", "sequence"],
                name="osh_order_sequence_unique",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.order_id} : {self.old_status} -> {self.new_status}"
