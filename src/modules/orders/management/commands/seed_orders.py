from __future__ import annotations

import random
from decimal import Decimal

from django.core.management.base import BaseCommand

from modules.orders.constants import OrderStatus
from modules.orders.entities import Order
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.services import OrderLifecycleEngine

CUSTOMERS = [
    ("CUST-001", "John Doe", "john.doe@example.com", "123 Main St, Springfield"),
    ("CUST-002", "Ana Souza", "ana@example.com", "45 Rua Augusta, Sao Paulo"),
    ("CUST-003", "Bruno Lima", "bruno@example.com", None),
    ("CUST-004", "Carla Mendes", None, "9 Harbour Rd, Lisbon"),
    ("CUST-005", "Daniel Costa", "daniel@example.com", "77 Elm Ave, Toronto"),
]

CATALOG = [
    ("PROD-001", "Widget", Decimal("9.99")),
    ("PROD-002", "Monitor 27\"", Decimal("1299.90")),
    ("PROD-003", "Mechanical Keyboard", Decimal("399.90")),
    ("PROD-004", "Gaming Mouse", Decimal("249.90")),
    ("PROD-005", "Office Desk", Decimal("899.00")),
    ("PROD-006", "Ergonomic Chair", Decimal("1499.00")),
    ("PROD-007", "A4 Paper", Decimal("29.90")),
    ("PROD-008", "Blue Pen", Decimal("4.90")),
]

TARGET_STATUSES = [
    OrderStatus.CREATED,
    OrderStatus.CONFIRMED,
    OrderStatus.PROCESSED,
    OrderStatus.SHIPPED,
    OrderStatus.DELIVERED,
    OrderStatus.CANCELLED,
]


class Command(BaseCommand):
    help = "Seed the database with demo orders in every lifecycle status."

    def add_arguments(self, parser):
        parser.add_argument(
            "--count",
            type=int,
            default=len(TARGET_STATUSES) * 2,
            help="Number of orders to create (default: two per status).",
        )
        parser.add_argument("--seed", type=int, default=42)

    def handle(self, *args, **options):
        random.seed(options["seed"])
        engine = OrderLifecycleEngine(order_repository=OrderDjangoRepository())
        self.stdout.write("Seeding demo orders...")

        per_status = {status: 0 for status in TARGET_STATUSES}
        for index in range(options["count"]):
            target = TARGET_STATUSES[index % len(TARGET_STATUSES)]
            order = self._seed_order(engine, index, target)
            per_status[order.status] += 1

        summary = ", ".join(f"{status}={count}" for status, count in per_status.items())
        self.stdout.write(self.style.SUCCESS(f"Seed completed: {summary}"))

    def _seed_order(
        self, engine: OrderLifecycleEngine, index: int, target: str
    ) -> Order:
        customer_id, name, email, address = CUSTOMERS[index % len(CUSTOMERS)]
        order = engine.create_order(customer_id, name, email, address)

        item_count = random.randint(1, 4)
        for product_id, product_name, price in random.sample(CATALOG, k=item_count):
            order = engine.add_item(
                order.id, product_id, product_name, random.randint(1, 3), price
            )

        if target == OrderStatus.CANCELLED:
            return engine.cancel_order(order.id, "Customer changed their mind")
        if target == OrderStatus.CREATED:
            return order

        order = engine.confirm_order(order.id)
        if target == OrderStatus.CONFIRMED:
            return order
        order = engine.process_order(order.id)
        if target == OrderStatus.PROCESSED:
            return order
        order = engine.ship_order(order.id, f"TRK{index + 1:09d}")
        if target == OrderStatus.SHIPPED:
            return order
        return engine.deliver_order(order.id)
