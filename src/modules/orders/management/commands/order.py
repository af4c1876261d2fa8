"""``manage.py order <action>``: drive the order lifecycle from a shell.

Examples::

    manage.py order create --customer-id CUST-001 --customer-name "John Doe"
    manage.py order add-item <order-id> --product-id PROD-001 \\
        --product-name Widget --quantity 2 --unit-price 9.99
    manage.py order confirm <order-id>
    manage.py order list --status CONFIRMED
"""

from __future__ import annotations

import json
from typing import Any, Dict

from django.core.management.base import BaseCommand, CommandError

from modules.orders.constants import OrderStatus
from modules.orders.dtos import OrderOutputDTO
from modules.orders.exceptions import OrderError
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.services import OrderLifecycleEngine

ACTIONS = (
    "create",
    "get",
    "list",
    "add-item",
    "remove-item",
    "confirm",
    "process",
    "ship",
    "cancel",
    "deliver",
)

# Actions that address an existing order.
ORDER_ACTIONS = set(ACTIONS) - {"create", "list"}


class Command(BaseCommand):
    help = "Create, inspect and move orders through their lifecycle."

    def add_arguments(self, parser):
        parser.add_argument("action", choices=ACTIONS)
        parser.add_argument("order_id", nargs="?", help="Target order id.")
        parser.add_argument("--customer-id")
        parser.add_argument("--customer-name")
        parser.add_argument("--customer-email")
        parser.add_argument("--shipping-address")
        parser.add_argument("--product-id")
        parser.add_argument("--product-name")
        parser.add_argument("--quantity", type=int)
        parser.add_argument("--unit-price")
        parser.add_argument("--tracking-number")
        parser.add_argument("--reason")
        parser.add_argument("--status", choices=OrderStatus.values)
        parser.add_argument(
            "--timeout",
            type=float,
            help="Seconds to wait for the order lock (default: ORDER_LOCK_TIMEOUT).",
        )

    def handle(self, *args, **options):
        action = options["action"]
        if action in ORDER_ACTIONS and not options["order_id"]:
            raise CommandError(f"'{action}' requires an order id.")

        engine = OrderLifecycleEngine(order_repository=OrderDjangoRepository())
        try:
            result = self._dispatch(engine, action, options)
        except OrderError as exc:
            raise CommandError(f"[{exc.code}] {exc}") from exc

        if isinstance(result, list):
            payload = [OrderOutputDTO.from_entity(o).model_dump(mode="json") for o in result]
        else:
            payload = OrderOutputDTO.from_entity(result).model_dump(mode="json")
        self.stdout.write(json.dumps(payload, indent=2))

    def _dispatch(
        self, engine: OrderLifecycleEngine, action: str, options: Dict[str, Any]
    ):
        order_id = options["order_id"]
        lock: Dict[str, Any] = {}
        if options["timeout"] is not None:
            lock["timeout"] = options["timeout"]

        if action == "create":
            return engine.create_order(
                options["customer_id"],
                options["customer_name"],
                customer_email=options["customer_email"],
                shipping_address=options["shipping_address"],
            )
        if action == "get":
            return engine.get_order(order_id)
        if action == "list":
            return engine.list_orders(status=options["status"])
        if action == "add-item":
            return engine.add_item(
                order_id,
                options["product_id"],
                options["product_name"],
                options["quantity"],
                options["unit_price"],
                **lock,
            )
        if action == "remove-item":
            return engine.remove_item(order_id, options["product_id"], **lock)
        if action == "confirm":
            return engine.confirm_order(order_id, **lock)
        if action == "process":
            return engine.process_order(order_id, **lock)
        if action == "ship":
            return engine.ship_order(order_id, options["tracking_number"], **lock)
        if action == "cancel":
            return engine.cancel_order(order_id, options["reason"], **lock)
        return engine.deliver_order(order_id, **lock)
