"""Integration tests for the ``order`` and ``seed_orders`` management commands."""

from __future__ import annotations

import json
from io import StringIO

import pytest
from django.core.management import call_command
from django.core.management.base import CommandError

from modules.orders.constants import OrderStatus
from modules.orders.models import OrderRecord

pytestmark = pytest.mark.integration


def run(*args, **options):
    out = StringIO()
    call_command("order", *args, stdout=out, **options)
    return json.loads(out.getvalue())


@pytest.fixture()
def order_id():
    created = run("create", customer_id="CUST-001", customer_name="John Doe")
    return created["id"]


class TestOrderCommand:
    def test_create(self):
        payload = run(
            "create",
            customer_id="CUST-001",
            customer_name="John Doe",
            customer_email="john@example.com",
        )
        assert payload["status"] == "CREATED"
        assert payload["total_amount"] == "0.00"
        assert payload["items"] == []
        assert payload["actions"]["can_add_items"] is True
        assert OrderRecord.objects.filter(id=payload["id"]).exists()

    def test_add_item_and_confirm(self, order_id):
        payload = run(
            "add-item",
            order_id,
            product_id="PROD-001",
            product_name="Widget",
            quantity=2,
            unit_price="9.99",
        )
        assert payload["total_amount"] == "19.98"

        payload = run("confirm", order_id)
        assert payload["status"] == "CONFIRMED"
        assert payload["actions"]["can_add_items"] is False

    def test_get(self, order_id):
        assert run("get", order_id)["id"] == order_id

    def test_list_with_status(self, order_id):
        run("cancel", order_id, reason="Customer request")
        run("create", customer_id="CUST-002", customer_name="Jane Roe")

        cancelled = run("list", status="CANCELLED")
        assert [o["id"] for o in cancelled] == [order_id]
        assert cancelled[0]["cancellation_reason"] == "Customer request"
        assert len(run("list")) == 2

    def test_remove_item(self, order_id):
        run(
            "add-item",
            order_id,
            product_id="PROD-001",
            product_name="Widget",
            quantity=1,
            unit_price="1.00",
        )
        payload = run("remove-item", order_id, product_id="PROD-001")
        assert payload["items"] == []

    def test_empty_confirm_reports_code(self, order_id):
        with pytest.raises(CommandError, match=r"\[EMPTY_ORDER\]"):
            run("confirm", order_id)

    def test_invalid_state_reports_code(self, order_id):
        with pytest.raises(CommandError, match=r"\[INVALID_STATE\]"):
            run("ship", order_id, tracking_number="TRK1")

    def test_unknown_order(self):
        with pytest.raises(CommandError, match=r"\[NOT_FOUND\]"):
            run("get", "missing")

    def test_missing_customer_name(self):
        with pytest.raises(CommandError, match=r"\[INVALID_INPUT\]"):
            run("create", customer_id="CUST-001")

    def test_order_id_required(self):
        with pytest.raises(CommandError, match="requires an order id"):
            run("confirm")


class TestSeedOrdersCommand:
    def test_seed_reaches_every_status(self):
        out = StringIO()
        call_command("seed_orders", count=12, seed=7, stdout=out)

        assert "Seed completed" in out.getvalue()
        assert OrderRecord.objects.count() == 12
        for status in OrderStatus.values:
            assert OrderRecord.objects.filter(status=status).count() == 2

    def test_seeded_totals_match_items(self):
        call_command("seed_orders", count=6, stdout=StringIO())
        for record in OrderRecord.objects.prefetch_related("items"):
            assert record.items.exists()
            assert record.total_amount == sum(i.subtotal for i in record.items.all())
