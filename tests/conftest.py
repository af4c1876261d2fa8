import pytest

from modules.orders.repositories.memory_repository import InMemoryOrderRepository
from modules.orders.services import OrderLifecycleEngine
from shared.infrastructure.bus import InMemoryEventBus


@pytest.fixture(autouse=True)
def _use_db(db):
    """Automatically use the test database for all tests."""


@pytest.fixture()
def repository():
    """Fresh in-memory order repository."""
    return InMemoryOrderRepository()


@pytest.fixture()
def event_bus():
    """Isolated event bus so tests never see each other's subscribers."""
    return InMemoryEventBus()


@pytest.fixture()
def published(event_bus):
    """List collecting every order event published on ``event_bus``."""
    from modules.orders.events import ORDER_EVENTS

    captured = []

    class CapturingHandler:
        def handle(self, event) -> None:
            captured.append(event)

    handler = CapturingHandler()
    for event_class in ORDER_EVENTS:
        event_bus.subscribe(event_class, handler)
    return captured


@pytest.fixture()
def engine(repository, event_bus):
    return OrderLifecycleEngine(
        order_repository=repository,
        event_bus=event_bus,
        lock_timeout=2.0,
    )


@pytest.fixture()
def created_order(engine):
    """An order in CREATED status with no items."""
    return engine.create_order(customer_id="CUST-001", customer_name="John Doe")


@pytest.fixture()
def order_with_item(engine, created_order):
    """A CREATED order holding 2 x Widget @ 9.99."""
    return engine.add_item(created_order.id, "PROD-001", "Widget", 2, "9.99")


@pytest.fixture()
def order_in_status(engine):
    """Factory building an order (with one item) in the requested status."""
    from modules.orders.constants import OrderStatus

    def build(status):
        order = engine.create_order(customer_id="CUST-001", customer_name="John Doe")
        order = engine.add_item(order.id, "PROD-001", "Widget", 2, "9.99")
        if status == OrderStatus.CREATED:
            return order
        if status == OrderStatus.CANCELLED:
            return engine.cancel_order(order.id, "Customer request")
        order = engine.confirm_order(order.id)
        if status == OrderStatus.CONFIRMED:
            return order
        order = engine.process_order(order.id)
        if status == OrderStatus.PROCESSED:
            return order
        order = engine.ship_order(order.id, "TRK123456789")
        if status == OrderStatus.SHIPPED:
            return order
        return engine.deliver_order(order.id)

    return build
