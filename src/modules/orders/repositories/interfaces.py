"""Order repository interface.

Extends ``IRepository[Order]`` with what the lifecycle engine needs:
status filtering and optimistic concurrency on save.

The engine depends exclusively on this contract (DIP).  Two
implementations ship with the project: ``InMemoryOrderRepository`` and
``OrderDjangoRepository``.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, List, Optional

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.orders.entities import Order


class IOrderRepository(IRepository["Order"]):
    """Repository contract for the Order aggregate root.

    The aggregate (order, line items, status history) is stored and
    loaded as a whole; readers never observe half of a save.
    """

    @abstractmethod
    def get_by_id(self, id: str) -> Optional[Order]:
        """Retrieve a detached copy of the order, or ``None``."""

    @abstractmethod
    def list(self, status: Optional[str] = None) -> List[Order]:
        """List orders in creation order, optionally filtered by status."""

    @abstractmethod
    def save(self, entity: Order) -> Order:
        """Persist the order with a compare-and-swap on ``version``.

        A new order has ``version == 0``.  The stored version must equal
        ``entity.version``; on success both are incremented.

        Raises:
            ConcurrentOrderUpdate: the stored order moved on since it was
                loaded, or an order with this id already exists.
        """
