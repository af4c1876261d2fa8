"""In-memory implementation of the Order repository.

Thread-safe.  Orders are deep-copied on the way in and on the way out, so
callers can never reach into stored state and a reader always gets a
complete snapshot of the last successful save.
"""

from __future__ import annotations

import copy
import threading
from typing import Dict, List, Optional

import structlog

from modules.orders.entities import Order
from modules.orders.exceptions import ConcurrentOrderUpdate
from modules.orders.repositories.interfaces import IOrderRepository

logger = structlog.get_logger(__name__)


class InMemoryOrderRepository(IOrderRepository):
    """Dict-backed Order repository; iteration order is creation order."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._orders: Dict[str, Order] = {}

    def get_by_id(self, id: str) -> Optional[Order]:
        with self._lock:
            stored = self._orders.get(id)
            return copy.deepcopy(stored) if stored is not None else None

    def list(self, status: Optional[str] = None) -> List[Order]:
        with self._lock:
            snapshot = [
                copy.deepcopy(order)
                for order in self._orders.values()
                if status is None or order.status == status
            ]
        return snapshot

    def save(self, entity: Order) -> Order:
        with self._lock:
            stored = self._orders.get(entity.id)
            stored_version = stored.version if stored is not None else 0
            if stored_version != entity.version:
                logger.warning(
                    "order.stale_write",
                    order_id=entity.id,
                    expected_version=entity.version,
                    stored_version=stored_version,
                )
                raise ConcurrentOrderUpdate(
                    f"Order {entity.id} was modified concurrently "
                    f"(expected version {entity.version}, found {stored_version})."
                )

            entity.version += 1
            snapshot = copy.deepcopy(entity)
            snapshot.clear_domain_events()
            self._orders[entity.id] = snapshot

        logger.debug("order.saved", order_id=entity.id, version=entity.version)
        return entity

    def __len__(self) -> int:
        with self._lock:
            return len(self._orders)
