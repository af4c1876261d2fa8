"""Per-order mutual exclusion.

``OrderLockRegistry`` keeps one lock per order id.  Entries are reference
counted and dropped once nobody holds or waits for them, so the table only
grows with the number of orders being mutated right now.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Dict, Iterator, Optional

import structlog

from modules.orders.exceptions import OrderBusy

logger = structlog.get_logger(__name__)


@dataclass
class _LockEntry:
    lock: threading.Lock = field(default_factory=threading.Lock)
    users: int = 0


class OrderLockRegistry:
    """Keyed lock table: at most one holder per order id."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._entries: Dict[str, _LockEntry] = {}

    @contextmanager
    def hold(self, order_id: str, timeout: Optional[float] = None) -> Iterator[None]:
        """Hold the lock for *order_id* for the duration of the block.

        ``timeout`` is in seconds; ``None`` waits until the lock is free.

        Raises:
            OrderBusy: the lock was not acquired within ``timeout``.
        """
        entry = self._checkout(order_id)
        acquired = False
        try:
            if timeout is None:
                acquired = entry.lock.acquire()
            else:
                acquired = entry.lock.acquire(timeout=max(timeout, 0))
            if not acquired:
                logger.warning("order.lock_timeout", order_id=order_id, timeout=timeout)
                raise OrderBusy(
                    f"Order {order_id} is busy; lock not acquired within {timeout}s."
                )
            yield
        finally:
            if acquired:
                entry.lock.release()
            self._checkin(order_id, entry)

    def is_locked(self, order_id: str) -> bool:
        with self._guard:
            entry = self._entries.get(order_id)
            return entry is not None and entry.lock.locked()

    def __len__(self) -> int:
        with self._guard:
            return len(self._entries)

    def _checkout(self, order_id: str) -> _LockEntry:
        with self._guard:
            entry = self._entries.get(order_id)
            if entry is None:
                entry = self._entries[order_id] = _LockEntry()
            entry.users += 1
            return entry

    def _checkin(self, order_id: str, entry: _LockEntry) -> None:
        with self._guard:
            entry.users -= 1
            if entry.users == 0 and self._entries.get(order_id) is entry:
                del self._entries[order_id]
