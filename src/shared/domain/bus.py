"""Domain bus interfaces for in-process event handling.

Events reach the bus only after the change that raised them has been
saved; handlers therefore never see an event for a rolled-back change.
A handler that raises is logged by the bus and does not stop delivery
to the other handlers, nor reach the caller of the saved change.
"""

from __future__ import annotations

from typing import Generic, Iterable, Protocol, Type, TypeVar

from shared.domain.events import DomainEvent

E = TypeVar("E", bound=DomainEvent, contravariant=True)


class IEventHandler(Protocol, Generic[E]):
    """Handler interface for domain events."""

    def handle(self, event: E) -> None: ...


class IEventBus(Protocol):
    """Event bus interface used by the lifecycle engine."""

    def publish(self, event: DomainEvent) -> None: ...

    def publish_all(self, events: Iterable[DomainEvent]) -> None:
        """Deliver *events* in order."""
        ...

    def subscribe(self, event_class: Type[E], handler: IEventHandler[E]) -> None: ...

    def unsubscribe(self, event_class: Type[E], handler: IEventHandler[E]) -> None: ...
