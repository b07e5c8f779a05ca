"""Listener records and the subscription handles that release them."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable

if TYPE_CHECKING:
    from .registry import ListenerRegistry

__all__ = ["ListenerRecord", "Subscription", "sort_key"]

Listener = Callable[..., Any]


@dataclass(frozen=True)
class ListenerRecord:
    """One registration. ``event`` is ``None`` for wildcard records."""

    id: int
    event: str | None
    callback: Listener
    priority: int = 0
    once: bool = False
    sequence: int = 0

    @property
    def wildcard(self) -> bool:
        return self.event is None


def sort_key(record: ListenerRecord) -> tuple[int, int]:
    """Priority descending, then registration order."""
    return (-record.priority, record.sequence)


class Subscription:
    """Handle returned by every subscribe call.

    Calling the handle (or :meth:`unsubscribe`) removes its record. Only the
    first call has an effect; later calls are silent no-ops.
    """

    __slots__ = ("_registry", "_record")

    def __init__(self, registry: "ListenerRegistry", record: ListenerRecord) -> None:
        self._registry = registry
        self._record = record

    @property
    def record(self) -> ListenerRecord:
        return self._record

    @property
    def event(self) -> str | None:
        return self._record.event

    @property
    def active(self) -> bool:
        """True while the record is still registered."""
        return self._registry.contains(self._record)

    def unsubscribe(self) -> bool:
        """Remove the record; return ``True`` only when this call removed it."""
        return self._registry.remove(self._record)

    def __call__(self) -> None:
        self.unsubscribe()

    def __repr__(self) -> str:
        target = "*" if self._record.wildcard else self._record.event
        state = "active" if self.active else "removed"
        return f"<Subscription {target!s} #{self._record.id} {state}>"
