from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable, Generic, TypeVar

from menucal.core.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

Listener = Callable[[T], None]


class Observable(ABC, Generic[T]):
    """
    Minimal publish/subscribe helper for owned state objects.

    Subclasses implement `snapshot()` and call `_notify()` after every state
    change; each listener receives the fresh snapshot. A failing listener is
    logged and does not prevent the others from being called.
    """

    def __init__(self) -> None:
        self._listeners: list[Listener[T]] = []

    @abstractmethod
    def snapshot(self) -> T:
        """
        Current state handed to listeners.
        """

    def subscribe(self, listener: Listener[T]) -> Callable[[], None]:
        """
        Register a listener and return a callable that unregisters it.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        if not self._listeners:
            return
        value = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(value)
            except Exception:
                logger.exception("listener_failed", source=type(self).__name__)
