"""Notification channel for state-machine snapshots."""

from __future__ import annotations

import logging
from typing import Callable, Generic, TypeVar

logger = logging.getLogger(__name__)

S = TypeVar("S")

Listener = Callable[[S], None]


class StateChannel(Generic[S]):
    """Fan-out of immutable state snapshots to subscribed listeners.

    Listeners are called synchronously, in subscription order, each time the
    owning state machine publishes a new snapshot.
    """

    def __init__(self) -> None:
        self._listeners: list[Listener[S]] = []

    def subscribe(self, listener: Listener[S]) -> Callable[[], None]:
        """Register *listener* and return a function that unregisters it."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def publish(self, state: S) -> None:
        for listener in list(self._listeners):
            listener(state)

    def __len__(self) -> int:
        return len(self._listeners)
