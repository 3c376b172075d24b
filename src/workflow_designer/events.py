from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Subscription:
    """Handle returned by ``subscribe``; release it to stop notifications.

    Releasing twice is a no-op. Usable as a context manager.
    """

    def __init__(self, release: Callable[[], None]) -> None:
        self._release: Callable[[], None] | None = release

    @property
    def active(self) -> bool:
        return self._release is not None

    def unsubscribe(self) -> None:
        release, self._release = self._release, None
        if release is not None:
            release()

    def __enter__(self) -> Subscription:
        return self

    def __exit__(self, *_exc: object) -> None:
        self.unsubscribe()


class ListenerSet(Generic[T]):
    """Ordered callbacks for one notification kind."""

    def __init__(self, name: str) -> None:
        self._name = name
        self._next_key = 0
        self._callbacks: dict[int, Callable[[T], None]] = {}
        self._subscriptions: dict[int, Subscription] = {}

    def subscribe(self, callback: Callable[[T], None]) -> Subscription:
        key = self._next_key
        self._next_key += 1
        self._callbacks[key] = callback
        subscription = Subscription(lambda: self._remove(key))
        self._subscriptions[key] = subscription
        return subscription

    def _remove(self, key: int) -> None:
        self._callbacks.pop(key, None)
        self._subscriptions.pop(key, None)

    def emit(self, payload: T) -> None:
        # Copy: a callback may unsubscribe itself.
        for callback in list(self._callbacks.values()):
            callback(payload)

    def clear(self) -> None:
        for subscription in list(self._subscriptions.values()):
            subscription.unsubscribe()
        logger.debug("Listeners released", extra={"listeners": self._name})

    def __len__(self) -> int:
        return len(self._callbacks)
