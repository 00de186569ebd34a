"""Fan-out publish/subscribe primitive."""

from __future__ import annotations

import logging
import threading
from typing import Callable, Dict, Generic, Sequence, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Broadcaster(Generic[T]):
    """Deliver every published message to every current subscriber.

    Subscribers are called synchronously on the publishing thread. The
    subscriber set is copied under the lock before delivery, so callbacks may
    subscribe or unsubscribe (themselves included) while a publish is running.
    A callback that raises is logged and skipped; the rest still receive the
    message.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._subscribers: Dict[int, Callable[[T], None]] = {}
        self._next_token = 0

    def subscribe(self, callback: Callable[[T], None]) -> Callable[[], None]:
        """Register ``callback`` and return a function that removes it."""

        with self._lock:
            token = self._next_token
            self._next_token += 1
            self._subscribers[token] = callback

        def unsubscribe() -> None:
            with self._lock:
                self._subscribers.pop(token, None)

        return unsubscribe

    def publish(self, message: T) -> int:
        """Send ``message`` to all subscribers; return how many were called."""

        return self.publish_many([message])

    def publish_many(self, messages: Sequence[T]) -> int:
        """Send ``messages`` in order to the subscribers registered right now.

        The subscriber set is captured once, so a callback added partway
        through sees none of ``messages``.
        """

        with self._lock:
            targets = list(self._subscribers.values())
        for message in messages:
            for callback in targets:
                try:
                    callback(message)
                except Exception:
                    logger.exception("Subscriber %r failed", callback)
        return len(targets)

    def clear(self) -> None:
        with self._lock:
            self._subscribers.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._subscribers)


__all__ = ["Broadcaster"]
