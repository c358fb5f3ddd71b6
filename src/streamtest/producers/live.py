"""In-memory "latest value holder" producer.

`MutableLiveValue` mirrors the LiveData contract observers are written
against:

- it holds one current value (or none until first set);
- a new subscriber immediately receives the current value, if any;
- `set_value()` dispatches synchronously to every subscriber, in subscription order;
- concurrent `set_value()` calls are serialized, so every observer sees updates
  in the order they were stored;
- `post_value()` hands the update to the owning event loop from any thread.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from typing import Any

from ..models import Subscription
from .base import ValueObserver

logger = logging.getLogger(__name__)

_UNSET: Any = object()


class MutableLiveValue:
    """A single-value producer with replay-on-subscribe semantics."""

    def __init__(self, value: Any = _UNSET, *, loop: asyncio.AbstractEventLoop | None = None) -> None:
        """Create a holder, optionally with an initial value.

        Args:
            value: Initial value (omit to start empty).
            loop: Event loop `post_value()` dispatches on.
        """
        self._lock = threading.Lock()
        # Held across store and dispatch; reentrant so observers may set values.
        self._dispatch_lock = threading.RLock()
        self._value = value
        self._version = 0 if value is _UNSET else 1
        self._subscriptions: dict[int, Subscription] = {}
        self._loop = loop

    @property
    def value(self) -> Any:
        """Current value, or None if nothing was ever set."""
        with self._lock:
            return None if self._value is _UNSET else self._value

    @property
    def version(self) -> int:
        """Number of values set so far."""
        with self._lock:
            return self._version

    @property
    def has_observers(self) -> bool:
        with self._lock:
            return bool(self._subscriptions)

    def subscribe(self, observer: ValueObserver) -> Subscription:
        """Attach an observer and replay the current value to it."""
        subscription = Subscription(producer=self, observer=observer)
        with self._dispatch_lock:
            with self._lock:
                self._subscriptions[subscription.id] = subscription
                current = self._value
            if current is not _UNSET:
                observer.on_receive(current)
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        """Detach a subscription (unknown subscriptions are ignored)."""
        with self._lock:
            removed = self._subscriptions.pop(subscription.id, None)
        if removed is None:
            logger.debug("unsubscribe: subscription %d not attached", subscription.id)

    def set_value(self, value: Any) -> None:
        """Store `value` and dispatch it to every current subscriber."""
        with self._dispatch_lock:
            with self._lock:
                self._value = value
                self._version += 1
                observers = [s.observer for s in self._subscriptions.values()]
            for observer in observers:
                observer.on_receive(value)

    def post_value(self, value: Any) -> None:
        """Schedule `set_value(value)` on the bound loop (thread-safe)."""
        if self._loop is None:
            raise RuntimeError("post_value requires MutableLiveValue(loop=...)")
        self._loop.call_soon_threadsafe(self.set_value, value)
