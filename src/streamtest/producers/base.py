"""Producer interfaces.

Observers depend on these small protocols so any value source (a real
reactive library, an in-memory fake, an async generator) can be tested
without changing observer code.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Coroutine
from typing import Any, Protocol

from ..models import Subscription


class ValueObserver(Protocol):
    def on_receive(self, value: Any) -> None:
        """Handle a new current value."""


class SingleValueProducer(Protocol):
    def subscribe(self, observer: ValueObserver) -> Subscription:
        """Attach an observer; it is called with every value change until unsubscribed."""

    def unsubscribe(self, subscription: Subscription) -> None:
        """Detach a previously attached observer."""


class StreamProducer(Protocol):
    async def run(
        self,
        *,
        on_start: Callable[[], None],
        on_value: Callable[[Any], None],
        on_error: Callable[[BaseException], None],
        on_complete: Callable[[], None],
    ) -> None:
        """Emit values until exhausted, then signal exactly one of error or completion.

        `on_start` is called once when collection begins. Cancellation of the
        running task must propagate (no terminal signal is required then).
        """


class Scope(Protocol):
    """Anything that owns tasks: a running event loop or an `asyncio.TaskGroup`."""

    def create_task(self, coro: Coroutine[Any, Any, Any], *, name: str | None = None) -> asyncio.Task[Any]:
        """Schedule `coro` as a task bound to this scope."""
