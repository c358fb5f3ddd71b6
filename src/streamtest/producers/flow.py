"""Cold stream producer over async iterables.

`FlowProducer` adapts an async iterable to the `StreamProducer` callback
contract:

- `on_start` fires when collection begins;
- each item goes to `on_value`, in order;
- an exception raised while iterating goes to `on_error`;
- normal exhaustion goes to `on_complete`.

Pass a zero-argument factory (e.g. an async generator function) to get a cold
producer that can be run more than once.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterable, AsyncIterator, Callable
from typing import Any

AsyncSource = AsyncIterable[Any] | Callable[[], AsyncIterable[Any]]


class FlowProducer:
    """Stream producer driven by an async iterable."""

    def __init__(self, source: AsyncSource) -> None:
        """Create a producer from an async iterable or a factory returning one."""
        self._source = source

    def _open(self) -> AsyncIterable[Any]:
        if isinstance(self._source, AsyncIterable):
            return self._source
        return self._source()

    async def run(
        self,
        *,
        on_start: Callable[[], None],
        on_value: Callable[[Any], None],
        on_error: Callable[[BaseException], None],
        on_complete: Callable[[], None],
    ) -> None:
        """Collect the source, forwarding items and the terminal signal."""
        on_start()
        try:
            async for item in self._open():
                on_value(item)
        except asyncio.CancelledError:
            raise
        except Exception as exc:  # noqa: BLE001 - producer errors are data for the observer
            on_error(exc)
            return
        on_complete()


def flow_of(*values: Any, delay_s: float = 0.0) -> FlowProducer:
    """Producer emitting `values` in order, sleeping `delay_s` before each one."""

    async def _gen() -> AsyncIterator[Any]:
        for value in values:
            if delay_s > 0:
                await asyncio.sleep(delay_s)
            yield value

    return FlowProducer(_gen)


def flow_error(error: BaseException, *values: Any, delay_s: float = 0.0) -> FlowProducer:
    """Producer emitting `values`, then failing with `error`."""

    async def _gen() -> AsyncIterator[Any]:
        for value in values:
            if delay_s > 0:
                await asyncio.sleep(delay_s)
            yield value
        if delay_s > 0:
            await asyncio.sleep(delay_s)
        raise error

    return FlowProducer(_gen)
