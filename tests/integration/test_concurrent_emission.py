"""Producers emitting from other threads while assertions run on the loop."""

from __future__ import annotations

import asyncio
import threading

import pytest

from streamtest import MutableLiveValue, observe


def test_threaded_emitters_lose_no_values() -> None:
    live = MutableLiveValue()
    obs = observe(live)

    def _emit(base: int) -> None:
        for i in range(500):
            live.set_value(base + i)

    threads = [threading.Thread(target=_emit, args=(n * 1000,)) for n in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    obs.assert_value_count(2000)
    values = obs.values()
    for n in range(4):
        own = [v for v in values if n * 1000 <= v < n * 1000 + 500]
        # Per-emitter order is preserved.
        assert own == list(range(n * 1000, n * 1000 + 500))
    obs.dispose()


@pytest.mark.asyncio
async def test_post_value_from_worker_thread_reaches_observer() -> None:
    live = MutableLiveValue(loop=asyncio.get_running_loop())
    obs = observe(live)

    def _worker() -> None:
        for i in range(3):
            live.post_value(i)

    await asyncio.to_thread(_worker)
    # call_soon_threadsafe callbacks run on the next loop iterations.
    for _ in range(3):
        await asyncio.sleep(0)

    obs.assert_values(0, 1, 2)
    obs.dispose()


@pytest.mark.asyncio
async def test_live_and_stream_observers_side_by_side() -> None:
    live = MutableLiveValue()
    live_obs = observe(live)

    async def _mirror():
        for value in ("a", "b"):
            live.set_value(value)
            yield value.upper()

    stream_obs = observe(_mirror(), asyncio.get_running_loop())

    await stream_obs.assert_values("A", "B")
    await stream_obs.assert_complete()
    live_obs.assert_values("a", "b")

    live_obs.dispose()
    await stream_obs.aclose()
