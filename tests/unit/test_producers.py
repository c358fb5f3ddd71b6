from __future__ import annotations

import asyncio
import threading
from typing import Any

import pytest

from streamtest.producers import FlowProducer, MutableLiveValue, flow_error, flow_of


class _ListObserver:
    def __init__(self) -> None:
        self.received: list[Any] = []

    def on_receive(self, value: Any) -> None:
        self.received.append(value)


class _Callbacks:
    def __init__(self) -> None:
        self.events: list[tuple[str, Any]] = []

    def kwargs(self) -> dict[str, Any]:
        return {
            "on_start": lambda: self.events.append(("start", None)),
            "on_value": lambda v: self.events.append(("value", v)),
            "on_error": lambda e: self.events.append(("error", e)),
            "on_complete": lambda: self.events.append(("complete", None)),
        }


def test_live_value_starts_empty_and_tracks_version() -> None:
    live = MutableLiveValue()
    assert live.value is None
    assert live.version == 0

    live.set_value("a")
    live.set_value("b")
    assert live.value == "b"
    assert live.version == 2


def test_live_value_dispatches_in_subscription_order() -> None:
    live = MutableLiveValue()
    order: list[str] = []

    class _Named:
        def __init__(self, name: str) -> None:
            self.name = name

        def on_receive(self, value: Any) -> None:
            order.append(f"{self.name}:{value}")

    live.subscribe(_Named("first"))
    live.subscribe(_Named("second"))
    live.set_value(1)

    assert order == ["first:1", "second:1"]


def test_live_value_replays_and_unsubscribes() -> None:
    live = MutableLiveValue(0)
    observer = _ListObserver()

    sub = live.subscribe(observer)
    live.set_value(1)
    live.unsubscribe(sub)
    live.set_value(2)
    live.unsubscribe(sub)

    assert observer.received == [0, 1]
    assert sub.producer is live
    assert sub.observer is observer


def test_subscriptions_have_distinct_ids() -> None:
    live = MutableLiveValue()
    a = live.subscribe(_ListObserver())
    b = live.subscribe(_ListObserver())
    assert a.id != b.id


def test_post_value_requires_loop() -> None:
    with pytest.raises(RuntimeError):
        MutableLiveValue().post_value(1)


@pytest.mark.asyncio
async def test_post_value_dispatches_on_loop() -> None:
    live = MutableLiveValue(loop=asyncio.get_running_loop())
    observer = _ListObserver()
    live.subscribe(observer)

    await asyncio.to_thread(live.post_value, "from-thread")
    await asyncio.sleep(0)

    assert observer.received == ["from-thread"]


@pytest.mark.asyncio
async def test_flow_of_signals_start_values_complete() -> None:
    callbacks = _Callbacks()

    await flow_of(1, 2).run(**callbacks.kwargs())

    assert callbacks.events == [("start", None), ("value", 1), ("value", 2), ("complete", None)]


@pytest.mark.asyncio
async def test_flow_error_signals_error_after_values() -> None:
    callbacks = _Callbacks()
    error = ValueError("nope")

    await flow_error(error, "a").run(**callbacks.kwargs())

    assert callbacks.events == [("start", None), ("value", "a"), ("error", error)]


@pytest.mark.asyncio
async def test_factory_source_is_cold() -> None:
    async def _gen():
        yield 1

    producer = FlowProducer(_gen)
    first, second = _Callbacks(), _Callbacks()
    await producer.run(**first.kwargs())
    await producer.run(**second.kwargs())

    assert first.events == second.events


@pytest.mark.asyncio
async def test_flow_cancellation_propagates_without_terminal_signal() -> None:
    callbacks = _Callbacks()

    async def _forever():
        yield "first"
        await asyncio.Event().wait()
        yield "never"

    task = asyncio.create_task(FlowProducer(_forever).run(**callbacks.kwargs()))
    await asyncio.sleep(0.01)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    assert callbacks.events == [("start", None), ("value", "first")]


def test_concurrent_set_value_dispatches_in_store_order() -> None:
    live = MutableLiveValue()
    observer = _ListObserver()
    live.subscribe(observer)

    def _writer(base: int) -> None:
        for i in range(200):
            live.set_value(base + i)

    threads = [threading.Thread(target=_writer, args=(n * 1000,)) for n in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(observer.received) == live.version == 800
    assert observer.received[-1] == live.value
