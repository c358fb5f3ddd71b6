"""Test observer for asynchronous multi-value stream producers.

Collection runs as a task inside an explicit scope (a running event loop or an
`asyncio.TaskGroup`). Two start-up modes:

- eager (`wait_for_delay=False`): the task is created at construction; the
  first assertion yields one loop tick so the producer runs up to its first
  real suspension;
- delay-aware (`wait_for_delay=True`): nothing runs until the first assertion,
  which launches collection and awaits the producer's start signal.

The start wait uses `HarnessConfig.init_timeout_s`, which is unbounded by
default: a producer that never signals start will hang the awaiting test.

Producer callbacks are expected on the event loop thread.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterable, Awaitable, Callable
from typing import Any

from .config import HarnessConfig
from .errors import CountMismatch, InitializationTimeout, NotComplete
from .models import InitializationState, Observation, TerminalState
from .producers.base import Scope, StreamProducer
from .producers.flow import FlowProducer
from .recorder import Recorder

logger = logging.getLogger(__name__)


class StreamTestObserver:
    """Records values and the terminal signal of a stream producer.

    All assertions are coroutines: each first makes sure collection has been
    initialized, then checks the recorded state and returns the observer::

        obs = observe(flow_of(1, 2, 3), asyncio.get_running_loop())
        await obs.assert_values(1, 2, 3)
        await obs.assert_complete()
        obs.dispose()
    """

    def __init__(
        self,
        producer: StreamProducer,
        scope: Scope,
        *,
        wait_for_delay: bool | None = None,
        config: HarnessConfig | None = None,
    ) -> None:
        """Create an observer; eager mode launches collection immediately."""
        self._config = config or HarnessConfig()
        self._producer = producer
        self._scope = scope
        self._wait_for_delay = self._config.wait_for_delay if wait_for_delay is None else wait_for_delay
        self._recorder = Recorder(name="stream-observer", log_values=self._config.log_values)

        self._state: InitializationState = "not_started"
        self._started = asyncio.Event()
        self._terminated = asyncio.Event()
        self._changed = asyncio.Event()
        self._ticked = False
        self._task: asyncio.Task[None] | None = None
        self._disposed = False
        self._init_failure: str | None = None

        if not self._wait_for_delay:
            self._launch()

    @property
    def state(self) -> InitializationState:
        return self._state

    @property
    def wait_for_delay(self) -> bool:
        return self._wait_for_delay

    @property
    def disposed(self) -> bool:
        return self._disposed

    @property
    def task(self) -> asyncio.Task[None] | None:
        """The collection task, once launched."""
        return self._task

    def _launch(self) -> None:
        self._state = "starting"
        self._task = self._scope.create_task(self._collect(), name="stream-test-observer")
        logger.debug("stream-observer: collection launched (wait_for_delay=%s)", self._wait_for_delay)

    async def _collect(self) -> None:
        try:
            await self._producer.run(
                on_start=self._on_start,
                on_value=self.on_receive,
                on_error=self.on_error,
                on_complete=self.on_complete,
            )
        except asyncio.CancelledError:
            logger.debug("stream-observer: collection cancelled")
            raise
        except Exception as exc:  # noqa: BLE001 - a raising producer is recorded as a failure
            self.on_error(exc)
        finally:
            # Nothing more can start; release anyone awaiting initialization.
            self._started.set()

    def _on_start(self) -> None:
        self._state = "started"
        self._started.set()
        logger.debug("stream-observer: producer started")

    async def _ensure_initialized(self) -> None:
        if self._init_failure is not None:
            raise InitializationTimeout(self._init_failure)
        if self._state == "not_started":
            if self._disposed:
                return
            self._launch()
        if self._wait_for_delay:
            if self._state != "started":
                await self._await_start()
        elif not self._ticked:
            self._ticked = True
            await asyncio.sleep(0)

    async def _await_start(self) -> None:
        timeout = self._config.init_timeout_s
        try:
            await asyncio.wait_for(self._started.wait(), timeout=timeout)
        except TimeoutError:
            # A producer that never started cannot recover; later assertions fail fast.
            self._init_failure = f"producer did not signal start within {timeout}s"
            if self._task is not None and not self._task.done():
                self._task.cancel()
            logger.warning("stream-observer: %s; collection cancelled", self._init_failure)
            raise InitializationTimeout(self._init_failure) from None

    # Signal path

    def on_receive(self, value: Any) -> None:
        """Record a value as-is (including None)."""
        if self._disposed:
            logger.warning("stream-observer: value emitted after dispose; ignored")
            return
        self._recorder.on_receive(value)
        self._changed.set()

    def on_error(self, error: BaseException) -> None:
        """Record a terminal error; only the first terminal signal counts."""
        if self._disposed:
            logger.warning("stream-observer: error %r after dispose; ignored", error)
            return
        self._recorder.on_error(error)
        self._terminated.set()
        self._changed.set()

    def on_complete(self) -> None:
        """Record completion unless an error (or completion) came first."""
        if self._disposed:
            logger.warning("stream-observer: completion after dispose; ignored")
            return
        self._recorder.on_complete()
        self._terminated.set()
        self._changed.set()

    # Assertions

    async def assert_no_value(self) -> StreamTestObserver:
        await self._ensure_initialized()
        self._recorder.assert_no_values()
        return self

    async def assert_no_values(self) -> StreamTestObserver:
        return await self.assert_no_value()

    async def assert_value_count(self, count: int) -> StreamTestObserver:
        Recorder.check_count(count)
        await self._ensure_initialized()
        self._recorder.assert_value_count(count)
        return self

    async def assert_values(self, *expected: Any) -> StreamTestObserver:
        """Compare the recorded values with `expected`, index by index."""
        await self._ensure_initialized()
        self._recorder.assert_values(*expected)
        return self

    async def assert_values_satisfy(self, predicate: Callable[[tuple[Any, ...]], bool]) -> StreamTestObserver:
        await self._ensure_initialized()
        self._recorder.assert_values_satisfy(predicate)
        return self

    async def assert_value(self, expected: Any) -> StreamTestObserver:
        """Check the first recorded value (a callable is used as a predicate)."""
        return await self.assert_value_at(0, expected)

    async def assert_value_at(self, index: int, expected: Any) -> StreamTestObserver:
        Recorder.check_index(index)
        await self._ensure_initialized()
        self._recorder.assert_value_at(index, expected)
        return self

    async def assert_error(
        self, expected: BaseException | type[BaseException] | Callable[[BaseException], bool]
    ) -> StreamTestObserver:
        """Check the captured error by instance (type + message), by class, or by predicate."""
        await self._ensure_initialized()
        self._recorder.assert_error(expected)
        return self

    async def assert_no_errors(self) -> StreamTestObserver:
        await self._ensure_initialized()
        self._recorder.assert_no_errors()
        return self

    async def assert_complete(self) -> StreamTestObserver:
        await self._ensure_initialized()
        self._recorder.assert_complete()
        return self

    async def assert_not_complete(self) -> StreamTestObserver:
        await self._ensure_initialized()
        self._recorder.assert_not_complete()
        return self

    async def values(self) -> tuple[Any, ...]:
        await self._ensure_initialized()
        return self._recorder.values()

    async def with_values(self, block: Callable[[tuple[Any, ...]], Any]) -> StreamTestObserver:
        await self._ensure_initialized()
        self._recorder.with_values(block)
        return self

    def snapshot(self) -> Observation:
        """Current recorded state, without initializing or yielding."""
        return self._recorder.snapshot()

    @property
    def terminal(self) -> TerminalState:
        return self._recorder.terminal

    # Waiting helpers

    async def await_terminal(self, *, timeout_s: float | None = None) -> StreamTestObserver:
        """Wait until the producer errors or completes."""
        await self._ensure_initialized()
        timeout = timeout_s if timeout_s is not None else self._config.await_timeout_s
        try:
            await asyncio.wait_for(self._terminated.wait(), timeout=timeout)
        except TimeoutError:
            raise NotComplete(
                f"no terminal signal within {timeout}s; terminal state is {self.terminal.describe()}"
            ) from None
        return self

    async def await_value_count(self, count: int, *, timeout_s: float | None = None) -> StreamTestObserver:
        """Wait until at least `count` values were recorded."""
        Recorder.check_count(count)
        await self._ensure_initialized()
        timeout = timeout_s if timeout_s is not None else self._config.await_timeout_s
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout
        while True:
            self._changed.clear()
            actual = self._recorder.value_count()
            if actual >= count:
                return self
            if self._disposed or self.terminal.is_terminal:
                raise CountMismatch(
                    f"expected at least {count} values, got {actual} before {self.terminal.describe()}"
                )
            remaining = deadline - loop.time()
            if remaining <= 0:
                raise CountMismatch(f"expected at least {count} values within {timeout}s, got {actual}")
            try:
                await asyncio.wait_for(self._changed.wait(), timeout=remaining)
            except TimeoutError:
                continue

    # Lifecycle

    def dispose(self) -> None:
        """Cancel collection and stop recording. The buffer is kept. Safe to call twice."""
        if self._disposed:
            return
        self._disposed = True
        self._recorder.close()
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._started.set()
        self._changed.set()
        logger.debug("stream-observer: disposed with %d values", self._recorder.value_count())

    async def aclose(self) -> None:
        """Dispose and wait for the collection task to finish unwinding."""
        self.dispose()
        if self._task is not None:
            await asyncio.gather(self._task, return_exceptions=True)

    async def __aenter__(self) -> StreamTestObserver:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()


def as_stream_producer(source: StreamProducer | AsyncIterable[Any]) -> StreamProducer:
    """Wrap a bare async iterable in a `FlowProducer`."""
    if isinstance(source, AsyncIterable):
        return FlowProducer(source)
    return source


def observe_stream(
    producer: StreamProducer | AsyncIterable[Any],
    scope: Scope,
    *,
    wait_for_delay: bool | None = None,
    config: HarnessConfig | None = None,
) -> StreamTestObserver:
    """Attach a new test observer to a stream producer running in `scope`."""
    return StreamTestObserver(as_stream_producer(producer), scope, wait_for_delay=wait_for_delay, config=config)


def launch_test(
    producer: StreamProducer | AsyncIterable[Any],
    scope: Scope,
    block: Callable[[StreamTestObserver], Awaitable[Any]],
    *,
    wait_for_delay: bool | None = None,
    config: HarnessConfig | None = None,
) -> asyncio.Task[None]:
    """Run `block` against a fresh observer in a new task; return the task.

    The observer is disposed when `block` finishes, fails or is cancelled.
    Assertion failures surface when the returned task is awaited.
    """

    async def _run() -> None:
        observer = observe_stream(producer, scope, wait_for_delay=wait_for_delay, config=config)
        try:
            await block(observer)
        finally:
            await observer.aclose()

    return scope.create_task(_run(), name="stream-test")
