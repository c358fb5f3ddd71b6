"""Test observer for single-value ("latest value holder") producers."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from .config import HarnessConfig
from .models import Observation
from .producers.base import SingleValueProducer
from .recorder import Recorder

logger = logging.getLogger(__name__)


class SingleValueTestObserver:
    """Records every update of a single-value producer.

    The observer subscribes permanently at construction and stays attached
    until `dispose()`, independent of any owning scope. Assertions are
    synchronous and return the observer for chaining::

        obs = observe(live)
        live.set_value(1)
        obs.assert_value_count(1).assert_values(1)
        obs.dispose()
    """

    def __init__(self, producer: SingleValueProducer, *, config: HarnessConfig | None = None) -> None:
        """Attach to `producer` immediately."""
        self._config = config or HarnessConfig()
        self._producer = producer
        self._recorder = Recorder(name="live-observer", log_values=self._config.log_values)
        self._disposed = False
        # Must come last: the producer may replay its current value synchronously.
        self._subscription = producer.subscribe(self)

    def on_receive(self, value: Any) -> None:
        """Record a value update; `None` updates are dropped."""
        if value is None:
            logger.debug("live-observer: None update dropped")
            return
        self._recorder.on_receive(value)

    def assert_no_values(self) -> SingleValueTestObserver:
        self._recorder.assert_no_values()
        return self

    def assert_value_count(self, count: int) -> SingleValueTestObserver:
        self._recorder.assert_value_count(count)
        return self

    def assert_values(self, *expected: Any) -> SingleValueTestObserver:
        """Compare the recorded values with `expected`, index by index."""
        self._recorder.assert_values(*expected)
        return self

    def assert_values_satisfy(self, predicate: Callable[[tuple[Any, ...]], bool]) -> SingleValueTestObserver:
        """Fail unless `predicate(values)` is truthy."""
        self._recorder.assert_values_satisfy(predicate)
        return self

    def values(self) -> tuple[Any, ...]:
        return self._recorder.values()

    def with_values(self, block: Callable[[tuple[Any, ...]], Any]) -> SingleValueTestObserver:
        """Run `block` against the recorded values."""
        self._recorder.with_values(block)
        return self

    def snapshot(self) -> Observation:
        return self._recorder.snapshot()

    @property
    def disposed(self) -> bool:
        return self._disposed

    def dispose(self) -> None:
        """Clear recorded values and detach from the producer. Safe to call twice."""
        if self._disposed:
            return
        self._disposed = True
        self._recorder.clear()
        self._recorder.close()
        self._producer.unsubscribe(self._subscription)
        logger.debug("live-observer: disposed subscription %d", self._subscription.id)

    def __enter__(self) -> SingleValueTestObserver:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.dispose()


def observe_live(producer: SingleValueProducer, *, config: HarnessConfig | None = None) -> SingleValueTestObserver:
    """Attach a new test observer to a single-value producer."""
    return SingleValueTestObserver(producer, config=config)
