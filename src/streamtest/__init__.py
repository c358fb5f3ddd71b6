"""Test observers for reactive value producers.

This package lets tests subscribe to a producer, record everything it emits,
and assert on the captured values, errors and completion:

- `observe(live_value)` attaches a `SingleValueTestObserver` to a
  "latest value holder" (LiveData-like) producer.
- `observe(stream, scope)` attaches a `StreamTestObserver` to an asynchronous
  multi-value producer running as a task in `scope`.
- `launch_test(stream, scope, block)` runs a batch of assertions in its own task.

Violated expectations raise `AssertionFailure` subclasses.
"""

from __future__ import annotations

from collections.abc import AsyncIterable
from typing import Any

from .config import HarnessConfig, load_config
from .errors import (
    AssertionFailure,
    CountMismatch,
    ErrorMismatch,
    IndexOutOfRange,
    InitializationTimeout,
    InvalidArgument,
    NoErrorCaptured,
    NotComplete,
    PredicateFailed,
    UnexpectedCompletion,
    UnexpectedError,
    ValueMismatch,
)
from .live import SingleValueTestObserver, observe_live
from .models import InitializationState, Observation, Subscription, TerminalState
from .producers import FlowProducer, MutableLiveValue, Scope, SingleValueProducer, StreamProducer, flow_error, flow_of
from .recorder import Recorder
from .stream import StreamTestObserver, launch_test, observe_stream


def observe(
    producer: Any,
    scope: Scope | None = None,
    *,
    wait_for_delay: bool | None = None,
    config: HarnessConfig | None = None,
) -> SingleValueTestObserver | StreamTestObserver:
    """Attach a test observer to `producer`.

    Without a scope the producer is treated as a single-value producer; with a
    scope it is run as a stream producer (bare async iterables are accepted).
    """
    if scope is None:
        if wait_for_delay is not None:
            raise TypeError("wait_for_delay only applies to stream producers; pass a scope")
        if isinstance(producer, AsyncIterable) or hasattr(producer, "run"):
            raise TypeError("stream producers need a scope: observe(producer, scope)")
        return observe_live(producer, config=config)
    return observe_stream(producer, scope, wait_for_delay=wait_for_delay, config=config)


__all__ = [
    "AssertionFailure",
    "CountMismatch",
    "ErrorMismatch",
    "FlowProducer",
    "HarnessConfig",
    "IndexOutOfRange",
    "InitializationState",
    "InitializationTimeout",
    "InvalidArgument",
    "MutableLiveValue",
    "NoErrorCaptured",
    "NotComplete",
    "Observation",
    "PredicateFailed",
    "Recorder",
    "Scope",
    "SingleValueProducer",
    "SingleValueTestObserver",
    "StreamProducer",
    "StreamTestObserver",
    "Subscription",
    "TerminalState",
    "UnexpectedCompletion",
    "UnexpectedError",
    "ValueMismatch",
    "flow_error",
    "flow_of",
    "launch_test",
    "load_config",
    "observe",
    "observe_live",
    "observe_stream",
]
