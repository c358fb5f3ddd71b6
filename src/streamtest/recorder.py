"""Thread-safe recorder holding everything an observer has received.

The recorder is the shared core of both observer kinds:

- an append-only buffer of values, in emission order;
- a terminal state (first terminal signal wins);
- a fluent assertion surface raising `AssertionFailure` subclasses.

Producer callbacks may arrive from another thread, so every read and write of
the buffer or terminal state happens under one lock.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Sequence
from typing import Any

from .errors import (
    CountMismatch,
    ErrorMismatch,
    IndexOutOfRange,
    InvalidArgument,
    NoErrorCaptured,
    NotComplete,
    PredicateFailed,
    UnexpectedCompletion,
    UnexpectedError,
    ValueMismatch,
)
from .models import Observation, TerminalState

logger = logging.getLogger(__name__)


def _preview(values: Sequence[Any], limit: int = 10) -> str:
    """Render a buffer for failure messages, truncating long ones."""
    if len(values) <= limit:
        return repr(list(values))
    head = ", ".join(repr(v) for v in values[:limit])
    return f"[{head}, ... ({len(values) - limit} more)]"


class Recorder:
    """Buffers values and the terminal signal of a single subscription."""

    @staticmethod
    def check_count(count: int) -> None:
        """Reject a negative expected count before any state is read."""
        if count < 0:
            raise InvalidArgument(f"expected count cannot be negative, got {count}")

    @staticmethod
    def check_index(index: int) -> None:
        """Reject a negative index before any state is read."""
        if index < 0:
            raise IndexOutOfRange(f"index cannot be negative, got {index}")

    def __init__(self, *, name: str = "recorder", log_values: bool = False) -> None:
        """Create an empty, active recorder.

        Args:
            name: Label used in log lines (usually the observer kind).
            log_values: Include value reprs in debug logs.
        """
        self._name = name
        self._log_values = log_values
        self._lock = threading.Lock()
        self._values: list[Any] = []
        self._terminal = TerminalState.active()
        self._closed = False

    # Signal path

    def on_receive(self, value: Any) -> None:
        """Append a value to the buffer (no-op once closed)."""
        with self._lock:
            if self._closed:
                logger.debug("%s: value received after close; ignored", self._name)
                return
            self._values.append(value)
            size = len(self._values)
        if self._log_values:
            logger.debug("%s: received #%d %r", self._name, size, value)
        else:
            logger.debug("%s: received #%d", self._name, size)

    def on_error(self, error: BaseException) -> None:
        """Record a terminal error unless a terminal signal already arrived."""
        with self._lock:
            if self._closed:
                logger.debug("%s: error received after close; ignored", self._name)
                return
            previous = self._terminal
            if not previous.is_terminal:
                self._terminal = TerminalState.failed(error)
        if previous.is_terminal:
            logger.warning(
                "%s: error %r after terminal state %s; ignored", self._name, error, previous.describe()
            )
            return
        logger.debug("%s: failed with %s: %s", self._name, type(error).__name__, error)

    def on_complete(self) -> None:
        """Record completion unless a terminal signal already arrived."""
        with self._lock:
            if self._closed:
                logger.debug("%s: completion received after close; ignored", self._name)
                return
            previous = self._terminal
            if not previous.is_terminal:
                self._terminal = TerminalState.completed()
        if previous.is_terminal:
            logger.warning("%s: completion after terminal state %s; ignored", self._name, previous.describe())
            return
        logger.debug("%s: completed", self._name)

    def clear(self) -> None:
        """Drop every buffered value."""
        with self._lock:
            self._values.clear()

    def close(self) -> None:
        """Stop recording; later signals are ignored. Safe to call multiple times."""
        with self._lock:
            self._closed = True

    # Read path

    @property
    def closed(self) -> bool:
        with self._lock:
            return self._closed

    @property
    def terminal(self) -> TerminalState:
        with self._lock:
            return self._terminal

    def values(self) -> tuple[Any, ...]:
        """Return a point-in-time copy of the buffer."""
        with self._lock:
            return tuple(self._values)

    def value_count(self) -> int:
        with self._lock:
            return len(self._values)

    def snapshot(self) -> Observation:
        """Return a frozen snapshot of buffer and terminal state."""
        with self._lock:
            return Observation(values=tuple(self._values), terminal=self._terminal, disposed=self._closed)

    def with_values(self, block: Callable[[tuple[Any, ...]], Any]) -> Recorder:
        """Run `block` against the buffer (for ad-hoc assertions)."""
        block(self.values())
        return self

    # Assertions

    def assert_no_values(self) -> Recorder:
        values = self.values()
        if values:
            raise CountMismatch(f"expected no values, got {len(values)}: {_preview(values)}")
        return self

    def assert_value_count(self, count: int) -> Recorder:
        self.check_count(count)
        actual = self.value_count()
        if actual != count:
            raise CountMismatch(f"expected {count} values, got {actual}: {_preview(self.values())}")
        return self

    def assert_values(self, *expected: Any) -> Recorder:
        """Compare the buffer with `expected` index by index."""
        values = self.values()
        if len(values) != len(expected):
            raise CountMismatch(
                f"expected {len(expected)} values {_preview(expected)}, got {len(values)}: {_preview(values)}"
            )
        for index, (want, got) in enumerate(zip(expected, values)):
            if want != got:
                raise ValueMismatch(f"value at index {index}: expected {want!r}, got {got!r}")
        return self

    def assert_values_satisfy(self, predicate: Callable[[tuple[Any, ...]], bool]) -> Recorder:
        values = self.values()
        if not predicate(values):
            raise PredicateFailed(f"predicate rejected values {_preview(values)}")
        return self

    def assert_value_at(self, index: int, expected: Any) -> Recorder:
        """Check one buffered value.

        A callable `expected` is applied as a predicate; anything else is
        compared with `==`.
        """
        self.check_index(index)
        values = self.values()
        if index >= len(values):
            raise IndexOutOfRange(f"index {index} out of range for {len(values)} values")
        actual = values[index]
        if callable(expected):
            if not expected(actual):
                raise PredicateFailed(f"predicate rejected value at index {index}: {actual!r}")
        elif actual != expected:
            raise ValueMismatch(f"value at index {index}: expected {expected!r}, got {actual!r}")
        return self

    def assert_value(self, expected: Any) -> Recorder:
        return self.assert_value_at(0, expected)

    def assert_error(self, expected: BaseException | type[BaseException] | Callable[[BaseException], bool]) -> Recorder:
        """Check the captured terminal error.

        `expected` may be:
        - an exception instance: matches on exact type and message;
        - an exception class: matches with `isinstance`;
        - a predicate over the captured error.
        """
        terminal = self.terminal
        if terminal.kind != "failed" or terminal.error is None:
            raise NoErrorCaptured(f"expected an error, terminal state is {terminal.describe()}")
        error = terminal.error

        if isinstance(expected, BaseException):
            if type(error) is not type(expected) or str(error) != str(expected):
                raise ErrorMismatch(
                    f"expected {type(expected).__name__}({str(expected)!r}), "
                    f"got {type(error).__name__}({str(error)!r})"
                )
        elif isinstance(expected, type) and issubclass(expected, BaseException):
            if not isinstance(error, expected):
                raise ErrorMismatch(f"expected an instance of {expected.__name__}, got {type(error).__name__}")
        elif isinstance(expected, type):
            raise InvalidArgument(f"assert_error expects an exception class, got {expected.__name__}")
        elif callable(expected):
            if not expected(error):
                raise ErrorMismatch(f"predicate rejected error {type(error).__name__}({str(error)!r})")
        else:
            raise InvalidArgument(
                f"assert_error expects an exception, exception class or predicate, got {type(expected).__name__}"
            )
        return self

    def assert_no_errors(self) -> Recorder:
        terminal = self.terminal
        if terminal.kind == "failed":
            raise UnexpectedError(f"expected no errors, got {terminal.describe()}")
        return self

    def assert_complete(self) -> Recorder:
        terminal = self.terminal
        if terminal.kind != "completed":
            raise NotComplete(f"expected completion, terminal state is {terminal.describe()}")
        return self

    def assert_not_complete(self) -> Recorder:
        if self.terminal.kind == "completed":
            raise UnexpectedCompletion("expected the producer not to have completed")
        return self
