"""Assertion failures raised by the test observers.

Every violated expectation raises a subclass of `AssertionFailure`. The base
class derives from `AssertionError` so test runners report these as ordinary
assertion failures rather than errors.
"""

from __future__ import annotations


class AssertionFailure(AssertionError):
    """An expected-vs-actual mismatch detected by an assertion call."""

    kind: str = "assertion_failure"

    def __init__(self, message: str) -> None:
        """Create a failure carrying a human-readable description."""
        self.message = message
        super().__init__(f"[{self.kind}] {message}")


class InvalidArgument(AssertionFailure):
    kind = "invalid_argument"


class CountMismatch(AssertionFailure):
    kind = "count_mismatch"


class PredicateFailed(AssertionFailure):
    kind = "predicate_failed"


class ValueMismatch(AssertionFailure):
    kind = "value_mismatch"


class IndexOutOfRange(AssertionFailure):
    kind = "index_out_of_range"


class NoErrorCaptured(AssertionFailure):
    kind = "no_error_captured"


class ErrorMismatch(AssertionFailure):
    kind = "error_mismatch"


class UnexpectedError(AssertionFailure):
    kind = "unexpected_error"


class NotComplete(AssertionFailure):
    kind = "not_complete"


class UnexpectedCompletion(AssertionFailure):
    kind = "unexpected_completion"


class InitializationTimeout(AssertionFailure):
    """The producer did not signal start (or reach a state) within the wait budget."""

    kind = "initialization_timeout"
