"""State models shared by the test observers.

- `TerminalState` is a frozen tagged variant: active, completed or failed(error).
- `InitializationState` tracks lazy stream collection.
- `Observation` is a point-in-time snapshot of everything a recorder holds.
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict

TerminalKind = Literal["active", "completed", "failed"]
InitializationState = Literal["not_started", "starting", "started"]

_subscription_ids = itertools.count(1)


class _Model(BaseModel):
    # Errors and arbitrary user values are stored as-is.
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)


class TerminalState(_Model):
    """How a producer's active lifetime ended (if it has)."""

    kind: TerminalKind = "active"
    error: BaseException | None = None

    @classmethod
    def active(cls) -> TerminalState:
        return cls(kind="active")

    @classmethod
    def completed(cls) -> TerminalState:
        return cls(kind="completed")

    @classmethod
    def failed(cls, error: BaseException) -> TerminalState:
        return cls(kind="failed", error=error)

    @property
    def is_terminal(self) -> bool:
        return self.kind != "active"

    def describe(self) -> str:
        """Short label used in failure messages."""
        if self.kind == "failed":
            return f"failed({type(self.error).__name__}: {self.error})"
        return self.kind


class Observation(_Model):
    """A snapshot of a recorder's buffer and terminal state."""

    values: tuple[Any, ...] = ()
    terminal: TerminalState = TerminalState()
    disposed: bool = False


@dataclass(frozen=True)
class Subscription:
    """Link between one observer and the producer it is attached to."""

    producer: Any
    observer: Any
    id: int = field(default_factory=lambda: next(_subscription_ids))
