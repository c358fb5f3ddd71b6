"""Configuration loading and validation.

This module is responsible for:

- Loading `.env` into the process environment (without overriding existing vars).
- Converting `STREAMTEST_*` environment variables into a typed Pydantic model.
- Validating values and providing actionable error messages.

Observers never read the environment themselves; callers pass a `HarnessConfig`
explicitly (or get the defaults).
"""

from __future__ import annotations

import os
from typing import TypeVar

import dotenv
from pydantic import BaseModel, Field, field_validator

_T = TypeVar("_T", int, float)


def _get_env_bool(name: str, default: bool) -> bool:
    """Read a boolean env var with a default."""
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    normalized = raw.strip().lower()
    if normalized in {"true", "1", "yes", "y", "on"}:
        return True
    if normalized in {"false", "0", "no", "n", "off"}:
        return False
    raise ValueError(f"{name} must be a boolean (true/false). Got: {raw!r}")


def _get_env_number(name: str, default: _T, cast: type[_T]) -> _T:
    """Read an int/float env var with a default."""
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return cast(raw)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{name} must be a {cast.__name__}. Got: {raw!r}") from exc


def _get_env_optional_float(name: str) -> float | None:
    """Read a float env var where empty/`none` means "no limit"."""
    raw = os.getenv(name)
    if raw is None or raw.strip().lower() in {"", "none", "unbounded"}:
        return None
    try:
        return float(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be a float or 'none'. Got: {raw!r}") from exc


class HarnessConfig(BaseModel):
    """Tuning knobs for test observers."""

    wait_for_delay: bool = Field(
        default=False,
        description="Default for stream observers: defer collection until the first assertion and await start",
    )
    # None keeps the unbounded wait: a producer that never starts hangs the test.
    init_timeout_s: float | None = Field(
        default=None,
        description="Max seconds to await the producer's start signal (None = unbounded)",
    )
    await_timeout_s: float = Field(default=5.0, description="Default timeout for await_* helpers (seconds)")
    log_values: bool = Field(default=False, description="Include value reprs in debug logs")

    @field_validator("init_timeout_s")
    def validate_init_timeout(cls, v: float | None) -> float | None:
        """Reject non-positive timeouts (use None for unbounded)."""
        if v is not None and v <= 0:
            raise ValueError("init_timeout_s must be > 0, or None for an unbounded wait.")
        return v

    @field_validator("await_timeout_s")
    def validate_await_timeout(cls, v: float) -> float:
        """Reject non-positive timeouts."""
        if v <= 0:
            raise ValueError("await_timeout_s must be > 0.")
        return v


def load_config() -> HarnessConfig:
    """Load harness configuration from environment variables.

    Notes:
    - Calls `dotenv.load_dotenv()` so local `.env` values are visible to the process.
    - Raises `ValueError` with actionable messages for malformed values.
    """
    dotenv.load_dotenv()

    return HarnessConfig(
        wait_for_delay=_get_env_bool("STREAMTEST_WAIT_FOR_DELAY", False),
        init_timeout_s=_get_env_optional_float("STREAMTEST_INIT_TIMEOUT_S"),
        await_timeout_s=_get_env_number("STREAMTEST_AWAIT_TIMEOUT_S", 5.0, float),
        log_values=_get_env_bool("STREAMTEST_LOG_VALUES", False),
    )
