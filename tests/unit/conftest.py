from __future__ import annotations

import logging

import pytest

from streamtest import MutableLiveValue


@pytest.fixture(autouse=True)
def _debug_logging(caplog: pytest.LogCaptureFixture):
    """Capture `streamtest` debug logs so every log call path is exercised."""
    caplog.set_level(logging.DEBUG, logger="streamtest")
    yield


@pytest.fixture
def live() -> MutableLiveValue:
    return MutableLiveValue()
