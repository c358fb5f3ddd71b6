import pytest

from streamtest.config import HarnessConfig, load_config

_ENV_VARS = [
    "STREAMTEST_WAIT_FOR_DELAY",
    "STREAMTEST_INIT_TIMEOUT_S",
    "STREAMTEST_AWAIT_TIMEOUT_S",
    "STREAMTEST_LOG_VALUES",
]


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch):
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    # Keep a developer's local .env out of these tests.
    monkeypatch.setattr("streamtest.config.dotenv.load_dotenv", lambda *a, **k: False)
    yield


def test_harness_config_defaults_keep_unbounded_start_wait():
    cfg = HarnessConfig()
    assert cfg.wait_for_delay is False
    assert cfg.init_timeout_s is None
    assert cfg.await_timeout_s == 5.0
    assert cfg.log_values is False


@pytest.mark.parametrize("timeout", [0, -1.5])
def test_harness_config_rejects_non_positive_init_timeout(timeout: float):
    with pytest.raises(ValueError):
        HarnessConfig(init_timeout_s=timeout)


def test_harness_config_rejects_non_positive_await_timeout():
    with pytest.raises(ValueError):
        HarnessConfig(await_timeout_s=0)


def test_load_config_reads_defaults():
    cfg = load_config()
    assert cfg == HarnessConfig()


def test_load_config_parses_optional_fields(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("STREAMTEST_WAIT_FOR_DELAY", "yes")
    monkeypatch.setenv("STREAMTEST_INIT_TIMEOUT_S", "2.5")
    monkeypatch.setenv("STREAMTEST_AWAIT_TIMEOUT_S", "0.75")
    monkeypatch.setenv("STREAMTEST_LOG_VALUES", "on")

    cfg = load_config()
    assert cfg.wait_for_delay is True
    assert cfg.init_timeout_s == 2.5
    assert cfg.await_timeout_s == 0.75
    assert cfg.log_values is True


@pytest.mark.parametrize("raw", ["", "none", "NONE", "unbounded"])
def test_load_config_init_timeout_unbounded_spellings(monkeypatch: pytest.MonkeyPatch, raw: str):
    monkeypatch.setenv("STREAMTEST_INIT_TIMEOUT_S", raw)
    assert load_config().init_timeout_s is None


@pytest.mark.parametrize(
    ("name", "raw"),
    [
        ("STREAMTEST_WAIT_FOR_DELAY", "maybe"),
        ("STREAMTEST_INIT_TIMEOUT_S", "soon"),
        ("STREAMTEST_AWAIT_TIMEOUT_S", "fast"),
        ("STREAMTEST_INIT_TIMEOUT_S", "-3"),
    ],
)
def test_load_config_rejects_malformed_values(monkeypatch: pytest.MonkeyPatch, name: str, raw: str):
    monkeypatch.setenv(name, raw)
    with pytest.raises(ValueError):
        load_config()
