from __future__ import annotations

from driver_config import Config

ENV_VARS = [
    "BROWSER_DRIVER_TYPE",
    "BROWSER_DRIVER_HEADLESS",
    "BROWSER_DRIVER_WIDTH",
    "BROWSER_DRIVER_HEIGHT",
    "BROWSER_DRIVER_SLOW_MO",
    "BROWSER_DRIVER_CDP_ENDPOINT",
    "BROWSER_DRIVER_HOST",
    "BROWSER_DRIVER_PORT",
    "BROWSER_DRIVER_LOG_LEVEL",
]


def _clear(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults(monkeypatch):
    _clear(monkeypatch)

    config = Config.from_env()

    assert config.browser.browser_type == "local"
    assert config.browser.headless is True
    assert (config.browser.width, config.browser.height) == (1024, 720)
    assert config.browser.slow_mo == 0
    assert config.browser.cdp_endpoint is None
    assert config.server.port == 8270
    assert config.server.log_level == "INFO"


def test_environment_overrides(monkeypatch):
    _clear(monkeypatch)
    monkeypatch.setenv("BROWSER_DRIVER_TYPE", "CDP")
    monkeypatch.setenv("BROWSER_DRIVER_CDP_ENDPOINT", "http://localhost:9222")
    monkeypatch.setenv("BROWSER_DRIVER_WIDTH", "1280")
    monkeypatch.setenv("BROWSER_DRIVER_HEIGHT", "800")
    monkeypatch.setenv("BROWSER_DRIVER_SLOW_MO", "50")
    monkeypatch.setenv("BROWSER_DRIVER_PORT", "9000")
    monkeypatch.setenv("BROWSER_DRIVER_LOG_LEVEL", "debug")

    config = Config.from_env()

    assert config.browser.browser_type == "cdp"
    assert config.browser.cdp_endpoint == "http://localhost:9222"
    assert (config.browser.width, config.browser.height) == (1280, 800)
    assert config.browser.slow_mo == 50
    assert config.server.port == 9000
    assert config.server.log_level == "DEBUG"
