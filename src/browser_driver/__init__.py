"""Browser interaction driver with dual implementation support.

This module provides the command-execution core of a remote browser driver
with two implementations:
- LocalChromiumBrowser: Local Playwright-based browser
- RemoteCdpBrowser: Remote Chromium connected over CDP

Browser selection is controlled by BROWSER_DRIVER_TYPE environment variable:
- "local" (default): Use LocalChromiumBrowser
- "cdp": Use RemoteCdpBrowser with BROWSER_DRIVER_CDP_ENDPOINT
"""

import logging

from .browser import Browser
from .errors import (
    DriverError,
    EngineInvocationError,
    MalformedArgumentError,
    NoActivePage,
    NoOptionsMatched,
    SoftMatchFailure,
    StaleTargetError,
)
from .invoke import Dispatcher, InvocationOutcome
from .local_chromium_browser import LocalChromiumBrowser
from .remote_cdp_browser import RemoteCdpBrowser
from .responses import ActionResponse
from .state import SessionState

logger = logging.getLogger(__name__)


def create_browser(browser_config=None) -> Browser:
    """
    Factory function to create the appropriate driver based on configuration.

    Args:
        browser_config: BrowserConfig to use. Defaults to driver_config.config.browser.

    Returns:
        Browser instance (LocalChromiumBrowser or RemoteCdpBrowser)
    """
    if browser_config is None:
        from driver_config import config as driver_config

        browser_config = driver_config.browser

    browser_type = browser_config.browser_type.lower()

    if browser_type == "cdp":
        logger.info("Creating RemoteCdpBrowser (BROWSER_DRIVER_TYPE=cdp)")
        return RemoteCdpBrowser(browser_config)
    else:
        logger.info(f"Creating LocalChromiumBrowser (BROWSER_DRIVER_TYPE={browser_type})")
        return LocalChromiumBrowser(browser_config)


__all__ = [
    "ActionResponse",
    "Browser",
    "Dispatcher",
    "DriverError",
    "EngineInvocationError",
    "InvocationOutcome",
    "LocalChromiumBrowser",
    "MalformedArgumentError",
    "NoActivePage",
    "NoOptionsMatched",
    "RemoteCdpBrowser",
    "SessionState",
    "SoftMatchFailure",
    "StaleTargetError",
    "create_browser",
]
