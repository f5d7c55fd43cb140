"""
Remote Chromium implementation via the Chrome DevTools Protocol (CDP).

This module connects the driver to an already running Chromium (a browser
container, a grid node or a desktop Chrome started with
--remote-debugging-port) instead of launching one.
"""

import logging
from typing import Dict, List, Optional

from playwright.async_api import Browser as PlaywrightBrowser
from playwright.async_api import BrowserContext

from .browser import Browser

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)


class RemoteCdpBrowser(Browser):
    """
    Remote browser reached over CDP.

    Configuration:
    - endpoint: CDP endpoint URL, http(s):// or ws(s):// (default from BROWSER_DRIVER_CDP_ENDPOINT)
    - headers: extra headers sent with the CDP connection request

    Example:
        driver = RemoteCdpBrowser(endpoint="http://localhost:9222")
        driver.run({"action": {"type": "new_page", "url": "https://example.com"}})
    """

    def __init__(
        self,
        browser_config=None,
        endpoint: Optional[str] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        super().__init__(browser_config)
        self._endpoint = endpoint or self._config.cdp_endpoint
        self._headers = headers or {}
        self._adopted_contexts: List[BrowserContext] = []

        logger.info(f"RemoteCdpBrowser initialized: endpoint={self._endpoint}")

    def start_platform(self) -> None:
        """
        Platform-specific startup logic.

        Remote browsers are connected on demand by new_browser actions.
        """
        if not self._endpoint:
            raise ValueError("RemoteCdpBrowser needs a CDP endpoint (BROWSER_DRIVER_CDP_ENDPOINT)")

    def close_platform(self) -> None:
        """
        Platform-specific cleanup logic.

        The remote browser keeps running; closing the CDP connection is
        handled by the session state in the base class.
        """
        self._adopted_contexts.clear()

    async def create_browser_instance(self) -> PlaywrightBrowser:
        """
        Connect to the remote browser via CDP.

        Returns:
            PlaywrightBrowser instance connected over CDP
        """
        logger.info(f"Connecting to remote browser via CDP: {self._endpoint[:50]}...")
        browser = await self._playwright.chromium.connect_over_cdp(
            endpoint_url=self._endpoint,
            headers=self._headers or None,
        )
        logger.info("Successfully connected to remote browser via CDP")
        return browser

    async def create_context(self, browser: PlaywrightBrowser, width: int, height: int) -> BrowserContext:
        """
        Reuse the default context of the remote browser once, then open new ones.

        A CDP-connected browser usually comes with a context already open;
        the first new_context action adopts it instead of creating another.
        """
        for context in browser.contexts:
            if not any(context is adopted for adopted in self._adopted_contexts):
                self._adopted_contexts.append(context)
                logger.info("Reusing existing remote browser context")
                return context
        context = await browser.new_context(viewport={"width": width, "height": height})
        self._adopted_contexts.append(context)
        logger.info(f"Created new browser context: {width}x{height}")
        return context
