"""Driver session backed by Chromium processes launched on this host."""

import logging
from typing import List

from playwright.async_api import Browser as PlaywrightBrowser

from .browser import Browser

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)


class LocalChromiumBrowser(Browser):
    """
    Launches a fresh Chromium for every new_browser action.

    Reads from driver_config.BrowserConfig:
    - headless: run without a window (forced inside containers)
    - width / height: window size, also the default context viewport
    - slow_mo: pause between engine operations in ms, useful when headed

    Example:
        driver = LocalChromiumBrowser()
        driver.run({"action": {"type": "new_page", "url": "http://localhost:8001/"}})
    """

    def start_platform(self) -> None:
        # Playwright manages the Chromium binary itself.
        pass

    def close_platform(self) -> None:
        # Launched processes are closed by close_all during shutdown.
        pass

    def launch_args(self) -> List[str]:
        return [f"--window-size={self._config.width},{self._config.height}"]

    async def create_browser_instance(self) -> PlaywrightBrowser:
        config = self._config
        logger.info(
            f"Starting Chromium (headless={config.headless}, "
            f"window={config.width}x{config.height}, slow_mo={config.slow_mo}ms)"
        )
        return await self._playwright.chromium.launch(
            headless=config.headless,
            args=self.launch_args(),
            slow_mo=config.slow_mo,
        )
