"""
One-shot page event listeners.

A OneShotListener subscribes to a single page event (filechooser, dialog),
runs its callback for the first emission only and then detaches itself.

States: ARMED -> FIRED -> DETACHED. A listener discarded while ARMED (page
closed, session teardown) goes straight to DETACHED without firing.
"""

import logging
from enum import Enum
from typing import Any, Awaitable, Callable, Optional

from playwright.async_api import Page

logger = logging.getLogger(__name__)


class ListenerState(str, Enum):
    ARMED = "armed"
    FIRED = "fired"
    DETACHED = "detached"


class OneShotListener:
    """Listen once, auto-detach."""

    def __init__(
        self,
        page: Page,
        event: str,
        callback: Callable[[Any], Awaitable[None]],
        description: str = "",
        on_detached: Optional[Callable[["OneShotListener"], None]] = None,
    ):
        self.page = page
        self.event = event
        self.description = description or event
        self.state = ListenerState.DETACHED
        self._callback = callback
        self._on_detached = on_detached
        self._handler = self._handle

    def arm(self) -> None:
        if self.state is ListenerState.ARMED:
            return
        self.page.on(self.event, self._handler)
        self.state = ListenerState.ARMED
        logger.debug(f"Armed one-shot listener: {self.description}")

    async def _handle(self, payload: Any) -> None:
        if self.state is not ListenerState.ARMED:
            return
        self.state = ListenerState.FIRED
        self.page.remove_listener(self.event, self._handler)
        logger.info(f"One-shot listener fired: {self.description}")
        try:
            await self._callback(payload)
        except Exception as e:
            # Nothing awaits an event callback; the failure can only be logged.
            logger.error(f"One-shot listener '{self.description}' failed: {e}", exc_info=True)
        finally:
            self._detach()

    def discard(self) -> None:
        """Drop the listener without firing. No-op once fired or detached."""
        if self.state is not ListenerState.ARMED:
            return
        try:
            self.page.remove_listener(self.event, self._handler)
        except Exception as e:
            logger.debug(f"Removing listener '{self.description}' failed: {e}")
        logger.info(f"Discarded armed listener: {self.description}")
        self._detach()

    def _detach(self) -> None:
        self.state = ListenerState.DETACHED
        if self._on_detached:
            self._on_detached(self)
