"""
Abstract Browser base class for the interaction driver.

This module provides the common infrastructure of the driver:
- Playwright startup and the driver event loop
- Routing of decoded actions to the interaction handlers
- Session lifecycle actions (browsers, contexts, pages)
- Action list execution (multiple actions in a single call)
- Conversion of outcomes and errors into the response envelope

Implementations:
- LocalChromiumBrowser: Local Playwright-based browser
- RemoteCdpBrowser: Remote Chromium reached over the Chrome DevTools Protocol
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Dict, List, Optional, Union

import nest_asyncio
from playwright.async_api import Browser as PlaywrightBrowser
from playwright.async_api import BrowserContext, async_playwright
from pydantic import ValidationError

from .errors import DriverError, EngineInvocationError, MalformedArgumentError, SoftMatchFailure
from .interaction import HANDLERS
from .invoke import Dispatcher
from .models import (
    CloseAllAction,
    CloseBrowserAction,
    CloseContextAction,
    ClosePageAction,
    DriverInput,
    ListPagesAction,
    NewBrowserAction,
    NewContextAction,
    NewPageAction,
    SwitchPageAction,
    TargetKind,
)
from .responses import ActionResponse, empty_with_log, error_response, value_with_log
from .state import SessionState

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)


class Browser(ABC):
    """Abstract base class for the driver session with platform-specific browser creation."""

    def __init__(self, browser_config=None):
        """
        Initialize the driver.

        Args:
            browser_config: BrowserConfig to use. Defaults to driver_config.config.browser.
        """
        if browser_config is None:
            # Import config here to avoid circular imports
            from driver_config import config as driver_config

            browser_config = driver_config.browser

        self._config = browser_config
        self._started = False
        self._playwright = None
        self._loop = asyncio.new_event_loop()
        asyncio.set_event_loop(self._loop)
        self._nest_asyncio_applied = False
        self._state = SessionState()
        self._dispatcher = Dispatcher(self._state)
        self._lifecycle: Dict[type, Callable[[Any], Awaitable[ActionResponse]]] = {
            NewBrowserAction: self._new_browser,
            NewContextAction: self._new_context,
            NewPageAction: self._new_page,
            SwitchPageAction: self._switch_page,
            ClosePageAction: self._close_page,
            CloseContextAction: self._close_context,
            CloseBrowserAction: self._close_browser,
            ListPagesAction: self._list_pages,
            CloseAllAction: self._close_all,
        }

    @property
    def state(self) -> SessionState:
        return self._state

    @abstractmethod
    async def create_browser_instance(self) -> PlaywrightBrowser:
        """
        Create a browser instance for the session.

        Platform-specific implementation:
        - LocalChromiumBrowser: Launch local Chromium
        - RemoteCdpBrowser: Connect to a running Chromium via CDP

        Returns:
            PlaywrightBrowser instance
        """
        pass

    @abstractmethod
    def start_platform(self) -> None:
        """Platform-specific startup logic."""
        pass

    @abstractmethod
    def close_platform(self) -> None:
        """Platform-specific cleanup logic."""
        pass

    async def create_context(self, browser: PlaywrightBrowser, width: int, height: int) -> BrowserContext:
        """Open a context on ``browser``. Implementations may reuse an existing one."""
        return await browser.new_context(viewport={"width": width, "height": height})

    def run(self, driver_input: Union[DriverInput, Dict[str, Any]]) -> Dict[str, Any]:
        """
        Execute one action or a list of actions and return the response envelope.

        Example fill text:
        {"action": {"type": "fill_text", "selector": "#name", "text": "Ada"}}

        Example select options by label:
        {"action": {"type": "select_option", "selector": "#color", "matcher_json": "[{\\"label\\": \\"Red\\"}]"}}

        Example LIST OF ACTIONS (execute in sequence, stop on first error):
        {"action": [
            {"type": "new_page", "url": "http://localhost:8001/"},
            {"type": "type_text", "selector": "#name", "text": "Ada", "delay": 20},
            {"type": "click", "selector": "#submit"}
        ]}

        Args:
            driver_input: DriverInput or its dict form with an "action" field

        Returns:
            Dict with "status" (success/error) and "content"
        """
        # Auto-start on first use
        if not self._started:
            self._start()

        if isinstance(driver_input, dict):
            logger.debug(f"Action passed as Dict: {driver_input}")
            try:
                driver_input = DriverInput.model_validate(driver_input)
            except ValidationError as e:
                logger.error(f"Failed to validate driver input: {e}")
                return error_response(MalformedArgumentError(f"Invalid action request: {e}"))

        action = driver_input.action
        if isinstance(action, list):
            logger.info(f"Processing action list with {len(action)} actions")
            return self._execute_async(self.execute_list(action))
        return self._execute_async(self.execute(action))

    async def execute(self, action: Any) -> Dict[str, Any]:
        """Run a single decoded action and render its envelope."""
        logger.info(f"Processing driver action: {action.type}")
        try:
            response = await self._dispatch(action)
        except SoftMatchFailure as e:
            logger.info(f"{action.type} matched nothing: {e}")
            return error_response(e)
        except DriverError as e:
            logger.warning(f"{action.type} failed: {e}")
            return error_response(e)
        except Exception as e:
            logger.error(f"{action.type} failed unexpectedly: {e}", exc_info=True)
            return error_response(e)

        logger.info(f"{action.type}: {response.log}")
        return response.to_dict()

    async def _dispatch(self, action: Any) -> ActionResponse:
        handler = HANDLERS.get(type(action))
        if handler is not None:
            return await handler(action, self._dispatcher)
        lifecycle = self._lifecycle.get(type(action))
        if lifecycle is not None:
            return await lifecycle(action)
        raise MalformedArgumentError(f"Unknown action type: {type(action).__name__}")

    async def execute_list(self, actions: List[Any]) -> Dict[str, Any]:
        """Execute actions in sequence, stopping at the first error."""
        if not actions:
            return error_response(MalformedArgumentError("Empty action list"))

        results = []
        for i, sub_action in enumerate(actions):
            logger.info(f"Action {i+1}/{len(actions)}: {sub_action.type}")
            result = await self.execute(sub_action)
            results.append(result)
            if result.get("status") == "error":
                logger.warning(f"Action {i+1} failed, stopping execution")
                break

        # Consolidate results
        success_count = sum(1 for r in results if r.get("status") == "success")
        total_count = len(actions)

        content_items = [{"text": f"Executed {success_count}/{total_count} actions successfully"}]
        for result in results:
            if result.get("content"):
                content_items.extend(result["content"])

        consolidated = {
            "status": "success" if success_count == total_count else "error",
            "content": content_items,
        }
        if results[-1].get("status") == "error":
            consolidated["code"] = results[-1].get("code")
        return consolidated

    def _start(self) -> None:
        """Start Playwright and initialize platform."""
        if not self._started:
            self._playwright = self._execute_async(async_playwright().start())
            self.start_platform()
            self._started = True
            logger.info("Playwright initialized")

    def _execute_async(self, action_coro) -> Any:
        """Execute async coroutine in the event loop."""
        if not self._nest_asyncio_applied:
            nest_asyncio.apply(self._loop)
            self._nest_asyncio_applied = True

        return self._loop.run_until_complete(action_coro)

    async def _engine_call(self, label: str, coro: Awaitable[Any]) -> Any:
        try:
            return await coro
        except DriverError:
            raise
        except Exception as e:
            logger.error(f"{label} failed: {e}", exc_info=True)
            raise EngineInvocationError(label, e) from e

    # Session lifecycle

    async def _new_browser(self, action: Optional[NewBrowserAction] = None) -> ActionResponse:
        browser = await self._engine_call("browser.launch", self.create_browser_instance())
        browser_id = self._state.add_browser(browser)
        browser.on("disconnected", lambda _: self._state.forget_browser(browser_id))
        return value_with_log(f"Opened browser {browser_id}", {"browser_id": browser_id})

    async def _new_context(self, action: NewContextAction) -> ActionResponse:
        browser_id = await self._default_browser_id(action.browser_id)
        width = action.width or self._config.width
        height = action.height or self._config.height
        context = await self._engine_call(
            "browser.new_context", self.create_context(self._state.browser(browser_id), width, height)
        )
        context_id = self._state.add_context(browser_id, context)
        return value_with_log(
            f"Opened context {context_id} ({width}x{height})",
            {"context_id": context_id, "browser_id": browser_id},
        )

    async def _new_page(self, action: NewPageAction) -> ActionResponse:
        async with self._state.lock:
            context_id = await self._default_context_id(action.context_id)
            page = await self._engine_call("context.new_page", self._state.context(context_id).new_page())
            page_id = self._state.add_page(context_id, page)
        if action.url:
            await self._dispatcher.invoke(TargetKind.PAGE, "goto", action.url, page_id=page_id)
        return value_with_log(
            f"Opened page {page_id}" + (f" at {action.url}" if action.url else ""),
            {"page_id": page_id, "context_id": context_id},
        )

    async def _switch_page(self, action: SwitchPageAction) -> ActionResponse:
        async with self._state.lock:
            self._state.set_active(action.page_id)
            await self._engine_call("page.bring_to_front", self._state.page(action.page_id).bring_to_front())
        return value_with_log(f"Switched to page {action.page_id}", {"page_id": action.page_id})

    async def _close_page(self, action: ClosePageAction) -> ActionResponse:
        async with self._state.lock:
            page_id = self._state.resolve_page_id(action.page_id)
            await self._dispatcher.invoke(TargetKind.PAGE, "close", page_id=page_id)
            self._state.forget_page(page_id)
        return value_with_log(f"Closed page {page_id}", {"active_page_id": self._state.active_page_id})

    async def _close_context(self, action: CloseContextAction) -> ActionResponse:
        async with self._state.lock:
            context_id = self._state.resolve_context_id(action.context_id)
            await self._engine_call("context.close", self._state.context(context_id).close())
            self._state.forget_context(context_id)
        return value_with_log(f"Closed context {context_id}", {"active_page_id": self._state.active_page_id})

    async def _close_browser(self, action: CloseBrowserAction) -> ActionResponse:
        async with self._state.lock:
            browser_id = self._state.resolve_browser_id(action.browser_id)
            await self._engine_call("browser.close", self._state.browser(browser_id).close())
            self._state.forget_browser(browser_id)
        return value_with_log(f"Closed browser {browser_id}", {"active_page_id": self._state.active_page_id})

    async def _list_pages(self, action: ListPagesAction) -> ActionResponse:
        pages = self._state.snapshot()
        return value_with_log(f"{len(pages)} open page(s)", pages)

    async def _close_all(self, action: Optional[CloseAllAction] = None) -> ActionResponse:
        async with self._state.lock:
            self._state.discard_listeners()
            for browser_id in self._state.browser_ids():
                try:
                    await self._state.browser(browser_id).close()
                except Exception as e:
                    logger.error(f"Error closing browser {browser_id}: {e}")
            self._state.clear()
        return empty_with_log("Closed all browsers")

    async def _default_browser_id(self, browser_id: Optional[str]) -> str:
        if browser_id or self._state.active_page_id:
            return self._state.resolve_browser_id(browser_id)
        browser_ids = self._state.browser_ids()
        if browser_ids:
            return browser_ids[-1]
        response = await self._new_browser()
        return response.value["browser_id"]

    async def _default_context_id(self, context_id: Optional[str]) -> str:
        if context_id or self._state.active_page_id:
            return self._state.resolve_context_id(context_id)
        for browser_id in reversed(self._state.browser_ids()):
            context_ids = self._state.context_ids(browser_id)
            if context_ids:
                return context_ids[-1]
        response = await self._new_context(NewContextAction(type="new_context"))
        return response.value["context_id"]

    def shutdown(self) -> None:
        """Close every browser, discard armed listeners and stop Playwright."""
        if not self._started:
            return
        try:
            self._execute_async(self._close_all())
            self.close_platform()
            if self._playwright:
                self._execute_async(self._playwright.stop())
        finally:
            self._playwright = None
            self._started = False
            logger.info("Driver shut down")

    def __del__(self):
        """Cleanup on destruction."""
        try:
            self.shutdown()
        except Exception as e:
            logger.debug(f"Cleanup error: {e}")
