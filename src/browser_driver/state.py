"""
Session state registry.

Tracks the browsers, contexts and pages of the driver session and which page
is active. The registry only holds references; launching and closing engine
objects is done by the lifecycle actions in browser.py, which then record the
result here.

Active page policy: when the active page goes away, the most recently opened
page still open in the same context becomes active. If that context has no
open page left, the active reference is cleared and implicit calls fail with
NoActivePage until a page is opened or switched to.

Mutations that span an await (closing a page, then forgetting it) run under
``lock``. Resolution never awaits, so it always sees a consistent snapshot
and refuses pages the engine reports as closed.
"""

import asyncio
import itertools
import logging
import uuid
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional

from playwright.async_api import Browser as PlaywrightBrowser
from playwright.async_api import BrowserContext, Page

from .errors import NoActivePage, StaleTargetError
from .listeners import OneShotListener

logger = logging.getLogger(__name__)


@dataclass
class PageEntry:
    page_id: str
    page: Page
    context_id: str
    browser_id: str
    sequence: int


@dataclass
class ContextEntry:
    context_id: str
    context: BrowserContext
    browser_id: str
    page_ids: List[str] = field(default_factory=list)


@dataclass
class BrowserEntry:
    browser_id: str
    browser: PlaywrightBrowser
    context_ids: List[str] = field(default_factory=list)


class SessionState:
    """Browsers, contexts, pages and the active page of one driver session."""

    def __init__(self):
        self._browsers: Dict[str, BrowserEntry] = {}
        self._contexts: Dict[str, ContextEntry] = {}
        self._pages: Dict[str, PageEntry] = {}
        self._active_page_id: Optional[str] = None
        self._listeners: List[OneShotListener] = []
        self._sequence = itertools.count(1)
        self.lock = asyncio.Lock()

    # Registration

    def add_browser(self, browser: PlaywrightBrowser) -> str:
        browser_id = f"browser={uuid.uuid4()}"
        self._browsers[browser_id] = BrowserEntry(browser_id=browser_id, browser=browser)
        logger.info(f"Registered {browser_id}")
        return browser_id

    def add_context(self, browser_id: str, context: BrowserContext) -> str:
        browser_entry = self._browsers.get(browser_id)
        if browser_entry is None:
            raise StaleTargetError(f"Browser '{browser_id}' does not exist or has been closed")
        context_id = f"context={uuid.uuid4()}"
        self._contexts[context_id] = ContextEntry(context_id=context_id, context=context, browser_id=browser_id)
        browser_entry.context_ids.append(context_id)
        logger.info(f"Registered {context_id} in {browser_id}")
        return context_id

    def add_page(self, context_id: str, page: Page, activate: bool = True) -> str:
        context_entry = self._contexts.get(context_id)
        if context_entry is None:
            raise StaleTargetError(f"Context '{context_id}' does not exist or has been closed")
        page_id = f"page={uuid.uuid4()}"
        self._pages[page_id] = PageEntry(
            page_id=page_id,
            page=page,
            context_id=context_id,
            browser_id=context_entry.browser_id,
            sequence=next(self._sequence),
        )
        context_entry.page_ids.append(page_id)
        page.on("close", lambda _: self.forget_page(page_id))
        logger.info(f"Registered {page_id} in {context_id}")
        if activate:
            self._active_page_id = page_id
        return page_id

    # Active page

    @property
    def active_page_id(self) -> Optional[str]:
        return self._active_page_id

    def set_active(self, page_id: str) -> None:
        self._live_entry(page_id)
        self._active_page_id = page_id
        logger.info(f"Active page is now {page_id}")

    def clear_active(self) -> None:
        self._active_page_id = None

    # Resolution

    def resolve_active_page(self) -> Page:
        if self._active_page_id is None:
            raise NoActivePage()
        return self._live_entry(self._active_page_id).page

    def resolve_target(self, page_id: Optional[str] = None) -> Page:
        """Explicit page when given, otherwise the active page."""
        if page_id:
            return self._live_entry(page_id).page
        return self.resolve_active_page()

    def resolve_page_id(self, page_id: Optional[str] = None) -> str:
        if page_id:
            return self._live_entry(page_id).page_id
        if self._active_page_id is None:
            raise NoActivePage()
        return self._live_entry(self._active_page_id).page_id

    def resolve_context_id(self, context_id: Optional[str] = None) -> str:
        """Explicit context when given, otherwise the context of the active page."""
        if context_id:
            if context_id not in self._contexts:
                raise StaleTargetError(f"Context '{context_id}' does not exist or has been closed")
            return context_id
        return self._pages[self.resolve_page_id()].context_id

    def resolve_browser_id(self, browser_id: Optional[str] = None) -> str:
        if browser_id:
            if browser_id not in self._browsers:
                raise StaleTargetError(f"Browser '{browser_id}' does not exist or has been closed")
            return browser_id
        return self._pages[self.resolve_page_id()].browser_id

    def _live_entry(self, page_id: str) -> PageEntry:
        entry = self._pages.get(page_id)
        if entry is None:
            raise StaleTargetError(f"Page '{page_id}' does not exist or has been closed")
        if entry.page.is_closed():
            self.forget_page(page_id)
            raise StaleTargetError(f"Page '{page_id}' has been closed")
        return entry

    # Lookups

    def context(self, context_id: str) -> BrowserContext:
        return self._contexts[context_id].context

    def browser(self, browser_id: str) -> PlaywrightBrowser:
        return self._browsers[browser_id].browser

    def page_ids(self, context_id: str) -> List[str]:
        return list(self._contexts[context_id].page_ids)

    def context_ids(self, browser_id: str) -> List[str]:
        return list(self._browsers[browser_id].context_ids)

    def browser_ids(self) -> List[str]:
        return list(self._browsers)

    def page(self, page_id: str) -> Page:
        return self._pages[page_id].page

    def page_id_of(self, page: Page) -> Optional[str]:
        for entry in self._pages.values():
            if entry.page is page:
                return entry.page_id
        return None

    def snapshot(self) -> List[Dict[str, Any]]:
        return [
            {
                "page_id": entry.page_id,
                "context_id": entry.context_id,
                "browser_id": entry.browser_id,
                "url": entry.page.url,
                "active": entry.page_id == self._active_page_id,
            }
            for entry in sorted(self._pages.values(), key=lambda e: e.sequence)
        ]

    # Removal

    def forget_page(self, page_id: str) -> None:
        entry = self._pages.pop(page_id, None)
        if entry is None:
            return
        self.discard_listeners(entry.page)
        context_entry = self._contexts.get(entry.context_id)
        if context_entry and page_id in context_entry.page_ids:
            context_entry.page_ids.remove(page_id)
        logger.info(f"Forgot {page_id}")
        if self._active_page_id == page_id:
            self._promote_after(entry)

    def forget_context(self, context_id: str) -> None:
        context_entry = self._contexts.get(context_id)
        if context_entry is None:
            return
        for page_id in list(context_entry.page_ids):
            self.forget_page(page_id)
        del self._contexts[context_id]
        browser_entry = self._browsers.get(context_entry.browser_id)
        if browser_entry and context_id in browser_entry.context_ids:
            browser_entry.context_ids.remove(context_id)
        logger.info(f"Forgot {context_id}")

    def forget_browser(self, browser_id: str) -> None:
        browser_entry = self._browsers.get(browser_id)
        if browser_entry is None:
            return
        for context_id in list(browser_entry.context_ids):
            self.forget_context(context_id)
        del self._browsers[browser_id]
        logger.info(f"Forgot {browser_id}")

    def _promote_after(self, closed: PageEntry) -> None:
        siblings = [
            entry
            for entry in self._pages.values()
            if entry.context_id == closed.context_id and not entry.page.is_closed()
        ]
        if siblings:
            promoted = max(siblings, key=lambda e: e.sequence)
            self._active_page_id = promoted.page_id
            logger.info(f"Active page closed, promoted {promoted.page_id}")
        else:
            self._active_page_id = None
            logger.info("Active page closed, no page is active")

    # One-shot listeners

    def arm_listener(
        self,
        page: Page,
        event: str,
        callback: Callable[[Any], Awaitable[None]],
        description: str = "",
    ) -> OneShotListener:
        listener = OneShotListener(page, event, callback, description=description, on_detached=self._untrack)
        self._listeners.append(listener)
        listener.arm()
        return listener

    def armed_listeners(self) -> List[OneShotListener]:
        return list(self._listeners)

    def discard_listeners(self, page: Optional[Page] = None) -> None:
        for listener in list(self._listeners):
            if page is None or listener.page is page:
                listener.discard()

    def _untrack(self, listener: OneShotListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def clear(self) -> None:
        """Forget everything. Armed listeners are discarded without firing."""
        self.discard_listeners()
        for browser_id in list(self._browsers):
            self.forget_browser(browser_id)
        self._active_page_id = None
