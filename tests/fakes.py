"""In-memory stand-ins for the Playwright objects the driver talks to."""

from __future__ import annotations

import inspect
from collections import defaultdict
from typing import Any

from browser_driver.browser import Browser
from browser_driver.state import SessionState
from driver_config import BrowserConfig


class _Recorder:
    def __init__(self, calls: list, failures: dict) -> None:
        self.calls = calls
        self.failures = failures

    def _record(self, method: str, *args: Any, **kwargs: Any) -> None:
        self.calls.append((method, args, kwargs))
        if args and (method, args[-1]) in self.failures:
            raise self.failures[(method, args[-1])]
        if method in self.failures:
            raise self.failures[method]


class FakeMouse(_Recorder):
    async def click(self, x: float, y: float, **kwargs: Any) -> None:
        self._record("mouse.click", x, y, **kwargs)

    async def down(self, **kwargs: Any) -> None:
        self._record("mouse.down", **kwargs)

    async def up(self, **kwargs: Any) -> None:
        self._record("mouse.up", **kwargs)

    async def move(self, x: float, y: float, **kwargs: Any) -> None:
        self._record("mouse.move", x, y, **kwargs)


class FakeKeyboard(_Recorder):
    async def down(self, key: str) -> None:
        self._record("keyboard.down", key)

    async def up(self, key: str) -> None:
        self._record("keyboard.up", key)

    async def press(self, key: str, **kwargs: Any) -> None:
        self._record("keyboard.press", key, **kwargs)

    async def type(self, text: str, **kwargs: Any) -> None:
        self._record("keyboard.type", text, **kwargs)

    async def insert_text(self, text: str) -> None:
        self._record("keyboard.insert_text", text)


class FakeDialog:
    def __init__(self, message: str = "Your nickname?", type: str = "prompt") -> None:
        self.message = message
        self.type = type
        self.result: tuple | None = None

    async def accept(self, prompt_text: str | None = None) -> None:
        self.result = ("accept", prompt_text)

    async def dismiss(self) -> None:
        self.result = ("dismiss", None)


class FakeFileChooser:
    def __init__(self) -> None:
        self.files: list[str] | None = None

    async def set_files(self, files: list[str]) -> None:
        self.files = files


class FakePage(_Recorder):
    """A page with a tiny DOM: text fields, checkboxes and select elements."""

    def __init__(self, url: str = "about:blank") -> None:
        super().__init__(calls=[], failures={})
        self.url = url
        self.values: dict[str, str] = {}
        self.checked: dict[str, bool] = {}
        # selector -> list of (value, label)
        self.options: dict[str, list[tuple[str, str]]] = {}
        self.selected: dict[str, list[str]] = {}
        self.listeners: dict[str, list] = defaultdict(list)
        self.mouse = FakeMouse(self.calls, self.failures)
        self.keyboard = FakeKeyboard(self.calls, self.failures)
        self._closed = False

    # Events

    def on(self, event: str, handler: Any) -> None:
        self.listeners[event].append(handler)

    def remove_listener(self, event: str, handler: Any) -> None:
        self.listeners[event].remove(handler)

    async def emit(self, event: str, payload: Any) -> None:
        for handler in list(self.listeners[event]):
            result = handler(payload)
            if inspect.isawaitable(result):
                await result

    # Lifecycle

    def is_closed(self) -> bool:
        return self._closed

    def close_silently(self) -> None:
        """Mark the page closed without emitting the close event."""
        self._closed = True

    async def close(self, **kwargs: Any) -> None:
        self._record("close", **kwargs)
        self._closed = True
        for handler in list(self.listeners["close"]):
            handler(self)

    async def goto(self, url: str, **kwargs: Any) -> None:
        self._record("goto", url, **kwargs)
        self.url = url

    async def bring_to_front(self) -> None:
        self._record("bring_to_front")

    def locator(self, selector: str) -> FakeLocator:
        return FakeLocator(self, selector)

    # Element methods

    async def fill(self, selector: str, value: str, **kwargs: Any) -> None:
        self._record("fill", selector, value, **kwargs)
        self.values[selector] = value

    async def type(self, selector: str, text: str, **kwargs: Any) -> None:
        self._record("type", selector, text, **kwargs)
        self.values[selector] = self.values.get(selector, "") + text

    async def press(self, selector: str, key: str, **kwargs: Any) -> None:
        self._record("press", selector, key, **kwargs)

    async def click(self, selector: str, **kwargs: Any) -> None:
        self._record("click", selector, **kwargs)

    async def hover(self, selector: str, **kwargs: Any) -> None:
        self._record("hover", selector, **kwargs)

    async def focus(self, selector: str, **kwargs: Any) -> None:
        self._record("focus", selector, **kwargs)

    async def check(self, selector: str, **kwargs: Any) -> None:
        self._record("check", selector, **kwargs)
        self.checked[selector] = True

    async def uncheck(self, selector: str, **kwargs: Any) -> None:
        self._record("uncheck", selector, **kwargs)
        self.checked[selector] = False

    async def select_option(
        self,
        selector: str,
        value: list[str] | None = None,
        label: list[str] | None = None,
        index: list[int] | None = None,
        **kwargs: Any,
    ) -> list[str]:
        self._record("select_option", selector, value=value, label=label, index=index, **kwargs)
        options = self.options.get(selector, [])
        values = value or []
        labels = label or []
        indexes = index or []
        option_labels = {option_label for _, option_label in options}
        known = {option_value for option_value, _ in options} | option_labels
        missing = (
            [v for v in values if v not in known]
            + [name for name in labels if name not in option_labels]
            + [i for i in indexes if i >= len(options)]
        )
        if missing:
            # The engine keeps waiting for absent options until the call times out.
            raise TimeoutError(f"Timeout {kwargs.get('timeout', 30000)}ms exceeded. did not find some options")
        matched = [
            option_value
            for i, (option_value, option_label) in enumerate(options)
            if option_value in values or option_label in values or option_label in labels or i in indexes
        ]
        self.selected[selector] = matched
        return matched


class FakeLocator:
    def __init__(self, page: FakePage, selector: str) -> None:
        self._page = page
        self._selector = selector

    @property
    def first(self) -> "FakeLocator":
        return self

    async def evaluate(self, expression: str, **kwargs: Any) -> Any:
        self._page._record("evaluate", self._selector, expression, **kwargs)
        return [[value, label] for value, label in self._page.options.get(self._selector, [])]


class FakeContext:
    def __init__(self) -> None:
        self.pages: list[FakePage] = []
        self.closed = False
        self.viewport: dict | None = None

    async def new_page(self) -> FakePage:
        page = FakePage()
        self.pages.append(page)
        return page

    async def close(self) -> None:
        self.closed = True
        for page in self.pages:
            if not page.is_closed():
                await page.close()


class FakeBrowser:
    def __init__(self) -> None:
        self.contexts: list[FakeContext] = []
        self.closed = False
        self.listeners: dict[str, list] = defaultdict(list)

    def on(self, event: str, handler: Any) -> None:
        self.listeners[event].append(handler)

    async def new_context(self, viewport: dict | None = None) -> FakeContext:
        context = FakeContext()
        context.viewport = viewport
        self.contexts.append(context)
        return context

    async def close(self) -> None:
        self.closed = True
        for context in self.contexts:
            await context.close()


class FakeDriver(Browser):
    """Browser whose engine is made of fakes; Playwright is never started."""

    def __init__(self) -> None:
        super().__init__(BrowserConfig(width=800, height=600))
        self.launched: list[FakeBrowser] = []

    async def create_browser_instance(self) -> FakeBrowser:
        browser = FakeBrowser()
        self.launched.append(browser)
        return browser

    def start_platform(self) -> None:
        pass

    def close_platform(self) -> None:
        pass

    def _start(self) -> None:
        self._started = True


def make_session(*pages: FakePage) -> tuple[SessionState, list[str]]:
    """Session with one browser and context holding ``pages``; the last one is active."""
    state = SessionState()
    browser_id = state.add_browser(FakeBrowser())
    context_id = state.add_context(browser_id, FakeContext())
    page_ids = [state.add_page(context_id, page) for page in pages]
    return state, page_ids
