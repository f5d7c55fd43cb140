"""
Generic invoker.

Every action handler reaches the browser engine through Dispatcher.invoke():
resolve the target page from the session state, pick the capability object
(page, mouse or keyboard), look the method up in a closed dispatch table and
normalize whatever the engine returns.

Each invoke() performs exactly one engine call. There is no retry, caching or
batching here; timeouts travel in the per-call options and come back as
EngineInvocationError.
"""

import inspect
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple

from playwright.async_api import Page

from .errors import DriverError, EngineInvocationError, MalformedArgumentError, SoftMatchFailure, StaleTargetError
from .listeners import OneShotListener
from .models import TargetKind
from .state import SessionState

logger = logging.getLogger(__name__)


class ResultShape(str, Enum):
    NONE = "none"
    SCALAR = "scalar"
    LIST = "list"
    EMPTY_LIST = "empty_list"


@dataclass(frozen=True)
class InvocationOutcome:
    value: Any
    shape: ResultShape

    @classmethod
    def from_result(cls, value: Any) -> "InvocationOutcome":
        if value is None:
            return cls(value=None, shape=ResultShape.NONE)
        if isinstance(value, (list, tuple)):
            return cls(value=list(value), shape=ResultShape.LIST if value else ResultShape.EMPTY_LIST)
        return cls(value=value, shape=ResultShape.SCALAR)

    @property
    def is_empty(self) -> bool:
        return self.shape is ResultShape.EMPTY_LIST


EngineCall = Callable[..., Any]

# (target kind, method) -> call against the resolved capability object.
# Element calls receive the page plus the selector as first argument.
DISPATCH_TABLE: Dict[Tuple[TargetKind, str], EngineCall] = {
    (TargetKind.ELEMENT, "fill"): lambda page, selector, value, **kw: page.fill(selector, value, **kw),
    (TargetKind.ELEMENT, "type"): lambda page, selector, text, **kw: page.type(selector, text, **kw),
    (TargetKind.ELEMENT, "press"): lambda page, selector, key, **kw: page.press(selector, key, **kw),
    (TargetKind.ELEMENT, "click"): lambda page, selector, **kw: page.click(selector, **kw),
    (TargetKind.ELEMENT, "hover"): lambda page, selector, **kw: page.hover(selector, **kw),
    (TargetKind.ELEMENT, "focus"): lambda page, selector, **kw: page.focus(selector, **kw),
    (TargetKind.ELEMENT, "check"): lambda page, selector, **kw: page.check(selector, **kw),
    (TargetKind.ELEMENT, "uncheck"): lambda page, selector, **kw: page.uncheck(selector, **kw),
    (TargetKind.ELEMENT, "select_option"): lambda page, selector, **kw: page.select_option(selector, **kw),
    (TargetKind.ELEMENT, "evaluate"): lambda page, selector, expression, **kw: page.locator(selector).first.evaluate(
        expression, **kw
    ),
    (TargetKind.PAGE, "goto"): lambda page, url, **kw: page.goto(url, **kw),
    (TargetKind.PAGE, "close"): lambda page, **kw: page.close(**kw),
    (TargetKind.MOUSE, "click"): lambda mouse, x, y, **kw: mouse.click(x, y, **kw),
    (TargetKind.MOUSE, "down"): lambda mouse, **kw: mouse.down(**kw),
    (TargetKind.MOUSE, "up"): lambda mouse, **kw: mouse.up(**kw),
    (TargetKind.MOUSE, "move"): lambda mouse, x, y, **kw: mouse.move(x, y, **kw),
    (TargetKind.KEYBOARD, "down"): lambda keyboard, key: keyboard.down(key),
    (TargetKind.KEYBOARD, "up"): lambda keyboard, key: keyboard.up(key),
    (TargetKind.KEYBOARD, "press"): lambda keyboard, key, **kw: keyboard.press(key, **kw),
    (TargetKind.KEYBOARD, "type"): lambda keyboard, text, **kw: keyboard.type(text, **kw),
    (TargetKind.KEYBOARD, "insertText"): lambda keyboard, text: keyboard.insert_text(text),
}


class Dispatcher:
    """Executes named engine operations against targets resolved from the session."""

    def __init__(self, state: SessionState):
        self._state = state

    @property
    def state(self) -> SessionState:
        return self._state

    def resolve(self, kind: TargetKind, page_id: Optional[str] = None) -> Any:
        return self._capability(self._state.resolve_target(page_id), kind)

    async def invoke(
        self,
        kind: TargetKind,
        method: str,
        *args: Any,
        selector: Optional[str] = None,
        page_id: Optional[str] = None,
        allow_empty: bool = False,
        **options: Any,
    ) -> InvocationOutcome:
        """
        Call ``method`` on the capability of ``kind``.

        Args:
            kind: element, page, mouse or keyboard
            method: method tag from DISPATCH_TABLE
            *args: positional engine arguments, appended after the selector
            selector: element selector, required for element calls
            page_id: explicit target page, the active page when omitted
            allow_empty: accept an empty list result instead of raising SoftMatchFailure
            **options: per-call engine options

        Returns:
            InvocationOutcome with the raw engine value and its shape
        """
        call = DISPATCH_TABLE.get((kind, method))
        if call is None:
            raise MalformedArgumentError(f"Unsupported {kind.value} method '{method}'")
        if kind is TargetKind.ELEMENT and not selector:
            raise MalformedArgumentError(f"Element method '{method}' needs a selector")

        page = self._state.resolve_target(page_id)
        target = self._capability(page, kind)
        call_args = (selector, *args) if kind is TargetKind.ELEMENT else args
        label = f"{kind.value}.{method}"
        logger.debug(f"Invoking {label} args={call_args} options={options}")

        try:
            result = call(target, *call_args, **options)
            if inspect.isawaitable(result):
                result = await result
        except DriverError:
            raise
        except Exception as e:
            if page.is_closed():
                closed_id = self._state.page_id_of(page)
                if closed_id:
                    self._state.forget_page(closed_id)
                raise StaleTargetError(f"{label} failed, page has been closed: {e}") from e
            logger.error(f"{label} failed: {e}", exc_info=True)
            raise EngineInvocationError(label, e) from e

        outcome = InvocationOutcome.from_result(result)
        if outcome.is_empty and not allow_empty:
            target_text = f" on '{selector}'" if selector else ""
            raise SoftMatchFailure(f"No matches for {label}{target_text}")
        logger.debug(f"{label} returned {outcome.shape.value}")
        return outcome

    def arm_once(
        self,
        event: str,
        callback: Callable[[Any], Awaitable[None]],
        page_id: Optional[str] = None,
        description: str = "",
    ) -> OneShotListener:
        """Arm a one-shot listener for the next ``event`` on the target page."""
        page = self.resolve(TargetKind.PAGE, page_id)
        return self._state.arm_listener(page, event, callback, description=description)

    @staticmethod
    def _capability(page: Page, kind: TargetKind) -> Any:
        if kind is TargetKind.MOUSE:
            return page.mouse
        if kind is TargetKind.KEYBOARD:
            return page.keyboard
        return page

