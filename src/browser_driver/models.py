"""
Pydantic models for the interaction driver.

This module defines the wire-level action requests accepted by the driver and
the typed option structs that JSON-encoded option blobs are decoded into.
"""

from enum import Enum
from typing import Annotated, List, Literal, Optional, Sequence, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class TargetKind(str, Enum):
    """Capability object an engine call is dispatched onto."""

    ELEMENT = "element"
    PAGE = "page"
    MOUSE = "mouse"
    KEYBOARD = "keyboard"


class MouseButtonAction(str, Enum):
    CLICK = "click"
    DOWN = "down"
    UP = "up"


class KeyboardKeyAction(str, Enum):
    DOWN = "down"
    UP = "up"
    PRESS = "press"


class KeyboardInputAction(str, Enum):
    INSERT_TEXT = "insertText"
    TYPE = "type"


class AlertAction(str, Enum):
    ACCEPT = "accept"
    DISMISS = "dismiss"


# Option structs decoded from JSON blobs. Both snake_case and the camelCase
# names used by front ends are accepted; unknown keys are rejected.


class _OptionStruct(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid", frozen=True)

    def to_kwargs(self) -> dict:
        """Engine keyword arguments, leaving out everything not set."""
        return self.model_dump(exclude_none=True)


class Position(_OptionStruct):
    x: float
    y: float


Modifier = Literal["Alt", "Control", "ControlOrMeta", "Meta", "Shift"]
MouseButton = Literal["left", "middle", "right"]


class HoverOptions(_OptionStruct):
    """Options for hovering an element. All fields default to the engine's defaults."""

    force: Optional[bool] = None
    modifiers: Optional[List[Modifier]] = None
    position: Optional[Position] = None
    timeout: Optional[float] = Field(default=None, ge=0, description="Maximum time in milliseconds")
    no_wait_after: Optional[bool] = None
    trial: Optional[bool] = None


class ClickOptions(HoverOptions):
    """Options for clicking an element."""

    button: Optional[MouseButton] = None
    click_count: Optional[int] = Field(default=None, ge=1)
    delay: Optional[float] = Field(default=None, ge=0, description="Time between mousedown and mouseup in ms")


class MouseButtonOptions(_OptionStruct):
    """
    Body of a mouse button action.

    x and y are required for click and ignored for down/up, which act at the
    current mouse position.
    """

    x: Optional[float] = None
    y: Optional[float] = None
    button: MouseButton = "left"
    click_count: int = Field(default=1, ge=1)
    delay: float = Field(default=0, ge=0)


class MouseMoveOptions(_OptionStruct):
    x: float
    y: float
    steps: int = Field(default=1, ge=1, description="Number of intermediate mousemove events")


class OptionDescriptor(_OptionStruct):
    """Matches a single <option> by exactly one of value, label or index."""

    value: Optional[str] = None
    label: Optional[str] = None
    index: Optional[int] = Field(default=None, ge=0)

    @model_validator(mode="after")
    def _require_one_key(self) -> "OptionDescriptor":
        given = [v for v in (self.value, self.label, self.index) if v is not None]
        if len(given) != 1:
            raise ValueError("option descriptor needs exactly one of value, label or index")
        return self


class OptionMatcher(BaseModel):
    """Normalized select-option matcher."""

    model_config = ConfigDict(frozen=True)

    values: List[str] = Field(default_factory=list)
    labels: List[str] = Field(default_factory=list)
    indexes: List[int] = Field(default_factory=list)

    def is_empty(self) -> bool:
        return not (self.values or self.labels or self.indexes)

    def restrict_to(self, options: Sequence[Tuple[str, str]]) -> "OptionMatcher":
        """
        Keep only the entries that match one of ``options``, given as (value, label) pairs.

        Plain values match an option value or label, the way the engine matches them.
        """
        option_values = {value for value, _ in options}
        option_labels = {label for _, label in options}
        return OptionMatcher(
            values=[v for v in self.values if v in option_values or v in option_labels],
            labels=[label for label in self.labels if label in option_labels],
            indexes=[i for i in self.indexes if i < len(options)],
        )

    def to_kwargs(self) -> dict:
        kwargs = {}
        if self.values:
            kwargs["value"] = list(self.values)
        if self.labels:
            kwargs["label"] = list(self.labels)
        if self.indexes:
            kwargs["index"] = list(self.indexes)
        return kwargs


# Action requests. Every request is immutable once decoded.


class _Action(BaseModel):
    model_config = ConfigDict(frozen=True)

    page_id: Optional[str] = Field(
        default=None,
        description="Explicit target page. Falls back to the active page when omitted.",
    )


class _ElementAction(_Action):
    selector: str = Field(min_length=1, description="Element selector, resolved by the browser engine")


class SelectOptionAction(_ElementAction):
    """
    Select options of a <select> element.

    matcher_json is a JSON string: a value, a list of values, an option
    descriptor with exactly one key ({"value"|"label"|"index": ...}) or a
    list of those. Entries naming options the element does not have are
    skipped; fails when none is left.
    """

    type: Literal["select_option"] = Field(description="Select options in a select element")
    matcher_json: str = Field(description="JSON-encoded option matcher")


class DeselectOptionAction(_ElementAction):
    type: Literal["deselect_option"] = Field(description="Deselect all options of a select element")


class InputTextAction(_ElementAction):
    """Input text with fill, or with simulated key strokes when simulate_typing is set."""

    type: Literal["input_text"] = Field(description="Input text into an element")
    input: str = Field(description="Text to input")
    simulate_typing: bool = Field(default=False, description="Use per-character key events instead of fill")


class TypeTextAction(_ElementAction):
    type: Literal["type_text"] = Field(description="Type text with key events")
    text: str
    delay: float = Field(default=0, ge=0, description="Delay between key strokes in milliseconds")
    clear: bool = Field(default=True, description="Clear the field before typing")


class FillTextAction(_ElementAction):
    type: Literal["fill_text"] = Field(description="Set the value of an input field")
    text: str


class ClearTextAction(_ElementAction):
    type: Literal["clear_text"] = Field(description="Clear an input field")


class PressKeysAction(_ElementAction):
    """
    Press keys on an element, one after the other.

    Examples:
    - {"type": "press_keys", "selector": "#search", "keys": ["H", "i", "Enter"]}
    - {"type": "press_keys", "selector": "#editor", "keys": ["Control+A", "Delete"]}
    """

    type: Literal["press_keys"] = Field(description="Press a sequence of keys on an element")
    keys: List[str] = Field(default_factory=list)


class ClickAction(_ElementAction):
    """
    Click an element.

    Examples:
    - {"type": "click", "selector": "#submit"}
    - {"type": "click", "selector": "#submit", "options_json": "{\\"button\\": \\"right\\", \\"clickCount\\": 2}"}
    """

    type: Literal["click"] = Field(description="Click an element")
    options_json: str = Field(default="{}", description="JSON-encoded click options")


class HoverAction(_ElementAction):
    type: Literal["hover"] = Field(description="Hover an element")
    options_json: str = Field(default="{}", description="JSON-encoded hover options")


class FocusAction(_ElementAction):
    type: Literal["focus"] = Field(description="Focus an element")


class CheckCheckboxAction(_ElementAction):
    type: Literal["check_checkbox"] = Field(description="Check a checkbox or radio button")


class UncheckCheckboxAction(_ElementAction):
    type: Literal["uncheck_checkbox"] = Field(description="Uncheck a checkbox")


class UploadFileAction(_Action):
    type: Literal["upload_file"] = Field(description="Set files on the next file chooser")
    path: Union[str, List[str]] = Field(description="File path or paths to upload")


class HandleAlertAction(_Action):
    type: Literal["handle_alert"] = Field(description="Handle the next dialog")
    alert_action: str = Field(description="accept or dismiss")
    prompt_input: Optional[str] = Field(default=None, description="Text for prompt dialogs, used on accept")


class MouseButtonRequest(_Action):
    type: Literal["mouse_button"] = Field(description="Press, release or click a mouse button")
    action: str = Field(description="click, down or up")
    options_json: str = Field(default="{}", description="JSON-encoded MouseButtonOptions")


class MouseMoveRequest(_Action):
    type: Literal["mouse_move"] = Field(description="Move the mouse")
    body_json: str = Field(description='JSON-encoded {"x": .., "y": .., "steps": ..}')


class KeyboardKeyRequest(_Action):
    type: Literal["keyboard_key"] = Field(description="Press or release a single key")
    action: str = Field(description="down, up or press")
    key: str = Field(min_length=1)


class KeyboardInputRequest(_Action):
    type: Literal["keyboard_input"] = Field(description="Type or insert text with the keyboard")
    action: str = Field(description="insertText or type")
    input: str
    delay: float = Field(default=0, ge=0, description="Delay between key strokes in ms, type only")


# Session lifecycle


class NewBrowserAction(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["new_browser"] = Field(description="Launch or connect a browser")


class NewContextAction(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["new_context"] = Field(description="Open a browser context")
    browser_id: Optional[str] = Field(default=None, description="Defaults to the browser of the active page")
    width: Optional[int] = Field(default=None, gt=0)
    height: Optional[int] = Field(default=None, gt=0)


class NewPageAction(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["new_page"] = Field(description="Open a page and make it active")
    context_id: Optional[str] = Field(default=None, description="Defaults to the context of the active page")
    url: Optional[str] = None


class SwitchPageAction(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["switch_page"] = Field(description="Make a page active")
    page_id: str


class ClosePageAction(_Action):
    type: Literal["close_page"] = Field(description="Close a page, the active one by default")


class CloseContextAction(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["close_context"] = Field(description="Close a context and its pages")
    context_id: Optional[str] = None


class CloseBrowserAction(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["close_browser"] = Field(description="Close a browser and everything it owns")
    browser_id: Optional[str] = None


class ListPagesAction(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["list_pages"] = Field(description="List open pages")


class CloseAllAction(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["close_all"] = Field(description="Close every browser in the session")


DriverAction = Annotated[
    Union[
        SelectOptionAction,
        DeselectOptionAction,
        InputTextAction,
        TypeTextAction,
        FillTextAction,
        ClearTextAction,
        PressKeysAction,
        ClickAction,
        HoverAction,
        FocusAction,
        CheckCheckboxAction,
        UncheckCheckboxAction,
        UploadFileAction,
        HandleAlertAction,
        MouseButtonRequest,
        MouseMoveRequest,
        KeyboardKeyRequest,
        KeyboardInputRequest,
        NewBrowserAction,
        NewContextAction,
        NewPageAction,
        SwitchPageAction,
        ClosePageAction,
        CloseContextAction,
        CloseBrowserAction,
        ListPagesAction,
        CloseAllAction,
    ],
    Field(discriminator="type"),
]


class DriverInput(BaseModel):
    """
    Input for the driver.

    Accepts either a single action OR a list of actions to execute in sequence.

    SINGLE ACTION EXAMPLE:
    {"action": {"type": "fill_text", "selector": "#name", "text": "Ada"}}

    LIST OF ACTIONS EXAMPLE:
    {"action": [
        {"type": "new_page", "url": "http://localhost:8001/"},
        {"type": "click", "selector": "#submit"}
    ]}

    When a list is provided, actions execute in sequence and stop on first error.
    """

    action: Union[DriverAction, List[DriverAction]] = Field(description="Single action or list of actions to execute")
