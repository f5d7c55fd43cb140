"""
Interaction action handlers.

Each handler maps one decoded action request onto dispatcher calls and
returns an ActionResponse. Handlers keep no state between calls; everything
that outlives a call lives in the session state.
"""

import logging

from playwright.async_api import Dialog, FileChooser

from .arguments import as_path_list, decode_matcher, decode_options, parse_enum
from .errors import MalformedArgumentError, NoOptionsMatched
from .invoke import Dispatcher
from .models import (
    AlertAction,
    CheckCheckboxAction,
    ClearTextAction,
    ClickAction,
    ClickOptions,
    DeselectOptionAction,
    FillTextAction,
    FocusAction,
    HandleAlertAction,
    HoverAction,
    HoverOptions,
    InputTextAction,
    KeyboardInputAction,
    KeyboardInputRequest,
    KeyboardKeyAction,
    KeyboardKeyRequest,
    MouseButtonAction,
    MouseButtonOptions,
    MouseButtonRequest,
    MouseMoveOptions,
    MouseMoveRequest,
    PressKeysAction,
    SelectOptionAction,
    TargetKind,
    TypeTextAction,
    UncheckCheckboxAction,
    UploadFileAction,
)
from .responses import ActionResponse, empty_with_log, value_with_log

logger = logging.getLogger(__name__)


# (value, label) of every <option>; empty for elements that are not a <select>.
READ_OPTIONS = "el => Array.from(el.options || [], o => [o.value, o.label])"


async def select_option(action: SelectOptionAction, dispatcher: Dispatcher) -> ActionResponse:
    matcher = decode_matcher(action.matcher_json)
    # The engine waits for every requested option to appear, so filter out
    # the ones the element does not have before asking it to select.
    options = await dispatcher.invoke(
        TargetKind.ELEMENT, "evaluate", READ_OPTIONS, selector=action.selector, page_id=action.page_id, allow_empty=True
    )
    available = matcher.restrict_to(options.value or [])
    if available.is_empty():
        logger.info("Couldn't select any options")
        raise NoOptionsMatched(action.matcher_json)
    if available != matcher:
        logger.info(f"No options matched some of {action.matcher_json}, selecting {available.to_kwargs()}")

    outcome = await dispatcher.invoke(
        TargetKind.ELEMENT,
        "select_option",
        selector=action.selector,
        page_id=action.page_id,
        allow_empty=True,
        **available.to_kwargs(),
    )
    if outcome.is_empty or outcome.value is None:
        logger.info("Couldn't select any options")
        raise NoOptionsMatched(action.matcher_json)
    return value_with_log(f"Selected options {outcome.value} in element {action.selector}", outcome.value)


async def deselect_option(action: DeselectOptionAction, dispatcher: Dispatcher) -> ActionResponse:
    # Selecting the empty set deselects everything; an empty result is the expected outcome.
    await dispatcher.invoke(
        TargetKind.ELEMENT, "select_option", selector=action.selector, page_id=action.page_id, allow_empty=True
    )
    return empty_with_log(f"Deselected options in element {action.selector}")


async def input_text(action: InputTextAction, dispatcher: Dispatcher) -> ActionResponse:
    method = "type" if action.simulate_typing else "fill"
    await dispatcher.invoke(TargetKind.ELEMENT, method, action.input, selector=action.selector, page_id=action.page_id)
    return empty_with_log(f"Input text: {action.input}")


async def type_text(action: TypeTextAction, dispatcher: Dispatcher) -> ActionResponse:
    if action.clear:
        await dispatcher.invoke(TargetKind.ELEMENT, "fill", "", selector=action.selector, page_id=action.page_id)
    await dispatcher.invoke(
        TargetKind.ELEMENT, "type", action.text, selector=action.selector, page_id=action.page_id, delay=action.delay
    )
    return empty_with_log(f"Typed text: {action.text}")


async def fill_text(action: FillTextAction, dispatcher: Dispatcher) -> ActionResponse:
    await dispatcher.invoke(TargetKind.ELEMENT, "fill", action.text, selector=action.selector, page_id=action.page_id)
    return empty_with_log(f"Fill text: {action.text}")


async def clear_text(action: ClearTextAction, dispatcher: Dispatcher) -> ActionResponse:
    await dispatcher.invoke(TargetKind.ELEMENT, "fill", "", selector=action.selector, page_id=action.page_id)
    return empty_with_log("Text field cleared.")


async def press_keys(action: PressKeysAction, dispatcher: Dispatcher) -> ActionResponse:
    # Fail fast: a failing key aborts the rest of the sequence.
    for key in action.keys:
        await dispatcher.invoke(TargetKind.ELEMENT, "press", key, selector=action.selector, page_id=action.page_id)
    return empty_with_log(f"Pressed keys: {','.join(action.keys)}")


async def click(action: ClickAction, dispatcher: Dispatcher) -> ActionResponse:
    options = decode_options(action.options_json, ClickOptions)
    await dispatcher.invoke(TargetKind.ELEMENT, "click", selector=action.selector, page_id=action.page_id, **options.to_kwargs())
    return empty_with_log(f"Clicked element: '{action.selector}' with options: '{action.options_json}'")


async def hover(action: HoverAction, dispatcher: Dispatcher) -> ActionResponse:
    options = decode_options(action.options_json, HoverOptions)
    await dispatcher.invoke(TargetKind.ELEMENT, "hover", selector=action.selector, page_id=action.page_id, **options.to_kwargs())
    return empty_with_log(f"Hovered element: '{action.selector}' with options: '{action.options_json}'")


async def focus(action: FocusAction, dispatcher: Dispatcher) -> ActionResponse:
    await dispatcher.invoke(TargetKind.ELEMENT, "focus", selector=action.selector, page_id=action.page_id)
    return empty_with_log(f"Focused element: {action.selector}")


async def check_checkbox(action: CheckCheckboxAction, dispatcher: Dispatcher) -> ActionResponse:
    await dispatcher.invoke(TargetKind.ELEMENT, "check", selector=action.selector, page_id=action.page_id)
    return empty_with_log(f"Checked checkbox: {action.selector}")


async def uncheck_checkbox(action: UncheckCheckboxAction, dispatcher: Dispatcher) -> ActionResponse:
    await dispatcher.invoke(TargetKind.ELEMENT, "uncheck", selector=action.selector, page_id=action.page_id)
    return empty_with_log(f"Unchecked checkbox: {action.selector}")


async def upload_file(action: UploadFileAction, dispatcher: Dispatcher) -> ActionResponse:
    paths = as_path_list(action.path)

    async def set_files(file_chooser: FileChooser) -> None:
        await file_chooser.set_files(paths)

    dispatcher.arm_once("filechooser", set_files, page_id=action.page_id, description=f"upload {paths}")
    return empty_with_log("Successfully armed file upload for next file chooser")


async def handle_alert(action: HandleAlertAction, dispatcher: Dispatcher) -> ActionResponse:
    alert_action = parse_enum(action.alert_action, AlertAction, "alert_action")
    prompt_input = action.prompt_input

    async def respond(dialog: Dialog) -> None:
        logger.info(f"Handling {dialog.type} dialog with {alert_action.value}: {dialog.message}")
        if alert_action is AlertAction.ACCEPT:
            if prompt_input:
                await dialog.accept(prompt_input)
            else:
                await dialog.accept()
        else:
            await dialog.dismiss()

    dispatcher.arm_once("dialog", respond, page_id=action.page_id, description=f"{alert_action.value} next dialog")
    return empty_with_log("Set event handler for next alert")


async def mouse_button(action: MouseButtonRequest, dispatcher: Dispatcher) -> ActionResponse:
    button_action = parse_enum(action.action, MouseButtonAction, "mouse action")
    options = decode_options(action.options_json, MouseButtonOptions)
    if button_action is MouseButtonAction.CLICK:
        if options.x is None or options.y is None:
            raise MalformedArgumentError("Mouse click needs both x and y")
        await dispatcher.invoke(
            TargetKind.MOUSE,
            "click",
            options.x,
            options.y,
            page_id=action.page_id,
            button=options.button,
            click_count=options.click_count,
            delay=options.delay,
        )
    else:
        await dispatcher.invoke(
            TargetKind.MOUSE,
            button_action.value,
            page_id=action.page_id,
            button=options.button,
            click_count=options.click_count,
        )
    return empty_with_log(f"Successfully executed {button_action.value}")


async def mouse_move(action: MouseMoveRequest, dispatcher: Dispatcher) -> ActionResponse:
    body = decode_options(action.body_json, MouseMoveOptions, field_name="body_json")
    await dispatcher.invoke(TargetKind.MOUSE, "move", body.x, body.y, page_id=action.page_id, steps=body.steps)
    return empty_with_log(f"Successfully moved mouse to {body.x}, {body.y}")


async def keyboard_key(action: KeyboardKeyRequest, dispatcher: Dispatcher) -> ActionResponse:
    key_action = parse_enum(action.action, KeyboardKeyAction, "keyboard action")
    await dispatcher.invoke(TargetKind.KEYBOARD, key_action.value, action.key, page_id=action.page_id)
    return empty_with_log(f"Successfully did {key_action.value} for {action.key}")


async def keyboard_input(action: KeyboardInputRequest, dispatcher: Dispatcher) -> ActionResponse:
    input_action = parse_enum(action.action, KeyboardInputAction, "keyboard input action")
    if input_action is KeyboardInputAction.TYPE:
        await dispatcher.invoke(TargetKind.KEYBOARD, "type", action.input, page_id=action.page_id, delay=action.delay)
    else:
        await dispatcher.invoke(TargetKind.KEYBOARD, "insertText", action.input, page_id=action.page_id)
    return empty_with_log(f"Successfully did virtual keyboard action {input_action.value} with input {action.input}")


HANDLERS = {
    SelectOptionAction: select_option,
    DeselectOptionAction: deselect_option,
    InputTextAction: input_text,
    TypeTextAction: type_text,
    FillTextAction: fill_text,
    ClearTextAction: clear_text,
    PressKeysAction: press_keys,
    ClickAction: click,
    HoverAction: hover,
    FocusAction: focus,
    CheckCheckboxAction: check_checkbox,
    UncheckCheckboxAction: uncheck_checkbox,
    UploadFileAction: upload_file,
    HandleAlertAction: handle_alert,
    MouseButtonRequest: mouse_button,
    MouseMoveRequest: mouse_move,
    KeyboardKeyRequest: keyboard_key,
    KeyboardInputRequest: keyboard_input,
}
