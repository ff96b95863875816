"""
Lowering of platform actions to line-bot-sdk constructor calls.

Each action type maps to one constructor. An unrecognised type becomes a
labelled ``MessageAction`` so the button it belongs to is still rendered.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from pydantic import ValidationError

from botblocks.core.ir import Action, ActionType

from .context import LoweringContext
from .statements import Call, call


def _message(a: Action) -> Call:
    return call("MessageAction", label=a.label or "Message", text=a.text or "Hello")


def _uri(a: Action) -> Call:
    return call("URIAction", label=a.label or "Link", uri=a.uri or "https://example.com")


def _postback(a: Action) -> Call:
    return call(
        "PostbackAction",
        label=a.label or "Postback",
        data=a.data or "action_data",
        display_text=a.display_text or None,
        text=a.text or None,
    )


def _camera(a: Action) -> Call:
    return call("CameraAction", label=a.label or "Camera")


def _camera_roll(a: Action) -> Call:
    return call("CameraRollAction", label=a.label or "Camera Roll")


def _location(a: Action) -> Call:
    return call("LocationAction", label=a.label or "Location")


def _datetime_picker(a: Action) -> Call:
    return call(
        "DatetimePickerAction",
        label=a.label or "Select date",
        data=a.data or "datetime_selected",
        mode=a.mode or "datetime",
        initial=a.initial or None,
        max=a.max or None,
        min=a.min or None,
    )


def _richmenu_switch(a: Action) -> Call:
    return call(
        "RichMenuSwitchAction",
        label=a.label or None,
        rich_menu_alias_id=a.rich_menu_alias_id or "alias_1",
        data=a.data or "richmenu_switched",
    )


def _clipboard(a: Action) -> Call:
    return call("ClipboardAction", label=a.label or None, clipboard_text=a.clipboard_text or "Copied text")


ACTION_LOWERINGS: dict[ActionType, Callable[[Action], Call]] = {
    ActionType.MESSAGE: _message,
    ActionType.URI: _uri,
    ActionType.POSTBACK: _postback,
    ActionType.CAMERA: _camera,
    ActionType.CAMERA_ROLL: _camera_roll,
    ActionType.LOCATION: _location,
    ActionType.DATETIME_PICKER: _datetime_picker,
    ActionType.RICHMENU_SWITCH: _richmenu_switch,
    ActionType.CLIPBOARD: _clipboard,
}


def lower_action(action: Action | dict[str, Any] | None, ctx: LoweringContext) -> Call:
    """Constructor call for one action, degrading unknown or unreadable actions."""
    if isinstance(action, dict):
        try:
            action = Action.model_validate(action)
        except ValidationError:
            ctx.warn("Unreadable action replaced with a message action")
            return call("MessageAction", label="Unknown", text="Unsupported action")
    if action is None:
        action = Action()

    action_type = action.action_type
    if action_type is None:
        ctx.warn(f"Unsupported action type '{action.type}' replaced with a message action")
        return call(
            "MessageAction",
            label=action.label or "Unknown",
            text=f"Unsupported action type: {action.type}",
        )
    return ACTION_LOWERINGS[action_type](action)


def lower_actions(actions: list[Any], ctx: LoweringContext) -> list[Call]:
    return [lower_action(a, ctx) for a in actions]
