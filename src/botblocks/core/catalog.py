"""
Built-in block definitions.

One definition per block kind. Definitions of one family share the family
``block_type`` and differ in the discriminator value in ``default_data``.
The default per-category compatibility rules live here too.
"""

from __future__ import annotations

from typing import Any

from .ir import (
    KIND_KEYS,
    BlockDefinition,
    Category,
    CompatibilityRule,
    ConfigOption,
    ConfigValidation,
    ConfigValueType,
    Restrictions,
    WorkspaceContext,
)
from .limits import DEFAULT_LIMITS, FlexLimits

LOGIC = [WorkspaceContext.LOGIC]
BOTH = [WorkspaceContext.LOGIC, WorkspaceContext.FLEX]

HTTPS_URL = ConfigValidation(pattern=r"^https://", message="URL must use HTTPS")
HEX_COLOR = ConfigValidation(pattern=r"^#[0-9A-Fa-f]{6}$", message="Color must be a hex code like #FF0000")
_FLEX = {Category.FLEX_CONTAINER, Category.FLEX_CONTENT, Category.FLEX_LAYOUT}


def _define(
    definition_id: str,
    category: Category,
    kind: str,
    display_name: str,
    description: str,
    *,
    compatibility: list[WorkspaceContext] | None = None,
    data: dict[str, Any] | None = None,
    options: list[ConfigOption] | None = None,
    tags: list[str] | None = None,
    hints: list[str] | None = None,
    experimental: bool = False,
) -> BlockDefinition:
    default_data = {"title": display_name, KIND_KEYS[category][0]: kind}
    default_data.update(data or {})
    return BlockDefinition(
        id=definition_id,
        block_type=category.value,
        category=category,
        display_name=display_name,
        description=description,
        compatibility=list(compatibility or (LOGIC if category not in _FLEX else BOTH)),
        default_data=default_data,
        config_options=options or [],
        tags=tags or [],
        usage_hints=hints or [],
        experimental=experimental,
    )


def _select(key: str, label: str, values: tuple[str, ...] | list[str], default: Any, **kw: Any) -> ConfigOption:
    return ConfigOption(
        key=key, label=label, value_type=ConfigValueType.SELECT, options=list(values), default=default, **kw
    )


# =============================================================================
# Events
# =============================================================================


def _event_definitions() -> list[BlockDefinition]:
    message_hint = ["Attach reply blocks to answer the message"]
    return [
        _define(
            "text-message-event",
            Category.EVENT,
            "message.text",
            "Text message",
            "Triggered when a user sends a text message",
            data={"condition": ""},
            options=[
                ConfigOption(
                    key="condition",
                    label="Contains text",
                    description="Only handle messages containing this text",
                ),
                _select("conditions.matchType", "Match type", ["any", "exact", "contains", "regex"], "any"),
            ],
            tags=["event", "message", "text"],
            hints=message_hint,
        ),
        _define(
            "image-message-event",
            Category.EVENT,
            "message.image",
            "Image message",
            "Triggered when a user sends an image",
            tags=["event", "message", "image"],
            hints=message_hint,
        ),
        _define(
            "audio-message-event",
            Category.EVENT,
            "message.audio",
            "Audio message",
            "Triggered when a user sends a voice message",
            tags=["event", "message", "audio"],
        ),
        _define(
            "video-message-event",
            Category.EVENT,
            "message.video",
            "Video message",
            "Triggered when a user sends a video",
            tags=["event", "message", "video"],
        ),
        _define(
            "file-message-event",
            Category.EVENT,
            "message.file",
            "File message",
            "Triggered when a user sends a file",
            tags=["event", "message", "file"],
        ),
        _define(
            "sticker-message-event",
            Category.EVENT,
            "message.sticker",
            "Sticker message",
            "Triggered when a user sends a sticker",
            tags=["event", "message", "sticker"],
        ),
        _define(
            "postback-event",
            Category.EVENT,
            "postback",
            "Postback",
            "Triggered when a user taps a postback button or quick reply",
            data={"condition": ""},
            options=[ConfigOption(key="condition", label="Postback data", description="Exact postback data to match")],
            tags=["event", "postback", "button"],
        ),
        _define(
            "follow-event",
            Category.EVENT,
            "follow",
            "Follow",
            "Triggered when a user adds the bot as a friend",
            tags=["event", "follow", "welcome"],
            hints=["Send a welcome message here"],
        ),
        _define(
            "unfollow-event",
            Category.EVENT,
            "unfollow",
            "Unfollow",
            "Triggered when a user blocks the bot",
            tags=["event", "unfollow", "block"],
            hints=["Replies cannot be sent to a user who unfollowed"],
        ),
        _define(
            "member-joined-event",
            Category.EVENT,
            "memberJoined",
            "Member joined",
            "Triggered when a member joins a group the bot is in",
            tags=["event", "group", "member"],
        ),
        _define(
            "member-left-event",
            Category.EVENT,
            "memberLeft",
            "Member left",
            "Triggered when a member leaves a group the bot is in",
            tags=["event", "group", "member"],
        ),
    ]


# =============================================================================
# Replies
# =============================================================================


def _reply_definitions() -> list[BlockDefinition]:
    limits = DEFAULT_LIMITS
    return [
        _define(
            "text-reply",
            Category.REPLY,
            "text",
            "Text reply",
            "Reply with a text message",
            data={"content": ""},
            options=[
                ConfigOption(
                    key="content",
                    label="Message",
                    value_type=ConfigValueType.TEXTAREA,
                    required=True,
                    validation=ConfigValidation(max=5000),
                )
            ],
            tags=["reply", "text"],
        ),
        _define(
            "image-reply",
            Category.REPLY,
            "image",
            "Image reply",
            "Reply with an image",
            data={"originalContentUrl": "", "previewImageUrl": ""},
            options=[
                ConfigOption(key="originalContentUrl", label="Image URL", required=True, validation=HTTPS_URL),
                ConfigOption(key="previewImageUrl", label="Preview URL", validation=HTTPS_URL),
            ],
            tags=["reply", "image", "media"],
        ),
        _define(
            "audio-reply",
            Category.REPLY,
            "audio",
            "Audio reply",
            "Reply with an audio clip",
            data={"originalContentUrl": "", "duration": 60000},
            options=[
                ConfigOption(key="originalContentUrl", label="Audio URL", required=True, validation=HTTPS_URL),
                ConfigOption(
                    key="duration",
                    label="Duration (ms)",
                    value_type=ConfigValueType.NUMBER,
                    default=60000,
                    validation=ConfigValidation(min=1),
                ),
            ],
            tags=["reply", "audio", "media"],
        ),
        _define(
            "video-reply",
            Category.REPLY,
            "video",
            "Video reply",
            "Reply with a video",
            data={"originalContentUrl": "", "previewImageUrl": ""},
            options=[
                ConfigOption(key="originalContentUrl", label="Video URL", required=True, validation=HTTPS_URL),
                ConfigOption(key="previewImageUrl", label="Preview URL", required=True, validation=HTTPS_URL),
                ConfigOption(key="trackingId", label="Tracking ID"),
            ],
            tags=["reply", "video", "media"],
        ),
        _define(
            "location-reply",
            Category.REPLY,
            "location",
            "Location reply",
            "Reply with a map location",
            data={"locationTitle": "", "address": "", "latitude": None, "longitude": None},
            options=[
                ConfigOption(key="locationTitle", label="Title", required=True),
                ConfigOption(key="address", label="Address", required=True),
                ConfigOption(
                    key="latitude",
                    label="Latitude",
                    value_type=ConfigValueType.NUMBER,
                    validation=ConfigValidation(min=-90, max=90),
                ),
                ConfigOption(
                    key="longitude",
                    label="Longitude",
                    value_type=ConfigValueType.NUMBER,
                    validation=ConfigValidation(min=-180, max=180),
                ),
            ],
            tags=["reply", "location", "map"],
        ),
        _define(
            "sticker-reply",
            Category.REPLY,
            "sticker",
            "Sticker reply",
            "Reply with a sticker",
            data={"packageId": "446", "stickerId": "1988"},
            options=[
                ConfigOption(key="packageId", label="Package ID", required=True),
                ConfigOption(key="stickerId", label="Sticker ID", required=True),
            ],
            tags=["reply", "sticker"],
        ),
        _define(
            "template-reply",
            Category.REPLY,
            "template",
            "Template reply",
            "Reply with an interactive template message",
            data={"templateType": "buttons", "altText": "", "text": "", "actions": []},
            options=[
                _select(
                    "templateType",
                    "Template type",
                    ["buttons", "confirm", "carousel", "image_carousel"],
                    "buttons",
                    required=True,
                ),
                ConfigOption(
                    key="altText",
                    label="Alt text",
                    validation=ConfigValidation(max=limits.max_alt_text_length),
                ),
                ConfigOption(
                    key="text",
                    label="Text",
                    value_type=ConfigValueType.TEXTAREA,
                    validation=ConfigValidation(max=160),
                ),
                ConfigOption(
                    key="thumbnailImageUrl",
                    label="Thumbnail URL",
                    validation=HTTPS_URL,
                    show_when={"templateType": "buttons"},
                ),
            ],
            tags=["reply", "template", "buttons"],
            hints=["Buttons templates take up to 4 actions", "Carousel templates take up to 10 columns"],
        ),
        _define(
            "quick-reply",
            Category.REPLY,
            "quickreply",
            "Quick reply",
            "Reply with text plus quick reply buttons",
            data={"text": "", "quickReplyItems": []},
            options=[ConfigOption(key="text", label="Text", required=True)],
            tags=["reply", "quick reply", "buttons"],
            hints=["Quick replies take up to 13 items"],
        ),
        _define(
            "flex-reply",
            Category.REPLY,
            "flex",
            "Flex reply",
            "Reply with a Flex Message designed in the layout editor",
            data={"altText": "", "flexMessageId": None},
            options=[
                ConfigOption(key="flexMessageId", label="Flex message"),
                ConfigOption(
                    key="altText",
                    label="Alt text",
                    validation=ConfigValidation(max=limits.max_alt_text_length),
                ),
            ],
            tags=["reply", "flex", "rich"],
        ),
    ]


# =============================================================================
# Controls and settings
# =============================================================================


def _control_definitions() -> list[BlockDefinition]:
    return [
        _define(
            "if-then-control",
            Category.CONTROL,
            "if",
            "If / else",
            "Run replies only when a condition holds",
            compatibility=BOTH,
            data={"condition": ""},
            options=[ConfigOption(key="condition", label="Condition")],
            tags=["control", "condition", "branch"],
        ),
        _define(
            "loop-control",
            Category.CONTROL,
            "loop",
            "Loop",
            "Repeat a fixed number of times",
            compatibility=BOTH,
            data={"count": 3, "variable": "i"},
            options=[
                ConfigOption(
                    key="count",
                    label="Repetitions",
                    value_type=ConfigValueType.NUMBER,
                    default=3,
                    validation=ConfigValidation(min=1, max=100),
                ),
                ConfigOption(
                    key="variable",
                    label="Loop variable",
                    validation=ConfigValidation(pattern=r"^[A-Za-z_][A-Za-z0-9_]*$"),
                ),
            ],
            tags=["control", "loop", "repeat"],
        ),
        _define(
            "wait-control",
            Category.CONTROL,
            "wait",
            "Wait",
            "Pause before continuing",
            compatibility=BOTH,
            data={"time": 1},
            options=[
                ConfigOption(
                    key="time",
                    label="Seconds",
                    value_type=ConfigValueType.NUMBER,
                    default=1,
                    validation=ConfigValidation(min=0, max=60),
                )
            ],
            tags=["control", "wait", "delay"],
        ),
        _define(
            "try-control",
            Category.CONTROL,
            "try",
            "Try / except",
            "Catch and log errors",
            compatibility=BOTH,
            tags=["control", "error"],
            experimental=True,
        ),
        _define(
            "function-control",
            Category.CONTROL,
            "function",
            "Function",
            "Define and call a named helper",
            compatibility=BOTH,
            data={"functionName": "custom_function"},
            options=[
                ConfigOption(
                    key="functionName",
                    label="Function name",
                    required=True,
                    validation=ConfigValidation(pattern=r"^[A-Za-z_][A-Za-z0-9_]*$"),
                )
            ],
            tags=["control", "function"],
            experimental=True,
        ),
    ]


def _setting_definitions() -> list[BlockDefinition]:
    name_option = ConfigOption(
        key="variableName",
        label="Variable name",
        required=True,
        validation=ConfigValidation(pattern=r"^[A-Za-z_][A-Za-z0-9_]*$"),
    )
    return [
        _define(
            "set-variable-setting",
            Category.SETTING,
            "setVariable",
            "Set variable",
            "Store a value under a name",
            data={"variableName": "", "value": ""},
            options=[name_option, ConfigOption(key="value", label="Value")],
            tags=["setting", "variable"],
        ),
        _define(
            "get-variable-setting",
            Category.SETTING,
            "getVariable",
            "Get variable",
            "Read a stored value",
            data={"variableName": ""},
            options=[name_option],
            tags=["setting", "variable"],
        ),
        _define(
            "save-user-data-setting",
            Category.SETTING,
            "saveUserData",
            "Save user data",
            "Persist data about the current user",
            data={"dataType": "profile", "fields": {}},
            options=[_select("dataType", "Data type", ["profile", "interaction", "custom"], "profile", required=True)],
            tags=["setting", "user", "data"],
        ),
    ]


# =============================================================================
# Flex elements
# =============================================================================


def _flex_definitions() -> list[BlockDefinition]:
    limits = DEFAULT_LIMITS
    return [
        _define(
            "bubble-container",
            Category.FLEX_CONTAINER,
            "bubble",
            "Bubble",
            "A single Flex Message card",
            data={"properties": {}},
            options=[_select("properties.size", "Size", limits.bubble_sizes, "mega")],
            tags=["flex", "container", "bubble"],
            hints=["Place content blocks inside; set their section to header, hero, body or footer"],
        ),
        _define(
            "carousel-container",
            Category.FLEX_CONTAINER,
            "carousel",
            "Carousel",
            "Horizontally scrolling bubbles",
            data={"properties": {}},
            tags=["flex", "container", "carousel"],
            hints=[f"A carousel holds at most {limits.max_carousel_bubbles} bubbles"],
        ),
        _define(
            "box-container",
            Category.FLEX_CONTAINER,
            "box",
            "Box",
            "Lays out child elements vertically or horizontally",
            data={"properties": {"layout": "vertical"}},
            options=[
                _select("properties.layout", "Layout", limits.layouts, "vertical", required=True),
                _select("properties.spacing", "Spacing", limits.spacings, "none"),
                ConfigOption(key="properties.backgroundColor", label="Background", validation=HEX_COLOR),
            ],
            tags=["flex", "container", "box", "layout"],
        ),
        _define(
            "text-content",
            Category.FLEX_CONTENT,
            "text",
            "Text",
            "A run of text",
            data={"text": "", "properties": {}},
            options=[
                ConfigOption(
                    key="text",
                    label="Text",
                    required=True,
                    validation=ConfigValidation(max=limits.max_text_length),
                ),
                _select("properties.size", "Size", limits.sizes, "md"),
                _select("properties.weight", "Weight", limits.weights, "regular"),
                ConfigOption(key="properties.color", label="Color", validation=HEX_COLOR),
                ConfigOption(key="properties.wrap", label="Wrap", value_type=ConfigValueType.BOOLEAN, default=False),
                ConfigOption(
                    key="properties.maxLines",
                    label="Max lines",
                    value_type=ConfigValueType.NUMBER,
                    validation=ConfigValidation(min=limits.min_max_lines, max=limits.max_max_lines),
                    show_when={"properties.wrap": True},
                ),
            ],
            tags=["flex", "content", "text"],
        ),
        _define(
            "button-content",
            Category.FLEX_CONTENT,
            "button",
            "Button",
            "A tappable button bound to an action",
            data={"action": {"type": "postback", "label": "Button", "data": "button_clicked"}, "properties": {}},
            options=[
                _select("properties.style", "Style", limits.button_styles, "primary"),
                _select("properties.height", "Height", limits.button_heights, "md"),
                ConfigOption(
                    key="action.label",
                    label="Label",
                    validation=ConfigValidation(max=limits.max_button_label_length),
                ),
            ],
            tags=["flex", "content", "button", "action"],
        ),
        _define(
            "image-content",
            Category.FLEX_CONTENT,
            "image",
            "Image",
            "An image",
            data={"url": "", "properties": {}},
            options=[
                ConfigOption(key="url", label="Image URL", required=True, validation=HTTPS_URL),
                _select("properties.aspectMode", "Aspect mode", limits.aspect_modes, "cover"),
            ],
            tags=["flex", "content", "image"],
        ),
        _define(
            "icon-content",
            Category.FLEX_CONTENT,
            "icon",
            "Icon",
            "A small decorative icon for baseline boxes",
            data={"url": "", "properties": {}},
            options=[ConfigOption(key="url", label="Icon URL", required=True, validation=HTTPS_URL)],
            tags=["flex", "content", "icon"],
        ),
        _define(
            "span-content",
            Category.FLEX_CONTENT,
            "span",
            "Span",
            "Differently styled text inside a text element",
            data={"text": "", "properties": {}},
            options=[ConfigOption(key="text", label="Text", required=True)],
            tags=["flex", "content", "text", "span"],
        ),
        _define(
            "video-content",
            Category.FLEX_CONTENT,
            "video",
            "Video",
            "A video in the hero section",
            data={"url": "", "previewUrl": "", "properties": {}},
            options=[
                ConfigOption(key="url", label="Video URL", required=True, validation=HTTPS_URL),
                ConfigOption(key="previewUrl", label="Preview URL", required=True, validation=HTTPS_URL),
            ],
            tags=["flex", "content", "video"],
            hints=["Videos are only rendered in the hero section of a bubble"],
        ),
        _define(
            "separator-content",
            Category.FLEX_LAYOUT,
            "separator",
            "Separator",
            "A dividing line",
            data={"properties": {}},
            options=[
                _select("properties.margin", "Margin", limits.spacings, "none"),
                ConfigOption(key="properties.color", label="Color", validation=HEX_COLOR),
            ],
            tags=["flex", "layout", "separator"],
        ),
        _define(
            "filler-layout",
            Category.FLEX_LAYOUT,
            "filler",
            "Filler",
            "Flexible empty space",
            data={"properties": {}},
            tags=["flex", "layout", "filler", "spacer"],
        ),
    ]


def default_definitions() -> list[BlockDefinition]:
    """Every built-in definition, in palette order."""
    return [
        *_event_definitions(),
        *_reply_definitions(),
        *_control_definitions(),
        *_setting_definitions(),
        *_flex_definitions(),
    ]


# =============================================================================
# Compatibility rules
# =============================================================================


def default_compatibility_rules(limits: FlexLimits = DEFAULT_LIMITS) -> list[CompatibilityRule]:
    """
    Placement rules per category.

    Categories without a rule (including UNKNOWN) are never valid anywhere.
    """
    return [
        CompatibilityRule(category=Category.EVENT, allowed_in=LOGIC),
        CompatibilityRule(category=Category.REPLY, allowed_in=LOGIC),
        CompatibilityRule(category=Category.CONTROL, allowed_in=BOTH),
        CompatibilityRule(category=Category.SETTING, allowed_in=LOGIC),
        CompatibilityRule(
            category=Category.FLEX_CONTAINER,
            allowed_in=BOTH,
            restrictions=Restrictions(max_count=limits.max_carousel_bubbles),
        ),
        CompatibilityRule(
            category=Category.FLEX_CONTENT,
            allowed_in=BOTH,
            dependencies=[Category.FLEX_CONTAINER],
            restrictions=Restrictions(requires_parent=[Category.FLEX_CONTAINER, Category.REPLY]),
        ),
        CompatibilityRule(
            category=Category.FLEX_LAYOUT,
            allowed_in=[WorkspaceContext.FLEX, WorkspaceContext.LOGIC],
            dependencies=[Category.FLEX_CONTAINER],
            restrictions=Restrictions(requires_parent=[Category.FLEX_CONTAINER]),
        ),
    ]
