"""
Typed block payloads.

Each block family stores its concrete kind under a discriminator key and
the rest of the payload has a kind-specific shape. The models below give
every kind a concrete pydantic shape; ``parse_payload`` turns a block's raw
``block_data`` into one of them.

Payload keys are camelCase on the wire (``imageUrl``) and snake_case in
Python (``image_url``). Unknown extra keys are kept so that editor-only
fields survive a round trip.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from .blocks import Category, kind_of

# =============================================================================
# Kinds
# =============================================================================


class EventKind(StrEnum):
    TEXT_MESSAGE = "message.text"
    IMAGE_MESSAGE = "message.image"
    AUDIO_MESSAGE = "message.audio"
    VIDEO_MESSAGE = "message.video"
    FILE_MESSAGE = "message.file"
    STICKER_MESSAGE = "message.sticker"
    POSTBACK = "postback"
    FOLLOW = "follow"
    UNFOLLOW = "unfollow"
    MEMBER_JOINED = "memberJoined"
    MEMBER_LEFT = "memberLeft"


class ReplyKind(StrEnum):
    TEXT = "text"
    IMAGE = "image"
    AUDIO = "audio"
    VIDEO = "video"
    LOCATION = "location"
    STICKER = "sticker"
    TEMPLATE = "template"
    QUICK_REPLY = "quickreply"
    FLEX = "flex"


class ControlKind(StrEnum):
    IF = "if"
    LOOP = "loop"
    WAIT = "wait"
    TRY = "try"
    FUNCTION = "function"


# Historical spellings of control kinds still found in saved projects.
CONTROL_KIND_ALIASES: dict[str, ControlKind] = {"condition": ControlKind.IF}


class SettingKind(StrEnum):
    SET_VARIABLE = "setVariable"
    GET_VARIABLE = "getVariable"
    SAVE_USER_DATA = "saveUserData"


class ElementKind(StrEnum):
    """Every flex element kind, across the three flex families."""

    BUBBLE = "bubble"
    CAROUSEL = "carousel"
    BOX = "box"
    TEXT = "text"
    BUTTON = "button"
    IMAGE = "image"
    ICON = "icon"
    SPAN = "span"
    VIDEO = "video"
    SEPARATOR = "separator"
    FILLER = "filler"


CONTAINER_KINDS = frozenset({ElementKind.BUBBLE, ElementKind.CAROUSEL, ElementKind.BOX})
CONTENT_KINDS = frozenset(
    {ElementKind.TEXT, ElementKind.BUTTON, ElementKind.IMAGE, ElementKind.ICON, ElementKind.SPAN, ElementKind.VIDEO}
)
LAYOUT_KINDS = frozenset({ElementKind.SEPARATOR, ElementKind.FILLER})


class ActionType(StrEnum):
    MESSAGE = "message"
    URI = "uri"
    POSTBACK = "postback"
    CAMERA = "camera"
    CAMERA_ROLL = "cameraRoll"
    LOCATION = "location"
    DATETIME_PICKER = "datetimepicker"
    RICHMENU_SWITCH = "richmenuswitch"
    CLIPBOARD = "clipboard"


# =============================================================================
# Base
# =============================================================================


class PayloadModel(BaseModel):
    """Common configuration for every payload shape."""

    title: str = ""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )


# =============================================================================
# Actions
# =============================================================================


class Action(PayloadModel):
    """
    A platform action attached to a button, template or quick-reply item.

    ``type`` stays a plain string so an unrecognised action kind survives
    parsing and can be degraded by the generator instead of rejected here.
    """

    type: str = ActionType.MESSAGE.value
    label: str | None = None
    text: str | None = None
    data: str | None = None
    uri: str | None = None
    display_text: str | None = None
    mode: str | None = None
    initial: str | None = None
    max: str | None = None
    min: str | None = None
    rich_menu_alias_id: str | None = None
    clipboard_text: str | None = None

    @property
    def action_type(self) -> ActionType | None:
        try:
            return ActionType(self.type)
        except ValueError:
            return None


class QuickReplyItem(PayloadModel):
    action: Action = Field(default_factory=Action)
    image_url: str | None = None


# =============================================================================
# Events
# =============================================================================


class MatchType(StrEnum):
    ANY = "any"
    EXACT = "exact"
    CONTAINS = "contains"
    REGEX = "regex"


class TextConditions(PayloadModel):
    match_type: MatchType = MatchType.ANY
    keywords: list[str] = Field(default_factory=list)
    case_sensitive: bool = False


class EventPayload(PayloadModel):
    """Payload shared by the non-text events."""

    event_type: str
    condition: str | None = None


class TextEventPayload(EventPayload):
    conditions: TextConditions | None = None


# =============================================================================
# Replies
# =============================================================================


class TextReplyPayload(PayloadModel):
    reply_type: str = ReplyKind.TEXT.value
    content: str | None = None
    text: str | None = None


class ImageReplyPayload(PayloadModel):
    reply_type: str = ReplyKind.IMAGE.value
    image_url: str | None = None
    original_content_url: str | None = None
    preview_image_url: str | None = None


class AudioReplyPayload(PayloadModel):
    reply_type: str = ReplyKind.AUDIO.value
    audio_url: str | None = None
    original_content_url: str | None = None
    duration: int | None = None


class VideoReplyPayload(PayloadModel):
    reply_type: str = ReplyKind.VIDEO.value
    video_url: str | None = None
    original_content_url: str | None = None
    preview_image_url: str | None = None
    tracking_id: str | None = None


class LocationReplyPayload(PayloadModel):
    reply_type: str = ReplyKind.LOCATION.value
    location_title: str | None = None
    address: str | None = None
    latitude: float | None = None
    longitude: float | None = None


class StickerReplyPayload(PayloadModel):
    reply_type: str = ReplyKind.STICKER.value
    package_id: str | int | None = None
    sticker_id: str | int | None = None


class TemplateColumn(PayloadModel):
    text: str | None = None
    thumbnail_image_url: str | None = None
    image_url: str | None = None
    actions: list[Action] = Field(default_factory=list)
    action: Action | None = None


class TemplateReplyPayload(PayloadModel):
    reply_type: str = ReplyKind.TEMPLATE.value
    template_type: str = "buttons"
    alt_text: str | None = None
    text: str | None = None
    thumbnail_image_url: str | None = None
    actions: list[Action] = Field(default_factory=list)
    columns: list[TemplateColumn] = Field(default_factory=list)


class QuickReplyPayload(PayloadModel):
    reply_type: str = ReplyKind.QUICK_REPLY.value
    text: str | None = None
    quick_reply_items: list[QuickReplyItem] = Field(default_factory=list)


class FlexReplyPayload(PayloadModel):
    reply_type: str = ReplyKind.FLEX.value
    alt_text: str | None = None
    flex_message_id: str | None = None
    flex_message: dict[str, Any] | None = None


# =============================================================================
# Controls
# =============================================================================


class StructuredCondition(PayloadModel):
    operator: str = "=="
    left_value: str | int | float | None = None
    right_value: str | int | float | None = None


class IfControlPayload(PayloadModel):
    control_type: str = ControlKind.IF.value
    condition: StructuredCondition | str | None = None


class LoopControlPayload(PayloadModel):
    control_type: str = ControlKind.LOOP.value
    count: int | None = None
    variable: str | None = None


class WaitControlPayload(PayloadModel):
    control_type: str = ControlKind.WAIT.value
    time: float | None = None


class TryControlPayload(PayloadModel):
    control_type: str = ControlKind.TRY.value


class FunctionControlPayload(PayloadModel):
    control_type: str = ControlKind.FUNCTION.value
    function_name: str | None = None


# =============================================================================
# Settings
# =============================================================================


class SetVariablePayload(PayloadModel):
    setting_type: str = SettingKind.SET_VARIABLE.value
    variable_name: str = ""
    value: Any = None


class GetVariablePayload(PayloadModel):
    setting_type: str = SettingKind.GET_VARIABLE.value
    variable_name: str = ""


class SaveUserDataPayload(PayloadModel):
    setting_type: str = SettingKind.SAVE_USER_DATA.value
    data_type: str = "profile"
    fields: dict[str, Any] = Field(default_factory=dict)


# =============================================================================
# Flex elements
# =============================================================================


class FlexElementPayload(PayloadModel):
    """
    Fields common to all flex element payloads.

    Attributes:
        properties: Wire-format attributes (size, color, margin, ...)
        contents: Inline child element payloads, used when the block has no
            child ids in the graph
        section: Bubble section this element belongs to
    """

    element: ClassVar[ElementKind]

    properties: dict[str, Any] = Field(default_factory=dict)
    contents: list[dict[str, Any]] = Field(default_factory=list)
    section: str | None = None


class BubblePayload(FlexElementPayload):
    element: ClassVar[ElementKind] = ElementKind.BUBBLE

    container_type: str = ElementKind.BUBBLE.value


class CarouselPayload(FlexElementPayload):
    element: ClassVar[ElementKind] = ElementKind.CAROUSEL

    container_type: str = ElementKind.CAROUSEL.value


class BoxPayload(FlexElementPayload):
    element: ClassVar[ElementKind] = ElementKind.BOX

    container_type: str = ElementKind.BOX.value


class TextContentPayload(FlexElementPayload):
    element: ClassVar[ElementKind] = ElementKind.TEXT

    content_type: str = ElementKind.TEXT.value
    text: str | None = None


class ButtonContentPayload(FlexElementPayload):
    element: ClassVar[ElementKind] = ElementKind.BUTTON

    content_type: str = ElementKind.BUTTON.value
    action: Action | None = None


class ImageContentPayload(FlexElementPayload):
    element: ClassVar[ElementKind] = ElementKind.IMAGE

    content_type: str = ElementKind.IMAGE.value
    url: str | None = None


class IconContentPayload(FlexElementPayload):
    element: ClassVar[ElementKind] = ElementKind.ICON

    content_type: str = ElementKind.ICON.value
    url: str | None = None


class SpanContentPayload(FlexElementPayload):
    element: ClassVar[ElementKind] = ElementKind.SPAN

    content_type: str = ElementKind.SPAN.value
    text: str | None = None


class VideoContentPayload(FlexElementPayload):
    element: ClassVar[ElementKind] = ElementKind.VIDEO

    content_type: str = ElementKind.VIDEO.value
    url: str | None = None
    preview_url: str | None = None
    alt_content: dict[str, Any] | None = None


class SeparatorPayload(FlexElementPayload):
    element: ClassVar[ElementKind] = ElementKind.SEPARATOR

    content_type: str = ElementKind.SEPARATOR.value


class FillerPayload(FlexElementPayload):
    element: ClassVar[ElementKind] = ElementKind.FILLER

    content_type: str = ElementKind.FILLER.value


# =============================================================================
# Dispatch
# =============================================================================


EVENT_PAYLOADS: dict[EventKind, type[PayloadModel]] = {
    EventKind.TEXT_MESSAGE: TextEventPayload,
    EventKind.IMAGE_MESSAGE: EventPayload,
    EventKind.AUDIO_MESSAGE: EventPayload,
    EventKind.VIDEO_MESSAGE: EventPayload,
    EventKind.FILE_MESSAGE: EventPayload,
    EventKind.STICKER_MESSAGE: EventPayload,
    EventKind.POSTBACK: EventPayload,
    EventKind.FOLLOW: EventPayload,
    EventKind.UNFOLLOW: EventPayload,
    EventKind.MEMBER_JOINED: EventPayload,
    EventKind.MEMBER_LEFT: EventPayload,
}

REPLY_PAYLOADS: dict[ReplyKind, type[PayloadModel]] = {
    ReplyKind.TEXT: TextReplyPayload,
    ReplyKind.IMAGE: ImageReplyPayload,
    ReplyKind.AUDIO: AudioReplyPayload,
    ReplyKind.VIDEO: VideoReplyPayload,
    ReplyKind.LOCATION: LocationReplyPayload,
    ReplyKind.STICKER: StickerReplyPayload,
    ReplyKind.TEMPLATE: TemplateReplyPayload,
    ReplyKind.QUICK_REPLY: QuickReplyPayload,
    ReplyKind.FLEX: FlexReplyPayload,
}

CONTROL_PAYLOADS: dict[ControlKind, type[PayloadModel]] = {
    ControlKind.IF: IfControlPayload,
    ControlKind.LOOP: LoopControlPayload,
    ControlKind.WAIT: WaitControlPayload,
    ControlKind.TRY: TryControlPayload,
    ControlKind.FUNCTION: FunctionControlPayload,
}

SETTING_PAYLOADS: dict[SettingKind, type[PayloadModel]] = {
    SettingKind.SET_VARIABLE: SetVariablePayload,
    SettingKind.GET_VARIABLE: GetVariablePayload,
    SettingKind.SAVE_USER_DATA: SaveUserDataPayload,
}

ELEMENT_PAYLOADS: dict[ElementKind, type[FlexElementPayload]] = {
    ElementKind.BUBBLE: BubblePayload,
    ElementKind.CAROUSEL: CarouselPayload,
    ElementKind.BOX: BoxPayload,
    ElementKind.TEXT: TextContentPayload,
    ElementKind.BUTTON: ButtonContentPayload,
    ElementKind.IMAGE: ImageContentPayload,
    ElementKind.ICON: IconContentPayload,
    ElementKind.SPAN: SpanContentPayload,
    ElementKind.VIDEO: VideoContentPayload,
    ElementKind.SEPARATOR: SeparatorPayload,
    ElementKind.FILLER: FillerPayload,
}

# Element kinds each flex family may carry.
FAMILY_ELEMENT_KINDS: dict[Category, frozenset[ElementKind]] = {
    Category.FLEX_CONTAINER: CONTAINER_KINDS,
    Category.FLEX_CONTENT: CONTENT_KINDS,
    Category.FLEX_LAYOUT: LAYOUT_KINDS,
}


_KIND_ENUMS: dict[Category, type[StrEnum]] = {
    Category.EVENT: EventKind,
    Category.REPLY: ReplyKind,
    Category.CONTROL: ControlKind,
    Category.SETTING: SettingKind,
}


@dataclass(frozen=True)
class UnknownPayload:
    """Payload whose kind is missing or not recognised for its family."""

    category: Category
    kind: str | None
    data: dict[str, Any]


@dataclass(frozen=True)
class MalformedPayload:
    """Payload of a known kind whose fields failed type validation."""

    category: Category
    kind: str
    error: str
    data: dict[str, Any]


Payload = PayloadModel | UnknownPayload | MalformedPayload


def coerce_kind(category: Category, kind: str | None) -> StrEnum | None:
    """Map a raw kind string to the family's kind enum, or None."""
    if kind is None:
        return None
    if category == Category.CONTROL and kind in CONTROL_KIND_ALIASES:
        return CONTROL_KIND_ALIASES[kind]
    if category in FAMILY_ELEMENT_KINDS:
        try:
            element = ElementKind(kind)
        except ValueError:
            return None
        return element if element in FAMILY_ELEMENT_KINDS[category] else None
    enum_cls = _KIND_ENUMS.get(category)
    if enum_cls is None:
        return None
    try:
        return enum_cls(kind)
    except ValueError:
        return None


def element_kind(data: dict[str, Any]) -> ElementKind | None:
    """
    Element kind of a flex payload regardless of family.

    Used for inline ``contents`` entries, which carry no category.
    """
    for key in ("containerType", "contentType", "layoutType", "type"):
        value = data.get(key)
        if isinstance(value, str):
            try:
                return ElementKind(value)
            except ValueError:
                continue
    return None


# Payload keys that describe structure or content rather than wire attributes.
_STRUCTURAL_KEYS = frozenset(
    {
        "id",
        "title",
        "type",
        "containerType",
        "contentType",
        "layoutType",
        "properties",
        "contents",
        "children",
        "section",
        "text",
        "url",
        "previewUrl",
        "altContent",
        "action",
        "header",
        "hero",
        "body",
        "footer",
        "styles",
        "blockType",
        "actionType",
    }
)

# Editor spellings of wire attributes.
_ATTRIBUTE_RENAMES = {"padding": "paddingAll"}


def element_attributes(data: dict[str, Any]) -> dict[str, Any]:
    """
    Wire attributes of a flex element payload.

    Editor payloads keep attributes under ``properties``; wire-shaped dicts
    keep them at the top level. Both are read, ``properties`` winning.
    """
    attrs = {k: v for k, v in data.items() if k not in _STRUCTURAL_KEYS}
    properties = data.get("properties")
    if isinstance(properties, dict):
        attrs.update(properties)
    for old, new in _ATTRIBUTE_RENAMES.items():
        if old in attrs:
            value = attrs.pop(old)
            attrs.setdefault(new, value)
    return attrs


def _model_for(category: Category, kind: StrEnum) -> type[PayloadModel] | None:
    tables: dict[Category, dict[Any, Any]] = {
        Category.EVENT: EVENT_PAYLOADS,
        Category.REPLY: REPLY_PAYLOADS,
        Category.CONTROL: CONTROL_PAYLOADS,
        Category.SETTING: SETTING_PAYLOADS,
        Category.FLEX_CONTAINER: ELEMENT_PAYLOADS,
        Category.FLEX_CONTENT: ELEMENT_PAYLOADS,
        Category.FLEX_LAYOUT: ELEMENT_PAYLOADS,
    }
    table = tables.get(category)
    return table.get(kind) if table is not None else None


def parse_payload(category: Category, data: dict[str, Any]) -> Payload:
    """
    Parse a block payload into its typed shape.

    Args:
        category: Block family
        data: Raw ``block_data``

    Returns:
        The kind's payload model, ``UnknownPayload`` when the kind is not
        recognised, or ``MalformedPayload`` when the fields do not validate.
    """
    raw_kind = kind_of(category, data)
    kind = coerce_kind(category, raw_kind)
    model = _model_for(category, kind) if kind is not None else None
    if model is None:
        return UnknownPayload(category=category, kind=raw_kind, data=data)
    try:
        return model.model_validate(data)
    except ValidationError as e:
        return MalformedPayload(category=category, kind=str(kind), error=_format_errors(e), data=data)


def parse_element(data: dict[str, Any]) -> FlexElementPayload | UnknownPayload | MalformedPayload:
    """Parse an inline flex element dict (no category) by its element kind."""
    kind = element_kind(data)
    if kind is None:
        return UnknownPayload(category=Category.UNKNOWN, kind=None, data=data)
    model = ELEMENT_PAYLOADS[kind]
    try:
        return model.model_validate(data)
    except ValidationError as e:
        return MalformedPayload(category=Category.UNKNOWN, kind=kind.value, error=_format_errors(e), data=data)


def _format_errors(e: ValidationError) -> str:
    return "; ".join(f"{'.'.join(str(p) for p in err['loc']) or 'payload'}: {err['msg']}" for err in e.errors())
