"""
botblocks Intermediate Representation (IR) types.

Blocks, block definitions, typed payloads and validation results. All types
are re-exported from this package.
"""

from .blocks import (
    FLEX_CATEGORIES,
    KIND_KEYS,
    Block,
    BlockPosition,
    Category,
    LegacyBlock,
    WorkspaceContext,
    kind_of,
)
from .definitions import (
    BlockDefinition,
    CompatibilityRule,
    ConfigOption,
    ConfigValidation,
    ConfigValueType,
    Restrictions,
    read_path,
)
from .payloads import (
    CONTAINER_KINDS,
    CONTENT_KINDS,
    CONTROL_PAYLOADS,
    ELEMENT_PAYLOADS,
    EVENT_PAYLOADS,
    LAYOUT_KINDS,
    REPLY_PAYLOADS,
    SETTING_PAYLOADS,
    Action,
    ActionType,
    AudioReplyPayload,
    BoxPayload,
    BubblePayload,
    ButtonContentPayload,
    CarouselPayload,
    ControlKind,
    ElementKind,
    EventKind,
    EventPayload,
    FillerPayload,
    FlexElementPayload,
    FlexReplyPayload,
    FunctionControlPayload,
    GetVariablePayload,
    IconContentPayload,
    IfControlPayload,
    ImageContentPayload,
    ImageReplyPayload,
    LocationReplyPayload,
    LoopControlPayload,
    MalformedPayload,
    MatchType,
    Payload,
    PayloadModel,
    QuickReplyItem,
    QuickReplyPayload,
    ReplyKind,
    SaveUserDataPayload,
    SeparatorPayload,
    SetVariablePayload,
    SettingKind,
    SpanContentPayload,
    StickerReplyPayload,
    StructuredCondition,
    TemplateColumn,
    TemplateReplyPayload,
    TextConditions,
    TextContentPayload,
    TextEventPayload,
    TextReplyPayload,
    TryControlPayload,
    UnknownPayload,
    VideoContentPayload,
    VideoReplyPayload,
    WaitControlPayload,
    coerce_kind,
    element_attributes,
    element_kind,
    parse_element,
    parse_payload,
)
from .results import (
    PropertyCheck,
    Severity,
    ValidationReport,
    ValidationResult,
)

__all__ = [
    # Blocks
    "FLEX_CATEGORIES",
    "KIND_KEYS",
    "Block",
    "BlockPosition",
    "Category",
    "LegacyBlock",
    "WorkspaceContext",
    "kind_of",
    # Definitions
    "BlockDefinition",
    "CompatibilityRule",
    "ConfigOption",
    "ConfigValidation",
    "ConfigValueType",
    "Restrictions",
    "read_path",
    # Payloads
    "CONTAINER_KINDS",
    "CONTENT_KINDS",
    "CONTROL_PAYLOADS",
    "ELEMENT_PAYLOADS",
    "EVENT_PAYLOADS",
    "LAYOUT_KINDS",
    "REPLY_PAYLOADS",
    "SETTING_PAYLOADS",
    "Action",
    "ActionType",
    "AudioReplyPayload",
    "BoxPayload",
    "BubblePayload",
    "ButtonContentPayload",
    "CarouselPayload",
    "ControlKind",
    "ElementKind",
    "EventKind",
    "EventPayload",
    "FillerPayload",
    "FlexElementPayload",
    "FlexReplyPayload",
    "FunctionControlPayload",
    "GetVariablePayload",
    "IconContentPayload",
    "IfControlPayload",
    "ImageContentPayload",
    "ImageReplyPayload",
    "LocationReplyPayload",
    "LoopControlPayload",
    "MalformedPayload",
    "MatchType",
    "Payload",
    "PayloadModel",
    "QuickReplyItem",
    "QuickReplyPayload",
    "ReplyKind",
    "SaveUserDataPayload",
    "SeparatorPayload",
    "SetVariablePayload",
    "SettingKind",
    "SpanContentPayload",
    "StickerReplyPayload",
    "StructuredCondition",
    "TemplateColumn",
    "TemplateReplyPayload",
    "TextConditions",
    "TextContentPayload",
    "TextEventPayload",
    "TextReplyPayload",
    "TryControlPayload",
    "UnknownPayload",
    "VideoContentPayload",
    "VideoReplyPayload",
    "WaitControlPayload",
    "coerce_kind",
    "element_attributes",
    "element_kind",
    "parse_element",
    "parse_payload",
    # Results
    "PropertyCheck",
    "Severity",
    "ValidationReport",
    "ValidationResult",
]
