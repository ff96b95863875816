"""
Legacy block type aliases.

Earlier editor versions stored one type string per block kind
(``text_message_event``, ``flex_bubble``, ``quickreply_reply``...). The
current representation uses one type string per family (``event``,
``flex-container``...) with the kind stored in the payload. ``AliasTable``
maps every historical string to its family and the payload defaults that
restore the kind the string encoded, and answers the reverse question
(which historical strings belong to a family) for search and filtering.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from .errors import RegistryError
from .ir import KIND_KEYS, Category

logger = logging.getLogger("botblocks.core.aliases")


@dataclass(frozen=True)
class AliasRule:
    """
    One historical type string.

    Attributes:
        legacy_type: The type string as stored by older editors
        canonical_type: Family string the block migrates to
        data_defaults: Payload keys merged beneath the legacy data
    """

    legacy_type: str
    canonical_type: str
    data_defaults: MappingProxyType[str, Any] = field(default_factory=lambda: MappingProxyType({}))

    @property
    def category(self) -> Category:
        return Category(self.canonical_type)

    @property
    def kind(self) -> str | None:
        for key in KIND_KEYS.get(self.category, ()):
            value = self.data_defaults.get(key)
            if isinstance(value, str):
                return value
        return None


class AliasTable:
    """
    Immutable lookup from legacy type strings to canonical families.

    Lookups are exact. The table is built once and never mutated, so
    independent tables (e.g. for two schema versions) can coexist.
    """

    def __init__(self, rules: Iterable[AliasRule]):
        by_legacy: dict[str, AliasRule] = {}
        by_canonical: dict[str, list[str]] = {}
        for rule in rules:
            if rule.legacy_type in by_legacy:
                raise RegistryError(f"Duplicate legacy type alias '{rule.legacy_type}'")
            if rule.canonical_type not in {c.value for c in Category if c != Category.UNKNOWN}:
                raise RegistryError(
                    f"Alias '{rule.legacy_type}' targets unknown block type '{rule.canonical_type}'"
                )
            by_legacy[rule.legacy_type] = rule
            by_canonical.setdefault(rule.canonical_type, []).append(rule.legacy_type)
        self._by_legacy = MappingProxyType(by_legacy)
        self._by_canonical = MappingProxyType({k: tuple(v) for k, v in by_canonical.items()})

    def __len__(self) -> int:
        return len(self._by_legacy)

    def __contains__(self, legacy_type: object) -> bool:
        return legacy_type in self._by_legacy

    def lookup(self, legacy_type: str) -> AliasRule | None:
        rule = self._by_legacy.get(legacy_type)
        if rule is None:
            logger.debug("No alias for block type %r", legacy_type)
        return rule

    def canonical_type(self, legacy_type: str) -> str:
        """Canonical family for a legacy string; unknown strings map to themselves."""
        rule = self._by_legacy.get(legacy_type)
        return rule.canonical_type if rule is not None else legacy_type

    def aliases_for(self, canonical_type: str, kind: str | None = None) -> list[str]:
        """
        Every historical string that migrates to ``canonical_type``.

        Args:
            canonical_type: Family string (e.g. ``event``)
            kind: Restrict to aliases encoding this kind (e.g. ``follow``)

        Returns:
            Aliases in table order; ``[canonical_type]`` if none are known
        """
        aliases = list(self._by_canonical.get(canonical_type, ()))
        if kind is not None:
            aliases = [a for a in aliases if self._by_legacy[a].kind == kind]
        return aliases or [canonical_type]

    def search(self, query: str) -> list[AliasRule]:
        needle = query.lower()
        return [rule for legacy, rule in self._by_legacy.items() if needle in legacy.lower()]

    def rules(self) -> list[AliasRule]:
        return list(self._by_legacy.values())

    def statistics(self) -> dict[str, int]:
        return {canonical: len(aliases) for canonical, aliases in self._by_canonical.items()}


# =============================================================================
# Default table
# =============================================================================

# (family, discriminator value, historical names). The first name of each
# entry is the kind's hyphenated id from the previous editor generation.
_LEGACY_NAMES: list[tuple[Category, str | None, list[str]]] = [
    # Events
    (
        Category.EVENT,
        "message.text",
        ["text-message-event", "event", "message_event", "text_event", "text_message_event"],
    ),
    (Category.EVENT, "postback", ["postback-event", "postback", "postback_event"]),
    (Category.EVENT, "message.image", ["image-message-event", "image_event", "image_message_event"]),
    (Category.EVENT, "message.audio", ["audio-message-event", "audio_event", "audio_message_event"]),
    (Category.EVENT, "message.video", ["video-message-event", "video_event", "video_message_event"]),
    (Category.EVENT, "message.file", ["file-message-event", "file_event", "file_message_event"]),
    (Category.EVENT, "message.sticker", ["sticker-message-event", "sticker_event", "sticker_message_event"]),
    (Category.EVENT, "follow", ["follow-event", "follow", "follow_event"]),
    (Category.EVENT, "unfollow", ["unfollow-event", "unfollow", "unfollow_event"]),
    (
        Category.EVENT,
        "memberJoined",
        ["member-joined-event", "member_joined", "join_event", "member_joined_event"],
    ),
    (Category.EVENT, "memberLeft", ["member-left-event", "member_left", "leave_event", "member_left_event"]),
    # Replies
    (Category.REPLY, "text", ["text-reply", "reply", "text_message", "text_reply"]),
    (Category.REPLY, "flex", ["flex-reply", "flex_message", "flex_reply"]),
    (Category.REPLY, "image", ["image-reply", "image_message", "image_reply"]),
    (Category.REPLY, "audio", ["audio-reply", "audio_message", "audio_reply"]),
    (Category.REPLY, "video", ["video-reply", "video_message", "video_reply"]),
    (Category.REPLY, "location", ["location-reply", "location_message", "location_reply"]),
    (Category.REPLY, "sticker", ["sticker-message", "sticker_message", "sticker_reply"]),
    (Category.REPLY, "template", ["template-reply", "template_message", "template_reply"]),
    (
        Category.REPLY,
        "quickreply",
        ["quick-reply", "quickreply_reply", "quick_reply", "quick_reply_message"],
    ),
    # Controls
    (Category.CONTROL, "if", ["if-then-control", "control", "condition", "if", "if_then_control"]),
    (Category.CONTROL, "loop", ["loop-control", "loop", "loop_control"]),
    (Category.CONTROL, "wait", ["wait-control", "wait", "delay", "wait_control"]),
    (Category.CONTROL, "try", ["try-control", "try", "try_control"]),
    (Category.CONTROL, "function", ["function-control", "function", "function_control"]),
    # Settings
    (
        Category.SETTING,
        "setVariable",
        ["set-variable-setting", "setting", "config", "set_variable", "webhook_setting", "set_variable_setting"],
    ),
    (
        Category.SETTING,
        "getVariable",
        ["get-variable-setting", "get_variable", "read_variable", "get_variable_setting"],
    ),
    (
        Category.SETTING,
        "saveUserData",
        ["save-user-data-setting", "save_user_data", "user_data", "save_user_data_setting"],
    ),
    # Flex containers
    (Category.FLEX_CONTAINER, "bubble", ["bubble-container", "bubble", "flex_bubble", "bubble_container"]),
    (Category.FLEX_CONTAINER, "carousel", ["carousel-container", "carousel", "flex_carousel", "carousel_container"]),
    (Category.FLEX_CONTAINER, "box", ["box-container", "box", "flex_box", "box_container"]),
    # Flex contents
    (Category.FLEX_CONTENT, "text", ["text-content", "text", "flex_text", "text_content"]),
    (Category.FLEX_CONTENT, "image", ["image-content", "image", "flex_image", "image_content"]),
    (Category.FLEX_CONTENT, "button", ["button-content", "button", "flex_button", "button_content"]),
    (Category.FLEX_CONTENT, "icon", ["icon-content", "icon", "flex_icon", "icon_content"]),
    (Category.FLEX_CONTENT, "video", ["video-content", "video", "flex_video", "video_content"]),
    (Category.FLEX_CONTENT, "span", ["span-content", "span", "flex_span", "span_content"]),
    # Flex layouts
    (
        Category.FLEX_LAYOUT,
        "separator",
        ["separator-content", "separator", "flex_separator", "separator_content"],
    ),
    (Category.FLEX_LAYOUT, "filler", ["filler-layout", "filler", "flex_filler", "filler_layout"]),
]

# Bare flex family strings default to the family's most common kind.
_FAMILY_DEFAULT_KIND: dict[Category, str] = {
    Category.FLEX_CONTAINER: "bubble",
    Category.FLEX_CONTENT: "text",
    Category.FLEX_LAYOUT: "separator",
}


def _spellings(name: str) -> list[str]:
    """A name plus its snake/kebab twin."""
    variants = [name]
    for twin in (name.replace("_", "-"), name.replace("-", "_")):
        if twin not in variants:
            variants.append(twin)
    return variants


def default_alias_rules() -> list[AliasRule]:
    rules: list[AliasRule] = []
    seen: set[str] = set()
    for category, kind, names in _LEGACY_NAMES:
        key = KIND_KEYS[category][0]
        defaults = MappingProxyType({key: kind}) if kind else MappingProxyType({})
        for name in names:
            for spelling in _spellings(name):
                if spelling in seen:
                    continue
                seen.add(spelling)
                rules.append(AliasRule(spelling, category.value, defaults))
    for category, kind in _FAMILY_DEFAULT_KIND.items():
        for spelling in _spellings(category.value):
            if spelling not in seen:
                seen.add(spelling)
                rules.append(
                    AliasRule(spelling, category.value, MappingProxyType({KIND_KEYS[category][0]: kind}))
                )
    return rules


def build_alias_table(rules: Iterable[AliasRule] | None = None) -> AliasTable:
    """Build an alias table; the default table when ``rules`` is None."""
    return AliasTable(default_alias_rules() if rules is None else rules)
