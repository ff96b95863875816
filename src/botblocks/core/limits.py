"""
LINE Flex Message limits and attribute defaults.

``FlexLimits`` is the single table of numeric ceilings and value
vocabularies used by the wire-format validator. A platform revision is
applied here (or through ``[limits]`` in botblocks.toml), never at a call
site.

``ELEMENT_DEFAULTS`` holds the documented default of every optional
attribute per element kind; the converter omits any attribute whose value
equals its default.
"""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from typing import Any

from .errors import ConfigError
from .ir import ElementKind

SIZES = ("xs", "sm", "md", "lg", "xl", "xxl", "3xl", "4xl", "5xl", "full")
SPACINGS = ("none", "xs", "sm", "md", "lg", "xl", "xxl")


@dataclass(frozen=True)
class FlexLimits:
    """Platform ceilings and vocabularies for Flex Messages."""

    max_text_length: int = 2000
    max_alt_text_length: int = 400
    max_button_label_length: int = 40
    max_carousel_bubbles: int = 10
    max_box_contents: int = 50
    max_payload_kb: int = 24
    max_url_length: int = 1000
    max_action_uri_length: int = 2000

    min_flex: int = 0
    max_flex: int = 100
    min_offset: int = -300
    max_offset: int = 300
    min_max_lines: int = 0
    max_max_lines: int = 20

    sizes: tuple[str, ...] = SIZES
    weights: tuple[str, ...] = ("ultralight", "light", "regular", "bold")
    aligns: tuple[str, ...] = ("start", "end", "center")
    gravities: tuple[str, ...] = ("top", "bottom", "center")
    spacings: tuple[str, ...] = SPACINGS
    button_styles: tuple[str, ...] = ("primary", "secondary", "link")
    button_heights: tuple[str, ...] = ("sm", "md", "lg")
    aspect_ratio_pattern: str = r"^\d+(\.\d+)?:\d+(\.\d+)?$"
    aspect_ratios: tuple[str, ...] = ("1:1", "1.51:1", "1.91:1", "16:9", "4:3", "3:2", "2:3", "3:4", "9:16", "20:13")
    aspect_modes: tuple[str, ...] = ("cover", "fit")
    positions: tuple[str, ...] = ("relative", "absolute")
    decorations: tuple[str, ...] = ("none", "underline", "line-through")
    text_styles: tuple[str, ...] = ("normal", "italic")
    layouts: tuple[str, ...] = ("vertical", "horizontal", "baseline")
    justify_contents: tuple[str, ...] = (
        "flex-start",
        "center",
        "flex-end",
        "space-between",
        "space-around",
        "space-evenly",
        "start",
        "end",
    )
    align_items: tuple[str, ...] = ("flex-start", "center", "flex-end", "start", "end", "stretch")
    bubble_sizes: tuple[str, ...] = ("nano", "micro", "deca", "hecto", "kilo", "mega", "giga")
    directions: tuple[str, ...] = ("ltr", "rtl")
    adjust_modes: tuple[str, ...] = ("shrink-to-fit",)
    datetime_modes: tuple[str, ...] = ("date", "time", "datetime")
    image_extensions: tuple[str, ...] = ("jpg", "jpeg", "png", "gif", "webp")

    @property
    def max_payload_bytes(self) -> int:
        return self.max_payload_kb * 1024

    def with_overrides(self, overrides: dict[str, Any]) -> FlexLimits:
        """
        Return a copy with the named fields replaced.

        Raises:
            ConfigError: If a name is not a FlexLimits field or the value
                type does not match the field's default
        """
        known = {f.name: f for f in fields(self)}
        cleaned: dict[str, Any] = {}
        for name, value in overrides.items():
            if name not in known:
                raise ConfigError(f"Unknown limit '{name}'")
            current = getattr(self, name)
            if isinstance(current, tuple):
                if not isinstance(value, list | tuple) or not all(isinstance(v, str) for v in value):
                    raise ConfigError(f"Limit '{name}' must be a list of strings")
                cleaned[name] = tuple(value)
            elif isinstance(value, bool) or not isinstance(value, int):
                raise ConfigError(f"Limit '{name}' must be an integer")
            else:
                cleaned[name] = value
        return replace(self, **cleaned)


DEFAULT_LIMITS = FlexLimits()


# Shared attribute groups. Each group is copied by one helper in the
# converter so every element kind emits them identically.
SPACING_DEFAULTS: dict[str, Any] = {
    "paddingAll": "none",
    "paddingTop": "none",
    "paddingBottom": "none",
    "paddingStart": "none",
    "paddingEnd": "none",
    "margin": "none",
}

BORDER_DEFAULTS: dict[str, Any] = {
    "borderWidth": "0px",
    "borderColor": "#000000",
    "cornerRadius": "0px",
}

BACKGROUND_DEFAULTS: dict[str, Any] = {
    "backgroundColor": "#FFFFFF",
}

POSITION_DEFAULTS: dict[str, Any] = {
    "position": "relative",
    "offsetTop": "0px",
    "offsetBottom": "0px",
    "offsetStart": "0px",
    "offsetEnd": "0px",
}

# Kind-specific optional attributes and their documented defaults. ``None``
# means the attribute has no default and is emitted whenever it is set.
ELEMENT_DEFAULTS: dict[ElementKind, dict[str, Any]] = {
    ElementKind.BUBBLE: {"size": "mega", "direction": "ltr"},
    ElementKind.CAROUSEL: {},
    ElementKind.BOX: {
        "spacing": "none",
        "justifyContent": "start",
        "alignItems": "start",
        "width": None,
        "height": None,
        "maxWidth": None,
        "maxHeight": None,
        "flex": None,
    },
    ElementKind.TEXT: {
        "size": "md",
        "weight": "regular",
        "color": "#000000",
        "align": "start",
        "gravity": "center",
        "wrap": False,
        "maxLines": None,
        "lineSpacing": "none",
        "style": "normal",
        "decoration": "none",
        "flex": None,
        "adjustMode": None,
    },
    ElementKind.SPAN: {
        "size": "md",
        "weight": "regular",
        "color": "#000000",
        "style": "normal",
        "decoration": "none",
    },
    ElementKind.BUTTON: {
        "style": "primary",
        "color": "#0084ff",
        "height": "md",
        "gravity": "center",
        "adjustMode": None,
        "flex": None,
    },
    ElementKind.IMAGE: {
        "size": "full",
        "aspectRatio": "1:1",
        "aspectMode": "cover",
        "align": "center",
        "gravity": "center",
        "flex": None,
    },
    ElementKind.ICON: {
        "size": "md",
        "aspectRatio": "1:1",
    },
    ElementKind.VIDEO: {
        "aspectRatio": None,
    },
    ElementKind.SEPARATOR: {
        "color": None,
    },
    ElementKind.FILLER: {
        "flex": None,
    },
}

# Shared groups each kind carries, in emission order.
ELEMENT_GROUPS: dict[ElementKind, tuple[str, ...]] = {
    ElementKind.BUBBLE: (),
    ElementKind.CAROUSEL: (),
    ElementKind.BOX: ("spacing", "background", "border", "position"),
    ElementKind.TEXT: ("spacing", "position"),
    ElementKind.SPAN: (),
    ElementKind.BUTTON: ("spacing", "background", "border", "position"),
    ElementKind.IMAGE: ("spacing", "background", "border", "position"),
    ElementKind.ICON: ("spacing", "position"),
    ElementKind.VIDEO: ("spacing", "position"),
    ElementKind.SEPARATOR: ("spacing",),
    ElementKind.FILLER: (),
}

GROUP_DEFAULTS: dict[str, dict[str, Any]] = {
    "spacing": SPACING_DEFAULTS,
    "border": BORDER_DEFAULTS,
    "background": BACKGROUND_DEFAULTS,
    "position": POSITION_DEFAULTS,
}

# Keys every converted element of a kind must carry.
REQUIRED_KEYS: dict[ElementKind, tuple[str, ...]] = {
    ElementKind.BUBBLE: ("type",),
    ElementKind.CAROUSEL: ("type", "contents"),
    ElementKind.BOX: ("type", "layout", "contents"),
    ElementKind.TEXT: ("type", "text"),
    ElementKind.SPAN: ("type", "text"),
    ElementKind.BUTTON: ("type", "action"),
    ElementKind.IMAGE: ("type", "url"),
    ElementKind.ICON: ("type", "url"),
    ElementKind.VIDEO: ("type", "url", "previewUrl", "altContent"),
    ElementKind.SEPARATOR: ("type",),
    ElementKind.FILLER: ("type",),
}
