"""
LINE Flex Message wire-format validation.

Primitive validators each check one property value and return a
``PropertyCheck``. Per-kind validators fan out over every property an
element kind carries and fold the checks into a ``ValidationReport``:
``Severity.ERROR`` blocks emission, ``Severity.WARNING`` does not.

Every ceiling and vocabulary comes from a ``FlexLimits`` table; nothing
below hard-codes a platform value.
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Callable, Sequence
from typing import Any
from urllib.parse import urlparse

from .ir import (
    Action,
    ActionType,
    ElementKind,
    PropertyCheck,
    Severity,
    ValidationReport,
    element_attributes,
    element_kind,
)
from .limits import DEFAULT_LIMITS, ELEMENT_GROUPS, REQUIRED_KEYS, FlexLimits

logger = logging.getLogger("botblocks.core.flex_validator")

COLOR_PATTERN = re.compile(r"^#[0-9A-Fa-f]{6}$")
PIXEL_PATTERN = re.compile(r"^\d+px$")
SIZE_VALUE_PATTERN = re.compile(r"^(\d+px|\d+(\.\d+)?%|\d+(\.\d+)?)$")
OFFSET_PATTERN = re.compile(r"^(-?\d+)(px|%)$")
PERCENT_PATTERN = re.compile(r"^\d+(\.\d+)?%$")
ANGLE_PATTERN = re.compile(r"^\d+(\.\d+)?deg$")

BUBBLE_SECTIONS = ("header", "hero", "body", "footer")


def _empty(value: Any) -> bool:
    return value is None or value == ""


def _ok(prop: str) -> PropertyCheck:
    return PropertyCheck(property=prop, is_valid=True)


def _bad(prop: str, message: str, severity: Severity = Severity.ERROR) -> PropertyCheck:
    return PropertyCheck(property=prop, is_valid=False, message=message, severity=severity)


# =============================================================================
# Primitive validators
# =============================================================================


def validate_color(value: Any, prop: str = "color") -> PropertyCheck:
    """Six-digit hex color such as ``#FF0000``. Absent values pass."""
    if _empty(value):
        return _ok(prop)
    if isinstance(value, str) and COLOR_PATTERN.match(value):
        return _ok(prop)
    return _bad(prop, f"{prop} must be a hex color such as #FF0000, got {value!r}")


def validate_pixel(value: Any, prop: str) -> PropertyCheck:
    if _empty(value):
        return _ok(prop)
    if isinstance(value, str) and PIXEL_PATTERN.match(value):
        return _ok(prop)
    return _bad(prop, f"{prop} must be a pixel value such as 10px, got {value!r}")


def validate_size_value(value: Any, prop: str) -> PropertyCheck:
    """Pixel, percentage or bare flex number (``100px``, ``50%``, ``2``)."""
    if _empty(value):
        return _ok(prop)
    if isinstance(value, str) and SIZE_VALUE_PATTERN.match(value):
        return _ok(prop)
    return _bad(prop, f"{prop} must be a pixel, percentage or flex value such as 100px, 50% or 2, got {value!r}")


def validate_offset(value: Any, prop: str, limits: FlexLimits = DEFAULT_LIMITS) -> PropertyCheck:
    """Signed offset with a unit; pixel offsets are bounded by the limits table."""
    if _empty(value):
        return _ok(prop)
    match = OFFSET_PATTERN.match(value) if isinstance(value, str) else None
    if match is None:
        return _bad(prop, f"{prop} must be a value with a unit such as 10px or -5%, got {value!r}")
    amount, unit = int(match.group(1)), match.group(2)
    if unit == "px" and not limits.min_offset <= amount <= limits.max_offset:
        return _bad(prop, f"{prop} must be between {limits.min_offset}px and {limits.max_offset}px")
    return _ok(prop)


def validate_enum(value: Any, allowed: Sequence[str], prop: str) -> PropertyCheck:
    if _empty(value):
        return _ok(prop)
    if value in allowed:
        return _ok(prop)
    return _bad(prop, f"{prop} must be one of: {', '.join(allowed)} (got {value!r})")


def validate_keyword_or_pixel(value: Any, allowed: Sequence[str], prop: str) -> PropertyCheck:
    """A keyword from ``allowed`` or a pixel value (spacing, margin, size)."""
    if _empty(value):
        return _ok(prop)
    if value in allowed or (isinstance(value, str) and PIXEL_PATTERN.match(value)):
        return _ok(prop)
    return _bad(prop, f"{prop} must be one of: {', '.join(allowed)} or a pixel value (got {value!r})")


def validate_range(value: Any, minimum: float, maximum: float, prop: str) -> PropertyCheck:
    if _empty(value):
        return _ok(prop)
    if isinstance(value, bool) or not isinstance(value, int | float):
        return _bad(prop, f"{prop} must be a number, got {value!r}")
    if minimum <= value <= maximum:
        return _ok(prop)
    return _bad(prop, f"{prop} must be between {minimum} and {maximum}")


def validate_url(
    value: Any,
    prop: str,
    limits: FlexLimits = DEFAULT_LIMITS,
    *,
    max_length: int | None = None,
    required: bool = True,
) -> PropertyCheck:
    """HTTPS URL no longer than ``max_length`` (default: the limits table's URL ceiling)."""
    if _empty(value):
        return _bad(prop, f"{prop} is required") if required else _ok(prop)
    if not isinstance(value, str):
        return _bad(prop, f"{prop} must be a URL string")
    parsed = urlparse(value)
    if not parsed.scheme or not parsed.netloc:
        return _bad(prop, f"{prop} must be a valid URL, got {value!r}")
    if parsed.scheme != "https":
        return _bad(prop, f"{prop} must use HTTPS")
    ceiling = max_length if max_length is not None else limits.max_url_length
    if len(value) > ceiling:
        return _bad(prop, f"{prop} must not exceed {ceiling} characters")
    return _ok(prop)


def validate_image_extension(value: Any, prop: str, limits: FlexLimits = DEFAULT_LIMITS) -> PropertyCheck:
    """Warn when an image URL does not end in a supported image extension."""
    if _empty(value) or not isinstance(value, str):
        return _ok(prop)
    path = urlparse(value).path.lower()
    if any(path.endswith("." + ext) for ext in limits.image_extensions):
        return _ok(prop)
    extensions = ", ".join("." + ext for ext in limits.image_extensions)
    return _bad(prop, f"{prop} should end with a supported image format ({extensions})", Severity.WARNING)


def validate_text_length(
    value: Any,
    prop: str,
    maximum: int,
    *,
    required: bool = True,
) -> PropertyCheck:
    if value is None or (isinstance(value, str) and not value.strip()):
        return _bad(prop, f"{prop} must not be empty") if required else _ok(prop)
    if not isinstance(value, str):
        return _bad(prop, f"{prop} must be a string")
    if len(value) > maximum:
        return _bad(prop, f"{prop} must not exceed {maximum} characters (got {len(value)})")
    return _ok(prop)


def validate_aspect_ratio(value: Any, prop: str, limits: FlexLimits = DEFAULT_LIMITS) -> PropertyCheck:
    """``width:height`` ratio; any positive ratio matching the pattern is accepted."""
    if _empty(value):
        return _ok(prop)
    if isinstance(value, str) and re.match(limits.aspect_ratio_pattern, value):
        return _ok(prop)
    return _bad(prop, f"{prop} must be a ratio such as {', '.join(limits.aspect_ratios[:3])}, got {value!r}")


# =============================================================================
# Validator
# =============================================================================


class FlexValidator:
    """
    Wire-format validation against one ``FlexLimits`` table.

    Per-kind methods accept either editor payloads (attributes under
    ``properties``) or wire-shaped element dicts.
    """

    def __init__(self, limits: FlexLimits | None = None):
        self.limits = limits or DEFAULT_LIMITS
        self._kind_checks: dict[ElementKind, Callable[[dict[str, Any], dict[str, Any]], list[PropertyCheck]]] = {
            ElementKind.BUBBLE: self._bubble_checks,
            ElementKind.CAROUSEL: self._carousel_checks,
            ElementKind.BOX: self._box_checks,
            ElementKind.TEXT: self._text_checks,
            ElementKind.SPAN: self._span_checks,
            ElementKind.BUTTON: self._button_checks,
            ElementKind.IMAGE: self._image_checks,
            ElementKind.ICON: self._icon_checks,
            ElementKind.VIDEO: self._video_checks,
            ElementKind.SEPARATOR: self._separator_checks,
            ElementKind.FILLER: self._filler_checks,
        }

    # -------------------------------------------------------------------------
    # Per-kind entry points
    # -------------------------------------------------------------------------

    def validate_element_properties(self, kind: ElementKind | str | None, data: dict[str, Any]) -> ValidationReport:
        """
        Validate one element's properties.

        Args:
            kind: Element kind (None: read it from ``data``)
            data: Editor payload or wire element

        Returns:
            Folded report; an unrecognised kind yields a single warning
        """
        resolved = self._resolve_kind(kind, data)
        if resolved is None:
            logger.debug("Skipping property validation for unknown element kind %r", kind)
            report = ValidationReport()
            report.add_warning(f"Unknown element kind '{kind}'; properties not validated")
            return report
        attrs = element_attributes(data)
        checks = self._kind_checks[resolved](data, attrs)
        checks.extend(self._group_checks(resolved, attrs))
        return ValidationReport.from_checks(checks)

    def validate_box(self, data: dict[str, Any]) -> ValidationReport:
        return self.validate_element_properties(ElementKind.BOX, data)

    def validate_text(self, data: dict[str, Any]) -> ValidationReport:
        return self.validate_element_properties(ElementKind.TEXT, data)

    def validate_span(self, data: dict[str, Any]) -> ValidationReport:
        return self.validate_element_properties(ElementKind.SPAN, data)

    def validate_button(self, data: dict[str, Any]) -> ValidationReport:
        return self.validate_element_properties(ElementKind.BUTTON, data)

    def validate_image(self, data: dict[str, Any]) -> ValidationReport:
        return self.validate_element_properties(ElementKind.IMAGE, data)

    def validate_icon(self, data: dict[str, Any]) -> ValidationReport:
        return self.validate_element_properties(ElementKind.ICON, data)

    def validate_video(self, data: dict[str, Any]) -> ValidationReport:
        return self.validate_element_properties(ElementKind.VIDEO, data)

    def validate_separator(self, data: dict[str, Any]) -> ValidationReport:
        return self.validate_element_properties(ElementKind.SEPARATOR, data)

    def validate_filler(self, data: dict[str, Any]) -> ValidationReport:
        return self.validate_element_properties(ElementKind.FILLER, data)

    def validate_bubble(self, data: dict[str, Any]) -> ValidationReport:
        return self.validate_element_properties(ElementKind.BUBBLE, data)

    def validate_action(self, action: Any, prop: str = "action") -> ValidationReport:
        return ValidationReport.from_checks(self._action_checks(action, prop))

    # -------------------------------------------------------------------------
    # Whole document
    # -------------------------------------------------------------------------

    def validate_document(self, document: Any) -> ValidationReport:
        """
        Validate a complete Flex Message document.

        Checks the ``flex`` wrapper, the root container kind, carousel and
        box item ceilings, required keys and properties of every element,
        and the serialized payload size.
        """
        report = ValidationReport()
        if not isinstance(document, dict):
            report.add_error("Flex Message must be a JSON object")
            return report

        if document.get("type") != "flex":
            report.add_error("Flex Message type must be 'flex'")

        alt_text = document.get("altText")
        if _empty(alt_text):
            report.add_error("Flex Message must have altText")
        elif not isinstance(alt_text, str) or len(alt_text) > self.limits.max_alt_text_length:
            report.add_error(f"altText must not exceed {self.limits.max_alt_text_length} characters")

        root = document.get("contents")
        if not isinstance(root, dict):
            report.add_error("Flex Message must have contents")
        else:
            root_type = root.get("type")
            if root_type not in (ElementKind.BUBBLE, ElementKind.CAROUSEL):
                report.add_error(f"contents must be a bubble or carousel, got {root_type!r}")
            else:
                self._walk(root, "contents", report, parent=None)

        size = len(json.dumps(document, ensure_ascii=False, separators=(",", ":")).encode("utf-8"))
        if size > self.limits.max_payload_bytes:
            report.add_error(
                f"Flex Message is {size / 1024:.1f}KB, exceeding the {self.limits.max_payload_kb}KB limit"
            )
        return report

    def _walk(self, element: Any, path: str, report: ValidationReport, parent: ElementKind | None) -> None:
        if not isinstance(element, dict):
            report.add_error(f"{path}: element must be a JSON object")
            return
        kind = self._resolve_kind(element.get("type"), {})
        if kind is None:
            report.add_error(f"{path}: unknown element type {element.get('type')!r}")
            return

        if kind == ElementKind.BUBBLE and parent not in (None, ElementKind.CAROUSEL):
            report.add_error(f"{path}: a bubble may only be the document root or a carousel item")
        if kind == ElementKind.CAROUSEL and parent is not None:
            report.add_error(f"{path}: a carousel may only be the document root")
        if kind == ElementKind.SPAN and parent != ElementKind.TEXT:
            report.add_error(f"{path}: a span may only appear inside a text element")

        missing = [key for key in REQUIRED_KEYS[kind] if key not in element]
        if missing:
            report.add_error(f"{path}: {kind} is missing required keys: {', '.join(missing)}")

        report.merge(self.validate_element_properties(kind, element), prefix=f"{path}: ")

        if kind == ElementKind.BUBBLE:
            for section in BUBBLE_SECTIONS:
                if section in element:
                    self._walk(element[section], f"{path}.{section}", report, parent=kind)
            return

        contents = element.get("contents")
        if kind in (ElementKind.BOX, ElementKind.CAROUSEL, ElementKind.TEXT) and isinstance(contents, list):
            for i, child in enumerate(contents):
                self._walk(child, f"{path}.contents[{i}]", report, parent=kind)

    # -------------------------------------------------------------------------
    # Kind checks
    # -------------------------------------------------------------------------

    def _bubble_checks(self, data: dict[str, Any], attrs: dict[str, Any]) -> list[PropertyCheck]:
        lim = self.limits
        return [
            validate_enum(attrs.get("size"), lim.bubble_sizes, "size"),
            validate_enum(attrs.get("direction"), lim.directions, "direction"),
        ]

    def _carousel_checks(self, data: dict[str, Any], attrs: dict[str, Any]) -> list[PropertyCheck]:
        contents = data.get("contents")
        if contents is None:
            return []
        if not isinstance(contents, list):
            return [_bad("contents", "Carousel contents must be a list")]
        maximum = self.limits.max_carousel_bubbles
        if len(contents) > maximum:
            return [_bad("contents", f"Carousel has {len(contents)} bubbles; the maximum is {maximum}")]
        return [_ok("contents")]

    def _box_checks(self, data: dict[str, Any], attrs: dict[str, Any]) -> list[PropertyCheck]:
        lim = self.limits
        checks = [
            validate_enum(attrs.get("layout"), lim.layouts, "layout"),
            validate_keyword_or_pixel(attrs.get("spacing"), lim.spacings, "spacing"),
            validate_enum(attrs.get("justifyContent"), lim.justify_contents, "justifyContent"),
            validate_enum(attrs.get("alignItems"), lim.align_items, "alignItems"),
            validate_range(attrs.get("flex"), lim.min_flex, lim.max_flex, "flex"),
        ]
        for prop in ("width", "height", "maxWidth", "maxHeight"):
            checks.append(validate_size_value(attrs.get(prop), prop))
        contents = data.get("contents")
        if isinstance(contents, list) and len(contents) > lim.max_box_contents:
            checks.append(
                _bad("contents", f"Box has {len(contents)} items; the maximum is {lim.max_box_contents}")
            )
        return checks

    def _text_checks(self, data: dict[str, Any], attrs: dict[str, Any]) -> list[PropertyCheck]:
        lim = self.limits
        has_spans = bool(data.get("contents"))
        return [
            validate_text_length(_field(data, attrs, "text"), "text", lim.max_text_length, required=not has_spans),
            validate_keyword_or_pixel(attrs.get("size"), lim.sizes, "size"),
            validate_enum(attrs.get("weight"), lim.weights, "weight"),
            validate_color(attrs.get("color")),
            validate_enum(attrs.get("align"), lim.aligns, "align"),
            validate_enum(attrs.get("gravity"), lim.gravities, "gravity"),
            validate_range(attrs.get("maxLines"), lim.min_max_lines, lim.max_max_lines, "maxLines"),
            validate_keyword_or_pixel(attrs.get("lineSpacing"), lim.spacings, "lineSpacing"),
            validate_enum(attrs.get("style"), lim.text_styles, "style"),
            validate_enum(attrs.get("decoration"), lim.decorations, "decoration"),
            validate_range(attrs.get("flex"), lim.min_flex, lim.max_flex, "flex"),
            validate_enum(attrs.get("adjustMode"), lim.adjust_modes, "adjustMode"),
        ]

    def _span_checks(self, data: dict[str, Any], attrs: dict[str, Any]) -> list[PropertyCheck]:
        lim = self.limits
        return [
            validate_text_length(_field(data, attrs, "text"), "text", lim.max_text_length),
            validate_keyword_or_pixel(attrs.get("size"), lim.sizes, "size"),
            validate_enum(attrs.get("weight"), lim.weights, "weight"),
            validate_color(attrs.get("color")),
            validate_enum(attrs.get("style"), lim.text_styles, "style"),
            validate_enum(attrs.get("decoration"), lim.decorations, "decoration"),
        ]

    def _button_checks(self, data: dict[str, Any], attrs: dict[str, Any]) -> list[PropertyCheck]:
        lim = self.limits
        checks = [
            validate_enum(attrs.get("style"), lim.button_styles, "style"),
            validate_color(attrs.get("color")),
            validate_enum(attrs.get("height"), lim.button_heights, "height"),
            validate_enum(attrs.get("gravity"), lim.gravities, "gravity"),
            validate_range(attrs.get("flex"), lim.min_flex, lim.max_flex, "flex"),
            validate_enum(attrs.get("adjustMode"), lim.adjust_modes, "adjustMode"),
        ]
        checks.extend(self._action_checks(_field(data, attrs, "action"), "action"))
        return checks

    def _image_checks(self, data: dict[str, Any], attrs: dict[str, Any]) -> list[PropertyCheck]:
        lim = self.limits
        url = _field(data, attrs, "url")
        return [
            validate_url(url, "url", lim),
            validate_image_extension(url, "url", lim),
            validate_keyword_or_pixel(attrs.get("size"), lim.sizes, "size"),
            validate_aspect_ratio(attrs.get("aspectRatio"), "aspectRatio", lim),
            validate_enum(attrs.get("aspectMode"), lim.aspect_modes, "aspectMode"),
            validate_enum(attrs.get("align"), lim.aligns, "align"),
            validate_enum(attrs.get("gravity"), lim.gravities, "gravity"),
            validate_range(attrs.get("flex"), lim.min_flex, lim.max_flex, "flex"),
        ]

    def _icon_checks(self, data: dict[str, Any], attrs: dict[str, Any]) -> list[PropertyCheck]:
        lim = self.limits
        url = _field(data, attrs, "url")
        return [
            validate_url(url, "url", lim),
            validate_image_extension(url, "url", lim),
            validate_keyword_or_pixel(attrs.get("size"), lim.sizes, "size"),
            validate_aspect_ratio(attrs.get("aspectRatio"), "aspectRatio", lim),
        ]

    def _video_checks(self, data: dict[str, Any], attrs: dict[str, Any]) -> list[PropertyCheck]:
        lim = self.limits
        preview = _field(data, attrs, "previewUrl")
        checks = [
            validate_url(_field(data, attrs, "url"), "url", lim),
            validate_url(preview, "previewUrl", lim),
            validate_image_extension(preview, "previewUrl", lim),
            validate_aspect_ratio(attrs.get("aspectRatio"), "aspectRatio", lim),
        ]
        alt_content = _field(data, attrs, "altContent")
        if alt_content is not None and not isinstance(alt_content, dict):
            checks.append(_bad("altContent", "altContent must be an image or box element"))
        return checks

    def _separator_checks(self, data: dict[str, Any], attrs: dict[str, Any]) -> list[PropertyCheck]:
        return [validate_color(attrs.get("color"))]

    def _filler_checks(self, data: dict[str, Any], attrs: dict[str, Any]) -> list[PropertyCheck]:
        return [validate_range(attrs.get("flex"), self.limits.min_flex, self.limits.max_flex, "flex")]

    # -------------------------------------------------------------------------
    # Shared attribute groups
    # -------------------------------------------------------------------------

    def _group_checks(self, kind: ElementKind, attrs: dict[str, Any]) -> list[PropertyCheck]:
        checks: list[PropertyCheck] = []
        for group in ELEMENT_GROUPS[kind]:
            if group == "spacing":
                checks.extend(self._spacing_group(attrs))
            elif group == "background":
                checks.extend(self._background_group(attrs))
            elif group == "border":
                checks.extend(self._border_group(attrs))
            elif group == "position":
                checks.extend(self._position_group(attrs))
        return checks

    def _spacing_group(self, attrs: dict[str, Any]) -> list[PropertyCheck]:
        props = ("paddingAll", "paddingTop", "paddingBottom", "paddingStart", "paddingEnd", "margin")
        return [validate_keyword_or_pixel(attrs.get(p), self.limits.spacings, p) for p in props]

    def _background_group(self, attrs: dict[str, Any]) -> list[PropertyCheck]:
        checks = [validate_color(attrs.get("backgroundColor"), "backgroundColor")]
        background = attrs.get("background")
        if background is not None:
            checks.extend(self._gradient_checks(background))
        return checks

    def _gradient_checks(self, background: Any) -> list[PropertyCheck]:
        if not isinstance(background, dict) or background.get("type") != "linearGradient":
            return [_bad("background", "background must be a linearGradient object")]
        checks: list[PropertyCheck] = []
        angle = background.get("angle")
        if _empty(angle) or not (isinstance(angle, str) and ANGLE_PATTERN.match(angle)):
            checks.append(_bad("background.angle", f"background.angle must be a value such as 90deg, got {angle!r}"))
        colors = background.get("colors")
        if isinstance(colors, list):
            if len(colors) < 2:
                checks.append(_bad("background.colors", "A gradient needs at least two colors"))
            for i, stop in enumerate(colors):
                color = stop.get("color") if isinstance(stop, dict) else stop
                checks.append(validate_color(color, f"background.colors[{i}]"))
        else:
            for prop in ("startColor", "endColor"):
                value = background.get(prop)
                if _empty(value):
                    checks.append(_bad(f"background.{prop}", f"background.{prop} is required"))
                else:
                    checks.append(validate_color(value, f"background.{prop}"))
            checks.append(validate_color(background.get("centerColor"), "background.centerColor"))
        position = background.get("centerPosition")
        if not _empty(position) and not (isinstance(position, str) and PERCENT_PATTERN.match(position)):
            checks.append(_bad("background.centerPosition", "background.centerPosition must be a percentage"))
        return checks

    def _border_group(self, attrs: dict[str, Any]) -> list[PropertyCheck]:
        return [
            validate_pixel(attrs.get("borderWidth"), "borderWidth"),
            validate_color(attrs.get("borderColor"), "borderColor"),
            validate_pixel(attrs.get("cornerRadius"), "cornerRadius"),
        ]

    def _position_group(self, attrs: dict[str, Any]) -> list[PropertyCheck]:
        checks = [validate_enum(attrs.get("position"), self.limits.positions, "position")]
        for prop in ("offsetTop", "offsetBottom", "offsetStart", "offsetEnd"):
            checks.append(validate_offset(attrs.get(prop), prop, self.limits))
        return checks

    # -------------------------------------------------------------------------
    # Actions
    # -------------------------------------------------------------------------

    def _action_checks(self, action: Any, prop: str) -> list[PropertyCheck]:
        lim = self.limits
        if action is None:
            return [_bad(prop, f"{prop} is required")]
        if isinstance(action, Action):
            action = action.model_dump(by_alias=True, exclude_none=True)
        if not isinstance(action, dict):
            return [_bad(prop, f"{prop} must be an action object")]

        checks: list[PropertyCheck] = []
        raw_type = action.get("type")
        try:
            action_type = ActionType(raw_type)
        except ValueError:
            return [_bad(f"{prop}.type", f"Unsupported action type {raw_type!r}", Severity.WARNING)]

        label = action.get("label")
        if _empty(label):
            checks.append(_bad(f"{prop}.label", f"{prop}.label should be set", Severity.WARNING))
        else:
            checks.append(validate_text_length(label, f"{prop}.label", lim.max_button_label_length))

        if action_type == ActionType.URI:
            checks.append(validate_url(action.get("uri"), f"{prop}.uri", lim, max_length=lim.max_action_uri_length))
        elif action_type == ActionType.MESSAGE:
            checks.append(validate_text_length(action.get("text"), f"{prop}.text", lim.max_text_length))
        elif action_type == ActionType.POSTBACK:
            checks.append(_require(action, "data", prop))
        elif action_type == ActionType.DATETIME_PICKER:
            checks.append(_require(action, "data", prop))
            mode = action.get("mode")
            if _empty(mode):
                checks.append(_bad(f"{prop}.mode", f"{prop}.mode is required"))
            else:
                checks.append(validate_enum(mode, lim.datetime_modes, f"{prop}.mode"))
        elif action_type == ActionType.RICHMENU_SWITCH:
            checks.append(_require(action, "richMenuAliasId", prop))
            checks.append(_require(action, "data", prop))
        elif action_type == ActionType.CLIPBOARD:
            checks.append(_require(action, "clipboardText", prop))
        return checks

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def _resolve_kind(kind: ElementKind | str | None, data: dict[str, Any]) -> ElementKind | None:
        if isinstance(kind, ElementKind):
            return kind
        if isinstance(kind, str):
            try:
                return ElementKind(kind)
            except ValueError:
                return None
        return element_kind(data)


def _field(data: dict[str, Any], attrs: dict[str, Any], name: str) -> Any:
    """Content field from the payload top level, else from its properties."""
    if name in data:
        return data[name]
    return attrs.get(name)


def _require(action: dict[str, Any], key: str, prop: str) -> PropertyCheck:
    if _empty(action.get(key)):
        return _bad(f"{prop}.{key}", f"{prop}.{key} is required")
    return _ok(f"{prop}.{key}")


# =============================================================================
# Module-level convenience API
# =============================================================================


def validate_element_properties(
    kind: ElementKind | str | None,
    data: dict[str, Any],
    limits: FlexLimits | None = None,
) -> ValidationReport:
    """Validate one element's properties against ``limits`` (default table)."""
    return FlexValidator(limits).validate_element_properties(kind, data)


def validate_action(action: Any, limits: FlexLimits | None = None) -> ValidationReport:
    return FlexValidator(limits).validate_action(action)


def validate_document(document: Any, limits: FlexLimits | None = None) -> ValidationReport:
    """Validate a complete ``{"type": "flex", ...}`` document."""
    return FlexValidator(limits).validate_document(document)
