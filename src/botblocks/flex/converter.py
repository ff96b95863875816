"""
Flex block graph to LINE Flex Message JSON.

``MessageConverter.convert`` lowers one element (a flex Block or an inline
element dict) and recurses into its children in order.
``convert_container`` wraps a root container into a complete
``{"type": "flex", "altText": ..., "contents": ...}`` document.

Optional attributes are emitted only when they differ from the documented
default in ``botblocks.core.limits``. The four shared attribute groups
(spacing, background, border, position) are copied by ``copy_group`` from
``GROUP_DEFAULTS`` so every element kind emits them the same way.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from botblocks.core.graph import BlockGraph
from botblocks.core.ir import (
    FLEX_CATEGORIES,
    Action,
    Block,
    Category,
    ElementKind,
    MalformedPayload,
    UnknownPayload,
    element_attributes,
    element_kind,
    parse_element,
    parse_payload,
)
from botblocks.core.limits import ELEMENT_DEFAULTS, ELEMENT_GROUPS, GROUP_DEFAULTS

logger = logging.getLogger("botblocks.flex.converter")

Element = Block | dict[str, Any]
WireElement = dict[str, Any]

BUBBLE_SECTIONS = ("header", "hero", "body", "footer")
DEFAULT_SECTION = "body"
DEFAULT_ALT_TEXT = "Flex Message"

DEFAULT_TEXT = "Sample text"
DEFAULT_IMAGE_URL = "https://example.com/image.jpg"
DEFAULT_ICON_URL = "https://example.com/icon.png"
DEFAULT_VIDEO_URL = "https://example.com/video.mp4"
DEFAULT_BUTTON_ACTION: dict[str, Any] = {"type": "postback", "label": "Button", "data": "button_clicked"}

# Elements that may fill the hero section without a wrapping box.
_HERO_ELEMENTS = (ElementKind.IMAGE, ElementKind.VIDEO, ElementKind.BOX)


def _is_set(value: Any) -> bool:
    return value is not None and value != ""


def _copy_attr(attrs: dict[str, Any], key: str, default: Any, out: WireElement) -> None:
    """Copy one attribute unless it is unset or equal to its default."""
    value = attrs.get(key)
    if not _is_set(value):
        return
    if default is not None and value == default:
        return
    out[key] = value


def copy_group(group: str, attrs: dict[str, Any], out: WireElement) -> None:
    """Copy one shared attribute group; the background group also carries gradients."""
    for key, default in GROUP_DEFAULTS[group].items():
        _copy_attr(attrs, key, default, out)
    if group == "background":
        gradient = linear_gradient(attrs.get("background"))
        if gradient is not None:
            out["background"] = gradient


def linear_gradient(background: Any) -> WireElement | None:
    """
    Wire form of a linear gradient background.

    Accepts the wire shape (``startColor``/``endColor``/``centerColor``) or
    the editor's list of color stops, where the first and last stops become
    the start and end colors and a middle stop becomes the center.
    """
    if not isinstance(background, dict) or background.get("type") != "linearGradient":
        return None
    out: WireElement = {"type": "linearGradient", "angle": background.get("angle") or "0deg"}
    stops = background.get("colors")
    if isinstance(stops, list) and stops:
        colors = [s.get("color") if isinstance(s, dict) else s for s in stops]
        out["startColor"] = colors[0]
        out["endColor"] = colors[-1]
        if len(stops) > 2:
            middle = len(stops) // 2
            out["centerColor"] = colors[middle]
            if isinstance(stops[middle], dict) and _is_set(stops[middle].get("position")):
                out["centerPosition"] = stops[middle]["position"]
        return out
    for key in ("startColor", "endColor", "centerColor", "centerPosition"):
        if _is_set(background.get(key)):
            out[key] = background[key]
    return out


def _section_of(item: Element) -> str:
    data = item.block_data if isinstance(item, Block) else item
    section = data.get("section")
    return section if section in BUBBLE_SECTIONS else DEFAULT_SECTION


def _title_of(item: Element) -> str:
    if isinstance(item, Block):
        return item.title
    title = item.get("title")
    return title if isinstance(title, str) else ""


def _vertical_box(contents: list[WireElement]) -> WireElement:
    return {"type": "box", "layout": "vertical", "contents": contents}


def _placeholder(item: Element) -> WireElement:
    return {"type": "text", "text": f"Unknown component: {_title_of(item) or 'Unknown'}"}


class MessageConverter:
    """
    Converts flex blocks into Flex Message JSON.

    Args:
        blocks: The flex graph children are resolved against
        default_alt_text: altText used when neither the caller nor the root
            block's title provides one
    """

    def __init__(
        self,
        blocks: BlockGraph | list[Block] | None = None,
        default_alt_text: str = DEFAULT_ALT_TEXT,
    ):
        if isinstance(blocks, BlockGraph):
            self.graph = blocks
        else:
            self.graph = BlockGraph(list(blocks or []))
        self.default_alt_text = default_alt_text
        # Ids of the blocks being converted, outermost first
        self._active: set[str] = set()
        self._builders: dict[ElementKind, Callable[[dict[str, Any], dict[str, Any], list[Element]], WireElement]] = {
            ElementKind.BUBBLE: self._bubble,
            ElementKind.CAROUSEL: self._carousel,
            ElementKind.BOX: self._box,
            ElementKind.TEXT: self._text,
            ElementKind.SPAN: self._span,
            ElementKind.BUTTON: self._button,
            ElementKind.IMAGE: self._image,
            ElementKind.ICON: self._icon,
            ElementKind.VIDEO: self._video,
            ElementKind.SEPARATOR: self._separator,
            ElementKind.FILLER: self._filler,
        }

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    def convert(self, item: Element) -> WireElement:
        """
        Convert one element and its subtree.

        An element whose kind is not recognised becomes a placeholder text
        element so its siblings still convert.
        """
        return self._convert(item, None)

    def convert_container(self, root: Element | None = None, alt_text: str | None = None) -> WireElement:
        """
        Convert a root container into a complete Flex Message document.

        Args:
            root: Root container (default: the first root container in the graph)
            alt_text: Notification text (default: the root's title)

        Returns:
            ``{"type": "flex", "altText": ..., "contents": <bubble|carousel>}``
        """
        if root is None:
            containers = self.root_containers()
            root = containers[0] if containers else None

        if root is None:
            # Loose content with no container still renders as one bubble.
            adopted = self._orphans()
            contents: WireElement = {"type": "bubble"}
            if adopted:
                contents["body"] = _vertical_box([self.convert(child) for child in adopted])
            title = ""
        else:
            children = None
            if isinstance(root, Block) and not self._children(root):
                children = self._orphans()
                if children:
                    logger.debug("Root %s has no children; adopting %d parentless blocks", root.id, len(children))
            contents = self._as_root(self._convert(root, children))
            title = _title_of(root)

        return {
            "type": "flex",
            "altText": alt_text or title or self.default_alt_text,
            "contents": contents,
        }

    def root_containers(self) -> list[Block]:
        """Flex containers with no parent, in graph order."""
        return [b for b in self.graph.roots() if b.category == Category.FLEX_CONTAINER]

    # -------------------------------------------------------------------------
    # Dispatch
    # -------------------------------------------------------------------------

    def _convert(self, item: Element, children: list[Element] | None) -> WireElement:
        kind = self._kind_of(item)
        builder = self._builders.get(kind) if kind is not None else None
        if builder is None:
            logger.debug("Unknown flex element %r converted to placeholder text", _title_of(item) or item)
            return _placeholder(item)

        if not isinstance(item, Block):
            if children is None:
                children = self._children(item)
            return builder(item, element_attributes(item), children)

        if item.id in self._active:
            logger.debug("Flex block %s contains itself; converted to placeholder text", item.id)
            return _placeholder(item)
        self._active.add(item.id)
        try:
            if children is None:
                children = self._children(item)
            return builder(item.block_data, element_attributes(item.block_data), children)
        finally:
            self._active.discard(item.id)

    @staticmethod
    def _kind_of(item: Element) -> ElementKind | None:
        """Element kind from the item's typed payload; None when it has none."""
        if isinstance(item, Block):
            if item.category not in FLEX_CATEGORIES:
                return None
            payload = parse_payload(item.category, item.block_data)
        else:
            payload = parse_element(item)
        if isinstance(payload, UnknownPayload):
            return None
        if isinstance(payload, MalformedPayload):
            # Still convertible from the raw dict; the validator reports the bad fields.
            logger.debug("Flex element %s payload did not validate: %s", payload.kind, payload.error)
            return ElementKind(payload.kind)
        return payload.element

    def _children(self, item: Element) -> list[Element]:
        """Graph children of a block, else the payload's inline ``contents``."""
        if isinstance(item, Block):
            resolved: list[Element] = list(self.graph.children(item))
            if resolved:
                return resolved
            data = item.block_data
        else:
            data = item
        inline = data.get("contents")
        if isinstance(inline, list):
            return [c for c in inline if isinstance(c, dict)]
        return []

    def _orphans(self) -> list[Element]:
        return [
            b
            for b in self.graph.roots()
            if b.category in (Category.FLEX_CONTENT, Category.FLEX_LAYOUT)
        ]

    def _emit(self, kind: ElementKind, attrs: dict[str, Any], out: WireElement) -> WireElement:
        for key, default in ELEMENT_DEFAULTS[kind].items():
            _copy_attr(attrs, key, default, out)
        for group in ELEMENT_GROUPS[kind]:
            copy_group(group, attrs, out)
        return out

    def _as_root(self, element: WireElement) -> WireElement:
        kind = element.get("type")
        if kind in (ElementKind.BUBBLE, ElementKind.CAROUSEL):
            return element
        if kind == ElementKind.BOX:
            return {"type": "bubble", "body": element}
        return {"type": "bubble", "body": _vertical_box([element])}

    # -------------------------------------------------------------------------
    # Containers
    # -------------------------------------------------------------------------

    def _bubble(self, data: dict[str, Any], attrs: dict[str, Any], children: list[Element]) -> WireElement:
        out = self._emit(ElementKind.BUBBLE, attrs, {"type": "bubble"})

        sections: dict[str, list[Element]] = {name: [] for name in BUBBLE_SECTIONS}
        grouped: dict[str, Element] = {}
        for child in children:
            name = self._section_group(child)
            if name is not None:
                grouped[name] = child
            else:
                sections[_section_of(child)].append(child)

        for name in BUBBLE_SECTIONS:
            if name in grouped:
                out[name] = self._section_from_group(name, grouped[name])
            elif sections[name]:
                out[name] = self._section(name, sections[name])
            elif isinstance(data.get(name), dict):
                out[name] = self.convert(data[name])

        styles = data.get("styles") or attrs.get("styles")
        if isinstance(styles, dict) and styles:
            out["styles"] = styles
        return out

    def _section(self, name: str, items: list[Element]) -> WireElement:
        converted = [self.convert(item) for item in items]
        if len(converted) == 1:
            only = converted[0]
            if only.get("type") == ElementKind.BOX:
                return only
            if name == "hero" and only.get("type") in _HERO_ELEMENTS:
                return only
        return _vertical_box(converted)

    @staticmethod
    def _section_group(item: Element) -> str | None:
        """Section name when ``item`` is an editor section grouping (``contentType: "hero"``)."""
        if isinstance(item, Block):
            return None
        for key in ("contentType", "type"):
            if item.get(key) in BUBBLE_SECTIONS:
                return item[key]
        return None

    def _section_from_group(self, name: str, group: dict[str, Any]) -> WireElement:
        inner = [c for c in group.get("contents") or [] if isinstance(c, dict)]
        if name == "hero" and len(inner) == 1 and element_kind(inner[0]) in _HERO_ELEMENTS:
            return self.convert(inner[0])
        return self._box(group, element_attributes(group), inner)

    def _carousel(self, data: dict[str, Any], attrs: dict[str, Any], children: list[Element]) -> WireElement:
        return {"type": "carousel", "contents": [self._as_root(self.convert(child)) for child in children]}

    def _box(self, data: dict[str, Any], attrs: dict[str, Any], children: list[Element]) -> WireElement:
        out: WireElement = {"type": "box", "layout": attrs.get("layout") or "vertical"}
        self._emit(ElementKind.BOX, attrs, out)
        out["contents"] = [self.convert(child) for child in children]
        return out

    # -------------------------------------------------------------------------
    # Contents
    # -------------------------------------------------------------------------

    def _text(self, data: dict[str, Any], attrs: dict[str, Any], children: list[Element]) -> WireElement:
        text = data.get("text") or attrs.get("text") or DEFAULT_TEXT
        out = self._emit(ElementKind.TEXT, attrs, {"type": "text", "text": text})
        spans = [self.convert(child) for child in children]
        spans = [s for s in spans if s.get("type") == ElementKind.SPAN]
        if spans:
            out["contents"] = spans
        return out

    def _span(self, data: dict[str, Any], attrs: dict[str, Any], children: list[Element]) -> WireElement:
        text = data.get("text") or attrs.get("text") or DEFAULT_TEXT
        return self._emit(ElementKind.SPAN, attrs, {"type": "span", "text": text})

    def _button(self, data: dict[str, Any], attrs: dict[str, Any], children: list[Element]) -> WireElement:
        action = data.get("action") or attrs.get("action")
        return self._emit(ElementKind.BUTTON, attrs, {"type": "button", "action": self._action(action)})

    @staticmethod
    def _action(action: Any) -> WireElement:
        if isinstance(action, Action):
            action = action.model_dump(by_alias=True, exclude_none=True)
        if not isinstance(action, dict) or not action.get("type"):
            return dict(DEFAULT_BUTTON_ACTION)
        return {k: v for k, v in action.items() if _is_set(v) and k != "title"}

    def _image(self, data: dict[str, Any], attrs: dict[str, Any], children: list[Element]) -> WireElement:
        url = data.get("url") or attrs.get("url") or DEFAULT_IMAGE_URL
        return self._emit(ElementKind.IMAGE, attrs, {"type": "image", "url": url})

    def _icon(self, data: dict[str, Any], attrs: dict[str, Any], children: list[Element]) -> WireElement:
        url = data.get("url") or attrs.get("url") or DEFAULT_ICON_URL
        return self._emit(ElementKind.ICON, attrs, {"type": "icon", "url": url})

    def _video(self, data: dict[str, Any], attrs: dict[str, Any], children: list[Element]) -> WireElement:
        url = data.get("url") or attrs.get("url") or DEFAULT_VIDEO_URL
        preview = data.get("previewUrl") or attrs.get("previewUrl") or DEFAULT_IMAGE_URL
        alt_content = data.get("altContent") or attrs.get("altContent")
        if isinstance(alt_content, dict):
            alt = self.convert(alt_content)
        else:
            alt = {"type": "image", "url": preview}
        out: WireElement = {"type": "video", "url": url, "previewUrl": preview, "altContent": alt}
        return self._emit(ElementKind.VIDEO, attrs, out)

    # -------------------------------------------------------------------------
    # Layout
    # -------------------------------------------------------------------------

    def _separator(self, data: dict[str, Any], attrs: dict[str, Any], children: list[Element]) -> WireElement:
        return self._emit(ElementKind.SEPARATOR, attrs, {"type": "separator"})

    def _filler(self, data: dict[str, Any], attrs: dict[str, Any], children: list[Element]) -> WireElement:
        return self._emit(ElementKind.FILLER, attrs, {"type": "filler"})


def convert_container(
    blocks: list[Block],
    root: Element | None = None,
    alt_text: str | None = None,
) -> WireElement:
    """Convert ``root`` (default: the first root container) of ``blocks`` into a document."""
    return MessageConverter(blocks).convert_container(root, alt_text)
