"""
Unit tests for flex block to Flex Message conversion.
"""

import ast
import copy

import pytest

from botblocks.codegen import generate
from botblocks.core.flex_validator import validate_document
from botblocks.core.ir import (
    ELEMENT_PAYLOADS,
    Category,
    ElementKind,
    MalformedPayload,
    parse_element,
    parse_payload,
)
from botblocks.core.limits import GROUP_DEFAULTS
from botblocks.flex import MessageConverter, convert_container, linear_gradient

IMAGE = "https://example.com/photo.png"


@pytest.fixture
def converter() -> MessageConverter:
    return MessageConverter()


class TestDefaults:
    """Attributes equal to their documented default are omitted."""

    def test_default_text_size_omitted(self, converter):
        assert converter.convert({"type": "text", "text": "a", "size": "md"}) == {"type": "text", "text": "a"}

    def test_non_default_text_size_kept(self, converter):
        assert converter.convert({"type": "text", "text": "a", "size": "lg"}) == {
            "type": "text",
            "text": "a",
            "size": "lg",
        }

    def test_wrap(self, converter):
        assert "wrap" not in converter.convert({"type": "text", "text": "a", "wrap": False})
        assert converter.convert({"type": "text", "text": "a", "wrap": True})["wrap"] is True

    @pytest.mark.parametrize(
        "element,expected",
        [
            (
                {"type": "image", "url": IMAGE, "size": "full", "aspectRatio": "1:1", "aspectMode": "cover"},
                {"type": "image", "url": IMAGE},
            ),
            (
                {
                    "type": "button",
                    "action": {"type": "message", "label": "Hi", "text": "hi"},
                    "style": "primary",
                    "color": "#0084ff",
                    "height": "md",
                },
                {"type": "button", "action": {"type": "message", "label": "Hi", "text": "hi"}},
            ),
            (
                {"type": "box", "layout": "vertical", "spacing": "none", "paddingAll": "none", "contents": []},
                {"type": "box", "layout": "vertical", "contents": []},
            ),
            ({"type": "separator"}, {"type": "separator"}),
            ({"type": "filler"}, {"type": "filler"}),
            ({"type": "icon", "url": IMAGE, "size": "md"}, {"type": "icon", "url": IMAGE}),
        ],
    )
    def test_all_default_elements_carry_only_required_keys(self, converter, element, expected):
        assert converter.convert(element) == expected

    def test_editor_properties_become_wire_attributes(self, converter, block):
        title = block(
            "t",
            Category.FLEX_CONTENT,
            {"contentType": "text", "text": "Hi", "properties": {"color": "#FF0000", "padding": "8px"}},
        )

        assert converter.convert(title) == {"type": "text", "text": "Hi", "color": "#FF0000", "paddingAll": "8px"}

    @pytest.mark.parametrize("group", sorted(GROUP_DEFAULTS))
    def test_group_defaults_omitted(self, converter, group):
        action = {"type": "message", "label": "Hi", "text": "hi"}
        button = {"type": "button", "action": action, **GROUP_DEFAULTS[group]}

        assert converter.convert(button) == {"type": "button", "action": action}

    def test_missing_content_uses_placeholders(self, converter):
        assert converter.convert({"type": "text"})["text"] == "Sample text"
        assert converter.convert({"type": "button"})["action"] == {
            "type": "postback",
            "label": "Button",
            "data": "button_clicked",
        }


class TestStructure:
    """Boxes, sections, carousels and ordering."""

    def test_box_layout_defaults_to_vertical(self, converter):
        box = converter.convert({"type": "box", "contents": []})

        assert box["layout"] == "vertical"

    def test_box_contents_come_last(self, converter):
        box = converter.convert(
            {"type": "box", "layout": "horizontal", "spacing": "md", "contents": [{"type": "filler"}]}
        )

        assert list(box) == ["type", "layout", "spacing", "contents"]

    def test_child_order_preserved(self, converter):
        box = converter.convert(
            {
                "type": "box",
                "contents": [
                    {"type": "text", "text": "one"},
                    {"type": "separator"},
                    {"type": "text", "text": "two"},
                ],
            }
        )

        assert [c["type"] for c in box["contents"]] == ["text", "separator", "text"]
        assert box["contents"][2]["text"] == "two"

    def test_bubble_sections(self, block):
        message_a = {"type": "message", "label": "A", "text": "a"}
        message_b = {"type": "message", "label": "B", "text": "b"}
        graph = [
            block("card", Category.FLEX_CONTAINER, {"containerType": "bubble"}),
            block(
                "h", Category.FLEX_CONTENT, {"contentType": "text", "text": "Head", "section": "header"}, parent="card"
            ),
            block(
                "img", Category.FLEX_CONTENT, {"contentType": "image", "url": IMAGE, "section": "hero"}, parent="card"
            ),
            block(
                "f1",
                Category.FLEX_CONTENT,
                {"contentType": "button", "section": "footer", "action": message_a},
                parent="card",
            ),
            block(
                "f2",
                Category.FLEX_CONTENT,
                {"contentType": "button", "section": "footer", "action": message_b},
                parent="card",
            ),
        ]

        bubble = MessageConverter(graph).convert(graph[0])

        assert list(bubble) == ["type", "header", "hero", "footer"]
        assert bubble["header"] == {"type": "box", "layout": "vertical", "contents": [{"type": "text", "text": "Head"}]}
        assert bubble["hero"] == {"type": "image", "url": IMAGE}
        assert [b["action"]["label"] for b in bubble["footer"]["contents"]] == ["A", "B"]

    def test_single_box_section_used_directly(self, converter):
        bubble = converter.convert(
            {"type": "bubble", "contents": [{"type": "box", "layout": "horizontal", "contents": []}]}
        )

        assert bubble["body"] == {"type": "box", "layout": "horizontal", "contents": []}

    def test_section_groupings(self, converter):
        bubble = converter.convert(
            {
                "type": "bubble",
                "contents": [
                    {"type": "hero", "contents": [{"type": "image", "url": IMAGE}]},
                    {"type": "body", "properties": {"spacing": "md"}, "contents": [{"type": "text", "text": "Hi"}]},
                ],
            }
        )

        assert bubble["hero"] == {"type": "image", "url": IMAGE}
        assert bubble["body"] == {
            "type": "box",
            "layout": "vertical",
            "spacing": "md",
            "contents": [{"type": "text", "text": "Hi"}],
        }

    def test_bubble_styles_pass_through(self, converter):
        styles = {"footer": {"separator": True}}

        assert converter.convert({"type": "bubble", "styles": styles})["styles"] == styles

    def test_carousel_wraps_items_as_bubbles(self, block):
        graph = [
            block("car", Category.FLEX_CONTAINER, {"containerType": "carousel"}, children=["b1", "bx"]),
            block("b1", Category.FLEX_CONTAINER, {"containerType": "bubble"}, parent="car"),
            block("bx", Category.FLEX_CONTAINER, {"containerType": "box"}, parent="car"),
        ]

        carousel = MessageConverter(graph).convert(graph[0])

        assert carousel["type"] == "carousel"
        assert carousel["contents"][0] == {"type": "bubble"}
        assert carousel["contents"][1] == {
            "type": "bubble",
            "body": {"type": "box", "layout": "vertical", "contents": []},
        }

    def test_text_with_spans(self, converter):
        text = converter.convert(
            {"type": "text", "text": "x", "contents": [{"type": "span", "text": "a", "weight": "bold"}]}
        )

        assert text["contents"] == [{"type": "span", "text": "a", "weight": "bold"}]

    def test_video_gets_alt_content(self, converter):
        video = converter.convert({"type": "video", "url": "https://example.com/v.mp4", "previewUrl": IMAGE})

        assert video["altContent"] == {"type": "image", "url": IMAGE}


class TestUnknown:
    def test_unknown_inline_element(self, converter):
        assert converter.convert({"type": "widget", "title": "Gizmo"}) == {
            "type": "text",
            "text": "Unknown component: Gizmo",
        }

    def test_unknown_without_title(self, converter):
        assert converter.convert({"type": "widget"})["text"] == "Unknown component: Unknown"

    def test_non_flex_block(self, converter, block):
        stray = block("x", Category.UNKNOWN, {"title": "Thing"})

        assert converter.convert(stray) == {"type": "text", "text": "Unknown component: Thing"}

    def test_unknown_child_keeps_siblings(self, converter):
        box = converter.convert(
            {"type": "box", "contents": [{"type": "text", "text": "a"}, {"type": "widget"}, {"type": "filler"}]}
        )

        assert [c["type"] for c in box["contents"]] == ["text", "text", "filler"]


class TestCycles:
    """Graphs whose child links loop back convert to placeholders instead of recursing."""

    def test_self_child(self, block):
        graph = [block("a", Category.FLEX_CONTAINER, {"containerType": "bubble", "title": "Card"}, children=["a"])]

        document = MessageConverter(graph).convert_container()

        placeholder = {"type": "text", "text": "Unknown component: Card"}
        assert document["contents"] == {
            "type": "bubble",
            "body": {"type": "box", "layout": "vertical", "contents": [placeholder]},
        }

    def test_two_block_cycle(self, block):
        graph = [
            block("a", Category.FLEX_CONTAINER, {"containerType": "bubble"}, children=["b"]),
            block("b", Category.FLEX_CONTAINER, {"containerType": "box", "title": "Loop"}, parent="a", children=["b"]),
        ]

        document = MessageConverter(graph).convert_container()

        assert document["contents"]["body"] == {
            "type": "box",
            "layout": "vertical",
            "contents": [{"type": "text", "text": "Unknown component: Loop"}],
        }

    def test_shared_child_is_not_a_cycle(self, block):
        graph = [
            block("card", Category.FLEX_CONTAINER, {"containerType": "bubble"}, children=["p", "q"]),
            block("p", Category.FLEX_CONTAINER, {"containerType": "box"}, parent="card", children=["t"]),
            block("q", Category.FLEX_CONTAINER, {"containerType": "box"}, parent="card", children=["t"]),
            block("t", Category.FLEX_CONTENT, {"contentType": "text", "text": "Hi"}, parent="p"),
        ]

        body = MessageConverter(graph).convert_container()["contents"]["body"]

        assert [box["contents"] for box in body["contents"]] == [[{"type": "text", "text": "Hi"}]] * 2

    def test_generator_survives_cycle(self, block):
        logic = [
            block("evt", Category.EVENT, {"eventType": "message.text"}),
            block("rep", Category.REPLY, {"replyType": "flex"}),
        ]
        graph = [
            block("a", Category.FLEX_CONTAINER, {"containerType": "bubble"}, children=["b"]),
            block("b", Category.FLEX_CONTAINER, {"containerType": "box"}, parent="a", children=["a"]),
        ]

        source = generate(logic, graph)

        ast.parse(source)
        assert "Unknown component: Unknown" in source


class TestTypedPayloads:
    def test_every_kind_has_a_payload_model(self):
        assert set(ELEMENT_PAYLOADS) == set(ElementKind)
        assert all(model.element == kind for kind, model in ELEMENT_PAYLOADS.items())

    def test_malformed_block_still_converts(self, converter, block):
        text = block("t", Category.FLEX_CONTENT, {"contentType": "text", "text": "Hi", "properties": "big"})

        assert isinstance(parse_payload(text.category, text.block_data), MalformedPayload)
        assert converter.convert(text) == {"type": "text", "text": "Hi"}

    def test_malformed_inline_element_still_converts(self, converter):
        element = {"type": "image", "url": IMAGE, "section": 3}

        assert isinstance(parse_element(element), MalformedPayload)
        assert converter.convert(element) == {"type": "image", "url": IMAGE}

    def test_kind_outside_family_is_unknown(self, converter, block):
        misfiled = block("x", Category.FLEX_LAYOUT, {"contentType": "button", "title": "Misfiled"})

        assert converter.convert(misfiled) == {"type": "text", "text": "Unknown component: Misfiled"}


class TestGradient:
    def test_color_stops(self):
        gradient = linear_gradient(
            {
                "type": "linearGradient",
                "angle": "90deg",
                "colors": [{"color": "#FF0000"}, {"color": "#00FF00", "position": "40%"}, {"color": "#0000FF"}],
            }
        )

        assert gradient == {
            "type": "linearGradient",
            "angle": "90deg",
            "startColor": "#FF0000",
            "endColor": "#0000FF",
            "centerColor": "#00FF00",
            "centerPosition": "40%",
        }

    def test_two_stops_have_no_center(self):
        gradient = linear_gradient({"type": "linearGradient", "colors": ["#FF0000", "#0000FF"]})

        assert gradient == {"type": "linearGradient", "angle": "0deg", "startColor": "#FF0000", "endColor": "#0000FF"}

    def test_wire_shape_kept(self):
        wire = {"type": "linearGradient", "angle": "45deg", "startColor": "#111111", "endColor": "#222222"}

        assert linear_gradient(wire) == wire

    def test_not_a_gradient(self):
        assert linear_gradient({"type": "radial"}) is None
        assert linear_gradient("#FFFFFF") is None

    def test_box_background(self, converter):
        box = converter.convert(
            {
                "type": "box",
                "contents": [],
                "background": {"type": "linearGradient", "angle": "0deg", "colors": ["#FF0000", "#0000FF"]},
            }
        )

        assert box["background"]["endColor"] == "#0000FF"


class TestDocument:
    """Complete ``flex`` documents."""

    def test_bubble_graph(self, bubble_graph):
        document = MessageConverter(bubble_graph).convert_container()

        assert document == {
            "type": "flex",
            "altText": "Welcome card",
            "contents": {
                "type": "bubble",
                "body": {
                    "type": "box",
                    "layout": "vertical",
                    "contents": [
                        {"type": "text", "text": "Welcome", "size": "xl", "weight": "bold"},
                        {"type": "separator"},
                        {
                            "type": "button",
                            "action": {"type": "uri", "label": "Open", "uri": "https://example.com/shop"},
                        },
                    ],
                },
            },
        }
        assert validate_document(document).is_valid

    def test_module_function_matches_class(self, bubble_graph):
        assert convert_container(bubble_graph) == MessageConverter(bubble_graph).convert_container()

    def test_alt_text_override(self, bubble_graph):
        assert convert_container(bubble_graph, alt_text="Shop")["altText"] == "Shop"

    def test_default_alt_text(self, block):
        graph = [block("card", Category.FLEX_CONTAINER, {"containerType": "bubble"})]

        assert MessageConverter(graph, default_alt_text="Card").convert_container()["altText"] == "Card"

    def test_empty_graph(self):
        assert convert_container([]) == {"type": "flex", "altText": "Flex Message", "contents": {"type": "bubble"}}

    def test_loose_content_gets_a_bubble(self, block):
        graph = [block("t", Category.FLEX_CONTENT, {"contentType": "text", "text": "Hi"})]

        document = convert_container(graph)

        assert document["contents"] == {
            "type": "bubble",
            "body": {"type": "box", "layout": "vertical", "contents": [{"type": "text", "text": "Hi"}]},
        }

    def test_empty_root_adopts_loose_content(self, block):
        graph = [
            block("card", Category.FLEX_CONTAINER, {"containerType": "bubble"}),
            block("t", Category.FLEX_CONTENT, {"contentType": "text", "text": "Hi"}),
        ]

        body = convert_container(graph)["contents"]["body"]

        assert body["contents"] == [{"type": "text", "text": "Hi"}]

    def test_box_root_wrapped_in_bubble(self, block):
        graph = [block("bx", Category.FLEX_CONTAINER, {"containerType": "box", "properties": {"layout": "baseline"}})]

        contents = convert_container(graph)["contents"]

        assert contents == {"type": "bubble", "body": {"type": "box", "layout": "baseline", "contents": []}}

    def test_input_not_mutated(self, bubble_graph):
        before = [copy.deepcopy(b.block_data) for b in bubble_graph]

        convert_container(bubble_graph)

        assert [b.block_data for b in bubble_graph] == before
