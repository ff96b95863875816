"""
Unit tests for Flex Message wire-format validation.
"""

import pytest

from botblocks.core.flex_validator import (
    FlexValidator,
    validate_action,
    validate_aspect_ratio,
    validate_color,
    validate_document,
    validate_element_properties,
    validate_enum,
    validate_image_extension,
    validate_keyword_or_pixel,
    validate_offset,
    validate_pixel,
    validate_range,
    validate_size_value,
    validate_text_length,
    validate_url,
)
from botblocks.core.ir import Action, Severity
from botblocks.core.limits import DEFAULT_LIMITS, FlexLimits


def _bubble(*contents: dict) -> dict:
    return {"type": "bubble", "body": {"type": "box", "layout": "vertical", "contents": list(contents)}}


def _document(contents: dict, alt_text: str = "Hello") -> dict:
    return {"type": "flex", "altText": alt_text, "contents": contents}


class TestPrimitives:
    """Each primitive checks one value; absent optional values pass."""

    @pytest.mark.parametrize(
        "value,valid",
        [("#FF00aa", True), ("#000000", True), ("#FFF", False), ("red", False), (None, True), ("", True)],
    )
    def test_color(self, value, valid):
        assert validate_color(value).is_valid is valid

    def test_color_message_names_property(self):
        check = validate_color("red", "borderColor")

        assert check.property == "borderColor"
        assert check.severity == Severity.ERROR
        assert check.message == "borderColor must be a hex color such as #FF0000, got 'red'"

    @pytest.mark.parametrize("value,valid", [("10px", True), ("0px", True), ("10", False), ("1.5px", False)])
    def test_pixel(self, value, valid):
        assert validate_pixel(value, "cornerRadius").is_valid is valid

    @pytest.mark.parametrize(
        "value,valid", [("100px", True), ("50%", True), ("2", True), ("1.5", True), ("auto", False)]
    )
    def test_size_value(self, value, valid):
        assert validate_size_value(value, "width").is_valid is valid

    @pytest.mark.parametrize(
        "value,valid",
        [("-5%", True), ("300px", True), ("-300px", True), ("301px", False), ("10", False)],
    )
    def test_offset(self, value, valid):
        assert validate_offset(value, "offsetTop").is_valid is valid

    def test_offset_bounds_follow_limits(self):
        narrow = FlexLimits(min_offset=-10, max_offset=10)

        assert not validate_offset("20px", "offsetTop", narrow).is_valid
        assert validate_offset("20%", "offsetTop", narrow).is_valid

    def test_enum(self):
        assert validate_enum("bold", ("regular", "bold"), "weight").is_valid
        check = validate_enum("heavy", ("regular", "bold"), "weight")
        assert not check.is_valid
        assert "regular, bold" in check.message

    @pytest.mark.parametrize("value,valid", [("md", True), ("5px", True), ("huge", False)])
    def test_keyword_or_pixel(self, value, valid):
        assert validate_keyword_or_pixel(value, DEFAULT_LIMITS.spacings, "margin").is_valid is valid

    @pytest.mark.parametrize(
        "value,valid", [(5, True), (0, True), (10.0, True), (11, False), ("5", False), (True, False)]
    )
    def test_range(self, value, valid):
        assert validate_range(value, 0, 10, "flex").is_valid is valid

    def test_url_must_be_https(self):
        check = validate_url("http://example.com/a.png", "url")

        assert not check.is_valid
        assert check.message == "url must use HTTPS"

    @pytest.mark.parametrize(
        "value,valid",
        [
            ("https://example.com/a.png", True),
            ("not a url", False),
            ("https://", False),
            (42, False),
            ("https://example.com/" + "a" * 1000, False),
        ],
    )
    def test_url(self, value, valid):
        assert validate_url(value, "url").is_valid is valid

    def test_url_required_flag(self):
        assert not validate_url("", "url").is_valid
        assert validate_url("", "url", required=False).is_valid

    def test_url_custom_ceiling(self):
        url = "https://example.com/" + "a" * 1500

        assert not validate_url(url, "uri").is_valid
        assert validate_url(url, "uri", max_length=2000).is_valid

    @pytest.mark.parametrize(
        "value", ["https://x.com/a.png", "https://x.com/A.JPG", "https://x.com/a.webp?v=1"]
    )
    def test_image_extension_ok(self, value):
        assert validate_image_extension(value, "url").is_valid

    def test_image_extension_is_a_warning(self):
        check = validate_image_extension("https://x.com/a.bmp", "url")

        assert not check.is_valid
        assert check.severity == Severity.WARNING

    @pytest.mark.parametrize("value,valid", [("Hi", True), ("   ", False), (None, False), ("x" * 2001, False)])
    def test_text_length(self, value, valid):
        assert validate_text_length(value, "text", 2000).is_valid is valid

    @pytest.mark.parametrize("value,valid", [("1.91:1", True), ("20:13", True), ("16x9", False)])
    def test_aspect_ratio(self, value, valid):
        assert validate_aspect_ratio(value, "aspectRatio").is_valid is valid


class TestElementProperties:
    """Per-kind fan-out over an element's properties."""

    def test_editor_payload_reads_properties(self):
        report = validate_element_properties(
            "text", {"contentType": "text", "text": "Hi", "properties": {"size": "huge", "color": "red"}}
        )

        assert len(report.errors) == 2

    def test_wire_element(self):
        report = validate_element_properties(None, {"type": "text", "text": "Hi", "weight": "bold"})

        assert report.is_valid

    def test_empty_text_without_spans(self):
        report = validate_element_properties("text", {"text": ""})

        assert report.errors == ["text must not be empty"]

    def test_spans_allow_empty_text(self):
        report = validate_element_properties("text", {"contents": [{"type": "span", "text": "a"}]})

        assert report.is_valid

    def test_padding_is_read_as_padding_all(self):
        assert validate_element_properties("box", {"properties": {"padding": "12px"}}).is_valid

        report = validate_element_properties("box", {"properties": {"padding": "wide"}})
        assert "paddingAll" in report.errors[0]

    def test_unknown_kind_is_a_single_warning(self):
        report = validate_element_properties("widget", {})

        assert report.errors == []
        assert report.warnings == ["Unknown element kind 'widget'; properties not validated"]

    def test_button_requires_action(self):
        report = FlexValidator().validate_button({"properties": {"style": "link"}})

        assert report.errors == ["action is required"]

    def test_image_url(self):
        validator = FlexValidator()

        assert "url must use HTTPS" in validator.validate_image({"url": "http://x.com/a.png"}).errors
        report = validator.validate_image({"url": "https://x.com/a.bmp"})
        assert report.is_valid
        assert len(report.warnings) == 1

    def test_video_needs_both_urls(self):
        report = FlexValidator().validate_video({"url": "https://x.com/v.mp4"})

        assert report.errors == ["previewUrl is required"]

    def test_box_flex_and_offsets(self):
        report = FlexValidator().validate_box({"properties": {"flex": 101, "offsetTop": "400px"}})

        assert len(report.errors) == 2

    def test_linear_gradient(self):
        gradient = {"type": "linearGradient", "angle": "90deg", "startColor": "#FF0000", "endColor": "#0000FF"}

        assert FlexValidator().validate_box({"properties": {"background": gradient}}).is_valid

    def test_gradient_needs_end_color_and_angle_unit(self):
        gradient = {"type": "linearGradient", "angle": "90", "startColor": "#FF0000"}

        report = FlexValidator().validate_box({"properties": {"background": gradient}})

        assert "background.endColor is required" in report.errors
        assert any(e.startswith("background.angle") for e in report.errors)

    def test_separator_color(self):
        assert not FlexValidator().validate_separator({"properties": {"color": "grey"}}).is_valid

    def test_text_needs_text_unless_it_has_spans(self):
        validator = FlexValidator()

        assert validator.validate_text({"properties": {}}).errors == ["text must not be empty"]
        assert validator.validate_text({"text": "", "contents": [{"type": "span", "text": "Hi"}]}).is_valid

    def test_span_length(self):
        report = FlexValidator().validate_span({"text": "x" * 2001})

        assert report.errors == ["text must not exceed 2000 characters (got 2001)"]

    def test_icon_size_keyword(self):
        report = FlexValidator().validate_icon({"url": "https://x.com/i.png", "properties": {"size": "huge"}})

        assert len(report.errors) == 1
        assert report.errors[0].startswith("size must be one of")

    def test_filler_flex_range(self):
        validator = FlexValidator()

        assert validator.validate_filler({"properties": {"flex": 1}}).is_valid
        assert not validator.validate_filler({"properties": {"flex": 101}}).is_valid

    def test_bubble_size(self):
        validator = FlexValidator()

        assert validator.validate_bubble({"properties": {"size": "mega"}}).is_valid
        assert not validator.validate_bubble({"properties": {"size": "giant"}}).is_valid


class TestActions:
    def test_valid_uri_action(self):
        assert validate_action({"type": "uri", "label": "Go", "uri": "https://example.com"}).is_valid

    def test_action_model_accepted(self):
        action = Action(type="uri", label="Go", uri="https://example.com")

        assert validate_action(action).is_valid

    def test_uri_must_be_https(self):
        report = validate_action({"type": "uri", "label": "Go", "uri": "http://example.com"})

        assert report.errors == ["action.uri must use HTTPS"]

    def test_message_needs_text(self):
        report = validate_action({"type": "message", "label": "Say"})

        assert report.errors == ["action.text must not be empty"]

    def test_postback_needs_data(self):
        report = validate_action({"type": "postback", "label": "Pick"})

        assert report.errors == ["action.data is required"]

    def test_datetime_mode(self):
        report = validate_action({"type": "datetimepicker", "label": "When", "data": "d", "mode": "week"})

        assert len(report.errors) == 1
        assert report.errors[0].startswith("action.mode must be one of")

    def test_missing_label_is_a_warning(self):
        report = validate_action({"type": "message", "text": "hi"})

        assert report.is_valid
        assert report.warnings == ["action.label should be set"]

    def test_long_label(self):
        report = validate_action({"type": "message", "label": "x" * 41, "text": "hi"})

        assert not report.is_valid

    def test_unknown_action_type_is_a_warning(self):
        report = validate_action({"type": "teleport", "label": "Go"})

        assert report.is_valid
        assert report.warnings == ["Unsupported action type 'teleport'"]

    def test_not_an_object(self):
        assert validate_action("uri").errors == ["action must be an action object"]


class TestDocument:
    """Whole-document checks."""

    def test_valid_bubble(self):
        report = validate_document(_document(_bubble({"type": "text", "text": "Hi"})))

        assert report.errors == []
        assert report.warnings == []

    def test_not_an_object(self):
        assert validate_document([]).errors == ["Flex Message must be a JSON object"]

    def test_wrapper_checks(self):
        report = validate_document({"type": "bubble", "contents": _bubble()})

        assert "Flex Message type must be 'flex'" in report.errors
        assert "Flex Message must have altText" in report.errors

    def test_alt_text_length(self):
        report = validate_document(_document(_bubble(), alt_text="x" * 401))

        assert report.errors == ["altText must not exceed 400 characters"]

    def test_root_must_be_bubble_or_carousel(self):
        report = validate_document(_document({"type": "box", "layout": "vertical", "contents": []}))

        assert report.errors == ["contents must be a bubble or carousel, got 'box'"]

    def test_carousel_of_eleven_bubbles(self):
        carousel = {"type": "carousel", "contents": [_bubble() for _ in range(11)]}

        report = validate_document(_document(carousel))

        assert report.errors == ["contents: Carousel has 11 bubbles; the maximum is 10"]

    def test_carousel_of_ten_bubbles(self):
        carousel = {"type": "carousel", "contents": [_bubble() for _ in range(10)]}

        assert validate_document(_document(carousel)).is_valid

    def test_raised_carousel_limit(self):
        carousel = {"type": "carousel", "contents": [_bubble() for _ in range(11)]}
        validator = FlexValidator(DEFAULT_LIMITS.with_overrides({"max_carousel_bubbles": 12}))

        assert validator.validate_document(_document(carousel)).is_valid

    def test_missing_required_key(self):
        report = validate_document(_document({"type": "bubble", "body": {"type": "box", "contents": []}}))

        assert report.errors == ["contents.body: box is missing required keys: layout"]

    def test_nested_bubble(self):
        report = validate_document(_document(_bubble(_bubble())))

        assert any("a bubble may only be the document root" in e for e in report.errors)

    def test_span_outside_text(self):
        report = validate_document(_document(_bubble({"type": "span", "text": "a"})))

        assert report.errors == ["contents.body.contents[0]: a span may only appear inside a text element"]

    def test_span_inside_text(self):
        text = {"type": "text", "text": "", "contents": [{"type": "span", "text": "a"}]}

        assert validate_document(_document(_bubble(text))).is_valid

    def test_unknown_element(self):
        report = validate_document(_document(_bubble({"type": "widget"})))

        assert report.errors == ["contents.body.contents[0]: unknown element type 'widget'"]

    def test_property_errors_carry_their_path(self):
        report = validate_document(_document(_bubble({"type": "text", "text": "Hi", "color": "red"})))

        assert report.errors[0].startswith("contents.body.contents[0]: color must be a hex color")

    def test_payload_size(self):
        texts = [{"type": "text", "text": "x" * 2000} for _ in range(15)]

        report = validate_document(_document(_bubble(*texts)))

        assert len(report.errors) == 1
        assert "exceeding the 24KB limit" in report.errors[0]

    def test_payload_size_follows_limits(self):
        small = FlexLimits(max_payload_kb=1)
        texts = [{"type": "text", "text": "x" * 600} for _ in range(2)]

        assert not validate_document(_document(_bubble(*texts)), small).is_valid
        assert validate_document(_document(_bubble(*texts))).is_valid
