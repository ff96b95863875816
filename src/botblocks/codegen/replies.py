"""
Reply lowering: one statement list per reply kind.

Every field falls back to a documented literal when left blank, so a
half-configured reply block still produces a runnable statement.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from botblocks.core.ir import (
    AudioReplyPayload,
    FlexReplyPayload,
    ImageReplyPayload,
    LocationReplyPayload,
    PayloadModel,
    QuickReplyPayload,
    ReplyKind,
    StickerReplyPayload,
    TemplateColumn,
    TemplateReplyPayload,
    TextReplyPayload,
    VideoReplyPayload,
)

from .actions import lower_action, lower_actions
from .context import LoweringContext
from .statements import Call, Comment, Line, Literal, Stmt, call

DEFAULT_TEXT = "Reply message"
DEFAULT_IMAGE_URL = "https://example.com/image.jpg"
DEFAULT_PREVIEW_URL = "https://example.com/preview.jpg"
DEFAULT_AUDIO_URL = "https://example.com/audio.m4a"
DEFAULT_AUDIO_DURATION = 60000
DEFAULT_VIDEO_URL = "https://example.com/video.mp4"
DEFAULT_LOCATION_TITLE = "My Location"
DEFAULT_ADDRESS = "No. 1, Shifu Road, Xinyi District, Taipei City"
DEFAULT_LATITUDE = 25.0408578889
DEFAULT_LONGITUDE = 121.567904444
DEFAULT_PACKAGE_ID = "446"
DEFAULT_STICKER_ID = "1988"
DEFAULT_FLEX_ALT_TEXT = "Flex Message"


def _append(message: Call) -> Line:
    return Line(call("reply_messages.append", message))


def _text(p: TextReplyPayload, ctx: LoweringContext) -> list[Stmt]:
    return [_append(call("TextSendMessage", text=p.content or p.text or DEFAULT_TEXT))]


def _image(p: ImageReplyPayload, ctx: LoweringContext) -> list[Stmt]:
    message = call(
        "ImageSendMessage",
        original_content_url=p.image_url or p.original_content_url or DEFAULT_IMAGE_URL,
        preview_image_url=p.preview_image_url or p.image_url or DEFAULT_PREVIEW_URL,
    )
    return [_append(message)]


def _audio(p: AudioReplyPayload, ctx: LoweringContext) -> list[Stmt]:
    message = call(
        "AudioSendMessage",
        original_content_url=p.audio_url or p.original_content_url or DEFAULT_AUDIO_URL,
        duration=p.duration or DEFAULT_AUDIO_DURATION,
    )
    return [_append(message)]


def _video(p: VideoReplyPayload, ctx: LoweringContext) -> list[Stmt]:
    message = call(
        "VideoSendMessage",
        original_content_url=p.video_url or p.original_content_url or DEFAULT_VIDEO_URL,
        preview_image_url=p.preview_image_url or DEFAULT_PREVIEW_URL,
        tracking_id=p.tracking_id or None,
    )
    return [_append(message)]


def _location(p: LocationReplyPayload, ctx: LoweringContext) -> list[Stmt]:
    message = call(
        "LocationSendMessage",
        title=p.location_title or DEFAULT_LOCATION_TITLE,
        address=p.address or DEFAULT_ADDRESS,
        latitude=p.latitude if p.latitude is not None else DEFAULT_LATITUDE,
        longitude=p.longitude if p.longitude is not None else DEFAULT_LONGITUDE,
    )
    return [_append(message)]


def _sticker(p: StickerReplyPayload, ctx: LoweringContext) -> list[Stmt]:
    message = call(
        "StickerSendMessage",
        package_id=str(p.package_id or DEFAULT_PACKAGE_ID),
        sticker_id=str(p.sticker_id or DEFAULT_STICKER_ID),
    )
    return [_append(message)]


# -----------------------------------------------------------------------------
# Templates
# -----------------------------------------------------------------------------


def _default_actions() -> list[Call]:
    return [
        call("MessageAction", label="Option 1", text="Option 1"),
        call("URIAction", label="Open link", uri="https://example.com"),
    ]


def _confirm_actions() -> list[Call]:
    return [
        call("MessageAction", label="Yes", text="Yes"),
        call("MessageAction", label="No", text="No"),
    ]


def _column(column: TemplateColumn, ctx: LoweringContext) -> Call:
    actions = lower_actions(column.actions, ctx) or _default_actions()
    return call(
        "CarouselColumn",
        text=column.text or "Column",
        actions=Literal(actions),
        thumbnail_image_url=column.thumbnail_image_url or None,
    )


def _image_column(column: TemplateColumn, ctx: LoweringContext) -> Call:
    action = column.action or (column.actions[0] if column.actions else None)
    lowered = lower_action(action, ctx) if action is not None else _default_actions()[0]
    return call("ImageCarouselColumn", image_url=column.image_url or DEFAULT_IMAGE_URL, action=lowered)


def _buttons_template(p: TemplateReplyPayload, ctx: LoweringContext) -> Call:
    return call(
        "ButtonsTemplate",
        text=p.text or "Please choose an option:",
        actions=Literal(lower_actions(p.actions, ctx) or _default_actions()),
        thumbnail_image_url=p.thumbnail_image_url or None,
    )


def _confirm_template(p: TemplateReplyPayload, ctx: LoweringContext) -> Call:
    actions = lower_actions(p.actions, ctx)
    if len(actions) != 2:
        if actions:
            ctx.warn("A confirm template needs exactly two actions; using Yes and No")
        actions = _confirm_actions()
    return call("ConfirmTemplate", text=p.text or "Are you sure?", actions=Literal(actions))


def _carousel_template(p: TemplateReplyPayload, ctx: LoweringContext) -> Call:
    columns = [_column(c, ctx) for c in p.columns]
    if not columns:
        columns = [_column(TemplateColumn(text=p.text, actions=p.actions), ctx)]
    return call("CarouselTemplate", columns=Literal(columns))


def _image_carousel_template(p: TemplateReplyPayload, ctx: LoweringContext) -> Call:
    columns = [_image_column(c, ctx) for c in p.columns]
    if not columns:
        columns = [_image_column(TemplateColumn(image_url=p.thumbnail_image_url), ctx)]
    return call("ImageCarouselTemplate", columns=Literal(columns))


TEMPLATE_BUILDERS: dict[str, Callable[[TemplateReplyPayload, LoweringContext], Call]] = {
    "buttons": _buttons_template,
    "confirm": _confirm_template,
    "carousel": _carousel_template,
    "imagecarousel": _image_carousel_template,
}


def _template(p: TemplateReplyPayload, ctx: LoweringContext) -> list[Stmt]:
    template_type = (p.template_type or "buttons").replace("_", "").lower()
    builder = TEMPLATE_BUILDERS.get(template_type)
    if builder is None:
        ctx.warn(f"Unsupported template type '{p.template_type}' replaced with a buttons template")
        template_type, builder = "buttons", _buttons_template
    message = call(
        "TemplateSendMessage",
        alt_text=p.alt_text or "Template message",
        template=builder(p, ctx),
    )
    return [Comment(f"Template message ({template_type})"), _append(message)]


def _quick_reply(p: QuickReplyPayload, ctx: LoweringContext) -> list[Stmt]:
    buttons = [
        call("QuickReplyButton", action=lower_action(item.action, ctx), image_url=item.image_url or None)
        for item in p.quick_reply_items
    ]
    if not buttons:
        buttons = [
            call("QuickReplyButton", action=call("MessageAction", label="Yes", text="Yes")),
            call("QuickReplyButton", action=call("MessageAction", label="No", text="No")),
        ]
    message = call(
        "TextSendMessage",
        text=p.text or "Please choose:",
        quick_reply=call("QuickReply", items=Literal(buttons)),
    )
    return [_append(message)]


def _flex(p: FlexReplyPayload, ctx: LoweringContext) -> list[Stmt]:
    factory = ctx.factory_for(p.flex_message_id)
    if factory is not None:
        if p.flex_message_id and factory.block_id != p.flex_message_id:
            ctx.warn(f"Flex message '{p.flex_message_id}' not found; using the first flex container")
        alt_text = p.alt_text or factory.alt_text or DEFAULT_FLEX_ALT_TEXT
        message = call("FlexSendMessage", alt_text=alt_text, contents=call(factory.name))
        return [_append(message)]

    inline = p.flex_message
    if isinstance(inline, dict) and inline:
        alt_text = p.alt_text or DEFAULT_FLEX_ALT_TEXT
        contents: Any = inline
        if inline.get("type") == "flex":
            alt_text = p.alt_text or inline.get("altText") or DEFAULT_FLEX_ALT_TEXT
            contents = inline.get("contents") or {}
        return [_append(call("FlexSendMessage", alt_text=alt_text, contents=Literal(contents)))]

    ctx.warn("Flex reply has no flex message to send; using a text placeholder")
    return [_append(call("TextSendMessage", text="Flex message is not configured yet"))]


REPLY_LOWERINGS: dict[ReplyKind, Callable[[Any, LoweringContext], list[Stmt]]] = {
    ReplyKind.TEXT: _text,
    ReplyKind.IMAGE: _image,
    ReplyKind.AUDIO: _audio,
    ReplyKind.VIDEO: _video,
    ReplyKind.LOCATION: _location,
    ReplyKind.STICKER: _sticker,
    ReplyKind.TEMPLATE: _template,
    ReplyKind.QUICK_REPLY: _quick_reply,
    ReplyKind.FLEX: _flex,
}


def lower_reply(kind: ReplyKind, payload: PayloadModel, ctx: LoweringContext) -> list[Stmt]:
    return REPLY_LOWERINGS[kind](payload, ctx)


def unknown_reply(kind: str | None, ctx: LoweringContext) -> list[Stmt]:
    ctx.warn(f"Unsupported reply type '{kind}' replaced with a text reply")
    return [_append(call("TextSendMessage", text=f"Unsupported reply type: {kind}"))]
