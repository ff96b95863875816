"""
Webhook server generation.

``WebhookGenerator`` walks the logic graph once, bucket by bucket:

1. fixed preamble (imports, Flask app, ``/callback`` route)
2. one handler per EVENT block (or a default text handler when there is
   none), each carrying every REPLY statement then every CONTROL statement
3. one factory per root flex container of the message graph
4. fixed epilogue

Nothing here reads the clock or iterates an unordered collection, so the
same input graphs always produce byte-identical source.
"""

from __future__ import annotations

import logging
from typing import Any

from botblocks.core.errors import ErrorContext
from botblocks.core.ir import (
    CONTROL_PAYLOADS,
    EVENT_PAYLOADS,
    KIND_KEYS,
    REPLY_PAYLOADS,
    Block,
    Category,
    EventPayload,
    MalformedPayload,
    PayloadModel,
    UnknownPayload,
    coerce_kind,
    parse_payload,
)
from botblocks.core.migrator import BlockInput, SchemaMigrator
from botblocks.core.registry import BlockRegistry

from .context import LoweringContext
from .controls import lower_control, unknown_control
from .events import DEFAULT_EVENT, EVENT_SPECS, MESSAGE_LOCAL, UNKNOWN_EVENT, EventSpec, event_guard
from .flex import build_factories, factory_statements
from .replies import DEFAULT_FLEX_ALT_TEXT, lower_reply, unknown_reply
from .result import GeneratorResult
from .statements import DEFAULT_WIDTH, Assign, Blank, Comment, Line, Literal, Name, Stmt, Suite, render

logger = logging.getLogger("botblocks.codegen.webhook")

LINE_MODELS = (
    "AudioMessage",
    "AudioSendMessage",
    "ButtonsTemplate",
    "CameraAction",
    "CameraRollAction",
    "CarouselColumn",
    "CarouselTemplate",
    "ClipboardAction",
    "ConfirmTemplate",
    "DatetimePickerAction",
    "FileMessage",
    "FlexSendMessage",
    "FollowEvent",
    "ImageCarouselColumn",
    "ImageCarouselTemplate",
    "ImageMessage",
    "ImageSendMessage",
    "LocationAction",
    "LocationSendMessage",
    "MemberJoinedEvent",
    "MemberLeftEvent",
    "MessageAction",
    "MessageEvent",
    "PostbackAction",
    "PostbackEvent",
    "QuickReply",
    "QuickReplyButton",
    "RichMenuSwitchAction",
    "StickerMessage",
    "StickerSendMessage",
    "TemplateSendMessage",
    "TextMessage",
    "TextSendMessage",
    "URIAction",
    "UnfollowEvent",
    "VideoMessage",
    "VideoSendMessage",
)

SEND_REPLIES = "line_bot_api.reply_message(event.reply_token, reply_messages)"

_PAYLOAD_TABLES: dict[Category, dict[Any, type[PayloadModel]]] = {
    Category.EVENT: EVENT_PAYLOADS,
    Category.REPLY: REPLY_PAYLOADS,
    Category.CONTROL: CONTROL_PAYLOADS,
}


def preamble() -> list[Stmt]:
    """Fixed module header of every generated server."""
    stmts: list[Stmt] = [
        Comment("LINE Bot webhook server generated by botblocks."),
        Comment("Regenerate from the block project instead of editing by hand."),
        Blank(),
        Line("import os"),
        Line("import re"),
        Line("import time"),
        Blank(),
        Line("from flask import Flask, abort, request"),
        Line("from linebot import LineBotApi, WebhookHandler"),
        Line("from linebot.exceptions import InvalidSignatureError"),
        Line("from linebot.models import ("),
    ]
    stmts.extend(Line(f"    {name},") for name in LINE_MODELS)
    stmts.extend(
        [
            Line(")"),
            Blank(),
            Assign("app", Name("Flask(__name__)")),
            Blank(),
            Assign(
                "line_bot_api",
                Name('LineBotApi(os.environ.get("LINE_CHANNEL_ACCESS_TOKEN", "YOUR_CHANNEL_ACCESS_TOKEN"))'),
            ),
            Assign("handler", Name('WebhookHandler(os.environ.get("LINE_CHANNEL_SECRET", "YOUR_CHANNEL_SECRET"))')),
            Blank(),
            Blank(),
            Line('@app.route("/callback", methods=["POST"])'),
            Suite(
                "def callback():",
                (
                    Assign("signature", Name('request.headers["X-Line-Signature"]')),
                    Assign("body", Name("request.get_data(as_text=True)")),
                    Blank(),
                    Suite("try:", (Line("handler.handle(body, signature)"),)),
                    Suite("except InvalidSignatureError:", (Line("abort(400)"),)),
                    Blank(),
                    Line('return "OK"'),
                ),
            ),
        ]
    )
    return stmts


def epilogue() -> list[Stmt]:
    return [
        Blank(),
        Blank(),
        Suite('if __name__ == "__main__":', (Line('app.run(host="0.0.0.0", port=5000, debug=True)'),)),
    ]


class WebhookGenerator:
    """
    Generates a Flask + line-bot-sdk webhook server from block graphs.

    Args:
        logic_blocks: Normalized logic graph
        message_blocks: Normalized flex graph
        default_alt_text: altText for flex messages without a title
        width: Line width used when wrapping long calls
    """

    def __init__(
        self,
        logic_blocks: list[Block],
        message_blocks: list[Block] | None = None,
        *,
        default_alt_text: str = DEFAULT_FLEX_ALT_TEXT,
        width: int = DEFAULT_WIDTH,
    ):
        self.logic_blocks = list(logic_blocks)
        self.message_blocks = list(message_blocks or [])
        self.default_alt_text = default_alt_text
        self.width = width

    def generate(self) -> GeneratorResult:
        """
        Generate the server source.

        Returns:
            GeneratorResult with ``artifacts["source"]`` (the source text) and
            ``artifacts["factories"]`` (container id -> factory name).
            Degraded blocks are reported as warnings; generation itself
            never fails on a single bad block.
        """
        result = GeneratorResult()
        ctx = LoweringContext(result=result)
        ctx.factories = build_factories(self.message_blocks, self.default_alt_text)

        events: list[tuple[int, Block]] = []
        replies: list[Stmt] = []
        controls: list[Stmt] = []
        for index, block in enumerate(self.logic_blocks):
            ctx.label = ErrorContext("logic", index, block.id).format()
            if block.category == Category.EVENT:
                events.append((index, block))
            elif block.category == Category.REPLY:
                replies.extend(self._lower_reply(block, ctx))
            elif block.category == Category.CONTROL:
                controls.extend(self._lower_control(block, ctx))
            elif block.category == Category.UNKNOWN:
                ctx.warn(f"Unsupported block type '{block.block_type}' skipped")

        stmts = preamble()
        if events:
            for position, (index, block) in enumerate(events):
                ctx.label = ErrorContext("logic", index, block.id).format()
                stmts.extend(self._event_handler(position, block, replies, controls, ctx))
        else:
            stmts.extend(self._handler(DEFAULT_EVENT, None, None, replies, controls))

        ctx.label = ""
        stmts.extend(factory_statements(ctx.factories))
        stmts.extend(epilogue())

        result.add_artifact("source", render(stmts, self.width))
        result.add_artifact("factories", {f.block_id: f.name for f in ctx.factories})
        logger.debug(
            "Generated %d handlers, %d flex factories, %d warnings",
            max(len(events), 1),
            len(ctx.factories),
            len(result.warnings),
        )
        return result

    # -------------------------------------------------------------------------
    # Handlers
    # -------------------------------------------------------------------------

    def _event_handler(
        self,
        position: int,
        block: Block,
        replies: list[Stmt],
        controls: list[Stmt],
        ctx: LoweringContext,
    ) -> list[Stmt]:
        kind, payload = self._typed(block, ctx)
        if kind is None:
            ctx.warn(f"Unsupported event type '{block.kind}' handled as a text message")
            comment = Comment(f"Unsupported event type: {block.kind}")
            return self._handler(UNKNOWN_EVENT, position, None, replies, controls, comment=comment)

        spec = EVENT_SPECS[kind]
        if not spec.sends_replies and replies:
            ctx.warn(f"Replies are not sent from the {kind} handler")
        guard = event_guard(kind, payload) if isinstance(payload, EventPayload) else None
        return self._handler(spec, position, guard, replies, controls)

    def _handler(
        self,
        spec: EventSpec,
        position: int | None,
        guard: str | None,
        replies: list[Stmt],
        controls: list[Stmt],
        comment: Comment | None = None,
    ) -> list[Stmt]:
        name = spec.handler if position is None else f"{spec.handler}_{position}"
        body: list[Stmt] = [Assign(local, Name(expr)) for local, expr in spec.fields]
        if controls and spec.sends_replies and MESSAGE_LOCAL not in {local for local, _ in spec.fields}:
            # Conditions read the message text; events without one compare against ""
            body.append(Assign(MESSAGE_LOCAL, Literal("")))

        if not spec.sends_replies:
            body.append(Comment("The user has unfollowed the bot; replies cannot be delivered."))
            body.append(Line('app.logger.info("User %s unfollowed", user_id)'))
        else:
            body.append(Assign("reply_messages", Literal([])))
            actions = replies + controls
            if actions:
                body.append(Blank())
                if guard is not None:
                    body.append(Suite(f"if {guard}:", tuple(actions)))
                else:
                    body.extend(actions)
            body.append(Blank())
            body.append(Suite("if reply_messages:", (Line(SEND_REPLIES),)))

        header: list[Stmt] = [Blank(), Blank()]
        if comment is not None:
            header.append(comment)
        return header + [
            Line(f"@handler.add({spec.trigger})"),
            Suite(f"def {name}(event):", tuple(body)),
        ]

    # -------------------------------------------------------------------------
    # Lowering
    # -------------------------------------------------------------------------

    def _lower_reply(self, block: Block, ctx: LoweringContext) -> list[Stmt]:
        kind, payload = self._typed(block, ctx)
        if kind is None or payload is None:
            return unknown_reply(block.kind, ctx)
        return lower_reply(kind, payload, ctx)

    def _lower_control(self, block: Block, ctx: LoweringContext) -> list[Stmt]:
        kind, payload = self._typed(block, ctx)
        if kind is None or payload is None:
            return unknown_control(block.kind, ctx)
        return lower_control(kind, payload, ctx)

    def _typed(self, block: Block, ctx: LoweringContext) -> tuple[Any, PayloadModel | None]:
        """
        Kind enum and typed payload of a logic block.

        A payload whose fields fail validation is replaced by the kind's
        defaults, with a warning, so the block still lowers.
        """
        payload = parse_payload(block.category, block.block_data)
        if isinstance(payload, UnknownPayload):
            return None, None
        kind = coerce_kind(block.category, block.kind)
        if isinstance(payload, MalformedPayload):
            ctx.warn(f"Settings could not be read ({payload.error}); using defaults")
            model = _PAYLOAD_TABLES[block.category][kind]
            payload = model.model_validate({KIND_KEYS[block.category][0]: kind.value})
        return kind, payload


def generate_result(
    logic_blocks: list[BlockInput],
    message_blocks: list[BlockInput] | None = None,
    *,
    registry: BlockRegistry | None = None,
    default_alt_text: str = DEFAULT_FLEX_ALT_TEXT,
) -> GeneratorResult:
    """
    Normalize both graphs (legacy or current shape) and generate the server.

    Raises:
        PreconditionError: If a graph is not a list or contains None
    """
    migrator = SchemaMigrator(registry)
    result = GeneratorResult()
    logic, logic_errors = migrator.normalize_graph(logic_blocks, "logic")
    messages, message_errors = migrator.normalize_graph(message_blocks if message_blocks is not None else [], "flex")
    for error in logic_errors + message_errors:
        result.add_error(error)
    result.merge(WebhookGenerator(logic, messages, default_alt_text=default_alt_text).generate())
    return result


def generate(
    logic_blocks: list[BlockInput],
    message_blocks: list[BlockInput] | None = None,
    *,
    registry: BlockRegistry | None = None,
) -> str:
    """Complete webhook server source for the given graphs."""
    return generate_result(logic_blocks, message_blocks, registry=registry).source
