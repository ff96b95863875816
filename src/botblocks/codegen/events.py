"""
Event lowering: handler signatures and payload fields per event kind.
"""

from __future__ import annotations

from dataclasses import dataclass

from botblocks.core.ir import EventKind, EventPayload, MatchType, TextEventPayload

from .statements import source_literal

# Local holding the incoming message text in text handlers.
MESSAGE_LOCAL = "user_message"


@dataclass(frozen=True)
class EventSpec:
    """
    How one event kind becomes a webhook handler.

    Attributes:
        trigger: Arguments of the ``@handler.add(...)`` decorator
        handler: Handler function name prefix (the block index is appended)
        fields: ``(local name, event expression)`` pairs read at entry
        sends_replies: Whether the handler may reply (False for unfollow)
    """

    trigger: str
    handler: str
    fields: tuple[tuple[str, str], ...] = ()
    sends_replies: bool = True


EVENT_SPECS: dict[EventKind, EventSpec] = {
    EventKind.TEXT_MESSAGE: EventSpec(
        "MessageEvent, message=TextMessage",
        "handle_text_message",
        ((MESSAGE_LOCAL, "event.message.text"),),
    ),
    EventKind.IMAGE_MESSAGE: EventSpec(
        "MessageEvent, message=ImageMessage",
        "handle_image_message",
        (("message_id", "event.message.id"),),
    ),
    EventKind.AUDIO_MESSAGE: EventSpec(
        "MessageEvent, message=AudioMessage",
        "handle_audio_message",
        (("message_id", "event.message.id"), ("duration", "event.message.duration")),
    ),
    EventKind.VIDEO_MESSAGE: EventSpec(
        "MessageEvent, message=VideoMessage",
        "handle_video_message",
        (("message_id", "event.message.id"), ("duration", "event.message.duration")),
    ),
    EventKind.FILE_MESSAGE: EventSpec(
        "MessageEvent, message=FileMessage",
        "handle_file_message",
        (
            ("message_id", "event.message.id"),
            ("file_name", "event.message.file_name"),
            ("file_size", "event.message.file_size"),
        ),
    ),
    EventKind.STICKER_MESSAGE: EventSpec(
        "MessageEvent, message=StickerMessage",
        "handle_sticker_message",
        (("package_id", "event.message.package_id"), ("sticker_id", "event.message.sticker_id")),
    ),
    EventKind.POSTBACK: EventSpec(
        "PostbackEvent",
        "handle_postback",
        (("postback_data", "event.postback.data"),),
    ),
    EventKind.FOLLOW: EventSpec(
        "FollowEvent",
        "handle_follow",
        (("user_id", "event.source.user_id"),),
    ),
    EventKind.UNFOLLOW: EventSpec(
        "UnfollowEvent",
        "handle_unfollow",
        (("user_id", "event.source.user_id"),),
        sends_replies=False,
    ),
    EventKind.MEMBER_JOINED: EventSpec(
        "MemberJoinedEvent",
        "handle_member_joined",
        (("joined_members", "event.joined.members"),),
    ),
    EventKind.MEMBER_LEFT: EventSpec(
        "MemberLeftEvent",
        "handle_member_left",
        (("left_members", "event.left.members"),),
    ),
}

# Used for an event block whose kind is not recognised.
UNKNOWN_EVENT = EventSpec(
    "MessageEvent, message=TextMessage",
    "handle_unknown_event",
    ((MESSAGE_LOCAL, "event.message.text"),),
)

# Synthesized when the logic graph has no event blocks.
DEFAULT_EVENT = EventSpec(
    "MessageEvent, message=TextMessage",
    "handle_message",
    ((MESSAGE_LOCAL, "event.message.text"),),
)


def event_guard(kind: EventKind, payload: EventPayload) -> str | None:
    """
    Condition guarding the handler body, or None when it always runs.

    Text events match on ``conditions`` (match type and keywords) or, when
    absent, on the plain ``condition`` substring. Postback events compare
    the postback data.
    """
    if kind == EventKind.POSTBACK:
        return f"postback_data == {source_literal(payload.condition)}" if payload.condition else None
    if kind != EventKind.TEXT_MESSAGE:
        return None

    conditions = payload.conditions if isinstance(payload, TextEventPayload) else None
    if conditions is not None and conditions.match_type != MatchType.ANY and conditions.keywords:
        subject = "user_message" if conditions.case_sensitive else "user_message.lower()"
        keywords = conditions.keywords if conditions.case_sensitive else [k.lower() for k in conditions.keywords]
        options = source_literal(tuple(keywords))
        if conditions.match_type == MatchType.EXACT:
            return f"{subject} in {options}"
        if conditions.match_type == MatchType.CONTAINS:
            return f"any(keyword in {subject} for keyword in {options})"
        flags = "" if conditions.case_sensitive else ", re.IGNORECASE"
        patterns = source_literal(tuple(conditions.keywords))
        return f"any(re.search(pattern, user_message{flags}) for pattern in {patterns})"

    if payload.condition:
        return f"{source_literal(payload.condition)} in user_message"
    return None
