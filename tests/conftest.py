"""Shared pytest fixtures for botblocks tests."""

from collections.abc import Callable
from typing import Any

import pytest

from botblocks.core.compatibility import CompatibilityValidator
from botblocks.core.ir import Block, Category
from botblocks.core.migrator import SchemaMigrator
from botblocks.core.registry import BlockRegistry, build_registry

BlockFactory = Callable[..., Block]


def make_block(
    block_id: str,
    category: Category,
    data: dict[str, Any] | None = None,
    *,
    parent: str | None = None,
    children: list[str] | None = None,
    compatibility: list[str] | None = None,
) -> Block:
    """Build a current-shape block the way the editor serializes it."""
    raw: dict[str, Any] = {
        "id": block_id,
        "blockType": category.value,
        "category": category.value,
        "blockData": data or {},
        "children": children or [],
        "compatibility": compatibility or [],
    }
    if parent is not None:
        raw["parentId"] = parent
        raw["isNested"] = True
    return Block.model_validate(raw)


@pytest.fixture
def block() -> BlockFactory:
    """Return the block factory."""
    return make_block


@pytest.fixture
def registry() -> BlockRegistry:
    """Return the built-in registry."""
    return build_registry()


@pytest.fixture
def migrator(registry: BlockRegistry) -> SchemaMigrator:
    return SchemaMigrator(registry)


@pytest.fixture
def compatibility(registry: BlockRegistry) -> CompatibilityValidator:
    return CompatibilityValidator(registry)


@pytest.fixture
def hello_logic() -> list[Block]:
    """A text-message event answered with a text reply saying Hello."""
    return [
        make_block("evt", Category.EVENT, {"eventType": "message.text"}),
        make_block("rep", Category.REPLY, {"replyType": "text", "content": "Hello"}),
    ]


@pytest.fixture
def bubble_graph() -> list[Block]:
    """A bubble holding a title, a separator and a button in its body."""
    return [
        make_block(
            "bubble",
            Category.FLEX_CONTAINER,
            {"containerType": "bubble", "title": "Welcome card"},
            children=["title", "sep", "btn"],
        ),
        make_block(
            "title",
            Category.FLEX_CONTENT,
            {"contentType": "text", "text": "Welcome", "properties": {"size": "xl", "weight": "bold"}},
            parent="bubble",
        ),
        make_block("sep", Category.FLEX_LAYOUT, {"contentType": "separator"}, parent="bubble"),
        make_block(
            "btn",
            Category.FLEX_CONTENT,
            {
                "contentType": "button",
                "action": {"type": "uri", "label": "Open", "uri": "https://example.com/shop"},
            },
            parent="bubble",
        ),
    ]


@pytest.fixture
def legacy_project() -> tuple[list[dict[str, Any]], list[dict[str, Any]]]:
    """Logic and flex graphs in the older two-field block shape."""
    logic = [
        {"blockType": "text_message_event", "blockData": {"condition": "hi"}},
        {"blockType": "text_reply", "blockData": {"content": "Hello there"}},
        {"blockType": "flex_reply", "blockData": {"altText": "Card"}},
    ]
    flex = [
        {"blockType": "flex_bubble", "blockData": {"title": "Card"}},
    ]
    return logic, flex
