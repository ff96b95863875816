"""
Block instance types for botblocks IR.

A block is one node of either the logic graph (bot behaviour) or the flex
graph (message layout). Its ``block_type`` names a family (``event``,
``reply``, ...) and the concrete kind sits in ``block_data`` under the
family's discriminator key, e.g. ``{"eventType": "message.text"}``.

Serialized shape (camelCase, as stored by the editor):

    {
      "id": "block_1",
      "blockType": "reply",
      "category": "reply",
      "blockData": {"replyType": "text", "content": "Hello"},
      "compatibility": ["logic"],
      "parentId": null,
      "children": [],
      "isNested": false
    }
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Category(StrEnum):
    """Semantic role of a block type."""

    EVENT = "event"
    REPLY = "reply"
    CONTROL = "control"
    SETTING = "setting"
    FLEX_CONTAINER = "flex-container"
    FLEX_CONTENT = "flex-content"
    FLEX_LAYOUT = "flex-layout"
    # Assigned to blocks whose type string is not in any alias table.
    UNKNOWN = "unknown"


class WorkspaceContext(StrEnum):
    """The two graphs a block may live in."""

    LOGIC = "logic"
    FLEX = "flex"


# Payload keys holding the kind of a block, per family.
KIND_KEYS: dict[Category, tuple[str, ...]] = {
    Category.EVENT: ("eventType",),
    Category.REPLY: ("replyType",),
    Category.CONTROL: ("controlType",),
    Category.SETTING: ("settingType",),
    Category.FLEX_CONTAINER: ("containerType",),
    Category.FLEX_CONTENT: ("contentType",),
    Category.FLEX_LAYOUT: ("contentType", "layoutType"),
    Category.UNKNOWN: (),
}

FLEX_CATEGORIES = frozenset({Category.FLEX_CONTAINER, Category.FLEX_CONTENT, Category.FLEX_LAYOUT})


def kind_of(category: Category, data: dict[str, Any]) -> str | None:
    """Return the kind string stored in ``data`` for a block of ``category``."""
    for key in KIND_KEYS.get(category, ()):
        value = data.get(key)
        if isinstance(value, str) and value:
            return value
    return None


class BlockPosition(BaseModel):
    """Canvas coordinates; carried through untouched."""

    x: float = 0
    y: float = 0

    model_config = ConfigDict(frozen=True)


class Block(BaseModel):
    """
    A block instance in current (unified) shape.

    Attributes:
        id: Unique identifier within the project
        block_type: Canonical family string (see ``Category``)
        category: Denormalized copy of the family's category
        block_data: Kind-specific payload
        compatibility: Contexts this instance declares support for
        parent_id: Owning block when nested
        children: Ordered child ids (layout order)
        is_nested: Whether the block lives inside a parent
        position: Canvas position, if any
    """

    id: str
    block_type: str = Field(alias="blockType")
    category: Category
    block_data: dict[str, Any] = Field(default_factory=dict, alias="blockData")
    compatibility: list[WorkspaceContext] = Field(default_factory=list)
    parent_id: str | None = Field(default=None, alias="parentId")
    children: list[str] = Field(default_factory=list)
    is_nested: bool = Field(default=False, alias="isNested")
    position: BlockPosition | None = None

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    @model_validator(mode="after")
    def _nested_needs_parent(self) -> Block:
        if self.is_nested and not self.parent_id:
            raise ValueError(f"Block '{self.id}' is nested but has no parentId")
        return self

    @property
    def kind(self) -> str | None:
        """Kind discriminator value from the payload (e.g. ``message.text``)."""
        return kind_of(self.category, self.block_data)

    @property
    def title(self) -> str:
        value = self.block_data.get("title")
        return value if isinstance(value, str) else ""

    def to_dict(self) -> dict[str, Any]:
        """Serialize in the editor's camelCase shape."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class LegacyBlock(BaseModel):
    """
    Older two-field block shape produced by earlier editor versions.

    Read-only input to the migrator.
    """

    block_type: str = Field(alias="blockType")
    block_data: dict[str, Any] = Field(default_factory=dict, alias="blockData")

    model_config = ConfigDict(frozen=True, populate_by_name=True)
