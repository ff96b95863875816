"""
Schema migration from the legacy two-field block shape.

``SchemaMigrator.migrate`` is total and pure: every legacy block maps to
exactly one current ``Block``, a block already in current shape maps to
itself, and the input is never mutated. Unknown legacy type strings pass
through unchanged with category UNKNOWN.
"""

from __future__ import annotations

import copy
import hashlib
import json
import logging
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from .errors import PreconditionError, make_precondition_error
from .ir import Block, Category, LegacyBlock, WorkspaceContext
from .registry import BlockRegistry, build_registry

logger = logging.getLogger("botblocks.core.migrator")

BlockInput = Block | LegacyBlock | Mapping[str, Any]


def content_id(legacy_type: str, data: Mapping[str, Any], position: int) -> str:
    """
    Stable block id derived from a legacy block's content and position.

    Returns:
        ``block_`` followed by 12 hex characters of a SHA-256 digest
    """
    canonical = json.dumps([legacy_type, data, position], sort_keys=True, separators=(",", ":"), default=str)
    return "block_" + hashlib.sha256(canonical.encode("utf-8")).hexdigest()[:12]


class SchemaMigrator:
    """
    Converts legacy blocks to the current representation.

    Args:
        registry: Schema version to migrate into (default: built-in)
    """

    def __init__(self, registry: BlockRegistry | None = None):
        self.registry = registry or build_registry()

    def migrate_type(self, legacy_type: str) -> str:
        """Canonical block type for a legacy type string (``""`` maps to ``""``)."""
        if legacy_type is None:
            raise PreconditionError("Block type must be a string, got None")
        return self.registry.aliases.canonical_type(legacy_type)

    def migrate(self, old_block: Block | LegacyBlock | None, position: int = 0) -> Block:
        """
        Migrate one block.

        Args:
            old_block: Legacy block, or a block already in current shape
            position: Index of the block in its graph, part of the derived id

        Returns:
            A new current-shape Block (or ``old_block`` itself if current)

        Raises:
            PreconditionError: If ``old_block`` is None
        """
        if old_block is None:
            raise PreconditionError("Cannot migrate None; a block is required")
        if isinstance(old_block, Block):
            return old_block

        legacy_type = old_block.block_type
        rule = self.registry.aliases.lookup(legacy_type)
        if rule is None:
            logger.debug("Unknown legacy block type %r kept as-is", legacy_type)
            return Block(
                id=content_id(legacy_type, old_block.block_data, position),
                block_type=legacy_type,
                category=Category.UNKNOWN,
                block_data=copy.deepcopy(old_block.block_data),
                compatibility=[],
            )

        data = copy.deepcopy(dict(rule.data_defaults))
        data.update(copy.deepcopy(old_block.block_data))
        category = rule.category
        return Block(
            id=content_id(legacy_type, old_block.block_data, position),
            block_type=rule.canonical_type,
            category=category,
            block_data=data,
            compatibility=self._allowed_in(category),
        )

    def normalize(self, raw: BlockInput | None, position: int = 0, graph: str | None = None) -> Block:
        """
        Accept any supported block input and return a current-shape Block.

        Dicts with a ``category`` key are treated as current shape; any other
        dict is read as a legacy block.

        Raises:
            PreconditionError: If ``raw`` is None or not a block-like value
            pydantic.ValidationError: If a dict does not fit either shape
        """
        if raw is None:
            raise make_precondition_error("Block is None", graph, position)
        if isinstance(raw, Block | LegacyBlock):
            return self.migrate(raw, position)
        if not isinstance(raw, Mapping):
            raise make_precondition_error(f"Expected a block mapping, got {type(raw).__name__}", graph, position)
        if "category" in raw:
            return Block.model_validate(dict(raw))
        return self.migrate(LegacyBlock.model_validate(dict(raw)), position)

    def migrate_blocks(self, blocks: list[BlockInput], graph: str = "blocks") -> list[Block]:
        """
        Normalize a whole graph, preserving order.

        Raises:
            PreconditionError: If ``blocks`` is not a list
        """
        if not isinstance(blocks, list | tuple):
            raise PreconditionError(f"Expected a list of blocks for '{graph}', got {type(blocks).__name__}")
        return [self.normalize(raw, i, graph) for i, raw in enumerate(blocks)]

    def try_normalize(
        self, raw: BlockInput | None, position: int, graph: str
    ) -> tuple[Block | None, str | None]:
        """Normalize one block, returning an error message instead of raising on bad shape."""
        try:
            return self.normalize(raw, position, graph), None
        except ValidationError as e:
            problems = "; ".join(err["msg"] for err in e.errors())
            return None, f"{graph}[{position}]: cannot read block: {problems}"

    def normalize_graph(self, blocks: list[BlockInput], graph: str) -> tuple[list[Block], list[str]]:
        """
        Normalize a graph, skipping blocks that do not fit either shape.

        Returns:
            Tuple of (readable blocks in order, error messages for the rest)

        Raises:
            PreconditionError: If ``blocks`` is not a list or holds None
        """
        if not isinstance(blocks, list | tuple):
            raise PreconditionError(f"Expected a list of blocks for '{graph}', got {type(blocks).__name__}")
        normalized: list[Block] = []
        errors: list[str] = []
        for index, raw in enumerate(blocks):
            block, error = self.try_normalize(raw, index, graph)
            if block is None:
                errors.append(error or f"{graph}[{index}]: cannot read block")
            else:
                normalized.append(block)
        return normalized, errors

    def _allowed_in(self, category: Category) -> list[WorkspaceContext]:
        rule = self.registry.rule_for(category)
        return list(rule.allowed_in) if rule is not None else []
