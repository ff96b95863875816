"""
Block registry.

``BlockRegistry`` bundles one schema version: block definitions, the legacy
alias table and the per-category compatibility rules. It is an immutable
value built by ``build_registry`` and passed into every pipeline stage, so
independent schema versions can be used side by side.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from types import MappingProxyType
from typing import Any

from .aliases import AliasTable, build_alias_table
from .catalog import default_compatibility_rules, default_definitions
from .errors import RegistryError
from .ir import (
    KIND_KEYS,
    Block,
    BlockDefinition,
    Category,
    CompatibilityRule,
    WorkspaceContext,
    coerce_kind,
)
from .limits import DEFAULT_LIMITS, FlexLimits

logger = logging.getLogger("botblocks.core.registry")


class BlockRegistry:
    """
    Immutable lookup structure over block definitions.

    Definitions are indexed by id and by (category, kind). The family
    ``block_type`` string determines a block's category.
    """

    def __init__(
        self,
        definitions: Iterable[BlockDefinition],
        aliases: AliasTable,
        rules: Iterable[CompatibilityRule],
    ):
        by_id: dict[str, BlockDefinition] = {}
        by_kind: dict[tuple[Category, str], BlockDefinition] = {}
        families: dict[str, Category] = {}

        for definition in definitions:
            _check_definition(definition)
            if definition.id in by_id:
                raise RegistryError(f"Duplicate block definition id '{definition.id}'")
            known = families.get(definition.block_type)
            if known is not None and known != definition.category:
                raise RegistryError(
                    f"Block type '{definition.block_type}' is registered under both "
                    f"'{known}' and '{definition.category}'"
                )
            families[definition.block_type] = definition.category
            by_id[definition.id] = definition
            kind = coerce_kind(definition.category, definition.kind)
            by_kind.setdefault((definition.category, str(kind)), definition)

        rule_map: dict[Category, CompatibilityRule] = {}
        for rule in rules:
            if rule.category in rule_map:
                raise RegistryError(f"Duplicate compatibility rule for '{rule.category}'")
            rule_map[rule.category] = rule

        self._by_id = MappingProxyType(by_id)
        self._by_kind = MappingProxyType(by_kind)
        self._families = MappingProxyType(families)
        self._rules = MappingProxyType(rule_map)
        self.aliases = aliases

    # -------------------------------------------------------------------------
    # Lookup
    # -------------------------------------------------------------------------

    def __len__(self) -> int:
        return len(self._by_id)

    def __contains__(self, definition_id: object) -> bool:
        return definition_id in self._by_id

    def get(self, definition_id: str) -> BlockDefinition | None:
        return self._by_id.get(definition_id)

    def definitions(self) -> list[BlockDefinition]:
        return list(self._by_id.values())

    def category_of(self, block_type: str) -> Category:
        """Category of a canonical block type; UNKNOWN when not registered."""
        return self._families.get(block_type, Category.UNKNOWN)

    def definition_for(self, block: Block) -> BlockDefinition | None:
        """Definition matching a block's family and payload kind."""
        category = self.category_of(block.block_type)
        if category == Category.UNKNOWN:
            return None
        kind = coerce_kind(category, block.kind)
        if kind is None:
            logger.debug("Block %s has no recognised %s kind", block.id, category)
            return None
        return self._by_kind.get((category, str(kind)))

    def rule_for(self, category: Category) -> CompatibilityRule | None:
        return self._rules.get(category)

    def rules(self) -> list[CompatibilityRule]:
        return list(self._rules.values())

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def by_category(self, category: Category) -> list[BlockDefinition]:
        return [d for d in self._by_id.values() if d.category == category]

    def by_context(self, context: WorkspaceContext) -> list[BlockDefinition]:
        return [d for d in self._by_id.values() if d.supports(context)]

    def search(self, query: str) -> list[BlockDefinition]:
        """
        Definitions matching a free-text query.

        Matches id, display name, description and tags, and also historical
        type strings through the alias table so old names still find blocks.
        """
        query = query.strip()
        if not query:
            return self.definitions()
        matched = {d.id: d for d in self._by_id.values() if d.matches(query)}
        for rule in self.aliases.search(query):
            kind = rule.kind
            for definition in self.by_category(rule.category):
                if kind is None or definition.kind == kind:
                    matched.setdefault(definition.id, definition)
        return [d for d in self._by_id.values() if d.id in matched]

    def filter(
        self,
        categories: Iterable[Category] | None = None,
        context: WorkspaceContext | None = None,
        tags: Iterable[str] | None = None,
        search: str | None = None,
        include_experimental: bool = True,
    ) -> list[BlockDefinition]:
        """Combine the query helpers; every given criterion must hold."""
        wanted_categories = set(categories) if categories else None
        wanted_tags = {t.lower() for t in tags} if tags else None
        candidates = self.search(search) if search else self.definitions()

        result = []
        for definition in candidates:
            if wanted_categories is not None and definition.category not in wanted_categories:
                continue
            if context is not None and not definition.supports(context):
                continue
            if wanted_tags is not None and not wanted_tags & {t.lower() for t in definition.tags}:
                continue
            if not include_experimental and definition.experimental:
                continue
            result.append(definition)
        return result

    def statistics(self) -> dict[str, Any]:
        per_category = {c.value: 0 for c in Category if c != Category.UNKNOWN}
        per_context = {c.value: 0 for c in WorkspaceContext}
        for definition in self._by_id.values():
            per_category[definition.category.value] += 1
            for context in definition.compatibility:
                per_context[context.value] += 1
        return {
            "total": len(self._by_id),
            "by_category": per_category,
            "by_context": per_context,
            "experimental": sum(1 for d in self._by_id.values() if d.experimental),
            "aliases": len(self.aliases),
        }


def _check_definition(definition: BlockDefinition) -> None:
    if not definition.compatibility:
        raise RegistryError(f"Block definition '{definition.id}' declares no compatible workspace")
    if definition.category == Category.UNKNOWN:
        raise RegistryError(f"Block definition '{definition.id}' has no category")
    if definition.block_type != definition.category.value:
        raise RegistryError(
            f"Block definition '{definition.id}' has block type '{definition.block_type}' "
            f"but category '{definition.category}'"
        )
    key = KIND_KEYS[definition.category][0]
    if coerce_kind(definition.category, definition.default_data.get(key)) is None:
        raise RegistryError(f"Block definition '{definition.id}' default data lacks a valid '{key}'")


def build_registry(
    definitions: Iterable[BlockDefinition] | None = None,
    aliases: AliasTable | None = None,
    rules: Iterable[CompatibilityRule] | None = None,
    limits: FlexLimits | None = None,
) -> BlockRegistry:
    """
    Build a registry, filling any omitted part with the built-in default.

    Args:
        definitions: Block definitions (default: built-in catalog)
        aliases: Legacy alias table (default: built-in table)
        rules: Compatibility rules (default: built-in rule table)
        limits: Limits the built-in rule table is sized from (ignored when
            ``rules`` is given)
    """
    return BlockRegistry(
        definitions if definitions is not None else default_definitions(),
        aliases if aliases is not None else build_alias_table(),
        rules if rules is not None else default_compatibility_rules(limits or DEFAULT_LIMITS),
    )
