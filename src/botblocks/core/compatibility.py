"""
Block placement validation.

Decides whether a block may appear in a workspace context, and whether its
neighbours in the graph satisfy its category's compatibility rule. Every
check is pure and fail-closed: a category without a rule is never valid.

Failures are returned, never raised. Hard failures carry ``Severity.ERROR``;
``forbidden_with`` and ``max_count`` violations are soft and carry
``Severity.WARNING``.
"""

from __future__ import annotations

import logging

from .graph import BlockGraph
from .ir import (
    Block,
    Category,
    CompatibilityRule,
    MalformedPayload,
    Severity,
    ValidationReport,
    ValidationResult,
    WorkspaceContext,
    coerce_kind,
    parse_payload,
)
from .registry import BlockRegistry, build_registry

logger = logging.getLogger("botblocks.core.compatibility")

_CATEGORY_LABELS: dict[Category, str] = {
    Category.EVENT: "event",
    Category.REPLY: "reply",
    Category.CONTROL: "control",
    Category.SETTING: "setting",
    Category.FLEX_CONTAINER: "Flex container",
    Category.FLEX_CONTENT: "Flex content",
    Category.FLEX_LAYOUT: "Flex layout",
    Category.UNKNOWN: "unknown",
}

_CONTEXT_LABELS: dict[WorkspaceContext, str] = {
    WorkspaceContext.LOGIC: "the logic editor",
    WorkspaceContext.FLEX: "the Flex designer",
}


def _label(category: Category) -> str:
    return _CATEGORY_LABELS.get(category, str(category))


def _join(categories: list[Category]) -> str:
    return " or ".join(_label(c) for c in categories)


class CompatibilityValidator:
    """
    Placement checks against one registry's compatibility rules.

    Args:
        registry: Schema version providing rules and definitions
    """

    def __init__(self, registry: BlockRegistry | None = None):
        self.registry = registry or build_registry()

    # -------------------------------------------------------------------------
    # Single block
    # -------------------------------------------------------------------------

    def check_compatibility(
        self,
        block: Block,
        context: WorkspaceContext,
        graph: BlockGraph | list[Block] | None = None,
    ) -> ValidationResult:
        """
        May ``block`` be placed in ``context``?

        Stage 1 checks the block's declared contexts, which may narrow but
        never widen its definition's (the definition's apply when the block
        declares none). Stage 2 applies the category rule:
        allowed contexts, dependencies, required parent, then the soft
        sibling checks. Dependency and sibling checks need ``graph``.
        """
        if isinstance(graph, list):
            graph = BlockGraph(graph)

        declared = self._declared_contexts(block)
        if context not in declared:
            usable = declared or self._supported_contexts(block)
            if usable:
                places = " or ".join(_CONTEXT_LABELS[c] for c in usable)
                suggestions = [f"Use this block in {places}"]
            else:
                suggestions = ["This block type is not recognised; replace it with a supported block"]
            return ValidationResult.fail(
                f"Block '{block.id}' does not support the {context} workspace (unsupported context)",
                suggestions,
            )

        rule = self.registry.rule_for(block.category)
        if rule is None:
            logger.debug("No compatibility rule for category %s", block.category)
            return ValidationResult.fail(
                f"No compatibility rule for category '{block.category}'",
                ["Replace this block with a supported block type"],
            )

        if context not in rule.allowed_in:
            places = " or ".join(_CONTEXT_LABELS[c] for c in rule.allowed_in)
            return ValidationResult.fail(
                f"{_label(block.category).capitalize()} blocks cannot be used in {_CONTEXT_LABELS[context]}",
                [f"Move this block to {places}"],
            )

        if graph is not None and rule.dependencies:
            failure = self._check_dependencies(block, rule, graph)
            if failure is not None:
                return failure

        failure = self._check_parent(block, rule, graph)
        if failure is not None:
            return failure

        if graph is not None:
            failure = self._check_siblings(block, rule, graph)
            if failure is not None:
                return failure

        return ValidationResult.ok()

    def check_integrity(self, block: Block) -> ValidationResult:
        """
        Does the block's denormalized category match its type's category?

        An unrecognised kind within a known family, or a payload whose fields
        fail their typed shape, is reported as a warning: later stages degrade
        such blocks instead of rejecting them.
        """
        expected = self.registry.category_of(block.block_type)
        if block.category != expected:
            return ValidationResult.fail(
                f"Block '{block.id}' has category '{block.category}' but type '{block.block_type}' "
                f"belongs to '{expected}'",
                [f"Set the category to '{expected}'"],
            )
        if expected == Category.UNKNOWN:
            return ValidationResult.fail(
                f"Block '{block.id}' has unknown type '{block.block_type}'",
                ["Replace this block with a supported block type"],
                severity=Severity.WARNING,
            )
        if coerce_kind(block.category, block.kind) is None:
            return ValidationResult.fail(
                f"Block '{block.id}' has unknown {_label(block.category)} kind '{block.kind or ''}'",
                [f"Choose one of: {', '.join(self._known_kinds(block.category))}"],
                severity=Severity.WARNING,
            )
        payload = parse_payload(block.category, block.block_data)
        if isinstance(payload, MalformedPayload):
            return ValidationResult.fail(
                f"Block '{block.id}' has unreadable {_label(block.category)} data: {payload.error}",
                ["Correct the listed fields or reset the block to its defaults"],
                severity=Severity.WARNING,
            )
        return ValidationResult.ok()

    def can_nest(self, child: Category, parent: Category) -> bool:
        rule = self.registry.rule_for(child)
        if rule is None:
            return False
        if rule.restrictions is None or not rule.restrictions.requires_parent:
            return True
        return parent in rule.restrictions.requires_parent

    def usage_suggestions(self, category: Category) -> list[str]:
        rule = self.registry.rule_for(category)
        if rule is None:
            return ["This block category is not supported"]
        suggestions = [f"Can be used in {_CONTEXT_LABELS[c]}" for c in rule.allowed_in]
        if rule.dependencies:
            suggestions.append(f"Combine with {_join(rule.dependencies)} blocks")
        restrictions = rule.restrictions
        if restrictions is not None:
            if restrictions.requires_parent:
                suggestions.append(f"Place inside a {_join(restrictions.requires_parent)} block")
            if restrictions.forbidden_with:
                suggestions.append(f"Do not combine with {_join(restrictions.forbidden_with)} blocks")
            if restrictions.max_count is not None:
                suggestions.append(f"At most {restrictions.max_count} per container")
        return suggestions

    # -------------------------------------------------------------------------
    # Whole workspace
    # -------------------------------------------------------------------------

    def validate_workspace(self, blocks: list[Block], context: WorkspaceContext) -> ValidationReport:
        """Fold every per-block check for one graph into a report."""
        report = ValidationReport()
        graph = BlockGraph(blocks)
        for index, block in enumerate(graph):
            prefix = f"Block {index + 1} ({block.category}): "
            for result in (self.check_integrity(block), self.check_compatibility(block, context, graph)):
                if result.is_valid:
                    continue
                message = prefix + (result.reason or "invalid")
                if result.severity == Severity.WARNING:
                    report.add_warning(message)
                else:
                    report.add_error(message)

        if context == WorkspaceContext.LOGIC:
            present = graph.categories()
            if Category.EVENT not in present:
                report.add_warning("Add an event block as the starting point of the bot logic")
            if Category.REPLY not in present:
                report.add_warning("Add a reply block to respond to users")
        return report

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _supported_contexts(self, block: Block) -> list[WorkspaceContext]:
        definition = self.registry.definition_for(block)
        return list(definition.compatibility) if definition is not None else []

    def _declared_contexts(self, block: Block) -> list[WorkspaceContext]:
        """Contexts the block declares, narrowed to those its definition supports."""
        definition = self.registry.definition_for(block)
        if definition is None:
            return list(block.compatibility)
        if not block.compatibility:
            return list(definition.compatibility)
        return [c for c in block.compatibility if c in definition.compatibility]

    def _known_kinds(self, category: Category) -> list[str]:
        return sorted({d.kind for d in self.registry.by_category(category) if d.kind})

    def _check_dependencies(
        self, block: Block, rule: CompatibilityRule, graph: BlockGraph
    ) -> ValidationResult | None:
        nearby = {b.category for b in graph.ancestors(block)} | {b.category for b in graph.siblings(block)}
        if nearby & set(rule.dependencies):
            return None
        return ValidationResult.fail(
            f"{_label(block.category).capitalize()} blocks need a {_join(rule.dependencies)} block nearby",
            [f"Place this block inside a {_join(rule.dependencies)}"],
        )

    def _check_parent(
        self, block: Block, rule: CompatibilityRule, graph: BlockGraph | None
    ) -> ValidationResult | None:
        restrictions = rule.restrictions
        if restrictions is None or not restrictions.requires_parent:
            return None
        wanted = _join(restrictions.requires_parent)
        if not block.parent_id:
            return ValidationResult.fail(
                f"{_label(block.category).capitalize()} blocks must be nested inside a {wanted} block",
                [f"Place this block inside a {wanted}"],
            )
        parent = graph.get(block.parent_id) if graph is not None else None
        if parent is not None and parent.category not in restrictions.requires_parent:
            return ValidationResult.fail(
                f"{_label(block.category).capitalize()} blocks cannot be nested inside a "
                f"{_label(parent.category)} block",
                [f"Move this block into a {wanted}"],
            )
        return None

    def _check_siblings(
        self, block: Block, rule: CompatibilityRule, graph: BlockGraph
    ) -> ValidationResult | None:
        restrictions = rule.restrictions
        if restrictions is None:
            return None
        siblings = graph.siblings(block)

        clashes = sorted({s.category for s in siblings} & set(restrictions.forbidden_with))
        if clashes:
            return ValidationResult.fail(
                f"{_label(block.category).capitalize()} blocks cannot be combined with {_join(clashes)} blocks",
                [f"Move the {_join(clashes)} blocks to another container"],
                severity=Severity.WARNING,
            )

        if restrictions.max_count is not None:
            same = 1 + sum(1 for s in siblings if s.category == block.category)
            if same > restrictions.max_count:
                return ValidationResult.fail(
                    f"At most {restrictions.max_count} {_label(block.category)} blocks are allowed "
                    f"per container (found {same})",
                    [f"Remove {same - restrictions.max_count} {_label(block.category)} blocks"],
                    severity=Severity.WARNING,
                )
        return None
