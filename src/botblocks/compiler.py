"""
Compiler pipeline.

    normalize -> integrity/compatibility -> wire validation -> generate

Each stage folds its findings into one ``ValidationReport``. Blocks that
cannot be read are reported and dropped; everything else flows through to
generation, which degrades bad blocks instead of failing.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from botblocks.codegen.webhook import WebhookGenerator
from botblocks.core.compatibility import CompatibilityValidator
from botblocks.core.config import BotBlocksConfig
from botblocks.core.errors import ErrorContext
from botblocks.core.flex_validator import FlexValidator
from botblocks.core.ir import FLEX_CATEGORIES, Block, ValidationReport, WorkspaceContext
from botblocks.core.migrator import BlockInput, SchemaMigrator
from botblocks.core.registry import BlockRegistry, build_registry
from botblocks.flex.converter import MessageConverter

logger = logging.getLogger("botblocks.compiler")


class TargetMode(StrEnum):
    SOURCE = "generate-source"
    DOCUMENT = "generate-document"


@dataclass
class CompileResult:
    """
    Outcome of one compile.

    Attributes:
        mode: Target that was requested
        artifact: Source text (SOURCE), Flex Message document (DOCUMENT), or
            None when a document failed wire validation
        report: Every error and warning found along the way
    """

    mode: TargetMode
    artifact: str | dict[str, Any] | None
    report: ValidationReport

    @property
    def success(self) -> bool:
        return self.report.is_valid and self.artifact is not None

    def to_dict(self) -> dict[str, Any]:
        return {"mode": str(self.mode), "artifact": self.artifact, "report": self.report.to_dict()}


class Compiler:
    """
    Runs the pipeline against one registry and one config.

    Both are read-only, so one compiler may serve any number of graphs. The
    default registry sizes its placement rules from the config's limits.
    """

    def __init__(self, registry: BlockRegistry | None = None, config: BotBlocksConfig | None = None):
        self.config = config or BotBlocksConfig()
        self.registry = registry or build_registry(limits=self.config.limits)
        self.migrator = SchemaMigrator(self.registry)
        self.compatibility = CompatibilityValidator(self.registry)
        self.wire = FlexValidator(self.config.limits)

    def compile(
        self,
        logic_blocks: list[BlockInput],
        message_blocks: list[BlockInput] | None = None,
        mode: TargetMode | str = TargetMode.SOURCE,
    ) -> CompileResult:
        """
        Compile both graphs to the requested target.

        Raises:
            PreconditionError: If a graph is not a list or contains None
            ValueError: If ``mode`` is not a TargetMode value
        """
        mode = TargetMode(mode)
        report = ValidationReport()

        logic, logic_errors = self.migrator.normalize_graph(logic_blocks, "logic")
        messages, message_errors = self.migrator.normalize_graph(
            message_blocks if message_blocks is not None else [], "flex"
        )
        for error in logic_errors + message_errors:
            report.add_error(error)

        report.merge(self.compatibility.validate_workspace(logic, WorkspaceContext.LOGIC), "logic: ")
        if messages:
            report.merge(self.compatibility.validate_workspace(messages, WorkspaceContext.FLEX), "flex: ")

        converter = MessageConverter(messages, default_alt_text=self.config.compiler.default_alt_text)
        wire_errors = self._validate_wire(messages, converter, report)

        artifact: str | dict[str, Any] | None
        if mode == TargetMode.SOURCE:
            generated = WebhookGenerator(
                logic,
                messages,
                default_alt_text=self.config.compiler.default_alt_text,
            ).generate()
            for error in generated.errors:
                report.add_error(error)
            for warning in generated.warnings:
                report.add_warning(warning)
            artifact = generated.source
        elif wire_errors:
            artifact = None
        else:
            if not messages:
                report.add_warning("No flex blocks to convert; the document holds an empty bubble")
            artifact = converter.convert_container()

        if self.config.compiler.strict:
            report.promote_warnings()

        logger.debug(
            "Compiled %d logic and %d flex blocks to %s: %d errors, %d warnings",
            len(logic),
            len(messages),
            mode,
            len(report.errors),
            len(report.warnings),
        )
        return CompileResult(mode=mode, artifact=artifact, report=report)

    def _validate_wire(self, messages: list[Block], converter: MessageConverter, report: ValidationReport) -> bool:
        """Validate element properties and every converted document; True if any error was found."""
        before = len(report.errors)
        for index, block in enumerate(messages):
            if block.category not in FLEX_CATEGORIES:
                continue
            label = ErrorContext("flex", index, block.id).format()
            report.merge(self.wire.validate_element_properties(block.kind, block.block_data), f"{label}: ")

        if messages:
            roots = converter.root_containers() or [None]
            for root in roots:
                document = converter.convert_container(root)
                label = f"document {root.id}" if root is not None else "document"
                report.merge(self.wire.validate_document(document), f"{label}: ")
        return len(report.errors) > before


def compile_graph(
    logic_blocks: list[BlockInput],
    message_blocks: list[BlockInput] | None = None,
    mode: TargetMode | str = TargetMode.SOURCE,
    *,
    registry: BlockRegistry | None = None,
    config: BotBlocksConfig | None = None,
) -> CompileResult:
    """
    Compile a block project in one call.

    Args:
        logic_blocks: Logic graph (current or legacy block shape)
        message_blocks: Flex graph (current or legacy block shape)
        mode: ``generate-source`` or ``generate-document``
        registry: Block registry (default: built-in)
        config: Compiler config (default: built-in defaults)

    Returns:
        CompileResult with the artifact and the folded report
    """
    return Compiler(registry, config).compile(logic_blocks, message_blocks, mode)
