"""Core botblocks functionality: IR, registry, migration, compatibility and wire validation."""

from . import ir
from .aliases import AliasRule, AliasTable, build_alias_table
from .compatibility import CompatibilityValidator
from .errors import (
    BotBlocksError,
    CompileError,
    ConfigError,
    ErrorContext,
    PreconditionError,
    RegistryError,
)
from .flex_validator import FlexValidator, validate_document, validate_element_properties
from .graph import BlockGraph
from .limits import DEFAULT_LIMITS, FlexLimits
from .migrator import SchemaMigrator
from .registry import BlockRegistry, build_registry

__all__ = [
    "ir",
    # Errors
    "BotBlocksError",
    "CompileError",
    "ConfigError",
    "ErrorContext",
    "PreconditionError",
    "RegistryError",
    # Schema
    "AliasRule",
    "AliasTable",
    "BlockRegistry",
    "SchemaMigrator",
    "build_alias_table",
    "build_registry",
    # Validation
    "BlockGraph",
    "CompatibilityValidator",
    "DEFAULT_LIMITS",
    "FlexLimits",
    "FlexValidator",
    "validate_document",
    "validate_element_properties",
]
