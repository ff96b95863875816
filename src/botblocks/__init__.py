"""
botblocks - compile visual LINE bot block graphs.

Turns the logic graph and the Flex Message layout graph saved by the block
editor into a Flask + line-bot-sdk webhook server or a Flex Message document.
"""

from __future__ import annotations

from ._version import get_version
from .codegen import generate
from .compiler import CompileResult, Compiler, TargetMode, compile_graph
from .core import ir
from .core.errors import BotBlocksError, ConfigError, PreconditionError, RegistryError
from .core.migrator import SchemaMigrator
from .core.registry import build_registry
from .flex import convert_container

__version__ = get_version()

__all__ = [
    "__version__",
    "ir",
    "BotBlocksError",
    "CompileResult",
    "Compiler",
    "ConfigError",
    "PreconditionError",
    "RegistryError",
    "SchemaMigrator",
    "TargetMode",
    "build_registry",
    "compile_graph",
    "convert_container",
    "generate",
]
