"""
Error types for botblocks.

Validation problems found in a block graph are never raised; they are
collected into reports. The exceptions below cover contract violations by
the caller and problems with the compiler's own inputs (registry
definitions, configuration files).
"""

from dataclasses import dataclass


class BotBlocksError(Exception):
    """Base exception for all botblocks errors."""

    def __init__(self, message: str, context: "ErrorContext | None" = None):
        self.message = message
        self.context = context
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format error message with context if available."""
        if self.context:
            return f"{self.context.format()}: {self.message}"
        return self.message


class PreconditionError(BotBlocksError):
    """
    Raised when a caller breaks the compiler's input contract.

    Examples:
    - Passing None where a block is required
    - Passing a non-list where a block list is required
    """

    pass


class RegistryError(BotBlocksError):
    """
    Raised when a block definition cannot be registered.

    Examples:
    - Duplicate definition id
    - Empty compatibility list
    - Default data missing the family discriminator key
    """

    pass


class ConfigError(BotBlocksError):
    """
    Raised when botblocks.toml cannot be loaded.

    Examples:
    - Malformed TOML
    - Unknown limit override
    - Wrong value type for a setting
    """

    pass


class CompileError(BotBlocksError):
    """
    Raised by front-ends that treat a failed compile report as fatal.

    The core pipeline itself never raises this; it returns the report.
    """

    pass


@dataclass
class ErrorContext:
    """
    Location of an error inside a block graph.

    Attributes:
        graph: Which graph the block came from ("logic" or "flex")
        index: Position of the block in that graph
        block_id: Block identifier, when known
    """

    graph: str
    index: int
    block_id: str | None = None

    def format(self) -> str:
        """
        Format error context as a human-readable string.

        Returns:
            Formatted string like: "logic[3] (block_ab12)"
        """
        location = f"{self.graph}[{self.index}]"
        if self.block_id:
            location += f" ({self.block_id})"
        return location


def make_precondition_error(message: str, graph: str | None = None, index: int | None = None) -> PreconditionError:
    """
    Helper to create a PreconditionError with optional graph location.

    Args:
        message: Error description
        graph: Optional graph name
        index: Optional position in the graph

    Returns:
        PreconditionError with context if a location was provided
    """
    if graph is not None and index is not None:
        return PreconditionError(message, ErrorContext(graph=graph, index=index))
    return PreconditionError(message)
