"""
State shared by the lowering tables during one generator run.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from .result import GeneratorResult

logger = logging.getLogger("botblocks.codegen")


@dataclass(frozen=True)
class FlexFactory:
    """One generated ``flex_message_<hash>()`` function."""

    block_id: str
    name: str
    alt_text: str
    container: dict[str, Any]


@dataclass
class LoweringContext:
    """
    Attributes:
        result: Collects warnings for degraded blocks
        factories: Flex factories in message-graph order
        label: Label of the block being lowered, used in messages
    """

    result: GeneratorResult = field(default_factory=GeneratorResult)
    factories: list[FlexFactory] = field(default_factory=list)
    label: str = ""

    def warn(self, message: str) -> None:
        text = f"{self.label}: {message}" if self.label else message
        logger.debug("Generation fallback: %s", text)
        self.result.add_warning(text)

    def factory_for(self, block_id: str | None) -> FlexFactory | None:
        """Factory for ``block_id``, else the first factory, else None."""
        if block_id:
            for factory in self.factories:
                if factory.block_id == block_id:
                    return factory
        return self.factories[0] if self.factories else None
