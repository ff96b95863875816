"""
Flex Message factory functions for the generated server.

Each root flex container becomes ``flex_message_<hash>()`` returning the
converted container as a literal. The name hashes the container's id and
graph position so regeneration from the same graph is byte-identical.
"""

from __future__ import annotations

import hashlib

from botblocks.core.graph import BlockGraph
from botblocks.core.ir import Block
from botblocks.flex.converter import MessageConverter

from .context import FlexFactory
from .statements import Blank, Comment, Literal, Return, Stmt, Suite

FACTORY_PREFIX = "flex_message_"


def factory_name(block_id: str, position: int) -> str:
    digest = hashlib.sha256(f"{block_id}:{position}".encode()).hexdigest()
    return FACTORY_PREFIX + digest[:10]


def build_factories(message_blocks: list[Block], default_alt_text: str) -> list[FlexFactory]:
    """One factory per root flex container, in graph order."""
    graph = BlockGraph(message_blocks)
    converter = MessageConverter(graph, default_alt_text=default_alt_text)
    positions = {id(block): i for i, block in enumerate(message_blocks)}
    factories = []
    for root in converter.root_containers():
        document = converter.convert_container(root)
        factories.append(
            FlexFactory(
                block_id=root.id,
                name=factory_name(root.id, positions[id(root)]),
                alt_text=document["altText"],
                container=document["contents"],
            )
        )
    return factories


def factory_statements(factories: list[FlexFactory]) -> list[Stmt]:
    if not factories:
        return []
    stmts: list[Stmt] = [Blank(), Blank(), Comment("Flex Message definitions")]
    for factory in factories:
        body = (
            Comment(f"altText: {factory.alt_text}"),
            Return(Literal(factory.container)),
        )
        stmts.extend([Blank(), Blank(), Suite(f"def {factory.name}():", body)])
    return stmts
