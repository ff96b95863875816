"""
Read-only view over one block graph (the logic list or the flex list).
"""

from __future__ import annotations

from collections.abc import Iterator

from .ir import Block, Category


class BlockGraph:
    """
    Index over an ordered block list.

    Children are resolved from each block's ``children`` id list, falling
    back to blocks whose ``parent_id`` points at it (in graph order) when
    the list is empty. Ids that do not resolve are skipped.
    """

    def __init__(self, blocks: list[Block]):
        self.blocks = list(blocks)
        self._by_id: dict[str, Block] = {}
        for block in self.blocks:
            # First occurrence wins on duplicate ids
            self._by_id.setdefault(block.id, block)

    def __iter__(self) -> Iterator[Block]:
        return iter(self.blocks)

    def __len__(self) -> int:
        return len(self.blocks)

    def __contains__(self, block_id: object) -> bool:
        return block_id in self._by_id

    def get(self, block_id: str | None) -> Block | None:
        if block_id is None:
            return None
        return self._by_id.get(block_id)

    def parent(self, block: Block) -> Block | None:
        return self.get(block.parent_id)

    def children(self, block: Block) -> list[Block]:
        if block.children:
            return [child for cid in block.children if (child := self._by_id.get(cid)) is not None]
        return [b for b in self.blocks if b.parent_id == block.id and b is not block]

    def siblings(self, block: Block) -> list[Block]:
        """Blocks sharing ``block``'s parent (or the top level), excluding itself."""
        parent = self.parent(block)
        group = self.children(parent) if parent is not None else self.roots()
        return [b for b in group if b is not block]

    def ancestors(self, block: Block) -> list[Block]:
        """Parent chain, nearest first. Stops on cycles."""
        chain: list[Block] = []
        seen = {block.id}
        current = self.parent(block)
        while current is not None and current.id not in seen:
            chain.append(current)
            seen.add(current.id)
            current = self.parent(current)
        return chain

    def roots(self) -> list[Block]:
        """Blocks with no resolvable parent, in graph order."""
        return [b for b in self.blocks if self.parent(b) is None]

    def by_category(self, category: Category) -> list[Block]:
        return [b for b in self.blocks if b.category == category]

    def partition(self) -> dict[Category, list[Block]]:
        buckets: dict[Category, list[Block]] = {c: [] for c in Category}
        for block in self.blocks:
            buckets[block.category].append(block)
        return buckets

    def categories(self) -> set[Category]:
        return {b.category for b in self.blocks}
