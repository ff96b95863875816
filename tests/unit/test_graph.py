"""
Unit tests for the block graph index.
"""

from botblocks.core.graph import BlockGraph
from botblocks.core.ir import Category


class TestBlockGraph:
    def test_children_fall_back_to_parent_links(self, block):
        root = block("r", Category.EVENT)
        first = block("a", Category.REPLY, parent="r")
        second = block("b", Category.REPLY, parent="r")

        graph = BlockGraph([root, first, second])

        assert [b.id for b in graph.children(root)] == ["a", "b"]
        assert [b.id for b in graph.siblings(first)] == ["b"]
        assert graph.roots() == [root]

    def test_unresolved_children_are_skipped(self, block):
        root = block("r", Category.FLEX_LAYOUT, children=["missing", "t"])
        text = block("t", Category.FLEX_CONTENT, parent="r")

        assert BlockGraph([root, text]).children(root) == [text]

    def test_ancestors_stop_on_cycles(self, block):
        first = block("a", Category.FLEX_LAYOUT, parent="b")
        second = block("b", Category.FLEX_LAYOUT, parent="a")

        assert [b.id for b in BlockGraph([first, second]).ancestors(first)] == ["b"]

    def test_partition_covers_every_category(self, block):
        event = block("e", Category.EVENT)
        reply = block("r", Category.REPLY, parent="e")
        other = block("x", Category.REPLY)

        buckets = BlockGraph([event, reply, other]).partition()

        assert set(buckets) == set(Category)
        assert buckets[Category.REPLY] == [reply, other]
        assert buckets[Category.CONTROL] == []

    def test_duplicate_ids_resolve_to_first(self, block):
        first = block("a", Category.EVENT)
        second = block("a", Category.REPLY)

        graph = BlockGraph([first, second])

        assert graph.get("a") is first
        assert len(graph) == 2
        assert "a" in graph
