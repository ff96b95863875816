"""
Unit tests for block placement validation.
"""

import pytest

from botblocks.core.compatibility import CompatibilityValidator
from botblocks.core.ir import Block, Category, Severity, WorkspaceContext

LOGIC = WorkspaceContext.LOGIC
FLEX = WorkspaceContext.FLEX

# Expected outcome of placing one well-formed block of each category.
PLACEMENT_GRID = [
    (Category.EVENT, LOGIC, True),
    (Category.EVENT, FLEX, False),
    (Category.REPLY, LOGIC, True),
    (Category.REPLY, FLEX, False),
    (Category.CONTROL, LOGIC, True),
    (Category.CONTROL, FLEX, True),
    (Category.SETTING, LOGIC, True),
    (Category.SETTING, FLEX, False),
    (Category.FLEX_CONTAINER, LOGIC, True),
    (Category.FLEX_CONTAINER, FLEX, True),
    (Category.FLEX_CONTENT, LOGIC, True),
    (Category.FLEX_CONTENT, FLEX, True),
    (Category.FLEX_LAYOUT, LOGIC, True),
    (Category.FLEX_LAYOUT, FLEX, True),
    (Category.UNKNOWN, LOGIC, False),
    (Category.UNKNOWN, FLEX, False),
]


@pytest.fixture
def bubble(block) -> Block:
    return block("bubble", Category.FLEX_CONTAINER, {"containerType": "bubble"})


def _sample(registry, block, category: Category, parent: str | None = None) -> Block:
    definitions = registry.by_category(category)
    data = dict(definitions[0].default_data) if definitions else {}
    return block("sample", category, data, parent=parent)


class TestPlacementGrid:
    """Every category in every context."""

    @pytest.mark.parametrize("category,context,allowed", PLACEMENT_GRID)
    def test_grid(self, compatibility: CompatibilityValidator, registry, block, bubble, category, context, allowed):
        nested = category in (Category.FLEX_CONTENT, Category.FLEX_LAYOUT)
        sample = _sample(registry, block, category, parent="bubble" if nested else None)
        graph = [bubble, sample] if nested else [sample]

        result = compatibility.check_compatibility(sample, context, graph)

        assert result.is_valid is allowed
        if not allowed:
            assert result.severity == Severity.ERROR
            assert result.reason
            assert result.suggestions

    def test_rejection_names_unsupported_context(self, compatibility, hello_logic):
        result = compatibility.check_compatibility(hello_logic[0], FLEX)

        assert not result.is_valid
        assert "(unsupported context)" in result.reason
        assert result.suggestions == ["Use this block in the logic editor"]

    def test_unknown_block_is_never_valid(self, compatibility, block):
        stray = block("x", Category.UNKNOWN, {}, compatibility=["logic", "flex"])

        for context in WorkspaceContext:
            result = compatibility.check_compatibility(stray, context)
            assert not result.is_valid
            assert "No compatibility rule" in result.reason

    def test_declared_context_cannot_widen_definition(self, compatibility, block):
        event = block("e", Category.EVENT, {"eventType": "follow"}, compatibility=["logic", "flex"])

        result = compatibility.check_compatibility(event, FLEX)

        assert not result.is_valid
        assert "(unsupported context)" in result.reason
        assert result.suggestions == ["Use this block in the logic editor"]
        assert compatibility.check_compatibility(event, LOGIC).is_valid

    def test_declared_context_outside_definition_only(self, compatibility, block):
        event = block("e", Category.EVENT, {"eventType": "follow"}, compatibility=["flex"])

        result = compatibility.check_compatibility(event, FLEX)

        assert not result.is_valid
        assert result.suggestions == ["Use this block in the logic editor"]

    def test_declared_context_narrows_definition(self, compatibility, block, bubble):
        text = block("t", Category.FLEX_CONTENT, {"contentType": "text"}, parent="bubble", compatibility=["flex"])

        assert compatibility.check_compatibility(text, FLEX, [bubble, text]).is_valid
        assert not compatibility.check_compatibility(text, LOGIC, [bubble, text]).is_valid


class TestNestingRules:
    """Required parents, dependencies and sibling limits."""

    def test_content_needs_a_parent(self, compatibility, block):
        text = block("t", Category.FLEX_CONTENT, {"contentType": "text", "text": "Hi"})

        result = compatibility.check_compatibility(text, FLEX)

        assert not result.is_valid
        assert "must be nested inside a Flex container or reply block" in result.reason

    def test_content_needs_a_container_nearby(self, compatibility, block):
        reply = block("rep", Category.REPLY, {"replyType": "flex"})
        text = block("t", Category.FLEX_CONTENT, {"contentType": "text"}, parent="rep")

        result = compatibility.check_compatibility(text, LOGIC, [reply, text])

        assert not result.is_valid
        assert "need a Flex container block nearby" in result.reason

    def test_content_inside_reply_with_container(self, compatibility, block):
        reply = block("rep", Category.REPLY, {"replyType": "flex"})
        card = block("card", Category.FLEX_CONTAINER, {"containerType": "bubble"}, parent="rep")
        text = block("t", Category.FLEX_CONTENT, {"contentType": "text"}, parent="rep")

        result = compatibility.check_compatibility(text, LOGIC, [reply, card, text])

        assert result.is_valid

    def test_content_inside_wrong_parent(self, compatibility, block):
        loop = block("ctl", Category.CONTROL, {"controlType": "loop"})
        card = block("card", Category.FLEX_CONTAINER, {"containerType": "bubble"}, parent="ctl")
        text = block("t", Category.FLEX_CONTENT, {"contentType": "text"}, parent="ctl")

        result = compatibility.check_compatibility(text, FLEX, [loop, card, text])

        assert not result.is_valid
        assert "cannot be nested inside a control block" in result.reason

    def test_layout_may_not_sit_in_a_reply(self, compatibility, block):
        reply = block("rep", Category.REPLY, {"replyType": "flex"})
        card = block("card", Category.FLEX_CONTAINER, {"containerType": "bubble"}, parent="rep")
        sep = block("sep", Category.FLEX_LAYOUT, {"contentType": "separator"}, parent="rep")

        result = compatibility.check_compatibility(sep, LOGIC, [reply, card, sep])

        assert not result.is_valid

    def test_too_many_bubbles_is_a_warning(self, compatibility, block):
        carousel = block("carousel", Category.FLEX_CONTAINER, {"containerType": "carousel"})
        bubbles = [
            block(f"b{i}", Category.FLEX_CONTAINER, {"containerType": "bubble"}, parent="carousel")
            for i in range(11)
        ]

        result = compatibility.check_compatibility(bubbles[0], FLEX, [carousel, *bubbles])

        assert not result.is_valid
        assert result.severity == Severity.WARNING
        assert "At most 10" in result.reason
        assert "found 11" in result.reason

    def test_ten_bubbles_are_fine(self, compatibility, block):
        carousel = block("carousel", Category.FLEX_CONTAINER, {"containerType": "carousel"})
        bubbles = [
            block(f"b{i}", Category.FLEX_CONTAINER, {"containerType": "bubble"}, parent="carousel")
            for i in range(10)
        ]

        assert compatibility.check_compatibility(bubbles[0], FLEX, [carousel, *bubbles]).is_valid

    @pytest.mark.parametrize(
        "child,parent,expected",
        [
            (Category.FLEX_CONTENT, Category.FLEX_CONTAINER, True),
            (Category.FLEX_CONTENT, Category.REPLY, True),
            (Category.FLEX_CONTENT, Category.CONTROL, False),
            (Category.FLEX_LAYOUT, Category.FLEX_CONTAINER, True),
            (Category.FLEX_LAYOUT, Category.REPLY, False),
            (Category.EVENT, Category.CONTROL, True),
            (Category.UNKNOWN, Category.FLEX_CONTAINER, False),
        ],
    )
    def test_can_nest(self, compatibility, child, parent, expected):
        assert compatibility.can_nest(child, parent) is expected


class TestIntegrity:
    def test_category_mismatch_is_an_error(self, compatibility):
        confused = Block.model_validate(
            {"id": "x", "blockType": "reply", "category": "event", "blockData": {"replyType": "text"}}
        )

        result = compatibility.check_integrity(confused)

        assert not result.is_valid
        assert result.severity == Severity.ERROR
        assert "belongs to 'reply'" in result.reason

    def test_unknown_kind_is_a_warning(self, compatibility, block):
        odd = block("r", Category.REPLY, {"replyType": "hologram"})

        result = compatibility.check_integrity(odd)

        assert not result.is_valid
        assert result.severity == Severity.WARNING
        assert "hologram" in result.reason

    def test_unknown_type_is_a_warning(self, compatibility, block):
        result = compatibility.check_integrity(block("x", Category.UNKNOWN))

        assert result.severity == Severity.WARNING

    @pytest.mark.parametrize(
        "category,data,label",
        [
            (Category.SETTING, {"settingType": "saveUserData", "fields": "all"}, "setting data: fields"),
            (Category.FLEX_CONTENT, {"contentType": "text", "properties": "big"}, "Flex content data: properties"),
            (Category.CONTROL, {"controlType": "loop", "count": "many"}, "control data: count"),
        ],
    )
    def test_unreadable_payload_is_a_warning(self, compatibility, block, category, data, label):
        result = compatibility.check_integrity(block("b", category, data))

        assert not result.is_valid
        assert result.severity == Severity.WARNING
        assert result.reason.startswith(f"Block 'b' has unreadable {label}: ")

    def test_default_payloads_are_readable(self, compatibility, registry, block):
        for definition in registry.definitions():
            sample = block(definition.id, definition.category, dict(definition.default_data))
            assert compatibility.check_integrity(sample).is_valid, definition.id

    def test_well_formed_block(self, compatibility, hello_logic):
        assert compatibility.check_integrity(hello_logic[1]).is_valid


class TestSuggestions:
    def test_flex_content_suggestions(self, compatibility):
        suggestions = compatibility.usage_suggestions(Category.FLEX_CONTENT)

        assert "Can be used in the logic editor" in suggestions
        assert "Combine with Flex container blocks" in suggestions
        assert "Place inside a Flex container or reply block" in suggestions

    def test_container_limit_suggestion(self, compatibility):
        assert "At most 10 per container" in compatibility.usage_suggestions(Category.FLEX_CONTAINER)

    def test_unknown_category(self, compatibility):
        assert compatibility.usage_suggestions(Category.UNKNOWN) == ["This block category is not supported"]


class TestValidateWorkspace:
    """Tests for whole-graph folding."""

    def test_hello_logic_is_clean(self, compatibility, hello_logic):
        report = compatibility.validate_workspace(hello_logic, LOGIC)

        assert report.errors == []
        assert report.warnings == []

    def test_empty_logic_graph_gets_hints(self, compatibility):
        report = compatibility.validate_workspace([], LOGIC)

        assert report.is_valid
        assert len(report.warnings) == 2

    def test_logic_blocks_in_flex_graph(self, compatibility, hello_logic):
        report = compatibility.validate_workspace(hello_logic, FLEX)

        assert len(report.errors) == 2
        assert report.errors[0].startswith("Block 1 (event): ")
        assert report.errors[1].startswith("Block 2 (reply): ")

    def test_bubble_graph_is_clean(self, compatibility, bubble_graph):
        report = compatibility.validate_workspace(bubble_graph, FLEX)

        assert report.is_valid
        assert report.warnings == []

    def test_unknown_block_reported(self, compatibility, block, hello_logic):
        report = compatibility.validate_workspace([*hello_logic, block("x", Category.UNKNOWN)], LOGIC)

        assert len(report.errors) == 1
        assert report.errors[0].startswith("Block 3 (unknown): ")
        assert any("unknown type" in w for w in report.warnings)
