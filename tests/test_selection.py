"""
Tests for the Selection Set — membership, order and character totals

These tests validate:
- select/deselect/toggle keep membership and order in step
- Effective order: explicit entries first, block anchors, then the rest
- Dangling and malformed references are tolerated, never raised
- Character totals count items and sub-items independently
- Wire parsing merges groups and migrates a missing order
"""

import pytest

from promptozaurus.core.keys import BlockKey, ItemKey, SubItemKey
from promptozaurus.core.model import ContextBlock
from promptozaurus.core.selection import SelectedContext, SelectionSet


@pytest.fixture
def blocks():
    """Block 1: item 1 "Hello", item 2 with sub-items "foo", "bar". Block 2: item 1 "Other"."""
    first = ContextBlock(id=1, title="B1")
    first.add_item("I1", "Hello")
    first.add_item("I2", "")
    first.add_sub_item(2, "S1", "foo")
    first.add_sub_item(2, "S2", "bar")
    second = ContextBlock(id=2, title="B2")
    second.add_item("Other", "Other")
    return [first, second]


class TestMembership:
    """select, deselect, toggle."""

    def test_select_adds_membership_and_order(self):
        selection = SelectionSet()
        assert selection.select(ItemKey(1, 1)) is True
        assert selection.is_selected(ItemKey(1, 1))
        assert selection.order == [ItemKey(1, 1)]

    def test_select_twice_is_noop(self):
        selection = SelectionSet()
        selection.select(SubItemKey(1, 2, 1))
        assert selection.select(SubItemKey(1, 2, 1)) is False
        assert len(selection) == 1

    def test_block_key_is_only_an_anchor(self):
        """Selecting a BlockKey adds an order entry but no members."""
        selection = SelectionSet()
        selection.select(BlockKey(1))
        assert len(selection) == 0
        assert selection.order == [BlockKey(1)]

    def test_deselect(self):
        selection = SelectionSet.from_order([ItemKey(1, 1), ItemKey(1, 2)])
        assert selection.deselect(ItemKey(1, 1)) is True
        assert selection.members() == [ItemKey(1, 2)]
        assert selection.order == [ItemKey(1, 2)]

    def test_deselect_unknown_returns_false(self):
        assert SelectionSet().deselect(ItemKey(9, 9)) is False

    def test_deselect_last_member_drops_group(self):
        selection = SelectionSet.from_order([ItemKey(1, 1)])
        selection.deselect(ItemKey(1, 1))
        assert selection.contexts == []

    def test_deselect_block_clears_it(self):
        selection = SelectionSet.from_order([ItemKey(1, 1), SubItemKey(1, 2, 1), ItemKey(2, 1)])
        assert selection.deselect(BlockKey(1)) is True
        assert selection.members() == [ItemKey(2, 1)]

    def test_toggle(self):
        selection = SelectionSet()
        assert selection.toggle(ItemKey(1, 1)) is True
        assert selection.toggle(ItemKey(1, 1)) is False
        assert len(selection) == 0

    def test_select_rejects_non_keys(self):
        with pytest.raises(TypeError):
            SelectionSet().select("1-1")


class TestBulk:
    """select_all, clear and per-item helpers."""

    def test_select_all_skips_empty_content(self, blocks):
        """The empty grouping item is not selected; its sub-items are."""
        selection = SelectionSet()
        added = selection.select_all(blocks[:1])
        assert added == 3
        assert selection.members() == [ItemKey(1, 1), SubItemKey(1, 2, 1), SubItemKey(1, 2, 2)]

    def test_select_all_order_is_structural(self, blocks):
        selection = SelectionSet()
        selection.select_all(blocks[:1])
        assert selection.order == [ItemKey(1, 1), SubItemKey(1, 2, 1), SubItemKey(1, 2, 2)]

    def test_select_all_include_empty(self, blocks):
        selection = SelectionSet()
        assert selection.select_all(blocks[:1], include_empty=True) == 4

    def test_clear_given_blocks(self, blocks):
        selection = SelectionSet()
        selection.select_all(blocks)
        assert selection.clear([blocks[0]]) == 3
        assert selection.members() == [ItemKey(2, 1)]

    def test_clear_everything(self, blocks):
        selection = SelectionSet()
        selection.select_all(blocks)
        assert selection.clear() == 4
        assert selection.order == []

    def test_sub_item_helpers(self, blocks):
        selection = SelectionSet.from_order([ItemKey(1, 2)])
        assert selection.select_all_sub_items(blocks[0], 2) == 2
        assert selection.clear_sub_items(1, 2) == 2
        assert selection.members() == [ItemKey(1, 2)]

    def test_discard_item_removes_item_and_sub_items(self):
        selection = SelectionSet.from_order([ItemKey(1, 2), SubItemKey(1, 2, 1), ItemKey(1, 1)])
        assert selection.discard_item(1, 2) is True
        assert selection.members() == [ItemKey(1, 1)]
        assert selection.order == [ItemKey(1, 1)]


class TestOrder:
    """Effective order of selected pieces."""

    def test_order_is_respected(self):
        selection = SelectionSet.from_order([ItemKey(1, 1), SubItemKey(1, 2, 1)])
        selection.reorder([SubItemKey(1, 2, 1), ItemKey(1, 1)])
        assert selection.effective_order() == [SubItemKey(1, 2, 1), ItemKey(1, 1)]

    def test_members_missing_from_order_are_appended(self):
        """A selection never disappears because the order forgot it."""
        selection = SelectionSet.from_order([ItemKey(1, 1), ItemKey(2, 1)])
        selection.reorder([ItemKey(2, 1)])
        assert selection.effective_order() == [ItemKey(2, 1), ItemKey(1, 1)]

    def test_order_entries_for_unselected_are_inert(self):
        selection = SelectionSet.from_order([ItemKey(1, 1)])
        selection.reorder([ItemKey(3, 3), ItemKey(1, 1)])
        assert selection.effective_order() == [ItemKey(1, 1)]

    def test_block_anchor_expands_in_place(self):
        """A BlockKey places that block's remaining members at its position."""
        selection = SelectionSet.from_order([ItemKey(1, 1), ItemKey(1, 2), ItemKey(2, 1)])
        selection.reorder([ItemKey(2, 1), BlockKey(1), ItemKey(1, 2)])
        assert selection.effective_order() == [ItemKey(2, 1), ItemKey(1, 1), ItemKey(1, 2)]

    def test_move_up_and_down(self):
        selection = SelectionSet.from_order([ItemKey(1, 1), ItemKey(1, 2)])
        assert selection.move_up(ItemKey(1, 2)) is True
        assert selection.order == [ItemKey(1, 2), ItemKey(1, 1)]
        assert selection.move_up(ItemKey(1, 2)) is False
        assert selection.move_down(ItemKey(9, 9)) is False

    def test_reorder_dedupes(self):
        selection = SelectionSet()
        selection.reorder([ItemKey(1, 1), ItemKey(1, 1)])
        assert selection.order == [ItemKey(1, 1)]

    def test_reorder_rejects_non_keys(self):
        with pytest.raises(TypeError):
            SelectionSet().reorder(["1-1"])

    def test_reorder_leaves_membership(self):
        selection = SelectionSet.from_order([ItemKey(1, 1)])
        selection.reorder([])
        assert selection.is_selected(ItemKey(1, 1))


class TestTotalChars:
    """Selection character totals."""

    def test_item_and_sub_item(self, blocks):
        selection = SelectionSet.from_order([ItemKey(1, 1), SubItemKey(1, 2, 1)])
        assert selection.total_chars(blocks) == 5 + 3

    def test_item_and_its_sub_item_both_count(self, blocks):
        """Selecting an item and one of its sub-items counts both contents."""
        blocks[0].update_item(2, content="parent")
        selection = SelectionSet.from_order([ItemKey(1, 2), SubItemKey(1, 2, 1)])
        assert selection.total_chars(blocks) == 6 + 3

    def test_dangling_references_count_zero(self, blocks):
        selection = SelectionSet.from_order([ItemKey(1, 1), ItemKey(1, 99), SubItemKey(1, 2, 99), ItemKey(7, 1)])
        assert selection.total_chars(blocks) == 5

    def test_order_does_not_affect_total(self, blocks):
        selection = SelectionSet.from_order([ItemKey(1, 1), ItemKey(2, 1)])
        before = selection.total_chars(blocks)
        selection.reorder([ItemKey(2, 1), ItemKey(1, 1)])
        assert selection.total_chars(blocks) == before


class TestPrune:
    """Removing references to deleted content."""

    def test_prune_dangling(self, blocks):
        selection = SelectionSet.from_order([ItemKey(1, 1), ItemKey(1, 99), SubItemKey(1, 2, 1)])
        blocks[0].remove_sub_item(2, 1)
        assert selection.prune(blocks) == 4
        assert selection.members() == [ItemKey(1, 1)]
        assert selection.order == [ItemKey(1, 1)]

    def test_prune_missing_block(self, blocks):
        selection = SelectionSet.from_order([BlockKey(5), ItemKey(5, 1)])
        selection.prune(blocks)
        assert selection.contexts == []
        assert selection.order == []

    def test_prune_nothing(self, blocks):
        selection = SelectionSet.from_order([ItemKey(1, 1)])
        assert selection.prune(blocks) == 0


class TestWireForm:
    """Parsing and producing selectedContexts / selectionOrder."""

    def test_round_trip(self):
        selection = SelectionSet.from_order([ItemKey(1, 1), SubItemKey(1, 2, 1), BlockKey(2)])
        restored = SelectionSet.from_dict(selection.contexts_to_dict(), selection.order_to_wire())
        assert restored == selection

    def test_wire_shapes(self):
        selection = SelectionSet.from_order([SubItemKey(1, 2, 1), ItemKey(1, 3)])
        assert selection.contexts_to_dict() == [{"blockId": 1, "itemIds": [3], "subItemIds": ["2.1"]}]
        assert selection.order_to_wire() == ["1-2-1", "1-3"]

    def test_malformed_entries_dropped(self):
        selection = SelectionSet.from_dict(
            [{"blockId": 1, "itemIds": [1, "x", True], "subItemIds": ["2.1", "bad", 7]},
             {"blockId": "1"}, "nonsense"],
            ["1-1", "1-x", None, "1-2-1"],
        )
        assert selection.members() == [ItemKey(1, 1), SubItemKey(1, 2, 1)]
        assert selection.order == [ItemKey(1, 1), SubItemKey(1, 2, 1)]

    def test_duplicate_groups_merged(self):
        selection = SelectionSet.from_dict(
            [{"blockId": 1, "itemIds": [1]}, {"blockId": 1, "itemIds": [2, 1]}],
            ["1-1", "1-2"],
        )
        assert len(selection.contexts) == 1
        assert selection.get_context(1).item_ids == [1, 2]

    def test_missing_order_derived_from_membership(self):
        """Files saved before selectionOrder existed get items, then sub-items, per block."""
        selection = SelectionSet.from_dict(
            [{"blockId": 1, "itemIds": [1], "subItemIds": ["2.1"]}, {"blockId": 2, "itemIds": [1]}],
            None,
        )
        assert selection.order == [ItemKey(1, 1), SubItemKey(1, 2, 1), ItemKey(2, 1)]

    def test_missing_lists_default_empty(self):
        context = SelectedContext.from_dict({"blockId": 3})
        assert context.item_ids == []
        assert context.sub_item_ids == []
