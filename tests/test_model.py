"""
Tests for the context model — Block → Item → SubItem

These tests validate:
- The chars invariant (always the content length)
- The block total rule (grouping items count only their sub-items)
- Id allocation, merge-patch updates, moves and swaps
- apply_split turning parts into items or sub-items
- TypeError on contract violations, False/None on lookup misses
"""

import pytest

from promptozaurus.core.model import (
    ContextBlock, ContextItem, ContextSubItem,
    DEFAULT_ITEM_TITLE, DEFAULT_SUB_ITEM_TITLE,
    next_id, total_chars,
)


@pytest.fixture
def block():
    """Block with a leaf item (10 chars) and a grouping item (3 + 4 chars)."""
    block = ContextBlock(id=1, title="Notes")
    block.add_item("Leaf", "0123456789")
    parent = block.add_item("Parent", "stale parent content")
    block.add_sub_item(parent.id, "A", "abc")
    block.add_sub_item(parent.id, "B", "defg")
    return block


class TestCharsInvariant:
    """chars always equals the content length."""

    def test_item_chars(self):
        item = ContextItem(id=1, content="Hello")
        assert item.chars == 5

    def test_chars_follows_content_updates(self, block):
        """Updating content changes chars with no extra step."""
        block.update_item(1, content="xy")
        assert block.get_item(1).chars == 2

    def test_stale_stored_chars_ignored(self):
        """Loaded chars values are recomputed from content."""
        item = ContextItem.from_dict({"id": 1, "content": "abc", "chars": 999})
        assert item.chars == 3
        assert item.to_dict()["chars"] == 3


class TestBlockTotal:
    """Canonical block character total."""

    def test_block_total_rule(self, block):
        """Leaf 10 + sub-items 3 and 4 = 17; the parent's own content is ignored."""
        assert total_chars(block) == 17
        assert block.total_chars == 17

    def test_empty_block(self):
        assert total_chars(ContextBlock(id=1)) == 0

    def test_item_losing_sub_items_counts_itself(self, block):
        """Once every sub-item is removed, the item's own content counts again."""
        block.remove_sub_item(2, 1)
        block.remove_sub_item(2, 2)
        assert block.total_chars == 10 + len("stale parent content")


class TestIds:
    """Per-scope id allocation."""

    def test_next_id(self):
        assert next_id([]) == 1
        assert next_id([1, 5, 3]) == 6

    def test_ids_continue_after_removal(self, block):
        """Ids are max + 1, so a removed middle id is not reused by new items."""
        block.add_item("Third")
        block.remove_item(2)
        assert block.add_item("Fourth").id == 4

    def test_add_items_bulk(self):
        """Bulk creation allocates distinct ids and titles."""
        block = ContextBlock(id=1)
        created = block.add_items(["a", "b", "c"], title_prefix="Part")
        assert [i.id for i in created] == [1, 2, 3]
        assert [i.title for i in created] == ["Part 1", "Part 2", "Part 3"]

    def test_default_titles(self):
        block = ContextBlock(id=1)
        item = block.add_item()
        sub = block.add_sub_item(item.id)
        assert item.title == DEFAULT_ITEM_TITLE
        assert sub.title == DEFAULT_SUB_ITEM_TITLE


class TestLookupMisses:
    """Unknown ids return False/None."""

    def test_add_sub_item_to_missing_item(self, block):
        assert block.add_sub_item(99, "x", "y") is None

    def test_update_missing(self, block):
        assert block.update_item(99, title="x") is False
        assert block.update_sub_item(1, 99, content="x") is False

    def test_remove_missing(self, block):
        assert block.remove_item(99) is False
        assert block.remove_sub_item(99, 1) is False
        assert block.remove_sub_item(2, 99) is False


class TestContractViolations:
    """Wrong types raise TypeError."""

    def test_non_string_content(self):
        with pytest.raises(TypeError):
            ContextItem(id=1, content=42)

    def test_missing_id(self):
        with pytest.raises(TypeError):
            ContextSubItem(id=None)

    def test_bool_is_not_an_id(self):
        with pytest.raises(TypeError):
            ContextBlock(id=True)

    def test_update_with_non_string(self, block):
        with pytest.raises(TypeError):
            block.update_item(1, content=["not", "text"])

    def test_update_sub_items_type_checked(self, block):
        with pytest.raises(TypeError):
            block.update_item(1, sub_items=["not a sub-item"])


class TestUpdates:
    """Merge-patch updates leave omitted fields alone."""

    def test_title_only(self, block):
        block.update_item(1, title="Renamed")
        item = block.get_item(1)
        assert item.title == "Renamed"
        assert item.content == "0123456789"

    def test_replace_sub_items(self, block):
        block.update_item(2, sub_items=[ContextSubItem(id=1, content="z")])
        assert block.total_chars == 10 + 1

    def test_update_sub_item(self, block):
        assert block.update_sub_item(2, 1, content="abcdef") is True
        assert block.total_chars == 20


class TestReordering:
    """Adjacent moves and swaps."""

    def test_move_item_down(self, block):
        assert block.move_item_down(1) is True
        assert [i.id for i in block.items] == [2, 1]

    def test_move_at_boundary_is_noop(self, block):
        assert block.move_item_up(1) is False
        assert block.move_item_down(2) is False
        assert [i.id for i in block.items] == [1, 2]

    def test_move_sub_item(self, block):
        assert block.move_sub_item_up(2, 2) is True
        assert [s.id for s in block.get_item(2).sub_items] == [2, 1]

    def test_swap_items(self, block):
        block.add_item("Third")
        assert block.swap_items(1, 3) is True
        assert [i.id for i in block.items] == [3, 2, 1]

    def test_swap_missing(self, block):
        assert block.swap_items(1, 99) is False
        assert block.swap_sub_items(2, 1, 99) is False


class TestApplySplit:
    """Turning split parts into items or sub-items."""

    def test_parts_become_items(self, block):
        """Parts are appended as items titled after the source."""
        created = block.apply_split(1, ["01234", "56789"])
        assert [c.title for c in created] == ["Leaf (Part 1)", "Leaf (Part 2)"]
        assert [c.id for c in created] == [3, 4]
        assert block.get_item(1).content == "0123456789"

    def test_replace_original(self, block):
        """Without keep_original, part 1 becomes the source content."""
        created = block.apply_split(1, ["01234", "56789"], keep_original=False)
        assert block.get_item(1).content == "01234"
        assert [c.title for c in created] == ["Leaf (Part 2)"]

    def test_parts_as_sub_items(self, block):
        created = block.apply_split(1, ["a", "b"], create_sub_items=True)
        assert all(isinstance(c, ContextSubItem) for c in created)
        assert len(block.get_item(1).sub_items) == 2

    def test_split_sub_item(self, block):
        """Splitting a sub-item adds sibling sub-items."""
        created = block.apply_split(2, ["ab", "c"], sub_item_id=1, part_label="Chunk")
        assert [c.title for c in created] == ["A (Chunk 1)", "A (Chunk 2)"]
        assert [s.id for s in block.get_item(2).sub_items] == [1, 2, 3, 4]

    def test_single_part_replaces_content(self, block):
        assert block.apply_split(1, ["only"]) == []
        assert block.get_item(1).content == "only"

    def test_missing_source(self, block):
        assert block.apply_split(99, ["a", "b"]) == []
        assert block.apply_split(2, ["a", "b"], sub_item_id=99) == []


class TestSerialization:
    """Wire form of blocks."""

    def test_round_trip(self, block):
        restored = ContextBlock.from_dict(block.to_dict())
        assert restored == block

    def test_missing_sub_items_defaults_empty(self):
        """Older files without subItems load as leaf items."""
        block = ContextBlock.from_dict({"id": 1, "title": "Old", "items": [{"id": 1, "content": "x"}]})
        assert block.get_item(1).sub_items == []

    def test_sub_items_key_is_camel_case(self, block):
        assert "subItems" in block.to_dict()["items"][1]
