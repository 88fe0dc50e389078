"""
Tests for Project — blocks and prompts edited together

These tests validate:
- Default block names and id allocation
- Deleting context prunes every prompt's selection
- Importing a block renumbers it
- Serialization round trip and migration of older files
"""

import pytest

from promptozaurus.core.keys import BlockKey, ItemKey, SubItemKey
from promptozaurus.core.project import Project


class TestBlocks:
    """Context block management."""

    def test_default_names(self):
        project = Project()
        assert project.add_context_block().title == "Context1"
        assert project.add_context_block().title == "Context2"
        assert project.add_prompt_block().title == "Prompt1"

    def test_configured_prefix(self):
        project = Project(context_prefix="Ctx")
        assert project.add_context_block().title == "Ctx1"

    def test_add_touches_project(self):
        project = Project()
        project.add_context_block("Notes")
        assert project.updated_at is not None

    def test_rename(self):
        project = Project()
        block = project.add_context_block("Old")
        assert project.rename_context_block(block.id, "New") is True
        assert project.rename_context_block(99, "x") is False
        assert block.title == "New"

    def test_move_blocks(self):
        project = Project()
        project.add_context_block("A")
        project.add_context_block("B")
        assert project.move_context_block_down(1) is True
        assert [b.title for b in project.context_blocks] == ["B", "A"]
        assert project.move_context_block_down(1) is False


class TestCascadingDeletes:
    """Deleting context through the project keeps selections consistent."""

    def test_remove_block_prunes_selections(self, sample_env):
        project = sample_env.project
        prompt = project.get_prompt_block(1)
        prompt.selection.select(BlockKey(1))
        prompt.selection.select(ItemKey(2, 1))

        assert project.remove_context_block(1) is True
        assert prompt.selection.members() == [ItemKey(2, 1)]
        assert prompt.selection.order == [ItemKey(2, 1)]

    def test_remove_item_prunes_item_and_sub_items(self, sample_env):
        project = sample_env.project
        prompt = project.get_prompt_block(1)
        prompt.selection.select(ItemKey(1, 2))

        assert project.remove_item(1, 2) is True
        assert prompt.selection.members() == [ItemKey(1, 1)]

    def test_remove_sub_item_prunes(self, sample_env):
        project = sample_env.project
        assert project.remove_sub_item(1, 2, 1) is True
        prompt = project.get_prompt_block(1)
        assert prompt.selection.order == [ItemKey(1, 1)]
        assert project.compile(1).context_chars == 5

    def test_remove_missing(self, sample_env):
        project = sample_env.project
        assert project.remove_context_block(99) is False
        assert project.remove_item(1, 99) is False
        assert project.remove_sub_item(1, 2, 99) is False
        assert project.remove_prompt_block(99) is False


class TestImport:
    """Importing an exported block."""

    def test_fresh_ids(self, sample_env):
        project = sample_env.project
        block = project.import_context_block({
            "id": 1,
            "title": "Imported",
            "items": [{"id": 7, "content": "x"}, "junk", {"id": 3, "content": "yz", "subItems": []}],
        })
        assert block.id == 3
        assert [i.id for i in block.items] == [1, 2]
        assert block.total_chars == 3

    def test_untitled_import_gets_default_name(self):
        project = Project()
        assert project.import_context_block({"items": []}).title == "Context1"

    def test_non_mapping_rejected(self):
        with pytest.raises(TypeError):
            Project().import_context_block(["not", "a", "block"])


class TestCompile:
    def test_compile_scenario(self, sample_env):
        result = sample_env.project.compile(1)
        assert result.compiled == "Context: Hello\n\nfoo\nDone"
        assert result.context_chars == 8

    def test_compile_missing_prompt(self, sample_env):
        assert sample_env.project.compile(99) is None

    def test_total_chars(self, sample_env):
        """Notes (5 + 3 + 3) plus Extra (10)."""
        assert sample_env.project.total_chars() == 21


class TestSerialization:
    """to_dict / from_dict and migration."""

    def test_round_trip(self, sample_env):
        project = sample_env.project
        restored = Project.from_dict(project.to_dict())
        assert restored.to_dict() == project.to_dict()

    def test_camel_case_keys(self, sample_env):
        data = sample_env.project.to_dict()
        assert set(data) >= {"projectName", "contextBlocks", "promptBlocks"}
        prompt = data["promptBlocks"][0]
        assert prompt["selectedContexts"] == [{"blockId": 1, "itemIds": [1], "subItemIds": ["2.1"]}]
        assert prompt["selectionOrder"] == ["1-1", "1-2-1"]

    def test_legacy_file(self):
        """Old files lack subItems, subItemIds and selectionOrder, and carry stale chars."""
        data = {
            "projectName": "Old",
            "contextBlocks": [{
                "id": 1,
                "title": "Legacy",
                "items": [{"id": 1, "title": "A", "content": "abc", "chars": 50},
                          {"id": 2, "title": "B", "content": "de"}],
            }],
            "promptBlocks": [{
                "id": 1,
                "title": "P",
                "template": "[КОНТЕКСТ]",
                "selectedContexts": [{"blockId": 1, "itemIds": [2, 1]}],
            }],
        }
        project = Project.from_dict(data)
        prompt = project.get_prompt_block(1)

        assert project.context_blocks[0].total_chars == 5
        assert prompt.selection.order == [ItemKey(1, 2), ItemKey(1, 1)]
        assert project.compile(1).compiled == "de\n\nabc"

    def test_missing_name_defaults(self):
        assert Project.from_dict({}).name == "New Project"

    def test_non_mapping_rejected(self):
        with pytest.raises(TypeError):
            Project.from_dict([])

    def test_unparsable_keys_load_as_dangling(self):
        """Keys with non-ASCII digits are dropped instead of failing the load."""
        project = Project.from_dict({
            "contextBlocks": [{"id": 1, "title": "B", "items": [{"id": 1, "content": "abc"}]}],
            "promptBlocks": [{
                "id": 1,
                "template": "{{context}}",
                "selectedContexts": [{"blockId": 1, "itemIds": [1], "subItemIds": ["1.²"]}],
                "selectionOrder": ["1-²", "1-1"],
            }],
        })
        prompt = project.get_prompt_block(1)
        assert prompt.selection.order == [ItemKey(1, 1)]
        assert project.compile(1).compiled == "abc"

    @pytest.mark.parametrize("data", [
        {"contextBlocks": [None]},
        {"contextBlocks": [{"id": 1, "items": ["text"]}]},
        {"contextBlocks": [{"id": 1, "items": [{"id": 1, "subItems": [7]}]}]},
        {"promptBlocks": [3]},
    ])
    def test_non_mapping_elements_rejected(self, data):
        with pytest.raises(TypeError, match="must be a mapping"):
            Project.from_dict(data)
