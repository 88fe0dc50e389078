"""
Project — Context blocks and prompt blocks edited together

The Project is the unit that is saved and loaded. Deleting context through
it keeps every prompt's selection consistent: references to the deleted
block, item or sub-item are pruned immediately. Deleting directly on a
ContextBlock skips that step; the compiler tolerates the resulting
dangling references.

Loading accepts files from older versions:
- items without subItems
- selections without itemIds/subItemIds
- prompts without selectionOrder (order is derived from membership)
- stale chars values (ignored, content wins)
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import structlog

from .compiler import CompileOptions, CompileResult, PromptCompiler
from .model import ContextBlock, ContextItem, next_id, move_entry, index_of
from .naming import (
    DEFAULT_CONTEXT_PREFIX, DEFAULT_PROMPT_PREFIX,
    generate_default_context_block_name, generate_default_prompt_block_name,
)
from .prompt import PromptBlock

logger = structlog.get_logger(__name__)

DEFAULT_PROJECT_NAME = "New Project"


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class Project:
    """
    Aggregate of context blocks and prompt blocks.

    Ids of both block kinds are allocated as max + 1 within their list.
    """
    name: str = DEFAULT_PROJECT_NAME
    context_blocks: List[ContextBlock] = field(default_factory=list)
    prompt_blocks: List[PromptBlock] = field(default_factory=list)
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    context_prefix: str = DEFAULT_CONTEXT_PREFIX
    prompt_prefix: str = DEFAULT_PROMPT_PREFIX

    def touch(self):
        self.updated_at = _now()

    # -------------------------------------------------------------------------
    # Context blocks
    # -------------------------------------------------------------------------

    def get_context_block(self, block_id: int) -> Optional[ContextBlock]:
        for block in self.context_blocks:
            if block.id == block_id:
                return block
        return None

    def add_context_block(self, title: Optional[str] = None) -> ContextBlock:
        """Append a new empty block, named "Context<N>" when no title is given."""
        if title is None:
            title = generate_default_context_block_name(self.context_blocks, self.context_prefix)
        block = ContextBlock(id=next_id(b.id for b in self.context_blocks), title=title)
        self.context_blocks.append(block)
        self.touch()
        logger.debug("context_block_added", block_id=block.id, title=title)
        return block

    def rename_context_block(self, block_id: int, title: str) -> bool:
        block = self.get_context_block(block_id)
        if block is None:
            return False
        if not isinstance(title, str):
            raise TypeError("title must be a string")
        block.title = title
        self.touch()
        return True

    def remove_context_block(self, block_id: int) -> bool:
        """Delete a block and every prompt selection that referenced it."""
        block = self.get_context_block(block_id)
        if block is None:
            return False
        self.context_blocks = [b for b in self.context_blocks if b.id != block_id]
        for prompt in self.prompt_blocks:
            prompt.selection.clear([block])
        self.touch()
        logger.debug("context_block_removed", block_id=block_id)
        return True

    def move_context_block_up(self, block_id: int) -> bool:
        return move_entry(self.context_blocks, block_id, -1)

    def move_context_block_down(self, block_id: int) -> bool:
        return move_entry(self.context_blocks, block_id, 1)

    def remove_item(self, block_id: int, item_id: int) -> bool:
        """Delete an item, pruning it and its sub-items from every prompt."""
        block = self.get_context_block(block_id)
        if block is None or not block.remove_item(item_id):
            return False
        for prompt in self.prompt_blocks:
            prompt.selection.discard_item(block_id, item_id)
        self.touch()
        return True

    def remove_sub_item(self, block_id: int, item_id: int, sub_item_id: int) -> bool:
        block = self.get_context_block(block_id)
        if block is None or not block.remove_sub_item(item_id, sub_item_id):
            return False
        for prompt in self.prompt_blocks:
            prompt.selection.prune(self.context_blocks)
        self.touch()
        return True

    def import_context_block(self, data: Dict[str, Any]) -> ContextBlock:
        """
        Add a block from exported data.

        The block gets a fresh id and its items are renumbered 1..n, so the
        import never collides with existing blocks.
        """
        if not isinstance(data, dict):
            raise TypeError("block data must be a mapping")
        raw_items = data.get("items")
        raw_items = [r for r in raw_items if isinstance(r, dict)] if isinstance(raw_items, list) else []
        items = [
            ContextItem.from_dict({**raw, "id": index})
            for index, raw in enumerate(raw_items, start=1)
        ]

        block = ContextBlock(
            id=next_id(b.id for b in self.context_blocks),
            title=data.get("title") or generate_default_context_block_name(
                self.context_blocks, self.context_prefix),
            items=items,
        )
        self.context_blocks.append(block)
        self.touch()
        logger.debug("context_block_imported", block_id=block.id, items=len(items))
        return block

    # -------------------------------------------------------------------------
    # Prompt blocks
    # -------------------------------------------------------------------------

    def get_prompt_block(self, prompt_id: int) -> Optional[PromptBlock]:
        for prompt in self.prompt_blocks:
            if prompt.id == prompt_id:
                return prompt
        return None

    def add_prompt_block(self, title: Optional[str] = None, template: str = "") -> PromptBlock:
        if title is None:
            title = generate_default_prompt_block_name(self.prompt_blocks, self.prompt_prefix)
        prompt = PromptBlock(
            id=next_id(p.id for p in self.prompt_blocks),
            title=title,
            template=template,
        )
        self.prompt_blocks.append(prompt)
        self.touch()
        logger.debug("prompt_block_added", prompt_id=prompt.id, title=title)
        return prompt

    def remove_prompt_block(self, prompt_id: int) -> bool:
        if index_of(self.prompt_blocks, prompt_id) == -1:
            return False
        self.prompt_blocks = [p for p in self.prompt_blocks if p.id != prompt_id]
        self.touch()
        return True

    def move_prompt_block_up(self, prompt_id: int) -> bool:
        return move_entry(self.prompt_blocks, prompt_id, -1)

    def move_prompt_block_down(self, prompt_id: int) -> bool:
        return move_entry(self.prompt_blocks, prompt_id, 1)

    # -------------------------------------------------------------------------
    # Compilation
    # -------------------------------------------------------------------------

    def compile(
        self,
        prompt_id: int,
        wrap_with_tags: bool = False,
        options: Optional[CompileOptions] = None
    ) -> Optional[CompileResult]:
        """Compile one prompt against this project's blocks; None if it does not exist."""
        prompt = self.get_prompt_block(prompt_id)
        if prompt is None:
            return None
        return PromptCompiler(options).compile(prompt, self.context_blocks, wrap_with_tags)

    def total_chars(self) -> int:
        return sum(block.total_chars for block in self.context_blocks)

    # -------------------------------------------------------------------------
    # Serialization
    # -------------------------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "projectName": self.name,
            "contextBlocks": [b.to_dict() for b in self.context_blocks],
            "promptBlocks": [p.to_dict() for p in self.prompt_blocks],
        }
        if self.created_at:
            data["createdAt"] = self.created_at
        if self.updated_at:
            data["updatedAt"] = self.updated_at
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Project':
        """Load a project, migrating fields older files lack."""
        if not isinstance(data, dict):
            raise TypeError("project data must be a mapping")

        raw_blocks = data.get("contextBlocks")
        raw_prompts = data.get("promptBlocks")
        project = cls(
            name=data.get("projectName") or DEFAULT_PROJECT_NAME,
            context_blocks=[
                ContextBlock.from_dict(b)
                for b in (raw_blocks if isinstance(raw_blocks, list) else [])
            ],
            prompt_blocks=[
                PromptBlock.from_dict(p)
                for p in (raw_prompts if isinstance(raw_prompts, list) else [])
            ],
            created_at=data.get("createdAt"),
            updated_at=data.get("updatedAt"),
        )
        logger.debug("project_loaded", name=project.name,
                     context_blocks=len(project.context_blocks),
                     prompt_blocks=len(project.prompt_blocks))
        return project
