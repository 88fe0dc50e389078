"""
Core — Context composition and prompt compilation

Pure in-memory data and algorithms:
- Model: Block → Item → SubItem hierarchy and character accounting
- Keys: Typed selection identifiers, parsed once from wire strings
- Selection: Which pieces a prompt includes, and their order
- Prompt: Template plus selection
- Project: Aggregate with cascading deletes and legacy migration
- Compiler: Selection + template → final text and statistics
- Splitter: Four strategies for breaking up oversized content
- Naming: Default titles for new blocks, items and sub-items
"""

from .keys import (
    BlockKey, ItemKey, SubItemKey, SelectionKey,
    parse_order_key, parse_sub_item_ref, format_sub_item_ref,
)
from .model import ContextBlock, ContextItem, ContextSubItem, total_chars, next_id
from .selection import SelectedContext, SelectionSet
from .prompt import PromptBlock
from .compiler import (
    CompileOptions, CompileResult, CompiledPiece, PromptCompiler, compile_prompt,
    PLACEHOLDER, LEGACY_PLACEHOLDER,
)
from .splitter import (
    EndingType, SplitMethod, SplitOptions, split_content,
    split_into_equal_parts, split_by_delimiter, split_by_paragraphs, split_by_pattern,
)
from .naming import (
    generate_default_context_block_name, generate_default_prompt_block_name,
    generate_default_item_name, generate_default_sub_item_name,
)
from .project import Project

__all__ = [
    # Keys
    "BlockKey", "ItemKey", "SubItemKey", "SelectionKey",
    "parse_order_key", "parse_sub_item_ref", "format_sub_item_ref",
    # Model
    "ContextBlock", "ContextItem", "ContextSubItem", "total_chars", "next_id",
    # Selection
    "SelectedContext", "SelectionSet",
    "PromptBlock",
    # Compiler
    "CompileOptions", "CompileResult", "CompiledPiece", "PromptCompiler", "compile_prompt",
    "PLACEHOLDER", "LEGACY_PLACEHOLDER",
    # Splitter
    "EndingType", "SplitMethod", "SplitOptions", "split_content",
    "split_into_equal_parts", "split_by_delimiter", "split_by_paragraphs", "split_by_pattern",
    # Naming
    "generate_default_context_block_name", "generate_default_prompt_block_name",
    "generate_default_item_name", "generate_default_sub_item_name",
    "Project",
]
