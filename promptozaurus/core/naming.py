"""
Default names for new blocks, items and sub-items.

Blocks are numbered by prefix ("Context1", "Context2", ...). Items and
sub-items continue the sequence of their most recently created sibling
("Chapter 1" → "Chapter 2"), so users can keep a naming scheme going
without typing it.
"""

import re
from typing import List, Optional, Sequence

from .model import ContextBlock, ContextItem
from .prompt import PromptBlock

DEFAULT_CONTEXT_PREFIX = "Context"
DEFAULT_PROMPT_PREFIX = "Prompt"
FIRST_ITEM_NAME = "Item1"
FIRST_SUB_ITEM_NAME = "SubItem1"

_TRAILING_NUMBER = re.compile(r"^(.*?)(\d+)$")


def _next_numbered(titles: Sequence[str], prefix: str) -> str:
    pattern = re.compile(r"^" + re.escape(prefix) + r"(\d+)$")
    numbers = []
    for title in titles:
        match = pattern.match(title)
        if match:
            numbers.append(int(match.group(1)))
    return f"{prefix}{max(numbers, default=0) + 1}"


def generate_default_context_block_name(
    blocks: List[ContextBlock],
    prefix: str = DEFAULT_CONTEXT_PREFIX
) -> str:
    """
    Next "<prefix><N>" title for a context block.

    N is one past the largest number among titles of exactly that form;
    other titles are ignored.
    """
    return _next_numbered([b.title for b in blocks], prefix)


def generate_default_prompt_block_name(
    prompts: List[PromptBlock],
    prefix: str = DEFAULT_PROMPT_PREFIX
) -> str:
    return _next_numbered([p.title for p in prompts], prefix)


def _continue_sequence(last_title: str, taken: set) -> str:
    match = _TRAILING_NUMBER.match(last_title)
    if match:
        stem, number = match.group(1), int(match.group(2)) + 1
    else:
        stem, number = f"{last_title} ", 2

    candidate = f"{stem}{number}"
    while candidate in taken:
        number += 1
        candidate = f"{stem}{number}"
    return candidate


def _latest(siblings) -> Optional[object]:
    if not siblings:
        return None
    return max(siblings, key=lambda s: s.id)


def generate_default_item_name(block: ContextBlock) -> str:
    """
    Title for a new item, continuing the highest-id item's title.

    A trailing number is incremented, otherwise " 2" is appended. The
    number keeps going up while the candidate matches an existing title.
    """
    latest = _latest(block.items)
    if latest is None:
        return FIRST_ITEM_NAME
    return _continue_sequence(latest.title, {i.title for i in block.items})


def generate_default_sub_item_name(item: ContextItem) -> str:
    latest = _latest(item.sub_items)
    if latest is None:
        return FIRST_SUB_ITEM_NAME
    return _continue_sequence(latest.title, {s.title for s in item.sub_items})
