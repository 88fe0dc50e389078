"""
Selection keys — Typed identifiers for selected context

A prompt references context at three granularities:
- BlockKey:   a whole block              wire: "3"
- ItemKey:    one item of a block        wire: "3-7"
- SubItemKey: one sub-item of an item    wire: "3-7-2"

Per-block membership lists reference sub-items with the composite
"<itemId>.<subItemId>" string ("7.2").

Wire strings are parsed once, here. Everything downstream works with the
frozen dataclasses. Anything that does not parse becomes None and is
treated as a dangling reference by callers.
"""

from dataclasses import dataclass
from typing import Optional, Tuple, Union


@dataclass(frozen=True)
class BlockKey:
    """Every selected piece of one block, placed at a single position."""
    block_id: int

    def to_wire(self) -> str:
        return str(self.block_id)


@dataclass(frozen=True)
class ItemKey:
    """An item's own content."""
    block_id: int
    item_id: int

    def to_wire(self) -> str:
        return f"{self.block_id}-{self.item_id}"


@dataclass(frozen=True)
class SubItemKey:
    """A sub-item's content."""
    block_id: int
    item_id: int
    sub_item_id: int

    @property
    def pair(self) -> Tuple[int, int]:
        return (self.item_id, self.sub_item_id)

    def to_wire(self) -> str:
        return f"{self.block_id}-{self.item_id}-{self.sub_item_id}"


SelectionKey = Union[BlockKey, ItemKey, SubItemKey]


def is_number(value: str) -> bool:
    """True only for ASCII digits; str.isdigit() also accepts superscripts."""
    return value.isascii() and value.isdigit()


def _to_int(value: str) -> Optional[int]:
    value = value.strip()
    if not is_number(value):
        return None
    return int(value)


def parse_order_key(raw) -> Optional[SelectionKey]:
    """
    Parse a selection-order entry.

    Args:
        raw: "3", "3-7" or "3-7-2" (an int is accepted as a block id)

    Returns:
        Typed key, or None when the entry is malformed
    """
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return BlockKey(raw) if raw > 0 else None
    if not isinstance(raw, str) or not raw:
        return None

    numbers = [_to_int(part) for part in raw.split("-")]
    if any(n is None for n in numbers):
        return None

    if len(numbers) == 1:
        return BlockKey(numbers[0])
    if len(numbers) == 2:
        return ItemKey(numbers[0], numbers[1])
    if len(numbers) == 3:
        return SubItemKey(numbers[0], numbers[1], numbers[2])
    return None


def parse_sub_item_ref(raw) -> Optional[Tuple[int, int]]:
    """
    Parse a membership sub-item reference "<itemId>.<subItemId>".

    Returns:
        (item_id, sub_item_id), or None when malformed
    """
    if not isinstance(raw, str):
        return None
    parts = raw.split(".")
    if len(parts) != 2:
        return None
    item_id, sub_item_id = _to_int(parts[0]), _to_int(parts[1])
    if item_id is None or sub_item_id is None:
        return None
    return (item_id, sub_item_id)


def format_sub_item_ref(item_id: int, sub_item_id: int) -> str:
    """Format a membership sub-item reference."""
    return f"{item_id}.{sub_item_id}"
