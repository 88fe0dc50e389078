"""
Selection Set — Which context a prompt includes, and in what order

Two views of the same selection:
- membership: one SelectedContext per block, listing selected item ids and
  (item_id, sub_item_id) pairs
- order: a flat list of typed keys across all blocks, chosen by the user

Order is independent of membership. An order entry for something no longer
selected is inert, and a member missing from the order is still included
(appended after the ordered entries), so order never hides a selection.

A BlockKey in the order is an anchor: it places every selected piece of that
block which has no explicit order entry of its own at that position.

Wire strings ("3-7-2", "7.2") are parsed once in from_dict; malformed
entries are dropped with a warning and never reach this module's logic.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple

import structlog

from .keys import (
    BlockKey, ItemKey, SubItemKey, SelectionKey,
    parse_order_key, parse_sub_item_ref, format_sub_item_ref,
)
from .model import ContextBlock

logger = structlog.get_logger(__name__)


@dataclass
class SelectedContext:
    """Selected items and sub-items of one block."""
    block_id: int
    item_ids: List[int] = field(default_factory=list)
    sub_item_ids: List[Tuple[int, int]] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.item_ids and not self.sub_item_ids

    def keys(self) -> List[SelectionKey]:
        """Members as typed keys: items first, then sub-items."""
        result: List[SelectionKey] = [ItemKey(self.block_id, i) for i in self.item_ids]
        result.extend(SubItemKey(self.block_id, i, s) for i, s in self.sub_item_ids)
        return result

    def to_dict(self) -> Dict[str, Any]:
        return {
            "blockId": self.block_id,
            "itemIds": list(self.item_ids),
            "subItemIds": [format_sub_item_ref(i, s) for i, s in self.sub_item_ids],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Optional['SelectedContext']:
        """Parse one membership group; None when the block id is unusable."""
        block_id = data.get("blockId")
        if isinstance(block_id, bool) or not isinstance(block_id, int):
            logger.warning("malformed_selected_context", block_id=block_id)
            return None

        item_ids = []
        raw_items = data.get("itemIds")
        for raw in raw_items if isinstance(raw_items, list) else []:
            if isinstance(raw, bool) or not isinstance(raw, int):
                logger.warning("malformed_item_id", block_id=block_id, value=raw)
                continue
            if raw not in item_ids:
                item_ids.append(raw)

        sub_item_ids = []
        raw_subs = data.get("subItemIds")
        for raw in raw_subs if isinstance(raw_subs, list) else []:
            pair = parse_sub_item_ref(raw)
            if pair is None:
                logger.warning("malformed_sub_item_id", block_id=block_id, value=raw)
                continue
            if pair not in sub_item_ids:
                sub_item_ids.append(pair)

        return cls(block_id=block_id, item_ids=item_ids, sub_item_ids=sub_item_ids)


def _index_blocks(blocks: Iterable[ContextBlock]) -> Dict[int, ContextBlock]:
    return {block.id: block for block in blocks}


def _resolves(key: SelectionKey, blocks_by_id: Dict[int, ContextBlock]) -> bool:
    block = blocks_by_id.get(key.block_id)
    if block is None:
        return False
    if isinstance(key, ItemKey):
        return block.get_item(key.item_id) is not None
    if isinstance(key, SubItemKey):
        return block.get_sub_item(key.item_id, key.sub_item_id) is not None
    return True


class SelectionSet:
    """
    Membership plus order for one prompt.

    Lookup misses are never errors: unknown keys make select/deselect/move
    return False, and dangling references are skipped by every reader.
    """

    def __init__(
        self,
        contexts: Optional[List[SelectedContext]] = None,
        order: Optional[List[SelectionKey]] = None
    ):
        self.contexts: List[SelectedContext] = list(contexts or [])
        self.order: List[SelectionKey] = list(order or [])

    def __repr__(self):
        return f"SelectionSet(contexts={self.contexts!r}, order={self.order!r})"

    def __eq__(self, other):
        if not isinstance(other, SelectionSet):
            return NotImplemented
        return self.contexts == other.contexts and self.order == other.order

    def __len__(self):
        return sum(len(c.item_ids) + len(c.sub_item_ids) for c in self.contexts)

    # -------------------------------------------------------------------------
    # Membership
    # -------------------------------------------------------------------------

    def get_context(self, block_id: int) -> Optional[SelectedContext]:
        for context in self.contexts:
            if context.block_id == block_id:
                return context
        return None

    def _ensure_context(self, block_id: int) -> SelectedContext:
        context = self.get_context(block_id)
        if context is None:
            context = SelectedContext(block_id=block_id)
            self.contexts.append(context)
        return context

    def _drop_empty_contexts(self):
        self.contexts = [c for c in self.contexts if not c.is_empty]

    def members(self) -> List[SelectionKey]:
        """Every selected piece in membership order."""
        result: List[SelectionKey] = []
        for context in self.contexts:
            result.extend(context.keys())
        return result

    def is_selected(self, key: SelectionKey) -> bool:
        context = self.get_context(key.block_id)
        if context is None:
            return False
        if isinstance(key, ItemKey):
            return key.item_id in context.item_ids
        if isinstance(key, SubItemKey):
            return key.pair in context.sub_item_ids
        return not context.is_empty

    def select(self, key: SelectionKey) -> bool:
        """
        Select a piece and append it to the order.

        A BlockKey only adds an order anchor for that block.

        Returns:
            True when the selection or order changed
        """
        changed = False
        if isinstance(key, ItemKey):
            context = self._ensure_context(key.block_id)
            if key.item_id not in context.item_ids:
                context.item_ids.append(key.item_id)
                changed = True
        elif isinstance(key, SubItemKey):
            context = self._ensure_context(key.block_id)
            if key.pair not in context.sub_item_ids:
                context.sub_item_ids.append(key.pair)
                changed = True
        elif not isinstance(key, BlockKey):
            raise TypeError(f"expected a selection key, got {type(key).__name__}")

        if key not in self.order:
            self.order.append(key)
            changed = True

        if changed:
            logger.debug("selected", key=key.to_wire())
        return changed

    def deselect(self, key: SelectionKey) -> bool:
        """
        Remove a piece from membership and order.

        A BlockKey clears the whole block.
        """
        if isinstance(key, BlockKey):
            return self._clear_block(key.block_id)

        context = self.get_context(key.block_id)
        changed = False
        if context is not None:
            if isinstance(key, ItemKey) and key.item_id in context.item_ids:
                context.item_ids.remove(key.item_id)
                changed = True
            elif isinstance(key, SubItemKey) and key.pair in context.sub_item_ids:
                context.sub_item_ids.remove(key.pair)
                changed = True

        if key in self.order:
            self.order.remove(key)
            changed = True

        self._drop_empty_contexts()
        if changed:
            logger.debug("deselected", key=key.to_wire())
        return changed

    def toggle(self, key: SelectionKey) -> bool:
        """Flip a piece's selection; returns the new state."""
        if self.is_selected(key):
            self.deselect(key)
            return False
        self.select(key)
        return True

    # -------------------------------------------------------------------------
    # Bulk operations
    # -------------------------------------------------------------------------

    def select_all(self, blocks: Iterable[ContextBlock], include_empty: bool = False) -> int:
        """
        Select every item and sub-item of the given blocks.

        Newly selected pieces are appended to the order in structural
        (top-to-bottom) sequence. Empty content is skipped unless
        include_empty is set.

        Returns:
            Number of newly selected pieces
        """
        added = 0
        for block in blocks:
            for item in block.items:
                if item.content or include_empty:
                    added += self._select_new(ItemKey(block.id, item.id))
                for sub in item.sub_items:
                    if sub.content or include_empty:
                        added += self._select_new(SubItemKey(block.id, item.id, sub.id))
        return added

    def _select_new(self, key: SelectionKey) -> int:
        if self.is_selected(key):
            return 0
        self.select(key)
        return 1

    def clear(self, blocks: Optional[Iterable[ContextBlock]] = None) -> int:
        """
        Remove membership and order entries for the given blocks.

        Args:
            blocks: Blocks to clear (everything when None)

        Returns:
            Number of pieces deselected
        """
        if blocks is None:
            removed = len(self)
            self.contexts = []
            self.order = []
            return removed

        before = len(self)
        for block in blocks:
            self._clear_block(block.id)
        return before - len(self)

    def _clear_block(self, block_id: int) -> bool:
        before = (len(self.contexts), len(self.order))
        self.contexts = [c for c in self.contexts if c.block_id != block_id]
        self.order = [k for k in self.order if k.block_id != block_id]
        return (len(self.contexts), len(self.order)) != before

    def select_all_sub_items(self, block: ContextBlock, item_id: int, include_empty: bool = False) -> int:
        """Select every sub-item of one item; returns the number added."""
        item = block.get_item(item_id)
        if item is None:
            return 0
        added = 0
        for sub in item.sub_items:
            if sub.content or include_empty:
                added += self._select_new(SubItemKey(block.id, item_id, sub.id))
        return added

    def clear_sub_items(self, block_id: int, item_id: int) -> int:
        """Deselect every sub-item of one item, leaving the item itself."""
        removed = 0
        context = self.get_context(block_id)
        if context is not None:
            keep = [pair for pair in context.sub_item_ids if pair[0] != item_id]
            removed = len(context.sub_item_ids) - len(keep)
            context.sub_item_ids = keep
        self.order = [
            k for k in self.order
            if not (isinstance(k, SubItemKey) and k.block_id == block_id and k.item_id == item_id)
        ]
        self._drop_empty_contexts()
        return removed

    def discard_item(self, block_id: int, item_id: int) -> bool:
        """Forget an item and all of its sub-items (used when the item is deleted)."""
        changed = self.clear_sub_items(block_id, item_id) > 0
        return self.deselect(ItemKey(block_id, item_id)) or changed

    # -------------------------------------------------------------------------
    # Order
    # -------------------------------------------------------------------------

    def _move(self, key: SelectionKey, offset: int) -> bool:
        if key not in self.order:
            return False
        index = self.order.index(key)
        target = index + offset
        if target < 0 or target >= len(self.order):
            return False
        self.order[index], self.order[target] = self.order[target], self.order[index]
        return True

    def move_up(self, key: SelectionKey) -> bool:
        return self._move(key, -1)

    def move_down(self, key: SelectionKey) -> bool:
        return self._move(key, 1)

    def reorder(self, keys: List[SelectionKey]):
        """Replace the order; membership is untouched."""
        for key in keys:
            if not isinstance(key, (BlockKey, ItemKey, SubItemKey)):
                raise TypeError(f"expected a selection key, got {type(key).__name__}")
        deduped: List[SelectionKey] = []
        for key in keys:
            if key not in deduped:
                deduped.append(key)
        self.order = deduped

    def effective_order(self) -> List[SelectionKey]:
        """
        Concatenation order of selected pieces.

        Ordered entries that are members come first (BlockKey anchors expand
        in place), then any member the order does not mention. Entries for
        deselected content are skipped.
        """
        members = self.members()
        member_set = set(members)
        explicit = {k for k in self.order if not isinstance(k, BlockKey)}

        result: List[SelectionKey] = []
        seen = set()

        def emit(key):
            if key in member_set and key not in seen:
                seen.add(key)
                result.append(key)

        for key in self.order:
            if isinstance(key, BlockKey):
                context = self.get_context(key.block_id)
                if context is not None:
                    for member in context.keys():
                        if member not in explicit:
                            emit(member)
            else:
                emit(key)

        for member in members:
            emit(member)
        return result

    # -------------------------------------------------------------------------
    # Consistency
    # -------------------------------------------------------------------------

    def prune(self, blocks: Iterable[ContextBlock]) -> int:
        """
        Drop references to content that no longer exists.

        Removes dangling members, order entries that are dangling or no longer
        selected, and empty groups.

        Returns:
            Number of entries removed
        """
        blocks_by_id = _index_blocks(blocks)
        removed = 0

        for context in self.contexts:
            block = blocks_by_id.get(context.block_id)
            if block is None:
                removed += len(context.item_ids) + len(context.sub_item_ids)
                context.item_ids = []
                context.sub_item_ids = []
                continue
            items = [i for i in context.item_ids if block.get_item(i) is not None]
            subs = [p for p in context.sub_item_ids if block.get_sub_item(*p) is not None]
            removed += len(context.item_ids) - len(items) + len(context.sub_item_ids) - len(subs)
            context.item_ids = items
            context.sub_item_ids = subs
        self._drop_empty_contexts()

        order = [
            k for k in self.order
            if _resolves(k, blocks_by_id) and self.is_selected(k)
        ]
        removed += len(self.order) - len(order)
        self.order = order

        if removed:
            logger.debug("selection_pruned", removed=removed)
        return removed

    def total_chars(self, blocks: Iterable[ContextBlock]) -> int:
        """
        Characters of all selected content.

        Each selected item counts its own content and each selected
        sub-item counts its own; selecting an item together with one of
        its sub-items counts both. Dangling references count zero.
        """
        blocks_by_id = _index_blocks(blocks)
        total = 0
        for context in self.contexts:
            block = blocks_by_id.get(context.block_id)
            if block is None:
                continue
            for item_id in context.item_ids:
                item = block.get_item(item_id)
                if item is not None:
                    total += item.chars
            for item_id, sub_item_id in context.sub_item_ids:
                sub = block.get_sub_item(item_id, sub_item_id)
                if sub is not None:
                    total += sub.chars
        return total

    # -------------------------------------------------------------------------
    # Construction and serialization
    # -------------------------------------------------------------------------

    @classmethod
    def from_order(cls, keys: List[SelectionKey]) -> 'SelectionSet':
        """Build membership from an order list (block anchors add no members)."""
        selection = cls()
        for key in keys:
            selection.select(key)
        return selection

    def order_from_membership(self) -> List[SelectionKey]:
        """Derive an order for data saved before order was recorded."""
        return self.members()

    def contexts_to_dict(self) -> List[Dict[str, Any]]:
        return [c.to_dict() for c in self.contexts]

    def order_to_wire(self) -> List[str]:
        return [k.to_wire() for k in self.order]

    @classmethod
    def from_dict(
        cls,
        selected_contexts: Optional[List[Dict[str, Any]]],
        selection_order: Optional[List[Any]]
    ) -> 'SelectionSet':
        """
        Parse the wire form of a prompt's selection.

        Groups for the same block are merged. Malformed entries are dropped.
        When no order was stored, one is derived from membership.
        """
        selection = cls()
        for raw in selected_contexts if isinstance(selected_contexts, list) else []:
            if not isinstance(raw, dict):
                logger.warning("malformed_selected_context", value=raw)
                continue
            parsed = SelectedContext.from_dict(raw)
            if parsed is None:
                continue
            context = selection._ensure_context(parsed.block_id)
            context.item_ids.extend(i for i in parsed.item_ids if i not in context.item_ids)
            context.sub_item_ids.extend(p for p in parsed.sub_item_ids if p not in context.sub_item_ids)
        selection._drop_empty_contexts()

        for raw in selection_order if isinstance(selection_order, list) else []:
            key = parse_order_key(raw)
            if key is None:
                logger.warning("malformed_order_key", value=raw)
                continue
            if key not in selection.order:
                selection.order.append(key)

        if not selection.order and selection.contexts:
            selection.order = selection.order_from_membership()
        return selection
