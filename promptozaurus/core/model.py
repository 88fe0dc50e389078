"""
Context Model — Block → Item → SubItem hierarchy

A ContextBlock holds items; an item is either a leaf of text or a grouping
node for sub-items. Sub-items are always leaves.

Character accounting:
- chars is derived from content on every read (it cannot drift)
- an item with sub-items contributes only the sum of its sub-items
- an item without sub-items contributes its own chars

Ids are unique within their parent only and are allocated as
max(sibling ids) + 1, so bulk creation never collides.

Lookup misses return False/None. Only contract violations (non-string
content, missing ids) raise TypeError.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

import structlog

logger = structlog.get_logger(__name__)


DEFAULT_ITEM_TITLE = "New item"
DEFAULT_SUB_ITEM_TITLE = "New sub-item"
DEFAULT_PART_LABEL = "Part"


def require_text(value: Any, what: str = "content") -> str:
    if not isinstance(value, str):
        raise TypeError(f"{what} must be a string, got {type(value).__name__}")
    return value


def require_id(value: Any, what: str = "id") -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{what} must be an integer, got {type(value).__name__}")
    return value


def require_mapping(value: Any, what: str) -> Dict[str, Any]:
    if not isinstance(value, dict):
        raise TypeError(f"{what} must be a mapping, got {type(value).__name__}")
    return value


def next_id(ids: Iterable[int]) -> int:
    """Next per-scope id: one past the largest sibling id, 1 when empty."""
    return max(ids, default=0) + 1


# =============================================================================
# Data Classes
# =============================================================================

@dataclass
class ContextSubItem:
    """Leaf unit of text nested under an item."""
    id: int
    title: str = ""
    content: str = ""

    def __post_init__(self):
        require_id(self.id)
        require_text(self.title, "title")
        require_text(self.content)

    @property
    def chars(self) -> int:
        return len(self.content)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "content": self.content,
            "chars": self.chars,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ContextSubItem':
        require_mapping(data, "sub-item")
        # Stored chars is a cache from older files; content wins.
        return cls(
            id=data.get("id"),
            title=data.get("title") or "",
            content=data.get("content") or "",
        )


@dataclass
class ContextItem:
    """Titled unit of text; a leaf or a grouping node for sub-items."""
    id: int
    title: str = ""
    content: str = ""
    sub_items: List[ContextSubItem] = field(default_factory=list)

    def __post_init__(self):
        require_id(self.id)
        require_text(self.title, "title")
        require_text(self.content)

    @property
    def chars(self) -> int:
        return len(self.content)

    @property
    def has_sub_items(self) -> bool:
        return len(self.sub_items) > 0

    @property
    def effective_chars(self) -> int:
        """Contribution to block totals: own chars for a leaf, else its sub-items."""
        if self.sub_items:
            return sum(sub.chars for sub in self.sub_items)
        return self.chars

    def get_sub_item(self, sub_item_id: int) -> Optional[ContextSubItem]:
        for sub in self.sub_items:
            if sub.id == sub_item_id:
                return sub
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "content": self.content,
            "chars": self.chars,
            "subItems": [sub.to_dict() for sub in self.sub_items],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ContextItem':
        require_mapping(data, "item")
        raw_subs = data.get("subItems")
        if not isinstance(raw_subs, list):
            raw_subs = []
        return cls(
            id=data.get("id"),
            title=data.get("title") or "",
            content=data.get("content") or "",
            sub_items=[ContextSubItem.from_dict(s) for s in raw_subs],
        )


def _swap(entries: list, index_a: int, index_b: int) -> None:
    entries[index_a], entries[index_b] = entries[index_b], entries[index_a]


def index_of(entries: list, entry_id: int) -> int:
    for index, entry in enumerate(entries):
        if entry.id == entry_id:
            return index
    return -1


def move_entry(entries: list, entry_id: int, offset: int) -> bool:
    """Swap an entry with its neighbour; False at the list boundary or when missing."""
    index = index_of(entries, entry_id)
    if index == -1:
        return False
    target = index + offset
    if target < 0 or target >= len(entries):
        return False
    _swap(entries, index, target)
    return True


# =============================================================================
# ContextBlock
# =============================================================================

@dataclass
class ContextBlock:
    """
    Top-level named container of context items.

    All structural mutation of items and sub-items goes through this class.
    """
    id: int
    title: str = ""
    items: List[ContextItem] = field(default_factory=list)

    def __post_init__(self):
        require_id(self.id)
        require_text(self.title, "title")

    # -------------------------------------------------------------------------
    # Lookup
    # -------------------------------------------------------------------------

    def get_item(self, item_id: int) -> Optional[ContextItem]:
        for item in self.items:
            if item.id == item_id:
                return item
        return None

    def get_sub_item(self, item_id: int, sub_item_id: int) -> Optional[ContextSubItem]:
        item = self.get_item(item_id)
        if item is None:
            return None
        return item.get_sub_item(sub_item_id)

    @property
    def total_chars(self) -> int:
        return total_chars(self)

    # -------------------------------------------------------------------------
    # Creation
    # -------------------------------------------------------------------------

    def add_item(self, title: Optional[str] = None, content: str = "") -> ContextItem:
        """
        Append a new item.

        Args:
            title: Item title (default: DEFAULT_ITEM_TITLE)
            content: Initial content

        Returns:
            The created item
        """
        item = ContextItem(
            id=next_id(i.id for i in self.items),
            title=DEFAULT_ITEM_TITLE if title is None else title,
            content=content,
        )
        self.items.append(item)
        logger.debug("item_added", block_id=self.id, item_id=item.id, chars=item.chars)
        return item

    def add_items(self, contents: List[str], title_prefix: str = DEFAULT_PART_LABEL) -> List[ContextItem]:
        """Append several items at once, titled "<prefix> <id>"."""
        created = []
        for content in contents:
            new_id = next_id(i.id for i in self.items)
            created.append(self.add_item(f"{title_prefix} {new_id}", content))
        return created

    def add_sub_item(
        self,
        item_id: int,
        title: Optional[str] = None,
        content: str = ""
    ) -> Optional[ContextSubItem]:
        """
        Append a sub-item to an item.

        Returns:
            The created sub-item, or None when item_id does not resolve
        """
        require_id(item_id, "item_id")
        item = self.get_item(item_id)
        if item is None:
            logger.debug("item_not_found", block_id=self.id, item_id=item_id)
            return None

        sub = ContextSubItem(
            id=next_id(s.id for s in item.sub_items),
            title=DEFAULT_SUB_ITEM_TITLE if title is None else title,
            content=content,
        )
        item.sub_items.append(sub)
        logger.debug("sub_item_added", block_id=self.id, item_id=item_id, sub_item_id=sub.id)
        return sub

    # -------------------------------------------------------------------------
    # Update (merge-patch: omitted fields are left untouched)
    # -------------------------------------------------------------------------

    def update_item(
        self,
        item_id: int,
        title: Optional[str] = None,
        content: Optional[str] = None,
        sub_items: Optional[List[ContextSubItem]] = None
    ) -> bool:
        item = self.get_item(item_id)
        if item is None:
            return False

        if title is not None:
            item.title = require_text(title, "title")
        if content is not None:
            item.content = require_text(content)
        if sub_items is not None:
            for sub in sub_items:
                if not isinstance(sub, ContextSubItem):
                    raise TypeError("sub_items must contain ContextSubItem instances")
            item.sub_items = list(sub_items)

        logger.debug("item_updated", block_id=self.id, item_id=item_id, chars=item.chars)
        return True

    def update_sub_item(
        self,
        item_id: int,
        sub_item_id: int,
        title: Optional[str] = None,
        content: Optional[str] = None
    ) -> bool:
        sub = self.get_sub_item(item_id, sub_item_id)
        if sub is None:
            return False

        if title is not None:
            sub.title = require_text(title, "title")
        if content is not None:
            sub.content = require_text(content)

        logger.debug("sub_item_updated", block_id=self.id, item_id=item_id,
                     sub_item_id=sub_item_id, chars=sub.chars)
        return True

    # -------------------------------------------------------------------------
    # Removal
    # -------------------------------------------------------------------------

    def remove_item(self, item_id: int) -> bool:
        before = len(self.items)
        self.items = [item for item in self.items if item.id != item_id]
        removed = len(self.items) != before
        if removed:
            logger.debug("item_removed", block_id=self.id, item_id=item_id)
        return removed

    def remove_sub_item(self, item_id: int, sub_item_id: int) -> bool:
        item = self.get_item(item_id)
        if item is None:
            return False
        before = len(item.sub_items)
        item.sub_items = [sub for sub in item.sub_items if sub.id != sub_item_id]
        removed = len(item.sub_items) != before
        if removed:
            logger.debug("sub_item_removed", block_id=self.id, item_id=item_id,
                         sub_item_id=sub_item_id)
        return removed

    # -------------------------------------------------------------------------
    # Reordering (adjacent swaps; boundaries are no-ops)
    # -------------------------------------------------------------------------

    def move_item_up(self, item_id: int) -> bool:
        return move_entry(self.items, item_id, -1)

    def move_item_down(self, item_id: int) -> bool:
        return move_entry(self.items, item_id, 1)

    def move_sub_item_up(self, item_id: int, sub_item_id: int) -> bool:
        item = self.get_item(item_id)
        if item is None:
            return False
        return move_entry(item.sub_items, sub_item_id, -1)

    def move_sub_item_down(self, item_id: int, sub_item_id: int) -> bool:
        item = self.get_item(item_id)
        if item is None:
            return False
        return move_entry(item.sub_items, sub_item_id, 1)

    def swap_items(self, item_id_a: int, item_id_b: int) -> bool:
        index_a = index_of(self.items, item_id_a)
        index_b = index_of(self.items, item_id_b)
        if index_a == -1 or index_b == -1:
            return False
        _swap(self.items, index_a, index_b)
        return True

    def swap_sub_items(self, item_id: int, sub_item_id_a: int, sub_item_id_b: int) -> bool:
        item = self.get_item(item_id)
        if item is None:
            return False
        index_a = index_of(item.sub_items, sub_item_id_a)
        index_b = index_of(item.sub_items, sub_item_id_b)
        if index_a == -1 or index_b == -1:
            return False
        _swap(item.sub_items, index_a, index_b)
        return True

    # -------------------------------------------------------------------------
    # Applying a split
    # -------------------------------------------------------------------------

    def apply_split(
        self,
        item_id: int,
        parts: List[str],
        sub_item_id: Optional[int] = None,
        create_sub_items: bool = False,
        keep_original: bool = True,
        part_label: str = DEFAULT_PART_LABEL
    ) -> list:
        """
        Turn split parts into new items or sub-items.

        A single part just replaces the source content. With keep_original
        the source stays intact and every part is added as "<title> (<label> n)";
        without it part 1 replaces the source content and the remaining
        parts are added numbered from 2.

        Splitting a sub-item always produces sibling sub-items. Splitting an
        item produces sub-items of that item when create_sub_items is set,
        otherwise new items at the end of the block.

        Args:
            item_id: Source item (or parent of the source sub-item)
            parts: Parts chosen from a splitter preview
            sub_item_id: Source sub-item, if splitting one
            create_sub_items: Add item parts as its sub-items
            keep_original: Leave the source content untouched
            part_label: Word used in generated titles

        Returns:
            Created items or sub-items; empty when nothing was created
        """
        item = self.get_item(item_id)
        if item is None or not parts:
            return []

        source = item
        if sub_item_id is not None:
            source = item.get_sub_item(sub_item_id)
            if source is None:
                return []

        if len(parts) == 1:
            source.content = require_text(parts[0])
            return []

        if keep_original:
            numbered = list(enumerate(parts, start=1))
        else:
            source.content = require_text(parts[0])
            numbered = list(enumerate(parts[1:], start=2))

        base_title = source.title
        created: list = []
        for number, content in numbered:
            title = f"{base_title} ({part_label} {number})"
            if sub_item_id is not None or create_sub_items:
                created.append(self.add_sub_item(item_id, title, content))
            else:
                created.append(self.add_item(title, content))

        logger.debug("split_applied", block_id=self.id, item_id=item_id,
                     sub_item_id=sub_item_id, parts=len(parts), created=len(created))
        return created

    # -------------------------------------------------------------------------
    # Serialization
    # -------------------------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "items": [item.to_dict() for item in self.items],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ContextBlock':
        require_mapping(data, "context block")
        raw_items = data.get("items")
        if not isinstance(raw_items, list):
            raw_items = []
        return cls(
            id=data.get("id"),
            title=data.get("title") or "",
            items=[ContextItem.from_dict(i) for i in raw_items],
        )


def total_chars(block: ContextBlock) -> int:
    """
    Canonical character total of a block.

    Items with sub-items count only their sub-items, leaf items count
    their own content. Always recomputed.
    """
    return sum(item.effective_chars for item in block.items)
