"""
Formatters — Data-to-string transformations for consistent output

Centralized formatting logic for all CLI output:
- Text truncation and one-line previews
- Character counts
- Relative timestamps
- Block trees with selection markers
- Split previews

Dependency direction: commands → presentation → core
"""

import re
from datetime import datetime, timezone
from typing import List, Optional, TYPE_CHECKING

from .symbols import SymbolSet, sanitize_control_chars

if TYPE_CHECKING:
    from ..core.model import ContextBlock
    from ..core.selection import SelectionSet


# =============================================================================
# Display Truncation Constants
# =============================================================================

SUMMARY_LENGTH = 120      # Default for summaries
PREVIEW_LENGTH = 60       # Inline content previews in trees
DATE_DISPLAY_LENGTH = 10  # Date displays (e.g., "2025-01-15")

_WHITESPACE = re.compile(r"\s+")


# =============================================================================
# Text Utilities
# =============================================================================

def truncate(text: str, length: int = SUMMARY_LENGTH, full: bool = False) -> str:
    """
    Truncate text with ellipsis, respecting full mode.

    Args:
        text: Text to truncate
        length: Max length (default: SUMMARY_LENGTH = 120)
        full: If True, never truncate (for --full flag)

    Returns:
        Truncated text with '...' if needed, or full text

    Examples:
        truncate("Short", 50)                -> "Short" (no change)
        truncate("Any length", 50, full=True) -> "Any length" (no truncation)
    """
    if not text:
        return ""
    if full or len(text) <= length:
        return text
    if length <= 3:
        return text[:length]
    return text[:length - 3] + "..."


def preview(text: str, length: int = PREVIEW_LENGTH) -> str:
    """Collapse whitespace, strip control characters and truncate, for single-line display."""
    text = sanitize_control_chars(_WHITESPACE.sub(" ", text or ""))
    return truncate(text.strip(), length)


def format_chars(count: int) -> str:
    """
    Format a character count.

    Examples:
        format_chars(1)     -> "1 char"
        format_chars(12345) -> "12,345 chars"
    """
    unit = "char" if count == 1 else "chars"
    return f"{count:,} {unit}"


def format_timestamp(iso_str: Optional[str]) -> str:
    """
    Format ISO timestamp for display.

    Returns:
        "23m ago" / "5h ago" / "3d ago" for recent times, "Jan 15" for
        older ones, "unknown" when missing or unparsable
    """
    if not iso_str:
        return "unknown"

    try:
        if iso_str.endswith('Z'):
            iso_str = iso_str[:-1] + '+00:00'
        ts = datetime.fromisoformat(iso_str)
        if ts.tzinfo is None:
            ts = ts.replace(tzinfo=timezone.utc)

        total_seconds = (datetime.now(timezone.utc) - ts).total_seconds()
        if total_seconds < 60:
            return "just now"

        minutes = int(total_seconds // 60)
        hours = int(total_seconds // 3600)
        days = int(total_seconds // 86400)

        if days >= 7:
            return ts.strftime("%b %d")
        elif days >= 1:
            return f"{days}d ago"
        elif hours >= 1:
            return f"{hours}h ago"
        return f"{minutes}m ago"

    except (ValueError, TypeError, AttributeError):
        return "unknown"


def format_status_line(symbols: SymbolSet, ok: bool, detail: str) -> str:
    """
    Format a pass/warn status line.

    Examples:
        ✓ placeholder found
        [!] template has no placeholder
    """
    sym = symbols.check_pass if ok else symbols.check_warn
    return f"{sym} {detail}"


# =============================================================================
# Structure Formatting
# =============================================================================

def format_block_tree(
    symbols: SymbolSet,
    block: 'ContextBlock',
    selection: Optional['SelectionSet'] = None,
    full: bool = False
) -> List[str]:
    """
    Render a block as an indented tree of items and sub-items.

    With a selection, each line is prefixed by a selected/unselected marker.

    Example:
        ▣ Context1 (17 chars)
          ├─ ● ◇ Intro (10 chars) Hello world
          └─ ○ ◇ Notes (0 chars)
               └─ ● ◦ foo (3 chars)
    """
    from ..core.keys import ItemKey, SubItemKey

    lines = [f"{symbols.block} {sanitize_control_chars(block.title)} ({format_chars(block.total_chars)})"]

    def marker(key) -> str:
        if selection is None:
            return ""
        return (symbols.selected if selection.is_selected(key) else symbols.unselected) + " "

    for index, item in enumerate(block.items):
        last_item = index == len(block.items) - 1
        branch = symbols.tree_end if last_item else symbols.tree_branch
        text = preview(item.content, SUMMARY_LENGTH if full else PREVIEW_LENGTH)
        lines.append(
            f"  {branch} {marker(ItemKey(block.id, item.id))}{symbols.item} "
            f"[{item.id}] {sanitize_control_chars(item.title)} ({format_chars(item.chars)}) {text}".rstrip()
        )

        indent = "     " if last_item else "  │  " if symbols.box_h == '─' else "  |  "
        for sub_index, sub in enumerate(item.sub_items):
            sub_branch = symbols.tree_end if sub_index == len(item.sub_items) - 1 else symbols.tree_branch
            text = preview(sub.content, SUMMARY_LENGTH if full else PREVIEW_LENGTH)
            lines.append(
                f"{indent}{sub_branch} {marker(SubItemKey(block.id, item.id, sub.id))}"
                f"{symbols.sub_item} [{item.id}.{sub.id}] {sanitize_control_chars(sub.title)} "
                f"({format_chars(sub.chars)}) {text}".rstrip()
            )

    return lines


def format_split_preview(symbols: SymbolSet, parts: List[str], full: bool = False) -> List[str]:
    """
    Number split parts with their sizes.

    Example:
        1. (120 chars) Chapter 1 It was a dark...
        2. (98 chars) Chapter 2 The morning...
    """
    lines = []
    for number, part in enumerate(parts, start=1):
        text = preview(part, SUMMARY_LENGTH if full else PREVIEW_LENGTH)
        lines.append(f"{number}. ({format_chars(len(part))}) {text}".rstrip())
    return lines
