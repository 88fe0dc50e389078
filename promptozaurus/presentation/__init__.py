"""
Presentation — Display layer for the promptozaurus CLI

Contains display and formatting:
- Symbols: Visual vocabulary (unicode/ascii)
- Formatters: Truncation, previews, character counts, block trees
- Template: Structured output with header/section/footer
"""

from .symbols import (
    SymbolSet, get_symbols, UNICODE, ASCII,
    safe_print, sanitize_control_chars,
)
from .formatters import (
    truncate, preview, format_chars, format_timestamp, format_status_line,
    format_block_tree, format_split_preview,
    SUMMARY_LENGTH,
)
from .template import OutputTemplate, TemplateSection

__all__ = [
    # Symbols
    "SymbolSet", "get_symbols", "UNICODE", "ASCII",
    "safe_print", "sanitize_control_chars",
    # Formatters
    "truncate", "preview", "format_chars", "format_timestamp", "format_status_line",
    "format_block_tree", "format_split_preview",
    "SUMMARY_LENGTH",
    # Template
    "OutputTemplate", "TemplateSection",
]
