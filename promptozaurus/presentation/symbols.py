"""
Symbols — Visual vocabulary for blocks, items and selection

Progressive enhancement: Unicode when supported, ASCII fallback.
Configurable via display.symbols setting.

Also provides safe output utilities:
- safe_print(): Encoding-safe printing for user content
- sanitize_control_chars(): Strip terminal control sequences from text
"""

import os
import sys
from dataclasses import dataclass
from typing import Optional


# =============================================================================
# Safe Output Utilities
# =============================================================================
# sanitize_control_chars() strips dangerous control chars
# safe_print() handles display encoding gracefully

UNICODE_TO_ASCII = {
    '→': '->',
    '←': '<-',
    '…': '...',
    '–': '-',
    '—': '--',
    '•': '*',
    '·': '.',
    '×': 'x',
    '≈': '~',
    '≤': '<=',
    '≥': '>=',
}


def sanitize_control_chars(text: str) -> str:
    """
    Remove control characters from text before it reaches the terminal.

    Preserves: newlines (\\n), tabs (\\t), carriage returns (\\r)
    """
    if not text:
        return text
    return ''.join(ch for ch in text if ord(ch) >= 32 or ord(ch) in (9, 10, 13))


def safe_print(text: str, end: str = '\n', file=None) -> None:
    """
    Print with graceful encoding fallback.

    Handles UnicodeEncodeError by replacing unencodable characters
    with ASCII equivalents or '?' as last resort.

    Args:
        text: Text to print (may contain any Unicode)
        end: String appended after text (default: newline)
        file: Output stream (default: sys.stdout)
    """
    if file is None:
        file = sys.stdout

    try:
        print(text, end=end, file=file)
    except UnicodeEncodeError:
        safe_text = text
        for unicode_char, ascii_equiv in UNICODE_TO_ASCII.items():
            safe_text = safe_text.replace(unicode_char, ascii_equiv)

        try:
            print(safe_text, end=end, file=file)
        except UnicodeEncodeError:
            encoding = getattr(file, 'encoding', 'utf-8') or 'utf-8'
            encoded = safe_text.encode(encoding, errors='replace')
            print(encoded.decode(encoding), end=end, file=file)


@dataclass(frozen=True)
class SymbolSet:
    """Complete set of symbols for structure and states."""
    # Structure
    block: str
    item: str
    sub_item: str
    prompt: str
    # Selection
    selected: str
    unselected: str
    # Status
    check_pass: str
    check_warn: str
    check_fail: str
    arrow: str
    # Tree
    tree_branch: str
    tree_end: str
    bullet: str
    # Gateway
    tokens_in: str
    tokens_out: str
    tokens_total: str
    # Rules
    box_h: str


UNICODE = SymbolSet(
    block='▣',
    item='◇',
    sub_item='◦',
    prompt='✎',
    selected='●',
    unselected='○',
    check_pass='✓',
    check_warn='⚠',
    check_fail='✗',
    arrow='→',
    tree_branch='├─',
    tree_end='└─',
    bullet='•',
    tokens_in='↓',
    tokens_out='↑',
    tokens_total='≡',
    box_h='─',
)

ASCII = SymbolSet(
    block='[#]',
    item='[>]',
    sub_item='-',
    prompt='[P]',
    selected='(*)',
    unselected='( )',
    check_pass='[OK]',
    check_warn='[!]',
    check_fail='[X]',
    arrow='->',
    tree_branch='|-',
    tree_end='`-',
    bullet='*',
    tokens_in='in:',
    tokens_out='out:',
    tokens_total='total:',
    box_h='-',
)


def supports_unicode() -> bool:
    """
    Check if environment likely supports Unicode output.

    Conservative: defaults to ASCII if uncertain.
    """
    if os.environ.get('PROMPTOZAURUS_ASCII_ONLY', '').lower() in ('1', 'true', 'yes'):
        return False
    if os.environ.get('PROMPTOZAURUS_UNICODE', '').lower() in ('1', 'true', 'yes'):
        return True

    stdout_encoding = getattr(sys.stdout, 'encoding', None)
    if stdout_encoding:
        encoding_lower = stdout_encoding.lower().replace('-', '').replace('_', '')
        if encoding_lower.startswith('cp') or encoding_lower in ('ascii', 'latin1', 'iso88591'):
            return False
        if encoding_lower.startswith('utf'):
            return True

    lang = os.environ.get('LANG', '').lower()
    lc_all = os.environ.get('LC_ALL', '').lower()
    if 'utf-8' in lang or 'utf8' in lang or 'utf-8' in lc_all or 'utf8' in lc_all:
        return True

    if os.environ.get('WT_SESSION'):
        return True

    return False


def get_symbols(preference: Optional[str] = None) -> SymbolSet:
    """
    Get appropriate symbol set based on preference or auto-detection.

    Args:
        preference: "unicode", "ascii", or "auto" (None = auto)

    Returns:
        Appropriate SymbolSet for the environment
    """
    if preference == 'unicode':
        return UNICODE
    if preference == 'ascii':
        return ASCII
    return UNICODE if supports_unicode() else ASCII
