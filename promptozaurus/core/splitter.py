"""
Splitter — Decompose oversized content into smaller parts

Four strategies, each a pure function returning an ordered list of parts:
- equal:      N roughly equal parts, cut points extended to a natural boundary
- delimiter:  split on a regular expression
- paragraphs: split on blank lines, optionally regrouped
- pattern:    every multiline regex match starts a new part

Splitting is used interactively to preview options, so bad configuration
(invalid regex, too few parts, empty input) never raises: the text comes
back unchanged as a single part.
"""

import math
import re
from dataclasses import dataclass, asdict
from enum import Enum
from typing import Any, Dict, List, Optional

import structlog

logger = structlog.get_logger(__name__)


class EndingType(Enum):
    """Where equal-split cut points may land."""
    SENTENCE = "sentence"
    PARAGRAPH = "paragraph"
    DELIMITER = "delimiter"
    EXACT = "exact"


class SplitMethod(Enum):
    EQUAL = "equal"
    DELIMITER = "delimiter"
    PARAGRAPHS = "paragraphs"
    PATTERN = "pattern"


SENTENCE_ENDINGS = (".", "!", "?")


def _ending_value(ending_type) -> str:
    if isinstance(ending_type, EndingType):
        return ending_type.value
    return ending_type


def _sentence_boundary(text: str, offset: int) -> Optional[int]:
    positions = [text.find(mark, offset) for mark in SENTENCE_ENDINGS]
    positions = [p for p in positions if p != -1]
    if not positions:
        return None
    return min(positions) + 1


def _paragraph_boundary(text: str, offset: int) -> Optional[int]:
    position = text.find("\n\n", offset)
    if position != -1:
        return position + 2
    position = text.find("\n", offset)
    if position != -1:
        return position + 1
    return None


def _delimiter_boundary(text: str, offset: int, delimiter: Optional[str]) -> Optional[int]:
    if not delimiter:
        return None
    # The delimiter is literal text (e.g. "Chapter"), optionally numbered.
    regex = re.compile(re.escape(delimiter) + r"\s*\d*", re.IGNORECASE)
    match = regex.search(text, offset)
    if match is None:
        return None
    return match.start()


def split_into_equal_parts(
    text: str,
    parts_count: int,
    ending_type="sentence",
    custom_delimiter: Optional[str] = None
) -> List[str]:
    """
    Split text into parts_count parts of roughly equal size.

    Each of the first parts_count - 1 cuts starts at the target size and is
    pushed forward to the next boundary for ending_type. When no boundary
    exists ahead, the raw offset is used. The last part is the remainder.

    Args:
        text: Text to split
        parts_count: Requested number of parts
        ending_type: "sentence", "paragraph", "delimiter" or "exact"
        custom_delimiter: Literal marker for the "delimiter" ending

    Returns:
        Parts in order; [text] when text is empty or parts_count < 2
    """
    if not text or parts_count < 2:
        return [text]

    ending = _ending_value(ending_type)
    target = math.ceil(len(text) / parts_count)
    parts = []
    start = 0

    for _ in range(parts_count - 1):
        end = start + target
        boundary = None
        if ending == EndingType.SENTENCE.value:
            boundary = _sentence_boundary(text, end)
        elif ending == EndingType.PARAGRAPH.value:
            boundary = _paragraph_boundary(text, end)
        elif ending == EndingType.DELIMITER.value:
            boundary = _delimiter_boundary(text, end, custom_delimiter)

        if boundary is not None:
            end = boundary

        parts.append(text[start:end])
        start = end

    parts.append(text[start:])
    return parts


def _compile(pattern: str, flags: int = 0) -> Optional["re.Pattern"]:
    try:
        return re.compile(pattern, flags)
    except re.error as e:
        logger.warning("invalid_split_regex", pattern=pattern, error=str(e))
        return None


def split_by_delimiter(
    text: str,
    delimiter: str,
    case_sensitive: bool = False,
    include_delimiter: bool = False
) -> List[str]:
    """
    Split on a regular expression delimiter.

    With include_delimiter each cut is placed right after the match, so the
    matched text stays at the end of the preceding part. Empty parts are
    dropped in both modes.
    """
    if not text or not delimiter:
        return [text]

    regex = _compile(delimiter, 0 if case_sensitive else re.IGNORECASE)
    if regex is None:
        return [text]

    if include_delimiter:
        parts = []
        last = 0
        for match in regex.finditer(text):
            if match.end() == match.start():
                continue
            parts.append(text[last:match.end()])
            last = match.end()
        parts.append(text[last:])
    else:
        # Capturing groups show up in re.split output as str or None.
        parts = regex.split(text)

    return [part for part in parts if part]


def split_by_paragraphs(
    text: str,
    paragraphs_per_group: int = 1,
    min_paragraph_size: int = 0
) -> List[str]:
    """
    Split on blank lines and regroup paragraphs.

    Paragraphs that are blank or shorter than min_paragraph_size (after
    stripping) are discarded. Survivors are joined in groups of
    paragraphs_per_group with a blank line between them.
    """
    if not text:
        return [text]

    paragraphs = [p for p in re.split(r"\n\s*\n", text) if p.strip()]
    filtered = [p for p in paragraphs if len(p.strip()) >= min_paragraph_size]
    if not filtered:
        return [text]

    if paragraphs_per_group <= 1:
        return filtered

    groups = [
        "\n\n".join(filtered[i:i + paragraphs_per_group])
        for i in range(0, len(filtered), paragraphs_per_group)
    ]
    if len(groups) < 2:
        return filtered
    return groups


def split_by_pattern(text: str, pattern: str, include_match: bool = True) -> List[str]:
    """
    Split where a multiline regular expression matches.

    Text before the first match is its own part. Each match opens a new
    part; with include_match the matched text leads that part, otherwise it
    is dropped. Whitespace-only parts are discarded.

    Returns:
        Parts in order; [text] for an invalid pattern or when nothing matches
    """
    if not text or not pattern:
        return [text]

    regex = _compile(pattern, re.MULTILINE)
    if regex is None:
        return [text]

    matches = [m for m in regex.finditer(text) if m.end() > m.start()]
    if not matches:
        return [text]

    parts = [text[:matches[0].start()]]
    for index, match in enumerate(matches):
        start = match.start() if include_match else match.end()
        end = matches[index + 1].start() if index + 1 < len(matches) else len(text)
        parts.append(text[start:end])

    return [part for part in parts if part.strip()]


# =============================================================================
# Options and dispatch
# =============================================================================

@dataclass
class SplitOptions:
    """Settings for every split method, defaulted to the split dialog's values."""
    parts_count: int = 2
    ending_type: str = EndingType.SENTENCE.value
    custom_delimiter: str = "Chapter"
    delimiter: str = "---"
    case_sensitive: bool = False
    include_delimiter: bool = False
    paragraphs_per_group: int = 1
    min_paragraph_size: int = 50
    pattern: str = r"(Chapter|Part|Section)\s*(\d+|[IVXLCDM]+)"
    include_match: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SplitOptions':
        known = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        return cls(**known)


def split_content(text: str, method, options: Optional[SplitOptions] = None) -> List[str]:
    """
    Split text with the named method.

    Args:
        text: Text to split
        method: SplitMethod or its string value
        options: Method settings (defaults when None)

    Returns:
        Parts in order; [text] for an unknown method
    """
    options = options or SplitOptions()
    try:
        method = SplitMethod(method)
    except ValueError:
        logger.warning("unknown_split_method", method=method)
        return [text]

    if method is SplitMethod.EQUAL:
        parts = split_into_equal_parts(
            text, options.parts_count, options.ending_type, options.custom_delimiter
        )
    elif method is SplitMethod.DELIMITER:
        parts = split_by_delimiter(
            text, options.delimiter, options.case_sensitive, options.include_delimiter
        )
    elif method is SplitMethod.PARAGRAPHS:
        parts = split_by_paragraphs(
            text, options.paragraphs_per_group, options.min_paragraph_size
        )
    else:
        parts = split_by_pattern(text, options.pattern, options.include_match)

    logger.debug("content_split", method=method.value, chars=len(text) if text else 0,
                 parts=len(parts))
    return parts
