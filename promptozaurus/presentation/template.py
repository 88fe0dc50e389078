"""
OutputTemplate — Consistent CLI output structure

Builder for command output with header, sections, and footer.

Usage:
    from promptozaurus.presentation.template import OutputTemplate

    template = OutputTemplate()
    template.header("PROJECT STATS", "My Project")
    template.section("CONTEXT BLOCKS", blocks_content)
    template.footer("3 blocks | 2 prompts")
    template.hint("Next: promptozaurus compile project.json 1")
    print(template.render())

Design:
    - Standalone utility (not a renderer subclass)
    - Terminal-width aware
    - Symbol-agnostic (Unicode/ASCII)
"""

import shutil
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .symbols import SymbolSet, get_symbols


HEADER_CHAR = "="
SECTION_CHAR = "-"
DEFAULT_WIDTH = 80
MAX_WIDTH = 100


@dataclass
class TemplateSection:
    """A titled section of output."""
    title: str
    content: str


@dataclass
class TemplateLegend:
    """Legend mapping symbols to meanings."""
    items: Dict[str, str] = field(default_factory=dict)

    def render(self) -> str:
        if not self.items:
            return ""
        parts = [f"{symbol} {meaning}" for symbol, meaning in self.items.items()]
        return "Legend: " + "  ".join(parts)


class OutputTemplate:
    """
    Builder for structured CLI output.

    - HEADER: Title, legend, scope line
    - SECTIONS: Titled content blocks
    - FOOTER: Summary line and optional next-step hint
    """

    def __init__(
        self,
        symbols: Optional[SymbolSet] = None,
        width: Optional[int] = None
    ):
        """
        Args:
            symbols: SymbolSet for visual elements (auto-detect if None)
            width: Rule width (terminal width, capped, if None)
        """
        self.symbols = symbols or get_symbols()
        self.width = width or min(shutil.get_terminal_size().columns or DEFAULT_WIDTH, MAX_WIDTH)

        self._title: Optional[str] = None
        self._subtitle: Optional[str] = None
        self._legend: Optional[TemplateLegend] = None
        self._scope: Optional[str] = None
        self._sections: List[TemplateSection] = []
        self._summary: Optional[str] = None
        self._hint: Optional[str] = None
        self._items: List[str] = []

    # =========================================================================
    # Builder Methods
    # =========================================================================

    def header(self, title: str, subtitle: Optional[str] = None) -> "OutputTemplate":
        self._title = title
        self._subtitle = subtitle
        return self

    def legend(self, items: Dict[str, str]) -> "OutputTemplate":
        self._legend = TemplateLegend(items=items)
        return self

    def scope(self, text: str) -> "OutputTemplate":
        """Set scope line (counts shown under the header)."""
        self._scope = text
        return self

    def section(self, title: str, content: str) -> "OutputTemplate":
        self._sections.append(TemplateSection(title=title, content=content))
        return self

    def item(self, id: str, summary: str, prefix: Optional[str] = None) -> "OutputTemplate":
        """
        Add a single "[id] summary" line for a later items_section().

        Example:
            template.item("2", "Review prompt (3 pieces)")
            # Renders: [2] Review prompt (3 pieces)
        """
        prefix_str = f"{prefix} " if prefix else ""
        self._items.append(f"{prefix_str}[{id}] {summary}")
        return self

    def items_section(self, title: str) -> "OutputTemplate":
        """Render accumulated items as a titled section and clear the buffer."""
        if self._items:
            self.section(title, "\n".join(self._items))
            self._items = []
        return self

    def footer(self, summary: Optional[str] = None) -> "OutputTemplate":
        self._summary = summary
        return self

    def hint(self, text: Optional[str]) -> "OutputTemplate":
        """Suggest the next command in the footer."""
        self._hint = text
        return self

    # =========================================================================
    # Rendering
    # =========================================================================

    def render(self) -> str:
        lines: List[str] = []
        if self._title:
            lines.extend(self._render_header())
        for section in self._sections:
            lines.extend(self._render_section(section))
        lines.extend(self._render_footer())
        return "\n".join(lines)

    def _render_header(self) -> List[str]:
        border = HEADER_CHAR * self.width
        title_line = f"{self._title} - {self._subtitle}" if self._subtitle else self._title
        lines = [border, title_line, border]

        if self._legend:
            legend_text = self._legend.render()
            if legend_text:
                lines.append(legend_text)
        if self._scope:
            lines.append(self._scope)

        lines.append("")
        return lines

    def _render_section(self, section: TemplateSection) -> List[str]:
        lines: List[str] = []
        if section.title:
            lines.append(section.title)
            lines.append(SECTION_CHAR * len(section.title))
        if section.content:
            lines.append(section.content)
        lines.append("")
        return lines

    def _render_footer(self) -> List[str]:
        lines = [SECTION_CHAR * self.width]
        if self._summary:
            lines.append(f"Summary: {self._summary}")
        if self._hint:
            lines.append(self._hint)
        lines.append(HEADER_CHAR * self.width)
        return lines

    # =========================================================================
    # Utility Methods
    # =========================================================================

    def format_table(
        self,
        rows: List[Dict[str, str]],
        columns: List[str],
        keys: Optional[List[str]] = None
    ) -> str:
        """
        Format data as simple aligned table (grep-parseable).

        Args:
            rows: List of dicts with data
            columns: Column headers
            keys: Dict keys for columns (defaults to lowercase headers)
        """
        if not rows:
            return ""

        keys = keys or [c.lower().replace(" ", "_") for c in columns]

        widths = [len(c) for c in columns]
        for row in rows:
            for i, key in enumerate(keys):
                widths[i] = max(widths[i], len(str(row.get(key, ""))))

        lines = ["  ".join(col.ljust(widths[i]) for i, col in enumerate(columns)).rstrip()]
        for row in rows:
            lines.append(
                "  ".join(str(row.get(key, "")).ljust(widths[i]) for i, key in enumerate(keys)).rstrip()
            )
        return "\n".join(lines)

    def format_list(self, items: List[str], bullet: Optional[str] = None) -> str:
        if not items:
            return ""
        bullet = bullet or self.symbols.bullet
        return "\n".join(f"{bullet} {item}" for item in items)
