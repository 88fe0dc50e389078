"""
SplitCommand — Preview and apply content splits

Without --apply the parts are only shown, so options can be tried freely.
With --apply the chosen parts become new items or sub-items and the
project file is saved.
"""

from typing import List, Optional

from ..commands.base import BaseCommand
from ..core.keys import is_number
from ..core.splitter import EndingType, SplitMethod, SplitOptions, split_content
from ..presentation.formatters import format_chars, format_split_preview
from ..presentation.symbols import safe_print, sanitize_control_chars
from ..presentation.template import OutputTemplate


def _parse_part_numbers(selection: str, count: int) -> Optional[List[int]]:
    """
    Parse a part selection like "1,3-4" into zero-based indexes.

    Returns:
        Sorted indexes, or None when the selection is malformed or out of range
    """
    indexes = set()
    for chunk in selection.split(","):
        chunk = chunk.strip()
        if not chunk:
            continue
        if "-" in chunk:
            start, _, end = chunk.partition("-")
            if not (is_number(start) and is_number(end)):
                return None
            numbers = range(int(start), int(end) + 1)
        elif is_number(chunk):
            numbers = [int(chunk)]
        else:
            return None
        for number in numbers:
            if number < 1 or number > count:
                return None
            indexes.add(number - 1)
    return sorted(indexes) or None


class SplitCommand(BaseCommand):
    """Split an item or sub-item of a project."""

    def split(
        self,
        project_path: str,
        block_ref: str,
        item_id: int,
        options: SplitOptions,
        method: str = SplitMethod.EQUAL.value,
        sub_item_id: Optional[int] = None,
        apply: bool = False,
        parts: Optional[str] = None,
        keep_original: bool = True,
        as_sub_items: bool = False,
        full: bool = False
    ) -> int:
        """
        Split one item's (or sub-item's) content.

        Args:
            project_path: Project JSON file
            block_ref: Block id or title
            item_id: Item to split (or parent of the sub-item)
            options: Splitter settings
            method: equal, delimiter, paragraphs or pattern
            sub_item_id: Sub-item to split instead of the item
            apply: Write the parts into the project
            parts: Subset of parts to apply, e.g. "1,3-4"
            keep_original: Leave the source content in place
            as_sub_items: Add item parts as sub-items of the item
            full: Show untruncated previews

        Returns:
            Exit code
        """
        project = self.open_project(project_path)
        if project is None:
            return 1

        block = self.find_block(project, block_ref)
        if block is None:
            return self.error(f"Context block not found: {block_ref}")

        item = block.get_item(item_id)
        if item is None:
            return self.error(f"Item {item_id} not found in {block.title}")

        source = item
        if sub_item_id is not None:
            source = item.get_sub_item(sub_item_id)
            if source is None:
                return self.error(f"Sub-item {item_id}.{sub_item_id} not found in {block.title}")

        result = split_content(source.content, method, options)

        symbols = self.symbols
        template = OutputTemplate(symbols=symbols)
        template.header("PROMPTOZAURUS SPLIT", f"{source.title} ({method})")
        template.scope(f"{format_chars(source.chars)} {symbols.arrow} {len(result)} part(s)")
        template.section("PARTS", "\n".join(format_split_preview(symbols, result, full)))

        if not apply:
            template.footer("Preview only")
            template.hint("Apply with: --apply [--parts 1,3-4]")
            safe_print(sanitize_control_chars(template.render()))
            return 0

        chosen = result
        if parts:
            indexes = _parse_part_numbers(parts, len(result))
            if indexes is None:
                return self.error(f"Invalid part selection: {parts} (1-{len(result)})")
            chosen = [result[i] for i in indexes]

        created = block.apply_split(
            item_id, chosen,
            sub_item_id=sub_item_id,
            create_sub_items=as_sub_items,
            keep_original=keep_original,
            part_label=self.config.split.part_label,
        )
        project.touch()
        if not self.write_project(project, project_path):
            return 1

        created_lines = [f"[{c.id}] {c.title} ({format_chars(c.chars)})" for c in created]
        if created_lines:
            template.section("CREATED", template.format_list(created_lines))
        template.footer(f"{symbols.check_pass} {len(created)} created, project saved")
        safe_print(sanitize_control_chars(template.render()))
        return 0


# =============================================================================
# Command Registration (Self-Registration Pattern)
# =============================================================================

COMMAND_NAME = 'split'


def register_parser(subparsers):
    """Register split command parser."""
    p = subparsers.add_parser('split', help='Preview or apply a content split')
    p.add_argument('project_file', help='Project JSON file')
    p.add_argument('block', help='Context block id or title')
    p.add_argument('item', type=int, help='Item id')
    p.add_argument('--sub', type=int, metavar='SUB_ID', help='Split this sub-item of the item')
    p.add_argument('--method', '-m', choices=[m.value for m in SplitMethod],
                   default=SplitMethod.EQUAL.value, help='Split strategy (default: equal)')
    p.add_argument('--parts-count', '-n', type=int, help='Number of parts (equal)')
    p.add_argument('--ending', choices=[e.value for e in EndingType],
                   help='Where equal cuts may land')
    p.add_argument('--custom-delimiter', help='Marker for the delimiter ending (equal)')
    p.add_argument('--delimiter', help='Regular expression to split on (delimiter)')
    p.add_argument('--case-sensitive', action='store_true', help='Case-sensitive delimiter')
    p.add_argument('--include-delimiter', action='store_true',
                   help='Keep the delimiter at the end of each part')
    p.add_argument('--per-group', type=int, help='Paragraphs per part (paragraphs)')
    p.add_argument('--min-size', type=int, help='Drop shorter paragraphs (paragraphs)')
    p.add_argument('--pattern', help='Multiline regex that starts each part (pattern)')
    p.add_argument('--drop-match', action='store_true',
                   help='Drop the matched text instead of leading the part with it (pattern)')
    p.add_argument('--apply', action='store_true', help='Write the parts into the project')
    p.add_argument('--parts', metavar='LIST', help='Parts to apply, e.g. 1,3-4 (with --apply)')
    p.add_argument('--replace', action='store_true',
                   help='Put part 1 into the source instead of keeping the original (with --apply)')
    p.add_argument('--as-sub-items', action='store_true',
                   help='Add item parts as sub-items (with --apply)')
    p.add_argument('--full', action='store_true', help='Show full part previews')
    return p


def options_from_args(defaults: SplitOptions, args) -> SplitOptions:
    """Overlay command-line values on configured split defaults."""
    options = SplitOptions.from_dict(defaults.to_dict())
    overrides = {
        "parts_count": args.parts_count,
        "ending_type": args.ending,
        "custom_delimiter": args.custom_delimiter,
        "delimiter": args.delimiter,
        "paragraphs_per_group": args.per_group,
        "min_paragraph_size": args.min_size,
        "pattern": args.pattern,
    }
    for name, value in overrides.items():
        if value is not None:
            setattr(options, name, value)
    if args.case_sensitive:
        options.case_sensitive = True
    if args.include_delimiter:
        options.include_delimiter = True
    if args.drop_match:
        options.include_match = False
    return options


def handle(cli, args):
    """Handle split command dispatch."""
    options = options_from_args(cli.config.split.to_options(), args)
    return cli._split_cmd.split(
        args.project_file, args.block, args.item, options,
        method=args.method,
        sub_item_id=args.sub,
        apply=args.apply,
        parts=args.parts,
        keep_original=not args.replace,
        as_sub_items=args.as_sub_items,
        full=args.full,
    )
