"""
StatsCommand — Project overview with character accounting

Shows every context block as a tree with canonical character totals, and
every prompt with its selection size and placeholder status. With
--prompt, the trees mark which pieces that prompt selects.
"""

from typing import Optional

import orjson

from ..commands.base import BaseCommand
from ..core.compiler import PromptCompiler
from ..presentation.formatters import format_block_tree, format_chars, format_timestamp
from ..presentation.symbols import safe_print, sanitize_control_chars
from ..presentation.template import OutputTemplate


class StatsCommand(BaseCommand):
    """Summarize a project file."""

    def stats(
        self,
        project_path: str,
        prompt_ref: Optional[str] = None,
        as_json: bool = False,
        full: bool = False
    ) -> int:
        project = self.open_project(project_path)
        if project is None:
            return 1

        selection = None
        if prompt_ref is not None:
            prompt = self.find_prompt(project, prompt_ref)
            if prompt is None:
                return self.error(f"Prompt not found: {prompt_ref}")
            selection = prompt.selection

        compiler = PromptCompiler(self.config.compile.to_options())
        results = {
            prompt.id: compiler.compile(prompt, project.context_blocks)
            for prompt in project.prompt_blocks
        }

        if as_json:
            data = {
                "projectName": project.name,
                "totalChars": project.total_chars(),
                "contextBlocks": [
                    {"id": b.id, "title": b.title, "items": len(b.items), "totalChars": b.total_chars}
                    for b in project.context_blocks
                ],
                "promptBlocks": [
                    {
                        "id": p.id,
                        "title": p.title,
                        "selected": len(p.selection),
                        "contextChars": results[p.id].context_chars,
                        "totalChars": results[p.id].total_chars,
                        "placeholderFound": results[p.id].placeholder_found,
                    }
                    for p in project.prompt_blocks
                ],
            }
            print(orjson.dumps(data, option=orjson.OPT_INDENT_2).decode())
            return 0

        symbols = self.symbols
        template = OutputTemplate(symbols=symbols)
        template.header("PROMPTOZAURUS STATS", project.name)
        if selection is not None:
            template.legend({symbols.selected: "selected", symbols.unselected: "not selected"})
        template.scope(
            f"{len(project.context_blocks)} context block(s) | "
            f"{len(project.prompt_blocks)} prompt(s) | "
            f"updated {format_timestamp(project.updated_at)}"
        )

        tree_lines = []
        for block in project.context_blocks:
            tree_lines.extend(format_block_tree(symbols, block, selection, full))
        template.section("CONTEXT BLOCKS", "\n".join(tree_lines) or "(none)")

        for prompt in project.prompt_blocks:
            result = results[prompt.id]
            warning = f" {symbols.check_warn} no placeholder" if result.context_unused else ""
            template.item(
                str(prompt.id),
                f"{prompt.title}: {len(prompt.selection)} selected, "
                f"context {format_chars(result.context_chars)}, "
                f"total {format_chars(result.total_chars)}{warning}",
                prefix=symbols.prompt,
            )
        template.items_section("PROMPTS")

        template.footer(f"{format_chars(project.total_chars())} of context")
        if project.prompt_blocks:
            template.hint(f"Next: promptozaurus compile {project_path} {project.prompt_blocks[0].id}")
        safe_print(sanitize_control_chars(template.render()))
        return 0


# =============================================================================
# Command Registration (Self-Registration Pattern)
# =============================================================================

COMMAND_NAME = 'stats'


def register_parser(subparsers):
    """Register stats command parser."""
    p = subparsers.add_parser('stats', help='Show blocks, prompts and character counts')
    p.add_argument('project_file', help='Project JSON file')
    p.add_argument('--prompt', metavar='PROMPT', help='Mark the selection of this prompt (id or title)')
    p.add_argument('--json', action='store_true', help='Print statistics as JSON')
    p.add_argument('--full', action='store_true', help='Show longer content previews')
    return p


def handle(cli, args):
    """Handle stats command dispatch."""
    return cli._stats_cmd.stats(args.project_file, args.prompt, as_json=args.json, full=args.full)
