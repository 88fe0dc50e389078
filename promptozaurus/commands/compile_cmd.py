"""
CompileCommand — Render a prompt with its selected context

Prints the compiled prompt (or writes it to a file), optionally with
character statistics, as JSON, or handed to the configured gateway.
"""

from typing import Optional

import orjson

from ..commands.base import BaseCommand
from ..core.compiler import CompileResult, PromptCompiler
from ..presentation.formatters import format_chars, format_status_line
from ..presentation.symbols import safe_print, sanitize_control_chars
from ..presentation.template import OutputTemplate
from ..services.gateway import get_adapter, request_from_compiled


class CompileCommand(BaseCommand):
    """Compile prompts from a project file."""

    def compile(
        self,
        project_path: str,
        prompt_ref: str,
        wrap: Optional[bool] = None,
        as_json: bool = False,
        show_stats: bool = False,
        output: Optional[str] = None
    ) -> int:
        """
        Compile one prompt.

        Args:
            project_path: Project JSON file
            prompt_ref: Prompt id or title
            wrap: Wrap context in tags (None = compile.wrap_with_tags)
            as_json: Print the full result as JSON
            show_stats: Print character statistics instead of the text
            output: Write compiled text to this file

        Returns:
            Exit code
        """
        result = self._compile(project_path, prompt_ref, wrap)
        if result is None:
            return 1

        if output:
            path = self.resolve_path(output)
            try:
                path.parent.mkdir(parents=True, exist_ok=True)
                path.write_text(result.compiled, encoding="utf-8")
            except OSError as e:
                return self.error(f"Could not write {path}: {e}")
            print(f"{self.symbols.check_pass} Wrote {format_chars(result.total_chars)} to {path}")
            return 0

        if as_json:
            print(orjson.dumps(result.to_dict(), option=orjson.OPT_INDENT_2).decode())
        elif show_stats:
            safe_print(sanitize_control_chars(self._render_stats(prompt_ref, result)))
        else:
            safe_print(result.compiled)
        return 0

    def send(
        self,
        project_path: str,
        prompt_ref: str,
        wrap: Optional[bool] = None,
        system_prompt: Optional[str] = None
    ) -> int:
        """Compile a prompt and hand it to the configured gateway adapter."""
        result = self._compile(project_path, prompt_ref, wrap)
        if result is None:
            return 1

        adapter = get_adapter(self.config)
        request = request_from_compiled(result, self.config.gateway, system_prompt)
        response = adapter.send(request)
        if not response.ok:
            return self.error(f"{response.provider}: {response.error}")

        safe_print(sanitize_control_chars(response.content))
        if response.usage is not None:
            print(f"\n{response.provider}/{response.model} {response.usage.format_tokens(self.symbols)}")
        return 0

    def _compile(self, project_path: str, prompt_ref: str, wrap: Optional[bool]) -> Optional[CompileResult]:
        project = self.open_project(project_path)
        if project is None:
            return None

        prompt = self.find_prompt(project, prompt_ref)
        if prompt is None:
            self.error(f"Prompt not found: {prompt_ref}")
            return None

        if wrap is None:
            wrap = self.config.compile.wrap_with_tags
        compiler = PromptCompiler(self.config.compile.to_options())
        return compiler.compile(prompt, project.context_blocks, wrap)

    def _render_stats(self, prompt_ref: str, result: CompileResult) -> str:
        symbols = self.symbols
        template = OutputTemplate(symbols=symbols)
        template.header("PROMPTOZAURUS COMPILE", f"Prompt {prompt_ref}")

        rows = [
            {"measure": "Context", "chars": format_chars(result.context_chars)},
            {"measure": "Template", "chars": format_chars(result.template_chars)},
            {"measure": "Total", "chars": format_chars(result.total_chars)},
        ]
        template.section("CHARACTERS", template.format_table(rows, ["Measure", "Chars"]))

        pieces = [f"{piece.key.to_wire()} {piece.title} ({format_chars(piece.chars)})"
                  for piece in result.pieces]
        template.section("PIECES", template.format_list(pieces) or "(none)")

        if result.context_unused:
            status = format_status_line(symbols, False, "template has no placeholder; selected context is not used")
        elif result.placeholder_found:
            status = format_status_line(symbols, True, "placeholder found")
        else:
            status = format_status_line(symbols, True, "no placeholder and no context selected")
        template.section("STATUS", status)
        template.footer(f"fingerprint {result.fingerprint}")
        return template.render()


# =============================================================================
# Command Registration (Self-Registration Pattern)
# =============================================================================

COMMAND_NAME = 'compile'


def register_parser(subparsers):
    """Register compile command parser."""
    p = subparsers.add_parser('compile', help='Compile a prompt with its selected context')
    p.add_argument('project_file', help='Project JSON file')
    p.add_argument('prompt', help='Prompt id or title')
    p.add_argument('--wrap', dest='wrap', action='store_const', const=True, default=None,
                   help='Wrap each context piece in title tags')
    p.add_argument('--no-wrap', dest='wrap', action='store_const', const=False,
                   help='Do not wrap context (overrides compile.wrap_with_tags)')
    p.add_argument('--json', action='store_true', help='Print the full result as JSON')
    p.add_argument('--stats', action='store_true', help='Show character statistics')
    p.add_argument('--output', '-o', metavar='FILE', help='Write compiled text to FILE')
    p.add_argument('--send', action='store_true', help='Send the compiled prompt to the gateway')
    p.add_argument('--system', metavar='TEXT', help='System prompt (with --send)')
    return p


def handle(cli, args):
    """Handle compile command dispatch."""
    if args.send:
        return cli._compile_cmd.send(args.project_file, args.prompt, args.wrap, args.system)
    return cli._compile_cmd.compile(
        args.project_file, args.prompt,
        wrap=args.wrap, as_json=args.json, show_stats=args.stats, output=args.output,
    )
