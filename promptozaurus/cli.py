"""
CLI -- Command interface

Thin surface over a project JSON file: compile prompts, split oversized
content, inspect character totals, manage configuration.

Compiled text goes to stdout; logs go to stderr.
"""

import argparse
import os
from pathlib import Path
from typing import List, Optional

from .config import ConfigManager
from .observability import setup_logging
from .presentation.symbols import get_symbols
from .commands.compile_cmd import CompileCommand
from .commands.split_cmd import SplitCommand
from .commands.stats_cmd import StatsCommand
from .commands.config_cmd import ConfigCommand
from . import __version__


class PromptozaurusCLI:
    """Command-line interface for composing prompts from context blocks."""

    def __init__(self, project_dir: Path):
        self.project_dir = Path(project_dir)
        self.config_manager = ConfigManager(self.project_dir)
        self.config = self.config_manager.load()

        # Initialize symbols based on config
        self.symbols = get_symbols(self.config.display.symbols)

        # Initialize command handlers (modular architecture)
        self._compile_cmd = CompileCommand(self)
        self._split_cmd = SplitCommand(self)
        self._stats_cmd = StatsCommand(self)
        self._config_cmd = ConfigCommand(self)


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for the promptozaurus CLI.

    Uses command registry pattern for modular command handling.
    Parser definitions and dispatch logic are in individual command modules.

    Returns:
        Process exit code
    """
    parser = argparse.ArgumentParser(
        description="Promptozaurus -- Compose prompts from reusable context",
        epilog="Select context pieces, order them, compile them into a template."
    )

    parser.add_argument(
        '--project', '-p',
        default=os.environ.get("PROMPTOZAURUS_PROJECT_PATH", "."),
        help='Working directory (default: PROMPTOZAURUS_PROJECT_PATH or current)'
    )

    parser.add_argument(
        '--version', '-V',
        action='version',
        version=f'promptozaurus {__version__}'
    )

    subparsers = parser.add_subparsers(dest='command', help='Commands')

    # Register all commands from command modules (self-registration pattern)
    from .commands import register_all, dispatch
    register_all(subparsers)

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    cli = PromptozaurusCLI(Path(args.project))
    setup_logging(cli.config.logging.level, cli.config.logging.format)

    try:
        return dispatch(args.command, cli, args)
    except KeyError as e:
        print(f"Error: {e}")
        parser.print_help()
        return 1


if __name__ == '__main__':
    raise SystemExit(main())
