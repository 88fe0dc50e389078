"""
BaseCommand — Shared foundation for all CLI commands

Provides access to CLI resources via composition.
Commands receive the CLI instance and access its resources through properties.
"""

from pathlib import Path
from typing import Optional, TYPE_CHECKING

from ..core.keys import is_number
from ..core.model import ContextBlock
from ..core.project import Project
from ..core.prompt import PromptBlock
from ..observability import bind_project
from ..services.storage import StorageError, load_project, save_project

if TYPE_CHECKING:
    from ..cli import PromptozaurusCLI


class BaseCommand:
    """
    Base class for CLI commands with access to shared resources.

    Commands don't reinitialize resources; they access them via the CLI instance.
    """

    def __init__(self, cli: 'PromptozaurusCLI'):
        self._cli = cli

    # -------------------------------------------------------------------------
    # Core resources (convenience properties)
    # -------------------------------------------------------------------------

    @property
    def project_dir(self) -> Path:
        return self._cli.project_dir

    @property
    def config(self):
        """Application configuration."""
        return self._cli.config

    @property
    def config_manager(self):
        return self._cli.config_manager

    @property
    def symbols(self):
        """Symbol set for display (Unicode/ASCII)."""
        return self._cli.symbols

    # -------------------------------------------------------------------------
    # Shared helpers
    # -------------------------------------------------------------------------

    def error(self, message: str) -> int:
        """Report an error line; returns the exit code to propagate."""
        print(f"Error: {message}")
        return 1

    def resolve_path(self, path: str) -> Path:
        candidate = Path(path)
        if not candidate.is_absolute():
            candidate = self.project_dir / candidate
        return candidate

    def open_project(self, path: str) -> Optional[Project]:
        """Load a project file, reporting failures; None on error."""
        try:
            project = load_project(self.resolve_path(path))
        except StorageError as e:
            self.error(str(e))
            return None
        project.context_prefix = self.config.naming.context_prefix
        project.prompt_prefix = self.config.naming.prompt_prefix
        bind_project(project.name)
        return project

    def write_project(self, project: Project, path: str) -> bool:
        try:
            save_project(project, self.resolve_path(path))
        except StorageError as e:
            self.error(str(e))
            return False
        return True

    def find_prompt(self, project: Project, ref: str) -> Optional[PromptBlock]:
        """Find a prompt by id or exact title."""
        if is_number(ref):
            return project.get_prompt_block(int(ref))
        for prompt in project.prompt_blocks:
            if prompt.title == ref:
                return prompt
        return None

    def find_block(self, project: Project, ref: str) -> Optional[ContextBlock]:
        """Find a context block by id or exact title."""
        if is_number(ref):
            return project.get_context_block(int(ref))
        for block in project.context_blocks:
            if block.title == ref:
                return block
        return None
