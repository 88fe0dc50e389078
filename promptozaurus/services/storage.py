"""
Storage — Project and context block files

Projects and exported context blocks are plain JSON in the camelCase shape
produced by Project.to_dict() / ContextBlock.to_dict(). orjson does the
encoding; loading goes through from_dict, which migrates older files.

Structure:
    my_project.json          → {"projectName", "contextBlocks", "promptBlocks", ...}
    blocks/research_notes.json → {"id", "title", "items"}
"""

import re
from pathlib import Path
from typing import Any, Dict, Union

import orjson
import structlog

from ..core.model import ContextBlock
from ..core.project import Project

logger = structlog.get_logger(__name__)

DEFAULT_BLOCK_FILENAME = "context_block"
DEFAULT_BLOCK_TITLE = "Context block"

_UNSAFE_FILENAME_CHARS = re.compile(r"[^a-zA-Z0-9_а-яА-ЯёЁ]")


class StorageError(Exception):
    """A project or block file could not be read or written."""


def title_to_filename(title: str) -> str:
    """
    Filename stem for an exported block title.

    Lowercased, whitespace runs become underscores, anything but Latin or
    Cyrillic letters, digits and underscores is removed.

    Examples:
        title_to_filename("Research Notes!")  -> "research_notes"
        title_to_filename("")                 -> "context_block"
    """
    if not title:
        return DEFAULT_BLOCK_FILENAME
    filename = _UNSAFE_FILENAME_CHARS.sub("", re.sub(r"\s+", "_", title.lower()))
    return filename or DEFAULT_BLOCK_FILENAME


def filename_to_title(filename: str) -> str:
    """
    Readable title from a block filename.

    Examples:
        filename_to_title("blocks/research_notes.json") -> "Research Notes"
    """
    if not filename:
        return DEFAULT_BLOCK_TITLE
    stem = re.sub(r"\.json$", "", filename)
    base = re.split(r"[/\\]", stem)[-1]
    return " ".join(word[:1].upper() + word[1:] for word in base.split("_"))


def _read_json(path: Path) -> Any:
    try:
        return orjson.loads(Path(path).read_bytes())
    except FileNotFoundError:
        raise StorageError(f"File not found: {path}") from None
    except OSError as e:
        raise StorageError(f"Could not read {path}: {e}") from e
    except orjson.JSONDecodeError as e:
        raise StorageError(f"Invalid JSON in {path}: {e}") from e


def _write_json(path: Path, data: Dict[str, Any]):
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(orjson.dumps(data, option=orjson.OPT_INDENT_2))
    except OSError as e:
        raise StorageError(f"Could not write {path}: {e}") from e


def load_project(path: Union[str, Path]) -> Project:
    """
    Load a project file.

    Raises:
        StorageError: If the file is missing, unreadable or not a project
    """
    data = _read_json(Path(path))
    if not isinstance(data, dict):
        raise StorageError(f"Not a project file: {path}")
    try:
        project = Project.from_dict(data)
    except TypeError as e:
        raise StorageError(f"Malformed project file {path}: {e}") from e
    logger.debug("project_file_loaded", path=str(path))
    return project


def save_project(project: Project, path: Union[str, Path]) -> Path:
    """Write a project file, creating parent directories as needed."""
    path = Path(path)
    _write_json(path, project.to_dict())
    logger.debug("project_file_saved", path=str(path))
    return path


def load_context_block(path: Union[str, Path]) -> Dict[str, Any]:
    """
    Read an exported block as raw data, ready for Project.import_context_block.

    A missing title is taken from the filename.
    """
    data = _read_json(Path(path))
    if not isinstance(data, dict):
        raise StorageError(f"Not a context block file: {path}")
    if not data.get("title"):
        data["title"] = filename_to_title(Path(path).name)
    return data


def save_context_block(block: ContextBlock, directory: Union[str, Path]) -> Path:
    """Export one block to <directory>/<title_to_filename(title)>.json."""
    path = Path(directory) / f"{title_to_filename(block.title)}.json"
    _write_json(path, block.to_dict())
    logger.debug("context_block_exported", block_id=block.id, path=str(path))
    return path
