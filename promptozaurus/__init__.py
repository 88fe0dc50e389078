"""
Promptozaurus — Context composition and prompt compilation

Keep reusable context as blocks of items and sub-items, pick the pieces a
prompt needs, put them in order, and compile them into a template.

Usage:
    promptozaurus stats project.json
    promptozaurus compile project.json 1
    promptozaurus compile project.json "Review" --wrap --stats
    promptozaurus split project.json 1 2 --method delimiter --delimiter "---"
    promptozaurus split project.json 1 2 -n 3 --apply --as-sub-items
    promptozaurus config --set compile.wrap_with_tags=true
"""

__version__ = "0.1.0"

# Quiet until the application calls setup_logging()
from .observability import configure_default_logging
configure_default_logging()

# Core layer (data and algorithms)
from .core.keys import BlockKey, ItemKey, SubItemKey, parse_order_key
from .core.model import ContextBlock, ContextItem, ContextSubItem, total_chars
from .core.selection import SelectedContext, SelectionSet
from .core.prompt import PromptBlock
from .core.project import Project
from .core.compiler import CompileOptions, CompileResult, PromptCompiler, compile_prompt
from .core.splitter import SplitMethod, EndingType, SplitOptions, split_content
from .core.naming import (
    generate_default_context_block_name, generate_default_prompt_block_name,
    generate_default_item_name, generate_default_sub_item_name,
)

# Services layer
from .services.storage import StorageError, load_project, save_project
from .services.gateway import GatewayRequest, GatewayResponse, GatewayAdapter, get_adapter

# Presentation layer
from .presentation.symbols import get_symbols, SymbolSet, UNICODE, ASCII

# Config (stays at root)
from .config import Config, ConfigManager, get_config

__all__ = [
    # Core
    'BlockKey', 'ItemKey', 'SubItemKey', 'parse_order_key',
    'ContextBlock', 'ContextItem', 'ContextSubItem', 'total_chars',
    'SelectedContext', 'SelectionSet', 'PromptBlock', 'Project',
    'CompileOptions', 'CompileResult', 'PromptCompiler', 'compile_prompt',
    'SplitMethod', 'EndingType', 'SplitOptions', 'split_content',
    'generate_default_context_block_name', 'generate_default_prompt_block_name',
    'generate_default_item_name', 'generate_default_sub_item_name',
    # Services
    'StorageError', 'load_project', 'save_project',
    'GatewayRequest', 'GatewayResponse', 'GatewayAdapter', 'get_adapter',
    # Presentation
    'get_symbols', 'SymbolSet', 'UNICODE', 'ASCII',
    # Config
    'Config', 'ConfigManager', 'get_config',
]
