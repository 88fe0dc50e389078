"""
Services — Boundaries to the outside world

- Storage: Project and context block JSON files
- Gateway: Language-model backend boundary (request/response, adapters)
"""

from .storage import (
    StorageError, load_project, save_project, load_context_block, save_context_block,
    title_to_filename, filename_to_title,
)
from .gateway import (
    GatewayRequest, GatewayResponse, TokenUsage,
    GatewayAdapter, MockGatewayAdapter,
    register_adapter, get_adapter, request_from_compiled,
)

__all__ = [
    # Storage
    "StorageError", "load_project", "save_project", "load_context_block", "save_context_block",
    "title_to_filename", "filename_to_title",
    # Gateway
    "GatewayRequest", "GatewayResponse", "TokenUsage",
    "GatewayAdapter", "MockGatewayAdapter",
    "register_adapter", "get_adapter", "request_from_compiled",
]
