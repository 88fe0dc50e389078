"""
Gateway — Boundary to language-model backends

The compiled prompt is handed to a GatewayAdapter, which returns a
normalized GatewayResponse regardless of vendor. Vendor adapters live
outside this package; they register themselves with register_adapter().
With no adapter registered for the configured provider, the
MockGatewayAdapter is used.

Failures are reported in GatewayResponse.error rather than raised, so
callers treat every backend the same way.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Optional, Type

import structlog

from ..config import Config, GatewayConfig, PROVIDERS
from ..core.compiler import CompileResult

logger = structlog.get_logger(__name__)


@dataclass
class GatewayRequest:
    """What a backend needs to produce a completion."""
    prompt: str
    model: str
    system_prompt: Optional[str] = None
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None

    def validate(self) -> Optional[str]:
        """Returns error message or None if valid."""
        if not isinstance(self.prompt, str) or not self.prompt.strip():
            return "prompt must be a non-empty string"
        if not self.model:
            return "model is required"
        if self.temperature is not None and not 0.0 <= self.temperature <= 2.0:
            return f"temperature must be between 0 and 2, got {self.temperature}"
        if self.max_tokens is not None and self.max_tokens < 1:
            return f"max_tokens must be positive, got {self.max_tokens}"
        return None

    def to_dict(self) -> Dict[str, Any]:
        data = {"prompt": self.prompt, "model": self.model}
        if self.system_prompt is not None:
            data["systemPrompt"] = self.system_prompt
        if self.temperature is not None:
            data["temperature"] = self.temperature
        if self.max_tokens is not None:
            data["maxTokens"] = self.max_tokens
        return data


@dataclass
class TokenUsage:
    prompt_tokens: int = 0
    completion_tokens: int = 0

    @property
    def total_tokens(self) -> int:
        return self.prompt_tokens + self.completion_tokens

    def format_tokens(self, symbols=None) -> str:
        """Format token usage for display."""
        if symbols:
            return (f"{symbols.tokens_in}{self.prompt_tokens} "
                    f"{symbols.tokens_out}{self.completion_tokens} "
                    f"{symbols.tokens_total}{self.total_tokens}")
        return f"in:{self.prompt_tokens} out:{self.completion_tokens} total:{self.total_tokens}"

    def to_dict(self) -> Dict[str, int]:
        return {
            "promptTokens": self.prompt_tokens,
            "completionTokens": self.completion_tokens,
            "totalTokens": self.total_tokens,
        }


@dataclass
class GatewayResponse:
    """Normalized completion from any backend."""
    content: str
    model: str
    provider: str
    usage: Optional[TokenUsage] = None
    finish_reason: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "content": self.content,
            "model": self.model,
            "provider": self.provider,
        }
        if self.usage is not None:
            data["usage"] = self.usage.to_dict()
        if self.finish_reason is not None:
            data["finishReason"] = self.finish_reason
        if self.error is not None:
            data["error"] = self.error
        return data


class GatewayAdapter(ABC):
    """Abstract base for backend adapters."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Name reported in GatewayResponse.provider."""
        pass

    @abstractmethod
    def send(self, request: GatewayRequest) -> GatewayResponse:
        """
        Send a prompt to the backend.

        Args:
            request: Prompt and generation settings

        Returns:
            Normalized response; failures set response.error
        """
        pass

    @property
    def is_available(self) -> bool:
        """Check if adapter is configured and ready."""
        return True

    def format_error(self, error: Exception) -> str:
        return str(error) or type(error).__name__

    def error_response(self, request: GatewayRequest, message: str) -> GatewayResponse:
        return GatewayResponse(
            content="",
            model=request.model,
            provider=self.provider_name,
            error=message,
        )


def estimate_tokens(text: str) -> int:
    """Rough token count (four characters per token)."""
    return (len(text) + 3) // 4


class MockGatewayAdapter(GatewayAdapter):
    """Echoes the prompt back; for tests and dry runs."""

    def __init__(self, provider: str = "mock"):
        self._provider = provider
        self.requests = []

    @property
    def provider_name(self) -> str:
        return self._provider

    def send(self, request: GatewayRequest) -> GatewayResponse:
        self.requests.append(request)
        error = request.validate()
        if error:
            return self.error_response(request, error)

        prompt_tokens = estimate_tokens((request.system_prompt or "") + request.prompt)
        return GatewayResponse(
            content=request.prompt,
            model=request.model,
            provider=self.provider_name,
            usage=TokenUsage(prompt_tokens=prompt_tokens, completion_tokens=prompt_tokens),
            finish_reason="stop",
        )


ADAPTERS: Dict[str, Type[GatewayAdapter]] = {}


def register_adapter(provider: str, adapter_class: Type[GatewayAdapter]):
    """Make an adapter class available for a configured provider name."""
    if provider not in PROVIDERS:
        raise ValueError(f"Unknown provider '{provider}'. Valid: {', '.join(PROVIDERS)}")
    ADAPTERS[provider] = adapter_class


def get_adapter(config: Config) -> GatewayAdapter:
    """
    Get the adapter for the configured provider.

    Returns:
        Registered adapter if one exists and is available, else MockGatewayAdapter
    """
    provider = config.gateway.provider
    adapter_class = ADAPTERS.get(provider)
    if adapter_class is not None:
        adapter = adapter_class(config.gateway)
        if adapter.is_available:
            return adapter
        logger.warning("gateway_adapter_unavailable", provider=provider)
    return MockGatewayAdapter()


def request_from_compiled(
    result: CompileResult,
    gateway: GatewayConfig,
    system_prompt: Optional[str] = None
) -> GatewayRequest:
    """Build a gateway request from a compile result and gateway settings."""
    return GatewayRequest(
        prompt=result.compiled,
        model=gateway.effective_model,
        system_prompt=system_prompt,
        temperature=gateway.temperature,
        max_tokens=gateway.max_tokens,
    )
