"""
Configuration — Centralized settings management

Config hierarchy (highest to lowest priority):
  1. Environment variables (PROMPTOZAURUS_*)
  2. Project config (.promptozaurus/config.yaml)
  3. User config (~/.promptozaurus/config.yaml)
  4. Defaults

API keys are NEVER stored in config files.
They must be provided via environment variables.
"""

import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional

import structlog
import yaml

from .core.compiler import CompileOptions, DEFAULT_PLACEHOLDERS
from .core.splitter import EndingType, SplitOptions
from .presentation.symbols import get_symbols

logger = structlog.get_logger(__name__)


# Gateway backends. grok and openrouter speak the OpenAI wire format.
PROVIDERS = {
    "openai": {
        "env_key": "OPENAI_API_KEY",
        "base_url": "https://api.openai.com/v1",
        "default_model": "gpt-4o-mini",
    },
    "anthropic": {
        "env_key": "ANTHROPIC_API_KEY",
        "base_url": "https://api.anthropic.com",
        "default_model": "claude-3-5-haiku-20241022",
    },
    "gemini": {
        "env_key": "GOOGLE_API_KEY",
        "base_url": "https://generativelanguage.googleapis.com",
        "default_model": "gemini-2.5-flash",
    },
    "grok": {
        "env_key": "XAI_API_KEY",
        "base_url": "https://api.x.ai/v1",
        "default_model": "grok-3-mini",
    },
    "openrouter": {
        "env_key": "OPENROUTER_API_KEY",
        "base_url": "https://openrouter.ai/api/v1",
        "default_model": "openai/gpt-4o-mini",
    },
}

DEFAULT_PROVIDER = "openai"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
LOG_FORMATS = ("console", "json")

ENV_OVERRIDES = {
    "PROMPTOZAURUS_GATEWAY_PROVIDER": ("gateway", "provider"),
    "PROMPTOZAURUS_GATEWAY_MODEL": ("gateway", "model"),
    "PROMPTOZAURUS_WRAP_WITH_TAGS": ("compile", "wrap_with_tags"),
    "PROMPTOZAURUS_LOG_LEVEL": ("logging", "level"),
    "PROMPTOZAURUS_LOG_FORMAT": ("logging", "format"),
}


@dataclass
class CompileConfig:
    """How prompts are rendered."""
    wrap_with_tags: bool = False
    placeholders: List[str] = field(default_factory=lambda: list(DEFAULT_PLACEHOLDERS))
    separator: str = "\n\n"
    context_title: str = "Context"

    def to_options(self) -> CompileOptions:
        return CompileOptions(
            placeholders=list(self.placeholders),
            separator=self.separator,
            context_title=self.context_title,
        )

    def validate(self) -> Optional[str]:
        """Validate config. Returns error message or None if valid."""
        if not self.placeholders or not all(isinstance(p, str) and p for p in self.placeholders):
            return "At least one non-empty placeholder is required"
        if not self.context_title:
            return "context_title must not be empty"
        return None


@dataclass
class SplitConfig:
    """Defaults for the split command."""
    parts_count: int = 2
    ending_type: str = EndingType.SENTENCE.value
    custom_delimiter: str = "Chapter"
    delimiter: str = "---"
    case_sensitive: bool = False
    include_delimiter: bool = False
    paragraphs_per_group: int = 1
    min_paragraph_size: int = 50
    pattern: str = SplitOptions.pattern
    include_match: bool = True
    part_label: str = "Part"

    def to_options(self) -> SplitOptions:
        data = {f.name: getattr(self, f.name) for f in fields(self)}
        return SplitOptions.from_dict(data)

    def validate(self) -> Optional[str]:
        valid_endings = [e.value for e in EndingType]
        if self.ending_type not in valid_endings:
            return f"Unknown ending type '{self.ending_type}'. Valid: {', '.join(valid_endings)}"
        if self.parts_count < 1:
            return "parts_count must be at least 1"
        if self.paragraphs_per_group < 1:
            return "paragraphs_per_group must be at least 1"
        if self.min_paragraph_size < 0:
            return "min_paragraph_size must not be negative"
        return None


@dataclass
class NamingConfig:
    """Prefixes for default block names."""
    context_prefix: str = "Context"
    prompt_prefix: str = "Prompt"

    def validate(self) -> Optional[str]:
        if not self.context_prefix or not self.prompt_prefix:
            return "Name prefixes must not be empty"
        return None


@dataclass
class GatewayConfig:
    """Language-model gateway settings."""
    provider: str = DEFAULT_PROVIDER
    model: Optional[str] = None  # None = use provider default
    temperature: float = 0.7
    max_tokens: int = 2048

    @property
    def effective_model(self) -> str:
        """Get model, falling back to provider default."""
        if self.model:
            return self.model
        return PROVIDERS.get(self.provider, {}).get("default_model", "")

    @property
    def api_key_env(self) -> str:
        return PROVIDERS.get(self.provider, {}).get("env_key", "")

    @property
    def api_key(self) -> Optional[str]:
        """Get API key from environment. Never stored."""
        return os.environ.get(self.api_key_env)

    @property
    def is_available(self) -> bool:
        return bool(self.api_key)

    def validate(self) -> Optional[str]:
        if self.provider not in PROVIDERS:
            valid = ", ".join(PROVIDERS.keys())
            return f"Unknown provider '{self.provider}'. Valid: {valid}"
        if not 0.0 <= self.temperature <= 2.0:
            return f"temperature must be between 0 and 2, got {self.temperature}"
        if self.max_tokens < 1:
            return f"max_tokens must be positive, got {self.max_tokens}"
        return None


@dataclass
class LoggingConfig:
    level: str = "WARNING"
    format: str = "console"  # "console" | "json"

    def validate(self) -> Optional[str]:
        if self.level.upper() not in LOG_LEVELS:
            return f"Unknown log level '{self.level}'. Valid: {', '.join(LOG_LEVELS)}"
        if self.format not in LOG_FORMATS:
            return f"Unknown log format '{self.format}'. Valid: {', '.join(LOG_FORMATS)}"
        return None


@dataclass
class DisplayConfig:
    """Display preferences."""
    symbols: str = "auto"  # "unicode" | "ascii" | "auto"

    def validate(self) -> Optional[str]:
        valid_symbols = ("unicode", "ascii", "auto")
        if self.symbols not in valid_symbols:
            return f"Unknown symbols setting '{self.symbols}'. Valid: {', '.join(valid_symbols)}"
        return None


SECTIONS = {
    "compile": CompileConfig,
    "split": SplitConfig,
    "naming": NamingConfig,
    "gateway": GatewayConfig,
    "logging": LoggingConfig,
    "display": DisplayConfig,
}


def _section_from_dict(section_cls, data: Any):
    if not isinstance(data, dict):
        data = {}
    known = {f.name for f in fields(section_cls)}
    return section_cls(**{k: v for k, v in data.items() if k in known})


def _coerce(value: str, current: Any, setting: str) -> Any:
    """Convert a string from the command line or environment to the setting's type."""
    if isinstance(current, bool):
        return value.lower() in ("true", "1", "yes")
    if isinstance(current, int):
        return int(value)
    if isinstance(current, float):
        return float(value)
    if isinstance(current, list):
        return [part.strip() for part in value.split(",") if part.strip()]
    if current is None and setting == "model":
        return value or None
    return value


@dataclass
class Config:
    """Application configuration."""
    compile: CompileConfig = field(default_factory=CompileConfig)
    split: SplitConfig = field(default_factory=SplitConfig)
    naming: NamingConfig = field(default_factory=NamingConfig)
    gateway: GatewayConfig = field(default_factory=GatewayConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    display: DisplayConfig = field(default_factory=DisplayConfig)

    def validate(self) -> Optional[str]:
        for name in SECTIONS:
            error = getattr(self, name).validate()
            if error:
                return f"{name}: {error}"
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            name: {f.name: getattr(getattr(self, name), f.name) for f in fields(section_cls)}
            for name, section_cls in SECTIONS.items()
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Config':
        """Create from dictionary; unknown keys are ignored."""
        return cls(**{
            name: _section_from_dict(section_cls, data.get(name))
            for name, section_cls in SECTIONS.items()
        })


class ConfigManager:
    """
    Manages configuration loading and persistence.

    Hierarchy:
      1. Environment variables
      2. Project config (.promptozaurus/config.yaml)
      3. User config (~/.promptozaurus/config.yaml)
      4. Defaults
    """

    USER_CONFIG_DIR = Path.home() / ".promptozaurus"
    USER_CONFIG_FILE = USER_CONFIG_DIR / "config.yaml"
    PROJECT_CONFIG_DIR = ".promptozaurus"
    PROJECT_CONFIG_FILE = "config.yaml"

    def __init__(self, project_dir: Optional[Path] = None):
        self.project_dir = Path(project_dir) if project_dir else Path.cwd()
        self._config: Optional[Config] = None

    @property
    def project_config_path(self) -> Path:
        return self.project_dir / self.PROJECT_CONFIG_DIR / self.PROJECT_CONFIG_FILE

    @property
    def user_config_path(self) -> Path:
        return self.USER_CONFIG_FILE

    def _read_layer(self, path: Path) -> Dict[str, Any]:
        if not path.exists():
            return {}
        try:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.warning("config_unreadable", path=str(path), error=str(e))
            return {}
        if not isinstance(data, dict):
            logger.warning("config_not_a_mapping", path=str(path))
            return {}
        return data

    def load(self) -> Config:
        """Load configuration from all sources."""
        if self._config is not None:
            return self._config

        config_data: Dict[str, Any] = {}
        config_data = self._merge(config_data, self._read_layer(self.user_config_path))
        config_data = self._merge(config_data, self._read_layer(self.project_config_path))

        config = Config.from_dict(config_data)

        for env_name, (section, setting) in ENV_OVERRIDES.items():
            raw = os.environ.get(env_name)
            if raw:
                target = getattr(config, section)
                setattr(target, setting, _coerce(raw, getattr(target, setting), setting))

        self._config = config
        return self._config

    def _save(self, path: Path, config: Config):
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w', encoding="utf-8") as f:
            yaml.safe_dump(config.to_dict(), f, default_flow_style=False, allow_unicode=True)
        self._config = config

    def save_project(self, config: Config):
        """Save configuration to project config file."""
        self._save(self.project_config_path, config)

    def save_user(self, config: Config):
        """Save configuration to user config file."""
        self._save(self.user_config_path, config)

    def set(self, key: str, value: str, scope: str = "project") -> Optional[str]:
        """
        Set a configuration value.

        Args:
            key: Dot-separated key (e.g., "gateway.provider")
            value: Value to set
            scope: "project" or "user"

        Returns:
            Error message or None if successful
        """
        config = self.load()

        parts = key.split(".")
        if len(parts) != 2:
            return f"Invalid key format: {key}. Use 'section.setting' (e.g., 'gateway.provider')"

        section, setting = parts
        if section not in SECTIONS:
            return f"Unknown section: {section}. Valid: {', '.join(SECTIONS)}"

        target = getattr(config, section)
        valid = [f.name for f in fields(target)]
        if setting not in valid:
            return f"Unknown {section} setting: {setting}. Valid: {', '.join(valid)}"

        previous = getattr(target, setting)
        try:
            setattr(target, setting, _coerce(value, previous, setting))
        except ValueError:
            return f"Invalid value for {key}: {value}"

        error = target.validate()
        if error:
            setattr(target, setting, previous)
            return error

        if scope == "project":
            self.save_project(config)
        else:
            self.save_user(config)
        return None

    def get(self, key: str) -> Optional[str]:
        """Get a configuration value as display text."""
        config = self.load()

        parts = key.split(".")
        if len(parts) != 2 or parts[0] not in SECTIONS:
            return None

        section, setting = parts
        target = getattr(config, section)
        if section == "gateway" and setting == "model":
            return target.effective_model
        if setting not in {f.name for f in fields(target)}:
            return None

        value = getattr(target, setting)
        if isinstance(value, bool):
            return str(value).lower()
        if isinstance(value, list):
            return ", ".join(value)
        return str(value)

    def _merge(self, base: Dict, override: Dict) -> Dict:
        """Deep merge two dicts, override wins."""
        result = base.copy()
        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._merge(result[key], value)
            else:
                result[key] = value
        return result

    def display(self) -> str:
        """Format config for display."""
        config = self.load()
        symbols = get_symbols(config.display.symbols)

        key_status = (f"{symbols.check_pass} Set" if config.gateway.is_available
                      else f"{symbols.check_fail} Missing")
        lines = [
            "Configuration:",
            "",
            "Compile:",
            f"  Wrap with tags: {config.compile.wrap_with_tags}",
            f"  Placeholders: {', '.join(config.compile.placeholders)}",
            "",
            "Split:",
            f"  Parts: {config.split.parts_count} ({config.split.ending_type})",
            f"  Delimiter: {config.split.delimiter}",
            f"  Pattern: {config.split.pattern}",
            "",
            "Naming:",
            f"  Context prefix: {config.naming.context_prefix}",
            f"  Prompt prefix: {config.naming.prompt_prefix}",
            "",
            "Gateway:",
            f"  Provider: {config.gateway.provider}",
            f"  Model: {config.gateway.effective_model}",
            f"  API Key: {key_status}",
        ]

        if not config.gateway.is_available and config.gateway.api_key_env:
            lines.append(f"  (Set {config.gateway.api_key_env} environment variable)")

        lines.extend([
            "",
            "Logging:",
            f"  Level: {config.logging.level}",
            f"  Format: {config.logging.format}",
            "",
            "Config files:",
            f"  User: {self.user_config_path}",
            f"  Project: {self.project_config_path}",
        ])

        return "\n".join(lines)


# Convenience function
def get_config(project_dir: Optional[Path] = None) -> Config:
    """Load configuration for a project."""
    return ConfigManager(project_dir).load()
