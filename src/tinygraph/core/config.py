# src/tinygraph/core/config.py
"""
Configuration schema and loading for tinygraph applications.

The engine itself takes no configuration; these settings drive logging,
the CLI and the example retrieval application. Uses Pydantic for
validation and Dynaconf for multi-source loading. Settings are frozen
(immutable) after construction.
"""

from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field, SecretStr, field_validator, model_validator


class LoggingSettings(BaseModel):
    """Log output format and threshold."""

    model_config = {"frozen": True, "extra": "forbid"}

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Root log level",
    )
    json_output: bool = Field(
        default=False,
        description="Emit JSON lines instead of console output",
    )

    @field_validator("level", mode="before")
    @classmethod
    def normalize_level(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.upper()
        return v


class ProviderSettings(BaseModel):
    """OpenAI-compatible generation and embedding service.

    Example YAML:
        provider:
          base_url: https://api.openai.com/v1
          llm_model: gpt-4o-mini
          embed_model: text-embedding-3-small

    The API key is best supplied as TINYGRAPH_PROVIDER__API_KEY.
    """

    model_config = {"frozen": True, "extra": "forbid"}

    base_url: str = Field(
        default="https://api.openai.com/v1",
        description="Base URL of the OpenAI-compatible API",
    )
    api_key: SecretStr | None = Field(
        default=None,
        description="Bearer token for the API",
    )
    llm_model: str = Field(
        default="gpt-4o-mini",
        description="Chat completion model",
    )
    embed_model: str = Field(
        default="text-embedding-3-small",
        description="Embedding model",
    )
    timeout_seconds: float = Field(
        default=60.0,
        gt=0,
        description="Per-request HTTP timeout",
    )

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")


class StoreSettings(BaseModel):
    """Vector store location and search size."""

    model_config = {"frozen": True, "extra": "forbid"}

    url: str = Field(
        default="sqlite:///tinygraph.db",
        description="SQLAlchemy database URL",
    )
    search_limit: int = Field(
        default=10,
        gt=0,
        description="Number of nearest chunks returned by a search",
    )


class ChunkingSettings(BaseModel):
    """Character-based document chunking."""

    model_config = {"frozen": True, "extra": "forbid"}

    max_chars: int = Field(default=2048, gt=0)
    overlap: int = Field(default=256, ge=0)

    @model_validator(mode="after")
    def validate_overlap(self) -> "ChunkingSettings":
        if self.overlap >= self.max_chars:
            raise ValueError(f"overlap ({self.overlap}) must be smaller than max_chars ({self.max_chars})")
        return self


class ServerSettings(BaseModel):
    """HTTP binding for the example server."""

    model_config = {"frozen": True, "extra": "forbid"}

    host: str = "127.0.0.1"
    port: int = Field(default=3000, ge=1, le=65535)


class TinygraphSettings(BaseModel):
    """Top-level settings."""

    model_config = {"frozen": True, "extra": "forbid"}

    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    provider: ProviderSettings = Field(default_factory=ProviderSettings)
    store: StoreSettings = Field(default_factory=StoreSettings)
    chunking: ChunkingSettings = Field(default_factory=ChunkingSettings)
    server: ServerSettings = Field(default_factory=ServerSettings)


def load_settings(config_path: Path | None = None) -> TinygraphSettings:
    """Load settings from an optional YAML file with environment overrides.

    Uses Dynaconf for multi-source loading with precedence:
    1. Environment variables (TINYGRAPH_*) - highest priority
    2. Config file, when given
    3. Defaults from the Pydantic schema - lowest priority

    Environment variable format: TINYGRAPH_PROVIDER__API_KEY for nested keys.

    Args:
        config_path: Path to YAML configuration file, or None for
            environment and defaults only

    Returns:
        Validated TinygraphSettings instance

    Raises:
        ValidationError: If configuration fails Pydantic validation
        FileNotFoundError: If config_path is given but doesn't exist
    """
    from dynaconf import Dynaconf

    # Dynaconf silently accepts missing files
    if config_path is not None and not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    dynaconf_settings = Dynaconf(
        envvar_prefix="TINYGRAPH",
        settings_files=[str(config_path)] if config_path is not None else [],
        environments=False,
        load_dotenv=False,
        merge_enabled=True,
    )

    # Dynaconf returns uppercase keys; Pydantic expects lowercase
    internal_keys = {"LOAD_DOTENV", "ENVIRONMENTS", "SETTINGS_FILES"}
    raw_config = _lower_keys({k: v for k, v in dynaconf_settings.as_dict().items() if k not in internal_keys})

    return TinygraphSettings(**raw_config)


def _lower_keys(value: Any) -> Any:
    if isinstance(value, dict):
        return {str(k).lower(): _lower_keys(v) for k, v in value.items()}
    return value
