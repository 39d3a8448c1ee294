"""
Configuration for the rate-limit fallback service.

Two layers:

- Settings: service settings loaded from environment variables with sensible
  defaults. Use .env file for local development.
- FallbackConfig: the user's plugin config, a JSON file in the host's config
  directory (rate-limit-fallback.json). Any subset of keys may be present;
  missing or unreadable files fall back to built-in defaults.
"""

import json
import os
import sys
from pathlib import Path
from typing import Any, Optional, Union

import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from rate_limit_fallback.models.fallback_models import FallbackModelSpec

logger = structlog.get_logger(__name__)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # === Application ===
    APP_NAME: str = "Rate Limit Fallback"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    ENVIRONMENT: str = "development"

    # === Host (session API) ===
    HOST_BASE_URL: str = "http://127.0.0.1:4096"
    HOST_TIMEOUT: int = 120  # seconds; prompt calls block until the turn completes
    HOST_MAX_RETRIES: int = 2  # Connection-level retries for idempotent calls
    HOST_DIRECTORY: Optional[str] = None  # Project directory forwarded as ?directory=

    # === Recovery ===
    ABORT_GRACE_MS: int = 100  # Wait after abort before reading history
    REVERT_GRACE_MS: int = 500  # Wait after revert before resubmitting

    # === Paths ===
    FALLBACK_CONFIG_PATH: Optional[str] = None  # Overrides config file discovery
    LOG_FILE_PATH: Optional[str] = None  # Overrides the default event log location

    # === Monitoring ===
    PROMETHEUS_ENABLED: bool = True


# Global settings instance
settings = Settings()


# === Plugin config (rate-limit-fallback.json) ===

CONFIG_FILENAME = "rate-limit-fallback.json"
SEARCH_SUBDIRS = ("config", "plugins", "plugin")

DEFAULT_PATTERNS = [
    "rate limit",
    "usage limit",
    "too many requests",
    "quota exceeded",
    "overloaded",
]
DEFAULT_FALLBACK_MODEL = "anthropic/claude-opus-4-5"
DEFAULT_COOLDOWN_MS = 300_000

ModelIdentifier = Union[str, FallbackModelSpec]


class FallbackConfig(BaseModel):
    """
    Immutable plugin configuration snapshot.

    Field aliases match the JSON keys of rate-limit-fallback.json.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    enabled: bool = True
    fallback_model: Union[ModelIdentifier, list[ModelIdentifier]] = Field(
        default=DEFAULT_FALLBACK_MODEL,
        alias="fallbackModel",
        description="One model or an ordered list; order defines rotation order",
    )
    cooldown_ms: int = Field(default=DEFAULT_COOLDOWN_MS, ge=0, alias="cooldownMs")
    patterns: list[str] = Field(default_factory=lambda: list(DEFAULT_PATTERNS))
    logging_enabled: bool = Field(default=False, alias="logging")

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, data: Any) -> Any:
        # Explicit nulls in the file mean "use the default"
        if isinstance(data, dict):
            return {key: value for key, value in data.items() if value is not None}
        return data

    @property
    def fallback_models(self) -> list[FallbackModelSpec]:
        """Parsed fallback models in rotation order (never empty)."""
        raw = self.fallback_model if isinstance(self.fallback_model, list) else [self.fallback_model]
        models = [FallbackModelSpec.parse(identifier) for identifier in raw]
        if not models:
            models = [FallbackModelSpec.parse(DEFAULT_FALLBACK_MODEL)]
        return models


def get_config_dir() -> Path:
    """Host config directory for the current platform."""
    if sys.platform == "win32":
        app_data = os.environ.get("APPDATA") or str(Path.home() / "AppData" / "Roaming")
        return Path(app_data) / "opencode"
    xdg_config = os.environ.get("XDG_CONFIG_HOME") or str(Path.home() / ".config")
    return Path(xdg_config) / "opencode"


def find_config_file(config_dir: Optional[Path] = None) -> Optional[Path]:
    """
    Locate rate-limit-fallback.json.

    Searches the config directory root first, then the config/, plugins/ and
    plugin/ subdirectories. First match wins.
    """
    base = config_dir or get_config_dir()
    candidates = [base / CONFIG_FILENAME] + [base / subdir / CONFIG_FILENAME for subdir in SEARCH_SUBDIRS]
    for candidate in candidates:
        if candidate.is_file():
            return candidate
    return None


def load_config(path: Optional[Union[str, Path]] = None) -> FallbackConfig:
    """
    Load the plugin configuration.

    Args:
        path: Explicit config file path (skips discovery when given)

    Returns:
        FallbackConfig built from the file, or the defaults when the file is
        missing, unreadable, not JSON, or fails validation. Never raises.
    """
    config_path = Path(path) if path else find_config_file()
    if config_path is None:
        logger.debug("No fallback config file found, using defaults")
        return FallbackConfig()

    try:
        content = config_path.read_text(encoding="utf-8")
        raw = json.loads(content)
        if not isinstance(raw, dict):
            raise ValueError("config root must be a JSON object")
        config = FallbackConfig.model_validate(raw)
    except (OSError, ValueError, ValidationError) as e:
        # json.JSONDecodeError and UnicodeDecodeError are ValueErrors
        logger.warning(
            "Invalid fallback config, using defaults",
            path=str(config_path),
            error=str(e),
        )
        return FallbackConfig()

    logger.info("Fallback config loaded", path=str(config_path))
    return config
