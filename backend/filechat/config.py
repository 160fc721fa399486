"""FileChat application configuration.

Loads settings from two YAML files:
  * filechat.settings.yaml  — non-secret configuration
  * filechat.secrets.yaml   — secrets (never committed)

Environment variables override a few deployment-specific values
(``PORT``, ``FILECHAT_UPLOAD_DIR``, ``FILECHAT_PUBLIC_BASE_URL``).
The upstream credential is looked up per call via :func:`resolve_api_key`
so that rotating ``OPENAI_API_KEY`` does not require a restart.
"""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

SETTINGS_FILE = Path("filechat.settings.yaml")
SECRETS_FILE  = Path("filechat.secrets.yaml")

API_KEY_ENV = "OPENAI_API_KEY"


def _load_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        logger.debug("Config file not found: %s", path)
        return {}
    with path.open(encoding="utf-8") as fh:
        return yaml.safe_load(fh) or {}


# ---------------------------------------------------------------------------
# Secrets models
# ---------------------------------------------------------------------------


class OpenAISecrets(BaseModel):
    api_key: Optional[str] = None


class Secrets(BaseModel):
    openai: OpenAISecrets = Field(default_factory=OpenAISecrets)


# ---------------------------------------------------------------------------
# Settings models
# ---------------------------------------------------------------------------


class ServerSettings(BaseModel):
    host:                str  = "0.0.0.0"
    port:                int  = 3000
    expose_error_detail: bool = True


class LoggingSettings(BaseModel):
    level: str = "info"


class UploadSettings(BaseModel):
    """Where uploads land and how they are exposed."""
    dir:                 str           = "uploads"
    max_file_size_bytes: int           = 50 * 1024 * 1024
    chunk_size_bytes:    int           = 1024 * 1024
    url_prefix:          str           = "/uploads"
    public_base_url:     Optional[str] = None

    @field_validator("url_prefix")
    @classmethod
    def _normalise_prefix(cls, value: str) -> str:
        return "/" + value.strip("/")

    @field_validator("public_base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: Optional[str]) -> Optional[str]:
        return value.rstrip("/") if value else None


class CompletionSettings(BaseModel):
    """Upstream chat-completions endpoint. Not client selectable."""
    base_url:        str   = "https://api.openai.com/v1"
    model:           str   = "gpt-4o-mini"
    max_tokens:      int   = 500
    temperature:     float = 0.2
    timeout_seconds: float = 60.0


class ChatSettings(BaseModel):
    max_body_bytes: int = 1024 * 1024


class AppConfig(BaseModel):
    server:     ServerSettings     = Field(default_factory=ServerSettings)
    logging:    LoggingSettings    = Field(default_factory=LoggingSettings)
    uploads:    UploadSettings     = Field(default_factory=UploadSettings)
    completion: CompletionSettings = Field(default_factory=CompletionSettings)
    chat:       ChatSettings       = Field(default_factory=ChatSettings)
    secrets:    Secrets            = Field(default_factory=Secrets)


# ---------------------------------------------------------------------------
# Environment overrides
# ---------------------------------------------------------------------------


def _apply_env_overrides(config: AppConfig) -> None:
    port = os.environ.get("PORT")
    if port:
        try:
            config.server.port = int(port)
        except ValueError:
            logger.warning("Ignoring non-numeric PORT=%r", port)

    upload_dir = os.environ.get("FILECHAT_UPLOAD_DIR")
    if upload_dir:
        config.uploads.dir = upload_dir

    base_url = os.environ.get("FILECHAT_PUBLIC_BASE_URL")
    if base_url:
        config.uploads.public_base_url = base_url.rstrip("/")


def _resolve_upload_dir(config: AppConfig, settings_path: Path) -> None:
    """Resolve a relative upload dir against the settings file's directory."""
    upload_dir = Path(config.uploads.dir)
    if not upload_dir.is_absolute() and settings_path.exists():
        config.uploads.dir = str(settings_path.resolve().parent / upload_dir)


# ---------------------------------------------------------------------------
# Public loader
# ---------------------------------------------------------------------------


def load_config(
    settings_path: Optional[Path] = None,
    secrets_path: Optional[Path] = None,
) -> AppConfig:
    """Load and merge settings + secrets into a single *AppConfig* object."""
    settings_path = Path(settings_path) if settings_path else SETTINGS_FILE
    secrets_path = Path(secrets_path) if secrets_path else SECRETS_FILE

    settings_data = _load_yaml(settings_path)
    secrets_data  = _load_yaml(secrets_path)

    # Merge: secrets live under the "secrets" key in AppConfig
    settings_data["secrets"] = secrets_data

    config = AppConfig(**settings_data)
    _resolve_upload_dir(config, settings_path)
    _apply_env_overrides(config)

    logger.info(
        "Settings loaded (server=%s:%s, uploads.dir=%s, completion.model=%s)",
        config.server.host,
        config.server.port,
        config.uploads.dir,
        config.completion.model,
    )
    return config


_config: Optional[AppConfig] = None


def get_config() -> AppConfig:
    """Return the process-wide config, loading it on first use."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def set_config(config: Optional[AppConfig]) -> None:
    """Replace (or clear) the process-wide config."""
    global _config
    _config = config


def resolve_api_key(config: AppConfig) -> Optional[str]:
    """Look up the upstream credential at call time.

    The environment wins over the secrets file. Empty strings count as unset.
    """
    return os.environ.get(API_KEY_ENV) or config.secrets.openai.api_key or None
