"""Configuration helpers for the Imagen AI project."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from modules.services.errors import ConfigurationError

DEFAULT_IMAGE_MODEL = "imagen-4.0-generate-001"
DEFAULT_HISTORY_LIMIT = 3
API_KEY_ENV_NAMES = ("API_KEY", "GEMINI_API_KEY", "GOOGLE_API_KEY")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(slots=True)
class AppConfig:
    """Centralized application configuration."""

    api_key: Optional[str] = None
    image_model: str = DEFAULT_IMAGE_MODEL
    output_mime_type: str = "image/jpeg"
    data_dir: Path = Path("data")
    log_dir: Path = Path("logs")
    log_level: str = "INFO"
    history_key: str = "image_generation_history"
    history_limit: int = DEFAULT_HISTORY_LIMIT
    server_name: Optional[str] = None
    server_port: Optional[int] = None


def _load_env_file(path: Path) -> None:
    """Populate environment variables from a simple KEY=VALUE .env file."""
    if not path.exists():
        return

    for line in path.read_text(encoding="utf-8").splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#") or "=" not in stripped:
            continue
        key, value = stripped.split("=", 1)
        os.environ[key.strip()] = value.strip()


def _resolve_api_key() -> Optional[str]:
    for env_name in API_KEY_ENV_NAMES:
        value = (os.getenv(env_name) or "").strip()
        if value:
            return value
    return None


def _int_from_env(name: str, default: Optional[int]) -> Optional[int]:
    raw = os.getenv(name)
    if raw in (None, ""):
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def load_config(config_path: Optional[str] = None) -> AppConfig:
    """Return an AppConfig instance with environment-aware settings.

    Raises ConfigurationError when no API credential is available, since the
    application cannot do anything useful without one.
    """
    env_path = Path(config_path) if config_path else Path(".env")
    _load_env_file(env_path)

    api_key = _resolve_api_key()
    if not api_key:
        names = ", ".join(API_KEY_ENV_NAMES)
        raise ConfigurationError(f"No API key configured; set one of: {names}")

    history_limit = _int_from_env("HISTORY_LIMIT", DEFAULT_HISTORY_LIMIT)
    if history_limit is None or history_limit < 1:
        history_limit = DEFAULT_HISTORY_LIMIT
    history_limit = min(history_limit, DEFAULT_HISTORY_LIMIT)

    data_dir = Path(os.getenv("DATA_DIR", "data")).expanduser().resolve()
    log_dir = Path(os.getenv("LOG_DIR", "logs")).expanduser().resolve()
    log_level = (os.getenv("LOG_LEVEL") or "INFO").upper()
    if log_level not in LOG_LEVELS:
        log_level = "INFO"

    return AppConfig(
        api_key=api_key,
        image_model=os.getenv("IMAGEN_MODEL") or DEFAULT_IMAGE_MODEL,
        output_mime_type=os.getenv("IMAGE_MIME_TYPE") or "image/jpeg",
        data_dir=data_dir,
        log_dir=log_dir,
        log_level=log_level,
        history_limit=history_limit,
        server_name=os.getenv("SERVER_NAME") or None,
        server_port=_int_from_env("SERVER_PORT", None),
    )
