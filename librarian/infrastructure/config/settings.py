"""
Configuration for the Librarian service.

Values are resolved from command line arguments first, then ``LIBRARIAN_*``
environment variables (a ``.env`` file is honoured), then defaults.
"""

from typing import Any, Dict
from pathlib import Path
import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field


ENV_PREFIX = "LIBRARIAN_"


class ConfigurationError(Exception):
    """Raised when the service cannot start with the given configuration"""


class LibrarianSettings(BaseModel):
    """Runtime settings for the Librarian server"""
    docs_root: Path = Field(default=Path("./docs"), description="Root directory for documentation files")
    host: str = Field(default="127.0.0.1")
    port: int = Field(default=8000, ge=1, le=65535)
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="json", description="json or console")
    session_ttl_seconds: int = Field(default=3600, ge=0, description="Idle time before a session is evicted; 0 disables eviction")
    eviction_interval_seconds: int = Field(default=60, ge=1)
    fetch_timeout_seconds: float = Field(default=30.0, gt=0)
    tool_timeout_seconds: float = Field(default=120.0, gt=0)


def _env_overrides() -> Dict[str, Any]:
    """Collect LIBRARIAN_* environment variables matching settings fields"""

    overrides = {}
    for name in LibrarianSettings.model_fields:
        value = os.getenv(f"{ENV_PREFIX}{name.upper()}")
        if value is not None:
            overrides[name] = value
    return overrides


def get_settings(**overrides: Any) -> LibrarianSettings:
    """Resolve settings from explicit overrides, environment and defaults"""

    load_dotenv()

    values = _env_overrides()
    values.update({key: value for key, value in overrides.items() if value is not None})

    return LibrarianSettings(**values)


def check_docs_root_exists(settings: LibrarianSettings) -> None:
    """Fail fast when the documents root is missing"""

    if not settings.docs_root.is_dir():
        raise ConfigurationError(f"Docs root directory does not exist: {settings.docs_root}")
