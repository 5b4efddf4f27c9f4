"""Configuration settings loaded from .env file."""

import logging
from pathlib import Path
from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings

_BACKENDS = ("sqlite", "memory")


class Settings(BaseSettings):
    """Application settings, loaded from .env file.

    Every field can be overridden with a ``STORYCRAFTER_`` prefixed
    environment variable, e.g. ``STORYCRAFTER_DATASTORE_BACKEND=memory``.
    """

    # Datastore
    datastore_backend: str = "sqlite"
    sqlite_db_path: Path = Path("./data/storycrafter.db")

    # Identity used by the CLI when --user is not given
    default_user: Optional[str] = None

    # Logging
    log_dir: Path = Path("./data/logs")
    log_level: str = "INFO"

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_prefix": "STORYCRAFTER_",
        "extra": "ignore",
    }

    @field_validator("datastore_backend")
    @classmethod
    def validate_backend(cls, v: str) -> str:
        v = v.strip().lower()
        if v not in _BACKENDS:
            raise ValueError(f"datastore_backend must be one of {', '.join(_BACKENDS)}")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        v = v.strip().upper()
        if not isinstance(logging.getLevelName(v), int):
            raise ValueError(f"log_level '{v}' is not a logging level name")
        return v

    @field_validator("default_user")
    @classmethod
    def blank_user_is_none(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            return None
        return v

    @field_validator("sqlite_db_path", "log_dir")
    @classmethod
    def ensure_parent_dirs(cls, v: Path) -> Path:
        v.parent.mkdir(parents=True, exist_ok=True)
        return v

    @property
    def log_level_number(self) -> int:
        return logging.getLevelName(self.log_level)
