"""Configuration package — settings, logging, and exceptions."""

from config.exceptions import (
    StoryCrafterError,
    UnauthorizedError,
    NotFoundError,
    ValidationError,
    UnknownOperationError,
    DatabaseError,
)
from config.logging_config import setup_logging
from config.settings import Settings

__all__ = [
    "Settings",
    "setup_logging",
    "StoryCrafterError",
    "UnauthorizedError",
    "NotFoundError",
    "ValidationError",
    "UnknownOperationError",
    "DatabaseError",
]
