"""Custom exception hierarchy for the story planning core."""

from typing import Optional


class StoryCrafterError(Exception):
    """Base exception for all story planning errors."""

    code = "INTERNAL_SERVER_ERROR"

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({detail_str})"
        return self.message

    def to_dict(self) -> dict:
        """Return the error half of a response envelope."""
        error = {"code": self.code, "message": self.message}
        if self.details:
            error["details"] = self.details
        return error


# ---- Access Errors ----

class UnauthorizedError(StoryCrafterError):
    """No caller identity could be resolved."""

    code = "UNAUTHORIZED"

    def __init__(self, message: str = "You must be signed in to perform this action."):
        super().__init__(message)


class NotFoundError(StoryCrafterError):
    """Entity is missing or not owned by the caller.

    The two cases are deliberately reported the same way.
    """

    code = "NOT_FOUND"


# ---- Validation Errors ----

class ValidationError(StoryCrafterError):
    """Input validation failed."""

    code = "BAD_REQUEST"


class UnknownOperationError(ValidationError):
    """Dispatcher was asked for an operation it does not know."""

    def __init__(self, name: str):
        super().__init__(f"Unknown operation: {name}", {"operation": name})
        self.operation = name


# ---- Database Errors ----

class DatabaseError(StoryCrafterError):
    """Datastore operation failed."""
