"""Caller identity resolution."""

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Protocol, runtime_checkable

from config.exceptions import UnauthorizedError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RequestContext:
    """Request-scoped locals, as a session middleware would attach them.

    ``user`` is the authenticated user mapping (at least an ``id`` key), or
    None for an anonymous request.
    """
    user: Optional[Mapping[str, Any]] = None

    @classmethod
    def for_user(cls, user_id: Optional[str]) -> "RequestContext":
        return cls(user={"id": user_id} if user_id else None)


@runtime_checkable
class IdentityProvider(Protocol):
    """Resolves the caller of a request to a stable user identifier."""

    async def current_user(self, context: RequestContext) -> Optional[str]:
        ...


class SessionIdentityProvider:
    """Reads the user id from the context's session user mapping."""

    async def current_user(self, context: RequestContext) -> Optional[str]:
        user = context.user if context is not None else None
        if not user:
            return None
        user_id = user.get("id")
        if not isinstance(user_id, str) or not user_id:
            return None
        return user_id


async def require_user(provider: IdentityProvider, context: RequestContext) -> str:
    """Return the caller's user id.

    Raises:
        UnauthorizedError: if no identity can be resolved.
    """
    user_id = await provider.current_user(context)
    if user_id is None:
        logger.info("Rejected anonymous request")
        raise UnauthorizedError()
    return user_id
