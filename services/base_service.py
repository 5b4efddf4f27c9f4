"""Base service class with shared clock, id, and listing helpers."""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Generic, Optional, TypeVar

from models.repositories import Repositories
from services.ownership import OwnershipResolver

logger = logging.getLogger(__name__)

T = TypeVar("T")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid.uuid4())


@dataclass
class Listing(Generic[T]):
    """Unbounded, unsorted result of a list operation."""
    items: list[T]

    @property
    def total(self) -> int:
        return len(self.items)

    def to_dict(self) -> dict:
        return {"items": [item.to_dict() for item in self.items], "total": self.total}


class BaseService:
    """Base class for the per-entity services.

    Services trust that their input has already passed its contract; every
    read or write goes through the ownership resolver first.
    """

    def __init__(
        self,
        repos: Repositories,
        resolver: Optional[OwnershipResolver] = None,
        clock: Optional[Callable[[], datetime]] = None,
        id_factory: Optional[Callable[[], str]] = None,
    ):
        self.repos = repos
        self.resolver = resolver or OwnershipResolver(repos)
        self._clock = clock or utc_now
        self._id_factory = id_factory or new_id

    def _now(self) -> datetime:
        return self._clock()

    def _new_id(self) -> str:
        return self._id_factory()
