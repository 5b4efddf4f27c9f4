"""Services package — identity, validation, ownership, entity services, dispatcher."""

from services.identity import (
    IdentityProvider,
    RequestContext,
    SessionIdentityProvider,
    require_user,
)
from services.ownership import OwnershipResolver
from services.base_service import BaseService, Listing
from services.story_service import StoryService
from services.act_service import ActService
from services.chapter_service import ChapterService
from services.scene_service import SceneService
from services.dispatcher import Operation, OperationDispatcher, build_dispatcher

__all__ = [
    "IdentityProvider",
    "RequestContext",
    "SessionIdentityProvider",
    "require_user",
    "OwnershipResolver",
    "BaseService",
    "Listing",
    "StoryService",
    "ActService",
    "ChapterService",
    "SceneService",
    "Operation",
    "OperationDispatcher",
    "build_dispatcher",
]
