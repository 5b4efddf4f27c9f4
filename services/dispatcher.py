"""Operation dispatcher: the front door of the core.

Each named operation runs the same gate sequence before touching storage:
identity, then input contract, then the service call (which performs the
ownership walk). The first failing gate aborts the operation.
"""

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

from config.exceptions import DatabaseError, StoryCrafterError, UnknownOperationError
from models.datastore import Datastore
from models.repositories import Repositories
from services.act_service import ActService
from services.base_service import Listing
from services.chapter_service import ChapterService
from services.identity import (
    IdentityProvider,
    RequestContext,
    SessionIdentityProvider,
    require_user,
)
from services.ownership import OwnershipResolver
from services.scene_service import SceneService
from services.story_service import StoryService
from services.validation import (
    CreateActInput,
    CreateChapterInput,
    CreateSceneInput,
    CreateStoryInput,
    EntityKeyInput,
    InputContract,
    ListChaptersInput,
    ListScenesInput,
    ListStoriesInput,
    StoryScopeInput,
    UpdateActInput,
    UpdateChapterInput,
    UpdateSceneInput,
    UpdateStoryInput,
    validate_input,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Operation:
    """One named operation: its input contract, handler and result key.

    ``result_key`` names the single record in the success payload; it is
    None for list operations (payload is the listing) and deletes (no
    payload).
    """
    name: str
    contract: type[InputContract]
    handler: Callable[[str, Any], Awaitable[Any]]
    result_key: Optional[str] = None


def _envelope(op: Operation, result: Any) -> dict:
    if isinstance(result, Listing):
        return {"success": True, "data": result.to_dict()}
    if op.result_key is None:
        return {"success": True}
    return {"success": True, "data": {op.result_key: result.to_dict()}}


class OperationDispatcher:
    """Binds operation names to their contract and service call."""

    def __init__(
        self,
        stories: StoryService,
        acts: ActService,
        chapters: ChapterService,
        scenes: SceneService,
        identity: Optional[IdentityProvider] = None,
    ):
        self.identity = identity or SessionIdentityProvider()
        self.stories = stories
        self.acts = acts
        self.chapters = chapters
        self.scenes = scenes

        operations = [
            Operation("createStory", CreateStoryInput, stories.create, "story"),
            Operation("updateStory", UpdateStoryInput, stories.update, "story"),
            Operation("listStories", ListStoriesInput, lambda user_id, _: stories.list(user_id)),

            Operation("createStoryAct", CreateActInput, acts.create, "act"),
            Operation("updateStoryAct", UpdateActInput, acts.update, "act"),
            Operation("deleteStoryAct", EntityKeyInput, acts.delete),
            Operation("listStoryActs", StoryScopeInput, acts.list),

            Operation("createStoryChapter", CreateChapterInput, chapters.create, "chapter"),
            Operation("updateStoryChapter", UpdateChapterInput, chapters.update, "chapter"),
            Operation("deleteStoryChapter", EntityKeyInput, chapters.delete),
            Operation("listStoryChapters", ListChaptersInput, chapters.list),

            Operation("createStoryScene", CreateSceneInput, scenes.create, "scene"),
            Operation("updateStoryScene", UpdateSceneInput, scenes.update, "scene"),
            Operation("deleteStoryScene", EntityKeyInput, scenes.delete),
            Operation("listStoryScenes", ListScenesInput, scenes.list),
        ]
        self._operations = {op.name: op for op in operations}

    def operation_names(self) -> list[str]:
        return list(self._operations)

    def get_operation(self, name: str) -> Operation:
        op = self._operations.get(name)
        if op is None:
            raise UnknownOperationError(name)
        return op

    async def execute(
        self,
        name: str,
        payload: Any = None,
        context: Optional[RequestContext] = None,
    ) -> dict:
        """Run ``name`` and return its success envelope.

        Raises:
            StoryCrafterError: any gate failure, unchanged.
        """
        op = self.get_operation(name)
        user_id = await require_user(self.identity, context)
        data = validate_input(op.contract, payload)
        logger.debug("Dispatching %s for user %s", name, user_id)
        result = await op.handler(user_id, data)
        return _envelope(op, result)

    async def dispatch(
        self,
        name: str,
        payload: Any = None,
        context: Optional[RequestContext] = None,
    ) -> dict:
        """Run ``name`` and always return an envelope for core errors.

        Failures come back as ``{"success": False, "error": {...}}`` with
        the error's code and message as raised.
        """
        try:
            return await self.execute(name, payload, context)
        except DatabaseError as e:
            logger.exception("Operation %s failed in the datastore", name)
            return {"success": False, "error": e.to_dict()}
        except StoryCrafterError as e:
            logger.info("Operation %s rejected: %s %s", name, e.code, e.message)
            return {"success": False, "error": e.to_dict()}


def build_dispatcher(
    datastore: Datastore,
    identity: Optional[IdentityProvider] = None,
    clock=None,
    id_factory=None,
) -> OperationDispatcher:
    """Wire repositories, resolver and services around one datastore handle."""
    repos = Repositories(datastore)
    resolver = OwnershipResolver(repos)
    kwargs = {"clock": clock, "id_factory": id_factory}
    return OperationDispatcher(
        stories=StoryService(repos, resolver, **kwargs),
        acts=ActService(repos, resolver, **kwargs),
        chapters=ChapterService(repos, resolver, **kwargs),
        scenes=SceneService(repos, resolver, **kwargs),
        identity=identity,
    )
