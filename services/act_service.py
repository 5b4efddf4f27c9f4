"""Act operations. Acts carry no updated_at."""

import logging

from models.story import Act
from services.base_service import BaseService, Listing
from services.validation import (
    CreateActInput,
    EntityKeyInput,
    StoryScopeInput,
    UpdateActInput,
)

logger = logging.getLogger(__name__)


class ActService(BaseService):

    async def create(self, user_id: str, data: CreateActInput) -> Act:
        await self.resolver.resolve_story(data.story_id, user_id)
        act = Act(
            id=self._new_id(),
            story_id=data.story_id,
            order_index=data.order_index,
            title=data.title,
            summary=data.summary,
            created_at=self._now(),
        )
        created = await self.repos.acts.insert(act)
        logger.info("Act %s created in story %s", created.id, data.story_id)
        return created

    async def update(self, user_id: str, data: UpdateActInput) -> Act:
        await self.resolver.resolve_act(data.id, data.story_id, user_id)
        changes = data.changes()
        updated = await self.repos.acts.update(data.id, changes)
        logger.info("Act %s updated: %s", data.id, sorted(changes))
        return updated

    async def delete(self, user_id: str, data: EntityKeyInput) -> None:
        await self.resolver.resolve_act(data.id, data.story_id, user_id)
        await self.repos.acts.delete(data.id)
        logger.info("Act %s deleted from story %s", data.id, data.story_id)

    async def list(self, user_id: str, data: StoryScopeInput) -> Listing[Act]:
        await self.resolver.resolve_story(data.story_id, user_id)
        return Listing(await self.repos.acts.find_by_story(data.story_id))
