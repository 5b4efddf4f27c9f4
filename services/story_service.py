"""Story operations. Stories cannot be deleted through this service."""

import logging

from models.story import Story
from services.base_service import BaseService, Listing
from services.validation import CreateStoryInput, UpdateStoryInput

logger = logging.getLogger(__name__)


class StoryService(BaseService):

    async def create(self, user_id: str, data: CreateStoryInput) -> Story:
        now = self._now()
        story = Story(
            id=self._new_id(),
            user_id=user_id,
            title=data.title,
            logline=data.logline,
            genre=data.genre,
            target_audience=data.target_audience,
            status=data.status,
            notes=data.notes,
            created_at=now,
            updated_at=now,
        )
        created = await self.repos.stories.insert(story)
        logger.info("Story %s created for user %s", created.id, user_id)
        return created

    async def update(self, user_id: str, data: UpdateStoryInput) -> Story:
        await self.resolver.resolve_story(data.id, user_id)
        changes = data.changes()
        changes["updated_at"] = self._now()
        updated = await self.repos.stories.update(data.id, changes)
        logger.info("Story %s updated: %s", data.id, sorted(changes))
        return updated

    async def list(self, user_id: str) -> Listing[Story]:
        return Listing(await self.repos.stories.find_by_user(user_id))
