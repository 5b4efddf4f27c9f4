"""Chapter operations, including the optional act link."""

import logging

from models.chapter import Chapter
from services.base_service import BaseService, Listing
from services.validation import (
    CreateChapterInput,
    EntityKeyInput,
    ListChaptersInput,
    UpdateChapterInput,
)

logger = logging.getLogger(__name__)


class ChapterService(BaseService):

    async def create(self, user_id: str, data: CreateChapterInput) -> Chapter:
        await self.resolver.resolve_story(data.story_id, user_id)
        act = await self.resolver.resolve_optional_act(data.act_id, data.story_id, user_id)

        now = self._now()
        chapter = Chapter(
            id=self._new_id(),
            story_id=data.story_id,
            act_id=act.id if act is not None else None,
            order_index=data.order_index,
            title=data.title,
            pov_character=data.pov_character,
            summary=data.summary,
            created_at=now,
            updated_at=now,
        )
        created = await self.repos.chapters.insert(chapter)
        logger.info("Chapter %s created in story %s", created.id, data.story_id)
        return created

    async def update(self, user_id: str, data: UpdateChapterInput) -> Chapter:
        await self.resolver.resolve_chapter(data.id, data.story_id, user_id)
        changes = data.changes()
        # The act named in this request must live in the same story, whatever
        # act the chapter is linked to today. None detaches.
        if "act_id" in changes:
            await self.resolver.resolve_optional_act(changes["act_id"], data.story_id, user_id)

        changes["updated_at"] = self._now()
        updated = await self.repos.chapters.update(data.id, changes)
        logger.info("Chapter %s updated: %s", data.id, sorted(changes))
        return updated

    async def delete(self, user_id: str, data: EntityKeyInput) -> None:
        await self.resolver.resolve_chapter(data.id, data.story_id, user_id)
        await self.repos.chapters.delete(data.id)
        logger.info("Chapter %s deleted from story %s", data.id, data.story_id)

    async def list(self, user_id: str, data: ListChaptersInput) -> Listing[Chapter]:
        await self.resolver.resolve_story(data.story_id, user_id)
        act = await self.resolver.resolve_optional_act(data.act_id, data.story_id, user_id)
        if act is None:
            chapters = await self.repos.chapters.find_by_story(data.story_id)
        else:
            chapters = await self.repos.chapters.find_by_story_and_act(data.story_id, act.id)
        return Listing(chapters)
