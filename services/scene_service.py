"""Scene operations, including the optional chapter link."""

import logging

from models.scene import Scene
from services.base_service import BaseService, Listing
from services.validation import (
    CreateSceneInput,
    EntityKeyInput,
    ListScenesInput,
    UpdateSceneInput,
)

logger = logging.getLogger(__name__)


class SceneService(BaseService):

    async def create(self, user_id: str, data: CreateSceneInput) -> Scene:
        await self.resolver.resolve_story(data.story_id, user_id)
        chapter = await self.resolver.resolve_optional_chapter(
            data.chapter_id, data.story_id, user_id
        )

        now = self._now()
        scene = Scene(
            id=self._new_id(),
            story_id=data.story_id,
            chapter_id=chapter.id if chapter is not None else None,
            order_index=data.order_index,
            setting=data.setting,
            goal=data.goal,
            conflict=data.conflict,
            outcome=data.outcome,
            content=data.content,
            created_at=now,
            updated_at=now,
        )
        created = await self.repos.scenes.insert(scene)
        logger.info("Scene %s created in story %s", created.id, data.story_id)
        return created

    async def update(self, user_id: str, data: UpdateSceneInput) -> Scene:
        await self.resolver.resolve_scene(data.id, data.story_id, user_id)
        changes = data.changes()
        if "chapter_id" in changes:
            await self.resolver.resolve_optional_chapter(
                changes["chapter_id"], data.story_id, user_id
            )

        changes["updated_at"] = self._now()
        updated = await self.repos.scenes.update(data.id, changes)
        logger.info("Scene %s updated: %s", data.id, sorted(changes))
        return updated

    async def delete(self, user_id: str, data: EntityKeyInput) -> None:
        await self.resolver.resolve_scene(data.id, data.story_id, user_id)
        await self.repos.scenes.delete(data.id)
        logger.info("Scene %s deleted from story %s", data.id, data.story_id)

    async def list(self, user_id: str, data: ListScenesInput) -> Listing[Scene]:
        await self.resolver.resolve_story(data.story_id, user_id)
        chapter = await self.resolver.resolve_optional_chapter(
            data.chapter_id, data.story_id, user_id
        )
        if chapter is None:
            scenes = await self.repos.scenes.find_by_story(data.story_id)
        else:
            scenes = await self.repos.scenes.find_by_story_and_chapter(data.story_id, chapter.id)
        return Listing(scenes)
