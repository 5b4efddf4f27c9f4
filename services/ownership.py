"""Ownership chain resolution.

Every resolve_* call walks from the root story on each invocation and
never reuses an earlier result. A descendant is reachable only through the
story id the caller names, and that story must belong to the caller.
Missing and not-owned entities both raise the same NotFoundError.
"""

import logging
from typing import Optional

from config.exceptions import NotFoundError
from models.chapter import Chapter
from models.repositories import Repositories
from models.scene import Scene
from models.story import Act, Story

logger = logging.getLogger(__name__)


class OwnershipResolver:
    """Proves that entities (and referenced ancestors) belong to a user."""

    def __init__(self, repos: Repositories):
        self.repos = repos

    async def resolve_story(self, story_id: str, user_id: str) -> Story:
        story = await self.repos.stories.find_owned(story_id, user_id)
        if story is None:
            logger.info("Story %s not resolvable for user %s", story_id, user_id)
            raise NotFoundError("Story not found.")
        return story

    async def resolve_act(self, act_id: str, story_id: str, user_id: str) -> Act:
        await self.resolve_story(story_id, user_id)
        act = await self.repos.acts.find_in_story(act_id, story_id)
        if act is None:
            logger.info("Act %s not in story %s", act_id, story_id)
            raise NotFoundError("Act not found.")
        return act

    async def resolve_chapter(self, chapter_id: str, story_id: str, user_id: str) -> Chapter:
        await self.resolve_story(story_id, user_id)
        chapter = await self.repos.chapters.find_in_story(chapter_id, story_id)
        if chapter is None:
            logger.info("Chapter %s not in story %s", chapter_id, story_id)
            raise NotFoundError("Chapter not found.")
        return chapter

    async def resolve_scene(self, scene_id: str, story_id: str, user_id: str) -> Scene:
        await self.resolve_story(story_id, user_id)
        scene = await self.repos.scenes.find_in_story(scene_id, story_id)
        if scene is None:
            logger.info("Scene %s not in story %s", scene_id, story_id)
            raise NotFoundError("Scene not found.")
        return scene

    async def resolve_optional_act(
        self, act_id: Optional[str], story_id: str, user_id: str
    ) -> Optional[Act]:
        """Resolve ``act_id`` if given; None means "no act" and skips storage."""
        if act_id is None:
            return None
        return await self.resolve_act(act_id, story_id, user_id)

    async def resolve_optional_chapter(
        self, chapter_id: Optional[str], story_id: str, user_id: str
    ) -> Optional[Chapter]:
        """Resolve ``chapter_id`` if given; None means "no chapter"."""
        if chapter_id is None:
            return None
        return await self.resolve_chapter(chapter_id, story_id, user_id)
