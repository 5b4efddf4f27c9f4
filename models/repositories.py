"""Typed repositories over the datastore, one per entity kind.

Each finder spells out its filter instead of assembling optional clauses at
the call site, so "scoped to a story" and "scoped to a story and an act"
are different methods.
"""

import logging
from dataclasses import asdict, fields
from typing import Generic, Optional, TypeVar

from config.exceptions import NotFoundError
from models.chapter import Chapter
from models.datastore import Datastore, Row
from models.scene import Scene
from models.schema import STORIES, STORY_ACTS, STORY_CHAPTERS, STORY_SCENES
from models.story import Act, Story

logger = logging.getLogger(__name__)

T = TypeVar("T")


class _Repository(Generic[T]):
    table: str
    model: type
    label: str

    def __init__(self, store: Datastore):
        self.store = store

    def _from_row(self, row: Row) -> T:
        return self.model(**{f.name: row.get(f.name) for f in fields(self.model)})

    async def _find_one(self, **where) -> Optional[T]:
        rows = await self.store.select(self.table, where)
        return self._from_row(rows[0]) if rows else None

    async def _find_all(self, **where) -> list[T]:
        rows = await self.store.select(self.table, where)
        return [self._from_row(r) for r in rows]

    async def insert(self, entity: T) -> T:
        row = await self.store.insert(self.table, asdict(entity))
        return self._from_row(row)

    async def update(self, entity_id: str, changes: dict) -> T:
        """Apply ``changes`` and return the stored entity.

        Raises:
            NotFoundError: if the row vanished after its ownership was checked.
        """
        row = await self.store.update(self.table, entity_id, changes)
        if row is None:
            logger.warning("%s %s disappeared before update", self.label, entity_id)
            raise NotFoundError(f"{self.label} not found.")
        return self._from_row(row)

    async def delete(self, entity_id: str) -> int:
        return await self.store.delete(self.table, {"id": entity_id})


class StoryRepository(_Repository[Story]):
    table = STORIES
    model = Story
    label = "Story"

    async def find_owned(self, story_id: str, user_id: str) -> Optional[Story]:
        return await self._find_one(id=story_id, user_id=user_id)

    async def find_by_user(self, user_id: str) -> list[Story]:
        return await self._find_all(user_id=user_id)


class ActRepository(_Repository[Act]):
    table = STORY_ACTS
    model = Act
    label = "Act"

    async def find_in_story(self, act_id: str, story_id: str) -> Optional[Act]:
        return await self._find_one(id=act_id, story_id=story_id)

    async def find_by_story(self, story_id: str) -> list[Act]:
        return await self._find_all(story_id=story_id)


class ChapterRepository(_Repository[Chapter]):
    table = STORY_CHAPTERS
    model = Chapter
    label = "Chapter"

    async def find_in_story(self, chapter_id: str, story_id: str) -> Optional[Chapter]:
        return await self._find_one(id=chapter_id, story_id=story_id)

    async def find_by_story(self, story_id: str) -> list[Chapter]:
        return await self._find_all(story_id=story_id)

    async def find_by_story_and_act(self, story_id: str, act_id: str) -> list[Chapter]:
        return await self._find_all(story_id=story_id, act_id=act_id)


class SceneRepository(_Repository[Scene]):
    table = STORY_SCENES
    model = Scene
    label = "Scene"

    async def find_in_story(self, scene_id: str, story_id: str) -> Optional[Scene]:
        return await self._find_one(id=scene_id, story_id=story_id)

    async def find_by_story(self, story_id: str) -> list[Scene]:
        return await self._find_all(story_id=story_id)

    async def find_by_story_and_chapter(self, story_id: str, chapter_id: str) -> list[Scene]:
        return await self._find_all(story_id=story_id, chapter_id=chapter_id)


class Repositories:
    """All four repositories bound to one datastore handle."""

    def __init__(self, store: Datastore):
        self.store = store
        self.stories = StoryRepository(store)
        self.acts = ActRepository(store)
        self.chapters = ChapterRepository(store)
        self.scenes = SceneRepository(store)
