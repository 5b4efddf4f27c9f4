"""Models package — entity records, datastores, and repositories."""

from models.story import Story, Act
from models.chapter import Chapter
from models.scene import Scene
from models.datastore import Datastore, MemoryDatastore
from models.database import SQLiteDatastore, open_datastore
from models.repositories import (
    Repositories,
    StoryRepository,
    ActRepository,
    ChapterRepository,
    SceneRepository,
)

__all__ = [
    "Story",
    "Act",
    "Chapter",
    "Scene",
    "Datastore",
    "MemoryDatastore",
    "SQLiteDatastore",
    "open_datastore",
    "Repositories",
    "StoryRepository",
    "ActRepository",
    "ChapterRepository",
    "SceneRepository",
]
