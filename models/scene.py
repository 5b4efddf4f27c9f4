"""Scene data model."""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from models.story import wire_timestamp


@dataclass
class Scene:
    """Leaf content unit within a story, optionally attached to a chapter."""
    id: str
    story_id: str
    chapter_id: Optional[str] = None  # scene can be attached later
    order_index: int = 1
    setting: Optional[str] = None  # where/when
    goal: Optional[str] = None
    conflict: Optional[str] = None
    outcome: Optional[str] = None
    content: Optional[str] = None  # rough draft or beats
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "storyId": self.story_id,
            "chapterId": self.chapter_id,
            "orderIndex": self.order_index,
            "setting": self.setting,
            "goal": self.goal,
            "conflict": self.conflict,
            "outcome": self.outcome,
            "content": self.content,
            "createdAt": wire_timestamp(self.created_at),
            "updatedAt": wire_timestamp(self.updated_at),
        }
