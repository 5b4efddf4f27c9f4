"""Chapter data model."""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from models.story import wire_timestamp


@dataclass
class Chapter:
    """Mid-level unit within a story, optionally grouped under an act."""
    id: str
    story_id: str
    act_id: Optional[str] = None  # some stories skip acts
    order_index: int = 1
    title: Optional[str] = None
    pov_character: Optional[str] = None
    summary: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "storyId": self.story_id,
            "actId": self.act_id,
            "orderIndex": self.order_index,
            "title": self.title,
            "povCharacter": self.pov_character,
            "summary": self.summary,
            "createdAt": wire_timestamp(self.created_at),
            "updatedAt": wire_timestamp(self.updated_at),
        }
