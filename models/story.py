"""Story and act data models."""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


def wire_timestamp(value: Optional[datetime]) -> Optional[str]:
    """Render a timestamp the way it appears in response envelopes."""
    return value.isoformat() if value is not None else None


@dataclass
class Story:
    """Root planning unit owned by exactly one user."""
    id: str
    user_id: str
    title: str
    logline: Optional[str] = None
    genre: Optional[str] = None  # e.g. "Fantasy", "Romance"
    target_audience: Optional[str] = None  # e.g. "YA", "Adult"
    status: Optional[str] = None  # free text: "idea", "outline", "draft", ...
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "userId": self.user_id,
            "title": self.title,
            "logline": self.logline,
            "genre": self.genre,
            "targetAudience": self.target_audience,
            "status": self.status,
            "notes": self.notes,
            "createdAt": wire_timestamp(self.created_at),
            "updatedAt": wire_timestamp(self.updated_at),
        }


@dataclass
class Act:
    """Coarse structural grouping within a story. Has no updated_at."""
    id: str
    story_id: str
    order_index: int = 1
    title: Optional[str] = None  # e.g. "Act I - Setup"
    summary: Optional[str] = None
    created_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "storyId": self.story_id,
            "orderIndex": self.order_index,
            "title": self.title,
            "summary": self.summary,
            "createdAt": wire_timestamp(self.created_at),
        }
