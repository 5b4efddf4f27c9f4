"""Column-level contract shared by every datastore adapter."""

STORIES = "stories"
STORY_ACTS = "story_acts"
STORY_CHAPTERS = "story_chapters"
STORY_SCENES = "story_scenes"

TABLE_COLUMNS: dict[str, tuple[str, ...]] = {
    STORIES: (
        "id", "user_id", "title", "logline", "genre", "target_audience",
        "status", "notes", "created_at", "updated_at",
    ),
    STORY_ACTS: (
        "id", "story_id", "order_index", "title", "summary", "created_at",
    ),
    STORY_CHAPTERS: (
        "id", "story_id", "act_id", "order_index", "title", "pov_character",
        "summary", "created_at", "updated_at",
    ),
    STORY_SCENES: (
        "id", "story_id", "chapter_id", "order_index", "setting", "goal",
        "conflict", "outcome", "content", "created_at", "updated_at",
    ),
}

# Deleting a parent row clears these optional references: {parent: [(child, column)]}
DETACH_ON_DELETE: dict[str, tuple[tuple[str, str], ...]] = {
    STORY_ACTS: ((STORY_CHAPTERS, "act_id"),),
    STORY_CHAPTERS: ((STORY_SCENES, "chapter_id"),),
}


def check_columns(table: str, columns) -> None:
    """Raise KeyError if ``table`` or any of ``columns`` is not in the contract."""
    known = TABLE_COLUMNS[table]
    unknown = [c for c in columns if c not in known]
    if unknown:
        raise KeyError(f"Unknown column(s) for {table}: {', '.join(unknown)}")
