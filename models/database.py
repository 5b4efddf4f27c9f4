"""SQLite datastore: schema initialization and row-level statements."""

import asyncio
import logging
import sqlite3
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Iterator, Optional

from config.exceptions import DatabaseError
from models.datastore import Filter, Row
from models.schema import check_columns

logger = logging.getLogger(__name__)

# SQL for creating all tables
_CREATE_TABLES_SQL = """
CREATE TABLE IF NOT EXISTS stories (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    title TEXT NOT NULL,
    logline TEXT,
    genre TEXT,
    target_audience TEXT,
    status TEXT,
    notes TEXT,
    created_at TIMESTAMP NOT NULL,
    updated_at TIMESTAMP NOT NULL
);

CREATE TABLE IF NOT EXISTS story_acts (
    id TEXT PRIMARY KEY,
    story_id TEXT NOT NULL REFERENCES stories(id),
    order_index INTEGER NOT NULL DEFAULT 1,
    title TEXT,
    summary TEXT,
    created_at TIMESTAMP NOT NULL
);

CREATE TABLE IF NOT EXISTS story_chapters (
    id TEXT PRIMARY KEY,
    story_id TEXT NOT NULL REFERENCES stories(id),
    act_id TEXT REFERENCES story_acts(id) ON DELETE SET NULL,
    order_index INTEGER NOT NULL DEFAULT 1,
    title TEXT,
    pov_character TEXT,
    summary TEXT,
    created_at TIMESTAMP NOT NULL,
    updated_at TIMESTAMP NOT NULL
);

CREATE TABLE IF NOT EXISTS story_scenes (
    id TEXT PRIMARY KEY,
    story_id TEXT NOT NULL REFERENCES stories(id),
    chapter_id TEXT REFERENCES story_chapters(id) ON DELETE SET NULL,
    order_index INTEGER NOT NULL DEFAULT 1,
    setting TEXT,
    goal TEXT,
    conflict TEXT,
    outcome TEXT,
    content TEXT,
    created_at TIMESTAMP NOT NULL,
    updated_at TIMESTAMP NOT NULL
);
"""

# Indexes added via migration (idempotent)
_MIGRATION_SQL = [
    "CREATE INDEX IF NOT EXISTS idx_stories_user ON stories(user_id)",
    "CREATE INDEX IF NOT EXISTS idx_acts_story ON story_acts(story_id)",
    "CREATE INDEX IF NOT EXISTS idx_chapters_story ON story_chapters(story_id)",
    "CREATE INDEX IF NOT EXISTS idx_chapters_story_act ON story_chapters(story_id, act_id)",
    "CREATE INDEX IF NOT EXISTS idx_scenes_story ON story_scenes(story_id)",
    "CREATE INDEX IF NOT EXISTS idx_scenes_story_chapter ON story_scenes(story_id, chapter_id)",
]

_TIMESTAMP_COLUMNS = frozenset({"created_at", "updated_at"})


def _to_db(row: Row) -> Row:
    return {
        column: value.isoformat() if isinstance(value, datetime) else value
        for column, value in row.items()
    }


def _from_db(row: sqlite3.Row) -> Row:
    result = dict(row)
    for column in _TIMESTAMP_COLUMNS & result.keys():
        if isinstance(result[column], str):
            result[column] = datetime.fromisoformat(result[column])
    return result


def _where_clause(where: Filter) -> tuple[str, list]:
    if not where:
        return "", []
    parts = []
    params = []
    for column, value in _to_db(dict(where)).items():
        if value is None:
            parts.append(f"{column} IS NULL")
        else:
            parts.append(f"{column} = ?")
            params.append(value)
    return " WHERE " + " AND ".join(parts), params


class SQLiteDatastore:
    """SQLite-backed datastore.

    Every statement runs on a fresh connection in a worker thread, so the
    event loop only waits on I/O. Table and column names are checked against
    :mod:`models.schema` before being interpolated into SQL.
    """

    def __init__(self, db_path: str | Path):
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self.db_path))
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        conn.execute("PRAGMA journal_mode = WAL")
        return conn

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        """Yield a connection that commits on success and is always closed."""
        conn = self._get_conn()
        try:
            with conn:
                yield conn
        finally:
            conn.close()

    def _init_db(self):
        with self._connect() as conn:
            conn.executescript(_CREATE_TABLES_SQL)
        self._migrate()

    def _migrate(self):
        """Apply idempotent schema migrations (indexes)."""
        with self._connect() as conn:
            for sql in _MIGRATION_SQL:
                conn.execute(sql)

    async def _run(self, fn, *args):
        try:
            return await asyncio.to_thread(fn, *args)
        except (sqlite3.Error, OverflowError) as e:
            logger.error("SQLite statement failed: %s", e)
            raise DatabaseError("Datastore operation failed", {"error": str(e)}) from e

    # ---- Statements ----

    def _insert_sync(self, table: str, row: Row) -> Row:
        values = _to_db(row)
        columns = ", ".join(values)
        placeholders = ", ".join("?" for _ in values)
        with self._connect() as conn:
            conn.execute(
                f"INSERT INTO {table} ({columns}) VALUES ({placeholders})",
                tuple(values.values()),
            )
            stored = conn.execute(
                f"SELECT * FROM {table} WHERE id = ?", (values["id"],)
            ).fetchone()
        logger.debug("insert %s id=%s", table, values["id"])
        return _from_db(stored)

    def _select_sync(self, table: str, where: Filter) -> list[Row]:
        clause, params = _where_clause(where)
        with self._connect() as conn:
            rows = conn.execute(f"SELECT * FROM {table}{clause}", params).fetchall()
        return [_from_db(r) for r in rows]

    def _update_sync(self, table: str, row_id: str, changes: Row) -> Optional[Row]:
        values = _to_db(changes)
        assignments = ", ".join(f"{column} = ?" for column in values)
        with self._connect() as conn:
            cursor = conn.execute(
                f"UPDATE {table} SET {assignments} WHERE id = ?",
                (*values.values(), row_id),
            )
            if cursor.rowcount == 0:
                return None
            stored = conn.execute(
                f"SELECT * FROM {table} WHERE id = ?", (row_id,)
            ).fetchone()
        logger.debug("update %s id=%s columns=%s", table, row_id, sorted(values))
        return _from_db(stored)

    def _delete_sync(self, table: str, where: Filter) -> int:
        clause, params = _where_clause(where)
        with self._connect() as conn:
            cursor = conn.execute(f"DELETE FROM {table}{clause}", params)
            removed = cursor.rowcount
        logger.debug("delete %s where=%s removed=%d", table, dict(where), removed)
        return removed

    # ---- Datastore protocol ----

    async def insert(self, table: str, row: Row) -> Row:
        check_columns(table, row)
        return await self._run(self._insert_sync, table, row)

    async def select(self, table: str, where: Filter) -> list[Row]:
        check_columns(table, where)
        return await self._run(self._select_sync, table, where)

    async def update(self, table: str, row_id: str, changes: Row) -> Optional[Row]:
        check_columns(table, changes)
        if not changes:
            rows = await self.select(table, {"id": row_id})
            return rows[0] if rows else None
        return await self._run(self._update_sync, table, row_id, changes)

    async def delete(self, table: str, where: Filter) -> int:
        check_columns(table, where)
        return await self._run(self._delete_sync, table, where)


def open_datastore(settings):
    """Return the datastore selected by ``settings.datastore_backend``."""
    if settings.datastore_backend == "memory":
        from models.datastore import MemoryDatastore
        logger.info("Using in-memory datastore")
        return MemoryDatastore()
    logger.info("Using SQLite datastore at %s", settings.sqlite_db_path)
    return SQLiteDatastore(settings.sqlite_db_path)
