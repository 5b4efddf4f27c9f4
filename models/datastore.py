"""Datastore contract and an in-process implementation.

The core only ever talks to a ``Datastore``: keyed rows grouped by table,
addressed with column-equality filters. Rows are plain dicts keyed by the
column names in :mod:`models.schema`.
"""

import copy
import logging
from typing import Mapping, Optional, Protocol, runtime_checkable

from config.exceptions import DatabaseError
from models.schema import DETACH_ON_DELETE, TABLE_COLUMNS, check_columns

logger = logging.getLogger(__name__)

Row = dict
Filter = Mapping[str, object]


@runtime_checkable
class Datastore(Protocol):
    """Durable keyed storage used by the repositories."""

    async def insert(self, table: str, row: Row) -> Row:
        """Insert ``row`` and return it as stored."""
        ...

    async def select(self, table: str, where: Filter) -> list[Row]:
        """Return every row whose columns equal all values in ``where``."""
        ...

    async def update(self, table: str, row_id: str, changes: Row) -> Optional[Row]:
        """Apply ``changes`` to the row with ``row_id``; None if no such row."""
        ...

    async def delete(self, table: str, where: Filter) -> int:
        """Delete matching rows and return how many were removed."""
        ...


def _matches(row: Row, where: Filter) -> bool:
    return all(row.get(column) == value for column, value in where.items())


class MemoryDatastore:
    """Dict-backed datastore for tests and throwaway sessions.

    Each statement completes without yielding, so a single call is atomic
    with respect to other coroutines on the same loop.
    """

    def __init__(self):
        self._tables: dict[str, dict[str, Row]] = {name: {} for name in TABLE_COLUMNS}

    async def insert(self, table: str, row: Row) -> Row:
        check_columns(table, row)
        stored = {column: row.get(column) for column in TABLE_COLUMNS[table]}
        rows = self._tables[table]
        if stored["id"] in rows:
            raise DatabaseError(f"Duplicate id in {table}", {"id": stored["id"]})
        rows[stored["id"]] = stored
        logger.debug("insert %s id=%s", table, stored["id"])
        return copy.deepcopy(stored)

    async def select(self, table: str, where: Filter) -> list[Row]:
        check_columns(table, where)
        return [
            copy.deepcopy(row)
            for row in self._tables[table].values()
            if _matches(row, where)
        ]

    async def update(self, table: str, row_id: str, changes: Row) -> Optional[Row]:
        check_columns(table, changes)
        row = self._tables[table].get(row_id)
        if row is None:
            return None
        row.update(changes)
        logger.debug("update %s id=%s columns=%s", table, row_id, sorted(changes))
        return copy.deepcopy(row)

    async def delete(self, table: str, where: Filter) -> int:
        check_columns(table, where)
        rows = self._tables[table]
        doomed = [row_id for row_id, row in rows.items() if _matches(row, where)]
        for row_id in doomed:
            del rows[row_id]
            for child_table, column in DETACH_ON_DELETE.get(table, ()):
                for child in self._tables[child_table].values():
                    if child.get(column) == row_id:
                        child[column] = None
        logger.debug("delete %s where=%s removed=%d", table, dict(where), len(doomed))
        return len(doomed)
