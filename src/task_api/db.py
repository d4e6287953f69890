from __future__ import annotations

import logging
import os
import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from typing import Generator, List, Optional

from .errors import NotFoundError
from .models import TaskEntity
from .repositories import Repository, next_updated_at, now, require_title
from .schemas import MAX_TASK_ID, MIN_TASK_ID, TaskCreate, TaskUpdate

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Cols:
    table: str = "tasks"
    id: str = "id"
    title: str = "title"
    description: str = "description"
    completed: str = "completed"
    created_at: str = "created_at"
    updated_at: str = "updated_at"


_COLS = _Cols()

# Request field -> column for the partial update SET clause.
_UPDATABLE = {
    "title": _COLS.title,
    "description": _COLS.description,
    "completed": _COLS.completed,
}


def _ts(value: datetime) -> str:
    # Fixed-width text keeps lexical ORDER BY equal to chronological order.
    return value.isoformat(timespec="microseconds")


def _storable(task_id: int) -> bool:
    # sqlite3 raises OverflowError binding ints outside INTEGER range; no row can have such an id.
    return MIN_TASK_ID <= task_id <= MAX_TASK_ID


class SQLiteRepository(Repository):
    """
    SQLite repository implementing the Repository interface.

    Every operation opens its own connection. Writes run inside a single
    `BEGIN IMMEDIATE` transaction so the existence check and the mutation of
    a record cannot interleave with another writer.
    """

    def __init__(self, db_path: str) -> None:
        os.makedirs(os.path.dirname(db_path) or ".", exist_ok=True)
        self._db_path = db_path
        self._init_db()
        logger.info("SQLite task store ready db=%s", db_path)

    @contextmanager
    def _conn(self) -> Generator[sqlite3.Connection, None, None]:
        conn = sqlite3.connect(self._db_path, timeout=30.0, isolation_level=None)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
        finally:
            conn.close()

    @contextmanager
    def _transaction(self) -> Generator[sqlite3.Connection, None, None]:
        with self._conn() as conn:
            conn.execute("BEGIN IMMEDIATE")
            try:
                yield conn
            except BaseException:
                conn.execute("ROLLBACK")
                raise
            conn.execute("COMMIT")

    def _init_db(self) -> None:
        with self._transaction() as conn:
            conn.execute(
                f"""
                CREATE TABLE IF NOT EXISTS {_COLS.table} (
                    {_COLS.id} INTEGER PRIMARY KEY AUTOINCREMENT,
                    {_COLS.title} TEXT NOT NULL,
                    {_COLS.description} TEXT NULL,
                    {_COLS.completed} INTEGER NOT NULL DEFAULT 0,
                    {_COLS.created_at} TEXT NOT NULL,
                    {_COLS.updated_at} TEXT NOT NULL
                )
                """
            )
            conn.execute(
                f"CREATE INDEX IF NOT EXISTS idx_{_COLS.table}_created_at ON {_COLS.table}({_COLS.created_at})"
            )

    def _row_to_entity(self, row: sqlite3.Row) -> TaskEntity:
        return {
            "id": int(row[_COLS.id]),
            "title": str(row[_COLS.title]),
            "description": row[_COLS.description],
            "completed": bool(row[_COLS.completed]),
            "created_at": datetime.fromisoformat(row[_COLS.created_at]),
            "updated_at": datetime.fromisoformat(row[_COLS.updated_at]),
        }

    def _select(self, conn: sqlite3.Connection, task_id: int) -> Optional[sqlite3.Row]:
        return conn.execute(f"SELECT * FROM {_COLS.table} WHERE {_COLS.id} = ?", (task_id,)).fetchone()

    def create(self, data: TaskCreate) -> TaskEntity:
        title = require_title(data)
        created = _ts(now())
        with self._transaction() as conn:
            cur = conn.execute(
                f"""
                INSERT INTO {_COLS.table} ({_COLS.title}, {_COLS.description}, {_COLS.completed},
                    {_COLS.created_at}, {_COLS.updated_at})
                VALUES (?, ?, 0, ?, ?)
                """,
                (title, data.description, created, created),
            )
            row = self._select(conn, cur.lastrowid)
        assert row is not None
        entity = self._row_to_entity(row)
        logger.info("Created task id=%s", entity["id"])
        return entity

    def get(self, task_id: int) -> Optional[TaskEntity]:
        if not _storable(task_id):
            return None
        with self._conn() as conn:
            row = self._select(conn, task_id)
        return self._row_to_entity(row) if row else None

    def update(self, task_id: int, data: TaskUpdate) -> TaskEntity:
        if not _storable(task_id):
            raise NotFoundError(task_id)
        changes = data.changes()
        with self._transaction() as conn:
            row = self._select(conn, task_id)
            if row is None:
                raise NotFoundError(task_id)
            current = self._row_to_entity(row)

            assignments = [f"{_COLS.updated_at} = ?"]
            params: list = [_ts(next_updated_at(current["updated_at"]))]
            for field, column in _UPDATABLE.items():
                if field in changes:
                    assignments.append(f"{column} = ?")
                    value = changes[field]
                    params.append(int(value) if field == "completed" else value)
            conn.execute(
                f"UPDATE {_COLS.table} SET {', '.join(assignments)} WHERE {_COLS.id} = ?",
                [*params, task_id],
            )
            row = self._select(conn, task_id)
        assert row is not None
        logger.info("Updated task id=%s fields=%s", task_id, sorted(changes))
        return self._row_to_entity(row)

    def delete(self, task_id: int) -> None:
        if not _storable(task_id):
            raise NotFoundError(task_id)
        with self._transaction() as conn:
            cur = conn.execute(f"DELETE FROM {_COLS.table} WHERE {_COLS.id} = ?", (task_id,))
            if cur.rowcount == 0:
                raise NotFoundError(task_id)
        logger.info("Deleted task id=%s", task_id)

    def list(self) -> List[TaskEntity]:
        with self._conn() as conn:
            rows = conn.execute(
                f"SELECT * FROM {_COLS.table} ORDER BY {_COLS.created_at} DESC, {_COLS.id} DESC"
            ).fetchall()
        return [self._row_to_entity(r) for r in rows]

    def count(self) -> int:
        with self._conn() as conn:
            row = conn.execute(f"SELECT COUNT(*) AS cnt FROM {_COLS.table}").fetchone()
        return int(row["cnt"]) if row else 0
