from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from functools import lru_cache
from threading import RLock
from typing import List, Optional

from .errors import NotFoundError, ValidationError
from .models import TaskEntity
from .schemas import TaskCreate, TaskUpdate
from .settings import get_settings

logger = logging.getLogger(__name__)


def now() -> datetime:
    return datetime.now()


def next_updated_at(previous: datetime) -> datetime:
    """
    Timestamp for an update of a record last touched at `previous`.

    Clock resolution can hand back the same instant twice; updated_at must
    still move forward, so it is bumped by one microsecond in that case.
    """
    current = now()
    if current <= previous:
        current = previous + timedelta(microseconds=1)
    return current


def require_title(data: TaskCreate) -> str:
    title = (data.title or "").strip()
    if not title:
        raise ValidationError("title must not be empty")
    return title


def newest_first(items: List[TaskEntity]) -> List[TaskEntity]:
    return sorted(items, key=lambda t: (t["created_at"], t["id"]), reverse=True)


# PUBLIC_INTERFACE
class Repository(ABC):
    """Abstract repository contract for task storage backends."""

    @abstractmethod
    def create(self, data: TaskCreate) -> TaskEntity:
        """Create and return a new TaskEntity. Raises ValidationError on a blank title."""

    @abstractmethod
    def get(self, task_id: int) -> Optional[TaskEntity]:
        """Return a TaskEntity by id, or None if not found."""

    @abstractmethod
    def update(self, task_id: int, data: TaskUpdate) -> TaskEntity:
        """
        Apply the fields present in `data` and refresh updated_at.
        Raises NotFoundError if no task has that id.
        """

    @abstractmethod
    def delete(self, task_id: int) -> None:
        """Delete a TaskEntity by id. Raises NotFoundError if no task has that id."""

    @abstractmethod
    def list(self) -> List[TaskEntity]:
        """Return every task, newest created first (ties broken by id, descending)."""

    @abstractmethod
    def count(self) -> int:
        """Return the number of stored tasks."""


class InMemoryRepository(Repository):
    """
    Thread-safe in-memory repository suitable for testing and default runtime.
    """

    def __init__(self) -> None:
        self._lock = RLock()
        self._items: dict[int, TaskEntity] = {}
        self._next_id = 1

    def create(self, data: TaskCreate) -> TaskEntity:
        title = require_title(data)
        created = now()
        with self._lock:
            entity: TaskEntity = {
                "id": self._next_id,
                "title": title,
                "description": data.description,
                "completed": False,
                "created_at": created,
                "updated_at": created,
            }
            self._next_id += 1
            self._items[entity["id"]] = entity
        logger.info("Created task id=%s", entity["id"])
        return entity.copy()

    def get(self, task_id: int) -> Optional[TaskEntity]:
        with self._lock:
            item = self._items.get(task_id)
            return None if item is None else item.copy()

    def update(self, task_id: int, data: TaskUpdate) -> TaskEntity:
        changes = data.changes()
        with self._lock:
            existing = self._items.get(task_id)
            if existing is None:
                raise NotFoundError(task_id)

            updated = existing.copy()
            for field in ("title", "description", "completed"):
                if field in changes:
                    updated[field] = changes[field]  # type: ignore[literal-required]
            updated["updated_at"] = next_updated_at(existing["updated_at"])

            self._items[task_id] = updated
        logger.info("Updated task id=%s fields=%s", task_id, sorted(changes))
        return updated.copy()

    def delete(self, task_id: int) -> None:
        with self._lock:
            if self._items.pop(task_id, None) is None:
                raise NotFoundError(task_id)
        logger.info("Deleted task id=%s", task_id)

    def list(self) -> List[TaskEntity]:
        with self._lock:
            # Return copies to avoid external mutation
            return [t.copy() for t in newest_first(list(self._items.values()))]

    def count(self) -> int:
        with self._lock:
            return len(self._items)


# PUBLIC_INTERFACE
@lru_cache(maxsize=1)
def get_repository() -> Repository:
    """
    Return the process-wide repository configured by settings.
    - memory: InMemoryRepository
    - sqlite: SQLiteRepository at SQLITE_DB_PATH
    """
    settings = get_settings()
    if settings.persistence_backend == "sqlite":
        from .db import SQLiteRepository

        repo: Repository = SQLiteRepository(settings.sqlite_db_path)
    else:
        repo = InMemoryRepository()
    logger.info("Using %s task store (%d tasks)", settings.persistence_backend, repo.count())
    return repo
