from __future__ import annotations

from typing import Any, List, Optional


# PUBLIC_INTERFACE
class TaskError(Exception):
    """Base class for every failure surfaced by the task service."""

    kind = "TaskError"

    def __init__(self, message: str, detail: Optional[List[Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.detail = detail


# PUBLIC_INTERFACE
class ValidationError(TaskError):
    """Malformed request or missing required field; rejected before storage is touched."""

    kind = "ValidationError"


# PUBLIC_INTERFACE
class NotFoundError(TaskError):
    """An operation referenced a task id with no matching record."""

    kind = "NotFoundError"

    def __init__(self, task_id: int) -> None:
        super().__init__(f"Task with id {task_id} not found")
        self.task_id = task_id


# PUBLIC_INTERFACE
class TransportError(TaskError):
    """Communication with the task service failed or returned an unexpected status."""

    kind = "TransportError"
