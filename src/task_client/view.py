from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

from task_api.errors import TaskError
from task_api.schemas import TaskOut

from .api import TaskServiceClient

logger = logging.getLogger(__name__)


# PUBLIC_INTERFACE
@dataclass
class TaskDraft:
    """Form buffer for a task being created or edited."""

    title: str = ""
    description: Optional[str] = None

    @property
    def is_submittable(self) -> bool:
        return bool(self.title.strip())


def _replace(tasks: List[TaskOut], updated: TaskOut) -> List[TaskOut]:
    return [updated if t.id == updated.id else t for t in tasks]


# PUBLIC_INTERFACE
class TaskListView:
    """
    Client-side task list, newest first.

    Local state is only changed after the server confirms a round trip:
    create prepends, update replaces in place, delete filters out. A failed
    call is logged and leaves every piece of state as it was. Each operation
    returns True on success and False otherwise.
    """

    def __init__(self, client: TaskServiceClient) -> None:
        self._client = client
        self.tasks: List[TaskOut] = []
        self.editing: Optional[TaskOut] = None
        self.create_draft = TaskDraft()
        self.edit_draft = TaskDraft()
        self.is_loading = False

    # ---- derived state ----

    @property
    def completed_count(self) -> int:
        return sum(1 for t in self.tasks if t.completed)

    @property
    def pending_count(self) -> int:
        return len(self.tasks) - self.completed_count

    @property
    def can_submit_create(self) -> bool:
        return not self.is_loading and self.create_draft.is_submittable

    @property
    def can_submit_edit(self) -> bool:
        return self.editing is not None and not self.is_loading and self.edit_draft.is_submittable

    # ---- drafts ----

    def set_create_draft(self, title: Optional[str] = None, description: Optional[str] = None) -> None:
        """
        Update the create form. An argument left as None keeps the current
        value; pass description="" to clear the description.
        """
        self.create_draft = _edit_draft(self.create_draft, title, description)

    def set_edit_draft(self, title: Optional[str] = None, description: Optional[str] = None) -> None:
        """Same as set_create_draft, for the edit form."""
        self.edit_draft = _edit_draft(self.edit_draft, title, description)

    def start_editing(self, task: TaskOut) -> None:
        self.editing = task
        self.edit_draft = TaskDraft(title=task.title, description=task.description)

    def cancel_editing(self) -> None:
        self.editing = None
        self.edit_draft = TaskDraft()

    # ---- round trips ----

    def load(self) -> bool:
        try:
            tasks = self._client.get_tasks()
        except TaskError as exc:
            logger.error("Failed to load tasks: %s", exc)
            return False
        self.tasks = tasks
        return True

    def submit_create(self) -> bool:
        if not self.can_submit_create:
            return False
        draft = self.create_draft
        self.is_loading = True
        try:
            created = self._client.create_task(draft.title, draft.description)
        except TaskError as exc:
            logger.error("Failed to create task: %s", exc)
            return False
        finally:
            self.is_loading = False
        self.tasks = [created, *self.tasks]
        self.create_draft = TaskDraft()
        return True

    def toggle_complete(self, task: TaskOut) -> bool:
        try:
            updated = self._client.update_task(task.id, completed=not task.completed)
        except TaskError as exc:
            logger.error("Failed to update task %s: %s", task.id, exc)
            return False
        self.tasks = _replace(self.tasks, updated)
        return True

    def submit_edit(self) -> bool:
        if not self.can_submit_edit:
            return False
        editing = self.editing
        assert editing is not None
        draft = self.edit_draft
        self.is_loading = True
        try:
            updated = self._client.update_task(editing.id, title=draft.title, description=draft.description)
        except TaskError as exc:
            logger.error("Failed to update task %s: %s", editing.id, exc)
            return False
        finally:
            self.is_loading = False
        self.tasks = _replace(self.tasks, updated)
        self.cancel_editing()
        return True

    def delete(self, task_id: int) -> bool:
        try:
            self._client.delete_task(task_id)
        except TaskError as exc:
            logger.error("Failed to delete task %s: %s", task_id, exc)
            return False
        self.tasks = [t for t in self.tasks if t.id != task_id]
        return True


def _edit_draft(draft: TaskDraft, title: Optional[str], description: Optional[str]) -> TaskDraft:
    # An emptied description box means "no description".
    return TaskDraft(
        title=draft.title if title is None else title,
        description=draft.description if description is None else (description or None),
    )
