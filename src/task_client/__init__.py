"""
Task Tracker client: a typed HTTP client for the task service and the
in-memory task list view that reconciles against it.
"""

from .api import UNSET, TaskServiceClient
from .view import TaskDraft, TaskListView

__all__ = ["UNSET", "TaskDraft", "TaskListView", "TaskServiceClient"]
