from __future__ import annotations

from datetime import datetime
from typing import Optional, TypedDict


# PUBLIC_INTERFACE
class TaskEntity(TypedDict):
    """
    Storage-level representation of a Task record, shared by both repository
    backends.

    Fields:
    - id: Unique integer identifier, assigned at creation
    - title: Non-empty title (trimmed on input via schemas)
    - description: Optional detailed description
    - completed: Boolean completion flag, False at creation
    - created_at: Creation timestamp, never changes
    - updated_at: Last update timestamp, refreshed by every update
    """

    id: int
    title: str
    description: Optional[str]
    completed: bool
    created_at: datetime
    updated_at: datetime
