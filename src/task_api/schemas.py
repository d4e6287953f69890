from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictInt, StrictStr, field_validator

# Task ids are SQLite INTEGER PRIMARY KEYs: signed 64-bit.
MIN_TASK_ID = -(2**63)
MAX_TASK_ID = 2**63 - 1


def _clean_title(value: str) -> str:
    """
    Strip surrounding whitespace and reject titles that end up empty.
    """
    s = value.strip()
    if not s:
        raise ValueError("title must not be empty")
    return s


# PUBLIC_INTERFACE
class TaskCreate(BaseModel):
    """
    Request shape for createTask.

    `description` must always be sent; it may be an explicit null.
    """

    model_config = ConfigDict(
        extra="forbid",
        json_schema_extra={
            "example": {
                "title": "Buy groceries",
                "description": "Milk, eggs, bread",
            }
        },
    )

    title: StrictStr = Field(..., description="Short title for the task")
    description: Optional[StrictStr] = Field(..., description="Detailed description, or null")

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        return _clean_title(v)


# PUBLIC_INTERFACE
class TaskUpdate(BaseModel):
    """
    Request shape for updateTask.

    Every field except `id` is optional and only fields present in the request
    are applied. Presence is tracked by pydantic's `model_fields_set`, which
    keeps "description omitted" apart from "description set to null".
    """

    model_config = ConfigDict(
        extra="forbid",
        json_schema_extra={
            "example": {
                "id": 1,
                "title": "Buy groceries and supplies",
                "description": None,
                "completed": True,
            }
        },
    )

    id: StrictInt = Field(..., ge=MIN_TASK_ID, le=MAX_TASK_ID, description="Identifier of the task to update")
    title: Optional[StrictStr] = Field(default=None, description="New title; must not be empty or null")
    description: Optional[StrictStr] = Field(default=None, description="New description; null clears it")
    completed: Optional[StrictBool] = Field(default=None, description="New completion flag; must not be null")

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: Optional[str]) -> str:
        # Runs only when the field was supplied, so None here is an explicit null.
        if v is None:
            raise ValueError("title must not be null")
        return _clean_title(v)

    @field_validator("completed")
    @classmethod
    def validate_completed(cls, v: Optional[bool]) -> bool:
        if v is None:
            raise ValueError("completed must not be null")
        return v

    def changes(self) -> Dict[str, Any]:
        """Return only the mutable fields that were present in the request."""
        return {name: getattr(self, name) for name in self.model_fields_set if name != "id"}


# PUBLIC_INTERFACE
class TaskIdInput(BaseModel):
    """Request shape for getTask and deleteTask."""

    model_config = ConfigDict(extra="forbid", json_schema_extra={"example": {"id": 1}})

    id: StrictInt = Field(..., ge=MIN_TASK_ID, le=MAX_TASK_ID, description="Identifier of the task")


# PUBLIC_INTERFACE
class TaskOut(BaseModel):
    """
    Task record as returned on the wire.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": 123,
                "title": "Buy groceries",
                "description": "Milk, eggs, bread",
                "completed": False,
                "created_at": "2025-01-25T10:15:30.123456",
                "updated_at": "2025-01-26T09:00:00.000001",
            }
        }
    )

    id: int = Field(..., description="Unique identifier of the task")
    title: str = Field(..., description="Short title for the task")
    description: Optional[str] = Field(default=None, description="Optional detailed description")
    completed: bool = Field(..., description="Completion status flag")
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")


# PUBLIC_INTERFACE
class DeleteResult(BaseModel):
    """Response of deleteTask."""

    success: bool = Field(True, description="Always true when the task was removed")


# PUBLIC_INTERFACE
class ErrorBody(BaseModel):
    """JSON body returned for every rejected request."""

    error: str = Field(..., description="Error kind, e.g. ValidationError or NotFoundError")
    message: str = Field(..., description="Human readable message")
    detail: Optional[list] = Field(default=None, description="Field level validation errors, if any")
