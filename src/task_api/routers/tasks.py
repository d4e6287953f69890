from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from ..errors import NotFoundError
from ..repositories import Repository, get_repository
from ..schemas import (
    MAX_TASK_ID,
    MIN_TASK_ID,
    DeleteResult,
    ErrorBody,
    TaskCreate,
    TaskIdInput,
    TaskOut,
    TaskUpdate,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/rpc",
    tags=["tasks"],
)

_NOT_FOUND = {404: {"model": ErrorBody, "description": "Task not found"}}
_INVALID = {422: {"model": ErrorBody, "description": "Request validation failed"}}


def _get_repo(repo: Repository = Depends(get_repository)) -> Repository:
    """
    Dependency wrapper for repository to keep signatures clean.
    """
    return repo


# PUBLIC_INTERFACE
@router.post(
    "/createTask",
    response_model=TaskOut,
    summary="Create Task",
    description="Create a new task with completed=false and return the stored record.",
    responses=_INVALID,
)
def create_task(payload: TaskCreate, repo: Repository = Depends(_get_repo)) -> TaskOut:
    created = repo.create(payload)
    return TaskOut(**created)


# PUBLIC_INTERFACE
@router.get(
    "/getTasks",
    response_model=List[TaskOut],
    summary="List Tasks",
    description="Return every task, newest created first.",
)
def get_tasks(repo: Repository = Depends(_get_repo)) -> List[TaskOut]:
    return [TaskOut(**t) for t in repo.list()]


# PUBLIC_INTERFACE
@router.get(
    "/getTask",
    response_model=Optional[TaskOut],
    summary="Get Task",
    description="Look up a single task by id. Returns null when no task has that id.",
    responses=_INVALID,
)
def get_task(
    task_id: int = Query(..., alias="id", ge=MIN_TASK_ID, le=MAX_TASK_ID, description="Identifier of the task"),
    repo: Repository = Depends(_get_repo),
) -> Optional[TaskOut]:
    item = repo.get(task_id)
    return TaskOut(**item) if item else None


# PUBLIC_INTERFACE
@router.post(
    "/updateTask",
    response_model=TaskOut,
    summary="Update Task",
    description=(
        "Partially update a task. Only fields present in the body are applied; "
        "an explicit null description clears it. updated_at is always refreshed."
    ),
    responses={**_NOT_FOUND, **_INVALID},
)
def update_task(payload: TaskUpdate, repo: Repository = Depends(_get_repo)) -> TaskOut:
    try:
        updated = repo.update(payload.id, payload)
    except NotFoundError:
        logger.info("updateTask rejected: no task id=%s", payload.id)
        raise
    return TaskOut(**updated)


# PUBLIC_INTERFACE
@router.post(
    "/deleteTask",
    response_model=DeleteResult,
    summary="Delete Task",
    description="Permanently delete a task by id.",
    responses={**_NOT_FOUND, **_INVALID},
)
def delete_task(payload: TaskIdInput, repo: Repository = Depends(_get_repo)) -> DeleteResult:
    try:
        repo.delete(payload.id)
    except NotFoundError:
        logger.info("deleteTask rejected: no task id=%s", payload.id)
        raise
    return DeleteResult(success=True)
