from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Union

import requests
from pydantic import TypeAdapter
from pydantic import ValidationError as PayloadError
from requests import RequestException

from task_api.errors import NotFoundError, TransportError, ValidationError
from task_api.schemas import DeleteResult, TaskOut

logger = logging.getLogger(__name__)

_TASK = TypeAdapter(TaskOut)
_OPTIONAL_TASK = TypeAdapter(Optional[TaskOut])
_TASK_LIST = TypeAdapter(List[TaskOut])
_DELETE_RESULT = TypeAdapter(DeleteResult)


def _decode(procedure: str, adapter: TypeAdapter, data: Any) -> Any:
    try:
        return adapter.validate_python(data)
    except PayloadError as exc:
        raise TransportError(f"{procedure} returned a malformed payload: {exc}") from exc


class _Unset:
    """Marker for an update field the caller did not supply."""

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Any = _Unset()


# PUBLIC_INTERFACE
class TaskServiceClient:
    """
    Typed client for the task service's remote procedures.

    `session` is any object with a requests-style
    `request(method, url, json=..., params=..., timeout=...)` method; a
    `requests.Session` is created when none is given.

    Failures are raised as:
    - NotFoundError for HTTP 404
    - ValidationError for HTTP 422
    - TransportError for connection problems, any other non-2xx status, and
      success responses whose body is not a valid payload
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        session: Optional[Any] = None,
        timeout: float = 10.0,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._session = session if session is not None else requests.Session()
        self._timeout = timeout

    def _call(
        self,
        method: str,
        procedure: str,
        *,
        json: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
        task_id: Optional[int] = None,
    ) -> Any:
        url = f"{self._base_url}/rpc/{procedure}"
        logger.debug("Calling %s %s", method, url)
        try:
            response = self._session.request(method, url, json=json, params=params, timeout=self._timeout)
        except RequestException as exc:
            raise TransportError(f"{procedure} failed: {exc}") from exc

        status = response.status_code
        if status < 400:
            try:
                return response.json()
            except ValueError as exc:
                raise TransportError(f"{procedure} returned a non-JSON body (HTTP {status})") from exc

        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}
        message = body.get("message")

        if status == 404 and task_id is not None:
            raise NotFoundError(task_id)
        if status == 422:
            raise ValidationError(message or "Request validation failed", body.get("detail"))
        raise TransportError(f"{procedure} returned HTTP {status}: {message or 'no message'}")

    def create_task(self, title: str, description: Optional[str] = None) -> TaskOut:
        data = self._call("POST", "createTask", json={"title": title, "description": description})
        return _decode("createTask", _TASK, data)

    def get_tasks(self) -> List[TaskOut]:
        data = self._call("GET", "getTasks")
        return _decode("getTasks", _TASK_LIST, data)

    def get_task(self, task_id: int) -> Optional[TaskOut]:
        data = self._call("GET", "getTask", params={"id": task_id})
        return _decode("getTask", _OPTIONAL_TASK, data)

    def update_task(
        self,
        task_id: int,
        *,
        title: Union[str, _Unset] = UNSET,
        description: Union[str, None, _Unset] = UNSET,
        completed: Union[bool, _Unset] = UNSET,
    ) -> TaskOut:
        """
        Send a partial update. Fields left as UNSET are omitted from the
        request; `description=None` is sent as an explicit null and clears it.
        """
        payload: Dict[str, Any] = {"id": task_id}
        for name, value in (("title", title), ("description", description), ("completed", completed)):
            if value is not UNSET:
                payload[name] = value
        data = self._call("POST", "updateTask", json=payload, task_id=task_id)
        return _decode("updateTask", _TASK, data)

    def delete_task(self, task_id: int) -> DeleteResult:
        data = self._call("POST", "deleteTask", json={"id": task_id}, task_id=task_id)
        return _decode("deleteTask", _DELETE_RESULT, data)
