"""
TASKBOARD - Task Stores
=======================
Persistence collaborators behind the board.

HttpTaskStore talks to the company REST API (/kanban/tasks...).
FileTaskStore keeps everything in one local JSON file, for offline use.

Every failure, transport or application level, surfaces as
TaskStoreError with a single human-readable message.
"""

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, List, Dict, Any, Type, TypeVar

import requests
from pydantic import BaseModel, ValidationError

from .errors import TaskStoreError
from .schema import (
    Author, Column, Task, TaskComment, TaskDraft, TaskStatus, TaskUpdate,
    decode_grouped, empty_columns, utcnow
)

logger = logging.getLogger("taskboard.store")

M = TypeVar("M", bound=BaseModel)


class TaskStore(ABC):
    """Contract consumed by BoardManager"""

    @abstractmethod
    def list_tasks(self, company_id: int) -> Dict[Column, List[Task]]:
        """Return the company's tasks grouped into board columns"""

    @abstractmethod
    def create_task(self, draft: TaskDraft) -> Task:
        """Persist a new todo task and return it with its id"""

    @abstractmethod
    def update_task(self, task_id: int, update: TaskUpdate) -> Task:
        """Apply a partial update and return the stored task"""

    @abstractmethod
    def delete_task(self, task_id: int) -> None:
        """Delete a task and its comments"""

    @abstractmethod
    def list_comments(self, task_id: int) -> List[TaskComment]:
        """Return a task's comments, oldest first"""

    @abstractmethod
    def add_comment(self, task_id: int, content: str) -> TaskComment:
        """Attach a comment to a task"""


def _parse(model: Type[M], data: Any) -> M:
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise TaskStoreError(f"Malformed {model.__name__}: {e.error_count()} error(s)") from e


# ============================================================
# REST API
# ============================================================

class HttpTaskStore(TaskStore):
    """
    REST client for the kanban API.

    Endpoints:
        GET    /kanban/tasks?companyId=N
        POST   /kanban/tasks
        PUT    /kanban/tasks/{id}
        DELETE /kanban/tasks/{id}
        GET    /kanban/tasks/{id}/comments
        POST   /kanban/tasks/{id}/comments
    """

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"Accept": "application/json"})
        if token:
            self.session.headers["Authorization"] = f"Bearer {token}"

    def list_tasks(self, company_id: int) -> Dict[Column, List[Task]]:
        payload = self._request("GET", "/kanban/tasks", params={"companyId": company_id})
        try:
            return decode_grouped(payload)
        except (ValidationError, TypeError) as e:
            detail = f"{e.error_count()} error(s)" if isinstance(e, ValidationError) else str(e)
            raise TaskStoreError(f"Malformed task list in response: {detail}") from e

    def create_task(self, draft: TaskDraft) -> Task:
        payload = self._request("POST", "/kanban/tasks", json=draft.to_wire())
        return _parse(Task, payload)

    def update_task(self, task_id: int, update: TaskUpdate) -> Task:
        payload = self._request("PUT", f"/kanban/tasks/{task_id}", json=update.to_wire())
        return _parse(Task, payload)

    def delete_task(self, task_id: int) -> None:
        self._request("DELETE", f"/kanban/tasks/{task_id}")

    def list_comments(self, task_id: int) -> List[TaskComment]:
        payload = self._request("GET", f"/kanban/tasks/{task_id}/comments") or {}
        raw_comments = payload.get("comments", []) if isinstance(payload, dict) else payload
        if not isinstance(raw_comments or [], list):
            raise TaskStoreError(f"Malformed comment list in response: {type(raw_comments).__name__}")
        return [_parse(TaskComment, raw) for raw in raw_comments or []]

    def add_comment(self, task_id: int, content: str) -> TaskComment:
        payload = self._request("POST", f"/kanban/tasks/{task_id}/comments", json={"content": content})
        return _parse(TaskComment, payload)

    def _request(self, method: str, path: str, **kwargs) -> Any:
        url = f"{self.base_url}{path}"
        logger.debug(f"{method} {url}")

        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            raise TaskStoreError(f"Network error: {e}") from e

        if not response.ok:
            raise TaskStoreError(_error_message(response), status_code=response.status_code)

        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise TaskStoreError(f"Invalid JSON from {method} {path}", status_code=response.status_code) from e


def _error_message(response: requests.Response) -> str:
    """Pick the API's error text, falling back to the HTTP status line"""
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        for key in ("error", "message"):
            if body.get(key):
                return str(body[key])
    return f"HTTP {response.status_code} {response.reason or ''}".strip()


# ============================================================
# LOCAL FILE
# ============================================================

class FileTaskStore(TaskStore):
    """
    Single JSON document at {data_dir}/tasks.json:

        {"next_task_id": 3, "next_comment_id": 1,
         "tasks": [...], "comments": [...]}

    Records are stored in the same camelCase shape the API returns.
    """

    def __init__(self, data_dir: str = ".taskboard", author: Optional[Author] = None):
        self.data_dir = Path(data_dir)
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self.author = author

    @property
    def path(self) -> Path:
        return self.data_dir / "tasks.json"

    # ========================================
    # PERSISTENCE
    # ========================================

    def _read(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {"next_task_id": 1, "next_comment_id": 1, "tasks": [], "comments": []}
        try:
            with open(self.path, "r") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise TaskStoreError(f"Cannot read {self.path}: {e}") from e

        problem = _document_problem(data)
        if problem:
            raise TaskStoreError(f"Cannot read {self.path}: {problem}")
        return data

    def _write(self, data: Dict[str, Any]) -> None:
        try:
            with open(self.path, "w") as f:
                json.dump(data, f, indent=2)
        except OSError as e:
            raise TaskStoreError(f"Cannot write {self.path}: {e}") from e

    def _find(self, data: Dict[str, Any], task_id: int) -> int:
        for i, raw in enumerate(data["tasks"]):
            if raw.get("id") == task_id:
                return i
        raise TaskStoreError(f"Task not found: {task_id}", status_code=404)

    # ========================================
    # TASKS
    # ========================================

    def list_tasks(self, company_id: int) -> Dict[Column, List[Task]]:
        data = self._read()
        tasks = [_parse(Task, raw) for raw in data["tasks"] if raw.get("companyId") == company_id]
        # position ASC, then newest first
        tasks.sort(key=lambda t: t.created_at, reverse=True)
        tasks.sort(key=lambda t: t.position)

        grouped = empty_columns()
        for task in tasks:
            grouped[task.column].append(task)
        return grouped

    def create_task(self, draft: TaskDraft) -> Task:
        data = self._read()
        positions = [
            raw.get("position", 0) for raw in data["tasks"]
            if raw.get("companyId") == draft.company_id and raw.get("status") == TaskStatus.TODO.value
        ]
        now = utcnow()
        task = Task(
            id=data["next_task_id"],
            title=draft.title,
            content=draft.content,
            status=TaskStatus.TODO,
            priority=draft.priority,
            author=self.author,
            assignee=Author(id=draft.assignee_id) if draft.assignee_id else None,
            company_id=draft.company_id,
            board_id=draft.board_id,
            position=max(positions, default=0) + 1,
            tags=draft.tags,
            due_date=draft.due_date,
            created_at=now,
            updated_at=now,
        )
        data["next_task_id"] += 1
        data["tasks"].append(task.to_wire())
        self._write(data)

        logger.info(f"📝 Created task {task.id}: {task.title}")
        return task

    def update_task(self, task_id: int, update: TaskUpdate) -> Task:
        data = self._read()
        index = self._find(data, task_id)
        current = _parse(Task, data["tasks"][index])

        changes = update.model_dump(exclude_unset=True)
        assignee_id = changes.pop("assignee_id", None)
        if "assignee_id" in update.model_fields_set:
            changes["assignee"] = Author(id=assignee_id) if assignee_id else None

        new_status = changes.get("status")
        if new_status == TaskStatus.DONE and current.status != TaskStatus.DONE:
            changes["completed_at"] = utcnow()
        elif new_status is not None and new_status != TaskStatus.DONE and current.status == TaskStatus.DONE:
            changes["completed_at"] = None
        changes["updated_at"] = utcnow()

        task = _parse(Task, {**current.model_dump(), **changes})
        data["tasks"][index] = task.to_wire()
        self._write(data)

        logger.debug(f"Updated task {task_id}: {sorted(changes)}")
        return task

    def delete_task(self, task_id: int) -> None:
        data = self._read()
        index = self._find(data, task_id)
        data["tasks"].pop(index)
        data["comments"] = [c for c in data["comments"] if c.get("taskId") != task_id]
        self._write(data)
        logger.info(f"🗑️ Deleted task {task_id}")

    # ========================================
    # COMMENTS
    # ========================================

    def list_comments(self, task_id: int) -> List[TaskComment]:
        data = self._read()
        self._find(data, task_id)
        comments = [_parse(TaskComment, c) for c in data["comments"] if c.get("taskId") == task_id]
        return sorted(comments, key=lambda c: c.created_at)

    def add_comment(self, task_id: int, content: str) -> TaskComment:
        data = self._read()
        self._find(data, task_id)
        try:
            comment = TaskComment(
                id=data["next_comment_id"],
                task_id=task_id,
                content=content.strip(),
                author=self.author,
            )
        except ValidationError as e:
            raise TaskStoreError("Comment content is required", status_code=400) from e
        data["next_comment_id"] += 1
        data["comments"].append(comment.to_wire())
        self._write(data)
        return comment


def _document_problem(data: Any) -> Optional[str]:
    """Describe what is wrong with a tasks.json document, or None if it is usable"""
    if not isinstance(data, dict):
        return f"expected an object, got {type(data).__name__}"
    for key in ("next_task_id", "next_comment_id"):
        if not isinstance(data.get(key), int):
            return f"missing or invalid {key!r}"
    for key in ("tasks", "comments"):
        records = data.get(key)
        if not isinstance(records, list):
            return f"missing or invalid {key!r}"
        if not all(isinstance(record, dict) for record in records):
            return f"{key!r} must contain objects"
    return None
