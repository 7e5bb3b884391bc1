"""
TASKBOARD - Task Schema Definition
==================================
Kanban task records as the REST API returns them (camelCase JSON).

Two vocabularies meet here:
    Column      board identifiers: todo / inProgress / done
    TaskStatus  persisted values:  todo / in_progress / done

Only TaskStatus values go over the wire.
"""

import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, List, Dict, Any, Mapping

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

logger = logging.getLogger("taskboard.schema")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TaskStatus(str, Enum):
    """Persisted task status"""
    TODO = "todo"
    IN_PROGRESS = "in_progress"
    DONE = "done"


class TaskPriority(str, Enum):
    """Task priority levels"""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class Column(str, Enum):
    """Board columns, in display order"""
    TODO = "todo"
    IN_PROGRESS = "inProgress"
    DONE = "done"

    @property
    def status(self) -> TaskStatus:
        return _COLUMN_STATUS[self]

    @property
    def header(self) -> str:
        return _COLUMN_HEADERS[self]

    @classmethod
    def for_status(cls, status: TaskStatus) -> "Column":
        return _STATUS_COLUMN[TaskStatus(status)]

    @classmethod
    def parse(cls, value: Any) -> Optional["Column"]:
        """Resolve a column id or a persisted status name; None if unknown."""
        if isinstance(value, Column):
            return value
        if isinstance(value, TaskStatus):
            return cls.for_status(value)
        if not isinstance(value, str):
            return None
        try:
            return cls(value)
        except ValueError:
            pass
        try:
            return cls.for_status(TaskStatus(value))
        except ValueError:
            return None


_COLUMN_STATUS = {
    Column.TODO: TaskStatus.TODO,
    Column.IN_PROGRESS: TaskStatus.IN_PROGRESS,
    Column.DONE: TaskStatus.DONE,
}
_STATUS_COLUMN = {status: column for column, status in _COLUMN_STATUS.items()}
_COLUMN_HEADERS = {
    Column.TODO: "TO DO",
    Column.IN_PROGRESS: "IN PROGRESS",
    Column.DONE: "DONE",
}


class WireModel(BaseModel):
    """snake_case attributes, camelCase JSON"""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def to_wire(self, **kwargs) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, **kwargs)


class Author(WireModel):
    """User reference embedded in tasks and comments"""
    id: Optional[int] = None
    name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    avatar: Optional[str] = None

    @property
    def display_name(self) -> str:
        if self.name and self.last_name:
            return f"{self.name} {self.last_name}"
        if self.name:
            return self.name
        return self.email or "Unknown user"


class Task(WireModel):
    """Individual kanban task"""
    id: int
    title: str = Field(min_length=1, max_length=200)
    content: str = ""
    status: TaskStatus = TaskStatus.TODO
    priority: TaskPriority = TaskPriority.MEDIUM

    # People
    author: Optional[Author] = None
    assignee: Optional[Author] = None

    # Ownership
    company_id: Optional[int] = None
    board_id: Optional[int] = None
    position: int = 0

    # Planning
    tags: List[str] = Field(default_factory=list)
    due_date: Optional[datetime] = None
    estimated_hours: Optional[float] = None
    actual_hours: Optional[float] = None

    # Timestamps
    completed_at: Optional[datetime] = None
    created_at: datetime = Field(default_factory=utcnow, frozen=True)
    updated_at: Optional[datetime] = None

    @field_validator("content", mode="before")
    @classmethod
    def _null_content(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("tags", mode="before")
    @classmethod
    def _null_tags(cls, value: Any) -> Any:
        return [] if value is None else value

    @property
    def column(self) -> Column:
        return Column.for_status(self.status)

    def __str__(self) -> str:
        return f"[{self.id}] {self.title!r} ({self.status.value})"


class TaskDraft(WireModel):
    """Create request; new tasks always start in todo"""
    title: str = Field(min_length=1, max_length=200)
    content: str = Field(default="", max_length=5000)
    company_id: int
    priority: TaskPriority = TaskPriority.MEDIUM
    tags: List[str] = Field(default_factory=list)
    due_date: Optional[datetime] = None
    assignee_id: Optional[int] = None
    board_id: Optional[int] = None

    @field_validator("title", mode="before")
    @classmethod
    def _strip_title(cls, value: Any) -> Any:
        return value.strip() if isinstance(value, str) else value

    def to_wire(self, **kwargs) -> Dict[str, Any]:
        body = super().to_wire(exclude_none=True, **kwargs)
        body["status"] = TaskStatus.TODO.value
        return body


class TaskUpdate(WireModel):
    """Partial update; only fields that were set are sent"""
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    content: Optional[str] = Field(default=None, max_length=5000)
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    tags: Optional[List[str]] = None
    due_date: Optional[datetime] = None
    assignee_id: Optional[int] = None
    estimated_hours: Optional[float] = None
    actual_hours: Optional[float] = None

    @field_validator("title", mode="before")
    @classmethod
    def _strip_title(cls, value: Any) -> Any:
        return value.strip() if isinstance(value, str) else value

    @model_validator(mode="after")
    def _reject_null_required(self) -> "TaskUpdate":
        # every task has these; they can change but not be cleared
        for name in ("title", "content", "status", "priority"):
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self

    def to_wire(self, **kwargs) -> Dict[str, Any]:
        return super().to_wire(exclude_unset=True, **kwargs)


class TaskComment(WireModel):
    """Comment left on a task"""
    id: int
    task_id: int
    content: str = Field(min_length=1, max_length=2000)
    author: Optional[Author] = None
    is_edited: bool = False
    created_at: datetime = Field(default_factory=utcnow)


class BoardStatistics(BaseModel):
    """Counts over the tasks currently on the board"""
    total: int = 0
    by_status: Dict[str, int] = Field(default_factory=dict)
    by_priority: Dict[str, int] = Field(default_factory=dict)
    completion_rate: float = 0.0


# ============================================================
# WIRE DECODING
# ============================================================

def empty_columns() -> Dict[Column, List[Task]]:
    return {column: [] for column in Column}


def decode_grouped(payload: Optional[Mapping[str, Any]]) -> Dict[Column, List[Task]]:
    """Decode a tasks-grouped-by-status response into board columns.

    Accepts either the full response ``{"tasks": {...}, "total": n}`` or
    the bare ``{"todo": [...], "in_progress": [...], "done": [...]}``
    mapping. Missing or null groups come back as empty columns.

    Raises TypeError when the payload or a group has the wrong shape, and
    pydantic's ValidationError when a task record is malformed.
    """
    grouped = empty_columns()
    if not payload:
        return grouped
    if not isinstance(payload, Mapping):
        raise TypeError(f"Expected a mapping of task groups, got {type(payload).__name__}")

    groups = payload.get("tasks", payload)
    if groups is None:
        return grouped
    if not isinstance(groups, Mapping):
        raise TypeError(f"Expected a mapping of task groups, got {type(groups).__name__}")

    for key, raw_tasks in groups.items():
        column = Column.parse(key)
        if column is None:
            logger.warning(f"Ignoring unknown task group: {key!r}")
            continue
        if raw_tasks is None:
            continue
        if not isinstance(raw_tasks, list):
            raise TypeError(f"Task group {key!r} is a {type(raw_tasks).__name__}, not a list")
        for raw in raw_tasks:
            task = Task.model_validate(raw)
            task.status = column.status
            grouped[column].append(task)

    return grouped
