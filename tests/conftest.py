"""Shared fixtures: an in-memory store that records calls and can be told to fail."""

from typing import Callable, Dict, List, Optional

import pytest

from taskboard.errors import TaskStoreError
from taskboard.manager import BoardManager
from taskboard.schema import Author, Column, Task, TaskComment, TaskDraft, TaskUpdate, empty_columns
from taskboard.store import TaskStore


class RecordingStore(TaskStore):
    """In-memory TaskStore keeping a log of every call"""

    def __init__(self, tasks: Optional[List[Task]] = None):
        self.tasks: Dict[int, Task] = {t.id: t.model_copy() for t in tasks or []}
        self.comments: List[TaskComment] = []
        self.calls: List[tuple] = []
        self.fail_on: Dict[str, str] = {}
        self.on_update: Optional[Callable[[int, TaskUpdate], None]] = None
        self._next_id = max(self.tasks, default=0) + 1

    def _check(self, name: str) -> None:
        if name in self.fail_on:
            raise TaskStoreError(self.fail_on[name])

    def list_tasks(self, company_id):
        self.calls.append(("list_tasks", company_id))
        self._check("list_tasks")
        grouped = empty_columns()
        for task in self.tasks.values():
            grouped[task.column].append(task.model_copy())
        return grouped

    def create_task(self, draft: TaskDraft):
        self.calls.append(("create_task", draft.to_wire()))
        self._check("create_task")
        task = Task(
            id=self._next_id,
            title=draft.title,
            content=draft.content,
            company_id=draft.company_id,
            priority=draft.priority,
            author=Author(id=1, name="Ada", last_name="Lovelace"),
        )
        self._next_id += 1
        self.tasks[task.id] = task
        return task.model_copy()

    def update_task(self, task_id, update: TaskUpdate):
        self.calls.append(("update_task", task_id, update.to_wire()))
        if self.on_update:
            self.on_update(task_id, update)
        self._check("update_task")
        if task_id not in self.tasks:
            raise TaskStoreError(f"Task not found: {task_id}", status_code=404)
        task = self.tasks[task_id].model_copy(update=update.model_dump(exclude_unset=True))
        self.tasks[task_id] = task
        return task.model_copy()

    def delete_task(self, task_id):
        self.calls.append(("delete_task", task_id))
        self._check("delete_task")
        if task_id not in self.tasks:
            raise TaskStoreError(f"Task not found: {task_id}", status_code=404)
        del self.tasks[task_id]

    def list_comments(self, task_id):
        self.calls.append(("list_comments", task_id))
        self._check("list_comments")
        return [c for c in self.comments if c.task_id == task_id]

    def add_comment(self, task_id, content):
        self.calls.append(("add_comment", task_id, content))
        self._check("add_comment")
        comment = TaskComment(id=len(self.comments) + 1, task_id=task_id, content=content)
        self.comments.append(comment)
        return comment

    def calls_named(self, name: str) -> List[tuple]:
        return [c for c in self.calls if c[0] == name]


def make_task(task_id: int, title: str = "", **fields) -> Task:
    return Task(id=task_id, title=title or f"Task {task_id}", company_id=1, **fields)


@pytest.fixture
def task_a():
    return make_task(1, "A")


@pytest.fixture
def task_b():
    return make_task(2, "B")


@pytest.fixture
def store(task_a, task_b):
    """Board with todo=[A, B], in_progress=[], done=[]"""
    return RecordingStore([task_a, task_b])


@pytest.fixture
def manager(store):
    manager = BoardManager(store, company_id=1)
    assert manager.reload()
    store.calls.clear()
    return manager


@pytest.fixture
def layout():
    """Shorthand for comparing board layouts"""
    def _layout(todo=(), in_progress=(), done=()):
        return {
            Column.TODO: list(todo),
            Column.IN_PROGRESS: list(in_progress),
            Column.DONE: list(done),
        }
    return _layout
