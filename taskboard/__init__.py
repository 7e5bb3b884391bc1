"""
TASKBOARD - Kanban Board State
==============================
Company task board with optimistic drag-and-drop moves.

Usage:
    from taskboard import BoardManager, FileTaskStore, Column

    manager = BoardManager(FileTaskStore(".taskboard"), company_id=1)
    manager.reload()

    task = manager.create_task("Call supplier", "Ask about March invoice")
    manager.move(task.id, Column.TODO, 0, Column.IN_PROGRESS, 0)

    if manager.notice:
        print(manager.notice)
        manager.dismiss_notice()
"""

from .schema import (
    Author,
    BoardStatistics,
    Column,
    Task,
    TaskComment,
    TaskDraft,
    TaskPriority,
    TaskStatus,
    TaskUpdate,
    decode_grouped
)
from .errors import TaskboardError, BoardError, TaskStoreError
from .board import BoardState
from .fsm import MoveStateMachine
from .store import TaskStore, HttpTaskStore, FileTaskStore
from .manager import BoardManager, MoveResult
from .config import StoreConfig, build_store

__version__ = "1.0.0"
__all__ = [
    "Author",
    "BoardStatistics",
    "Column",
    "Task",
    "TaskComment",
    "TaskDraft",
    "TaskPriority",
    "TaskStatus",
    "TaskUpdate",
    "decode_grouped",
    "TaskboardError",
    "BoardError",
    "TaskStoreError",
    "BoardState",
    "MoveStateMachine",
    "TaskStore",
    "HttpTaskStore",
    "FileTaskStore",
    "BoardManager",
    "MoveResult",
    "StoreConfig",
    "build_store"
]
