"""
TASKBOARD - Board Manager
=========================
Single owner of a company's board. Every change goes through its commands:
reload, move, create_task, update_task, delete_task.

Moves are optimistic: the board changes first, the store is told after.
A failed status update rolls the task back and leaves a notice for the
user. Store failures never escape a command.
"""

import logging
from enum import Enum
from typing import Optional, List, Any

from pydantic import ValidationError

from .board import BoardState
from .errors import BoardError, TaskStoreError
from .fsm import MoveStateMachine
from .schema import (
    BoardStatistics, Column, Task, TaskComment, TaskDraft, TaskPriority,
    TaskStatus, TaskUpdate
)
from .store import TaskStore

logger = logging.getLogger("taskboard")


class MoveResult(str, Enum):
    """Outcome of BoardManager.move"""
    MOVED = "moved"            # status changed and persisted
    REORDERED = "reordered"    # same column, local only
    NOOP = "noop"              # dropped where it started
    INVALID = "invalid"        # unknown column or stale index
    BUSY = "busy"              # another move in flight
    FAILED = "failed"          # store rejected the status change


class BoardManager:
    """
    Board owner for one company.

    full_rollback controls what a failed status update undoes:
    True puts the task back in its original column and slot,
    False only restores the status field (column membership stays).
    """

    def __init__(self, store: TaskStore, company_id: int, full_rollback: bool = True):
        self.store = store
        self.company_id = company_id
        self.full_rollback = full_rollback
        self.board = BoardState()
        self.move_state = MoveStateMachine()
        self.notice: Optional[str] = None

    # ========================================
    # NOTICES
    # ========================================

    def dismiss_notice(self) -> None:
        self.notice = None

    def _report(self, message: str, error: Optional[Exception] = None) -> None:
        """Record a user-facing notice; the operation is abandoned, not retried"""
        self.notice = f"{message}: {error}" if error else message
        if isinstance(error, TaskStoreError):
            logger.error(f"❌ {self.notice}")
        else:
            logger.warning(f"⚠️ {self.notice}")

    # ========================================
    # LOADING
    # ========================================

    def reload(self) -> bool:
        """Rebuild the board from the store"""
        try:
            grouped = self.store.list_tasks(self.company_id)
        except TaskStoreError as e:
            self._report("Failed to load tasks", e)
            return False

        self.board.load(grouped)
        self.notice = None
        logger.info(f"📂 Loaded board for company {self.company_id}: {self.board.summary()}")
        return True

    # ========================================
    # MOVES
    # ========================================

    def move(
        self,
        task_id: int,
        from_column: Any,
        from_index: int,
        to_column: Any,
        to_index: int
    ) -> MoveResult:
        """Drop a task at (to_column, to_index).

        Cross-column moves change the task's status and are persisted;
        reorders inside a column stay local.
        """
        source = Column.parse(from_column)
        dest = Column.parse(to_column)

        if (source or from_column) == (dest or to_column) and from_index == to_index:
            return MoveResult.NOOP

        if source is None or dest is None:
            logger.warning(f"Rejected move of task {task_id}: unknown column {from_column!r} -> {to_column!r}")
            return MoveResult.INVALID

        if self.move_state.busy:
            logger.warning(f"Rejected move of task {task_id}: another move is in flight")
            return MoveResult.BUSY

        if self.board.locate(task_id) != (source, from_index):
            logger.warning(f"Rejected move of task {task_id}: not at {source.value}[{from_index}]")
            return MoveResult.INVALID

        self.move_state.begin_move()
        try:
            task = self.board.move_within_or_between(task_id, source, from_index, dest, to_index)

            if source is dest:
                logger.debug(f"Reordered task {task_id} within {source.value} to {to_index}")
                return MoveResult.REORDERED

            try:
                saved = self.store.update_task(task_id, TaskUpdate(status=dest.status))
            except TaskStoreError as e:
                self._rollback(task, source, from_index)
                self._report("Failed to update task status", e)
                return MoveResult.FAILED

            if saved.id == task_id:
                self.board.replace(saved)
            logger.info(f"➡️ Moved task {task_id}: {source.status.value} -> {dest.status.value}")
            return MoveResult.MOVED
        finally:
            self.move_state.end_move()

    def _rollback(self, task: Task, source: Column, from_index: int) -> None:
        if not self.full_rollback:
            (self.board.get(task.id) or task).status = source.status
            return

        location = self.board.locate(task.id)
        if location is None:
            # removed while the update was in flight
            task.status = source.status
            return
        column, index = location
        self.board.move_within_or_between(task.id, column, index, source, from_index)

    # ========================================
    # TASK OPERATIONS
    # ========================================

    def create_task(self, title: str, content: str = "", **fields: Any) -> Optional[Task]:
        """Create a todo task and append it to the todo column"""
        try:
            draft = TaskDraft(title=title, content=content, company_id=self.company_id, **fields)
        except ValidationError as e:
            self._report(f"Invalid task: {_first_error(e)}")
            return None

        try:
            task = self.store.create_task(draft)
        except TaskStoreError as e:
            self._report("Failed to create task", e)
            return None

        self.board.insert(task, task.column)
        logger.info(f"📝 Added task {task.id} to {task.column.value}")
        return task

    def update_task(self, task_id: int, **changes: Any) -> Optional[Task]:
        """Edit a task's fields; the snapshot keeps its slot unless the status changed"""
        if task_id not in self.board:
            self._report(f"Task not found: {task_id}")
            return None

        if "status" in changes and self.move_state.busy:
            # a status change relocates the task under an in-flight move
            self._report(f"Cannot change the status of task {task_id} while a move is in flight")
            return None

        try:
            update = TaskUpdate(**changes)
        except ValidationError as e:
            self._report(f"Invalid update: {_first_error(e)}")
            return None

        try:
            saved = self.store.update_task(task_id, update)
        except TaskStoreError as e:
            self._report("Failed to update task", e)
            return None

        location = self.board.locate(task_id)
        # an in-flight move owns column membership
        if location is not None and (saved.column is location[0] or self.move_state.busy):
            self.board.replace(saved)
        else:
            self.board.remove(task_id)
            self.board.insert(saved, saved.column)
        logger.info(f"✏️ Updated task {task_id}")
        return saved

    def delete_task(self, task_id: int) -> bool:
        try:
            self.store.delete_task(task_id)
        except TaskStoreError as e:
            self._report("Failed to delete task", e)
            return False

        self.board.remove(task_id)
        logger.info(f"🗑️ Removed task {task_id}")
        return True

    # ========================================
    # COMMENTS
    # ========================================

    def comments(self, task_id: int) -> List[TaskComment]:
        try:
            return self.store.list_comments(task_id)
        except TaskStoreError as e:
            self._report("Failed to load comments", e)
            return []

    def add_comment(self, task_id: int, content: str) -> Optional[TaskComment]:
        content = (content or "").strip()
        if not content:
            self._report("Comment content is required")
            return None
        try:
            return self.store.add_comment(task_id, content)
        except TaskStoreError as e:
            self._report("Failed to add comment", e)
            return None

    # ========================================
    # REPORTING
    # ========================================

    def statistics(self) -> BoardStatistics:
        tasks = self.board.all_tasks()
        by_status = {status.value: 0 for status in TaskStatus}
        by_priority = {priority.value: 0 for priority in TaskPriority}
        for task in tasks:
            by_status[task.status.value] += 1
            by_priority[task.priority.value] += 1

        done = by_status[TaskStatus.DONE.value]
        rate = round(done / len(tasks) * 100, 1) if tasks else 0.0
        return BoardStatistics(
            total=len(tasks),
            by_status=by_status,
            by_priority=by_priority,
            completion_rate=rate,
        )

    def find(self, task_id: int) -> Task:
        """Snapshot for a task id; raises BoardError when it is not on the board"""
        task = self.board.get(task_id)
        if task is None:
            raise BoardError(f"Task not found: {task_id}")
        return task


def _first_error(error: ValidationError) -> str:
    first = error.errors()[0]
    field = ".".join(str(part) for part in first.get("loc", ()))
    return f"{field} {first.get('msg', 'is invalid')}".strip()
