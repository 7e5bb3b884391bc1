"""
TASKBOARD - Board State
=======================
In-memory projection of a company's tasks into three ordered columns.

Each column keeps an ordered sequence of task ids plus the matching
sequence of task snapshots. A task's position is its index in that
sequence; there is no separate rank field. The board is never persisted,
it is rebuilt from the store with load().
"""

import logging
from typing import Optional, List, Dict, Tuple, Iterable, Mapping, Any

from .errors import BoardError
from .schema import Column, Task, TaskStatus

logger = logging.getLogger("taskboard.board")

Location = Tuple[Column, int]


class BoardState:
    """Three-column kanban projection.

    Invariants:
    - every task id on the board appears in exactly one column
    - a snapshot's status always matches the column holding it
    """

    def __init__(self):
        self._ids: Dict[Column, List[int]] = {column: [] for column in Column}
        self._tasks: Dict[Column, List[Task]] = {column: [] for column in Column}

    # ========================================
    # LOADING
    # ========================================

    def load(self, grouped: Optional[Mapping[Any, Optional[Iterable[Task]]]]) -> None:
        """Replace every column with freshly loaded tasks.

        Keys may be Column members or status/column names. Missing, None or
        empty groups produce empty columns; unknown keys are skipped.
        """
        by_column: Dict[Column, Iterable[Task]] = {}
        for key, group in (grouped or {}).items():
            column = Column.parse(key)
            if column is None:
                logger.warning(f"Skipping unknown column on load: {key!r}")
                continue
            by_column[column] = group or []

        ids: Dict[Column, List[int]] = {column: [] for column in Column}
        tasks: Dict[Column, List[Task]] = {column: [] for column in Column}
        seen = set()

        for column in Column:
            for task in by_column.get(column, []):
                if task.id in seen:
                    logger.warning(f"Task {task.id} listed twice, keeping first occurrence")
                    continue
                seen.add(task.id)
                task.status = column.status
                ids[column].append(task.id)
                tasks[column].append(task)

        self._ids = ids
        self._tasks = tasks
        logger.debug(f"Board loaded: {self.summary()}")

    # ========================================
    # QUERIES
    # ========================================

    def locate(self, task_id: int) -> Optional[Location]:
        """Return (column, index) holding the task, or None"""
        for column in Column:
            ids = self._ids[column]
            if task_id in ids:
                return column, ids.index(task_id)
        return None

    def get(self, task_id: int) -> Optional[Task]:
        location = self.locate(task_id)
        if location is None:
            return None
        column, index = location
        return self._tasks[column][index]

    def task_ids(self, column: Any) -> List[int]:
        return list(self._ids[self._column(column)])

    def tasks(self, column: Any) -> List[Task]:
        return list(self._tasks[self._column(column)])

    def all_tasks(self) -> List[Task]:
        return [task for column in Column for task in self._tasks[column]]

    def layout(self) -> Dict[Column, List[int]]:
        """Copy of every column's id sequence"""
        return {column: list(ids) for column, ids in self._ids.items()}

    def summary(self) -> Dict[str, int]:
        counts = {column.status.value: len(self._ids[column]) for column in Column}
        counts["total"] = sum(counts.values())
        return counts

    def __contains__(self, task_id: object) -> bool:
        return any(task_id in ids for ids in self._ids.values())

    def __len__(self) -> int:
        return sum(len(ids) for ids in self._ids.values())

    # ========================================
    # MUTATIONS
    # ========================================

    def insert(self, task: Task, column: Any, index: Optional[int] = None) -> int:
        """Insert a task at index (end of column when None). Returns the index used."""
        column = self._column(column)
        if task.id in self:
            raise BoardError(f"Task {task.id} is already on the board")

        ids = self._ids[column]
        if index is None or index > len(ids):
            index = len(ids)
        index = max(0, index)

        task.status = column.status
        ids.insert(index, task.id)
        self._tasks[column].insert(index, task)
        return index

    def remove(self, task_id: int) -> Optional[Tuple[Column, int, Task]]:
        """Remove a task wherever it is. Returns (column, index, task) or None."""
        location = self.locate(task_id)
        if location is None:
            return None
        column, index = location
        self._ids[column].pop(index)
        task = self._tasks[column].pop(index)
        return column, index, task

    def replace(self, task: Task) -> bool:
        """Swap in a new snapshot for a task, keeping its slot and column status"""
        location = self.locate(task.id)
        if location is None:
            return False
        column, index = location
        task.status = column.status
        self._tasks[column][index] = task
        return True

    def move_within_or_between(
        self,
        task_id: int,
        from_column: Any,
        from_index: int,
        to_column: Any,
        to_index: int
    ) -> Task:
        """Splice a task out of one position and into another.

        The source id is removed first, then inserted at to_index (clamped)
        in the destination. Equal columns make this a pure reorder.
        """
        source = self._column(from_column)
        dest = self._column(to_column)

        source_ids = self._ids[source]
        if not 0 <= from_index < len(source_ids) or source_ids[from_index] != task_id:
            raise BoardError(f"Task {task_id} is not at {source.value}[{from_index}]")

        source_ids.pop(from_index)
        task = self._tasks[source].pop(from_index)

        dest_ids = self._ids[dest]
        to_index = max(0, min(to_index, len(dest_ids)))
        dest_ids.insert(to_index, task_id)
        self._tasks[dest].insert(to_index, task)

        if source is not dest:
            task.status = dest.status
        return task

    # ========================================
    # HELPERS
    # ========================================

    def _column(self, value: Any) -> Column:
        column = Column.parse(value)
        if column is None:
            raise BoardError(f"Unknown column: {value!r}")
        return column

    def __str__(self) -> str:
        counts = self.summary()
        return (
            f"Todo: {counts[TaskStatus.TODO.value]} tasks, "
            f"In progress: {counts[TaskStatus.IN_PROGRESS.value]} tasks, "
            f"Done: {counts[TaskStatus.DONE.value]} tasks"
        )
