"""
TASKBOARD - Exceptions
======================
Raised by BoardState and the task stores. BoardManager catches them and
turns them into a user-facing notice.
"""

from typing import Optional


class TaskboardError(Exception):
    """Base for all taskboard errors"""


class BoardError(TaskboardError):
    """Board invariant violated (unknown task, column or index)"""


class TaskStoreError(TaskboardError):
    """Persistence collaborator failed (transport or application error)"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    def __str__(self) -> str:
        return self.message
