from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import TypedDict


# PUBLIC_INTERFACE
class TaskEntity(TypedDict):
    """
    A single task held by the TaskStore.

    Fields:
    - id: Unique integer identifier among stored tasks, assigned by the store
    - text: Non-empty text with surrounding whitespace removed
    - completed: Boolean completion flag (False at creation)
    - created_at: Timezone-aware UTC creation timestamp, never mutated
    """

    id: int
    text: str
    completed: bool
    created_at: datetime


# PUBLIC_INTERFACE
class TaskStats(TypedDict):
    """Counts derived from the current collection."""

    total: int
    active: int
    completed: int


# PUBLIC_INTERFACE
class TaskFilter(str, Enum):
    """View-selection mode deciding which subset of tasks is displayed."""

    ALL = "all"
    ACTIVE = "active"
    COMPLETED = "completed"

    def matches(self, task: TaskEntity) -> bool:
        if self is TaskFilter.ACTIVE:
            return not task["completed"]
        if self is TaskFilter.COMPLETED:
            return task["completed"]
        return True
