"""
View layer: turns user intents into TaskStore calls and redraws from a fresh
query + stats snapshot after each one.

The view owns the current filter and the per-task edit mode; neither is
persisted and the store knows nothing about them.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Union

from .models import TaskEntity, TaskFilter, TaskStats
from .store import TaskStore
from .utils import empty_message, summary_text

logger = logging.getLogger(__name__)


class ViewMode(str, Enum):
    VIEWING = "viewing"
    EDITING = "editing"


@dataclass(frozen=True)
class ViewSnapshot:
    """Everything needed to draw the list once; rebuilt in full after every intent."""

    filter: TaskFilter
    tasks: List[TaskEntity]
    stats: TaskStats
    editing_id: Optional[int]
    summary: str
    empty_message: Optional[str]
    show_clear_completed: bool


# PUBLIC_INTERFACE
class TaskView:
    """
    Presentation state over one TaskStore.

    Each intent method calls the store, then returns `render()`. A
    PersistenceError from the store propagates to the caller unchanged; the
    view state (filter, edit mode) is updated as it would be on success.
    """

    def __init__(self, store: TaskStore, task_filter: Union[TaskFilter, str] = TaskFilter.ALL) -> None:
        self.store = store
        self.current_filter = TaskFilter(task_filter)
        self._editing_id: Optional[int] = None

    @property
    def editing_id(self) -> Optional[int]:
        return self._editing_id

    def mode(self, task_id: int) -> ViewMode:
        return ViewMode.EDITING if task_id == self._editing_id else ViewMode.VIEWING

    def render(self) -> ViewSnapshot:
        tasks = self.store.query(self.current_filter)
        stats = self.store.stats()
        return ViewSnapshot(
            filter=self.current_filter,
            tasks=tasks,
            stats=stats,
            editing_id=self._editing_id,
            summary=summary_text(stats),
            empty_message=empty_message(self.current_filter, len(tasks)),
            show_clear_completed=stats["completed"] > 0,
        )

    def add(self, text: str) -> ViewSnapshot:
        self.store.create(text)
        return self.render()

    def toggle(self, task_id: int) -> ViewSnapshot:
        self.store.toggle_complete(task_id)
        return self.render()

    def remove(self, task_id: int) -> ViewSnapshot:
        if self._editing_id == task_id:
            self._editing_id = None
        self.store.delete(task_id)
        return self.render()

    def clear_completed(self) -> ViewSnapshot:
        try:
            self.store.clear_completed()
        finally:
            if self._editing_id is not None and self.store.get(self._editing_id) is None:
                self._editing_id = None
        return self.render()

    def select_filter(self, task_filter: Union[TaskFilter, str]) -> ViewSnapshot:
        self.current_filter = TaskFilter(task_filter)
        logger.debug("Filter set to %s", self.current_filter.value)
        return self.render()

    def start_editing(self, task_id: int) -> ViewSnapshot:
        """Switch `task_id` into edit mode; any other in-progress edit is dropped."""
        if self.store.get(task_id) is not None:
            self._editing_id = task_id
        return self.render()

    def commit_edit(self, task_id: int, text: str) -> ViewSnapshot:
        """
        Finish an edit (enter / blur). The store is only called when the trimmed
        text is non-empty and differs from the current text.
        """
        self._editing_id = None
        current = self.store.get(task_id)
        new_text = text.strip()
        if current is not None and new_text and new_text != current["text"]:
            self.store.edit(task_id, new_text)
        else:
            logger.debug("Edit of task %s left unchanged", task_id)
        return self.render()

    def cancel_edit(self) -> ViewSnapshot:
        self._editing_id = None
        return self.render()
