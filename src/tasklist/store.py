from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import List, Optional

from .models import TaskEntity, TaskFilter, TaskStats
from .persistence import PersistencePort

logger = logging.getLogger(__name__)


# PUBLIC_INTERFACE
class TaskStore:
    """
    Owns the authoritative, insertion-ordered task collection.

    Every mutation writes the full collection through the persistence port
    before returning. Unknown ids and blank text are silent no-ops; the only
    raised failure is PersistenceError from a failed write, after which the
    in-memory collection still reflects the mutation.

    Not safe for concurrent mutation from several threads.
    """

    def __init__(self, persistence: PersistencePort) -> None:
        self._persistence = persistence
        self._tasks: List[TaskEntity] = persistence.load()
        self._next_id = max((t["id"] for t in self._tasks), default=0) + 1
        logger.info("Task store ready with %d task(s)", len(self._tasks))

    def _now(self) -> datetime:
        return datetime.now(timezone.utc)

    def _allocate_id(self) -> int:
        i = self._next_id
        self._next_id += 1
        return i

    def _find(self, task_id: int) -> Optional[TaskEntity]:
        for task in self._tasks:
            if task["id"] == task_id:
                return task
        return None

    def _save(self) -> None:
        self._persistence.save(self._tasks)

    def create(self, text: str) -> Optional[TaskEntity]:
        """Append a new active task; blank text is ignored and returns None."""
        s = text.strip()
        if not s:
            logger.debug("Ignoring create with blank text")
            return None

        entity: TaskEntity = {
            "id": self._allocate_id(),
            "text": s,
            "completed": False,
            "created_at": self._now(),
        }
        self._tasks.append(entity)
        logger.debug("Created task %s", entity["id"])
        self._save()
        return entity.copy()

    def get(self, task_id: int) -> Optional[TaskEntity]:
        """Return a copy of the task with `task_id`, or None if not found."""
        task = self._find(task_id)
        return None if task is None else task.copy()

    def delete(self, task_id: int) -> bool:
        """Remove the task if present. Saves either way; returns True if something was removed."""
        before = len(self._tasks)
        self._tasks = [t for t in self._tasks if t["id"] != task_id]
        removed = len(self._tasks) != before
        if removed:
            logger.debug("Deleted task %s", task_id)
        else:
            logger.debug("Delete of unknown task %s", task_id)
        self._save()
        return removed

    def toggle_complete(self, task_id: int) -> Optional[TaskEntity]:
        task = self._find(task_id)
        if task is None:
            logger.debug("Toggle of unknown task %s", task_id)
            return None
        task["completed"] = not task["completed"]
        logger.debug("Task %s completed=%s", task_id, task["completed"])
        self._save()
        return task.copy()

    def edit(self, task_id: int, new_text: str) -> Optional[TaskEntity]:
        """
        Replace the text of a task. Blank text or an unknown id is a no-op.
        Saves even when the trimmed text equals the current text.
        """
        s = new_text.strip()
        task = self._find(task_id)
        if task is None or not s:
            logger.debug("Ignoring edit of task %s", task_id)
            return None
        task["text"] = s
        logger.debug("Edited task %s", task_id)
        self._save()
        return task.copy()

    def clear_completed(self) -> int:
        """Remove every completed task, keeping the order of the rest. Returns the number removed."""
        remaining = [t for t in self._tasks if not t["completed"]]
        removed = len(self._tasks) - len(remaining)
        self._tasks = remaining
        logger.debug("Cleared %d completed task(s)", removed)
        self._save()
        return removed

    def query(self, task_filter: TaskFilter = TaskFilter.ALL) -> List[TaskEntity]:
        """Return copies of the tasks matching `task_filter`, in collection order."""
        task_filter = TaskFilter(task_filter)
        return [t.copy() for t in self._tasks if task_filter.matches(t)]

    def stats(self) -> TaskStats:
        total = len(self._tasks)
        completed = sum(1 for t in self._tasks if t["completed"])
        return {"total": total, "active": total - completed, "completed": completed}
