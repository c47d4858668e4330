from __future__ import annotations

from typing import Dict, Optional

from .models import TaskFilter, TaskStats

EMPTY_MESSAGES: Dict[TaskFilter, str] = {
    TaskFilter.ALL: "No tasks yet. Add a new task above.",
    TaskFilter.ACTIVE: "No active tasks. Add a new task to get going.",
    TaskFilter.COMPLETED: "No completed tasks yet. Try finishing one.",
}


# PUBLIC_INTERFACE
def summary_text(stats: TaskStats) -> str:
    """
    Build the task count line shown under the list.

    Args:
        stats: Counts for the whole collection.

    Returns:
        "N tasks", followed by the active/completed breakdown when N > 0.
    """
    total = int(stats["total"])
    text = f"{total} task" if total == 1 else f"{total} tasks"
    if total > 0:
        text += f" (active: {stats['active']}, completed: {stats['completed']})"
    return text


# PUBLIC_INTERFACE
def empty_message(task_filter: TaskFilter, visible_count: int) -> Optional[str]:
    """Return the empty-state message for `task_filter`, or None when tasks are visible."""
    if visible_count > 0:
        return None
    return EMPTY_MESSAGES[TaskFilter(task_filter)]
