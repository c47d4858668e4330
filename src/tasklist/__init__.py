"""
Task list package.

The core is TaskStore (ordered collection + write-through persistence) and
TaskView (filter and edit state over a store). The FastAPI app lives in
`tasklist.main` and is not imported here to avoid configuring logging on import.
"""

from .errors import PersistenceError
from .models import TaskEntity, TaskFilter, TaskStats
from .persistence import (
    InMemoryPersistence,
    JsonFilePersistence,
    PersistencePort,
    SQLitePersistence,
    get_persistence,
)
from .store import TaskStore
from .view import TaskView, ViewMode, ViewSnapshot

__all__ = [
    "InMemoryPersistence",
    "JsonFilePersistence",
    "PersistenceError",
    "PersistencePort",
    "SQLitePersistence",
    "TaskEntity",
    "TaskFilter",
    "TaskStats",
    "TaskStore",
    "TaskView",
    "ViewMode",
    "ViewSnapshot",
    "get_persistence",
]
