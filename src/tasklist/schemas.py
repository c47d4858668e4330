from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator

from .models import TaskEntity, TaskFilter


def _as_utc(value: datetime) -> datetime:
    """
    Internal helper to normalize timestamps to aware UTC datetimes.
    - Naive datetimes are assumed to already be UTC (as written by Date.toISOString()).
    - Aware datetimes are converted to UTC.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


# PUBLIC_INTERFACE
class TaskRecord(BaseModel):
    """
    Persisted shape of a single task.

    The stored collection is an ordered JSON array of these records, using the
    camelCase key `createdAt` for compatibility with data written by the
    browser version of the app.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "id": 1,
                "text": "Buy milk",
                "completed": False,
                "createdAt": "2025-01-25T10:15:30.123000Z",
            }
        },
    )

    id: int = Field(..., description="Unique identifier of the task")
    text: str = Field(..., description="Trimmed, non-empty task text")
    completed: bool = Field(default=False, description="Completion status flag")
    created_at: datetime = Field(..., alias="createdAt", description="ISO8601 creation timestamp")

    @field_validator("text")
    @classmethod
    def validate_text(cls, v: str) -> str:
        """
        Strip whitespace and reject empty text.
        """
        s = v.strip()
        if not s:
            raise ValueError("text must not be empty")
        return s

    @field_validator("created_at")
    @classmethod
    def normalize_created_at(cls, v: datetime) -> datetime:
        return _as_utc(v)

    @classmethod
    def from_entity(cls, entity: TaskEntity) -> "TaskRecord":
        return cls(
            id=entity["id"],
            text=entity["text"],
            completed=entity["completed"],
            created_at=entity["created_at"],
        )

    def to_entity(self) -> TaskEntity:
        return {
            "id": self.id,
            "text": self.text,
            "completed": self.completed,
            "created_at": self.created_at,
        }


# Validates/serializes the whole stored collection in one pass
TaskRecordList = TypeAdapter(List[TaskRecord])


# PUBLIC_INTERFACE
class TaskText(BaseModel):
    """
    Request body carrying raw task text for create and edit intents.

    Blank text is accepted here on purpose: the store treats it as a silent no-op.
    """

    model_config = ConfigDict(json_schema_extra={"example": {"text": "Buy groceries"}})

    text: str = Field(..., description="Raw task text; surrounding whitespace is trimmed")


# PUBLIC_INTERFACE
class FilterSelect(BaseModel):
    """Request body selecting the view filter."""

    model_config = ConfigDict(json_schema_extra={"example": {"filter": "active"}})

    filter: TaskFilter = Field(..., description="One of: all, active, completed")


# PUBLIC_INTERFACE
class TaskOut(BaseModel):
    """
    Schema returned by the API for a task.
    """

    id: int = Field(..., description="Unique identifier of the task")
    text: str = Field(..., description="Task text")
    completed: bool = Field(..., description="Completion status flag")
    created_at: datetime = Field(..., description="Creation timestamp")
    editing: bool = Field(default=False, description="Whether the view is editing this task")


# PUBLIC_INTERFACE
class StatsOut(BaseModel):
    """Task counts derived from the whole collection."""

    total: int = Field(..., ge=0)
    active: int = Field(..., ge=0)
    completed: int = Field(..., ge=0)


# PUBLIC_INTERFACE
class SnapshotOut(BaseModel):
    """
    Everything a client needs to redraw the task list after an intent.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "filter": "all",
                "tasks": [
                    {
                        "id": 1,
                        "text": "Buy milk",
                        "completed": False,
                        "created_at": "2025-01-25T10:15:30.123000Z",
                        "editing": False,
                    }
                ],
                "stats": {"total": 1, "active": 1, "completed": 0},
                "editing_id": None,
                "summary": "1 task (active: 1, completed: 0)",
                "empty_message": None,
                "show_clear_completed": False,
            }
        }
    )

    filter: TaskFilter
    tasks: List[TaskOut]
    stats: StatsOut
    editing_id: Optional[int] = None
    summary: str
    empty_message: Optional[str] = None
    show_clear_completed: bool
