from __future__ import annotations

from fastapi import APIRouter, Depends, Request, status

from ..schemas import FilterSelect, SnapshotOut, StatsOut, TaskOut, TaskText
from ..view import TaskView, ViewSnapshot

router = APIRouter(
    prefix="/api/v1/tasks",
    tags=["tasks"],
)


def get_view(request: Request) -> TaskView:
    """
    Dependency returning the TaskView bound to this app instance.
    """
    return request.app.state.view


def _snapshot_out(snapshot: ViewSnapshot) -> SnapshotOut:
    return SnapshotOut(
        filter=snapshot.filter,
        tasks=[
            TaskOut(**task, editing=task["id"] == snapshot.editing_id)  # type: ignore[arg-type]
            for task in snapshot.tasks
        ],
        stats=StatsOut(**snapshot.stats),
        editing_id=snapshot.editing_id,
        summary=snapshot.summary,
        empty_message=snapshot.empty_message,
        show_clear_completed=snapshot.show_clear_completed,
    )


# PUBLIC_INTERFACE
@router.get(
    "/",
    response_model=SnapshotOut,
    summary="Current View",
    description="Return the tasks visible under the current filter together with counts.",
)
def read_view(view: TaskView = Depends(get_view)) -> SnapshotOut:
    return _snapshot_out(view.render())


# PUBLIC_INTERFACE
@router.post(
    "/",
    response_model=SnapshotOut,
    status_code=status.HTTP_201_CREATED,
    summary="Add Task",
    description=(
        "Append a new task. Blank text (after trimming) is silently ignored and the "
        "unchanged view is returned."
    ),
    responses={503: {"description": "Task could not be saved"}},
)
def add_task(payload: TaskText, view: TaskView = Depends(get_view)) -> SnapshotOut:
    return _snapshot_out(view.add(payload.text))


# PUBLIC_INTERFACE
@router.get(
    "/stats",
    response_model=StatsOut,
    summary="Task Counts",
    description="Total, active and completed counts across the whole collection.",
)
def read_stats(view: TaskView = Depends(get_view)) -> StatsOut:
    return StatsOut(**view.store.stats())


# PUBLIC_INTERFACE
@router.put(
    "/filter",
    response_model=SnapshotOut,
    summary="Select Filter",
    description="Change which tasks are displayed: all, active or completed. Not persisted.",
)
def select_filter(payload: FilterSelect, view: TaskView = Depends(get_view)) -> SnapshotOut:
    return _snapshot_out(view.select_filter(payload.filter))


# PUBLIC_INTERFACE
@router.post(
    "/clear-completed",
    response_model=SnapshotOut,
    summary="Clear Completed",
    description="Remove every completed task.",
    responses={503: {"description": "Task list could not be saved"}},
)
def clear_completed(view: TaskView = Depends(get_view)) -> SnapshotOut:
    return _snapshot_out(view.clear_completed())


# PUBLIC_INTERFACE
@router.delete(
    "/editing",
    response_model=SnapshotOut,
    summary="Cancel Edit",
    description="Leave edit mode without saving.",
)
def cancel_edit(view: TaskView = Depends(get_view)) -> SnapshotOut:
    return _snapshot_out(view.cancel_edit())


# PUBLIC_INTERFACE
@router.post(
    "/{task_id}/toggle",
    response_model=SnapshotOut,
    summary="Toggle Task",
    description="Flip the completion flag of a task. Unknown ids are ignored.",
    responses={503: {"description": "Task could not be saved"}},
)
def toggle_task(task_id: int, view: TaskView = Depends(get_view)) -> SnapshotOut:
    return _snapshot_out(view.toggle(task_id))


# PUBLIC_INTERFACE
@router.post(
    "/{task_id}/editing",
    response_model=SnapshotOut,
    summary="Start Edit",
    description="Put a task into edit mode. Unknown ids are ignored.",
)
def start_editing(task_id: int, view: TaskView = Depends(get_view)) -> SnapshotOut:
    return _snapshot_out(view.start_editing(task_id))


# PUBLIC_INTERFACE
@router.patch(
    "/{task_id}",
    response_model=SnapshotOut,
    summary="Commit Edit",
    description=(
        "Commit new text for a task and leave edit mode. Blank or unchanged text and "
        "unknown ids leave the task as it was."
    ),
    responses={503: {"description": "Task could not be saved"}},
)
def commit_edit(task_id: int, payload: TaskText, view: TaskView = Depends(get_view)) -> SnapshotOut:
    return _snapshot_out(view.commit_edit(task_id, payload.text))


# PUBLIC_INTERFACE
@router.delete(
    "/{task_id}",
    response_model=SnapshotOut,
    summary="Delete Task",
    description="Delete a task. Deleting an unknown id is not an error.",
    responses={503: {"description": "Task list could not be saved"}},
)
def delete_task(task_id: int, view: TaskView = Depends(get_view)) -> SnapshotOut:
    return _snapshot_out(view.remove(task_id))
