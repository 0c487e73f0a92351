"""API endpoints for tasks, their status and their views."""

from datetime import datetime, time, timedelta

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from app.api.deps import get_current_user_id
from app.core.clock import Clock, get_clock
from app.db.base import get_db
from app.models.task import Task
from app.models.task_log import TaskLog
from app.schemas.log import CommentCreate, TaskLogResponse
from app.schemas.task import (
    CalendarMove,
    PomodoroSuggestRequest,
    PomodoroSuggestResponse,
    StatusUpdate,
    SubtaskCreate,
    TaskCreate,
    TaskListResponse,
    TaskResponse,
    TaskUpdate,
    TimelineReorder,
)
from app.services import pomodoro, status as status_machine, tasks as task_service

router = APIRouter()


@router.post("/tasks", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
def create_task(
    task_in: TaskCreate,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    user_id: int = Depends(get_current_user_id),
) -> Task:
    """Create a new task."""
    return task_service.create_task(db, task_in.model_dump(), clock=clock, user_id=user_id)


@router.get("/tasks", response_model=TaskListResponse)
def list_tasks(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    status_filter: str | None = Query(None, alias="status"),
    priority_filter: str | None = Query(None, alias="priority"),
    task_type: str | None = None,
    search: str | None = None,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
) -> TaskListResponse:
    """List tasks with optional filters."""
    tasks, total = task_service.list_tasks(
        db,
        user_id=user_id,
        status=status_filter,
        priority=priority_filter,
        task_type=task_type,
        search=search,
        start_date=start_date,
        end_date=end_date,
        skip=skip,
        limit=limit,
    )
    return TaskListResponse(tasks=tasks, total=total, skip=skip, limit=limit)


@router.get("/tasks/today", response_model=list[TaskResponse])
def today(
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    user_id: int = Depends(get_current_user_id),
) -> list[Task]:
    """Tasks due today."""
    return task_service.today_tasks(db, user_id=user_id, clock=clock)


@router.get("/tasks/kanban", response_model=dict[str, list[TaskResponse]])
def kanban(
    db: Session = Depends(get_db), user_id: int = Depends(get_current_user_id)
) -> dict[str, list[Task]]:
    """Tasks grouped by kanban column."""
    return task_service.kanban_board(db, user_id=user_id)


@router.get("/tasks/calendar", response_model=list[TaskResponse])
def calendar(
    start_date: datetime | None = None,
    end_date: datetime | None = None,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    user_id: int = Depends(get_current_user_id),
) -> list[Task]:
    """Tasks due in a range; defaults to the current month."""
    now = clock.now()
    start = start_date or datetime.combine(now.date().replace(day=1), time.min)
    end = end_date or datetime.combine(
        (start.replace(day=28) + timedelta(days=4)).replace(day=1), time.min
    ) - timedelta(microseconds=1)
    return task_service.calendar_tasks(db, user_id=user_id, start=start, end=end)


@router.get("/tasks/timeline", response_model=dict[str, list[TaskResponse]])
def timeline(
    start_date: datetime | None = None,
    end_date: datetime | None = None,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    user_id: int = Depends(get_current_user_id),
) -> dict[str, list[Task]]:
    """Tasks grouped by day; defaults to this week plus the next two."""
    today_start = datetime.combine(clock.now().date(), time.min)
    start = start_date or today_start - timedelta(days=today_start.weekday())
    end = end_date or start + timedelta(weeks=3) - timedelta(microseconds=1)
    return task_service.timeline(db, user_id=user_id, start=start, end=end)


@router.post("/tasks/timeline/reorder")
def reorder_timeline(
    payload: TimelineReorder,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    user_id: int = Depends(get_current_user_id),
) -> dict:
    """Persist drag-and-drop timeline order."""
    updated = task_service.reorder_timeline(db, payload.task_orders, user_id=user_id, clock=clock)
    return {"message": "Timeline order updated successfully", "updated": len(updated)}


@router.get("/tasks/stats/summary")
def get_task_stats(
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    user_id: int = Depends(get_current_user_id),
) -> dict:
    """Get summary statistics for tasks."""
    return task_service.task_stats(db, user_id=user_id, clock=clock)


@router.post("/tasks/pomodoro/suggest", response_model=PomodoroSuggestResponse)
def suggest_pomodoro(payload: PomodoroSuggestRequest) -> PomodoroSuggestResponse:
    """Suggest a pomodoro count for an effort estimate."""
    suggested = pomodoro.suggest_pomodoro_count(payload.estimated_minutes, payload.priority.value)
    return PomodoroSuggestResponse(
        estimated_minutes=payload.estimated_minutes,
        priority=payload.priority,
        suggested_pomodoros=suggested,
        estimated_total_time=suggested * pomodoro.POMODORO_MINUTES,
    )


@router.get("/tasks/{task_id}", response_model=TaskResponse)
def get_task(
    task_id: int,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
) -> Task:
    """Get a specific task by ID."""
    return task_service.get_task(db, task_id, user_id=user_id)


@router.patch("/tasks/{task_id}", response_model=TaskResponse)
def update_task(
    task_id: int,
    task_update: TaskUpdate,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    user_id: int = Depends(get_current_user_id),
) -> Task:
    """Update a task (partial update)."""
    return task_service.update_task(
        db, task_id, task_update.model_dump(exclude_unset=True), clock=clock, user_id=user_id
    )


@router.delete("/tasks/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_task(
    task_id: int,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
) -> Response:
    """Delete a task together with its subtasks, edges and log."""
    task_service.delete_task(db, task_id, user_id=user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.patch("/tasks/{task_id}/status", response_model=TaskResponse)
def update_status(
    task_id: int,
    payload: StatusUpdate,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    user_id: int = Depends(get_current_user_id),
) -> Task:
    """Move a task to another kanban column."""
    return status_machine.set_status(db, task_id, payload.status, clock=clock, user_id=user_id)


@router.patch("/tasks/{task_id}/toggle", response_model=TaskResponse)
def toggle_task(
    task_id: int,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    user_id: int = Depends(get_current_user_id),
) -> Task:
    """Toggle completion."""
    return status_machine.toggle(db, task_id, clock=clock, user_id=user_id)


@router.post("/tasks/{task_id}/pomodoro/complete", response_model=TaskResponse)
def complete_pomodoro(
    task_id: int,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    user_id: int = Depends(get_current_user_id),
) -> Task:
    """Record one finished pomodoro session."""
    return pomodoro.complete_pomodoro_session(db, task_id, clock=clock, user_id=user_id)


@router.patch("/tasks/{task_id}/calendar-move", response_model=TaskResponse)
def calendar_move(
    task_id: int,
    payload: CalendarMove,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    user_id: int = Depends(get_current_user_id),
) -> Task:
    """Reschedule a task from the calendar."""
    return task_service.move_on_calendar(
        db, task_id, payload.due_at, payload.start_date, clock=clock, user_id=user_id
    )


@router.post(
    "/tasks/{task_id}/subtasks",
    response_model=TaskResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_subtask(
    task_id: int,
    payload: SubtaskCreate,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    user_id: int = Depends(get_current_user_id),
) -> Task:
    """Create a subtask under a task."""
    return task_service.create_subtask(db, task_id, payload.model_dump(), clock=clock, user_id=user_id)


@router.get("/tasks/{task_id}/logs", response_model=list[TaskLogResponse])
def get_task_logs(
    task_id: int,
    event_type: str | None = None,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
) -> list[TaskLog]:
    """Activity history of a task, newest first."""
    return task_service.task_logs(db, task_id, event_type, user_id=user_id)


@router.post(
    "/tasks/{task_id}/comments",
    response_model=TaskLogResponse,
    status_code=status.HTTP_201_CREATED,
)
def add_comment(
    task_id: int,
    payload: CommentCreate,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    user_id: int = Depends(get_current_user_id),
) -> TaskLog:
    """Comment on a task."""
    return task_service.add_comment(db, task_id, payload.comment, clock=clock, user_id=user_id)
