"""Pydantic schemas for Task CRUD operations."""

from datetime import date, datetime

from pydantic import BaseModel, Field

from app.models.task import RecurrenceType, TaskPriority, TaskStatus
from app.schemas.label import LabelResponse


class TaskBase(BaseModel):
    """Shared task fields."""

    title: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    priority: TaskPriority = TaskPriority.MEDIUM
    task_type: str = Field("work", max_length=50)
    due_at: datetime | None = None
    start_date: datetime | None = None
    timeline_order: int | None = None
    estimated_minutes: int | None = Field(None, ge=0)
    recurrence_type: RecurrenceType = RecurrenceType.NONE
    recurrence_interval: int = Field(1, ge=1)
    recurrence_end_date: date | None = None
    pomodoro_estimate: int | None = Field(None, ge=0)


class TaskCreate(TaskBase):
    """Schema for creating a new task."""

    status: TaskStatus = TaskStatus.BACKLOG


class SubtaskCreate(BaseModel):
    """Schema for creating a subtask under an existing task."""

    title: str = Field(..., min_length=1, max_length=255)
    priority: TaskPriority = TaskPriority.MEDIUM
    due_at: datetime | None = None
    estimated_minutes: int | None = Field(None, ge=0)


class TaskUpdate(BaseModel):
    """Schema for updating an existing task (all fields optional)."""

    title: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = None
    priority: TaskPriority | None = None
    task_type: str | None = Field(None, max_length=50)
    status: TaskStatus | None = None
    done: bool | None = None  # legacy completion flag
    due_at: datetime | None = None
    start_date: datetime | None = None
    timeline_order: int | None = None
    estimated_minutes: int | None = Field(None, ge=0)
    actual_minutes: int | None = Field(None, ge=0)
    recurrence_type: RecurrenceType | None = None
    recurrence_interval: int | None = Field(None, ge=1)
    recurrence_end_date: date | None = None
    pomodoro_estimate: int | None = Field(None, ge=0)
    pomodoro_completed: int | None = Field(None, ge=0)


class StatusUpdate(BaseModel):
    """Kanban status change."""

    status: str


class CalendarMove(BaseModel):
    """Calendar drag and drop target."""

    due_at: datetime
    start_date: datetime | None = None


class TimelineReorder(BaseModel):
    """Map of task id to its new position in the timeline."""

    task_orders: dict[int, int]


class PomodoroSuggestRequest(BaseModel):
    estimated_minutes: int = Field(..., ge=1)
    priority: TaskPriority = TaskPriority.MEDIUM


class PomodoroSuggestResponse(BaseModel):
    estimated_minutes: int
    priority: TaskPriority
    suggested_pomodoros: int
    estimated_total_time: int


class TaskSummary(BaseModel):
    """Compact task shape used in dependency listings."""

    id: int
    title: str
    status: TaskStatus
    priority: TaskPriority
    due_at: datetime | None = None

    class Config:
        from_attributes = True


class TaskResponse(TaskBase):
    """Schema for task responses."""

    id: int
    user_id: int
    status: TaskStatus
    previous_status: TaskStatus | None = None
    done: bool
    actual_minutes: int
    parent_task_id: int | None = None
    next_occurrence_id: int | None = None
    pomodoro_completed: int
    pomodoro_progress: float
    is_recurring: bool
    is_blocked: bool
    labels: list[LabelResponse] = []
    created_at: datetime
    updated_at: datetime
    completed_at: datetime | None = None

    class Config:
        from_attributes = True


class TaskListResponse(BaseModel):
    """Schema for paginated task list responses."""

    tasks: list[TaskResponse]
    total: int
    skip: int
    limit: int
