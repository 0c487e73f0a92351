"""Pydantic schemas for request/response validation."""

from app.schemas.dependency import (
    BlockedResponse,
    DependencyCreate,
    DependencyGraphResponse,
    DependencyListResponse,
    DependencyResponse,
)
from app.schemas.label import LabelCreate, LabelResponse, LabelUpdate
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
    TaskSummary,
    TaskUpdate,
    TimelineReorder,
)

__all__ = [
    "BlockedResponse",
    "CalendarMove",
    "CommentCreate",
    "DependencyCreate",
    "DependencyGraphResponse",
    "DependencyListResponse",
    "DependencyResponse",
    "LabelCreate",
    "LabelResponse",
    "LabelUpdate",
    "PomodoroSuggestRequest",
    "PomodoroSuggestResponse",
    "StatusUpdate",
    "SubtaskCreate",
    "TaskCreate",
    "TaskListResponse",
    "TaskLogResponse",
    "TaskResponse",
    "TaskSummary",
    "TaskUpdate",
    "TimelineReorder",
]
