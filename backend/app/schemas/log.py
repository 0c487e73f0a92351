"""Pydantic schemas for the task activity log."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from app.models.task_log import TaskLogEvent


class CommentCreate(BaseModel):
    comment: str = Field(..., min_length=1, max_length=5000)


class TaskLogResponse(BaseModel):
    id: int
    task_id: int
    user_id: int | None = None
    event_type: TaskLogEvent
    changes: dict[str, Any] | None = None
    comment: str | None = None
    created_at: datetime

    class Config:
        from_attributes = True
