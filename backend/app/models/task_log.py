"""Append-only activity log for tasks."""

from datetime import datetime
from enum import Enum
from typing import Any

from sqlalchemy import JSON, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.clock import utcnow
from app.db.base import Base


class TaskLogEvent(str, Enum):
    """Kinds of task mutations recorded in the log."""

    CREATED = "created"
    UPDATED = "updated"
    STATUS_CHANGED = "status_changed"
    PRIORITY_CHANGED = "priority_changed"
    ASSIGNED = "assigned"
    COMPLETED = "completed"
    REOPENED = "reopened"
    DELETED = "deleted"
    LABEL_ADDED = "label_added"
    LABEL_REMOVED = "label_removed"
    DEPENDENCY_ADDED = "dependency_added"
    DEPENDENCY_REMOVED = "dependency_removed"
    COMMENT_ADDED = "comment_added"


class TaskLog(Base):
    """One recorded mutation of a task. Rows are never updated."""

    __tablename__ = "task_logs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    task_id: Mapped[int] = mapped_column(
        ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    event_type: Mapped[str] = mapped_column(String(30), nullable=False, index=True)
    changes: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)  # {field: {old, new}}
    comment: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, nullable=False, index=True
    )

    task: Mapped["Task"] = relationship(back_populates="logs")

    def __repr__(self) -> str:
        return f"<TaskLog(id={self.id}, task={self.task_id}, event={self.event_type})>"
