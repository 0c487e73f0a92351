"""Task model for the task core."""

from datetime import date, datetime
from enum import Enum

from sqlalchemy import Boolean, Date, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.clock import utcnow
from app.db.base import Base
from app.models.task_label import task_label_map


class TaskPriority(str, Enum):
    """Task priority levels."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class TaskStatus(str, Enum):
    """Kanban status of a task."""

    BACKLOG = "backlog"
    NEXT = "next"
    IN_PROGRESS = "in_progress"
    BLOCKED = "blocked"
    DONE = "done"


class RecurrenceType(str, Enum):
    """How often a recurring task comes back."""

    NONE = "none"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class Task(Base):
    """A single unit of work with scheduling, priority and completion state."""

    __tablename__ = "tasks"
    __table_args__ = (Index("ix_tasks_status_priority", "status", "priority"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    user_id: Mapped[int] = mapped_column(Integer, default=1, nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    priority: Mapped[str] = mapped_column(
        String(20), default=TaskPriority.MEDIUM.value, nullable=False
    )
    task_type: Mapped[str] = mapped_column(String(50), default="work", nullable=False, index=True)
    status: Mapped[str] = mapped_column(
        String(20), default=TaskStatus.BACKLOG.value, nullable=False, index=True
    )
    previous_status: Mapped[str | None] = mapped_column(String(20), nullable=True)
    done: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)  # mirrors status == done

    # Scheduling
    due_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    start_date: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    timeline_order: Mapped[int | None] = mapped_column(Integer, nullable=True)

    # Effort
    estimated_minutes: Mapped[int | None] = mapped_column(Integer, nullable=True)
    actual_minutes: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    # Recurrence
    recurrence_type: Mapped[str] = mapped_column(
        String(20), default=RecurrenceType.NONE.value, nullable=False
    )
    recurrence_interval: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    recurrence_end_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    # Subtasks
    parent_task_id: Mapped[int | None] = mapped_column(
        ForeignKey("tasks.id", ondelete="CASCADE"), nullable=True, index=True
    )
    # Occurrence spawned when this recurring task was completed
    next_occurrence_id: Mapped[int | None] = mapped_column(
        ForeignKey("tasks.id", ondelete="SET NULL"), nullable=True
    )

    # Pomodoro
    pomodoro_estimate: Mapped[int | None] = mapped_column(Integer, nullable=True)
    pomodoro_completed: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, onupdate=utcnow, nullable=False
    )
    completed_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    parent_task: Mapped["Task | None"] = relationship(
        back_populates="child_tasks", remote_side=[id], foreign_keys=[parent_task_id]
    )
    child_tasks: Mapped[list["Task"]] = relationship(
        back_populates="parent_task",
        foreign_keys=[parent_task_id],
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    # Edges where this task waits on another one
    dependencies: Mapped[list["TaskDependency"]] = relationship(
        foreign_keys="TaskDependency.task_id",
        back_populates="task",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    # Edges where another task waits on this one
    dependents: Mapped[list["TaskDependency"]] = relationship(
        foreign_keys="TaskDependency.blocked_by_task_id",
        back_populates="blocking_task",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    labels: Mapped[list["TaskLabel"]] = relationship(
        secondary=task_label_map, back_populates="tasks"
    )
    logs: Mapped[list["TaskLog"]] = relationship(
        back_populates="task",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="TaskLog.id",
    )

    @property
    def is_recurring(self) -> bool:
        return self.recurrence_type != RecurrenceType.NONE.value

    @property
    def pomodoro_progress(self) -> float:
        """Completed pomodoros as a percentage of the estimate, capped at 100."""
        if not self.pomodoro_estimate:
            return 0.0
        return min(100.0, self.pomodoro_completed / self.pomodoro_estimate * 100)

    @property
    def is_blocked(self) -> bool:
        """True while any blocking task is not done."""
        return any(
            edge.blocking_task.status != TaskStatus.DONE.value for edge in self.dependencies
        )

    def __repr__(self) -> str:
        return f"<Task(id={self.id}, title='{self.title}', status={self.status})>"
