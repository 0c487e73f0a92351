"""Blocked-by edges between tasks."""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.clock import utcnow
from app.db.base import Base


class TaskDependency(Base):
    """``task_id`` cannot be acted on until ``blocked_by_task_id`` is done."""

    __tablename__ = "task_dependencies"
    __table_args__ = (
        UniqueConstraint("task_id", "blocked_by_task_id", name="uq_task_dependency_pair"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    task_id: Mapped[int] = mapped_column(
        ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False, index=True
    )
    blocked_by_task_id: Mapped[int] = mapped_column(
        ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False, index=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)

    task: Mapped["Task"] = relationship(foreign_keys=[task_id], back_populates="dependencies")
    blocking_task: Mapped["Task"] = relationship(
        foreign_keys=[blocked_by_task_id], back_populates="dependents"
    )

    def __repr__(self) -> str:
        return f"<TaskDependency(task={self.task_id}, blocked_by={self.blocked_by_task_id})>"
