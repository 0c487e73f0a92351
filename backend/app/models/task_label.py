"""Labels and the task/label association table."""

from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Table, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.clock import utcnow
from app.db.base import Base

task_label_map = Table(
    "task_label_map",
    Base.metadata,
    Column("task_id", ForeignKey("tasks.id", ondelete="CASCADE"), primary_key=True),
    Column("label_id", ForeignKey("task_labels.id", ondelete="CASCADE"), primary_key=True),
    Column("created_at", DateTime, default=utcnow, nullable=False),
)


class TaskLabel(Base):
    """A user-defined colored tag."""

    __tablename__ = "task_labels"
    __table_args__ = (UniqueConstraint("user_id", "name", name="uq_task_label_user_name"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    user_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(50), nullable=False)
    color: Mapped[str] = mapped_column(String(7), nullable=False)  # #RRGGBB
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)

    tasks: Mapped[list["Task"]] = relationship(
        secondary=task_label_map, back_populates="labels"
    )

    def __repr__(self) -> str:
        return f"<TaskLabel(id={self.id}, name='{self.name}')>"
