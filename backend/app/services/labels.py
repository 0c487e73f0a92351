"""Colored labels and their assignment to tasks."""

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.clock import Clock
from app.core.errors import ConflictError, InvalidArgumentError, NotFoundError
from app.models.task import Task
from app.models.task_label import TaskLabel
from app.models.task_log import TaskLogEvent
from app.services import activity_log
from app.services.transaction import commit, load_task
from app.services.validation import HEX_COLOR

logger = logging.getLogger(__name__)


def _check_label_fields(name: str | None, color: str | None) -> None:
    if name is not None and not (0 < len(name.strip()) <= 50):
        raise InvalidArgumentError("Label name must be 1-50 characters")
    if color is not None and not HEX_COLOR.match(color):
        raise InvalidArgumentError("Label color must look like #RRGGBB")


def _name_taken(db: Session, user_id: int, name: str, exclude_id: int | None = None) -> bool:
    query = select(TaskLabel.id).where(TaskLabel.user_id == user_id, TaskLabel.name == name)
    if exclude_id is not None:
        query = query.where(TaskLabel.id != exclude_id)
    return db.scalars(query).first() is not None


def load_label(db: Session, label_id: int, *, user_id: int) -> TaskLabel:
    label = db.scalars(
        select(TaskLabel).where(TaskLabel.id == label_id, TaskLabel.user_id == user_id)
    ).first()
    if label is None:
        raise NotFoundError(f"Label with id {label_id} not found")
    return label


def list_labels(db: Session, *, user_id: int) -> list[TaskLabel]:
    return list(
        db.scalars(select(TaskLabel).where(TaskLabel.user_id == user_id).order_by(TaskLabel.name))
    )


def create_label(db: Session, name: str, color: str, *, user_id: int) -> TaskLabel:
    _check_label_fields(name, color)
    name = name.strip()
    if _name_taken(db, user_id, name):
        raise ConflictError("Label with this name already exists")

    label = TaskLabel(user_id=user_id, name=name, color=color)
    db.add(label)
    commit(db, conflict_message="Label with this name already exists")
    db.refresh(label)
    return label


def update_label(
    db: Session,
    label_id: int,
    *,
    user_id: int,
    name: str | None = None,
    color: str | None = None,
) -> TaskLabel:
    label = load_label(db, label_id, user_id=user_id)
    _check_label_fields(name, color)

    if name is not None and name.strip() != label.name:
        if _name_taken(db, user_id, name.strip(), exclude_id=label.id):
            raise ConflictError("Label with this name already exists")
        label.name = name.strip()
    if color is not None:
        label.color = color

    commit(db, conflict_message="Label with this name already exists")
    db.refresh(label)
    return label


def delete_label(db: Session, label_id: int, *, user_id: int) -> None:
    """Delete a label; task assignments are detached first."""
    label = load_label(db, label_id, user_id=user_id)
    label.tasks.clear()
    db.delete(label)
    commit(db)
    logger.info(f"Deleted label {label_id}")


def tasks_for_label(db: Session, label_id: int, *, user_id: int) -> list[Task]:
    label = load_label(db, label_id, user_id=user_id)
    return sorted((t for t in label.tasks if t.user_id == user_id), key=lambda t: t.id)


def attach_label(
    db: Session,
    task_id: int,
    label_id: int,
    *,
    user_id: int,
    clock: Clock | None = None,
) -> Task:
    """Put a label on a task and log ``label_added``."""
    task = load_task(db, task_id, user_id=user_id)
    label = load_label(db, label_id, user_id=user_id)
    if label in task.labels:
        raise ConflictError("Label already assigned to this task")

    task.labels.append(label)
    activity_log.record(
        db,
        task,
        TaskLogEvent.LABEL_ADDED,
        user_id=user_id,
        changes={"label": {"old": None, "new": label.name}},
        clock=clock,
    )
    commit(db, conflict_message="Label already assigned to this task")
    db.refresh(task)
    return task


def detach_label(
    db: Session,
    task_id: int,
    label_id: int,
    *,
    user_id: int,
    clock: Clock | None = None,
) -> Task:
    """Take a label off a task and log ``label_removed``."""
    task = load_task(db, task_id, user_id=user_id)
    label = load_label(db, label_id, user_id=user_id)
    if label not in task.labels:
        raise NotFoundError("Label is not assigned to this task")

    task.labels.remove(label)
    activity_log.record(
        db,
        task,
        TaskLogEvent.LABEL_REMOVED,
        user_id=user_id,
        changes={"label": {"old": label.name, "new": None}},
        clock=clock,
    )
    commit(db)
    db.refresh(task)
    return task
