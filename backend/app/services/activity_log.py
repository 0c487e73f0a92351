"""Append-only activity log for task mutations."""

import logging
from datetime import date, datetime
from enum import Enum
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.clock import Clock, SystemClock
from app.core.errors import InvalidArgumentError
from app.models.task import Task
from app.models.task_log import TaskLog, TaskLogEvent

logger = logging.getLogger(__name__)


def _json_value(value: Any) -> Any:
    """Make a column value storable in the JSON ``changes`` payload."""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


def diff_fields(task: Task, updates: dict[str, Any]) -> dict[str, dict[str, Any]]:
    """Return ``{field: {"old": ..., "new": ...}}`` for fields that actually change."""
    changes: dict[str, dict[str, Any]] = {}
    for field, new_value in updates.items():
        old_value = getattr(task, field)
        if _json_value(old_value) == _json_value(new_value):
            continue
        changes[field] = {"old": _json_value(old_value), "new": _json_value(new_value)}
    return changes


def record(
    db: Session,
    task: Task,
    event_type: TaskLogEvent | str,
    *,
    user_id: int | None = None,
    changes: dict[str, Any] | None = None,
    comment: str | None = None,
    clock: Clock | None = None,
) -> TaskLog:
    """Append a log row for ``task`` to the current transaction.

    The caller owns the commit, so the row lands atomically with the
    mutation it describes.
    """
    try:
        event = TaskLogEvent(event_type)
    except ValueError as exc:
        raise InvalidArgumentError(f"Unknown task log event '{event_type}'") from exc

    clock = clock or SystemClock()
    entry = TaskLog(
        task_id=task.id,
        user_id=user_id if user_id is not None else task.user_id,
        event_type=event.value,
        changes=changes or None,
        comment=comment,
        created_at=clock.now(),
    )
    db.add(entry)
    logger.debug("Task %s: %s %s", task.id, event.value, changes or "")
    return entry


def list_logs(
    db: Session, task_id: int, event_type: TaskLogEvent | str | None = None
) -> list[TaskLog]:
    """Return the log of a task, newest first."""
    query = select(TaskLog).where(TaskLog.task_id == task_id)
    if event_type is not None:
        try:
            query = query.where(TaskLog.event_type == TaskLogEvent(event_type).value)
        except ValueError as exc:
            raise InvalidArgumentError(f"Unknown task log event '{event_type}'") from exc
    query = query.order_by(TaskLog.created_at.desc(), TaskLog.id.desc())
    return list(db.scalars(query))
