"""Spawning the next occurrence of a recurring task."""

import calendar
import logging
from datetime import datetime, timedelta

from sqlalchemy.orm import Session

from app.core.clock import Clock
from app.core.errors import InvalidArgumentError
from app.core.settings import get_settings
from app.models.task import RecurrenceType, Task, TaskStatus
from app.models.task_log import TaskLogEvent
from app.services import activity_log

logger = logging.getLogger(__name__)


def add_months(value: datetime, months: int) -> datetime:
    """Shift by whole calendar months, clamping the day to the month's length.

    Jan 31 + 1 month is Feb 28 (or 29), not Mar 3.
    """
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def next_occurrence(base: datetime, recurrence_type: str, interval: int = 1) -> datetime:
    """Return the occurrence ``interval`` periods after ``base``."""
    if interval < 1:
        raise InvalidArgumentError("Recurrence interval must be at least 1")

    if recurrence_type == RecurrenceType.DAILY.value:
        return base + timedelta(days=interval)
    if recurrence_type == RecurrenceType.WEEKLY.value:
        return base + timedelta(weeks=interval)
    if recurrence_type == RecurrenceType.MONTHLY.value:
        return add_months(base, interval)
    raise InvalidArgumentError(f"Task recurrence '{recurrence_type}' has no next occurrence")


def initial_status() -> str:
    """Status a freshly spawned occurrence starts in."""
    configured = get_settings().recurrence_initial_status
    if configured not in (TaskStatus.BACKLOG.value, TaskStatus.NEXT.value):
        logger.warning(
            f"Unsupported RECURRENCE_INITIAL_STATUS '{configured}', using backlog"
        )
        return TaskStatus.BACKLOG.value
    return configured


def expand_on_completion(db: Session, task: Task, *, clock: Clock) -> Task | None:
    """Create the next occurrence of a just-completed recurring task.

    Runs inside the caller's transaction so the completion and its successor
    commit together. The completed task itself is left as the record of the
    finished occurrence. Returns None for non-recurring tasks and when the
    recurrence end date has passed. A task that already spawned an occurrence
    keeps it, so completing it again after a reopen does not add another one.
    """
    if not task.is_recurring:
        return None

    if task.next_occurrence_id is not None:
        existing = db.get(Task, task.next_occurrence_id)
        if existing is not None:
            logger.info(
                f"Recurring task {task.id} completed again; keeping occurrence {existing.id}"
            )
            return existing

    base = task.due_at or clock.now()
    next_due = next_occurrence(base, task.recurrence_type, task.recurrence_interval or 1)

    if task.recurrence_end_date and next_due.date() > task.recurrence_end_date:
        logger.info(
            f"Recurrence of task {task.id} ended on {task.recurrence_end_date}; no successor"
        )
        return None

    successor = Task(
        user_id=task.user_id,
        title=task.title,
        description=task.description,
        priority=task.priority,
        task_type=task.task_type,
        estimated_minutes=task.estimated_minutes,
        pomodoro_estimate=task.pomodoro_estimate,
        pomodoro_completed=0,
        recurrence_type=task.recurrence_type,
        recurrence_interval=task.recurrence_interval,
        recurrence_end_date=task.recurrence_end_date,
        status=initial_status(),
        done=False,
        due_at=next_due,
        parent_task_id=None,
        created_at=clock.now(),
        updated_at=clock.now(),
    )
    db.add(successor)
    db.flush()
    task.next_occurrence_id = successor.id

    activity_log.record(
        db,
        successor,
        TaskLogEvent.CREATED,
        user_id=task.user_id,
        comment=f"Next occurrence of task #{task.id}",
        clock=clock,
    )
    logger.info(f"Recurring task {task.id} completed; spawned task {successor.id} due {next_due}")
    return successor
