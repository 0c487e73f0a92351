"""Pomodoro estimates and session tracking."""

import logging
import math

from sqlalchemy.orm import Session

from app.core.clock import Clock, SystemClock
from app.models.task import Task, TaskPriority, TaskStatus
from app.models.task_log import TaskLogEvent
from app.services import activity_log
from app.services.status import announce, apply_status
from app.services.transaction import commit, load_task
from app.services.validation import parse_choice, require_non_negative

logger = logging.getLogger(__name__)

POMODORO_MINUTES = 25

_PRIORITY_MULTIPLIER = {
    TaskPriority.HIGH.value: 1.2,  # high priority work tends to be more involved
    TaskPriority.MEDIUM.value: 1.0,
    TaskPriority.LOW.value: 0.8,
}


def suggest_pomodoro_count(estimated_minutes: int, priority: str = TaskPriority.MEDIUM.value) -> int:
    """Suggest how many pomodoros a task needs.

    One pomodoro per 25 minutes, scaled by priority, plus one long break
    slot for every four sessions once there are more than four. Never
    less than one.
    """
    require_non_negative(estimated_minutes, "estimated_minutes")
    priority = parse_choice(TaskPriority, priority or TaskPriority.MEDIUM.value, "priority").value

    base = math.ceil(estimated_minutes / POMODORO_MINUTES)
    suggested = math.ceil(base * _PRIORITY_MULTIPLIER[priority])

    if suggested > 4:
        suggested += suggested // 4

    return max(1, suggested)


def complete_pomodoro_session(
    db: Session, task_id: int, *, clock: Clock | None = None, user_id: int | None = None
) -> Task:
    """Count one finished session; the task completes when the estimate is reached."""
    clock = clock or SystemClock()
    task = load_task(db, task_id, user_id=user_id, lock=True)

    old_count = task.pomodoro_completed or 0
    task.pomodoro_completed = old_count + 1
    task.updated_at = clock.now()
    changes = {"pomodoro_completed": {"old": old_count, "new": task.pomodoro_completed}}

    transition = None
    if (
        task.pomodoro_estimate
        and task.pomodoro_completed >= task.pomodoro_estimate
        and task.status != TaskStatus.DONE.value
    ):
        transition = apply_status(db, task, TaskStatus.DONE, clock=clock)
        changes["status"] = {"old": transition.old_status, "new": transition.new_status}

    activity_log.record(
        db,
        task,
        TaskLogEvent.COMPLETED if transition else TaskLogEvent.UPDATED,
        user_id=user_id,
        changes=changes,
        clock=clock,
    )
    commit(db)
    db.refresh(task)

    logger.info(
        f"Task {task.id} pomodoro {task.pomodoro_completed}/{task.pomodoro_estimate or '-'}"
    )
    if transition:
        announce(task, transition)
    return task
