"""Status state machine: kanban status changes and completion toggling.

Any status may move to any other status. The only bookkeeping is around
``done``: entering it remembers where the task came from in
``previous_status`` so a reopen can put it back, and the legacy ``done``
flag always mirrors ``status == "done"``.
"""

import logging
from dataclasses import dataclass

from sqlalchemy.orm import Session

from app.core.clock import Clock, SystemClock
from app.models.task import Task, TaskStatus
from app.models.task_log import TaskLogEvent
from app.services import activity_log, events, recurrence
from app.services.transaction import commit, load_task
from app.services.validation import parse_choice

logger = logging.getLogger(__name__)

# Where a reopened task goes when no previous status was recorded
DEFAULT_REOPEN_STATUS = TaskStatus.BACKLOG


@dataclass
class Transition:
    """Outcome of applying a status to a task, before anything is committed."""

    old_status: str
    new_status: str
    successor: Task | None = None

    @property
    def completed(self) -> bool:
        return self.old_status != TaskStatus.DONE.value and self.new_status == TaskStatus.DONE.value

    @property
    def reopened(self) -> bool:
        return self.old_status == TaskStatus.DONE.value and self.new_status != TaskStatus.DONE.value


def parse_status(value: TaskStatus | str) -> TaskStatus:
    return parse_choice(TaskStatus, value, "status")


def apply_status(db: Session, task: Task, new_status: TaskStatus | str, *, clock: Clock) -> Transition:
    """Move ``task`` to ``new_status`` in the session without logging or committing.

    Completing a recurring task spawns its next occurrence here so both land
    in the same transaction.
    """
    target = parse_status(new_status)
    transition = Transition(old_status=task.status, new_status=target.value)

    if transition.completed:
        task.previous_status = transition.old_status
        task.completed_at = clock.now()
    elif transition.reopened:
        task.previous_status = None
        task.completed_at = None

    task.status = target.value
    task.done = target == TaskStatus.DONE
    task.updated_at = clock.now()

    if transition.completed:
        transition.successor = recurrence.expand_on_completion(db, task, clock=clock)

    return transition


def announce(task: Task, transition: Transition) -> None:
    """Publish a completion event once the transition is committed."""
    if not transition.completed:
        return
    events.publish(
        events.TaskCompleted(
            task_id=task.id,
            task_type=task.task_type,
            parent_task_id=task.parent_task_id,
            completed_at=task.completed_at,
        )
    )


def set_status(
    db: Session,
    task_id: int,
    new_status: TaskStatus | str,
    *,
    clock: Clock | None = None,
    user_id: int | None = None,
) -> Task:
    """Set a task's kanban status and log a ``status_changed`` entry."""
    clock = clock or SystemClock()
    target = parse_status(new_status)
    task = load_task(db, task_id, user_id=user_id, lock=True)

    transition = apply_status(db, task, target, clock=clock)
    activity_log.record(
        db,
        task,
        TaskLogEvent.STATUS_CHANGED,
        user_id=user_id,
        changes={"status": {"old": transition.old_status, "new": transition.new_status}},
        clock=clock,
    )
    commit(db)
    db.refresh(task)

    logger.info(f"Task {task.id} status {transition.old_status} -> {transition.new_status}")
    announce(task, transition)
    return task


def toggle(db: Session, task_id: int, *, clock: Clock | None = None, user_id: int | None = None) -> Task:
    """Flip a task between done and its previous (or default) open status."""
    clock = clock or SystemClock()
    task = load_task(db, task_id, user_id=user_id, lock=True)

    if task.status == TaskStatus.DONE.value:
        target = task.previous_status or DEFAULT_REOPEN_STATUS.value
        if target == TaskStatus.DONE.value:
            target = DEFAULT_REOPEN_STATUS.value
        event = TaskLogEvent.REOPENED
    else:
        target = TaskStatus.DONE.value
        event = TaskLogEvent.COMPLETED

    transition = apply_status(db, task, target, clock=clock)
    activity_log.record(
        db,
        task,
        event,
        user_id=user_id,
        changes={
            "status": {"old": transition.old_status, "new": transition.new_status},
            "done": {"old": transition.old_status == TaskStatus.DONE.value, "new": task.done},
        },
        clock=clock,
    )
    commit(db)
    db.refresh(task)

    logger.info(f"Task {task.id} toggled {transition.old_status} -> {transition.new_status}")
    announce(task, transition)
    return task
