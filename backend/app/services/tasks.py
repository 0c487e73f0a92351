"""Task CRUD, comments and the kanban/calendar/timeline views."""

import logging
from collections import defaultdict
from datetime import date, datetime, time, timedelta
from typing import Any

from sqlalchemy import case, func, or_, select
from sqlalchemy.orm import Session

from app.core.clock import Clock, SystemClock
from app.core.errors import InvalidArgumentError
from app.models.task import RecurrenceType, Task, TaskPriority, TaskStatus
from app.models.task_log import TaskLog, TaskLogEvent
from app.services import activity_log
from app.services.pomodoro import suggest_pomodoro_count
from app.services.status import DEFAULT_REOPEN_STATUS, announce, apply_status
from app.services.transaction import commit, load_task
from app.services.validation import parse_choice, require_non_negative, require_positive

logger = logging.getLogger(__name__)

# Columns a client may set directly; status and done go through the state machine
EDITABLE_FIELDS = {
    "title",
    "description",
    "priority",
    "task_type",
    "due_at",
    "start_date",
    "timeline_order",
    "estimated_minutes",
    "actual_minutes",
    "recurrence_type",
    "recurrence_interval",
    "recurrence_end_date",
    "pomodoro_estimate",
    "pomodoro_completed",
}

# Dropped from input when sent as null rather than stored
NOT_NULL_FIELDS = (
    "title",
    "priority",
    "task_type",
    "actual_minutes",
    "recurrence_type",
    "recurrence_interval",
    "pomodoro_completed",
)

_PRIORITY_RANK = case(
    {
        TaskPriority.HIGH.value: 3,
        TaskPriority.MEDIUM.value: 2,
        TaskPriority.LOW.value: 1,
    },
    value=Task.priority,
    else_=0,
)


def _normalize(data: dict[str, Any]) -> dict[str, Any]:
    """Validate enum and numeric fields and turn enums into stored strings."""
    clean = dict(data)
    if clean.get("priority") is not None:
        clean["priority"] = parse_choice(TaskPriority, clean["priority"], "priority").value
    if clean.get("status") is not None:
        clean["status"] = parse_choice(TaskStatus, clean["status"], "status").value
    if clean.get("recurrence_type") is not None:
        clean["recurrence_type"] = parse_choice(
            RecurrenceType, clean["recurrence_type"], "recurrence_type"
        ).value

    for field in ("estimated_minutes", "actual_minutes", "pomodoro_estimate", "pomodoro_completed"):
        require_non_negative(clean.get(field), field)
    require_positive(clean.get("recurrence_interval"), "recurrence_interval")

    for field in NOT_NULL_FIELDS:
        if field in clean and clean[field] is None:
            del clean[field]
    return clean


def _check_recurrence_window(due_at: datetime | None, end_date: date | None) -> None:
    if due_at is not None and end_date is not None and end_date <= due_at.date():
        raise InvalidArgumentError("recurrence_end_date must be after due_at")


def create_task(
    db: Session,
    data: dict[str, Any],
    *,
    clock: Clock | None = None,
    user_id: int = 1,
    parent_task_id: int | None = None,
) -> Task:
    """Create a task and log ``created``.

    When only an effort estimate is given, a pomodoro estimate is suggested
    from it.
    """
    clock = clock or SystemClock()
    clean = _normalize(data)
    if not clean.get("title"):
        raise InvalidArgumentError("Task title is required")
    unknown = set(clean) - EDITABLE_FIELDS - {"status"}
    if unknown:
        raise InvalidArgumentError(f"Unknown task fields: {', '.join(sorted(unknown))}")
    _check_recurrence_window(clean.get("due_at"), clean.get("recurrence_end_date"))

    if clean.get("estimated_minutes") and clean.get("pomodoro_estimate") is None:
        clean["pomodoro_estimate"] = suggest_pomodoro_count(
            clean["estimated_minutes"], clean.get("priority", TaskPriority.MEDIUM.value)
        )

    status = clean.pop("status", None) or TaskStatus.BACKLOG.value
    now = clock.now()
    task = Task(
        **clean,
        user_id=user_id,
        parent_task_id=parent_task_id,
        status=status,
        done=status == TaskStatus.DONE.value,
        completed_at=now if status == TaskStatus.DONE.value else None,
        created_at=now,
        updated_at=now,
    )
    db.add(task)
    db.flush()

    activity_log.record(db, task, TaskLogEvent.CREATED, user_id=user_id, clock=clock)
    commit(db)
    db.refresh(task)
    logger.info(f"Created task {task.id} '{task.title}'")
    return task


def create_subtask(
    db: Session,
    parent_id: int,
    data: dict[str, Any],
    *,
    clock: Clock | None = None,
    user_id: int = 1,
) -> Task:
    """Create a backlog subtask inheriting the parent's task type."""
    parent = load_task(db, parent_id, user_id=user_id)
    payload = dict(data)
    payload["status"] = TaskStatus.BACKLOG.value
    payload["task_type"] = parent.task_type
    return create_task(db, payload, clock=clock, user_id=user_id, parent_task_id=parent.id)


def get_task(db: Session, task_id: int, *, user_id: int | None = None) -> Task:
    return load_task(db, task_id, user_id=user_id)


def list_tasks(
    db: Session,
    *,
    user_id: int,
    status: str | None = None,
    priority: str | None = None,
    task_type: str | None = None,
    search: str | None = None,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
    skip: int = 0,
    limit: int = 100,
) -> tuple[list[Task], int]:
    """Filtered, paginated task list ordered by due date. Returns (tasks, total)."""
    query = select(Task).where(Task.user_id == user_id)

    if status:
        query = query.where(Task.status == parse_choice(TaskStatus, status, "status").value)
    if priority:
        query = query.where(Task.priority == parse_choice(TaskPriority, priority, "priority").value)
    if task_type:
        query = query.where(Task.task_type == task_type)
    if search:
        pattern = f"%{search}%"
        query = query.where(or_(Task.title.ilike(pattern), Task.description.ilike(pattern)))
    if start_date:
        query = query.where(Task.due_at >= start_date)
    if end_date:
        query = query.where(Task.due_at <= end_date)

    total = db.scalar(select(func.count()).select_from(query.subquery())) or 0
    tasks = db.scalars(
        query.order_by(Task.due_at.is_(None), Task.due_at.asc(), Task.id.asc())
        .offset(skip)
        .limit(limit)
    ).all()
    return list(tasks), total


def update_task(
    db: Session,
    task_id: int,
    data: dict[str, Any],
    *,
    clock: Clock | None = None,
    user_id: int | None = None,
) -> Task:
    """Partially update a task and write a single log entry.

    The entry is ``status_changed`` or ``priority_changed`` when that is the
    only field that moved, ``updated`` otherwise. Status and the legacy
    ``done`` flag are routed through the state machine.
    """
    clock = clock or SystemClock()
    clean = _normalize(data)
    task = load_task(db, task_id, user_id=user_id, lock=True)

    target_status = clean.pop("status", None)
    wants_done = clean.pop("done", None)
    if target_status is None and wants_done is not None and wants_done != task.done:
        if wants_done:
            target_status = TaskStatus.DONE.value
        else:
            target_status = task.previous_status or DEFAULT_REOPEN_STATUS.value

    unknown = set(clean) - EDITABLE_FIELDS
    if unknown:
        raise InvalidArgumentError(f"Unknown task fields: {', '.join(sorted(unknown))}")

    if "due_at" in clean or "recurrence_end_date" in clean:
        _check_recurrence_window(
            clean.get("due_at", task.due_at),
            clean.get("recurrence_end_date", task.recurrence_end_date),
        )

    changes = activity_log.diff_fields(task, clean)
    for field in changes:
        setattr(task, field, clean[field])

    transition = None
    if target_status is not None and target_status != task.status:
        transition = apply_status(db, task, target_status, clock=clock)
        changes["status"] = {"old": transition.old_status, "new": transition.new_status}

    if not changes:
        return task

    if set(changes) == {"status"}:
        event = TaskLogEvent.STATUS_CHANGED
    elif set(changes) == {"priority"}:
        event = TaskLogEvent.PRIORITY_CHANGED
    else:
        event = TaskLogEvent.UPDATED

    task.updated_at = clock.now()
    activity_log.record(db, task, event, user_id=user_id, changes=changes, clock=clock)
    commit(db)
    db.refresh(task)

    logger.info(f"Updated task {task.id}: {', '.join(sorted(changes))}")
    if transition:
        announce(task, transition)
    return task


def move_on_calendar(
    db: Session,
    task_id: int,
    due_at: datetime,
    start_date: datetime | None = None,
    *,
    clock: Clock | None = None,
    user_id: int | None = None,
) -> Task:
    """Reschedule a task after a calendar drag and drop."""
    data: dict[str, Any] = {"due_at": due_at}
    if start_date is not None:
        data["start_date"] = start_date
    return update_task(db, task_id, data, clock=clock, user_id=user_id)


def delete_task(db: Session, task_id: int, *, user_id: int | None = None) -> None:
    """Delete a task; its subtasks, dependency edges, labels and logs go with it."""
    task = load_task(db, task_id, user_id=user_id)
    actor = user_id if user_id is not None else task.user_id
    db.delete(task)
    commit(db)
    # The log rows are cascaded away with the task, so the deletion is reported here
    logger.info(f"Task {task_id} {TaskLogEvent.DELETED.value} by user {actor}")


def add_comment(
    db: Session,
    task_id: int,
    comment: str,
    *,
    clock: Clock | None = None,
    user_id: int | None = None,
) -> TaskLog:
    if not comment or not comment.strip():
        raise InvalidArgumentError("Comment must not be empty")
    task = load_task(db, task_id, user_id=user_id)
    entry = activity_log.record(
        db, task, TaskLogEvent.COMMENT_ADDED, user_id=user_id, comment=comment.strip(), clock=clock
    )
    commit(db)
    db.refresh(entry)
    return entry


def task_logs(
    db: Session, task_id: int, event_type: str | None = None, *, user_id: int | None = None
) -> list[TaskLog]:
    load_task(db, task_id, user_id=user_id)
    return activity_log.list_logs(db, task_id, event_type)


def today_tasks(db: Session, *, user_id: int, clock: Clock | None = None) -> list[Task]:
    """Tasks due today, highest priority first."""
    clock = clock or SystemClock()
    start = datetime.combine(clock.now().date(), time.min)
    end = start + timedelta(days=1)
    return list(
        db.scalars(
            select(Task)
            .where(Task.user_id == user_id, Task.due_at >= start, Task.due_at < end)
            .order_by(_PRIORITY_RANK.desc(), Task.due_at.asc())
        )
    )


def calendar_tasks(db: Session, *, user_id: int, start: datetime, end: datetime) -> list[Task]:
    if end < start:
        raise InvalidArgumentError("end_date must not be before start_date")
    return list(
        db.scalars(
            select(Task)
            .where(Task.user_id == user_id, Task.due_at >= start, Task.due_at <= end)
            .order_by(Task.due_at.asc())
        )
    )


def _timeline_key(task: Task):
    return (task.timeline_order is None, task.timeline_order or 0, task.due_at or datetime.max, task.id)


def kanban_board(db: Session, *, user_id: int) -> dict[str, list[Task]]:
    """Tasks grouped into one column per status."""
    board: dict[str, list[Task]] = {status.value: [] for status in TaskStatus}
    for task in db.scalars(select(Task).where(Task.user_id == user_id)):
        board[task.status].append(task)
    for column in board.values():
        column.sort(key=_timeline_key)
    return board


def timeline(
    db: Session, *, user_id: int, start: datetime, end: datetime
) -> dict[str, list[Task]]:
    """Tasks due between ``start`` and ``end`` grouped by ISO day."""
    days: dict[str, list[Task]] = defaultdict(list)
    for task in calendar_tasks(db, user_id=user_id, start=start, end=end):
        days[task.due_at.date().isoformat()].append(task)
    return {day: sorted(tasks, key=_timeline_key) for day, tasks in sorted(days.items())}


def reorder_timeline(
    db: Session,
    orders: dict[int, int],
    *,
    user_id: int,
    clock: Clock | None = None,
) -> list[Task]:
    """Apply drag-and-drop timeline positions, all or nothing."""
    clock = clock or SystemClock()
    # Every id is resolved before any position changes
    moves = [
        (load_task(db, int(task_id), user_id=user_id, lock=True), order)
        for task_id, order in orders.items()
    ]
    updated: list[Task] = []
    for task, order in moves:
        changes = activity_log.diff_fields(task, {"timeline_order": order})
        if not changes:
            continue
        task.timeline_order = order
        task.updated_at = clock.now()
        activity_log.record(db, task, TaskLogEvent.UPDATED, user_id=user_id, changes=changes, clock=clock)
        updated.append(task)
    commit(db)
    return updated


def task_stats(db: Session, *, user_id: int, clock: Clock | None = None) -> dict[str, int]:
    """Summary counts per status plus upcoming and overdue deadlines."""
    clock = clock or SystemClock()
    now = clock.now()

    counts = dict(
        db.execute(
            select(Task.status, func.count(Task.id))
            .where(Task.user_id == user_id)
            .group_by(Task.status)
        ).all()
    )
    open_tasks = select(func.count(Task.id)).where(
        Task.user_id == user_id,
        Task.due_at.isnot(None),
        Task.status != TaskStatus.DONE.value,
    )
    upcoming = db.scalar(open_tasks.where(Task.due_at >= now, Task.due_at <= now + timedelta(days=7)))
    overdue = db.scalar(open_tasks.where(Task.due_at < now))

    stats = {status.value: counts.get(status.value, 0) for status in TaskStatus}
    stats["total"] = sum(counts.values())
    stats["upcoming_deadlines"] = upcoming or 0
    stats["overdue"] = overdue or 0
    return stats
