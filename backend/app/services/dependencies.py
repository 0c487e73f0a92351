"""Blocked-by relation between tasks."""

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.errors import ConflictError, InvalidArgumentError
from app.models.task import Task, TaskStatus
from app.models.task_dependency import TaskDependency
from app.models.task_log import TaskLogEvent
from app.services import activity_log
from app.services.transaction import commit, load_task

logger = logging.getLogger(__name__)


def _blocker_ids(db: Session, task_id: int) -> list[int]:
    return list(
        db.scalars(
            select(TaskDependency.blocked_by_task_id).where(TaskDependency.task_id == task_id)
        )
    )


def depends_on(db: Session, task_id: int, other_id: int) -> bool:
    """True if ``task_id`` waits on ``other_id`` directly or through other tasks."""
    visited: set[int] = set()
    stack = [task_id]
    while stack:
        current = stack.pop()
        if current in visited:
            continue
        visited.add(current)
        blockers = _blocker_ids(db, current)
        if other_id in blockers:
            return True
        stack.extend(blockers)
    return False


def add_dependency(
    db: Session, task_id: int, blocked_by_id: int, *, user_id: int | None = None
) -> TaskDependency:
    """Record that ``task_id`` is blocked by ``blocked_by_id``.

    Rejects self-dependencies, duplicates and edges that would close a cycle.
    """
    task = load_task(db, task_id, user_id=user_id)
    blocker = load_task(db, blocked_by_id, user_id=user_id)

    if task.id == blocker.id:
        raise InvalidArgumentError("A task cannot depend on itself")

    exists = db.scalars(
        select(TaskDependency.id).where(
            TaskDependency.task_id == task.id,
            TaskDependency.blocked_by_task_id == blocker.id,
        )
    ).first()
    if exists is not None:
        raise ConflictError("Dependency already exists")

    if depends_on(db, blocker.id, task.id):
        logger.warning(f"Rejected dependency {task.id} -> {blocker.id}: would create a cycle")
        raise InvalidArgumentError(
            f"This would create a circular dependency: task #{blocker.id} already "
            f"depends on task #{task.id} (directly or indirectly)"
        )

    edge = TaskDependency(task_id=task.id, blocked_by_task_id=blocker.id)
    db.add(edge)
    activity_log.record(
        db,
        task,
        TaskLogEvent.DEPENDENCY_ADDED,
        user_id=user_id,
        changes={"blocked_by_task_id": {"old": None, "new": blocker.id}},
    )
    # The unique pair is the source of truth when two requests race past the check
    commit(db, conflict_message="Dependency already exists")
    db.refresh(edge)

    logger.info(f"Task {task.id} is now blocked by task {blocker.id}")
    return edge


def remove_dependency(
    db: Session, task_id: int, blocked_by_id: int, *, user_id: int | None = None
) -> bool:
    """Drop the edge if present. Returns whether anything was removed."""
    task = load_task(db, task_id, user_id=user_id)
    edge = db.scalars(
        select(TaskDependency).where(
            TaskDependency.task_id == task.id,
            TaskDependency.blocked_by_task_id == blocked_by_id,
        )
    ).first()
    if edge is None:
        return False

    db.delete(edge)
    activity_log.record(
        db,
        task,
        TaskLogEvent.DEPENDENCY_REMOVED,
        user_id=user_id,
        changes={"blocked_by_task_id": {"old": blocked_by_id, "new": None}},
    )
    commit(db)
    logger.info(f"Task {task.id} is no longer blocked by task {blocked_by_id}")
    return True


def is_blocked(db: Session, task_id: int, *, user_id: int | None = None) -> bool:
    """True iff some blocking task is not done. Always read from the database."""
    load_task(db, task_id, user_id=user_id)
    open_blocker = db.scalars(
        select(TaskDependency.id)
        .join(Task, Task.id == TaskDependency.blocked_by_task_id)
        .where(TaskDependency.task_id == task_id, Task.status != TaskStatus.DONE.value)
    ).first()
    return open_blocker is not None


def blocked_by(db: Session, task_id: int, *, user_id: int | None = None) -> list[Task]:
    """Tasks that ``task_id`` is waiting on."""
    load_task(db, task_id, user_id=user_id)
    return list(
        db.scalars(
            select(Task)
            .join(TaskDependency, TaskDependency.blocked_by_task_id == Task.id)
            .where(TaskDependency.task_id == task_id)
            .order_by(Task.id)
        )
    )


def blocking(db: Session, task_id: int, *, user_id: int | None = None) -> list[Task]:
    """Tasks that are waiting on ``task_id``."""
    load_task(db, task_id, user_id=user_id)
    return list(
        db.scalars(
            select(Task)
            .join(TaskDependency, TaskDependency.task_id == Task.id)
            .where(TaskDependency.blocked_by_task_id == task_id)
            .order_by(Task.id)
        )
    )


def dependency_graph(db: Session, user_id: int) -> dict:
    """Nodes and edges of a user's tasks, plus any cycles already stored."""
    tasks = list(db.scalars(select(Task).where(Task.user_id == user_id).order_by(Task.id)))
    task_ids = {task.id for task in tasks}
    edges = [
        edge
        for edge in db.scalars(select(TaskDependency).order_by(TaskDependency.id))
        if edge.task_id in task_ids
    ]

    circular = [
        {
            "task_id": edge.task_id,
            "blocked_by_task_id": edge.blocked_by_task_id,
            "message": (
                f"Task #{edge.task_id} and Task #{edge.blocked_by_task_id} "
                "have circular dependency"
            ),
        }
        for edge in edges
        if depends_on(db, edge.blocked_by_task_id, edge.task_id)
    ]

    return {
        "nodes": [
            {"id": t.id, "label": t.title, "status": t.status, "priority": t.priority}
            for t in tasks
        ],
        "edges": [
            {"from": e.blocked_by_task_id, "to": e.task_id, "label": "blocks"} for e in edges
        ],
        "circular_dependencies": circular,
    }
