"""Session helpers shared by the task services."""

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.errors import ConflictError, NotFoundError, StorageFailureError
from app.models.task import Task

logger = logging.getLogger(__name__)


def load_task(
    db: Session, task_id: int, *, user_id: int | None = None, lock: bool = False
) -> Task:
    """Fetch a task or raise NotFoundError.

    With ``user_id`` a task owned by someone else is reported as missing.
    With ``lock`` the row is read ``FOR UPDATE`` so a status read-modify-write
    cannot interleave with another one on the same task.
    """
    query = select(Task).where(Task.id == task_id)
    if user_id is not None:
        query = query.where(Task.user_id == user_id)
    if lock:
        query = query.with_for_update()
    task = db.scalars(query).first()
    if task is None:
        raise NotFoundError(f"Task with id {task_id} not found")
    return task


def commit(db: Session, *, conflict_message: str | None = None) -> None:
    """Commit the session, translating storage errors into core errors.

    A unique constraint violation becomes ConflictError when the caller
    expects one (``conflict_message``); everything else is a storage failure.
    """
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        if conflict_message is not None:
            raise ConflictError(conflict_message) from e
        logger.error(f"Integrity error on commit: {e}")
        raise StorageFailureError("Database constraint violated") from e
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Database error on commit: {e}", exc_info=True)
        raise StorageFailureError("Database transaction failed") from e
