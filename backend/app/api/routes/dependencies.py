"""API endpoints for blocked-by dependencies between tasks."""

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from app.api.deps import get_current_user_id
from app.db.base import get_db
from app.models.task_dependency import TaskDependency
from app.schemas.dependency import (
    BlockedResponse,
    DependencyCreate,
    DependencyGraphResponse,
    DependencyListResponse,
    DependencyResponse,
)
from app.services import dependencies

router = APIRouter()


@router.get("/tasks/dependencies/graph", response_model=DependencyGraphResponse)
def dependency_graph(
    db: Session = Depends(get_db), user_id: int = Depends(get_current_user_id)
) -> dict:
    """All of the user's tasks as a graph, with any circular dependencies."""
    return dependencies.dependency_graph(db, user_id)


@router.get("/tasks/{task_id}/dependencies", response_model=DependencyListResponse)
def list_dependencies(
    task_id: int,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
) -> DependencyListResponse:
    """Tasks this task waits on and tasks waiting on it."""
    return DependencyListResponse(
        blocked_by=dependencies.blocked_by(db, task_id, user_id=user_id),
        blocking=dependencies.blocking(db, task_id, user_id=user_id),
        is_blocked=dependencies.is_blocked(db, task_id, user_id=user_id),
    )


@router.post(
    "/tasks/{task_id}/dependencies",
    response_model=DependencyResponse,
    status_code=status.HTTP_201_CREATED,
)
def add_dependency(
    task_id: int,
    payload: DependencyCreate,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
) -> TaskDependency:
    """Mark a task as blocked by another task."""
    return dependencies.add_dependency(db, task_id, payload.blocked_by_task_id, user_id=user_id)


@router.delete(
    "/tasks/{task_id}/dependencies/{blocked_by_task_id}",
    status_code=status.HTTP_204_NO_CONTENT,
)
def remove_dependency(
    task_id: int,
    blocked_by_task_id: int,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
) -> Response:
    """Remove a dependency; removing a missing one succeeds."""
    dependencies.remove_dependency(db, task_id, blocked_by_task_id, user_id=user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/tasks/{task_id}/blocked", response_model=BlockedResponse)
def is_blocked(
    task_id: int,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
) -> BlockedResponse:
    """Whether any blocking task is still open."""
    return BlockedResponse(
        task_id=task_id, is_blocked=dependencies.is_blocked(db, task_id, user_id=user_id)
    )
