"""API endpoints for labels and label assignment."""

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from app.api.deps import get_current_user_id
from app.core.clock import Clock, get_clock
from app.db.base import get_db
from app.models.task import Task
from app.models.task_label import TaskLabel
from app.schemas.label import LabelCreate, LabelResponse, LabelUpdate
from app.schemas.task import TaskResponse
from app.services import labels

router = APIRouter()


@router.get("/labels", response_model=list[LabelResponse])
def list_labels(
    db: Session = Depends(get_db), user_id: int = Depends(get_current_user_id)
) -> list[TaskLabel]:
    return labels.list_labels(db, user_id=user_id)


@router.post("/labels", response_model=LabelResponse, status_code=status.HTTP_201_CREATED)
def create_label(
    payload: LabelCreate,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
) -> TaskLabel:
    return labels.create_label(db, payload.name, payload.color, user_id=user_id)


@router.patch("/labels/{label_id}", response_model=LabelResponse)
def update_label(
    label_id: int,
    payload: LabelUpdate,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
) -> TaskLabel:
    return labels.update_label(
        db, label_id, user_id=user_id, name=payload.name, color=payload.color
    )


@router.delete("/labels/{label_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_label(
    label_id: int,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
) -> Response:
    labels.delete_label(db, label_id, user_id=user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/labels/{label_id}/tasks", response_model=list[TaskResponse])
def label_tasks(
    label_id: int,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
) -> list[Task]:
    """Tasks carrying a label."""
    return labels.tasks_for_label(db, label_id, user_id=user_id)


@router.post("/tasks/{task_id}/labels/{label_id}", response_model=TaskResponse)
def attach_label(
    task_id: int,
    label_id: int,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    user_id: int = Depends(get_current_user_id),
) -> Task:
    return labels.attach_label(db, task_id, label_id, user_id=user_id, clock=clock)


@router.delete("/tasks/{task_id}/labels/{label_id}", response_model=TaskResponse)
def detach_label(
    task_id: int,
    label_id: int,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    user_id: int = Depends(get_current_user_id),
) -> Task:
    return labels.detach_label(db, task_id, label_id, user_id=user_id, clock=clock)
