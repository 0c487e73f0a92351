"""Pydantic schemas for task dependencies."""

from datetime import datetime

from pydantic import BaseModel

from app.schemas.task import TaskSummary


class DependencyCreate(BaseModel):
    blocked_by_task_id: int


class DependencyResponse(BaseModel):
    """Confirmation of a stored blocked-by edge."""

    id: int
    task_id: int
    blocked_by_task_id: int
    created_at: datetime

    class Config:
        from_attributes = True


class DependencyListResponse(BaseModel):
    blocked_by: list[TaskSummary]
    blocking: list[TaskSummary]
    is_blocked: bool


class BlockedResponse(BaseModel):
    task_id: int
    is_blocked: bool


class GraphNode(BaseModel):
    id: int
    label: str
    status: str
    priority: str


class CircularDependency(BaseModel):
    task_id: int
    blocked_by_task_id: int
    message: str


class DependencyGraphResponse(BaseModel):
    nodes: list[GraphNode]
    edges: list[dict]
    circular_dependencies: list[CircularDependency]
