"""Database models."""

from app.models.task_label import TaskLabel, task_label_map
from app.models.task import RecurrenceType, Task, TaskPriority, TaskStatus
from app.models.task_dependency import TaskDependency
from app.models.task_log import TaskLog, TaskLogEvent

__all__ = [
    "Task",
    "TaskPriority",
    "TaskStatus",
    "RecurrenceType",
    "TaskDependency",
    "TaskLabel",
    "task_label_map",
    "TaskLog",
    "TaskLogEvent",
]
