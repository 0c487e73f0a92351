"""Notifications the task core emits for other features to react to."""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TaskCompleted:
    """A task has just transitioned into ``done``."""

    task_id: int
    task_type: str
    parent_task_id: int | None
    completed_at: datetime


Handler = Callable[[TaskCompleted], None]

_handlers: list[Handler] = []


def subscribe(handler: Handler) -> Handler:
    """Register a completion handler. Usable as a decorator."""
    if handler not in _handlers:
        _handlers.append(handler)
    return handler


def unsubscribe(handler: Handler) -> None:
    if handler in _handlers:
        _handlers.remove(handler)


def publish(event: TaskCompleted) -> None:
    """Deliver ``event`` to every handler; a failing handler does not stop the rest."""
    for handler in list(_handlers):
        try:
            handler(event)
        except Exception as e:
            logger.error(f"Completion handler {handler!r} failed for task {event.task_id}: {e}", exc_info=True)
