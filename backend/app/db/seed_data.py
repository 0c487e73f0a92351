"""Seed the database with sample tasks, labels and dependencies."""

import logging
from datetime import timedelta

from sqlalchemy import delete

from app.core.clock import SystemClock
from app.core.settings import get_settings
from app.db.base import SessionLocal
from app.db.init_db import init_db
from app.models.task import RecurrenceType, Task, TaskPriority, TaskStatus
from app.models.task_label import TaskLabel
from app.services import dependencies, labels, tasks

logger = logging.getLogger(__name__)


def seed_tasks() -> None:
    """Replace all tasks with a small sample board."""
    init_db()
    db = SessionLocal()
    clock = SystemClock()
    user_id = get_settings().default_user_id

    try:
        # Clear existing data; edges, label assignments and logs cascade
        db.execute(delete(Task))
        db.execute(delete(TaskLabel))
        db.commit()

        now = clock.now()
        today = now.replace(hour=0, minute=0, second=0, microsecond=0)

        samples = [
            {
                "title": "Morning review",
                "priority": TaskPriority.MEDIUM,
                "task_type": "personal",
                "due_at": today + timedelta(hours=8),
                "estimated_minutes": 15,
                "recurrence_type": RecurrenceType.DAILY,
            },
            {
                "title": "Draft project proposal",
                "description": "Outline scope and milestones",
                "priority": TaskPriority.HIGH,
                "status": TaskStatus.IN_PROGRESS,
                "due_at": today + timedelta(days=1, hours=17),
                "estimated_minutes": 120,
            },
            {
                "title": "Send proposal to team",
                "priority": TaskPriority.HIGH,
                "status": TaskStatus.NEXT,
                "due_at": today + timedelta(days=2, hours=10),
                "estimated_minutes": 10,
            },
            {
                "title": "Pay rent",
                "priority": TaskPriority.HIGH,
                "task_type": "personal",
                "due_at": today.replace(day=1) + timedelta(hours=9),
                "recurrence_type": RecurrenceType.MONTHLY,
            },
            {
                "title": "Weekly study session",
                "priority": TaskPriority.MEDIUM,
                "task_type": "study",
                "due_at": today + timedelta(days=3, hours=19),
                "estimated_minutes": 90,
                "recurrence_type": RecurrenceType.WEEKLY,
            },
            {
                "title": "Clean up old notes",
                "priority": TaskPriority.LOW,
                "due_at": today + timedelta(days=10),
            },
        ]
        created = [tasks.create_task(db, data, clock=clock, user_id=user_id) for data in samples]

        # Sending the proposal waits on drafting it
        dependencies.add_dependency(db, created[2].id, created[1].id, user_id=user_id)

        urgent = labels.create_label(db, "urgent", "#E53E3E", user_id=user_id)
        labels.attach_label(db, created[1].id, urgent.id, user_id=user_id, clock=clock)

        logger.info(f"Successfully seeded {len(created)} sample tasks")
    finally:
        db.close()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    seed_tasks()
