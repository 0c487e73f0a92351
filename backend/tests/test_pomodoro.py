# tests/test_pomodoro.py

import pytest
from sqlalchemy import select

from app.core.errors import InvalidArgumentError
from app.models.task import Task
from app.models.task_log import TaskLog
from app.services.pomodoro import complete_pomodoro_session, suggest_pomodoro_count


@pytest.mark.parametrize(
    ("minutes", "priority", "expected"),
    [
        (60, "medium", 3),
        (100, "low", 4),
        (200, "medium", 10),
        (0, "medium", 1),
        (25, "high", 2),
    ],
)
def test_suggest_pomodoro_count(minutes, priority, expected) -> None:
    assert suggest_pomodoro_count(minutes, priority) == expected


def test_suggest_rejects_bad_input() -> None:
    with pytest.raises(InvalidArgumentError):
        suggest_pomodoro_count(-1)
    with pytest.raises(InvalidArgumentError):
        suggest_pomodoro_count(30, "urgent")


def test_session_counts_until_estimate_then_completes(db, clock, make_task) -> None:
    task = make_task(pomodoro_estimate=2, status="in_progress")

    first = complete_pomodoro_session(db, task.id, clock=clock)
    assert (first.pomodoro_completed, first.done) == (1, False)
    assert first.pomodoro_progress == 50.0

    second = complete_pomodoro_session(db, task.id, clock=clock)
    assert (second.pomodoro_completed, second.status, second.done) == (2, "done", True)
    assert second.previous_status == "in_progress"

    events = [log.event_type for log in db.scalars(select(TaskLog).where(TaskLog.task_id == task.id))]
    assert events == ["created", "updated", "completed"]


def test_session_without_estimate_never_completes(db, clock, make_task) -> None:
    task = make_task()

    updated = complete_pomodoro_session(db, task.id, clock=clock)

    assert updated.pomodoro_completed == 1
    assert updated.done is False
    assert updated.pomodoro_progress == 0.0


def test_auto_completion_spawns_recurring_successor(db, clock, make_task) -> None:
    task = make_task(pomodoro_estimate=1, recurrence_type="daily")

    complete_pomodoro_session(db, task.id, clock=clock)

    successors = list(db.scalars(select(Task).where(Task.id != task.id)))
    assert len(successors) == 1
    assert successors[0].pomodoro_completed == 0
