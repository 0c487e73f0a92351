# tests/test_tasks.py

from datetime import date, datetime

import pytest
from sqlalchemy import select

from app.core.errors import ConflictError, InvalidArgumentError, NotFoundError
from app.models.task import Task
from app.models.task_log import TaskLog
from app.services import labels
from app.services import tasks as task_service
from app.services.status import toggle


def test_create_task_defaults(make_task) -> None:
    task = make_task(title="Plan week")

    assert task.status == "backlog"
    assert task.done is False
    assert task.priority == "medium"
    assert task.recurrence_type == "none"
    assert task.recurrence_interval == 1
    assert task.pomodoro_completed == 0
    assert task.is_recurring is False


def test_create_done_task_keeps_flag_in_sync(make_task, clock) -> None:
    task = make_task(status="done")

    assert task.done is True
    assert task.completed_at == clock.now()


def test_create_suggests_pomodoro_estimate(make_task) -> None:
    task = make_task(estimated_minutes=60)

    assert task.pomodoro_estimate == 3


@pytest.mark.parametrize(
    "fields",
    [
        {"priority": "urgent"},
        {"status": "archived"},
        {"recurrence_type": "yearly"},
        {"recurrence_interval": 0},
        {"estimated_minutes": -5},
        {"due_at": datetime(2025, 3, 1), "recurrence_end_date": date(2025, 2, 1)},
    ],
)
def test_create_rejects_invalid_fields(make_task, fields) -> None:
    with pytest.raises(InvalidArgumentError):
        make_task(**fields)


def test_moving_due_date_past_recurrence_end_is_rejected(db, clock, make_task) -> None:
    task = make_task(
        due_at=datetime(2025, 1, 10, 9),
        recurrence_type="weekly",
        recurrence_end_date=date(2025, 1, 31),
    )

    with pytest.raises(InvalidArgumentError):
        task_service.update_task(db, task.id, {"due_at": datetime(2025, 2, 3, 9)}, clock=clock)
    with pytest.raises(InvalidArgumentError):
        task_service.move_on_calendar(db, task.id, datetime(2025, 2, 3, 9), None, clock=clock)

    db.expire_all()
    assert db.get(Task, task.id).due_at == datetime(2025, 1, 10, 9)


def test_moving_due_date_inside_recurrence_window_is_accepted(db, clock, make_task) -> None:
    task = make_task(
        due_at=datetime(2025, 1, 10, 9),
        recurrence_type="weekly",
        recurrence_end_date=date(2025, 1, 31),
    )

    updated = task_service.update_task(db, task.id, {"due_at": datetime(2025, 1, 20, 9)}, clock=clock)

    assert updated.due_at == datetime(2025, 1, 20, 9)


def test_other_users_task_is_not_found(db, clock, make_task) -> None:
    theirs = make_task(user_id=2)

    with pytest.raises(NotFoundError):
        task_service.get_task(db, theirs.id, user_id=1)
    with pytest.raises(NotFoundError):
        task_service.update_task(db, theirs.id, {"title": "Mine now"}, clock=clock, user_id=1)
    with pytest.raises(NotFoundError):
        task_service.delete_task(db, theirs.id, user_id=1)
    with pytest.raises(NotFoundError):
        toggle(db, theirs.id, clock=clock, user_id=1)

    assert task_service.get_task(db, theirs.id, user_id=2).title == "Task"


def test_subtask_inherits_type_and_starts_in_backlog(db, clock, make_task) -> None:
    parent = make_task(task_type="study", status="in_progress")

    child = task_service.create_subtask(db, parent.id, {"title": "Read chapter"}, clock=clock)

    assert child.parent_task_id == parent.id
    assert child.task_type == "study"
    assert child.status == "backlog"


def test_deleting_parent_removes_subtasks(db, clock, make_task) -> None:
    parent = make_task()
    child = task_service.create_subtask(db, parent.id, {"title": "Child"}, clock=clock)
    child_id = child.id

    task_service.delete_task(db, parent.id)

    assert db.scalars(select(Task).where(Task.id == child_id)).first() is None


def test_delete_unknown_task(db) -> None:
    with pytest.raises(NotFoundError):
        task_service.delete_task(db, 123)


def test_list_tasks_filters_and_paginates(db, make_task) -> None:
    make_task(title="Buy milk", priority="low", due_at=datetime(2025, 1, 12))
    make_task(title="Write tests", priority="high", due_at=datetime(2025, 1, 11))
    make_task(title="Buy bread", priority="high", due_at=datetime(2025, 1, 15))

    tasks, total = task_service.list_tasks(db, user_id=1, search="Buy")
    assert total == 2
    assert [t.title for t in tasks] == ["Buy milk", "Buy bread"]

    tasks, total = task_service.list_tasks(db, user_id=1, priority="high", limit=1)
    assert total == 2
    assert [t.title for t in tasks] == ["Write tests"]


def test_today_orders_by_priority(db, clock, make_task) -> None:
    make_task(title="low", priority="low", due_at=datetime(2025, 1, 10, 9))
    make_task(title="high", priority="high", due_at=datetime(2025, 1, 10, 15))
    make_task(title="tomorrow", priority="high", due_at=datetime(2025, 1, 11, 9))

    today = task_service.today_tasks(db, user_id=1, clock=clock)

    assert [t.title for t in today] == ["high", "low"]


def test_kanban_groups_every_status(db, make_task) -> None:
    make_task(title="a", status="next")
    make_task(title="b", status="blocked")

    board = task_service.kanban_board(db, user_id=1)

    assert list(board) == ["backlog", "next", "in_progress", "blocked", "done"]
    assert [t.title for t in board["next"]] == ["a"]
    assert [t.title for t in board["blocked"]] == ["b"]


def test_timeline_groups_by_day_and_respects_order(db, clock, make_task) -> None:
    first = make_task(title="first", due_at=datetime(2025, 1, 13, 18))
    second = make_task(title="second", due_at=datetime(2025, 1, 13, 8))
    make_task(title="other day", due_at=datetime(2025, 1, 14, 8))

    task_service.reorder_timeline(db, {first.id: 0, second.id: 1}, user_id=1, clock=clock)
    days = task_service.timeline(
        db, user_id=1, start=datetime(2025, 1, 13), end=datetime(2025, 1, 20)
    )

    assert list(days) == ["2025-01-13", "2025-01-14"]
    assert [t.title for t in days["2025-01-13"]] == ["first", "second"]


def test_reorder_unknown_task_changes_nothing(db, clock, make_task) -> None:
    task = make_task()
    other = make_task(title="Other")

    with pytest.raises(NotFoundError):
        task_service.reorder_timeline(db, {task.id: 3, 999: 1}, user_id=1, clock=clock)
    # The next unit of work on the same session commits
    toggle(db, other.id, clock=clock)
    db.expire_all()

    assert db.get(Task, task.id).timeline_order is None
    events = db.scalars(select(TaskLog.event_type).where(TaskLog.task_id == task.id)).all()
    assert events == ["created"]


def test_reorder_rejects_another_users_task(db, clock, make_task) -> None:
    mine = make_task()
    theirs = make_task(user_id=2)

    with pytest.raises(NotFoundError):
        task_service.reorder_timeline(db, {mine.id: 1, theirs.id: 2}, user_id=1, clock=clock)

    db.expire_all()
    assert db.get(Task, mine.id).timeline_order is None


def test_move_on_calendar(db, clock, make_task) -> None:
    task = make_task(due_at=datetime(2025, 1, 10, 9))

    moved = task_service.move_on_calendar(
        db, task.id, datetime(2025, 1, 20, 9), datetime(2025, 1, 19, 9), clock=clock
    )

    assert moved.due_at == datetime(2025, 1, 20, 9)
    assert moved.start_date == datetime(2025, 1, 19, 9)


def test_task_stats(db, clock, make_task) -> None:
    make_task(status="done", due_at=datetime(2025, 1, 9))
    make_task(status="next", due_at=datetime(2025, 1, 9))
    make_task(status="in_progress", due_at=datetime(2025, 1, 12))

    stats = task_service.task_stats(db, user_id=1, clock=clock)

    assert stats["total"] == 3
    assert stats["done"] == 1
    assert stats["backlog"] == 0
    assert stats["overdue"] == 1
    assert stats["upcoming_deadlines"] == 1


def test_label_names_are_unique_per_user(db) -> None:
    labels.create_label(db, "work", "#112233", user_id=1)

    with pytest.raises(ConflictError):
        labels.create_label(db, "work", "#445566", user_id=1)
    labels.create_label(db, "work", "#445566", user_id=2)


def test_label_color_must_be_hex(db) -> None:
    with pytest.raises(InvalidArgumentError):
        labels.create_label(db, "bad", "red", user_id=1)


def test_attach_label_twice_is_a_conflict(db, clock, make_task) -> None:
    task = make_task()
    label = labels.create_label(db, "home", "#00AA00", user_id=1)
    labels.attach_label(db, task.id, label.id, user_id=1, clock=clock)

    with pytest.raises(ConflictError):
        labels.attach_label(db, task.id, label.id, user_id=1, clock=clock)

    assert [t.id for t in labels.tasks_for_label(db, label.id, user_id=1)] == [task.id]


def test_deleting_label_detaches_it(db, clock, make_task) -> None:
    task = make_task()
    label = labels.create_label(db, "home", "#00AA00", user_id=1)
    labels.attach_label(db, task.id, label.id, user_id=1, clock=clock)

    labels.delete_label(db, label.id, user_id=1)

    assert db.get(Task, task.id).labels == []
    assert labels.list_labels(db, user_id=1) == []
