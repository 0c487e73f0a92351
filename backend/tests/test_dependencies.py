# tests/test_dependencies.py

import pytest
from sqlalchemy import func, or_, select

from app.core.errors import ConflictError, InvalidArgumentError, NotFoundError
from app.models.task_dependency import TaskDependency
from app.models.task_log import TaskLog
from app.services import dependencies
from app.services.status import set_status
from app.services.tasks import delete_task


def test_self_dependency_is_rejected(db, make_task) -> None:
    a = make_task(title="A")

    with pytest.raises(InvalidArgumentError):
        dependencies.add_dependency(db, a.id, a.id)


def test_duplicate_edge_is_a_conflict(db, make_task) -> None:
    a = make_task(title="A")
    b = make_task(title="B")
    dependencies.add_dependency(db, a.id, b.id)

    with pytest.raises(ConflictError):
        dependencies.add_dependency(db, a.id, b.id)

    count = db.scalar(select(func.count(TaskDependency.id)))
    assert count == 1


def test_unknown_endpoint_is_not_found(db, make_task) -> None:
    a = make_task(title="A")

    with pytest.raises(NotFoundError):
        dependencies.add_dependency(db, a.id, 999)
    with pytest.raises(NotFoundError):
        dependencies.add_dependency(db, 999, a.id)


def test_blocked_until_blocker_is_done(db, clock, make_task) -> None:
    a = make_task(title="A")
    b = make_task(title="B", status="in_progress")

    dependencies.add_dependency(db, a.id, b.id)
    assert dependencies.is_blocked(db, a.id) is True

    set_status(db, b.id, "done", clock=clock)
    assert dependencies.is_blocked(db, a.id) is False

    set_status(db, b.id, "next", clock=clock)
    assert dependencies.is_blocked(db, a.id) is True


def test_blocked_by_and_blocking_views(db, make_task) -> None:
    a = make_task(title="A")
    b = make_task(title="B")
    c = make_task(title="C")
    dependencies.add_dependency(db, a.id, b.id)
    dependencies.add_dependency(db, c.id, a.id)

    assert [t.title for t in dependencies.blocked_by(db, a.id)] == ["B"]
    assert [t.title for t in dependencies.blocking(db, a.id)] == ["C"]
    assert dependencies.blocked_by(db, b.id) == []


def test_indirect_cycle_is_rejected(db, make_task) -> None:
    a = make_task(title="A")
    b = make_task(title="B")
    c = make_task(title="C")
    dependencies.add_dependency(db, a.id, b.id)
    dependencies.add_dependency(db, b.id, c.id)

    with pytest.raises(InvalidArgumentError, match="circular"):
        dependencies.add_dependency(db, c.id, a.id)


def test_remove_dependency_is_idempotent(db, make_task) -> None:
    a = make_task(title="A")
    b = make_task(title="B")
    dependencies.add_dependency(db, a.id, b.id)

    assert dependencies.remove_dependency(db, a.id, b.id) is True
    assert dependencies.remove_dependency(db, a.id, b.id) is False
    assert dependencies.is_blocked(db, a.id) is False

    events = [log.event_type for log in db.scalars(select(TaskLog).where(TaskLog.task_id == a.id))]
    assert events.count("dependency_added") == 1
    assert events.count("dependency_removed") == 1


def test_remove_dependency_unknown_task(db) -> None:
    with pytest.raises(NotFoundError):
        dependencies.remove_dependency(db, 1, 2)


def test_deleting_task_removes_edges_and_logs(db, make_task) -> None:
    a = make_task(title="A")
    b = make_task(title="B")
    c = make_task(title="C")
    dependencies.add_dependency(db, a.id, b.id)
    dependencies.add_dependency(db, c.id, a.id)
    a_id = a.id

    delete_task(db, a_id)

    remaining_edges = db.scalar(
        select(func.count(TaskDependency.id)).where(
            or_(TaskDependency.task_id == a_id, TaskDependency.blocked_by_task_id == a_id)
        )
    )
    remaining_logs = db.scalar(select(func.count(TaskLog.id)).where(TaskLog.task_id == a_id))
    assert remaining_edges == 0
    assert remaining_logs == 0
    assert dependencies.is_blocked(db, c.id) is False


def test_dependency_graph_lists_nodes_and_edges(db, make_task) -> None:
    a = make_task(title="A")
    b = make_task(title="B")
    dependencies.add_dependency(db, a.id, b.id)

    graph = dependencies.dependency_graph(db, user_id=1)

    assert {node["label"] for node in graph["nodes"]} == {"A", "B"}
    assert graph["edges"] == [{"from": b.id, "to": a.id, "label": "blocks"}]
    assert graph["circular_dependencies"] == []


def test_dependency_graph_reports_stored_cycles(db, make_task) -> None:
    a = make_task(title="A")
    b = make_task(title="B")
    # Written directly, as data from before cycle checks existed would be
    db.add_all(
        [
            TaskDependency(task_id=a.id, blocked_by_task_id=b.id),
            TaskDependency(task_id=b.id, blocked_by_task_id=a.id),
        ]
    )
    db.commit()

    graph = dependencies.dependency_graph(db, user_id=1)

    assert len(graph["circular_dependencies"]) == 2


def test_other_users_tasks_cannot_be_linked(db, make_task) -> None:
    mine = make_task(title="Mine")
    theirs = make_task(title="Theirs", user_id=2)

    with pytest.raises(NotFoundError):
        dependencies.add_dependency(db, mine.id, theirs.id, user_id=1)
    with pytest.raises(NotFoundError):
        dependencies.is_blocked(db, theirs.id, user_id=1)

    assert db.scalar(select(func.count(TaskDependency.id))) == 0
