"""
Kanban service tests: task and column operations, permissions, activity and change events
"""
import uuid
import pytest
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from taskflow.core.exceptions import (
    DuplicateResourceError, InsufficientPermissionsError, ResourceNotFoundError, ValidationError
)
from taskflow.models import ActivityLog, Board, BoardMember, Column, Priority, Role, Task
from taskflow.schemas.column import ColumnCreate, ColumnUpdate
from taskflow.schemas.task import TaskCreate, TaskUpdate
from taskflow.services.kanban_service import KanbanService


@pytest.fixture
def events(change_notifier, test_data):
    received = []
    change_notifier.subscribe(test_data['board'].id, received.append)
    return received


@pytest.fixture
def service(db_session, change_notifier):
    return KanbanService(db_session, change_notifier)


async def column_titles(db: AsyncSession, column_id):
    result = await db.execute(select(Task.title).where(Task.column_id == column_id).order_by(Task.position))
    return list(result.scalars().all())


async def column_positions(db: AsyncSession, column_id):
    result = await db.execute(select(Task.position).where(Task.column_id == column_id).order_by(Task.position))
    return list(result.scalars().all())


@pytest.mark.asyncio
async def test_create_task_appends_with_max_plus_one_position(service, test_data, events):
    task = await service.create_task(test_data['todo'].id, test_data['editor'].id, TaskCreate(title="  Write docs "))

    assert task.title == "Write docs"
    assert task.position == 3
    assert task.column_id == test_data['todo'].id
    assert task.creator.email == "editor@example.com"
    assert [e.action.value for e in events] == ["TASK_CREATED"]


@pytest.mark.asyncio
async def test_create_task_keeps_client_generated_id_and_requested_position(service, db_session, test_data):
    task_id = uuid.uuid4()
    task = await service.create_task(
        test_data['todo'].id, test_data['owner'].id, TaskCreate(id=task_id, title="Urgent", position=0)
    )

    assert task.id == task_id
    assert task.position == 0
    assert await column_titles(db_session, test_data['todo'].id) == ["Urgent", "Task 0", "Task 1", "Task 2"]

    with pytest.raises(DuplicateResourceError):
        await service.create_task(test_data['todo'].id, test_data['owner'].id, TaskCreate(id=task_id, title="Again"))


@pytest.mark.asyncio
async def test_viewer_and_outsider_cannot_mutate(service, test_data):
    for profile in (test_data['viewer'], test_data['outsider']):
        with pytest.raises(InsufficientPermissionsError) as exc_info:
            await service.create_task(test_data['todo'].id, profile.id, TaskCreate(title="Nope"))
        assert exc_info.value.message == "Forbidden"
        assert exc_info.value.status_code == 403


@pytest.mark.asyncio
async def test_missing_column_and_task_raise_not_found(service, test_data):
    with pytest.raises(ResourceNotFoundError):
        await service.create_task(uuid.uuid4(), test_data['owner'].id, TaskCreate(title="Ghost"))
    with pytest.raises(ResourceNotFoundError):
        await service.move_task(uuid.uuid4(), test_data['todo'].id, 0, test_data['owner'].id)


@pytest.mark.asyncio
async def test_assignee_must_be_board_member(service, test_data):
    with pytest.raises(ValidationError):
        await service.create_task(
            test_data['todo'].id, test_data['owner'].id,
            TaskCreate(title="Assigned", assignee_id=test_data['outsider'].id)
        )

    task = await service.create_task(
        test_data['todo'].id, test_data['owner'].id,
        TaskCreate(title="Assigned", assignee_id=test_data['viewer'].id)
    )
    assert task.assignee.email == "viewer@example.com"


@pytest.mark.asyncio
async def test_update_task_applies_only_sent_fields(service, test_data, events):
    target = test_data['tasks'][0]

    updated = await service.update_task(
        target.id, test_data['editor'].id,
        TaskUpdate(priority=Priority.HIGH, labels=["bug", "bug", "ui"])
    )

    assert updated.title == "Task 0"
    assert updated.priority == Priority.HIGH
    assert updated.labels == ["bug", "ui"]
    assert events[-1].action.value == "TASK_UPDATED"


@pytest.mark.asyncio
async def test_move_task_within_column_rewrites_positions(service, db_session, test_data):
    last = test_data['tasks'][2]

    moved = await service.move_task(last.id, test_data['todo'].id, 0, test_data['editor'].id)

    assert moved.position == 0
    assert await column_titles(db_session, test_data['todo'].id) == ["Task 2", "Task 0", "Task 1"]
    assert await column_positions(db_session, test_data['todo'].id) == [0, 1, 2]


@pytest.mark.asyncio
async def test_move_task_across_columns_records_activity(service, db_session, test_data, events):
    first = test_data['tasks'][0]

    moved = await service.move_task(first.id, test_data['doing'].id, 0, test_data['owner'].id)

    assert moved.column_id == test_data['doing'].id
    assert await column_titles(db_session, test_data['todo'].id) == ["Task 1", "Task 2"]
    assert await column_titles(db_session, test_data['doing'].id) == ["Task 0", "Started"]
    assert await column_positions(db_session, test_data['doing'].id) == [0, 1]

    result = await db_session.execute(select(ActivityLog).where(ActivityLog.action == "TASK_MOVED"))
    log = result.scalar_one()
    assert log.activity_metadata["from_column"] == "To Do"
    assert log.activity_metadata["to_column"] == "Doing"
    assert events[-1].entity_id == first.id


@pytest.mark.asyncio
async def test_move_task_to_another_boards_column_is_rejected(service, db_session, test_data):
    other = Board(title="Other", created_by=test_data['owner'].id)
    db_session.add(other)
    await db_session.flush()
    db_session.add(BoardMember(board_id=other.id, user_id=test_data['owner'].id, role=Role.OWNER.value))
    foreign = Column(board_id=other.id, title="Elsewhere", position=0)
    db_session.add(foreign)
    await db_session.commit()

    with pytest.raises(ValidationError):
        await service.move_task(test_data['tasks'][0].id, foreign.id, 0, test_data['owner'].id)


@pytest.mark.asyncio
async def test_delete_task_closes_gap(service, db_session, test_data, events):
    await service.delete_task(test_data['tasks'][1].id, test_data['editor'].id)

    assert await column_titles(db_session, test_data['todo'].id) == ["Task 0", "Task 2"]
    assert await column_positions(db_session, test_data['todo'].id) == [0, 1]
    assert events[-1].action.value == "TASK_DELETED"


@pytest.mark.asyncio
async def test_create_column_appends_and_enforces_limit(service, db_session, test_data, monkeypatch):
    column = await service.create_column(
        test_data['board'].id, test_data['editor'].id, ColumnCreate(title="Review", color="#8b5cf6")
    )
    assert column.position == 2
    assert column.tasks == []

    from taskflow.config import settings
    monkeypatch.setattr(settings, "max_columns", 3)
    with pytest.raises(ValidationError):
        await service.create_column(test_data['board'].id, test_data['editor'].id, ColumnCreate(title="Done"))


@pytest.mark.asyncio
async def test_update_column_renames(service, test_data):
    column = await service.update_column(test_data['doing'].id, test_data['owner'].id, ColumnUpdate(title="Doing now"))
    assert column.title == "Doing now"
    assert [t.title for t in column.tasks] == ["Started"]


@pytest.mark.asyncio
async def test_delete_column_removes_tasks_and_renumbers_columns(service, db_session, test_data):
    await service.delete_column(test_data['todo'].id, test_data['owner'].id)

    result = await db_session.execute(select(Column.title, Column.position).where(Column.board_id == test_data['board'].id))
    assert result.all() == [("Doing", 0)]
    count = await db_session.execute(select(func.count(Task.id)).where(Task.board_id == test_data['board'].id))
    assert count.scalar_one() == 1


@pytest.mark.asyncio
async def test_reorder_columns_follows_id_list(service, test_data, events):
    todo, doing = test_data['todo'], test_data['doing']

    columns = await service.reorder_columns(test_data['board'].id, test_data['editor'].id, [doing.id, todo.id])

    assert [(c.title, c.position) for c in columns] == [("Doing", 0), ("To Do", 1)]
    assert events[-1].action.value == "COLUMN_REORDERED"

    with pytest.raises(ValidationError):
        await service.reorder_columns(test_data['board'].id, test_data['editor'].id, [doing.id])
