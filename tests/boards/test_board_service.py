"""
Board service tests: boards, membership, aggregate and activity
"""
import uuid
import pytest
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from taskflow.core.exceptions import (
    DuplicateResourceError, InsufficientPermissionsError, ResourceNotFoundError, ValidationError
)
from taskflow.models import ActivityLog, Board, Column, Role, Task
from taskflow.schemas.board import BoardCreate, BoardUpdate, MemberCreate
from taskflow.schemas.profile import ProfileCreate
from taskflow.schemas.task import TaskCreate
from taskflow.services.board_service import BoardService
from taskflow.services.kanban_service import KanbanService


@pytest.fixture
def service(db_session, change_notifier):
    return BoardService(db_session, change_notifier)


@pytest.mark.asyncio
async def test_create_profile_normalizes_email_and_rejects_duplicates(service):
    profile = await service.create_profile(ProfileCreate(email="  New.Person@Example.com ", full_name="New"))
    assert profile.email == "new.person@example.com"

    with pytest.raises(DuplicateResourceError):
        await service.create_profile(ProfileCreate(email="new.person@example.com"))


@pytest.mark.asyncio
async def test_create_board_seeds_default_columns_and_owner(service, test_data):
    board = await service.create_board(test_data['editor'].id, BoardCreate(title="Roadmap"))

    assert [c.title for c in board.columns] == ["To Do", "In Progress", "Review", "Done"]
    assert [c.position for c in board.columns] == [0, 1, 2, 3]
    assert [c.color for c in board.columns] == ["#6366f1", "#f59e0b", "#8b5cf6", "#10b981"]
    assert len(board.members) == 1
    assert board.members[0].role == Role.OWNER
    assert board.members[0].profile.email == "editor@example.com"


@pytest.mark.asyncio
async def test_board_title_length_is_validated():
    with pytest.raises(ValueError):
        BoardCreate(title="x" * 51)
    with pytest.raises(ValueError):
        BoardCreate(title="   ")


@pytest.mark.asyncio
async def test_aggregate_nests_ordered_tasks_and_requires_membership(service, test_data):
    aggregate = await service.get_board_aggregate(test_data['board'].id, test_data['viewer'].id)

    todo = aggregate.columns[0]
    assert todo.title == "To Do"
    assert [t.title for t in todo.tasks] == ["Task 0", "Task 1", "Task 2"]
    assert {m.user_id for m in aggregate.members} == {
        test_data['owner'].id, test_data['editor'].id, test_data['viewer'].id
    }

    with pytest.raises(InsufficientPermissionsError):
        await service.get_board_aggregate(test_data['board'].id, test_data['outsider'].id)
    with pytest.raises(ResourceNotFoundError):
        await service.get_board_aggregate(uuid.uuid4(), test_data['owner'].id)


@pytest.mark.asyncio
async def test_list_boards_reports_role(service, test_data):
    boards = await service.list_boards(test_data['viewer'].id)
    assert [(b.title, b.role) for b in boards] == [("Launch", Role.VIEWER)]
    assert await service.list_boards(test_data['outsider'].id) == []


@pytest.mark.asyncio
async def test_update_board_by_editor_but_not_viewer(service, test_data):
    summary = await service.update_board(test_data['board'].id, test_data['editor'].id, BoardUpdate(description="Q3"))
    assert summary.description == "Q3"
    assert summary.title == "Launch"

    with pytest.raises(InsufficientPermissionsError):
        await service.update_board(test_data['board'].id, test_data['viewer'].id, BoardUpdate(title="Mine"))


@pytest.mark.asyncio
async def test_add_member_by_email(service, test_data):
    member = await service.add_member(
        test_data['board'].id, test_data['owner'].id, MemberCreate(email="Outsider@example.com", role=Role.EDITOR)
    )
    assert member.user_id == test_data['outsider'].id
    assert member.role == Role.EDITOR

    with pytest.raises(DuplicateResourceError):
        await service.add_member(test_data['board'].id, test_data['owner'].id, MemberCreate(email="outsider@example.com"))
    with pytest.raises(ResourceNotFoundError):
        await service.add_member(test_data['board'].id, test_data['owner'].id, MemberCreate(email="nobody@example.com"))


@pytest.mark.asyncio
async def test_only_owner_manages_members(service, test_data):
    with pytest.raises(InsufficientPermissionsError):
        await service.add_member(test_data['board'].id, test_data['editor'].id, MemberCreate(email="outsider@example.com"))
    with pytest.raises(InsufficientPermissionsError):
        await service.remove_member(test_data['board'].id, test_data['editor'].id, test_data['viewer'].id)


@pytest.mark.asyncio
async def test_member_role_cannot_be_owner():
    with pytest.raises(ValueError):
        MemberCreate(email="someone@example.com", role=Role.OWNER)


@pytest.mark.asyncio
async def test_remove_member_but_never_the_owner(service, test_data):
    assert await service.remove_member(test_data['board'].id, test_data['owner'].id, test_data['viewer'].id)

    with pytest.raises(ValidationError):
        await service.remove_member(test_data['board'].id, test_data['owner'].id, test_data['owner'].id)
    with pytest.raises(ResourceNotFoundError):
        await service.remove_member(test_data['board'].id, test_data['owner'].id, test_data['viewer'].id)


@pytest.mark.asyncio
async def test_delete_board_removes_everything(service, db_session: AsyncSession, test_data):
    with pytest.raises(InsufficientPermissionsError):
        await service.delete_board(test_data['board'].id, test_data['editor'].id)

    await service.delete_board(test_data['board'].id, test_data['owner'].id)

    for model in (Board, Column, Task, ActivityLog):
        result = await db_session.execute(select(func.count()).select_from(model))
        assert result.scalar_one() == 0


@pytest.mark.asyncio
async def test_activity_is_newest_first_with_descriptions(service, db_session, change_notifier, test_data):
    kanban = KanbanService(db_session, change_notifier)
    task = await kanban.create_task(test_data['todo'].id, test_data['owner'].id, TaskCreate(title="Ship it"))
    await kanban.move_task(task.id, test_data['doing'].id, 0, test_data['owner'].id)

    entries = await service.get_activity(test_data['board'].id, test_data['viewer'].id, limit=10)

    assert [e.action.value for e in entries] == ["TASK_MOVED", "TASK_CREATED"]
    assert entries[0].description == 'moved "Ship it" from To Do to Doing'
    assert entries[1].description == 'created task "Ship it"'
    assert entries[0].profile.email == "owner@example.com"

    with pytest.raises(InsufficientPermissionsError):
        await service.get_activity(test_data['board'].id, test_data['outsider'].id)
