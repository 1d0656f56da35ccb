"""
Fixtures for the client-side sync layer: a small in-memory board state
"""
import uuid
import pytest

from taskflow.core.enums import Role
from taskflow.schemas.profile import ProfileResponse
from taskflow.sync import BoardMember, BoardState, Column, Task


@pytest.fixture
def make_task():
    def factory(board_id, column_id, title, position, **fields):
        return Task(
            id=fields.pop("id", uuid.uuid4()),
            board_id=board_id,
            column_id=column_id,
            title=title,
            position=position,
            created_by=fields.pop("created_by", uuid.uuid4()),
            **fields,
        )
    return factory


@pytest.fixture
def board(make_task):
    """To Do = [T1, T2], Doing = [T3], Done = [] and one editor member"""
    board_id = uuid.uuid4()
    todo_id, doing_id, done_id = uuid.uuid4(), uuid.uuid4(), uuid.uuid4()
    t1 = make_task(board_id, todo_id, "T1", 0)
    t2 = make_task(board_id, todo_id, "T2", 1)
    t3 = make_task(board_id, doing_id, "T3", 0)
    member_id = uuid.uuid4()
    member = BoardMember(
        id=uuid.uuid4(),
        board_id=board_id,
        user_id=member_id,
        role=Role.EDITOR,
        profile=ProfileResponse(id=member_id, email="member@example.com", full_name="Mia Member"),
    )
    state = BoardState(
        columns=[
            Column(id=todo_id, board_id=board_id, title="To Do", position=0, tasks=[t1, t2]),
            Column(id=doing_id, board_id=board_id, title="Doing", position=1, tasks=[t3]),
            Column(id=done_id, board_id=board_id, title="Done", position=2, tasks=[]),
        ],
        members=[member],
    )
    return {
        'board_id': board_id,
        'state': state,
        'todo': todo_id,
        'doing': doing_id,
        'done': done_id,
        't1': t1,
        't2': t2,
        't3': t3,
        'member': member,
    }
