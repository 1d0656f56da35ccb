"""
Shared fixtures: an in-memory SQLite database per test and a seeded board
"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("LOG_FORMAT", "text")

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from taskflow.core.database import Base
from taskflow import models  # noqa: F401
from taskflow.models import Board, BoardMember, Column, Profile, Role, Task
from taskflow.services.change_notifier import ChangeNotifier


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def change_notifier():
    """Isolated notifier so tests never see each other's events"""
    return ChangeNotifier()


@pytest.fixture
async def test_data(db_session: AsyncSession):
    """Owner, editor, viewer and outsider profiles plus a board with two columns.

    "To Do" holds three tasks at positions 0..2, "Doing" holds one.
    """
    owner = Profile(email="owner@example.com", full_name="Olive Owner")
    editor = Profile(email="editor@example.com", full_name="Eddie Editor")
    viewer = Profile(email="viewer@example.com", full_name="Vera Viewer")
    outsider = Profile(email="outsider@example.com", full_name="Otto Outsider")
    db_session.add_all([owner, editor, viewer, outsider])
    await db_session.flush()

    board = Board(title="Launch", created_by=owner.id)
    db_session.add(board)
    await db_session.flush()

    db_session.add_all([
        BoardMember(board_id=board.id, user_id=owner.id, role=Role.OWNER.value),
        BoardMember(board_id=board.id, user_id=editor.id, role=Role.EDITOR.value),
        BoardMember(board_id=board.id, user_id=viewer.id, role=Role.VIEWER.value),
    ])

    todo = Column(board_id=board.id, title="To Do", position=0, color="#6366f1")
    doing = Column(board_id=board.id, title="Doing", position=1, color="#f59e0b")
    db_session.add_all([todo, doing])
    await db_session.flush()

    tasks = [
        Task(board_id=board.id, column_id=todo.id, title=f"Task {i}", position=i, created_by=owner.id)
        for i in range(3)
    ]
    started = Task(board_id=board.id, column_id=doing.id, title="Started", position=0, created_by=owner.id)
    db_session.add_all(tasks + [started])
    await db_session.commit()

    return {
        'owner': owner,
        'editor': editor,
        'viewer': viewer,
        'outsider': outsider,
        'board': board,
        'todo': todo,
        'doing': doing,
        'tasks': tasks,
        'started': started,
    }
