"""
Board controller: user gestures as optimistic actions confirmed by the board store
"""
import uuid
from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

from taskflow.core.enums import Role
from taskflow.core.logging import get_context_logger
from taskflow.sync.actions import (
    AddColumn, AddMember, AddTask, BoardPatch, ColumnPatch, DeleteColumn, DeleteTask,
    MoveTask, RemoveMember, ReorderColumn, TaskPatch, UpdateBoard, UpdateColumn, UpdateTask,
    invert_column_patch, invert_column_reorder, invert_move, invert_task_patch,
)
from taskflow.sync.executor import ErrorNotice, OptimisticExecutor
from taskflow.sync.reducer import apply, clamp
from taskflow.sync.results import BoardStoreClient, error_from_exception
from taskflow.sync.state import Column, Task
from taskflow.sync.store import BoardStateStore


class BoardController:
    """Every mutating gesture on one board view.

    Methods return True once the board store confirmed the change and False
    when it was rejected (the local change is rolled back and ``on_error``
    receives a notice) or could not be attempted.
    """

    def __init__(
        self,
        board_id: UUID,
        user_id: UUID,
        store: BoardStateStore,
        client: BoardStoreClient,
        on_error: Optional[ErrorNotice] = None,
    ):
        self.board_id = board_id
        self.user_id = user_id
        self.store = store
        self.client = client
        self.executor = OptimisticExecutor(store, on_error)
        self.logger = get_context_logger(__name__, board_id=str(board_id), user_id=str(user_id))

    # Tasks

    async def move_task(self, task_id: UUID, from_column_id: UUID, to_column_id: UUID,
                        from_index: int, to_index: int) -> bool:
        """The origin is taken from local state; a stale ``from_column_id``/``from_index`` is corrected"""
        found = self.store.state.locate_task(task_id)
        destination = self.store.state.get_column(to_column_id)
        if found is None or destination is None:
            self.logger.debug(f"Move ignored: task {task_id} or column {to_column_id} is not on the board")
            return False

        source, current_index = found
        if source.id != from_column_id or current_index != from_index:
            self.logger.debug(f"Stale move origin for task {task_id}, using {source.id}:{current_index}")
        if source.id == destination.id:
            to_index = clamp(to_index, len(source.tasks) - 1)
        else:
            to_index = clamp(to_index, len(destination.tasks))

        action = MoveTask(
            task_id=task_id,
            from_column_id=source.id,
            to_column_id=destination.id,
            from_index=current_index,
            to_index=to_index,
        )
        return await self.executor.execute(
            action,
            invert_move(action),
            lambda: self.client.move_task(task_id, to_column_id, to_index),
            "Failed to move task",
        )

    async def create_task(self, column_id: UUID, title: str, position: Optional[int] = None) -> Optional[UUID]:
        """Returns the new task's id, or None when the create was rejected"""
        column = self.store.state.get_column(column_id)
        if column is None:
            self.logger.debug(f"Create task ignored: column {column_id} is not on the board")
            return None

        now = datetime.now(timezone.utc)
        task = Task(
            id=uuid.uuid4(),
            board_id=self.board_id,
            column_id=column_id,
            title=title.strip(),
            position=len(column.tasks) if position is None else position,
            created_by=self.user_id,
            created_at=now,
            updated_at=now,
        )
        confirmed = await self.executor.execute(
            AddTask(task=task),
            DeleteTask(task_id=task.id, column_id=column_id),
            lambda: self.client.create_task(column_id, self.board_id, task.title, task_id=task.id, position=position),
            "Failed to create task",
        )
        return task.id if confirmed else None

    async def update_task(self, patch: TaskPatch) -> bool:
        task = self.store.state.get_task(patch.id)
        inverse = invert_task_patch(task, patch) if task is not None else None
        return await self.executor.execute(
            UpdateTask(patch=patch),
            inverse,
            lambda: self.client.update_task(patch.id, patch),
            "Failed to update task",
        )

    async def delete_task(self, task_id: UUID) -> bool:
        found = self.store.state.locate_task(task_id)
        if found is None:
            self.logger.debug(f"Delete task ignored: task {task_id} is not on the board")
            return False
        column, index = found
        task = column.tasks[index]
        return await self.executor.execute(
            DeleteTask(task_id=task_id, column_id=column.id),
            AddTask(task=task),
            lambda: self.client.delete_task(task_id),
            "Failed to delete task",
        )

    # Columns

    async def create_column(self, title: str, color: Optional[str] = None) -> Optional[UUID]:
        """Returns the new column's id, or None when the create was rejected"""
        now = datetime.now(timezone.utc)
        column = Column(
            id=uuid.uuid4(),
            board_id=self.board_id,
            title=title.strip(),
            color=color,
            position=len(self.store.state.columns),
            tasks=[],
            created_at=now,
            updated_at=now,
        )
        confirmed = await self.executor.execute(
            AddColumn(column=column),
            DeleteColumn(column_id=column.id),
            lambda: self.client.create_column(self.board_id, column.title, column_id=column.id, color=color),
            "Failed to create column",
        )
        return column.id if confirmed else None

    async def update_column(self, patch: ColumnPatch) -> bool:
        column = self.store.state.get_column(patch.id)
        inverse = invert_column_patch(column, patch) if column is not None else None
        return await self.executor.execute(
            UpdateColumn(patch=patch),
            inverse,
            lambda: self.client.update_column(patch.id, patch),
            "Failed to update column",
        )

    async def rename_column(self, column_id: UUID, title: str) -> bool:
        return await self.update_column(ColumnPatch(id=column_id, title=title))

    async def delete_column(self, column_id: UUID) -> bool:
        # no inverse: the executor restores the pre-delete snapshot
        return await self.executor.execute(
            DeleteColumn(column_id=column_id),
            None,
            lambda: self.client.delete_column(column_id),
            "Failed to delete column",
        )

    async def reorder_columns(self, from_index: int, to_index: int) -> bool:
        columns = self.store.state.columns
        if not (0 <= from_index < len(columns) and 0 <= to_index < len(columns)):
            self.logger.debug(f"Column reorder ignored: {from_index} -> {to_index} out of range")
            return False

        action = ReorderColumn(column_id=columns[from_index].id, from_index=from_index, to_index=to_index)
        ordered_ids = [column.id for column in apply(self.store.state, action).columns]
        return await self.executor.execute(
            action,
            invert_column_reorder(action),
            lambda: self.client.reorder_columns(self.board_id, ordered_ids),
            "Failed to reorder columns",
        )

    # Board and members

    async def update_board(self, patch: BoardPatch) -> bool:
        return await self.executor.execute(
            UpdateBoard(patch=patch),
            None,
            lambda: self.client.update_board(self.board_id, patch),
            "Failed to update board",
        )

    async def add_member(self, email: str, role: Role = Role.VIEWER) -> bool:
        """Not optimistic: the member's profile is only known once the server resolves the email"""
        try:
            result = await self.client.add_member(self.board_id, email, Role(role).value)
            error = result.error
        except Exception as e:
            error = error_from_exception(e)
        if error is not None:
            self.logger.info(f"Add member rejected: {error.kind.value} {error.message}")
            self.executor.on_error("Failed to add member")
            return False
        self.store.dispatch(AddMember(member=result.data))
        return True

    async def remove_member(self, user_id: UUID) -> bool:
        member = self.store.state.get_member(user_id)
        return await self.executor.execute(
            RemoveMember(user_id=user_id),
            AddMember(member=member) if member is not None else None,
            lambda: self.client.remove_member(self.board_id, user_id),
            "Failed to remove member",
        )
