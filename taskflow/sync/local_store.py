"""
In-process board store client backed by the service layer
"""
import logging
from typing import Awaitable, Callable, List, Optional
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession

from taskflow.core.enums import Role
from taskflow.schemas.board import BoardUpdate, MemberCreate
from taskflow.schemas.column import ColumnCreate, ColumnUpdate
from taskflow.schemas.task import TaskCreate, TaskUpdate
from taskflow.services.board_service import BoardService
from taskflow.services.change_notifier import ChangeNotifier
from taskflow.services.kanban_service import KanbanService
from taskflow.sync.actions import BoardPatch, ColumnPatch, TaskPatch
from taskflow.sync.results import StoreResult, error_from_exception
from taskflow.sync.state import BoardState

logger = logging.getLogger(__name__)


class ServiceBoardStore:
    """Runs each call in its own session as ``user_id``"""

    def __init__(self, session_factory, user_id: UUID, notifier: Optional[ChangeNotifier] = None):
        self.session_factory = session_factory
        self.user_id = user_id
        self.notifier = notifier

    async def _run(self, operation: Callable[[AsyncSession], Awaitable]) -> StoreResult:
        try:
            async with self.session_factory() as db:
                return StoreResult.success(await operation(db))
        except Exception as e:
            error = error_from_exception(e)
            logger.info(f"Board store call failed: {error.kind.value} {error.message}")
            return StoreResult(error=error)

    def _kanban(self, db: AsyncSession) -> KanbanService:
        return KanbanService(db, self.notifier)

    def _boards(self, db: AsyncSession) -> BoardService:
        return BoardService(db, self.notifier)

    async def fetch_board_aggregate(self, board_id: UUID) -> StoreResult[BoardState]:
        async def operation(db):
            aggregate = await self._boards(db).get_board_aggregate(board_id, self.user_id)
            return BoardState.from_aggregate(aggregate)
        return await self._run(operation)

    async def create_task(self, column_id: UUID, board_id: UUID, title: str,
                          task_id: Optional[UUID] = None, position: Optional[int] = None):
        # the column determines the board server-side
        async def operation(db):
            data = TaskCreate(id=task_id, title=title, position=position)
            return await self._kanban(db).create_task(column_id, self.user_id, data)
        return await self._run(operation)

    async def update_task(self, task_id: UUID, patch: TaskPatch):
        async def operation(db):
            return await self._kanban(db).update_task(task_id, self.user_id, TaskUpdate(**patch.changes()))
        return await self._run(operation)

    async def move_task(self, task_id: UUID, target_column_id: UUID, new_position: int):
        async def operation(db):
            await self._kanban(db).move_task(task_id, target_column_id, new_position, self.user_id)
            return True
        return await self._run(operation)

    async def delete_task(self, task_id: UUID):
        async def operation(db):
            return await self._kanban(db).delete_task(task_id, self.user_id)
        return await self._run(operation)

    async def create_column(self, board_id: UUID, title: str, column_id: Optional[UUID] = None,
                            color: Optional[str] = None):
        async def operation(db):
            data = ColumnCreate(id=column_id, title=title, color=color)
            return await self._kanban(db).create_column(board_id, self.user_id, data)
        return await self._run(operation)

    async def update_column(self, column_id: UUID, patch: ColumnPatch):
        async def operation(db):
            return await self._kanban(db).update_column(column_id, self.user_id, ColumnUpdate(**patch.changes()))
        return await self._run(operation)

    async def delete_column(self, column_id: UUID):
        async def operation(db):
            return await self._kanban(db).delete_column(column_id, self.user_id)
        return await self._run(operation)

    async def reorder_columns(self, board_id: UUID, column_ids: List[UUID]):
        async def operation(db):
            await self._kanban(db).reorder_columns(board_id, self.user_id, column_ids)
            return True
        return await self._run(operation)

    async def update_board(self, board_id: UUID, patch: BoardPatch):
        async def operation(db):
            summary = await self._boards(db).update_board(board_id, self.user_id, BoardUpdate(**patch.changes()))
            return summary.model_dump(mode="json")
        return await self._run(operation)

    async def add_member(self, board_id: UUID, email: str, role: str = Role.VIEWER.value):
        async def operation(db):
            return await self._boards(db).add_member(board_id, self.user_id, MemberCreate(email=email, role=role))
        return await self._run(operation)

    async def remove_member(self, board_id: UUID, user_id: UUID):
        async def operation(db):
            return await self._boards(db).remove_member(board_id, self.user_id, user_id)
        return await self._run(operation)
