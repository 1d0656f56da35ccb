"""
Kanban Board Service
Handles column and task operations with server-authoritative positions
"""
import logging
from typing import List, Optional
from uuid import UUID
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from taskflow.config import settings
from taskflow.core.exceptions import (
    DuplicateResourceError, ResourceNotFoundError, ValidationError
)
from taskflow.core.enums import EDIT_ROLES
from taskflow.core.permissions import require_board_member
from taskflow.models.board import BoardMember
from taskflow.models.column import Column as ColumnModel
from taskflow.models.task import Task
from taskflow.schemas.activity import (
    ColumnCreatedMeta, ColumnDeletedMeta, ColumnReorderedMeta, ColumnUpdatedMeta,
    TaskCreatedMeta, TaskDeletedMeta, TaskMovedMeta, TaskUpdatedMeta,
)
from taskflow.schemas.column import ColumnCreate, ColumnResponse, ColumnUpdate
from taskflow.schemas.task import TaskCreate, TaskResponse, TaskUpdate
from taskflow.services import reindex
from taskflow.services.activity_service import publish_change, record_activity
from taskflow.services.change_notifier import ChangeNotifier, notifier as default_notifier

logger = logging.getLogger(__name__)


class KanbanService:
    """Service for managing columns and tasks of a board"""

    def __init__(self, db: AsyncSession, notifier: Optional[ChangeNotifier] = None):
        self.db = db
        self.notifier = notifier or default_notifier

    # Lookups

    async def _get_column(self, column_id: UUID) -> ColumnModel:
        column = await self.db.get(ColumnModel, column_id)
        if not column:
            raise ResourceNotFoundError("Column")
        return column

    async def _get_task(self, task_id: UUID) -> Task:
        task = await self.db.get(Task, task_id)
        if not task:
            raise ResourceNotFoundError("Task")
        return task

    async def _load_task(self, task_id: UUID) -> TaskResponse:
        result = await self.db.execute(
            select(Task)
            .options(selectinload(Task.assignee), selectinload(Task.creator))
            .where(Task.id == task_id)
            .execution_options(populate_existing=True)
        )
        return TaskResponse.model_validate(result.scalar_one())

    async def _load_column(self, column_id: UUID) -> ColumnResponse:
        result = await self.db.execute(
            select(ColumnModel)
            .options(
                selectinload(ColumnModel.tasks).selectinload(Task.assignee),
                selectinload(ColumnModel.tasks).selectinload(Task.creator),
            )
            .where(ColumnModel.id == column_id)
            .execution_options(populate_existing=True)
        )
        return ColumnResponse.model_validate(result.scalar_one())

    async def _check_assignee(self, board_id: UUID, assignee_id: Optional[UUID]) -> None:
        if assignee_id is None:
            return
        result = await self.db.execute(
            select(BoardMember.id).where(
                BoardMember.board_id == board_id,
                BoardMember.user_id == assignee_id
            )
        )
        if result.scalar_one_or_none() is None:
            raise ValidationError("Assignee must be a board member", details={"assignee_id": str(assignee_id)})

    async def _commit(self) -> None:
        try:
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

    # Tasks

    async def create_task(self, column_id: UUID, user_id: UUID, data: TaskCreate) -> TaskResponse:
        """Create a task, appended to the column unless a position is given"""
        column = await self._get_column(column_id)
        await require_board_member(self.db, column.board_id, user_id, EDIT_ROLES)
        await self._check_assignee(column.board_id, data.assignee_id)

        if data.id is not None and await self.db.get(Task, data.id) is not None:
            raise DuplicateResourceError("Task", details={"task_id": str(data.id)})

        task = Task(
            board_id=column.board_id,
            column_id=column.id,
            title=data.title,
            description=data.description,
            priority=data.priority.value,
            labels=data.labels,
            due_date=data.due_date,
            assignee_id=data.assignee_id,
            position=await reindex.next_position(self.db, Task, "column_id", column.id),
            created_by=user_id,
        )
        if data.id is not None:
            task.id = data.id
        self.db.add(task)
        await self.db.flush()

        if data.position is not None:
            await reindex.reorder_within(self.db, Task, "column_id", task, data.position)

        log = record_activity(self.db, column.board_id, user_id, TaskCreatedMeta(title=task.title), "task", task.id)
        await self._commit()
        await publish_change(self.notifier, log)

        logger.info(f"Task {task.id} created in column {column.id}")
        return await self._load_task(task.id)

    async def update_task(self, task_id: UUID, user_id: UUID, data: TaskUpdate) -> TaskResponse:
        """Apply the fields explicitly set on ``data``"""
        task = await self._get_task(task_id)
        await require_board_member(self.db, task.board_id, user_id, EDIT_ROLES)

        changes = data.model_dump(exclude_unset=True)
        if "title" in changes and changes["title"] is None:
            raise ValidationError("Title is required")
        if "assignee_id" in changes:
            await self._check_assignee(task.board_id, changes["assignee_id"])

        for field, value in changes.items():
            if field == "priority" and value is not None:
                value = value.value if hasattr(value, "value") else value
            if field == "priority" and value is None:
                continue
            if field == "labels" and value is None:
                value = []
            setattr(task, field, value)

        log = record_activity(
            self.db, task.board_id, user_id,
            TaskUpdatedMeta(title=task.title, fields=sorted(changes)), "task", task.id
        )
        await self._commit()
        await publish_change(self.notifier, log)
        return await self._load_task(task.id)

    async def move_task(self, task_id: UUID, target_column_id: UUID, position: int, user_id: UUID) -> TaskResponse:
        """Move a task to ``position`` in ``target_column_id`` and reindex affected columns"""
        if position < 0:
            raise ValidationError("Position must be non-negative")

        task = await self._get_task(task_id)
        await require_board_member(self.db, task.board_id, user_id, EDIT_ROLES)

        source = await self._get_column(task.column_id)
        target = await self._get_column(target_column_id)
        if target.board_id != task.board_id:
            raise ValidationError("Target column belongs to another board")

        from_position = task.position
        if source.id == target.id:
            await reindex.reorder_within(self.db, Task, "column_id", task, position)
        else:
            await reindex.move_between(self.db, Task, "column_id", task, target.id, position)

        log = record_activity(
            self.db, task.board_id, user_id,
            TaskMovedMeta(
                task_title=task.title,
                from_column=source.title,
                to_column=target.title,
                from_position=from_position,
                to_position=task.position,
            ),
            "task", task.id
        )
        await self._commit()
        await publish_change(self.notifier, log)

        logger.info(f"Task {task.id} moved {source.id}:{from_position} -> {target.id}:{task.position}")
        return await self._load_task(task.id)

    async def delete_task(self, task_id: UUID, user_id: UUID) -> bool:
        """Delete a task and close the gap it leaves in its column"""
        task = await self._get_task(task_id)
        await require_board_member(self.db, task.board_id, user_id, EDIT_ROLES)

        board_id, column_id, title = task.board_id, task.column_id, task.title
        await self.db.delete(task)
        await self.db.flush()
        await reindex.close_gap(self.db, Task, "column_id", column_id)

        log = record_activity(self.db, board_id, user_id, TaskDeletedMeta(title=title), "task", task_id)
        await self._commit()
        await publish_change(self.notifier, log)
        return True

    # Columns

    async def create_column(self, board_id: UUID, user_id: UUID, data: ColumnCreate) -> ColumnResponse:
        """Append a column to the board"""
        await require_board_member(self.db, board_id, user_id, EDIT_ROLES)

        count_result = await self.db.execute(
            select(func.count(ColumnModel.id)).where(ColumnModel.board_id == board_id)
        )
        if count_result.scalar_one() >= settings.max_columns:
            raise ValidationError(f"A board can have at most {settings.max_columns} columns")

        if data.id is not None and await self.db.get(ColumnModel, data.id) is not None:
            raise DuplicateResourceError("Column", details={"column_id": str(data.id)})

        column = ColumnModel(
            board_id=board_id,
            title=data.title,
            color=data.color,
            position=await reindex.next_position(self.db, ColumnModel, "board_id", board_id),
        )
        if data.id is not None:
            column.id = data.id
        self.db.add(column)
        await self.db.flush()

        log = record_activity(self.db, board_id, user_id, ColumnCreatedMeta(title=column.title), "column", column.id)
        await self._commit()
        await publish_change(self.notifier, log)
        return await self._load_column(column.id)

    async def update_column(self, column_id: UUID, user_id: UUID, data: ColumnUpdate) -> ColumnResponse:
        column = await self._get_column(column_id)
        await require_board_member(self.db, column.board_id, user_id, EDIT_ROLES)

        changes = data.model_dump(exclude_unset=True)
        if "title" in changes and changes["title"] is None:
            raise ValidationError("Title is required")
        for field, value in changes.items():
            setattr(column, field, value)

        log = record_activity(
            self.db, column.board_id, user_id,
            ColumnUpdatedMeta(title=column.title, fields=sorted(changes)), "column", column.id
        )
        await self._commit()
        await publish_change(self.notifier, log)
        return await self._load_column(column.id)

    async def delete_column(self, column_id: UUID, user_id: UUID) -> bool:
        """Delete a column with its tasks and renumber the remaining columns"""
        column = await self._get_column(column_id)
        await require_board_member(self.db, column.board_id, user_id, EDIT_ROLES)

        board_id, title = column.board_id, column.title
        await self.db.delete(column)
        await self.db.flush()
        await reindex.close_gap(self.db, ColumnModel, "board_id", board_id)

        log = record_activity(self.db, board_id, user_id, ColumnDeletedMeta(title=title), "column", column_id)
        await self._commit()
        await publish_change(self.notifier, log)
        return True

    async def reorder_columns(self, board_id: UUID, user_id: UUID, column_ids: List[UUID]) -> List[ColumnResponse]:
        """Rewrite column positions to follow ``column_ids``"""
        await require_board_member(self.db, board_id, user_id, EDIT_ROLES)

        try:
            ordered = await reindex.apply_order(self.db, ColumnModel, "board_id", board_id, column_ids)
        except ValueError as e:
            raise ValidationError(str(e), details={"board_id": str(board_id)})

        log = record_activity(
            self.db, board_id, user_id,
            ColumnReorderedMeta(titles=[column.title for column in ordered]), "board", board_id
        )
        await self._commit()
        await publish_change(self.notifier, log)
        return [
            ColumnResponse(
                id=column.id,
                board_id=column.board_id,
                title=column.title,
                color=column.color,
                position=column.position,
                created_at=column.created_at,
                updated_at=column.updated_at,
            )
            for column in ordered
        ]
