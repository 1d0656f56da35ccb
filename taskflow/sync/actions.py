"""
Board state actions

Each action is a plain value tagged by ``type``. Inverses are built as data
too, so the executor can roll back without knowing which kind it is holding.
"""
from datetime import datetime
from typing import Annotated, Any, Dict, List, Literal, Optional, Union
from uuid import UUID
from pydantic import BaseModel, Field

from taskflow.core.enums import Priority
from taskflow.sync.state import BoardMember, BoardState, Column, Task


class TaskPatch(BaseModel):
    """Partial task update; only explicitly set fields are applied."""
    id: UUID
    title: Optional[str] = None
    description: Optional[str] = None
    priority: Optional[Priority] = None
    labels: Optional[List[str]] = None
    due_date: Optional[datetime] = None
    assignee_id: Optional[UUID] = None

    def changes(self) -> Dict[str, Any]:
        return self.model_dump(exclude_unset=True, exclude={"id"})


class ColumnPatch(BaseModel):
    id: UUID
    title: Optional[str] = None
    color: Optional[str] = None

    def changes(self) -> Dict[str, Any]:
        return self.model_dump(exclude_unset=True, exclude={"id"})


class BoardPatch(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None

    def changes(self) -> Dict[str, Any]:
        return self.model_dump(exclude_unset=True)


class SyncState(BaseModel):
    type: Literal["SYNC_STATE"] = "SYNC_STATE"
    state: BoardState


class AddTask(BaseModel):
    type: Literal["ADD_TASK"] = "ADD_TASK"
    task: Task


class UpdateTask(BaseModel):
    type: Literal["UPDATE_TASK"] = "UPDATE_TASK"
    patch: TaskPatch


class DeleteTask(BaseModel):
    type: Literal["DELETE_TASK"] = "DELETE_TASK"
    task_id: UUID
    column_id: UUID


class MoveTask(BaseModel):
    type: Literal["MOVE_TASK"] = "MOVE_TASK"
    task_id: UUID
    from_column_id: UUID
    to_column_id: UUID
    from_index: int
    to_index: int


class AddColumn(BaseModel):
    type: Literal["ADD_COLUMN"] = "ADD_COLUMN"
    column: Column


class UpdateColumn(BaseModel):
    type: Literal["UPDATE_COLUMN"] = "UPDATE_COLUMN"
    patch: ColumnPatch


class DeleteColumn(BaseModel):
    type: Literal["DELETE_COLUMN"] = "DELETE_COLUMN"
    column_id: UUID


class ReorderColumn(BaseModel):
    type: Literal["REORDER_COLUMN"] = "REORDER_COLUMN"
    column_id: UUID
    from_index: int
    to_index: int


class UpdateBoard(BaseModel):
    type: Literal["UPDATE_BOARD"] = "UPDATE_BOARD"
    patch: BoardPatch


class AddMember(BaseModel):
    type: Literal["ADD_MEMBER"] = "ADD_MEMBER"
    member: BoardMember


class RemoveMember(BaseModel):
    type: Literal["REMOVE_MEMBER"] = "REMOVE_MEMBER"
    user_id: UUID


Action = Annotated[
    Union[
        SyncState, AddTask, UpdateTask, DeleteTask, MoveTask,
        AddColumn, UpdateColumn, DeleteColumn, ReorderColumn,
        UpdateBoard, AddMember, RemoveMember,
    ],
    Field(discriminator="type"),
]


def invert_move(action: MoveTask) -> MoveTask:
    """The move that puts the task back where it came from"""
    return MoveTask(
        task_id=action.task_id,
        from_column_id=action.to_column_id,
        to_column_id=action.from_column_id,
        from_index=action.to_index,
        to_index=action.from_index,
    )


def invert_column_reorder(action: ReorderColumn) -> ReorderColumn:
    return ReorderColumn(
        column_id=action.column_id,
        from_index=action.to_index,
        to_index=action.from_index,
    )


def invert_task_patch(task: Task, patch: TaskPatch) -> UpdateTask:
    """Patch restoring the fields ``patch`` touches to their values on ``task``"""
    previous = {field: getattr(task, field) for field in patch.changes()}
    return UpdateTask(patch=TaskPatch(id=task.id, **previous))


def invert_column_patch(column: Column, patch: ColumnPatch) -> UpdateColumn:
    previous = {field: getattr(column, field) for field in patch.changes()}
    return UpdateColumn(patch=ColumnPatch(id=column.id, **previous))
