"""
Client-side board state

The sync layer reuses the API's aggregate schemas as its entity types, so a
snapshot fetched from the server is a valid state without conversion.
"""
from typing import List, Optional, Tuple
from uuid import UUID
from pydantic import BaseModel, Field

from taskflow.schemas.board import BoardAggregateResponse, BoardMemberResponse
from taskflow.schemas.column import ColumnResponse
from taskflow.schemas.task import TaskResponse

Task = TaskResponse
Column = ColumnResponse
BoardMember = BoardMemberResponse


class BoardState(BaseModel):
    """Columns in display order (each with its ordered tasks) plus members.

    Treated as immutable: transitions build new lists and copies instead of
    mutating a state another holder may still reference.
    """
    columns: List[Column] = Field(default_factory=list)
    members: List[BoardMember] = Field(default_factory=list)

    @classmethod
    def from_aggregate(cls, aggregate: BoardAggregateResponse) -> "BoardState":
        return cls(columns=list(aggregate.columns), members=list(aggregate.members))

    def column_index(self, column_id: UUID) -> Optional[int]:
        for index, column in enumerate(self.columns):
            if column.id == column_id:
                return index
        return None

    def get_column(self, column_id: UUID) -> Optional[Column]:
        index = self.column_index(column_id)
        return self.columns[index] if index is not None else None

    def locate_task(self, task_id: UUID) -> Optional[Tuple[Column, int]]:
        """(column, index) of the task, or None"""
        for column in self.columns:
            for index, task in enumerate(column.tasks):
                if task.id == task_id:
                    return column, index
        return None

    def get_task(self, task_id: UUID) -> Optional[Task]:
        found = self.locate_task(task_id)
        if found is None:
            return None
        column, index = found
        return column.tasks[index]

    def get_member(self, user_id: UUID) -> Optional[BoardMember]:
        for member in self.members:
            if member.user_id == user_id:
                return member
        return None
