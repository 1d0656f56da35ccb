"""
Activity log entries

Each action kind carries its own metadata shape, tagged by ``kind`` so a
stored entry always renders with the fields that kind guarantees.
"""
from datetime import datetime
from typing import Annotated, List, Literal, Optional, Union
from uuid import UUID
from pydantic import BaseModel, Field, TypeAdapter

from taskflow.core.enums import ActivityAction
from taskflow.schemas.profile import ProfileResponse


class TaskCreatedMeta(BaseModel):
    kind: Literal["TASK_CREATED"] = "TASK_CREATED"
    title: str


class TaskUpdatedMeta(BaseModel):
    kind: Literal["TASK_UPDATED"] = "TASK_UPDATED"
    title: str
    fields: List[str] = Field(default_factory=list)


class TaskMovedMeta(BaseModel):
    kind: Literal["TASK_MOVED"] = "TASK_MOVED"
    task_title: str
    from_column: str
    to_column: str
    from_position: int
    to_position: int


class TaskDeletedMeta(BaseModel):
    kind: Literal["TASK_DELETED"] = "TASK_DELETED"
    title: str


class ColumnCreatedMeta(BaseModel):
    kind: Literal["COLUMN_CREATED"] = "COLUMN_CREATED"
    title: str


class ColumnUpdatedMeta(BaseModel):
    kind: Literal["COLUMN_UPDATED"] = "COLUMN_UPDATED"
    title: str
    fields: List[str] = Field(default_factory=list)


class ColumnDeletedMeta(BaseModel):
    kind: Literal["COLUMN_DELETED"] = "COLUMN_DELETED"
    title: str


class ColumnReorderedMeta(BaseModel):
    kind: Literal["COLUMN_REORDERED"] = "COLUMN_REORDERED"
    titles: List[str] = Field(default_factory=list)


class BoardCreatedMeta(BaseModel):
    kind: Literal["BOARD_CREATED"] = "BOARD_CREATED"
    board_title: str


class BoardUpdatedMeta(BaseModel):
    kind: Literal["BOARD_UPDATED"] = "BOARD_UPDATED"
    fields: List[str] = Field(default_factory=list)


class MemberAddedMeta(BaseModel):
    kind: Literal["MEMBER_ADDED"] = "MEMBER_ADDED"
    email: str
    role: str


class MemberRemovedMeta(BaseModel):
    kind: Literal["MEMBER_REMOVED"] = "MEMBER_REMOVED"
    removed_user_id: UUID
    email: Optional[str] = None


ActivityMetadata = Annotated[
    Union[
        TaskCreatedMeta, TaskUpdatedMeta, TaskMovedMeta, TaskDeletedMeta,
        ColumnCreatedMeta, ColumnUpdatedMeta, ColumnDeletedMeta, ColumnReorderedMeta,
        BoardCreatedMeta, BoardUpdatedMeta, MemberAddedMeta, MemberRemovedMeta,
    ],
    Field(discriminator="kind"),
]

metadata_adapter = TypeAdapter(ActivityMetadata)


def describe(meta) -> str:
    """Human-readable sentence for an activity entry"""
    if isinstance(meta, TaskCreatedMeta):
        return f'created task "{meta.title}"'
    if isinstance(meta, TaskUpdatedMeta):
        changed = ", ".join(meta.fields) if meta.fields else "details"
        return f'updated {changed} of "{meta.title}"'
    if isinstance(meta, TaskMovedMeta):
        if meta.from_column == meta.to_column:
            return f'reordered "{meta.task_title}" in {meta.to_column}'
        return f'moved "{meta.task_title}" from {meta.from_column} to {meta.to_column}'
    if isinstance(meta, TaskDeletedMeta):
        return f'deleted task "{meta.title}"'
    if isinstance(meta, ColumnCreatedMeta):
        return f'created column "{meta.title}"'
    if isinstance(meta, ColumnUpdatedMeta):
        return f'updated column "{meta.title}"'
    if isinstance(meta, ColumnDeletedMeta):
        return f'deleted column "{meta.title}"'
    if isinstance(meta, ColumnReorderedMeta):
        return "reordered columns"
    if isinstance(meta, BoardCreatedMeta):
        return f'created board "{meta.board_title}"'
    if isinstance(meta, BoardUpdatedMeta):
        return "updated the board"
    if isinstance(meta, MemberAddedMeta):
        return f"added {meta.email} as {meta.role.lower()}"
    if isinstance(meta, MemberRemovedMeta):
        return f"removed {meta.email or 'a member'}"
    return "made a change"


class ActivityEntry(BaseModel):
    id: UUID
    action: ActivityAction
    entity_type: str
    entity_id: Optional[UUID] = None
    metadata: Optional[ActivityMetadata] = None
    description: str
    profile: Optional[ProfileResponse] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_log(cls, log) -> "ActivityEntry":
        """Build from an ActivityLog row; rows with unreadable metadata still render."""
        meta = None
        if log.activity_metadata:
            try:
                meta = metadata_adapter.validate_python(log.activity_metadata)
            except ValueError:
                meta = None
        return cls(
            id=log.id,
            action=ActivityAction(log.action),
            entity_type=log.entity_type,
            entity_id=log.entity_id,
            metadata=meta,
            description=describe(meta) if meta is not None else "made a change",
            profile=ProfileResponse.model_validate(log.profile) if log.profile else None,
            created_at=log.created_at,
        )
