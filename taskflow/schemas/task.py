"""
Task schemas
"""
from datetime import datetime
from typing import List, Optional
from uuid import UUID
from pydantic import BaseModel, Field, field_validator

from taskflow.core.enums import Priority
from taskflow.schemas.profile import ProfileResponse


def dedupe_labels(labels: Optional[List[str]]) -> Optional[List[str]]:
    """Labels behave as a set; first occurrence wins so display order is kept."""
    if labels is None:
        return None
    seen = []
    for label in labels:
        label = label.strip()
        if label and label not in seen:
            seen.append(label)
    return seen


class TaskCreate(BaseModel):
    id: Optional[UUID] = None  # client-generated id for optimistic inserts
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    priority: Priority = Priority.NONE
    labels: List[str] = Field(default_factory=list)
    due_date: Optional[datetime] = None
    assignee_id: Optional[UUID] = None
    position: Optional[int] = Field(None, ge=0)  # appended when omitted

    @field_validator('title')
    @classmethod
    def validate_title(cls, v):
        if not v.strip():
            raise ValueError('Task title cannot be empty')
        return v.strip()

    @field_validator('labels')
    @classmethod
    def validate_labels(cls, v):
        return dedupe_labels(v)


class TaskUpdate(BaseModel):
    """Partial update; only fields explicitly sent are applied."""
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    priority: Optional[Priority] = None
    labels: Optional[List[str]] = None
    due_date: Optional[datetime] = None
    assignee_id: Optional[UUID] = None

    @field_validator('title')
    @classmethod
    def validate_title(cls, v):
        if v is not None and not v.strip():
            raise ValueError('Task title cannot be empty')
        return v.strip() if v else v

    @field_validator('labels')
    @classmethod
    def validate_labels(cls, v):
        return dedupe_labels(v)


class TaskMove(BaseModel):
    target_column_id: UUID
    position: int = Field(..., ge=0)


class TaskResponse(BaseModel):
    id: UUID
    board_id: UUID
    column_id: UUID
    title: str
    description: Optional[str] = None
    priority: Priority = Priority.NONE
    labels: List[str] = Field(default_factory=list)
    due_date: Optional[datetime] = None
    assignee_id: Optional[UUID] = None
    assignee: Optional[ProfileResponse] = None
    position: int
    created_by: UUID
    creator: Optional[ProfileResponse] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
