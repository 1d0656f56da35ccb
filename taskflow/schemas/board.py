"""
Board, membership and board aggregate schemas
"""
from datetime import datetime
from typing import List, Optional
from uuid import UUID
from pydantic import BaseModel, Field, field_validator

from taskflow.config import settings
from taskflow.core.enums import Role
from taskflow.schemas.column import ColumnResponse
from taskflow.schemas.profile import ProfileResponse


def validate_board_title(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    v = v.strip()
    if not v:
        raise ValueError('Title is required')
    if len(v) > settings.max_board_title_length:
        raise ValueError(f'Title must be {settings.max_board_title_length} characters or less')
    return v


class BoardCreate(BaseModel):
    title: str
    description: Optional[str] = Field(None, max_length=500)

    @field_validator('title')
    @classmethod
    def validate_title(cls, v):
        return validate_board_title(v)


class BoardUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = Field(None, max_length=500)

    @field_validator('title')
    @classmethod
    def validate_title(cls, v):
        return validate_board_title(v)


class MemberCreate(BaseModel):
    email: str = Field(..., min_length=3, max_length=255)
    role: Role = Role.VIEWER

    @field_validator('email')
    @classmethod
    def normalize_email(cls, v):
        return v.strip().lower()

    @field_validator('role')
    @classmethod
    def validate_role(cls, v):
        if v == Role.OWNER:
            raise ValueError('A board has exactly one owner; invite as EDITOR or VIEWER')
        return v


class BoardMemberResponse(BaseModel):
    id: UUID
    board_id: UUID
    user_id: UUID
    role: Role
    profile: Optional[ProfileResponse] = None
    joined_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class BoardSummary(BaseModel):
    id: UUID
    title: str
    description: Optional[str] = None
    created_by: UUID
    role: Optional[Role] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class BoardAggregateResponse(BaseModel):
    """Full board snapshot: columns with nested tasks, plus members."""
    id: UUID
    title: str
    description: Optional[str] = None
    created_by: UUID
    creator: Optional[ProfileResponse] = None
    columns: List[ColumnResponse] = Field(default_factory=list)
    members: List[BoardMemberResponse] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
