"""
Column schemas
"""
import re
from datetime import datetime
from typing import List, Optional
from uuid import UUID
from pydantic import BaseModel, Field, field_validator

from taskflow.schemas.task import TaskResponse

HEX_COLOR = re.compile(r'^#[0-9a-fA-F]{6}$')


def validate_color(v: Optional[str]) -> Optional[str]:
    if v is not None and not HEX_COLOR.match(v):
        raise ValueError('Color must be a hex code like #6366f1')
    return v


class ColumnCreate(BaseModel):
    id: Optional[UUID] = None  # client-generated id for optimistic inserts
    title: str = Field(..., min_length=1, max_length=100)
    color: Optional[str] = None

    @field_validator('title')
    @classmethod
    def validate_title(cls, v):
        if not v.strip():
            raise ValueError('Column title cannot be empty')
        return v.strip()

    @field_validator('color')
    @classmethod
    def check_color(cls, v):
        return validate_color(v)


class ColumnUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=100)
    color: Optional[str] = None

    @field_validator('title')
    @classmethod
    def validate_title(cls, v):
        if v is not None and not v.strip():
            raise ValueError('Column title cannot be empty')
        return v.strip() if v else v

    @field_validator('color')
    @classmethod
    def check_color(cls, v):
        return validate_color(v)


class ColumnOrderUpdate(BaseModel):
    column_ids: List[UUID] = Field(..., min_length=1)


class ColumnResponse(BaseModel):
    id: UUID
    board_id: UUID
    title: str
    color: Optional[str] = None
    position: int
    tasks: List[TaskResponse] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
