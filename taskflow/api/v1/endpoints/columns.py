"""
Column management endpoints
"""
from uuid import UUID
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from taskflow.core.database import get_db
from taskflow.core.deps import get_current_user
from taskflow.models.profile import Profile
from taskflow.schemas.column import ColumnResponse, ColumnUpdate
from taskflow.schemas.task import TaskCreate, TaskResponse
from taskflow.services.kanban_service import KanbanService

router = APIRouter()


@router.patch("/{column_id}", response_model=ColumnResponse)
async def update_column(
    column_id: UUID,
    column_data: ColumnUpdate,
    current_user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Update column"""
    return await KanbanService(db).update_column(column_id, current_user.id, column_data)


@router.delete("/{column_id}")
async def delete_column(
    column_id: UUID,
    current_user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Delete column and its tasks"""
    await KanbanService(db).delete_column(column_id, current_user.id)
    return {"success": True, "message": "Column deleted successfully"}


@router.post("/{column_id}/tasks", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
async def create_task(
    column_id: UUID,
    task_data: TaskCreate,
    current_user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Create a task in the column"""
    return await KanbanService(db).create_task(column_id, current_user.id, task_data)
