"""
Task endpoints
"""
from uuid import UUID
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from taskflow.core.database import get_db
from taskflow.core.deps import get_current_user
from taskflow.models.profile import Profile
from taskflow.schemas.task import TaskMove, TaskResponse, TaskUpdate
from taskflow.services.kanban_service import KanbanService

router = APIRouter()


@router.patch("/{task_id}", response_model=TaskResponse)
async def update_task(
    task_id: UUID,
    task_data: TaskUpdate,
    current_user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await KanbanService(db).update_task(task_id, current_user.id, task_data)


@router.put("/{task_id}/move", response_model=TaskResponse)
async def move_task(
    task_id: UUID,
    move_data: TaskMove,
    current_user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Move a task to a position in the same or another column"""
    return await KanbanService(db).move_task(
        task_id, move_data.target_column_id, move_data.position, current_user.id
    )


@router.delete("/{task_id}")
async def delete_task(
    task_id: UUID,
    current_user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    await KanbanService(db).delete_task(task_id, current_user.id)
    return {"success": True, "message": "Task deleted successfully"}
