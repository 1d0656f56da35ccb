"""
Board endpoints: boards, members, activity and board-level column operations
"""
from typing import List
from uuid import UUID
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from taskflow.core.database import get_db
from taskflow.core.deps import get_current_user
from taskflow.models.profile import Profile
from taskflow.schemas.activity import ActivityEntry
from taskflow.schemas.board import (
    BoardAggregateResponse, BoardCreate, BoardMemberResponse, BoardSummary, BoardUpdate, MemberCreate
)
from taskflow.schemas.column import ColumnCreate, ColumnOrderUpdate, ColumnResponse
from taskflow.services.board_service import BoardService
from taskflow.services.kanban_service import KanbanService

router = APIRouter()


@router.get("", response_model=List[BoardSummary])
async def list_boards(
    current_user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Boards the current user belongs to"""
    return await BoardService(db).list_boards(current_user.id)


@router.post("", response_model=BoardAggregateResponse, status_code=status.HTTP_201_CREATED)
async def create_board(
    board_data: BoardCreate,
    current_user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Create a board with the default columns"""
    return await BoardService(db).create_board(current_user.id, board_data)


@router.get("/{board_id}", response_model=BoardAggregateResponse)
async def get_board(
    board_id: UUID,
    current_user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Full board snapshot: columns with tasks, and members"""
    return await BoardService(db).get_board_aggregate(board_id, current_user.id)


@router.patch("/{board_id}", response_model=BoardSummary)
async def update_board(
    board_id: UUID,
    board_data: BoardUpdate,
    current_user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await BoardService(db).update_board(board_id, current_user.id, board_data)


@router.delete("/{board_id}")
async def delete_board(
    board_id: UUID,
    current_user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Delete board (owner only)"""
    await BoardService(db).delete_board(board_id, current_user.id)
    return {"success": True, "message": "Board deleted successfully"}


# Members

@router.post("/{board_id}/members", response_model=BoardMemberResponse, status_code=status.HTTP_201_CREATED)
async def add_member(
    board_id: UUID,
    member_data: MemberCreate,
    current_user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Invite an existing profile by email"""
    return await BoardService(db).add_member(board_id, current_user.id, member_data)


@router.delete("/{board_id}/members/{user_id}")
async def remove_member(
    board_id: UUID,
    user_id: UUID,
    current_user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    await BoardService(db).remove_member(board_id, current_user.id, user_id)
    return {"success": True, "message": "Member removed successfully"}


@router.get("/{board_id}/activity", response_model=List[ActivityEntry])
async def get_activity(
    board_id: UUID,
    limit: int = Query(50, ge=1, le=200),
    current_user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Recent board activity, newest first"""
    return await BoardService(db).get_activity(board_id, current_user.id, limit)


# Columns

@router.post("/{board_id}/columns", response_model=ColumnResponse, status_code=status.HTTP_201_CREATED)
async def create_column(
    board_id: UUID,
    column_data: ColumnCreate,
    current_user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Append a column to the board"""
    return await KanbanService(db).create_column(board_id, current_user.id, column_data)


@router.put("/{board_id}/columns/order", response_model=List[ColumnResponse])
async def reorder_columns(
    board_id: UUID,
    order_data: ColumnOrderUpdate,
    current_user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Rewrite column positions to follow the given id list"""
    return await KanbanService(db).reorder_columns(board_id, current_user.id, order_data.column_ids)
