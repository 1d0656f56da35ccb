"""
Board role checks
"""
from typing import Iterable, Optional
from uuid import UUID
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from taskflow.core.enums import Role
from taskflow.core.exceptions import InsufficientPermissionsError
from taskflow.models.board import BoardMember


async def get_user_role_for_board(
    user_id: UUID,
    board_id: UUID,
    db: AsyncSession
) -> Optional[Role]:
    """Get user's role on a board, or None when not a member"""
    result = await db.execute(
        select(BoardMember.role).where(
            BoardMember.board_id == board_id,
            BoardMember.user_id == user_id
        )
    )
    role = result.scalar_one_or_none()
    return Role(role) if role else None


async def require_board_member(
    db: AsyncSession,
    board_id: UUID,
    user_id: UUID,
    roles: Optional[Iterable[Role]] = None
) -> Role:
    """Raise InsufficientPermissionsError unless the user holds one of ``roles`` on the board.

    With ``roles`` omitted any membership is enough.
    """
    role = await get_user_role_for_board(user_id, board_id, db)
    if role is None:
        raise InsufficientPermissionsError("Forbidden", details={"board_id": str(board_id)})
    if roles is not None and role not in set(roles):
        raise InsufficientPermissionsError(
            "Forbidden",
            details={"board_id": str(board_id), "role": role.value}
        )
    return role
