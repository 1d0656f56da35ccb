"""
Board service: profiles, boards, membership and the board aggregate
"""
import logging
from typing import List, Optional
from uuid import UUID
from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from taskflow.core.exceptions import (
    DuplicateResourceError, ResourceNotFoundError, ValidationError
)
from taskflow.core.enums import Role
from taskflow.core.permissions import require_board_member
from taskflow.models.activity_log import ActivityLog
from taskflow.models.board import Board, BoardMember
from taskflow.models.column import Column as ColumnModel
from taskflow.models.profile import Profile
from taskflow.models.task import Task
from taskflow.schemas.activity import (
    ActivityEntry, BoardCreatedMeta, BoardUpdatedMeta, MemberAddedMeta, MemberRemovedMeta
)
from taskflow.schemas.board import (
    BoardAggregateResponse, BoardCreate, BoardMemberResponse, BoardSummary, BoardUpdate, MemberCreate
)
from taskflow.schemas.profile import ProfileCreate, ProfileResponse
from taskflow.services.activity_service import list_activity, publish_change, record_activity
from taskflow.services.change_notifier import ChangeNotifier, notifier as default_notifier

logger = logging.getLogger(__name__)

# Columns every new board starts with: (title, color)
DEFAULT_COLUMNS = [
    ("To Do", "#6366f1"),
    ("In Progress", "#f59e0b"),
    ("Review", "#8b5cf6"),
    ("Done", "#10b981"),
]


class BoardService:
    """Service for boards and their members"""

    def __init__(self, db: AsyncSession, notifier: Optional[ChangeNotifier] = None):
        self.db = db
        self.notifier = notifier or default_notifier

    async def _commit(self) -> None:
        try:
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

    # Profiles

    async def create_profile(self, data: ProfileCreate) -> ProfileResponse:
        existing = await self.db.execute(select(Profile.id).where(Profile.email == data.email))
        if existing.scalar_one_or_none() is not None:
            raise DuplicateResourceError("Profile", details={"email": data.email})

        profile = Profile(email=data.email, full_name=data.full_name, avatar_url=data.avatar_url)
        self.db.add(profile)
        await self._commit()
        logger.info(f"Profile created: {profile.id}")
        return ProfileResponse.model_validate(profile)

    async def get_profile(self, user_id: UUID) -> Profile:
        profile = await self.db.get(Profile, user_id)
        if not profile:
            raise ResourceNotFoundError("Profile")
        return profile

    # Boards

    async def list_boards(self, user_id: UUID) -> List[BoardSummary]:
        """Boards the user is a member of, most recently updated first"""
        result = await self.db.execute(
            select(Board, BoardMember.role)
            .join(BoardMember, BoardMember.board_id == Board.id)
            .where(BoardMember.user_id == user_id)
            .order_by(Board.updated_at.desc())
        )
        boards = []
        for board, role in result.all():
            summary = BoardSummary.model_validate(board)
            summary.role = Role(role)
            boards.append(summary)
        return boards

    async def create_board(self, user_id: UUID, data: BoardCreate) -> BoardAggregateResponse:
        """Create a board with the default columns and the creator as OWNER"""
        await self.get_profile(user_id)

        board = Board(title=data.title, description=data.description, created_by=user_id)
        self.db.add(board)
        await self.db.flush()

        for position, (title, color) in enumerate(DEFAULT_COLUMNS):
            self.db.add(ColumnModel(board_id=board.id, title=title, color=color, position=position))
        self.db.add(BoardMember(board_id=board.id, user_id=user_id, role=Role.OWNER.value))

        log = record_activity(self.db, board.id, user_id, BoardCreatedMeta(board_title=board.title), "board", board.id)
        await self._commit()
        await publish_change(self.notifier, log)

        logger.info(f"Board {board.id} created by {user_id}")
        return await self.load_aggregate(board.id)

    async def load_aggregate(self, board_id: UUID) -> BoardAggregateResponse:
        """Full snapshot of a board without a membership check"""
        result = await self.db.execute(
            select(Board)
            .options(
                selectinload(Board.creator),
                selectinload(Board.columns).selectinload(ColumnModel.tasks).selectinload(Task.assignee),
                selectinload(Board.columns).selectinload(ColumnModel.tasks).selectinload(Task.creator),
                selectinload(Board.members).selectinload(BoardMember.profile),
            )
            .where(Board.id == board_id)
            .execution_options(populate_existing=True)
        )
        board = result.scalar_one_or_none()
        if not board:
            raise ResourceNotFoundError("Board")
        return BoardAggregateResponse.model_validate(board)

    async def get_board_aggregate(self, board_id: UUID, user_id: UUID) -> BoardAggregateResponse:
        if await self.db.get(Board, board_id) is None:
            raise ResourceNotFoundError("Board")
        await require_board_member(self.db, board_id, user_id)
        return await self.load_aggregate(board_id)

    async def update_board(self, board_id: UUID, user_id: UUID, data: BoardUpdate) -> BoardSummary:
        board = await self.db.get(Board, board_id)
        if not board:
            raise ResourceNotFoundError("Board")
        role = await require_board_member(self.db, board_id, user_id, (Role.OWNER, Role.EDITOR))

        changes = data.model_dump(exclude_unset=True)
        if "title" in changes and changes["title"] is None:
            raise ValidationError("Title is required")
        for field, value in changes.items():
            setattr(board, field, value)

        log = record_activity(self.db, board_id, user_id, BoardUpdatedMeta(fields=sorted(changes)), "board", board_id)
        await self._commit()
        await publish_change(self.notifier, log)

        summary = BoardSummary.model_validate(board)
        summary.role = role
        return summary

    async def delete_board(self, board_id: UUID, user_id: UUID) -> bool:
        """Delete a board with its columns, tasks, members and activity (OWNER only)"""
        board = await self.db.get(Board, board_id)
        if not board:
            raise ResourceNotFoundError("Board")
        await require_board_member(self.db, board_id, user_id, (Role.OWNER,))

        await self.db.execute(delete(ActivityLog).where(ActivityLog.board_id == board_id))
        await self.db.delete(board)
        await self._commit()

        logger.info(f"Board {board_id} deleted by {user_id}")
        return True

    # Members

    async def _load_member(self, member_id: UUID) -> BoardMemberResponse:
        result = await self.db.execute(
            select(BoardMember)
            .options(selectinload(BoardMember.profile))
            .where(BoardMember.id == member_id)
            .execution_options(populate_existing=True)
        )
        return BoardMemberResponse.model_validate(result.scalar_one())

    async def add_member(self, board_id: UUID, user_id: UUID, data: MemberCreate) -> BoardMemberResponse:
        """Invite an existing profile by email (OWNER only)"""
        if await self.db.get(Board, board_id) is None:
            raise ResourceNotFoundError("Board")
        await require_board_member(self.db, board_id, user_id, (Role.OWNER,))

        result = await self.db.execute(select(Profile).where(Profile.email == data.email))
        profile = result.scalar_one_or_none()
        if not profile:
            raise ResourceNotFoundError("Profile", details={"email": data.email})

        existing = await self.db.execute(
            select(BoardMember.id).where(
                BoardMember.board_id == board_id,
                BoardMember.user_id == profile.id
            )
        )
        if existing.scalar_one_or_none() is not None:
            raise DuplicateResourceError("Board member", details={"email": data.email})

        member = BoardMember(board_id=board_id, user_id=profile.id, role=data.role.value)
        self.db.add(member)
        await self.db.flush()

        log = record_activity(
            self.db, board_id, user_id,
            MemberAddedMeta(email=profile.email, role=data.role.value), "member", profile.id
        )
        await self._commit()
        await publish_change(self.notifier, log)
        return await self._load_member(member.id)

    async def remove_member(self, board_id: UUID, user_id: UUID, member_user_id: UUID) -> bool:
        """Remove a member (OWNER only); the owner cannot be removed"""
        if await self.db.get(Board, board_id) is None:
            raise ResourceNotFoundError("Board")
        await require_board_member(self.db, board_id, user_id, (Role.OWNER,))

        result = await self.db.execute(
            select(BoardMember)
            .options(selectinload(BoardMember.profile))
            .where(
                BoardMember.board_id == board_id,
                BoardMember.user_id == member_user_id
            )
        )
        member = result.scalar_one_or_none()
        if not member:
            raise ResourceNotFoundError("Board member")
        if member.role == Role.OWNER.value:
            raise ValidationError("The board owner cannot be removed")

        email = member.profile.email if member.profile else None
        await self.db.delete(member)

        log = record_activity(
            self.db, board_id, user_id,
            MemberRemovedMeta(removed_user_id=member_user_id, email=email), "member", member_user_id
        )
        await self._commit()
        await publish_change(self.notifier, log)
        return True

    # Activity

    async def get_activity(self, board_id: UUID, user_id: UUID, limit: int = 50) -> List[ActivityEntry]:
        if await self.db.get(Board, board_id) is None:
            raise ResourceNotFoundError("Board")
        await require_board_member(self.db, board_id, user_id)
        return await list_activity(self.db, board_id, limit)
