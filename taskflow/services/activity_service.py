"""
Activity recording and board change publication shared by the services
"""
import logging
from typing import List, Optional
from uuid import UUID
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from taskflow.models.activity_log import ActivityLog
from taskflow.schemas.activity import ActivityEntry
from taskflow.services.change_notifier import ChangeEvent, ChangeNotifier

logger = logging.getLogger(__name__)


def record_activity(
    db: AsyncSession,
    board_id: UUID,
    user_id: UUID,
    meta,
    entity_type: str,
    entity_id: Optional[UUID] = None,
) -> ActivityLog:
    """Stage an activity row in the current transaction (committed with the write it describes)."""
    log = ActivityLog(
        board_id=board_id,
        user_id=user_id,
        action=meta.kind,
        entity_type=entity_type,
        entity_id=entity_id,
        activity_metadata=meta.model_dump(mode="json"),
    )
    db.add(log)
    return log


async def publish_change(notifier: ChangeNotifier, log: ActivityLog) -> None:
    """Tell subscribers a committed write happened on the log's board."""
    await notifier.publish(ChangeEvent(
        board_id=log.board_id,
        action=log.action,
        entity_type=log.entity_type,
        entity_id=log.entity_id,
        actor_id=log.user_id,
    ))


async def list_activity(db: AsyncSession, board_id: UUID, limit: int = 50) -> List[ActivityEntry]:
    """Most recent activity first"""
    result = await db.execute(
        select(ActivityLog)
        .options(selectinload(ActivityLog.profile))
        .where(ActivityLog.board_id == board_id)
        .order_by(ActivityLog.created_at.desc())
        .limit(limit)
    )
    return [ActivityEntry.from_log(log) for log in result.scalars().all()]
