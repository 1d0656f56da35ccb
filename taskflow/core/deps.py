"""
Dependency injection utilities
"""
from typing import Optional
from uuid import UUID
from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from taskflow.core.database import get_db
from taskflow.core.exceptions import AuthenticationError
from taskflow.models.profile import Profile


def parse_user_id(raw: Optional[str]) -> UUID:
    if not raw:
        raise AuthenticationError("Unauthorized")
    try:
        return UUID(raw)
    except ValueError:
        raise AuthenticationError("Unauthorized", details={"reason": "malformed user id"})


async def get_current_user(
    x_user_id: Optional[str] = Header(None),
    db: AsyncSession = Depends(get_db)
) -> Profile:
    """
    Resolve the acting profile from the X-User-Id header
    """
    profile = await db.get(Profile, parse_user_id(x_user_id))
    if not profile:
        raise AuthenticationError("Unauthorized")
    return profile
