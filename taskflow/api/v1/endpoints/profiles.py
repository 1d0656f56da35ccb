"""
Profile endpoints
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from taskflow.core.database import get_db
from taskflow.core.deps import get_current_user
from taskflow.models.profile import Profile
from taskflow.schemas.profile import ProfileCreate, ProfileResponse
from taskflow.services.board_service import BoardService

router = APIRouter()


@router.post("", response_model=ProfileResponse, status_code=status.HTTP_201_CREATED)
async def create_profile(
    profile_data: ProfileCreate,
    db: AsyncSession = Depends(get_db)
):
    """Register a profile; its id is the identity sent as X-User-Id"""
    service = BoardService(db)
    return await service.create_profile(profile_data)


@router.get("/me", response_model=ProfileResponse)
async def get_me(current_user: Profile = Depends(get_current_user)):
    """Get the acting profile"""
    return ProfileResponse.model_validate(current_user)
