from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from conduit.database import get_db
from conduit.dependencies import optional_user, require_user
from conduit.schemas import ProfileResponse
from conduit.services import profile_service

router = APIRouter(prefix="/api/profiles", tags=["profiles"])


@router.get("/{username}", response_model=ProfileResponse)
async def get_profile(
    username: str,
    viewer_id: int | None = Depends(optional_user),
    db: AsyncSession = Depends(get_db),
):
    return ProfileResponse(profile=await profile_service.get_profile(db, username, viewer_id))


@router.post("/{username}/follow", response_model=ProfileResponse)
async def follow_user(
    username: str,
    user_id: int = Depends(require_user),
    db: AsyncSession = Depends(get_db),
):
    return ProfileResponse(profile=await profile_service.follow(db, user_id, username))


@router.delete("/{username}/follow", response_model=ProfileResponse)
async def unfollow_user(
    username: str,
    user_id: int = Depends(require_user),
    db: AsyncSession = Depends(get_db),
):
    return ProfileResponse(profile=await profile_service.unfollow(db, user_id, username))
