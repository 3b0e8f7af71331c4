"""Profile service: public profiles and the follow relationship."""
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from conduit.errors import ValidationErrors
from conduit.models import User
from conduit.repositories import follow_repository, user_repository
from conduit.schemas import ProfileBody

logger = logging.getLogger(__name__)


def to_profile(user: User, following: bool = False) -> ProfileBody:
    return ProfileBody(
        username=user.username,
        bio=user.bio,
        image=user.image,
        following=following,
    )


async def get_profile(db: AsyncSession, username: str, viewer_id: int | None = None) -> ProfileBody:
    """``following`` is computed against *viewer_id* and is False for anonymous viewers."""
    user = await user_repository.get_by_username(db, username)
    following = False
    if viewer_id is not None and viewer_id != user.id:
        following = await follow_repository.is_following(db, viewer_id, user.id)
    return to_profile(user, following)


async def follow(db: AsyncSession, viewer_id: int, username: str) -> ProfileBody:
    target = await user_repository.get_by_username(db, username)
    if target.id == viewer_id:
        logger.warning("self-follow rejected: user_id=%s", viewer_id)
        raise ValidationErrors({"profile": ["cannot follow yourself"]})

    await follow_repository.follow(db, viewer_id, target.id)
    logger.info("user followed: follower_id=%s followee_id=%s", viewer_id, target.id)
    return to_profile(target, True)


async def unfollow(db: AsyncSession, viewer_id: int, username: str) -> ProfileBody:
    target = await user_repository.get_by_username(db, username)
    await follow_repository.unfollow(db, viewer_id, target.id)
    logger.info("user unfollowed: follower_id=%s followee_id=%s", viewer_id, target.id)
    return to_profile(target, False)
