from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from conduit.models import Follow
from conduit.repositories.common import insert_ignore


async def follow(db: AsyncSession, follower_id: int, followee_id: int) -> None:
    await insert_ignore(db, Follow, follower_id=follower_id, followee_id=followee_id)


async def unfollow(db: AsyncSession, follower_id: int, followee_id: int) -> None:
    await db.execute(
        delete(Follow).where(
            Follow.follower_id == follower_id, Follow.followee_id == followee_id
        )
    )


async def is_following(db: AsyncSession, follower_id: int, followee_id: int) -> bool:
    q = select(Follow.follower_id).where(
        Follow.follower_id == follower_id, Follow.followee_id == followee_id
    )
    return (await db.execute(q)).first() is not None


async def followed_among(db: AsyncSession, follower_id: int, user_ids: set[int]) -> set[int]:
    """Subset of *user_ids* that *follower_id* follows (one query)."""
    if not user_ids:
        return set()
    q = select(Follow.followee_id).where(
        Follow.follower_id == follower_id, Follow.followee_id.in_(user_ids)
    )
    return set((await db.execute(q)).scalars().all())


def followee_ids_query(follower_id: int):
    return select(Follow.followee_id).where(Follow.follower_id == follower_id)
