from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from conduit.models import Favorite, User
from conduit.repositories.common import insert_ignore


async def favorite(db: AsyncSession, user_id: int, article_id: int) -> None:
    await insert_ignore(db, Favorite, user_id=user_id, article_id=article_id)


async def unfavorite(db: AsyncSession, user_id: int, article_id: int) -> None:
    await db.execute(
        delete(Favorite).where(Favorite.user_id == user_id, Favorite.article_id == article_id)
    )


async def counts_for(db: AsyncSession, article_ids: list[int]) -> dict[int, int]:
    """favoritesCount per article, one grouped query; absent ids have zero."""
    if not article_ids:
        return {}
    q = (
        select(Favorite.article_id, func.count())
        .where(Favorite.article_id.in_(article_ids))
        .group_by(Favorite.article_id)
    )
    return {article_id: count for article_id, count in (await db.execute(q)).all()}


async def favorited_among(db: AsyncSession, user_id: int, article_ids: list[int]) -> set[int]:
    if not article_ids:
        return set()
    q = select(Favorite.article_id).where(
        Favorite.user_id == user_id, Favorite.article_id.in_(article_ids)
    )
    return set((await db.execute(q)).scalars().all())


def favorited_by_username_query(username: str):
    return (
        select(Favorite.article_id)
        .join(User, User.id == Favorite.user_id)
        .where(User.username == username)
    )
