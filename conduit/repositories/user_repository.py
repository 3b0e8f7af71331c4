from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from conduit.errors import EmailAlreadyTaken, UserNotFound, UsernameAlreadyTaken
from conduit.models import User
from conduit.repositories.common import integrity_detail


async def _flush_user(db: AsyncSession) -> None:
    """Flush, translating unique violations into the matching domain error."""
    try:
        await db.flush()
    except IntegrityError as exc:
        detail = integrity_detail(exc)
        if "email" in detail:
            raise EmailAlreadyTaken() from exc
        if "username" in detail:
            raise UsernameAlreadyTaken() from exc
        raise


async def create_user(db: AsyncSession, email: str, username: str, password_hash: str) -> User:
    user = User(email=email, username=username, password_hash=password_hash, bio="", image="")
    db.add(user)
    await _flush_user(db)
    return user


async def save_user(db: AsyncSession, user: User) -> User:
    await _flush_user(db)
    return user


async def _get_one(db: AsyncSession, *criteria) -> User:
    result = await db.execute(select(User).where(*criteria))
    user = result.scalar_one_or_none()
    if user is None:
        raise UserNotFound()
    return user


async def get_by_id(db: AsyncSession, user_id: int) -> User:
    return await _get_one(db, User.id == user_id)


async def get_by_email(db: AsyncSession, email: str) -> User:
    return await _get_one(db, User.email == email)


async def get_by_username(db: AsyncSession, username: str) -> User:
    return await _get_one(db, User.username == username)


async def email_taken(db: AsyncSession, email: str, exclude_id: int | None = None) -> bool:
    q = select(User.id).where(User.email == email)
    if exclude_id is not None:
        q = q.where(User.id != exclude_id)
    return (await db.execute(q.limit(1))).first() is not None


async def username_taken(db: AsyncSession, username: str, exclude_id: int | None = None) -> bool:
    q = select(User.id).where(User.username == username)
    if exclude_id is not None:
        q = q.where(User.id != exclude_id)
    return (await db.execute(q.limit(1))).first() is not None
