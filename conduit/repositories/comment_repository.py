from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload

from conduit.errors import CommentNotFound
from conduit.models import Comment


async def create_comment(db: AsyncSession, article_id: int, author_id: int, body: str) -> Comment:
    comment = Comment(body=body, article_id=article_id, author_id=author_id)
    db.add(comment)
    await db.flush()
    return comment


async def get_by_id(db: AsyncSession, comment_id: int) -> Comment:
    comment = await db.get(Comment, comment_id)
    if comment is None:
        raise CommentNotFound()
    return comment


async def list_for_article(db: AsyncSession, article_id: int) -> list[Comment]:
    """Comments on *article_id*, newest first, with authors loaded."""
    q = (
        select(Comment)
        .where(Comment.article_id == article_id)
        .options(joinedload(Comment.author))
        .order_by(Comment.created_at.desc(), Comment.id.desc())
    )
    return list((await db.execute(q)).scalars().all())


async def delete_comment(db: AsyncSession, comment_id: int) -> None:
    await db.execute(delete(Comment).where(Comment.id == comment_id))
