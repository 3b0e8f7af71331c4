"""
Comment service: comments on an article.

A comment can only be removed by its own author, and only through the
article it belongs to: a comment id addressed under a different article's
slug is reported as not found.
"""
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from conduit.errors import CommentNotFound, Forbidden, ValidationErrors
from conduit.models import Comment
from conduit.repositories import article_repository, comment_repository, follow_repository, user_repository
from conduit.schemas import CommentBody, CommentCreate
from conduit.services.profile_service import to_profile

logger = logging.getLogger(__name__)


def _to_body(comment: Comment, following: bool = False) -> CommentBody:
    return CommentBody(
        id=comment.id,
        created_at=comment.created_at,
        updated_at=comment.updated_at,
        body=comment.body,
        author=to_profile(comment.author, following),
    )


async def add_comment(db: AsyncSession, slug: str, author_id: int, data: CommentCreate) -> CommentBody:
    body = data.body.strip()
    if not body:
        raise ValidationErrors({"body": ["can't be blank"]})

    article = await article_repository.get_by_slug(db, slug)
    comment = await comment_repository.create_comment(db, article.id, author_id, body)
    comment.author = await user_repository.get_by_id(db, author_id)

    logger.info("comment created: id=%s article_slug=%s author_id=%s", comment.id, slug, author_id)
    return _to_body(comment)


async def list_comments(db: AsyncSession, slug: str, viewer_id: int | None = None) -> list[CommentBody]:
    """Newest first; ``author.following`` is relative to *viewer_id*."""
    article = await article_repository.get_by_slug(db, slug)
    comments = await comment_repository.list_for_article(db, article.id)

    following: set[int] = set()
    if viewer_id is not None:
        following = await follow_repository.followed_among(
            db, viewer_id, {c.author_id for c in comments}
        )
    return [_to_body(c, c.author_id in following) for c in comments]


async def delete_comment(db: AsyncSession, slug: str, comment_id: int, user_id: int) -> None:
    article = await article_repository.get_by_slug(db, slug)
    comment = await comment_repository.get_by_id(db, comment_id)
    if comment.article_id != article.id:
        raise CommentNotFound()
    if comment.author_id != user_id:
        logger.warning(
            "comment delete rejected: comment_id=%s author_id=%s attempted_by=%s",
            comment_id, comment.author_id, user_id,
        )
        raise Forbidden("comment")

    await comment_repository.delete_comment(db, comment_id)
    logger.info("comment deleted: id=%s article_slug=%s deleted_by=%s", comment_id, slug, user_id)
