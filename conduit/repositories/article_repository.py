"""
Article persistence.

Author is eager-loaded with ``joinedload`` (many-to-one) and tags with
``selectinload`` (many-to-many) so list endpoints issue a fixed number of
statements regardless of page size.  ``unique()`` is required after any
query that combines ``joinedload`` with collection loading.
"""
from dataclasses import dataclass

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload, selectinload

from conduit.errors import ArticleNotFound, SlugAlreadyTaken
from conduit.models import Article, Tag, User, utcnow
from conduit.repositories import tag_repository
from conduit.repositories.common import integrity_detail
from conduit.repositories.favorite_repository import favorited_by_username_query
from conduit.repositories.follow_repository import followee_ids_query


@dataclass
class ArticleFilters:
    tag: str | None = None
    author: str | None = None
    favorited: str | None = None


async def _flush_article(db: AsyncSession) -> None:
    try:
        await db.flush()
    except IntegrityError as exc:
        if "slug" in integrity_detail(exc):
            raise SlugAlreadyTaken() from exc
        raise


async def slug_exists(db: AsyncSession, slug: str) -> bool:
    q = select(Article.id).where(Article.slug == slug)
    return (await db.execute(q)).first() is not None


async def create_article(
    db: AsyncSession,
    author_id: int,
    slug: str,
    title: str,
    description: str,
    body: str,
    tag_names: list[str],
) -> Article:
    article = Article(
        slug=slug,
        title=title,
        description=description,
        body=body,
        author_id=author_id,
    )
    article.tags = await tag_repository.get_or_create_tags(db, tag_names)
    db.add(article)
    await _flush_article(db)
    return await get_by_slug(db, slug)


async def get_by_slug(db: AsyncSession, slug: str) -> Article:
    q = (
        select(Article)
        .where(Article.slug == slug)
        .options(joinedload(Article.author), selectinload(Article.tags))
        .execution_options(populate_existing=True)
    )
    article = (await db.execute(q)).unique().scalar_one_or_none()
    if article is None:
        raise ArticleNotFound()
    return article


async def update_article(
    db: AsyncSession,
    article: Article,
    fields: dict,
    tag_names: list[str] | None = None,
) -> Article:
    """Apply *fields* (already validated) and optionally replace the tag set."""
    for name, value in fields.items():
        setattr(article, name, value)
    if tag_names is not None:
        article.tags = await tag_repository.get_or_create_tags(db, tag_names)
    article.updated_at = utcnow()
    await _flush_article(db)
    return article


async def delete_article(db: AsyncSession, article_id: int) -> None:
    # Comments, favorites and tag links go with it via ON DELETE CASCADE.
    await db.execute(delete(Article).where(Article.id == article_id))


async def _page(db: AsyncSession, criteria: list, limit: int, offset: int) -> tuple[list[Article], int]:
    count_q = select(func.count()).select_from(Article).where(*criteria)
    total: int = (await db.execute(count_q)).scalar_one()

    rows_q = (
        select(Article)
        .where(*criteria)
        .options(joinedload(Article.author), selectinload(Article.tags))
        .order_by(Article.created_at.desc(), Article.id.desc())
        .offset(offset)
        .limit(limit)
    )
    articles = list((await db.execute(rows_q)).unique().scalars().all())
    return articles, total


async def list_articles(
    db: AsyncSession, filters: ArticleFilters, limit: int, offset: int
) -> tuple[list[Article], int]:
    """Newest-first page of articles matching every supplied filter, plus the total."""
    criteria = []
    if filters.tag:
        criteria.append(Article.tags.any(Tag.name == filters.tag))
    if filters.author:
        criteria.append(Article.author.has(User.username == filters.author))
    if filters.favorited:
        criteria.append(Article.id.in_(favorited_by_username_query(filters.favorited)))
    return await _page(db, criteria, limit, offset)


async def feed(db: AsyncSession, follower_id: int, limit: int, offset: int) -> tuple[list[Article], int]:
    """Articles written by authors *follower_id* follows, newest first."""
    return await _page(db, [Article.author_id.in_(followee_ids_query(follower_id))], limit, offset)
