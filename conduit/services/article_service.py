"""
Article service: business rules for the Article aggregate.

Design notes
------------
- Slugs are derived from the title once, at creation.  Editing the title
  later keeps the slug so existing URLs stay valid.
- Viewer-specific fields (``favorited``, ``author.following``) are filled
  in with one query each per page rather than per article, and stay False
  when no viewer is known.
- Only the author may update or delete an article; anyone else gets
  ``Forbidden`` after the article itself has been found.
- The public tag list goes through the cache-aside pattern.  An article
  that introduces or replaces tags invalidates it once the transaction
  commits, never before, so a concurrent reader cannot re-cache the old set.
- Service functions flush but do not commit; the transaction boundary
  is owned by the ``get_db`` dependency in the router layer.
"""
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from conduit.cache import TAGS_KEY, cache
from conduit.config import settings
from conduit.database import call_after_commit
from conduit.errors import Forbidden, ValidationErrors
from conduit.models import Article
from conduit.repositories import (
    article_repository,
    favorite_repository,
    follow_repository,
    tag_repository,
)
from conduit.repositories.article_repository import ArticleFilters
from conduit.schemas import ArticleBody, ArticleCreate, ArticleUpdate, MultipleArticlesResponse
from conduit.services.profile_service import to_profile
from conduit.slug import generate_unique_slug

logger = logging.getLogger(__name__)

BLANK = "can't be blank"


# ---------------------------------------------------------------------------
# Response assembly
# ---------------------------------------------------------------------------

async def _to_bodies(
    db: AsyncSession, articles: list[Article], viewer_id: int | None
) -> list[ArticleBody]:
    ids = [a.id for a in articles]
    counts = await favorite_repository.counts_for(db, ids)
    favorited: set[int] = set()
    following: set[int] = set()
    if viewer_id is not None:
        favorited = await favorite_repository.favorited_among(db, viewer_id, ids)
        following = await follow_repository.followed_among(
            db, viewer_id, {a.author_id for a in articles}
        )

    return [
        ArticleBody(
            slug=a.slug,
            title=a.title,
            description=a.description,
            body=a.body,
            tag_list=sorted(t.name for t in a.tags),
            created_at=a.created_at,
            updated_at=a.updated_at,
            favorited=a.id in favorited,
            favorites_count=counts.get(a.id, 0),
            author=to_profile(a.author, a.author_id in following),
        )
        for a in articles
    ]


async def _to_body(db: AsyncSession, article: Article, viewer_id: int | None) -> ArticleBody:
    return (await _to_bodies(db, [article], viewer_id))[0]


def _clamp_page(limit: int | None, offset: int | None) -> tuple[int, int]:
    if limit is None or limit <= 0:
        limit = settings.DEFAULT_PAGE_SIZE
    return min(limit, settings.MAX_PAGE_SIZE), max(offset or 0, 0)


async def _owned_article(db: AsyncSession, slug: str, user_id: int, action: str) -> Article:
    article = await article_repository.get_by_slug(db, slug)
    if article.author_id != user_id:
        logger.warning(
            "article %s rejected: article_id=%s author_id=%s attempted_by=%s",
            action, article.id, article.author_id, user_id,
        )
        raise Forbidden("article")
    return article


# ---------------------------------------------------------------------------
# Public service functions
# ---------------------------------------------------------------------------

async def create_article(db: AsyncSession, author_id: int, data: ArticleCreate) -> ArticleBody:
    errors = ValidationErrors()
    for field in ("title", "description", "body"):
        if not getattr(data, field).strip():
            errors.add(field, BLANK)
    errors.raise_if_any()

    async def taken(candidate: str) -> bool:
        return await article_repository.slug_exists(db, candidate)

    slug = await generate_unique_slug(data.title, taken)
    article = await article_repository.create_article(
        db,
        author_id=author_id,
        slug=slug,
        title=data.title.strip(),
        description=data.description.strip(),
        body=data.body,
        tag_names=data.tag_list,
    )
    if article.tags:
        call_after_commit(db, cache.invalidate_tags)

    logger.info("article created: id=%s slug=%s author_id=%s", article.id, article.slug, author_id)
    return await _to_body(db, article, author_id)


async def get_article(db: AsyncSession, slug: str, viewer_id: int | None = None) -> ArticleBody:
    article = await article_repository.get_by_slug(db, slug)
    return await _to_body(db, article, viewer_id)


async def update_article(
    db: AsyncSession, slug: str, user_id: int, data: ArticleUpdate
) -> ArticleBody:
    """
    Partially update an article owned by *user_id*.

    Only fields explicitly present in the payload change
    (``model_dump(exclude_unset=True)``); present text fields must not be
    blank.  ``tagList``, when present, replaces the whole tag set.
    """
    article = await _owned_article(db, slug, user_id, "update")

    changes = data.model_dump(exclude_unset=True)
    tag_names: list[str] | None = changes.pop("tag_list", None)

    errors = ValidationErrors()
    fields: dict[str, str] = {}
    for field, value in changes.items():
        if value is None or not value.strip():
            errors.add(field, BLANK)
        else:
            fields[field] = value if field == "body" else value.strip()
    errors.raise_if_any()

    article = await article_repository.update_article(db, article, fields, tag_names)
    if tag_names is not None:
        call_after_commit(db, cache.invalidate_tags)

    logger.info("article updated: id=%s slug=%s updated_by=%s", article.id, article.slug, user_id)
    return await _to_body(db, article, user_id)


async def delete_article(db: AsyncSession, slug: str, user_id: int) -> None:
    article = await _owned_article(db, slug, user_id, "delete")
    await article_repository.delete_article(db, article.id)
    logger.info("article deleted: id=%s slug=%s deleted_by=%s", article.id, slug, user_id)


async def list_articles(
    db: AsyncSession,
    filters: ArticleFilters | None = None,
    limit: int | None = None,
    offset: int | None = None,
    viewer_id: int | None = None,
) -> MultipleArticlesResponse:
    limit, offset = _clamp_page(limit, offset)
    articles, total = await article_repository.list_articles(
        db, filters or ArticleFilters(), limit, offset
    )
    return MultipleArticlesResponse(
        articles=await _to_bodies(db, articles, viewer_id),
        articles_count=total,
    )


async def feed(
    db: AsyncSession,
    viewer_id: int,
    limit: int | None = None,
    offset: int | None = None,
) -> MultipleArticlesResponse:
    limit, offset = _clamp_page(limit, offset)
    articles, total = await article_repository.feed(db, viewer_id, limit, offset)
    return MultipleArticlesResponse(
        articles=await _to_bodies(db, articles, viewer_id),
        articles_count=total,
    )


async def favorite_article(db: AsyncSession, slug: str, user_id: int) -> ArticleBody:
    """Idempotent: favoriting twice leaves one favorite."""
    article = await article_repository.get_by_slug(db, slug)
    await favorite_repository.favorite(db, user_id, article.id)
    return await _to_body(db, article, user_id)


async def unfavorite_article(db: AsyncSession, slug: str, user_id: int) -> ArticleBody:
    """Idempotent: unfavoriting an article that is not favorited is a no-op."""
    article = await article_repository.get_by_slug(db, slug)
    await favorite_repository.unfavorite(db, user_id, article.id)
    return await _to_body(db, article, user_id)


async def list_tags(db: AsyncSession) -> list[str]:
    cached = await cache.get(TAGS_KEY)
    if cached is not None:
        return cached
    tags = await tag_repository.list_tag_names(db)
    await cache.set(TAGS_KEY, tags, ttl=settings.CACHE_TTL_TAGS)
    return tags
