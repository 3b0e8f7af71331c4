from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from conduit.database import get_db
from conduit.dependencies import PaginationParams, optional_user, require_user
from conduit.repositories.article_repository import ArticleFilters
from conduit.schemas import (
    ArticleResponse,
    CreateArticleRequest,
    MultipleArticlesResponse,
    UpdateArticleRequest,
)
from conduit.services import article_service

router = APIRouter(prefix="/api/articles", tags=["articles"])


@router.get("", response_model=MultipleArticlesResponse)
async def list_articles(
    tag: str | None = Query(None, description="Only articles carrying this tag."),
    author: str | None = Query(None, description="Only articles by this username."),
    favorited: str | None = Query(None, description="Only articles this username favorited."),
    pagination: PaginationParams = Depends(),
    viewer_id: int | None = Depends(optional_user),
    db: AsyncSession = Depends(get_db),
):
    filters = ArticleFilters(tag=tag, author=author, favorited=favorited)
    return await article_service.list_articles(
        db, filters, pagination.limit, pagination.offset, viewer_id
    )


# Declared before "/{slug}" so "feed" is never taken for a slug.
@router.get("/feed", response_model=MultipleArticlesResponse)
async def feed(
    pagination: PaginationParams = Depends(),
    user_id: int = Depends(require_user),
    db: AsyncSession = Depends(get_db),
):
    return await article_service.feed(db, user_id, pagination.limit, pagination.offset)


@router.post("", status_code=201, response_model=ArticleResponse)
async def create_article(
    data: CreateArticleRequest,
    user_id: int = Depends(require_user),
    db: AsyncSession = Depends(get_db),
):
    return ArticleResponse(article=await article_service.create_article(db, user_id, data.article))


@router.get("/{slug}", response_model=ArticleResponse)
async def get_article(
    slug: str,
    viewer_id: int | None = Depends(optional_user),
    db: AsyncSession = Depends(get_db),
):
    return ArticleResponse(article=await article_service.get_article(db, slug, viewer_id))


@router.put("/{slug}", response_model=ArticleResponse)
async def update_article(
    slug: str,
    data: UpdateArticleRequest,
    user_id: int = Depends(require_user),
    db: AsyncSession = Depends(get_db),
):
    return ArticleResponse(
        article=await article_service.update_article(db, slug, user_id, data.article)
    )


@router.delete("/{slug}", status_code=204)
async def delete_article(
    slug: str,
    user_id: int = Depends(require_user),
    db: AsyncSession = Depends(get_db),
):
    await article_service.delete_article(db, slug, user_id)


@router.post("/{slug}/favorite", response_model=ArticleResponse)
async def favorite_article(
    slug: str,
    user_id: int = Depends(require_user),
    db: AsyncSession = Depends(get_db),
):
    return ArticleResponse(article=await article_service.favorite_article(db, slug, user_id))


@router.delete("/{slug}/favorite", response_model=ArticleResponse)
async def unfavorite_article(
    slug: str,
    user_id: int = Depends(require_user),
    db: AsyncSession = Depends(get_db),
):
    return ArticleResponse(article=await article_service.unfavorite_article(db, slug, user_id))
