from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from conduit.database import get_db
from conduit.dependencies import optional_user, require_user
from conduit.schemas import CommentResponse, CreateCommentRequest, MultipleCommentsResponse
from conduit.services import comment_service

router = APIRouter(prefix="/api/articles/{slug}/comments", tags=["comments"])


@router.get("", response_model=MultipleCommentsResponse)
async def list_comments(
    slug: str,
    viewer_id: int | None = Depends(optional_user),
    db: AsyncSession = Depends(get_db),
):
    return MultipleCommentsResponse(
        comments=await comment_service.list_comments(db, slug, viewer_id)
    )


@router.post("", status_code=201, response_model=CommentResponse)
async def add_comment(
    slug: str,
    data: CreateCommentRequest,
    user_id: int = Depends(require_user),
    db: AsyncSession = Depends(get_db),
):
    return CommentResponse(
        comment=await comment_service.add_comment(db, slug, user_id, data.comment)
    )


@router.delete("/{comment_id}", status_code=204)
async def delete_comment(
    slug: str,
    comment_id: int,
    user_id: int = Depends(require_user),
    db: AsyncSession = Depends(get_db),
):
    await comment_service.delete_comment(db, slug, comment_id, user_id)
