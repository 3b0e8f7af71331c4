from datetime import datetime, timezone
from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; every stored value is UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


UTCDateTime = Annotated[datetime, AfterValidator(_as_utc)]


class CamelModel(BaseModel):
    """Wire format uses camelCase (``tagList``, ``createdAt``)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- User ---

class UserRegister(BaseModel):
    email: str = Field("", max_length=255)
    username: str = Field("", max_length=100)
    password: str = ""


class RegisterRequest(BaseModel):
    user: UserRegister


class UserLogin(BaseModel):
    email: str = ""
    password: str = ""


class LoginRequest(BaseModel):
    user: UserLogin


class UserUpdate(BaseModel):
    """
    Partial update.  Fields absent from the payload are left alone; a field
    present with any value (including ``""`` or ``null`` for bio/image) is
    applied.  Read it with ``model_dump(exclude_unset=True)``.
    """

    email: str | None = Field(None, max_length=255)
    username: str | None = Field(None, max_length=100)
    password: str | None = None
    bio: str | None = None
    image: str | None = None


class UpdateUserRequest(BaseModel):
    user: UserUpdate


class UserBody(BaseModel):
    email: str
    token: str
    username: str
    bio: str | None = None
    image: str | None = None


class UserResponse(BaseModel):
    user: UserBody


# --- Profile ---

class ProfileBody(BaseModel):
    username: str
    bio: str | None = None
    image: str | None = None
    following: bool = False


class ProfileResponse(BaseModel):
    profile: ProfileBody


# --- Article ---

class ArticleCreate(CamelModel):
    title: str = Field("", max_length=300)
    description: str = ""
    body: str = ""
    tag_list: list[str] = Field(default_factory=list)


class CreateArticleRequest(BaseModel):
    article: ArticleCreate


class ArticleUpdate(CamelModel):
    title: str | None = Field(None, max_length=300)
    description: str | None = None
    body: str | None = None
    tag_list: list[str] | None = None


class UpdateArticleRequest(BaseModel):
    article: ArticleUpdate


class ArticleBody(CamelModel):
    slug: str
    title: str
    description: str
    body: str
    tag_list: list[str] = []
    created_at: UTCDateTime
    updated_at: UTCDateTime
    favorited: bool = False
    favorites_count: int = 0
    author: ProfileBody


class ArticleResponse(BaseModel):
    article: ArticleBody


class MultipleArticlesResponse(CamelModel):
    articles: list[ArticleBody]
    articles_count: int


# --- Comment ---

class CommentCreate(BaseModel):
    body: str = ""


class CreateCommentRequest(BaseModel):
    comment: CommentCreate


class CommentBody(CamelModel):
    id: int
    created_at: UTCDateTime
    updated_at: UTCDateTime
    body: str
    author: ProfileBody


class CommentResponse(BaseModel):
    comment: CommentBody


class MultipleCommentsResponse(BaseModel):
    comments: list[CommentBody]


# --- Tag ---

class TagsResponse(BaseModel):
    tags: list[str]
