from fastapi import Header, Query

from conduit.config import settings
from conduit.errors import InvalidToken, Unauthorized
from conduit.security import validate_token

TOKEN_SCHEME = "Token"


def extract_token(authorization: str | None) -> str | None:
    """
    Return the credential from an ``Authorization: Token <jwt>`` header.

    The scheme keyword is case-sensitive; anything else (``Bearer``,
    ``token``, a bare value) counts as no token at all.
    """
    if not authorization:
        return None
    scheme, _, value = authorization.partition(" ")
    value = value.strip()
    if scheme != TOKEN_SCHEME or not value:
        return None
    return value


async def require_user(authorization: str | None = Header(None)) -> int:
    """
    Guard for routes that need a logged-in user; yields the user id.

    A missing header, wrong scheme, bad signature or expired token all end
    the request with 401 before the route body runs.
    """
    token = extract_token(authorization)
    if token is None:
        raise Unauthorized()
    return validate_token(token)


async def optional_user(authorization: str | None = Header(None)) -> int | None:
    """
    Guard for routes that render differently for a known viewer.

    Any failure to authenticate degrades to an anonymous request (None)
    instead of rejecting it.
    """
    token = extract_token(authorization)
    if token is None:
        return None
    try:
        return validate_token(token)
    except InvalidToken:
        return None


class PaginationParams:
    """
    Reusable FastAPI dependency that parses ``limit`` / ``offset`` query
    parameters.

    Usage in a router::

        @router.get("/articles")
        async def list_articles(pagination: PaginationParams = Depends()):
            ...

    Attributes
    ----------
    limit:
        Number of items per page, clamped to ``settings.MAX_PAGE_SIZE``
        regardless of the value supplied by the caller.
    offset:
        Number of items to skip.
    """

    def __init__(
        self,
        limit: int = Query(
            20,
            ge=1,
            description="Number of items returned (max 100).",
        ),
        offset: int = Query(
            0,
            ge=0,
            description="Number of items to skip.",
        ),
    ) -> None:
        self.limit = min(limit, settings.MAX_PAGE_SIZE)
        self.offset = offset
