"""
Domain error taxonomy and its single translation to HTTP.

Services and repositories raise the subclasses of ``ConduitError`` below;
they never build responses.  ``register_exception_handlers`` installs the
only place where an error becomes a status code and an
``{"errors": {"<field>": ["<message>", ...]}}`` body.
"""
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class ConduitError(Exception):
    """Base class; anything not covered by a subclass renders as a 500."""

    status_code: int = 500
    field: str = "server"
    message: str = "internal server error"

    def __init__(self, message: str | None = None, field: str | None = None) -> None:
        if message is not None:
            self.message = message
        if field is not None:
            self.field = field
        super().__init__(f"{self.field}: {self.message}")

    def to_errors(self) -> dict[str, list[str]]:
        return {self.field: [self.message]}


# ---------------------------------------------------------------------------
# 404
# ---------------------------------------------------------------------------

class NotFoundError(ConduitError):
    status_code = 404


class UserNotFound(NotFoundError):
    field = "profile"
    message = "profile not found"


class ArticleNotFound(NotFoundError):
    field = "article"
    message = "article not found"


class CommentNotFound(NotFoundError):
    field = "comment"
    message = "comment not found"


# ---------------------------------------------------------------------------
# 422 conflicts (RealWorld folds uniqueness violations into field errors)
# ---------------------------------------------------------------------------

class ConflictError(ConduitError):
    status_code = 422
    message = "is already taken"


class EmailAlreadyTaken(ConflictError):
    field = "email"


class UsernameAlreadyTaken(ConflictError):
    field = "username"


class SlugAlreadyTaken(ConflictError):
    field = "slug"


# ---------------------------------------------------------------------------
# 401 / 403
# ---------------------------------------------------------------------------

class Unauthorized(ConduitError):
    status_code = 401
    field = "token"
    message = "authorization required"


class InvalidToken(Unauthorized):
    """Signature, expiry or claim check failed."""


class Forbidden(ConduitError):
    status_code = 403
    message = "you are not authorized to perform this action"

    def __init__(self, resource: str) -> None:
        super().__init__(field=resource)


# ---------------------------------------------------------------------------
# 422 field validation
# ---------------------------------------------------------------------------

class InvalidCredentials(ConduitError):
    """Login failure; deliberately identical for unknown email and bad password."""

    status_code = 422
    field = "email or password"
    message = "is invalid"


class ValidationErrors(ConduitError):
    """Accumulates any number of messages per field."""

    status_code = 422
    field = "body"
    message = "validation failed"

    def __init__(self, errors: dict[str, list[str]] | None = None) -> None:
        self.errors: dict[str, list[str]] = {}
        for field, messages in (errors or {}).items():
            for message in messages:
                self.add(field, message)
        super().__init__()

    def add(self, field: str, message: str) -> None:
        self.errors.setdefault(field, []).append(message)

    def extend(self, other: ConduitError) -> None:
        for field, messages in other.to_errors().items():
            for message in messages:
                self.add(field, message)

    def raise_if_any(self) -> None:
        if self.errors:
            raise self

    def to_errors(self) -> dict[str, list[str]]:
        return {field: list(messages) for field, messages in self.errors.items()}

    def __str__(self) -> str:
        if not self.errors:
            return "validation failed"
        field, messages = next(iter(self.errors.items()))
        return f"validation failed: {field}: {messages[0]}"


# ---------------------------------------------------------------------------
# HTTP mapping
# ---------------------------------------------------------------------------

def error_response(status_code: int, errors: dict[str, list[str]]) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"errors": errors})


async def conduit_error_handler(request: Request, exc: ConduitError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("unexpected error on %s %s: %s", request.method, request.url.path, exc)
        return error_response(500, ConduitError().to_errors())
    return error_response(exc.status_code, exc.to_errors())


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render FastAPI's request-shape errors in the same envelope."""
    errors = ValidationErrors()
    for err in exc.errors():
        loc = [part for part in err.get("loc", ()) if isinstance(part, str)]
        if err.get("type") == "json_invalid" or len(loc) < 2:
            errors.add("body", "invalid request body")
            continue
        errors.add(loc[-1], err.get("msg", "is invalid"))
    return error_response(422, errors.to_errors())


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled error on %s %s", request.method, request.url.path)
    return error_response(500, ConduitError().to_errors())


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ConduitError, conduit_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
