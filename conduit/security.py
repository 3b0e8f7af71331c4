"""
Password hashing and JWT issuance/validation.

Tokens are stateless: there is no server-side session or denylist, so a
token stays valid until its ``exp`` claim passes.  Logging out is a
client-side discard.
"""
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt
from passlib.context import CryptContext

from conduit.config import settings
from conduit.errors import InvalidToken

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


# ---------------------------------------------------------------------------
# Passwords
# ---------------------------------------------------------------------------

def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """Return False (never raise) for a mismatch or an unrecognised hash."""
    try:
        return pwd_context.verify(password, password_hash)
    except (ValueError, TypeError):
        return False


# ---------------------------------------------------------------------------
# Tokens
# ---------------------------------------------------------------------------

def issue_token(
    user_id: int,
    secret: str | None = None,
    expiry: timedelta | None = None,
) -> str:
    """Sign a token whose ``user_id`` claim identifies *user_id*."""
    now = datetime.now(timezone.utc)
    claims = {
        "user_id": user_id,
        "iat": now,
        "exp": now + (expiry if expiry is not None else settings.JWT_EXPIRY),
    }
    return jwt.encode(claims, secret or settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def validate_token(token: str, secret: str | None = None) -> int:
    """
    Return the user id carried by *token*.

    Raises ``InvalidToken`` when the signature does not verify, the token
    has expired, or the ``user_id`` claim is missing or not an integer.
    """
    try:
        claims = jwt.decode(
            token,
            secret or settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
            options={"require_exp": True},
        )
    except JWTError as exc:
        raise InvalidToken() from exc

    user_id = claims.get("user_id")
    if isinstance(user_id, bool) or not isinstance(user_id, int):
        raise InvalidToken()
    return user_id
