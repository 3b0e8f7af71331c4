"""
Auth service: registration, login and the current user's account.

Login deliberately reports one ``InvalidCredentials`` error for both an
unknown email and a wrong password, and spends a password verification on
the unknown-email path too so response timing does not tell them apart.

Password hashing and verification are CPU-bound, so they run in the
threadpool; the event loop keeps serving other requests meanwhile.
"""
import logging
from functools import lru_cache

from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from conduit.errors import (
    ConflictError,
    EmailAlreadyTaken,
    InvalidCredentials,
    UserNotFound,
    UsernameAlreadyTaken,
    ValidationErrors,
)
from conduit.models import User
from conduit.repositories import user_repository
from conduit.schemas import UserBody, UserLogin, UserRegister, UserUpdate
from conduit.security import hash_password, issue_token, verify_password

logger = logging.getLogger(__name__)

BLANK = "can't be blank"


def normalize_email(email: str) -> str:
    return email.strip().lower()


@lru_cache(maxsize=1)
def _dummy_hash() -> str:
    return hash_password("conduit-timing-equaliser")


def _verify_against_dummy(password: str) -> bool:
    return verify_password(password, _dummy_hash())


def _user_body(user: User) -> UserBody:
    return UserBody(
        email=user.email,
        token=issue_token(user.id),
        username=user.username,
        bio=user.bio,
        image=user.image,
    )


def _raise_conflicts(conflicts: list[ConflictError]) -> None:
    """Raise a lone conflict as itself; several together as one field-error set."""
    if len(conflicts) == 1:
        raise conflicts[0]
    if conflicts:
        errors = ValidationErrors()
        for conflict in conflicts:
            errors.extend(conflict)
        raise errors


async def register(db: AsyncSession, data: UserRegister) -> UserBody:
    email = normalize_email(data.email)
    username = data.username.strip()

    errors = ValidationErrors()
    if not email:
        errors.add("email", BLANK)
    elif "@" not in email:
        errors.add("email", "is invalid")
    if not username:
        errors.add("username", BLANK)
    if not data.password:
        errors.add("password", BLANK)
    errors.raise_if_any()

    conflicts: list[ConflictError] = []
    if await user_repository.email_taken(db, email):
        conflicts.append(EmailAlreadyTaken())
    if await user_repository.username_taken(db, username):
        conflicts.append(UsernameAlreadyTaken())
    _raise_conflicts(conflicts)

    user = await user_repository.create_user(
        db, email, username, await run_in_threadpool(hash_password, data.password)
    )
    logger.info("user registered: id=%s username=%s", user.id, user.username)
    return _user_body(user)


async def login(db: AsyncSession, data: UserLogin) -> UserBody:
    errors = ValidationErrors()
    if not data.email.strip():
        errors.add("email", BLANK)
    if not data.password:
        errors.add("password", BLANK)
    errors.raise_if_any()

    try:
        user = await user_repository.get_by_email(db, normalize_email(data.email))
    except UserNotFound:
        await run_in_threadpool(_verify_against_dummy, data.password)
        raise InvalidCredentials() from None

    if not await run_in_threadpool(verify_password, data.password, user.password_hash):
        raise InvalidCredentials()

    logger.info("user logged in: id=%s", user.id)
    return _user_body(user)


async def get_current_user(db: AsyncSession, user_id: int) -> UserBody:
    """Return the account for *user_id* with a freshly issued token."""
    return _user_body(await user_repository.get_by_id(db, user_id))


async def update_user(db: AsyncSession, user_id: int, data: UserUpdate) -> UserBody:
    """
    Apply only the fields present in *data*.

    Email and username are re-checked for uniqueness when they change; a
    present, non-empty password is re-hashed; bio and image accept any
    value, ``""`` and ``null`` included.
    """
    user = await user_repository.get_by_id(db, user_id)
    changes = data.model_dump(exclude_unset=True)

    errors = ValidationErrors()
    conflicts: list[ConflictError] = []
    updates: dict = {}

    if "email" in changes:
        email = normalize_email(changes["email"] or "")
        if not email:
            errors.add("email", BLANK)
        elif "@" not in email:
            errors.add("email", "is invalid")
        elif email != user.email and await user_repository.email_taken(db, email, exclude_id=user.id):
            conflicts.append(EmailAlreadyTaken())
        else:
            updates["email"] = email

    if "username" in changes:
        username = (changes["username"] or "").strip()
        if not username:
            errors.add("username", BLANK)
        elif username != user.username and await user_repository.username_taken(
            db, username, exclude_id=user.id
        ):
            conflicts.append(UsernameAlreadyTaken())
        else:
            updates["username"] = username

    errors.raise_if_any()
    _raise_conflicts(conflicts)

    if changes.get("password"):
        updates["password_hash"] = await run_in_threadpool(hash_password, changes["password"])
    for field in ("bio", "image"):
        if field in changes:
            updates[field] = changes[field]

    for field, value in updates.items():
        setattr(user, field, value)

    await user_repository.save_user(db, user)
    logger.info("user updated: id=%s fields=%s", user.id, sorted(changes))
    return _user_body(user)
