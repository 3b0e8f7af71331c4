"""
Profile and follow endpoint tests.

Covers viewer-relative ``following``, idempotent follow/unfollow and the
self-follow rejection.
"""
import pytest
from httpx import AsyncClient
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from conduit.models import Follow
from helpers import auth, register


@pytest.mark.asyncio
async def test_get_profile_anonymous(async_client: AsyncClient):
    await register(async_client, "celeb")
    resp = await async_client.get("/api/profiles/celeb")
    assert resp.status_code == 200
    assert resp.json() == {"profile": {
        "username": "celeb", "bio": "", "image": "", "following": False,
    }}


@pytest.mark.asyncio
async def test_get_profile_unknown(async_client: AsyncClient):
    resp = await async_client.get("/api/profiles/ghost")
    assert resp.status_code == 404
    assert resp.json() == {"errors": {"profile": ["profile not found"]}}


@pytest.mark.asyncio
async def test_follow_and_unfollow(async_client: AsyncClient):
    fan = await register(async_client, "fan")
    await register(async_client, "celeb")

    resp = await async_client.post("/api/profiles/celeb/follow", headers=auth(fan))
    assert resp.status_code == 200
    assert resp.json()["profile"]["following"] is True

    seen = await async_client.get("/api/profiles/celeb", headers=auth(fan))
    assert seen.json()["profile"]["following"] is True
    anonymous = await async_client.get("/api/profiles/celeb")
    assert anonymous.json()["profile"]["following"] is False

    resp = await async_client.delete("/api/profiles/celeb/follow", headers=auth(fan))
    assert resp.status_code == 200
    assert resp.json()["profile"]["following"] is False

    seen = await async_client.get("/api/profiles/celeb", headers=auth(fan))
    assert seen.json()["profile"]["following"] is False


@pytest.mark.asyncio
async def test_follow_is_idempotent(async_client: AsyncClient, db_session: AsyncSession):
    fan = await register(async_client, "fan")
    await register(async_client, "celeb")

    for _ in range(2):
        resp = await async_client.post("/api/profiles/celeb/follow", headers=auth(fan))
        assert resp.status_code == 200

    count = (await db_session.execute(select(func.count()).select_from(Follow))).scalar_one()
    assert count == 1


@pytest.mark.asyncio
async def test_unfollow_when_not_following(async_client: AsyncClient):
    fan = await register(async_client, "fan")
    await register(async_client, "celeb")
    resp = await async_client.delete("/api/profiles/celeb/follow", headers=auth(fan))
    assert resp.status_code == 200
    assert resp.json()["profile"]["following"] is False


@pytest.mark.asyncio
async def test_self_follow_rejected(async_client: AsyncClient, db_session: AsyncSession):
    me = await register(async_client, "narcissus")
    resp = await async_client.post("/api/profiles/narcissus/follow", headers=auth(me))
    assert resp.status_code == 422
    assert resp.json() == {"errors": {"profile": ["cannot follow yourself"]}}

    count = (await db_session.execute(select(func.count()).select_from(Follow))).scalar_one()
    assert count == 0


@pytest.mark.asyncio
async def test_follow_unknown_user(async_client: AsyncClient):
    fan = await register(async_client, "fan")
    resp = await async_client.post("/api/profiles/ghost/follow", headers=auth(fan))
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_follow_requires_auth(async_client: AsyncClient):
    await register(async_client, "celeb")
    post = await async_client.post("/api/profiles/celeb/follow")
    delete = await async_client.delete("/api/profiles/celeb/follow")
    assert post.status_code == delete.status_code == 401
