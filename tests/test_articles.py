"""
Article endpoint tests: CRUD, ownership, listing filters, pagination, the
personal feed and the tag list.
"""
from datetime import datetime

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from conduit.models import Comment, Tag
from helpers import auth, create_article, register


# ---------------------------------------------------------------------------
# Create / read
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_create_article(async_client: AsyncClient):
    author = await register(async_client, "writer")
    article = await create_article(
        async_client, author, "How to Train Your Dragon",
        description="Ever wonder how?", body="You have to believe",
        tagList=["training", "dragons"],
    )
    assert article["slug"] == "how-to-train-your-dragon"
    assert article["title"] == "How to Train Your Dragon"
    assert article["tagList"] == ["dragons", "training"]
    assert article["favorited"] is False
    assert article["favoritesCount"] == 0
    assert article["author"] == {
        "username": "writer", "bio": "", "image": "", "following": False,
    }


@pytest.mark.asyncio
async def test_same_title_gets_suffixed_slug(async_client: AsyncClient):
    author = await register(async_client, "writer")
    first = await create_article(async_client, author, "Hello World")
    second = await create_article(async_client, author, "Hello World")
    third = await create_article(async_client, author, "Hello, World!")
    assert first["slug"] == "hello-world"
    assert second["slug"] == "hello-world-1"
    assert third["slug"] == "hello-world-2"


@pytest.mark.asyncio
async def test_create_article_blank_fields(async_client: AsyncClient):
    author = await register(async_client, "writer")
    resp = await async_client.post(
        "/api/articles", headers=auth(author),
        json={"article": {"title": " ", "description": "", "body": ""}},
    )
    assert resp.status_code == 422
    assert set(resp.json()["errors"]) == {"title", "description", "body"}


@pytest.mark.asyncio
async def test_create_article_requires_auth(async_client: AsyncClient):
    resp = await async_client.post("/api/articles", json={"article": {
        "title": "t", "description": "d", "body": "b",
    }})
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_duplicate_tags_collapse(async_client: AsyncClient, db_session: AsyncSession):
    author = await register(async_client, "writer")
    article = await create_article(async_client, author, tagList=["go", "go", " python "])
    assert article["tagList"] == ["go", "python"]

    await create_article(async_client, author, "Another", tagList=["go"])
    count = (await db_session.execute(select(func.count()).select_from(Tag))).scalar_one()
    assert count == 2


@pytest.mark.asyncio
async def test_get_article(async_client: AsyncClient):
    author = await register(async_client, "writer")
    created = await create_article(async_client, author)
    resp = await async_client.get(f"/api/articles/{created['slug']}")
    assert resp.status_code == 200
    assert resp.json()["article"] == created


@pytest.mark.asyncio
async def test_get_unknown_article(async_client: AsyncClient):
    resp = await async_client.get("/api/articles/nope")
    assert resp.status_code == 404
    assert resp.json() == {"errors": {"article": ["article not found"]}}


@pytest.mark.asyncio
async def test_invalid_token_on_optional_route_is_anonymous(async_client: AsyncClient):
    author = await register(async_client, "writer")
    created = await create_article(async_client, author)
    resp = await async_client.get(
        f"/api/articles/{created['slug']}", headers={"Authorization": "Token not-a-jwt"}
    )
    assert resp.status_code == 200
    assert resp.json()["article"]["favorited"] is False


# ---------------------------------------------------------------------------
# Update / delete
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_update_keeps_slug(async_client: AsyncClient):
    author = await register(async_client, "writer")
    created = await create_article(async_client, author, "Original Title")
    resp = await async_client.put(
        f"/api/articles/{created['slug']}", headers=auth(author),
        json={"article": {"title": "Brand New Title"}},
    )
    assert resp.status_code == 200
    updated = resp.json()["article"]
    assert updated["title"] == "Brand New Title"
    assert updated["slug"] == "original-title"
    assert updated["description"] == created["description"]
    assert datetime.fromisoformat(updated["updatedAt"]) >= datetime.fromisoformat(created["updatedAt"])


@pytest.mark.asyncio
async def test_update_replaces_tags(async_client: AsyncClient):
    author = await register(async_client, "writer")
    created = await create_article(async_client, author, tagList=["old", "keep"])
    resp = await async_client.put(
        f"/api/articles/{created['slug']}", headers=auth(author),
        json={"article": {"tagList": ["keep", "new"]}},
    )
    assert resp.json()["article"]["tagList"] == ["keep", "new"]

    untouched = await async_client.put(
        f"/api/articles/{created['slug']}", headers=auth(author),
        json={"article": {"body": "edited"}},
    )
    assert untouched.json()["article"]["tagList"] == ["keep", "new"]


@pytest.mark.asyncio
async def test_update_blank_field_rejected(async_client: AsyncClient):
    author = await register(async_client, "writer")
    created = await create_article(async_client, author)
    resp = await async_client.put(
        f"/api/articles/{created['slug']}", headers=auth(author),
        json={"article": {"title": ""}},
    )
    assert resp.status_code == 422
    assert resp.json() == {"errors": {"title": ["can't be blank"]}}


@pytest.mark.asyncio
async def test_update_by_non_author_forbidden(async_client: AsyncClient):
    author = await register(async_client, "writer")
    other = await register(async_client, "other")
    created = await create_article(async_client, author)
    resp = await async_client.put(
        f"/api/articles/{created['slug']}", headers=auth(other),
        json={"article": {"title": "Hijacked"}},
    )
    assert resp.status_code == 403
    assert resp.json() == {"errors": {"article": ["you are not authorized to perform this action"]}}

    unchanged = await async_client.get(f"/api/articles/{created['slug']}")
    assert unchanged.json()["article"]["title"] == "Hello World"


@pytest.mark.asyncio
async def test_update_unknown_article(async_client: AsyncClient):
    author = await register(async_client, "writer")
    resp = await async_client.put(
        "/api/articles/nope", headers=auth(author), json={"article": {"title": "x"}}
    )
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_delete_article_cascades(async_client: AsyncClient, db_session: AsyncSession):
    author = await register(async_client, "writer")
    created = await create_article(async_client, author, tagList=["kept"])
    slug = created["slug"]
    await async_client.post(
        f"/api/articles/{slug}/comments", headers=auth(author), json={"comment": {"body": "first"}}
    )
    await async_client.post(f"/api/articles/{slug}/favorite", headers=auth(author))

    resp = await async_client.delete(f"/api/articles/{slug}", headers=auth(author))
    assert resp.status_code == 204
    assert resp.content == b""

    assert (await async_client.get(f"/api/articles/{slug}")).status_code == 404
    comments = (await db_session.execute(select(func.count()).select_from(Comment))).scalar_one()
    assert comments == 0

    tags = await async_client.get("/api/tags")
    assert tags.json() == {"tags": ["kept"]}


@pytest.mark.asyncio
async def test_delete_by_non_author_forbidden(async_client: AsyncClient):
    author = await register(async_client, "writer")
    other = await register(async_client, "other")
    created = await create_article(async_client, author)
    resp = await async_client.delete(f"/api/articles/{created['slug']}", headers=auth(other))
    assert resp.status_code == 403
    assert (await async_client.get(f"/api/articles/{created['slug']}")).status_code == 200


# ---------------------------------------------------------------------------
# Listing
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_list_newest_first(async_client: AsyncClient):
    author = await register(async_client, "writer")
    for title in ("First", "Second", "Third"):
        await create_article(async_client, author, title)

    resp = await async_client.get("/api/articles")
    assert resp.status_code == 200
    data = resp.json()
    assert data["articlesCount"] == 3
    assert [a["slug"] for a in data["articles"]] == ["third", "second", "first"]


@pytest.mark.asyncio
async def test_list_empty(async_client: AsyncClient):
    resp = await async_client.get("/api/articles")
    assert resp.json() == {"articles": [], "articlesCount": 0}


@pytest.mark.asyncio
async def test_list_filters(async_client: AsyncClient):
    alice = await register(async_client, "alice")
    bob = await register(async_client, "bob")
    a1 = await create_article(async_client, alice, "Alice One", tagList=["python"])
    await create_article(async_client, alice, "Alice Two", tagList=["go"])
    b1 = await create_article(async_client, bob, "Bob One", tagList=["python"])
    await async_client.post(f"/api/articles/{b1['slug']}/favorite", headers=auth(alice))

    by_tag = (await async_client.get("/api/articles", params={"tag": "python"})).json()
    assert {a["slug"] for a in by_tag["articles"]} == {a1["slug"], b1["slug"]}
    assert by_tag["articlesCount"] == 2

    by_author = (await async_client.get("/api/articles", params={"author": "alice"})).json()
    assert by_author["articlesCount"] == 2
    assert all(a["author"]["username"] == "alice" for a in by_author["articles"])

    by_favorite = (await async_client.get("/api/articles", params={"favorited": "alice"})).json()
    assert [a["slug"] for a in by_favorite["articles"]] == [b1["slug"]]

    combined = (await async_client.get(
        "/api/articles", params={"tag": "python", "author": "alice"}
    )).json()
    assert [a["slug"] for a in combined["articles"]] == [a1["slug"]]

    nobody = (await async_client.get("/api/articles", params={"author": "ghost"})).json()
    assert nobody == {"articles": [], "articlesCount": 0}


@pytest.mark.asyncio
async def test_list_pagination(async_client: AsyncClient):
    author = await register(async_client, "writer")
    for i in range(5):
        await create_article(async_client, author, f"Post {i}")

    page = (await async_client.get("/api/articles", params={"limit": 2, "offset": 1})).json()
    assert page["articlesCount"] == 5
    assert [a["slug"] for a in page["articles"]] == ["post-3", "post-2"]

    past_end = (await async_client.get("/api/articles", params={"offset": 10})).json()
    assert past_end == {"articles": [], "articlesCount": 5}


@pytest.mark.asyncio
@pytest.mark.parametrize("params", [{"limit": 0}, {"limit": -1}, {"offset": -1}, {"limit": "many"}])
async def test_list_invalid_pagination(async_client: AsyncClient, params: dict):
    resp = await async_client.get("/api/articles", params=params)
    assert resp.status_code == 422
    assert "errors" in resp.json()


@pytest.mark.asyncio
async def test_list_limit_is_clamped(async_client: AsyncClient):
    resp = await async_client.get("/api/articles", params={"limit": 10_000})
    assert resp.status_code == 200


# ---------------------------------------------------------------------------
# Feed
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_feed_shows_followed_authors_only(async_client: AsyncClient):
    reader = await register(async_client, "reader")
    followed = await register(async_client, "followed")
    stranger = await register(async_client, "stranger")
    await create_article(async_client, followed, "Followed Post")
    await create_article(async_client, stranger, "Stranger Post")
    await create_article(async_client, reader, "Own Post")

    empty = (await async_client.get("/api/articles/feed", headers=auth(reader))).json()
    assert empty == {"articles": [], "articlesCount": 0}

    await async_client.post("/api/profiles/followed/follow", headers=auth(reader))
    feed = (await async_client.get("/api/articles/feed", headers=auth(reader))).json()
    assert feed["articlesCount"] == 1
    assert feed["articles"][0]["slug"] == "followed-post"
    assert feed["articles"][0]["author"]["following"] is True


@pytest.mark.asyncio
async def test_feed_requires_auth(async_client: AsyncClient):
    resp = await async_client.get("/api/articles/feed")
    assert resp.status_code == 401


# ---------------------------------------------------------------------------
# Tags
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_tags_sorted_and_distinct(async_client: AsyncClient):
    author = await register(async_client, "writer")
    assert (await async_client.get("/api/tags")).json() == {"tags": []}

    await create_article(async_client, author, "One", tagList=["zebra", "apple"])
    await create_article(async_client, author, "Two", tagList=["mango", "apple"])

    resp = await async_client.get("/api/tags")
    assert resp.status_code == 200
    assert resp.json() == {"tags": ["apple", "mango", "zebra"]}


@pytest.mark.asyncio
async def test_health(async_client: AsyncClient):
    resp = await async_client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}
