"""Request helpers shared by the endpoint tests."""
from httpx import AsyncClient


async def register(client: AsyncClient, username: str, password: str = "secret123") -> dict:
    """Register *username* (email derived from it) and return the user body."""
    resp = await client.post("/api/users", json={"user": {
        "username": username,
        "email": f"{username}@example.com",
        "password": password,
    }})
    assert resp.status_code == 201, resp.text
    return resp.json()["user"]


def auth(user: dict) -> dict:
    return {"Authorization": f"Token {user['token']}"}


async def create_article(client: AsyncClient, user: dict, title: str = "Hello World", **fields) -> dict:
    payload = {
        "title": title,
        "description": fields.pop("description", "An article"),
        "body": fields.pop("body", "Article body"),
        **fields,
    }
    resp = await client.post("/api/articles", json={"article": payload}, headers=auth(user))
    assert resp.status_code == 201, resp.text
    return resp.json()["article"]
