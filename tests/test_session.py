import time

import jwt
import pytest

SECRET = "test-jwt-secret-with-enough-length-123"


def make_token(sub="user-1", email="student.21cse001@portal.local", expires_in=3600, secret=SECRET):
    now = int(time.time())
    claims = {"sub": sub, "email": email, "aud": "authenticated", "role": "authenticated", "iat": now, "exp": now + expires_in}
    return jwt.encode(claims, secret, algorithm="HS256")


@pytest.mark.asyncio
async def test_session_reports_roles(client, gateway):
    gateway.roles.append({"user_id": "user-1", "role": "student"})
    gateway.roles.append({"user_id": "user-1", "role": "student"})
    gateway.roles.append({"user_id": "user-2", "role": "admin"})

    res = await client.get("/api/portal/session", headers={"Authorization": f"Bearer {make_token()}"})

    assert res.status_code == 200
    assert res.json() == {
        "user_id": "user-1",
        "email": "student.21cse001@portal.local",
        "roles": ["student"],
        "is_admin": False,
        "is_faculty": False,
        "is_student": True,
    }


@pytest.mark.asyncio
async def test_session_ignores_unknown_roles(client, gateway):
    gateway.roles.append({"user_id": "user-1", "role": "janitor"})
    gateway.roles.append({"user_id": "user-1", "role": "faculty"})

    res = await client.get("/api/portal/session", headers={"Authorization": f"Bearer {make_token()}"})

    assert res.json()["roles"] == ["faculty"]
    assert res.json()["is_faculty"] is True


@pytest.mark.asyncio
async def test_session_requires_token(client):
    res = await client.get("/api/portal/session")
    assert res.status_code == 401


@pytest.mark.asyncio
async def test_session_rejects_expired_token(client):
    token = make_token(expires_in=-60)
    res = await client.get("/api/portal/session", headers={"Authorization": f"Bearer {token}"})

    assert res.status_code == 401
    assert res.json() == {"error": "Could not validate credentials"}


@pytest.mark.asyncio
async def test_session_rejects_foreign_signature(client):
    token = make_token(secret="another-secret-that-is-long-enough-000")
    res = await client.get("/api/portal/session", headers={"Authorization": f"Bearer {token}"})

    assert res.status_code == 401
