"""
protect / restrict_to_admin / restrict_to_owner through the HTTP surface.
"""
from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

PROFILE = "/api/v1/users/editProfile"

BLOG = {
    "title": "Compilers Notes",
    "description": "Unit 1 summary",
    "content": "Lexing and parsing.",
    "branch": {"value": "cse", "label": "Computer Science"},
    "semester": {"value": "s5", "label": "Semester 5"},
    "subject": {"value": "cd", "label": "Compiler Design"},
    "tags": ["compilers"],
}


# ─── protect ─────────────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_missing_authorization_header(client):
    r = await client.get(PROFILE)
    assert r.status_code == 401
    assert r.json()["message"] == "You are not logged in! Please log in to get access."


@pytest.mark.asyncio
async def test_non_bearer_authorization_header(client, register, login):
    await register()
    token = await login()
    r = await client.get(PROFILE, headers={"Authorization": f"Token {token}"})
    assert r.status_code == 401


@pytest.mark.asyncio
async def test_tampered_token(client, register, login, auth_header):
    await register()
    token = await login()
    header, payload, signature = token.split(".")
    forged = ".".join([header, payload, signature[::-1]])
    r = await client.get(PROFILE, headers=auth_header(forged))
    assert r.status_code == 401
    assert r.json()["message"] == "Invalid token. Please log in again!"


@pytest.mark.asyncio
async def test_token_signed_with_other_secret(client, register, login, auth_header):
    await register()
    token = await login()
    claims = jwt.get_unverified_claims(token)
    forged = jwt.encode(claims, "not-the-server-secret", algorithm="HS256")
    r = await client.get(PROFILE, headers=auth_header(forged))
    assert r.status_code == 401


@pytest.mark.asyncio
async def test_expired_token(client, register, login, auth_header, clock):
    await register()
    clock.advance(days=-2)
    token = await login()
    r = await client.get(PROFILE, headers=auth_header(token))
    assert r.status_code == 401
    assert r.json()["message"] == "Your token has expired! Please log in again."


@pytest.mark.asyncio
async def test_token_for_unknown_user(client, settings, auth_header):
    now = datetime.now(tz=timezone.utc)
    token = jwt.encode(
        {"id": "00000000-0000-0000-0000-000000000000", "iat": int(now.timestamp()), "exp": now + timedelta(hours=1)},
        settings.JWT_SECRET_KEY,
        algorithm=settings.JWT_ALGORITHM,
    )
    r = await client.get(PROFILE, headers=auth_header(token))
    assert r.status_code == 401
    assert r.json()["message"] == "The user belonging to this token does no longer exist."


@pytest.mark.asyncio
async def test_token_issued_before_password_reset_is_stale(client, register, login, auth_header, mailbox, clock):
    await register()
    old = await login()
    assert (await client.get(PROFILE, headers=auth_header(old))).status_code == 200

    clock.advance(minutes=1)
    await client.post("/api/v1/users/forgotPassword", json={"email": "a@nitc.ac.in"})
    r = await client.patch(
        f"/api/v1/users/resetPassword/{mailbox.last_token('resetPassword')}",
        json={"password": "BrandNewPass77", "passwordConfirm": "BrandNewPass77"},
    )
    assert r.status_code == 200

    r = await client.get(PROFILE, headers=auth_header(old))
    assert r.status_code == 401
    assert r.json()["message"] == "User recently changed password! Please log in again."

    fresh = await login(password="BrandNewPass77")
    assert (await client.get(PROFILE, headers=auth_header(fresh))).status_code == 200


@pytest.mark.asyncio
async def test_deleted_account_session_is_rejected(client, register, login, auth_header):
    await register()
    token = await login()
    r = await client.delete("/api/v1/users/deleteMe", headers=auth_header(token))
    assert r.status_code == 204

    r = await client.get(PROFILE, headers=auth_header(token))
    assert r.status_code == 401
    assert r.json()["message"] == "The user belonging to this token does no longer exist."


# ─── restrict_to_admin ───────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_admin_routes_reject_regular_users(client, register, login, auth_header):
    await register()
    token = await login()
    r = await client.get("/api/v1/blogs/admin", headers=auth_header(token))
    assert r.status_code == 403
    assert r.json()["message"] == "You do not have permission to perform this action"


@pytest.mark.asyncio
async def test_admin_routes_require_login(client):
    r = await client.get("/api/v1/blogs/admin")
    assert r.status_code == 401


@pytest.mark.asyncio
async def test_admin_routes_allow_admins(client, register, login, make_admin, auth_header):
    await register()
    await make_admin("a@nitc.ac.in")
    token = await login()
    r = await client.get("/api/v1/blogs/admin", headers=auth_header(token))
    assert r.status_code == 200
    assert r.json()["data"] == []


# ─── restrict_to_owner ───────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_only_owner_may_modify_blog(client, register, login, auth_header):
    await register("owner@nitc.ac.in", name="Owner One")
    await register("other@nitc.ac.in", name="Other Two")
    owner = await login("owner@nitc.ac.in")
    other = await login("other@nitc.ac.in")

    r = await client.post("/api/v1/blogs", json=BLOG, headers=auth_header(owner))
    assert r.status_code == 201
    blog_id = r.json()["data"]["id"]

    r = await client.patch(f"/api/v1/blogs/{blog_id}", json={"description": "hijacked"}, headers=auth_header(other))
    assert r.status_code == 403
    r = await client.delete(f"/api/v1/blogs/{blog_id}", headers=auth_header(other))
    assert r.status_code == 403

    r = await client.patch(f"/api/v1/blogs/{blog_id}", json={"description": "revised"}, headers=auth_header(owner))
    assert r.status_code == 200
    assert r.json()["data"]["description"] == "revised"

    r = await client.delete(f"/api/v1/blogs/{blog_id}", headers=auth_header(owner))
    assert r.status_code == 204


@pytest.mark.asyncio
async def test_owner_check_on_missing_blog(client, register, login, auth_header):
    await register()
    token = await login()
    r = await client.patch("/api/v1/blogs/does-not-exist", json={"description": "x"}, headers=auth_header(token))
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_owner_check_requires_login(client):
    r = await client.delete("/api/v1/blogs/anything")
    assert r.status_code == 401
