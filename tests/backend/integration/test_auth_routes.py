import pytest

from newsdesk.config import settings


pytestmark = pytest.mark.asyncio


async def register_user(client, username: str, email: str, password: str):
    return await client.post(
        "/api/v1/auth/register",
        json={"username": username, "email": email, "password": password},
    )


async def login_reader(client, email: str, password: str):
    return await client.post("/api/v1/auth/login", json={"email": email, "password": password})


async def test_register_and_login_flow(client, storage):
    resp = await register_user(client, "alice", "Alice@Example.com", "secret1")
    body = resp.json()
    assert resp.status_code == 201
    assert body["success"] is True
    assert body["data"]["user"]["username"] == "alice"
    assert body["data"]["user"]["role"] == "reader"
    assert body["data"]["user"]["email"] == "alice@example.com"
    assert "passwordHash" not in body["data"]["user"]
    assert settings.session_cookie_name in resp.cookies
    client.cookies.clear()

    # Duplicate email is a conflict and creates nothing
    count = await storage.count_accounts()
    dup_resp = await register_user(client, "alice2", "alice@example.com", "secret1")
    assert dup_resp.status_code == 409
    assert dup_resp.json()["detail"]["code"] == "EMAIL_EXISTS"
    assert await storage.count_accounts() == count

    dup_name = await register_user(client, "ALICE", "other@example.com", "secret1")
    assert dup_name.status_code == 409
    assert dup_name.json()["detail"]["code"] == "USERNAME_EXISTS"

    login_resp = await login_reader(client, "alice@example.com", "secret1")
    assert login_resp.status_code == 200
    assert "sessionToken" in login_resp.json()["data"]
    assert settings.session_cookie_name in login_resp.cookies

    bad_login = await login_reader(client, "alice@example.com", "wrong")
    missing = await login_reader(client, "nobody@example.com", "secret1")
    assert bad_login.status_code == missing.status_code == 401
    assert bad_login.json() == missing.json()
    assert bad_login.json()["detail"]["code"] == "AUTH_INVALID_CREDENTIALS"


async def test_register_rejects_invalid_payload(client):
    resp = await register_user(client, "al", "not-an-email", "123")
    assert resp.status_code == 422


async def test_role_is_not_accepted_at_registration(client):
    resp = await client.post(
        "/api/v1/auth/register",
        json={"username": "mallory", "email": "m@example.com", "password": "secret1", "role": "admin"},
    )
    assert resp.status_code == 201
    assert resp.json()["data"]["user"]["role"] == "reader"


async def test_staff_login_requires_staff_role(client, create_account):
    staff, password = await create_account("staff")
    reader, reader_password = await create_account("reader")

    ok = await client.post("/api/v1/auth/staff/login", json={"staffId": staff.username, "password": password})
    assert ok.status_code == 200
    assert ok.json()["data"]["user"]["role"] == "staff"

    denied = await client.post(
        "/api/v1/auth/staff/login", json={"staffId": reader.username, "password": reader_password},
    )
    assert denied.status_code == 401
    assert denied.json()["detail"]["code"] == "AUTH_INVALID_CREDENTIALS"


async def test_admin_login_requires_security_key(client, create_account):
    admin, password = await create_account("admin")
    payload = {"adminId": admin.username, "password": password}

    ok = await client.post("/api/v1/auth/admin/login", json={**payload, "securityKey": settings.admin_security_key})
    assert ok.status_code == 200

    bad_key = await client.post("/api/v1/auth/admin/login", json={**payload, "securityKey": "nope"})
    bad_password = await client.post(
        "/api/v1/auth/admin/login",
        json={"adminId": admin.username, "password": "nope", "securityKey": settings.admin_security_key},
    )
    assert bad_key.status_code == bad_password.status_code == 401
    assert bad_key.json() == bad_password.json()


async def test_me_change_password_and_logout(client, create_account, login_headers):
    reader, password = await create_account("reader")
    headers = await login_headers(reader, password)

    me_resp = await client.get("/api/v1/auth/me", headers=headers)
    assert me_resp.status_code == 200
    assert me_resp.json()["data"]["username"] == reader.username

    wrong_current = await client.post(
        "/api/v1/auth/change-password",
        json={"currentPassword": "wrong", "newPassword": "NewPass#456"},
        headers=headers,
    )
    assert wrong_current.status_code == 401

    change_resp = await client.post(
        "/api/v1/auth/change-password",
        json={"currentPassword": password, "newPassword": "NewPass#456"},
        headers=headers,
    )
    assert change_resp.status_code == 200
    assert change_resp.json()["data"]["ok"] is True

    assert (await login_reader(client, reader.email, password)).status_code == 401
    assert (await login_reader(client, reader.email, "NewPass#456")).status_code == 200
    client.cookies.clear()

    logout_resp = await client.post("/api/v1/auth/logout", headers=headers)
    assert logout_resp.status_code == 200
    assert (await client.get("/api/v1/auth/me", headers=headers)).status_code == 401

    # Logging out twice is harmless
    assert (await client.post("/api/v1/auth/logout", headers=headers)).status_code == 200


async def test_cookie_session(client, create_account):
    reader, password = await create_account("reader")
    await login_reader(client, reader.email, password)
    me_resp = await client.get("/api/v1/auth/me")
    assert me_resp.status_code == 200
    assert me_resp.json()["data"]["id"] == reader.id


async def test_me_requires_authentication(client):
    resp = await client.get("/api/v1/auth/me")
    assert resp.status_code == 401
    assert resp.json()["detail"]["code"] == "AUTH_REQUIRED"

    bad = await client.get("/api/v1/auth/me", headers={"Authorization": "Bearer garbage"})
    assert bad.status_code == 401
