"""
End-to-end flows across registration, admin edits, staff publishing and public reads.
"""
import pytest

from newsdesk.services.visibility import PREMIUM_PLACEHOLDER


pytestmark = pytest.mark.asyncio


async def test_reader_upgraded_by_admin_reads_premium_article(client, create_account, login_headers, storage):
    staff, _ = await create_account("staff")
    article = await storage.create_news(
        title="Insider report", content="The whole story", category="business",
        author_id=staff.id, is_premium=True, status="published",
    )

    reg = await client.post(
        "/api/v1/auth/register",
        json={"username": "alice", "email": "alice@x.com", "password": "secret1"},
    )
    assert reg.status_code == 201
    alice_id = reg.json()["data"]["user"]["id"]
    client.cookies.clear()

    login = await client.post("/api/v1/auth/login", json={"email": "alice@x.com", "password": "secret1"})
    assert login.status_code == 200
    alice_headers = {"Authorization": f"Bearer {login.json()['data']['sessionToken']}"}
    client.cookies.clear()

    before = await client.get(f"/api/v1/news/{article.id}", headers=alice_headers)
    assert before.json()["data"]["content"] == PREMIUM_PLACEHOLDER

    admin, admin_password = await create_account("admin")
    admin_headers = await login_headers(admin, admin_password)
    upgrade = await client.patch(f"/api/v1/admin/users/{alice_id}", headers=admin_headers, json={"isPremium": True})
    assert upgrade.status_code == 200

    # Same session, no re-login: identity is re-read on every request
    after = await client.get(f"/api/v1/news/{article.id}", headers=alice_headers)
    assert after.status_code == 200
    assert after.json()["data"]["content"] == "The whole story"


async def test_draft_to_published_lifecycle(client, create_account, login_headers):
    staff, password = await create_account("staff")
    headers = await login_headers(staff, password)

    created = await client.post(
        "/api/v1/staff/news",
        headers=headers,
        json={"title": "Election night", "content": "Results soon", "category": "politics", "status": "draft"},
    )
    assert created.status_code == 201
    news_id = created.json()["data"]["id"]

    staff_list = await client.get("/api/v1/staff/news", headers=headers)
    assert news_id in [n["id"] for n in staff_list.json()["data"]]
    public = await client.get("/api/v1/news")
    assert news_id not in [n["id"] for n in public.json()["data"]]

    published = await client.patch(f"/api/v1/staff/news/{news_id}", headers=headers, json={"status": "published"})
    first_published_at = published.json()["data"]["publishedAt"]
    assert first_published_at is not None

    public = await client.get("/api/v1/news")
    assert news_id in [n["id"] for n in public.json()["data"]]

    retitled = await client.patch(f"/api/v1/staff/news/{news_id}", headers=headers, json={"title": "Election results"})
    assert retitled.json()["data"]["title"] == "Election results"
    assert retitled.json()["data"]["publishedAt"] == first_published_at
