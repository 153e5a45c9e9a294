"""Tests for blog endpoints, including OTP-gated deletion."""
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import select

from app.models.blog import BlogPost
from app.models.otp import OTPCode
from tests.conftest import ADMIN_HEADERS, RECIPIENT


async def _issue_code(client, db) -> str:
    resp = await client.post("/v1/otp")
    assert resp.status_code == 200
    result = await db.execute(select(OTPCode).where(OTPCode.identity == RECIPIENT))
    return result.scalar_one().code


async def _post_exists(db, post_id) -> bool:
    result = await db.execute(select(BlogPost).where(BlogPost.id == post_id))
    return result.scalar_one_or_none() is not None


@pytest.mark.asyncio
async def test_list_posts(client, blog_post):
    resp = await client.get("/v1/blogs")
    assert resp.status_code == 200
    data = resp.json()
    assert len(data) == 1
    assert data[0]["id"] == str(blog_post.id)
    assert data[0]["tags"] == ["etl", "spark"]


@pytest.mark.asyncio
async def test_get_post(client, blog_post):
    resp = await client.get(f"/v1/blogs/{blog_post.id}")
    assert resp.status_code == 200
    assert resp.json()["title"] == "Partitioning Parquet for fun"


@pytest.mark.asyncio
async def test_get_post_not_found(client):
    resp = await client.get("/v1/blogs/not-a-uuid")
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_create_post(client):
    resp = await client.post(
        "/v1/blogs",
        json={"title": "Hello", "content": "word " * 401, "tags": ["intro"]},
        headers=ADMIN_HEADERS,
    )
    assert resp.status_code == 201
    data = resp.json()
    assert data["read_time"] == "3 min read"
    assert len(data["date"]) == 10
    assert len(data["time"]) == 5


@pytest.mark.asyncio
async def test_create_post_requires_admin_key(client):
    resp = await client.post("/v1/blogs", json={"title": "Hello", "content": "Body"})
    assert resp.status_code == 401
    resp = await client.post("/v1/blogs", json={"title": "Hello", "content": "Body"}, headers={"X-Admin-Key": "nope"})
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_create_post_validation(client):
    resp = await client.post("/v1/blogs", json={"title": "Hello"}, headers=ADMIN_HEADERS)
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_update_post(client, blog_post):
    resp = await client.put(
        f"/v1/blogs/{blog_post.id}",
        json={"title": "Renamed", "content": "short"},
        headers=ADMIN_HEADERS,
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["title"] == "Renamed"
    assert data["read_time"] == "1 min read"
    assert data["description"] == "Notes from a data pipeline rewrite"


@pytest.mark.asyncio
async def test_update_post_not_found(client):
    resp = await client.put(
        "/v1/blogs/00000000-0000-0000-0000-000000000000",
        json={"title": "Renamed"},
        headers=ADMIN_HEADERS,
    )
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_delete_with_header(client, db, relay, blog_post):
    code = await _issue_code(client, db)
    resp = await client.delete(f"/v1/blogs/{blog_post.id}", headers={"X-OTP": code})
    assert resp.status_code == 200
    assert resp.json()["message"] == "Deleted successfully"
    assert not await _post_exists(db, blog_post.id)


@pytest.mark.asyncio
async def test_delete_with_query(client, db, relay, blog_post):
    code = await _issue_code(client, db)
    resp = await client.delete(f"/v1/blogs/{blog_post.id}", params={"otp": code})
    assert resp.status_code == 200


@pytest.mark.asyncio
async def test_delete_confirm_body(client, db, relay, blog_post):
    code = await _issue_code(client, db)
    resp = await client.post("/v1/blogs/delete-confirm", json={"blog_id": str(blog_post.id), "otp": code})
    assert resp.status_code == 200
    assert not await _post_exists(db, blog_post.id)


@pytest.mark.asyncio
async def test_delete_without_code(client, blog_post):
    resp = await client.delete(f"/v1/blogs/{blog_post.id}")
    assert resp.status_code == 401
    assert resp.json()["detail"] == "OTP_REQUIRED"


@pytest.mark.asyncio
async def test_delete_with_wrong_code(client, db, relay, blog_post):
    code = await _issue_code(client, db)
    wrong = "100000" if code != "100000" else "100001"
    resp = await client.delete(f"/v1/blogs/{blog_post.id}", headers={"X-OTP": wrong})
    assert resp.status_code == 401
    assert resp.json()["detail"] == "INVALID_OR_EXPIRED_OTP"
    assert await _post_exists(db, blog_post.id)

    resp = await client.delete(f"/v1/blogs/{blog_post.id}", headers={"X-OTP": code})
    assert resp.status_code == 200


@pytest.mark.asyncio
async def test_delete_code_is_single_use(client, db, relay, blog_post):
    code = await _issue_code(client, db)
    await client.delete(f"/v1/blogs/{blog_post.id}", headers={"X-OTP": code})

    other = BlogPost(title="Second", content="Body", read_time="1 min read", date="2026-01-16", time="10:00")
    db.add(other)
    await db.commit()

    resp = await client.delete(f"/v1/blogs/{other.id}", headers={"X-OTP": code})
    assert resp.status_code == 401
    assert resp.json()["detail"] == "INVALID_OR_EXPIRED_OTP"
    assert await _post_exists(db, other.id)


@pytest.mark.asyncio
async def test_delete_with_expired_code(client, db, relay, blog_post):
    code = await _issue_code(client, db)
    result = await db.execute(select(OTPCode).where(OTPCode.identity == RECIPIENT))
    otp = result.scalar_one()
    otp.issued_at = datetime.now(timezone.utc) - timedelta(minutes=6)
    await db.commit()

    resp = await client.delete(f"/v1/blogs/{blog_post.id}", headers={"X-OTP": code})
    assert resp.status_code == 401
    assert resp.json()["detail"] == "OTP_EXPIRED"
    assert await _post_exists(db, blog_post.id)

    resp = await client.delete(f"/v1/blogs/{blog_post.id}", headers={"X-OTP": code})
    assert resp.json()["detail"] == "INVALID_OR_EXPIRED_OTP"


@pytest.mark.asyncio
async def test_delete_missing_post_consumes_code(client, db, relay):
    code = await _issue_code(client, db)
    resp = await client.delete("/v1/blogs/00000000-0000-0000-0000-000000000000", headers={"X-OTP": code})
    assert resp.status_code == 404

    result = await db.execute(select(OTPCode).where(OTPCode.identity == RECIPIENT))
    assert result.scalar_one_or_none() is None


@pytest.mark.asyncio
async def test_list_posts_sorted_by_post_date(client):
    for title, date in (("Newer", "2026-05-01"), ("Backdated", "2020-01-01")):
        resp = await client.post(
            "/v1/blogs",
            json={"title": title, "content": "Body", "date": date, "time": "08:00"},
            headers=ADMIN_HEADERS,
        )
        assert resp.status_code == 201

    resp = await client.get("/v1/blogs")
    assert [p["title"] for p in resp.json()] == ["Newer", "Backdated"]


@pytest.mark.asyncio
async def test_list_posts_same_date_sorted_by_time(client):
    for title, time in (("Morning", "08:00"), ("Evening", "20:15")):
        await client.post(
            "/v1/blogs",
            json={"title": title, "content": "Body", "date": "2026-05-01", "time": time},
            headers=ADMIN_HEADERS,
        )

    resp = await client.get("/v1/blogs")
    assert [p["title"] for p in resp.json()] == ["Evening", "Morning"]


@pytest.mark.asyncio
async def test_delete_malformed_id_keeps_code(client, db, relay, blog_post):
    code = await _issue_code(client, db)
    resp = await client.delete("/v1/blogs/not-a-uuid", headers={"X-OTP": code})
    assert resp.status_code == 404

    result = await db.execute(select(OTPCode).where(OTPCode.identity == RECIPIENT))
    assert result.scalar_one().code == code

    resp = await client.post("/v1/blogs/delete-confirm", json={"blog_id": "not-a-uuid", "otp": code})
    assert resp.status_code == 404

    resp = await client.delete(f"/v1/blogs/{blog_post.id}", headers={"X-OTP": code})
    assert resp.status_code == 200
