import asyncio
import pathlib
import sys

from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker
from sqlmodel import SQLModel

sys.path.append(str(pathlib.Path(__file__).resolve().parents[2]))

from academy.main import app
from academy.database import get_session
from academy.crud import ensure_course_catalog, get_published_courses
from academy.course_catalog import COURSE_CATALOG


async def _setup_empty_db():
    engine = create_async_engine("sqlite+aiosqlite:///:memory:")
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    TestSession = async_sessionmaker(engine, expire_on_commit=False)

    async def override_get_session():
        async with TestSession() as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session
    return TestSession


async def _register(client, name, email, password="pass"):
    resp = await client.post(
        "/register", json={"name": name, "email": email, "password": password}
    )
    return resp


async def _login(client, email, password="pass"):
    resp = await client.post("/login", json={"email": email, "password": password})
    assert resp.status_code == 200
    return {"Authorization": f"Bearer {resp.json()['access_token']}"}


def test_first_registered_user_is_admin():
    async def run():
        await _setup_empty_db()
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            resp = await _register(client, "First", "first@example.com")
            assert resp.status_code == 200
            assert resp.json()["role"] == "admin"
            assert resp.json()["locale"] == "en"

            resp = await _register(client, "Second", "second@example.com")
            assert resp.json()["role"] == "student"

            resp = await _register(client, "Again", "second@example.com")
            assert resp.status_code == 409
            assert resp.json()["code"] == "conflict"

            resp = await client.post(
                "/login", json={"email": "second@example.com", "password": "wrong"}
            )
            assert resp.status_code == 401
            assert resp.json()["code"] == "authentication_error"

            resp = await client.post(
                "/token", data={"username": "second@example.com", "password": "pass"}
            )
            assert resp.status_code == 200
            headers = {"Authorization": f"Bearer {resp.json()['access_token']}"}
            resp = await client.get("/users/me", headers=headers)
            assert resp.json()["email"] == "second@example.com"

    asyncio.run(run())


def test_course_creation_and_enrollment():
    async def run():
        await _setup_empty_db()
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            await _register(client, "Admin", "admin@example.com")
            await _register(client, "Student", "s@example.com")
            admin_headers = await _login(client, "admin@example.com")
            headers = await _login(client, "s@example.com")

            payload = {
                "slug": "ddd",
                "title": "DDD",
                "modules": [
                    {"title": "Intro", "lessons": ["One", "Two"]},
                    {"title": "Deep", "lessons": ["Three"]},
                ],
            }
            resp = await client.post("/courses/", headers=headers, json=payload)
            assert resp.status_code == 403

            resp = await client.post("/courses/", headers=admin_headers, json=payload)
            assert resp.status_code == 200
            course = resp.json()
            assert [m["slug"] for m in course["modules"]] == ["module-1", "module-2"]
            assert [l["slug"] for l in course["modules"][0]["lessons"]] == [
                "lesson-1",
                "lesson-2",
            ]

            resp = await client.post("/courses/", headers=admin_headers, json=payload)
            assert resp.status_code == 409

            resp = await client.post(
                "/courses/",
                headers=admin_headers,
                json={"slug": "hidden", "title": "Hidden", "status": "draft"},
            )
            assert resp.status_code == 200

            resp = await client.get("/courses/")
            assert [c["slug"] for c in resp.json()] == ["ddd"]

            resp = await client.get(f"/courses/{course['id']}")
            assert resp.status_code == 200
            assert len(resp.json()["modules"]) == 2

            resp = await client.get("/courses/9999")
            assert resp.status_code == 404

            resp = await client.post(f"/courses/{course['id']}/enroll", headers=headers)
            assert resp.status_code == 200
            assert resp.json()["status"] == "active"

            resp = await client.post(f"/courses/{course['id']}/enroll", headers=headers)
            assert resp.status_code == 409

            resp = await client.post("/courses/9999/enroll", headers=headers)
            assert resp.status_code == 404

    asyncio.run(run())


def test_catalog_seeding_is_repeatable():
    async def run():
        TestSession = await _setup_empty_db()
        async with TestSession() as session:
            await ensure_course_catalog(session)
            await ensure_course_catalog(session)
            published = await get_published_courses(session)
        expected = [c["slug"] for c in COURSE_CATALOG if c["status"] == "published"]
        assert [c.slug for c in published] == expected

    asyncio.run(run())
