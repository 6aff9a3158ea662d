# tests/test_api.py
"""End-to-end tests of the HTTP routes against an in-memory store."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import httpx
import pytest
from labtrack.config import settings
from labtrack.database import get_db
from labtrack.main import API_PREFIX, app


@pytest.fixture
def client_factory(db, session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db

    def _client():
        return httpx.AsyncClient(
            transport=httpx.ASGITransport(app=app),
            base_url=f"http://test{API_PREFIX}",
        )

    yield _client
    app.dependency_overrides.clear()


async def register(client, student_id=123456, first="Alice", last="Smith", tags=0):
    resp = await client.post("/users", json={
        "student_id": student_id, "first_name": first, "last_name": last, "tags": tags,
    })
    assert resp.status_code == 201, resp.text
    return resp.json()


class TestSessionRoutes:
    @pytest.mark.asyncio
    async def test_check_in_then_out(self, client_factory):
        async with client_factory() as client:
            await register(client)

            resp = await client.post("/sessions/check-in", json={"student_id": 123456})
            assert resp.status_code == 200
            assert resp.json()["time_out"] is None

            resp = await client.get("/users/123456")
            assert resp.json()["logged_in"] is True

            resp = await client.post("/sessions/check-out", json={"student_id": 123456})
            assert resp.status_code == 200
            assert resp.json()["time_out"] is not None

    @pytest.mark.asyncio
    async def test_domain_errors_map_to_status_and_kind(self, client_factory):
        async with client_factory() as client:
            await register(client)

            resp = await client.post("/sessions/check-out", json={"student_id": 123456})
            assert resp.status_code == 409
            assert resp.json()["kind"] == "not_logged_in"

            await client.post("/sessions/check-in", json={"student_id": 123456})
            resp = await client.post("/sessions/check-in", json={"student_id": 123456})
            assert resp.status_code == 409
            assert resp.json()["kind"] == "already_logged_in"

            resp = await client.post("/sessions/check-in", json={"student_id": 5})
            assert resp.status_code == 404
            assert resp.json()["kind"] == "not_found"

    @pytest.mark.asyncio
    async def test_request_needs_exactly_one_identifier(self, client_factory):
        async with client_factory() as client:
            resp = await client.post("/sessions/check-in", json={})
            assert resp.status_code == 422
            resp = await client.post("/sessions/check-in", json={"student_id": 1, "card_id": "X"})
            assert resp.status_code == 422

    @pytest.mark.asyncio
    async def test_out_of_range_ids_rejected_at_the_edge(self, client_factory):
        huge = 99999999999999999999
        async with client_factory() as client:
            resp = await client.post("/sessions/check-in", json={"student_id": huge})
            assert resp.status_code == 422
            resp = await client.post("/users", json={"student_id": huge, "first_name": "A", "last_name": "B"})
            assert resp.status_code == 422
            resp = await client.get(f"/users/{huge}")
            assert resp.status_code == 422
            resp = await client.get(f"/logs/{huge}")
            assert resp.status_code == 422
            resp = await client.get("/logs", params={"student_id": huge})
            assert resp.status_code == 422

    @pytest.mark.asyncio
    async def test_swipe_by_card_and_presence(self, client_factory):
        async with client_factory() as client:
            await register(client)
            resp = await client.put("/users/123456/card", json={"card_id": "CARD-9"})
            assert resp.json()["card_id"] == "CARD-9"

            resp = await client.post("/sessions/swipe", json={"card_id": "CARD-9"})
            assert resp.json()["action"] == "checked_in"

            resp = await client.get("/present")
            body = resp.json()
            assert [u["student_id"] for u in body["students"]] == [123456]
            assert body["total"] == 1

            resp = await client.post("/sessions/swipe", json={"card_id": "CARD-9"})
            assert resp.json()["action"] == "checked_out"


class TestUserRoutes:
    @pytest.mark.asyncio
    async def test_duplicate_registration(self, client_factory):
        async with client_factory() as client:
            await register(client)
            resp = await client.post("/users", json={
                "student_id": 123456, "first_name": "A", "last_name": "B",
            })
            assert resp.status_code == 409
            assert resp.json()["kind"] == "duplicate_id"

    @pytest.mark.asyncio
    async def test_search_and_tags(self, client_factory):
        async with client_factory() as client:
            await register(client)

            resp = await client.get("/users/search", params={"q": "smi"})
            assert [u["student_id"] for u in resp.json()] == [123456]
            resp = await client.get("/users/search", params={"q": "nobody"})
            assert resp.json() == []

            resp = await client.put("/users/123456/tags", json={"tags": 5})
            body = resp.json()
            assert body["white_tag"] and body["green_tag"] and not body["blue_tag"]

            resp = await client.put("/users/123456/tags", json={"tags": 64})
            assert resp.status_code == 422
            assert resp.json()["kind"] == "invalid_input"

    @pytest.mark.asyncio
    async def test_photo_upload_and_fetch(self, client_factory):
        png = b"\x89PNG\r\n\x1a\nfake"
        async with client_factory() as client:
            await register(client)
            resp = await client.put("/users/123456/photo", content=png)
            assert resp.json()["bytes"] == len(png)

            resp = await client.get("/users/123456/photo")
            assert resp.headers["content-type"] == "image/png"
            assert resp.content == png

    @pytest.mark.asyncio
    async def test_delete_guard(self, client_factory):
        async with client_factory() as client:
            await register(client)
            await client.post("/sessions/check-in", json={"student_id": 123456})

            resp = await client.delete("/users/123456")
            assert resp.status_code == 409
            assert resp.json()["kind"] == "has_dependents"

            await register(client, student_id=42)
            resp = await client.delete("/users/42")
            assert resp.status_code == 200
            resp = await client.get("/users/42")
            assert resp.status_code == 404


class TestRosterLogsAuthRoutes:
    @pytest.mark.asyncio
    async def test_roster_import_json(self, client_factory):
        rows = [
            {"StudentID": 1, "firstName": "A", "lastName": "One", "whiteTag": True},
            {"StudentID": 2, "firstName": "B", "lastName": "Two"},
            {"firstName": "No", "lastName": "Id"},
        ]
        async with client_factory() as client:
            resp = await client.post("/roster/import", json={"rows": rows})
            assert resp.json() == {"added": 2, "updated": 0, "skipped": 1}

            resp = await client.post("/roster/import", json={"rows": rows})
            assert resp.json() == {"added": 0, "updated": 0, "skipped": 3}

    @pytest.mark.asyncio
    async def test_roster_import_oversized_id_skipped(self, client_factory):
        rows = [
            {"StudentID": "99999999999999999999", "firstName": "A", "lastName": "B"},
            {"StudentID": 777, "firstName": "C", "lastName": "D", "whiteTag": "false"},
        ]
        async with client_factory() as client:
            resp = await client.post("/roster/import", json={"rows": rows})
            assert resp.json() == {"added": 1, "updated": 0, "skipped": 1}
            resp = await client.get("/users/777")
            assert resp.json()["tags"] == 0

    @pytest.mark.asyncio
    async def test_roster_import_csv_file(self, client_factory):
        csv_body = (
            "Student,SIS User ID,Training Affirmation (Required) (1),BLUE TAG (2)\n"
            '"Smith, Alice",123456,100,1\n'
        )
        async with client_factory() as client:
            resp = await client.post(
                "/roster/import/file", content=csv_body, headers={"content-type": "text/csv"},
            )
            assert resp.json() == {"added": 1, "updated": 0, "skipped": 0}
            resp = await client.get("/users/123456")
            assert resp.json()["tags"] == 3

    @pytest.mark.asyncio
    async def test_log_export_csv(self, client_factory):
        async with client_factory() as client:
            await register(client)
            await client.post("/sessions/check-in", json={"student_id": 123456, "supervising": True})

            resp = await client.get("/logs/export")
            assert resp.status_code == 200
            text = resp.content.decode("utf-8")
            assert text.startswith("\ufeff")
            lines = text.lstrip("\ufeff").splitlines()
            assert lines[0] == '"LogID","StudentID","Time_In","Time_Out","Supervising"'
            assert lines[1].startswith('"1","123456",')
            assert lines[1].endswith('"N/A","1"')

    @pytest.mark.asyncio
    async def test_bootstrap_admin_can_verify(self, client_factory):
        async with client_factory() as client:
            resp = await client.post("/auth/verify", json={
                "student_id": settings.BOOTSTRAP_ADMIN_ID,
                "password": settings.BOOTSTRAP_ADMIN_PASSWORD,
            })
            assert resp.json()["valid"] is True

            resp = await client.put(
                f"/credentials/{settings.BOOTSTRAP_ADMIN_ID}", json={"password": "brand-new-pw"},
            )
            assert resp.status_code == 200

            resp = await client.post("/auth/verify", json={
                "student_id": settings.BOOTSTRAP_ADMIN_ID,
                "password": settings.BOOTSTRAP_ADMIN_PASSWORD,
            })
            assert resp.json()["valid"] is False

    @pytest.mark.asyncio
    async def test_schema_endpoint_is_idempotent(self, client_factory):
        async with client_factory() as client:
            resp = await client.post("/admin/schema")
            assert resp.status_code == 200
            assert resp.json()["changed"] is False

    @pytest.mark.asyncio
    async def test_health(self, client_factory):
        async with client_factory() as client:
            await register(client)
            await client.post("/sessions/check-in", json={"student_id": 123456})

            resp = await client.get("/health")
            body = resp.json()
            assert body["status"] == "ok"
            assert body["missing_tables"] == []
            assert body["present"] == 1
            assert body["open_sessions"] == 1
