"""Tests for the HTTP gateway."""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from conftest import days_from_now, issue_token
from packages.common.errors import InfrastructureFailure
from packages.common.identity import IdentityResolver
from services.gateway.app import app
from services.gateway.dependencies import get_database, get_invalidator, get_resolver


@pytest_asyncio.fixture
async def http(database, provider, invalidator):
    app.dependency_overrides[get_database] = lambda: database
    app.dependency_overrides[get_resolver] = lambda: IdentityResolver(provider)
    app.dependency_overrides[get_invalidator] = lambda: invalidator
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


def bearer(subject: str) -> dict:
    return {"Authorization": f"Bearer {issue_token(subject)}"}


@pytest.mark.asyncio
async def test_healthz_and_openapi(http) -> None:
    r = await http.get("/healthz", headers={"X-Request-ID": "req-1"})
    if r.status_code != 200 or r.headers.get("X-Request-ID") != "req-1":
        pytest.fail(f"Expected 200 with echoed request id, got {r.status_code} {r.headers}")
    r = await http.get("/openapi.json")
    if r.status_code != 200:
        pytest.fail(f"Expected 200, got {r.status_code}")


@pytest.mark.asyncio
async def test_event_scenario_over_http(http, admin, student) -> None:
    body = {"title": "Homecoming", "description": "Reunion", "date": days_from_now(7).isoformat(), "location": "Quad"}
    created = await http.post("/events", json=body, headers=bearer(admin))
    if created.status_code != 201 or created.json()["data"]["isActive"] is not True:
        pytest.fail(f"Expected 201 with an active event, got {created.status_code} {created.text}")
    event_id = created.json()["data"]["id"]

    denied = await http.post(f"/events/{event_id}/toggle", headers=bearer(student))
    if denied.status_code != 403 or denied.json()["error"] != "unauthorized":
        pytest.fail(f"Expected 403, got {denied.status_code} {denied.text}")

    toggled = await http.post(f"/events/{event_id}/toggle", headers=bearer(admin))
    if toggled.status_code != 200 or toggled.json()["data"]["isActive"] is not False:
        pytest.fail(f"Expected inactive event, got {toggled.text}")

    recent = await http.get("/events/recent")
    if recent.status_code != 200 or recent.json()["data"] != []:
        pytest.fail("Inactive events are not listed publicly")


@pytest.mark.asyncio
async def test_status_mapping(http, admin) -> None:
    r = await http.get("/events")
    if r.status_code != 401 or r.json()["error"] != "unauthenticated":
        pytest.fail(f"Missing token should be 401, got {r.status_code}")
    r = await http.get("/events", headers={"Authorization": "Bearer not-a-jwt"})
    if r.status_code != 401:
        pytest.fail(f"Invalid token should be 401, got {r.status_code}")
    r = await http.get("/events/missing", headers=bearer(admin))
    if r.status_code != 404:
        pytest.fail(f"Expected 404, got {r.status_code}")
    r = await http.post("/internships", json={"title": "x"}, headers=bearer(admin))
    if r.status_code != 422 or r.json()["success"] is not False:
        pytest.fail(f"Expected 422, got {r.status_code}")


@pytest.mark.asyncio
async def test_infrastructure_failure_is_503(http, provider, admin) -> None:
    async def unreachable(user_id):
        raise InfrastructureFailure("identity provider down")

    provider.get_user = unreachable
    r = await http.get("/posts", headers=bearer(admin))
    if r.status_code != 503 or r.json()["success"] is not False:
        pytest.fail(f"Expected 503, got {r.status_code} {r.text}")


@pytest.mark.asyncio
async def test_mentor_and_user_routes(http, alumni, admin, student) -> None:
    application = {"specializations": ["ML"], "experience": "4y", "bio": "b", "graduated": "2019", "branch": "CSE"}
    applied = await http.post("/mentors/applications", json=application, headers=bearer(alumni))
    if applied.status_code != 201:
        pytest.fail(f"Expected 201, got {applied.status_code} {applied.text}")
    mentor_id = applied.json()["data"]["id"]
    dup = await http.post("/mentors/applications", json=application, headers=bearer(alumni))
    if dup.status_code != 422:
        pytest.fail(f"Duplicate application should be 422, got {dup.status_code}")
    approved = await http.put(f"/mentors/{mentor_id}/status", json={"status": "approved"}, headers=bearer(admin))
    if approved.json()["data"]["status"] != "approved":
        pytest.fail(f"Approval failed: {approved.text}")
    sent = await http.post("/mentors/messages", json={"mentorId": mentor_id, "message": "Hi"}, headers=bearer(student))
    if sent.status_code != 201:
        pytest.fail(f"Expected 201, got {sent.status_code} {sent.text}")

    role = await http.get("/users/me/role", headers=bearer(student))
    if role.json()["data"] != {"role": "student"}:
        pytest.fail(f"Unexpected role: {role.text}")
    stats = await http.get("/users/analytics", headers=bearer(admin))
    if stats.status_code != 200 or stats.json()["data"]["totalUsers"] != 3:
        pytest.fail(f"Unexpected analytics: {stats.text}")
