"""Tests for the identity provider client against a local aiohttp server."""

import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer

from packages.common.auth import Role
from packages.common.errors import InfrastructureFailure, Unauthenticated, ValidationFailed
from packages.common.identity import ClerkIdentityProvider, IdentityResolver, parse_user, profile_metadata, split_name

RAW_USER = {
    "id": "user_1",
    "first_name": "Alex",
    "last_name": "Alum",
    "primary_email_address_id": "em_2",
    "email_addresses": [
        {"id": "em_1", "email_address": "old@x.com"},
        {"id": "em_2", "email_address": "a@x.com"},
    ],
    "public_metadata": {"role": "alumni", "branch": "CSE", "graduationYear": 2018},
    "created_at": 1700000000000,
}


def make_app(store: dict) -> web.Application:
    async def get_user(request: web.Request) -> web.Response:
        if request.headers.get("Authorization") != "Bearer sk_test":
            return web.json_response({"errors": []}, status=401)
        user = store.get(request.match_info["user_id"])
        if user is None:
            return web.json_response({"errors": []}, status=404)
        return web.json_response(user)

    async def patch_metadata(request: web.Request) -> web.Response:
        user = store[request.match_info["user_id"]]
        body = await request.json()
        user["public_metadata"] = {**user["public_metadata"], **body["public_metadata"]}
        return web.json_response(user)

    async def list_users(request: web.Request) -> web.Response:
        offset, limit = int(request.query["offset"]), int(request.query["limit"])
        return web.json_response(list(store.values())[offset:offset + limit])

    async def create_user(request: web.Request) -> web.Response:
        body = await request.json()
        if not body["email_address"][0].count("@"):
            return web.json_response({"errors": [{"message": "bad email"}]}, status=422)
        return web.json_response({"id": "user_new", "first_name": body["first_name"], "last_name": body["last_name"],
                                  "email_addresses": [{"id": "e", "email_address": body["email_address"][0]}],
                                  "primary_email_address_id": "e", "public_metadata": body["public_metadata"]})

    async def boom(request: web.Request) -> web.Response:
        return web.json_response({"errors": []}, status=502)

    app = web.Application()
    app.router.add_get("/users/broken", boom)
    app.router.add_get("/users/{user_id}", get_user)
    app.router.add_patch("/users/{user_id}/metadata", patch_metadata)
    app.router.add_get("/users", list_users)
    app.router.add_post("/users", create_user)
    return app


@pytest_asyncio.fixture
async def client():
    store = {"user_1": dict(RAW_USER)}
    server = TestServer(make_app(store))
    await server.start_server()
    provider = ClerkIdentityProvider(str(server.make_url("")), "sk_test", timeout_sec=5)
    yield provider
    await provider.close()
    await server.close()


def test_parse_user_prefers_primary_email() -> None:
    user = parse_user(RAW_USER)
    if (user.email, user.role, user.graduation_year, user.display_name) != ("a@x.com", Role.ALUMNI, "2018", "Alex Alum"):
        pytest.fail(f"Unexpected parse: {user}")
    if user.created_at is None or user.created_at.year != 2023:
        pytest.fail("created_at is epoch milliseconds")
    bare = parse_user({"id": "u", "public_metadata": {"role": "superuser"}})
    if bare.role is not Role.UNASSIGNED or bare.email != "" or bare.display_name != "Unknown":
        pytest.fail(f"Unknown roles fall back to unassigned: {bare}")


def test_name_and_metadata_helpers() -> None:
    if split_name("  Mary Jane Watson ") != ("Mary", "Jane Watson") or split_name("") != ("", ""):
        pytest.fail("split_name keeps the first token as the first name")
    meta = profile_metadata(Role.STUDENT, branch="", graduation_year="2026")
    if meta != {"role": "student", "graduationYear": "2026"}:
        pytest.fail(f"Empty values are omitted: {meta}")


@pytest.mark.asyncio
async def test_get_and_update_user(client) -> None:
    user = await client.get_user("user_1")
    if user is None or user.role is not Role.ALUMNI:
        pytest.fail(f"Unexpected user: {user}")
    if await client.get_user("nobody") is not None:
        pytest.fail("404 means no such user")
    updated = await client.update_user_metadata("user_1", {"role": "admin"})
    if updated.role is not Role.ADMIN or updated.branch != "CSE":
        pytest.fail("Metadata patch merges into existing metadata")


@pytest.mark.asyncio
async def test_list_and_create(client) -> None:
    users = await client.list_users()
    if [u.id for u in users] != ["user_1"]:
        pytest.fail(f"Unexpected listing: {users}")
    created = await client.create_user("New", "Hire", "hire@x.com", {"role": "student"})
    if created.id != "user_new" or created.role is not Role.STUDENT:
        pytest.fail(f"Unexpected created user: {created}")
    with pytest.raises(ValidationFailed):
        await client.create_user("Bad", "Email", "nope", {})


@pytest.mark.asyncio
async def test_provider_failures_are_infrastructure(client) -> None:
    with pytest.raises(InfrastructureFailure):
        await client.get_user("broken")
    offline = ClerkIdentityProvider("http://127.0.0.1:9", "sk_test", timeout_sec=1)
    try:
        with pytest.raises(InfrastructureFailure):
            await offline.get_user("user_1")
    finally:
        await offline.close()


@pytest.mark.asyncio
async def test_resolver(client) -> None:
    resolver = IdentityResolver(client)
    caller = await resolver.resolve("user_1")
    if caller.caller_id != "user_1" or caller.email != "a@x.com" or caller.role is not Role.ALUMNI:
        pytest.fail(f"Unexpected caller: {caller}")
    for subject in (None, "", "nobody"):
        with pytest.raises(Unauthenticated):
            await resolver.resolve(subject)
