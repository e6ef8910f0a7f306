import re

import httpx
import pytest
from sqlalchemy.ext.asyncio import create_async_engine

from app.controllers.base import REQUEST_ID_HEADER
from app.controllers.event_controller import EventController
from app.database import TransactionManager, build_session_factory, init_models
from app.dependencies import get_event_controller, get_parrot_controller
from app.errors import NotFoundError
from app.main import app
from app.repositories.event_repository import EventRepository
from app.services.event_service import EventService

ISO_RE = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z$")

EVENT_BODY = {
    "name": "Test Event",
    "description": "This is a test event",
    "eventStartDatetime": "2025-01-01T10:00:00.000Z",
    "eventEndDatetime": "2025-01-01T12:00:00.000Z",
    "capacity": 100,
}


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def isolated_store(tmp_path):
    """Point the events endpoints at a throwaway SQLite database."""

    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'api.db'}")
    session_factory = build_session_factory(engine)
    controller = EventController(
        EventService(TransactionManager(session_factory), EventRepository(session_factory))
    )
    app.dependency_overrides[get_event_controller] = lambda: controller
    yield engine
    app.dependency_overrides.pop(get_event_controller, None)


def _client() -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test")


# ============================================================
# /api/events
# ============================================================

@pytest.mark.anyio
async def test_create_event_returns_201_with_generated_fields(isolated_store):
    await init_models(isolated_store)
    try:
        async with _client() as client:
            response = await client.post("/api/events", json=EVENT_BODY)

        assert response.status_code == 201
        data = response.json()["data"]
        assert isinstance(data["id"], int)
        assert data["name"] == "Test Event"
        assert data["description"] == "This is a test event"
        assert data["eventStartDatetime"] == "2025-01-01T10:00:00.000Z"
        assert data["eventEndDatetime"] == "2025-01-01T12:00:00.000Z"
        assert data["capacity"] == 100
        assert ISO_RE.match(data["createdAt"])
        assert ISO_RE.match(data["updatedAt"])
        assert response.headers[REQUEST_ID_HEADER]
    finally:
        await isolated_store.dispose()


@pytest.mark.anyio
async def test_created_events_are_listed(isolated_store):
    await init_models(isolated_store)
    try:
        async with _client() as client:
            empty = await client.get("/api/events")
            without_description = {k: v for k, v in EVENT_BODY.items() if k != "description"}
            await client.post("/api/events", json=without_description)
            await client.post("/api/events", json={**EVENT_BODY, "name": "Second"})
            listed = await client.get("/api/events")

        assert empty.status_code == 200
        assert empty.json() == {"data": []}

        assert listed.status_code == 200
        events = listed.json()["data"]
        assert [event["name"] for event in events] == ["Test Event", "Second"]
        assert events[0]["description"] is None
    finally:
        await isolated_store.dispose()


@pytest.mark.anyio
async def test_create_event_without_name_is_rejected(isolated_store):
    await init_models(isolated_store)
    try:
        body = {k: v for k, v in EVENT_BODY.items() if k != "name"}
        async with _client() as client:
            response = await client.post("/api/events", json=body)

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["message"] == "Invalid request body"
        assert error["type"] == "INVALID_PARAMETER"
        assert error["fields"]["name"] == "name is required"
    finally:
        await isolated_store.dispose()


@pytest.mark.anyio
async def test_create_event_with_empty_period_is_rejected(isolated_store):
    await init_models(isolated_store)
    try:
        body = {**EVENT_BODY, "eventEndDatetime": EVENT_BODY["eventStartDatetime"]}
        async with _client() as client:
            response = await client.post("/api/events", json=body)
            listed = await client.get("/api/events")

        assert response.status_code == 400
        assert response.json()["error"]["fields"] == {
            "eventEndDatetime": "eventEndDatetime must be after than eventStartDatetime"
        }
        assert listed.json() == {"data": []}
    finally:
        await isolated_store.dispose()


@pytest.mark.anyio
async def test_capacity_sent_as_whole_float_is_stored_as_int(isolated_store):
    await init_models(isolated_store)
    try:
        async with _client() as client:
            accepted = await client.post("/api/events", json={**EVENT_BODY, "capacity": 10.0})
            rejected = await client.post("/api/events", json={**EVENT_BODY, "capacity": 1.5})

        assert accepted.status_code == 201
        assert accepted.json()["data"]["capacity"] == 10
        assert rejected.status_code == 400
        assert rejected.json()["error"]["fields"] == {"capacity": "type of capacity must be integer"}
    finally:
        await isolated_store.dispose()


@pytest.mark.anyio
async def test_malformed_json_is_an_invalid_parameter(isolated_store):
    await init_models(isolated_store)
    try:
        async with _client() as client:
            response = await client.post(
                "/api/events",
                content=b"{not json",
                headers={"Content-Type": "application/json"},
            )

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["type"] == "INVALID_PARAMETER"
        assert "fields" not in error
    finally:
        await isolated_store.dispose()


@pytest.mark.anyio
async def test_store_failures_become_internal_server_errors(isolated_store):
    # Tables are never created, so the query fails inside the store.
    try:
        async with _client() as client:
            response = await client.get("/api/events")

        assert response.status_code == 500
        error = response.json()["error"]
        assert error["type"] == "INTERNAL_SERVER_ERROR"
        assert error["message"]
    finally:
        await isolated_store.dispose()


@pytest.mark.anyio
async def test_api_errors_raised_while_resolving_dependencies_use_the_envelope():
    def _missing_controller():
        raise NotFoundError("Controller not available")

    app.dependency_overrides[get_event_controller] = _missing_controller
    try:
        async with _client() as client:
            response = await client.get("/api/events")
    finally:
        app.dependency_overrides.pop(get_event_controller, None)

    assert response.status_code == 404
    assert response.json() == {"error": {"message": "Controller not available", "type": "NOT_FOUND"}}


@pytest.mark.anyio
async def test_unexpected_errors_while_resolving_dependencies_use_the_envelope():
    def _broken_controller():
        raise LookupError("parrot controller is not registered")

    app.dependency_overrides[get_parrot_controller] = _broken_controller
    # The server middleware re-raises after sending the response.
    transport = httpx.ASGITransport(app=app, raise_app_exceptions=False)
    try:
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.get("/api/parrot", params={"message": "hi"})
    finally:
        app.dependency_overrides.pop(get_parrot_controller, None)

    assert response.status_code == 500
    assert response.headers["content-type"].startswith("application/json")
    assert response.json() == {
        "error": {"message": "parrot controller is not registered", "type": "INTERNAL_SERVER_ERROR"}
    }


# ============================================================
# /api/parrot
# ============================================================

@pytest.mark.anyio
async def test_parrot_echoes_the_message():
    async with _client() as client:
        response = await client.get("/api/parrot", params={"message": "Hi!"})

    assert response.status_code == 200
    assert response.json() == {"data": {"message": "Hi!"}}


@pytest.mark.anyio
@pytest.mark.parametrize(
    "query, message",
    [
        ("", "message is required"),
        ("?message=", "message must be at least 1 character"),
        ("?message=000001010011100101110111", "message must be at most 20 characters"),
    ],
)
async def test_parrot_rejects_invalid_messages(query, message):
    async with _client() as client:
        response = await client.get(f"/api/parrot{query}")

    assert response.status_code == 400
    error = response.json()["error"]
    assert error["message"] == "Invalid query parameters"
    assert error["type"] == "INVALID_PARAMETER"
    assert error["fields"] == {"message": message}


@pytest.mark.anyio
async def test_health():
    async with _client() as client:
        response = await client.get("/health")

    assert response.json() == {"ok": True}
