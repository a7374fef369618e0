"""
Kennel API - HTTP Route Tests
===============================

What:  End-to-end tests through the FastAPI app (routes, service, store,
       exception handlers, middleware).
How:   HTTPX AsyncClient over ASGITransport; no network, no server process.
       `backend_client` runs each test against memory, file and database.

What we test:
    ✅ Create/fetch, validation, merge and delete workflows on /api/dogs
    ✅ The same CRUD surface on /hubs
    ✅ 400/404/409/500 error bodies
    ✅ Greeting routes and /health
"""

from unittest.mock import AsyncMock

import pytest
from httpx import ASGITransport, AsyncClient

from kennel.main import create_app

DOG = {"name": "Rex", "weight": 40}
JSON_HEADERS = {"Content-Type": "application/json"}


class TestDogWorkflows:
    """End-to-end dog workflows, run once per store backend."""

    @pytest.mark.asyncio
    async def test_create_and_fetch(self, backend_client):
        """POST returns 201 with the record, GET by id returns the same record."""
        response = await backend_client.post("/api/dogs", json=DOG)

        assert response.status_code == 201
        created = response.json()
        assert created == {"id": created["id"], **DOG}

        fetched = await backend_client.get(f"/api/dogs/{created['id']}")
        assert fetched.status_code == 200
        assert fetched.json() == created

    @pytest.mark.asyncio
    async def test_validation_failure_stores_nothing(self, backend_client):
        """A dog without weight gets 400 and the collection stays empty."""
        response = await backend_client.post("/api/dogs", json={"name": "Rex"})

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "validation_error"
        assert body["message"] == "must include name and weight"
        assert body["details"]["missing"] == ["weight"]

        listing = await backend_client.get("/api/dogs")
        assert listing.json() == []

    @pytest.mark.asyncio
    async def test_nan_weight_rejected(self, backend_client):
        """A raw NaN literal in the body is a 400, not a stored null."""
        response = await backend_client.post(
            "/api/dogs",
            content=b'{"name": "Rex", "weight": NaN}',
            headers=JSON_HEADERS,
        )

        assert response.status_code == 400
        assert response.json()["details"]["field"] == "weight"
        assert (await backend_client.get("/api/dogs")).json() == []

    @pytest.mark.asyncio
    async def test_partial_update(self, backend_client):
        """PATCH changes weight and keeps the name."""
        created = (await backend_client.post("/api/dogs", json=DOG)).json()

        response = await backend_client.patch(f"/api/dogs/{created['id']}", json={"weight": 50})

        assert response.status_code == 200
        assert response.json() == {"id": created["id"], "name": "Rex", "weight": 50}
        fetched = await backend_client.get(f"/api/dogs/{created['id']}")
        assert fetched.json()["weight"] == 50

    @pytest.mark.asyncio
    async def test_delete_then_fetch(self, backend_client):
        """DELETE returns the record, a later GET is 404."""
        created = (await backend_client.post("/api/dogs", json=DOG)).json()

        response = await backend_client.delete(f"/api/dogs/{created['id']}")

        assert response.status_code == 200
        assert response.json() == created
        missing = await backend_client.get(f"/api/dogs/{created['id']}")
        assert missing.status_code == 404
        assert missing.json()["error"] == "not_found"

    @pytest.mark.asyncio
    async def test_full_replace(self, backend_client):
        """PUT drops fields the new body does not carry."""
        created = (await backend_client.post("/api/dogs", json={**DOG, "color": "brown"})).json()

        response = await backend_client.put(
            f"/api/dogs/{created['id']}", json={"name": "Rex", "weight": 45}
        )

        assert response.status_code == 200
        assert response.json() == {"id": created["id"], "name": "Rex", "weight": 45}

    @pytest.mark.asyncio
    async def test_list_in_insertion_order(self, backend_client):
        """GET lists dogs in the order they were posted."""
        for name in ("Rex", "Fido", "Bella"):
            await backend_client.post("/api/dogs", json={"name": name, "weight": 10})

        response = await backend_client.get("/api/dogs")

        assert response.status_code == 200
        assert [dog["name"] for dog in response.json()] == ["Rex", "Fido", "Bella"]


class TestHubs:
    """Hub routes, mounted at /hubs."""

    @pytest.mark.asyncio
    async def test_crud_round_trip(self, backend_client):
        """Create, list, fetch, replace, patch and delete a hub through /hubs."""
        created = await backend_client.post("/hubs", json={"name": "North"})
        assert created.status_code == 201
        hub = created.json()
        hub_url = f"/hubs/{hub['id']}"

        assert (await backend_client.get("/hubs")).json() == [hub]
        assert (await backend_client.get(hub_url)).json() == hub

        replaced = await backend_client.put(hub_url, json={"name": "South", "city": "Oslo"})
        assert replaced.status_code == 200
        assert replaced.json() == {"id": hub["id"], "name": "South", "city": "Oslo"}

        patched = await backend_client.patch(hub_url, json={"city": "Bergen"})
        assert patched.json() == {"id": hub["id"], "name": "South", "city": "Bergen"}

        deleted = await backend_client.delete(hub_url)
        assert deleted.status_code == 200
        assert deleted.json()["city"] == "Bergen"
        assert (await backend_client.get(hub_url)).status_code == 404
        assert (await backend_client.get("/hubs")).json() == []

    @pytest.mark.asyncio
    async def test_hub_without_name_rejected(self, test_client):
        """A hub without name gets the single-field message."""
        response = await test_client.post("/hubs", json={"city": "Oslo"})

        assert response.status_code == 400
        assert response.json()["message"] == "must include name"

    @pytest.mark.asyncio
    async def test_hubs_not_served_under_api(self, test_client):
        """Only dogs live under /api."""
        assert (await test_client.get("/api/hubs")).status_code == 404

    @pytest.mark.asyncio
    async def test_collections_are_independent(self, test_client):
        """A dog id is unknown to the hubs collection."""
        dog = (await test_client.post("/api/dogs", json=DOG)).json()

        assert (await test_client.get("/hubs")).json() == []
        assert (await test_client.get(f"/hubs/{dog['id']}")).status_code == 404


class TestErrorResponses:
    """Tests for status codes and error bodies."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("method", ["get", "delete"])
    async def test_unknown_id_without_body(self, test_client, method):
        """GET and DELETE on an unknown id return 404 with a readable message."""
        response = await getattr(test_client, method)("/api/dogs/nope")

        assert response.status_code == 404
        assert response.json()["message"] == "dog with ID 'nope' was not found"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("method", ["put", "patch"])
    async def test_unknown_id_with_body(self, test_client, method):
        """PUT and PATCH with a valid body on an unknown id return 404."""
        response = await getattr(test_client, method)("/api/dogs/nope", json=DOG)

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_put_invalid_body_is_400_even_for_unknown_id(self, test_client):
        """Validation wins over the lookup on PUT."""
        response = await test_client.put("/api/dogs/nope", json={"name": "Rex"})

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_non_object_body_is_400(self, test_client):
        """A JSON array body is a 400 naming the body."""
        response = await test_client.post("/api/dogs", json=[DOG])

        assert response.status_code == 400
        assert response.json()["details"]["field"] == "body"

    @pytest.mark.asyncio
    async def test_missing_body_is_400(self, test_client):
        """POST with no body reports both fields missing."""
        response = await test_client.post("/api/dogs")

        assert response.status_code == 400
        assert response.json()["details"]["missing"] == ["name", "weight"]

    @pytest.mark.asyncio
    async def test_infinite_patch_value_is_400(self, test_client):
        """PATCH rejects Infinity even though merge skips required fields."""
        created = (await test_client.post("/api/dogs", json=DOG)).json()

        response = await test_client.patch(
            f"/api/dogs/{created['id']}",
            content=b'{"weight": Infinity}',
            headers=JSON_HEADERS,
        )

        assert response.status_code == 400
        assert (await test_client.get(f"/api/dogs/{created['id']}")).json()["weight"] == 40

    @pytest.mark.asyncio
    async def test_duplicate_supplied_id_is_409(self, test_client):
        """Posting the same explicit id twice conflicts."""
        first = await test_client.post("/api/dogs", json={"id": "rex", **DOG})
        second = await test_client.post("/api/dogs", json={"id": "rex", **DOG})

        assert first.status_code == 201
        assert second.status_code == 409
        assert second.json()["error"] == "conflict"

    @pytest.mark.asyncio
    async def test_store_failure_is_500_with_raw_message(self, make_settings):
        """A failing dogs store gives 500 with its message; hubs keep working."""
        app = create_app(make_settings("memory"))
        app.state.registry.get("dogs").store.find_all = AsyncMock(
            side_effect=OSError("disk failure")
        )

        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            response = await client.get("/api/dogs")
            hubs = await client.get("/hubs")

        assert response.status_code == 500
        assert response.json()["error"] == "store_error"
        assert response.json()["message"] == "disk failure"
        assert hubs.status_code == 200


class TestMiscRoutes:
    """Tests for greeting and health endpoints."""

    @pytest.mark.asyncio
    async def test_root_greeting(self, test_client):
        """GET / returns the JSON greeting."""
        response = await test_client.get("/")

        assert response.status_code == 200
        assert response.json() == {"message": "hello world!"}

    @pytest.mark.asyncio
    async def test_hello_plain_text(self, test_client):
        """GET /hello returns plain text."""
        response = await test_client.get("/hello")

        assert response.status_code == 200
        assert response.text == "hello lambda!"
        assert response.headers["content-type"].startswith("text/plain")

    @pytest.mark.asyncio
    async def test_health_reports_counts(self, backend_client):
        """/health reports per-collection counts on every backend."""
        await backend_client.post("/api/dogs", json=DOG)

        response = await backend_client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["collections"] == {"dogs": 1, "hubs": 0}
        assert body["backend"] in ("memory", "file", "database")

    @pytest.mark.asyncio
    async def test_health_unhealthy_when_store_fails(self, make_settings):
        """A failing store turns /health into 503 with a null count."""
        app = create_app(make_settings("memory"))
        app.state.registry.get("hubs").store.count = AsyncMock(side_effect=OSError("gone"))

        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            response = await client.get("/health")

        assert response.status_code == 503
        assert response.json()["status"] == "unhealthy"
        assert response.json()["collections"] == {"dogs": 0, "hubs": None}


class TestFileBackendRestart:
    """Tests for durability of the file backend across app instances."""

    @pytest.mark.asyncio
    async def test_records_survive_app_restart(self, make_settings):
        """A dog posted to one app is served by the next app on the same data dir."""
        settings = make_settings("file")

        first = create_app(settings)
        async with AsyncClient(transport=ASGITransport(app=first), base_url="http://test") as client:
            created = (await client.post("/api/dogs", json=DOG)).json()

        second = create_app(settings)
        async with AsyncClient(transport=ASGITransport(app=second), base_url="http://test") as client:
            response = await client.get(f"/api/dogs/{created['id']}")

        assert response.status_code == 200
        assert response.json() == created
