"""
Coffee Catalog Backend: Coffees API Tests
===========================================

What:  End-to-end tests for /coffees through the full FastAPI stack
       (middleware, guard, validation, exception handlers).
How:   httpx AsyncClient over ASGITransport; the catalog store dependency is
       replaced with the in-memory store (see conftest.test_client).
"""

import pytest

CARONN = {"title": "Caronn's brew", "brand": "Carson Inc.", "flavours": ["Vanilla"]}


async def _create(client, headers, body=None):
    response = await client.post("/coffees", json=body or CARONN, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


class TestCreateCoffee:

    @pytest.mark.asyncio
    async def test_create_returns_201_with_flavours(self, test_client, auth_headers):
        response = await test_client.post("/coffees", json=CARONN, headers=auth_headers)

        assert response.status_code == 201
        data = response.json()
        assert data["id"] == 1
        assert data["title"] == "Caronn's brew"
        assert data["brand"] == "Carson Inc."
        assert data["description"] == ""
        assert data["recommendations"] == 0
        assert data["flavours"] == [{"id": 1, "name": "Vanilla"}]

    @pytest.mark.asyncio
    async def test_create_without_api_key_is_forbidden(self, test_client, memory_store):
        response = await test_client.post("/coffees", json=CARONN)

        assert response.status_code == 403
        assert response.json()["error"] == "forbidden"
        assert response.json()["message"] == "Forbidden resource"
        assert memory_store.coffees == {}

    @pytest.mark.asyncio
    async def test_create_with_wrong_api_key_is_forbidden(self, test_client):
        response = await test_client.post(
            "/coffees", json=CARONN, headers={"Authorization": "wrong"}
        )

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_create_unknown_field_is_rejected(self, test_client, auth_headers, memory_store):
        body = {**CARONN, "isEnabled": True}

        response = await test_client.post("/coffees", json=body, headers=auth_headers)

        assert response.status_code == 400
        data = response.json()
        assert data["error"] == "validation_error"
        assert any("isEnabled" in err["loc"] for err in data["details"]["errors"])
        assert memory_store.coffees == {}

    @pytest.mark.asyncio
    async def test_create_missing_field_is_rejected(self, test_client, auth_headers):
        response = await test_client.post(
            "/coffees", json={"title": "No brand", "flavours": []}, headers=auth_headers
        )

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_create_wrong_type_is_rejected(self, test_client, auth_headers):
        response = await test_client.post(
            "/coffees", json={**CARONN, "flavours": "Vanilla"}, headers=auth_headers
        )

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_two_coffees_share_flavour(self, test_client, auth_headers, memory_store):
        first = await _create(test_client, auth_headers)
        second = await _create(
            test_client, auth_headers, {"title": "Other", "brand": "X", "flavours": ["Vanilla"]}
        )

        assert first["flavours"][0]["id"] == second["flavours"][0]["id"]
        assert len(memory_store.flavours) == 1


class TestReadCoffees:

    @pytest.mark.asyncio
    async def test_list_is_public_and_paginated(self, test_client, auth_headers):
        for i in range(3):
            await _create(test_client, auth_headers, {"title": f"C{i}", "brand": "B", "flavours": []})

        response = await test_client.get("/coffees", params={"limit": 2, "offset": 1})

        assert response.status_code == 200
        assert [c["title"] for c in response.json()] == ["C1", "C2"]
        assert response.headers["X-Page-Size"] == "2"

    @pytest.mark.asyncio
    async def test_list_empty(self, test_client):
        response = await test_client.get("/coffees")

        assert response.status_code == 200
        assert response.json() == []

    @pytest.mark.asyncio
    async def test_list_rejects_zero_limit(self, test_client):
        response = await test_client.get("/coffees", params={"limit": 0})

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_list_rejects_negative_offset(self, test_client):
        response = await test_client.get("/coffees", params={"offset": -1})

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_get_one(self, test_client, auth_headers):
        created = await _create(test_client, auth_headers)

        response = await test_client.get(f"/coffees/{created['id']}")

        assert response.status_code == 200
        assert response.json() == created

    @pytest.mark.asyncio
    async def test_get_missing_returns_404(self, test_client):
        response = await test_client.get("/coffees/1")

        assert response.status_code == 404
        data = response.json()
        assert data["error"] == "not_found"
        assert data["message"] == "Coffee 1 not found"
        assert "timestamp" in data

    @pytest.mark.asyncio
    async def test_get_non_integer_id_returns_404(self, test_client):
        response = await test_client.get("/coffees/abc")

        assert response.status_code == 404


class TestUpdateCoffee:

    @pytest.mark.asyncio
    async def test_patch_title_only(self, test_client, auth_headers):
        created = await _create(test_client, auth_headers)

        response = await test_client.patch(
            f"/coffees/{created['id']}", json={"title": "Renamed"}, headers=auth_headers
        )

        assert response.status_code == 200
        data = response.json()
        assert data["title"] == "Renamed"
        assert data["brand"] == "Carson Inc."
        assert [f["name"] for f in data["flavours"]] == ["Vanilla"]

    @pytest.mark.asyncio
    async def test_patch_empty_flavours_clears(self, test_client, auth_headers):
        created = await _create(test_client, auth_headers)

        response = await test_client.patch(
            f"/coffees/{created['id']}", json={"flavours": []}, headers=auth_headers
        )

        assert response.status_code == 200
        assert response.json()["flavours"] == []

    @pytest.mark.asyncio
    async def test_patch_null_is_rejected(self, test_client, auth_headers):
        created = await _create(test_client, auth_headers)

        response = await test_client.patch(
            f"/coffees/{created['id']}", json={"title": None}, headers=auth_headers
        )

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_patch_missing_returns_404(self, test_client, auth_headers, memory_store):
        response = await test_client.patch(
            "/coffees/9", json={"flavours": ["Mocha"]}, headers=auth_headers
        )

        assert response.status_code == 404
        assert memory_store.flavours == {}

    @pytest.mark.asyncio
    async def test_patch_without_api_key_is_forbidden(self, test_client, auth_headers):
        created = await _create(test_client, auth_headers)

        response = await test_client.patch(f"/coffees/{created['id']}", json={"title": "X"})

        assert response.status_code == 403


class TestDeleteCoffee:

    @pytest.mark.asyncio
    async def test_delete_returns_coffee_and_removes_it(self, test_client, auth_headers):
        created = await _create(test_client, auth_headers)

        response = await test_client.delete(f"/coffees/{created['id']}", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["title"] == "Caronn's brew"
        assert (await test_client.get(f"/coffees/{created['id']}")).status_code == 404

    @pytest.mark.asyncio
    async def test_delete_missing_returns_404(self, test_client, auth_headers):
        response = await test_client.delete("/coffees/5", headers=auth_headers)

        assert response.status_code == 404


class TestRecommendCoffee:

    @pytest.mark.asyncio
    async def test_recommend_increments_and_logs_event(
        self, test_client, auth_headers, memory_store
    ):
        created = await _create(test_client, auth_headers)

        response = await test_client.post(
            f"/coffees/{created['id']}/recommend", headers=auth_headers
        )

        assert response.status_code == 200
        assert response.json()["recommendations"] == 1
        assert len(memory_store.events) == 1
        assert memory_store.events[0].payload == {"coffeeId": created["id"]}

    @pytest.mark.asyncio
    async def test_recommend_missing_returns_404(self, test_client, auth_headers, memory_store):
        response = await test_client.post("/coffees/3/recommend", headers=auth_headers)

        assert response.status_code == 404
        assert memory_store.events == []

    @pytest.mark.asyncio
    async def test_recommend_failure_returns_500(self, test_client, auth_headers, memory_store):
        created = await _create(test_client, auth_headers)

        class BrokenUnitOfWork:
            async def begin(self):
                pass

            async def save(self, entity):
                raise RuntimeError("write failed")

            async def commit(self):
                pass

            async def rollback(self):
                pass

            async def release(self):
                pass

        memory_store.unit_of_work = BrokenUnitOfWork

        response = await test_client.post(
            f"/coffees/{created['id']}/recommend", headers=auth_headers
        )

        assert response.status_code == 500
        assert response.json()["error"] == "transaction_failed"
        assert memory_store.coffees[created["id"]].recommendations == 0
        assert memory_store.events == []


class TestRequestId:

    @pytest.mark.asyncio
    async def test_generates_request_id(self, test_client):
        response = await test_client.get("/coffees")

        assert response.headers.get("X-Request-ID")

    @pytest.mark.asyncio
    async def test_echoes_client_request_id(self, test_client):
        response = await test_client.get("/coffees/1", headers={"X-Request-ID": "abc-123"})

        assert response.headers["X-Request-ID"] == "abc-123"
        assert response.json()["request_id"] == "abc-123"
