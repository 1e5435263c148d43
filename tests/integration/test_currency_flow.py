# tests/integration/test_currency_flow.py
"""HTTP flow tests for ccy_currency endpoints.

The app runs in-process over ASGITransport with the service wired to the
in-memory store and cache from tests/conftest.py, so the lifespan (real
PostgreSQL / Redis) never starts.
"""

from unittest.mock import AsyncMock

import pytest

from src.ccy_common.errors import StoreError


async def _create(client, code: str, description: str = "Test currency", **extra):
    return await client.post(
        "/api/v1/currencies", json={"code": code, "description": description, **extra}
    )


class TestCurrencyLifecycle:
    async def test_create_read_delete(self, client, store):
        resp = await _create(client, "usd", "US Dollar")
        assert resp.status_code == 201
        body = resp.json()
        assert body["success"] is True
        assert body["message"] == "Currency created successfully"
        assert body["data"]["code"] == "USD"
        assert body["data"]["factor"] == 100
        assert body["data"]["amount_display_format"] == "###,###.##"

        first = await client.get("/api/v1/currencies/USD")
        assert first.status_code == 200
        reads = store.calls["get_by_code"]

        second = await client.get("/api/v1/currencies/usd")
        assert second.status_code == 200
        assert store.calls["get_by_code"] == reads
        assert second.json()["data"] == first.json()["data"]

        resp = await client.delete("/api/v1/currencies/USD")
        assert resp.status_code == 200
        assert resp.json()["message"] == "Currency deleted successfully"

        resp = await client.get("/api/v1/currencies/USD")
        assert resp.status_code == 404
        assert resp.json()["success"] is False
        assert resp.json()["error"] == "Currency not found: USD"

        resp = await client.get("/api/v1/currencies?page=1")
        assert all(c["code"] != "USD" for c in resp.json()["data"])

    async def test_update_is_visible_immediately(self, client):
        await _create(client, "EUR", "Euro", html_encoded_symbol="&#8364;")
        await client.get("/api/v1/currencies/EUR")
        await client.get("/api/v1/currencies")

        resp = await client.put("/api/v1/currencies/EUR", json={"description": "Euro (EU)"})
        assert resp.status_code == 200
        assert resp.json()["data"]["description"] == "Euro (EU)"
        assert resp.json()["data"]["html_encoded_symbol"] == "&#8364;"

        resp = await client.get("/api/v1/currencies/EUR")
        assert resp.json()["data"]["description"] == "Euro (EU)"
        resp = await client.get("/api/v1/currencies")
        assert resp.json()["data"][0]["description"] == "Euro (EU)"

    async def test_create_shows_up_in_cached_list(self, client):
        await _create(client, "CHF", "Swiss Franc")
        resp = await client.get("/api/v1/currencies")
        assert [c["code"] for c in resp.json()["data"]] == ["CHF"]

        await _create(client, "AUD", "Australian Dollar")

        resp = await client.get("/api/v1/currencies")
        assert [c["code"] for c in resp.json()["data"]] == ["AUD", "CHF"]


class TestListCurrencies:
    async def test_pagination_block(self, client):
        for code in ("AAA", "BBB", "CCC"):
            await _create(client, code)

        resp = await client.get("/api/v1/currencies?page=2&limit=2")
        assert resp.status_code == 200
        body = resp.json()
        assert [c["code"] for c in body["data"]] == ["CCC"]
        assert body["pagination"] == {"page": 2, "limit": 2, "offset": 2, "total": 3}

    async def test_limit_is_clamped(self, client):
        resp = await client.get("/api/v1/currencies?limit=500&page=0")
        pagination = resp.json()["pagination"]
        assert pagination["limit"] == 100
        assert pagination["page"] == 1

    async def test_search_has_no_total(self, client):
        await _create(client, "USD", "US Dollar")
        await _create(client, "EUR", "Euro")

        resp = await client.get("/api/v1/currencies?search=dollar")
        body = resp.json()
        assert [c["code"] for c in body["data"]] == ["USD"]
        assert "total" not in body["pagination"]

    async def test_factor_filter(self, client):
        await _create(client, "JPY", "Yen", factor=1)
        await _create(client, "USD", "US Dollar")

        resp = await client.get("/api/v1/currencies?factor=1")
        assert [c["code"] for c in resp.json()["data"]] == ["JPY"]

    async def test_non_integer_params_use_defaults(self, client):
        await _create(client, "JPY", "Yen", factor=1)
        await _create(client, "USD", "US Dollar")

        resp = await client.get("/api/v1/currencies?page=abc&limit=x&factor=abc")
        assert resp.status_code == 200
        body = resp.json()
        assert [c["code"] for c in body["data"]] == ["JPY", "USD"]
        assert body["pagination"] == {"page": 1, "limit": 50, "offset": 0, "total": 2}

    async def test_count_failure_still_lists(self, client, store):
        await _create(client, "USD", "US Dollar")
        store.count = AsyncMock(side_effect=StoreError("count timed out"))

        resp = await client.get("/api/v1/currencies")
        assert resp.status_code == 200
        body = resp.json()
        assert [c["code"] for c in body["data"]] == ["USD"]
        assert "total" not in body["pagination"]


class TestErrors:
    @pytest.mark.parametrize("code", ["US", "USDX"])
    async def test_bad_path_code_is_400(self, client, code):
        resp = await client.get(f"/api/v1/currencies/{code}")
        assert resp.status_code == 400
        assert resp.json()["success"] is False

    async def test_duplicate_is_409(self, client):
        await _create(client, "GBP")
        resp = await _create(client, "gbp")
        assert resp.status_code == 409
        assert resp.json()["error"] == "Currency code already exists: GBP"

    async def test_invalid_body_is_400(self, client, store):
        resp = await client.post("/api/v1/currencies", json={"code": "USD"})
        assert resp.status_code == 400
        assert resp.json()["error"] == "Invalid request"
        assert store.calls["create"] == 0

    async def test_update_unknown_is_404(self, client):
        resp = await client.put("/api/v1/currencies/XXX", json={"description": "x"})
        assert resp.status_code == 404

    async def test_delete_unknown_is_404(self, client):
        resp = await client.delete("/api/v1/currencies/XXX")
        assert resp.status_code == 404

    async def test_cache_outage_is_invisible(self, client, cache):
        cache.down = True

        resp = await _create(client, "SEK", "Swedish Krona")
        assert resp.status_code == 201
        resp = await client.get("/api/v1/currencies/SEK")
        assert resp.status_code == 200
        assert resp.json()["data"]["code"] == "SEK"


class TestHealth:
    async def test_health(self, client):
        resp = await client.get("/health")
        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "healthy"
        assert body["service"] == "currency-api"
        assert body["timestamp"]

    async def test_request_id_header(self, client):
        resp = await client.get("/health")
        assert resp.headers["X-Request-ID"].startswith("req_")
