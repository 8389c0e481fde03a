"""
Integration tests for the APQ registration and lookup flow against the mock origin.
"""

import hashlib
import json

import httpx
import pytest
import pytest_asyncio

from mocks.origin.server import MockGraphQLOrigin
from service_apq.app.main import ApqService
from service_apq.app.store.memory import InMemoryPersistedQueryStore
from shared.config import get_config

QUERY = "query Instrument($id: ID!) { instrument(id: $id) { id name } }"
QUERY_HASH = hashlib.sha256(QUERY.encode("utf-8")).hexdigest()
NOT_FOUND_BODY = {"data": {"errors": [{"extensions": {"code": "PERSISTED_QUERY_NOT_FOUND"}}]}}


def apq_params(**params):
    extensions = {"persistedQuery": {"version": 1, "sha256Hash": QUERY_HASH}}
    return {"extensions": json.dumps(extensions), **params}


class TestApqFlow:
    """End-to-end APQ flow: miss, register, hit."""

    @pytest.fixture
    def origin(self):
        return MockGraphQLOrigin()

    @pytest.fixture
    def store(self):
        return InMemoryPersistedQueryStore()

    @pytest.fixture
    def service(self, origin, store):
        config = get_config(
            "apq",
            8000,
            store_backend="memory",
            origin_url="http://origin.test/graphql",
            default_ttl_seconds=120,
            swr_seconds=60,
        )
        return ApqService(config, store=store, origin_transport=httpx.ASGITransport(app=origin.app))

    @pytest_asyncio.fixture
    async def client(self, service):
        transport = httpx.ASGITransport(app=service.app)
        async with httpx.AsyncClient(transport=transport, base_url="http://apq.test") as client:
            yield client
        await service.background_tasks.drain()

    @pytest.mark.asyncio
    async def test_apollo_client_retry_flow(self, client, origin, service, store):
        """Hash only -> not found; hash + query -> registered; hash only -> hit."""
        variables = json.dumps({"id": "BRN"})

        first = await client.get("/graphql", params=apq_params(variables=variables))
        assert first.status_code == 200
        assert first.json() == NOT_FOUND_BODY
        assert origin.received == []

        second = await client.get("/graphql", params=apq_params(query=QUERY, variables=variables))
        assert second.status_code == 200
        assert second.headers["x-cache"] == "MISS"
        assert second.headers["cache-control"] == "public, max-age=120, stale-if-error=60, stale-while-revalidate=60"
        assert second.json()["data"]["echo"] == {
            "query": QUERY,
            "operationName": None,
            "variables": {"id": "BRN"},
        }

        await service.background_tasks.drain()
        assert (await store.find(QUERY_HASH)).query == QUERY

        third = await client.get(
            "/graphql",
            params=apq_params(variables=variables, operationName="Instrument"),
        )
        assert third.status_code == 200
        assert third.headers["x-cache"] == "HIT"
        assert third.json()["data"]["echo"]["query"] == QUERY
        assert third.json()["data"]["echo"]["operationName"] == "Instrument"
        assert len(origin.received) == 2

    @pytest.mark.asyncio
    async def test_origin_cache_control_passthrough(self, client, origin):
        origin.cache_control = "public, max-age=5"

        response = await client.get("/graphql", params=apq_params(query=QUERY))

        assert response.headers["cache-control"] == "public, max-age=5"

    @pytest.mark.asyncio
    async def test_origin_failure_surfaces(self, client, origin):
        origin.fail_with_status = 503

        response = await client.get("/graphql", params=apq_params(query=QUERY))

        assert response.status_code == 502
        assert response.json()["details"]["status_code"] == 503

    @pytest.mark.asyncio
    async def test_authorization_reaches_origin(self, client, origin):
        await client.get(
            "/graphql",
            params=apq_params(query=QUERY),
            headers={"Authorization": "Bearer token-1"},
        )

        assert origin.received[0]["headers"]["authorization"] == "Bearer token-1"
