"""
Automatic Persisted Query service for the APQ Access Layer.
"""

from typing import Dict, Optional

import httpx
from fastapi import Request, Response
from fastapi.responses import JSONResponse

from shared.base_service import BaseService
from shared.config import ServiceConfig
from shared.metrics import MetricsCollector

from .adapters.origin_client import OriginForwarder, build_outbound_request
from .headers import HeaderBuilder
from .models import PERSISTED_QUERY_NOT_FOUND_BODY
from .parsing.request_parser import RequestParser
from .resolution.engine import ResolutionEngine
from .store import PersistedQueryStore, create_store
from .tasks.background import BackgroundTaskGroup


class ApqService(BaseService):
    """Fronts a GraphQL origin, resolving persisted query hashes to query text."""

    def __init__(
        self,
        config: Optional[ServiceConfig] = None,
        *,
        store: Optional[PersistedQueryStore] = None,
        origin_transport: Optional[httpx.AsyncBaseTransport] = None,
        metrics: Optional[MetricsCollector] = None,
    ):
        super().__init__("apq", 8000, config=config, metrics=metrics)

        # An empty in-memory store is falsy, so compare against None
        self.store = store if store is not None else create_store(self.config)
        self.background_tasks = BackgroundTaskGroup("apq-registrations")
        self.request_parser = RequestParser()
        self.resolution_engine = ResolutionEngine(
            self.store,
            self.background_tasks,
            apq_ttl_seconds=self.config.apq_ttl_seconds,
            metrics=self.metrics,
        )
        self.origin_forwarder = OriginForwarder(
            self.config.origin_url,
            timeout=self.config.origin_timeout_seconds,
            metrics=self.metrics,
            transport=origin_transport,
        )
        self.header_builder = HeaderBuilder(
            default_max_age_seconds=self.config.default_ttl_seconds,
            swr_seconds=self.config.swr_seconds,
            ignore_origin_cache_headers=self.config.ignore_origin_cache_headers,
        )

        self._setup_apq_routes()

        # Expose service instance via app state for introspection/testing
        self.app.state.apq_service = self

    async def on_shutdown(self) -> None:
        # Registrations spawned by the last requests must land before the store closes
        await self.background_tasks.drain()
        await self.store.close()
        await super().on_shutdown()

    async def _check_dependencies(self) -> Dict[str, str]:
        """Check APQ dependencies."""
        return {
            "persisted_query_store": "ok" if await self.store.ping() else "error",
        }

    def _setup_apq_routes(self):
        """Set up the persisted query route."""

        @self.app.get("/graphql")
        async def persisted_query(request: Request):
            """Resolve a persisted query and forward it to the origin."""
            apq_request = self.request_parser.parse(request.query_params)
            resolution = await self.resolution_engine.resolve(apq_request)

            if not resolution.found:
                return JSONResponse(status_code=200, content=PERSISTED_QUERY_NOT_FOUND_BODY)

            outbound = build_outbound_request(resolution.query, apq_request)
            origin = await self.origin_forwarder.forward(outbound, request.headers.items())
            headers = self.header_builder.build(origin, resolution.status)

            return Response(status_code=200, content=origin.body, headers=headers)


def create_app(config: Optional[ServiceConfig] = None, **kwargs):
    """Create FastAPI application."""
    service = ApqService(config, **kwargs)
    return service.app


if __name__ == "__main__":
    service = ApqService()
    service.run()
