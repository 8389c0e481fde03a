"""
Mock GraphQL origin for local runs and integration tests.
"""

from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from shared.logging import get_logger


class MockGraphQLOrigin:
    """
    Mock GraphQL origin implementation.

    Does not execute GraphQL. Every POST /graphql is recorded and answered with
    an echo of the request, so callers can assert on what was forwarded.
    """

    def __init__(self, port: int = 4000, cache_control: Optional[str] = None):
        self.port = port
        self.logger = get_logger("mock.origin")
        self.app = FastAPI(title="Mock GraphQL Origin", version="1.0.0")

        # Knobs tests flip between requests
        self.cache_control = cache_control
        self.fail_with_status: Optional[int] = None

        self.received: List[Dict[str, Any]] = []

        self._setup_routes()

    def _setup_routes(self):
        """Set up mock origin routes."""

        @self.app.get("/")
        async def root():
            """Root endpoint."""
            return {
                "service": "mock-graphql-origin",
                "message": "Mock GraphQL origin for the APQ Access Layer",
                "version": "1.0.0",
                "requests_received": len(self.received),
            }

        @self.app.post("/graphql")
        async def graphql(request: Request):
            """Record the request and echo it back as GraphQL data."""
            body = await request.json()
            self.received.append({"body": body, "headers": dict(request.headers)})
            self.logger.info("GraphQL request received", operation_name=body.get("operationName"))

            if self.fail_with_status is not None:
                return JSONResponse(
                    status_code=self.fail_with_status,
                    content={"errors": [{"message": "origin failure"}]},
                )

            headers = {"cache-control": self.cache_control} if self.cache_control else None
            return JSONResponse(
                content={
                    "data": {
                        "echo": {
                            "query": body.get("query"),
                            "operationName": body.get("operationName"),
                            "variables": body.get("variables"),
                        }
                    }
                },
                headers=headers,
            )


def create_app():
    """Create mock GraphQL origin application."""
    server = MockGraphQLOrigin()
    return server.app


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(create_app(), host="0.0.0.0", port=4000)
