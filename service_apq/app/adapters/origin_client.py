"""
GraphQL origin client for the APQ service.
"""

from contextlib import nullcontext
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

import httpx

from shared.errors import OriginError
from shared.logging import get_logger
from shared.metrics import MetricsCollector

from ..models import ApqRequest, OriginResponse, OutboundGraphQLRequest
from ..parsing.request_parser import parse_variables


# Not forwarded: connection-scoped, or recomputed for the new body
EXCLUDED_REQUEST_HEADERS = frozenset({
    "host",
    "content-length",
    "content-type",
    "connection",
    "keep-alive",
    "proxy-connection",
    "transfer-encoding",
    "te",
    "trailer",
    "upgrade",
    "accept-encoding",
})

HeaderSource = Union[Mapping[str, str], Iterable[Tuple[str, str]]]


def build_outbound_request(query: str, request: ApqRequest) -> OutboundGraphQLRequest:
    """
    Combine resolved query text with the client's optional operation fields.

    Raises InvalidRequest when ``variables`` is not a JSON object.
    """
    return OutboundGraphQLRequest(
        query=query,
        operation_name=request.operation_name,
        variables=parse_variables(request.variables),
    )


def forwardable_headers(headers: HeaderSource) -> List[Tuple[str, str]]:
    """Inbound headers minus hop-by-hop and framing headers."""
    items = headers.items() if isinstance(headers, Mapping) else headers
    return [(name, value) for name, value in items if name.lower() not in EXCLUDED_REQUEST_HEADERS]


class OriginForwarder:
    """POSTs resolved GraphQL requests to the origin. No retries."""

    def __init__(
        self,
        origin_url: str,
        timeout: float = 10.0,
        *,
        metrics: Optional[MetricsCollector] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.origin_url = origin_url
        self.timeout = timeout
        self.metrics = metrics
        self.logger = get_logger("apq.origin_client")
        self._transport = transport

    async def forward(self, outbound: OutboundGraphQLRequest, headers: HeaderSource = ()) -> OriginResponse:
        """
        Send ``outbound`` to the origin with the caller's headers.

        Returns the origin's answer when it is a 2xx; raises OriginError
        carrying the origin status and body otherwise, or when the origin
        cannot be reached.
        """
        payload: Dict[str, Any] = outbound.to_payload()

        try:
            with self._timed():
                async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                    response = await client.post(
                        self.origin_url,
                        json=payload,
                        headers=forwardable_headers(headers),
                    )
        except httpx.HTTPError as exc:
            self._count(None)
            self.logger.error("Origin request failed", url=self.origin_url, error=str(exc))
            raise OriginError(f"Origin unreachable: {exc}")

        self._count(response.status_code)

        origin_response = OriginResponse(
            status_code=response.status_code,
            reason_phrase=response.reason_phrase,
            headers={name.lower(): value for name, value in response.headers.items()},
            body=response.text,
        )

        if not origin_response.ok:
            self.logger.error(
                "Origin returned an error status",
                url=self.origin_url,
                status_code=origin_response.status_code,
                response=origin_response.body[:512],
            )
            raise OriginError(
                f"Unexpected status {origin_response.status_code}",
                origin_status_code=origin_response.status_code,
                origin_body=origin_response.body,
                response=origin_response,
            )

        self.logger.debug(
            "Origin responded",
            url=self.origin_url,
            status_code=origin_response.status_code,
            operation_name=outbound.operation_name,
        )
        return origin_response

    def _timed(self):
        if not self.metrics:
            return nullcontext()
        return self.metrics.time_operation("apq_origin_request_duration_seconds")

    def _count(self, status_code: Optional[int]) -> None:
        if self.metrics:
            self.metrics.increment_counter(
                "apq_origin_requests_total",
                status_code=str(status_code) if status_code is not None else "error",
            )
