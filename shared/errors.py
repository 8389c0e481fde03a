"""
Shared error handling for the APQ Access Layer.
"""

from typing import Dict, Any, Optional, Union
from pydantic import BaseModel

from opentelemetry import trace


class ErrorResponse(BaseModel):
    """Standard error response format."""

    trace_id: Optional[str] = None
    code: str
    message: str
    details: Dict[str, Any] = {}


class AccessLayerException(Exception):
    """Base exception for Access Layer services."""

    status_code: int = 500

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        """Convert to error response."""
        trace_id = None
        current_span = trace.get_current_span()
        if current_span and current_span.is_recording():
            span_context = current_span.get_span_context()
            if span_context.trace_id != 0:
                trace_id = f"{span_context.trace_id:032x}"

        return ErrorResponse(
            trace_id=trace_id,
            code=self.code,
            message=self.message,
            details=self.details
        )


class ClientInputError(AccessLayerException):
    """
    Rejected client input (400).

    APQ clients key off exact response bodies, so each subclass carries the
    body it is rendered with instead of the generic ErrorResponse envelope.
    A ``dict`` body is sent as JSON, a ``str`` body as plain text.
    """

    status_code = 400

    def __init__(self, code: str, message: str, body: Union[Dict[str, Any], str],
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(code, message, details)
        self.body = body


class InvalidRequest(ClientInputError):
    """Missing or malformed APQ envelope."""

    def __init__(self, message: str = "Invalid APQ request", details: Optional[Dict[str, Any]] = None):
        super().__init__("INVALID_REQUEST", message, {"error": message}, details)


class UnsupportedVersion(ClientInputError):
    """Persisted query protocol version other than 1."""

    def __init__(self, version: Any = None):
        message = "Unsupported persisted query version"
        super().__init__("UNSUPPORTED_VERSION", message, message, {"version": version})


class HashMismatch(ClientInputError):
    """Supplied query text does not hash to the claimed sha256."""

    def __init__(self, sha256_hash: Optional[str] = None):
        message = "provided sha does not match query"
        super().__init__("HASH_MISMATCH", message, message, {"sha256_hash": sha256_hash})


class ExternalServiceError(AccessLayerException):
    """External service errors."""

    status_code = 502

    def __init__(self, service: str, message: str = "External service error",
                 details: Optional[Dict[str, Any]] = None, code: str = "EXTERNAL_SERVICE_ERROR"):
        super().__init__(code, f"{service}: {message}", details)


class OriginError(ExternalServiceError):
    """
    The GraphQL origin answered with a non-success status or could not be reached.

    ``status_code`` stays the gateway-side 502; the origin's own status and body
    are kept on ``origin_status_code`` / ``origin_body`` and in ``details``.
    """

    def __init__(self, message: str, origin_status_code: Optional[int] = None,
                 origin_body: Optional[str] = None, response: Any = None):
        super().__init__(
            "origin",
            message,
            details={"status_code": origin_status_code, "body": origin_body},
            code="ORIGIN_ERROR",
        )
        self.origin_status_code = origin_status_code
        self.origin_body = origin_body
        self.response = response


class PersistedQueryStoreError(ExternalServiceError):
    """The persisted query store failed to serve a read."""

    status_code = 503

    def __init__(self, message: str = "Persisted query store unavailable",
                 details: Optional[Dict[str, Any]] = None):
        super().__init__("persisted_query_store", message, details, code="PERSISTED_QUERY_STORE_ERROR")
