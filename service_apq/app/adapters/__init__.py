"""
Adapters package for the APQ Service.

Contains the HTTP client wrapper for the GraphQL origin. The adapter
encapsulates:

- The origin URL and request shape
- Header forwarding rules
- Error handling that maps to shared errors

No retries or circuit breaking happen here; origin failures surface
immediately as OriginError.
"""

from .origin_client import OriginForwarder, build_outbound_request, forwardable_headers

__all__ = [
    "OriginForwarder",
    "build_outbound_request",
    "forwardable_headers",
]
