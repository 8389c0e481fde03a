"""
Data model for persisted query resolution.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


SUPPORTED_APQ_VERSION = 1
SHA256_HEX_PATTERN = r"^[0-9a-fA-F]{64}$"


class PersistedQueryExtension(BaseModel):
    """The ``persistedQuery`` member of the ``extensions`` envelope."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    version: int
    sha256_hash: str = Field(alias="sha256Hash", pattern=SHA256_HEX_PATTERN)
    variables: Optional[Dict[str, Any]] = None

    @field_validator("sha256_hash")
    @classmethod
    def _lowercase_hash(cls, value: str) -> str:
        # hexdigest() is lower case; normalise so store keys and comparisons agree
        return value.lower()


@dataclass(frozen=True)
class ApqRequest:
    """A validated inbound APQ request."""

    extension: PersistedQueryExtension
    query: Optional[str] = None
    operation_name: Optional[str] = None
    # Raw JSON text; decoded only once the request is going to the origin
    variables: Optional[str] = None

    @property
    def sha256_hash(self) -> str:
        return self.extension.sha256_hash


@dataclass(frozen=True)
class CacheEntry:
    """Persisted query text keyed by its sha256 hash."""

    hash: str
    query: str
    ttl_seconds: Optional[int] = None


@dataclass(frozen=True)
class OutboundGraphQLRequest:
    """Request body sent to the GraphQL origin."""

    query: str
    operation_name: Optional[str] = None
    variables: Optional[Dict[str, Any]] = None

    def to_payload(self) -> Dict[str, Any]:
        """Serialise to the GraphQL-over-HTTP JSON body, omitting absent fields."""
        payload: Dict[str, Any] = {"query": self.query}
        if self.operation_name:
            payload["operationName"] = self.operation_name
        if self.variables is not None:
            payload["variables"] = self.variables
        return payload


class ResolutionStatus(str, Enum):
    """How a persisted query hash was resolved."""

    HIT = "HIT"
    MISS = "MISS"
    NOT_FOUND = "NOT_FOUND"


@dataclass(frozen=True)
class Resolution:
    """Outcome of resolving an APQ request to query text."""

    status: ResolutionStatus
    query: Optional[str] = None

    @property
    def found(self) -> bool:
        return self.status is not ResolutionStatus.NOT_FOUND


PERSISTED_QUERY_NOT_FOUND_BODY: Dict[str, Any] = {
    "data": {
        "errors": [
            {
                "extensions": {
                    "code": "PERSISTED_QUERY_NOT_FOUND",
                },
            },
        ],
    },
}


@dataclass(frozen=True)
class OriginResponse:
    """What the GraphQL origin answered."""

    status_code: int
    reason_phrase: str
    headers: Dict[str, str] = field(default_factory=dict)
    body: str = ""

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    def header(self, name: str) -> Optional[str]:
        """Case-insensitive header lookup."""
        return self.headers.get(name.lower())
