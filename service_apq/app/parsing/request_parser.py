"""
Extraction and validation of the APQ envelope from query-string parameters.
"""

import json
from typing import Any, Dict, Mapping, Optional

from pydantic import ValidationError

from shared.errors import InvalidRequest, UnsupportedVersion
from shared.logging import get_logger

from ..models import ApqRequest, PersistedQueryExtension, SUPPORTED_APQ_VERSION


class RequestParser:
    """Turns raw ``extensions``/``query``/``operationName``/``variables`` params into an ApqRequest."""

    def __init__(self):
        self.logger = get_logger("apq.request_parser")

    def parse(self, params: Mapping[str, str]) -> ApqRequest:
        """Validate the query parameters of an APQ request."""
        extension = self._parse_extension(params.get("extensions"))

        return ApqRequest(
            extension=extension,
            query=params.get("query") or None,
            operation_name=params.get("operationName") or None,
            variables=params.get("variables") or None,
        )

    def _parse_extension(self, raw: Optional[str]) -> PersistedQueryExtension:
        if not raw:
            raise InvalidRequest()

        try:
            envelope = json.loads(raw)
        except ValueError:
            self.logger.debug("Unparseable extensions parameter")
            raise InvalidRequest()

        persisted_query = envelope.get("persistedQuery") if isinstance(envelope, dict) else None
        if not isinstance(persisted_query, dict):
            raise InvalidRequest()

        # Version is rejected before anything else about the envelope is judged
        version = persisted_query.get("version")
        if isinstance(version, bool) or version != SUPPORTED_APQ_VERSION:
            raise UnsupportedVersion(version)

        try:
            return PersistedQueryExtension.model_validate(persisted_query)
        except ValidationError as exc:
            raise InvalidRequest(details={"errors": exc.errors(include_url=False, include_input=False)})


def parse_variables(raw: Optional[str]) -> Optional[Dict[str, Any]]:
    """
    Decode the ``variables`` parameter. It must be a JSON object.

    Not part of RequestParser.parse: a request that resolves to the not-found
    sentinel or a hash mismatch is answered without looking at its variables.
    """
    if not raw:
        return None

    try:
        variables = json.loads(raw)
    except ValueError:
        raise InvalidRequest("Invalid variables")

    if not isinstance(variables, dict):
        raise InvalidRequest("Invalid variables")
    return variables
