"""
Response header synthesis for resolved APQ requests.
"""

from typing import Dict, Optional

from shared.logging import get_logger

from ..models import OriginResponse, ResolutionStatus
from .cache_control import default_cache_control, is_response_cacheable, parse_max_age
from .names import CacheHitHeader, Headers


class HeaderBuilder:
    """
    Computes the headers sent back with an origin response.

    The default ``cache-control`` is replaced wholesale by the origin's own
    header when the origin sent one, unless ``ignore_origin_cache_headers``
    is set. Directives are never merged.
    """

    def __init__(self, default_max_age_seconds: int, swr_seconds: int, ignore_origin_cache_headers: bool = False):
        self.default_max_age_seconds = default_max_age_seconds
        self.swr_seconds = swr_seconds
        self.ignore_origin_cache_headers = ignore_origin_cache_headers
        self.logger = get_logger("apq.headers")

    def build(self, origin: OriginResponse, status: Optional[ResolutionStatus] = None) -> Dict[str, str]:
        headers: Dict[str, str] = {
            Headers.cache_control.value: default_cache_control(self.default_max_age_seconds, self.swr_seconds),
            Headers.content_type.value: "application/json",
            Headers.apq_origin_status_code.value: str(origin.status_code),
            Headers.apq_origin_status_text.value: origin.reason_phrase,
        }

        origin_cache_control = origin.header(Headers.cache_control.value)
        if origin_cache_control and not self.ignore_origin_cache_headers:
            headers[Headers.cache_control.value] = origin_cache_control

        if status is ResolutionStatus.HIT:
            headers[Headers.x_cache.value] = CacheHitHeader.HIT.value
        elif status is ResolutionStatus.MISS:
            headers[Headers.x_cache.value] = CacheHitHeader.MISS.value

        self.logger.debug(
            "Response headers synthesized",
            cache_control=headers[Headers.cache_control.value],
            max_age=parse_max_age(headers[Headers.cache_control.value]),
            cacheable=is_response_cacheable(origin.status_code, {**origin.headers, **headers}),
            origin_cache_control=origin_cache_control is not None,
        )
        return headers
