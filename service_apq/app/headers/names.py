"""
Header name and cache status tables.
"""

from enum import Enum


class Headers(str, Enum):
    """Lower-case header names set or read by the APQ service."""

    # Diagnostics
    apq_origin_status_code = "apq-origin-status-code"
    apq_origin_status_text = "apq-origin-status-text"
    x_cache = "x-cache"

    # Common
    content_type = "content-type"
    cache_control = "cache-control"
    vary = "vary"
    authorization = "authorization"


class CacheHitHeader(str, Enum):
    """Values of the ``x-cache`` diagnostic header."""

    MISS = "MISS"
    HIT = "HIT"
    PASS = "PASS"
    ERROR = "ERROR"
