"""
Cache-Control helpers.
"""

import re
from typing import Mapping, Optional

from .names import Headers

_MAX_AGE_RE = re.compile(r"max-age=(\d+)")
_UNCACHEABLE_RE = re.compile(r"(private|no-cache|no-store)", re.IGNORECASE)


def parse_max_age(cache_control: Optional[str]) -> int:
    """Return the ``max-age`` directive in seconds, or -1 when absent."""
    if not cache_control:
        return -1
    match = _MAX_AGE_RE.search(cache_control)
    return int(match.group(1)) if match else -1


def is_response_cacheable(status_code: int, headers: Mapping[str, str]) -> bool:
    """Whether a shared cache may store a response with these headers."""
    if status_code == 206:
        return False

    if "*" in headers.get(Headers.vary.value, ""):
        return False

    if _UNCACHEABLE_RE.search(headers.get(Headers.cache_control.value, "")):
        return False

    return True


def default_cache_control(max_age_seconds: int, swr_seconds: int, stale_if_error_seconds: int = 60) -> str:
    return (
        f"public, max-age={max_age_seconds}, "
        f"stale-if-error={stale_if_error_seconds}, "
        f"stale-while-revalidate={swr_seconds}"
    )
