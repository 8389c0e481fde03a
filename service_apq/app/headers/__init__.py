"""
Response header tables and synthesis.
"""

from .builder import HeaderBuilder
from .cache_control import default_cache_control, is_response_cacheable, parse_max_age
from .names import CacheHitHeader, Headers

__all__ = [
    "HeaderBuilder",
    "CacheHitHeader",
    "Headers",
    "default_cache_control",
    "is_response_cacheable",
    "parse_max_age",
]
