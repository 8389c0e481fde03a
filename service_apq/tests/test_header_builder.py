"""
Unit tests for response header synthesis.
"""

import pytest

from service_apq.app.headers import (
    CacheHitHeader,
    HeaderBuilder,
    Headers,
    default_cache_control,
    is_response_cacheable,
    parse_max_age,
)
from service_apq.app.models import OriginResponse, ResolutionStatus

DEFAULT_CACHE_CONTROL = "public, max-age=900, stale-if-error=60, stale-while-revalidate=300"


def origin_response(status_code=200, reason_phrase="OK", **headers):
    return OriginResponse(
        status_code=status_code,
        reason_phrase=reason_phrase,
        headers={name.replace("_", "-"): value for name, value in headers.items()},
        body='{"data": {}}',
    )


class TestHeaderBuilder:
    """Test cases for HeaderBuilder."""

    @pytest.fixture
    def builder(self):
        return HeaderBuilder(default_max_age_seconds=900, swr_seconds=300)

    def test_default_headers(self, builder):
        headers = builder.build(origin_response())

        assert headers == {
            "cache-control": DEFAULT_CACHE_CONTROL,
            "content-type": "application/json",
            "apq-origin-status-code": "200",
            "apq-origin-status-text": "OK",
        }

    def test_origin_cache_control_replaces_default(self, builder):
        """The origin header wins verbatim, no directive merging."""
        headers = builder.build(origin_response(cache_control="private, max-age=0"))

        assert headers["cache-control"] == "private, max-age=0"

    def test_ignore_flag_keeps_default(self):
        builder = HeaderBuilder(default_max_age_seconds=900, swr_seconds=300, ignore_origin_cache_headers=True)

        headers = builder.build(origin_response(cache_control="private, max-age=0"))

        assert headers["cache-control"] == DEFAULT_CACHE_CONTROL

    def test_diagnostic_status_headers(self, builder):
        headers = builder.build(origin_response(status_code=203, reason_phrase="Non-Authoritative Information"))

        assert headers[Headers.apq_origin_status_code.value] == "203"
        assert headers[Headers.apq_origin_status_text.value] == "Non-Authoritative Information"

    @pytest.mark.parametrize("status, expected", [
        (ResolutionStatus.HIT, CacheHitHeader.HIT.value),
        (ResolutionStatus.MISS, CacheHitHeader.MISS.value),
    ])
    def test_x_cache_header(self, builder, status, expected):
        assert builder.build(origin_response(), status)["x-cache"] == expected

    def test_no_x_cache_without_status(self, builder):
        assert "x-cache" not in builder.build(origin_response())


class TestCacheControlHelpers:
    """Cache-Control parsing helpers."""

    @pytest.mark.parametrize("value, expected", [
        ("public, max-age=900", 900),
        ("max-age=0", 0),
        ("s-maxage=10", -1),
        ("no-store", -1),
        ("", -1),
        (None, -1),
    ])
    def test_parse_max_age(self, value, expected):
        assert parse_max_age(value) == expected

    def test_default_cache_control(self):
        assert default_cache_control(900, 300) == DEFAULT_CACHE_CONTROL

    @pytest.mark.parametrize("status_code, headers, expected", [
        (200, {"cache-control": "public, max-age=60"}, True),
        (200, {}, True),
        (206, {}, False),
        (200, {"vary": "*"}, False),
        (200, {"vary": "Accept-Encoding"}, True),
        (200, {"cache-control": "private"}, False),
        (200, {"cache-control": "No-Cache"}, False),
        (200, {"cache-control": "no-store"}, False),
    ])
    def test_is_response_cacheable(self, status_code, headers, expected):
        assert is_response_cacheable(status_code, headers) is expected
