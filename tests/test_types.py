"""Tests for gateway types and the endpoint TTL policy."""

from __future__ import annotations

import pytest

from universal_gateway.gateway.ttl_policy import select_ttl
from universal_gateway.gateway.types import CacheEntry, CallOptions, HttpMethod


class TestCallOptions:
    def test_default_is_read(self):
        options = CallOptions()
        assert options.http_method == "GET"
        assert options.is_read is True

    @pytest.mark.parametrize("method", [HttpMethod.POST, "post", "DELETE", HttpMethod.PATCH])
    def test_writes(self, method):
        assert CallOptions(method=method).is_read is False

    def test_explicit_get_is_read(self):
        assert CallOptions(method="get").is_read is True


class TestCacheEntry:
    def test_expiry_is_strict(self):
        entry = CacheEntry(value=1, created_at=0.0, expires_at=10.0)
        assert entry.is_expired(10.0) is False
        assert entry.is_expired(10.001) is True


class TestSelectTtl:
    @pytest.mark.parametrize(
        "endpoint, expected",
        [
            ("/users/octocat", 600.0),
            ("/users/octocat/repos", 42.0),
            ("/repos/octocat/hello", 300.0),
            ("/search/repositories", 180.0),
            ("/repos/octocat/hello/issues", 60.0),
            ("/rate_limit", 42.0),
        ],
    )
    def test_rules(self, endpoint, expected):
        assert select_ttl(endpoint, 42.0) == expected
