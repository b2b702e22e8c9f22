"""Tests for feed2json_api.hashing module."""

import hashlib

from feed2json_api.hashing import CACHE_KEY_LENGTH, derive_cache_key


class TestDeriveCacheKey:
    def test_deterministic_output(self) -> None:
        result1 = derive_cache_key("https://example.com/feed.xml")
        result2 = derive_cache_key("https://example.com/feed.xml")
        assert result1 == result2

    def test_returns_12_char_hex_string(self) -> None:
        result = derive_cache_key("https://example.com/feed.xml")
        assert len(result) == CACHE_KEY_LENGTH == 12
        assert all(c in "0123456789abcdef" for c in result)

    def test_is_truncated_sha256(self) -> None:
        url = "https://example.com/feed.xml"
        assert derive_cache_key(url) == hashlib.sha256(url.encode()).hexdigest()[:12]

    def test_different_url_produces_different_key(self) -> None:
        result1 = derive_cache_key("https://example.com/feed.xml")
        result2 = derive_cache_key("https://example.com/feed.xml?page=2")
        assert result1 != result2

    def test_url_is_hashed_as_given(self) -> None:
        assert derive_cache_key("https://example.com") != derive_cache_key("https://example.com/")
