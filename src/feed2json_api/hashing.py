"""Cache key derivation."""

import hashlib

CACHE_KEY_LENGTH = 12


def derive_cache_key(url: str) -> str:
    """Derive the cache key (truncated SHA-256 hex digest) for a validated URL."""
    return hashlib.sha256(url.encode("utf-8")).hexdigest()[:CACHE_KEY_LENGTH]
