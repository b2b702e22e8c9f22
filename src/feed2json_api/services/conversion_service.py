"""Fetch-cache-convert pipeline."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import BinaryIO

from starlette.concurrency import run_in_threadpool

from feed2json_api.config import APIConfig, FetchConfig
from feed2json_api.converter import convert_feed
from feed2json_api.errors import ConversionError, PersistenceError
from feed2json_api.hashing import derive_cache_key
from feed2json_api.io.artifact_store import ArtifactStore, Variant
from feed2json_api.io.origin import fetch_feed
from feed2json_api.models.feed import conversion_error_document

logger = logging.getLogger(__name__)

Fetcher = Callable[[str, FetchConfig], bytes]
Converter = Callable[[BinaryIO, str], dict]


def render_document(document: dict, minify: bool) -> bytes:
    """Serialize a document: compact when minified, 2-space indent otherwise."""
    if minify:
        text = json.dumps(document, ensure_ascii=False, separators=(",", ":"))
    else:
        text = json.dumps(document, ensure_ascii=False, indent=2)
    return text.encode("utf-8")


@dataclass
class Production:
    """Outcome of producing a converted document for one cache key."""

    document: dict
    failed: bool = False  # conversion failed; document is the error sentinel
    claimed: bool = field(default=False, repr=False)

    def claim(self) -> bool:
        """Hand the derived writes to the first waiting request that resumes."""
        if self.claimed:
            return False
        self.claimed = True
        return True


@dataclass
class ConversionResult:
    key: str
    body: bytes
    from_cache: bool = False
    document: dict | None = None
    persist: bool = False  # caller should schedule the derived writes


class ConversionService:
    """Serve converted feeds from the artifact store, producing them on a miss.

    At most one production (fetch, persist raw, convert) runs per cache key at
    a time. Concurrent misses for the same key wait on the running one.
    """

    def __init__(
        self,
        config: APIConfig,
        store: ArtifactStore | None = None,
        fetcher: Fetcher | None = None,
        converter: Converter | None = None,
    ):
        self.config = config
        self.store = store or ArtifactStore(config.cache_path)
        self.fetcher = fetcher or fetch_feed
        self.converter = converter or convert_feed
        self._inflight: dict[str, asyncio.Task] = {}

    async def convert(self, url: str, minify: bool = False) -> ConversionResult:
        """Return the converted feed for a validated URL.

        Raises:
            FetchError: If the origin could not be fetched.
            PersistenceError: If a cached artifact could not be read, or the raw
                artifact could not be written.
        """
        key = derive_cache_key(url)
        variant = Variant.MINIFIED if minify else Variant.PRETTY
        logger.debug(f"url={url} key={key} variant={variant.value}")

        if await run_in_threadpool(self.store.exists, key, variant):
            body = await run_in_threadpool(self.store.read, key, variant)
            logger.info(f"Sent existing {variant.value} file from cache for {url}")
            return ConversionResult(key=key, body=body, from_cache=True)

        task = self._inflight.get(key)
        if task is None:
            task = asyncio.ensure_future(self._produce(key, url))
            self._inflight[key] = task
            task.add_done_callback(lambda t: self._forget(key, t))
        else:
            logger.info(f"Waiting on in-flight conversion of {url}")

        # shield: a disconnecting client must not cancel work others wait on
        production = await asyncio.shield(task)

        # whoever resumes first writes, even if the request that started it is gone
        cacheable = not production.failed or self.config.cache.cache_conversion_errors
        persist = cacheable and production.claim()
        return ConversionResult(
            key=key,
            body=render_document(production.document, minify),
            document=production.document,
            persist=persist,
        )

    def persist_variant(self, key: str, variant: Variant, document: dict) -> None:
        """Write one derived artifact. Failures are logged, never raised."""
        data = render_document(document, minify=variant is Variant.MINIFIED)
        try:
            self.store.write_atomic(key, variant, data)
        except PersistenceError as e:
            logger.error(f"Error writing {variant.value} JSON file for {key}: {e}")
        except Exception:
            logger.exception(f"Unexpected error writing {variant.value} JSON file for {key}")

    def _forget(self, key: str, task: asyncio.Task) -> None:
        if self._inflight.get(key) is task:
            del self._inflight[key]
        if not task.cancelled() and task.exception() is not None:
            logger.debug(f"Conversion of {key} failed: {task.exception()}")

    async def _produce(self, key: str, url: str) -> Production:
        if await run_in_threadpool(self.store.exists, key, Variant.RAW):
            logger.info(f"Raw artifact for {key} already cached, re-deriving JSON")
        else:
            logger.info(f"Cache miss for {url}, fetching from origin")
            body = await run_in_threadpool(self.fetcher, url, self.config.fetch)
            await run_in_threadpool(self.store.write_atomic, key, Variant.RAW, body)

        return await run_in_threadpool(self._convert_raw, key, url)

    def _convert_raw(self, key: str, url: str) -> Production:
        with self.store.open(key, Variant.RAW) as stream:
            try:
                return Production(document=self.converter(stream, url))
            except ConversionError as e:
                logger.warning(f"{e}")
                return Production(document=conversion_error_document(), failed=True)
