"""Origin fetcher: the single outbound request made on a cache miss."""

import logging
import threading
import time

import requests

from feed2json_api.config import FetchConfig
from feed2json_api.errors import FetchError

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


def build_headers(config: FetchConfig) -> dict[str, str]:
    """Fixed outbound headers. Some origins reject requests without a browser UA."""
    return {
        "User-Agent": config.user_agent,
        "Accept": config.accept,
        "Connection": "close",
    }


def fetch_feed(url: str, config: FetchConfig) -> bytes:
    """Fetch the raw feed body from the origin.

    A fresh session is used per call so a slow origin never holds a pooled
    connection other requests depend on. ``config.timeout_seconds`` bounds the
    whole exchange: connect and header reads through the ``requests`` timeout,
    the body through a watchdog that shuts the socket down at the deadline.

    Raises:
        FetchError: On transport failure, timeout, non-2xx status or an
            oversized body.
    """
    deadline = time.monotonic() + config.timeout_seconds
    logger.info(f"Fetching {url}")

    with requests.Session() as session:
        try:
            response = session.get(
                url,
                headers=build_headers(config),
                timeout=config.timeout_seconds,
                stream=True,
            )
        except requests.RequestException as exc:
            raise FetchError(f"Error calling request: {exc}") from exc

        with response:
            try:
                response.raise_for_status()
            except requests.HTTPError as exc:
                raise FetchError(f"Error calling request: {exc}") from exc

            remaining = deadline - time.monotonic()
            if remaining <= 0:
                raise FetchError(_deadline_message(url, config))

            expired = threading.Event()
            watchdog = threading.Timer(remaining, _expire, args=(response, expired))
            watchdog.daemon = True
            watchdog.start()
            try:
                body = _read_body(response, url, config, expired)
            finally:
                watchdog.cancel()

    logger.info(f"Fetched {len(body)} bytes from {url} (status {response.status_code})")
    return body


def _read_body(response: requests.Response, url: str, config: FetchConfig, expired: threading.Event) -> bytes:
    body = bytearray()
    try:
        for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
            if expired.is_set():
                break
            body.extend(chunk)
            if len(body) > config.max_bytes:
                raise FetchError(
                    f"Error calling request: response from {url} exceeds {config.max_bytes} bytes"
                )
    except (requests.RequestException, OSError) as exc:
        if expired.is_set():
            raise FetchError(_deadline_message(url, config)) from exc
        raise FetchError(f"Error calling request: {exc}") from exc

    # a shut down socket can also look like a clean end of body
    if expired.is_set():
        raise FetchError(_deadline_message(url, config))
    return bytes(body)


def _expire(response: requests.Response, expired: threading.Event) -> None:
    """Watchdog callback: unblock a body read that is still waiting on the socket."""
    expired.set()
    try:
        response.raw.shutdown()
    except (OSError, RuntimeError, ValueError) as e:
        logger.debug(f"Could not shut down connection: {e}")


def _deadline_message(url: str, config: FetchConfig) -> str:
    return f"Error calling request: {url} did not respond within {config.timeout_seconds}s"
