"""Feed converter: raw feed bytes to a JSON Feed document."""

import logging
import time
from datetime import datetime, timezone
from typing import BinaryIO
from urllib.parse import urljoin

import feedparser

from feed2json_api.errors import ConversionError
from feed2json_api.models.feed import Attachment, Author, FeedItem, JsonFeed

logger = logging.getLogger(__name__)


def convert_feed(stream: BinaryIO, url: str) -> dict:
    """Parse a raw feed and return it as a JSON Feed document.

    Args:
        stream: Binary stream over the raw feed bytes
        url: The URL the feed was fetched from; relative links resolve against it

    Returns:
        JSON Feed document as a dict

    Raises:
        ConversionError: If the input is not a recognisable feed.
    """
    try:
        parsed = feedparser.parse(stream, response_headers={"content-location": url})
    except Exception as e:
        raise ConversionError(f"Failed to parse feed from {url}: {e}") from e

    if not parsed.get("version") and not parsed.entries:
        reason = parsed.get("bozo_exception") or "not a recognised feed format"
        raise ConversionError(f"Failed to parse feed from {url}: {reason}")

    if parsed.get("bozo"):
        logger.debug(f"Feed from {url} is not well-formed: {parsed.get('bozo_exception')}")

    meta = parsed.feed
    try:
        feed = JsonFeed(
            title=_text(meta.get("title")),
            home_page_url=_link(meta.get("link"), url),
            feed_url=url,
            description=_text(meta.get("subtitle") or meta.get("description")),
            icon=_link(_image_href(meta), url),
            author=_parse_author(meta),
            items=[_parse_entry(entry, index, url) for index, entry in enumerate(parsed.entries)],
        )
    except (ValueError, TypeError) as e:
        # pydantic.ValidationError is a ValueError
        raise ConversionError(f"Failed to convert feed from {url}: {e}") from e
    return feed.to_document()


def _parse_entry(entry, index: int, base_url: str) -> FeedItem:
    """Convert a single feedparser entry into a FeedItem."""
    link = _link(entry.get("link"), base_url)
    summary = _text(entry.get("summary"))

    content_html = None
    contents = entry.get("content") or []
    if contents:
        content_html = contents[0].get("value")
    if not content_html:
        content_html = summary

    published = _parse_date(entry.get("published_parsed"))
    modified = _parse_date(entry.get("updated_parsed"))

    tags = [tag.get("term") for tag in entry.get("tags") or [] if tag.get("term")]
    attachments = [
        attachment
        for attachment in (_parse_enclosure(enc, base_url) for enc in entry.get("enclosures") or [])
        if attachment is not None
    ]

    return FeedItem(
        id=entry.get("id") or link or str(index),
        url=link,
        title=_text(entry.get("title")),
        content_html=content_html,
        summary=summary if summary != content_html else None,
        date_published=published or modified,
        date_modified=modified,
        author=_parse_author(entry),
        tags=tags or None,
        attachments=attachments or None,
    )


def _parse_author(node) -> Author | None:
    detail = node.get("author_detail") or {}
    name = detail.get("name") or node.get("author")
    href = detail.get("href")
    if not name and not href:
        return None
    return Author(name=name, url=href)


def _parse_enclosure(enclosure, base_url: str) -> Attachment | None:
    href = _link(enclosure.get("href"), base_url)
    if not href:
        return None
    try:
        size = int(enclosure.get("length")) if enclosure.get("length") else None
    except (TypeError, ValueError):
        size = None
    return Attachment(url=href, mime_type=enclosure.get("type") or None, size_in_bytes=size)


def _image_href(meta) -> str | None:
    image = meta.get("image") or {}
    return image.get("href") or image.get("url")


def _parse_date(value: time.struct_time | None) -> str | None:
    """Convert a feedparser UTC struct_time to an ISO-8601 string."""
    if not value:
        return None
    try:
        return datetime(*value[:6], tzinfo=timezone.utc).isoformat()
    except (TypeError, ValueError):
        return None


def _link(value: str | None, base_url: str) -> str | None:
    if not value:
        return None
    try:
        return urljoin(base_url, value.strip())
    except ValueError:
        return None


def _text(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None
