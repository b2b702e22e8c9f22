"""JSON Feed Pydantic models."""

from pydantic import BaseModel, Field

JSON_FEED_VERSION = "https://jsonfeed.org/version/1"

CONVERSION_ERROR_MESSAGE = "Error processing feed"


class Author(BaseModel):
    name: str | None = None
    url: str | None = None
    avatar: str | None = None


class Attachment(BaseModel):
    """Enclosure (podcast audio, images, ...) attached to an item."""

    url: str
    mime_type: str | None = None
    size_in_bytes: int | None = None


class FeedItem(BaseModel):
    id: str
    url: str | None = None
    title: str | None = None
    content_html: str | None = None
    summary: str | None = None
    date_published: str | None = None  # ISO-8601, UTC
    date_modified: str | None = None
    author: Author | None = None
    tags: list[str] | None = None
    attachments: list[Attachment] | None = None


class JsonFeed(BaseModel):
    version: str = JSON_FEED_VERSION
    title: str | None = None
    home_page_url: str | None = None
    feed_url: str | None = None
    description: str | None = None
    icon: str | None = None
    author: Author | None = None
    items: list[FeedItem] = Field(default_factory=list)

    def to_document(self) -> dict:
        """Plain dict for serialization, with absent fields omitted."""
        return self.model_dump(exclude_none=True)


class ErrorDocument(BaseModel):
    """Body returned for failed requests and cached for failed conversions."""

    err: str


def conversion_error_document() -> dict:
    return ErrorDocument(err=CONVERSION_ERROR_MESSAGE).model_dump()
