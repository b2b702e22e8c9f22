"""Typed errors for the conversion pipeline.

Every error that can reach a client carries the HTTP status it maps to; the
message becomes the ``err`` field of the JSON error body.
"""


class Feed2JsonError(Exception):
    """Base class for conversion service failures."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(Feed2JsonError):
    """Missing or malformed request parameters."""

    status_code = 400


class FetchError(Feed2JsonError):
    """The origin was unreachable, timed out or answered with a non-2xx status."""


class PersistenceError(Feed2JsonError):
    """A cache artifact could not be read or written."""


class NotFoundError(PersistenceError):
    """The requested cache artifact does not exist."""


class ConversionError(Feed2JsonError):
    """The fetched bytes could not be turned into a feed document.

    Never surfaced as an HTTP error; the pipeline swaps in an error document.
    """
