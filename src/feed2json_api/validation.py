"""Request parameter predicates and coercions."""

import math
from typing import Any

from pydantic import AnyHttpUrl, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

_http_url = TypeAdapter(AnyHttpUrl)

TRUTHY = {"true", "t", "yes", "y", "on", "1"}
FALSY = {"false", "f", "no", "n", "off", "0", ""}


def is_web_uri(value: str | None) -> bool:
    """Return True if value is an absolute http(s) URL with a host."""
    if not value or not isinstance(value, str):
        return False
    # pydantic strips surrounding whitespace; the raw string is what gets hashed
    if value != value.strip() or any(c.isspace() or ord(c) < 32 for c in value):
        return False
    try:
        url = _http_url.validate_python(value)
    except PydanticValidationError:
        return False
    return url.scheme in ("http", "https") and bool(url.host)


def booleanify(value: Any) -> bool:
    """Coerce a query-string value to a bool.

    Recognises the usual true/false words and numbers; anything else is False.
    """
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0

    text = str(value).strip().lower()
    if text in TRUTHY:
        return True
    if text in FALSY:
        return False
    try:
        number = float(text)
    except ValueError:
        return False
    return math.isfinite(number) and number != 0
