"""Feed conversion endpoint."""

from typing import Annotated

from fastapi import APIRouter, BackgroundTasks, Depends, Query, Request, Response

from feed2json_api.errors import ValidationError
from feed2json_api.io.artifact_store import Variant
from feed2json_api.services.conversion_service import ConversionService
from feed2json_api.validation import booleanify, is_web_uri

router = APIRouter(tags=["convert"])

PRETTY_MEDIA_TYPE = "application/json; charset=utf-8"
MINIFIED_MEDIA_TYPE = "application/json"


def get_conversion_service(request: Request) -> ConversionService:
    """Dependency to get the app-wide conversion service."""
    return request.app.state.conversion_service


@router.get("/convert")
async def convert(
    background_tasks: BackgroundTasks,
    service: Annotated[ConversionService, Depends(get_conversion_service)],
    url: Annotated[str | None, Query(description="Absolute http(s) URL of the feed")] = None,
    minify: Annotated[str | None, Query(description="Return compact JSON (true/false, 1/0, yes/no)")] = None,
):
    """Convert a feed to JSON.

    The first request for a URL fetches and converts the feed; later requests
    are answered from the on-disk cache.
    """
    if not url:
        raise ValidationError("provide a 'url' parameter in your query")
    if not is_web_uri(url):
        raise ValidationError(f"invalid 'url' : {url}")

    minified = booleanify(minify)
    result = await service.convert(url, minify=minified)

    if result.persist:
        # runs after the response has been sent
        background_tasks.add_task(service.persist_variant, result.key, Variant.PRETTY, result.document)
        background_tasks.add_task(service.persist_variant, result.key, Variant.MINIFIED, result.document)

    media_type = MINIFIED_MEDIA_TYPE if minified else PRETTY_MEDIA_TYPE
    return Response(content=result.body, media_type=media_type)
