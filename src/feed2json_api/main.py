"""FastAPI application entry point."""

import argparse
import logging
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from feed2json_api import __version__
from feed2json_api.config import APIConfig, get_config, load_config, set_config
from feed2json_api.errors import Feed2JsonError
from feed2json_api.routers import convert, health
from feed2json_api.services.conversion_service import ConversionService

logger = logging.getLogger(__name__)


def setup_logging(level: str = "info") -> None:
    """Configure standard logging format."""
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s - %(levelname)s - %(message)s",
    )


async def handle_service_error(request: Request, exc: Feed2JsonError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"err": exc.message})


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error for {request.method} {request.url.path}")
    return JSONResponse(status_code=500, content={"err": f"Internal error: {exc}"})


def create_app(config: APIConfig | None = None) -> FastAPI:
    """Build the application around a config (the global one by default)."""
    if config is None:
        config = get_config()
    else:
        set_config(config)

    app = FastAPI(
        title="feed2json API",
        description="Convert RSS/Atom feeds to JSON, cached on disk by URL",
        version=__version__,
    )
    app.state.config = config
    app.state.conversion_service = ConversionService(config)

    app.add_exception_handler(Feed2JsonError, handle_service_error)
    app.add_exception_handler(Exception, handle_unexpected_error)

    app.include_router(health.router)
    app.include_router(convert.router)

    # Static UI shell; mounted last so it never shadows the API routes
    static_dir = config.server.static_dir
    if static_dir and Path(static_dir).is_dir():
        app.mount("/", StaticFiles(directory=static_dir, html=True), name="static")
    elif static_dir:
        logger.info(f"Static directory {static_dir} not found, UI not served")

    return app


def main() -> None:
    """Run the API server."""
    import uvicorn

    parser = argparse.ArgumentParser(description="Run the feed2json API server.")
    parser.add_argument("--config", default=None, help="Config name (default: $FEED2JSON_CONFIG or prod)")
    parser.add_argument("--host", default=None)
    parser.add_argument("--port", type=int, default=None)
    args = parser.parse_args()

    config = load_config(args.config)
    if args.host:
        config.server.host = args.host
    if args.port:
        config.server.port = args.port

    setup_logging(config.server.log_level)
    logger.info(f"Caching feeds in {config.cache_path.resolve()}")

    uvicorn.run(
        create_app(config),
        host=config.server.host,
        port=config.server.port,
        log_level=config.server.log_level,
    )


if __name__ == "__main__":
    main()
