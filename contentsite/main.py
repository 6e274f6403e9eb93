"""FastAPI application entry point."""

from __future__ import annotations

import logging
import sys
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI, Request
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import HTMLResponse, JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.trustedhost import TrustedHostMiddleware

from contentsite.api.health import VERSION
from contentsite.api.health import router as health_router
from contentsite.api.site import build_router
from contentsite.config import Settings
from contentsite.exceptions import (
    ContentNotFoundError,
    ContentParseError,
    ContentReadError,
)
from contentsite.filesystem.content_store import ContentStore
from contentsite.rendering.templates import RenderError, TemplateRenderer
from contentsite.schemas.content import Partition

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator, Awaitable, Callable

    from starlette.responses import Response
    from starlette.types import ASGIApp

logger = logging.getLogger(__name__)

_FALLBACK_ERROR_PAGE = (
    "<!DOCTYPE html><html><head><title>{status}</title></head>"
    "<body><h1>{status}</h1><p>{message}</p></body></html>"
)


def _configure_logging(debug: bool) -> None:
    """Configure application logging."""
    level = logging.DEBUG if debug else logging.INFO
    fmt = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"
    logging.basicConfig(
        level=level,
        format=fmt,
        stream=sys.stdout,
        force=True,
    )
    # Quiet noisy libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("MARKDOWN").setLevel(logging.WARNING)


def check_content_dir(settings: Settings) -> None:
    """Validate the content directory layout without modifying it.

    The directory itself must exist; missing partitions or a missing
    aggregate file only produce warnings since the affected routes answer
    404 on their own.
    """
    content_dir = settings.content_dir
    if content_dir.exists() and not content_dir.is_dir():
        msg = f"Content path exists but is not a directory: {content_dir}"
        raise NotADirectoryError(msg)
    if not content_dir.exists():
        logger.warning("Content directory %s does not exist; every route will 404", content_dir)
        return

    for partition in Partition:
        partition_dir = settings.partition_dir(partition)
        if not partition_dir.is_dir():
            logger.warning("Content partition directory missing: %s", partition_dir)
    if not settings.aggregate_path.is_file():
        logger.warning("Aggregate file missing: %s", settings.aggregate_path)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Application lifespan: startup and shutdown."""
    settings: Settings = app.state.settings
    _configure_logging(settings.debug)
    logger.info("Starting contentsite (debug=%s)", settings.debug)

    try:
        check_content_dir(settings)
    except Exception as exc:
        logger.critical(
            "Failed to validate content directory at %s: %s.", settings.content_dir, exc
        )
        raise

    yield

    logger.info("contentsite stopped")


def _error_response(request: Request, status_code: int, message: str) -> Response:
    """Build a generic error response: JSON under /api/, an HTML page elsewhere."""
    if request.url.path.startswith("/api/"):
        return JSONResponse(status_code=status_code, content={"error": message})

    renderer: TemplateRenderer = request.app.state.renderer
    try:
        body = renderer.render("error.html", {"status_code": status_code, "message": message})
    except RenderError as exc:
        logger.error("Error page rendering failed: %s", exc, exc_info=exc)
        body = _FALLBACK_ERROR_PAGE.format(status=status_code, message=message)
    return HTMLResponse(status_code=status_code, content=body)


def create_app(settings: Settings | None = None, lead_intake: ASGIApp | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    *lead_intake* is an independent ASGI application mounted at
    ``settings.lead_intake_prefix``; requests under that prefix never reach
    the content routes.
    """
    if settings is None:
        settings = Settings()

    app = FastAPI(
        title="contentsite",
        description="A read-only content site served from JSON and markdown files",
        version=VERSION,
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url=None,
        openapi_url="/openapi.json" if settings.debug else None,
    )
    app.state.settings = settings
    app.state.content_store = ContentStore(
        content_dir=settings.content_dir,
        aggregate_file=settings.aggregate_file,
        read_timeout=settings.read_timeout_seconds,
    )
    app.state.renderer = TemplateRenderer(
        templates_dir=settings.templates_dir,
        site_globals={"site_title": settings.site_title},
    )

    app.add_middleware(GZipMiddleware, minimum_size=500)

    trusted_hosts = settings.trusted_hosts or (
        ["localhost", "127.0.0.1", "::1", "test", "testserver"] if settings.debug else []
    )
    if trusted_hosts:
        app.add_middleware(TrustedHostMiddleware, allowed_hosts=trusted_hosts)

    @app.middleware("http")
    async def security_headers(
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        response = await call_next(request)
        if settings.security_headers_enabled:
            response.headers.setdefault("X-Content-Type-Options", "nosniff")
            response.headers.setdefault("X-Frame-Options", "DENY")
            response.headers.setdefault("Referrer-Policy", "strict-origin-when-cross-origin")
        return response

    if lead_intake is not None:
        # Mounted ahead of the site routes so /{slug} cannot claim the prefix
        app.mount(settings.lead_intake_prefix, lead_intake, name="lead_intake")

    app.include_router(health_router)
    app.include_router(build_router())

    # Global exception handlers: the only place failures become responses

    @app.exception_handler(ContentNotFoundError)
    async def not_found_handler(request: Request, exc: ContentNotFoundError) -> Response:
        logger.debug("Not found in %s %s: %s", request.method, request.url.path, exc)
        return _error_response(request, 404, "Not found")

    @app.exception_handler(ContentParseError)
    async def parse_error_handler(request: Request, exc: ContentParseError) -> Response:
        logger.error(
            "ContentParseError for %s in %s %s: %s",
            exc.location,
            request.method,
            request.url.path,
            exc,
            exc_info=exc,
        )
        return _error_response(request, 500, "Internal server error")

    @app.exception_handler(ContentReadError)
    async def read_error_handler(request: Request, exc: ContentReadError) -> Response:
        logger.error(
            "ContentReadError for %s in %s %s: %s",
            exc.location,
            request.method,
            request.url.path,
            exc,
            exc_info=exc,
        )
        return _error_response(request, 500, "Internal server error")

    @app.exception_handler(RenderError)
    async def render_error_handler(request: Request, exc: RenderError) -> Response:
        logger.error(
            "RenderError in %s %s: %s", request.method, request.url.path, exc, exc_info=exc
        )
        return _error_response(request, 500, "Internal server error")

    @app.exception_handler(RuntimeError)
    async def runtime_error_handler(request: Request, exc: RuntimeError) -> Response:
        if isinstance(exc, (NotImplementedError, RecursionError)):
            raise exc
        logger.error(
            "RuntimeError in %s %s: %s", request.method, request.url.path, exc, exc_info=exc
        )
        return _error_response(request, 500, "Internal server error")

    @app.exception_handler(OSError)
    async def os_error_handler(request: Request, exc: OSError) -> Response:
        logger.error("OSError in %s %s: %s", request.method, request.url.path, exc, exc_info=exc)
        return _error_response(request, 500, "Internal server error")

    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError) -> Response:
        logger.error("ValueError in %s %s: %s", request.method, request.url.path, exc, exc_info=exc)
        return _error_response(request, 500, "Internal server error")

    @app.exception_handler(TypeError)
    async def type_error_handler(request: Request, exc: TypeError) -> Response:
        logger.error(
            "[BUG] TypeError in %s %s: %s",
            request.method,
            request.url.path,
            exc,
            exc_info=exc,
        )
        return _error_response(request, 500, "Internal server error")

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> Response:
        if exc.status_code >= 500:
            logger.error("HTTP %d in %s %s", exc.status_code, request.method, request.url.path)
        message = "Not found" if exc.status_code == 404 else str(exc.detail)
        response = _error_response(request, exc.status_code, message)
        if exc.headers:
            response.headers.update(exc.headers)
        return response

    return app


app = create_app()


def cli_entry() -> None:
    """CLI entry point for running the server."""
    import uvicorn

    settings: Settings = app.state.settings
    uvicorn.run(
        "contentsite.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
