"""Site routes: the ordered route table and the request dispatcher.

Routes are registered in ``ROUTE_TABLE`` order and Starlette tries them in
registration order, so the first declared pattern that matches a path wins.
Fixed paths such as ``/about`` must therefore come before ``/{slug}``.

Every handler is a single linear pass: match, load, render, respond. Load
and render failures propagate as exceptions to the global handlers in
``contentsite/main.py``, which turn them into 404 / 500 responses.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Iterable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Annotated, Any

from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse, JSONResponse, Response

from contentsite.api.deps import get_content_store, get_renderer, get_settings
from contentsite.config import Settings
from contentsite.filesystem.content_store import ContentStore
from contentsite.rendering.templates import TemplateRenderer
from contentsite.schemas.content import Partition
from contentsite.services.content_service import (
    get_collection,
    get_home,
    get_overflow,
    get_record,
)

logger = logging.getLogger(__name__)


class RouteKind(str, Enum):
    HOME = "home"
    OVERFLOW = "overflow"
    RECORD = "record"
    API_COLLECTION = "api_collection"
    API_RECORD = "api_record"


@dataclass(frozen=True)
class RoutePattern:
    """Maps a URL shape to a loader invocation and a template.

    ``slug`` is fixed for single-page routes and None when the slug comes
    from the ``{slug}`` path parameter.
    """

    path: str
    name: str
    kind: RouteKind
    template: str | None = None
    partition: Partition | None = None
    slug: str | None = None

    @property
    def is_api(self) -> bool:
        return self.kind in (RouteKind.API_COLLECTION, RouteKind.API_RECORD)


ROUTE_TABLE: tuple[RoutePattern, ...] = (
    RoutePattern("/", "home", RouteKind.HOME, template="home.html"),
    RoutePattern("/allposts", "allposts", RouteKind.OVERFLOW, template="allposts.html"),
    RoutePattern(
        "/about", "about", RouteKind.RECORD, "page.html", Partition.STATIC, slug="about"
    ),
    RoutePattern(
        "/contact", "contact", RouteKind.RECORD, "page.html", Partition.STATIC, slug="contact"
    ),
    RoutePattern(
        "/projects", "projects", RouteKind.RECORD, "page.html", Partition.STATIC, slug="projects"
    ),
    RoutePattern(
        "/start-here",
        "start_here",
        RouteKind.RECORD,
        "pillar.html",
        Partition.PILLAR,
        slug="start-here",
    ),
    RoutePattern("/api/posts", "api_posts", RouteKind.API_COLLECTION),
    RoutePattern("/api/{slug}", "api_record", RouteKind.API_RECORD, partition=Partition.GENERAL),
    RoutePattern("/{slug}", "post", RouteKind.RECORD, "post.html", Partition.GENERAL),
)

Endpoint = Callable[..., Awaitable[Response]]


def _render(renderer: TemplateRenderer, pattern: RoutePattern, context: dict[str, Any]) -> Response:
    assert pattern.template is not None
    return HTMLResponse(renderer.render(pattern.template, context))


def _home_endpoint(pattern: RoutePattern, pillar_paths: Mapping[str, str]) -> Endpoint:
    """Landing page. The featured item links to the route declared for its pillar slug."""

    async def endpoint(
        store: Annotated[ContentStore, Depends(get_content_store)],
        renderer: Annotated[TemplateRenderer, Depends(get_renderer)],
        settings: Annotated[Settings, Depends(get_settings)],
    ) -> Response:
        view = await get_home(store, settings)
        featured_url = pillar_paths.get(view.featured.slug)
        if featured_url is None:
            logger.warning("No route serves featured pillar item %s", view.featured.slug)
        return _render(
            renderer,
            pattern,
            {
                "featured": view.featured,
                "featured_url": featured_url,
                "posts": view.posts,
                "has_more": view.has_more,
            },
        )

    return endpoint


def _overflow_endpoint(pattern: RoutePattern) -> Endpoint:
    async def endpoint(
        store: Annotated[ContentStore, Depends(get_content_store)],
        renderer: Annotated[TemplateRenderer, Depends(get_renderer)],
        settings: Annotated[Settings, Depends(get_settings)],
    ) -> Response:
        posts = await get_overflow(store, settings)
        return _render(renderer, pattern, {"posts": posts})

    return endpoint


def _record_endpoint(pattern: RoutePattern) -> Endpoint:
    assert pattern.partition is not None
    partition = pattern.partition

    if pattern.slug is not None:
        fixed_slug = pattern.slug

        async def fixed_endpoint(
            store: Annotated[ContentStore, Depends(get_content_store)],
            renderer: Annotated[TemplateRenderer, Depends(get_renderer)],
        ) -> Response:
            item = await get_record(store, partition, fixed_slug)
            return _render(renderer, pattern, {"item": item})

        return fixed_endpoint

    async def slug_endpoint(
        slug: str,
        store: Annotated[ContentStore, Depends(get_content_store)],
        renderer: Annotated[TemplateRenderer, Depends(get_renderer)],
    ) -> Response:
        item = await get_record(store, partition, slug)
        return _render(renderer, pattern, {"item": item})

    return slug_endpoint


def _api_collection_endpoint(pattern: RoutePattern) -> Endpoint:
    async def endpoint(
        store: Annotated[ContentStore, Depends(get_content_store)],
    ) -> Response:
        collection = await get_collection(store)
        return JSONResponse(collection.to_jsonable())

    return endpoint


def _api_record_endpoint(pattern: RoutePattern) -> Endpoint:
    assert pattern.partition is not None
    partition = pattern.partition

    async def endpoint(
        slug: str,
        store: Annotated[ContentStore, Depends(get_content_store)],
    ) -> Response:
        item = await get_record(store, partition, slug)
        return JSONResponse(item.record.model_dump(mode="json"))

    return endpoint


# Home needs the whole table and is built in build_router
_ENDPOINT_FACTORIES: dict[RouteKind, Callable[[RoutePattern], Endpoint]] = {
    RouteKind.OVERFLOW: _overflow_endpoint,
    RouteKind.RECORD: _record_endpoint,
    RouteKind.API_COLLECTION: _api_collection_endpoint,
    RouteKind.API_RECORD: _api_record_endpoint,
}


def build_router(routes: Iterable[RoutePattern] = ROUTE_TABLE) -> APIRouter:
    """Register *routes* on a new router, preserving their order."""
    routes = tuple(routes)
    pillar_paths = {
        pattern.slug: pattern.path
        for pattern in routes
        if pattern.partition is Partition.PILLAR and pattern.slug is not None
    }
    router = APIRouter(tags=["site"])
    for pattern in routes:
        if pattern.kind is RouteKind.HOME:
            endpoint = _home_endpoint(pattern, pillar_paths)
        else:
            endpoint = _ENDPOINT_FACTORIES[pattern.kind](pattern)
        router.add_api_route(
            pattern.path,
            endpoint,
            methods=["GET"],
            name=pattern.name,
            response_class=JSONResponse if pattern.is_api else HTMLResponse,
            include_in_schema=pattern.is_api,
        )
        logger.debug("Registered route %s -> %s", pattern.path, pattern.name)
    return router


router = build_router()
