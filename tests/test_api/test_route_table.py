"""Tests for the ordered route table and the mounted lead-intake application."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from fastapi import FastAPI
from fastapi.routing import APIRoute
from httpx import ASGITransport, AsyncClient
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Mount, Route

from contentsite.api.site import ROUTE_TABLE, RouteKind, RoutePattern, build_router
from contentsite.filesystem.content_store import ContentStore
from contentsite.main import create_app
from contentsite.rendering.templates import TemplateRenderer
from contentsite.schemas.content import Partition
from tests.conftest import write_json

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator
    from pathlib import Path

    from contentsite.config import Settings


class TestRouteTable:
    def test_declared_order(self) -> None:
        assert [p.path for p in ROUTE_TABLE] == [
            "/",
            "/allposts",
            "/about",
            "/contact",
            "/projects",
            "/start-here",
            "/api/posts",
            "/api/{slug}",
            "/{slug}",
        ]

    def test_catch_all_routes_come_last_in_their_namespace(self) -> None:
        paths = [p.path for p in ROUTE_TABLE]
        assert paths.index("/api/posts") < paths.index("/api/{slug}")
        assert paths[-1] == "/{slug}"

    def test_html_routes_declare_templates(self) -> None:
        for pattern in ROUTE_TABLE:
            if pattern.is_api:
                assert pattern.template is None
            else:
                assert pattern.template is not None

    def test_router_preserves_declaration_order(self) -> None:
        router = build_router()
        api_routes = [r for r in router.routes if isinstance(r, APIRoute)]
        assert [r.path for r in api_routes] == [p.path for p in ROUTE_TABLE]

    def test_app_registers_site_routes_in_order(self, app: FastAPI) -> None:
        paths = [r.path for r in app.routes if isinstance(r, APIRoute)]
        site_paths = [p for p in paths if p in {pattern.path for pattern in ROUTE_TABLE}]
        assert site_paths == [p.path for p in ROUTE_TABLE]
        assert paths.index("/api/health") < paths.index("/api/{slug}")

    def test_custom_table(self) -> None:
        table = (
            RoutePattern("/faq", "faq", RouteKind.RECORD, "page.html", Partition.STATIC, "faq"),
        )
        router = build_router(table)
        assert [r.path for r in router.routes] == ["/faq"]

    @pytest.mark.asyncio
    async def test_home_links_featured_to_its_pillar_route(
        self, tmp_content_dir: Path, test_settings: Settings
    ) -> None:
        write_json(
            tmp_content_dir / "pillar" / "intro.json",
            {"title": "Introduction", "body": "<p>Hi</p>"},
        )
        table = (
            RoutePattern("/", "home", RouteKind.HOME, template="home.html"),
            RoutePattern(
                "/intro", "intro", RouteKind.RECORD, "pillar.html", Partition.PILLAR, "intro"
            ),
        )
        site = FastAPI()
        site.state.settings = test_settings.model_copy(update={"featured_slug": "intro"})
        site.state.content_store = ContentStore(content_dir=tmp_content_dir)
        site.state.renderer = TemplateRenderer(site_globals={"site_title": "Test Site"})
        site.include_router(build_router(table))

        async with AsyncClient(transport=ASGITransport(app=site), base_url="http://test") as ac:
            home = await ac.get("/")
            featured = await ac.get("/intro")
        assert '<a href="/intro">Introduction</a>' in home.text
        assert featured.status_code == 200
        assert "Introduction" in featured.text


class TestFirstMatchWins:
    @pytest.mark.asyncio
    async def test_static_route_beats_generic_slug(
        self, client: AsyncClient, tmp_content_dir: Path
    ) -> None:
        write_json(tmp_content_dir / "posts" / "about.json", {"title": "Shadow About", "body": ""})
        resp = await client.get("/about")
        assert resp.status_code == 200
        assert "About Us" in resp.text
        assert "Shadow About" not in resp.text

    @pytest.mark.asyncio
    async def test_pillar_route_beats_generic_slug(
        self, client: AsyncClient, tmp_content_dir: Path
    ) -> None:
        write_json(
            tmp_content_dir / "posts" / "start-here.json", {"title": "Shadow Start", "body": ""}
        )
        resp = await client.get("/start-here")
        assert "Shadow Start" not in resp.text

    @pytest.mark.asyncio
    async def test_allposts_beats_generic_slug(
        self, client: AsyncClient, tmp_content_dir: Path
    ) -> None:
        write_json(tmp_content_dir / "posts" / "allposts.json", {"title": "Shadow", "body": ""})
        resp = await client.get("/allposts")
        assert resp.status_code == 200
        assert "All posts</h1>" in resp.text
        assert "Shadow" not in resp.text


async def _receive_lead(request: Request) -> JSONResponse:
    payload = await request.json()
    return JSONResponse({"received": payload["email"], "path": request.url.path})


class TestLeadIntakeMount:
    @pytest.fixture
    async def lead_client(self, test_settings: Settings) -> AsyncGenerator[AsyncClient]:
        lead_app = Starlette(routes=[Route("/submit", _receive_lead, methods=["POST"])])
        app = create_app(test_settings, lead_intake=lead_app)
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
            yield ac

    def test_mount_registered_before_site_routes(self, test_settings: Settings) -> None:
        app = create_app(test_settings, lead_intake=Starlette())
        kinds = [type(r) for r in app.routes]
        mount_index = kinds.index(Mount)
        slug_index = next(
            i for i, r in enumerate(app.routes) if getattr(r, "path", None) == "/{slug}"
        )
        assert mount_index < slug_index

    @pytest.mark.asyncio
    async def test_requests_under_prefix_reach_sub_application(
        self, lead_client: AsyncClient
    ) -> None:
        resp = await lead_client.post("/leads/submit", json={"email": "a@example.com"})
        assert resp.status_code == 200
        assert resp.json()["received"] == "a@example.com"

    @pytest.mark.asyncio
    async def test_content_routes_unaffected(self, lead_client: AsyncClient) -> None:
        resp = await lead_client.get("/about")
        assert resp.status_code == 200
        assert "About Us" in resp.text

    @pytest.mark.asyncio
    async def test_without_sub_application_prefix_is_not_found(
        self, client: AsyncClient
    ) -> None:
        resp = await client.post("/leads/submit", json={"email": "a@example.com"})
        assert resp.status_code == 404
