"""Shared test fixtures for contentsite."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

import pytest
from httpx import ASGITransport, AsyncClient

from contentsite.config import Settings
from contentsite.filesystem.content_store import ContentStore
from contentsite.main import create_app

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator
    from pathlib import Path

    from fastapi import FastAPI


def write_json(path: Path, data: Any) -> Path:
    """Write *data* as JSON, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def make_summaries(count: int) -> list[dict[str, str]]:
    """Aggregate entries titled ``Entry 01`` .. ``Entry NN``."""
    return [
        {"slug": f"entry-{i:02d}", "title": f"Entry {i:02d}"} for i in range(1, count + 1)
    ]


@pytest.fixture
def tmp_content_dir(tmp_path: Path) -> Path:
    """Create a temporary content directory with all three partitions."""
    content = tmp_path / "content"
    posts = content / "posts"
    pillar = content / "pillar"
    pages = content / "pages"

    write_json(
        posts / "hello-world.json",
        {
            "title": "Hello World",
            "body": "<p>First post body.</p>",
            "description": "A first post",
            "date": "2024-01-15",
        },
    )
    (posts / "markdown-post.md").write_text(
        "---\ntitle: Markdown Post\ntags: [python, web]\n---\n"
        "# Markdown Post\n\nSome **bold** text.\n",
        encoding="utf-8",
    )
    write_json(
        pillar / "start-here.json",
        {"title": "Start Here", "body": "<p>Read this first.</p>", "description": "Begin"},
    )
    write_json(pages / "about.json", {"title": "About Us", "body": "<p>Who we are.</p>"})
    write_json(pages / "contact.json", {"title": "Contact Us", "body": "<p>Write to us.</p>"})
    write_json(pages / "projects.json", {"title": "Our Projects", "body": "<p>Things.</p>"})
    write_json(
        content / "all.json",
        [
            {"slug": "hello-world", "title": "Hello World", "description": "A first post"},
            {"slug": "markdown-post", "title": "Markdown Post"},
            {"slug": "third-post", "title": "Third Post"},
        ],
    )
    return content


@pytest.fixture
def test_settings(tmp_content_dir: Path) -> Settings:
    """Create test settings pointing at the temporary content directory."""
    return Settings(
        _env_file=None,
        debug=True,
        content_dir=tmp_content_dir,
        site_title="Test Site",
    )


@pytest.fixture
def content_store(tmp_content_dir: Path) -> ContentStore:
    return ContentStore(content_dir=tmp_content_dir)


@pytest.fixture
def app(test_settings: Settings) -> FastAPI:
    return create_app(test_settings)


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient]:
    """Create test HTTP client."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
