"""Shared API dependencies: settings, content store, template renderer."""

from __future__ import annotations

from fastapi import Request

from contentsite.config import Settings
from contentsite.filesystem.content_store import ContentStore
from contentsite.rendering.templates import TemplateRenderer


def get_settings(request: Request) -> Settings:
    """Get application settings from app state."""
    settings: Settings = request.app.state.settings
    return settings


def get_content_store(request: Request) -> ContentStore:
    """Get content store from app state."""
    store: ContentStore = request.app.state.content_store
    return store


def get_renderer(request: Request) -> TemplateRenderer:
    """Get template renderer from app state."""
    renderer: TemplateRenderer = request.app.state.renderer
    return renderer
