"""Content service: loads records and builds the view contexts for templates."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from contentsite.rendering.markdown import render_markdown
from contentsite.schemas.content import (
    ContentCollection,
    ContentSummary,
    Partition,
    RenderedRecord,
)
from contentsite.services.listing_service import split_collection

if TYPE_CHECKING:
    from contentsite.config import Settings
    from contentsite.filesystem.content_store import ContentStore
    from contentsite.schemas.content import ContentRecord


@dataclass(frozen=True)
class HomeView:
    """Data for the landing route: the featured item plus the first page."""

    featured: RenderedRecord
    posts: tuple[ContentSummary, ...]
    has_more: bool


def render_record(record: ContentRecord) -> RenderedRecord:
    """Attach the HTML body to a record."""
    if record.format == "markdown":
        html = render_markdown(record.body)
    else:
        html = record.body
    return RenderedRecord(record=record, html=html)


async def get_record(store: ContentStore, partition: Partition, slug: str) -> RenderedRecord:
    record = await store.load(partition, slug)
    return render_record(record)


async def get_collection(store: ContentStore) -> ContentCollection:
    return await store.load_collection()


async def get_home(store: ContentStore, settings: Settings) -> HomeView:
    """Load the featured pillar item and the first page of the aggregate."""
    featured = await get_record(store, Partition.PILLAR, settings.featured_slug)
    collection = await store.load_collection()
    first, rest = split_collection(collection, settings.first_page_size)
    return HomeView(featured=featured, posts=first.items, has_more=len(rest) > 0)


async def get_overflow(store: ContentStore, settings: Settings) -> tuple[ContentSummary, ...]:
    """Load the part of the aggregate that did not fit on the landing page."""
    collection = await store.load_collection()
    _, rest = split_collection(collection, settings.first_page_size)
    return rest.items
