"""Listing service: landing page / overflow page split of the aggregate."""

from __future__ import annotations

import logging

from contentsite.schemas.content import ContentCollection

logger = logging.getLogger(__name__)


def split_collection(
    collection: ContentCollection, first_page_size: int
) -> tuple[ContentCollection, ContentCollection]:
    """Split the aggregate into the landing page and the overflow page.

    The landing page gets the first ``first_page_size`` items in authoring
    order and the overflow page gets the rest. The two are disjoint and
    their concatenation is the whole collection.
    """
    if first_page_size < 0:
        msg = f"first_page_size must be >= 0, got {first_page_size}"
        raise ValueError(msg)
    items = collection.items
    first = ContentCollection(items[:first_page_size])
    rest = ContentCollection(items[first_page_size:])
    logger.debug("Split %d listing items into %d + %d", len(items), len(first), len(rest))
    return first, rest
