"""Content-related schemas."""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, field_validator


class Partition(str, Enum):
    """Logical content partitions; the value is the sub-directory name."""

    GENERAL = "posts"
    PILLAR = "pillar"
    STATIC = "pages"


class ContentSummary(BaseModel):
    """One entry of the aggregate listing file."""

    model_config = ConfigDict(extra="allow", frozen=True)

    slug: str
    title: str

    @field_validator("slug", "title")
    @classmethod
    def require_text(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("must not be empty")
        return stripped

    @property
    def metadata(self) -> dict[str, Any]:
        return dict(self.model_extra or {})


class ContentRecord(BaseModel):
    """A single renderable content item.

    ``title`` and ``body`` are required; every other top-level key of the
    source document passes through untouched and is exposed as ``metadata``.
    """

    model_config = ConfigDict(extra="allow", frozen=True)

    slug: str
    title: str
    body: str
    format: Literal["html", "markdown"] = "html"

    @field_validator("title")
    @classmethod
    def require_title(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("title must not be empty")
        return stripped

    @property
    def metadata(self) -> dict[str, Any]:
        """Free-form fields beyond the recognized ones."""
        return dict(self.model_extra or {})


class RenderedRecord(BaseModel):
    """A content record together with its HTML body."""

    model_config = ConfigDict(frozen=True)

    record: ContentRecord
    html: str

    @property
    def slug(self) -> str:
        return self.record.slug

    @property
    def title(self) -> str:
        return self.record.title

    @property
    def metadata(self) -> dict[str, Any]:
        return self.record.metadata


class ContentCollection:
    """Immutable, ordered sequence of content summaries.

    The order is the authoring order of the aggregate file and is never
    changed after loading.
    """

    __slots__ = ("_items",)

    def __init__(self, items: Sequence[ContentSummary] = ()) -> None:
        self._items: tuple[ContentSummary, ...] = tuple(items)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[ContentSummary]:
        return iter(self._items)

    def __getitem__(self, index: int) -> ContentSummary:
        return self._items[index]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ContentCollection):
            return NotImplemented
        return self._items == other._items

    def __repr__(self) -> str:
        return f"ContentCollection({len(self._items)} items)"

    @property
    def items(self) -> tuple[ContentSummary, ...]:
        return self._items

    def to_jsonable(self) -> list[dict[str, Any]]:
        return [item.model_dump(mode="json") for item in self._items]
