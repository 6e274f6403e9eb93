"""Read-only content store over the partitioned content directory."""

from __future__ import annotations

import asyncio
import json
import logging
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, TypeVar

import yaml
from pydantic import ValidationError

from contentsite.exceptions import ContentNotFoundError, ContentParseError, ContentReadError
from contentsite.filesystem.frontmatter import parse_markdown_record
from contentsite.schemas.content import (
    ContentCollection,
    ContentRecord,
    ContentSummary,
    Partition,
)

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

logger = logging.getLogger(__name__)

_SLUG_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_-]*$")

# Lookup order for a slug inside a partition.
RECORD_SUFFIXES = (".json", ".md")

T = TypeVar("T")


def is_safe_slug(slug: str) -> bool:
    """Return True if *slug* is usable as a file stem and a URL segment."""
    return bool(_SLUG_PATTERN.match(slug))


def _read_text(path: Path) -> str:
    return path.read_text(encoding="utf-8")


def _find_record_file(partition_dir: Path, slug: str) -> Path | None:
    """Find the backing file for *slug* in *partition_dir*, or None if there is none.

    Touches the filesystem; call it from a worker thread.
    """
    base_dir = partition_dir.resolve()
    for suffix in RECORD_SUFFIXES:
        full_path = (base_dir / f"{slug}{suffix}").resolve()
        # Symlinks must not lead outside the partition
        if not full_path.is_relative_to(base_dir):
            logger.warning(
                "Refusing content path outside partition: %s/%s", partition_dir.name, slug
            )
            return None
        if full_path.is_file():
            return full_path
    return None


def _read_record_file(partition_dir: Path, slug: str) -> tuple[Path, str] | None:
    """Locate and read the backing file for *slug* in one blocking call."""
    path = _find_record_file(partition_dir, slug)
    if path is None:
        return None
    return path, _read_text(path)


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not a valid JSON value")


def _loads_strict(raw_content: str) -> Any:
    """Parse JSON, rejecting the NaN / Infinity extensions of the json module."""
    return json.loads(raw_content, parse_constant=_reject_constant)


@dataclass
class ContentStore:
    """Loads content records and the aggregate listing from disk.

    Each call performs exactly one read attempt; nothing is cached between
    calls and nothing is ever written. All filesystem access, including the
    lookup of the backing file, runs in a worker thread bounded by
    ``read_timeout``.
    """

    content_dir: Path
    aggregate_file: str = "all.json"
    read_timeout: float = 5.0

    def partition_dir(self, partition: Partition) -> Path:
        return self.content_dir / partition.value

    async def _run_bounded(
        self,
        func: Callable[..., T],
        *args: Any,
        partition: str | None,
        slug: str,
    ) -> T:
        """Run blocking filesystem work in a worker thread, bounded by ``read_timeout``."""
        try:
            return await asyncio.wait_for(asyncio.to_thread(func, *args), self.read_timeout)
        except (FileNotFoundError, IsADirectoryError):
            raise ContentNotFoundError(
                f"Content file not found: {slug}", partition=partition, slug=slug
            ) from None
        except TimeoutError as exc:
            raise ContentReadError(
                f"Reading {slug} timed out after {self.read_timeout}s",
                partition=partition,
                slug=slug,
            ) from exc
        except UnicodeDecodeError as exc:
            raise ContentParseError(
                f"{slug} is not valid UTF-8", partition=partition, slug=slug
            ) from exc
        except OSError as exc:
            raise ContentReadError(
                f"Failed to read {slug}: {exc}", partition=partition, slug=slug
            ) from exc

    async def load(self, partition: Partition, slug: str) -> ContentRecord:
        """Load and validate one content record.

        Raises ``ContentNotFoundError`` when no backing file exists,
        ``ContentParseError`` when it exists but is malformed, and
        ``ContentReadError`` for other I/O faults.
        """
        if not is_safe_slug(slug):
            raise ContentNotFoundError(
                f"Unsafe slug for {partition.value}", partition=partition.value, slug=slug
            )

        found = await self._run_bounded(
            _read_record_file,
            self.partition_dir(partition),
            slug,
            partition=partition.value,
            slug=slug,
        )
        if found is None:
            raise ContentNotFoundError(
                f"No content for {partition.value}/{slug}", partition=partition.value, slug=slug
            )

        path, raw_content = found
        if path.suffix == ".md":
            return _parse_markdown(raw_content, partition.value, slug)
        return _parse_json_record(raw_content, partition.value, slug)

    async def load_collection(self) -> ContentCollection:
        """Load the aggregate listing file, preserving its order."""
        path = self.content_dir / self.aggregate_file
        raw_content = await self._run_bounded(
            _read_text, path, partition=None, slug=self.aggregate_file
        )
        try:
            data = _loads_strict(raw_content)
        except ValueError as exc:
            raise ContentParseError(
                f"Aggregate file is not valid JSON: {exc}", slug=self.aggregate_file
            ) from exc
        if not isinstance(data, list):
            raise ContentParseError(
                f"Aggregate file must hold a JSON array, got {type(data).__name__}",
                slug=self.aggregate_file,
            )

        try:
            items = [ContentSummary.model_validate(entry) for entry in data]
        except ValidationError as exc:
            raise ContentParseError(
                f"Aggregate file has an invalid entry: {exc}", slug=self.aggregate_file
            ) from exc
        return ContentCollection(items)


def _validate_record(data: dict[str, Any], partition: str, slug: str) -> ContentRecord:
    # The filename is authoritative for the slug
    data["slug"] = slug
    try:
        return ContentRecord.model_validate(data)
    except ValidationError as exc:
        raise ContentParseError(
            f"Invalid content record: {exc}", partition=partition, slug=slug
        ) from exc


def _parse_json_record(raw_content: str, partition: str, slug: str) -> ContentRecord:
    try:
        data = _loads_strict(raw_content)
    except ValueError as exc:
        raise ContentParseError(f"Invalid JSON: {exc}", partition=partition, slug=slug) from exc
    if not isinstance(data, dict):
        raise ContentParseError(
            f"Content document must be a JSON object, got {type(data).__name__}",
            partition=partition,
            slug=slug,
        )
    return _validate_record(data, partition, slug)


def _parse_markdown(raw_content: str, partition: str, slug: str) -> ContentRecord:
    try:
        data = parse_markdown_record(raw_content, slug)
    except (yaml.YAMLError, ValueError) as exc:
        raise ContentParseError(
            f"Invalid front matter: {exc}", partition=partition, slug=slug
        ) from exc
    return _validate_record(data, partition, slug)
