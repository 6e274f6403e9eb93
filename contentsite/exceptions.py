"""Application-level exception types.

Convention:
- ``ContentNotFoundError``: the requested item has no backing file. This is
  an expected, user-facing condition; the global handler answers 404 and logs
  at DEBUG only.
- ``ContentParseError`` / ``ContentReadError``: the backing file exists but
  cannot be served (malformed data, I/O fault, read timeout). The global
  handlers log the cause with partition and slug and answer a generic 500.
  Nothing partially parsed is ever served.
"""

from __future__ import annotations


class ContentError(Exception):
    """Base class for content store failures."""

    def __init__(self, message: str, *, partition: str | None = None, slug: str | None = None):
        super().__init__(message)
        self.partition = partition
        self.slug = slug

    @property
    def location(self) -> str:
        """Human-readable ``partition/slug`` for log lines."""
        if self.partition is None:
            return self.slug or "<unknown>"
        return f"{self.partition}/{self.slug}"


class ContentNotFoundError(ContentError):
    """Raised when a slug has no backing file in its partition."""


class ContentParseError(ContentError):
    """Raised when a backing file exists but is not a valid content document."""


class ContentReadError(ContentError):
    """Raised for I/O faults other than a missing file, including read timeouts."""
