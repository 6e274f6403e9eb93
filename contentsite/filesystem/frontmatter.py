"""YAML front matter parser for markdown content documents."""

from __future__ import annotations

from typing import Any

import frontmatter


def extract_title(content: str, slug: str = "") -> str:
    """Extract title from first # heading in markdown body.

    Falls back to deriving title from the slug.
    """
    for line in content.strip().split("\n"):
        stripped = line.strip()
        if stripped.startswith("# ") and not stripped.startswith("## "):
            return stripped.removeprefix("# ").strip()
    if slug:
        return slug.replace("-", " ").replace("_", " ").title()
    return "Untitled"


def strip_leading_heading(content: str, title: str) -> str:
    """Remove the first ``# heading`` from content if it matches the title.

    Skips leading blank lines. If the first non-blank line is not a level-1
    heading or does not match *title*, the content is returned unchanged.
    """
    lines = content.split("\n")
    for i, line in enumerate(lines):
        stripped = line.strip()
        if not stripped:
            continue
        if stripped.startswith("# ") and not stripped.startswith("## "):
            if stripped.removeprefix("# ").strip() == title:
                return "\n".join(lines[i + 1 :])
        break
    return content


def _split_front_matter(raw_content: str) -> tuple[dict[str, Any], str]:
    """Split *raw_content* into its front matter mapping and the markdown body.

    Raises ``ValueError`` when the front matter is not a mapping with string
    keys, a list included.
    """
    text = raw_content.strip()
    handler = frontmatter.detect_format(text, frontmatter.handlers)
    if handler is None:
        return {}, text

    try:
        fm, content = handler.split(text)
    except ValueError:
        # Opening delimiter without a closing one: no front matter
        return {}, text
    content = content.strip()
    metadata = handler.load(fm)
    if metadata is None:
        return {}, content
    if not isinstance(metadata, dict):
        msg = f"Front matter must be a mapping, got {type(metadata).__name__}"
        raise ValueError(msg)
    bad_keys = [key for key in metadata if not isinstance(key, str)]
    if bad_keys:
        msg = f"Front matter keys must be strings, got {bad_keys!r}"
        raise ValueError(msg)
    return metadata, content


def parse_markdown_record(raw_content: str, slug: str) -> dict[str, Any]:
    """Parse a markdown document with YAML front matter into record fields.

    Front matter keys pass through as metadata. Raises ``yaml.YAMLError`` on
    malformed front matter and ``ValueError`` on front matter that is not a
    string-keyed mapping; the caller turns both into a parse failure.
    """
    metadata, content = _split_front_matter(raw_content)
    data: dict[str, Any] = dict(metadata)

    fm_title = data.pop("title", None)
    if fm_title is not None and not isinstance(fm_title, str):
        fm_title = str(fm_title)
    if fm_title and fm_title.strip():
        title = fm_title.strip()
    else:
        title = extract_title(content, slug)

    data.pop("body", None)
    data.pop("format", None)
    data.update(
        slug=slug,
        title=title,
        body=strip_leading_heading(content, title),
        format="markdown",
    )
    return data
