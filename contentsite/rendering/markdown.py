"""Markdown to HTML conversion for markdown-format content records."""

from __future__ import annotations

import markdown
from markdown.extensions.fenced_code import FencedCodeExtension
from markdown.extensions.tables import TableExtension
from markdown.extensions.toc import TocExtension


def _extensions() -> list[markdown.Extension | str]:
    return [
        FencedCodeExtension(),
        TableExtension(),
        TocExtension(permalink=False),
        "sane_lists",
    ]


def render_markdown(text: str) -> str:
    """Render markdown to HTML.

    A new ``Markdown`` instance is built per call since instances keep
    per-document state (footnotes, toc) between conversions.
    """
    md = markdown.Markdown(extensions=_extensions(), output_format="html")
    return md.convert(text)
