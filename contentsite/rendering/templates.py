"""Jinja2 template renderer for site pages."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

from jinja2 import (
    ChoiceLoader,
    Environment,
    FileSystemLoader,
    StrictUndefined,
    TemplateError,
    select_autoescape,
)

if TYPE_CHECKING:
    from collections.abc import Mapping

logger = logging.getLogger(__name__)

BUNDLED_TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"


class RenderError(RuntimeError):
    """Raised when a template is missing or rejects its context."""


class TemplateRenderer:
    """Turns a template name plus a data context into an HTML string.

    Templates in *templates_dir* take precedence over the bundled ones, so a
    site can override any single page without copying the rest.
    """

    def __init__(
        self,
        templates_dir: Path | None = None,
        site_globals: Mapping[str, Any] | None = None,
    ) -> None:
        search_paths: list[FileSystemLoader] = []
        if templates_dir is not None:
            search_paths.append(FileSystemLoader(str(templates_dir)))
        search_paths.append(FileSystemLoader(str(BUNDLED_TEMPLATES_DIR)))

        self.env = Environment(
            loader=ChoiceLoader(search_paths),
            autoescape=select_autoescape(["html", "xml"]),
            undefined=StrictUndefined,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        if site_globals:
            self.env.globals.update(site_globals)

    def render(self, template_name: str, context: Mapping[str, Any]) -> str:
        """Render *template_name* with *context*.

        Raises RenderError for a missing template, a syntax error or a
        context the template cannot use.
        """
        try:
            template = self.env.get_template(template_name)
            return template.render(context)
        except TemplateError as exc:
            raise RenderError(f"Failed to render {template_name}: {exc}") from exc
