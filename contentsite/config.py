"""Application configuration loaded from environment variables."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

if TYPE_CHECKING:
    from contentsite.schemas.content import Partition


class Settings(BaseSettings):
    """contentsite application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Core
    debug: bool = False
    site_title: str = "contentsite"

    # Paths
    content_dir: Path = Path("./content")
    templates_dir: Path | None = None
    aggregate_file: str = "all.json"

    # Server
    host: str = "0.0.0.0"
    port: int = Field(default=8000, ge=1, le=65535)
    trusted_hosts: list[str] = Field(default_factory=list)

    # Listing
    first_page_size: int = Field(default=10, ge=0)
    featured_slug: str = "start-here"

    # Content reads
    read_timeout_seconds: float = Field(default=5.0, gt=0)

    # Mounted sub-applications
    lead_intake_prefix: str = "/leads"

    # Response hardening
    security_headers_enabled: bool = True

    @property
    def aggregate_path(self) -> Path:
        """Path of the aggregate listing file."""
        return self.content_dir / self.aggregate_file

    def partition_dir(self, partition: Partition) -> Path:
        return self.content_dir / partition.value
