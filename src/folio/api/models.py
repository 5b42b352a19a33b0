"""Pydantic models shared by the sitemap handler and the configuration layer.

Models
------
SitemapEntry
    One ``<url>`` element of ``/sitemap.xml``.  Static-mode deployments list
    these in configuration (``FOLIO_STATIC_SITEMAP`` as JSON); discovery mode
    builds them from the asset store.
"""

from __future__ import annotations

from datetime import date
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

ChangeFrequency = Literal["always", "hourly", "daily", "weekly", "monthly", "yearly", "never"]


class SitemapEntry(BaseModel):
    """A single sitemap URL entry.

    Attributes:
        path: Site-relative URL path, always starting with ``/``.
        lastmod: Last modification date.  ``None`` means "today" at render
            time, which is what static-mode deployments usually want.
        changefreq: Sitemap change-frequency hint.
        priority: Relative priority between 0.0 and 1.0.
    """

    model_config = ConfigDict(frozen=True)

    path: str = Field(..., description="URL path, e.g. '/' or '/about'.")
    lastmod: date | None = Field(default=None, description="Last modification date.")
    changefreq: ChangeFrequency = Field(default="monthly")
    priority: float = Field(default=0.8, ge=0.0, le=1.0)

    @field_validator("path")
    @classmethod
    def _path_is_absolute(cls, value: str) -> str:
        if not value.startswith("/"):
            raise ValueError("sitemap paths must start with '/'")
        return value
