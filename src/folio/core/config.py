"""Configuration management for Folio.

This module provides centralized configuration management using Pydantic Settings.
All configuration is loaded from environment variables with the FOLIO_ prefix,
allowing easy customization without code changes.

Environment Variable Loading
-----------------------------
Configuration values are loaded in the following priority order:
1. Environment variables (FOLIO_* prefix, plus a bare ``PORT`` for the port)
2. .env file in the project root
3. Default values defined in FolioConfig

Example .env file:
    FOLIO_PUBLIC_DIR=public
    FOLIO_SITEMAP_MODE=discovery
    FOLIO_SITE_URL=https://example.com
    PORT=8080

Global Configuration Instance
------------------------------
A global `config` instance is created automatically at module import time and
is used by the ``folio`` CLI entry point.  The application factory
(:func:`folio.api.main.create_app`) accepts any instance, so tests build their
own configuration pointing at temporary directories.

Usage Example
-------------
    from folio.core.config import config

    print(config.public_dir)
    print(config.sitemap_mode)

Open Graph Image Settings
-------------------------
The preview image is always 1200x630 by default (the size every major social
network crops to).  The two font stylesheets are Google Fonts ``css2`` URLs;
the ``font_user_agent`` is sent with those requests so the service answers
with TrueType ``src: url(...)`` references rather than WOFF2.
"""

from pathlib import Path
from typing import Literal

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from folio.api.models import SitemapEntry

DEFAULT_USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"


class FolioConfig(BaseSettings):
    """Main configuration for Folio.

    Attributes
    ----------
    Asset Store:
        public_dir : Path
            Root directory of the static site.  Resolved to an absolute path
            on initialization; every served file must live beneath it.

    Server Settings:
        server_host : str
            Bind address for uvicorn.
        server_port : int
            Listen port.  Reads ``FOLIO_SERVER_PORT`` or ``PORT``.
        log_level : str
            Log level handed to uvicorn.

    Request Limits:
        max_uri_length : int
            Longest accepted request path, in characters.
        cache_max_age : int
            ``max-age`` for generated responses (og image, sitemap).

    Open Graph Image:
        og_title, og_subtitle : str
            The two lines drawn on the preview image.
        og_width, og_height : int
            Logical canvas size; the PNG is rasterized at ``og_width`` pixels.
        serif_font_css_url, sans_font_css_url : str
            Stylesheet endpoints that embed the font binary URLs.
        font_user_agent : str
            User-Agent header for stylesheet requests.
        font_fetch_timeout : float
            Transport timeout for every outbound font request.

    Sitemap:
        sitemap_mode : Literal["static", "discovery"]
            ``static`` emits ``static_sitemap``; ``discovery`` scans the asset
            store for HTML documents on every request.
        site_url : str
            Absolute origin prepended to every ``<loc>``.
        static_sitemap : list[SitemapEntry]
            Hand-maintained entries for static mode.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="FOLIO_",
        case_sensitive=False,
        populate_by_name=True,
        extra="ignore",
    )

    # Asset store
    public_dir: Path = Field(
        default=Path("public"),
        description="Root directory of the static site",
    )

    # Server settings
    server_host: str = Field(
        default="0.0.0.0",
        description="Server bind address",
    )
    server_port: int = Field(
        default=3000,
        description="Server port",
        ge=1,
        le=65535,
        validation_alias=AliasChoices("server_port", "FOLIO_SERVER_PORT", "PORT"),
    )
    log_level: Literal["critical", "error", "warning", "info", "debug"] = Field(
        default="info",
        description="Log level passed to uvicorn",
    )

    # Request limits
    max_uri_length: int = Field(default=2048, ge=1)
    cache_max_age: int = Field(default=86400, ge=0)

    # Open Graph image
    og_title: str = Field(default="Gonzalo Zanelli")
    og_subtitle: str = Field(default="Software Engineer & MLOps")
    og_width: int = Field(default=1200, ge=1)
    og_height: int = Field(default=630, ge=1)
    serif_font_css_url: str = Field(
        default="https://fonts.googleapis.com/css2?family=Instrument+Serif&display=swap",
    )
    sans_font_css_url: str = Field(
        default="https://fonts.googleapis.com/css2?family=Instrument+Sans:wght@500&display=swap",
    )
    font_user_agent: str = Field(default=DEFAULT_USER_AGENT)
    font_fetch_timeout: float = Field(
        default=10.0,
        description="Seconds before an outbound font request is abandoned",
        gt=0,
    )

    # Sitemap
    sitemap_mode: Literal["static", "discovery"] = Field(
        default="static",
        description="static: emit static_sitemap; discovery: scan public_dir",
    )
    site_url: str = Field(
        default="http://localhost:3000",
        description="Origin prepended to every sitemap <loc>",
    )
    static_sitemap: list[SitemapEntry] = Field(
        default_factory=lambda: [SitemapEntry(path="/", priority=1.0)],
    )

    def __init__(self, **kwargs):
        """Initialize configuration and resolve the asset root.

        The root is resolved once here so that the traversal gate compares
        every candidate against the same absolute, symlink-free prefix.

        Args:
            **kwargs: Configuration overrides (typically from environment variables)
        """
        super().__init__(**kwargs)
        self.public_dir = Path(self.public_dir).resolve()


# Global configuration instance
# Loads values from environment variables (FOLIO_* prefix) and .env file.
config = FolioConfig()
