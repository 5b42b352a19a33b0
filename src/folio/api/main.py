"""Folio -- FastAPI Application.

This module is the single entry point for the web server.  It builds the
FastAPI ``app`` through :func:`create_app` and exposes the ``main()`` CLI
function that launches uvicorn.

Architecture
------------
FastAPI provides the ASGI application, lifespan handling and test client;
routing is deliberately *not* spread across decorated endpoints.  A single
catch-all route accepting every HTTP method hands each request to a
:class:`~folio.api.pipeline.RequestPipeline`, whose gate list makes the
order of the security checks explicit:

- **Method gate** -- only GET and HEAD are served.
- **URI length gate** -- paths over ``max_uri_length`` are refused.
- **Route dispatch** -- ``/og.png`` and ``/sitemap.xml`` are generated.
- **Traversal gate** -- paths escaping ``public_dir`` are refused.
- **Static assets** -- everything else is a file from ``public_dir``.

The generated-docs routes (``/docs``, ``/redoc``, ``/openapi.json``) are
disabled so no request bypasses the pipeline.

Endpoints
---------
========  ==================  =========================================
Method    Path                Purpose
========  ==================  =========================================
GET/HEAD  ``/og.png``         Open Graph preview image (PNG)
GET/HEAD  ``/sitemap.xml``    Sitemap (static or discovered)
GET/HEAD  ``/{path}``         Static file from ``public_dir``
========  ==================  =========================================

Usage
-----
CLI (installed entry point)::

    folio

Direct invocation::

    python -m folio.api.main
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI

from folio import __version__
from folio.api.asset_store import AssetStore
from folio.api.handlers import OgImageHandler, SitemapHandler
from folio.api.pipeline import (
    RequestPipeline,
    method_gate,
    route_dispatch,
    static_asset_handler,
    traversal_gate,
    uri_length_gate,
)
from folio.api.sitemap import DiscoverySitemap, StaticSitemap
from folio.core.config import FolioConfig, config
from folio.core.fonts import FontCache, FontSource
from folio.core.layout import SANS_FAMILY, SERIF_FAMILY

logger = logging.getLogger(__name__)


def build_font_cache(cfg: FolioConfig) -> FontCache:
    """Create an empty cache for the serif title face and sans label face."""
    return FontCache(
        sources=(
            FontSource(name=SERIF_FAMILY, css_url=cfg.serif_font_css_url, weight=400),
            FontSource(name=SANS_FAMILY, css_url=cfg.sans_font_css_url, weight=500),
        ),
        user_agent=cfg.font_user_agent,
    )


def build_pipeline(
    cfg: FolioConfig,
    store: AssetStore,
    font_cache: FontCache,
    http_client: httpx.AsyncClient,
) -> RequestPipeline:
    """Assemble the gate list in its fixed order.

    Args:
        cfg: Application configuration.
        store: Asset store rooted at ``cfg.public_dir``.
        font_cache: Font cache handed to the image handler.
        http_client: Client used for font requests.

    Returns:
        The request pipeline used as the catch-all endpoint.
    """
    if cfg.sitemap_mode == "discovery":
        sitemap_source = DiscoverySitemap(store)
    else:
        sitemap_source = StaticSitemap(cfg.static_sitemap)

    routes = {
        "/og.png": OgImageHandler(font_cache, http_client, cfg),
        "/sitemap.xml": SitemapHandler(sitemap_source, cfg.site_url, cfg.cache_max_age),
    }
    return RequestPipeline(
        [
            method_gate,
            uri_length_gate(cfg.max_uri_length),
            route_dispatch(routes),
            traversal_gate(store),
            static_asset_handler(store),
        ]
    )


def create_app(
    cfg: FolioConfig | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> FastAPI:
    """Build a fully wired application.

    Each call owns its own font cache and HTTP client, so separate apps (for
    example one per test) never share cached fonts.

    Args:
        cfg: Configuration; defaults to the global :data:`config`.
        http_client: Client for outbound font requests.  A default client
            with ``cfg.font_fetch_timeout`` is created when omitted.  The
            client is closed on shutdown.

    Returns:
        The FastAPI application.
    """
    cfg = cfg or config
    client = http_client or httpx.AsyncClient(timeout=cfg.font_fetch_timeout)
    store = AssetStore(cfg.public_dir)
    font_cache = build_font_cache(cfg)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        """Log the serving setup on startup; close the HTTP client on shutdown."""
        logger.info(f"Serving {store.root} (sitemap mode: {cfg.sitemap_mode})")

        yield  # Application runs here.

        await client.aclose()
        logger.info("HTTP client closed on shutdown.")

    app = FastAPI(
        title="Folio",
        description="Static personal site with generated Open Graph image and sitemap.",
        version=__version__,
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.config = cfg
    app.state.store = store
    app.state.font_cache = font_cache
    app.state.http_client = client

    # An ASGI endpoint matches every method, so the method gate answers 405.
    pipeline = build_pipeline(cfg, store, font_cache, client)
    app.add_route("/{request_path:path}", pipeline, include_in_schema=False)
    return app


# ---------------------------------------------------------------------------
# CLI entry point.
# ---------------------------------------------------------------------------


def main() -> None:
    """Launch the uvicorn ASGI server.

    Reads host, port and log level from :data:`~folio.core.config.config`
    (``FOLIO_SERVER_HOST``, ``FOLIO_SERVER_PORT`` or ``PORT``,
    ``FOLIO_LOG_LEVEL``).  Defaults to ``0.0.0.0:3000``.

    This function is registered as the ``folio`` console script in
    ``pyproject.toml``.
    """
    import uvicorn

    uvicorn.run(
        "folio.api.main:create_app",
        factory=True,
        host=config.server_host,
        port=config.server_port,
        log_level=config.log_level,
        reload=False,
    )


if __name__ == "__main__":
    main()
