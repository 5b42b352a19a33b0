"""Handlers for the two generated routes.

Both handlers are async callables taking a Starlette ``Request`` and
returning a ``Response``; :func:`folio.api.pipeline.route_dispatch` calls
them after the method and URI-length gates have passed.

Failures never leak detail to the client.  The error is logged with its
traceback and the client receives a bare ``500 Internal Server Error``.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

import httpx
from fastapi import Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import Response

from folio.api.pipeline import error_response
from folio.api.sitemap import DiscoverySitemap, StaticSitemap, render_sitemap
from folio.core.config import FolioConfig
from folio.core.errors import FolioError
from folio.core.fonts import FontCache, FontDescriptor
from folio.core.layout import build_layout
from folio.core.rasterizer import rasterize
from folio.core.renderer import render

logger = logging.getLogger(__name__)


def _cache_control(max_age: int) -> dict[str, str]:
    return {"Cache-Control": f"public, max-age={max_age}"}


class OgImageHandler:
    """Serve ``/og.png``.

    Pipeline: acquire fonts (cached after the first success) -> build the
    layout tree -> render SVG -> rasterize to PNG.  Rendering and
    rasterization are CPU-bound and run in Starlette's thread pool so the
    event loop keeps serving other requests.

    Args:
        font_cache: Cache owned by the application instance.
        client: HTTP client for font requests.
        config: Supplies title, subtitle, canvas size and ``max-age``.
    """

    def __init__(self, font_cache: FontCache, client: httpx.AsyncClient, config: FolioConfig) -> None:
        self._font_cache = font_cache
        self._client = client
        self._config = config

    def generate(self, fonts: Sequence[FontDescriptor]) -> bytes:
        """Produce the PNG for an already-acquired font set."""
        layout = build_layout(self._config.og_title, self._config.og_subtitle)
        svg = render(layout, fonts, self._config.og_width, self._config.og_height)
        return rasterize(svg, self._config.og_width)

    async def __call__(self, request: Request) -> Response:
        try:
            fonts = await self._font_cache.acquire(self._client)
            png = await run_in_threadpool(self.generate, fonts)
        except FolioError as e:
            logger.error(f"OG image generation failed: {e}", exc_info=True)
            return error_response(500, "Internal Server Error")
        except Exception as e:
            logger.error(f"Unexpected error generating OG image: {e}", exc_info=True)
            return error_response(500, "Internal Server Error")

        return Response(
            content=png,
            media_type="image/png",
            headers=_cache_control(self._config.cache_max_age),
        )


class SitemapHandler:
    """Serve ``/sitemap.xml`` from a static or discovery source.

    Args:
        source: Supplies the entries for each request.
        site_url: Origin prepended to every ``<loc>``.
        cache_max_age: ``max-age`` for the response.
    """

    def __init__(
        self,
        source: StaticSitemap | DiscoverySitemap,
        site_url: str,
        cache_max_age: int,
    ) -> None:
        self._source = source
        self._site_url = site_url
        self._cache_max_age = cache_max_age

    async def __call__(self, request: Request) -> Response:
        try:
            entries = self._source.entries()
        except FolioError as e:
            logger.error(f"Sitemap generation failed: {e}", exc_info=True)
            return error_response(500, "Internal Server Error")

        return Response(
            content=render_sitemap(entries, self._site_url).encode("utf-8"),
            media_type="application/xml",
            headers=_cache_control(self._cache_max_age),
        )
