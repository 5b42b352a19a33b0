"""Font acquisition and caching for the Open Graph image.

The preview image needs two faces: a serif display face for the title and a
sans face for the subtitle.  Neither is bundled; both are resolved from the
Google Fonts ``css2`` API on first use.

Acquisition Flow
----------------
1. Request both stylesheets concurrently.  The stylesheet is plain CSS with
   one ``@font-face`` block whose ``src: url(...)`` points at the binary.
2. Extract the URL from each stylesheet.  If either is missing, raise
   :class:`~folio.core.errors.FontResolutionError` and leave the cache empty.
3. Download both binaries concurrently.
4. Store both :class:`FontDescriptor` objects in a single assignment.

The cache is owned by the application instance (see
:func:`folio.api.main.create_app`) rather than living in a module global, so
every test client starts cold.

Concurrent misses may fetch twice; the second assignment replaces an equal
value, so readers only ever see ``None`` or a complete pair.
"""

from __future__ import annotations

import asyncio
import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Literal

import httpx

from folio.core.errors import FontFetchError, FontResolutionError

logger = logging.getLogger(__name__)

_FONT_URL_PATTERN = re.compile(r"src:\s*url\(([^)]+)\)")


@dataclass(frozen=True)
class FontDescriptor:
    """A loaded font face.

    Attributes:
        name: Family name as referenced by layout nodes.
        data: Raw font file bytes (TrueType/OpenType).
        weight: CSS weight (400, 500, ...).
        style: ``"normal"`` or ``"italic"``.
    """

    name: str
    data: bytes
    weight: int = 400
    style: Literal["normal", "italic"] = "normal"


@dataclass(frozen=True)
class FontSource:
    """Where to find one font face: its stylesheet URL plus the descriptor
    fields to attach once the binary is downloaded."""

    name: str
    css_url: str
    weight: int = 400
    style: Literal["normal", "italic"] = "normal"


def extract_font_url(css: str) -> str | None:
    """Return the first ``src: url(...)`` target in a stylesheet, unquoted."""
    match = _FONT_URL_PATTERN.search(css)
    if match is None:
        return None
    return match.group(1).strip().strip("'\"")


class FontCache:
    """Process-lifetime cache for the preview image fonts.

    Args:
        sources: The faces to acquire, in the order descriptors are returned.
        user_agent: Sent with stylesheet requests.  Google Fonts picks the
            font format from the User-Agent; a bare desktop string gets
            TrueType, which fontTools reads without extra codecs.
    """

    def __init__(self, sources: Sequence[FontSource], user_agent: str) -> None:
        self._sources = tuple(sources)
        self._user_agent = user_agent
        self._fonts: tuple[FontDescriptor, ...] | None = None

    @property
    def is_populated(self) -> bool:
        return self._fonts is not None

    def clear(self) -> None:
        """Drop cached fonts so the next :meth:`acquire` fetches again."""
        self._fonts = None

    async def acquire(self, client: httpx.AsyncClient) -> tuple[FontDescriptor, ...]:
        """Return the cached fonts, fetching them on first use.

        Args:
            client: HTTP client used for every outbound request.

        Returns:
            One descriptor per configured source, in source order.

        Raises:
            FontResolutionError: A stylesheet had no ``src: url(...)``.
            FontFetchError: A request failed or returned a non-2xx status.
        """
        if self._fonts is not None:
            return self._fonts

        logger.info(f"Font cache miss, fetching {len(self._sources)} stylesheets")
        stylesheets = await asyncio.gather(
            *(self._fetch_stylesheet(client, source) for source in self._sources)
        )

        urls: list[str] = []
        for source, css in zip(self._sources, stylesheets):
            url = extract_font_url(css)
            if url is None:
                raise FontResolutionError(
                    f"Stylesheet for {source.name!r} did not contain a font URL"
                )
            urls.append(url)

        payloads = await asyncio.gather(
            *(self._fetch_binary(client, source, url) for source, url in zip(self._sources, urls))
        )

        fonts = tuple(
            FontDescriptor(name=source.name, data=data, weight=source.weight, style=source.style)
            for source, data in zip(self._sources, payloads)
        )
        self._fonts = fonts
        logger.info(f"Font cache populated: {', '.join(f.name for f in fonts)}")
        return fonts

    async def _fetch_stylesheet(self, client: httpx.AsyncClient, source: FontSource) -> str:
        response = await self._get(
            client, source.css_url, source, headers={"User-Agent": self._user_agent}
        )
        return response.text

    async def _fetch_binary(self, client: httpx.AsyncClient, source: FontSource, url: str) -> bytes:
        response = await self._get(client, url, source)
        return response.content

    async def _get(
        self,
        client: httpx.AsyncClient,
        url: str,
        source: FontSource,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        try:
            response = await client.get(url, headers=headers)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise FontFetchError(f"Failed to fetch {url} for {source.name!r}: {e}") from e
        return response
