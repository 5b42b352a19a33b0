"""``/sitemap.xml`` generation.

Two strategies exist and a deployment picks one through
``FolioConfig.sitemap_mode``:

- **static** -- emit the hand-maintained ``static_sitemap`` entries.  Used
  when the running process cannot list its own assets (e.g. they are baked
  into a bundle).  This strategy cannot fail.
- **discovery** -- walk the asset store on every request, keep ``.html``
  documents, and map file names to clean URLs::

      index.html         ->  /
      blog/index.html    ->  /blog/
      about.html         ->  /about
      notes/first.html   ->  /notes/first

  The root document gets priority 1.0, everything else 0.8.  An unreadable
  store raises :class:`~folio.core.errors.SitemapError`.

Every ``<loc>`` is XML-escaped, including quotes, before it is embedded.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import date, datetime, timezone
from xml.sax.saxutils import escape

from folio.api.asset_store import INDEX_DOCUMENT, AssetStore
from folio.api.models import SitemapEntry
from folio.core.errors import SitemapError

logger = logging.getLogger(__name__)

SITEMAP_NAMESPACE = "http://www.sitemaps.org/schemas/sitemap/0.9"

_XML_ENTITIES = {'"': "&quot;", "'": "&apos;"}


def escape_xml(value: str) -> str:
    """Escape ``& < > " '`` for use in XML text or attribute values."""
    return escape(value, _XML_ENTITIES)


def path_for_document(key: str) -> str:
    """Derive the public URL path for an HTML document key.

    Args:
        key: Store-relative path with ``/`` separators, e.g. ``blog/index.html``.

    Returns:
        The clean URL path.
    """
    if key == INDEX_DOCUMENT:
        return "/"
    if key.endswith("/" + INDEX_DOCUMENT):
        return "/" + key[: -len(INDEX_DOCUMENT)]
    return "/" + key.removesuffix(".html")


def format_priority(priority: float) -> str:
    """Format a priority in plain decimal notation, keeping at least one decimal.

    ``1.0 -> "1.0"``, ``0.8 -> "0.8"``, ``0.85 -> "0.85"``.
    """
    text = f"{priority:f}".rstrip("0")
    return text + "0" if text.endswith(".") else text


def render_sitemap(entries: Sequence[SitemapEntry], site_url: str, today: date | None = None) -> str:
    """Serialize entries as a sitemaps.org ``urlset`` document.

    Args:
        entries: URL entries in output order.
        site_url: Origin prepended to every path (a trailing ``/`` is ignored).
        today: Date used for entries without ``lastmod``.  Defaults to the
            current UTC date.

    Returns:
        The XML document as a string.
    """
    fallback = today or datetime.now(timezone.utc).date()
    origin = site_url.rstrip("/")
    lines = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        f'<urlset xmlns="{SITEMAP_NAMESPACE}">',
    ]
    for entry in entries:
        lastmod = entry.lastmod or fallback
        lines.extend(
            [
                "  <url>",
                f"    <loc>{escape_xml(origin + entry.path)}</loc>",
                f"    <lastmod>{lastmod.isoformat()}</lastmod>",
                f"    <changefreq>{entry.changefreq}</changefreq>",
                f"    <priority>{format_priority(entry.priority)}</priority>",
                "  </url>",
            ]
        )
    lines.append("</urlset>")
    return "\n".join(lines) + "\n"


class StaticSitemap:
    """Sitemap built from a fixed list of entries."""

    def __init__(self, entries: Sequence[SitemapEntry]) -> None:
        self._entries = tuple(entries)

    def entries(self) -> list[SitemapEntry]:
        return list(self._entries)


class DiscoverySitemap:
    """Sitemap built by scanning the asset store for HTML documents.

    The store is re-read on every call; nothing is cached between requests.
    """

    def __init__(self, store: AssetStore) -> None:
        self._store = store

    def entries(self) -> list[SitemapEntry]:
        """Scan the store and build one entry per HTML document.

        Raises:
            SitemapError: The store could not be listed.
        """
        try:
            documents = self._store.list_files(suffix=".html")
        except OSError as e:
            raise SitemapError(f"Could not list {self._store.root}: {e}") from e

        entries = []
        for document in documents:
            path = path_for_document(document.key)
            entries.append(
                SitemapEntry(
                    path=path,
                    lastmod=document.modified.date(),
                    changefreq="monthly",
                    priority=1.0 if path == "/" else 0.8,
                )
            )
        entries.sort(key=lambda entry: entry.path)
        logger.debug(f"Discovered {len(entries)} sitemap entries under {self._store.root}")
        return entries
