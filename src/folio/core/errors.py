"""Exception hierarchy for Folio.

Client errors (bad method, oversized URI, traversal, missing file) never
raise; the request pipeline answers them directly with a 4xx response.  The
classes here cover server-side failures, all of which are logged and surfaced
to the client as an opaque 500:

- :class:`UpstreamError` -- the font service misbehaved.
- :class:`RenderError` -- layout or rasterization failed.
- :class:`SitemapError` -- the asset store could not be scanned.
"""


class FolioError(Exception):
    """Base class for every error raised by Folio."""


class UpstreamError(FolioError):
    """An outbound request to the font service failed."""


class FontResolutionError(UpstreamError):
    """A font stylesheet did not contain a ``src: url(...)`` reference."""


class FontFetchError(UpstreamError):
    """A stylesheet or font binary could not be downloaded."""


class RenderError(FolioError):
    """The preview image could not be produced."""


class LayoutError(RenderError):
    """Text could not be laid out with the supplied fonts."""


class RasterizeError(RenderError):
    """The vector document could not be converted to PNG."""


class SitemapError(FolioError):
    """The asset store could not be listed for sitemap discovery."""
