"""Shared pytest fixtures for Folio tests."""

from __future__ import annotations

import io
import os
import shutil
import string
import tempfile
from collections.abc import Generator
from datetime import datetime, timezone
from pathlib import Path

import httpx
import pytest
from fastapi.testclient import TestClient
from fontTools.fontBuilder import FontBuilder
from fontTools.pens.ttGlyphPen import TTGlyphPen

from folio.api.main import create_app
from folio.core.config import FolioConfig
from folio.core.fonts import FontDescriptor
from folio.core.layout import SANS_FAMILY, SERIF_FAMILY

# Fixed modification time for site documents: 2024-03-15 12:00:00 UTC.
SITE_MTIME = 1710504000


def build_test_font(family: str) -> bytes:
    """Build a minimal TrueType font whose glyphs are solid boxes.

    Covers ASCII letters, digits, space and a little punctuation, which is
    enough to lay out the default title and subtitle.

    Args:
        family: Family name written to the ``name`` table.

    Returns:
        The font file as bytes.
    """
    chars = string.ascii_letters + string.digits + "&.,-'"
    glyph_order = [".notdef", "space"] + [f"uni{ord(c):04X}" for c in chars]
    cmap = {ord(" "): "space"}
    cmap.update({ord(c): f"uni{ord(c):04X}" for c in chars})

    def box() -> object:
        pen = TTGlyphPen(None)
        pen.moveTo((50, 0))
        pen.lineTo((50, 700))
        pen.lineTo((550, 700))
        pen.lineTo((550, 0))
        pen.closePath()
        return pen.glyph()

    glyphs = {name: box() for name in glyph_order}
    glyphs["space"] = TTGlyphPen(None).glyph()
    metrics = {name: (600, 50) for name in glyph_order}
    metrics["space"] = (250, 0)

    builder = FontBuilder(unitsPerEm=1000, isTTF=True)
    builder.setupGlyphOrder(glyph_order)
    builder.setupCharacterMap(cmap)
    builder.setupGlyf(glyphs)
    builder.setupHorizontalMetrics(metrics)
    builder.setupHorizontalHeader(ascent=800, descent=-200)
    builder.setupNameTable({"familyName": family, "styleName": "Regular"})
    builder.setupOS2(sTypoAscender=800, sTypoDescender=-200, usWinAscent=800, usWinDescent=200)
    builder.setupPost()

    buffer = io.BytesIO()
    builder.save(buffer)
    return buffer.getvalue()


class FontServiceStub:
    """Stand-in for the Google Fonts stylesheet and binary endpoints.

    Every request is recorded in :attr:`requests` so tests can count
    outbound fetches.

    Attributes:
        binaries: Font bytes keyed by family name.
        broken_families: Families whose stylesheet omits ``src: url(...)``.
        failing_hosts: Hosts that answer 500.
    """

    def __init__(self, binaries: dict[str, bytes]) -> None:
        self.binaries = binaries
        self.broken_families: set[str] = set()
        self.failing_hosts: set[str] = set()
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.host in self.failing_hosts:
            return httpx.Response(500, text="upstream exploded")

        if request.url.host == "fonts.googleapis.com":
            family = request.url.params["family"].split(":")[0]
            if family in self.broken_families:
                return httpx.Response(200, text="/* nothing to see here */")
            slug = family.replace(" ", "")
            css = (
                "@font-face {\n"
                f"  font-family: '{family}';\n"
                f"  src: url(https://fonts.gstatic.com/s/{slug}.ttf) format('truetype');\n"
                "}\n"
            )
            return httpx.Response(200, text=css, headers={"Content-Type": "text/css"})

        if request.url.host == "fonts.gstatic.com":
            for family, data in self.binaries.items():
                if request.url.path.endswith(family.replace(" ", "") + ".ttf"):
                    return httpx.Response(200, content=data)

        return httpx.Response(404)

    def count(self, host: str) -> int:
        return sum(1 for request in self.requests if request.url.host == host)


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files.

    Yields:
        Path to temporary directory

    Cleanup:
        Directory is removed after test completes
    """
    temp_path = Path(tempfile.mkdtemp())
    try:
        yield temp_path
    finally:
        shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def public_dir(temp_dir: Path) -> Path:
    """Create a small static site.

    Layout::

        public/
            index.html
            about.html
            style.css
            blog/index.html

    Every file has the modification time :data:`SITE_MTIME`.
    """
    public = temp_dir / "public"
    (public / "blog").mkdir(parents=True)
    (public / "index.html").write_text("<h1>Home</h1>")
    (public / "about.html").write_text("<h1>About</h1>")
    (public / "style.css").write_text("body { color: #121212; }")
    (public / "blog" / "index.html").write_text("<h1>Blog</h1>")
    for path in public.rglob("*"):
        if path.is_file():
            os.utime(path, (SITE_MTIME, SITE_MTIME))
    return public


@pytest.fixture
def site_mtime() -> datetime:
    """Modification time of every file in :func:`public_dir`, as aware UTC."""
    return datetime.fromtimestamp(SITE_MTIME, tz=timezone.utc)


@pytest.fixture
def test_config(public_dir: Path) -> FolioConfig:
    """Create a test configuration rooted at the temporary site.

    Args:
        public_dir: Temporary site from fixture

    Returns:
        FolioConfig instance for testing
    """
    return FolioConfig(
        public_dir=str(public_dir),
        site_url="https://example.com",
        sitemap_mode="discovery",
        _env_file=None,
    )


@pytest.fixture(scope="session")
def font_binaries() -> dict[str, bytes]:
    """Generated font files for both families used by the layout."""
    return {
        SERIF_FAMILY: build_test_font(SERIF_FAMILY),
        SANS_FAMILY: build_test_font(SANS_FAMILY),
    }


@pytest.fixture
def test_fonts(font_binaries: dict[str, bytes]) -> list[FontDescriptor]:
    """Font descriptors as the font cache would return them."""
    return [
        FontDescriptor(name=SERIF_FAMILY, data=font_binaries[SERIF_FAMILY], weight=400),
        FontDescriptor(name=SANS_FAMILY, data=font_binaries[SANS_FAMILY], weight=500),
    ]


@pytest.fixture
def font_service(font_binaries: dict[str, bytes]) -> FontServiceStub:
    """Recording stand-in for the remote font service."""
    return FontServiceStub(font_binaries)


@pytest.fixture
def http_client(font_service: FontServiceStub) -> httpx.AsyncClient:
    """Async HTTP client routed to :class:`FontServiceStub`."""
    return httpx.AsyncClient(transport=httpx.MockTransport(font_service))


@pytest.fixture
def test_client(test_config: FolioConfig, http_client: httpx.AsyncClient) -> Generator[TestClient, None, None]:
    """FastAPI TestClient for an app wired to the temporary site and stub fonts."""
    app = create_app(test_config, http_client=http_client)
    with TestClient(app) as client:
        yield client


@pytest.fixture
def requires_cairo() -> None:
    """Skip the test when cairosvg or the native Cairo library is missing."""
    try:
        import cairosvg  # noqa: F401
    except (ImportError, OSError) as e:
        pytest.skip(f"Cairo unavailable: {e}")
