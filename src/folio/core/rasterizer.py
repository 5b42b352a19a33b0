"""SVG to PNG conversion.

cairosvg draws the vector document at the requested pixel width (the height
follows from the SVG's aspect ratio).  The result is then passed through
Pillow and re-encoded as an opaque RGB PNG, which drops the alpha channel
and any encoder metadata so the same SVG always yields the same bytes.

cairosvg is imported inside :func:`rasterize` rather than at module level.
It loads the native Cairo library on import, and keeping that out of the
import path lets the server start (and serve static files and the sitemap)
on hosts without Cairo; ``/og.png`` then answers 500 and logs the cause.
"""

from __future__ import annotations

import io

from PIL import Image

from folio.core.errors import RasterizeError


def rasterize(svg: str, target_width: int) -> bytes:
    """Rasterize an SVG document to PNG bytes.

    Args:
        svg: Standalone SVG markup with an intrinsic width and height.
        target_width: Output width in pixels; height scales proportionally.

    Returns:
        PNG-encoded image bytes.

    Raises:
        RasterizeError: Cairo is unavailable, or the SVG could not be drawn
            or encoded.
    """
    try:
        import cairosvg

        png = cairosvg.svg2png(bytestring=svg.encode("utf-8"), output_width=target_width)
        with Image.open(io.BytesIO(png)) as drawn:
            image = drawn.convert("RGB")
        buffer = io.BytesIO()
        image.save(buffer, format="PNG")
    except Exception as e:
        raise RasterizeError(f"Could not rasterize SVG: {e}") from e
    return buffer.getvalue()
