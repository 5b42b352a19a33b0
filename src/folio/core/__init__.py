"""Core functionality for Open Graph image generation.

The image is produced by four stages, each in its own module:

1. **Font acquisition** (fonts.py):
   - Resolves font binaries through the Google Fonts stylesheet API
   - Caches both faces for the life of the application instance

2. **Layout** (layout.py):
   - Immutable flex-column tree describing the two text lines

3. **Vector rendering** (renderer.py):
   - Shapes text with fontTools and emits glyph outlines as SVG paths

4. **Rasterization** (rasterizer.py):
   - cairosvg draws the SVG, Pillow re-encodes a deterministic PNG

Configuration lives in config.py (Pydantic Settings, ``FOLIO_`` prefix) and the
exception hierarchy in errors.py.
"""
