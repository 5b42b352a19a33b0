"""Layout tree to SVG conversion.

Text is not emitted as ``<text>`` elements.  Each glyph outline is pulled
from the font with fontTools and written as path data, so the resulting
document renders identically on any rasterizer without font lookup.

Geometry
--------
- Line box height is the font's ``hhea`` ascender minus descender, scaled to
  the font size (CSS ``line-height: normal`` without line gap).
- Each glyph advances by its ``hmtx`` advance width plus the letter spacing
  (``em`` multiplied by the font size), applied after every character as
  browsers do.
- Children stack vertically; ``justify_content`` positions the stack inside
  the padded box and ``align_items`` positions each line horizontally.
"""

from __future__ import annotations

import io
import logging
from collections.abc import Sequence
from dataclasses import dataclass

from fontTools.pens.svgPathPen import SVGPathPen
from fontTools.pens.transformPen import TransformPen
from fontTools.ttLib import TTFont

from folio.core.errors import LayoutError
from folio.core.fonts import FontDescriptor
from folio.core.layout import LayoutNode, TextNode

logger = logging.getLogger(__name__)

SVG_NAMESPACE = "http://www.w3.org/2000/svg"


def _num(value: float) -> str:
    """Format a coordinate with two decimals and no trailing zeros."""
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return "0" if text in ("", "-0") else text


@dataclass(frozen=True)
class _Face:
    """A parsed font plus the metrics the renderer needs."""

    font: TTFont
    units_per_em: int
    ascender: int
    descender: int

    @classmethod
    def load(cls, descriptor: FontDescriptor) -> _Face:
        try:
            font = TTFont(io.BytesIO(descriptor.data))
            head = font["head"]
            hhea = font["hhea"]
            return cls(
                font=font,
                units_per_em=head.unitsPerEm,
                ascender=hhea.ascent,
                descender=hhea.descent,
            )
        except Exception as e:
            raise LayoutError(f"Could not parse font {descriptor.name!r}: {e}") from e

    def line_height(self, size: float) -> float:
        return (self.ascender - self.descender) * size / self.units_per_em


def _select_font(fonts: Sequence[FontDescriptor], family: str, weight: int) -> FontDescriptor:
    candidates = [f for f in fonts if f.name == family]
    if not candidates:
        raise LayoutError(f"Font family {family!r} is not loaded")
    return min(candidates, key=lambda f: abs(f.weight - weight))


def _apply_transform(text: str, transform: str) -> str:
    if transform == "uppercase":
        return text.upper()
    if transform == "lowercase":
        return text.lower()
    return text


def _shape(node: TextNode, face: _Face) -> tuple[list[tuple[str, float]], float]:
    """Map characters to glyph names and x offsets (in pixels).

    Returns:
        ``(glyphs, width)`` where ``glyphs`` is a list of
        ``(glyph_name, x_offset)`` pairs.
    """
    style = node.style
    scale = style.font_size / face.units_per_em
    tracking = style.letter_spacing * style.font_size
    cmap = face.font.getBestCmap() or {}
    metrics = face.font["hmtx"]
    fallback = face.font.getGlyphOrder()[0]

    glyphs: list[tuple[str, float]] = []
    cursor = 0.0
    for char in _apply_transform(node.text, style.text_transform):
        name = cmap.get(ord(char), fallback)
        glyphs.append((name, cursor))
        advance, _ = metrics[name]
        cursor += advance * scale + tracking
    return glyphs, cursor


def _outline(
    glyphs: list[tuple[str, float]], face: _Face, size: float, x: float, baseline: float
) -> str:
    scale = size / face.units_per_em
    glyph_set = face.font.getGlyphSet()
    pen = SVGPathPen(glyph_set, ntos=_num)
    for name, offset in glyphs:
        # Font units are y-up; SVG is y-down.
        glyph_set[name].draw(TransformPen(pen, (scale, 0, 0, -scale, x + offset, baseline)))
    return pen.getCommands()


def render(
    layout: LayoutNode,
    fonts: Sequence[FontDescriptor],
    width: int,
    height: int,
) -> str:
    """Render a layout tree to a standalone SVG document.

    Args:
        layout: Root container from :func:`folio.core.layout.build_layout`.
        fonts: Loaded faces; every family referenced by the tree must be
            present.
        width: Canvas width in logical units.
        height: Canvas height in logical units.

    Returns:
        SVG markup sized ``width`` x ``height``.

    Raises:
        LayoutError: A referenced family is missing or a font is unreadable.
    """
    faces: dict[tuple[str, int], _Face] = {}
    box = layout.style
    inner_width = width - 2 * box.padding
    inner_height = height - 2 * box.padding

    measured: list[tuple[TextNode, _Face, float]] = []
    for child in layout.children:
        descriptor = _select_font(fonts, child.style.font_family, child.style.font_weight)
        key = (descriptor.name, descriptor.weight)
        if key not in faces:
            faces[key] = _Face.load(descriptor)
        face = faces[key]
        measured.append((child, face, face.line_height(child.style.font_size)))

    stack_height = sum(line_height + child.style.margin_bottom for child, _, line_height in measured)
    if box.justify_content == "center":
        top = box.padding + (inner_height - stack_height) / 2
    elif box.justify_content == "flex-end":
        top = box.padding + inner_height - stack_height
    else:
        top = box.padding

    elements: list[str] = []
    for child, face, line_height in measured:
        baseline = top + face.ascender * child.style.font_size / face.units_per_em
        glyphs, line_width = _shape(child, face)
        if box.align_items == "center":
            x = box.padding + (inner_width - line_width) / 2
        elif box.align_items == "flex-end":
            x = box.padding + inner_width - line_width
        else:
            x = box.padding
        path = _outline(glyphs, face, child.style.font_size, x, baseline)
        if path:
            elements.append(f'<path fill="{child.style.color}" d="{path}"/>')
        top += line_height + child.style.margin_bottom

    logger.debug(f"Rendered {len(measured)} text lines onto {width}x{height} canvas")
    return (
        f'<svg xmlns="{SVG_NAMESPACE}" width="{width}" height="{height}" '
        f'viewBox="0 0 {width} {height}">'
        f'<rect width="{width}" height="{height}" fill="{box.background}"/>'
        + "".join(elements)
        + "</svg>"
    )
