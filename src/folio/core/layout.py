"""Declarative layout tree for the Open Graph image.

The tree mirrors a tiny subset of CSS flexbox: one column container holding
text leaves.  It carries no font data and no geometry; the renderer
(:mod:`folio.core.renderer`) resolves both.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

SERIF_FAMILY = "Instrument Serif"
SANS_FAMILY = "Instrument Sans"


@dataclass(frozen=True)
class TextStyle:
    """Typography for a single text leaf.

    ``letter_spacing`` is in ``em``: it is multiplied by ``font_size`` at
    render time, matching CSS ``letter-spacing: -0.02em``.
    """

    font_family: str
    font_size: float
    font_weight: int = 400
    color: str = "#000000"
    letter_spacing: float = 0.0
    text_transform: Literal["none", "uppercase", "lowercase"] = "none"
    margin_bottom: float = 0.0


@dataclass(frozen=True)
class TextNode:
    text: str
    style: TextStyle


@dataclass(frozen=True)
class BoxStyle:
    """Container styling.  Only a column flex layout is supported."""

    background: str = "#ffffff"
    padding: float = 0.0
    justify_content: Literal["flex-start", "center", "flex-end"] = "flex-start"
    align_items: Literal["flex-start", "center", "flex-end"] = "flex-start"


@dataclass(frozen=True)
class LayoutNode:
    style: BoxStyle
    children: tuple[TextNode, ...] = field(default_factory=tuple)


def build_layout(title: str, subtitle: str) -> LayoutNode:
    """Build the two-line preview card.

    Args:
        title: Large serif line (the site owner's name).
        subtitle: Small upper-cased sans line (role or tagline).

    Returns:
        The root :class:`LayoutNode`.  Equal inputs give equal trees.
    """
    return LayoutNode(
        style=BoxStyle(
            background="#fafafa",
            padding=80,
            justify_content="center",
            align_items="flex-start",
        ),
        children=(
            TextNode(
                text=title,
                style=TextStyle(
                    font_family=SERIF_FAMILY,
                    font_size=72,
                    font_weight=400,
                    color="#121212",
                    letter_spacing=-0.02,
                    margin_bottom=16,
                ),
            ),
            TextNode(
                text=subtitle,
                style=TextStyle(
                    font_family=SANS_FAMILY,
                    font_size=28,
                    font_weight=500,
                    color="#666666",
                    letter_spacing=0.1,
                    text_transform="uppercase",
                ),
            ),
        ),
    )
