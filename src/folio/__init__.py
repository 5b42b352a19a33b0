"""Folio - static personal site server with a generated Open Graph image."""

__version__ = "0.1.0"

from folio.core.config import FolioConfig, config
from folio.core.fonts import FontCache, FontDescriptor
from folio.core.layout import build_layout
from folio.core.rasterizer import rasterize
from folio.core.renderer import render

__all__ = [
    "FolioConfig",
    "config",
    "FontCache",
    "FontDescriptor",
    "build_layout",
    "render",
    "rasterize",
]
