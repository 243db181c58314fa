# SPDX-License-Identifier: Apache-2.0
"""Rasterizers that capture content into bitmaps."""

from codetodoc.render.base import DEFAULT_SCALE_FACTOR, ContentRasterizer
from codetodoc.render.code_rasterizer import CODE_THEMES, CodeRasterizer, CodeTheme
from codetodoc.render.markup_rasterizer import CaptureSurface, MarkupRasterizer

__all__ = [
    "CODE_THEMES",
    "CaptureSurface",
    "CodeRasterizer",
    "CodeTheme",
    "ContentRasterizer",
    "DEFAULT_SCALE_FACTOR",
    "MarkupRasterizer",
]
