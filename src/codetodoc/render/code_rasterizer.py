# SPDX-License-Identifier: Apache-2.0
"""Code listing rasterizer.

Draws a code preview block (theme background, optional line-number gutter,
monospace text) with Pillow at the requested scale factor.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from PIL import Image, ImageDraw, ImageFont

from codetodoc.core.errors import CaptureFailure
from codetodoc.core.models import Bitmap, CodeRegion
from codetodoc.render.base import DEFAULT_SCALE_FACTOR

logger = logging.getLogger(__name__)

FontType = Union[ImageFont.FreeTypeFont, ImageFont.ImageFont]

# Tried in order when no font is configured
MONOSPACE_FONTS: tuple[str, ...] = (
    "DejaVuSansMono.ttf",
    "LiberationMono-Regular.ttf",
    "Menlo.ttc",
    "consola.ttf",
    "cour.ttf",
)

TAB_SIZE = 4
PADDING_PX = 16
LINE_SPACING_PX = 4
GUTTER_GAP_PX = 16


@dataclass(frozen=True)
class CodeTheme:
    """Colours for the preview block."""

    background: str
    foreground: str
    gutter: str


CODE_THEMES: dict[str, CodeTheme] = {
    "atomDark": CodeTheme(background="#1d1f21", foreground="#c5c8c6", gutter="#7c7c7c"),
    "materialLight": CodeTheme(background="#fafafa", foreground="#90a4ae", gutter="#c0c8cc"),
    "dracula": CodeTheme(background="#282a36", foreground="#f8f8f2", gutter="#6272a4"),
    "solarizedlight": CodeTheme(background="#fdf6e3", foreground="#657b83", gutter="#93a1a1"),
    "tomorrow": CodeTheme(background="#2d2d2d", foreground="#cccccc", gutter="#999999"),
}

DEFAULT_THEME = "atomDark"


def get_theme(name: str) -> CodeTheme:
    """Look up a theme by name.

    Raises:
        ValueError: If the theme is unknown.
    """
    try:
        return CODE_THEMES[name]
    except KeyError:
        available = ", ".join(sorted(CODE_THEMES))
        raise ValueError(f"Unknown code theme: {name!r} (available: {available})") from None


class CodeRasterizer:
    """Rasterize ``CodeRegion`` listings into bitmaps.

    Args:
        font_path: Monospace TrueType font; system fonts are tried if
            unset or unloadable.
    """

    def __init__(self, font_path: Optional[Path] = None) -> None:
        self._font_path = font_path

    def rasterize(
        self,
        region: CodeRegion,
        scale_factor: float = DEFAULT_SCALE_FACTOR,
    ) -> Bitmap:
        """Draw the full listing.

        Raises:
            ValueError: If the region names an unknown theme.
            CaptureFailure: If drawing fails.
        """
        theme = get_theme(region.theme)
        try:
            image = self._draw(region, theme, scale_factor)
        except (OSError, ValueError, MemoryError) as exc:
            raise CaptureFailure(
                "Failed to draw code listing", stage="rasterize", cause=exc
            ) from exc

        logger.debug(
            "Rasterized %s listing: %dx%d px", region.language, image.width, image.height
        )
        return Bitmap.from_image(image)

    def _draw(self, region: CodeRegion, theme: CodeTheme, scale: float) -> Image.Image:
        font = self._load_font(max(1, round(region.font_size * scale)))
        padding = PADDING_PX * scale
        # splitlines also drops the \r of CRLF input
        lines = region.text.expandtabs(TAB_SIZE).splitlines() or [""]

        measure = ImageDraw.Draw(Image.new("RGB", (1, 1)))
        _, _, _, glyph_bottom = measure.textbbox((0, 0), "Hg|", font=font)
        line_height = math.ceil(glyph_bottom + LINE_SPACING_PX * scale)
        text_width = max(measure.textlength(line, font=font) for line in lines)

        number_width = 0.0
        gutter = 0.0
        if region.line_numbers:
            number_width = measure.textlength(str(len(lines)), font=font)
            gutter = number_width + GUTTER_GAP_PX * scale

        width = max(1, math.ceil(2 * padding + gutter + text_width))
        height = max(1, math.ceil(2 * padding + line_height * len(lines)))

        image = Image.new("RGB", (width, height), theme.background)
        draw = ImageDraw.Draw(image)
        for index, line in enumerate(lines):
            y = padding + index * line_height
            if region.line_numbers:
                label = str(index + 1)
                # Right-align numbers within the gutter
                x = padding + number_width - draw.textlength(label, font=font)
                draw.text((x, y), label, fill=theme.gutter, font=font)
            if line:
                draw.text((padding + gutter, y), line, fill=theme.foreground, font=font)
        return image

    def _load_font(self, size: int) -> FontType:
        candidates: list[str] = []
        if self._font_path is not None:
            candidates.append(str(self._font_path))
        candidates.extend(MONOSPACE_FONTS)

        for candidate in candidates:
            try:
                return ImageFont.truetype(candidate, size)
            except OSError:
                if self._font_path is not None and candidate == str(self._font_path):
                    logger.warning("Could not load code font %s; trying system fonts", candidate)
                continue

        logger.debug("No monospace TrueType font found; using Pillow default font")
        return ImageFont.load_default(size=size)
