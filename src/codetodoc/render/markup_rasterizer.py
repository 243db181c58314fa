# SPDX-License-Identifier: Apache-2.0
"""Rendered-markup rasterizer.

HTML is laid out by WeasyPrint onto tall fixed-width slabs, each slab is
rendered with pypdfium2, and the slabs are stacked into one bitmap so the
capture covers the whole scrollable content, not just the first screen.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Optional

import pypdfium2 as pdfium  # type: ignore[import-untyped]
from PIL import Image, ImageChops

from codetodoc.core.errors import CaptureFailure
from codetodoc.core.models import Bitmap, MarkupRegion
from codetodoc.render.base import DEFAULT_SCALE_FACTOR

logger = logging.getLogger(__name__)

# CSS px are 1/96 in, PDF points 1/72 in
PX_PER_PT = 96.0 / 72.0

# Height of one layout slab in CSS px
SLAB_HEIGHT_PX = 1500

BACKGROUND = "white"


class CaptureSurface:
    """Off-screen rendering surface for one capture.

    Use as a context manager; the laid-out document is closed on exit,
    whether capture succeeded or not. With a ``deadline`` (a
    ``time.monotonic()`` value) the surface gives up between steps once it
    passes, so an abandoned capture does not keep rendering.

    Example:
        >>> with CaptureSurface(MarkupRegion("<p>hi</p>")) as surface:
        ...     image = surface.capture(2.0)
    """

    def __init__(
        self,
        region: MarkupRegion,
        slab_height: int = SLAB_HEIGHT_PX,
        deadline: Optional[float] = None,
    ) -> None:
        self._region = region
        self._slab_height = slab_height
        self._deadline = deadline
        self._document: Optional[pdfium.PdfDocument] = None

    def __enter__(self) -> CaptureSurface:
        try:
            self.load()
        except CaptureFailure:
            self.close()
            raise
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()

    @property
    def is_loaded(self) -> bool:
        return self._document is not None

    def load(self) -> None:
        """Lay out the markup.

        Raises:
            CaptureFailure: If WeasyPrint is unavailable or layout fails.
        """
        try:
            from weasyprint import CSS, HTML
        except (ImportError, OSError) as exc:
            raise CaptureFailure(
                "WeasyPrint is not available for markup capture",
                stage="rasterize",
                cause=exc,
            ) from exc

        page_css = CSS(
            string=(
                f"@page {{ size: {self._region.viewport_width}px {self._slab_height}px; "
                "margin: 0; }"
            )
        )
        try:
            pdf_bytes = HTML(
                string=self._region.html, base_url=self._region.base_url
            ).write_pdf(stylesheets=[page_css])
            self._document = pdfium.PdfDocument(pdf_bytes)
        except Exception as exc:
            raise CaptureFailure(
                "Failed to lay out markup", stage="rasterize", cause=exc
            ) from exc
        self._check_deadline("layout")

    def capture(self, scale_factor: float) -> Image.Image:
        """Render all slabs and stack them into one image.

        Raises:
            CaptureFailure: If the surface is not loaded or holds no pages.
        """
        if self._document is None:
            raise CaptureFailure("Capture surface is not loaded", stage="rasterize")
        if len(self._document) == 0:
            raise CaptureFailure("Rendered markup produced no pages", stage="rasterize")

        slabs: list[Image.Image] = []
        try:
            for index in range(len(self._document)):
                self._check_deadline(f"slab {index + 1}")
                page = self._document[index]
                bitmap = page.render(scale=scale_factor * PX_PER_PT)
                slabs.append(bitmap.to_pil().convert("RGB"))
                page.close()

            last = slabs[-1]
            slabs[-1] = _trim_bottom(last)
            last.close()
            return _stack(slabs)
        except CaptureFailure:
            raise
        except Exception as exc:
            raise CaptureFailure(
                "Failed to rasterize rendered markup", stage="rasterize", cause=exc
            ) from exc
        finally:
            for slab in slabs:
                slab.close()

    def close(self) -> None:
        """Release the laid-out document."""
        if self._document is not None:
            self._document.close()
            self._document = None

    def _check_deadline(self, step: str) -> None:
        if self._deadline is not None and time.monotonic() > self._deadline:
            raise CaptureFailure(f"Capture deadline passed before {step}", stage="rasterize")


def _trim_bottom(image: Image.Image) -> Image.Image:
    """Drop blank rows below the content of the last slab."""
    blank = Image.new(image.mode, image.size, BACKGROUND)
    bbox = ImageChops.difference(image, blank).getbbox()
    blank.close()
    if bbox is None:
        # Blank slab: keep a single row so the bitmap is never empty
        return image.crop((0, 0, image.width, 1))
    return image.crop((0, 0, image.width, bbox[3]))


def _stack(slabs: list[Image.Image]) -> Image.Image:
    width = max(slab.width for slab in slabs)
    height = sum(slab.height for slab in slabs)
    canvas = Image.new("RGB", (width, height), BACKGROUND)
    y = 0
    for slab in slabs:
        canvas.paste(slab, (0, y))
        y += slab.height
    return canvas


class MarkupRasterizer:
    """Rasterize ``MarkupRegion`` markup as rendered output.

    Args:
        slab_height: Layout slab height in CSS px.
        timeout: Seconds a single capture may take before its surface gives
            up and closes itself (no limit if None).
    """

    def __init__(
        self,
        slab_height: int = SLAB_HEIGHT_PX,
        timeout: Optional[float] = None,
    ) -> None:
        self._slab_height = slab_height
        self._timeout = timeout

    def open_surface(self, region: MarkupRegion) -> CaptureSurface:
        """Create a fresh capture surface for ``region``."""
        deadline = None if self._timeout is None else time.monotonic() + self._timeout
        return CaptureSurface(region, slab_height=self._slab_height, deadline=deadline)

    def rasterize(
        self,
        region: MarkupRegion,
        scale_factor: float = DEFAULT_SCALE_FACTOR,
    ) -> Bitmap:
        """Capture the full rendered extent of ``region``.

        Raises:
            CaptureFailure: If the markup cannot be laid out or rendered.
        """
        with self.open_surface(region) as surface:
            image = surface.capture(scale_factor)
        logger.debug("Rasterized markup: %dx%d px", image.width, image.height)
        return Bitmap.from_image(image)
