# SPDX-License-Identifier: Apache-2.0
"""Pagination of one tall bitmap across fixed-size pages.

The image is scaled to the printable page width, keeping its aspect ratio.
If it is taller than the usable page height, page ``i`` shows the same
image shifted up by ``usable_height * i``, so consecutive pages reveal
consecutive bands of it.
"""

from __future__ import annotations

import logging

from codetodoc.core.errors import DimensionError
from codetodoc.core.models import Bitmap, PageGeometry, PagePlacement

logger = logging.getLogger(__name__)

# Guards the page loop against float noise at exact multiples
_EPSILON = 1e-9


def split_pages(
    pixel_width: int,
    pixel_height: int,
    geometry: PageGeometry,
) -> list[PagePlacement]:
    """Compute page placements for an image of the given pixel size.

    Args:
        pixel_width: Image width in pixels.
        pixel_height: Image height in pixels.
        geometry: Page size and margins.

    Returns:
        Placements ordered by page index; one per output page.

    Raises:
        DimensionError: If either dimension is not positive, or the page
            leaves no room for the image.
    """
    if pixel_width <= 0 or pixel_height <= 0:
        raise DimensionError(
            f"Invalid bitmap dimensions: {pixel_width}x{pixel_height}",
            stage="paginate",
        )

    img_width = geometry.image_width
    usable = geometry.usable_height
    if img_width <= 0 or usable <= 0:
        raise DimensionError(
            f"Page geometry leaves no drawable area: {img_width}x{usable} mm",
            stage="paginate",
        )

    img_height = pixel_height * img_width / pixel_width

    if img_height <= usable:
        return [PagePlacement(0, geometry.top_margin, img_height)]

    # The last page is a full-size placement too; drawing clips at the image end
    placements: list[PagePlacement] = []
    consumed = 0.0
    page_index = 0
    while consumed < img_height - _EPSILON:
        placements.append(
            PagePlacement(
                page_index=page_index,
                vertical_offset=geometry.top_margin - usable * page_index,
                slice_height=usable,
            )
        )
        consumed += usable
        page_index += 1

    logger.debug(
        "Split %.1fmm image into %d pages (usable height %.1fmm)",
        img_height,
        len(placements),
        usable,
    )
    return placements


class PageSplitter:
    """Split bitmaps into page placements."""

    def split(self, bitmap: Bitmap, geometry: PageGeometry) -> list[PagePlacement]:
        """Compute page placements for ``bitmap``.

        Raises:
            DimensionError: If the bitmap has a zero dimension.
        """
        return split_pages(bitmap.pixel_width, bitmap.pixel_height, geometry)
