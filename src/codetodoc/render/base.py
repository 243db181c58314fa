# SPDX-License-Identifier: Apache-2.0
"""Rasterizer protocol shared by code and markup capture."""

from typing import Any, Protocol, runtime_checkable

from codetodoc.core.models import Bitmap

# Oversampling for print sharpness
DEFAULT_SCALE_FACTOR = 2.0


@runtime_checkable
class ContentRasterizer(Protocol):
    """Protocol definition for content rasterizers.

    Implementations capture the *full* extent of a region, not just the
    part that would fit a viewport.
    """

    def rasterize(self, region: Any, scale_factor: float = DEFAULT_SCALE_FACTOR) -> Bitmap:
        """Capture ``region`` into a single bitmap.

        Args:
            region: Region handle understood by the implementation.
            scale_factor: Pixel oversampling factor.

        Returns:
            Bitmap of the whole region.

        Raises:
            CaptureFailure: If the region cannot be captured.
        """
        ...
