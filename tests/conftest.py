# SPDX-License-Identifier: Apache-2.0
"""Shared fixtures for the export pipeline tests."""

from __future__ import annotations

from typing import Any, Callable

import pytest
from PIL import Image

from codetodoc.core.errors import CaptureFailure
from codetodoc.core.models import Bitmap


def make_bitmap(width: int, height: int, color: str = "white") -> Bitmap:
    """Create a solid-colour bitmap of the given size."""
    return Bitmap.from_image(Image.new("RGB", (width, height), color))


def is_released(bitmap: Bitmap) -> bool:
    """True once the bitmap's pixel buffer has been closed."""
    try:
        bitmap.image.getpixel((0, 0))
    except ValueError:
        return True
    return False


def weasyprint_available() -> bool:
    """True when WeasyPrint and its native libraries can be loaded."""
    try:
        import weasyprint  # noqa: F401
    except (ImportError, OSError):
        return False
    return True


class FakeRasterizer:
    """Rasterizer double returning a fixed-size bitmap (or failing)."""

    def __init__(
        self,
        width: int = 340,
        height: int = 200,
        fail: bool = False,
        hook: Callable[[], None] | None = None,
    ) -> None:
        self.width = width
        self.height = height
        self.fail = fail
        self.hook = hook
        self.calls: list[tuple[Any, float]] = []
        self.produced: list[Bitmap] = []

    def rasterize(self, region: Any, scale_factor: float = 2.0) -> Bitmap:
        self.calls.append((region, scale_factor))
        if self.hook is not None:
            self.hook()
        if self.fail:
            raise CaptureFailure("capture blocked", stage="rasterize")
        bitmap = make_bitmap(self.width, self.height)
        self.produced.append(bitmap)
        return bitmap


@pytest.fixture
def code_rasterizer() -> FakeRasterizer:
    """Fake code rasterizer producing a short listing bitmap."""
    return FakeRasterizer(width=340, height=200)


@pytest.fixture
def markup_rasterizer() -> FakeRasterizer:
    """Fake markup rasterizer producing a tall 1000x3000 capture."""
    return FakeRasterizer(width=1000, height=3000)
