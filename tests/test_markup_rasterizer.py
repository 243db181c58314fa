# SPDX-License-Identifier: Apache-2.0
"""Tests for the rendered-markup rasterizer."""

from __future__ import annotations

import time
from unittest.mock import MagicMock

import pytest
from PIL import Image

from codetodoc.core.errors import CaptureFailure
from codetodoc.core.models import MarkupRegion
from codetodoc.render import markup_rasterizer
from codetodoc.render.markup_rasterizer import CaptureSurface, MarkupRasterizer

from conftest import weasyprint_available

needs_weasyprint = pytest.mark.skipif(
    not weasyprint_available(), reason="WeasyPrint or its native libraries are unavailable"
)


class TestHelpers:
    """Tests for slab trimming and stacking."""

    def test_trim_bottom(self) -> None:
        image = Image.new("RGB", (10, 100), "white")
        image.paste((0, 0, 0), (0, 0, 10, 40))

        trimmed = markup_rasterizer._trim_bottom(image)

        assert trimmed.size == (10, 40)

    def test_trim_blank_keeps_one_row(self) -> None:
        trimmed = markup_rasterizer._trim_bottom(Image.new("RGB", (10, 100), "white"))

        assert trimmed.size == (10, 1)

    def test_stack(self) -> None:
        slabs = [Image.new("RGB", (10, 30)), Image.new("RGB", (8, 20))]

        stacked = markup_rasterizer._stack(slabs)

        assert stacked.size == (10, 50)


class TestCaptureSurface:
    """Tests for CaptureSurface lifecycle."""

    def test_capture_before_load(self) -> None:
        surface = CaptureSurface(MarkupRegion(html="<p>x</p>"))

        with pytest.raises(CaptureFailure):
            surface.capture(1.0)

    def test_closed_after_failed_capture(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test the surface is released even when capture raises."""
        document = MagicMock()
        document.__len__.return_value = 1
        document.__getitem__.side_effect = RuntimeError("render crashed")

        def fake_load(self: CaptureSurface) -> None:
            self._document = document

        monkeypatch.setattr(CaptureSurface, "load", fake_load)
        surface = CaptureSurface(MarkupRegion(html="<p>x</p>"))

        with pytest.raises(CaptureFailure) as exc_info:
            with surface:
                surface.capture(1.0)

        assert isinstance(exc_info.value.cause, RuntimeError)
        document.close.assert_called_once()
        assert not surface.is_loaded

    def test_expired_deadline_stops_capture(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test a surface past its deadline renders nothing and closes."""
        document = MagicMock()
        document.__len__.return_value = 3

        def fake_load(self: CaptureSurface) -> None:
            self._document = document

        monkeypatch.setattr(CaptureSurface, "load", fake_load)
        surface = CaptureSurface(MarkupRegion(html="<p>x</p>"), deadline=time.monotonic() - 1.0)

        with pytest.raises(CaptureFailure, match="deadline"):
            with surface:
                surface.capture(1.0)

        document.__getitem__.assert_not_called()
        document.close.assert_called_once()

    def test_rasterizer_timeout_sets_deadline(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test a rasterizer timeout bounds the surfaces it opens."""
        document = MagicMock()
        document.__len__.return_value = 1

        def slow_load(self: CaptureSurface) -> None:
            self._document = document
            time.sleep(0.05)

        monkeypatch.setattr(CaptureSurface, "load", slow_load)
        rasterizer = MarkupRasterizer(timeout=0.01)

        with pytest.raises(CaptureFailure, match="deadline"):
            rasterizer.rasterize(MarkupRegion(html="<p>x</p>"), 1.0)

        document.close.assert_called_once()


@needs_weasyprint
class TestMarkupRasterizer:
    """Tests rendering real markup with WeasyPrint."""

    def test_full_extent_capture(self) -> None:
        """Test content taller than one slab is captured completely."""
        html = '<div style="height: 2500px; background: #336699"></div>'
        rasterizer = MarkupRasterizer(slab_height=1000)

        bitmap = rasterizer.rasterize(MarkupRegion(html=html, viewport_width=400), 1.0)

        assert bitmap.pixel_width == 400
        assert bitmap.pixel_height >= 2400

    def test_short_markup(self) -> None:
        rasterizer = MarkupRasterizer()

        bitmap = rasterizer.rasterize(MarkupRegion(html="<h1>Hello</h1>", viewport_width=600), 1.0)

        assert bitmap.pixel_width == 600
        assert 0 < bitmap.pixel_height < 1500
