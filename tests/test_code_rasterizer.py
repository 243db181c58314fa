# SPDX-License-Identifier: Apache-2.0
"""Tests for the code listing rasterizer."""

from __future__ import annotations

import pytest

from codetodoc.core.models import CodeRegion
from codetodoc.render.base import ContentRasterizer
from codetodoc.render.code_rasterizer import CODE_THEMES, CodeRasterizer, get_theme

SOURCE = "def main():\n    print('hello')\n\nmain()\n"


@pytest.fixture
def rasterizer() -> CodeRasterizer:
    return CodeRasterizer()


class TestThemes:
    """Tests for theme lookup."""

    @pytest.mark.parametrize(
        "name", ["atomDark", "materialLight", "dracula", "solarizedlight", "tomorrow"]
    )
    def test_known_themes(self, name: str) -> None:
        assert get_theme(name) is CODE_THEMES[name]

    def test_unknown_theme(self) -> None:
        with pytest.raises(ValueError, match="Unknown code theme"):
            get_theme("neon")


class TestCodeRasterizer:
    """Tests for CodeRasterizer."""

    def test_satisfies_protocol(self, rasterizer: CodeRasterizer) -> None:
        assert isinstance(rasterizer, ContentRasterizer)

    def test_produces_bitmap(self, rasterizer: CodeRasterizer) -> None:
        bitmap = rasterizer.rasterize(CodeRegion(text=SOURCE, language="python"), 1.0)

        assert bitmap.pixel_width > 0
        assert bitmap.pixel_height > 0
        assert bitmap.image.size == (bitmap.pixel_width, bitmap.pixel_height)
        assert bitmap.image.mode == "RGB"

    def test_background_matches_theme(self, rasterizer: CodeRasterizer) -> None:
        region = CodeRegion(text="x", language="text", theme="solarizedlight")

        bitmap = rasterizer.rasterize(region, 1.0)

        assert bitmap.image.getpixel((0, 0)) == (0xFD, 0xF6, 0xE3)

    def test_scale_grows_bitmap(self, rasterizer: CodeRasterizer) -> None:
        """Test a higher scale factor yields a larger capture."""
        region = CodeRegion(text=SOURCE, language="python")

        small = rasterizer.rasterize(region, 1.0)
        large = rasterizer.rasterize(region, 2.0)

        assert large.pixel_width > small.pixel_width
        assert large.pixel_height > small.pixel_height

    def test_more_lines_is_taller(self, rasterizer: CodeRasterizer) -> None:
        short = rasterizer.rasterize(CodeRegion(text="a", language="text"), 1.0)
        tall = rasterizer.rasterize(CodeRegion(text="a\n" * 50, language="text"), 1.0)

        assert tall.pixel_height > short.pixel_height

    def test_line_numbers_widen(self, rasterizer: CodeRasterizer) -> None:
        with_numbers = rasterizer.rasterize(
            CodeRegion(text=SOURCE, language="python", line_numbers=True), 1.0
        )
        without = rasterizer.rasterize(
            CodeRegion(text=SOURCE, language="python", line_numbers=False), 1.0
        )

        assert with_numbers.pixel_width > without.pixel_width

    def test_unknown_theme_raises(self, rasterizer: CodeRasterizer) -> None:
        with pytest.raises(ValueError):
            rasterizer.rasterize(CodeRegion(text="x", language="text", theme="neon"))

    def test_missing_font_path_falls_back(self, tmp_path) -> None:
        rasterizer = CodeRasterizer(font_path=tmp_path / "nope.ttf")

        bitmap = rasterizer.rasterize(CodeRegion(text="x", language="text"), 1.0)

        assert bitmap.pixel_width > 0

    def test_crlf_matches_lf(self, rasterizer: CodeRasterizer) -> None:
        """Test Windows line endings draw the same listing as Unix ones."""
        unix = rasterizer.rasterize(CodeRegion(text="a = 1\nb = 2", language="python"), 1.0)
        windows = rasterizer.rasterize(
            CodeRegion(text="a = 1\r\nb = 2\r\n", language="python"), 1.0
        )

        assert windows.image.size == unix.image.size
        assert list(windows.image.getdata()) == list(unix.image.getdata())

    def test_empty_text(self, rasterizer: CodeRasterizer) -> None:
        bitmap = rasterizer.rasterize(CodeRegion(text="", language="text"), 1.0)

        assert bitmap.pixel_height > 0
