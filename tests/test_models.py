# SPDX-License-Identifier: Apache-2.0
"""Tests for data models and errors."""

from __future__ import annotations

import pytest

from codetodoc.core.errors import (
    CaptureFailure,
    ExportError,
    MissingContentError,
    UnsupportedFormatError,
)
from codetodoc.core.models import (
    PASTED_FILE_NAME,
    PASTED_TITLE,
    ExportFormat,
    ExportOutcome,
    ExportRequest,
    MarkupRegion,
    Notification,
    OutputBlob,
    Severity,
)

from conftest import make_bitmap


class TestExportFormat:
    """Tests for ExportFormat.parse()."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("pdf", ExportFormat.PDF),
            ("DOCX", ExportFormat.DOCX),
            (" txt ", ExportFormat.TXT),
            (ExportFormat.HTML, ExportFormat.HTML),
        ],
    )
    def test_parse(self, value: str, expected: ExportFormat) -> None:
        assert ExportFormat.parse(value) is expected

    def test_parse_unknown(self) -> None:
        """Test unknown formats raise UnsupportedFormatError."""
        with pytest.raises(UnsupportedFormatError) as exc_info:
            ExportFormat.parse("odt")

        assert exc_info.value.stage == "format"
        assert "odt" in exc_info.value.message


class TestExportRequest:
    """Tests for ExportRequest."""

    def test_string_format_is_parsed(self) -> None:
        request = ExportRequest(raw_text="x", target_format="html")  # type: ignore[arg-type]

        assert request.target_format is ExportFormat.HTML

    def test_invalid_format_rejected_on_construction(self) -> None:
        with pytest.raises(UnsupportedFormatError):
            ExportRequest(raw_text="x", target_format="rtf")  # type: ignore[arg-type]

    def test_has_content(self) -> None:
        assert ExportRequest(raw_text="a").has_content
        assert not ExportRequest(raw_text="").has_content

    def test_from_paste(self) -> None:
        """Test pasted markup gets fixed title, name and language."""
        region = MarkupRegion(html="<p>hi</p>")

        request = ExportRequest.from_paste("<p>hi</p>", "pdf", rendered_region=region)

        assert request.document_title == PASTED_TITLE
        assert request.file_name == PASTED_FILE_NAME
        assert request.source_language == "html"
        assert request.target_format is ExportFormat.PDF
        assert request.is_rendered_capture

    def test_upload_is_not_rendered_capture(self) -> None:
        request = ExportRequest(raw_text="<p>hi</p>", source_language="html")

        assert not request.is_rendered_capture


class TestBitmap:
    """Tests for Bitmap."""

    def test_from_image(self) -> None:
        bitmap = make_bitmap(12, 34)

        assert (bitmap.pixel_width, bitmap.pixel_height) == (12, 34)

    def test_release_closes_image(self) -> None:
        bitmap = make_bitmap(4, 4)

        bitmap.release()

        with pytest.raises(ValueError):
            bitmap.image.getpixel((0, 0))


class TestOutputBlob:
    """Tests for OutputBlob."""

    def test_text_as_bytes(self) -> None:
        blob = OutputBlob("héllo", "a.txt", "text/plain")

        assert blob.as_bytes() == "héllo".encode("utf-8")

    def test_bytes_passthrough(self) -> None:
        blob = OutputBlob(b"%PDF", "a.pdf", "application/pdf")

        assert blob.as_bytes() == b"%PDF"


class TestExportOutcome:
    """Tests for ExportOutcome."""

    def test_succeeded(self) -> None:
        ok = ExportOutcome(
            Notification(Severity.SUCCESS, "done"), blob=OutputBlob("", "a.txt", "text/plain")
        )
        failed = ExportOutcome(Notification(Severity.ERROR, "nope"))

        assert ok.succeeded
        assert not failed.succeeded


class TestExportError:
    """Tests for ExportError formatting."""

    def test_str_without_cause(self) -> None:
        error = ExportError("Something failed", stage="assemble")

        assert str(error) == "[assemble] Something failed"

    def test_str_with_cause(self) -> None:
        cause = OSError("disk full")
        error = CaptureFailure("Capture failed", stage="rasterize", cause=cause)

        assert str(error) == "[rasterize] Capture failed (caused by: disk full)"
        assert error.cause is cause

    def test_subclasses(self) -> None:
        assert issubclass(MissingContentError, ExportError)
        assert issubclass(CaptureFailure, ExportError)
        assert issubclass(UnsupportedFormatError, ExportError)
