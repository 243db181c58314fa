# SPDX-License-Identifier: Apache-2.0
"""Image-based PDF assembly.

Pages are built with pypdfium2: the captured bitmap is placed per page
placement, and code captures get a text header on the first page.
Document info (title, author, ...) is written afterwards with pikepdf.
"""

from __future__ import annotations

import ctypes
import logging
from dataclasses import dataclass
from datetime import datetime
from io import BytesIO
from typing import Any, Optional

import pikepdf  # type: ignore[import-untyped]
import pypdfium2 as pdfium  # type: ignore[import-untyped]

from codetodoc.config import ExportConfig
from codetodoc.core.errors import CaptureFailure, DimensionError, ExportError, MissingContentError
from codetodoc.core.helpers import mm_to_pt, to_byte_array, to_widestring
from codetodoc.core.models import (
    Bitmap,
    ExportRequest,
    OutputBlob,
    PageGeometry,
    PagePlacement,
    PaginationMode,
)
from codetodoc.core.page_splitter import PageSplitter
from codetodoc.output.header import DocumentHeader

logger = logging.getLogger(__name__)

MIME_PDF = "application/pdf"

SUBJECT_CODE = "Source Code"
SUBJECT_MARKUP = "HTML Document"

STANDARD_FONT = "Helvetica"

# (text size pt, x mm, baseline mm from page top)
TITLE_STYLE = (20.0, 20.0, 20.0)
AUTHOR_STYLE = (12.0, 20.0, 30.0)
DATE_STYLE = (10.0, 20.0, 40.0)
LANGUAGE_STYLE = (10.0, 20.0, 45.0)

# Separator rule under the header, mm
RULE_Y = 50.0
RULE_X0 = 20.0
RULE_X1 = 190.0
RULE_WIDTH_PT = 0.57

_BITMAP_MODES = frozenset({"RGB", "RGBA", "L"})


@dataclass
class _PageContext:
    """Per-assembly handles that must outlive page content generation."""

    doc: pdfium.PdfDocument
    page_height_pt: float
    keep_alive: list[Any]


class PdfAssembler:
    """Assemble a multi-page PDF from a captured bitmap."""

    def __init__(self, config: Optional[ExportConfig] = None) -> None:
        self._config = config or ExportConfig()
        self._splitter = PageSplitter()

    def assemble(
        self,
        request: ExportRequest,
        bitmap: Optional[Bitmap],
        placements: Optional[list[PagePlacement]] = None,
        *,
        rendered_markup: Optional[bool] = None,
        geometry: Optional[PageGeometry] = None,
        now: Optional[datetime] = None,
    ) -> OutputBlob:
        """Build the PDF.

        The bitmap is released before this returns, on success or failure.

        Args:
            request: Normalized export request (title/language resolved).
            bitmap: Captured content.
            placements: Page placements; computed from ``geometry`` if None.
            rendered_markup: True for rendered-markup captures (no header).
                Defaults to whether the request has a rendered region.
            geometry: Page geometry; defaults by capture kind.
            now: Generation timestamp for the header.

        Raises:
            MissingContentError: If the request has no text.
            CaptureFailure: If no bitmap was supplied.
            DimensionError: If the bitmap cannot be paginated.
        """
        if not request.has_content:
            raise MissingContentError("No content to export", stage="assemble")
        if bitmap is None:
            raise CaptureFailure("No bitmap available for PDF export", stage="assemble")

        rendered = request.is_rendered_capture if rendered_markup is None else rendered_markup
        if geometry is None:
            geometry = PageGeometry.for_markup() if rendered else PageGeometry.for_code()

        try:
            if placements is None:
                placements = self._splitter.split(bitmap, geometry)
            if not placements:
                raise DimensionError("No page placements to draw", stage="assemble")

            header = DocumentHeader.from_request(request, self._config, now)
            pdf_bytes = self._render_pages(bitmap, placements, geometry, header, rendered)
            pdf_bytes = self._apply_metadata(pdf_bytes, header, rendered)
        finally:
            bitmap.release()

        page_count = placements[-1].page_index + 1
        logger.info(
            "Assembled %s.pdf: %d page(s), %s capture",
            request.document_title,
            page_count,
            "markup" if rendered else "code",
        )
        return OutputBlob(
            content=pdf_bytes,
            suggested_file_name=f"{request.document_title}.pdf",
            mime_type=MIME_PDF,
        )

    def _render_pages(
        self,
        bitmap: Bitmap,
        placements: list[PagePlacement],
        geometry: PageGeometry,
        header: DocumentHeader,
        rendered: bool,
    ) -> bytes:
        doc = pdfium.PdfDocument.new()
        page_height_pt = mm_to_pt(geometry.page_height)
        ctx = _PageContext(doc=doc, page_height_pt=page_height_pt, keep_alive=[])
        pages: list[pdfium.PdfPage] = []
        try:
            page_count = placements[-1].page_index + 1
            for _ in range(page_count):
                pages.append(doc.new_page(mm_to_pt(geometry.page_width), page_height_pt))

            if not rendered:
                self._draw_header(ctx, pages[0], header)

            for placement in placements:
                self._place_image(ctx, pages[placement.page_index], bitmap, placement, geometry)

            for page in pages:
                page.gen_content()

            buffer = BytesIO()
            doc.save(buffer)
            return buffer.getvalue()
        finally:
            for page in pages:
                page.close()
            for obj in ctx.keep_alive:
                close = getattr(obj, "close", None)
                if close is not None:
                    close()
            doc.close()

    def _place_image(
        self,
        ctx: _PageContext,
        page: pdfium.PdfPage,
        bitmap: Bitmap,
        placement: PagePlacement,
        geometry: PageGeometry,
    ) -> None:
        px_per_mm = bitmap.pixel_width / geometry.image_width

        if self._config.pagination == PaginationMode.CROP:
            band_top = placement.band_top(geometry)
            # The last placement is full size; only the remainder is left to draw
            band_height = min(placement.slice_height, bitmap.pixel_height / px_per_mm - band_top)
            top_px = min(bitmap.pixel_height - 1, max(0, round(band_top * px_per_mm)))
            bottom_px = min(
                bitmap.pixel_height,
                max(top_px + 1, round((band_top + band_height) * px_per_mm)),
            )
            source = bitmap.image.crop((0, top_px, bitmap.pixel_width, bottom_px))
            ctx.keep_alive.append(source)
            top_mm = geometry.top_margin
            height_mm = (bottom_px - top_px) / px_per_mm
        else:
            # Full image at a shifted offset; the page box clips the rest
            source = bitmap.image
            top_mm = placement.vertical_offset
            height_mm = bitmap.pixel_height / px_per_mm

        if source.mode not in _BITMAP_MODES:
            source = source.convert("RGB")
            ctx.keep_alive.append(source)

        pdf_bitmap = pdfium.PdfBitmap.from_pil(source)
        ctx.keep_alive.append(pdf_bitmap)

        width_pt = mm_to_pt(geometry.image_width)
        height_pt = mm_to_pt(height_mm)
        x_pt = mm_to_pt(geometry.horizontal_margin)
        y_pt = ctx.page_height_pt - mm_to_pt(top_mm + height_mm)

        image_obj = pdfium.PdfImage.new(ctx.doc)
        image_obj.set_bitmap(pdf_bitmap)
        image_obj.set_matrix(pdfium.PdfMatrix().scale(width_pt, height_pt).translate(x_pt, y_pt))
        page.insert_obj(image_obj)

    def _draw_header(self, ctx: _PageContext, page: pdfium.PdfPage, header: DocumentHeader) -> None:
        font = self._load_font(ctx)
        author = header.author or self._config.default_author
        lines = [
            (header.title, TITLE_STYLE),
            (f"Author: {author}", AUTHOR_STYLE),
            (f"Generated on: {header.generated_on}", DATE_STYLE),
            (f"Language: {header.language}", LANGUAGE_STYLE),
        ]
        if self._config.header_font_path is None and not all(
            _is_latin1(text) for text, _ in lines
        ):
            logger.warning(
                "Header text is not Latin-1 and no header font is configured; "
                "%s cannot draw it. Set CODETODOC_HEADER_FONT_PATH to a TrueType font.",
                STANDARD_FONT,
            )
        for text, (size, x_mm, baseline_mm) in lines:
            self._draw_text(ctx, page, font, text, size, x_mm, baseline_mm)
        self._draw_rule(ctx, page)

    def _load_font(self, ctx: _PageContext) -> Any:
        font_path = self._config.header_font_path
        if font_path is not None:
            try:
                font_data = font_path.read_bytes()
            except OSError as exc:
                logger.warning("Cannot read header font %s: %s", font_path, exc)
            else:
                font_arr = to_byte_array(font_data)
                # PDFium reads the buffer lazily; keep it referenced
                ctx.keep_alive.append(font_arr)
                handle = pdfium.raw.FPDFText_LoadFont(
                    ctx.doc.raw,
                    font_arr,
                    ctypes.c_uint(len(font_data)),
                    ctypes.c_int(pdfium.raw.FPDF_FONT_TRUETYPE),
                    ctypes.c_int(1),  # CID mode for non-Latin titles
                )
                if handle:
                    return handle
                logger.warning("PDFium rejected header font %s; using %s", font_path, STANDARD_FONT)

        handle = pdfium.raw.FPDFText_LoadStandardFont(ctx.doc.raw, STANDARD_FONT.encode("ascii"))
        if not handle:
            raise ExportError(f"Failed to load standard font {STANDARD_FONT}", stage="assemble")
        return handle

    def _draw_text(
        self,
        ctx: _PageContext,
        page: pdfium.PdfPage,
        font: Any,
        text: str,
        size: float,
        x_mm: float,
        baseline_mm: float,
    ) -> None:
        text_obj = pdfium.raw.FPDFPageObj_CreateTextObj(ctx.doc.raw, font, ctypes.c_float(size))
        if not text_obj:
            raise ExportError("Failed to create header text object", stage="assemble")

        if not pdfium.raw.FPDFText_SetText(text_obj, to_widestring(text)):
            pdfium.raw.FPDFPageObj_Destroy(text_obj)
            raise ExportError(f"Failed to set header text {text!r}", stage="assemble")

        pdfium.raw.FPDFPageObj_SetFillColor(text_obj, 0, 0, 0, 255)
        pdfium.raw.FPDFPageObj_Transform(
            text_obj,
            ctypes.c_double(1.0),
            ctypes.c_double(0.0),
            ctypes.c_double(0.0),
            ctypes.c_double(1.0),
            ctypes.c_double(mm_to_pt(x_mm)),
            ctypes.c_double(ctx.page_height_pt - mm_to_pt(baseline_mm)),
        )
        pdfium.raw.FPDFPage_InsertObject(page.raw, text_obj)

    def _draw_rule(self, ctx: _PageContext, page: pdfium.PdfPage) -> None:
        y_pt = ctx.page_height_pt - mm_to_pt(RULE_Y)
        path = pdfium.raw.FPDFPageObj_CreateNewPath(
            ctypes.c_float(mm_to_pt(RULE_X0)), ctypes.c_float(y_pt)
        )
        pdfium.raw.FPDFPath_LineTo(path, ctypes.c_float(mm_to_pt(RULE_X1)), ctypes.c_float(y_pt))
        pdfium.raw.FPDFPageObj_SetStrokeColor(path, 0, 0, 0, 255)
        pdfium.raw.FPDFPageObj_SetStrokeWidth(path, ctypes.c_float(RULE_WIDTH_PT))
        # Draw mode: stroke only (fill_mode=0, stroke=1)
        pdfium.raw.FPDFPath_SetDrawMode(path, 0, ctypes.c_int(1))
        pdfium.raw.FPDFPage_InsertObject(page.raw, path)

    def _apply_metadata(self, pdf_bytes: bytes, header: DocumentHeader, rendered: bool) -> bytes:
        """Write document info and recompress streams."""
        author = header.author or self._config.default_author
        with pikepdf.open(BytesIO(pdf_bytes)) as pdf:
            info = pdf.docinfo
            info["/Title"] = pikepdf.String(header.title)
            info["/Author"] = pikepdf.String(author)
            info["/Subject"] = pikepdf.String(SUBJECT_MARKUP if rendered else SUBJECT_CODE)
            info["/Creator"] = pikepdf.String(self._config.creator)
            info["/CreationDate"] = pikepdf.String(f"D:{datetime.now():%Y%m%d%H%M%S}")

            buffer = BytesIO()
            pdf.save(buffer, compress_streams=True)
        return buffer.getvalue()


def _is_latin1(text: str) -> bool:
    try:
        text.encode("latin-1")
    except UnicodeEncodeError:
        return False
    return True
