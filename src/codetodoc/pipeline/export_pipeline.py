# SPDX-License-Identifier: Apache-2.0
"""Document export pipeline implementation."""

from __future__ import annotations

import asyncio
import concurrent.futures
import logging
from dataclasses import replace
from typing import Optional

from codetodoc.config import ExportConfig
from codetodoc.core.errors import (
    CaptureFailure,
    ExportError,
    MissingContentError,
    UnsupportedFormatError,
)
from codetodoc.core.language import resolve_language
from codetodoc.core.models import (
    Bitmap,
    CodeRegion,
    ExportFormat,
    ExportOutcome,
    ExportRequest,
    MarkupRegion,
    Notification,
    OutputBlob,
    PageGeometry,
    PagePlacement,
    Severity,
)
from codetodoc.core.page_splitter import PageSplitter
from codetodoc.output.pdf_assembler import PdfAssembler
from codetodoc.output.text_formatter import TextDocumentFormatter
from codetodoc.pipeline.progress import ProgressCallback
from codetodoc.render.base import ContentRasterizer
from codetodoc.render.code_rasterizer import CodeRasterizer
from codetodoc.render.markup_rasterizer import MarkupRasterizer

logger = logging.getLogger(__name__)

MSG_NO_CONTENT = "Please upload a file first"
MSG_INVALID_MARKUP = "Please paste valid HTML code first"


def build_preview(raw_text: str, language: str, viewport_width: int = 800) -> MarkupRegion:
    """Validate pasted markup and wrap it for rendered capture.

    Raises:
        MissingContentError: If the text is blank or not tagged as HTML.
    """
    if not raw_text.strip() or language != "html":
        raise MissingContentError(MSG_INVALID_MARKUP, stage="preview")
    return MarkupRegion(html=raw_text, viewport_width=viewport_width)


def _file_stem(file_name: str) -> str:
    name = file_name.replace("\\", "/").rsplit("/", 1)[-1]
    return name.split(".", 1)[0].strip()


class ExportPipeline:
    """Turn an export request into a finished document.

    ``export`` raises on failure; ``run`` is the UI-facing boundary that
    converts every failure into a notification and never returns a
    partial document.
    """

    def __init__(
        self,
        config: ExportConfig | None = None,
        code_rasterizer: ContentRasterizer | None = None,
        markup_rasterizer: ContentRasterizer | None = None,
        progress_callback: ProgressCallback | None = None,
    ) -> None:
        """Initialize ExportPipeline."""
        self._config = config or ExportConfig()
        self._code_rasterizer = code_rasterizer or CodeRasterizer(
            font_path=self._config.code_font_path
        )
        self._markup_rasterizer = markup_rasterizer or MarkupRasterizer(
            timeout=self._config.capture_timeout
        )
        self._progress_callback = progress_callback
        self._splitter = PageSplitter()
        self._assembler = PdfAssembler(self._config)
        self._formatter = TextDocumentFormatter(self._config)

    async def export(self, request: ExportRequest) -> OutputBlob:
        """Export ``request`` in its target format.

        Raises:
            MissingContentError: If the request has no text (any format).
            CaptureFailure: If neither markup nor code could be captured.
            DimensionError: If the captured bitmap is degenerate.
            UnsupportedFormatError: On an invalid format (contract violation).
            ExportError: On any other assembly failure.
        """
        if not request.has_content:
            raise MissingContentError(MSG_NO_CONTENT, stage="validate")

        normalized = self.normalize(request)
        if normalized.target_format == ExportFormat.PDF:
            return await self._export_pdf(normalized)
        return self._stage_format(normalized)

    async def run(self, request: ExportRequest) -> ExportOutcome:
        """Export and report the result as a user-facing notification."""
        label = request.target_format.value.upper()
        try:
            blob = await self.export(request)
        except MissingContentError as exc:
            logger.warning("Export rejected: %s", exc)
            return ExportOutcome(Notification(Severity.WARNING, exc.message))
        except UnsupportedFormatError as exc:
            logger.error("Export contract violation: %s", exc)
            return ExportOutcome(Notification(Severity.ERROR, f"Error exporting to {label}"))
        except ExportError as exc:
            logger.error("Error exporting to %s: %s", label, exc)
            return ExportOutcome(Notification(Severity.ERROR, f"Error exporting to {label}"))
        except Exception:
            logger.exception("Unexpected error exporting to %s", label)
            return ExportOutcome(Notification(Severity.ERROR, f"Error exporting to {label}"))

        if request.target_format == ExportFormat.PDF:
            message = "PDF exported successfully"
        else:
            message = f"Exported to {label} successfully"
        return ExportOutcome(Notification(Severity.SUCCESS, message), blob=blob)

    def export_sync(self, request: ExportRequest) -> OutputBlob:
        """Blocking wrapper around ``export``."""
        return asyncio.run(self.export(request))

    def run_sync(self, request: ExportRequest) -> ExportOutcome:
        """Blocking wrapper around ``run``."""
        return asyncio.run(self.run(request))

    def normalize(self, request: ExportRequest) -> ExportRequest:
        """Fill in title and language fallbacks.

        Title: explicit title, else file name stem, else configured default.
        Language: explicit tag, else classified from the file name, else
        configured default.
        """
        title = (
            request.document_title.strip()
            or _file_stem(request.file_name)
            or self._config.default_title
        )
        language = request.source_language.strip() or resolve_language(
            request.file_name, self._config.default_language
        )
        return replace(request, document_title=title, source_language=language)

    async def _export_pdf(self, request: ExportRequest) -> OutputBlob:
        bitmap, rendered = await self._stage_rasterize(request)
        geometry = PageGeometry.for_markup() if rendered else PageGeometry.for_code()
        try:
            placements = self._stage_paginate(bitmap, geometry)
        except Exception:
            bitmap.release()
            raise
        return self._stage_assemble(request, bitmap, placements, geometry, rendered)

    async def _stage_rasterize(self, request: ExportRequest) -> tuple[Bitmap, bool]:
        scale = self._config.scale_factor
        region = request.rendered_region

        if region is not None:
            try:
                bitmap = await self._capture_markup(region, scale)
            except asyncio.TimeoutError:
                logger.warning(
                    "Markup capture did not finish within %.1fs; capturing code listing instead",
                    self._config.capture_timeout,
                )
            except CaptureFailure as exc:
                logger.warning("Markup capture failed (%s); capturing code listing instead", exc)
            except Exception:
                logger.warning(
                    "Markup capture raised unexpectedly; capturing code listing instead",
                    exc_info=True,
                )
            else:
                self._notify("rasterize", 1, 1, "markup")
                return bitmap, True

        code_region = CodeRegion(
            text=request.raw_text,
            language=request.source_language,
            theme=self._config.theme,
            line_numbers=self._config.line_numbers,
            font_size=self._config.font_size,
        )
        try:
            bitmap = await asyncio.to_thread(self._code_rasterizer.rasterize, code_region, scale)
        except CaptureFailure:
            raise
        except Exception as exc:
            raise CaptureFailure(
                "Code listing capture failed", stage="rasterize", cause=exc
            ) from exc

        self._notify("rasterize", 1, 1, "code")
        return bitmap, False

    async def _capture_markup(self, region: MarkupRegion, scale: float) -> Bitmap:
        """Run one markup capture on its own worker, bounded by the capture timeout.

        On timeout the worker is abandoned without waiting for it, and a
        bitmap it delivers late is released.
        """
        executor = concurrent.futures.ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="codetodoc-capture"
        )
        future = executor.submit(self._markup_rasterizer.rasterize, region, scale)
        try:
            return await asyncio.wait_for(
                asyncio.wrap_future(future), timeout=self._config.capture_timeout
            )
        except (asyncio.TimeoutError, asyncio.CancelledError):
            future.add_done_callback(_release_late_bitmap)
            raise
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

    def _stage_paginate(self, bitmap: Bitmap, geometry: PageGeometry) -> list[PagePlacement]:
        placements = self._splitter.split(bitmap, geometry)
        self._notify("paginate", len(placements), len(placements))
        return placements

    def _stage_assemble(
        self,
        request: ExportRequest,
        bitmap: Bitmap,
        placements: list[PagePlacement],
        geometry: PageGeometry,
        rendered: bool,
    ) -> OutputBlob:
        try:
            blob = self._assembler.assemble(
                request,
                bitmap,
                placements,
                rendered_markup=rendered,
                geometry=geometry,
            )
        except ExportError:
            raise
        except Exception as exc:
            raise ExportError("PDF assembly failed", stage="assemble", cause=exc) from exc

        self._notify("assemble", 1, 1)
        return blob

    def _stage_format(self, request: ExportRequest) -> OutputBlob:
        blob = self._formatter.format(request)
        self._notify("format", 1, 1, request.target_format.value)
        return blob

    def _notify(self, stage: str, current: int, total: int, message: str = "") -> None:
        if self._progress_callback is None:
            return
        self._progress_callback(stage, current, total, message)


def _release_late_bitmap(future: concurrent.futures.Future[Bitmap]) -> None:
    if future.cancelled() or future.exception() is not None:
        return
    future.result().release()
    logger.debug("Released markup capture that finished after the timeout")


def export_document(
    request: ExportRequest,
    config: Optional[ExportConfig] = None,
) -> OutputBlob:
    """Convenience function to export one request synchronously."""
    return ExportPipeline(config).export_sync(request)
