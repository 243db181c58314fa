# SPDX-License-Identifier: Apache-2.0
"""Error definitions for the export pipeline."""

from __future__ import annotations


class ExportError(Exception):
    """Base exception for export errors."""

    def __init__(
        self,
        message: str,
        stage: str,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.stage = stage
        self.cause = cause

    def __str__(self) -> str:
        text = f"[{self.stage}] {self.message}"
        if self.cause is not None:
            text += f" (caused by: {self.cause})"
        return text


class MissingContentError(ExportError):
    """No text was supplied. User-correctable."""


class CaptureFailure(ExportError):
    """A rendering surface could not be captured into a bitmap."""


class DimensionError(ExportError):
    """Degenerate bitmap dimensions."""


class UnsupportedFormatError(ExportError):
    """An export format outside pdf/docx/txt/html was requested."""
