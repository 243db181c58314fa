# SPDX-License-Identifier: Apache-2.0
"""Core models, language detection and pagination."""

from .errors import (
    CaptureFailure,
    DimensionError,
    ExportError,
    MissingContentError,
    UnsupportedFormatError,
)
from .language import LanguageClassifier, classify, resolve_language
from .models import (
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
    PaginationMode,
    Severity,
)
from .page_splitter import PageSplitter, split_pages

__all__ = [
    "Bitmap",
    "CaptureFailure",
    "CodeRegion",
    "DimensionError",
    "ExportError",
    "ExportFormat",
    "ExportOutcome",
    "ExportRequest",
    "LanguageClassifier",
    "MarkupRegion",
    "MissingContentError",
    "Notification",
    "OutputBlob",
    "PageGeometry",
    "PagePlacement",
    "PageSplitter",
    "PaginationMode",
    "Severity",
    "UnsupportedFormatError",
    "classify",
    "resolve_language",
    "split_pages",
]
