# SPDX-License-Identifier: Apache-2.0
"""Export pipeline package."""

from codetodoc.core.errors import (
    CaptureFailure,
    DimensionError,
    ExportError,
    MissingContentError,
    UnsupportedFormatError,
)

from .export_pipeline import ExportPipeline, build_preview, export_document
from .progress import ProgressCallback

__all__ = [
    "CaptureFailure",
    "DimensionError",
    "ExportError",
    "ExportPipeline",
    "MissingContentError",
    "ProgressCallback",
    "UnsupportedFormatError",
    "build_preview",
    "export_document",
]
