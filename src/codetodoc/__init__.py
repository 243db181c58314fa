# SPDX-License-Identifier: Apache-2.0
"""codetodoc: export source code or pasted HTML as PDF, Word, text or HTML."""

from codetodoc.config import ExportConfig
from codetodoc.core.models import ExportFormat, ExportOutcome, ExportRequest, OutputBlob
from codetodoc.pipeline.export_pipeline import ExportPipeline, export_document

__version__ = "0.1.0"

__all__ = [
    "ExportConfig",
    "ExportFormat",
    "ExportOutcome",
    "ExportPipeline",
    "ExportRequest",
    "OutputBlob",
    "export_document",
]
