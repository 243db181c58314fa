# SPDX-License-Identifier: Apache-2.0
"""Output format modules.

PDF assembly from captured bitmaps, and text-based formats (txt, html,
Word-compatible html) built directly from raw text.
"""

from codetodoc.output.header import DocumentHeader
from codetodoc.output.pdf_assembler import MIME_PDF, PdfAssembler
from codetodoc.output.text_formatter import (
    MIME_HTML,
    MIME_TXT,
    MIME_WORD,
    TextDocumentFormatter,
    escape_text,
)

__all__ = [
    "DocumentHeader",
    "MIME_HTML",
    "MIME_PDF",
    "MIME_TXT",
    "MIME_WORD",
    "PdfAssembler",
    "TextDocumentFormatter",
    "escape_text",
]
