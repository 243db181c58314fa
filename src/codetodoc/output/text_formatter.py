# SPDX-License-Identifier: Apache-2.0
"""Text-based output formats: plain text, styled HTML, Word-compatible HTML.

None of these rasterize anything; the raw text is re-serialized into a
wrapper document. Every piece of user text embedded in markup is escaped
exactly once.
"""

from __future__ import annotations

import html
import logging
from datetime import datetime
from typing import Optional

from codetodoc.config import ExportConfig
from codetodoc.core.errors import UnsupportedFormatError
from codetodoc.core.models import ExportFormat, ExportRequest, OutputBlob
from codetodoc.output.header import FOOTER_TEXT, DocumentHeader

logger = logging.getLogger(__name__)

MIME_TXT = "text/plain;charset=utf-8"
MIME_HTML = "text/html;charset=utf-8"
MIME_WORD = "application/vnd.ms-word;charset=utf-8"

HTML_STYLE = """\
    body {
      font-family: Arial, sans-serif;
      line-height: 1.6;
      max-width: 800px;
      margin: 0 auto;
      padding: 20px;
    }
    .header {
      margin-bottom: 20px;
    }
    .code-container {
      border-radius: 8px;
      overflow: hidden;
    }
    pre {
      margin: 0;
      padding: 16px;
      overflow: auto;
      background-color: #282c34;
      color: #abb2bf;
      border-radius: 8px;
      font-family: 'Courier New', Courier, monospace;
    }
    .footer {
      margin-top: 20px;
      font-size: 0.8em;
      color: #666;
    }"""

WORD_STYLE = """\
    body {
      font-family: 'Calibri', sans-serif;
      line-height: 1.5;
    }
    .code {
      font-family: 'Courier New', monospace;
      background-color: #f5f5f5;
      padding: 10px;
      border: 1px solid #ddd;
      white-space: pre-wrap;
      word-wrap: break-word;
    }"""

# Makes Word open the file in Print layout at 100% zoom
WORD_DOCUMENT_SETTINGS = """\
  <!--[if gte mso 9]>
  <xml>
    <w:WordDocument>
      <w:View>Print</w:View>
      <w:Zoom>100</w:Zoom>
    </w:WordDocument>
  </xml>
  <![endif]-->"""


def escape_text(text: str) -> str:
    """Escape text for embedding in HTML element content."""
    return html.escape(text, quote=False)


class TextDocumentFormatter:
    """Build txt/html/docx outputs directly from raw text."""

    def __init__(self, config: Optional[ExportConfig] = None) -> None:
        self._config = config or ExportConfig()

    def format(self, request: ExportRequest, now: Optional[datetime] = None) -> OutputBlob:
        """Dispatch on ``request.target_format``.

        Raises:
            UnsupportedFormatError: If the format is not txt, html or docx.
        """
        fmt = request.target_format
        if fmt == ExportFormat.TXT:
            blob = self.to_plain_text(request)
        elif fmt == ExportFormat.HTML:
            blob = self.to_html_document(request, now=now)
        elif fmt == ExportFormat.DOCX:
            blob = self.to_word_document(request, now=now)
        else:
            raise UnsupportedFormatError(
                f"Text formatter cannot produce {fmt!r}", stage="format"
            )
        logger.info("Formatted %s as %s", blob.suggested_file_name, blob.mime_type)
        return blob

    def to_plain_text(self, request: ExportRequest) -> OutputBlob:
        """Raw text, unchanged."""
        return OutputBlob(
            content=request.raw_text,
            suggested_file_name=f"{request.document_title}.txt",
            mime_type=MIME_TXT,
        )

    def to_html_document(
        self, request: ExportRequest, now: Optional[datetime] = None
    ) -> OutputBlob:
        """Standalone HTML page with a styled code block."""
        header = DocumentHeader.from_request(request, self._config, now)
        title = escape_text(header.title)
        parts = [
            "<!DOCTYPE html>",
            '<html lang="en">',
            "<head>",
            '  <meta charset="UTF-8">',
            '  <meta name="viewport" content="width=device-width, initial-scale=1.0">',
            f"  <title>{title}</title>",
            "  <style>",
            HTML_STYLE,
            "  </style>",
            "</head>",
            "<body>",
            '  <div class="header">',
            *("    " + line for line in _header_lines(header)),
            "  </div>",
            '  <div class="code-container">',
            f"    <pre><code>{escape_text(request.raw_text)}</code></pre>",
            "  </div>",
            '  <div class="footer">',
            f"    <p>{FOOTER_TEXT}</p>",
            "  </div>",
            "</body>",
            "</html>",
        ]
        return OutputBlob(
            content="\n".join(parts) + "\n",
            suggested_file_name=f"{request.document_title}.html",
            mime_type=MIME_HTML,
        )

    def to_word_document(
        self, request: ExportRequest, now: Optional[datetime] = None
    ) -> OutputBlob:
        """HTML carrying Office namespaces, opened by Word as a document."""
        header = DocumentHeader.from_request(request, self._config, now)
        title = escape_text(header.title)
        parts = [
            "<html xmlns:o='urn:schemas-microsoft-com:office:office'",
            "      xmlns:w='urn:schemas-microsoft-com:office:word'",
            "      xmlns='http://www.w3.org/TR/REC-html40'>",
            "<head>",
            '  <meta charset="UTF-8">',
            f"  <title>{title}</title>",
            WORD_DOCUMENT_SETTINGS,
            "  <style>",
            WORD_STYLE,
            "  </style>",
            "</head>",
            "<body>",
            *("  " + line for line in _header_lines(header)),
            f'  <div class="code">{escape_text(request.raw_text)}</div>',
            f"  <p>{FOOTER_TEXT}</p>",
            "</body>",
            "</html>",
        ]
        return OutputBlob(
            content="\n".join(parts) + "\n",
            suggested_file_name=f"{request.document_title}.docx",
            mime_type=MIME_WORD,
        )


def _header_lines(header: DocumentHeader) -> list[str]:
    lines = [f"<h1>{escape_text(header.title)}</h1>"]
    if header.author:
        lines.append(f"<p>Author: {escape_text(header.author)}</p>")
    lines.append(f"<p>Generated on: {escape_text(header.generated_on)}</p>")
    lines.append(f"<p>Language: {escape_text(header.language)}</p>")
    return lines
