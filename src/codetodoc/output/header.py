# SPDX-License-Identifier: Apache-2.0
"""Document header fields shared by every output format."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from codetodoc.config import APP_NAME, ExportConfig
from codetodoc.core.models import ExportRequest

FOOTER_TEXT = f"Generated by {APP_NAME}"


@dataclass(frozen=True)
class DocumentHeader:
    """Header block contents.

    ``author`` is None when the request carries no author; the PDF header
    substitutes the configured default, text formats omit the line.
    """

    title: str
    author: Optional[str]
    generated_on: str
    language: str

    @classmethod
    def from_request(
        cls,
        request: ExportRequest,
        config: ExportConfig,
        now: Optional[datetime] = None,
    ) -> DocumentHeader:
        moment = now or datetime.now()
        return cls(
            title=request.document_title,
            author=request.author_name.strip() or None,
            generated_on=moment.strftime(config.date_format),
            language=request.source_language,
        )
