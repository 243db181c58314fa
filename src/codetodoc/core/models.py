# SPDX-License-Identifier: Apache-2.0
"""Data models for the document export pipeline.

Every value here is created fresh for a single export call; nothing is
shared between calls.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Optional, Union

from codetodoc.core.errors import UnsupportedFormatError

if TYPE_CHECKING:
    from PIL import Image

# ISO A4, millimeters
A4_WIDTH_MM = 210.0
A4_HEIGHT_MM = 297.0

# Pasted markup gets these instead of a real file name/title
PASTED_FILE_NAME = "pasted-html.html"
PASTED_TITLE = "HTML Document"


class ExportFormat(str, Enum):
    """Target document format."""

    PDF = "pdf"
    DOCX = "docx"  # Word-compatible HTML, not OOXML
    TXT = "txt"
    HTML = "html"

    @classmethod
    def parse(cls, value: Union[str, "ExportFormat"]) -> ExportFormat:
        """Parse a format value (case-insensitive).

        Raises:
            UnsupportedFormatError: If the value names no known format.
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError as exc:
            raise UnsupportedFormatError(
                f"Unsupported export format: {value!r}", stage="format", cause=exc
            ) from exc


class PaginationMode(str, Enum):
    """How a tall bitmap is distributed across PDF pages."""

    CROP = "crop"  # Each page gets only its own band of the bitmap
    REDRAW = "redraw"  # Each page redraws the full bitmap, shifted upward


class Severity(str, Enum):
    """Notification severity for the UI layer."""

    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class MarkupRegion:
    """Handle to HTML markup that should be captured as rendered output.

    Attributes:
        html: Markup to render.
        viewport_width: Layout width in CSS pixels.
        base_url: Base for resolving relative resources (optional).
    """

    html: str
    viewport_width: int = 800
    base_url: Optional[str] = None


@dataclass(frozen=True)
class CodeRegion:
    """A code listing to be drawn as a highlighted preview block."""

    text: str
    language: str
    theme: str = "atomDark"
    line_numbers: bool = True
    font_size: int = 14


@dataclass
class ExportRequest:
    """Input of a single export.

    Attributes:
        raw_text: Source text (must be non-empty to export).
        source_language: Language tag shown in headers ("" = derive).
        document_title: Title ("" = derive from file_name).
        target_format: One of pdf/docx/txt/html.
        author_name: Author line (optional).
        rendered_region: Markup to capture rendered instead of as a listing.
        file_name: Uploaded file name, used only for fallbacks.
    """

    raw_text: str
    source_language: str = ""
    document_title: str = ""
    target_format: ExportFormat = ExportFormat.PDF
    author_name: str = ""
    rendered_region: Optional[MarkupRegion] = None
    file_name: str = ""

    def __post_init__(self) -> None:
        self.target_format = ExportFormat.parse(self.target_format)

    @classmethod
    def from_paste(
        cls,
        raw_text: str,
        target_format: Union[str, ExportFormat] = ExportFormat.PDF,
        author_name: str = "",
        rendered_region: Optional[MarkupRegion] = None,
    ) -> ExportRequest:
        """Build a request for markup pasted directly instead of uploaded."""
        return cls(
            raw_text=raw_text,
            source_language="html",
            document_title=PASTED_TITLE,
            target_format=ExportFormat.parse(target_format),
            author_name=author_name,
            rendered_region=rendered_region,
            file_name=PASTED_FILE_NAME,
        )

    @property
    def has_content(self) -> bool:
        return bool(self.raw_text)

    @property
    def is_rendered_capture(self) -> bool:
        return self.rendered_region is not None


@dataclass(frozen=True)
class Bitmap:
    """Rasterized content.

    Attributes:
        pixel_width: Width in pixels.
        pixel_height: Height in pixels.
        image: Pixel buffer.
    """

    pixel_width: int
    pixel_height: int
    image: Image.Image

    @classmethod
    def from_image(cls, image: Image.Image) -> Bitmap:
        return cls(pixel_width=image.width, pixel_height=image.height, image=image)

    def release(self) -> None:
        """Free the pixel buffer."""
        self.image.close()


@dataclass(frozen=True)
class PageGeometry:
    """Page size and margins in millimeters."""

    page_width: float = A4_WIDTH_MM
    page_height: float = A4_HEIGHT_MM
    horizontal_margin: float = 20.0
    top_margin: float = 10.0
    bottom_margin: float = 10.0

    @classmethod
    def for_code(cls) -> PageGeometry:
        """Geometry for code captures (header block above the image)."""
        return cls(top_margin=55.0, bottom_margin=10.0)

    @classmethod
    def for_markup(cls) -> PageGeometry:
        """Geometry for rendered-markup captures (minimal margins)."""
        return cls(top_margin=10.0, bottom_margin=10.0)

    @property
    def image_width(self) -> float:
        return self.page_width - 2 * self.horizontal_margin

    @property
    def usable_height(self) -> float:
        return self.page_height - self.top_margin - self.bottom_margin


@dataclass(frozen=True)
class PagePlacement:
    """Where the bitmap lands on one page.

    Attributes:
        page_index: 0-based page index.
        vertical_offset: Top edge of the full image on this page (mm from
            the page top). Negative once the image is shifted upward.
        slice_height: Height of the page band allotted to the image (mm).
            Full usable height on every page of a multi-page split.
    """

    page_index: int
    vertical_offset: float
    slice_height: float

    def band_top(self, geometry: PageGeometry) -> float:
        """Start of the revealed band, in image millimeters."""
        return geometry.top_margin - self.vertical_offset


@dataclass(frozen=True)
class OutputBlob:
    """Finished document, ready for delivery by the caller."""

    content: Union[bytes, str]
    suggested_file_name: str
    mime_type: str

    def as_bytes(self) -> bytes:
        if isinstance(self.content, bytes):
            return self.content
        return self.content.encode("utf-8")


@dataclass(frozen=True)
class Notification:
    """User-facing result message."""

    severity: Severity
    message: str


@dataclass(frozen=True)
class ExportOutcome:
    """Result of an export at the pipeline boundary."""

    notification: Notification
    blob: Optional[OutputBlob] = None

    @property
    def succeeded(self) -> bool:
        return self.blob is not None
