"""Primitive Capture Stage - Read text runs and ruling strokes from a PDF.

Uses PyMuPDF (fitz) to decode each page into:
- text fragments (span text + ascent/descent box)
- straight path segments flattened from the page's vector drawings

PyMuPDF reports coordinates with a top-left origin; everything is flipped
here to the bottom-left origin the rest of the pipeline works in.
"""

import base64
import binascii
from pathlib import Path
from typing import Iterator, Optional, Union

import fitz  # PyMuPDF

from pdfnorm.config import Settings, settings
from pdfnorm.exceptions import InputError, PageCaptureError
from pdfnorm.logger import logger
from pdfnorm.models import BoundingBox, PageCapture, PathSegment, TextFragment

Point = tuple[float, float]

# Consecutive points closer than this are the same point
SAME_POINT_EPS = 0.001


def _same_point(a: Point, b: Point) -> bool:
    return abs(a[0] - b[0]) < SAME_POINT_EPS and abs(a[1] - b[1]) < SAME_POINT_EPS


def _append_point(points: list[Point], point: Point) -> None:
    if not points or not _same_point(points[-1], point):
        points.append(point)


class PdfCapture:
    """Decodes PDF pages into text fragments and path segments."""

    def __init__(self, config: Optional[Settings] = None):
        """Initialize capture.

        Args:
            config: Settings providing ``min_line_len`` (default: module settings).
        """
        self.config = config or settings

    # ---------- Opening documents ----------

    @staticmethod
    def open_file(pdf_path: Union[str, Path]) -> fitz.Document:
        """Open a PDF from disk."""
        pdf_path = Path(pdf_path)
        if not pdf_path.exists():
            raise InputError(f"PDF not found: {pdf_path}")
        try:
            return fitz.open(str(pdf_path), filetype="pdf")
        except RuntimeError as exc:
            raise InputError(f"unreadable PDF: {pdf_path}") from exc

    @staticmethod
    def open_bytes(data: bytes) -> fitz.Document:
        """Open a PDF from an in-memory byte string."""
        if not data:
            raise InputError("missing pdf data")
        try:
            return fitz.open(stream=data, filetype="pdf")
        except RuntimeError as exc:
            raise InputError("unreadable PDF data") from exc

    @classmethod
    def open_base64(cls, encoded: str) -> fitz.Document:
        """Open a PDF sent as a base64 string."""
        if not encoded or not encoded.strip():
            raise InputError("missing base64")
        try:
            data = base64.b64decode(encoded, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise InputError("invalid base64") from exc
        return cls.open_bytes(data)

    # ---------- Capture ----------

    def iter_pages(self, pdf_doc: fitz.Document, strict: bool = True) -> Iterator[PageCapture]:
        """Capture the pages of an open document one at a time.

        A page is only decoded when the consumer asks for it, so the caller
        can drop each page's primitives before the next page is read.

        Args:
            pdf_doc: Open PyMuPDF document.
            strict: Re-raise the first page failure; when False the failing
                page is logged and skipped.

        Yields:
            One PageCapture per decoded page, in page order.
        """
        if pdf_doc.page_count == 0:
            raise InputError("document has no pages")

        captured = 0
        for index in range(pdf_doc.page_count):
            try:
                capture = self.capture_page(pdf_doc[index], index + 1)
            except PageCaptureError as exc:
                if strict:
                    raise
                logger.warn("page skipped", page=exc.page_number, error=str(exc))
                continue
            captured += 1
            yield capture

        logger.info("document captured", pages=captured)

    def capture_document(self, pdf_doc: fitz.Document, strict: bool = True) -> list[PageCapture]:
        """Capture every page of an open document into a list."""
        return list(self.iter_pages(pdf_doc, strict=strict))

    def capture_page(self, page: fitz.Page, page_number: int) -> PageCapture:
        """Capture fragments and segments of a single page.

        Args:
            page: PyMuPDF page.
            page_number: 1-indexed page number.

        Returns:
            PageCapture in bottom-left coordinates.
        """
        height = page.rect.height
        try:
            fragments = self._extract_fragments(page, height)
            segments = self._extract_segments(page, height)
        except (RuntimeError, ValueError) as exc:
            raise PageCaptureError(
                f"failed to decode page {page_number}: {exc}", page_number=page_number
            ) from exc

        logger.debug(
            "page captured",
            page=page_number,
            fragments=len(fragments),
            segments=len(segments),
        )
        return PageCapture(
            page_number=page_number,
            width=page.rect.width,
            height=height,
            fragments=fragments,
            segments=segments,
        )

    def _extract_fragments(self, page: fitz.Page, page_height: float) -> list[TextFragment]:
        """One fragment per non-blank span."""
        fragments = []
        text_dict = page.get_text("dict")
        for block in text_dict.get("blocks", []):
            if block.get("type", 0) != 0:
                continue  # image block
            for line in block.get("lines", []):
                for span in line.get("spans", []):
                    text = span.get("text", "")
                    if not text.strip():
                        continue
                    x0, y0, x1, y1 = span["bbox"]
                    fragments.append(
                        TextFragment(
                            text=text,
                            bbox=BoundingBox.from_edges(x0, page_height - y1, x1, page_height - y0),
                        )
                    )
        return fragments

    def _extract_segments(self, page: fitz.Page, page_height: float) -> list[PathSegment]:
        """Flatten drawings into straight segments of at least ``min_line_len``."""
        segments = []
        for path in page.get_drawings():
            for points, closed in self._subpaths(path, page_height):
                for a, b in zip(points, points[1:]):
                    self._add_segment(segments, a, b)
                if closed and len(points) > 2:
                    self._add_segment(segments, points[-1], points[0])
        return segments

    def _subpaths(self, path: dict, page_height: float) -> list[tuple[list[Point], bool]]:
        """Split one drawing into (points, closed) polylines."""

        def flip(p) -> Point:
            return (p.x, page_height - p.y)

        subpaths: list[tuple[list[Point], bool]] = []
        current: list[Point] = []
        for item in path.get("items", []):
            op = item[0]
            if op in ("l", "c"):
                start = flip(item[1])
                # A stroke not starting at the pen position opens a new subpath
                if current and not _same_point(current[-1], start):
                    subpaths.append((current, False))
                    current = []
                # Curves contribute only their base points
                _append_point(current, start)
                _append_point(current, flip(item[-1]))
            elif op == "re":
                rect = item[1]
                corners = [
                    (rect.x0, page_height - rect.y0),
                    (rect.x1, page_height - rect.y0),
                    (rect.x1, page_height - rect.y1),
                    (rect.x0, page_height - rect.y1),
                ]
                subpaths.append((corners, True))
            elif op == "qu":
                quad = item[1]
                subpaths.append(([flip(quad.ul), flip(quad.ur), flip(quad.lr), flip(quad.ll)], True))

        if current:
            subpaths.append((current, bool(path.get("closePath", False))))
        return subpaths

    def _add_segment(self, segments: list[PathSegment], a: Point, b: Point) -> None:
        segment = PathSegment(x1=a[0], y1=a[1], x2=b[0], y2=b[1])
        if segment.length >= self.config.min_line_len:
            segments.append(segment)
