"""Pipeline runner - capture, extract, sequence and render one document."""

from pathlib import Path
from typing import Optional, Union

import fitz  # PyMuPDF

from pdfnorm.config import Settings, settings
from pdfnorm.logger import logger
from pdfnorm.models import DocumentItem, PageResult, Payload
from pdfnorm.pipeline.stage_capture import PdfCapture
from pdfnorm.pipeline.stage_extract import PageExtractor
from pdfnorm.pipeline.stage_render import JsonRenderer, TextRenderer
from pdfnorm.pipeline.stage_sequence import ItemSequencer

Source = Union[str, Path, bytes, fitz.Document]


class DocumentPipeline:
    """End-to-end normalizer for one PDF.

    Pages are processed independently; only the sequenced item list and
    the per-page average line heights span pages.
    """

    def __init__(self, config: Optional[Settings] = None):
        """Initialize pipeline.

        Args:
            config: Settings shared by every stage (default: module settings).
        """
        self.config = config or settings
        self.capture = PdfCapture(self.config)
        self.extractor = PageExtractor(self.config)
        self.sequencer = ItemSequencer(self.config)

    def open(self, source: Source) -> tuple[fitz.Document, bool]:
        """Open ``source``; the flag tells whether the caller must close it."""
        if isinstance(source, (str, Path)):
            return self.capture.open_file(source), True
        if isinstance(source, (bytes, bytearray)):
            return self.capture.open_bytes(bytes(source)), True
        return source, False

    def extract_pages(self, source: Source, strict: bool = True) -> list[PageResult]:
        """Capture and extract every page of ``source``.

        Each page is extracted as soon as it is captured; its primitives are
        released before the next page is read.

        Args:
            source: Path, raw PDF bytes or an open PyMuPDF document.
            strict: Re-raise page decoding failures instead of skipping the page.

        Returns:
            One PageResult per extracted page.
        """
        pdf_doc, owned = self.open(source)
        try:
            pages = self.extractor.extract(self.capture.iter_pages(pdf_doc, strict=strict))
        finally:
            if owned:
                pdf_doc.close()

        logger.info(
            "document extracted",
            pages=len(pages),
            blocks=sum(len(p.blocks) for p in pages),
            lines=sum(len(p.lines) for p in pages),
        )
        return pages

    def build_items(self, pages: list[PageResult]) -> list[DocumentItem]:
        """Sequence pages into the reading-order item stream."""
        return self.sequencer.build(pages)

    def to_text(
        self,
        pages: list[PageResult],
        set_headers: Optional[list[str]] = None,
        just_header_and_table: bool = False,
    ) -> str:
        """Render pages as flat text."""
        renderer = TextRenderer(self.config, set_headers, just_header_and_table)
        return renderer.render(pages)

    def to_payloads(
        self,
        pages: list[PageResult],
        set_headers: Optional[list[str]] = None,
        just_header_and_table: bool = True,
    ) -> list[Payload]:
        """Render pages as (header, table) payloads."""
        renderer = JsonRenderer(self.config, set_headers, just_header_and_table)
        return renderer.render(pages)
