"""Tests for page extraction and the end-to-end pipeline."""

from unittest.mock import MagicMock, patch

import fitz
import pytest

from conftest import fragment, ruled_grid
from pdfnorm.exceptions import InputError
from pdfnorm.models import PageCapture, PageResult, Payload
from pdfnorm.pipeline import DocumentPipeline, PageExtractor, PdfCapture


@pytest.fixture
def invoice_capture():
    """Ruled 2x3 table under a title line, bottom-left coordinates."""
    return PageCapture(
        page_number=1,
        width=595.3,
        height=841.9,
        segments=ruled_grid([50, 150, 250], [600, 620, 640, 660]),
        fragments=[
            fragment("Invoice", 50, 700, 40),
            fragment("42", 95, 700.4, 12),
            fragment("Item", 55, 645, 22),
            fragment("Qty", 155, 645, 18),
            fragment("Bolt", 55, 625, 22),
            fragment("10", 155, 625, 12),
            fragment("Nut", 55, 605, 18),
            fragment("5", 155, 605, 6),
        ],
    )


class TestPageExtractor:
    """Tests for per-page extraction."""

    def test_blocks_and_lines(self, config, invoice_capture):
        result = PageExtractor(config).extract_page(invoice_capture)

        assert (result.page, result.width, result.height) == (1, 595, 842)
        assert sorted(b.text for b in result.blocks) == ["10", "5", "Bolt", "Item", "Nut", "Qty"]
        assert [line.text for line in result.lines] == ["Invoice 42"]

    def test_coordinates_are_whole_points(self, config):
        capture = PageCapture(
            page_number=1,
            width=100,
            height=100,
            fragments=[fragment("x", 10.5, 20.5, 11.5, height=9.5)],
        )
        line = PageExtractor(config).extract_page(capture).lines[0]

        assert (line.bbox.x, line.bbox.y, line.bbox.width, line.bbox.height) == (10, 20, 12, 10)

    def test_page_without_grid(self, config):
        capture = PageCapture(page_number=2, width=100, height=100)
        result = PageExtractor(config).extract_page(capture)

        assert result.blocks == []
        assert result.lines == []

    def test_missing_captures_raise(self, config):
        with pytest.raises(InputError):
            PageExtractor(config).extract(None)


class TestDocumentPipeline:
    """Tests for pipeline orchestration."""

    def test_payloads_from_captures(self, config, invoice_capture):
        pipeline = DocumentPipeline(config)
        pages = pipeline.extractor.extract([invoice_capture])

        assert pipeline.to_payloads(pages) == [
            Payload(
                header="Invoice 42",
                table=[{"item": "Bolt", "qty": "10"}, {"item": "Nut", "qty": "5"}],
            )
        ]

    def test_text_from_captures(self, config, invoice_capture):
        pipeline = DocumentPipeline(config)
        text = pipeline.to_text(pipeline.extractor.extract([invoice_capture]))

        assert text.startswith("Invoice 42\n\n\n----\n### Item:\nBolt\n\n")

    def test_items_from_captures(self, config, invoice_capture):
        pipeline = DocumentPipeline(config)
        items = pipeline.build_items(pipeline.extractor.extract([invoice_capture]))

        assert [item.is_table for item in items] == [False, True]
        assert items[1].table.cells == [["Item", "Qty"], ["Bolt", "10"], ["Nut", "5"]]

    @patch.object(PdfCapture, "iter_pages")
    @patch.object(PdfCapture, "open_bytes")
    def test_owned_document_is_closed(self, mock_open, mock_capture, config, invoice_capture):
        doc = MagicMock()
        mock_open.return_value = doc
        mock_capture.return_value = [invoice_capture]

        pages = DocumentPipeline(config).extract_pages(b"%PDF-1.7", strict=False)

        assert len(pages) == 1
        mock_capture.assert_called_once_with(doc, strict=False)
        doc.close.assert_called_once()

    @patch.object(PdfCapture, "iter_pages")
    @patch.object(PdfCapture, "open_file")
    def test_closed_on_failure(self, mock_open, mock_capture, config, tmp_path):
        doc = MagicMock()
        mock_open.return_value = doc
        mock_capture.side_effect = InputError("document has no pages")

        with pytest.raises(InputError):
            DocumentPipeline(config).extract_pages(tmp_path / "empty.pdf")
        doc.close.assert_called_once()

    @patch.object(PdfCapture, "iter_pages")
    def test_caller_document_left_open(self, mock_capture, config):
        doc = MagicMock()
        mock_capture.return_value = []

        assert DocumentPipeline(config).extract_pages(doc) == []
        doc.close.assert_not_called()

    def test_missing_file(self, config, tmp_path):
        with pytest.raises(InputError):
            DocumentPipeline(config).extract_pages(tmp_path / "nope.pdf")

    def test_each_page_extracted_before_next_capture(self, config, invoice_capture):
        events = []

        def captures(doc, strict):
            for number in (1, 2):
                events.append(("capture", number))
                yield invoice_capture.model_copy(update={"page_number": number})

        pipeline = DocumentPipeline(config)
        extract_page = pipeline.extractor.extract_page

        def recording_extract(capture):
            events.append(("extract", capture.page_number))
            return extract_page(capture)

        with patch.object(pipeline.capture, "iter_pages", side_effect=captures), patch.object(
            pipeline.extractor, "extract_page", side_effect=recording_extract
        ):
            pages = pipeline.extract_pages(MagicMock())

        assert [p.page for p in pages] == [1, 2]
        assert events == [("capture", 1), ("extract", 1), ("capture", 2), ("extract", 2)]


class TestEndToEnd:
    """Round trip through a real PDF written with PyMuPDF."""

    @pytest.fixture
    def invoice_pdf(self):
        doc = fitz.open()
        page = doc.new_page(width=600, height=800)
        page.insert_text((50, 100), "Invoice 42", fontsize=10)

        # Table rows at y=200..260 (top-left origin)
        for x in (50, 150, 250):
            page.draw_line((x, 200), (x, 260))
        for y in (200, 220, 240, 260):
            page.draw_line((50, y), (250, y))

        for row, (left, right) in enumerate([("Item", "Qty"), ("Bolt", "10"), ("Nut", "5")]):
            baseline = 215 + row * 20
            page.insert_text((55, baseline), left, fontsize=10)
            page.insert_text((155, baseline), right, fontsize=10)

        data = doc.tobytes()
        doc.close()
        return data

    def test_payloads(self, config, invoice_pdf):
        pipeline = DocumentPipeline(config)
        pages = pipeline.extract_pages(invoice_pdf)

        assert isinstance(pages[0], PageResult)
        assert pipeline.to_payloads(pages) == [
            Payload(
                header="Invoice 42",
                table=[{"item": "Bolt", "qty": "10"}, {"item": "Nut", "qty": "5"}],
            )
        ]
