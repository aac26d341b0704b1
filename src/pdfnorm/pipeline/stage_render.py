"""Record Rendering Stage - Flat text and (header, table) payloads.

Both renderers walk the sequenced item stream:
- line items form the header text; a blank line is inserted when the gap
  to the previous line exceeds ``big_gap_factor`` x the page's average
  line height
- table items use their first row as column headers unless headers are
  supplied; a first row repeating the headers is not emitted as data
"""

import re
import unicodedata
from typing import Optional

from pdfnorm.config import Settings, settings
from pdfnorm.models import DocumentItem, PageResult, Payload
from pdfnorm.pipeline.stage_sequence import ItemSequencer
from pdfnorm.pipeline.stage_subdoc import SubdocumentSplitter


def to_snake_key(text: Optional[str]) -> str:
    """Lowercase snake_case key without diacritics ('' for blank text)."""
    if not text or not text.strip():
        return ""
    # Lowercase first: some capitals lower to a letter plus a combining mark
    text = text.replace("\n", " ").strip().lower()

    decomposed = unicodedata.normalize("NFD", text)
    stripped = "".join(ch for ch in decomposed if unicodedata.category(ch) != "Mn")
    stripped = unicodedata.normalize("NFC", stripped)

    # Non-ASCII letters and digits are kept as-is
    chars = [ch if ch.isalnum() else "_" for ch in stripped]
    snake = re.sub(r"_+", "_", "".join(chars))
    return snake.strip("_")


def unique_column_keys(headers: list[str]) -> list[str]:
    """Snake-case keys for ``headers``, deduplicated with _2, _3, ... suffixes.

    Blank headers become ``col_<n>`` (1-indexed position).
    """
    keys: list[str] = []
    counts: dict[str, int] = {}
    used: set[str] = set()

    for i, header in enumerate(headers):
        base = to_snake_key(header) or f"col_{i + 1}"
        key = base
        count = counts.get(base, 1)
        # Also steps over literal headers such as "amount_2"
        while key in used:
            count += 1
            key = f"{base}_{count}"
        counts[base] = count
        used.add(key)
        keys.append(key)

    return keys


def data_start_row(rows: list[list[str]], headers: list[str]) -> int:
    """1 when the first row repeats the headers, else 0."""
    if not rows:
        return 0
    first = [cell.strip() for cell in rows[0]]
    return 1 if first == [h.strip() for h in headers] else 0


class ParagraphTracker:
    """Tracks the last line's top edge to detect paragraph breaks.

    State resets on every page change and after every table.
    """

    def __init__(self, avg_heights: dict[int, float], big_gap_factor: float, fallback: float):
        self.avg_heights = avg_heights
        self.big_gap_factor = big_gap_factor
        self.fallback = fallback
        self.current_page: Optional[int] = None
        self.avg_line_height = fallback
        self.prev_top: Optional[float] = None

    def enter(self, item: DocumentItem) -> None:
        """Switch page state when ``item`` is on a new page."""
        if item.page != self.current_page:
            self.current_page = item.page
            height = self.avg_heights.get(item.page, 0.0)
            self.avg_line_height = height if height > 0 else self.fallback
            self.prev_top = None

    def is_break(self, item: DocumentItem) -> bool:
        """Whether a blank line belongs before this line item."""
        top = item.bbox.top
        is_break = (
            self.prev_top is not None
            and self.prev_top - top > self.avg_line_height * self.big_gap_factor
        )
        self.prev_top = top
        return is_break

    def reset(self) -> None:
        self.prev_top = None


class _ItemRenderer:
    """Shared setup: item sequencing, optional reduction, line heights."""

    def __init__(
        self,
        config: Optional[Settings] = None,
        set_headers: Optional[list[str]] = None,
        just_header_and_table: bool = False,
    ):
        """Initialize renderer.

        Args:
            config: Settings (default: module settings).
            set_headers: Explicit column headers instead of each table's first row.
            just_header_and_table: Reduce every subdocument to its header
                lines and one merged table before rendering.
        """
        self.config = config or settings
        self.set_headers = list(set_headers) if set_headers else None
        self.just_header_and_table = just_header_and_table
        self.sequencer = ItemSequencer(self.config)
        self.splitter = SubdocumentSplitter()

    def prepare(self, pages: list[PageResult]) -> list[DocumentItem]:
        """Sequence (and optionally reduce) the items of ``pages``."""
        items = self.sequencer.build(pages)
        if self.just_header_and_table:
            items = self.splitter.split(items)
        return items

    def tracker(self, pages: list[PageResult]) -> ParagraphTracker:
        return ParagraphTracker(
            {page.page: page.average_line_height for page in pages},
            self.config.big_gap_factor,
            self.config.default_line_height,
        )

    def headers_for(self, rows: list[list[str]]) -> list[str]:
        return list(self.set_headers) if self.set_headers else list(rows[0])


class TextRenderer(_ItemRenderer):
    """Renders the item stream as newline-delimited text.

    Table rows become blocks of ``### <Header>:`` / value pairs separated by
    ``----`` markers.
    """

    header_prefix = "### "

    def render(self, pages: list[PageResult]) -> str:
        """Render pages to flat text.

        Args:
            pages: Extracted pages.

        Returns:
            The text, right-trimmed.
        """
        items = self.prepare(pages)
        tracker = self.tracker(pages)
        out: list[str] = []

        for item in items:
            tracker.enter(item)

            if item.is_line:
                if tracker.is_break(item):
                    out.append("\n")
                if item.text.strip():
                    out.append(item.text.strip() + "\n")
            else:
                out.append(self._render_table(item.table.cells))
                tracker.reset()

        return "".join(out).rstrip()

    def _render_table(self, rows: list[list[str]]) -> str:
        if not rows:
            return "\n\n"

        headers = self.headers_for(rows)
        start = data_start_row(rows, headers)
        labels = [self.header_prefix + h.replace("\n", " ").strip() for h in headers]

        out = ["\n\n"]
        for row in rows[start:]:
            out.append("----\n")
            for c in range(max(len(labels), len(row))):
                name = labels[c] if c < len(labels) else f"Column {c + 1}"
                value = row[c].strip() if c < len(row) else ""
                out.append(f"{name}:\n{value}\n\n")
            out.append("\n")
        out.append("\n\n")
        return "".join(out)


class JsonRenderer(_ItemRenderer):
    """Renders the item stream as a list of (header, table) payloads.

    A payload is closed at every table; lines after the last table do not
    produce a payload.
    """

    def __init__(
        self,
        config: Optional[Settings] = None,
        set_headers: Optional[list[str]] = None,
        just_header_and_table: bool = True,
    ):
        super().__init__(config, set_headers, just_header_and_table)

    def render(self, pages: list[PageResult]) -> list[Payload]:
        """Render pages to payloads.

        Args:
            pages: Extracted pages.

        Returns:
            One Payload per table encountered.
        """
        items = self.prepare(pages)
        tracker = self.tracker(pages)
        header_lines: list[str] = []
        payloads: list[Payload] = []

        for item in items:
            tracker.enter(item)

            if item.is_line:
                if tracker.is_break(item):
                    header_lines.append("")
                if item.text.strip():
                    header_lines.append(item.text.strip())
                continue

            payloads.append(
                Payload(
                    header="\n".join(header_lines).rstrip(),
                    table=self._records(item.table.cells),
                )
            )
            header_lines = []
            tracker.reset()

        return payloads

    def _records(self, rows: list[list[str]]) -> list[dict[str, str]]:
        if not rows:
            return []

        headers = self.headers_for(rows)
        keys = unique_column_keys(headers)
        start = data_start_row(rows, headers)

        records = []
        for row in rows[start:]:
            records.append(
                {key: (row[c].strip() if c < len(row) else "") for c, key in enumerate(keys)}
            )
        return records
