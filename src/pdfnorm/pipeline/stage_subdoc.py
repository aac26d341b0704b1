"""Subdocument Splitting Stage - Detect restarting page numbers.

A batch PDF (e.g. several invoices scanned together) restarts its footer
pagination for every logical document. A page whose bottom-most line reads
"1", "page 1", "pagina 1" or "bladzijde 1" starts a new subdocument.

Each subdocument is reduced to its header lines followed by one table:
- lines before the first table are kept
- later tables are stacked onto the first one
- lines after the first table are dropped
"""

import re
from typing import Optional

from pdfnorm.logger import logger
from pdfnorm.models import DocumentItem, SubdocumentRange, Table

# Footer patterns carrying a page number
FOOTER_NUMBER_PATTERNS = [
    r"^[+-]?\d+$",
    r"(?:pagina|bladzijde|page)\s*(\d+)$",
]


class SubdocumentSplitter:
    """Splits the item stream into subdocuments and reduces each one."""

    def __init__(self):
        self.footer_patterns = [
            re.compile(p, re.IGNORECASE) for p in FOOTER_NUMBER_PATTERNS
        ]

    def parse_footer_number(self, text: Optional[str]) -> Optional[int]:
        """Read a page number from footer text.

        Args:
            text: Footer line text.

        Returns:
            The number, or None when the text is not a page marker.
        """
        if not text or not text.strip():
            return None
        text = text.strip()

        for pattern in self.footer_patterns:
            match = pattern.search(text)
            if match:
                return int(match.group(1) if match.groups() else match.group(0))
        return None

    def find_start_pages(self, items: list[DocumentItem]) -> list[int]:
        """Pages whose bottom-most line is page number 1.

        Args:
            items: Sequenced document items.

        Returns:
            Sorted page numbers that start a subdocument.
        """
        footers: dict[int, DocumentItem] = {}
        for item in items:
            if not item.is_line:
                continue
            current = footers.get(item.page)
            # Lowest line wins, leftmost on ties
            if current is None or (item.bbox.y, item.bbox.x) < (current.bbox.y, current.bbox.x):
                footers[item.page] = item

        return sorted(
            page
            for page, footer in footers.items()
            if self.parse_footer_number(footer.text) == 1
        )

    def page_ranges(self, items: list[DocumentItem]) -> list[SubdocumentRange]:
        """Partition the document's pages into subdocument ranges.

        Pages before the first detected start form a leading range of their
        own. Without any start page the whole document is one range.

        Args:
            items: Sequenced document items.

        Returns:
            Contiguous ranges; the last one is open-ended.
        """
        if not items:
            return []

        first_page = min(item.page for item in items)
        starts = self.find_start_pages(items)
        if not starts or starts[0] > first_page:
            starts.insert(0, first_page)

        ranges = []
        for i, start in enumerate(starts):
            end = starts[i + 1] - 1 if i < len(starts) - 1 else None
            ranges.append(SubdocumentRange(start_page=start, end_page=end))
        return ranges

    def reduce(self, items: list[DocumentItem]) -> list[DocumentItem]:
        """Keep header lines and the first table, stacking later tables onto it.

        The input items are not modified.

        Args:
            items: Items of one subdocument, in reading order.

        Returns:
            Header line items followed by at most one table item.
        """
        result: list[DocumentItem] = []
        first_table: Optional[DocumentItem] = None
        merged: Optional[Table] = None

        for item in items:
            if merged is None:
                result.append(item)
                if item.is_table:
                    first_table = item
                    merged = item.table
            elif item.is_table:
                merged = merged.stacked(item.table)

        if first_table is not None and merged is not first_table.table:
            result[-1] = DocumentItem.from_table(first_table.page, merged)
        return result

    def split(self, items: list[DocumentItem]) -> list[DocumentItem]:
        """Reduce every subdocument of the stream independently.

        Args:
            items: Sequenced document items.

        Returns:
            Concatenation of the reduced subdocuments.
        """
        ranges = self.page_ranges(items)

        result = []
        for page_range in ranges:
            chunk = [item for item in items if page_range.contains(item.page)]
            result.extend(self.reduce(chunk))

        logger.debug(
            "subdocuments reduced",
            subdocuments=len(ranges),
            items_in=len(items),
            items_out=len(result),
        )
        return result
