"""Item Sequencing Stage - Put lines and tables into reading order.

Reading order for the whole document: page ascending, then top edge
descending (origin is bottom-left), then left edge ascending. Every
downstream consumer relies on this order.
"""

from typing import Optional

from pdfnorm.config import Settings, settings
from pdfnorm.exceptions import InputError
from pdfnorm.logger import logger
from pdfnorm.models import DocumentItem, PageResult
from pdfnorm.pipeline.stage_table import TableGrouper


def reading_order_key(item: DocumentItem) -> tuple[int, float, float]:
    """Sort key for reading order."""
    return item.page, -item.bbox.top, item.bbox.x


class ItemSequencer:
    """Builds the ordered DocumentItem stream from page results."""

    def __init__(self, config: Optional[Settings] = None):
        self.config = config or settings
        self.grouper = TableGrouper(self.config)

    def page_items(self, page: PageResult) -> list[DocumentItem]:
        """Lines and tables of a single page, unordered."""
        items = [DocumentItem.from_line(page.page, line) for line in page.lines]
        items.extend(
            DocumentItem.from_table(page.page, table)
            for table in self.grouper.extract_tables(page.blocks)
        )
        return items

    def build(self, pages: Optional[list[PageResult]]) -> list[DocumentItem]:
        """Build the document's item stream.

        Args:
            pages: Extracted pages.

        Returns:
            All items in reading order.
        """
        if pages is None:
            raise InputError("no pages to sequence")

        items = []
        for page in pages:
            items.extend(self.page_items(page))

        items.sort(key=reading_order_key)

        logger.debug(
            "items sequenced",
            pages=len(pages),
            lines=sum(1 for i in items if i.is_line),
            tables=sum(1 for i in items if i.is_table),
        )
        return items
