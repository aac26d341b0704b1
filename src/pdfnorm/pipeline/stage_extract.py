"""Page Extraction Stage - Cells and lines for each captured page.

Runs the grid builder and the fragment assigner over one page's
primitives and snaps the result to whole page points. Primitives are not
kept once a page has been extracted.
"""

from typing import Iterable, Optional

from pdfnorm.config import Settings, settings
from pdfnorm.exceptions import InputError
from pdfnorm.logger import logger
from pdfnorm.models import Block, LineItem, PageCapture, PageResult
from pdfnorm.pipeline.stage_assign import FragmentAssigner
from pdfnorm.pipeline.stage_grid import GridBuilder


class PageExtractor:
    """Turns PageCaptures into PageResults (blocks + free lines)."""

    def __init__(self, config: Optional[Settings] = None):
        self.config = config or settings
        self.grid_builder = GridBuilder(self.config)
        self.assigner = FragmentAssigner(self.config)

    def extract_page(self, capture: PageCapture) -> PageResult:
        """Extract blocks and lines for one page.

        Args:
            capture: Primitives of the page.

        Returns:
            PageResult with integer coordinates.
        """
        cells = self.grid_builder.build(capture.segments)
        blocks, lines = self.assigner.assign_page(capture.fragments, cells)

        result = PageResult(
            page=capture.page_number,
            width=round(capture.width),
            height=round(capture.height),
            blocks=[Block(bbox=b.bbox.rounded(), text=b.text) for b in blocks],
            lines=[LineItem(bbox=l.bbox.rounded(), text=l.text) for l in lines],
        )

        logger.debug(
            "page extracted",
            page=result.page,
            blocks=len(result.blocks),
            lines=len(result.lines),
        )
        return result

    def extract(self, captures: Optional[Iterable[PageCapture]]) -> list[PageResult]:
        """Extract every captured page.

        Args:
            captures: Page captures in page order; an iterator is consumed
                one page at a time.

        Returns:
            One PageResult per page.
        """
        if captures is None:
            raise InputError("no pages to extract")
        return [self.extract_page(capture) for capture in captures]
