"""Fragment Assignment Stage - Attach text to cells or free-standing lines.

Each cell rectangle (slightly inflated) claims the fragments that lie
mostly inside it. Claimed fragments become the cell's block text;
everything left over is grouped into free text lines.

Line grouping is a single top-to-bottom pass: a fragment joins the first
bucket whose running mean center is within the Y tolerance. The result
depends on traversal order, which is intended.
"""

import re
from typing import Optional

from pdfnorm.config import Settings, settings
from pdfnorm.logger import logger
from pdfnorm.models import Block, BoundingBox, LineItem, TextFragment

_MULTI_SPACE = re.compile(r" {2,}")


def join_fragments(fragments: list[TextFragment], gap_factor: float) -> str:
    """Join one row of fragments left to right, inferring word breaks.

    A space goes between two neighbours when their horizontal gap exceeds
    ``gap_factor`` times the mean of their per-character widths.
    """
    parts = []
    prev: Optional[TextFragment] = None
    for frag in sorted(fragments, key=lambda f: f.bbox.x):
        if prev is not None:
            gap = frag.bbox.x - prev.bbox.right
            threshold = gap_factor * (prev.char_width + frag.char_width) / 2
            if gap > threshold:
                parts.append(" ")
        parts.append(frag.text)
        prev = frag

    return _MULTI_SPACE.sub(" ", "".join(parts)).strip()


class FragmentAssigner:
    """Assigns text fragments to cell rectangles or free text lines."""

    def __init__(self, config: Optional[Settings] = None):
        """Initialize assigner.

        Args:
            config: Tolerances to use (default: module settings).
        """
        self.config = config or settings

    def group_lines(self, fragments: list[TextFragment]) -> list[LineItem]:
        """Group fragments into text lines by vertical proximity.

        Args:
            fragments: Fragments to group.

        Returns:
            Lines ordered topmost first.
        """
        y_tol = self.config.line_y_tol

        # Each bucket keeps its fragments and the running sum of centers
        buckets: list[tuple[list[TextFragment], list[float]]] = []
        for frag in sorted(fragments, key=lambda f: f.bbox.y, reverse=True):
            center = frag.center_y
            for members, centers in buckets:
                if abs(sum(centers) / len(centers) - center) <= y_tol:
                    members.append(frag)
                    centers.append(center)
                    break
            else:
                buckets.append(([frag], [center]))

        lines = [
            LineItem(
                bbox=BoundingBox.union(f.bbox for f in members),
                text=join_fragments(members, self.config.word_gap_factor),
            )
            for members, _ in buckets
        ]
        return sorted(lines, key=lambda line: line.bbox.top, reverse=True)

    def assign(
        self,
        fragments: list[TextFragment],
        cells: list[BoundingBox],
    ) -> tuple[list[Block], list[TextFragment]]:
        """Claim fragments for cells.

        A fragment belongs to the first cell whose inflated rectangle holds
        at least ``min_fragment_overlap_ratio`` of the fragment's area.

        Args:
            fragments: All text fragments of the page.
            cells: Cell rectangles from the grid builder.

        Returns:
            Tuple of (one block per cell, unclaimed fragments in input order).
        """
        cfg = self.config
        claimed: set[int] = set()
        blocks = []

        for cell in cells:
            inflated = cell.inflate(cfg.box_inflate)
            inside = []
            for idx, frag in enumerate(fragments):
                if idx in claimed:
                    continue
                frag_area = max(0.0001, frag.bbox.area)
                if inflated.overlap_area(frag.bbox) / frag_area >= cfg.min_fragment_overlap_ratio:
                    inside.append(frag)
                    claimed.add(idx)

            text = "\n".join(line.text for line in self.group_lines(inside)) if inside else ""
            blocks.append(Block(bbox=cell, text=text))

        leftovers = [frag for idx, frag in enumerate(fragments) if idx not in claimed]
        return blocks, leftovers

    def assign_page(
        self,
        fragments: list[TextFragment],
        cells: list[BoundingBox],
    ) -> tuple[list[Block], list[LineItem]]:
        """Assign fragments and group the leftovers into free lines.

        Args:
            fragments: All text fragments of the page.
            cells: Cell rectangles from the grid builder.

        Returns:
            Tuple of (blocks, free lines).
        """
        blocks, leftovers = self.assign(fragments, cells)
        lines = self.group_lines(leftovers)

        logger.debug(
            "fragments assigned",
            fragments=len(fragments),
            claimed=len(fragments) - len(leftovers),
            lines=len(lines),
        )
        return blocks, lines
