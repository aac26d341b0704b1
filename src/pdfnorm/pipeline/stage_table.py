"""Table Grouping Stage - Merge cell blocks into whole tables.

Flow:
1. Link blocks that share an edge (with overlap on the other axis) or
   overlap outright
2. Keep connected components with two or more blocks
3. Cluster the component's cell edges into column and row boundaries
4. Drop each block's text into the band holding its center

Works on integer page points. Spanning cells are not detected; grid
positions without a block stay empty strings.
"""

from typing import Optional

from pdfnorm.config import Settings, settings
from pdfnorm.logger import logger
from pdfnorm.models import Block, BoundingBox, Table

# (left, bottom, right, top) in whole points
Edges = tuple[int, int, int, int]


def _edges(bbox: BoundingBox) -> Edges:
    x, y = int(bbox.x), int(bbox.y)
    return x, y, x + int(bbox.width), y + int(bbox.height)


def _overlap_1d(s1: int, e1: int, s2: int, e2: int) -> int:
    return max(0, min(e1, e2) - max(s1, s2))


def cluster_edges(values: list[int], tolerance: int) -> list[int]:
    """Collapse sorted edge values into run means.

    A run continues while values stay within ``tolerance`` of the run's
    first value; each run contributes its rounded mean.
    """
    if not values:
        return []

    values = sorted(values)
    result = []
    run = [values[0]]
    for value in values[1:]:
        if abs(value - run[0]) <= tolerance:
            run.append(value)
        else:
            result.append(round(sum(run) / len(run)))
            run = [value]
    result.append(round(sum(run) / len(run)))
    return sorted(set(result))


def find_band(value: int, edges: list[int]) -> int:
    """Index of the first band [edges[i], edges[i+1]] holding ``value``, else -1."""
    for i in range(len(edges) - 1):
        if edges[i] <= value <= edges[i + 1]:
            return i
    return -1


class TableGrouper:
    """Groups a page's blocks into tables.

    Two blocks are adjacent when they touch side by side or top to bottom
    with enough overlap on the other axis, or when they overlap on both
    axes. The overlap rule can join two visually separate tables that
    touch; that is accepted behaviour.
    """

    def __init__(self, config: Optional[Settings] = None):
        """Initialize grouper.

        Args:
            config: Tolerances to use (default: module settings).
        """
        self.config = config or settings

    def are_adjacent(self, a: BoundingBox, b: BoundingBox) -> bool:
        """Check whether two block rectangles belong to the same table."""
        edge_tol = self.config.edge_tol
        overlap_tol = self.config.overlap_tol
        a_left, a_bottom, a_right, a_top = _edges(a)
        b_left, b_bottom, b_right, b_top = _edges(b)

        x_overlap = _overlap_1d(a_left, a_right, b_left, b_right)
        y_overlap = _overlap_1d(a_bottom, a_top, b_bottom, b_top)

        side_by_side = (
            abs(a_right - b_left) <= edge_tol or abs(b_right - a_left) <= edge_tol
        ) and y_overlap > overlap_tol

        stacked = (
            abs(a_top - b_bottom) <= edge_tol or abs(b_top - a_bottom) <= edge_tol
        ) and x_overlap > overlap_tol

        overlapping = x_overlap > 0 and y_overlap > 0

        return side_by_side or stacked or overlapping

    def group(self, blocks: list[Block]) -> list[list[Block]]:
        """Split blocks into connected components of two or more blocks.

        Args:
            blocks: All blocks of one page.

        Returns:
            Block groups, one per table.
        """
        n = len(blocks)
        adjacency: list[list[int]] = [[] for _ in range(n)]
        for i in range(n):
            for j in range(i + 1, n):
                if self.are_adjacent(blocks[i].bbox, blocks[j].bbox):
                    adjacency[i].append(j)
                    adjacency[j].append(i)

        groups = []
        seen = [False] * n
        for i in range(n):
            if seen[i]:
                continue
            component = []
            stack = [i]
            seen[i] = True
            while stack:
                u = stack.pop()
                component.append(u)
                for v in adjacency[u]:
                    if not seen[v]:
                        seen[v] = True
                        stack.append(v)

            # A lone boxed value is not a table
            if len(component) >= 2:
                groups.append([blocks[k] for k in component])

        return groups

    def build_table(self, blocks: list[Block]) -> Table:
        """Build the cell matrix for one group of blocks.

        Args:
            blocks: Blocks of one connected component.

        Returns:
            Table with row 0 at the top.
        """
        tol = self.config.cluster_tol
        rects = [_edges(b.bbox) for b in blocks]

        xs = cluster_edges([v for r in rects for v in (r[0], r[2])], tol)
        ys = cluster_edges([v for r in rects for v in (r[1], r[3])], tol)

        cols = max(0, len(xs) - 1)
        rows = max(0, len(ys) - 1)
        cells = [["" for _ in range(cols)] for _ in range(rows)]

        for block, (left, bottom, right, top) in zip(blocks, rects):
            col = find_band(left + (right - left) // 2, xs)
            row = find_band(bottom + (top - bottom) // 2, ys)
            if 0 <= row < rows and 0 <= col < cols:
                if cells[row][col]:
                    cells[row][col] += "\n" + block.text
                else:
                    cells[row][col] = block.text

        # Bands were built bottom-up
        cells.reverse()

        return Table(cells=cells, bbox=BoundingBox.union(b.bbox for b in blocks))

    def extract_tables(self, blocks: list[Block]) -> list[Table]:
        """Group blocks and build one table per group.

        Args:
            blocks: All blocks on the page.

        Returns:
            List of Table objects.
        """
        tables = [self.build_table(group) for group in self.group(blocks)]
        logger.debug("tables grouped", blocks=len(blocks), tables=len(tables))
        return tables
