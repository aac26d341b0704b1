"""Grid Builder Stage - Derive cell rectangles from ruling segments.

Flow:
1. Classify segments as vertical or horizontal (axis tolerance, min length)
2. Cluster positions of each class into grid lines (running-average linkage)
3. Merge each grid line's coverage intervals along its own axis
4. Accept every rectangle between consecutive grid positions whose four
   edges are covered by the nearest grid line

Pages without at least two positions on both axes yield no cells.
"""

from typing import Optional

from pdfnorm.config import Settings, settings
from pdfnorm.logger import logger
from pdfnorm.models import Axis, BoundingBox, GridLine, PathSegment

Interval = tuple[float, float]


def cluster_positions(values: list[float], tolerance: float) -> list[list[float]]:
    """Group sorted values into clusters by distance to each cluster's mean.

    A value joins the first existing cluster whose running average lies
    within ``tolerance``; otherwise it opens a new cluster.
    """
    clusters: list[list[float]] = []
    for value in sorted(values):
        for cluster in clusters:
            if abs(sum(cluster) / len(cluster) - value) <= tolerance:
                cluster.append(value)
                break
        else:
            clusters.append([value])
    return clusters


def merge_intervals(intervals: list[Interval], gap: float) -> list[Interval]:
    """Merge intervals whose start lies within ``gap`` of the running end."""
    if not intervals:
        return []

    ordered = sorted((min(a, b), max(a, b)) for a, b in intervals)
    merged = []
    cur_start, cur_end = ordered[0]
    for start, end in ordered[1:]:
        if start <= cur_end + gap:
            cur_end = max(cur_end, end)
        else:
            merged.append((cur_start, cur_end))
            cur_start, cur_end = start, end
    merged.append((cur_start, cur_end))
    return merged


def covers(intervals: list[Interval], start: float, end: float, slack: float) -> bool:
    """Check that ``intervals`` cover [start, end] up to ``slack`` points."""
    if end < start:
        start, end = end, start
    if not intervals:
        return False

    covered = 0.0
    for lo, hi in merge_intervals(intervals, 0.0):
        lo = max(lo, start)
        hi = min(hi, end)
        if hi > lo:
            covered += hi - lo
        if covered >= (end - start) - slack:
            return True
    return False


def find_nearest(lines: list[GridLine], position: float) -> Optional[GridLine]:
    """Grid line closest to ``position``; the first one wins on ties."""
    best = None
    best_distance = float("inf")
    for line in lines:
        distance = abs(line.position - position)
        if distance < best_distance:
            best_distance = distance
            best = line
    return best


class GridBuilder:
    """Builds grid lines and cell rectangles from one page's segments."""

    def __init__(self, config: Optional[Settings] = None):
        """Initialize grid builder.

        Args:
            config: Tolerances to use (default: module settings).
        """
        self.config = config or settings

    def build_lines(self, segments: list[PathSegment], axis: Axis) -> list[GridLine]:
        """Cluster segments of one orientation into grid lines.

        Args:
            segments: All path segments of the page.
            axis: Which orientation to keep.

        Returns:
            Grid lines sorted by position.
        """
        cfg = self.config

        # (position, start, end) per qualifying segment
        rulings: list[tuple[float, float, float]] = []
        for seg in segments:
            if axis == Axis.VERTICAL:
                if seg.dx < cfg.axis_tol and seg.dy >= cfg.min_line_len:
                    rulings.append(((seg.x1 + seg.x2) / 2, min(seg.y1, seg.y2), max(seg.y1, seg.y2)))
            elif seg.dy < cfg.axis_tol and seg.dx >= cfg.min_line_len:
                rulings.append(((seg.y1 + seg.y2) / 2, min(seg.x1, seg.x2), max(seg.x1, seg.x2)))

        lines = []
        for cluster in cluster_positions([r[0] for r in rulings], cfg.pos_merge_tol):
            position = sum(cluster) / len(cluster)
            intervals = [
                (start, end)
                for pos, start, end in rulings
                if abs(pos - position) <= cfg.pos_merge_tol
            ]
            lines.append(
                GridLine(
                    axis=axis,
                    position=position,
                    intervals=merge_intervals(intervals, cfg.seg_merge_gap),
                )
            )

        return sorted(lines, key=lambda line: line.position)

    def build_cells(
        self,
        vertical: list[GridLine],
        horizontal: list[GridLine],
    ) -> list[BoundingBox]:
        """Derive closed cell rectangles from grid lines.

        Args:
            vertical: Vertical grid lines.
            horizontal: Horizontal grid lines.

        Returns:
            Accepted cell rectangles, column by column, bottom to top.
        """
        slack = self.config.cover_slack
        xs = sorted({line.position for line in vertical})
        ys = sorted({line.position for line in horizontal})

        cells: list[BoundingBox] = []
        if len(xs) < 2 or len(ys) < 2:
            return cells

        for x1, x2 in zip(xs, xs[1:]):
            left_line = find_nearest(vertical, x1)
            right_line = find_nearest(vertical, x2)
            if left_line is None or right_line is None:
                continue

            for y1, y2 in zip(ys, ys[1:]):
                bottom_line = find_nearest(horizontal, y1)
                top_line = find_nearest(horizontal, y2)
                if bottom_line is None or top_line is None:
                    continue

                if (
                    covers(left_line.intervals, y1, y2, slack)
                    and covers(right_line.intervals, y1, y2, slack)
                    and covers(bottom_line.intervals, x1, x2, slack)
                    and covers(top_line.intervals, x1, x2, slack)
                ):
                    cells.append(BoundingBox.from_edges(x1, y1, x2, y2))

        return cells

    def build(self, segments: list[PathSegment]) -> list[BoundingBox]:
        """Run the full grid derivation for one page.

        Args:
            segments: All path segments of the page.

        Returns:
            Accepted cell rectangles (empty when the page has no grid).
        """
        vertical = self.build_lines(segments, Axis.VERTICAL)
        horizontal = self.build_lines(segments, Axis.HORIZONTAL)
        cells = self.build_cells(vertical, horizontal)

        logger.debug(
            "grid built",
            segments=len(segments),
            vertical_lines=len(vertical),
            horizontal_lines=len(horizontal),
            cells=len(cells),
        )
        return cells
