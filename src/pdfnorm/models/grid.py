"""Grid-line model built from clustered ruling segments."""

from pydantic import Field

from .base import Axis, BaseIRModel


class GridLine(BaseIRModel):
    """
    A clustered ruling position.

    ``position`` is the x of a vertical line or the y of a horizontal one;
    ``intervals`` are the merged spans it covers along its own axis, sorted
    and non-overlapping.
    """

    axis: Axis
    position: float
    intervals: list[tuple[float, float]] = Field(default_factory=list)

    @property
    def extent(self) -> float:
        """Total covered length."""
        return sum(end - start for start, end in self.intervals)
