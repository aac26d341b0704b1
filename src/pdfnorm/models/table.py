"""Table IR model - a rectangular grid of cell strings."""

from pydantic import Field, model_validator

from .base import BaseIRModel, BoundingBox


class Table(BaseIRModel):
    """
    Reconstructed table.

    ``cells`` is row-major with row 0 topmost. Every row has the same
    number of entries; cells with no block are empty strings.
    """

    cells: list[list[str]] = Field(default_factory=list)
    bbox: BoundingBox

    @model_validator(mode="after")
    def _check_rectangular(self) -> "Table":
        widths = {len(row) for row in self.cells}
        if len(widths) > 1:
            raise ValueError(f"table rows have differing widths: {sorted(widths)}")
        return self

    @property
    def rows(self) -> int:
        return len(self.cells)

    @property
    def cols(self) -> int:
        return len(self.cells[0]) if self.cells else 0

    def stacked(self, other: "Table") -> "Table":
        """Return a new table with ``other``'s rows appended below.

        Rows are right-padded with empty strings to the wider of the two
        tables so the result stays rectangular. The bounding box is kept.
        """
        width = max(self.cols, other.cols)
        rows = [row + [""] * (width - len(row)) for row in self.cells + other.cells]
        return Table(cells=rows, bbox=self.bbox)

