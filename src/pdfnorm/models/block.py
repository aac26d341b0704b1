"""Text-bearing regions of a page: cell blocks and free-standing lines."""

from pydantic import Field

from .base import BaseIRModel, BoundingBox


class Block(BaseIRModel):
    """
    A cell rectangle together with the text assigned to it.

    Multi-line cell text is joined with ``\\n`` (topmost line first).
    """

    bbox: BoundingBox
    text: str = Field(default="")

    @property
    def has_text(self) -> bool:
        return bool(self.text)


class LineItem(BaseIRModel):
    """A free-standing text line outside any cell."""

    bbox: BoundingBox
    text: str = Field(default="")


class PageResult(BaseIRModel):
    """Blocks and lines reconstructed for one page, in whole page points."""

    page: int = Field(..., ge=1, description="1-indexed page number")
    width: int = Field(..., ge=0)
    height: int = Field(..., ge=0)
    blocks: list[Block] = Field(default_factory=list)
    lines: list[LineItem] = Field(default_factory=list)

    @property
    def average_line_height(self) -> float:
        """Mean height of the free lines, 0 when the page has none."""
        if not self.lines:
            return 0.0
        return sum(line.bbox.height for line in self.lines) / len(self.lines)
