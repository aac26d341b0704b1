"""Page primitives produced by the capture stage."""

import math

from pydantic import Field

from .base import BaseIRModel, BoundingBox


class TextFragment(BaseIRModel):
    """One rendered text run with its ascent-to-descent box."""

    text: str
    bbox: BoundingBox

    class Config:
        frozen = True

    @property
    def center_y(self) -> float:
        return self.bbox.y + self.bbox.height / 2

    @property
    def char_width(self) -> float:
        """Average width of one character, never below 0.1pt."""
        return max(0.1, self.bbox.width / max(1, len(self.text)))


class PathSegment(BaseIRModel):
    """One straight stroke between two endpoints."""

    x1: float
    y1: float
    x2: float
    y2: float

    class Config:
        frozen = True

    @property
    def dx(self) -> float:
        return abs(self.x2 - self.x1)

    @property
    def dy(self) -> float:
        return abs(self.y2 - self.y1)

    @property
    def length(self) -> float:
        return math.hypot(self.x2 - self.x1, self.y2 - self.y1)


class PageCapture(BaseIRModel):
    """All primitives captured from a single page."""

    page_number: int = Field(..., ge=1, description="1-indexed page number")
    width: float = Field(..., ge=0, description="Page width in points")
    height: float = Field(..., ge=0, description="Page height in points")
    fragments: list[TextFragment] = Field(default_factory=list)
    segments: list[PathSegment] = Field(default_factory=list)
