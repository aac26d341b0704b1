"""Base models and common types for the PDF table normalizer."""

from enum import Enum
from typing import Iterable

from pydantic import BaseModel, Field


class ItemKind(str, Enum):
    """Kinds of items in the sequenced document stream."""

    LINE = "line"
    TABLE = "table"


class Axis(str, Enum):
    """Direction of a grid line."""

    VERTICAL = "vertical"
    HORIZONTAL = "horizontal"


class BaseIRModel(BaseModel):
    """Base class for all IR models."""

    class Config:
        from_attributes = True


class BoundingBox(BaseIRModel):
    """Axis-aligned box in page points, origin bottom-left.

    ``y`` is the bottom edge; ``top`` is ``y + height``.
    """

    x: float = Field(..., description="Left edge X coordinate")
    y: float = Field(..., description="Bottom edge Y coordinate")
    width: float = Field(..., ge=0, description="Box width")
    height: float = Field(..., ge=0, description="Box height")

    class Config:
        frozen = True

    @property
    def right(self) -> float:
        """Right edge X coordinate."""
        return self.x + self.width

    @property
    def top(self) -> float:
        """Top edge Y coordinate."""
        return self.y + self.height

    @property
    def area(self) -> float:
        return self.width * self.height

    def inflate(self, margin: float) -> "BoundingBox":
        """Grow the box by ``margin`` on every side."""
        return BoundingBox(
            x=self.x - margin,
            y=self.y - margin,
            width=self.width + 2 * margin,
            height=self.height + 2 * margin,
        )

    def overlap_area(self, other: "BoundingBox") -> float:
        """Area of the intersection with ``other`` (0 when disjoint)."""
        w = min(self.right, other.right) - max(self.x, other.x)
        h = min(self.top, other.top) - max(self.y, other.y)
        if w <= 0 or h <= 0:
            return 0.0
        return w * h

    def rounded(self) -> "BoundingBox":
        """Snap all four values to whole points (round half to even)."""
        return BoundingBox(
            x=round(self.x),
            y=round(self.y),
            width=round(self.width),
            height=round(self.height),
        )

    @classmethod
    def from_edges(cls, x1: float, y1: float, x2: float, y2: float) -> "BoundingBox":
        """Build a box from its left, bottom, right and top edges."""
        return cls(x=x1, y=y1, width=max(0.0, x2 - x1), height=max(0.0, y2 - y1))

    @classmethod
    def union(cls, boxes: Iterable["BoundingBox"]) -> "BoundingBox":
        """Smallest box containing all ``boxes`` (zero box when empty)."""
        boxes = list(boxes)
        if not boxes:
            return cls(x=0, y=0, width=0, height=0)
        return cls.from_edges(
            min(b.x for b in boxes),
            min(b.y for b in boxes),
            max(b.right for b in boxes),
            max(b.top for b in boxes),
        )
