"""IR (Intermediate Representation) models for the PDF table normalizer.

Pydantic models for the data flowing between pipeline stages. All
coordinates are PDF points with the origin at the bottom-left of the page.

Model Hierarchy:
- PageCapture → TextFragment / PathSegment (raw primitives)
- GridLine → cell rectangles (BoundingBox)
- PageResult → Blocks (cell + text) / LineItems (free text)
- DocumentItem → LineItem | Table (reading-order stream)
- Payload (rendered header + records)
"""

from .base import (
    Axis,
    BaseIRModel,
    BoundingBox,
    ItemKind,
)
from .block import (
    Block,
    LineItem,
    PageResult,
)
from .document import (
    DocumentItem,
    Payload,
    SubdocumentRange,
)
from .grid import GridLine
from .primitives import (
    PageCapture,
    PathSegment,
    TextFragment,
)
from .table import Table

__all__ = [
    # Base types
    "Axis",
    "BaseIRModel",
    "BoundingBox",
    "ItemKind",
    # Primitives
    "PageCapture",
    "PathSegment",
    "TextFragment",
    # Grid
    "GridLine",
    # Blocks
    "Block",
    "LineItem",
    "PageResult",
    # Table
    "Table",
    # Document
    "DocumentItem",
    "Payload",
    "SubdocumentRange",
]
