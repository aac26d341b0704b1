"""Document-level IR models: sequenced items, subdocuments and payloads."""

from typing import Optional

from pydantic import Field, model_validator

from .base import BaseIRModel, BoundingBox, ItemKind
from .block import LineItem
from .table import Table


class DocumentItem(BaseIRModel):
    """
    One entry of the reading-order stream: a line or a table.

    Exactly one of ``line`` / ``table`` is set, matching ``kind``.
    """

    kind: ItemKind
    page: int = Field(..., ge=1)
    bbox: BoundingBox
    line: Optional[LineItem] = None
    table: Optional[Table] = None

    @model_validator(mode="after")
    def _check_payload(self) -> "DocumentItem":
        if self.kind == ItemKind.LINE and (self.line is None or self.table is not None):
            raise ValueError("line item must carry a line payload and no table")
        if self.kind == ItemKind.TABLE and (self.table is None or self.line is not None):
            raise ValueError("table item must carry a table payload and no line")
        return self

    @classmethod
    def from_line(cls, page: int, line: LineItem) -> "DocumentItem":
        return cls(kind=ItemKind.LINE, page=page, bbox=line.bbox, line=line)

    @classmethod
    def from_table(cls, page: int, table: Table) -> "DocumentItem":
        return cls(kind=ItemKind.TABLE, page=page, bbox=table.bbox, table=table)

    @property
    def is_line(self) -> bool:
        return self.kind == ItemKind.LINE

    @property
    def is_table(self) -> bool:
        return self.kind == ItemKind.TABLE

    @property
    def text(self) -> str:
        """Line text, empty for tables."""
        return self.line.text if self.line is not None else ""


class SubdocumentRange(BaseIRModel):
    """Inclusive page interval of one subdocument; ``end_page`` None = open."""

    start_page: int = Field(..., ge=1)
    end_page: Optional[int] = Field(None, ge=1)

    def contains(self, page: int) -> bool:
        if page < self.start_page:
            return False
        return self.end_page is None or page <= self.end_page


class Payload(BaseIRModel):
    """One rendered (header, table) unit."""

    header: str = ""
    table: list[dict[str, str]] = Field(default_factory=list)
