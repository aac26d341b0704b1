"""Pytest configuration and fixtures."""

import pytest

from pdfnorm.config import Settings
from pdfnorm.models import (
    Block,
    BoundingBox,
    LineItem,
    PageResult,
    PathSegment,
    TextFragment,
)


def box(x, y, width, height) -> BoundingBox:
    return BoundingBox(x=x, y=y, width=width, height=height)


def fragment(text, x, y, width, height=10) -> TextFragment:
    return TextFragment(text=text, bbox=box(x, y, width, height))


def vseg(x, y1, y2) -> PathSegment:
    return PathSegment(x1=x, y1=y1, x2=x, y2=y2)


def hseg(y, x1, x2) -> PathSegment:
    return PathSegment(x1=x1, y1=y, x2=x2, y2=y)


def ruled_grid(xs, ys) -> list[PathSegment]:
    """Full-length rulings at every x and y position."""
    segments = [vseg(x, min(ys), max(ys)) for x in xs]
    segments += [hseg(y, min(xs), max(xs)) for y in ys]
    return segments


def line(text, x, y, width=100, height=10) -> LineItem:
    return LineItem(bbox=box(x, y, width, height), text=text)


def grid_blocks(rows, x=50, top=660, col_width=100, row_height=20) -> list[Block]:
    """Blocks for a fully populated grid; ``rows`` listed top to bottom."""
    blocks = []
    for r, row in enumerate(rows):
        y = top - (r + 1) * row_height
        for c, text in enumerate(row):
            blocks.append(Block(bbox=box(x + c * col_width, y, col_width, row_height), text=text))
    return blocks


@pytest.fixture
def config():
    """Default tolerances."""
    return Settings()


@pytest.fixture
def invoice_page():
    """Page with two header lines above a 3x2 table."""
    return PageResult(
        page=1,
        width=600,
        height=800,
        lines=[
            line("Invoice 42", 50, 700),
            line("Customer: ACME", 50, 688),
        ],
        blocks=grid_blocks(
            [
                ["Item", "Qty"],
                ["Bolt", "10"],
                ["Nut", "5"],
            ]
        ),
    )


@pytest.fixture
def output_dir(tmp_path):
    """Create a temporary output directory."""
    out_dir = tmp_path / "output"
    out_dir.mkdir()
    return out_dir
