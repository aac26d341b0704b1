"""Pipeline stages for PDF table normalization.

Deterministic stages, leaves first:
1. stage_capture - PDF pages to text fragments and path segments
2. stage_grid - Path segments to grid lines and cell rectangles
3. stage_assign - Fragments to cell blocks or free text lines
4. stage_extract - Per-page driver for stages 2-3
5. stage_table - Cell blocks to whole tables
6. stage_sequence - Lines and tables in document reading order
7. stage_subdoc - Subdocument detection and header+table reduction
8. stage_render - Flat text and (header, table) payloads

Each stage is independent and can be run separately or
orchestrated through DocumentPipeline.
"""

from .runner import DocumentPipeline
from .stage_assign import FragmentAssigner, join_fragments
from .stage_capture import PdfCapture
from .stage_extract import PageExtractor
from .stage_grid import GridBuilder
from .stage_render import JsonRenderer, TextRenderer, unique_column_keys
from .stage_sequence import ItemSequencer, reading_order_key
from .stage_subdoc import SubdocumentSplitter
from .stage_table import TableGrouper

__all__ = [
    # Capture
    "PdfCapture",
    # Grid
    "GridBuilder",
    # Assignment
    "FragmentAssigner",
    "join_fragments",
    # Page extraction
    "PageExtractor",
    # Tables
    "TableGrouper",
    # Sequencing
    "ItemSequencer",
    "reading_order_key",
    # Subdocuments
    "SubdocumentSplitter",
    # Rendering
    "JsonRenderer",
    "TextRenderer",
    "unique_column_keys",
    # Orchestration
    "DocumentPipeline",
]
