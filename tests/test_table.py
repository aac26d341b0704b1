"""Tests for the table grouping stage."""

import pytest

from conftest import box, grid_blocks
from pdfnorm.models import Block
from pdfnorm.pipeline.stage_table import TableGrouper, cluster_edges, find_band


class TestClusterEdges:
    """Tests for boundary clustering."""

    def test_runs_collapse_to_rounded_mean(self):
        assert cluster_edges([0, 1, 50, 51, 100], 1) == [0, 50, 100]

    def test_run_measured_from_first_value(self):
        assert cluster_edges([0, 1, 2], 1) == [0, 2]

    def test_unsorted_and_duplicates(self):
        assert cluster_edges([100, 0, 0, 50, 50], 1) == [0, 50, 100]

    def test_empty(self):
        assert cluster_edges([], 1) == []


class TestFindBand:
    """Tests for band lookup."""

    def test_inside(self):
        assert find_band(15, [0, 10, 20]) == 1

    def test_shared_boundary_goes_to_first_band(self):
        assert find_band(10, [0, 10, 20]) == 0

    def test_outside(self):
        assert find_band(25, [0, 10, 20]) == -1
        assert find_band(5, [10]) == -1


class TestAdjacency:
    """Tests for block adjacency rules."""

    @pytest.fixture
    def grouper(self, config):
        return TableGrouper(config)

    def test_side_by_side(self, grouper):
        assert grouper.are_adjacent(box(0, 0, 50, 20), box(51, 0, 50, 20))

    def test_stacked(self, grouper):
        assert grouper.are_adjacent(box(0, 0, 50, 20), box(0, 22, 50, 20))

    def test_gap_too_wide(self, grouper):
        assert not grouper.are_adjacent(box(0, 0, 50, 20), box(53, 0, 50, 20))

    def test_overlap_of_one_point_is_not_enough(self, grouper):
        assert not grouper.are_adjacent(box(0, 0, 50, 20), box(50, 19, 50, 20))

    def test_overlapping_boxes_bridge(self, grouper):
        assert grouper.are_adjacent(box(0, 0, 50, 20), box(30, 10, 50, 20))


class TestTableGrouper:
    """Tests for table construction from blocks."""

    @pytest.fixture
    def grouper(self, config):
        return TableGrouper(config)

    def test_two_by_two(self, grouper):
        tables = grouper.extract_tables(grid_blocks([["a", "b"], ["c", "d"]]))

        assert len(tables) == 1
        table = tables[0]
        assert table.cells == [["a", "b"], ["c", "d"]]
        assert (table.bbox.x, table.bbox.y, table.bbox.right, table.bbox.top) == (50, 620, 250, 660)

    def test_lone_block_is_not_a_table(self, grouper):
        blocks = [Block(bbox=box(0, 0, 50, 20), text="boxed")]
        assert grouper.extract_tables(blocks) == []

    def test_separate_tables(self, grouper):
        blocks = grid_blocks([["a", "b"]], x=0, top=700) + grid_blocks([["c", "d"]], x=0, top=500)
        tables = grouper.extract_tables(blocks)

        assert sorted(t.cells[0][0] for t in tables) == ["a", "c"]

    def test_missing_block_leaves_empty_cell(self, grouper):
        blocks = [
            Block(bbox=box(0, 0, 50, 20), text="a"),
            Block(bbox=box(0, 20, 50, 20), text="b"),
            Block(bbox=box(50, 0, 50, 20), text="c"),
        ]
        table = grouper.build_table(blocks)

        assert table.cells == [["b", ""], ["a", "c"]]

    def test_blocks_in_same_cell_are_appended(self, grouper):
        blocks = [
            Block(bbox=box(0, 0, 50, 20), text="x"),
            Block(bbox=box(0, 0, 50, 20), text="y"),
        ]
        tables = grouper.extract_tables(blocks)

        assert tables[0].cells == [["x\ny"]]

    def test_touching_tables_merge(self, grouper):
        """Two grids one point apart are read as one wide table."""
        blocks = grid_blocks([["a", "b"]], x=0, col_width=50) + grid_blocks(
            [["c", "d"]], x=101, col_width=50
        )
        tables = grouper.extract_tables(blocks)

        assert len(tables) == 1
        assert tables[0].cells == [["a", "b", "c", "d"]]

    def test_all_cells_accounted_for(self, grouper):
        rows = [["h1", "h2", "h3"], ["1", "2", "3"], ["4", "5", "6"], ["7", "8", "9"]]
        table = grouper.extract_tables(grid_blocks(rows, col_width=60, row_height=15))[0]

        assert (table.rows, table.cols) == (4, 3)
        assert table.cells == rows
