"""
Tests for splitting record spans at region boundaries.

Covers the overlap pre-test, piece boundaries for partial, contained,
single-base and adjacent regions, and tiling over random region sets.
"""

import numpy as np
import pytest

from vcf_region_split import ChromosomeCursor, RegionTable, SpanSplitter, SplitInterval


def make_splitter(intervals, chrom="chr1"):
    cursor = ChromosomeCursor(RegionTable({chrom: intervals}))
    cursor.observe(chrom)
    return SpanSplitter(cursor)


def pieces(splitter, begin, end):
    return [(p.begin, p.end, p.in_region) for p in splitter.split(begin, end)]


class TestOverlapPretest:
    """Test the fast intersection check."""

    def test_span_before_region(self):
        """Test a span ending just before the region."""
        splitter = make_splitter([(100, 200)])
        assert splitter.intersects(10, 99) is False
        assert splitter.cursor.skip_chrom is False

    def test_span_touching_region_start(self):
        """Test a span whose last base is the region's first base."""
        splitter = make_splitter([(100, 200)])
        assert splitter.intersects(90, 100) is True

    def test_span_after_all_regions_marks_skip(self):
        """Test that passing the last region skips the chromosome."""
        splitter = make_splitter([(100, 200)])
        assert splitter.intersects(201, 300) is False
        assert splitter.cursor.skip_chrom is True
        # Later records on the chromosome are rejected without lookups
        assert splitter.intersects(150, 150) is False

    def test_span_between_regions(self):
        """Test a span lying in the gap between two regions."""
        splitter = make_splitter([(10, 20), (40, 50)])
        assert splitter.intersects(25, 39) is False
        assert splitter.cursor.current == (40, 50)
        assert splitter.intersects(45, 45) is True

    def test_chromosome_without_regions(self):
        """Test that a chromosome with no regions never intersects."""
        cursor = ChromosomeCursor(RegionTable({"chr1": [(10, 20)]}))
        cursor.observe("chr2")
        splitter = SpanSplitter(cursor)
        assert splitter.intersects(10, 20) is False


class TestSpanSplitting:
    """Test piece boundaries and region flags."""

    def test_single_base_region(self):
        """Test a single-base region inside a longer span."""
        splitter = make_splitter([(100, 100)])
        assert pieces(splitter, 95, 105) == [
            (95, 99, False),
            (100, 100, True),
            (101, 105, False),
        ]

    def test_fully_contained_span(self):
        """Test a span lying entirely inside one region."""
        splitter = make_splitter([(90, 110)])
        assert pieces(splitter, 100, 100) == [(100, 100, True)]

    def test_adjacent_regions(self):
        """Test that adjacent regions produce no gap piece."""
        splitter = make_splitter([(10, 20), (21, 30)])
        assert pieces(splitter, 15, 25) == [(15, 20, True), (21, 25, True)]

    def test_partial_overlap_left(self):
        """Test a span entering a region from the left."""
        splitter = make_splitter([(100, 200)])
        assert pieces(splitter, 50, 150) == [(50, 99, False), (100, 150, True)]

    def test_partial_overlap_right(self):
        """Test a span leaving a region on the right."""
        splitter = make_splitter([(100, 200)])
        assert pieces(splitter, 150, 250) == [(150, 200, True), (201, 250, False)]

    def test_span_covering_multiple_regions(self):
        """Test a span crossing several regions."""
        splitter = make_splitter([(10, 20), (30, 40), (50, 60)])
        assert pieces(splitter, 1, 100) == [
            (1, 9, False),
            (10, 20, True),
            (21, 29, False),
            (30, 40, True),
            (41, 49, False),
            (50, 60, True),
            (61, 100, False),
        ]

    def test_span_missing_all_regions(self):
        """Test that a span before every region is returned whole."""
        splitter = make_splitter([(100, 200)])
        assert pieces(splitter, 10, 20) == [(10, 20, False)]

    def test_span_matching_region_exactly(self):
        """Test a span equal to a region."""
        splitter = make_splitter([(100, 200)])
        assert pieces(splitter, 100, 200) == [(100, 200, True)]

    def test_successive_records_advance_cursor(self):
        """Test consecutive spans sharing one cursor."""
        splitter = make_splitter([(10, 20), (30, 40)])
        assert pieces(splitter, 5, 15) == [(5, 9, False), (10, 15, True)]
        assert pieces(splitter, 16, 35) == [(16, 20, True), (21, 29, False), (30, 35, True)]
        assert pieces(splitter, 36, 50) == [(36, 40, True), (41, 50, False)]
        assert pieces(splitter, 60, 70) == [(60, 70, False)]
        assert splitter.cursor.skip_chrom is True

    def test_more_flag(self):
        """Test that only the last piece reports no more pieces."""
        splitter = make_splitter([(100, 100)])
        result = list(splitter.split(99, 100))
        assert result == [
            SplitInterval(99, 99, False, True),
            SplitInterval(100, 100, True, False),
        ]

    def test_reset_rejects_inverted_span(self):
        """Test that begin > end is rejected."""
        splitter = make_splitter([(100, 200)])
        with pytest.raises(ValueError, match="after end"):
            splitter.reset(10, 5)


class TestSplittingProperties:
    """Tiling and containment over randomly generated region sets."""

    @staticmethod
    def random_regions(rng, n, max_gap=6, max_len=6):
        regions = []
        pos = int(rng.integers(1, max_gap + 1))
        for _ in range(n):
            length = int(rng.integers(1, max_len + 1))
            regions.append((pos, pos + length - 1))
            # gap of 0 gives adjacent regions
            pos = pos + length + int(rng.integers(0, max_gap + 1))
        return regions

    @pytest.mark.parametrize("seed", range(20))
    def test_tiling_and_containment(self, seed):
        """Test tiling and region flags over random region sets."""
        rng = np.random.default_rng(seed)
        regions = self.random_regions(rng, n=8)
        splitter = make_splitter(regions)
        covered = np.zeros(regions[-1][1] + 20, dtype=bool)
        for start, end in regions:
            covered[start:end + 1] = True

        begin = 1
        while begin < len(covered) - 1:
            end = min(begin + int(rng.integers(0, 15)), len(covered) - 1)
            result = list(splitter.split(begin, end))

            # Tiling: contiguous, ascending, exactly [begin, end]
            assert result[0].begin == begin
            assert result[-1].end == end
            for prev, nxt in zip(result, result[1:]):
                assert nxt.begin == prev.end + 1
            assert all(p.begin <= p.end for p in result)
            assert [p.more for p in result] == [True] * (len(result) - 1) + [False]

            # Containment: in-region pieces lie inside regions, off-region pieces miss them
            for p in result:
                piece_cover = covered[p.begin:p.end + 1]
                if p.in_region:
                    assert piece_cover.all()
                else:
                    assert not piece_cover.any()

            begin = end + int(rng.integers(1, 5))
