"""
Interval splitting of record spans against target regions.

A record span ``[begin, end]`` is cut at every region boundary it crosses.
Each piece is tagged in-region or off-region; together the pieces tile the
span exactly, in ascending order.
"""

from typing import Iterator, NamedTuple

from .regions import ChromosomeCursor


class SplitInterval(NamedTuple):
    """One piece of a record span."""

    begin: int
    end: int
    in_region: bool
    more: bool  # another piece follows for the same span


class SpanSplitter:
    """
    Splits successive record spans on one scan's chromosome cursor.

    Usage per record::

        if splitter.intersects(begin, end):
            splitter.reset(begin, end)
            while True:
                piece = splitter.next_interval()
                ...
                if not piece.more:
                    break

    or simply ``for piece in splitter.split(begin, end)``.
    """

    def __init__(self, cursor: ChromosomeCursor):
        self.cursor = cursor
        self._begin = 0
        self._end = -1

    def intersects(self, begin: int, end: int) -> bool:
        """
        Fast test of whether ``[begin, end]`` touches any remaining region.

        Intervals lying entirely before ``begin`` are consumed. Once the
        chromosome's regions are exhausted, the chromosome is marked skipped
        and later calls return False without any comparison.
        """
        if self.cursor.skip_chrom:
            return False

        interval = self.cursor.advance_past(begin)
        if interval is None:
            self.cursor.skip_chrom = True
            return False
        return end >= interval.start

    def reset(self, begin: int, end: int) -> None:
        if begin > end:
            raise ValueError(f"Span begin {begin} is after end {end}")
        self._begin = begin
        self._end = end

    def next_interval(self) -> SplitInterval:
        """Return the next piece of the current span and narrow the span past it."""
        begin = self._begin
        interval = self.cursor.current
        # The previous piece ended at this interval's end; regions are disjoint,
        # so one step lands on an interval that reaches begin
        if interval is not None and begin > interval.end:
            interval = self.cursor.advance()

        if interval is None:
            # No regions left: the remainder is a single off-region piece
            self._begin = self._end + 1
            return SplitInterval(begin, self._end, False, False)

        if begin < interval.start:
            piece_end = min(self._end, interval.start - 1)
        else:
            piece_end = min(self._end, interval.end)

        in_region = begin <= interval.end and piece_end >= interval.start

        self._begin = piece_end + 1
        return SplitInterval(begin, piece_end, in_region, self._begin <= self._end)

    def split(self, begin: int, end: int) -> Iterator[SplitInterval]:
        """Yield every piece of ``[begin, end]``, or the whole span if it misses all regions."""
        if not self.intersects(begin, end):
            yield SplitInterval(begin, end, False, False)
            return

        self.reset(begin, end)
        while True:
            piece = self.next_interval()
            yield piece
            if not piece.more:
                break
