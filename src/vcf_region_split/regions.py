"""
Target region table and per-chromosome cursor for vcf_region_split.

Regions are closed, 1-based intervals grouped by chromosome. The table is
read-only after construction; the cursor walks one chromosome's intervals
forward as records arrive in position order.
"""

from typing import Dict, Iterable, Iterator, Mapping, NamedTuple, Optional, Tuple
import numpy as np
import pandas as pd

from .core import RegionTableError, UnsortedRecordsError


class Interval(NamedTuple):
    """Closed genomic interval ``[start, end]``."""

    start: int
    end: int


def _validate_intervals(chrom: str, starts: np.ndarray, ends: np.ndarray) -> None:
    """Raise RegionTableError unless intervals are well-formed, ascending and disjoint."""
    if len(starts) == 0:
        return

    if np.any(starts < 0):
        idx = int(np.argmax(starts < 0))
        raise RegionTableError(
            f"Region on {chrom} has negative start: [{starts[idx]}, {ends[idx]}]"
        )

    bad = starts > ends
    if np.any(bad):
        idx = int(np.argmax(bad))
        raise RegionTableError(
            f"Region on {chrom} has start > end: [{starts[idx]}, {ends[idx]}]"
        )

    # Each interval must begin strictly after the previous one ends
    overlap = starts[1:] <= ends[:-1]
    if np.any(overlap):
        idx = int(np.argmax(overlap))
        raise RegionTableError(
            f"Regions on {chrom} are unsorted or overlapping: "
            f"[{starts[idx]}, {ends[idx]}] followed by "
            f"[{starts[idx + 1]}, {ends[idx + 1]}]"
        )


class RegionTable:
    """
    Immutable mapping from chromosome name to sorted, disjoint intervals.

    Chromosome names are matched exactly (case sensitive). Intervals must
    already be sorted and non-overlapping; they are validated here but
    never merged or reordered.

    Args:
        regions: Mapping of chromosome name to an iterable of ``(start, end)``
            pairs (closed, 1-based).

    Example:
        >>> table = RegionTable({"chr1": [(10, 20), (30, 40)]})
        >>> table.get("chr1")
        (Interval(start=10, end=20), Interval(start=30, end=40))
    """

    def __init__(self, regions: Optional[Mapping[str, Iterable[Tuple[int, int]]]] = None):
        self._regions: Dict[str, Tuple[Interval, ...]] = {}
        for chrom, intervals in (regions or {}).items():
            pairs = [(int(s), int(e)) for s, e in intervals]
            arr = np.array(pairs, dtype=np.int64).reshape(-1, 2)
            _validate_intervals(str(chrom), arr[:, 0], arr[:, 1])
            self._regions[str(chrom)] = tuple(Interval(s, e) for s, e in pairs)

    @classmethod
    def from_dataframe(cls, regions_df: pd.DataFrame) -> "RegionTable":
        """
        Build a table from a DataFrame with ``chrom``, ``start`` and ``end`` columns.

        Rows for each chromosome must already be in ascending order. Row order
        across chromosomes does not matter.
        """
        missing = {"chrom", "start", "end"} - set(regions_df.columns)
        if missing:
            raise RegionTableError(
                f"Region DataFrame is missing required columns: {sorted(missing)}"
            )

        regions = {}
        for chrom, group in regions_df.groupby("chrom", sort=False):
            regions[str(chrom)] = list(
                zip(group["start"].astype(int), group["end"].astype(int))
            )
        return cls(regions)

    def get(self, chrom: str) -> Tuple[Interval, ...]:
        """Return the intervals for ``chrom``, or an empty tuple if it has none."""
        return self._regions.get(chrom, ())

    def chromosomes(self):
        return list(self._regions.keys())

    def n_intervals(self) -> int:
        return sum(len(v) for v in self._regions.values())

    def __contains__(self, chrom) -> bool:
        return chrom in self._regions

    def __iter__(self) -> Iterator[str]:
        return iter(self._regions)

    def __len__(self) -> int:
        return len(self._regions)

    def __repr__(self) -> str:
        return f"RegionTable({len(self)} chromosomes, {self.n_intervals()} intervals)"


def as_region_table(regions) -> RegionTable:
    """Return ``regions`` as a RegionTable, accepting a table, mapping or DataFrame."""
    if isinstance(regions, RegionTable):
        return regions
    if isinstance(regions, pd.DataFrame):
        return RegionTable.from_dataframe(regions)
    return RegionTable(regions)


class ChromosomeCursor:
    """
    Forward-only position in one chromosome's region list.

    The cursor is re-targeted whenever a new chromosome name is observed.
    Within a chromosome it never moves backwards, so records must arrive
    in non-decreasing start position. ``check_order`` enforces this, and
    also rejects a record that overlaps an earlier record's span on a region
    the cursor has already moved past.
    """

    def __init__(self, regions: RegionTable):
        self.regions = regions
        self.chrom: Optional[str] = None
        self.skip_chrom = True
        self._intervals: Tuple[Interval, ...] = ()
        self._index = 0
        self._last_begin: Optional[int] = None
        self._last_end: Optional[int] = None

    def observe(self, chrom: str) -> bool:
        """
        Point the cursor at ``chrom``'s regions if the chromosome changed.

        Returns:
            True if the chromosome differs from the previous observation.
        """
        if chrom == self.chrom:
            return False

        self.chrom = chrom
        self._intervals = self.regions.get(chrom)
        self._index = 0
        self._last_begin = None
        self._last_end = None
        # Unknown chromosomes have no regions; nothing to intersect
        self.skip_chrom = len(self._intervals) == 0
        return True

    def check_order(self, begin: int, end: int) -> None:
        """
        Reject a record span the forward-only cursor cannot classify.

        Raises:
            UnsortedRecordsError: ``begin`` precedes the previous record's
                start, or the span overlaps an earlier record's span on a
                region the cursor has already passed.
        """
        if self._last_begin is not None and begin < self._last_begin:
            raise UnsortedRecordsError(
                f"Record at {self.chrom}:{begin} follows {self.chrom}:{self._last_begin}; "
                "records must be sorted by position within each chromosome"
            )

        if self._last_end is not None and begin <= self._last_end:
            passed = self._passed_region_overlapping(begin, end)
            if passed is not None:
                raise UnsortedRecordsError(
                    f"Overlapping records: {self.chrom}:{begin}-{end} starts inside the "
                    f"previous record span ending at {self._last_end} and overlaps region "
                    f"[{passed.start}, {passed.end}], which was already consumed"
                )

        self._last_begin = begin
        if self._last_end is None or end > self._last_end:
            self._last_end = end

    def _passed_region_overlapping(self, begin: int, end: int) -> Optional[Interval]:
        # Passed intervals ending at or after begin form a suffix of the passed list
        idx = self._index - 1
        found = None
        while idx >= 0 and self._intervals[idx].end >= begin:
            if self._intervals[idx].start <= end:
                found = self._intervals[idx]
            idx -= 1
        return found

    @property
    def current(self) -> Optional[Interval]:
        """The interval under the cursor, or None when exhausted."""
        if self._index < len(self._intervals):
            return self._intervals[self._index]
        return None

    def advance(self) -> Optional[Interval]:
        """Step to the next interval and return it."""
        if self._index < len(self._intervals):
            self._index += 1
        return self.current

    def advance_past(self, pos: int) -> Optional[Interval]:
        """Skip intervals that end before ``pos`` and return the new current interval."""
        while self._index < len(self._intervals) and self._intervals[self._index].end < pos:
            self._index += 1
        return self.current
