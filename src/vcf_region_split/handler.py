"""
Per-record region classification and emission.

``RegionVcfRecordHandler`` takes VCF records in file order, classifies each
against the target regions, splits records that straddle region
boundaries, and decides which pieces are written out.
"""

from dataclasses import dataclass
from typing import Dict, List, NamedTuple

from .core import ReferenceLookupError
from .reference import ReferenceBaseSource
from .regions import ChromosomeCursor, as_region_table
from .splitter import SpanSplitter
from .variant_utils import VcfRecord


@dataclass
class RegionFilterOptions:
    """
    Emission policy for off-region records and pieces.

    Attributes:
        exclude_off_target: Drop off-region pieces.
        include_variants: With ``exclude_off_target``, still keep off-region
            pieces whose sample genotype is a strict variant.
    """

    exclude_off_target: bool = False
    include_variants: bool = False


class EmittedPiece(NamedTuple):
    record: VcfRecord
    in_region: bool


def should_emit_off_region(record: VcfRecord, options: RegionFilterOptions) -> bool:
    """Decide whether an off-region record or piece is written out."""
    if not options.exclude_off_target:
        return True
    if options.include_variants and record.is_strict_variant():
        return True
    return False


class RegionVcfRecordHandler:
    """
    Classify and split a stream of VCF records against target regions.

    Records must be sorted by position within each chromosome. Chromosomes
    absent from the region table pass through as off-region records.

    Args:
        regions: RegionTable, mapping of chromosome to intervals, or DataFrame
        reference: ReferenceBaseSource, FASTA path, pyfaidx Fasta or dict of
            sequences; used to fill REF for split pieces
        options: RegionFilterOptions (defaults keep every record)
    """

    def __init__(self, regions, reference, options: RegionFilterOptions = None):
        self.regions = as_region_table(regions)
        if isinstance(reference, ReferenceBaseSource):
            self.reference = reference
        else:
            self.reference = ReferenceBaseSource(reference)
        self.options = options or RegionFilterOptions()
        self.cursor = ChromosomeCursor(self.regions)
        self.splitter = SpanSplitter(self.cursor)
        self.stats: Dict[str, int] = {
            "records": 0,
            "split_records": 0,
            "pieces_in_region": 0,
            "pieces_off_region": 0,
            "pieces_written": 0,
            "pieces_dropped": 0,
            "malformed_skipped": 0,
        }

    def process_line(self, line: str) -> List[EmittedPiece]:
        """Parse one tab-delimited record line and process it."""
        return self.process_record(VcfRecord.from_line(line))

    def process_record(self, record: VcfRecord) -> List[EmittedPiece]:
        """
        Classify one record and return the pieces to write, in order.

        Raises:
            MalformedRecordError: POS or END cannot be interpreted.
            UnsortedRecordsError: record starts before the previous record
                on the same chromosome, or overlaps an earlier record on a
                region already passed.
            ReferenceLookupError: a split needs a reference base the
                reference cannot supply.
        """
        begin, end = record.span()
        self.cursor.observe(record.chrom)
        self.cursor.check_order(begin, end)
        self.stats["records"] += 1

        # Cheap reject: no region touches this record
        if not self.splitter.intersects(begin, end):
            return self._emit([], record, False)

        emitted: List[EmittedPiece] = []
        self.splitter.reset(begin, end)
        piece_record = record
        n_pieces = 0
        while True:
            piece = self.splitter.next_interval()
            n_pieces += 1
            if piece.begin != begin:
                ref_base = self._reference_base(record, piece.begin)
                piece_record = record.with_split(piece.begin, ref_base, piece.end)
            elif piece.more:
                piece_record = record.with_split(piece.begin, record.ref, piece.end)
            self._emit(emitted, piece_record, piece.in_region)
            if not piece.more:
                break

        if n_pieces > 1:
            self.stats["split_records"] += 1
        return emitted

    def _reference_base(self, record: VcfRecord, pos: int) -> str:
        try:
            return self.reference.get_base(record.chrom, pos)
        except (KeyError, IndexError) as e:
            raise ReferenceLookupError(
                f"Cannot split record at {record.chrom}:{record.pos}: {e.args[0]}"
            ) from e

    def _emit(self, emitted: List[EmittedPiece], record: VcfRecord, in_region: bool):
        if in_region:
            self.stats["pieces_in_region"] += 1
            keep = True
        else:
            self.stats["pieces_off_region"] += 1
            keep = should_emit_off_region(record, self.options)

        if keep:
            self.stats["pieces_written"] += 1
            emitted.append(EmittedPiece(record, in_region))
        else:
            self.stats["pieces_dropped"] += 1
        return emitted

    def record_skipped(self) -> None:
        """Count a record the caller chose to skip after a MalformedRecordError."""
        self.stats["malformed_skipped"] += 1
