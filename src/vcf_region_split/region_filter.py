"""
Region-based VCF splitting and filtering for vcf_region_split.

This module provides the file-level entry points: stream a VCF, split its
records at target region boundaries, and write or collect the pieces.
"""

import gzip
import warnings
from typing import Dict, Iterator, Tuple, Union

import pandas as pd

from .chromosome_utils import match_chromosomes_with_report
from .core import MalformedRecordError
from .handler import EmittedPiece, RegionFilterOptions, RegionVcfRecordHandler
from .variant_utils import get_vcf_chromosomes, iter_vcf_lines


def _build_handler(regions, reference_fn, exclude_off_target, include_variants):
    options = RegionFilterOptions(
        exclude_off_target=exclude_off_target, include_variants=include_variants
    )
    return RegionVcfRecordHandler(regions, reference_fn, options)


def _iter_processed(
    vcf_path, handler: RegionVcfRecordHandler, skip_malformed: bool
) -> Iterator[Tuple[bool, Union[str, EmittedPiece]]]:
    """Yield ``(True, header_line)`` or ``(False, piece)`` in file order."""
    for line_no, (is_header, line) in enumerate(iter_vcf_lines(vcf_path), start=1):
        if is_header:
            yield True, line
            continue
        try:
            pieces = handler.process_line(line)
        except MalformedRecordError as e:
            if not skip_malformed:
                raise
            warnings.warn(f"Skipped malformed record (VCF line {line_no}): {e}")
            handler.record_skipped()
            continue
        for piece in pieces:
            yield False, piece


def _report_chromosomes(vcf_path, handler: RegionVcfRecordHandler):
    vcf_chroms = get_vcf_chromosomes(vcf_path)
    match_chromosomes_with_report(handler.reference.chromosomes(), vcf_chroms, verbose=True)
    without_regions = sorted(c for c in vcf_chroms if c not in handler.regions)
    if without_regions:
        print(f"Chromosomes without target regions (pass-through): {without_regions}")


def format_split_report(stats: Dict[str, int]) -> str:
    """Generate a human-readable summary of a splitting run."""
    lines = ["Region Split Report", "=" * 40]
    lines.append(f"Records processed: {stats['records']:,}")
    lines.append(f"Records split at region boundaries: {stats['split_records']:,}")
    lines.append(f"In-region pieces: {stats['pieces_in_region']:,}")
    lines.append(f"Off-region pieces: {stats['pieces_off_region']:,}")
    lines.append(f"Pieces written: {stats['pieces_written']:,}")
    lines.append(f"Pieces dropped: {stats['pieces_dropped']:,}")
    if stats.get("malformed_skipped"):
        lines.append(f"Malformed records skipped: {stats['malformed_skipped']:,}")
    return "\n".join(lines)


def split_vcf_by_regions(
    vcf_path,
    regions,
    reference_fn,
    output_path,
    exclude_off_target=False,
    include_variants=False,
    skip_malformed=False,
    verbose=False,
):
    """
    Split VCF records at target region boundaries and write the result.

    Header lines are copied unchanged. Each record is written whole, or as
    a run of pieces if its span (POS to INFO END) crosses a region boundary.
    Records must be sorted by position within each chromosome.

    Args:
        vcf_path: Input VCF path (plain or .gz)
        regions: RegionTable, dict of chromosome to sorted ``(start, end)``
            pairs (closed, 1-based), or DataFrame with chrom/start/end columns
        reference_fn: FASTA path, pyfaidx Fasta or dict of sequences
        output_path: Output VCF path; written gzipped if it ends in .gz
        exclude_off_target: Drop pieces outside all regions (default: False)
        include_variants: Keep off-region strict variants even when
            exclude_off_target is set (default: False)
        skip_malformed: Warn and skip malformed records instead of raising
            (default: False)
        verbose: Print chromosome matching and summary reports (default: False)

    Returns:
        dict of counters (records, split_records, pieces_in_region,
        pieces_off_region, pieces_written, pieces_dropped, malformed_skipped)

    Raises:
        MalformedRecordError: a record has the wrong shape and
            skip_malformed is False
        UnsortedRecordsError: records are out of order within a chromosome,
            or a record overlaps an earlier record on a region already passed
        ReferenceLookupError: a record must be split on a chromosome or at a
            position the reference does not cover; fatal even with
            skip_malformed (see the verbose chromosome matching report)
    """
    handler = _build_handler(regions, reference_fn, exclude_off_target, include_variants)
    if verbose:
        _report_chromosomes(vcf_path, handler)

    opener = gzip.open if str(output_path).endswith(".gz") else open
    with opener(output_path, "wt") as out:
        for is_header, item in _iter_processed(vcf_path, handler, skip_malformed):
            if is_header:
                out.write(item + "\n")
            else:
                out.write(item.record.to_line() + "\n")

    if verbose:
        print(format_split_report(handler.stats))
    return dict(handler.stats)


def get_region_split_records(
    vcf_path,
    regions,
    reference_fn,
    exclude_off_target=False,
    include_variants=False,
    skip_malformed=False,
):
    """
    Split VCF records at target region boundaries and collect the pieces.

    Takes the same arguments as ``split_vcf_by_regions`` apart from the
    output path.

    Returns:
        DataFrame with one row per emitted piece and columns:
        chrom, pos1, end, id, ref, alt, in_region, line
    """
    handler = _build_handler(regions, reference_fn, exclude_off_target, include_variants)

    rows = []
    for is_header, item in _iter_processed(vcf_path, handler, skip_malformed):
        if is_header:
            continue
        record = item.record
        begin, end = record.span()
        rows.append(
            {
                "chrom": record.chrom,
                "pos1": begin,
                "end": end,
                "id": record.id,
                "ref": record.ref,
                "alt": record.alt,
                "in_region": item.in_region,
                "line": record.to_line(),
            }
        )

    columns = ["chrom", "pos1", "end", "id", "ref", "alt", "in_region", "line"]
    return pd.DataFrame(rows, columns=columns)
