"""
Chromosome name matching utilities for vcf_region_split.

Reference FASTA files and VCF files often disagree on chromosome naming
('chr1' vs '1', 'chrM' vs 'MT'). These helpers resolve VCF names to
reference names for base lookup. Region lookups do not use them; region
chromosome names must match the VCF exactly.
"""

import re
import warnings
from typing import Dict, Iterable, Optional, Set, Tuple


def normalize_chromosome_name(chrom_name: str) -> str:
    """
    Normalize chromosome name to a standard format.

    Args:
        chrom_name: Raw chromosome name from VCF or FASTA

    Returns:
        Normalized chromosome name (without 'chr' prefix, uppercase)

    Examples:
        'chr1' -> '1'
        'chrX' -> 'X'
        'chrM' -> 'MT'
    """
    normalized = re.sub(r"^chr", "", str(chrom_name).strip(), flags=re.IGNORECASE)

    if normalized.upper() in ["M", "MITO", "MITOCHONDRION"]:
        normalized = "MT"

    return normalized.upper()


def resolve_chromosome_name(vcf_chrom: str, reference_chroms: Iterable[str]) -> Optional[str]:
    """
    Find the reference chromosome name matching a VCF chromosome name.

    Tried in order:
    1. Exact match
    2. Case-insensitive match
    3. Adding or removing a 'chr' prefix
    4. Normalized match (handles mitochondrial aliases)

    Returns:
        The matching reference name, or None.
    """
    reference_chroms = list(reference_chroms)
    if vcf_chrom in reference_chroms:
        return vcf_chrom

    lowered = {ref.lower(): ref for ref in reference_chroms}
    if vcf_chrom.lower() in lowered:
        return lowered[vcf_chrom.lower()]

    if vcf_chrom.lower().startswith("chr"):
        toggled = vcf_chrom[3:]
    else:
        toggled = f"chr{vcf_chrom}"
    if toggled.lower() in lowered:
        return lowered[toggled.lower()]

    vcf_normalized = normalize_chromosome_name(vcf_chrom)
    for ref_chrom in reference_chroms:
        if normalize_chromosome_name(ref_chrom) == vcf_normalized:
            return ref_chrom

    return None


def create_chromosome_mapping(
    reference_chroms: Set[str], vcf_chroms: Set[str]
) -> Tuple[Dict[str, str], Set[str]]:
    """
    Create a mapping from VCF chromosome names to reference chromosome names.

    Args:
        reference_chroms: Set of chromosome names from reference FASTA
        vcf_chroms: Set of chromosome names from VCF file

    Returns:
        Tuple of (mapping dict, unmatched set)

    Example:
        reference_chroms = {'1', '2', 'MT'}
        vcf_chroms = {'chr1', 'chrM'}
        Returns: ({'chr1': '1', 'chrM': 'MT'}, set())
    """
    mapping = {}
    unmatched_vcf = set()
    for vcf_chrom in vcf_chroms:
        matched_ref = resolve_chromosome_name(vcf_chrom, reference_chroms)
        if matched_ref is not None:
            mapping[vcf_chrom] = matched_ref
        else:
            unmatched_vcf.add(vcf_chrom)
    return mapping, unmatched_vcf


def get_chromosome_match_report(
    reference_chroms: Set[str],
    vcf_chroms: Set[str],
    mapping: Dict[str, str],
    unmatched: Set[str],
) -> str:
    """Generate a human-readable report of chromosome matching results."""
    report_lines = []

    report_lines.append("Chromosome Matching Report")
    report_lines.append("=" * 40)
    report_lines.append(
        f"Reference chromosomes ({len(reference_chroms)}): {sorted(reference_chroms)}"
    )
    report_lines.append(f"VCF chromosomes ({len(vcf_chroms)}): {sorted(vcf_chroms)}")
    report_lines.append("")

    renamed = {k: v for k, v in mapping.items() if k != v}
    if renamed:
        report_lines.append(f"Renamed for reference lookup ({len(renamed)}):")
        for vcf_chrom, ref_chrom in sorted(renamed.items()):
            report_lines.append(f"  '{vcf_chrom}' -> '{ref_chrom}'")

    if unmatched:
        report_lines.append("")
        report_lines.append(f"Unmatched VCF chromosomes ({len(unmatched)}):")
        for chrom in sorted(unmatched):
            report_lines.append(f"  '{chrom}' (no reference sequence; splits cannot be refreshed)")

    report_lines.append("")
    coverage = len(mapping) / len(vcf_chroms) * 100 if vcf_chroms else 100
    report_lines.append(
        f"Matching coverage: {coverage:.1f}% ({len(mapping)}/{len(vcf_chroms)})"
    )

    return "\n".join(report_lines)


def match_chromosomes_with_report(
    reference_chroms: Set[str], vcf_chroms: Set[str], verbose: bool = True
) -> Tuple[Dict[str, str], Set[str]]:
    """
    Match chromosomes and optionally print a detailed report.

    Unmatched VCF chromosomes are reported with a warning; their records can
    still pass through whole, but any split on them fails at base lookup.

    Returns:
        Tuple of (mapping dict, unmatched set)
    """
    mapping, unmatched = create_chromosome_mapping(reference_chroms, vcf_chroms)

    if verbose and (
        len(mapping) < len(vcf_chroms) or any(k != v for k, v in mapping.items())
    ):
        print(get_chromosome_match_report(reference_chroms, vcf_chroms, mapping, unmatched))

    if unmatched:
        warnings.warn(
            f"Could not match {len(unmatched)} VCF chromosomes to reference: "
            f"{sorted(unmatched)}. Records on these chromosomes cannot be split."
        )

    return mapping, unmatched
