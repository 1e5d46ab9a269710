"""
Reference sequence access for vcf_region_split.

Split pieces need the reference base at their new start position. The
reference may be a FASTA path (opened with pyfaidx), a pyfaidx ``Fasta``
object, or a plain dict of chromosome name to sequence string.
"""

import os
from typing import Dict, Optional, Union

from pyfaidx import Fasta

from .chromosome_utils import resolve_chromosome_name


def _load_reference(reference_fn: Union[str, Dict, Fasta]) -> Union[Dict, Fasta]:
    """Load reference genome from file or return as-is if already loaded."""
    if isinstance(reference_fn, (str, os.PathLike)):
        if not os.path.isfile(reference_fn):
            raise FileNotFoundError(f"Reference FASTA not found: {reference_fn}")
        return Fasta(str(reference_fn))
    return reference_fn


class ReferenceBaseSource:
    """
    Looks up single reference bases by chromosome and 1-based position.

    VCF chromosome names are resolved to reference names once per name
    (e.g. 'chr1' in the VCF can read from '1' in the FASTA).
    """

    def __init__(self, reference_fn: Union[str, Dict, Fasta]):
        self.reference = _load_reference(reference_fn)
        self._names: Dict[str, Optional[str]] = {}

    def chromosomes(self):
        return set(self.reference.keys())

    def _resolve(self, chrom: str) -> str:
        if chrom not in self._names:
            self._names[chrom] = resolve_chromosome_name(chrom, self.reference.keys())
        ref_chrom = self._names[chrom]
        if ref_chrom is None:
            raise KeyError(f"Chromosome '{chrom}' not found in reference")
        return ref_chrom

    def get_base(self, chrom: str, pos: int) -> str:
        """Return the upper-case reference base at ``chrom:pos`` (1-based)."""
        seq = self.reference[self._resolve(chrom)]
        if pos < 1 or pos > len(seq):
            raise IndexError(
                f"Position {chrom}:{pos} is outside the reference sequence (length {len(seq)})"
            )
        return str(seq[pos - 1]).upper()
