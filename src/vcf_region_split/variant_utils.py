"""
Variant record handling utilities for vcf_region_split.

This module provides the single-sample VCF record model, INFO and genotype
parsing, and streaming readers for VCF files.
"""

import gzip
import re
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

from .core import (
    ALT,
    CHROM,
    FORMAT,
    ID,
    INFO,
    MISSING,
    POS,
    REF,
    SAMPLE,
    VCF_FIELD_COUNT,
    MalformedRecordError,
)

_GT_SEPARATOR = re.compile(r"[/|]")


def parse_vcf_info(info_string: str) -> Dict:
    """
    Parse a VCF INFO field into a dict.

    Args:
        info_string: VCF INFO field string (e.g., "END=1234;DP=30;DB")

    Returns:
        dict: Parsed INFO values with numeric conversion; flags map to True.

    Examples:
        parse_vcf_info("END=1234;BLOCKAVG_min30p3a")
        → {'END': 1234, 'BLOCKAVG_min30p3a': True}

        parse_vcf_info("AF=0.5;AC=1,2")
        → {'AF': 0.5, 'AC': [1, 2]}
    """
    info_dict = {}
    if not info_string or info_string == MISSING:
        return info_dict

    for field in info_string.split(";"):
        field = field.strip()
        if not field:
            continue

        if "=" in field:
            key, value = field.split("=", 1)
            key = key.strip()
            value = value.strip()
            if "," in value:
                info_dict[key] = [_convert_info_value(v.strip()) for v in value.split(",")]
            else:
                info_dict[key] = _convert_info_value(value)
        else:
            # Boolean flag (presence = True)
            info_dict[field] = True

    return info_dict


def _convert_info_value(value: str):
    try:
        if "." in value:
            return float(value)
        return int(value)
    except ValueError:
        return value


def get_info_value(info_string: str, key: str) -> Optional[str]:
    """Return the raw string value of ``key`` in an INFO field, or None if absent."""
    if not info_string or info_string == MISSING:
        return None
    for field in info_string.split(";"):
        if field == key:
            return ""
        if field.startswith(key + "="):
            return field[len(key) + 1:]
    return None


def set_info_value(info_string: str, key: str, value) -> str:
    """
    Return ``info_string`` with ``key`` set to ``value``.

    An existing key keeps its position; a new key is appended. A missing
    INFO field ('.') is replaced.
    """
    entry = f"{key}={value}"
    if not info_string or info_string == MISSING:
        return entry

    fields = info_string.split(";")
    for i, field in enumerate(fields):
        if field == key or field.startswith(key + "="):
            fields[i] = entry
            return ";".join(fields)
    fields.append(entry)
    return ";".join(fields)


def genotype_alleles(format_field: str, sample_field: str) -> Optional[List[Optional[int]]]:
    """
    Extract allele indices from the GT entry of a sample column.

    Returns:
        List of allele indices, with None for each missing ('.') allele, or
        None if the sample has no GT value.

    Examples:
        genotype_alleles("GT:DP", "0/1:12") → [0, 1]
        genotype_alleles("GT", "./.") → [None, None]
        genotype_alleles("DP", "12") → None
    """
    keys = format_field.split(":")
    if "GT" not in keys:
        return None
    gt_index = keys.index("GT")
    values = sample_field.split(":")
    if gt_index >= len(values) or not values[gt_index]:
        return None

    alleles = []
    for token in _GT_SEPARATOR.split(values[gt_index]):
        alleles.append(int(token) if token.isdigit() else None)
    return alleles


@dataclass(frozen=True)
class VcfRecord:
    """
    A single-sample VCF record kept as its raw text fields.

    Split pieces are new records derived with ``with_split``; the source
    record is never modified.
    """

    fields: Tuple[str, ...]

    @classmethod
    def from_fields(cls, fields: Sequence[str]) -> "VcfRecord":
        if len(fields) != VCF_FIELD_COUNT:
            record_text = "\t".join(fields)
            raise MalformedRecordError(
                f"Unexpected number of fields in VCF record "
                f"(expected {VCF_FIELD_COUNT}, found {len(fields)}): {record_text}"
            )
        return cls(tuple(fields))

    @classmethod
    def from_line(cls, line: str) -> "VcfRecord":
        return cls.from_fields(line.rstrip("\r\n").split("\t"))

    @property
    def chrom(self) -> str:
        return self.fields[CHROM]

    @property
    def pos(self) -> int:
        try:
            return int(self.fields[POS])
        except ValueError:
            raise MalformedRecordError(
                f"POS must be an integer, got '{self.fields[POS]}': {self.to_line()}"
            ) from None

    @property
    def id(self) -> str:
        return self.fields[ID]

    @property
    def ref(self) -> str:
        return self.fields[REF]

    @property
    def alt(self) -> str:
        return self.fields[ALT]

    @property
    def info(self) -> str:
        return self.fields[INFO]

    @property
    def format(self) -> str:
        return self.fields[FORMAT]

    @property
    def sample(self) -> str:
        return self.fields[SAMPLE]

    def span(self) -> Tuple[int, int]:
        """
        Return the record's genomic extent ``(begin, end)``.

        ``end`` is taken from the INFO END key (gVCF blocks) and defaults to POS.
        """
        begin = self.pos
        raw_end = get_info_value(self.info, "END")
        if raw_end is None:
            return begin, begin
        try:
            end = int(raw_end)
        except ValueError:
            raise MalformedRecordError(
                f"INFO END must be an integer, got '{raw_end}': {self.to_line()}"
            ) from None
        if end < begin:
            raise MalformedRecordError(
                f"INFO END {end} precedes POS {begin}: {self.to_line()}"
            )
        return begin, end

    def is_strict_variant(self) -> bool:
        """True if the sample genotype calls at least one non-reference allele."""
        alleles = genotype_alleles(self.format, self.sample)
        if not alleles:
            return False
        return any(a is not None and a > 0 for a in alleles)

    def with_split(self, pos: int, ref: str, end: int) -> "VcfRecord":
        """
        Return a copy of this record covering ``[pos, end]``.

        POS and REF are replaced. INFO END is rewritten when the record
        already carries one or the piece spans more than one base.
        """
        fields = list(self.fields)
        fields[POS] = str(pos)
        fields[REF] = ref
        if end > pos or get_info_value(self.info, "END") is not None:
            fields[INFO] = set_info_value(self.info, "END", end)
        return VcfRecord(tuple(fields))

    def to_line(self) -> str:
        return "\t".join(self.fields)


def _open_vcf(path):
    if str(path).endswith(".gz"):
        return gzip.open(path, "rt")
    return open(path, "r")


def iter_vcf_lines(path) -> Iterator[Tuple[bool, str]]:
    """
    Stream a VCF file (optionally gzipped) line by line.

    Yields:
        ``(is_header, line)`` tuples, with the trailing newline removed.
        Blank lines are skipped.
    """
    with _open_vcf(path) as f:
        for line in f:
            line = line.rstrip("\r\n")
            if not line:
                continue
            yield line.startswith("#"), line


def get_vcf_chromosomes(path):
    """
    Get the set of chromosomes in a VCF file without keeping any records.

    Args:
        path: Path to VCF file

    Returns:
        Set of chromosome names found in the VCF file
    """
    chromosomes = set()
    for is_header, line in iter_vcf_lines(path):
        if is_header:
            continue
        chromosomes.add(line.split("\t", 1)[0])
    return chromosomes
