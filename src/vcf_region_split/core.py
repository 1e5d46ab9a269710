"""
Core constants and exceptions for vcf_region_split.

This module provides the VCF column layout and the error types shared
throughout the package.
"""

# VCF column indices for a single-sample record
CHROM = 0
POS = 1
ID = 2
REF = 3
ALT = 4
QUAL = 5
FILTER = 6
INFO = 7
FORMAT = 8
SAMPLE = 9

VCF_FIELD_COUNT = SAMPLE + 1

# Missing value marker used across VCF fields
MISSING = "."


class MalformedRecordError(ValueError):
    """A VCF record does not have the shape needed to classify it."""


class RegionTableError(ValueError):
    """Region intervals are not sorted, disjoint and well-formed."""


class UnsortedRecordsError(ValueError):
    """Records for a chromosome were not presented in position order."""


class ReferenceLookupError(ValueError):
    """A split piece needs a reference base that the reference cannot supply."""
