"""
vcf_region_split: split VCF/gVCF records at target region boundaries.

This package provides functionality for:
- Holding sorted per-chromosome target regions
- Classifying streamed records as in-region or off-region
- Splitting records whose span crosses region boundaries
- Filtering off-region records and pieces
"""

# Import core components
from .core import (
    MalformedRecordError,
    RegionTableError,
    UnsortedRecordsError,
    ReferenceLookupError,
    VCF_FIELD_COUNT,
)

# Import region and splitting components
from .regions import Interval, RegionTable, ChromosomeCursor, as_region_table
from .splitter import SpanSplitter, SplitInterval

# Import record utilities
from .variant_utils import (
    VcfRecord,
    parse_vcf_info,
    genotype_alleles,
    iter_vcf_lines,
    get_vcf_chromosomes,
)

# Import chromosome matching utilities
from .chromosome_utils import (
    normalize_chromosome_name,
    create_chromosome_mapping,
    match_chromosomes_with_report,
)

from .reference import ReferenceBaseSource

from .handler import (
    RegionFilterOptions,
    RegionVcfRecordHandler,
    EmittedPiece,
    should_emit_off_region,
)

from .region_filter import split_vcf_by_regions, get_region_split_records

# Version
__version__ = "0.1.0"
# Package metadata
__description__ = "Split VCF records at target region boundaries"
