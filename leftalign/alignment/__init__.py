"""
Alignment Module
"""

from .cigar import (
    Cigar,
    CigarOp,
    InvalidCigarError,
    parse_cigar,
    format_cigar,
    validate_cigar,
    reference_length,
    query_length,
)
from .indel import IndelAllele
from .aligned_seq import AlignedSequences
from .left_align import (
    ExtractedAlignment,
    SkippedRegion,
    LeftAlignError,
    IndelOrderError,
    extract_indels,
    shift_by_repeats,
    exchange_flanks,
    shift_indels_left,
    merge_adjacent_indels,
    rebuild_cigar,
    left_align,
    stabilize,
    stably_left_align,
)

__all__ = [
    'Cigar',
    'CigarOp',
    'InvalidCigarError',
    'parse_cigar',
    'format_cigar',
    'validate_cigar',
    'reference_length',
    'query_length',
    'IndelAllele',
    'AlignedSequences',
    'ExtractedAlignment',
    'SkippedRegion',
    'LeftAlignError',
    'IndelOrderError',
    'extract_indels',
    'shift_by_repeats',
    'exchange_flanks',
    'shift_indels_left',
    'merge_adjacent_indels',
    'rebuild_cigar',
    'left_align',
    'stabilize',
    'stably_left_align'
]
