"""
leftalign - Indel left-alignment and merging for CIGAR alignments

Main features:
- Left-shift insertions and deletions through repeats and exchangeable flanks
- Merge neighbouring indels of the same kind
- Iterate to a stable, canonical operation sequence
- Batch normalization API and command line tool

Author: leftalignpy developers
"""

__version__ = "0.1.0"
__author__ = "leftalignpy developers"

# Export main API interfaces
from .alignment.left_align import left_align, stably_left_align, IndelOrderError, LeftAlignError
from .alignment.indel import IndelAllele
from .api import normalize_alignment, normalize_alignments
from .config.settings import LeftAlignConfig

__all__ = [
    '__version__',
    '__author__',
    # Core operations
    'left_align',
    'stably_left_align',
    'IndelAllele',
    'IndelOrderError',
    'LeftAlignError',
    # Batch API
    'normalize_alignment',
    'normalize_alignments',
    'LeftAlignConfig'
]
