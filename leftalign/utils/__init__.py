"""
Utility modules
"""

from .sequence_utils import is_homopolymer, count_characters, sequence_entropy
__all__ = [
    'is_homopolymer',
    'count_characters',
    'sequence_entropy'
]
