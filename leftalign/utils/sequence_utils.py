#!/usr/bin/env python3
"""
Sequence processing utility functions

Character-level helpers shared by the left-alignment engine and reporting code
"""

from typing import Dict
from collections import Counter

import numpy as np
from scipy import stats


def is_homopolymer(seq: str) -> bool:
    """
    Check whether a sequence is a single repeated character

    Args:
        seq: Sequence to test

    Returns:
        bool: True for non-empty sequences made of one character

    Examples:
        >>> is_homopolymer("AAAA")
        True
        >>> is_homopolymer("AAT")
        False
    """
    if not seq:
        return False
    return seq.count(seq[0]) == len(seq)


def count_characters(seq: str) -> Dict[str, int]:
    """
    Count character frequencies

    Args:
        seq: Sequence

    Returns:
        Dict[str, int]: Count of each character present in the sequence
    """
    return dict(Counter(seq))


def sequence_entropy(seq: str) -> float:
    """
    Shannon entropy of the character composition, in bits

    Args:
        seq: Sequence

    Returns:
        float: 0.0 for empty or homopolymer sequences, 2.0 for equal ACGT usage

    Examples:
        >>> sequence_entropy("ACGT")
        2.0
    """
    if not seq:
        return 0.0

    _, counts = np.unique(np.frombuffer(seq.encode(), dtype=np.uint8), return_counts=True)
    return float(stats.entropy(counts, base=2))
