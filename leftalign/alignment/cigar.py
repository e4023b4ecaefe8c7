#!/usr/bin/env python3
"""
CIGAR-style alignment operation sequences

An operation sequence is a plain list of (length, code) tuples, e.g.
[(3, 'M'), (1, 'D'), (5, 'M')]. Functions here parse, print, validate and
measure such lists; the left-alignment engine rewrites them in place.
"""

import re
from enum import Enum
from typing import List, Tuple

Cigar = List[Tuple[int, str]]

_CIGAR_TOKEN = re.compile(r'(\d+)([A-Z=])')


class InvalidCigarError(ValueError):
    """Raised for malformed operation sequences"""


class CigarOp(Enum):
    """Supported alignment operations"""
    MATCH = "M"       # Match or mismatch
    INSERTION = "I"   # Bases present in the read only
    DELETION = "D"    # Bases present in the reference only
    SOFT_CLIP = "S"   # Read bases kept in the read but not aligned
    HARD_CLIP = "H"   # Read bases removed from the read
    SKIP = "N"        # Skipped reference region (splice)

    @property
    def consumes_reference(self) -> bool:
        return self in (CigarOp.MATCH, CigarOp.DELETION, CigarOp.SKIP)

    @property
    def consumes_query(self) -> bool:
        return self in (CigarOp.MATCH, CigarOp.INSERTION, CigarOp.SOFT_CLIP)


VALID_CODES = frozenset(op.value for op in CigarOp)


def parse_cigar(cigar_string: str) -> Cigar:
    """
    Parse a compact CIGAR string into a list of (length, code) tuples

    Args:
        cigar_string: CIGAR text such as "5S10M2I3M"

    Returns:
        Cigar: Operation list; "" and "*" give an empty list

    Raises:
        InvalidCigarError: On unparseable text, zero lengths or unsupported codes

    Examples:
        >>> parse_cigar("3M1D5M")
        [(3, 'M'), (1, 'D'), (5, 'M')]
    """
    text = cigar_string.strip()
    if text in ("", "*"):
        return []

    ops = []
    consumed = 0
    for token in _CIGAR_TOKEN.finditer(text):
        if token.start() != consumed:
            break
        ops.append((int(token.group(1)), token.group(2)))
        consumed = token.end()

    if consumed != len(text):
        raise InvalidCigarError(f"Cannot parse CIGAR string: {cigar_string!r}")

    validate_cigar(ops)
    return ops


def format_cigar(cigar: Cigar) -> str:
    """Print an operation list in compact CIGAR form"""
    return ''.join(f"{length}{code}" for length, code in cigar)


def validate_cigar(cigar: Cigar) -> None:
    """
    Check that every operation has a positive integer length and a supported code

    Raises:
        InvalidCigarError: On the first invalid operation
    """
    for index, op in enumerate(cigar):
        try:
            length, code = op
        except (TypeError, ValueError):
            raise InvalidCigarError(f"Operation {index} is not a (length, code) pair: {op!r}")
        if code not in VALID_CODES:
            raise InvalidCigarError(f"Unsupported operation {code!r} at index {index}")
        if isinstance(length, bool) or not isinstance(length, int) or length <= 0:
            raise InvalidCigarError(f"Operation length must be a positive integer, got {length!r} at index {index}")


def reference_length(cigar: Cigar) -> int:
    """Number of reference bases consumed (M + D + N)"""
    return sum(length for length, code in cigar if CigarOp(code).consumes_reference)


def query_length(cigar: Cigar) -> int:
    """Number of read bases consumed (M + I + S)"""
    return sum(length for length, code in cigar if CigarOp(code).consumes_query)
