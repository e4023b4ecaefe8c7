#!/usr/bin/env python3
"""
Indel allele records extracted from an alignment

An IndelAllele describes one insertion or deletion relative to a reference
window. Records are rebuilt on every left-alignment pass and are mutated by
the shift and merge steps of that pass only.
"""

from dataclasses import dataclass
from functools import total_ordering

from ..utils.sequence_utils import is_homopolymer


@total_ordering
@dataclass(eq=False)
class IndelAllele:
    """
    Insertion or deletion event

    Attributes:
        insertion: True for an insertion, False for a deletion
        length: Number of inserted/deleted bases
        position: 0-based reference window offset; insertions occur before
            this base, deletions start at it
        read_position: 0-based read offset, soft-clipped bases included
        sequence: Inserted bases (from the read) or deleted bases (from the reference)
    """
    insertion: bool
    length: int
    position: int
    read_position: int
    sequence: str

    def __post_init__(self):
        """Validate indel data"""
        if self.length <= 0:
            raise ValueError("Indel length must be a positive integer")
        if len(self.sequence) != self.length:
            raise ValueError(f"Indel sequence {self.sequence!r} does not have length {self.length}")

    @property
    def cigar_code(self) -> str:
        return "I" if self.insertion else "D"

    @property
    def reference_end(self) -> int:
        """Reference offset just past the event (insertions occupy no reference bases)"""
        return self.position if self.insertion else self.position + self.length

    @property
    def read_end(self) -> int:
        """Read offset just past the event (deletions occupy no read bases)"""
        return self.read_position + self.length if self.insertion else self.read_position

    def is_homopolymer(self) -> bool:
        return is_homopolymer(self.sequence)

    def __str__(self) -> str:
        kind = "i" if self.insertion else "d"
        return f"{kind}:{self.position}:{self.read_position}:{self.sequence}"

    def __eq__(self, other) -> bool:
        if not isinstance(other, IndelAllele):
            return NotImplemented
        return (self.insertion == other.insertion
                and self.length == other.length
                and self.position == other.position
                and self.sequence == other.sequence)

    def __lt__(self, other) -> bool:
        if not isinstance(other, IndelAllele):
            return NotImplemented
        return str(self) < str(other)
