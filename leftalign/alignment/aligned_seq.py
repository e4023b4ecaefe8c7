#!/usr/bin/env python3
"""
Gapped alignment strings for diagnostics

Rebuilds the padded read/reference pair described by an operation sequence,
so that alignments can be printed or compared column by column.
"""

from typing import Tuple

from .cigar import Cigar, validate_cigar

GAP = '-'
CLIP = '*'
SKIP = '>'


class AlignedSequences:
    """
    Column-aligned read and reference strings

    Gaps are '-', reference columns opposite soft-clipped read bases are '*',
    and read columns opposite skipped reference bases are '>'.
    """

    def __init__(self, seq: str, ref: str):
        """
        Initialize aligned pair

        Args:
            seq: Gapped read string
            ref: Gapped reference string
        """
        if len(seq) != len(ref):
            raise ValueError(f"Aligned read length ({len(seq)}) does not match aligned reference length ({len(ref)})")

        self.seq = seq
        self.ref = ref

    @classmethod
    def from_cigar(cls, read: str, reference: str, cigar: Cigar) -> 'AlignedSequences':
        """
        Build the gapped pair for an alignment

        Args:
            read: Read sequence, soft-clipped bases included
            reference: Reference window starting at the first aligned base
            cigar: Operation list

        Returns:
            AlignedSequences: Gapped read and reference
        """
        validate_cigar(cigar)

        seq_parts = []
        ref_parts = []
        read_pos = 0
        ref_pos = 0
        for length, code in cigar:
            if code == 'M':
                seq_parts.append(read[read_pos:read_pos + length])
                ref_parts.append(reference[ref_pos:ref_pos + length])
                read_pos += length
                ref_pos += length
            elif code == 'I':
                seq_parts.append(read[read_pos:read_pos + length])
                ref_parts.append(GAP * length)
                read_pos += length
            elif code == 'D':
                seq_parts.append(GAP * length)
                ref_parts.append(reference[ref_pos:ref_pos + length])
                ref_pos += length
            elif code == 'S':
                seq_parts.append(read[read_pos:read_pos + length])
                ref_parts.append(CLIP * length)
                read_pos += length
            elif code == 'N':
                seq_parts.append(SKIP * length)
                ref_parts.append(reference[ref_pos:ref_pos + length])
                ref_pos += length
            # 'H' bases are absent from the read

        seq = ''.join(seq_parts)
        ref = ''.join(ref_parts)
        if len(seq) != len(ref):
            raise ValueError("Operation sequence runs past the end of the read or reference")
        return cls(seq, ref)

    def get_seq(self) -> str:
        """Get gapped read"""
        return self.seq

    def get_ref(self) -> str:
        """Get gapped reference"""
        return self.ref

    def _column_states(self):
        for s, r in zip(self.seq, self.ref):
            if s in (GAP, SKIP) or r in (GAP, CLIP):
                yield ' '
            elif s == r:
                yield '|'
            else:
                yield '.'

    def match_line(self) -> str:
        """'|' for matches, '.' for mismatches, ' ' for gaps, clips and skips"""
        return ''.join(self._column_states())

    def count_mismatches(self) -> int:
        return sum(1 for state in self._column_states() if state == '.')

    def count_gaps(self) -> Tuple[int, int]:
        """Return (read gap columns, reference gap columns)"""
        return self.seq.count(GAP), self.ref.count(GAP)

    def format(self) -> str:
        """Three-line text rendering: read, match line, reference"""
        return f"{self.seq}\n{self.match_line()}\n{self.ref}"

    def __repr__(self):
        return f"AlignedSequences(seq='{self.seq}', ref='{self.ref}')"
