#!/usr/bin/env python3
"""
Indel left-alignment

Moves every insertion and deletion of an alignment as far left as it can go
without introducing mismatches, then merges neighbouring indels of the same
kind, and rewrites the operation sequence accordingly.

One pass works as follows:

1. Walk the operations and collect the indels in reference order.
2. For each indel, shift it left by each exact repeat period of its sequence
   (1, then every other divisor of its length) while the bases it would move
   across equal its sequence in both read and reference. Then shift it one base
   at a time while the base crossed equals its last base, rotating the
   sequence ("exchangeable flanks"):

       GTTACGTT           GTTACGTT
       GT-----T   ---->   G-----TT

   An indel never moves left past the end of the indel before it.
3. Slide a homopolymer or tandem-repeat indel right when that makes it touch
   the next indel of the same kind.
4. Rebuild the operation sequence, merging same-kind indels that now touch.

A single pass can expose new merges, so callers normally use
stably_left_align(), which repeats passes until nothing changes.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Tuple

from .cigar import Cigar, InvalidCigarError, format_cigar, validate_cigar
from .indel import IndelAllele
from .aligned_seq import AlignedSequences
from ..utils.sequence_utils import is_homopolymer

logger = logging.getLogger(__name__)


class LeftAlignError(RuntimeError):
    """Normalization of a single alignment failed"""


class IndelOrderError(LeftAlignError):
    """An indel was placed left of the end of the preceding indel"""


@dataclass
class SkippedRegion:
    """Reference-skip ('N') operation; indels never move across it"""
    position: int
    read_position: int
    length: int

    @property
    def reference_end(self) -> int:
        return self.position + self.length


@dataclass
class ExtractedAlignment:
    """
    Indels and fixed features collected from one operation sequence

    Attributes:
        indels: Indels in reference order
        skips: Skipped reference regions in reference order
        aligned_length: Reference bases spanned by the alignment
        soft_clip_start: Soft-clipped read prefix
        soft_clip_end: Soft-clipped read suffix
        hard_clip_start: Length of the leading hard clip
        hard_clip_end: Length of the trailing hard clip
    """
    indels: List[IndelAllele] = field(default_factory=list)
    skips: List[SkippedRegion] = field(default_factory=list)
    aligned_length: int = 0
    soft_clip_start: str = ""
    soft_clip_end: str = ""
    hard_clip_start: int = 0
    hard_clip_end: int = 0


@dataclass
class _Cursor:
    reference: int = 0
    read: int = 0


def extract_indels(read: str, reference: str, cigar: Cigar) -> ExtractedAlignment:
    """
    Collect the indels of an alignment

    Args:
        read: Read sequence, soft-clipped bases included
        reference: Reference window starting at the first aligned base
        cigar: Operation list

    Returns:
        ExtractedAlignment: Indels, skips, clips and aligned reference length

    Raises:
        InvalidCigarError: If the operation list is malformed
        LeftAlignError: If an indel runs past the end of the read or reference
    """
    validate_cigar(cigar)

    extracted = ExtractedAlignment()
    cursor = _Cursor()

    for length, code in cigar:
        if code == 'M':
            cursor.reference += length
            cursor.read += length
        elif code == 'D':
            sequence = reference[cursor.reference:cursor.reference + length]
            if len(sequence) != length:
                raise LeftAlignError(
                    f"Deletion at reference offset {cursor.reference} runs past the reference window "
                    f"(length {len(reference)})")
            extracted.indels.append(IndelAllele(False, length, cursor.reference, cursor.read, sequence))
            cursor.reference += length
        elif code == 'I':
            sequence = read[cursor.read:cursor.read + length]
            if len(sequence) != length:
                raise LeftAlignError(
                    f"Insertion at read offset {cursor.read} runs past the end of the read (length {len(read)})")
            extracted.indels.append(IndelAllele(True, length, cursor.reference, cursor.read, sequence))
            cursor.read += length
        elif code == 'S':
            if cursor.read == 0:
                extracted.soft_clip_start = read[:length]
            else:
                extracted.soft_clip_end = read[len(read) - length:]
            cursor.read += length
        elif code == 'H':
            if cursor.read == 0 and cursor.reference == 0:
                extracted.hard_clip_start += length
            else:
                extracted.hard_clip_end += length
        elif code == 'N':
            extracted.skips.append(SkippedRegion(cursor.reference, cursor.read, length))
            cursor.reference += length
        else:
            raise InvalidCigarError(f"Unsupported operation {code!r}")

    extracted.aligned_length = cursor.reference
    return extracted


def _left_bound(extracted: ExtractedAlignment, index: int) -> int:
    """Leftmost reference offset the indel at index may move to"""
    indel = extracted.indels[index]
    bound = extracted.indels[index - 1].reference_end if index > 0 else 0
    for skip in extracted.skips:
        if skip.reference_end <= indel.position:
            bound = max(bound, skip.reference_end)
    return bound


def _can_shift_left(indel: IndelAllele, read: str, reference: str, step: int, bound: int) -> bool:
    ref_start = indel.position - step
    read_start = indel.read_position - step
    if ref_start < bound or read_start < 0:
        return False
    return (reference[ref_start:ref_start + indel.length] == indel.sequence
            and read[read_start:read_start + indel.length] == indel.sequence)


def shift_by_repeats(indel: IndelAllele, read: str, reference: str, bound: int = 0) -> None:
    """
    Shift an indel left by whole copies of each of its repeat periods

    Periods are tried from 1 up to the indel length, considering only exact
    divisors of the length; each period is applied as often as it stays legal.

    Args:
        indel: Indel to move (modified in place)
        read: Read sequence
        reference: Reference window
        bound: Leftmost reference offset allowed
    """
    period = 1
    while period <= indel.length:
        if indel.length % period == 0:
            while _can_shift_left(indel, read, reference, period, bound):
                logger.debug("%s %s shifting %dbp left",
                             "insertion" if indel.insertion else "deletion", indel, period)
                indel.position -= period
                indel.read_position -= period
        period += 1


def exchange_flanks(indel: IndelAllele, read: str, reference: str, bound: int = 0) -> None:
    """
    Shift an indel left one base at a time across bases equal to its last base

    Each step rotates the indel sequence right by one character.

    Args:
        indel: Indel to move (modified in place)
        read: Read sequence
        reference: Reference window
        bound: Leftmost reference offset allowed
    """
    while True:
        ref_index = indel.position - 1
        read_index = indel.read_position - 1
        if ref_index < bound or read_index < 0:
            return
        if ref_index >= len(reference) or read_index >= len(read):
            return
        base = read[read_index]
        if base != reference[ref_index] or base != indel.sequence[-1]:
            return
        logger.debug("%s %s exchanging bases 1bp left",
                     "insertion" if indel.insertion else "deletion", indel)
        indel.sequence = indel.sequence[-1] + indel.sequence[:-1]
        indel.position -= 1
        indel.read_position -= 1


def shift_indels_left(extracted: ExtractedAlignment, read: str, reference: str) -> None:
    """Left-shift every indel in order, each bounded by the one before it"""
    for index, indel in enumerate(extracted.indels):
        bound = _left_bound(extracted, index)
        shift_by_repeats(indel, read, reference, bound)
        exchange_flanks(indel, read, reference, bound)


def _skip_between(extracted: ExtractedAlignment, previous: IndelAllele, indel: IndelAllele) -> bool:
    return any(skip.position >= previous.reference_end and skip.reference_end <= indel.position
               for skip in extracted.skips)


def _can_step_right(previous: IndelAllele, position: int, read_position: int,
                    indel: IndelAllele, read: str, reference: str) -> bool:
    step = previous.length
    if previous.insertion:
        if position + step > indel.position:
            return False
        ref_window = reference[position:position + step]
        read_window = read[read_position + step:read_position + 2 * step]
    else:
        if position + 2 * step > indel.position:
            return False
        ref_window = reference[position + step:position + 2 * step]
        read_window = read[read_position:read_position + step]
    return ref_window == previous.sequence and read_window == previous.sequence


def _move(indel: IndelAllele, position: int) -> None:
    indel.read_position += position - indel.position
    indel.position = position


def merge_adjacent_indels(extracted: ExtractedAlignment, read: str, reference: str) -> None:
    """
    Slide indels right where that makes them touch the next indel of the same kind

    A homopolymer indel jumps directly next to its successor when the bases
    between them form a homopolymer starting with the indel's base. Any other
    indel is treated as a tandem repeat and walked right one copy at a time; it
    is moved only if the walk ends exactly next to the successor.
    """
    indels = extracted.indels
    for index in range(1, len(indels)):
        previous = indels[index - 1]
        indel = indels[index]

        if previous.insertion != indel.insertion:
            continue
        if not (previous.reference_end < indel.position and previous.read_end < indel.read_position):
            continue
        if _skip_between(extracted, previous, indel):
            continue

        target = indel.position if indel.insertion else indel.position - previous.length

        if previous.is_homopolymer():
            gap = indel.position - previous.reference_end
            ref_gap = reference[previous.reference_end:indel.position]
            read_gap = read[previous.read_end:previous.read_end + gap]
            if (ref_gap and previous.sequence[0] == ref_gap[0]
                    and is_homopolymer(ref_gap) and is_homopolymer(read_gap)):
                logger.debug("moving %s right to %d", previous, target)
                _move(previous, target)
        else:
            position = previous.position
            read_position = previous.read_position
            while _can_step_right(previous, position, read_position, indel, read, reference):
                position += previous.length
                read_position += previous.length
            if position > previous.position and position == target:
                logger.debug("right-merging tandem repeat: moving %s right to %d", previous, position)
                _move(previous, position)


def _append_gap(cigar: Cigar, length: int) -> None:
    if length > 0:
        cigar.append((length, 'M'))


def rebuild_cigar(extracted: ExtractedAlignment, read: str = "", reference: str = "") -> Cigar:
    """
    Build the operation list for the current indel placement

    Same-kind indels that touch are merged into one operation.

    Args:
        extracted: Shifted indels and fixed features of the alignment
        read: Read sequence, only used in error messages
        reference: Reference window, only used in error messages

    Returns:
        Cigar: New operation list

    Raises:
        IndelOrderError: If an indel starts before the end of the previous event
    """
    new_cigar = []
    if extracted.hard_clip_start:
        new_cigar.append((extracted.hard_clip_start, 'H'))
    if extracted.soft_clip_start:
        new_cigar.append((len(extracted.soft_clip_start), 'S'))

    last_end = 0
    skips = extracted.skips
    skip_index = 0

    def emit_skip(skip: SkippedRegion) -> None:
        if skip.position < last_end:
            raise IndelOrderError(
                f"impossibility: skipped region at {skip.position} overlaps a preceding indel\n"
                f"{reference}\n{read}")
        _append_gap(new_cigar, skip.position - last_end)
        new_cigar.append((skip.length, 'N'))

    previous = None
    for indel in extracted.indels:
        while skip_index < len(skips) and skips[skip_index].reference_end <= indel.position:
            emit_skip(skips[skip_index])
            last_end = skips[skip_index].reference_end
            skip_index += 1

        if indel.position < last_end:
            raise IndelOrderError(
                f"impossibility: indel {indel} realigned left of "
                f"{previous if previous is not None else 'a skipped region'}\n{reference}\n{read}")

        if indel.position == last_end and new_cigar and new_cigar[-1][1] == indel.cigar_code:
            length, code = new_cigar[-1]
            new_cigar[-1] = (length + indel.length, code)
        else:
            _append_gap(new_cigar, indel.position - last_end)
            new_cigar.append((indel.length, indel.cigar_code))

        last_end = indel.reference_end
        previous = indel

    for skip in skips[skip_index:]:
        emit_skip(skip)
        last_end = skip.reference_end

    _append_gap(new_cigar, extracted.aligned_length - last_end)

    if extracted.soft_clip_end:
        new_cigar.append((len(extracted.soft_clip_end), 'S'))
    if extracted.hard_clip_end:
        new_cigar.append((extracted.hard_clip_end, 'H'))

    return new_cigar


def left_align(read: str, cigar: Cigar, reference: str) -> bool:
    """
    Run one left-alignment pass

    Args:
        read: Read sequence, soft-clipped bases included
        cigar: Operation list, replaced in place by the realigned one
        reference: Reference window starting at the first aligned base

    Returns:
        bool: True if the pass changed the operation list

    Raises:
        InvalidCigarError: If the operation list is malformed
        IndelOrderError: If the realigned indels are out of order; cigar is left untouched
    """
    cigar_before = format_cigar(cigar)
    extracted = extract_indels(read, reference, cigar)

    if not extracted.indels:
        return False

    if logger.isEnabledFor(logging.DEBUG):
        try:
            logger.debug("| %s\n%s", cigar_before,
                         AlignedSequences.from_cigar(read, reference, cigar).format())
        except ValueError:
            logger.debug("| %s (alignment does not fit the read/reference)", cigar_before)

    shift_indels_left(extracted, read, reference)
    if len(extracted.indels) > 1:
        merge_adjacent_indels(extracted, read, reference)

    logger.debug("indels: %s", ",".join(str(indel) for indel in extracted.indels))
    new_cigar = rebuild_cigar(extracted, read, reference)
    cigar_after = format_cigar(new_cigar)
    logger.debug("%s changes to %s", cigar_before, cigar_after)

    cigar[:] = new_cigar
    return cigar_after != cigar_before


def stabilize(read: str, reference: str, cigar: Cigar, max_iterations: int = 20) -> Tuple[bool, int]:
    """
    Repeat left-alignment passes until the operation list stops changing

    Args:
        read: Read sequence
        reference: Reference window
        cigar: Operation list, rewritten in place
        max_iterations: Number of changing passes allowed before giving up

    Returns:
        Tuple[bool, int]: (converged, number of passes run)
    """
    if max_iterations < 0:
        raise ValueError("max_iterations must be a non-negative integer")

    passes = 0
    while passes <= max_iterations:
        passes += 1
        if not left_align(read, cigar, reference):
            return True, passes

    logger.warning("alignment did not stabilize after %d passes, last CIGAR %s",
                   passes, format_cigar(cigar))
    return False, passes


def stably_left_align(read: str, reference: str, cigar: Cigar, max_iterations: int = 20) -> bool:
    """
    Left-align until the alignment is stable

    Returns:
        bool: False only if max_iterations changing passes were not enough; cigar
        then holds the last realignment produced
    """
    converged, _ = stabilize(read, reference, cigar, max_iterations)
    return converged
