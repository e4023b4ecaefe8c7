#!/usr/bin/env python3
"""
leftalign Main API Module

Provides a high-level interface for normalizing batches of alignments
"""

import logging
import time
from dataclasses import dataclass, field
from typing import List, Optional, Dict, Any, Union, Iterable, Tuple

import numpy as np
import pandas as pd
from tqdm import tqdm

from .alignment.cigar import Cigar, InvalidCigarError, format_cigar, parse_cigar, validate_cigar
from .alignment.left_align import LeftAlignError, extract_indels, stabilize
from .config.settings import LeftAlignConfig, load_config

logger = logging.getLogger(__name__)

STATUS_OK = "ok"
STATUS_UNSTABLE = "unstable"
STATUS_ERROR = "error"


@dataclass
class AlignmentRecord:
    """
    One alignment to normalize

    Attributes:
        name: Record identifier (read name)
        read: Read sequence, soft-clipped bases included
        reference: Reference window starting at the first aligned base
        cigar: CIGAR string or operation list
        error: Set when the record could not be assembled (e.g. unknown contig);
            the record is then reported as failed without being normalized
    """
    name: str
    read: str
    reference: str
    cigar: Union[str, Cigar]
    error: str = ""


@dataclass
class NormalizationResult:
    """
    Outcome of normalizing one alignment

    Attributes:
        name: Record identifier
        cigar_before: Input CIGAR
        cigar_after: Normalized CIGAR (equal to the input when normalization failed)
        changed: Whether the CIGAR changed
        converged: Whether a fixed point was reached
        passes: Number of left-alignment passes run
        status: 'ok', 'unstable' (iteration budget exhausted) or 'error'
        message: Error description for failed records
        indels: Printed indels of the normalized alignment
    """
    name: str
    cigar_before: str
    cigar_after: str
    changed: bool = False
    converged: bool = True
    passes: int = 0
    status: str = STATUS_OK
    message: str = ""
    indels: List[str] = field(default_factory=list)

    @property
    def failed(self) -> bool:
        return self.status == STATUS_ERROR


@dataclass
class BatchResult:
    """
    Results of normalizing a batch of alignments

    Attributes:
        results: One NormalizationResult per input record, in input order
        processing_time: Processing time in seconds
        config_used: Configuration the batch ran with
    """
    results: List[NormalizationResult]
    processing_time: float = 0.0
    config_used: Dict[str, Any] = field(default_factory=dict)

    @property
    def num_alignments(self) -> int:
        return len(self.results)

    @property
    def num_changed(self) -> int:
        return len([r for r in self.results if r.changed])

    @property
    def num_failed(self) -> int:
        return len([r for r in self.results if r.failed])

    @property
    def num_unstable(self) -> int:
        return len([r for r in self.results if r.status == STATUS_UNSTABLE])

    @property
    def convergence_rate(self) -> float:
        """Fraction of alignments that reached a fixed point"""
        if not self.results:
            return 0.0
        return len([r for r in self.results if r.converged]) / len(self.results)

    @property
    def mean_passes(self) -> float:
        """Average number of passes over records that did not fail"""
        passes = [r.passes for r in self.results if not r.failed]
        if not passes:
            return 0.0
        return float(np.mean(passes))

    def get_status_summary(self) -> Dict[str, int]:
        """Count records per status"""
        summary = {}
        for result in self.results:
            summary[result.status] = summary.get(result.status, 0) + 1
        return summary

    def to_df(self, skip_unchanged: Optional[bool] = None) -> pd.DataFrame:
        """Convert results to a pandas DataFrame

        Args:
            skip_unchanged: Drop records that converged without change; defaults
                to the batch configuration's skip_unchanged_records

        Returns:
            pd.DataFrame: One row per record with columns name, cigar_before,
                cigar_after, changed, converged, passes, status, message, indels
        """
        if skip_unchanged is None:
            skip_unchanged = self.config_used.get('skip_unchanged_records', False)

        rows = [r for r in self.results
                if not (skip_unchanged and r.status == STATUS_OK and not r.changed)]

        columns = ['name', 'cigar_before', 'cigar_after', 'changed',
                   'converged', 'passes', 'status', 'message', 'indels']
        return pd.DataFrame({
            'name': [r.name for r in rows],
            'cigar_before': [r.cigar_before for r in rows],
            'cigar_after': [r.cigar_after for r in rows],
            'changed': [r.changed for r in rows],
            'converged': [r.converged for r in rows],
            'passes': [r.passes for r in rows],
            'status': [r.status for r in rows],
            'message': [r.message for r in rows],
            'indels': [','.join(r.indels) for r in rows],
        }, columns=columns)

    def print_summary(self):
        """Print batch results summary"""
        print("Left-alignment Results Summary")
        print("=" * 40)
        print(f"Processing time: {self.processing_time:.2f} seconds")
        print(f"Max iterations: {self.config_used.get('max_iterations')}")
        print("")
        print(f"  Total alignments: {self.num_alignments}")
        print(f"  Changed: {self.num_changed}")
        print(f"  Not converged: {self.num_unstable}")
        print(f"  Failed: {self.num_failed}")
        print(f"  Convergence rate: {self.convergence_rate:.1%}")
        print(f"  Average passes: {self.mean_passes:.2f}")


def _cigar_text(cigar: Union[str, Cigar]) -> str:
    if isinstance(cigar, str):
        return cigar
    try:
        validate_cigar(cigar)
    except InvalidCigarError:
        return repr(cigar)
    return format_cigar(cigar)


def _failed_result(name: str, cigar_before: str, message: str) -> NormalizationResult:
    logger.error("failed to normalize %s (%s): %s", name or "alignment", cigar_before, message)
    return NormalizationResult(
        name=name,
        cigar_before=cigar_before,
        cigar_after=cigar_before,
        converged=False,
        status=STATUS_ERROR,
        message=message,
    )


def normalize_alignment(
    read: str,
    reference: str,
    cigar: Union[str, Cigar],
    config: Union[None, str, Dict[str, Any], LeftAlignConfig] = None,
    name: str = ""
) -> NormalizationResult:
    """
    Left-align and merge the indels of one alignment

    Failures of this alignment are reported in the result instead of being raised.

    Args:
        read: Read sequence, soft-clipped bases included
        reference: Reference window starting at the first aligned base
        cigar: CIGAR string or operation list (a list is not modified)
        config: Configuration object, dictionary or JSON path
        name: Record identifier

    Returns:
        NormalizationResult: Normalized CIGAR and convergence information
    """
    config = load_config(config)
    cigar_before = _cigar_text(cigar)

    if config.uppercase:
        read = read.upper()
        reference = reference.upper()

    try:
        ops = parse_cigar(cigar) if isinstance(cigar, str) else list(cigar)
        validate_cigar(ops)
        cigar_before = format_cigar(ops)
        converged, passes = stabilize(read, reference, ops, config.max_iterations)
        indels = [str(indel) for indel in extract_indels(read, reference, ops).indels]
    except (LeftAlignError, InvalidCigarError) as e:
        return _failed_result(name, cigar_before, str(e))

    cigar_after = format_cigar(ops)
    return NormalizationResult(
        name=name,
        cigar_before=cigar_before,
        cigar_after=cigar_after,
        changed=cigar_after != cigar_before,
        converged=converged,
        passes=passes,
        status=STATUS_OK if converged else STATUS_UNSTABLE,
        indels=indels,
    )


def _coerce_record(record: Union[AlignmentRecord, Dict[str, Any], Tuple], index: int) -> AlignmentRecord:
    if isinstance(record, AlignmentRecord):
        return record
    if isinstance(record, dict):
        return AlignmentRecord(
            name=str(record.get('name', index)),
            read=record['read'],
            reference=record['reference'],
            cigar=record['cigar'],
        )
    if len(record) != 4:
        raise ValueError(f"Record {index} must be (name, read, reference, cigar), got {len(record)} fields")
    return AlignmentRecord(*record)


def normalize_alignments(
    records: Iterable[Union[AlignmentRecord, Dict[str, Any], Tuple]],
    config: Union[None, str, Dict[str, Any], LeftAlignConfig] = None,
    verbose: bool = False,
    progress: bool = False
) -> BatchResult:
    """
    Normalize a batch of alignments

    Args:
        records: AlignmentRecord objects, dictionaries with read/reference/cigar
            (and optionally name) keys, or (name, read, reference, cigar) tuples
        config: Configuration object, dictionary or JSON path
        verbose: Whether to show progress information
        progress: Whether to show a tqdm progress bar

    Returns:
        BatchResult: Per-record results and summary statistics
    """
    start_time = time.time()
    config = load_config(config)

    records = [_coerce_record(record, i) for i, record in enumerate(records)]
    if not records:
        raise ValueError("Record list cannot be empty")

    if verbose:
        print(f"Starting normalization of {len(records)} alignments...")
        print(f"Using configuration: {config.to_dict()}")

    results = []
    for record in tqdm(records, desc="Normalizing alignments", unit=" alignments", disable=not progress):
        if record.error:
            results.append(_failed_result(record.name, _cigar_text(record.cigar), record.error))
            continue
        results.append(normalize_alignment(
            record.read, record.reference, record.cigar, config=config, name=record.name))

    batch = BatchResult(
        results=results,
        processing_time=time.time() - start_time,
        config_used=config.to_dict(),
    )

    if verbose:
        print(f"Normalization completed, changed: {batch.num_changed}/{batch.num_alignments}, "
              f"failed: {batch.num_failed}")

    return batch
