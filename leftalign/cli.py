#!/usr/bin/env python3
"""
Command line interface for batch indel left-alignment
"""

import argparse
import logging
import sys
from typing import Dict, Optional, Sequence

import pandas as pd
from Bio import SeqIO

from .alignment.cigar import InvalidCigarError, parse_cigar, reference_length
from .api import AlignmentRecord, normalize_alignments
from .config.settings import LeftAlignConfig, load_config

logger = logging.getLogger("leftalign")


def setup_logging(log_file: Optional[str] = None, log_level=logging.INFO):
    """Setup logging configuration."""
    logger.setLevel(log_level)

    # Remove existing handlers to avoid duplicates
    logger.handlers = []

    formatter = logging.Formatter('%(asctime)s [%(levelname)s] %(message)s',
                                  datefmt='%Y-%m-%d %H:%M:%S')

    if log_file:
        file_handler = logging.FileHandler(log_file, mode='w')
        file_handler.setLevel(log_level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    return logger


def parse_arguments(argv: Optional[Sequence[str]] = None):
    """Parse command line arguments."""
    class CustomFormatter(argparse.RawDescriptionHelpFormatter, argparse.ArgumentDefaultsHelpFormatter):
        pass

    example_text = '''
Input is a tab-separated table with columns name, read, cigar and either
reference (the reference window) or contig and position (0-based start of
the alignment in --reference).

Examples:
  Reference windows inline:
    leftalign --input alignments.tsv --output normalized.tsv

  Reference windows taken from a FASTA file:
    leftalign --input alignments.tsv --reference genome.fa \\
        --output normalized.tsv --max-iterations 50
'''

    parser = argparse.ArgumentParser(
        description='Left-align and merge indels in CIGAR alignments',
        formatter_class=CustomFormatter,
        epilog=example_text
    )

    parser.add_argument('--input', type=str, required=True,
                        help='Tab-separated alignment table')
    parser.add_argument('--output', type=str, default='-',
                        help='Output table path, "-" for stdout')
    parser.add_argument('--reference', type=str, default=None,
                        help='FASTA file providing reference windows by contig and position')
    parser.add_argument('--config', type=str, default=None,
                        help='JSON configuration file')
    parser.add_argument('--max-iterations', type=int, default=None,
                        help='Override the configured number of passes allowed')
    parser.add_argument('--skip-unchanged', action='store_true',
                        help='Only report alignments that changed or failed')
    parser.add_argument('--log-file', type=str, default=None,
                        help='Also write log messages to this file')
    parser.add_argument('--log-level', type=str, default='INFO',
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        help='Logging level')

    return parser.parse_args(argv)


def load_reference(fasta_file: str) -> Dict[str, str]:
    """Read all contigs of a FASTA file into memory"""
    return {record.id: str(record.seq) for record in SeqIO.parse(fasta_file, "fasta")}


def read_alignment_table(table_file: str, contigs: Optional[Dict[str, str]] = None):
    """
    Build alignment records from a tab-separated table

    Args:
        table_file: Input table path
        contigs: Contig sequences, required when the table has no reference column

    Returns:
        List[AlignmentRecord]: Records in table order
    """
    df = pd.read_csv(table_file, sep='\t', dtype=str, keep_default_na=False)

    missing = {'name', 'read', 'cigar'} - set(df.columns)
    if missing:
        raise ValueError(f"Input table is missing columns: {sorted(missing)}")

    use_contigs = 'reference' not in df.columns
    if use_contigs:
        if contigs is None:
            raise ValueError("Input table has no reference column; --reference FASTA is required")
        if not {'contig', 'position'} <= set(df.columns):
            raise ValueError("Input table needs either a reference column or contig and position columns")

    records = []
    for row in df.itertuples(index=False):
        error = ""
        if use_contigs:
            try:
                reference = _reference_window(row.contig, row.position, row.cigar, contigs)
            except ValueError as e:
                # Reported as a failed record during normalization
                reference = ""
                error = str(e)
        else:
            reference = row.reference
        records.append(AlignmentRecord(name=row.name, read=row.read, reference=reference,
                                       cigar=row.cigar, error=error))
    return records


def _reference_window(contig: str, position: str, cigar: str, contigs: Dict[str, str]) -> str:
    if contig not in contigs:
        raise ValueError(f"Contig {contig} not found in reference")
    try:
        start = int(position)
    except ValueError:
        start = -1
    if start < 0:
        raise ValueError(f"Invalid position {position!r} on contig {contig}")
    try:
        span = reference_length(parse_cigar(cigar))
    except InvalidCigarError:
        # The record is reported as failed during normalization
        span = 0
    return contigs[contig][start:start + span]


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main execution function."""
    args = parse_arguments(argv)

    log_level = getattr(logging, args.log_level.upper())
    setup_logging(args.log_file, log_level)

    config = load_config(args.config)
    if args.max_iterations is not None:
        config = LeftAlignConfig(**{**config.to_dict(), "max_iterations": args.max_iterations})
    if args.skip_unchanged:
        config.skip_unchanged_records = True

    logger.info(f"Arguments: {vars(args)}")

    contigs = None
    if args.reference:
        logger.info(f"Loading reference: {args.reference}")
        contigs = load_reference(args.reference)
        logger.info(f"Loaded {len(contigs)} contigs")

    records = read_alignment_table(args.input, contigs)
    logger.info(f"Normalizing {len(records)} alignments")

    batch = normalize_alignments(records, config=config, progress=log_level <= logging.INFO)

    results_df = batch.to_df()
    if args.output == '-':
        results_df.to_csv(sys.stdout, sep='\t', index=False)
    else:
        results_df.to_csv(args.output, sep='\t', index=False)
        logger.info(f"Results written to {args.output}")

    logger.info(f"Changed: {batch.num_changed}, not converged: {batch.num_unstable}, "
                f"failed: {batch.num_failed}")

    return 1 if batch.num_failed else 0


if __name__ == "__main__":
    sys.exit(main())
