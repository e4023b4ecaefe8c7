#!/usr/bin/env python3
"""
indel左对齐功能演示

展示单次左对齐、稳定迭代以及批量标准化API的用法
"""

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from leftalign import stably_left_align, normalize_alignments
from leftalign.alignment import AlignedSequences, parse_cigar, format_cigar, left_align


def show(read, reference, cigar):
    print(f"  CIGAR: {format_cigar(cigar)}")
    for line in AlignedSequences.from_cigar(read, reference, cigar).format().split("\n"):
        print(f"    {line}")


def demo_single_pass():
    """演示单次左对齐"""
    print("=== 单次左对齐演示 ===\n")

    reference = "GTTACGTT"
    read = "GTT"
    cigar = parse_cigar("2M5D1M")

    print("比对前:")
    show(read, reference, cigar)

    changed = left_align(read, cigar, reference)
    print(f"\n比对后 (changed={changed}):")
    show(read, reference, cigar)


def demo_merge():
    """演示相邻indel的合并"""
    print("\n=== 相邻indel合并演示 ===\n")

    cases = [
        ("CAAT", "CAAAGT", "1M1D2M1D1M"),
        ("TACT", "TACACGGT", "1M2D2M2D1M"),
        ("CAAATG", "CAAG", "1M1I2M1I1M"),
    ]

    for read, reference, cigar_string in cases:
        cigar = parse_cigar(cigar_string)
        print("比对前:")
        show(read, reference, cigar)
        stable = stably_left_align(read, reference, cigar)
        print(f"稳定后 (stable={stable}):")
        show(read, reference, cigar)
        print()


def demo_batch():
    """演示批量标准化"""
    print("=== 批量标准化演示 ===\n")

    records = [
        ("r1", "AAATAAAA", "AAAATAAAA", "3M1D5M"),
        ("r2", "CACACACAG", "CACACAG", "6M2I1M"),
        ("r3", "TTCAAAAGC", "CAAAG", "2S3M1I2M1S"),
        ("r4", "ACGT", "ACGT", "4M"),
        ("r5", "AC", "ACG", "2M3D"),
    ]

    batch = normalize_alignments(records, verbose=True)
    print()
    batch.print_summary()
    print()
    print(batch.to_df(skip_unchanged=True).to_string(index=False))


if __name__ == "__main__":
    demo_single_pass()
    demo_merge()
    demo_batch()
