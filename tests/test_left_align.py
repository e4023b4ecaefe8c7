#!/usr/bin/env python3
"""
测试indel左对齐核心算法
"""

import importlib

import pytest

from leftalign.alignment.cigar import parse_cigar, format_cigar, InvalidCigarError
from leftalign.alignment.indel import IndelAllele
from leftalign.alignment.left_align import (
    ExtractedAlignment,
    SkippedRegion,
    LeftAlignError,
    IndelOrderError,
    extract_indels,
    shift_by_repeats,
    exchange_flanks,
    rebuild_cigar,
    left_align,
)

# The alignment package re-exports left_align, shadowing the submodule name
left_align_module = importlib.import_module("leftalign.alignment.left_align")


def run_pass(read, reference, cigar_string):
    """Run one pass and return (changed, new CIGAR string)"""
    cigar = parse_cigar(cigar_string)
    changed = left_align(read, cigar, reference)
    return changed, format_cigar(cigar)


class TestIndelExtraction:
    """测试indel提取"""

    def test_single_deletion(self):
        """测试单个缺失"""
        extracted = extract_indels("AAATAAAA", "AAAATAAAA", parse_cigar("3M1D5M"))
        assert [str(i) for i in extracted.indels] == ["d:3:3:A"]
        assert extracted.aligned_length == 9
        assert extracted.soft_clip_start == ""
        assert extracted.soft_clip_end == ""

    def test_soft_clips_and_insertion(self):
        """测试软剪切与插入"""
        read = "TT" + "ACGT" + "G" + "CAT" + "C"
        extracted = extract_indels(read, "ACGTCAT", parse_cigar("2S4M1I3M1S"))
        assert [str(i) for i in extracted.indels] == ["i:4:6:G"]
        assert extracted.soft_clip_start == "TT"
        assert extracted.soft_clip_end == "C"
        assert extracted.aligned_length == 7

    def test_hard_clips(self):
        """测试硬剪切"""
        extracted = extract_indels("AAATAAAA", "AAAATAAAA", parse_cigar("3H3M1D5M2H"))
        assert extracted.hard_clip_start == 3
        assert extracted.hard_clip_end == 2
        assert len(extracted.indels) == 1

    def test_skipped_region(self):
        """测试参考跳跃区域"""
        extracted = extract_indels("ACGTAC", "ACG" + "T" * 10 + "TAC", parse_cigar("3M10N3M"))
        assert extracted.indels == []
        assert extracted.skips == [SkippedRegion(3, 3, 10)]
        assert extracted.aligned_length == 16

    def test_deletion_past_reference(self):
        """缺失超出参考序列范围"""
        with pytest.raises(LeftAlignError):
            extract_indels("AC", "ACG", parse_cigar("2M3D"))

    def test_insertion_past_read(self):
        """插入超出读段范围"""
        with pytest.raises(LeftAlignError):
            extract_indels("ACG", "ACG", [(2, 'M'), (3, 'I')])

    def test_invalid_operation(self):
        """测试无效操作"""
        with pytest.raises(InvalidCigarError):
            extract_indels("ACGT", "ACGT", [(4, 'X')])


class TestRepeatShift:
    """测试重复单元左移"""

    def test_dinucleotide_deletion(self):
        """二核苷酸重复中的缺失"""
        indel = IndelAllele(False, 2, 2, 2, "GT")
        shift_by_repeats(indel, "GTGACGTGT", "GTGTGACGTGT")
        assert indel.position == 0
        assert indel.read_position == 0
        assert indel.sequence == "GT"

    def test_bound_stops_shift(self):
        """前一个indel限制左移"""
        indel = IndelAllele(False, 2, 2, 2, "GT")
        shift_by_repeats(indel, "GTGACGTGT", "GTGTGACGTGT", bound=1)
        assert indel.position == 2

    def test_homopolymer_deletion(self):
        """同聚物缺失"""
        indel = IndelAllele(False, 1, 3, 3, "A")
        shift_by_repeats(indel, "AAATAAAA", "AAAATAAAA")
        assert indel.position == 0
        assert indel.read_position == 0

    def test_homopolymer_insertion(self):
        """同聚物插入"""
        indel = IndelAllele(True, 1, 3, 3, "A")
        shift_by_repeats(indel, "CAAAAG", "CAAAG")
        assert indel.position == 1
        assert indel.read_position == 1

    def test_microsatellite_insertion(self):
        """微卫星插入"""
        changed, cigar = run_pass("CACACACAG", "CACACAG", "6M2I1M")
        assert changed
        assert cigar == "2I7M"


class TestFlankExchange:
    """测试侧翼碱基交换"""

    def test_exchange_to_start(self):
        """GT-----T 应继续左移至序列起点"""
        indel = IndelAllele(False, 5, 2, 2, "TACGT")
        exchange_flanks(indel, "GTT", "GTTACGTT")
        assert indel.position == 0
        assert indel.read_position == 0
        assert indel.sequence == "GTTAC"

    def test_exchange_respects_bound(self):
        """交换受左边界限制"""
        indel = IndelAllele(False, 5, 2, 2, "TACGT")
        exchange_flanks(indel, "GTT", "GTTACGTT", bound=1)
        assert indel.position == 1
        assert indel.sequence == "TTACG"

    def test_exchange_in_repeat(self):
        """GTGTG-----T 左移并轮换序列"""
        changed, cigar = run_pass("GTGTGT", "GTGTGACGTGT", "5M5D1M")
        assert changed
        assert cigar == "2M5D4M"

    def test_full_pass(self):
        changed, cigar = run_pass("GTT", "GTTACGTT", "2M5D1M")
        assert changed
        assert cigar == "5D3M"


class TestMergeAndReconstruct:
    """测试indel合并与CIGAR重建"""

    def test_adjacent_deletions_merge(self):
        """相邻同类缺失合并"""
        changed, cigar = run_pass("CAAG", "CAAAAG", "1M1D1M1D2M")
        assert changed
        assert cigar == "1M2D3M"

    def test_homopolymer_right_merge(self):
        """同聚物缺失右移后合并"""
        changed, cigar = run_pass("CAAT", "CAAAGT", "1M1D2M1D1M")
        assert changed
        assert cigar == "3M2D1M"

    def test_homopolymer_insertion_right_merge(self):
        """同聚物插入右移后合并"""
        changed, cigar = run_pass("CAAATG", "CAAG", "1M1I2M1I1M")
        assert changed
        assert cigar == "3M2I1M"

    def test_tandem_repeat_right_merge(self):
        """串联重复缺失右移后合并"""
        changed, cigar = run_pass("TACT", "TACACGGT", "1M2D2M2D1M")
        assert changed
        assert cigar == "3M4D1M"

    def test_clips_are_preserved(self):
        """软/硬剪切保持不变"""
        changed, cigar = run_pass("TTCAAAAGC", "CAAAG", "2S3M1I2M1S")
        assert changed
        assert cigar == "2S1M1I4M1S"

        changed, cigar = run_pass("AAATAAAA", "AAAATAAAA", "3H3M1D5M2H")
        assert changed
        assert cigar == "3H1D8M2H"

    def test_skipped_region_blocks_shift(self):
        """indel不能跨越参考跳跃区域"""
        changed, cigar = run_pass("CAAAG", "CAATTTTAAAG", "3M5N1D2M")
        assert not changed
        assert cigar == "3M5N1D2M"

    def test_skipped_region_preserved(self):
        """跳跃区域在重建中保留"""
        reference = "CAAAG" + "T" * 10 + "ACG"
        changed, cigar = run_pass("CAAGACG", reference, "3M1D1M10N3M")
        assert changed
        assert cigar == "1M1D3M10N3M"

    def test_rebuild_rejects_overlap(self):
        """indel位于前一个indel终点之前时报错"""
        extracted = ExtractedAlignment(
            indels=[IndelAllele(False, 2, 5, 5, "AC"), IndelAllele(False, 1, 6, 5, "G")],
            aligned_length=10,
        )
        with pytest.raises(IndelOrderError):
            rebuild_cigar(extracted)

    def test_rebuild_merges_same_position_insertions(self):
        """同一位置的插入合并"""
        extracted = ExtractedAlignment(
            indels=[IndelAllele(True, 1, 3, 3, "A"), IndelAllele(True, 2, 3, 4, "CA")],
            aligned_length=5,
        )
        assert format_cigar(rebuild_cigar(extracted)) == "3M3I2M"

    def test_rebuild_different_kinds_no_empty_match(self):
        """不同类型indel相邻时不生成0长度匹配"""
        extracted = ExtractedAlignment(
            indels=[IndelAllele(False, 2, 2, 2, "AC"), IndelAllele(True, 1, 4, 2, "T")],
            aligned_length=6,
        )
        assert format_cigar(rebuild_cigar(extracted)) == "2M2D1I2M"

    def test_failed_pass_is_not_applied(self, monkeypatch):
        """重建失败时不修改输入CIGAR"""
        def misplace(extracted, read, reference):
            extracted.indels[1].position = 0

        monkeypatch.setattr(left_align_module, "merge_adjacent_indels", misplace)

        cigar = parse_cigar("1M1D2M1D1M")
        with pytest.raises(IndelOrderError):
            left_align("CAAT", cigar, "CAAAGT")
        assert format_cigar(cigar) == "1M1D2M1D1M"


class TestLeftAlignPass:
    """测试单次左对齐"""

    def test_match_only_is_noop(self):
        """仅匹配操作不改变"""
        cigar = parse_cigar("10M")
        assert not left_align("ACGTACGTAC", cigar, "ACGTACGTAC")
        assert cigar == [(10, 'M')]

    def test_clipped_match_only_is_noop(self):
        cigar = parse_cigar("5H2S8M")
        assert not left_align("TTACGTACGT", cigar, "ACGTACGT")
        assert format_cigar(cigar) == "5H2S8M"

    def test_cigar_mutated_in_place(self):
        """CIGAR列表原地修改"""
        cigar = parse_cigar("3M1D5M")
        same_object = cigar
        assert left_align("AAATAAAA", cigar, "AAAATAAAA")
        assert same_object is cigar
        assert cigar == [(1, 'D'), (8, 'M')]

    def test_canonical_alignment_unchanged(self):
        """已规范的比对返回未改变"""
        changed, cigar = run_pass("AAATAAAA", "AAAATAAAA", "1D8M")
        assert not changed
        assert cigar == "1D8M"

    def test_non_repeat_indel_unchanged(self):
        changed, cigar = run_pass("ACGTTGCA", "ACGTCTGCA", "4M1D4M")
        assert not changed
        assert cigar == "4M1D4M"
