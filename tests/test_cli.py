#!/usr/bin/env python3
"""
命令行接口测试
"""

import io
import json

import pandas as pd
import pytest

from leftalign.cli import main, parse_arguments, read_alignment_table, load_reference


def write_table(path, rows, columns):
    lines = ['\t'.join(columns)] + ['\t'.join(str(v) for v in row) for row in rows]
    path.write_text('\n'.join(lines) + '\n')
    return path


@pytest.fixture
def inline_table(tmp_path):
    return write_table(
        tmp_path / "alignments.tsv",
        [("r1", "AAATAAAA", "AAAATAAAA", "3M1D5M"),
         ("r2", "ACGT", "ACGT", "4M")],
        ['name', 'read', 'reference', 'cigar'],
    )


@pytest.fixture
def fasta_file(tmp_path):
    path = tmp_path / "genome.fa"
    path.write_text(">chr1\nTTTAAAATAAAAGGG\n")
    return path


class TestArguments:
    """测试参数解析"""

    def test_defaults(self):
        args = parse_arguments(['--input', 'in.tsv'])
        assert args.output == '-'
        assert args.reference is None
        assert args.max_iterations is None
        assert not args.skip_unchanged
        assert args.log_level == 'INFO'

    def test_input_required(self):
        with pytest.raises(SystemExit):
            parse_arguments([])


class TestReadAlignmentTable:
    """测试输入表读取"""

    def test_inline_reference(self, inline_table):
        records = read_alignment_table(str(inline_table))
        assert [r.name for r in records] == ["r1", "r2"]
        assert records[0].reference == "AAAATAAAA"
        assert records[0].cigar == "3M1D5M"

    def test_reference_from_fasta(self, tmp_path, fasta_file):
        """从FASTA按contig和位置截取参考窗口"""
        table = write_table(tmp_path / "pos.tsv",
                            [("r1", "AAATAAAA", "3M1D5M", "chr1", 3)],
                            ['name', 'read', 'cigar', 'contig', 'position'])
        contigs = load_reference(str(fasta_file))
        assert contigs == {'chr1': "TTTAAAATAAAAGGG"}

        records = read_alignment_table(str(table), contigs)
        assert records[0].reference == "AAAATAAAA"

    def test_bad_window_marked_per_record(self, tmp_path):
        """未知contig或无效位置只标记该条记录"""
        table = write_table(tmp_path / "pos.tsv",
                            [("r1", "AAATAAAA", "3M1D5M", "chr1", 3),
                             ("r2", "AAATAAAA", "3M1D5M", "chr2", 3),
                             ("r3", "AAATAAAA", "3M1D5M", "chr1", "x")],
                            ['name', 'read', 'cigar', 'contig', 'position'])
        records = read_alignment_table(str(table), {'chr1': "TTTAAAATAAAAGGG"})
        assert [r.name for r in records] == ["r1", "r2", "r3"]
        assert records[0].error == ""
        assert records[0].reference == "AAAATAAAA"
        assert "chr2" in records[1].error
        assert "Invalid position" in records[2].error

    def test_missing_columns(self, tmp_path):
        table = write_table(tmp_path / "bad.tsv", [("r1", "ACGT")], ['name', 'read'])
        with pytest.raises(ValueError, match="missing columns"):
            read_alignment_table(str(table))

    def test_reference_required(self, tmp_path):
        table = write_table(tmp_path / "pos.tsv",
                            [("r1", "AAATAAAA", "3M1D5M", "chr1", 3)],
                            ['name', 'read', 'cigar', 'contig', 'position'])
        with pytest.raises(ValueError):
            read_alignment_table(str(table))


class TestMain:
    """测试命令行主流程"""

    def test_stdout_output(self, inline_table, capsys):
        """结果写到标准输出"""
        assert main(['--input', str(inline_table), '--log-level', 'ERROR']) == 0
        captured = capsys.readouterr()
        df = pd.read_csv(io.StringIO(captured.out), sep='\t', keep_default_na=False)
        assert list(df['name']) == ["r1", "r2"]
        assert list(df['cigar_after']) == ["1D8M", "4M"]

    def test_file_output_with_fasta(self, tmp_path, fasta_file):
        table = write_table(tmp_path / "pos.tsv",
                            [("r1", "AAATAAAA", "3M1D5M", "chr1", 3)],
                            ['name', 'read', 'cigar', 'contig', 'position'])
        output = tmp_path / "out.tsv"
        log_file = tmp_path / "run.log"

        exit_code = main(['--input', str(table), '--reference', str(fasta_file),
                          '--output', str(output), '--log-file', str(log_file)])
        assert exit_code == 0

        df = pd.read_csv(output, sep='\t', keep_default_na=False)
        assert df.iloc[0]['cigar_after'] == "1D8M"
        assert "Normalizing 1 alignments" in log_file.read_text()

    def test_skip_unchanged(self, inline_table, tmp_path):
        output = tmp_path / "out.tsv"
        main(['--input', str(inline_table), '--output', str(output),
              '--skip-unchanged', '--log-level', 'ERROR'])
        df = pd.read_csv(output, sep='\t', keep_default_na=False)
        assert list(df['name']) == ["r1"]

    def test_max_iterations_override(self, inline_table, tmp_path):
        """命令行参数覆盖配置文件"""
        config_file = tmp_path / "config.json"
        config_file.write_text(json.dumps({'max_iterations': 10}))
        output = tmp_path / "out.tsv"

        main(['--input', str(inline_table), '--output', str(output),
              '--config', str(config_file), '--max-iterations', '0', '--log-level', 'ERROR'])
        df = pd.read_csv(output, sep='\t', keep_default_na=False)
        assert df.iloc[0]['status'] == "unstable"
        assert df.iloc[1]['status'] == "ok"

    def test_failure_exit_code(self, tmp_path):
        """存在失败记录时返回1"""
        table = write_table(
            tmp_path / "alignments.tsv",
            [("r1", "AAATAAAA", "AAAATAAAA", "3M1D5M"),
             ("bad", "AC", "ACG", "2M3D")],
            ['name', 'read', 'reference', 'cigar'],
        )
        output = tmp_path / "out.tsv"
        assert main(['--input', str(table), '--output', str(output), '--log-level', 'ERROR']) == 1

        df = pd.read_csv(output, sep='\t', keep_default_na=False)
        assert list(df['status']) == ["ok", "error"]
        assert df.iloc[1]['cigar_after'] == "2M3D"

    def test_unknown_contig_does_not_abort(self, tmp_path, fasta_file):
        """未知contig的记录报告为失败, 其余记录照常输出"""
        table = write_table(tmp_path / "pos.tsv",
                            [("r1", "AAATAAAA", "3M1D5M", "chr1", 3),
                             ("r2", "AAATAAAA", "3M1D5M", "chrX", 3)],
                            ['name', 'read', 'cigar', 'contig', 'position'])
        output = tmp_path / "out.tsv"

        exit_code = main(['--input', str(table), '--reference', str(fasta_file),
                          '--output', str(output), '--log-level', 'ERROR'])
        assert exit_code == 1

        df = pd.read_csv(output, sep='\t', keep_default_na=False)
        assert list(df['name']) == ["r1", "r2"]
        assert list(df['status']) == ["ok", "error"]
        assert df.iloc[0]['cigar_after'] == "1D8M"
        assert df.iloc[1]['cigar_after'] == "3M1D5M"
        assert "chrX" in df.iloc[1]['message']
