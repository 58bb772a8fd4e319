# Copyright (C) 2026 Faster developers
# This file is part of Faster
#
# Faster is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as
# published by the Free Software Foundation, either version 3 of the
# License, or (at your option) any later version.
#
# Faster is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU Affero General Public License for more details.
#
# You should have received a copy of the GNU Affero General Public License
# along with Faster.  If not, see <https://www.gnu.org/licenses/

import sys
from pathlib import Path

import pytest

from faster import FastqRecord
from faster.__main__ import main
from faster.table import TABLE_HEADER

TEST_DATA = Path(__file__).parent / "data"
TEN_READS = str(TEST_DATA / "ten_reads.fastq")
SIMPLE = str(TEST_DATA / "simple.fastq")


def run_main(capsys, *args: str) -> str:
    sys.argv = ["faster", "--no-progress", *args]
    main()
    return capsys.readouterr().out


def test_table(capsys):
    out = run_main(capsys, "--table", TEN_READS)
    lines = out.splitlines()
    assert lines[0] == TABLE_HEADER
    assert len(lines) == 2
    assert "10\t18931\t0" in lines[1]
    assert lines[1].startswith(TEN_READS + "\t")


def test_table_short_flag(capsys):
    out = run_main(capsys, "-t", TEN_READS)
    assert "10\t18931\t0\t249\t3000\t1893.10" in out


def test_table_multiple_files_one_header(capsys):
    gzipped = str(TEST_DATA / "ten_reads.fastq.gz")
    empty = str(TEST_DATA / "empty.fastq")
    out = run_main(capsys, "--table", TEN_READS, gzipped, empty)
    lines = out.splitlines()
    assert lines.count(TABLE_HEADER) == 1
    assert len(lines) == 4
    plain_row = lines[1].split("\t")
    gzipped_row = lines[2].split("\t")
    assert plain_row[0] == TEN_READS
    assert gzipped_row[0] == gzipped
    assert plain_row[1:] == gzipped_row[1:]
    assert lines[3] == f"{empty}\t0\t0\t0\t0\t0\t0.00\t0\t0\t0\t0\t0.00\t0.00"


def test_len(capsys):
    out = run_main(capsys, "--len", TEN_READS)
    lines = out.splitlines()
    assert len(lines) == 10
    assert "249" in lines


def test_gc(capsys):
    out = run_main(capsys, "--gc", TEN_READS)
    assert out.splitlines()[:2] == ["0.4000", "0.6000"]


def test_gc_twice_identical(capsys):
    first = run_main(capsys, "--gc", TEN_READS)
    second = run_main(capsys, "--gc", TEN_READS)
    assert first == second


def test_qual(capsys):
    out = run_main(capsys, "--qual", SIMPLE)
    lines = out.splitlines()
    assert lines[0] == "39.0000"
    assert lines[1] == "42.0000"
    assert len(lines) == 3


def test_nx(capsys):
    assert run_main(capsys, "--nx", "0.5", TEN_READS) == "N50\t2100\n"
    assert run_main(capsys, "--nx", "0.9", TEN_READS) == "N90\t1682\n"


def test_qyield(capsys):
    assert run_main(capsys, "--qyield", "30", TEN_READS) == "Q30\t28.54\n"


@pytest.fixture()
def mixed_lengths(tmp_path) -> str:
    path = tmp_path / "mixed.fastq"
    with open(path, "wb") as fastq:
        for length in (10, 49, 50, 51, 100):
            record = FastqRecord(f"len{length}", None, "A" * length,
                                 "I" * length)
            fastq.write(record.fastq_bytes())
    return str(path)


def output_lengths(out: str):
    return [len(line) for line in out.splitlines()[1::4]]


def test_filter_shorter(capsys, mixed_lengths):
    out = run_main(capsys, "--filter", "-50", mixed_lengths)
    assert output_lengths(out) == [10, 49]


def test_filter_longer(capsys, mixed_lengths):
    out = run_main(capsys, "--filter", "50", mixed_lengths)
    assert output_lengths(out) == [51, 100]


def test_qfilter(capsys):
    out = run_main(capsys, "--qfilter", "40", SIMPLE)
    assert out == "@AnotherHeader/1 some description\nACATTAG\n+\nKKKKKKK\n"


def test_trimfront(capsys):
    out = run_main(capsys, "--trimfront", "3", SIMPLE)
    assert out.splitlines()[:4] == ["@Myheader/1", "TACA", "+", "HHHH"]


def test_trimtail(capsys):
    out = run_main(capsys, "--trimtail", "3", SIMPLE)
    assert out.splitlines()[8:12] == [
        "@YetAnotherHeader/1", "AAAAT", "+", "XKLLC"]


def test_trim_zero_is_identity(capsys):
    original = Path(SIMPLE).read_text()
    assert run_main(capsys, "--trimfront", "0", SIMPLE) == original
    assert run_main(capsys, "--trimtail", "0", SIMPLE) == original


def test_regex(capsys):
    out = run_main(capsys, "--regex", "^Another", SIMPLE)
    assert out.splitlines()[0] == "@AnotherHeader/1 some description"
    assert len(out.splitlines()) == 4


def test_regex_file(capsys):
    out = run_main(capsys, "--regex-file", str(TEST_DATA / "patterns.txt"),
                   TEN_READS)
    headers = out.splitlines()[::4]
    assert headers == ["@read_1 sample=ten_reads", "@read_7 sample=ten_reads",
                       "@read_10 sample=ten_reads"]


def test_sample(capsys):
    out = run_main(capsys, "--sample", "0.5", TEN_READS)
    headers = [line.split()[0] for line in out.splitlines()[::4]]
    assert headers == ["@read_2", "@read_4", "@read_6", "@read_8", "@read_10"]


class _TextStdin:
    def __init__(self, buffer):
        self.buffer = buffer


def test_stdin(capsys, monkeypatch):
    with open(TEST_DATA / "ten_reads.fastq.gz", "rb") as raw:
        monkeypatch.setattr(sys, "stdin", _TextStdin(raw))
        out = run_main(capsys, "--len")
    assert len(out.splitlines()) == 10


@pytest.mark.parametrize(["args", "messages"], (
    (["--nx", "1.5"], ["--nx", "1.5", "[0.0, 1.0]"]),
    (["--nx", "half"], ["--nx", "half"]),
    (["--qyield", "7"], ["--qyield", "7", "[8, 60]"]),
    (["--qyield", "61"], ["61", "[8, 60]"]),
    (["--qfilter", "-61"], ["-61", "[-60, 60]"]),
    (["--filter", "abc"], ["abc"]),
    (["--trimfront", "-1"], ["-1"]),
    (["--sample", "0"], ["0", "(0.0, 1.0]"]),
    (["--sample", "5e-324"], ["5e-324", "too small"]),
    (["--regex", "("], ["regular expression"]),
    (["--regex-file", "does_not_exist.txt"], ["does_not_exist.txt"]),
))
def test_invalid_arguments(capsys, args, messages):
    sys.argv = ["faster", *args, TEN_READS]
    with pytest.raises(SystemExit) as error:
        main()
    assert error.value.code == 2
    result = capsys.readouterr()
    assert result.out == ""
    for message in messages:
        assert message in result.err


def test_no_operation(capsys):
    sys.argv = ["faster", TEN_READS]
    with pytest.raises(SystemExit) as error:
        main()
    assert error.value.code == 2


def test_two_operations(capsys):
    sys.argv = ["faster", "--len", "--gc", TEN_READS]
    with pytest.raises(SystemExit) as error:
        main()
    assert error.value.code == 2
    assert "not allowed with" in capsys.readouterr().err


@pytest.mark.parametrize("filename", ["truncated.fastq",
                                      "length_mismatch.fastq"])
def test_malformed_input(capsys, filename):
    sys.argv = ["faster", "--len", str(TEST_DATA / filename)]
    with pytest.raises(SystemExit) as error:
        main()
    assert error.value.code == 1
    result = capsys.readouterr()
    assert result.out == "4\n"
    assert filename in result.err


@pytest.mark.parametrize("filename", ["first_record_mismatch.fastq",
                                      "single_truncated.fastq",
                                      "not_fastq.fasta",
                                      "non_ascii.fastq"])
def test_malformed_first_record(capsys, filename):
    sys.argv = ["faster", "--len", str(TEST_DATA / filename)]
    with pytest.raises(SystemExit) as error:
        main()
    assert error.value.code == 1
    result = capsys.readouterr()
    assert result.out == ""
    assert filename in result.err
    assert "Traceback" not in result.err


def test_malformed_first_record_after_valid_file(capsys):
    sys.argv = ["faster", "--no-progress", "--table", TEN_READS,
                str(TEST_DATA / "not_fastq.fasta")]
    with pytest.raises(SystemExit) as error:
        main()
    assert error.value.code == 1
    lines = capsys.readouterr().out.splitlines()
    assert lines[0] == TABLE_HEADER
    assert lines[1].startswith(f"{TEN_READS}\t10\t18931\t")
    assert len(lines) == 2


def test_missing_input(capsys, tmp_path):
    sys.argv = ["faster", "--len", str(tmp_path / "missing.fastq")]
    with pytest.raises(SystemExit) as error:
        main()
    assert error.value.code == 1
    assert "missing.fastq" in capsys.readouterr().err


def test_version_command(capsys):
    sys.argv = ["", "--version"]
    with pytest.raises(SystemExit):
        main()
    result = capsys.readouterr()
    import faster
    assert result.out.strip() == faster.__version__
