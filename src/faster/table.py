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

import dataclasses
import sys
from typing import Any, Dict, Iterable, List

from .quality import count_ambiguous, count_at_or_above
from .records import FastqRecord
from .stats import generalized_nx, mean, quartile

TABLE_COLUMNS = (
    "file", "reads", "bases", "n_bases", "min_len", "max_len", "mean_len",
    "Q1", "Q2", "Q3", "N50", "Q20_percent", "Q30_percent"
)
TABLE_HEADER = "\t".join(TABLE_COLUMNS)
FLOAT_COLUMNS = frozenset(("mean_len", "Q20_percent", "Q30_percent"))


@dataclasses.dataclass
class TableRow:
    file: str
    reads: int
    bases: int
    n_bases: int
    min_len: int
    max_len: int
    mean_len: float
    Q1: int
    Q2: int
    Q3: int
    N50: int
    Q20_percent: float
    Q30_percent: float

    def to_dict(self) -> Dict[str, Any]:
        return dataclasses.asdict(self)

    def to_line(self) -> str:
        values = self.to_dict()
        return "\t".join(
            f"{values[column]:.2f}" if column in FLOAT_COLUMNS
            else str(values[column])
            for column in TABLE_COLUMNS
        )


@dataclasses.dataclass
class RunningStats:
    """Counters for a single pass over one file."""
    reads: int = 0
    bases: int = 0
    n_bases: int = 0
    qual_at_or_above_20: int = 0
    qual_at_or_above_30: int = 0
    min_len: int = sys.maxsize
    max_len: int = 0
    lengths: List[int] = dataclasses.field(default_factory=list)

    def add_record(self, record: FastqRecord):
        length = len(record.sequence)
        self.reads += 1
        self.bases += length
        self.n_bases += count_ambiguous(record.sequence)
        self.qual_at_or_above_20 += count_at_or_above(record.qualities, 20)
        self.qual_at_or_above_30 += count_at_or_above(record.qualities, 30)
        if length < self.min_len:
            self.min_len = length
        if length > self.max_len:
            self.max_len = length
        self.lengths.append(length)

    def finalize(self, filename: str) -> TableRow:
        """
        Compute the summary row. This sorts the lengths in place.

        A file without records gives a row of zeros. When there are no bases
        the Q20 and Q30 percentages are 0.0.
        """
        if self.reads == 0:
            return TableRow(filename, 0, 0, 0, 0, 0, 0.0, 0, 0, 0, 0,
                            0.0, 0.0)
        if self.bases:
            q20_percent = 100 * self.qual_at_or_above_20 / self.bases
            q30_percent = 100 * self.qual_at_or_above_30 / self.bases
        else:
            q20_percent = 0.0
            q30_percent = 0.0
        return TableRow(
            file=filename,
            reads=self.reads,
            bases=self.bases,
            n_bases=self.n_bases,
            min_len=self.min_len,
            max_len=self.max_len,
            mean_len=mean(self.lengths),
            Q1=quartile(self.lengths, 1),
            Q2=quartile(self.lengths, 2),
            Q3=quartile(self.lengths, 3),
            N50=generalized_nx(self.lengths, 0.5),
            Q20_percent=q20_percent,
            Q30_percent=q30_percent,
        )


def running_stats(records: Iterable[FastqRecord]) -> RunningStats:
    stats = RunningStats()
    for record in records:
        stats.add_record(record)
    return stats


def table_statistics(records: Iterable[FastqRecord],
                     filename: str) -> TableRow:
    return running_stats(records).finalize(filename)
