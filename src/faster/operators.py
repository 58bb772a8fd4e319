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

"""
Per-file operators. Exactly one operator is chosen per invocation and every
input file is streamed through it separately.

Operators either produce lines of text (statistics and listings) or
FASTQ records (filters and trimmers).
"""

import dataclasses
import math
import re
import typing
from abc import ABC, abstractmethod
from typing import (BinaryIO, ClassVar, Iterable, Iterator, Optional, Tuple,
                    Union)

from .quality import count_at_or_above, gc_fraction, mean_quality_score
from .records import FastqRecord
from .stats import generalized_nx
from .table import TABLE_HEADER, table_statistics

QUALITY_YIELD_MIN = 8
QUALITY_YIELD_MAX = 60
QUALITY_FILTER_MAX = 60


class KeepAbove(typing.NamedTuple):
    """Keep values strictly greater than the limit."""
    limit: int

    def keep(self, value: float) -> bool:
        return value > self.limit


class KeepBelow(typing.NamedTuple):
    """Keep values strictly smaller than the limit."""
    limit: int

    def keep(self, value: float) -> bool:
        return value < self.limit


Threshold = Union[KeepAbove, KeepBelow]


def parse_threshold(text: str) -> Threshold:
    """
    Parse a signed threshold. A leading minus selects KeepBelow with the
    magnitude as limit, anything else selects KeepAbove. '-0' is KeepBelow(0).
    """
    text = text.strip()
    below = text.startswith("-")
    limit = int(text[1:] if below else text)
    if limit < 0:
        raise ValueError(f"Invalid threshold: '{text}'.")
    if below:
        return KeepBelow(limit)
    return KeepAbove(limit)


def record_mean_quality(record: FastqRecord) -> float:
    if not record.qualities:
        return math.nan
    return mean_quality_score(record.qualities)


class Operator(ABC):
    header: ClassVar[Optional[str]] = None

    @abstractmethod
    def process(self, records: Iterable[FastqRecord],
                filename: str = "-") -> Iterator[str]:
        pass

    def write(self, records: Iterable[FastqRecord], output: BinaryIO,
              filename: str = "-"):
        for line in self.process(records, filename):
            output.write(f"{line}\n".encode())


class RecordOperator(Operator):
    """Operators that write FASTQ records rather than lines of text."""

    @abstractmethod
    def process(self, records: Iterable[FastqRecord],  # type: ignore
                filename: str = "-") -> Iterator[FastqRecord]:
        pass

    def write(self, records: Iterable[FastqRecord], output: BinaryIO,
              filename: str = "-"):
        for record in self.process(records, filename):
            output.write(record.fastq_bytes())


class RecordTransform(RecordOperator):
    """
    Record operators that decide on each record by itself. transform returns
    the record to write or None to drop it.
    """

    @abstractmethod
    def transform(self, record: FastqRecord) -> Optional[FastqRecord]:
        pass

    def process(self, records, filename="-"):
        for record in records:
            result = self.transform(record)
            if result is not None:
                yield result


@dataclasses.dataclass(frozen=True)
class TableStatistics(Operator):
    header: ClassVar[Optional[str]] = TABLE_HEADER

    def process(self, records, filename="-"):
        yield table_statistics(records, filename).to_line()


@dataclasses.dataclass(frozen=True)
class LengthListing(Operator):
    def process(self, records, filename="-"):
        for record in records:
            yield str(len(record.sequence))


@dataclasses.dataclass(frozen=True)
class GCListing(Operator):
    def process(self, records, filename="-"):
        for record in records:
            yield f"{gc_fraction(record.sequence):.4f}"


@dataclasses.dataclass(frozen=True)
class QualityListing(Operator):
    def process(self, records, filename="-"):
        for record in records:
            yield f"{record_mean_quality(record):.4f}"


@dataclasses.dataclass(frozen=True)
class NXValue(Operator):
    """
    NX where fraction of the bases is in reads of at least the reported
    length. Needs all the lengths of the file in memory.
    """
    fraction: float

    def __post_init__(self):
        if not 0.0 <= self.fraction <= 1.0:
            raise ValueError(
                f"NX fraction must be between 0 and 1, got {self.fraction}.")

    def process(self, records, filename="-"):
        lengths = [len(record.sequence) for record in records]
        value = generalized_nx(lengths, 1 - self.fraction) if lengths else 0
        yield f"N{self.fraction * 100:g}\t{value}"


@dataclasses.dataclass(frozen=True)
class QualityYield(Operator):
    threshold: int

    def __post_init__(self):
        if not QUALITY_YIELD_MIN <= self.threshold <= QUALITY_YIELD_MAX:
            raise ValueError(
                f"Quality yield threshold must be between "
                f"{QUALITY_YIELD_MIN} and {QUALITY_YIELD_MAX}, "
                f"got {self.threshold}.")

    def process(self, records, filename="-"):
        bases = 0
        passing_bases = 0
        for record in records:
            bases += len(record.qualities)
            passing_bases += count_at_or_above(record.qualities,
                                               self.threshold)
        percent = 100 * passing_bases / bases if bases else 0.0
        yield f"Q{self.threshold}\t{percent:.2f}"


@dataclasses.dataclass(frozen=True)
class LengthFilter(RecordTransform):
    threshold: Threshold

    def transform(self, record):
        if self.threshold.keep(len(record.sequence)):
            return record
        return None


@dataclasses.dataclass(frozen=True)
class QualityFilter(RecordTransform):
    """
    Filter on the mean quality of a read. Reads without bases have no mean
    quality and are always dropped.
    """
    threshold: Threshold

    def __post_init__(self):
        if self.threshold.limit > QUALITY_FILTER_MAX:
            raise ValueError(
                f"Quality filter limit must be between 0 and "
                f"{QUALITY_FILTER_MAX}, got {self.threshold.limit}.")

    def transform(self, record):
        if self.threshold.keep(record_mean_quality(record)):
            return record
        return None


@dataclasses.dataclass(frozen=True)
class TrimFront(RecordTransform):
    """
    Remove bases from the start of each read. Reads that are shorter than
    the trim length are written with an empty sequence.
    """
    length: int

    def __post_init__(self):
        if self.length < 0:
            raise ValueError(
                f"Trim length must be non-negative, got {self.length}.")

    def transform(self, record):
        return record._replace(sequence=record.sequence[self.length:],
                               qualities=record.qualities[self.length:])


@dataclasses.dataclass(frozen=True)
class TrimTail(RecordTransform):
    """
    Remove bases from the end of each read. Reads that are shorter than the
    trim length are written with an empty sequence.
    """
    length: int

    def __post_init__(self):
        if self.length < 0:
            raise ValueError(
                f"Trim length must be non-negative, got {self.length}.")

    def transform(self, record):
        keep = max(len(record.sequence) - self.length, 0)
        return record._replace(sequence=record.sequence[:keep],
                               qualities=record.qualities[:keep])


@dataclasses.dataclass(frozen=True)
class RegexFilter(RecordTransform):
    """Keep reads whose id contains a match for the pattern."""
    pattern: re.Pattern

    def transform(self, record):
        if self.pattern.search(record.id):
            return record
        return None


@dataclasses.dataclass(frozen=True)
class RegexSetFilter(RecordTransform):
    """Keep reads whose id contains a match for any of the patterns."""
    patterns: Tuple[re.Pattern, ...]

    def transform(self, record):
        identifier = record.id
        if any(pattern.search(identifier) for pattern in self.patterns):
            return record
        return None


def patterns_from_file(pattern_file: str) -> Tuple[re.Pattern, ...]:
    patterns = []
    with open(pattern_file, "rt") as patterns_in:
        for line in patterns_in:
            line = line.strip()
            if not line:
                continue  # ignore empty lines
            patterns.append(re.compile(line))
    return tuple(patterns)


@dataclasses.dataclass(frozen=True)
class Subsample(RecordOperator):
    """
    Keep every Nth read where N is 1 / fraction rounded half up. This is a
    reproducible stride sample that preserves the read order, not a random
    sample. With fraction 0.5 the second, fourth, sixth... reads are kept.
    """
    fraction: float

    def __post_init__(self):
        if not 0.0 < self.fraction <= 1.0:
            raise ValueError(
                f"Sample fraction must be greater than 0 and at most 1, "
                f"got {self.fraction}.")
        # Subnormal fractions overflow to an infinite stride.
        if math.isinf(1 / self.fraction):
            raise ValueError(
                f"Sample fraction {self.fraction} is too small to determine "
                f"a stride.")

    @property
    def stride(self) -> int:
        return math.floor(1 / self.fraction + 0.5)

    def process(self, records, filename="-"):
        stride = self.stride
        counter = 0
        for record in records:
            counter += 1
            if counter == stride:
                counter = 0
                yield record


Command = Union[
    TableStatistics, LengthListing, GCListing, QualityListing, NXValue,
    QualityYield, LengthFilter, QualityFilter, TrimFront, TrimTail,
    RegexFilter, RegexSetFilter, Subsample
]
