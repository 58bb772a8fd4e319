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

import typing
from typing import Optional

import dnaio


class FastqRecord(typing.NamedTuple):
    """
    A single sequencing read.

    The id is the first whitespace-delimited field of the header line, the
    description is the remainder (None when the header has no whitespace).
    Sequence and qualities are ASCII strings of equal length.
    """
    id: str
    description: Optional[str]
    sequence: str
    qualities: str

    @classmethod
    def from_name(cls, name: str, sequence: str, qualities: str
                  ) -> "FastqRecord":
        if len(sequence) != len(qualities):
            raise ValueError(
                f"Sequence and qualities must be of equal length. Record "
                f"'{name}' has {len(sequence)} bases and "
                f"{len(qualities)} qualities.")
        header_parts = name.split(maxsplit=1)
        if not header_parts:
            return cls("", None, sequence, qualities)
        if len(header_parts) == 1:
            return cls(header_parts[0], None, sequence, qualities)
        return cls(header_parts[0], header_parts[1], sequence, qualities)

    @classmethod
    def from_sequence_record(cls, record: dnaio.SequenceRecord
                             ) -> "FastqRecord":
        return cls.from_name(record.name, record.sequence,
                             record.qualities)  # type: ignore

    def name(self) -> str:
        if self.description:
            return f"{self.id} {self.description}"
        return self.id

    def to_sequence_record(self) -> dnaio.SequenceRecord:
        return dnaio.SequenceRecord(self.name(), self.sequence, self.qualities)

    def fastq_bytes(self) -> bytes:
        return self.to_sequence_record().fastq_bytes()
