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

import os
import sys
from typing import BinaryIO, Callable, Iterator, Optional

import dnaio

import tqdm

import xopen

from .records import FastqRecord

STDIN_NAME = "-"


class MalformedRecordError(ValueError):
    """Truncated FASTQ or a record with unequal sequence and quality length"""


class ProgressUpdater:
    """
    A simple wrapper to update the progressbar based on the parsed records.

    Because tqdm requires some minor execution time, only call tqdm.update()
    every 10,000 records to prevent too much time spent on calling the
    tell() functions and calling tqdm.update().
    """
    _get_position: Callable[[], int]
    previous_file_pos: int
    records_since_update: int
    progress_update_every: int
    tqdm: tqdm.tqdm

    def __init__(self, filereader: BinaryIO, name: str,
                 disable: Optional[bool] = None):
        self.previous_file_pos = 0
        self.records_since_update = 0
        self.progress_update_every = 10_000
        total: Optional[int] = None
        if filereader.seekable():
            self._get_position = filereader.tell
            try:
                total = os.fstat(filereader.fileno()).st_size
            except OSError:
                total = None
        else:
            # No way to track a position in pipes.
            self._get_position = lambda: self.previous_file_pos
            disable = True
        self.tqdm = tqdm.tqdm(
            desc=f"Processing {os.path.basename(name)}",
            unit="iB", unit_scale=True, unit_divisor=1024,
            total=total,
            smoothing=0.05,  # Much less erratic than default 0.3
            disable=disable,
        )

    def __enter__(self):
        return self

    def close(self):
        # Do one last update to ensure the entire progress bar is full
        self.tqdm.update(self._get_position() - self.previous_file_pos)
        self.tqdm.close()

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def update(self):
        self.records_since_update += 1
        if self.records_since_update >= self.progress_update_every:
            self.records_since_update = 0
            current_position = self._get_position()
            self.tqdm.update(current_position - self.previous_file_pos)
            self.previous_file_pos = current_position


class FastqFile:
    """
    Iterate over the FastqRecords of a plain or compressed FASTQ file.
    The compression format is detected from the file contents. The filepath
    '-' reads from standard input.
    """
    filepath: str
    raw: BinaryIO
    file: BinaryIO
    progress: ProgressUpdater
    reader: dnaio.FastqReader

    def __init__(self, filepath: str, threads: int = 0,
                 progress: Optional[bool] = None):
        self.filepath = filepath
        if filepath == STDIN_NAME:
            self.raw = sys.stdin.buffer
        else:
            self.raw = open(filepath, "rb")  # type: ignore
        # tqdm disables itself on a non-tty when disable is None.
        disable = None if progress is None else not progress
        self.progress = ProgressUpdater(self.raw, filepath, disable)
        try:
            self.file = xopen.xopen(self.raw, "rb", threads=threads)
        except Exception:
            self._close_raw()
            raise
        try:
            # dnaio already parses the first record here.
            self.reader = dnaio.FastqReader(self.file)
        except dnaio.FastqFormatError as error:
            self.file.close()
            self._close_raw()
            raise self._malformed(error) from error
        except Exception:
            self.file.close()
            self._close_raw()
            raise

    def __iter__(self) -> Iterator[FastqRecord]:
        try:
            for sequence_record in self.reader:
                self.progress.update()
                yield FastqRecord.from_sequence_record(sequence_record)
        except dnaio.FastqFormatError as error:
            raise self._malformed(error) from error

    def _malformed(self, error: Exception) -> MalformedRecordError:
        return MalformedRecordError(
            f"Malformed FASTQ in {self.filepath}: {error}")

    def _close_raw(self):
        self.progress.close()
        if self.raw is not sys.stdin.buffer:
            self.raw.close()

    def close(self):
        self.reader.close()
        self.file.close()
        self._close_raw()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

