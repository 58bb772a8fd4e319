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

import argparse
import re
import sys
from typing import BinaryIO, Callable, List, Optional, Tuple

from ._version import __version__
from .operators import (
    Command,
    GCListing,
    LengthFilter,
    LengthListing,
    NXValue,
    QUALITY_FILTER_MAX,
    QUALITY_YIELD_MAX,
    QUALITY_YIELD_MIN,
    QualityFilter,
    QualityListing,
    QualityYield,
    RegexFilter,
    RegexSetFilter,
    Subsample,
    TableStatistics,
    Threshold,
    TrimFront,
    TrimTail,
    parse_threshold,
    patterns_from_file,
)
from .util import MalformedRecordError, STDIN_NAME, FastqFile


def bounded_float(minimum: float, maximum: float,
                  include_minimum: bool = True) -> Callable[[str], float]:
    lower_bracket = "[" if include_minimum else "("

    def parse(value: str) -> float:
        try:
            number = float(value)
        except ValueError:
            raise argparse.ArgumentTypeError(
                f"'{value}' is not a number, expected a value in "
                f"{lower_bracket}{minimum}, {maximum}].")
        above_minimum = (number >= minimum if include_minimum
                         else number > minimum)
        # NaN fails both comparisons.
        if not (above_minimum and number <= maximum):
            raise argparse.ArgumentTypeError(
                f"{value} is out of range, expected a value in "
                f"{lower_bracket}{minimum}, {maximum}].")
        return number
    return parse


def bounded_int(minimum: int, maximum: int) -> Callable[[str], int]:
    def parse(value: str) -> int:
        try:
            number = int(value)
        except ValueError:
            raise argparse.ArgumentTypeError(
                f"'{value}' is not an integer, expected a value in "
                f"[{minimum}, {maximum}].")
        if not minimum <= number <= maximum:
            raise argparse.ArgumentTypeError(
                f"{value} is out of range, expected a value in "
                f"[{minimum}, {maximum}].")
        return number
    return parse


def non_negative_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(
            f"'{value}' is not an integer, expected a value of 0 or more.")
    if number < 0:
        raise argparse.ArgumentTypeError(
            f"{value} is negative, expected a value of 0 or more.")
    return number


def signed_threshold(maximum: Optional[int] = None
                     ) -> Callable[[str], Threshold]:
    def parse(value: str) -> Threshold:
        try:
            threshold = parse_threshold(value)
        except ValueError:
            raise argparse.ArgumentTypeError(
                f"'{value}' is not a valid integer threshold.")
        if maximum is not None and threshold.limit > maximum:
            raise argparse.ArgumentTypeError(
                f"{value} is out of range, expected a value in "
                f"[-{maximum}, {maximum}].")
        return threshold
    return parse


def regex(value: str) -> re.Pattern:
    try:
        return re.compile(value)
    except re.error as error:
        raise argparse.ArgumentTypeError(
            f"'{value}' is not a valid regular expression: {error}.")


def regex_file(value: str) -> Tuple[re.Pattern, ...]:
    try:
        return patterns_from_file(value)
    except OSError as error:
        raise argparse.ArgumentTypeError(
            f"Can not read pattern file '{value}': {error}.")
    except re.error as error:
        raise argparse.ArgumentTypeError(
            f"Pattern file '{value}' contains an invalid regular "
            f"expression: {error}.")


def sample_fraction(value: str) -> float:
    fraction = bounded_float(0.0, 1.0, include_minimum=False)(value)
    try:
        Subsample(fraction)
    except ValueError as error:
        raise argparse.ArgumentTypeError(
            f"{value} is out of range: {error}")
    return fraction


def argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Fast statistics and simple manipulations of FASTQ "
                    "files. Exactly one operation is applied to each input "
                    "file in turn. Results are written to stdout.")
    parser.add_argument("inputs", metavar="INPUT", nargs="*",
                        default=[STDIN_NAME],
                        help="FASTQ files, optionally compressed. The "
                             "compression format is autodetected. Use '-' "
                             "for stdin. Default: stdin.")
    operations = parser.add_argument_group(
        "Operations", "Choose exactly one.")
    group = operations.add_mutually_exclusive_group(required=True)
    group.add_argument("-t", "--table", action="store_true",
                       help="Write a tab-separated table with reads, "
                            "bases, N bases, minimum, maximum and mean "
                            "length, length quartiles, N50 and the "
                            "percentage of bases of at least Q20 and Q30. "
                            "One row per file.")
    group.add_argument("-l", "--len", action="store_true",
                       help="Write the length of each read.")
    group.add_argument("-g", "--gc", action="store_true",
                       help="Write the GC fraction of each read.")
    group.add_argument("-q", "--qual", action="store_true",
                       help="Write the mean quality score of each read. "
                            "Error probabilities are averaged before "
                            "converting back to a phred score.")
    group.add_argument("--nx", metavar="FRACTION",
                       type=bounded_float(0.0, 1.0),
                       help="Write the NX value: the length such that reads "
                            "of this length or longer contain FRACTION of "
                            "all bases. 0.5 gives the N50.")
    group.add_argument("--qyield", metavar="THRESHOLD",
                       type=bounded_int(QUALITY_YIELD_MIN, QUALITY_YIELD_MAX),
                       help=f"Write the percentage of bases with a quality "
                            f"of at least THRESHOLD. Range "
                            f"{QUALITY_YIELD_MIN}-{QUALITY_YIELD_MAX}.")
    group.add_argument("--filter", metavar="LENGTH",
                       type=signed_threshold(),
                       help="Keep reads longer than LENGTH. A negative "
                            "value keeps reads shorter than its absolute "
                            "value instead.")
    group.add_argument("--qfilter", metavar="QUALITY",
                       type=signed_threshold(QUALITY_FILTER_MAX),
                       help=f"Keep reads with a mean quality higher than "
                            f"QUALITY. A negative value keeps reads with a "
                            f"mean quality lower than its absolute value. "
                            f"Range -{QUALITY_FILTER_MAX} to "
                            f"{QUALITY_FILTER_MAX}.")
    group.add_argument("--trimfront", metavar="N", type=non_negative_int,
                       help="Remove N bases from the start of each read.")
    group.add_argument("--trimtail", metavar="N", type=non_negative_int,
                       help="Remove N bases from the end of each read.")
    group.add_argument("--regex", metavar="PATTERN", type=regex,
                       help="Keep reads whose id matches PATTERN.")
    group.add_argument("--regex-file", metavar="FILE", type=regex_file,
                       help="Keep reads whose id matches any of the "
                            "patterns in FILE. One pattern per line.")
    group.add_argument("--sample", metavar="FRACTION",
                       type=sample_fraction,
                       help="Keep every Nth read with N = 1 / FRACTION "
                            "rounded. Order preserving and reproducible, "
                            "not random.")
    parser.add_argument("--no-progress", dest="progress",
                        action="store_false", default=None,
                        help="Do not show a progress bar. By default a "
                             "progress bar is shown on stderr when it is a "
                             "terminal.")
    parser.add_argument("--version", action="version",
                        version=__version__)
    return parser


def command_from_args(args: argparse.Namespace) -> Command:
    if args.table:
        return TableStatistics()
    if args.len:
        return LengthListing()
    if args.gc:
        return GCListing()
    if args.qual:
        return QualityListing()
    if args.nx is not None:
        return NXValue(args.nx)
    if args.qyield is not None:
        return QualityYield(args.qyield)
    if args.filter is not None:
        return LengthFilter(args.filter)
    if args.qfilter is not None:
        return QualityFilter(args.qfilter)
    if args.trimfront is not None:
        return TrimFront(args.trimfront)
    if args.trimtail is not None:
        return TrimTail(args.trimtail)
    if args.regex is not None:
        return RegexFilter(args.regex)
    if args.regex_file is not None:
        return RegexSetFilter(args.regex_file)
    if args.sample is not None:
        return Subsample(args.sample)
    raise ValueError("No operation selected.")


def run(command: Command, inputs: List[str], output: BinaryIO,
        progress: Optional[bool] = None):
    if command.header is not None:
        output.write(f"{command.header}\n".encode())
    for filepath in inputs:
        with FastqFile(filepath, progress=progress) as fastq:
            command.write(fastq, output, filepath)


def main() -> None:
    parser = argument_parser()
    args = parser.parse_args()
    command = command_from_args(args)
    output = sys.stdout.buffer
    try:
        run(command, args.inputs, output, args.progress)
    except (MalformedRecordError, OSError) as error:
        output.flush()
        parser.exit(1, f"{parser.prog}: error: {error}\n")
    output.flush()


if __name__ == "__main__":  # pragma: no cover
    main()
