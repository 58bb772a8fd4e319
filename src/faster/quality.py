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
Phred+33 quality and base composition helpers.

All functions take the ASCII strings stored on a FastqRecord.
"""

import math

PHRED_OFFSET = 33
AMBIGUOUS_BASES = b"Nn"
GC_BASES = b"GCgc"


def error_probability(character: int) -> float:
    return 10 ** (-(character - PHRED_OFFSET) / 10)


# Indexed by ASCII value. Characters below the offset cannot occur in valid
# qualities but are filled so a lookup never fails.
ASCII_TO_ERROR_RATE = [
    error_probability(character) for character in range(128)
]


def error_probability_sum(qualities: str) -> float:
    """Sum of the per-base error probabilities of a quality string."""
    table = ASCII_TO_ERROR_RATE
    return sum(table[character] for character in qualities.encode("ascii"))


def mean_quality_score(qualities: str) -> float:
    """
    Average the error probabilities and convert the average back to a
    phred score. This is not the same as averaging the phred scores, which
    overestimates the quality of reads with a few very poor bases.

    Raises ZeroDivisionError for an empty quality string.
    """
    average_error = error_probability_sum(qualities) / len(qualities)
    return -10 * math.log10(average_error)


def count_at_or_above(qualities: str, threshold: int) -> int:
    lowest = PHRED_OFFSET + threshold
    if lowest > 127:
        return 0
    if lowest <= 0:
        return len(qualities)
    # bytes.translate removes all characters below the threshold in C.
    below = bytes(range(lowest))
    return len(qualities.encode("ascii").translate(None, below))


def count_ambiguous(sequence: str) -> int:
    data = sequence.encode("ascii")
    return data.count(AMBIGUOUS_BASES[0]) + data.count(AMBIGUOUS_BASES[1])


def gc_fraction(sequence: str) -> float:
    if not sequence:
        return 0.0
    data = sequence.encode("ascii")
    gc = sum(data.count(base) for base in GC_BASES)
    return gc / len(data)
