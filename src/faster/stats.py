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
Order statistics over read lengths.

quartile and generalized_nx sort the list they are given in place. Copy the
list first when the original order is still needed.
"""

import itertools
from typing import List, Sequence


def mean(lengths: Sequence[int]) -> float:
    if not lengths:
        raise ValueError("Cannot calculate the mean of an empty collection.")
    return sum(lengths) / len(lengths)


def quartile(lengths: List[int], k: int) -> int:
    """
    Return the k-th quartile using a plain index rule: count // 4 for the
    first, count // 2 for the second and count // 4 + count // 2 for the
    third. There is no interpolation, so this is an approximation that is
    biased for small or even-sized collections.
    """
    if k not in (1, 2, 3):
        raise ValueError(f"k must be 1, 2 or 3, got {k}.")
    if not lengths:
        raise ValueError("Cannot calculate a quartile of an empty collection.")
    lengths.sort()
    count = len(lengths)
    if k == 1:
        index = count // 4
    elif k == 2:
        index = count // 2
    else:
        index = count // 4 + count // 2
    return lengths[index]


def generalized_nx(lengths: List[int], fraction: float) -> int:
    """
    Walk the lengths from short to long and return the first length at
    which the running total exceeds fraction times the total number of
    bases.

    With fraction 0.5 this is the N50. For an NX where X% of the bases is in
    reads at least this long, pass 1 - X / 100. When no running total
    exceeds the threshold (fraction >= 1) the longest length is returned.
    """
    if not lengths:
        raise ValueError("Cannot calculate the NX of an empty collection.")
    lengths.sort()
    threshold = fraction * sum(lengths)
    for length, running_total in zip(lengths, itertools.accumulate(lengths)):
        if running_total > threshold:
            return length
    return lengths[-1]
