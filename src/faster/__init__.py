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

from ._version import __version__
from .operators import (
    Command, GCListing, KeepAbove, KeepBelow, LengthFilter, LengthListing,
    NXValue, QualityFilter, QualityListing, QualityYield, RegexFilter,
    RegexSetFilter, Subsample, TableStatistics, TrimFront, TrimTail,
)
from .records import FastqRecord
from .table import RunningStats, TableRow, table_statistics
from .util import FastqFile, MalformedRecordError


__all__ = [
    "Command",
    "FastqFile",
    "FastqRecord",
    "GCListing",
    "KeepAbove",
    "KeepBelow",
    "LengthFilter",
    "LengthListing",
    "MalformedRecordError",
    "NXValue",
    "QualityFilter",
    "QualityListing",
    "QualityYield",
    "RegexFilter",
    "RegexSetFilter",
    "RunningStats",
    "Subsample",
    "TableRow",
    "TableStatistics",
    "TrimFront",
    "TrimTail",
    "table_statistics",
    "__version__"
]
