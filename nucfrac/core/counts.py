# This file is part of Nucfrac.
#
# Licensed under MIT License.

"""Per-barcode region-type read counts and their reduction."""

import functools
from collections import Counter
from enum import Enum

import pandas as pd


class RegionType(Enum):
    """Region-type codes written to the ``RE`` tag by Cell Ranger."""
    EXONIC = 'E'
    INTRONIC = 'N'
    INTERGENIC = 'I'

    @property
    def column(self):
        return _COLUMNS[self]


_COLUMNS = {
    RegionType.EXONIC: 0,
    RegionType.INTRONIC: 1,
    RegionType.INTERGENIC: 2,
}

COUNT_COLUMNS = ['exonic', 'intronic', 'intergenic']

# Reasons a record is skipped by the tag scanner
SKIP_REASONS = ('missing_barcode', 'missing_region', 'unknown_region')


class RegionCounts:
    """Mapping of barcode -> (exonic, intronic, intergenic) read counts.

    Also keeps a counter of skipped records by reason. One instance is
    filled by each tile scan; :func:`merge_counts` reduces them.
    """

    def __init__(self, counts=None, skipped=None):
        self._counts = {bc: list(v) for bc, v in (counts or {}).items()}
        self.skipped = Counter(skipped or {})

    def add(self, barcode, region, n=1):
        row = self._counts.get(barcode)
        if row is None:
            row = self._counts[barcode] = [0, 0, 0]
        row[region.column] += n

    def skip(self, reason, n=1):
        self.skipped[reason] += n

    def update(self, other):
        """Add the counts of ``other`` into this table."""
        for bc, (e, i, g) in other.items():
            row = self._counts.get(bc)
            if row is None:
                self._counts[bc] = [e, i, g]
            else:
                row[0] += e
                row[1] += i
                row[2] += g
        self.skipped.update(other.skipped)
        return self

    def get(self, barcode, default=None):
        row = self._counts.get(barcode)
        return default if row is None else tuple(row)

    def items(self):
        for bc, row in self._counts.items():
            yield bc, tuple(row)

    def barcodes(self):
        return list(self._counts)

    def total(self):
        """Number of counted records."""
        return sum(sum(row) for row in self._counts.values())

    def to_frame(self):
        """Counts as a DataFrame indexed by barcode, sorted by barcode."""
        _bcs = sorted(self._counts)
        data = {col: [self._counts[bc][j] for bc in _bcs] for j, col in enumerate(COUNT_COLUMNS)}
        return pd.DataFrame(data, index=pd.Index(_bcs, name='barcode', dtype=object), dtype='int64')

    def __getitem__(self, barcode):
        return tuple(self._counts[barcode])

    def __contains__(self, barcode):
        return barcode in self._counts

    def __iter__(self):
        return iter(self._counts)

    def __len__(self):
        return len(self._counts)

    def __eq__(self, other):
        if not isinstance(other, RegionCounts):
            return NotImplemented
        return self._counts == other._counts and +self.skipped == +other.skipped

    def __repr__(self):
        return f'<RegionCounts barcodes={len(self)} reads={self.total()}>'


def merge_counts(partials):
    """Reduce partial count tables into one table.

    Summation is per barcode and region type, so any grouping or ordering of
    ``partials`` gives the same result. Inputs are not modified; barcodes in
    the result are sorted.
    """
    merged = functools.reduce(RegionCounts.update, partials, RegionCounts())
    return RegionCounts(dict(sorted(merged.items())), +merged.skipped)
