# This file is part of Nucfrac.
#
# Licensed under MIT License.

"""Partition a reference genome into tiles of roughly equal length.

Coordinates are 0-based and half-open. A tile never straddles two contigs:
with at least as many tiles as contigs each tile is a slice of one contig,
otherwise each tile is a run of whole contigs.
"""

from dataclasses import dataclass

import numpy as np

from ..errors import EmptyReference, InvalidTileCount


@dataclass(frozen=True)
class GenomicInterval:
    contig: str
    start: int
    end: int

    def __post_init__(self):
        if self.start < 0 or self.end < self.start:
            raise ValueError(f'Invalid interval {self.contig}:{self.start}-{self.end}')

    @property
    def length(self):
        return self.end - self.start

    def contains(self, pos):
        return self.start <= pos < self.end

    def __str__(self):
        return f'{self.contig}:{self.start}-{self.end}'


@dataclass(frozen=True)
class Tile:
    """One unit of parallel work: an ordered tuple of intervals."""
    index: int
    intervals: tuple

    @property
    def length(self):
        return sum(iv.length for iv in self.intervals)

    def __str__(self):
        return '#{} {}'.format(self.index, ','.join(str(iv) for iv in self.intervals))


def check_tile_count(ntiles):
    if isinstance(ntiles, bool) or not isinstance(ntiles, (int, np.integer)) or ntiles < 1:
        raise InvalidTileCount(ntiles)


def _apportion(lengths, ntiles):
    """Number of tiles per contig, proportional to length, at least one each.

    Tiles beyond one per contig are handed out by the largest-remainder
    method. A contig never gets more tiles than it has bases.
    """
    lengths = np.asarray(lengths, dtype=np.int64)
    extra = ntiles - len(lengths)
    quota = lengths / lengths.sum() * extra
    alloc = np.floor(quota).astype(np.int64)
    leftover = int(extra - alloc.sum())
    order = np.argsort(-(quota - alloc), kind='stable')
    alloc[order[:leftover]] += 1
    return np.minimum(alloc + 1, lengths)


def _split_contig(contig, length, k):
    width = length // k
    bounds = [i * width for i in range(k)] + [length]
    return [GenomicInterval(contig, bounds[i], bounds[i + 1]) for i in range(k)]


def _pack_contigs(contigs, ntiles):
    """Greedily pack whole contigs, in order, into exactly ``ntiles`` groups."""
    total = sum(length for _, length in contigs)
    groups = []
    current = []
    acc = 0
    for i, (contig, length) in enumerate(contigs):
        current.append(GenomicInterval(contig, 0, length))
        acc += length
        groups_left = ntiles - len(groups) - 1
        if groups_left == 0:
            continue
        contigs_left = len(contigs) - i - 1
        if contigs_left == groups_left or acc * ntiles >= total * (len(groups) + 1):
            groups.append(current)
            current = []
    groups.append(current)
    return groups


def tile_genome(layout, ntiles):
    """Partition the reference into at most ``ntiles`` disjoint tiles.

    Args:
        layout: Sequence of ``(contig, length)`` pairs in reference order.
        ntiles: Requested number of tiles (>= 1).

    Returns:
        List of :class:`Tile`, in contig then position order. Fewer than
        ``ntiles`` tiles are returned only when contigs are too short to
        give every tile at least one base.

    Raises:
        InvalidTileCount: ``ntiles`` is not a positive integer.
        EmptyReference: no contig has a non-zero length.
    """
    check_tile_count(ntiles)
    contigs = [(str(name), int(length)) for name, length in layout if int(length) > 0]
    if not contigs:
        raise EmptyReference()

    if ntiles < len(contigs):
        groups = _pack_contigs(contigs, ntiles)
    else:
        alloc = _apportion([length for _, length in contigs], ntiles)
        groups = []
        for (contig, length), k in zip(contigs, alloc):
            groups.extend([iv] for iv in _split_contig(contig, length, int(k)))

    return [Tile(i, tuple(ivs)) for i, ivs in enumerate(groups)]
