# This file is part of Nucfrac.
#
# Licensed under MIT License.

"""Scan the alignment records of one tile and count barcode/region tags."""

import logging as lg
from dataclasses import dataclass

import pysam

from ..errors import ScanIOError
from .counts import RegionCounts, RegionType


@dataclass(frozen=True)
class TagNames:
    """Names of the BAM tags holding the cell barcode and the region type."""
    barcode: str = 'CB'
    region: str = 'RE'


def count_records(records, interval, tags, counts):
    """Count the records of ``interval`` into ``counts``.

    A record is attributed to the interval holding its start coordinate,
    so records that merely overlap ``interval`` are ignored here and
    counted by the tile that holds their start.
    """
    _bc_tag, _re_tag = tags.barcode, tags.region
    for aln in records:
        if not interval.contains(aln.reference_start):
            continue
        if not aln.has_tag(_bc_tag):
            counts.skip('missing_barcode')
            continue
        if not aln.has_tag(_re_tag):
            counts.skip('missing_region')
            continue
        try:
            region = RegionType(aln.get_tag(_re_tag))
        except ValueError:
            counts.skip('unknown_region')
            continue
        counts.add(aln.get_tag(_bc_tag), region)
    return counts


def scan_tile(bam_path, tags, tile):
    """Count barcode/region tags for all records starting inside ``tile``.

    Opens its own handle on ``bam_path`` so it can run in any worker.

    Raises:
        ScanIOError: the file or its index could not be read.
    """
    counts = RegionCounts()
    try:
        with pysam.AlignmentFile(bam_path, 'rb') as sf:
            for iv in tile.intervals:
                count_records(sf.fetch(iv.contig, iv.start, iv.end), iv, tags, counts)
    except (OSError, ValueError) as exc:
        raise ScanIOError(tile, f'{type(exc).__name__}: {exc}') from exc
    lg.debug(f'Tile {tile}: {counts.total()} records, {len(counts)} barcodes')
    return counts
