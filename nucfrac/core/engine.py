# This file is part of Nucfrac.
#
# Licensed under MIT License.

"""Nucfrac engine: tile the genome, scan tiles in parallel, merge, score.

The pieces live in their own modules:
    tiling.py   - genome partitioning
    scanner.py  - per-tile tag counting
    dispatch.py - worker pool
    counts.py   - count tables and their reduction
    fraction.py - nuclear fraction per barcode
"""

import functools
import logging as lg
import os
from collections import OrderedDict
from dataclasses import dataclass

import pysam

from ..errors import AlignmentFileError
from .counts import SKIP_REASONS, merge_counts
from .dispatch import POOLS, check_worker_count, dispatch
from .fraction import compute_fractions, fractions_to_frame
from .scanner import TagNames, scan_tile
from .tiling import check_tile_count, tile_genome


@dataclass(frozen=True)
class EngineConfig:
    """Parameters of one nuclear fraction computation.

    ``verbose`` only controls progress reporting and never changes results.
    """
    tiles: int = 1
    cores: int = 1
    barcode_tag: str = 'CB'
    region_tag: str = 'RE'
    pool: str = 'process'
    verbose: bool = False

    @property
    def tags(self):
        return TagNames(barcode=self.barcode_tag, region=self.region_tag)

    def validate(self):
        check_tile_count(self.tiles)
        check_worker_count(self.cores)
        if self.pool not in POOLS:
            raise ValueError(f'Unknown pool "{self.pool}". Choose from: {", ".join(POOLS)}')
        return self


DEFAULT_CONFIG = EngineConfig()


def _log_progress(done, total):
    lg.info(f'...scanned {done}/{total} tiles')


class NuclearFraction:
    """Nuclear fraction computation over one indexed BAM file."""

    def __init__(self, bam_path, config=DEFAULT_CONFIG):
        self.bam_path = bam_path
        self.config = config.validate()
        self.run_info = OrderedDict()
        self.counts = None

        if not os.path.exists(bam_path):
            raise AlignmentFileError(f'Alignment file not found: {bam_path}')

        try:
            with pysam.AlignmentFile(bam_path, 'rb') as sf:
                has_index = sf.has_index()
                _is_coordinate_sorted = sf.header.get('HD', {}).get('SO') == 'coordinate'
                self.ref_names = sf.references
                self.ref_lengths = sf.lengths
        except (OSError, ValueError) as exc:
            raise AlignmentFileError(f'Cannot open {bam_path}: {exc}') from exc

        # Auto-create .bai index for coordinate-sorted BAMs without one
        if not has_index:
            if not _is_coordinate_sorted:
                raise AlignmentFileError(
                    f'{bam_path} has no index and is not coordinate-sorted. '
                    'Sort and index it first (samtools sort, samtools index).'
                )
            lg.info('Coordinate-sorted BAM without index, creating .bai')
            try:
                pysam.index(bam_path)
            except pysam.SamtoolsError as exc:
                raise AlignmentFileError(f'Cannot index {bam_path}: {exc}') from exc

    def reference_layout(self):
        return list(zip(self.ref_names, self.ref_lengths))

    def count(self, progress=None):
        """Scan all tiles and return the merged :class:`RegionCounts`."""
        tiles = tile_genome(self.reference_layout(), self.config.tiles)
        lg.info(f'Tiled {len(self.ref_names)} contigs into {len(tiles)} tiles')

        if progress is None and self.config.verbose:
            progress = _log_progress
        _scan = functools.partial(scan_tile, self.bam_path, self.config.tags)
        partials = dispatch(tiles, _scan, self.config.cores, self.config.pool, progress)
        self.counts = merge_counts(partials)

        self.run_info['tiles'] = len(tiles)
        self.run_info['workers'] = min(int(self.config.cores), len(tiles))
        self.run_info['barcodes'] = len(self.counts)
        self.run_info['counted_reads'] = self.counts.total()
        for reason in SKIP_REASONS:
            self.run_info[reason] = self.counts.skipped[reason]
        return self.counts

    def fractions(self, barcodes=None, include_total=True, progress=None):
        """Nuclear fraction table for ``barcodes``.

        Counts are computed on first use. With ``barcodes=None`` every
        observed barcode is reported, in sorted order.
        """
        if self.counts is None:
            self.count(progress)
        if barcodes is None:
            barcodes = self.counts.barcodes()
        return fractions_to_frame(compute_fractions(self.counts, barcodes), include_total)

    def print_summary(self, loglev=lg.WARNING):
        _d = self.run_info
        lg.log(loglev, 'Tag Summary:')
        lg.log(loglev, '    {} tiles scanned by {} workers.'.format(_d.get('tiles', 0), _d.get('workers', 0)))
        lg.log(loglev, '    {} reads counted for {} barcodes.'.format(_d.get('counted_reads', 0), _d.get('barcodes', 0)))
        lg.log(loglev, '--')
        lg.log(loglev, '    Skipped records:')
        lg.log(loglev, '        {} without barcode tag.'.format(_d.get('missing_barcode', 0)))
        lg.log(loglev, '        {} without region tag.'.format(_d.get('missing_region', 0)))
        lg.log(loglev, '        {} with unrecognized region code.'.format(_d.get('unknown_region', 0)))

    def __str__(self):
        return f'<NuclearFraction bam={self.bam_path}, tiles={self.config.tiles}, cores={self.config.cores}>'


def nuclear_fraction_tags(bam_path, barcodes=None, config=DEFAULT_CONFIG, progress=None):
    """Nuclear fraction per barcode from the region-type tags of a BAM file.

    Args:
        bam_path: Indexed, coordinate-sorted BAM file.
        barcodes: Ordered barcodes to report, or None for every observed one.
        config: :class:`EngineConfig`.
        progress: Optional ``progress(done, total)`` tile callback.

    Returns:
        pandas.DataFrame with columns ``barcode``, ``nuclear_fraction`` and
        ``total_relevant_reads``, one row per requested barcode.
    """
    nf = NuclearFraction(bam_path, config)
    df = nf.fractions(barcodes, progress=progress)
    nf.print_summary(lg.INFO)
    return df
