# -*- coding: utf-8 -*-

# This file is part of Nucfrac.
#
# Licensed under MIT License.

""" Nucfrac tags

"""
import sys
import os
from time import time
import logging as lg

from . import SubcommandOptions, configure_logging
from ..errors import NucfracError
from ..utils.helpers import format_minutes as fmtmins
from ..utils.outs import read_barcodes, resolve_outs
from ..core.engine import EngineConfig, NuclearFraction
from .console import Stopwatch


class TagsOptions(SubcommandOptions):

    OPTS = """
    - Input Options:
        - infile:
            positional: True
            help: Indexed, coordinate-sorted BAM file, or a Cell Ranger
                  output directory containing
                  outs/possorted_genome_bam.bam and
                  outs/filtered_feature_bc_matrix/barcodes.tsv.gz.
        - barcodes:
            help: Barcode list (one per line, may be gzipped). Rows of the
                  output follow the order of this file. Defaults to the
                  filtered barcodes of a Cell Ranger directory, or to every
                  barcode seen in the BAM.
        - barcode_tag:
            default: CB
            help: BAM tag holding the corrected cell barcode.
        - region_tag:
            default: RE
            help: BAM tag holding the region type (E exonic, N intronic,
                  I intergenic).
    - Performance Options:
        - tiles:
            type: int
            default: 100
            help: Number of genome tiles. Each tile is one unit of work.
        - cores:
            type: int
            default: 1
            help: Number of workers scanning tiles concurrently.
        - pool:
            default: process
            choices:
                - process
                - thread
            help: Kind of worker pool.
    - Reporting Options:
        - outfile:
            help: Write the result table here instead of stdout.
        - no_total:
            action: store_true
            help: Omit the total_relevant_reads column.
        - quiet:
            action: store_true
            help: Silence (most) output.
        - verbose:
            action: store_true
            help: Show per-tile progress and timing.
        - debug:
            action: store_true
            help: Print debug messages.
        - logfile:
            type: argparse.FileType('w')
            help: Log output to this file.
    """

    def __init__(self, args):
        super().__init__(args)
        if self.logfile is None:
            self.logfile = sys.stderr

    def engine_config(self):
        return EngineConfig(
            tiles=self.tiles,
            cores=self.cores,
            barcode_tag=self.barcode_tag,
            region_tag=self.region_tag,
            pool=self.pool,
            verbose=self.verbose,
        )

    def resolve_inputs(self):
        """Return ``(bam_path, barcodes_path)``; the latter may be None."""
        if os.path.isdir(self.infile):
            bam_path, outs_barcodes = resolve_outs(self.infile)
            return bam_path, self.barcodes or outs_barcodes
        return self.infile, self.barcodes


def run(args):
    opts = TagsOptions(args)
    # Keep stdout clean when the table is written there
    console = configure_logging(opts, stream=sys.stdout if opts.outfile else sys.stderr)
    lg.info('\n{}\n'.format(opts))
    total_time = time()

    try:
        _run(opts, console)
    except NucfracError as exc:
        lg.error(str(exc))
        console.status('Error: {}'.format(exc))
        sys.exit(1)

    lg.info("nucfrac tags complete (%s)" % fmtmins(time() - total_time))


def _pool_display_name(pool):
    """Human-readable pool name for console output."""
    names = {
        'process': 'process pool',
        'thread': 'thread pool',
    }
    return names.get(pool, pool)


def _run(opts, console):
    watch = Stopwatch()
    console.banner(opts.version)

    bam_path, barcodes_path = opts.resolve_inputs()
    config = opts.engine_config()

    console.section('Input')
    console.item('BAM', os.path.basename(bam_path))
    console.item('Barcodes', os.path.basename(barcodes_path) if barcodes_path else 'all observed')
    console.item('Tiles', config.tiles)
    console.item('Workers', '{} ({})'.format(config.cores, _pool_display_name(config.pool)))
    console.blank()

    barcodes = None
    if barcodes_path is not None:
        watch.start('Barcodes')
        barcodes = read_barcodes(barcodes_path)

    watch.start('Scan')
    nf = NuclearFraction(bam_path, config)
    progress = console.progress if config.verbose else None
    counts = nf.count(progress)
    nf.print_summary(lg.INFO)
    console.status('Scanning tiles... done')
    console.detail('{:,} reads counted across {:,} barcodes'.format(counts.total(), len(counts)))

    watch.start('Fractions')
    df = nf.fractions(barcodes, include_total=not opts.no_total)
    _undefined = int(df['nuclear_fraction'].isna().sum())
    console.detail('{:,} barcodes reported, {:,} without exonic or intronic reads'.format(len(df), _undefined))

    if opts.outfile:
        df.to_csv(opts.outfile, sep='\t', index=False, na_rep='NA')
    else:
        df.to_csv(sys.stdout, sep='\t', index=False, na_rep='NA')
    watch.stop()

    console.blank()
    if opts.outfile:
        console.section('Output')
        console.detail(opts.outfile)
        console.blank()
    if config.verbose:
        console.timing_table(watch)
        console.blank()
