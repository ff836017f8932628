# This file is part of Nucfrac.
#
# Licensed under MIT License.

"""Locate inputs inside a Cell Ranger ``outs`` directory."""

import logging as lg
import os
from dataclasses import dataclass

import pandas as pd

from ..errors import OutsLayoutError


@dataclass(frozen=True)
class OutsLayout:
    """Paths of the BAM and barcode list, relative to ``outs``."""
    bam: str = 'possorted_genome_bam.bam'
    barcodes: str = os.path.join('filtered_feature_bc_matrix', 'barcodes.tsv.gz')


DEFAULT_LAYOUT = OutsLayout()


def resolve_outs(path, layout=DEFAULT_LAYOUT):
    """Return ``(bam_path, barcodes_path)`` for a Cell Ranger output.

    ``path`` may be the ``outs`` directory itself or the run directory
    containing it.
    """
    if not os.path.isdir(path):
        raise OutsLayoutError(f'Not a directory: {path}')
    outs = os.path.join(path, 'outs')
    if not os.path.isdir(outs):
        outs = path

    bam_path = os.path.join(outs, layout.bam)
    barcodes_path = os.path.join(outs, layout.barcodes)
    missing = [p for p in (bam_path, barcodes_path) if not os.path.exists(p)]
    if missing:
        raise OutsLayoutError('Missing from {}: {}'.format(outs, ', '.join(os.path.relpath(p, outs) for p in missing)))
    lg.info(f'Resolved outs directory {outs}')
    return bam_path, barcodes_path


def read_barcodes(path):
    """Read a barcode list, one barcode per line, gzip allowed. Order is kept."""
    try:
        df = pd.read_csv(path, sep='\t', header=None, usecols=[0], dtype=str, compression='infer')
    except pd.errors.EmptyDataError:
        df = pd.DataFrame({0: []})
    except (OSError, ValueError) as exc:
        raise OutsLayoutError(f'Cannot read barcodes from {path}: {exc}') from exc
    barcodes = [bc.strip() for bc in df[0].dropna() if bc.strip()]
    if not barcodes:
        raise OutsLayoutError(f'No barcodes in {path}')
    lg.info(f'Loaded {len(barcodes)} barcodes from {os.path.basename(path)}')
    return barcodes
