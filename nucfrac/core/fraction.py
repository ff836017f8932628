# This file is part of Nucfrac.
#
# Licensed under MIT License.

"""Nuclear fraction per barcode from merged region counts."""

from collections import namedtuple

import numpy as np
import pandas as pd

NuclearFractionResult = namedtuple(
    'NuclearFractionResult', ['barcode', 'nuclear_fraction', 'total_relevant_reads']
)


def fraction_for(counts, barcode):
    """Nuclear fraction for one barcode.

    ``nuclear_fraction`` is ``None`` when the barcode has no exonic or
    intronic reads, including barcodes never seen in the alignment file.
    """
    exonic, intronic, _ = counts.get(barcode, (0, 0, 0))
    denom = exonic + intronic
    if denom == 0:
        return NuclearFractionResult(barcode, None, 0)
    return NuclearFractionResult(barcode, exonic / denom, denom)


def compute_fractions(counts, barcodes):
    """One result per requested barcode, in request order (duplicates kept)."""
    return [fraction_for(counts, bc) for bc in barcodes]


def fractions_to_frame(results, include_total=True):
    """Results as a DataFrame; undefined fractions become NaN."""
    df = pd.DataFrame({
        'barcode': pd.Series([r.barcode for r in results], dtype=object),
        'nuclear_fraction': np.array(
            [np.nan if r.nuclear_fraction is None else r.nuclear_fraction for r in results],
            dtype=np.float64,
        ),
        'total_relevant_reads': np.array([r.total_relevant_reads for r in results], dtype=np.int64),
    })
    if not include_total:
        df = df.drop(columns='total_relevant_reads')
    return df
