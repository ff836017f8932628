# This file is part of Nucfrac.
#
# Licensed under MIT License.

from .counts import RegionCounts, RegionType, merge_counts  # noqa: F401
from .engine import DEFAULT_CONFIG, EngineConfig, NuclearFraction, nuclear_fraction_tags  # noqa: F401
from .fraction import NuclearFractionResult, compute_fractions, fractions_to_frame  # noqa: F401
from .tiling import GenomicInterval, Tile, tile_genome  # noqa: F401
