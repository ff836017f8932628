# This file is part of Nucfrac.
#
# Licensed under MIT License.

"""Exception hierarchy for Nucfrac.

Configuration errors are raised before any alignment record is read.
``ScanIOError`` is raised by a tile scan and aborts the whole run.
"""


class NucfracError(Exception):
    """Base class for all errors raised by Nucfrac."""


class ConfigurationError(NucfracError, ValueError):
    """Invalid engine parameters."""


class InvalidTileCount(ConfigurationError):
    def __init__(self, ntiles):
        super().__init__(ntiles)
        self.ntiles = ntiles

    def __str__(self):
        return f'Tile count must be an integer >= 1, got {self.ntiles!r}'


class InvalidWorkerCount(ConfigurationError):
    def __init__(self, ncpu):
        super().__init__(ncpu)
        self.ncpu = ncpu

    def __str__(self):
        return f'Worker count must be an integer >= 1, got {self.ncpu!r}'


class EmptyReference(ConfigurationError):
    def __str__(self):
        return 'Reference has no contigs with non-zero length'


class AlignmentFileError(NucfracError):
    """The alignment file is missing, unreadable or cannot be indexed."""


class OutsLayoutError(NucfracError):
    """Expected files are missing from a Cell Ranger output directory."""


class ScanIOError(NucfracError):
    """A tile could not be scanned.

    Args are kept as ``(tile, cause)`` so the error pickles cleanly when
    raised inside a worker process.
    """

    def __init__(self, tile, cause):
        super().__init__(tile, cause)
        self.tile = tile
        self.cause = cause

    def __str__(self):
        return f'Failed to scan tile {self.tile}: {self.cause}'
