# This file is part of Nucfrac.
#
# Licensed under MIT License.

"""Tests for nucfrac.core.dispatch: worker pool fan-out and fail-fast."""

import functools
import threading
import time

import numpy as np
import pytest

from nucfrac.core.counts import merge_counts
from nucfrac.core.dispatch import check_worker_count, dispatch
from nucfrac.core.scanner import TagNames, scan_tile
from nucfrac.core.tiling import tile_genome
from nucfrac.errors import InvalidWorkerCount, ScanIOError

from . import CONTIGS

TILES = tile_genome([('chr1', 10_000)], 12)


def _slow_reverse(tile):
    """Later tiles finish first."""
    time.sleep(0.002 * (len(TILES) - tile.index))
    return tile.index


class TestOrdering:
    @pytest.mark.parametrize('ncpu', [1, 2, 4, 12, 64])
    def test_results_in_tile_order(self, ncpu):
        assert dispatch(TILES, _slow_reverse, ncpu, pool='thread') == list(range(len(TILES)))

    def test_sequential_runs_in_calling_thread(self):
        caller = threading.get_ident()
        idents = dispatch(TILES, lambda tile: threading.get_ident(), 1)
        assert set(idents) == {caller}

    def test_single_tile_runs_sequentially(self):
        caller = threading.get_ident()
        assert dispatch(TILES[:1], lambda tile: threading.get_ident(), 8, pool='thread') == [caller]

    def test_workers_bounded(self):
        active = []
        peak = []
        lock = threading.Lock()

        def _scan(tile):
            with lock:
                active.append(tile)
                peak.append(len(active))
            time.sleep(0.01)
            with lock:
                active.remove(tile)
            return tile.index

        dispatch(TILES, _scan, 3, pool='thread')
        assert max(peak) <= 3

    def test_empty_tiles(self):
        assert dispatch([], _slow_reverse, 4, pool='thread') == []


class TestProgress:
    @pytest.mark.parametrize('ncpu', [1, 4])
    def test_progress_called_per_tile(self, ncpu):
        calls = []
        dispatch(TILES, lambda tile: tile.index, ncpu, pool='thread',
                 progress=lambda done, total: calls.append((done, total)))
        assert calls == [(i, len(TILES)) for i in range(1, len(TILES) + 1)]

    def test_progress_reported_while_tiles_still_running(self):
        tiles = tile_genome([('chr1', 10_000)], 4)
        reported = threading.Event()

        def _scan(tile):
            if tile.index == 3:
                # Released by progress from the earlier tiles
                return reported.wait(timeout=2)
            return True

        out = dispatch(tiles, _scan, 2, pool='thread', progress=lambda done, total: reported.set())
        assert out == [True, True, True, True]


class TestFailFast:
    @pytest.mark.parametrize('ncpu', [1, 4])
    def test_scan_error_propagates(self, ncpu):
        def _scan(tile):
            if tile.index == 5:
                raise ScanIOError(tile, 'OSError: truncated file')
            return tile.index

        with pytest.raises(ScanIOError) as excinfo:
            dispatch(TILES, _scan, ncpu, pool='thread')
        assert excinfo.value.tile == TILES[5]
        assert 'truncated file' in str(excinfo.value)

    @pytest.mark.parametrize('ncpu', [1, 4])
    def test_other_errors_wrapped_with_tile(self, ncpu):
        def _scan(tile):
            if tile.index == 2:
                raise RuntimeError('boom')
            return tile.index

        with pytest.raises(ScanIOError) as excinfo:
            dispatch(TILES, _scan, ncpu, pool='thread')
        assert excinfo.value.tile == TILES[2]
        assert 'RuntimeError: boom' in str(excinfo.value)
        assert isinstance(excinfo.value.__cause__, RuntimeError)

    def test_pending_tiles_cancelled(self):
        started = []

        def _scan(tile):
            started.append(tile.index)
            if tile.index == 0:
                raise ScanIOError(tile, 'bad index')
            time.sleep(0.05)
            return tile.index

        with pytest.raises(ScanIOError):
            dispatch(TILES, _scan, 2, pool='thread')
        assert len(started) < len(TILES)

    def test_sequential_stops_at_failure(self):
        started = []

        def _scan(tile):
            started.append(tile.index)
            raise ScanIOError(tile, 'bad index')

        with pytest.raises(ScanIOError):
            dispatch(TILES, _scan, 1)
        assert started == [0]


class TestArguments:
    @pytest.mark.parametrize('ncpu', [0, -1, 1.5, '2', None, True])
    def test_invalid_worker_count(self, ncpu):
        with pytest.raises(InvalidWorkerCount):
            dispatch(TILES, _slow_reverse, ncpu)

    @pytest.mark.parametrize('ncpu', [np.int64(2), np.int32(1)])
    def test_numpy_worker_count(self, ncpu):
        check_worker_count(ncpu)
        assert dispatch(TILES, _slow_reverse, ncpu, pool='thread') == list(range(len(TILES)))

    def test_numpy_zero_worker_count(self):
        with pytest.raises(InvalidWorkerCount):
            check_worker_count(np.int64(0))

    def test_unknown_pool(self):
        with pytest.raises(ValueError):
            dispatch(TILES, _slow_reverse, 2, pool='gpu')


class TestProcessPool:
    def test_scan_tile_in_processes(self, scenario_bam):
        tiles = tile_genome(CONTIGS, 6)
        _scan = functools.partial(scan_tile, scenario_bam, TagNames())
        parallel = dispatch(tiles, _scan, 3, pool='process')
        sequential = dispatch(tiles, _scan, 1)
        assert parallel == sequential
        assert merge_counts(parallel).total() == 18

    def test_scan_error_from_process(self, tmp_path):
        tiles = tile_genome(CONTIGS, 4)
        _scan = functools.partial(scan_tile, str(tmp_path / 'missing.bam'), TagNames())
        with pytest.raises(ScanIOError) as excinfo:
            dispatch(tiles, _scan, 2, pool='process')
        assert excinfo.value.tile in tiles
