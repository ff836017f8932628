# This file is part of Nucfrac.
#
# Licensed under MIT License.

"""Run a tile scan over every tile, in parallel across a bounded pool."""

import logging as lg
from concurrent.futures import ProcessPoolExecutor, ThreadPoolExecutor, as_completed

import numpy as np

from ..errors import InvalidWorkerCount, ScanIOError

POOLS = {
    'process': ProcessPoolExecutor,
    'thread': ThreadPoolExecutor,
}


def check_worker_count(ncpu):
    if isinstance(ncpu, bool) or not isinstance(ncpu, (int, np.integer)) or ncpu < 1:
        raise InvalidWorkerCount(ncpu)


def _as_scan_error(tile, exc):
    return ScanIOError(tile, f'{type(exc).__name__}: {exc}')


def _dispatch_sequential(tiles, scan, progress):
    results = []
    for tile in tiles:
        try:
            results.append(scan(tile))
        except ScanIOError:
            raise
        except Exception as exc:
            raise _as_scan_error(tile, exc) from exc
        if progress is not None:
            progress(len(results), len(tiles))
    return results


def _dispatch_pool(tiles, scan, nworkers, executor_class, progress):
    results = [None] * len(tiles)
    pool = executor_class(max_workers=nworkers)
    futures = {pool.submit(scan, tile): i for i, tile in enumerate(tiles)}
    try:
        for ndone, fut in enumerate(as_completed(futures), 1):
            i = futures[fut]
            exc = fut.exception()
            if exc is not None:
                _npending = sum(not f.done() for f in futures)
                lg.error(f'Scan failed on tile {tiles[i]}, cancelling {_npending} pending tiles')
                if isinstance(exc, ScanIOError):
                    raise exc
                raise _as_scan_error(tiles[i], exc) from exc
            results[i] = fut.result()
            if progress is not None:
                progress(ndone, len(tiles))
    except BaseException:
        # Tiles already running are not waited for
        pool.shutdown(wait=False, cancel_futures=True)
        raise
    pool.shutdown()
    return results


def dispatch(tiles, scan, ncpu=1, pool='process', progress=None):
    """Apply ``scan`` to every tile and return results in tile order.

    Args:
        tiles: Sequence of tiles.
        scan: Callable taking one tile. Must be picklable for the process
            pool (a module-level function or a ``functools.partial`` of one).
        ncpu: Maximum number of concurrent workers.
        pool: ``'process'`` or ``'thread'``.
        progress: Optional ``progress(done, total)`` callback, called in the
            calling process after each completed tile.

    Returns:
        List of scan results, parallel to ``tiles``.

    Raises:
        InvalidWorkerCount: ``ncpu`` is not a positive integer.
        ScanIOError: a tile failed; pending tiles are cancelled and no
            partial results are returned.
    """
    check_worker_count(ncpu)
    if pool not in POOLS:
        raise ValueError(f'Unknown pool "{pool}". Choose from: {", ".join(POOLS)}')

    tiles = list(tiles)
    nworkers = min(int(ncpu), len(tiles))
    if nworkers <= 1:
        lg.info(f'Scanning {len(tiles)} tiles sequentially')
        return _dispatch_sequential(tiles, scan, progress)

    lg.info(f'Scanning {len(tiles)} tiles with {nworkers} {pool} workers')
    return _dispatch_pool(tiles, scan, nworkers, POOLS[pool], progress)
