# This file is part of Nucfrac.
#
# Licensed under MIT License.

import os

import pytest

from . import CONTIGS, scenario_reads, write_bam


@pytest.fixture
def scenario_bam(tmp_path):
    return write_bam(os.fspath(tmp_path / 'scenario.bam'), CONTIGS, scenario_reads())


@pytest.fixture
def bam_factory(tmp_path):
    """Build BAM files in the test's temporary directory."""
    _n = [0]

    def _make(reads, contigs=CONTIGS, **kwargs):
        _n[0] += 1
        return write_bam(os.fspath(tmp_path / f'test{_n[0]}.bam'), contigs, reads, **kwargs)

    return _make
