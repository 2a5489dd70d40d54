import math

import pytest

from notifyhub.utils import RunningStats


def test_running_stats():
    rs = RunningStats()
    for x in [2.0, 4.0, 4.0, 4.0, 5.0, 5.0, 7.0, 9.0]:
        rs.update(x)

    # mean 5, sum of squared diffs 32, unbiased var 32/7
    assert rs.n == 8
    assert rs.mean == pytest.approx(5.0)
    assert rs.var == pytest.approx(32 / 7)
    assert rs.std == pytest.approx(math.sqrt(32 / 7))
    assert rs.maximum == 9.0


def test_single_sample_and_reset():
    rs = RunningStats()
    rs.update(-3.0)

    assert rs.var == 0.0
    assert rs.maximum == -3.0

    rs.reset()
    assert rs.n == 0
    assert rs.mean == 0.0
    assert rs.maximum == 0.0
