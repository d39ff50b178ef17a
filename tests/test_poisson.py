import math
import random

import pytest

from sparsesvt.leaf import Leaf
from sparsesvt.poisson import PoissonSampler, poisson_sparse_array, simple_rpois
from sparsesvt.sparsevec import RType


class FixedRng:
    """Returns the given uniform values in turn, cycling."""

    def __init__(self, *values):
        self.values = list(values)
        self.pos = 0

    def random(self):
        u = self.values[self.pos % len(self.values)]
        self.pos += 1
        return u


def test_zero_lambda_always_draws_zero():
    assert simple_rpois(50, 0.0, random.Random(1)) == [0] * 50


def test_draw_at_zero_uniform_is_zero():
    assert PoissonSampler(2.5).draw(FixedRng(0.0)) == 0


def test_draw_below_first_tick_is_zero():
    u = math.exp(-1.0) / 2
    assert PoissonSampler(1.0).draw(FixedRng(u)) == 0


def test_draw_at_median_of_lambda_one():
    assert PoissonSampler(1.0).draw(FixedRng(0.5)) == 1


def test_draws_are_monotonic_in_uniform():
    sampler = PoissonSampler(3.0)
    us = [k / 100 for k in range(100)]
    draws = [sampler.draw(FixedRng(u)) for u in us]
    assert draws == sorted(draws)
    assert draws[0] == 0


def test_ticks_strictly_ascending_and_below_one():
    ticks = PoissonSampler(4.0).ticks
    assert all(a < b for a, b in zip(ticks, ticks[1:]))
    assert ticks[-1] <= 1.0
    assert ticks[0] == math.exp(-4.0)


def test_sample_mean_close_to_lambda():
    draws = simple_rpois(20000, 2.0, random.Random(42))
    assert len(draws) == 20000
    assert abs(sum(draws) / len(draws) - 2.0) < 0.1
    assert min(draws) >= 0


def test_simple_rpois_zero_n():
    assert simple_rpois(0, 1.0, random.Random(0)) == []


def test_simple_rpois_negative_n():
    with pytest.raises(ValueError):
        simple_rpois(-1, 1.0)


def test_simple_rpois_n_not_integer():
    with pytest.raises(TypeError):
        simple_rpois(2.0, 1.0)


def test_simple_rpois_negative_lambda():
    with pytest.raises(ValueError):
        simple_rpois(3, -0.5)


def test_lambda_too_big():
    with pytest.raises(ValueError, match="too big"):
        simple_rpois(1, 100.0)


def test_array_zero_lambda_is_empty():
    assert poisson_sparse_array((3, 4), 0.0, random.Random(0)) is None


def test_array_zero_dim_is_empty():
    assert poisson_sparse_array((3, 0, 2), 1.0, random.Random(0)) is None


@pytest.mark.parametrize("lam", [-0.1, 4.5])
def test_array_lambda_out_of_range(lam):
    with pytest.raises(ValueError):
        poisson_sparse_array((2, 2), lam)


def test_array_all_zero_draws_is_empty():
    assert poisson_sparse_array((4, 3), 1.0, FixedRng(0.0)) is None


def test_array_all_ones_gives_lacunar_leaves():
    svt = poisson_sparse_array((3, 2), 1.0, FixedRng(0.5))
    assert svt == [Leaf(RType.INTEGER, None, [0, 1, 2])] * 2


def test_array_leaf_matches_sampler_draws():
    us = [0.1, 0.5, 0.9, 0.95]
    sampler = PoissonSampler(1.0)
    expected = [sampler.draw(FixedRng(u)) for u in us]
    svt = poisson_sparse_array((4,), 1.0, FixedRng(*us))
    dense = [0] * 4
    for off, val in zip(svt.nzoffs, svt.nzvals):
        dense[off] = val
    assert dense == expected
    assert svt.nzoffs == [k for k, v in enumerate(expected) if v != 0]


def test_array_structure_three_dims():
    rng = random.Random(7)
    svt = poisson_sparse_array((5, 3, 2), 3.0, rng)
    assert len(svt) == 2
    for sub in svt:
        assert sub is None or len(sub) == 3
        for leaf in sub or []:
            if leaf is None:
                continue
            assert leaf.rtype is RType.INTEGER
            assert leaf.nzoffs == sorted(set(leaf.nzoffs))
            assert all(0 <= off < 5 for off in leaf.nzoffs)
            if leaf.nzvals is not None:
                assert all(v > 0 for v in leaf.nzvals)


def test_array_reproducible_with_seed():
    a = poisson_sparse_array((6, 4), 1.5, random.Random(3))
    b = poisson_sparse_array((6, 4), 1.5, random.Random(3))
    assert a == b


def test_array_empty_dim_rejected():
    with pytest.raises(ValueError):
        poisson_sparse_array((), 1.0)