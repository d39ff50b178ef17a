"""Random Poisson draws for small lambda, and random Poisson sparse arrays."""

from __future__ import annotations

import bisect
import math
import random
from fractions import Fraction
from typing import List, Optional, Sequence, Tuple, Union

from .leaf import Leaf, make_leaf_from_pairs
from .sparsevec import RType

_CUMSUM_DPOIS_MAX_LENGTH = 32  # enough to support 0 <= lambda <= 4
_MAX_ARRAY_LAMBDA = 4.0

SparseTree = Union[None, Leaf, List["SparseTree"]]


def _is_number(x) -> bool:
    return isinstance(x, (int, float)) and not isinstance(x, bool)


def _cumsum_dpois(lam: float) -> Tuple[float, ...]:
    """Cumulative Poisson probabilities, stopping once they stop growing.

    Returns an empty tuple when *lam* is zero or very small.
    """
    first = math.exp(-lam)
    if first >= 1.0:
        return ()
    dp = csdp = Fraction(first)
    exact_lam = Fraction(lam)
    ticks = [first]
    for n in range(1, _CUMSUM_DPOIS_MAX_LENGTH):
        dp *= exact_lam / n
        csdp += dp
        value = float(csdp)
        if value == ticks[-1]:
            return tuple(ticks)
        ticks.append(value)
    raise ValueError("'lambda' too big?")


class PoissonSampler:
    """Draws Poisson-distributed integers by inverting the cumulative law."""

    def __init__(self, lam) -> None:
        if not _is_number(lam):
            raise TypeError("'lambda' must be a single numeric value")
        if lam < 0.0:
            raise ValueError("'lambda' cannot be negative")
        self.lam = float(lam)
        self.ticks = _cumsum_dpois(self.lam)

    def draw(self, rng=None) -> int:
        """Return one draw, using ``rng.random()`` as the uniform source."""
        if rng is None:
            rng = random
        u = rng.random()
        # Index of the first tick strictly greater than u.
        return bisect.bisect_right(self.ticks, u)


def simple_rpois(n, lam, rng=None) -> List[int]:
    """Return *n* Poisson draws with mean *lam*."""
    if not isinstance(n, int) or isinstance(n, bool):
        raise TypeError("'n' must be a single integer")
    if n < 0:
        raise ValueError("'n' cannot be negative")
    sampler = PoissonSampler(lam)
    if rng is None:
        rng = random.Random()
    return [sampler.draw(rng) for _ in range(n)]


def _build_leaf(dim0: int, sampler: PoissonSampler, rng) -> Optional[Leaf]:
    nzvals: List[int] = []
    nzoffs: List[int] = []
    for i in range(dim0):
        val = sampler.draw(rng)
        if val != 0:
            nzvals.append(val)
            nzoffs.append(i)
    return make_leaf_from_pairs(RType.INTEGER, nzvals, nzoffs)


def _build_tree(dim: Sequence[int], sampler: PoissonSampler, rng) -> SparseTree:
    if len(dim) == 1:
        return _build_leaf(dim[0], sampler, rng)
    children = [_build_tree(dim[:-1], sampler, rng) for _ in range(dim[-1])]
    if all(child is None for child in children):
        return None
    return children


def poisson_sparse_array(dim, lam, rng=None) -> SparseTree:
    """Build a random sparse vector tree of integer Poisson draws.

    The tree is nested lists along the outer dimensions with leaves along
    the first dimension; empty subtrees and empty leaves are None.
    """
    if not _is_number(lam):
        raise TypeError("'lambda' must be a single numeric value")
    if lam < 0.0 or lam > _MAX_ARRAY_LAMBDA:
        raise ValueError("'lambda' must be >= 0 and <= 4")
    dim = tuple(dim)
    if not dim:
        raise ValueError("'dim' must have at least one dimension")
    for d in dim:
        if not isinstance(d, int) or isinstance(d, bool) or d < 0:
            raise ValueError("'dim' must contain non-negative integers")
    if lam == 0.0 or 0 in dim:
        return None
    sampler = PoissonSampler(lam)
    if rng is None:
        rng = random.Random()
    return _build_tree(dim, sampler, rng)