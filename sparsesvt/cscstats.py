"""Column summaries of compressed sparse column matrices of doubles.

NA is represented by None; NaN is ``math.nan``.
"""

from __future__ import annotations

import math
import operator
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple

Value = Optional[float]


@dataclass(frozen=True)
class CscMatrix:
    """A sparse matrix of doubles in compressed sparse column form.

    *x* holds the stored values, *i* their 0-based row indices and *p*
    the ``ncol + 1`` offsets into *x* and *i* where each column starts.
    """

    nrow: int
    ncol: int
    x: Sequence[Value]
    i: Sequence[int]
    p: Sequence[int]

    def __post_init__(self) -> None:
        if self.nrow < 0 or self.ncol < 0:
            raise ValueError("matrix dimensions cannot be negative")
        x, i, p = tuple(self.x), tuple(self.i), tuple(self.p)
        if len(p) != self.ncol + 1 or p[0] != 0:
            raise ValueError("'p' must have ncol + 1 elements, starting at 0")
        if any(b < a for a, b in zip(p, p[1:])):
            raise ValueError("'p' must be non-decreasing")
        if len(x) != len(i) or p[-1] != len(x):
            raise ValueError("'x', 'i' and 'p' are incompatible")
        if any(not 0 <= r < self.nrow for r in i):
            raise ValueError("row indices in 'i' are out of bounds")
        object.__setattr__(self, "x", x)
        object.__setattr__(self, "i", i)
        object.__setattr__(self, "p", p)

    def column(self, j: int) -> Tuple[Tuple[Value, ...], Tuple[int, ...]]:
        """Return the stored values of column *j* and their row indices."""
        start, end = self.p[j], self.p[j + 1]
        return self.x[start:end], self.i[start:end]


def _isnan(v: Value) -> bool:
    return v is None or math.isnan(v)


def _extremum(values: Sequence[Value], narm: bool, start: float,
              better: Callable[[float, float], bool]) -> Value:
    result = start
    result_is_nan = False
    for v in values:
        if v is None:
            if narm:
                continue
            return None
        if result_is_nan:
            continue
        if math.isnan(v):
            if narm:
                continue
            result = v
            result_is_nan = True
            continue
        if better(v, result):
            result = v
    return result


def _col_extrema(x: CscMatrix, na_rm: bool, start: float,
                 better: Callable[[float, float], bool]) -> List[Value]:
    out = []
    for j in range(x.ncol):
        values, _ = x.column(j)
        has_zeros = len(values) < x.nrow
        out.append(_extremum(values, bool(na_rm),
                             0.0 if has_zeros else start, better))
    return out


def col_mins(x: CscMatrix, na_rm=False) -> List[Value]:
    """Minimum of each column, implicit zeros included."""
    return _col_extrema(x, na_rm, math.inf, operator.lt)


def col_maxs(x: CscMatrix, na_rm=False) -> List[Value]:
    """Maximum of each column, implicit zeros included."""
    return _col_extrema(x, na_rm, -math.inf, operator.gt)


def _minmax(values: Sequence[Value], narm: bool,
            start_on_zero: bool) -> Tuple[Value, Value]:
    lo, hi = (0.0, 0.0) if start_on_zero else (math.inf, -math.inf)
    is_nan = False
    for v in values:
        if v is None:
            if narm:
                continue
            return None, None
        if is_nan:
            continue
        if math.isnan(v):
            if narm:
                continue
            lo = hi = v
            is_nan = True
            continue
        if v < lo:
            lo = v
        if v > hi:
            hi = v
    return lo, hi


def col_ranges(x: CscMatrix, na_rm=False) -> List[Tuple[Value, Value]]:
    """``(min, max)`` of each column, implicit zeros included."""
    out = []
    for j in range(x.ncol):
        values, _ = x.column(j)
        out.append(_minmax(values, bool(na_rm), len(values) < x.nrow))
    return out


def _div(a: float, b: float) -> float:
    if b != 0:
        return a / b
    if a == 0 or math.isnan(a):
        return math.nan
    return math.copysign(math.inf, a) * math.copysign(1.0, b)


def _col_var(values: Sequence[Value], nrow: int, narm: bool) -> Value:
    sample_size = nrow
    total = 0.0
    for v in values:
        if _isnan(v):
            if narm:
                sample_size -= 1
                continue
            if v is None:
                return None
        total += v
    mean = _div(total, float(sample_size))
    sigma = mean * mean * (nrow - len(values))
    for v in values:
        if narm and _isnan(v):
            continue
        delta = v - mean
        sigma += delta * delta
    return _div(sigma, sample_size - 1.0)


def col_vars(x: CscMatrix, na_rm=False) -> List[Value]:
    """Sample variance of each column, implicit zeros included."""
    return [_col_var(x.column(j)[0], x.nrow, bool(na_rm))
            for j in range(x.ncol)]