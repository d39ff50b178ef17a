"""Grouped row and column sums of sparse matrices.

Matrices are returned as lists of rows. NA is represented by None.
"""

from __future__ import annotations

import math
import warnings
from typing import Any, Iterable, Iterator, List, Optional, Sequence, Tuple

from .cscstats import CscMatrix
from .leaf import Leaf
from .sparsevec import RType

_INT_MAX = 2147483647

Matrix = List[List[Any]]


def _check_dim(dim) -> Tuple[int, int]:
    dim = tuple(dim)
    if len(dim) != 2:
        raise ValueError("input object must have 2 dimensions")
    return dim[0], dim[1]


def _numeric_type(rtype) -> RType:
    try:
        rtype = RType.from_name(rtype)
    except ValueError:
        raise ValueError("invalid 'x_type' value") from None
    if rtype not in (RType.DOUBLE, RType.INTEGER):
        raise ValueError(
            "rowsum() and colsum() do not support SVT_SparseMatrix "
            f'objects of type "{rtype.value}" at the moment')
    return rtype


def _check_group(group, n: int, ngroup) -> List[Optional[int]]:
    if not isinstance(ngroup, int) or isinstance(ngroup, bool):
        raise TypeError("'ngroup' must be a single integer")
    group = list(group)
    for g in group:
        if g is not None and (not isinstance(g, int) or isinstance(g, bool)):
            raise TypeError(
                "the grouping vector must be an integer vector or factor")
    if len(group) != n:
        raise ValueError(
            "the grouping vector must have one element per row in 'x' for "
            "rowsum() and one element per column in 'x' for colsum()")
    for g in group:
        if g is None:
            if ngroup < 1:
                raise ValueError("'ngroup' must be >= 1 when 'group' "
                                 "contains missing values")
        elif g < 1 or g > ngroup:
            raise ValueError("all non-NA values in 'group' must be "
                             ">= 1 and <= 'ngroup'")
    return group


def _check_size(nrow: int, ncol: int) -> None:
    if abs(nrow * ncol) > _INT_MAX:
        raise ValueError("too many groups (matrix of sums will be too big)")


def _group_index(g: Optional[int], ngroup: int) -> int:
    return (ngroup if g is None else g) - 1


def _zeros(rtype: RType, nrow: int, ncol: int) -> Matrix:
    zero = rtype.zero()
    return [[zero] * ncol for _ in range(nrow)]


def _is_na_or_nan(v) -> bool:
    return v is None or (isinstance(v, float) and math.isnan(v))


def _add_int(acc, v) -> Tuple[Optional[int], bool]:
    if acc is None or v is None:
        return None, False
    total = acc + v
    if -_INT_MAX <= total <= _INT_MAX:
        return total, False
    return None, True


def _sum_into(out: Matrix, entries: Iterable[Tuple[int, int, Any]],
              rtype: RType, narm: bool) -> None:
    overflow = False
    for r, c, v in entries:
        if narm and _is_na_or_nan(v):
            continue
        acc = out[r][c]
        if rtype is RType.INTEGER:
            out[r][c], ovf = _add_int(acc, v)
            overflow = overflow or ovf
        else:
            out[r][c] = None if acc is None or v is None else acc + v
    if overflow:
        warnings.warn("NAs produced by integer overflow", RuntimeWarning,
                      stacklevel=3)


def _iter_svt(svt: Optional[Sequence[Optional[Leaf]]], ncol: int,
              rtype: RType) -> Iterator[Tuple[int, int, Any]]:
    """Yield ``(column, row offset, value)`` for every stored value."""
    if svt is None:
        return
    if len(svt) != ncol:
        raise ValueError("the SVT must have one element per column")
    for j, leaf in enumerate(svt):
        if leaf is None:
            continue
        values = (leaf.nzvals if leaf.nzvals is not None
                  else [rtype.one()] * leaf.nzcount())
        for off, v in zip(leaf.nzoffs, values):
            yield j, off, v


def _iter_csc(x: CscMatrix) -> Iterator[Tuple[int, int, Any]]:
    for j in range(x.ncol):
        values, rows = x.column(j)
        for off, v in zip(rows, values):
            yield j, off, v


def rowsum_svt(dim, rtype, svt, group, ngroup, na_rm=False) -> Matrix:
    """Sum the rows of a sparse vector tree matrix by group.

    Returns an ``ngroup`` x ``ncol`` matrix; NA groups go to the last group.
    """
    nrow, ncol = _check_dim(dim)
    rtype = _numeric_type(rtype)
    groups = _check_group(group, nrow, ngroup)
    _check_size(ngroup, ncol)
    out = _zeros(rtype, ngroup, ncol)
    entries = ((_group_index(groups[off], ngroup), j, v)
               for j, off, v in _iter_svt(svt, ncol, rtype))
    _sum_into(out, entries, rtype, bool(na_rm))
    return out


def colsum_svt(dim, rtype, svt, group, ngroup, na_rm=False) -> Matrix:
    """Sum the columns of a sparse vector tree matrix by group.

    Returns an ``nrow`` x ``ngroup`` matrix; NA groups go to the last group.
    """
    nrow, ncol = _check_dim(dim)
    rtype = _numeric_type(rtype)
    groups = _check_group(group, ncol, ngroup)
    _check_size(nrow, ngroup)
    out = _zeros(rtype, nrow, ngroup)
    entries = ((off, _group_index(groups[j], ngroup), v)
               for j, off, v in _iter_svt(svt, ncol, rtype))
    _sum_into(out, entries, rtype, bool(na_rm))
    return out


def rowsum_csc(x: CscMatrix, group, ngroup, na_rm=False) -> Matrix:
    """Sum the rows of a CSC matrix of doubles by group."""
    groups = _check_group(group, x.nrow, ngroup)
    _check_size(ngroup, x.ncol)
    out = _zeros(RType.DOUBLE, ngroup, x.ncol)
    entries = ((_group_index(groups[off], ngroup), j, v)
               for j, off, v in _iter_csc(x))
    _sum_into(out, entries, RType.DOUBLE, bool(na_rm))
    return out


def colsum_csc(x: CscMatrix, group, ngroup, na_rm=False) -> Matrix:
    """Sum the columns of a CSC matrix of doubles by group."""
    groups = _check_group(group, x.ncol, ngroup)
    _check_size(x.nrow, ngroup)
    out = _zeros(RType.DOUBLE, x.nrow, ngroup)
    entries = ((off, _group_index(groups[j], ngroup), v)
               for j, off, v in _iter_csc(x))
    _sum_into(out, entries, RType.DOUBLE, bool(na_rm))
    return out