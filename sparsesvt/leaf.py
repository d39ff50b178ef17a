"""Leaves of a sparse vector tree: sparse vectors along the first dimension.

A leaf holds parallel lists of nonzero values and of their offsets, sorted
by strictly ascending offset. An empty leaf is represented by None. A
lacunar leaf has ``nzvals`` set to None: its nonzero values are all
implicitly one.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, List, MutableSequence, Optional, Sequence, Tuple

from .coercion import (
    CoercionError,
    CoercionFlag,
    coerce_vector,
    coercion_can_introduce_zeros,
)
from .sparsevec import RType, SparseVec

_INT_MAX = 2147483647
_TYPES_WITH_ONE = frozenset(
    {RType.LOGICAL, RType.INTEGER, RType.DOUBLE, RType.COMPLEX, RType.RAW}
)


def _is_zero(rtype: RType, x: Any) -> bool:
    if rtype is RType.LIST:
        return x is None
    if x is None:
        return False
    return x == rtype.zero()


def _is_one(rtype: RType, x: Any) -> bool:
    if rtype not in _TYPES_WITH_ONE or x is None or isinstance(x, str):
        return False
    return x == rtype.one()


def _all_ones(rtype: RType, values: Iterable[Any]) -> bool:
    return all(_is_one(rtype, x) for x in values)


def _invalid_leaf() -> ValueError:
    return ValueError(
        "supplied 'nzvals' and/or 'nzoffs' are invalid or incompatible")


@dataclass
class Leaf:
    """A non-empty sparse vector given as nonzero values and their offsets."""

    rtype: RType
    nzvals: Optional[List[Any]]
    nzoffs: List[int]

    def __post_init__(self) -> None:
        self.rtype = RType.from_name(self.rtype)
        self.nzoffs = list(self.nzoffs)
        if not self.nzoffs or len(self.nzoffs) > _INT_MAX:
            raise _invalid_leaf()
        if not all(isinstance(off, int) and not isinstance(off, bool)
                   for off in self.nzoffs):
            raise _invalid_leaf()
        if self.nzvals is not None:
            self.nzvals = list(self.nzvals)
            if len(self.nzvals) != len(self.nzoffs):
                raise _invalid_leaf()

    def nzcount(self) -> int:
        """Number of nonzero values."""
        return len(self.nzoffs)

    def is_lacunar(self) -> bool:
        """True if the nonzero values are implicit ones."""
        return self.nzvals is None

    def to_sparse_vec(self, length: int) -> SparseVec:
        """View this leaf as a SparseVec of the given length."""
        nzvals = None if self.nzvals is None else tuple(self.nzvals)
        return SparseVec(self.rtype, nzvals, tuple(self.nzoffs), length)

    def _require_regular(self) -> List[Any]:
        if self.nzvals is None:
            raise ValueError("operation not supported on a lacunar leaf")
        return self.nzvals

    def turn_lacunar_if_all_ones(self) -> bool:
        """Drop the values if they are all one; return True if it happened."""
        nzvals = self._require_regular()
        if _all_ones(self.rtype, nzvals):
            self.nzvals = None
            return True
        return False

    def _extract_selection(self, selection: Sequence[int]) -> None:
        nzvals = self._require_regular()
        if len(selection) == self.nzcount():
            if _all_ones(self.rtype, nzvals):
                self.nzvals = None
            return
        self.nzoffs = [self.nzoffs[k] for k in selection]
        kept = [nzvals[k] for k in selection]
        self.nzvals = None if _all_ones(self.rtype, kept) else kept

    def remove_zeros(self) -> int:
        """Remove zero values in place and return the new nonzero count.

        When no nonzero value is left the leaf is left untouched and 0 is
        returned; the caller should then replace it with an empty leaf.
        """
        nzvals = self._require_regular()
        selection = [k for k, x in enumerate(nzvals)
                     if not _is_zero(self.rtype, x)]
        if selection:
            self._extract_selection(selection)
        return len(selection)

    def remove_nas(self) -> int:
        """Remove NA values in place and return the new nonzero count.

        When no non-NA value is left the leaf is left untouched and 0 is
        returned; the caller should then replace it with an empty leaf.
        """
        nzvals = self._require_regular()
        selection = [k for k, x in enumerate(nzvals) if x is not None]
        if selection:
            self._extract_selection(selection)
        return len(selection)

    def order_by_nzoff(self) -> None:
        """Sort the (offset, value) pairs by ascending offset, stably."""
        order = sorted(range(self.nzcount()), key=self.nzoffs.__getitem__)
        if order == list(range(self.nzcount())):
            return
        self.nzoffs = [self.nzoffs[k] for k in order]
        if self.nzvals is not None:
            self.nzvals = [self.nzvals[k] for k in order]


def make_leaf(rtype, nzvals, nzoffs, go_lacunar_if_all_ones=False) -> Leaf:
    """Build a leaf from parallel values and offsets.

    With *go_lacunar_if_all_ones*, a leaf whose values are all one is
    returned lacunar.
    """
    leaf = Leaf(rtype, nzvals, nzoffs)
    if (go_lacunar_if_all_ones and leaf.nzvals is not None
            and _all_ones(leaf.rtype, leaf.nzvals)):
        leaf.nzvals = None
    return leaf


def make_lacunar_leaf(rtype, nzoffs) -> Leaf:
    """Build a leaf whose nonzero values are all implicitly one."""
    return Leaf(rtype, None, nzoffs)


def make_leaf_with_shared_nzval(rtype, value, nzoffs) -> Leaf:
    """Build a leaf where every offset carries the same value."""
    rtype = RType.from_name(rtype)
    if _is_one(rtype, value):
        return make_lacunar_leaf(rtype, nzoffs)
    nzoffs = list(nzoffs)
    return Leaf(rtype, [value] * len(nzoffs), nzoffs)


def make_leaf_from_pairs(rtype, nzvals, nzoffs) -> Optional[Leaf]:
    """Build a leaf from values trusted to be nonzero.

    Returns None when there are no values. Character and list types are
    not supported.
    """
    rtype = RType.from_name(rtype)
    nzvals, nzoffs = list(nzvals), list(nzoffs)
    if len(nzvals) != len(nzoffs):
        raise _invalid_leaf()
    if not nzoffs:
        return None
    if rtype in (RType.CHARACTER, RType.LIST):
        raise ValueError(f'type "{rtype.value}" is not supported')
    if _all_ones(rtype, nzvals):
        return make_lacunar_leaf(rtype, nzoffs)
    return Leaf(rtype, nzvals, nzoffs)


def _leaf_from_selection(rtype: RType, values: Sequence[Any],
                         selection: List[int]) -> Optional[Leaf]:
    if not selection:
        return None
    selected = [values[k] for k in selection]
    if _all_ones(rtype, selected):
        return make_lacunar_leaf(rtype, selection)
    return Leaf(rtype, selected, selection)


def make_leaf_from_dense(rtype, values) -> Optional[Leaf]:
    """Build a leaf holding the nonzero elements of a dense vector."""
    rtype = RType.from_name(rtype)
    values = list(values)
    selection = [k for k, x in enumerate(values) if not _is_zero(rtype, x)]
    return _leaf_from_selection(rtype, values, selection)


def make_naleaf_from_dense(rtype, values) -> Optional[Leaf]:
    """Build a leaf holding the non-NA elements of a dense vector."""
    rtype = RType.from_name(rtype)
    values = list(values)
    selection = [k for k, x in enumerate(values) if x is not None]
    return _leaf_from_selection(rtype, values, selection)


def expand_leaf(leaf: Leaf, out: MutableSequence[Any], offset: int = 0) -> None:
    """Write the nonzero values of *leaf* into *out*, starting at *offset*.

    *out* is expected to be long enough and already filled with zeros.
    """
    if leaf.nzvals is None:
        one = leaf.rtype.one()
        for off in leaf.nzoffs:
            out[offset + off] = one
    else:
        for off, val in zip(leaf.nzoffs, leaf.nzvals):
            out[offset + off] = val


def _coerce_lacunar_leaf(leaf: Leaf, new_type: RType) -> Leaf:
    if new_type in (RType.CHARACTER, RType.LIST):
        raise CoercionError(
            'coercing a lacunar leaf to "character" or "list" '
            "is not supported yet")
    return Leaf(new_type, None, leaf.nzoffs)


def coerce_leaf(leaf: Leaf, new_type) -> Tuple[Optional[Leaf], CoercionFlag]:
    """Coerce *leaf* to *new_type*, dropping values that became zero.

    Returns the new leaf (None if nothing is left) and the coercion flags.
    """
    new_type = RType.from_name(new_type)
    if leaf.nzvals is None:
        return _coerce_lacunar_leaf(leaf, new_type), CoercionFlag.NONE
    nzvals, warn = coerce_vector(leaf.nzvals, leaf.rtype, new_type)
    ans = Leaf(new_type, nzvals, leaf.nzoffs)
    if coercion_can_introduce_zeros(leaf.rtype, new_type):
        if ans.remove_zeros() == 0:
            return None, warn
    return ans, warn


def coerce_naleaf(leaf: Leaf, new_type) -> Tuple[Optional[Leaf], bool]:
    """Coerce a leaf of non-NA values, dropping values that became NA.

    Returns the new leaf (None if nothing is left) and whether the
    coercion reported any loss.
    """
    new_type = RType.from_name(new_type)
    if leaf.nzvals is None:
        return _coerce_lacunar_leaf(leaf, new_type), False
    nzvals, warn = coerce_vector(leaf.nzvals, leaf.rtype, new_type)
    ans = Leaf(new_type, nzvals, leaf.nzoffs)
    if warn:
        if ans.remove_nas() == 0:
            return None, True
        return ans, True
    return ans, False


def subassign_leaf(leaf: Leaf, index, values) -> Leaf:
    """Return a copy of *leaf* with *values* assigned at offsets *index*.

    *index* must be sorted in strictly ascending order. Zeros in *values*
    are kept in the result; the returned leaf is lacunar only when *index*
    is empty and *leaf* is already lacunar.
    """
    index, values = list(index), list(values)
    if len(index) != len(values):
        raise ValueError("'index' and 'values' have different lengths")
    if not index:
        return leaf
    old_vals = (leaf.nzvals if leaf.nzvals is not None
                else [leaf.rtype.one()] * leaf.nzcount())
    old = list(zip(leaf.nzoffs, old_vals))
    new = list(zip(index, values))
    ans_offs: List[int] = []
    ans_vals: List[Any] = []
    k1 = k2 = 0
    while k1 < len(old) and k2 < len(new):
        off1, off2 = old[k1][0], new[k2][0]
        if off1 < off2:
            pair = old[k1]
            k1 += 1
        elif off1 > off2:
            pair = new[k2]
            k2 += 1
        else:
            pair = new[k2]
            k1 += 1
            k2 += 1
        ans_offs.append(pair[0])
        ans_vals.append(pair[1])
    for off, val in old[k1:] + new[k2:]:
        ans_offs.append(off)
        ans_vals.append(val)
    return Leaf(leaf.rtype, ans_vals, ans_offs)