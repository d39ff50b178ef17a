"""Sparse vectors given as parallel arrays of nonzero values and offsets."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Iterator, Optional, Sequence, Tuple


class RType(enum.Enum):
    """Element type of a vector."""

    LOGICAL = "logical"
    INTEGER = "integer"
    DOUBLE = "double"
    COMPLEX = "complex"
    RAW = "raw"
    CHARACTER = "character"
    LIST = "list"

    @classmethod
    def from_name(cls, name):
        """Return the type called *name* (an RType is returned unchanged)."""
        if isinstance(name, cls):
            return name
        try:
            return cls(name)
        except ValueError:
            raise ValueError(f"invalid vector type: {name!r}") from None

    def zero(self) -> Any:
        """The zero value of this type."""
        return _ZEROS[self]

    def one(self) -> Any:
        """The value one of this type, the implicit value of lacunar vectors."""
        try:
            return _ONES[self]
        except KeyError:
            raise ValueError(f'type "{self.value}" has no value one') from None


_ZEROS = {
    RType.LOGICAL: False,
    RType.INTEGER: 0,
    RType.DOUBLE: 0.0,
    RType.COMPLEX: 0j,
    RType.RAW: 0,
    RType.CHARACTER: "",
    RType.LIST: None,
}

_ONES = {
    RType.LOGICAL: True,
    RType.INTEGER: 1,
    RType.DOUBLE: 1.0,
    RType.COMPLEX: 1 + 0j,
    RType.RAW: 1,
}

_SUPPORTED_NZVALS_TYPES = frozenset(
    {RType.LOGICAL, RType.INTEGER, RType.DOUBLE, RType.COMPLEX,
     RType.RAW, RType.CHARACTER}
)

_INT_MAX = 2147483647


@dataclass(frozen=True)
class SparseVec:
    """A sparse vector of length *length*.

    *nzvals* holds the nonzero values, or is None for a lacunar vector
    whose nonzero values are all implicitly one.
    """

    rtype: RType
    nzvals: Optional[Tuple[Any, ...]]
    nzoffs: Tuple[int, ...]
    length: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "rtype", RType.from_name(self.rtype))
        nzoffs = tuple(self.nzoffs)
        if not nzoffs or len(nzoffs) > _INT_MAX:
            raise _invalid()
        if not all(isinstance(off, int) and not isinstance(off, bool)
                   for off in nzoffs):
            raise _invalid()
        object.__setattr__(self, "nzoffs", nzoffs)
        if self.nzvals is not None:
            if self.rtype not in _SUPPORTED_NZVALS_TYPES:
                raise ValueError(
                    f'type "{self.rtype.value}" is not supported')
            nzvals = tuple(self.nzvals)
            if len(nzvals) != len(nzoffs):
                raise _invalid()
            object.__setattr__(self, "nzvals", nzvals)

    def nzcount(self) -> int:
        """Number of nonzero values."""
        return len(self.nzoffs)

    def nzval(self, k: int) -> Any:
        """The k-th nonzero value."""
        if self.nzvals is None:
            return self.rtype.one()
        return self.nzvals[k]

    def is_lacunar(self) -> bool:
        """True if the nonzero values are implicit ones."""
        return self.nzvals is None

    def to_dense(self) -> list:
        """The vector as a dense list."""
        dense = [self.rtype.zero()] * self.length
        values: Sequence[Any] = (
            self.nzvals if self.nzvals is not None
            else [self.rtype.one()] * self.nzcount()
        )
        for off, val in zip(self.nzoffs, values):
            dense[off] = val
        return dense


def _invalid() -> ValueError:
    return ValueError(
        "supplied 'nzvals' and/or 'nzoffs' are invalid or incompatible")


def iter_aligned_values(sv1: SparseVec,
                        sv2: SparseVec) -> Iterator[Tuple[int, Any, Any]]:
    """Walk two sparse vectors together in ascending offset order.

    Yields ``(offset, val1, val2)`` for every offset that is nonzero in at
    least one of them; the missing side is given as its type's zero.
    """
    zero1, zero2 = sv1.rtype.zero(), sv2.rtype.zero()
    n1, n2 = sv1.nzcount(), sv2.nzcount()
    k1 = k2 = 0
    while k1 < n1 or k2 < n2:
        if k2 >= n2 or (k1 < n1 and sv1.nzoffs[k1] < sv2.nzoffs[k2]):
            yield sv1.nzoffs[k1], sv1.nzval(k1), zero2
            k1 += 1
        elif k1 >= n1 or sv1.nzoffs[k1] > sv2.nzoffs[k2]:
            yield sv2.nzoffs[k2], zero1, sv2.nzval(k2)
            k2 += 1
        else:
            yield sv1.nzoffs[k1], sv1.nzval(k1), sv2.nzval(k2)
            k1 += 1
            k2 += 1