"""Read a CSV file of integers straight into a sparse vector tree."""

from __future__ import annotations

import os
import re
from typing import Iterator, List, Optional, Tuple

from .leaf import Leaf, make_leaf
from .sparsevec import RType

_IOBUF_SIZE = 8000002
# Longest line accepted, counting its terminating newline.
_MAX_LINE_LENGTH = _IOBUF_SIZE - 1
_INT_RE = re.compile(r"[ \t]*[+-]?[0-9]+[ \t]*")


class SparseCSVError(ValueError):
    """Raised when a sparse CSV file cannot be read."""


def _get_sep_char(sep) -> str:
    if not isinstance(sep, str) or len(sep) != 1:
        raise ValueError("'sep' must be a single character")
    return sep


def _read_text(source) -> str:
    if isinstance(source, (str, os.PathLike)):
        with open(source, encoding="utf-8", newline="") as f:
            return f.read()
    data = source.read()
    if isinstance(data, bytes):
        data = data.decode("utf-8")
    return data


def _iter_lines(text: str) -> Iterator[Tuple[str, bool]]:
    """Yield each line with its newline, and whether it had one."""
    start = 0
    while start < len(text):
        end = text.find("\n", start)
        if end < 0:
            yield text[start:], False
            return
        yield text[start:end + 1], True
        start = end + 1


def _strip_eol(line: str) -> str:
    if line.endswith("\r\n"):
        return line[:-2]
    if line.endswith("\n"):
        return line[:-1]
    return line


def _as_int(text: str, lineno: int) -> int:
    if not _INT_RE.fullmatch(text):
        raise SparseCSVError(
            f"reading file: invalid integer value {text!r} on line {lineno}")
    return int(text)


def _parse_row(line: str, sep: str, lineno: int) -> Tuple[str, List[Tuple[int, int]]]:
    """Return the row name and the (column offset, value) nonzero pairs."""
    fields = _strip_eol(line).split(sep)
    if len(fields) < 2:
        raise SparseCSVError(f"reading file: line {lineno} has no data column")
    pairs = []
    for off, field in enumerate(fields[1:]):
        if not field:
            continue
        val = _as_int(field, lineno)
        if val != 0:
            pairs.append((off, val))
    return fields[0], pairs


def _leaf_from_pairs(pairs: List[Tuple[int, int]]) -> Optional[Leaf]:
    if not pairs:
        return None
    offs, vals = zip(*pairs)
    return make_leaf(RType.INTEGER, list(vals), list(offs), True)


def _tree_or_none(leaves: List[Optional[Leaf]]) -> Optional[List[Optional[Leaf]]]:
    return None if all(leaf is None for leaf in leaves) else leaves


def read_sparse_csv(source, sep=",", transpose=False, csv_ncol=None):
    """Read a CSV of integers into ``(rownames, svt)``.

    *source* is a path or an open file. The first line is a header and is
    skipped; the first field of every other line is the row name. Every
    line must end with a newline. Without *transpose* the tree has one
    leaf per data column (there must be *csv_ncol* of them at most) with
    row offsets; with *transpose* it has one leaf per CSV row with column
    offsets. Empty leaves are None, and an empty tree is None.
    """
    sep = _get_sep_char(sep)
    transpose = bool(transpose)
    if not transpose:
        if (not isinstance(csv_ncol, int) or isinstance(csv_ncol, bool)
                or csv_ncol < 0):
            raise ValueError("'csv_ncol' must be a non-negative integer")
        columns: List[List[Tuple[int, int]]] = [[] for _ in range(csv_ncol)]
    rows: List[Optional[Leaf]] = []
    rownames: List[str] = []

    text = _read_text(source)
    row_idx = 0
    for lineno, (line, has_eol) in enumerate(_iter_lines(text), start=1):
        if not has_eol or len(line) > _MAX_LINE_LENGTH:
            raise SparseCSVError(
                f"reading file: cannot read line {lineno}, line is too long")
        if lineno == 1:
            continue
        rowname, pairs = _parse_row(line, sep, lineno)
        rownames.append(rowname)
        if transpose:
            rows.append(_leaf_from_pairs(pairs))
        else:
            for col, val in pairs:
                if col >= csv_ncol:
                    raise SparseCSVError(
                        f"reading file: line {lineno} has more than "
                        f"{csv_ncol} data columns")
                columns[col].append((row_idx, val))
        row_idx += 1

    if transpose:
        return rownames, _tree_or_none(rows)
    return rownames, _tree_or_none([_leaf_from_pairs(c) for c in columns])