import math

import pytest

from sparsesvt.cscstats import CscMatrix
from sparsesvt.leaf import make_lacunar_leaf, make_leaf_from_dense
from sparsesvt.rowsum import colsum_csc, colsum_svt, rowsum_csc, rowsum_svt

COLUMNS = [
    [1.0, 0.0, 3.0],
    [0.0, 0.0, 0.0],
    [2.5, -1.0, 0.0],
    [0.0, 4.0, 6.5],
]
NROW, NCOL = 3, 4
DIM = (NROW, NCOL)


def _svt(columns, rtype="double"):
    return [make_leaf_from_dense(rtype, col) for col in columns]


def _csc(columns):
    x, i, p = [], [], [0]
    for col in columns:
        for r, v in enumerate(col):
            if v is None or v != 0:
                x.append(v)
                i.append(r)
        p.append(len(x))
    return CscMatrix(len(columns[0]), len(columns), x, i, p)


def _rows(columns):
    return [list(row) for row in zip(*columns)]


def test_rowsum_identity_groups_returns_matrix():
    result = rowsum_svt(DIM, "double", _svt(COLUMNS), [1, 2, 3], NROW)
    assert result == _rows(COLUMNS)


def test_rowsum_reversed_groups_reverses_rows():
    result = rowsum_svt(DIM, "double", _svt(COLUMNS), [3, 2, 1], NROW)
    assert result == _rows(COLUMNS)[::-1]


def test_rowsum_single_group_gives_column_sums():
    result = rowsum_svt(DIM, "double", _svt(COLUMNS), [1, 1, 1], 1)
    assert result == [pytest.approx([sum(c) for c in COLUMNS])]


def test_rowsum_na_group_goes_to_last():
    result = rowsum_svt(DIM, "double", _svt(COLUMNS), [None, 1, None], 2)
    assert result[0] == [c[1] for c in COLUMNS]
    assert result[1] == pytest.approx([c[0] + c[2] for c in COLUMNS])


def test_rowsum_empty_svt_gives_zeros():
    assert rowsum_svt((2, 2), "double", None, [1, 2], 2) == [[0.0, 0.0],
                                                             [0.0, 0.0]]


def test_rowsum_lacunar_leaf_counts_ones():
    svt = [make_lacunar_leaf("double", [0, 2])]
    assert rowsum_svt((3, 1), "double", svt, [1, 1, 1], 1) == [[2.0]]


def test_rowsum_integer_overflow_warns():
    svt = _svt([[2147483647, 2147483647]], "integer")
    with pytest.warns(RuntimeWarning, match="integer overflow"):
        result = rowsum_svt((2, 1), "integer", svt, [1, 1], 1)
    assert result == [[None]]


def test_rowsum_integer_na():
    svt = _svt([[None, 3]], "integer")
    assert rowsum_svt((2, 1), "integer", svt, [1, 1], 1) == [[None]]
    assert rowsum_svt((2, 1), "integer", svt, [1, 1], 1, True) == [[3]]


def test_rowsum_double_nan():
    svt = _svt([[math.nan, 2.0]])
    assert math.isnan(rowsum_svt((2, 1), "double", svt, [1, 1], 1)[0][0])
    assert rowsum_svt((2, 1), "double", svt, [1, 1], 1, True) == [[2.0]]


def test_rowsum_csc_agrees_with_svt():
    group = [2, None, 2]
    assert rowsum_csc(_csc(COLUMNS), group, 2) == rowsum_svt(
        DIM, "double", _svt(COLUMNS), group, 2)


def test_colsum_identity_groups_returns_matrix():
    result = colsum_svt(DIM, "double", _svt(COLUMNS), [1, 2, 3, 4], NCOL)
    assert result == _rows(COLUMNS)


def test_colsum_single_group_gives_row_sums():
    result = colsum_svt(DIM, "double", _svt(COLUMNS), [1, 1, 1, 1], 1)
    assert [r[0] for r in result] == pytest.approx(
        [sum(row) for row in _rows(COLUMNS)])


def test_colsum_csc_agrees_with_svt():
    group = [1, None, 2, 1]
    assert colsum_csc(_csc(COLUMNS), group, 2) == colsum_svt(
        DIM, "double", _svt(COLUMNS), group, 2)


def test_colsum_integer_overflow_warns():
    svt = _svt([[2147483647], [2147483647]], "integer")
    with pytest.warns(RuntimeWarning, match="integer overflow"):
        result = colsum_svt((1, 2), "integer", svt, [1, 1], 1)
    assert result == [[None]]


def test_colsum_integer_na_is_sticky():
    svt = _svt([[None], [5]], "integer")
    assert colsum_svt((1, 2), "integer", svt, [1, 1], 1) == [[None]]
    assert colsum_svt((1, 2), "integer", svt, [1, 1], 1, True) == [[5]]


@pytest.mark.parametrize("dim", [(2, 2, 2), (4,)])
def test_dim_must_be_two(dim):
    with pytest.raises(ValueError, match="2 dimensions"):
        rowsum_svt(dim, "double", None, [1, 1], 1)


@pytest.mark.parametrize("rtype", ["character", "complex", "bogus"])
def test_unsupported_types(rtype):
    with pytest.raises(ValueError):
        rowsum_svt(DIM, rtype, None, [1, 1, 1], 1)


def test_group_length_mismatch():
    with pytest.raises(ValueError, match="one element"):
        rowsum_svt(DIM, "double", None, [1, 1], 1)


def test_group_out_of_range():
    with pytest.raises(ValueError, match="'ngroup'"):
        colsum_svt(DIM, "double", None, [1, 2, 3, 5], 4)


def test_na_group_requires_positive_ngroup():
    with pytest.raises(ValueError, match=">= 1 when"):
        rowsum_csc(_csc([[0.0]]), [None], 0)


def test_group_must_be_integers():
    with pytest.raises(TypeError):
        rowsum_svt(DIM, "double", None, [1.0, 1, 1], 1)


def test_too_many_groups():
    with pytest.raises(ValueError, match="too many groups"):
        rowsum_svt((1, 3), "double", None, [1], 2 ** 30)