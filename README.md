# sparsesvt

Building blocks for sparse arrays stored as *sparse vector trees* (SVTs).

An SVT stores an N-dimensional array as nested lists. The innermost level is a
**leaf**: offset/value pairs, in strictly ascending offset order, for one vector
along the first dimension. An empty leaf or an empty subtree is `None`. A
*lacunar* leaf stores no values (`nzvals is None`), and every nonzero it holds
equals one.

The package has no dependencies outside the standard library. NA is
represented by `None` throughout; NaN is `math.nan`.

## Installation

```
pip install sparsesvt
```

## Modules

- `sparsesvt.sparsevec`: `RType`, the value types (logical, integer, double,
  complex, raw, character, list). `RType.from_name()` looks a type up by name,
  and `zero()` and `one()` give its zero and one values. `SparseVec` is an
  immutable sparse vector with `nzcount()`, `nzval()`, `is_lacunar()` and
  `to_dense()`. `iter_aligned_values(sv1, sv2)` walks two sparse vectors in
  ascending offset order and yields `(offset, val1, val2)`, filling the missing
  side with zero.
- `sparsesvt.coercion`: `coerce_vector(values, from_type, to_type)` converts
  values between types and returns `(values, flags)`. The flags are a
  `CoercionFlag`, which records NAs introduced, NAs from integer overflow,
  discarded imaginary parts and out-of-range raw values. Pass the flags to
  `emit_coercion_warnings()` to issue one `CoercionWarning` for each kind of
  loss. Unsupported conversions raise `CoercionError`.
  `coercion_can_introduce_zeros()` and `coercion_can_introduce_nas()` report
  beforehand what a conversion may do.
- `sparsesvt.leaf`: the mutable `Leaf` type. It offers `nzcount()`,
  `is_lacunar()`, `to_sparse_vec()`, `turn_lacunar_if_all_ones()`,
  `remove_zeros()`, `remove_nas()` and `order_by_nzoff()`. The module also has
  helpers that build leaves: `make_leaf()`, `make_lacunar_leaf()`,
  `make_leaf_with_shared_nzval()`, `make_leaf_from_pairs()`,
  `make_leaf_from_dense()` and `make_naleaf_from_dense()`. Three more helpers
  work on existing leaves. `expand_leaf()` writes a leaf into a dense list.
  `coerce_leaf()` and `coerce_naleaf()` change its type and drop the values that
  became zero or NA. `subassign_leaf()` merges new values in at given offsets.
- `sparsesvt.poisson`: `PoissonSampler` and `simple_rpois(n, lam, rng)` draw
  Poisson samples for small lambda. `poisson_sparse_array(dim, lam, rng)`
  builds a random integer SVT and accepts `0 <= lam <= 4`. Any object with a
  `random()` method can serve as `rng`, for example `random.Random(seed)`.
- `sparsesvt.csvread`: `read_sparse_csv(source, sep, transpose, csv_ncol)`
  reads a CSV of integers from a path or an open file and returns
  `(rownames, svt)`.
  - The first line is a header and is skipped.
  - The first field of each line is the row name.
  - Every line must end with a newline.
  - Without `transpose`, the tree has one leaf per data column (`csv_ncol` of
    them). With `transpose`, it has one leaf per CSV row.
  - Malformed input raises `SparseCSVError`.
- `sparsesvt.cscstats`: `CscMatrix`, a compressed-sparse-column matrix of
  doubles with a `column(j)` method. `col_mins()`, `col_maxs()`,
  `col_ranges()` and `col_vars()` count the implicit zeros.
- `sparsesvt.rowsum`: grouped sums, returned as lists of rows:
  `rowsum_svt()`, `colsum_svt()`, `rowsum_csc()` and `colsum_csc()`. SVT input
  must be of type integer or double. Group numbers start at 1, and `None`
  groups go to the last group. Integer overflow gives NA and a
  `RuntimeWarning`.
- `sparsesvt.threads`: `which_max()` returns the position of the largest value,
  the last such position on ties. `get_num_procs()`, `get_max_threads()` and
  `set_max_threads()` keep a thread-count setting.

## Example

```python
import io
from sparsesvt.csvread import read_sparse_csv
from sparsesvt.rowsum import colsum_svt

text = ",a,b\nr1,0,3\nr2,1,0\nr3,2,5\n"
rownames, svt = read_sparse_csv(io.StringIO(text), ",", False, 2)
# rownames == ["r1", "r2", "r3"]

sums = colsum_svt((3, 2), "integer", svt, [1, 1], 1, False)
# sums == [[3], [1], [7]]
```

## What the package does not do

It provides the pieces that an SVT array is made of. It does not provide a full
sparse array class, element-wise arithmetic, or a command-line tool. The
thread-count setting in `sparsesvt.threads` is only stored: nothing in the
package runs in parallel.

## Running the tests

```
pip install -e ".[test]"
pytest
```