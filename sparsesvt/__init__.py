"""Sparse vector trees: leaves, coercion, random Poisson arrays, sparse CSV reading and grouped summaries."""

__version__ = "0.1.0"

__all__ = [
    "sparsevec",
    "coercion",
    "leaf",
    "poisson",
    "csvread",
    "cscstats",
    "rowsum",
    "threads",
]