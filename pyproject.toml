[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "sparsesvt"
version = "0.1.0"
description = "Sparse vector trees: leaves, type coercion, random Poisson arrays, sparse CSV reading and grouped sums"
requires-python = ">=3.10"
dependencies = []
keywords = ["sparse", "array", "matrix", "sparse-vector-tree", "csc", "rowsum", "poisson"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Science/Research",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Mathematics",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["sparsesvt"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 88
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
