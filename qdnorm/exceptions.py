# Copyright (c) 2026, The qdnorm developers

# This Python package qdnorm is licensed under the MIT license; see LICENSE.md
# file in the root directory.


class ShapeError(ValueError):
    """Raised when a matrix does not have the dimensions an operation needs,
    e.g., a superoperator whose size is not a perfect square, or two channels
    of different shapes."""


class DimensionMismatch(ShapeError):
    """Raised when the real and imaginary parts passed to
    :func:`~qdnorm.embedding.embed` are of different shapes."""


class SolverWarning(UserWarning):
    """Issued when the conic solver terminates without certifying an optimal
    solution. The value returned alongside it may be unreliable."""
