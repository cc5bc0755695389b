# Copyright (c) 2026, The qdnorm developers

# This Python package qdnorm is licensed under the MIT license; see LICENSE.md
# file in the root directory.

import numpy as np

from qdnorm.exceptions import DimensionMismatch, ShapeError


def embed(real, imag=None):
    r"""Represents a complex matrix :math:`C = R + iI` as the real matrix

    .. math::

        \phi(C) = \begin{bmatrix} R & I \\ -I & R \end{bmatrix}.

    The map :math:`\phi` is an injective real-linear :math:`*`-homomorphism,
    so that :math:`C` is Hermitian if and only if :math:`\phi(C)` is
    symmetric, and :math:`C \succeq 0` if and only if
    :math:`\phi(C) \succeq 0`. See Bachoc et al., "Invariant semidefinite
    programs" (arXiv:1007.2905).

    Parameters
    ----------
    real : :class:`~numpy.ndarray` or :class:`~qdnorm.model.Affine`
        Either the real part :math:`R` of the matrix, or, if ``imag`` is not
        given, the complex matrix :math:`C` itself.
    imag : :class:`~numpy.ndarray` or :class:`~qdnorm.model.Affine`, optional
        The imaginary part :math:`I` of the matrix. The default is ``None``.

    Returns
    -------
    :class:`~numpy.ndarray` or :class:`~qdnorm.model.Affine`
        Real matrix of twice the dimensions of the input. If either argument
        is an affine expression, then so is the result.

    Raises
    ------
    :class:`~qdnorm.exceptions.DimensionMismatch`
        If ``real`` and ``imag`` do not have the same shape.
    """
    from qdnorm.model import Affine, bmat

    if imag is None and isinstance(real, Affine):
        imag = np.zeros(real.shape)
    elif imag is None:
        c = np.asarray(real)
        real, imag = c.real, c.imag

    if np.shape(real) != np.shape(imag):
        raise DimensionMismatch(
            "embed requires the real and imaginary parts to be of the same "
            f"size, got {np.shape(real)} and {np.shape(imag)}."
        )

    if isinstance(real, Affine) or isinstance(imag, Affine):
        return bmat([[real, imag], [-imag, real]])

    real = np.asarray(real, dtype=np.float64)
    imag = np.asarray(imag, dtype=np.float64)
    return np.block([[real, imag], [-imag, real]])


def _half(m):
    (rows, cols) = np.shape(m)
    if rows % 2 or cols % 2:
        raise ShapeError(
            f"Matrix of shape {(rows, cols)} is not the real embedding of a "
            "complex matrix."
        )
    return rows // 2, cols // 2


def unembed_real(m):
    """Extracts the real part of a complex matrix from its real embedding,
    i.e., the top-left quadrant."""
    (n, k) = _half(m)
    return m[:n, :k]


def unembed_imag(m):
    """Extracts the imaginary part of a complex matrix from its real
    embedding, i.e., the top-right quadrant."""
    (n, k) = _half(m)
    return m[:n, k:]


def unembed(m):
    """Recovers a complex matrix from its real embedding. This is the exact
    left inverse of :func:`embed`.

    Parameters
    ----------
    m : :class:`~numpy.ndarray`
        Real matrix of even dimensions.

    Returns
    -------
    :class:`~numpy.ndarray`
        Complex matrix of half the dimensions of ``m``.
    """
    return unembed_real(m) + 1j * unembed_imag(m)


def trace_real(m):
    """Computes the trace of the real part of a complex matrix represented by
    its real embedding.

    Note that the trace of the imaginary part is not constrained by the
    embedding, and has to be fixed separately where it matters.
    """
    return np.trace(unembed_real(m))
