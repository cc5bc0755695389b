# Copyright (c) 2026, The qdnorm developers

# This Python package qdnorm is licensed under the MIT license; see LICENSE.md
# file in the root directory.

import logging
import threading

import numpy as np
import scipy as sp

from qdnorm.exceptions import ShapeError
from qdnorm.vectorize import mat_dim

logger = logging.getLogger(__name__)


def ket(i, d):
    r"""Computes the standard basis vector :math:`| i \rangle` of
    :math:`\mathbb{C}^d`.

    Parameters
    ----------
    i : :obj:`int`
        Index of the basis vector, where ``0 <= i < d``.
    d : :obj:`int`
        Dimension of the space.

    Returns
    -------
    :class:`~scipy.sparse.csr_matrix`
        Sparse column vector of size ``(d, 1)``.
    """
    if not 0 <= i < d:
        raise ValueError(f"Basis index {i} out of range for dimension {d}.")
    return sp.sparse.csr_matrix(([1.0], ([i], [0])), shape=(d, 1))


def bra(i, d):
    r"""Computes the dual basis vector :math:`\langle i |`, i.e., the
    conjugate transpose of :func:`ket`."""
    return ket(i, d).conj().T.tocsr()


def lift_operator(ancilla_dim, system_dim):
    r"""Computes the matrix representation :math:`E` of the linear map

    .. math::

        \rho \mapsto \mathbb{I} \otimes \rho,

    acting on column-major vectorized matrices, i.e.,
    :math:`E\,\text{vec}(\rho) = \text{vec}(\mathbb{I}\otimes\rho)`. It is
    assembled as

    .. math::

        E = \sum_{m,n=0}^{s-1} \sum_{k=0}^{a-1}
        \text{vec}(| k, m \rangle\langle k, n |)\,
        \text{vec}(| m \rangle\langle n |)^\top,

    where :math:`a` is ``ancilla_dim`` and :math:`s` is ``system_dim``.

    Parameters
    ----------
    ancilla_dim : :obj:`int`
        Dimension :math:`a` of the identity factor.
    system_dim : :obj:`int`
        Dimension :math:`s` of the matrix :math:`\rho`.

    Returns
    -------
    :class:`~scipy.sparse.csr_matrix`
        Sparse matrix of size ``(a*a*s*s, s*s)``.

    See also
    --------
    LiftCache : Memoizes the result of this function

    Notes
    -----
    :math:`E^\top` is the partial trace over the first (ancilla) factor, i.e.,
    :math:`E^\top\text{vec}(\sigma\otimes\rho)=\text{tr}[\sigma]\,
    \text{vec}(\rho)`.
    """
    (a, s) = (int(ancilla_dim), int(system_dim))
    N = a * s

    # Entry (n, m) of rho, at vec index n + s*m, is sent to entry
    # (k*s + n, k*s + m) of I ⊗ rho for every k
    (k, m, n) = np.meshgrid(
        np.arange(a), np.arange(s), np.arange(s), indexing="ij"
    )
    rows = (k * s + n) + N * (k * s + m)
    cols = n + s * m

    E = sp.sparse.coo_matrix(
        (np.ones(rows.size), (rows.ravel(), cols.ravel())), shape=(N * N, s * s)
    )
    return E.tocsr()


class LiftCache:
    """Single-slot memo of the most recently built :func:`lift_operator`.

    Building the lift operator is the most expensive part of setting up a
    diamond norm program, and repeated evaluations usually happen at one
    fixed dimension. A request for the cached dimensions returns the stored
    operator, while any other request evicts it and builds the new one.

    Access is serialized with a lock, so a single cache may be shared between
    threads. Pass an instance through the ``cache`` argument of the functions
    in :mod:`qdnorm.diamond` to reuse it across calls.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._key = None
        self._op = None
        self._op_T = None
        self.num_builds = 0

    @property
    def key(self):
        """The ``(ancilla_dim, system_dim)`` pair currently cached, or
        ``None`` if the cache is empty."""
        return self._key

    def get(self, ancilla_dim, system_dim, adjoint=False):
        """Returns the lift operator for the given dimensions, or its
        transpose (the partial trace) if ``adjoint=True``."""
        key = (int(ancilla_dim), int(system_dim))

        with self._lock:
            if self._key != key:
                logger.debug("Building lift operator for dims %s", key)
                self._op = lift_operator(*key)
                self._op_T = None
                self._key = key
                self.num_builds += 1
            else:
                logger.debug("Reusing cached lift operator for dims %s", key)

            if not adjoint:
                return self._op
            if self._op_T is None:
                self._op_T = self._op.T.tocsr()
            return self._op_T

    def clear(self):
        with self._lock:
            self._key = self._op = self._op_T = None


def superop_dims(superop):
    """Infers the input and output dimensions ``(dx, dy)`` of a superoperator
    of size ``(dy*dy, dx*dx)``."""
    shape = np.shape(superop)
    if len(shape) != 2:
        raise ShapeError(
            f"Expected superoperator to be a matrix, got shape {shape}."
        )
    dy = mat_dim(shape[0], name="superoperator output")
    dx = mat_dim(shape[1], name="superoperator input")
    return dx, dy


def choi_involution(mat, dims=None):
    r"""Permutes the entries of the column-major representation :math:`L` of
    a linear map :math:`\Phi` into its Choi matrix

    .. math::

        J = \sum_{i,j} | j \rangle\langle i | \otimes \Phi(| i \rangle\langle j |)^\top,

    which is positive semidefinite if and only if :math:`\Phi` is completely
    positive, and Hermitian if and only if :math:`\Phi` maps Hermitian
    matrices to Hermitian matrices.

    Parameters
    ----------
    mat : :class:`~numpy.ndarray`
        Array of size ``(dy*dy, dx*dx)`` representing the superoperator
        :math:`L`, i.e., :math:`\text{vec}(\Phi(X)) = L\,\text{vec}(X)`.
    dims : :obj:`tuple` of :obj:`int`, optional
        The input and output dimensions ``(dx, dy)``. The default is
        ``None``, in which case they are inferred from the shape of ``mat``.

    Returns
    -------
    :class:`~numpy.ndarray`
        The ``(dx*dy, dx*dy)`` Choi matrix, whose first tensor factor is the
        input space and second factor is the output space.

    Raises
    ------
    :class:`~qdnorm.exceptions.ShapeError`
        If the dimensions of ``mat`` are not perfect squares or do not match
        ``dims``.

    See also
    --------
    choi_to_superop : The inverse permutation
    """
    mat = np.asarray(mat)
    (dx, dy) = _check_dims(mat, dims)
    temp = np.reshape(mat, (dy, dy, dx, dx), order="F")
    temp = np.transpose(temp, (1, 3, 0, 2))
    return np.reshape(temp, (dx * dy, dx * dy), order="F")


def choi_to_superop(mat, dims=None):
    """Inverts :func:`choi_involution`, recovering the column-major
    superoperator of size ``(dy*dy, dx*dx)`` from a ``(dx*dy, dx*dy)`` Choi
    matrix. If ``dims`` is not given, ``dx == dy`` is assumed."""
    mat = np.asarray(mat)
    if dims is None:
        n = mat_dim(mat.shape[0], name="Choi matrix")
        dims = (n, n)
    (dx, dy) = dims
    if mat.shape != (dx * dy, dx * dy):
        raise ShapeError(
            f"Choi matrix of shape {mat.shape} does not match dims {dims}."
        )
    temp = np.reshape(mat, (dy, dx, dy, dx), order="F")
    temp = np.transpose(temp, (2, 0, 3, 1))
    return np.reshape(temp, (dy * dy, dx * dx), order="F")


def _check_dims(mat, dims):
    if dims is None:
        return superop_dims(mat)
    (dx, dy) = dims
    if np.shape(mat) != (dy * dy, dx * dx):
        raise ShapeError(
            f"Superoperator of shape {np.shape(mat)} does not match dims {dims}."
        )
    return dx, dy
