# Copyright (c) 2026, The qdnorm developers

# This Python package qdnorm is licensed under the MIT license; see LICENSE.md
# file in the root directory.

import numpy as np
import qics.quantum.random

from qdnorm.vectorize import unvec, vec


def kraus_to_superop(kraus):
    r"""Computes the column-major superoperator of the quantum channel

    .. math::

        \Phi(X) = \sum_k K_k X K_k^\dagger,

    i.e., the matrix :math:`L = \sum_k \overline{K_k} \otimes K_k` satisfying
    :math:`\text{vec}(\Phi(X)) = L\,\text{vec}(X)`.

    Parameters
    ----------
    kraus : :obj:`list` of :class:`~numpy.ndarray`
        Kraus operators :math:`K_k`, each of size ``(dy, dx)``.

    Returns
    -------
    :class:`~numpy.ndarray`
        Superoperator of size ``(dy*dy, dx*dx)``.
    """
    kraus = [np.asarray(K) for K in kraus]
    (dy, dx) = kraus[0].shape
    L = np.zeros((dy * dy, dx * dx), dtype=np.complex128)
    for K in kraus:
        L += np.kron(K.conj(), K)
    return L


def apply_superop(superop, mat):
    """Applies a column-major superoperator to a matrix."""
    out = superop @ vec(mat)
    return unvec(out)


def identity_channel(d):
    """Superoperator of the identity channel on ``d``-dimensional matrices."""
    return np.eye(d * d, dtype=np.complex128)


def unitary_channel(U):
    r"""Superoperator of the unitary channel :math:`X \mapsto U X U^\dagger`."""
    return kraus_to_superop([U])


def depolarizing_channel(d, p=1.0):
    r"""Superoperator of the depolarizing channel

    .. math::

        X \mapsto (1 - p) X + p\,\text{tr}[X] \frac{\mathbb{I}}{d}.

    The default ``p=1`` is the completely depolarizing channel.
    """
    eye_vec = vec(np.eye(d, dtype=np.complex128))
    L = np.outer(eye_vec, eye_vec) / d
    return (1.0 - p) * identity_channel(d) + p * L


def amplitude_damping_channel(gamma):
    """Superoperator of the qubit amplitude damping channel with decay
    probability ``gamma``."""
    K0 = np.array([[1.0, 0.0], [0.0, np.sqrt(1.0 - gamma)]])
    K1 = np.array([[0.0, np.sqrt(gamma)], [0.0, 0.0]])
    return kraus_to_superop([K0, K1])


def random_channel(nin, nout=None, nenv=None):
    r"""Superoperator of a random quantum channel
    :math:`X \mapsto \text{tr}_E[VXV^\dagger]`, where :math:`V` is a random
    complex Stinespring isometry from
    :func:`qics.quantum.random.stinespring_operator`.

    Parameters
    ----------
    nin : :obj:`int`
        Input dimension.
    nout : :obj:`int`, optional
        Output dimension. The default is ``nin``.
    nenv : :obj:`int`, optional
        Environment dimension, i.e., the number of Kraus operators. The
        default is ``nout``.

    Returns
    -------
    :class:`~numpy.ndarray`
        Superoperator of size ``(nout*nout, nin*nin)``.
    """
    nout = nout if (nout is not None) else nin
    nenv = nenv if (nenv is not None) else nout
    V = qics.quantum.random.stinespring_operator(nin, nout, nenv, iscomplex=True)

    # Rows of V are indexed by (output, environment)
    kraus = np.transpose(V.reshape(nout, nenv, nin), (1, 0, 2))
    return kraus_to_superop(list(kraus))
