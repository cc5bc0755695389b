import math

import numpy as np

from qdnorm.exceptions import ShapeError


def mat_dim(size, name="matrix"):
    """Computes the side length ``n`` of a square matrix from a vectorized
    length ``size = n * n``.

    Parameters
    ----------
    size : :obj:`int`
        Length of the vector, or side length of a matrix acting on
        vectorized square matrices.
    name : :obj:`str`, optional
        Name of the object used in the error message. The default is
        ``"matrix"``.

    Returns
    -------
    :obj:`int`
        The integer ``n`` such that ``n * n == size``.

    Raises
    ------
    :class:`~qdnorm.exceptions.ShapeError`
        If ``size`` is not a perfect square.
    """
    size = int(size)
    n = math.isqrt(size) if size >= 0 else -1
    if n < 0 or n * n != size:
        raise ShapeError(
            f"Dimension {size} of {name} is not a perfect square."
        )
    return n


def vec(mat):
    r"""Stacks the columns of a matrix into a one-dimensional array, i.e.,
    the column-major vectorization

    .. math::

        \begin{bmatrix}a & c \\ b & d\end{bmatrix}
        \mapsto
        \begin{bmatrix}a & b & c & d\end{bmatrix}^\top.

    Parameters
    ----------
    mat : :class:`~numpy.ndarray`
        Matrix to vectorize.

    Returns
    -------
    :class:`~numpy.ndarray`
        One-dimensional array of length ``mat.size``.
    """
    return np.reshape(mat, -1, order="F")


def unvec(vector, shape=None):
    """Reshapes a column-major vectorization back into a matrix.

    Parameters
    ----------
    vector : :class:`~numpy.ndarray`
        Vectorized matrix.
    shape : :obj:`tuple` of :obj:`int`, optional
        Shape of the resulting matrix. The default is ``None``, in which case
        a square matrix is assumed.

    Returns
    -------
    :class:`~numpy.ndarray`
        The matrix whose vectorization is ``vector``.
    """
    vector = np.asarray(vector)
    if shape is None:
        n = mat_dim(vector.size, name="vectorized matrix")
        shape = (n, n)
    return np.reshape(vector, shape, order="F")
