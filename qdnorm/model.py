# Copyright (c) 2026, The qdnorm developers

# This Python package qdnorm is licensed under the MIT license; see LICENSE.md
# file in the root directory.

import logging
import numbers

import numpy as np
import scipy as sp
import qics

from qdnorm.exceptions import ShapeError
from qdnorm.vectorize import vec

logger = logging.getLogger(__name__)


class Affine:
    r"""A real matrix-valued affine function of the decision variables
    :math:`x\in\mathbb{R}^n` of a :class:`Problem`, stored through its
    column-major vectorization

    .. math::

        \text{vec}(M(x)) = C x + c_0.

    Affine expressions are created by :meth:`Problem.variable` and related
    methods, and combined with the usual arithmetic operators. Constants
    (:class:`~numpy.ndarray`) are promoted automatically.

    Parameters
    ----------
    coef : :class:`~scipy.sparse.csr_matrix`
        Coefficient matrix :math:`C` of size ``(rows*cols, k)`` for some
        ``k <= n``. Missing trailing columns are treated as zero.
    const : :class:`~numpy.ndarray`
        Constant term :math:`c_0` of length ``rows*cols``.
    shape : :obj:`tuple` of :obj:`int`
        Shape ``(rows, cols)`` of the matrix :math:`M`.
    """

    __array_ufunc__ = None

    def __init__(self, coef, const, shape):
        self.shape = (int(shape[0]), int(shape[1]))
        self.size = self.shape[0] * self.shape[1]
        self.coef = sp.sparse.csr_matrix(coef)
        self.const = np.asarray(const, dtype=np.float64).reshape(-1)
        assert self.coef.shape[0] == self.size == self.const.size

    @classmethod
    def constant(cls, mat):
        mat = np.asarray(mat)
        if np.iscomplexobj(mat):
            raise TypeError("Affine expressions are real valued.")
        mat = np.atleast_2d(mat).astype(np.float64)
        return cls(sp.sparse.csr_matrix((mat.size, 0)), vec(mat), mat.shape)

    @property
    def nvars(self):
        return self.coef.shape[1]

    @property
    def T(self):
        (m, n) = self.shape
        perm = vec(np.arange(m * n).reshape((m, n), order="F").T)
        return Affine(self.coef[perm], self.const[perm], (n, m))

    def padded(self, nvars):
        """Returns the coefficient matrix with ``nvars`` columns."""
        C = self.coef
        if C.shape[1] == nvars:
            return C
        assert C.shape[1] < nvars
        return sp.sparse.csr_matrix(
            (C.data, C.indices, C.indptr), shape=(C.shape[0], nvars)
        )

    def __neg__(self):
        return Affine(-self.coef, -self.const, self.shape)

    def __add__(self, other):
        other = _as_affine(other)
        if other.shape != self.shape:
            raise ShapeError(
                f"Cannot add expressions of shapes {self.shape} and {other.shape}."
            )
        n = max(self.nvars, other.nvars)
        coef = self.padded(n) + other.padded(n)
        return Affine(coef, self.const + other.const, self.shape)

    def __radd__(self, other):
        return self.__add__(other)

    def __sub__(self, other):
        return self.__add__(-_as_affine(other))

    def __rsub__(self, other):
        return (-self).__add__(other)

    def __mul__(self, other):
        if isinstance(other, numbers.Real):
            return Affine(other * self.coef, other * self.const, self.shape)

        # Scalar expression times a constant matrix, e.g., t * I
        if self.shape != (1, 1):
            raise ShapeError(
                "Only scalar expressions can be multiplied with a matrix."
            )
        mat = np.atleast_2d(np.asarray(other, dtype=np.float64))
        col = sp.sparse.csr_matrix(vec(mat).reshape(-1, 1))
        return Affine(col @ self.coef, vec(mat) * self.const[0], mat.shape)

    def __rmul__(self, other):
        return self.__mul__(other)

    def apply(self, op, shape):
        """Applies a linear map, given by its matrix ``op`` acting on
        column-major vectorizations, and reshapes the result to ``shape``."""
        return Affine(op @ self.coef, op @ self.const, shape)

    def trace(self):
        (m, n) = self.shape
        if m != n:
            raise ShapeError(f"Cannot take trace of a {self.shape} expression.")
        diag = np.arange(n) * (n + 1)
        coef = sp.sparse.csr_matrix(self.coef[diag].sum(axis=0))
        return Affine(coef, [self.const[diag].sum()], (1, 1))

    def inner(self, mat):
        r"""Frobenius inner product :math:`\sum_{ij} A_{ij} M_{ij}` with a
        real constant matrix :math:`A`."""
        mat = np.asarray(mat, dtype=np.float64)
        if mat.shape != self.shape:
            raise ShapeError(
                f"Cannot take inner product of shapes {self.shape} and {mat.shape}."
            )
        a = vec(mat)
        coef = sp.sparse.csr_matrix(a.reshape(1, -1)) @ self.coef
        return Affine(coef, [a @ self.const], (1, 1))

    def is_symmetric(self, tol=1e-12):
        if self.shape[0] != self.shape[1]:
            return False
        diff = self - self.T
        return bool(
            np.all(np.abs(diff.coef.data) <= tol)
            and np.all(np.abs(diff.const) <= tol)
        )

    def value(self, x):
        """Evaluates the expression at the point ``x``."""
        x = np.asarray(x, dtype=np.float64).reshape(-1)
        v = self.coef @ x[: self.nvars] + self.const
        return np.reshape(v, self.shape, order="F")


def _as_affine(expr):
    if isinstance(expr, Affine):
        return expr
    return Affine.constant(expr)


def bmat(blocks):
    """Builds a block matrix out of a nested list of affine expressions and
    constant matrices, in the manner of :func:`numpy.block`.

    Parameters
    ----------
    blocks : :obj:`list` of :obj:`list`
        Rows of blocks. Blocks in a row must have the same number of rows,
        and blocks in a column the same number of columns.

    Returns
    -------
    :class:`Affine`
        The block matrix.
    """
    blocks = [[_as_affine(b) for b in row] for row in blocks]
    row_dims = [row[0].shape[0] for row in blocks]
    col_dims = [b.shape[1] for b in blocks[0]]
    for i, row in enumerate(blocks):
        if len(row) != len(col_dims):
            raise ShapeError("All rows of blocks must have the same length.")
        for j, b in enumerate(row):
            if b.shape != (row_dims[i], col_dims[j]):
                raise ShapeError(
                    f"Block ({i}, {j}) has shape {b.shape}, expected "
                    f"{(row_dims[i], col_dims[j])}."
                )

    (M, N) = (sum(row_dims), sum(col_dims))
    nvars = max(b.nvars for row in blocks for b in row)
    row_offs = np.cumsum([0] + row_dims)
    col_offs = np.cumsum([0] + col_dims)

    coef = sp.sparse.csr_matrix((M * N, nvars))
    const = np.zeros(M * N)
    for i, row in enumerate(blocks):
        for j, b in enumerate(row):
            (m, n) = b.shape
            (r, c) = np.meshgrid(np.arange(m), np.arange(n), indexing="ij")
            idx = vec((r + row_offs[i]) + M * (c + col_offs[j]))
            select = sp.sparse.csr_matrix(
                (np.ones(m * n), (idx, np.arange(m * n))), shape=(M * N, m * n)
            )
            coef = coef + select @ b.padded(nvars)
            const[idx] += b.const

    return Affine(coef, const, (M, N))


class Problem:
    r"""Builder for a real semidefinite program

    .. math::

        \max / \min_{x} &&& f(x)

        \text{s.t.} &&& g_i(x) = b_i, \quad i=1,\ldots,p

         &&& M_k(x) \succeq 0, \quad k=1,\ldots,K,

    where :math:`f` and :math:`g_i` are real affine functions and
    :math:`M_k` are affine functions taking values in symmetric matrices. The
    program is passed to :class:`qics.Solver` in the standard form of
    :class:`qics.Model`, i.e., with :math:`c` the objective, :math:`(A, b)`
    the equality constraints and :math:`h - Gx` stacking the vectorized
    :math:`M_k(x)`, each in a real :class:`qics.cones.PosSemidefinite` cone.
    """

    def __init__(self):
        self.n = 0
        self.sense = None
        self.objective = None
        self.equalities = []
        self.psd_constraints = []

    # ==================================================================
    # Variables
    # ==================================================================
    def _new_vars(self, k):
        start = self.n
        self.n += k
        return start

    def variable(self, shape):
        """Declares a real matrix variable with free entries."""
        (m, n) = shape
        start = self._new_vars(m * n)
        idx = np.arange(m * n)
        coef = sp.sparse.csr_matrix(
            (np.ones(m * n), (idx, start + idx)), shape=(m * n, self.n)
        )
        return Affine(coef, np.zeros(m * n), (m, n))

    def scalar(self):
        return self.variable((1, 1))

    def symmetric(self, n):
        """Declares a real symmetric matrix variable with ``n*(n+1)/2``
        free parameters."""
        (rows, cols) = np.triu_indices(n)
        return self._structured(n, rows, cols, 1.0)

    def antisymmetric(self, n):
        """Declares a real antisymmetric matrix variable with
        ``n*(n-1)/2`` free parameters."""
        (rows, cols) = np.triu_indices(n, k=1)
        return self._structured(n, rows, cols, -1.0)

    def _structured(self, n, rows, cols, sign):
        k = rows.size
        start = self._new_vars(k)
        params = start + np.arange(k)

        upper = rows + n * cols
        lower = cols + n * rows
        off = rows != cols
        idx = np.concatenate([upper, lower[off]])
        var = np.concatenate([params, params[off]])
        val = np.concatenate([np.ones(k), sign * np.ones(np.count_nonzero(off))])

        coef = sp.sparse.csr_matrix((val, (idx, var)), shape=(n * n, self.n))
        return Affine(coef, np.zeros(n * n), (n, n))

    def hermitian(self, n):
        """Declares a complex Hermitian matrix variable, returned as its real
        (symmetric) and imaginary (antisymmetric) parts."""
        return self.symmetric(n), self.antisymmetric(n)

    def general(self, m, n):
        """Declares a complex ``(m, n)`` matrix variable, returned as its
        real and imaginary parts."""
        return self.variable((m, n)), self.variable((m, n))

    # ==================================================================
    # Constraints and objective
    # ==================================================================
    def add_equality(self, expr, rhs):
        """Adds the constraint ``expr == rhs`` for a scalar expression."""
        expr = _as_affine(expr)
        if expr.shape != (1, 1):
            raise ShapeError("Equality constraints must be scalar.")
        b = float(rhs) - expr.const[0]
        if expr.coef.count_nonzero() == 0:
            # Identically satisfied, e.g., the trace of an antisymmetric matrix
            if abs(b) > 1e-12:
                raise ValueError("Equality constraint cannot be satisfied.")
            return
        self.equalities.append((expr, b))

    def add_psd(self, expr):
        """Adds the constraint that a symmetric matrix expression is positive
        semidefinite."""
        expr = _as_affine(expr)
        assert expr.is_symmetric(), "PSD constraint on a non-symmetric matrix."
        self.psd_constraints.append(expr)

    def operator_norm(self, expr):
        r"""Returns a new scalar variable :math:`t` constrained by
        :math:`-t\mathbb{I} \preceq M \preceq t\mathbb{I}`, i.e., an upper
        bound on the operator norm of the symmetric expression :math:`M`."""
        t = self.scalar()
        eye = np.eye(expr.shape[0])
        self.add_psd(t * eye - expr)
        self.add_psd(t * eye + expr)
        return t

    def maximize(self, expr):
        self._set_objective(expr, "max")

    def minimize(self, expr):
        self._set_objective(expr, "min")

    def _set_objective(self, expr, sense):
        expr = _as_affine(expr)
        if expr.shape != (1, 1):
            raise ShapeError("Objective must be a scalar expression.")
        self.objective = expr
        self.sense = sense

    # ==================================================================
    # Solving
    # ==================================================================
    def to_model(self):
        """Converts the problem into a :class:`qics.Model`."""
        assert self.objective is not None, "Objective has not been set."
        assert self.psd_constraints, "Problem has no conic constraints."
        n = self.n
        sign = -1.0 if self.sense == "max" else 1.0

        c = sign * self.objective.padded(n).toarray().reshape((-1, 1))
        offset = sign * self.objective.const[0]

        if self.equalities:
            A = sp.sparse.vstack([e.padded(n) for (e, _) in self.equalities])
            A = A.tocsr()
            b = np.array([[bi] for (_, bi) in self.equalities])
        else:
            (A, b) = (None, None)

        # Expressions are symmetric, so column-major and row-major
        # vectorizations coincide with the layout of the PSD cones
        G = -sp.sparse.vstack([M.padded(n) for M in self.psd_constraints])
        G = G.tocsr()
        h = np.concatenate([M.const for M in self.psd_constraints])
        h = h.reshape((-1, 1))
        cones = [
            qics.cones.PosSemidefinite(M.shape[0]) for M in self.psd_constraints
        ]

        logger.debug(
            "Built conic model with %d variables, %d equalities and %d PSD "
            "cones of sizes %s",
            n, len(self.equalities), len(cones),
            [M.shape[0] for M in self.psd_constraints],
        )
        return qics.Model(c=c, A=A, b=b, G=G, h=h, cones=cones, offset=offset)

    def solve(self, **solver_kwargs):
        """Solves the problem with :class:`qics.Solver`.

        Parameters
        ----------
        **solver_kwargs
            Keyword arguments passed to :class:`qics.Solver`, e.g.,
            ``verbose``, ``max_iter`` or ``tol_gap``.

        Returns
        -------
        :obj:`dict`
            The dictionary returned by :meth:`qics.Solver.solve`, with the
            additional key ``opt_val`` holding the optimal value of the
            objective in the sense (maximize or minimize) it was declared.
        """
        model = self.to_model()
        solver = qics.Solver(model, **solver_kwargs)
        info = solver.solve()

        p_obj = info["p_obj"]
        info["opt_val"] = -p_obj if self.sense == "max" else p_obj

        logger.debug(
            "Solver finished with status %s (%s) in %d iterations, value %.8e",
            info["sol_status"], info["exit_status"], info["num_iter"],
            info["opt_val"],
        )
        return info
