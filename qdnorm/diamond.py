# Copyright (c) 2026, The qdnorm developers

# This Python package qdnorm is licensed under the MIT license; see LICENSE.md
# file in the root directory.

import functools
import logging
import threading
import warnings
from typing import NamedTuple

import numpy as np
import qics.quantum

from qdnorm.embedding import embed, unembed
from qdnorm.exceptions import ShapeError, SolverWarning
from qdnorm.model import Problem, bmat
from qdnorm.quantum.operator import LiftCache, choi_involution, superop_dims

logger = logging.getLogger(__name__)

# Default keyword arguments passed to qics.Solver
SOLVER_DEFAULTS = {"verbose": 0}


class DiamondNormResult(NamedTuple):
    """Outcome of a diamond norm computation.

    Attributes
    ----------
    value : :obj:`float`
        The computed (rescaled) optimal value.
    status : :obj:`str`
        Solution status reported by :class:`qics.Solver`, e.g.,
        ``"optimal"`` or ``"near_optimal"``.
    exit_status : :obj:`str`
        Exit status reported by :class:`qics.Solver`, e.g., ``"solved"`` or
        ``"max_iter"``.
    info : :obj:`dict`
        The full solver summary, together with optimal input states when the
        formulation has them.
    """

    value: float
    status: str
    exit_status: str
    info: dict

    @property
    def is_optimal(self):
        return self.status == "optimal"

    def __float__(self):
        return float(self.value)


# Nesting depth of the public functions below, so that only the outermost
# call warns and the warning points at the caller's line
_call_depth = threading.local()


def _warn_if_not_optimal(func):
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        depth = getattr(_call_depth, "value", 0)
        _call_depth.value = depth + 1
        try:
            result = func(*args, **kwargs)
        finally:
            _call_depth.value = depth

        if depth == 0 and not result.is_optimal:
            warnings.warn(
                "Diamond norm calculation did not converge "
                f"(status: {result.status}, exit status: {result.exit_status}).",
                SolverWarning,
                stacklevel=2,
            )
        return result

    return wrapper


@_warn_if_not_optimal
def diamond_norm(superop, method="primal", dims=None, cache=None,
                 **solver_kwargs):
    r"""Computes the diamond norm

    .. math::

        \| \Phi \|_\diamond = \max_{\rho} \| (\Phi \otimes \mathbb{I})(\rho) \|_1

    of a linear superoperator :math:`\Phi`, given by its column-major matrix
    representation :math:`L`, i.e., :math:`\text{vec}(\Phi(X)) =
    L\,\text{vec}(X)`.

    Parameters
    ----------
    superop : :class:`~numpy.ndarray`
        Array of size ``(dy*dy, dx*dx)`` representing the superoperator.
    method : {``"primal"``, ``"dual"``}, optional
        Which of the semidefinite programs of [1]_ to solve. The default is
        ``"primal"``.
    dims : :obj:`tuple` of :obj:`int`, optional
        Input and output dimensions ``(dx, dy)``. The default is ``None``,
        in which case they are inferred from the shape of ``superop``.
    cache : :class:`~qdnorm.quantum.LiftCache`, optional
        Cache for the lift operator, which can be reused between calls. The
        default is ``None``, which uses a fresh cache for this call.
    **solver_kwargs
        Keyword arguments passed to :class:`qics.Solver`.

    Returns
    -------
    :class:`DiamondNormResult`
        The diamond norm and solver status.

    Raises
    ------
    :class:`~qdnorm.exceptions.ShapeError`
        If the dimensions of ``superop`` are not perfect squares.

    Notes
    -----
    .. [1] Watrous, J. (2012) "Simpler semidefinite programs for completely
           bounded norms", arXiv:1207.5726.
    """
    if method == "primal":
        return diamond_norm_primal(superop, dims, cache, **solver_kwargs)
    elif method == "dual":
        return diamond_norm_dual(superop, dims, cache, **solver_kwargs)
    raise ValueError(f"Unknown diamond norm method {method!r}.")


@_warn_if_not_optimal
def diamond_norm_distance(superop1, superop2, method="primal", dims=None,
                          cache=None, **solver_kwargs):
    r"""Computes the diamond norm distance
    :math:`\| \Phi_1 - \Phi_2 \|_\diamond` between two quantum channels.

    Parameters
    ----------
    superop1, superop2 : :class:`~numpy.ndarray`
        Column-major superoperators of the same size ``(dy*dy, dx*dx)``.
        The primal and dual programs assume both maps are completely positive
        and trace preserving.
    method : {``"primal"``, ``"dual"``, ``"alt"``}, optional
        Which semidefinite program to solve. ``"primal"`` and ``"dual"`` are
        the programs of [1]_ for differences of quantum channels, and
        ``"alt"`` is the dual program of [2]_ for general maps. All give the
        same value. The default is ``"primal"``.
    dims : :obj:`tuple` of :obj:`int`, optional
        Input and output dimensions ``(dx, dy)``.
    cache : :class:`~qdnorm.quantum.LiftCache`, optional
        Cache for the lift operator, which can be reused between calls.
    **solver_kwargs
        Keyword arguments passed to :class:`qics.Solver`.

    Returns
    -------
    :class:`DiamondNormResult`
        The diamond norm distance, a value between ``0`` and ``2`` for
        quantum channels, and solver status.

    Notes
    -----
    .. [1] Watrous, J. (2009) "Semidefinite programs for completely bounded
           norms", Theory of Computing 5.11.
    .. [2] Watrous, J. (2012) "Simpler semidefinite programs for completely
           bounded norms", arXiv:1207.5726.
    """
    methods = {
        "primal": diamond_norm_distance_primal,
        "dual": diamond_norm_distance_dual,
        "alt": diamond_norm_distance_alt,
    }
    if method not in methods:
        raise ValueError(f"Unknown diamond norm distance method {method!r}.")
    return methods[method](superop1, superop2, dims, cache, **solver_kwargs)


# ======================================================================
# Semidefinite programs
# ======================================================================
@_warn_if_not_optimal
def diamond_norm_primal(superop, dims=None, cache=None, **solver_kwargs):
    r"""Solves the primal problem

    .. math::

        \max_{X, \rho_0, \rho_1} &&& \text{Re}\langle J, X \rangle

        \text{s.t.} &&& \begin{bmatrix} \mathbb{I} \otimes \rho_0 & X \\
        X^\dagger & \mathbb{I} \otimes \rho_1 \end{bmatrix} \succeq 0

         &&& \text{tr}[\rho_0] = \text{tr}[\rho_1] = 1,\ \rho_0, \rho_1 \succeq 0,

    whose optimal value is the diamond norm. See :func:`diamond_norm`.
    """
    (J, dx, dy) = _choi(superop, dims)
    E = _get_cache(cache).get(dy, dx)
    N = dx * dy

    prob = Problem()
    (Xr, Xi) = prob.general(N, N)
    (rho0r, rho0i) = prob.hermitian(dx)
    (rho1r, rho1i) = prob.hermitian(dx)

    prob.maximize(Xr.inner(J.real) + Xi.inner(J.imag))

    for (rr, ri) in [(rho0r, rho0i), (rho1r, rho1i)]:
        prob.add_equality(rr.trace(), 1.0)
        prob.add_equality(ri.trace(), 0.0)
        prob.add_psd(embed(rr, ri))

    (M0r, M0i) = (_lift(rho0r, E, N), _lift(rho0i, E, N))
    (M1r, M1i) = (_lift(rho1r, E, N), _lift(rho1i, E, N))
    prob.add_psd(embed(
        bmat([[M0r, Xr], [Xr.T, M1r]]),
        bmat([[M0i, Xi], [-Xi.T, M1i]]),
    ))

    result = _solve(prob, 1.0, solver_kwargs)
    x = result.info["x_opt"]
    result.info["rho0"] = unembed(embed(rho0r, rho0i).value(x))
    result.info["rho1"] = unembed(embed(rho1r, rho1i).value(x))
    return result


@_warn_if_not_optimal
def diamond_norm_dual(superop, dims=None, cache=None, **solver_kwargs):
    r"""Solves the dual problem

    .. math::

        \min_{Y_0, Y_1} &&& \frac{1}{2} \| \text{tr}_Y[Y_0] \|_\infty
        + \frac{1}{2} \| \text{tr}_Y[Y_1] \|_\infty

        \text{s.t.} &&& \begin{bmatrix} Y_0 & -J \\ -J^\dagger & Y_1
        \end{bmatrix} \succeq 0,\ Y_0, Y_1 \succeq 0,

    whose optimal value is the diamond norm. See :func:`diamond_norm`.
    """
    (J, dx, dy) = _choi(superop, dims)
    return _solve_dual(J, dx, dy, cache, solver_kwargs)


@_warn_if_not_optimal
def diamond_norm_distance_primal(superop1, superop2, dims=None, cache=None,
                                 **solver_kwargs):
    r"""Solves the primal problem

    .. math::

        \max_{W, \rho} &&& \langle J, W \rangle

        \text{s.t.} &&& \mathbb{I} \otimes \rho - W \succeq 0,\ W \succeq 0

         &&& \text{tr}[\rho] = 1,\ \rho \succeq 0,

    where :math:`J` is the Choi matrix of :math:`\Phi_1 - \Phi_2`. The
    diamond norm distance is twice the optimal value. See
    :func:`diamond_norm_distance`.
    """
    (J, dx, dy) = _distance_choi(superop1, superop2, dims)
    E = _get_cache(cache).get(dy, dx)
    N = dx * dy

    prob = Problem()
    (Wr, Wi) = prob.hermitian(N)
    (rhor, rhoi) = prob.hermitian(dx)

    prob.maximize(Wr.inner(J.real) + Wi.inner(J.imag))

    prob.add_equality(rhor.trace(), 1.0)
    prob.add_equality(rhoi.trace(), 0.0)

    prob.add_psd(embed(rhor, rhoi))
    prob.add_psd(embed(Wr, Wi))
    prob.add_psd(embed(_lift(rhor, E, N) - Wr, _lift(rhoi, E, N) - Wi))

    result = _solve(prob, 2.0, solver_kwargs)
    result.info["rho"] = unembed(embed(rhor, rhoi).value(result.info["x_opt"]))
    return result


@_warn_if_not_optimal
def diamond_norm_distance_dual(superop1, superop2, dims=None, cache=None,
                               **solver_kwargs):
    r"""Solves the dual problem

    .. math::

        \min_{Z} &&& \| \text{tr}_Y[Z] \|_\infty

        \text{s.t.} &&& Z \succeq J,\ Z \succeq 0,

    where :math:`J` is the Choi matrix of :math:`\Phi_1 - \Phi_2`. The
    diamond norm distance is twice the optimal value. See
    :func:`diamond_norm_distance`.
    """
    (J, dx, dy) = _distance_choi(superop1, superop2, dims)
    E_T = _get_cache(cache).get(dy, dx, adjoint=True)
    N = dx * dy

    prob = Problem()
    (Zr, Zi) = prob.hermitian(N)

    t = prob.operator_norm(embed(_ptr(Zr, E_T, dx), _ptr(Zi, E_T, dx)))
    prob.minimize(t)

    prob.add_psd(embed(Zr, Zi))
    prob.add_psd(embed(Zr - J.real, Zi - J.imag))

    return _solve(prob, 2.0, solver_kwargs)


@_warn_if_not_optimal
def diamond_norm_distance_alt(superop1, superop2, dims=None, cache=None,
                              **solver_kwargs):
    """Computes the diamond norm distance by solving the dual problem of
    :func:`diamond_norm_dual` for the difference of the two maps. Unlike
    the other distance programs, this does not require the maps to be
    completely positive or trace preserving."""
    (J, dx, dy) = _distance_choi(superop1, superop2, dims, hermitian=False)
    return _solve_dual(J, dx, dy, cache, solver_kwargs)


def _solve_dual(J, dx, dy, cache, solver_kwargs):
    E_T = _get_cache(cache).get(dy, dx, adjoint=True)
    N = dx * dy
    (Jr, Ji) = (J.real, J.imag)

    prob = Problem()
    (Y0r, Y0i) = prob.hermitian(N)
    (Y1r, Y1i) = prob.hermitian(N)

    t0 = prob.operator_norm(embed(_ptr(Y0r, E_T, dx), _ptr(Y0i, E_T, dx)))
    t1 = prob.operator_norm(embed(_ptr(Y1r, E_T, dx), _ptr(Y1i, E_T, dx)))
    prob.minimize(t0 + t1)

    prob.add_psd(embed(Y0r, Y0i))
    prob.add_psd(embed(Y1r, Y1i))
    prob.add_psd(embed(
        bmat([[Y0r, -Jr], [-Jr.T, Y1r]]),
        bmat([[Y0i, -Ji], [Ji.T, Y1i]]),
    ))

    return _solve(prob, 0.5, solver_kwargs)


# ======================================================================
# Helpers
# ======================================================================
def _get_cache(cache):
    return cache if (cache is not None) else LiftCache()


def _lift(expr, E, N):
    # rho -> I ⊗ rho
    return expr.apply(E, (N, N))


def _ptr(expr, E_T, dx):
    # Partial trace over the output system
    return expr.apply(E_T, (dx, dx))


def _choi(superop, dims):
    superop = np.asarray(superop, dtype=np.complex128)
    (dx, dy) = dims if (dims is not None) else superop_dims(superop)
    J = choi_involution(superop, (dx, dy))

    # Reorder the Choi matrix as output ⊗ input so that the lift operator,
    # which acts on the second tensor factor, acts on the input system
    J = qics.quantum.swap(J, (dx, dy), 0, 1)

    logger.debug("Choi matrix of superoperator with dims (dx=%d, dy=%d)", dx, dy)
    return J, dx, dy


def _distance_choi(superop1, superop2, dims, hermitian=True):
    if np.shape(superop1) != np.shape(superop2):
        raise ShapeError(
            "Cannot compute the distance between superoperators of shapes "
            f"{np.shape(superop1)} and {np.shape(superop2)}."
        )
    superop1 = np.asarray(superop1, dtype=np.complex128)
    superop2 = np.asarray(superop2, dtype=np.complex128)
    (J, dx, dy) = _choi(superop1 - superop2, dims)
    if hermitian:
        J = 0.5 * (J + J.conj().T)
    return J, dx, dy


def _solve(prob, scale, solver_kwargs):
    kwargs = dict(SOLVER_DEFAULTS)
    kwargs.update(solver_kwargs)

    info = prob.solve(**kwargs)
    return DiamondNormResult(
        value=scale * info["opt_val"],
        status=info["sol_status"],
        exit_status=info["exit_status"],
        info=info,
    )
