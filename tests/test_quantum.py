# Copyright (c) 2026, The qdnorm developers

# This Python package qdnorm is licensed under the MIT license; see LICENSE.md
# file in the root directory.


def test_ket_bra():
    # Tests that kets are sparse standard basis column vectors
    import numpy as np
    import pytest

    from qdnorm.quantum import bra, ket

    assert ket(1, 3).shape == (3, 1)
    assert np.array_equal(ket(1, 3).toarray(), [[0.0], [1.0], [0.0]])
    assert np.array_equal(bra(2, 3).toarray(), [[0.0, 0.0, 1.0]])
    assert (bra(0, 4) @ ket(0, 4)).toarray()[0, 0] == 1.0
    assert (bra(0, 4) @ ket(3, 4)).nnz == 0

    with pytest.raises(ValueError):
        ket(3, 3)
    with pytest.raises(ValueError):
        bra(-1, 2)


def test_lift_ikr_ptr():
    # Tests that the lift operator agrees with qics.quantum.i_kr, and that
    # its transpose agrees with qics.quantum.p_tr
    import numpy as np
    from qics.quantum import i_kr, p_tr

    from qdnorm.quantum import lift_operator
    from qdnorm.vectorize import unvec, vec

    np.random.seed(1)

    dims = [(1, 1), (1, 3), (2, 2), (3, 2), (2, 3), (4, 4), (6, 6), (8, 8)]
    for (a, s) in dims:
        E = lift_operator(a, s)
        assert E.shape == (a * a * s * s, s * s)
        assert E.nnz == a * s * s

        rho = np.random.randn(s, s) + np.random.randn(s, s) * 1j
        assert np.allclose(
            unvec(E @ vec(rho)), i_kr(rho, (a, s), 0)
        ), "qdnorm.quantum.lift_operator does not match qics.quantum.i_kr"
        assert np.allclose(unvec(E @ vec(rho)), np.kron(np.eye(a), rho))

        Z = np.random.randn(a * s, a * s) + np.random.randn(a * s, a * s) * 1j
        assert np.allclose(
            unvec(E.T @ vec(Z)), p_tr(Z, (a, s), 0)
        ), "Transpose of qdnorm.quantum.lift_operator is not the partial trace"


def test_lift_cache():
    # Tests that the lift cache only rebuilds when the dimensions change
    import numpy as np

    from qdnorm.quantum import LiftCache, lift_operator

    cache = LiftCache()
    assert cache.key is None
    assert cache.num_builds == 0

    E = cache.get(2, 3)
    assert cache.key == (2, 3)
    assert cache.num_builds == 1
    assert (E != lift_operator(2, 3)).nnz == 0

    # Cache hits return the same object
    assert cache.get(2, 3) is E
    assert cache.num_builds == 1

    ET = cache.get(2, 3, adjoint=True)
    assert ET.shape == (9, 36)
    assert cache.get(2, 3, adjoint=True) is ET
    assert cache.num_builds == 1

    # A new key evicts the old operator
    E = cache.get(3, 2)
    assert E.shape == (36, 4)
    assert cache.key == (3, 2)
    assert cache.num_builds == 2
    assert cache.get(3, 2, adjoint=True).shape == (4, 36)

    cache.get(2, 3)
    assert cache.num_builds == 3

    cache.clear()
    assert cache.key is None
    assert np.array_equal(cache.get(1, 1).toarray(), [[1.0]])
    assert cache.num_builds == 4


def test_lift_cache_threads():
    # Tests that a shared cache always returns the operator for the requested
    # dimensions, even when requests from different threads interleave
    from concurrent.futures import ThreadPoolExecutor

    from qdnorm.quantum import LiftCache

    cache = LiftCache()
    keys = [(2, 2), (2, 3), (3, 2)] * 10

    def shape_of(key):
        return key, cache.get(*key).shape

    with ThreadPoolExecutor(max_workers=4) as pool:
        for (a, s), shape in pool.map(shape_of, keys):
            assert shape == (a * a * s * s, s * s)


def test_choi_identity():
    # Tests that the Choi matrix of the identity channel is the unnormalized
    # maximally entangled state
    import numpy as np

    from qdnorm.quantum import choi_involution, identity_channel
    from qdnorm.vectorize import vec

    for d in [1, 2, 3, 4]:
        omega = vec(np.eye(d))
        J = choi_involution(identity_channel(d))
        assert np.array_equal(J, np.outer(omega, omega))
        assert np.isclose(np.linalg.eigvalsh(J).max(), d)


def test_choi_positivity():
    # Tests that the Choi matrix of a completely positive map is positive
    # semidefinite, and that of the transpose map is not
    import numpy as np
    from qics.quantum import p_tr

    from qdnorm.quantum import choi_involution, random_channel

    np.random.seed(1)

    for (nin, nout) in [(2, 2), (3, 3), (2, 3), (3, 2)]:
        J = choi_involution(random_channel(nin, nout))
        assert J.shape == (nin * nout, nin * nout)
        assert np.allclose(J, J.conj().T)
        assert np.linalg.eigvalsh(J).min() >= -1e-10

        # Trace preservation means the output factor traces out to identity
        assert np.allclose(p_tr(J, (nin, nout), 1), np.eye(nin))

    d = 3
    L = np.zeros((d * d, d * d))
    for i in range(d):
        for j in range(d):
            L[j + d * i, i + d * j] = 1.0
    assert np.isclose(np.linalg.eigvalsh(choi_involution(L)).min(), -1.0)


def test_choi_to_superop():
    # Tests that choi_to_superop inverts choi_involution
    import numpy as np

    from qdnorm.quantum import choi_involution, choi_to_superop

    np.random.seed(1)

    for (dx, dy) in [(2, 2), (3, 3), (2, 3), (4, 1)]:
        L = np.random.randn(dy * dy, dx * dx) + np.random.randn(dy * dy, dx * dx) * 1j
        assert np.array_equal(choi_to_superop(choi_involution(L), (dx, dy)), L)

        J = np.random.randn(dx * dy, dx * dy)
        assert np.array_equal(choi_involution(choi_to_superop(J, (dx, dy))), J)


def test_choi_involution_twice():
    # Tests that applying the reshuffle twice reverses the order of the four
    # matrix indices, rather than returning the original matrix
    import numpy as np

    from qdnorm.quantum import choi_involution

    np.random.seed(1)

    d = 3
    L = np.random.randn(d * d, d * d)
    twice = choi_involution(choi_involution(L))

    temp = np.reshape(L, (d, d, d, d), order="F")
    temp = np.transpose(temp, (3, 2, 1, 0))
    assert np.array_equal(twice, np.reshape(temp, (d * d, d * d), order="F"))
    assert not np.allclose(twice, L)


def test_choi_shape_errors():
    import numpy as np
    import pytest

    from qdnorm.exceptions import ShapeError
    from qdnorm.quantum import choi_involution, choi_to_superop, superop_dims

    with pytest.raises(ShapeError):
        choi_involution(np.zeros((5, 5)))
    with pytest.raises(ShapeError):
        choi_involution(np.zeros((4, 4)), dims=(3, 3))
    with pytest.raises(ShapeError):
        choi_to_superop(np.zeros((6, 6)), dims=(2, 2))
    with pytest.raises(ShapeError):
        superop_dims(np.zeros(16))

    assert superop_dims(np.zeros((9, 4))) == (2, 3)


def test_choi_array_like():
    # Nested lists are accepted wherever arrays are
    import numpy as np

    from qdnorm.quantum import choi_involution, choi_to_superop, superop_dims

    eye = [[1.0 if i == j else 0.0 for j in range(4)] for i in range(4)]
    assert superop_dims(eye) == (2, 2)

    J = choi_involution(eye)
    assert np.array_equal(J, choi_involution(np.eye(4)))
    assert np.array_equal(choi_to_superop(J.tolist()), np.eye(4))


def test_channels():
    # Tests the superoperators of standard channels against their action
    import numpy as np

    import qics.quantum.random as qrand

    from qdnorm.quantum import (
        amplitude_damping_channel,
        apply_superop,
        depolarizing_channel,
        kraus_to_superop,
        unitary_channel,
    )

    np.random.seed(1)

    rho = qrand.density_matrix(3, iscomplex=True)
    U = qrand.unitary(3, iscomplex=True)
    assert np.allclose(U.conj().T @ U, np.eye(3))
    assert np.isclose(np.trace(rho), 1.0)
    assert np.linalg.eigvalsh(rho).min() >= -1e-10

    assert np.allclose(apply_superop(unitary_channel(U), rho), U @ rho @ U.conj().T)
    assert np.allclose(apply_superop(depolarizing_channel(3), rho), np.eye(3) / 3)
    assert np.allclose(
        apply_superop(depolarizing_channel(3, 0.25), rho),
        0.75 * rho + 0.25 * np.eye(3) / 3,
    )

    excited = np.diag([0.0, 1.0])
    assert np.allclose(
        apply_superop(amplitude_damping_channel(0.3), excited), np.diag([0.3, 0.7])
    )

    # Rectangular Kraus operators give rectangular superoperators
    K = np.random.randn(3, 2)
    X = np.random.randn(2, 2)
    L = kraus_to_superop([K])
    assert L.shape == (9, 4)
    assert np.allclose(apply_superop(L, X), K @ X @ K.T)


def test_random_channel():
    # Tests that random channels are trace preserving
    import numpy as np

    import qics.quantum.random as qrand

    from qdnorm.quantum import apply_superop, random_channel

    np.random.seed(1)

    for (nin, nout, nenv) in [(2, 2, None), (2, 3, 2), (3, 2, 4)]:
        L = random_channel(nin, nout, nenv)
        assert L.shape == (nout * nout, nin * nin)

        rho = qrand.density_matrix(nin, iscomplex=True)
        sigma = apply_superop(L, rho)
        assert np.isclose(np.trace(sigma), 1.0)
        assert np.allclose(sigma, sigma.conj().T)
        assert np.linalg.eigvalsh(sigma).min() >= -1e-10
