import inspect
import warnings
import numpy as np
import pytest
from numpy.testing import assert_allclose
from pygins import kalman
from pygins.errors import DivergenceError, SingularityError


def test_kalman_update():
    # As the implementation of standard Kalman correction formulas is
    # straightforward we use a sanity check, when the correct answer is
    # computed without complete formulas.
    P0 = np.array([[2, 0], [0, 1]], dtype=float)
    x0 = np.array([0, 0], dtype=float)

    z = np.array([1, 2])
    R = np.array([[3, 0], [0, 2]])
    H = np.identity(2)

    x_true = np.array([1 * 2 / (2 + 3), 2 * 1 / (1 + 2)])
    P_true = np.diag([1 / (1/2 + 1/3), 1 / (1/1 + 1/2)])

    x, P, innovation = kalman.update(x0, P0, z, H, R)
    assert_allclose(x, x_true)
    assert_allclose(P, P_true)
    assert_allclose(innovation, [1 / 5 ** 0.5, 2 / 3 ** 0.5])


def test_update_keeps_covariance_valid():
    rng = np.random.RandomState(0)
    for i in range(20):
        A = rng.randn(15, 15)
        P = A @ A.T + 1e-6 * np.eye(15)
        H = rng.randn(3, 15)
        R = np.diag(rng.rand(3) + 0.1)
        x, P_new, _ = kalman.update(np.zeros(15), P, rng.randn(3), H, R)
        assert_allclose(P_new, P_new.T, atol=1e-12)
        assert np.min(np.linalg.eigvalsh(P_new)) > -1e-9
        assert np.all(np.diag(P_new) <= np.diag(P) + 1e-9)


def test_update_singular():
    P = np.diag([1.0, 0.0])
    H = np.array([[0.0, 1.0]])
    R = np.zeros((1, 1))
    with pytest.raises(SingularityError):
        kalman.update(np.zeros(2), P, np.array([1.0]), H, R)

    P = np.array([[1.0, 1.0], [1.0, 1.0]])
    H = np.eye(2)
    with pytest.raises(SingularityError):
        kalman.update(np.zeros(2), P, np.zeros(2), H, np.zeros((2, 2)))


def test_process_matrices():
    F = np.array([[0, 1], [0, 0]])
    Q = np.array([[0, 0], [0, 1]])

    Phi, Qd = kalman.compute_process_matrices(F, Q, 1)
    assert_allclose(Phi, np.array([[1, 1], [0, 1]]))
    assert_allclose(Qd, np.array([[1 / 3, 0.5], [0.5, 1]]))

    np.random.seed(0)
    F = np.random.randn(15, 15)
    Q = np.random.randn(15, 15)
    Q = Q.dot(Q.T)

    Phi, Qd = kalman.compute_process_matrices(F, Q, 0.5)
    test = F.dot(Qd) + Qd.dot(F.T) + Q - Phi.dot(Q).dot(Phi.T)
    assert_allclose(test, 0, atol=1E-12)


def test_propagate_without_noise():
    rng = np.random.RandomState(1)
    F = 0.1 * rng.randn(6, 6)
    G = rng.randn(6, 4)
    Q = np.zeros((4, 4))
    A = rng.randn(6, 6)
    P = A @ A.T
    x = rng.randn(6)

    x_new, P_new = kalman.propagate(x, P, F, G, Q, 0.1)
    Phi, _ = kalman.compute_process_matrices(F, np.zeros((6, 6)), 0.1)
    assert_allclose(P_new, Phi @ P @ Phi.T, rtol=1e-10, atol=1e-14)
    assert_allclose(x_new, Phi @ x)


def test_propagate_with_noise():
    F = np.zeros((2, 2))
    G = np.array([[1.0], [0.0]])
    Q = np.array([[4.0]])
    x, P = kalman.propagate(np.zeros(2), np.eye(2), F, G, Q, 0.5)
    assert_allclose(x, 0)
    assert_allclose(P, np.diag([3.0, 1.0]))


def test_check_covariance():
    kalman.check_covariance(np.diag([1.0, 0.0, 4.0]))
    with pytest.raises(DivergenceError):
        kalman.check_covariance(np.diag([1.0, -1.0]))
    with pytest.raises(DivergenceError):
        kalman.check_covariance(np.array([[1.0, 0.5], [0.4, 1.0]]))
    with pytest.raises(DivergenceError):
        kalman.check_covariance(np.array([[1.0, 2.0], [2.0, 1.0]]))
    with pytest.raises(DivergenceError):
        kalman.check_covariance(np.array([[np.nan, 0.0], [0.0, 1.0]]))


def test_module_compiles_without_warnings():
    with warnings.catch_warnings():
        warnings.simplefilter("error")
        compile(inspect.getsource(kalman), kalman.__file__, "exec")
