"""Kalman filter functions.

Module contains abstract functions for linear Kalman filter operations.
Refer to [1]_ for the theory of Kalman filters.

Functions
---------
.. autosummary::
    :toctree: generated/

    compute_process_matrices
    propagate
    update
    check_covariance

References
----------
.. [1] P. S. Maybeck, "Stochastic Models, Estimation and Control", volume 1
"""
import numpy as np
from scipy.linalg import cholesky, cho_solve, solve_triangular, expm, LinAlgError
from .errors import DivergenceError, SingularityError

#: Relative tolerance for symmetry and negative eigenvalues of covariance matrices.
COVARIANCE_TOLERANCE = 1e-9


def _normalize(matrix):
    d = np.diag(matrix).copy()
    d[d <= 0] = 1
    d **= 0.5
    return matrix / np.outer(d, d)


def check_covariance(P):
    """Check that a covariance matrix is symmetric and positive semi-definite.

    The check is done for the matrix scaled to unit diagonal, which makes it
    independent of units of the states.

    Parameters
    ----------
    P : ndarray, shape (n_states, n_states)
        Covariance matrix.

    Raises
    ------
    DivergenceError
        If the matrix is not symmetric, has negative diagonal elements or
        negative eigenvalues.
    """
    if not np.all(np.isfinite(P)):
        raise DivergenceError("Covariance matrix contains non-finite values", P)
    if np.any(np.diag(P) < 0):
        raise DivergenceError("Covariance matrix has negative diagonal elements", P)
    C = _normalize(P)
    if np.max(np.abs(C - C.T), initial=0) > COVARIANCE_TOLERANCE:
        raise DivergenceError("Covariance matrix is not symmetric", P)
    if np.min(np.linalg.eigvalsh(C), initial=0) < -COVARIANCE_TOLERANCE * len(P):
        raise DivergenceError("Covariance matrix is not positive semi-definite", P)


def compute_process_matrices(F, Q, dt):
    """Compute discrete process matrices for Kalman filter prediction.

    The algorithm with matrix exponential described in [1]_ is used.

    Parameters
    ----------
    F : ndarray, shape (n_states, n_states)
        Continuous process transition matrix.
    Q : ndarray, shape (n_states, n_states)
        Continuous process noise matrix.
    dt : float
        Time step.

    Returns
    -------
    Phi : ndarray, shape (n_states, n_states)
        Discrete transition matrix.
    Qd : ndarray, shape (n_states, n_states)
        Discrete process noise covariance.

    References
    ----------
    .. [1] Charles F. van Loan, "Computing Integrals Involving the Matrix Exponential"
    """
    n = len(F)
    H = np.zeros((2 * n, 2 * n))
    H[:n, :n] = F
    H[:n, n:] = Q
    H[n:, n:] = -F.T
    H = expm(H * dt)
    return H[:n, :n], H[:n, n:] @ H[:n, :n].T


def propagate(x, P, F, G, Q, dt):
    """Perform Kalman prediction.

    The continuous model ``dx/dt = F @ x + G @ w`` with the noise intensity ``Q``
    is converted to a discrete form by `compute_process_matrices`.

    Parameters
    ----------
    x : ndarray, shape (n_states,)
        State vector.
    P : ndarray, shape (n_states, n_states)
        Covariance matrix.
    F : ndarray, shape (n_states, n_states)
        Continuous process transition matrix.
    G : ndarray, shape (n_states, n_noises)
        Noise input matrix.
    Q : ndarray, shape (n_noises, n_noises)
        Noise intensity (PSD) matrix.
    dt : float
        Time step.

    Returns
    -------
    x : ndarray, shape (n_states,)
        Predicted state vector.
    P : ndarray, shape (n_states, n_states)
        Predicted covariance matrix.
    """
    Phi, Qd = compute_process_matrices(F, G @ Q @ G.T, dt)
    P = Phi @ P @ Phi.T + Qd
    P = 0.5 * (P + P.T)
    check_covariance(P)
    return Phi @ x, P


def update(x, P, z, H, R):
    """Perform Kalman correction.

    The correction obtains a posteriori state and covariance given measurement
    of the form::

        z = H @ x + v, with v ~ N(0, R)

    The covariance is updated in Joseph form.

    Parameters
    ----------
    x : ndarray, shape (n_states,)
        State vector.
    P : ndarray, shape (n_states, n_states)
        Covariance matrix.
    z : ndarray, shape (n_obs,)
        Observation vector.
    H : ndarray, shape (n_obs, n_states)
        Matrix which relates state and measurement vectors.
    R : ndarray, shape (n_obs, n_obs)
        Positive semi-definite measurement noise matrix.

    Returns
    -------
    x : ndarray, shape (n_states,)
        Corrected state vector.
    P : ndarray, shape (n_states, n_states)
        A posteriori covariance matrix.
    innovation : ndarray, shape (n_obs,)
        Standardized innovation vector with theoretical zero mean and identity
        covariance matrix.

    Raises
    ------
    SingularityError
        If the innovation covariance ``H @ P @ H.T + R`` is not positive definite
        or numerically singular.
    DivergenceError
        If the a posteriori covariance is not positive semi-definite.
    """
    HP = H @ P
    S = HP @ H.T + R

    if np.linalg.cond(_normalize(S)) > 1 / np.finfo(float).eps:
        raise SingularityError("Innovation covariance is singular", S)
    try:
        L = cholesky(S, lower=True)
    except LinAlgError:
        raise SingularityError("Innovation covariance is not positive definite", S)

    e = z - H @ x
    K = cho_solve((L, True), HP).T
    U = np.eye(len(x)) - K @ H

    P = U @ P @ U.T + K @ R @ K.T
    P = 0.5 * (P + P.T)
    check_covariance(P)

    return x + K @ e, P, solve_triangular(L, e, lower=True)
