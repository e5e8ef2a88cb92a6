"""Allan variance analysis of inertial sensor noise.

The Allan variance of a sensor signal as a function of averaging time ``tau``
reveals noise processes of different kinds. White noise of the sensor output
(angle random walk for gyros, velocity random walk for accelerometers) produces
the part of the Allan deviation curve with slope -0.5 and its intensity is read
at ``tau = 1`` second. Refer to [1]_ for the details.

Functions
---------
.. autosummary::
    :toctree: generated/

    compute_allan_variance
    get_random_walk

References
----------
.. [1] IEEE Std 952-1997, "IEEE Standard Specification Format Guide and Test
       Procedure for Single-Axis Interferometric Fiber Optic Gyros", Annex C
"""
from warnings import warn
import allantools
import numpy as np
from .errors import ConfigurationError, RangeError


#: Averaging time at which the random walk coefficient is read.
TAU_RW = 1.0
#: Range of averaging times used for upsampling when `TAU_RW` is not sampled.
TAU_BRACKET = (0.5, 2.0)


def compute_allan_variance(signal, dt, taus=None):
    """Compute overlapping Allan variance of a uniformly sampled signal.

    Parameters
    ----------
    signal : array_like, shape (n,) or (n, n_axes)
        Sensor readings (rates, not increments).
    dt : float
        Sampling period.
    taus : array_like or None, optional
        Averaging times to evaluate. They are rounded to multiples of `dt`.
        If None (default), approximately logarithmically spaced values up to half of
        the signal duration are used.

    Returns
    -------
    tau : ndarray, shape (n_tau,)
        Averaging times.
    avar : ndarray, shape (n_tau,) or (n_tau, n_axes)
        Allan variance values.
    """
    if dt <= 0:
        raise ConfigurationError("`dt` must be positive", dt)
    signal = np.asarray(signal, dtype=float)
    n = len(signal)
    if n < 3:
        raise RangeError("At least 3 samples are required", n)

    max_m = (n - 1) // 2
    if taus is None:
        m = np.logspace(0, np.log10(max_m), 100)
    else:
        m = np.asarray(taus, dtype=float) / dt
    m = np.unique(np.round(m))
    m = m[(m >= 1) & (m <= max_m)]
    if len(m) == 0:
        raise RangeError("The signal is too short for the requested averaging times",
                         taus)

    # With the unit rate taus are exactly the averaging factors.
    avar = []
    for column in signal.reshape(n, -1).T:
        m_used, adev = allantools.oadev(column, rate=1.0, data_type="freq",
                                        taus=m)[:2]
        avar.append(adev ** 2)
    avar = np.asarray(avar).T.reshape((len(m_used),) + signal.shape[1:])

    return m_used * dt, avar


def get_random_walk(tau, allan, dt):
    """Get the random walk value from an Allan variance curve.

    The value of the curve at ``tau = 1`` second is returned. If the curve doesn't
    contain this point, the samples with ``0.5 <= tau <= 2`` are linearly
    interpolated onto a grid which starts at the first of these samples and has the
    step `dt`. The grid must contain the point ``tau = 1``.

    The result is a meaningful random walk value only if the Allan variance curve
    has slope -0.5 near ``tau = 1`` second. It is not verified.

    Parameters
    ----------
    tau : array_like, shape (n,)
        Increasing averaging times in seconds.
    allan : array_like, shape (n,)
        Allan variance values.
    dt : float
        Sampling period of the signal under analysis.

    Returns
    -------
    float
        Value of the curve at ``tau = 1`` second.

    Raises
    ------
    RangeError
        If there are no samples within [0.5, 2] seconds or the upsampled grid
        doesn't contain the point ``tau = 1``.
    """
    warn("Random walk value is valid only if Allan variance curve presents "
         "a -0.5 slope near tau = 1 s", stacklevel=2)

    tau = np.asarray(tau, dtype=float)
    allan = np.asarray(allan, dtype=float)
    if tau.ndim != 1 or tau.shape != allan.shape:
        raise ConfigurationError("`tau` and `allan` must be 1-D arrays of the same "
                                 "length")
    if np.any(np.diff(tau) <= 0):
        raise ConfigurationError("`tau` must be strictly increasing", tau)
    if dt <= 0:
        raise ConfigurationError("`dt` must be positive", dt)

    index = np.flatnonzero(tau == TAU_RW)
    if len(index) > 0:
        return allan[index[0]]

    index = np.flatnonzero((tau >= TAU_BRACKET[0]) & (tau <= TAU_BRACKET[1]))
    if len(index) == 0:
        raise RangeError(f"No Allan variance samples with tau within {TAU_BRACKET}",
                         tau)

    tau_o = tau[index]
    allan_o = allan[index]

    # Tolerance absorbs accumulated rounding of the grid.
    n_steps = int(np.floor((tau_o[-1] - tau_o[0]) / dt + 1e-9))
    tau_us = tau_o[0] + dt * np.arange(n_steps + 1)
    jndex = np.flatnonzero(np.abs(tau_us - TAU_RW) < 1e-9 * max(dt, 1.0))
    if len(jndex) == 0:
        raise RangeError(f"Upsampled grid with step {dt} doesn't contain "
                         f"tau = {TAU_RW}", tau_us)

    tau_us[jndex[0]] = TAU_RW
    allan_us = np.interp(tau_us, tau_o, allan_o)
    return allan_us[jndex[0]]
