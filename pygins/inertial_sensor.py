"""Description of inertial sensors errors.

Module contains classes to describe the error model of an inertial sensor triad
(gyros or accelerometers) used by the navigation filter.

Gyroscopes and accelerometers are treated as independent blocks, that is two objects
are required to describe a full IMU.

Each sensor bias is modelled either as a random walk or as a first-order
Gauss-Markov process. The kind is selected per axis by the bias correlation time,
where infinity stands for the random walk.

Classes
-------
.. autosummary::
    :toctree: generated/

    RandomWalk
    GaussMarkov
    SensorModel

Functions
---------
.. autosummary::
    :toctree: generated/

    bias_model
"""
import numpy as np
from . import allan
from .errors import ConfigurationError


class RandomWalk:
    """Random walk bias model.

    The bias derivative doesn't depend on the bias itself, thus its variance grows
    without a bound under the driving noise.
    """
    feedback = 0.0

    def __eq__(self, other):
        return isinstance(other, RandomWalk)

    def __hash__(self):
        return hash(RandomWalk)

    def __repr__(self):
        return "RandomWalk()"


class GaussMarkov:
    """First-order Gauss-Markov bias model.

    The bias follows ``db/dt = -b / correlation_time + w``.

    Parameters
    ----------
    correlation_time : float
        Correlation time in seconds, must be positive and finite.
    """
    def __init__(self, correlation_time):
        correlation_time = float(correlation_time)
        if not np.isfinite(correlation_time) or correlation_time <= 0:
            raise ConfigurationError(
                "Gauss-Markov correlation time must be positive and finite",
                correlation_time)
        self.correlation_time = correlation_time

    @property
    def feedback(self):
        return -1 / self.correlation_time

    def __eq__(self, other):
        return (isinstance(other, GaussMarkov) and
                other.correlation_time == self.correlation_time)

    def __hash__(self):
        return hash((GaussMarkov, self.correlation_time))

    def __repr__(self):
        return f"GaussMarkov({self.correlation_time})"


def bias_model(correlation_time):
    """Create a bias model from a correlation time.

    Parameters
    ----------
    correlation_time : float, `RandomWalk` or `GaussMarkov`
        Correlation time. Positive infinity selects `RandomWalk`. Already
        constructed models are returned as is.

    Returns
    -------
    `RandomWalk` or `GaussMarkov`
    """
    if isinstance(correlation_time, (RandomWalk, GaussMarkov)):
        return correlation_time
    if correlation_time == np.inf:
        return RandomWalk()
    return GaussMarkov(correlation_time)


class SensorModel:
    """Error model of inertial sensor triad (gyros or accelerometers).

    Below numerical parameters might be floats or arrays. In the former case the
    parameter is assumed to be the same for each of 3 sensors.

    All parameters are measured in International System of Units.

    Parameters
    ----------
    bias_sd : array_like or None, optional
        Initial standard deviation of a bias. None (default) corresponds to zero.
    noise : array_like or None, optional
        Intensity of additive white noise (root PSD). Known as an angle random walk for
        gyros and velocity random walk for accelerometers.
    bias_walk : array_like or None, optional
        Intensity (root PSD) of white noise which drives the bias. Known as
        a rate random walk for gyros.
    correlation_time : array_like or None, optional
        Bias correlation times. Each element is a positive float, ``numpy.inf``
        (random walk) or already constructed `RandomWalk` or `GaussMarkov`.
        None (default) corresponds to random walk for all axes.

    Attributes
    ----------
    bias_models : list of `RandomWalk` or `GaussMarkov`
        Bias model for each axis.
    bias : ndarray, shape (3,)
        Current bias estimate. Updated by the navigation filter.
    """
    def __init__(self, bias_sd=None, noise=None, bias_walk=None,
                 correlation_time=None):
        self.bias_sd = self._verify_param(bias_sd, "bias_sd")
        self.noise = self._verify_param(noise, "noise")
        self.bias_walk = self._verify_param(bias_walk, "bias_walk")

        if correlation_time is None:
            correlation_time = np.inf
        if isinstance(correlation_time, (RandomWalk, GaussMarkov)):
            correlation_time = [correlation_time] * 3
        elif np.ndim(correlation_time) == 0:
            correlation_time = [correlation_time] * 3
        if len(correlation_time) != 3:
            raise ConfigurationError("`correlation_time` might be float or sequence "
                                     "of 3 elements", correlation_time)
        self.bias_models = [bias_model(value) for value in correlation_time]

        self.bias = np.zeros(3)

    @staticmethod
    def _verify_param(param, name):
        if param is None:
            return np.zeros(3)

        param = np.asarray(param, dtype=float)
        if param.ndim == 0:
            param = np.resize(param, 3)
        elif param.shape != (3,):
            raise ConfigurationError(f"`{name}` might be float or array with shape "
                                     f"(3,)", param)
        if np.any(~np.isfinite(param)) or np.any(param < 0):
            raise ConfigurationError(f"`{name}` must be finite and non-negative",
                                     param)

        return param

    @classmethod
    def from_allan_variance(cls, tau, allan_variance, dt, bias_sd=None,
                            bias_walk=None, correlation_time=None):
        """Create model with white noise intensity read from Allan variance curves.

        The noise root PSD for each axis is computed as the square root of the Allan
        variance at ``tau = 1`` second obtained by `pygins.allan.get_random_walk`.

        Parameters
        ----------
        tau : array_like, shape (n,)
            Averaging times.
        allan_variance : array_like, shape (n,) or (n, 3)
            Allan variance curves. A single curve is used for all axes.
        dt : float
            Sampling period of the analysed signal.
        bias_sd, bias_walk, correlation_time
            Passed to the constructor.

        Returns
        -------
        SensorModel
        """
        allan_variance = np.asarray(allan_variance, dtype=float)
        if allan_variance.ndim == 1:
            allan_variance = np.tile(allan_variance[:, None], 3)
        noise = [allan.get_random_walk(tau, allan_variance[:, axis], dt) ** 0.5
                 for axis in range(3)]
        return cls(bias_sd, noise, bias_walk, correlation_time)

    @property
    def feedback(self):
        """Diagonal of the bias dynamics matrix."""
        return np.array([model.feedback for model in self.bias_models])

    def reset_estimates(self):
        self.bias = np.zeros(3)

    def update_estimates(self, delta):
        self.bias += delta

    def correct_increments(self, dt, increments):
        return increments - self.bias * dt
