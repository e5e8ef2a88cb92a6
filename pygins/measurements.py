"""Measurement models for the navigation Kalman filter.

In context of inertial navigation measurements are obtained from sensors other than
IMU. In a Kalman filter a measurement is processed by forming a difference between
the predicted and the measured vectors and linearly relating it to the error vector::

    z = Z_ins - Z = H @ x + v

Where

    - ``Z`` - measured vector
    - ``Z_ins`` - predicted vector using the current INS state
    - ``z`` - innovation vector
    - ``x`` - error state vector
    - ``H`` - measurement Jacobian
    - ``v`` - noise vector, assumed to have zero mean and known variance

The module provides a base class `Measurement` which abstracts this concept and
implementations for loosely coupled GNSS measurements and a magnetic heading sensor.

Measurement data may contain a boolean column 'valid', samples with False value
are not processed.

Classes
-------
.. autosummary::
    :toctree: generated/

    Measurement
    Position
    NedVelocity
    MagneticHeading

References
----------
.. [1] P. D. Groves, "Principles of GNSS, Inertial, and Multisensor Integrated
       Navigation Systems", 2nd edition
"""
import logging
import numpy as np
from . import earth, util
from .errors import ConfigurationError
from .util import LLA_COLS, VEL_COLS, RPH_COLS

logger = logging.getLogger(__name__)


def _verify_sd(sd, n, name):
    sd = np.asarray(sd, dtype=float)
    if sd.ndim == 0:
        sd = np.resize(sd, n)
    elif sd.shape != (n,):
        raise ConfigurationError(f"`{name}` must be float or array with shape ({n},)",
                                 sd)
    if np.any(~np.isfinite(sd)) or np.any(sd < 0):
        raise ConfigurationError(f"`{name}` must be finite and non-negative", sd)
    return sd


class Measurement:
    """Base class for measurement models.

    To introduce a new measurement `_compute_matrices` method needs to be
    implemented. See Also section contains links to already implemented
    measurements.

    Parameters
    ----------
    data : DataFrame
        Measured values as a DataFrame indexed by time. The optional boolean column
        'valid' marks samples which can be used.

    Attributes
    ----------
    data : DataFrame
        Data saved from the constructor.
    valid : Series or None
        Validity flags or None if all samples are valid.

    See Also
    --------
    Position
    NedVelocity
    MagneticHeading
    """
    columns = []

    def __init__(self, data):
        self.data = data[self.columns]
        if 'valid' in data:
            self.valid = data['valid'].astype(bool)
        else:
            self.valid = None

    def compute_matrices(self, time, pva, error_model):
        """Compute matrices for a single linearized measurement.

        Parameters
        ----------
        time : float
            Time of the measurement.
        pva : Series
            Position-velocity-attitude estimates from INS at `time`.
        error_model : `pygins.error_model.ErrorStateModel`
            Error model used in the filter.

        Returns
        -------
        z : ndarray, shape (n_obs,)
            Observation vector. A difference between the value derived from `pva`
            and an observed value.
        H : ndarray, shape (n_obs, n_states)
            Observation model matrix. It relates the vector `z` to the INS error states.
        R : ndarray, shape (n_obs, n_obs)
            Covariance matrix of the measurement error.

        None is returned if the measurement is not available at `time` or marked as
        invalid.
        """
        if time not in self.data.index:
            return None
        if self.valid is not None and not self.valid.loc[time]:
            logger.debug("Skipping invalid %s sample at %s", type(self).__name__, time)
            return None
        return self._compute_matrices(self.data.loc[time].values, pva, error_model)

    def _compute_matrices(self, value, pva, error_model):
        raise NotImplementedError


class Position(Measurement):
    """Measurement of latitude, longitude and altitude (from GNSS or any other source).

    Parameters
    ----------
    data : DataFrame
        Must be indexed by time and contain columns 'lat', 'lon' and 'alt' for
        latitude, longitude (in radians) and altitude.
    sd : float or array_like, shape (3,)
        Measurement accuracy in meters for North, East and Down directions.
    """
    columns = LLA_COLS

    def __init__(self, data, sd):
        super(Position, self).__init__(data)
        self.sd = _verify_sd(sd, 3, "sd")

    def _compute_matrices(self, value, pva, error_model):
        lat = pva['lat']
        alt = pva['alt']
        rm, rn = earth.radius(lat)
        z = pva[LLA_COLS].values - value
        z[1] = util.to_pi_range(z[1])
        H = error_model.position_error_jacobian()
        R = np.diag((self.sd / [rm + alt, (rn + alt) * np.cos(lat), 1]) ** 2)
        return z, H, R


class NedVelocity(Measurement):
    """Measurement of velocity resolved in NED frame (from GNSS or any other source).

    Parameters
    ----------
    data : DataFrame
        Must be indexed by time and contain 'VN', 'VE' and 'VD' columns.
    sd : float or array_like, shape (3,)
        Measurement accuracy in m/s.
    """
    columns = VEL_COLS

    def __init__(self, data, sd):
        super(NedVelocity, self).__init__(data)
        self.R = np.diag(_verify_sd(sd, 3, "sd") ** 2)

    def _compute_matrices(self, value, pva, error_model):
        z = pva[VEL_COLS].values - value
        H = error_model.ned_velocity_error_jacobian()
        return z, H, self.R


class MagneticHeading(Measurement):
    """Measurement of heading by a magnetic sensor with unknown constant bias.

    The measured heading is compensated by the current bias estimate of the error
    model, the bias residual is estimated as the dedicated error state. The
    magnetic declination is assumed to be already accounted for.

    Parameters
    ----------
    data : DataFrame
        Must be indexed by time and contain 'heading' column in radians.
    sd : float
        Measurement accuracy in radians.
    """
    columns = ['heading']

    def __init__(self, data, sd):
        super(MagneticHeading, self).__init__(data)
        self.R = np.diag(_verify_sd(sd, 1, "sd") ** 2)

    def _compute_matrices(self, value, pva, error_model):
        H = error_model.heading_error_jacobian(pva[RPH_COLS])
        z = util.to_pi_range(
            np.atleast_1d(pva['heading'] - (value - error_model.heading_bias)))
        return z, H, self.R
