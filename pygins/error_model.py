"""INS error model to use in the navigation Kalman filter.

An INS error model is a system of non-stationary (depends on the trajectory) linear
differential equations which describe time evolution of INS errors::

    dx/dt = F @ x + G @ w

Where ``x`` is the error state vector, ``w`` is the vector of white noises with
the intensity matrix ``Q``. Matrices ``F`` and ``G`` are derived from the current
navigation solution and must be recomputed at each step.

The error state consists of 15 elements: attitude errors, velocity errors,
position errors, gyro biases and accelerometer biases. Optionally the 16th element
models a constant bias of a magnetic heading sensor.

Classes
-------
.. autosummary::
    :toctree: generated/

    ErrorStateModel

References
----------
.. [1] D. H. Titterton, J. L. Weston, "Strapdown Inertial Navigation Technology",
       2nd edition, Eq. 12.18
.. [2] J. Farrell, "Aided Navigation: GPS With High Rate Sensors", Eq. 11.108
"""
import numpy as np
from scipy.spatial.transform import Rotation
from . import earth, transform, util
from .errors import ConfigurationError, SingularityError
from .inertial_sensor import SensorModel


#: Minimum absolute value of cosine of latitude for which the error model is valid.
COS_LAT_MIN = 1e-9


class ErrorStateModel:
    """INS error model with sensor biases.

    Attitude error ``psi`` is defined such that the computed body-to-navigation
    matrix is ``(I - [psi x]) @ mat_nb``. Velocity and position errors are
    differences between computed and true values, the position errors are
    errors of latitude, longitude (in radians) and altitude.

    Bias states have the following meaning: accelerometer bias states are residual
    errors of the compensated accelerometer readings, gyro bias states are residual
    errors of the compensated gyro readings taken with the opposite sign.
    Use `correct_sensors` to fold them into the sensor bias estimates.

    The choice between 15 and 16 states is made once at construction.

    Parameters
    ----------
    gyro_model, accel_model : `pygins.inertial_sensor.SensorModel` or None, optional
        Sensor models for gyros and accelerometers. If None (default), the
        default model (zero noises, random walk biases) will be used.
    with_magnetometer : bool, optional
        Whether to include the magnetic heading bias state. Default is False.
    heading_bias_walk : float, optional
        Intensity (root PSD) of noise driving the heading bias. Default is 0.

    Attributes
    ----------
    states : list of str
        Names of the error states.
    noises : list of str
        Names of the process noises.
    heading_bias : float
        Current estimate of magnetic heading bias.
    """
    PHI1 = 0
    PHI2 = 1
    PHI3 = 2
    DVN = 3
    DVE = 4
    DVD = 5
    DLAT = 6
    DLON = 7
    DALT = 8
    BGX = 9
    BGY = 10
    BGZ = 11
    BAX = 12
    BAY = 13
    BAZ = 14
    BMAG = 15
    PHI = [PHI1, PHI2, PHI3]
    DV = [DVN, DVE, DVD]
    DP = [DLAT, DLON, DALT]
    BG = [BGX, BGY, BGZ]
    BA = [BAX, BAY, BAZ]

    GYRO_NOISE = [0, 1, 2]
    ACCEL_NOISE = [3, 4, 5]
    GYRO_BIAS_NOISE = [6, 7, 8]
    ACCEL_BIAS_NOISE = [9, 10, 11]
    HEADING_BIAS_NOISE = 12

    def __init__(self, gyro_model=None, accel_model=None, with_magnetometer=False,
                 heading_bias_walk=0.0):
        if gyro_model is None:
            gyro_model = SensorModel()
        if accel_model is None:
            accel_model = SensorModel()
        if not np.isfinite(heading_bias_walk) or heading_bias_walk < 0:
            raise ConfigurationError("`heading_bias_walk` must be finite and "
                                     "non-negative", heading_bias_walk)

        self.gyro_model = gyro_model
        self.accel_model = accel_model
        self.with_magnetometer = with_magnetometer
        self.heading_bias_walk = heading_bias_walk
        self.heading_bias = 0.0

        self.states = ['PHI1', 'PHI2', 'PHI3', 'DVN', 'DVE', 'DVD',
                       'DLAT', 'DLON', 'DALT', 'BGX', 'BGY', 'BGZ',
                       'BAX', 'BAY', 'BAZ']
        self.noises = ['NGX', 'NGY', 'NGZ', 'NAX', 'NAY', 'NAZ',
                       'WGX', 'WGY', 'WGZ', 'WAX', 'WAY', 'WAZ']
        if with_magnetometer:
            self.states.append('BMAG')
            self.noises.append('WMAG')

    @property
    def n_states(self):
        return len(self.states)

    @property
    def n_noises(self):
        return len(self.noises)

    def system_matrices(self, velocity_n, lat, alt, f_n, mat_nb):
        """Compute matrices which govern the error model differential equations.

        Parameters
        ----------
        velocity_n : array_like, shape (3,)
            Velocity resolved in NED frame.
        lat, alt : float
            Latitude and altitude.
        f_n : array_like, shape (3,)
            Specific force resolved in NED frame.
        mat_nb : array_like, shape (3, 3)
            Body-to-navigation rotation matrix.

        Returns
        -------
        F : ndarray, shape (n_states, n_states)
            Error dynamics matrix.
        G : ndarray, shape (n_states, n_noises)
            Noise input matrix.

        Raises
        ------
        SingularityError
            If latitude is too close to a pole.
        """
        VN, VE, VD = velocity_n
        mat_nb = np.asarray(mat_nb)

        sin_lat = np.sin(lat)
        cos_lat = np.cos(lat)
        if abs(cos_lat) < COS_LAT_MIN:
            raise SingularityError("Error model is singular at the poles", lat)
        tan_lat = sin_lat / cos_lat

        rm, rn = earth.radius(lat)
        ro = np.sqrt(rn * rm) + alt
        om = earth.RATE

        F11 = np.array([
            [0, -(om * sin_lat + VE / ro * tan_lat), VN / ro],
            [om * sin_lat + VE / ro * tan_lat, 0, om * cos_lat + VE / ro],
            [-VN / ro, -om * cos_lat - VE / ro, 0]
        ])
        F12 = np.array([
            [0, 1 / ro, 0],
            [-1 / ro, 0, 0],
            [0, -tan_lat / ro, 0]
        ])
        F13 = np.array([
            [-om * sin_lat, 0, -VE / ro ** 2],
            [0, 0, VN / ro ** 2],
            [-om * cos_lat - VE / (ro * cos_lat ** 2), 0, VE * tan_lat / ro ** 2]
        ])

        F21 = util.skew_matrix(f_n)
        F22 = np.array([
            [VD / ro, -2 * (om * sin_lat + VE / ro * tan_lat), VN / ro],
            [2 * om * sin_lat + VE / ro * tan_lat, (VN * tan_lat + VD) / ro,
             2 * om * cos_lat + VE / ro],
            [-2 * VN / ro, -2 * (om * cos_lat + VE / ro), 0]
        ])

        res = rn * np.sqrt(cos_lat ** 2 + (1 - earth.E2) ** 2 * sin_lat ** 2)
        g0 = earth.gravity(lat, alt)[2]
        F23 = np.array([
            [-VE * (2 * om * cos_lat + VE / (ro * cos_lat ** 2)), 0,
             (VE ** 2 * tan_lat - VN * VD) / ro ** 2],
            [2 * om * (VN * cos_lat - VD * sin_lat) + VN * VE / (ro * cos_lat ** 2), 0,
             -VE / ro ** 2 * (VN * tan_lat + VD)],
            [2 * om * VE * sin_lat, 0,
             VE ** 2 / (rn + alt) ** 2 + VN ** 2 / (rm + alt) ** 2 - 2 * g0 / res]
        ])

        F32 = np.diag([1 / ro, 1 / (ro * cos_lat), -1])
        F33 = np.array([
            [0, 0, -VN / ro ** 2],
            [VE * tan_lat / (ro * cos_lat), 0, -VE / (ro ** 2 * cos_lat)],
            [0, 0, 0]
        ])

        F = np.zeros((self.n_states, self.n_states))
        F[np.ix_(self.PHI, self.PHI)] = F11
        F[np.ix_(self.PHI, self.DV)] = F12
        F[np.ix_(self.PHI, self.DP)] = F13
        F[np.ix_(self.PHI, self.BG)] = mat_nb
        F[np.ix_(self.DV, self.PHI)] = F21
        F[np.ix_(self.DV, self.DV)] = F22
        F[np.ix_(self.DV, self.DP)] = F23
        F[np.ix_(self.DV, self.BA)] = mat_nb
        F[np.ix_(self.DP, self.DV)] = F32
        F[np.ix_(self.DP, self.DP)] = F33
        F[self.BG, self.BG] = self.gyro_model.feedback
        F[self.BA, self.BA] = self.accel_model.feedback

        G = np.zeros((self.n_states, self.n_noises))
        G[np.ix_(self.PHI, self.GYRO_NOISE)] = mat_nb
        G[np.ix_(self.DV, self.ACCEL_NOISE)] = mat_nb
        G[self.BG, self.GYRO_BIAS_NOISE] = 1
        G[self.BA, self.ACCEL_BIAS_NOISE] = 1
        if self.with_magnetometer:
            G[self.BMAG, self.HEADING_BIAS_NOISE] = 1

        return F, G

    def noise_matrix(self):
        """Compute intensity matrix of the process noises.

        Returns
        -------
        Q : ndarray, shape (n_noises, n_noises)
            Diagonal matrix with squared root PSDs of the noises.
        """
        q = np.hstack((self.gyro_model.noise, self.accel_model.noise,
                       self.gyro_model.bias_walk, self.accel_model.bias_walk))
        if self.with_magnetometer:
            q = np.append(q, self.heading_bias_walk)
        return np.diag(q ** 2)

    def initial_covariance(self, lat, alt, position_sd, velocity_sd, level_sd,
                           azimuth_sd, heading_bias_sd=0.0):
        """Compute the initial covariance matrix.

        Parameters
        ----------
        lat, alt : float
            Initial latitude and altitude.
        position_sd : float
            Position standard deviation in meters.
        velocity_sd : float
            Velocity standard deviation in m/s.
        level_sd : float
            Roll and pitch standard deviation in radians.
        azimuth_sd : float
            Heading standard deviation in radians.
        heading_bias_sd : float, optional
            Magnetic heading bias standard deviation. Default is 0.

        Returns
        -------
        P : ndarray, shape (n_states, n_states)
            Covariance matrix.
        """
        rm, rn = earth.radius(lat)
        sd = np.zeros(self.n_states)
        sd[self.PHI] = [level_sd, level_sd, azimuth_sd]
        sd[self.DV] = velocity_sd
        sd[self.DP] = [position_sd / (rm + alt),
                       position_sd / ((rn + alt) * np.cos(lat)),
                       position_sd]
        sd[self.BG] = self.gyro_model.bias_sd
        sd[self.BA] = self.accel_model.bias_sd
        if self.with_magnetometer:
            sd[self.BMAG] = heading_bias_sd
        return np.diag(sd ** 2)

    def position_error_jacobian(self):
        """Compute Jacobian of latitude, longitude and altitude errors.

        Returns
        -------
        ndarray, shape (3, n_states)
        """
        result = np.zeros((3, self.n_states))
        result[:, self.DP] = np.eye(3)
        return result

    def ned_velocity_error_jacobian(self):
        """Compute Jacobian of NED velocity errors.

        Returns
        -------
        ndarray, shape (3, n_states)
        """
        result = np.zeros((3, self.n_states))
        result[:, self.DV] = np.eye(3)
        return result

    def heading_error_jacobian(self, rph):
        """Compute Jacobian of the bias compensated magnetic heading error.

        Parameters
        ----------
        rph : array_like, shape (3,)
            Roll, pitch and heading in radians.

        Returns
        -------
        ndarray, shape (1, n_states)
        """
        if not self.with_magnetometer:
            raise ConfigurationError("Magnetic heading requires the model with "
                                     "the heading bias state")
        result = np.zeros((1, self.n_states))
        result[0, self.PHI] = transform.phi_to_delta_rph(rph)[2]
        result[0, self.BMAG] = 1
        return result

    def transform_to_output(self, lat, alt, rph):
        """Compute matrix transforming the error states into output errors.

        Output errors are NED position errors in meters, NED velocity errors and
        roll, pitch and heading errors.

        Parameters
        ----------
        lat, alt : float
            Latitude and altitude.
        rph : array_like, shape (3,)
            Roll, pitch and heading.

        Returns
        -------
        ndarray, shape (9, n_states)
        """
        rm, rn = earth.radius(lat)
        result = np.zeros((9, self.n_states))
        result[0, self.DLAT] = rm + alt
        result[1, self.DLON] = (rn + alt) * np.cos(lat)
        result[2, self.DALT] = -1
        result[3:6, self.DV] = np.eye(3)
        result[6:9, self.PHI] = transform.phi_to_delta_rph(rph)
        return result

    def correct_pva(self, lla, velocity_n, mat_nb, x):
        """Correct position-velocity-attitude with estimated errors.

        Parameters
        ----------
        lla : ndarray, shape (3,)
            Latitude, longitude and altitude.
        velocity_n : ndarray, shape (3,)
            Velocity resolved in NED frame.
        mat_nb : ndarray, shape (3, 3)
            Body-to-navigation rotation matrix.
        x : ndarray, shape (n_states,)
            Error vector.

        Returns
        -------
        lla, velocity_n, mat_nb
            Corrected values.
        """
        mat_nb = Rotation.from_rotvec(x[self.PHI]).as_matrix() @ mat_nb
        return lla - x[self.DP], velocity_n - x[self.DV], mat_nb

    def correct_sensors(self, x):
        """Fold estimated bias errors into the sensor bias estimates.

        Parameters
        ----------
        x : ndarray, shape (n_states,)
            Error vector.
        """
        self.gyro_model.update_estimates(-x[self.BG])
        self.accel_model.update_estimates(x[self.BA])
        if self.with_magnetometer:
            self.heading_bias -= x[self.BMAG]
