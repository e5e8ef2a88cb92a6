"""Navigation Kalman filter.

Module provides the loosely coupled INS/GNSS filter in feedback (extended Kalman
filter) form. It relies on functionality provided by `pygins.inertial_sensor`,
`pygins.error_model`, `pygins.kalman`, `pygins.strapdown` and
`pygins.measurements` modules.

At each IMU interval the error model matrices are recomputed at the current
navigation solution, the covariance is propagated and the navigation solution is
advanced by the strapdown algorithm. When a measurement epoch is reached, all
available measurements are processed, the estimated errors are folded into the
navigation solution and sensor bias estimates and the error state is reset to zero.

Refer to [1]_ for the discussion of Kalman filtering in context of inertial navigation.

Classes
-------
.. autosummary::
    :toctree: generated/

    Phase
    FeedbackFilter

Functions
---------
.. autosummary::
    :toctree: generated/

    run_feedback_filter

References
----------
.. [1] P. D. Groves, "Principles of GNSS, Inertial, and Multisensor Integrated
       Navigation Systems", 2nd edition
"""
import enum
import logging
import numpy as np
import pandas as pd
from . import kalman, strapdown, transform, util
from .error_model import ErrorStateModel
from .errors import ConfigurationError, FilterError
from .measurements import MagneticHeading
from .util import THETA_COLS, DV_COLS, BIAS_COLS, TRAJECTORY_ERROR_COLS

logger = logging.getLogger(__name__)


class Phase(enum.Enum):
    """Phase of the filter run."""
    INIT = 'init'
    PREDICT = 'predict'
    UPDATE = 'update'
    DONE = 'done'


def _collect_measurement_times(measurements, start_time, end_time):
    if not measurements:
        return np.array([])
    times = np.hstack([np.asarray(measurement.data.index, dtype=float)
                       for measurement in measurements])
    times = np.sort(np.unique(times))
    return times[(times >= start_time) & (times <= end_time)]


class FeedbackFilter:
    """Navigation filter with feedback corrections.

    Parameters
    ----------
    initial_pva : Series
        Initial position-velocity-attitude, typically from an alignment procedure.
    position_sd : float
        Initial position uncertainty in meters.
    velocity_sd : float
        Initial velocity uncertainty in m/s.
    level_sd : float
        Initial roll and pitch uncertainty in radians.
    azimuth_sd : float
        Initial heading uncertainty in radians.
    gyro_model, accel_model : `pygins.inertial_sensor.SensorModel` or None, optional
        Sensor models. If None (default), models with zero noises and random walk
        biases are used. Bias estimates are stored in the models.
    measurements : list of `pygins.measurements.Measurement` or None, optional
        Measurements to process. If None (default), pure inertial navigation
        with covariance propagation is done.
    with_magnetometer : bool, optional
        Whether to use the error model with the magnetic heading bias state.
        Must be True when `pygins.measurements.MagneticHeading` is used.
        Default is False.
    heading_bias_sd : float, optional
        Initial uncertainty of the magnetic heading bias. Default is 0.
    heading_bias_walk : float, optional
        Intensity of the noise driving the magnetic heading bias. Default is 0.
    time_tolerance : float or None, optional
        A measurement at time ``t`` is processed at the first IMU time ``t_k``
        such that ``t <= t_k + time_tolerance``. If None (default), half of the
        median IMU sampling period is used.

    Attributes
    ----------
    phase : `Phase`
        Current phase of the run.
    error_model : `pygins.error_model.ErrorStateModel`
        Error model used by the filter.
    """
    def __init__(self, initial_pva, position_sd, velocity_sd, level_sd, azimuth_sd,
                 gyro_model=None, accel_model=None, measurements=None,
                 with_magnetometer=False, heading_bias_sd=0.0, heading_bias_walk=0.0,
                 time_tolerance=None):
        if measurements is None:
            measurements = []
        if not with_magnetometer and any(isinstance(measurement, MagneticHeading)
                                         for measurement in measurements):
            raise ConfigurationError("MagneticHeading measurement requires "
                                     "`with_magnetometer=True`")
        if time_tolerance is not None and not time_tolerance >= 0:
            raise ConfigurationError("`time_tolerance` must be non-negative",
                                     time_tolerance)

        self.initial_pva = initial_pva
        self.position_sd = position_sd
        self.velocity_sd = velocity_sd
        self.level_sd = level_sd
        self.azimuth_sd = azimuth_sd
        self.measurements = measurements
        self.heading_bias_sd = heading_bias_sd
        self.time_tolerance = time_tolerance
        self.error_model = ErrorStateModel(gyro_model, accel_model, with_magnetometer,
                                           heading_bias_walk)
        self.phase = Phase.INIT

    def _initialize(self, start_time):
        self.phase = Phase.INIT
        error_model = self.error_model
        error_model.gyro_model.reset_estimates()
        error_model.accel_model.reset_estimates()
        error_model.heading_bias = 0.0
        self.integrator = strapdown.Integrator(self.initial_pva, start_time)
        self.x = np.zeros(error_model.n_states)
        self.P = error_model.initial_covariance(
            self.initial_pva['lat'], self.initial_pva['alt'], self.position_sd,
            self.velocity_sd, self.level_sd, self.azimuth_sd, self.heading_bias_sd)
        self.innovations = {type(measurement).__name__: []
                            for measurement in self.measurements}
        self.innovations_times = {name: [] for name in self.innovations}

    def _predict(self, time, dt, theta, dv):
        self.phase = Phase.PREDICT
        error_model = self.error_model
        theta = error_model.gyro_model.correct_increments(dt, theta)
        dv = error_model.accel_model.correct_increments(dt, dv)

        lla, velocity_n, mat_nb = self.integrator.get_state()
        f_n = mat_nb @ dv / dt
        F, G = error_model.system_matrices(velocity_n, lla[0], lla[2], f_n, mat_nb)
        Q = error_model.noise_matrix()
        self.x, self.P = kalman.propagate(self.x, self.P, F, G, Q, dt)
        self.integrator.step(time, dt, theta, dv)

    def _update(self, measurement_time):
        self.phase = Phase.UPDATE
        error_model = self.error_model
        pva = self.integrator.get_pva()
        for measurement in self.measurements:
            ret = measurement.compute_matrices(measurement_time, pva, error_model)
            if ret is None:
                continue
            z, H, R = ret
            self.x, self.P, innovation = kalman.update(self.x, self.P, z, H, R)
            name = type(measurement).__name__
            self.innovations[name].append(innovation)
            self.innovations_times[name].append(measurement_time)
            logger.debug("%s at %s: standardized innovation norm %.3g",
                         name, measurement_time, np.linalg.norm(innovation))

        lla, velocity_n, mat_nb = self.integrator.get_state()
        self.integrator.set_state(*error_model.correct_pva(lla, velocity_n, mat_nb,
                                                           self.x))
        error_model.correct_sensors(self.x)
        self.x = np.zeros(error_model.n_states)

    def _record(self, result):
        error_model = self.error_model
        lla, _, mat_nb = self.integrator.get_state()
        T = error_model.transform_to_output(lla[0], lla[2], transform.mat_to_rph(mat_nb))
        sd = np.diag(self.P) ** 0.5
        result['trajectory_sd'].append(np.sum((T @ self.P) * T, axis=1) ** 0.5)
        result['gyro'].append(error_model.gyro_model.bias.copy())
        result['gyro_sd'].append(sd[error_model.BG])
        result['accel'].append(error_model.accel_model.bias.copy())
        result['accel_sd'].append(sd[error_model.BA])
        result['heading_bias'].append(error_model.heading_bias)
        result['heading_bias_sd'].append(
            sd[error_model.BMAG] if error_model.with_magnetometer else 0.0)

    def run(self, imu):
        """Run the filter.

        Parameters
        ----------
        imu : DataFrame
            IMU readings indexed by time with gyro and accelerometer columns.
            The navigation starts at the first IMU sample.

        Returns
        -------
        Bunch with the following fields:

            trajectory : DataFrame
                Estimated trajectory at IMU times.
            trajectory_sd : DataFrame
                Estimated trajectory error standard deviations.
            gyro, gyro_sd : DataFrame
                Estimated gyro biases and their standard deviations.
            accel, accel_sd : DataFrame
                Estimated accelerometer biases and their standard deviations.
            heading_bias, heading_bias_sd : Series
                Estimated magnetic heading bias and its standard deviation. Zeros
                when the magnetometer is not used.
            innovations : dict of DataFrame
                For each measurement class name contains DataFrame with
                standardized measurement innovations.

        Raises
        ------
        FilterError
            Any error during the run with `step` and `time` attributes set.
        """
        if len(imu) < 2:
            raise ConfigurationError("At least 2 IMU samples are required", len(imu))
        increments = strapdown.compute_increments_from_imu(imu)
        times = np.asarray(imu.index, dtype=float)
        dt = increments['dt'].values
        theta = increments[THETA_COLS].values
        dv = increments[DV_COLS].values

        time_tolerance = self.time_tolerance
        if time_tolerance is None:
            time_tolerance = 0.5 * np.median(dt)
        measurement_times = _collect_measurement_times(
            self.measurements, times[0] - time_tolerance, times[-1] + time_tolerance)
        measurement_times = np.append(measurement_times, np.inf)

        logger.info("Running feedback filter on %d IMU samples from %s to %s, "
                    "%d measurement epochs", len(times), times[0], times[-1],
                    len(measurement_times) - 1)

        result = {key: [] for key in ['trajectory_sd', 'gyro', 'gyro_sd', 'accel',
                                      'accel_sd', 'heading_bias', 'heading_bias_sd']}
        measurement_index = 0
        step = 0
        try:
            self._initialize(times[0])
            for step, time in enumerate(times):
                if step > 0:
                    self._predict(time, dt[step - 1], theta[step - 1], dv[step - 1])
                while measurement_times[measurement_index] <= time + time_tolerance:
                    self._update(measurement_times[measurement_index])
                    measurement_index += 1
                self._record(result)
        except FilterError as error:
            error.step = step
            error.time = times[step]
            logger.error("Feedback filter failed in %s phase: %s",
                         self.phase.value, error)
            raise

        self.phase = Phase.DONE
        logger.info("Feedback filter finished, %d measurement epochs processed",
                    measurement_index)

        index = pd.Index(times, name='time')
        innovations = {}
        for measurement in self.measurements:
            name = type(measurement).__name__
            innovations[name] = pd.DataFrame(
                np.asarray(self.innovations[name]).reshape(
                    -1, len(measurement.columns)),
                index=self.innovations_times[name], columns=measurement.columns)

        return util.Bunch(
            trajectory=self.integrator.trajectory,
            trajectory_sd=pd.DataFrame(result['trajectory_sd'], index=index,
                                       columns=TRAJECTORY_ERROR_COLS),
            gyro=pd.DataFrame(result['gyro'], index=index, columns=BIAS_COLS),
            gyro_sd=pd.DataFrame(result['gyro_sd'], index=index, columns=BIAS_COLS),
            accel=pd.DataFrame(result['accel'], index=index, columns=BIAS_COLS),
            accel_sd=pd.DataFrame(result['accel_sd'], index=index, columns=BIAS_COLS),
            heading_bias=pd.Series(result['heading_bias'], index=index),
            heading_bias_sd=pd.Series(result['heading_bias_sd'], index=index),
            innovations=innovations)


def run_feedback_filter(initial_pva, position_sd, velocity_sd, level_sd, azimuth_sd,
                        imu, gyro_model=None, accel_model=None, measurements=None,
                        with_magnetometer=False, heading_bias_sd=0.0,
                        heading_bias_walk=0.0, time_tolerance=None):
    """Run navigation filter with feedback corrections.

    Also known as extended Kalman filter (EKF). This is a shortcut for creating
    `FeedbackFilter` and calling its `run` method, refer to the class for the
    description of parameters and the result.
    """
    return FeedbackFilter(initial_pva, position_sd, velocity_sd, level_sd, azimuth_sd,
                          gyro_model, accel_model, measurements, with_magnetometer,
                          heading_bias_sd, heading_bias_walk,
                          time_tolerance).run(imu)
