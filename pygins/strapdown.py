"""Strapdown INS integration algorithms.

This module provides implementation of the classic "strapdown algorithm" to obtain
position, velocity and attitude by integration of IMU readings.
The implementation follows [1]_ and [2]_ with some simplifications.

Functions
---------
.. autosummary::
    :toctree: generated/

    compute_increments_from_imu

Classes
-------
.. autosummary::
    :toctree: generated/

    Integrator

References
----------
.. [1] P. G. Savage, "Strapdown Inertial Navigation Integration Algorithm
       Design Part 1: Attitude Algorithms", Journal of Guidance, Control,
       and Dynamics 1998, Vol. 21, no. 2.
.. [2] P. G. Savage, "Strapdown Inertial Navigation Integration Algorithm
       Design Part 2: Velocity and Position Algorithms", Journal of
       Guidance, Control, and Dynamics 1998, Vol. 21, no. 2.
"""
import numpy as np
import pandas as pd
from . import transform
from .errors import ConfigurationError
from .util import (LLA_COLS, RPH_COLS, VEL_COLS, GYRO_COLS, ACCEL_COLS, THETA_COLS,
                   DV_COLS, TRAJECTORY_COLS)
from ._numba_integrate import integrate


def compute_increments_from_imu(imu):
    """Compute attitude and velocity increments from IMU readings.

    This function transforms gyro angular rates and accelerometer specific forces
    into rotation vectors and velocity increments by applying coning and sculling
    corrections and accounting for IMU rotation during a sampling period.

    The algorithm assumes a linear model for the angular velocity and the
    specific force between samples.

    The number of returned increments is one less than the number of IMU readings.

    Parameters
    ----------
    imu : DataFrame
        IMU data indexed by time with columns `GYRO_COLS` and `ACCEL_COLS`.

    Returns
    -------
    DataFrame
        Time intervals ``dt`` with attitude and velocity increments, indexed by the
        end time of each interval.

    Raises
    ------
    ConfigurationError
        If time is not strictly increasing.
    """
    gyro = imu[GYRO_COLS].values
    accel = imu[ACCEL_COLS].values
    dt = np.diff(np.asarray(imu.index, dtype=float)).reshape(-1, 1)
    if np.any(dt <= 0):
        raise ConfigurationError("IMU time must be strictly increasing", dt.ravel())

    a_gyro = gyro[:-1]
    b_gyro = gyro[1:] - gyro[:-1]
    a_accel = accel[:-1]
    b_accel = accel[1:] - accel[:-1]
    gyro_increment = (a_gyro + 0.5 * b_gyro) * dt
    accel_increment = (a_accel + 0.5 * b_accel) * dt
    coning = np.cross(a_gyro, b_gyro) * dt ** 2 / 12
    sculling = (np.cross(a_gyro, b_accel) +
                np.cross(a_accel, b_gyro)) * dt ** 2 / 12

    theta = gyro_increment + coning
    dv = accel_increment + sculling + 0.5 * np.cross(gyro_increment, accel_increment)

    return pd.DataFrame(data=np.hstack((dt, theta, dv)), index=imu.index[1:],
                        columns=['dt'] + THETA_COLS + DV_COLS)


class Integrator:
    """Strapdown INS integration algorithm.

    The position is updated using the trapezoid rule. Position, velocity and
    attitude are kept in preallocated arrays, the latest point can be overwritten
    by a navigation filter with `set_state` or `set_pva`.

    Parameters
    ----------
    pva : Series
        Initial position-velocity-attitude with `TRAJECTORY_COLS` entries.
    time : float, optional
        Time of the initial point. Default is 0.

    Attributes
    ----------
    trajectory : DataFrame
        Computed trajectory so far.
    """
    INITIAL_SIZE = 10000

    def __init__(self, pva, time=0.0):
        self.lla = np.empty((self.INITIAL_SIZE, 3))
        self.velocity_n = np.empty((self.INITIAL_SIZE, 3))
        self.mat_nb = np.empty((self.INITIAL_SIZE, 3, 3))
        self.time = np.empty(self.INITIAL_SIZE)

        self.lla[0] = pva[LLA_COLS]
        self.velocity_n[0] = pva[VEL_COLS]
        self.mat_nb[0] = transform.mat_from_rph(np.asarray(pva[RPH_COLS], dtype=float))
        self.time[0] = time
        self.n_points = 1

    def _reserve(self, n_readings):
        size = len(self.lla)
        required_size = self.n_points + n_readings
        if required_size > size:
            new_size = max(2 * size, required_size)
            self.lla.resize((new_size, 3), refcheck=False)
            self.velocity_n.resize((new_size, 3), refcheck=False)
            self.mat_nb.resize((new_size, 3, 3), refcheck=False)
            self.time.resize(new_size, refcheck=False)

    def _integrate(self, time, dt, theta, dv):
        n_readings = len(dt)
        self._reserve(n_readings)
        integrate(np.ascontiguousarray(dt, dtype=float), self.lla, self.velocity_n,
                  self.mat_nb, np.ascontiguousarray(theta, dtype=float),
                  np.ascontiguousarray(dv, dtype=float), self.n_points - 1)
        self.time[self.n_points : self.n_points + n_readings] = time
        self.n_points += n_readings

    def integrate(self, increments):
        """Update trajectory by given inertial increments.

        The integration continues from the last computed values.

        Parameters
        ----------
        increments : DataFrame
            Attitude and velocity increments computed from gyro and accelerometer
            readings.

        Returns
        -------
        DataFrame
            Added chunk of the trajectory including the last point before
            `increments` were integrated.
        """
        start = self.n_points - 1
        self._integrate(np.asarray(increments.index, dtype=float),
                        increments['dt'], increments[THETA_COLS],
                        increments[DV_COLS])
        return self._make_trajectory(start, self.n_points)

    def step(self, time, dt, theta, dv):
        """Integrate a single increment.

        Parameters
        ----------
        time : float
            Time at the end of the interval.
        dt : float
            Interval duration.
        theta, dv : array_like, shape (3,)
            Rotation vector and velocity increment.
        """
        self._integrate(time, [dt], np.reshape(theta, (1, 3)), np.reshape(dv, (1, 3)))

    def _make_trajectory(self, start, stop):
        rph = transform.mat_to_rph(self.mat_nb[start:stop])
        trajectory = pd.DataFrame(
            np.hstack([self.lla[start:stop], self.velocity_n[start:stop], rph]),
            index=pd.Index(self.time[start:stop], name='time'),
            columns=TRAJECTORY_COLS)
        return trajectory

    @property
    def trajectory(self):
        return self._make_trajectory(0, self.n_points)

    def get_time(self):
        """Get time of the latest position-velocity-attitude."""
        return self.time[self.n_points - 1]

    def get_state(self):
        """Get the latest position, velocity and attitude matrix.

        Returns
        -------
        lla : ndarray, shape (3,)
        velocity_n : ndarray, shape (3,)
        mat_nb : ndarray, shape (3, 3)
            Copies of the stored values.
        """
        i = self.n_points - 1
        return self.lla[i].copy(), self.velocity_n[i].copy(), self.mat_nb[i].copy()

    def set_state(self, lla, velocity_n, mat_nb):
        """Set (overwrite) the latest position, velocity and attitude matrix."""
        i = self.n_points - 1
        self.lla[i] = lla
        self.velocity_n[i] = velocity_n
        self.mat_nb[i] = mat_nb

    def get_pva(self):
        """Get the latest position-velocity-attitude."""
        return self._make_trajectory(self.n_points - 1, self.n_points).iloc[0]

    def set_pva(self, pva):
        """Set (overwrite) the latest position-velocity-attitude."""
        self.set_state(pva[LLA_COLS], pva[VEL_COLS],
                       transform.mat_from_rph(np.asarray(pva[RPH_COLS], dtype=float)))
