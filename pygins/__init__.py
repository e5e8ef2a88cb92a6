"""pygins: loosely coupled INS/GNSS integration in Python.

Type naming conventions
-----------------------
Most of the data operated within the package are represented as pandas DataFrame or
Series. The same kinds of data have the same set of columns (or index in case of
Series). In this sense we define the following "types":

    - `Trajectory` - DataFrame containing INS trajectory with columns 'lat', 'lon',
      'alt', 'VN', 'VE', 'VD', 'roll', 'pitch', 'heading'. These comprise geodetic
      position, velocity resolved in North-East-Down frame and Euler angles for
      the attitude
    - `Pva` - Series representing position-velocity-attitude - a single row of
      `Trajectory`
    - `Imu` - DataFrame containing IMU measurements with columns 'gyro_x', 'gyro_y',
      'gyro_z', 'accel_x, 'accel_y', 'accel_z' for angular rates and specific
      forces
    - `Increments` - DataFrame containing attitude and velocity increments computed
      from IMU measurements. Have columns 'dt' - time delta for the increment,
      'theta_x, 'theta_y', 'theta_z' - components of the rotation vector,
      'dv_x', 'dv_y', 'dv_z' - inertial velocity increments
    - `TrajectoryError` - DataFrame with INS trajectory errors with columns 'north,
      'east', 'down' for the position error in meters resolved in North-East-Down
      frame, 'VN', 'VE', 'VD' for the errors of North-East-Down velocity components,
      'roll', 'pitch, 'heading' for the Euler angle errors. Data frames for trajectory
      parameters standard deviations have the same columns

All data (`Trajectory`, `Imu`, measurements) are indexed by time in seconds measured by
a common clock.

Variable naming convention
--------------------------
A vector ``vec`` expressed in a frame ``a`` is typically denoted as ``vec_a``.
A rotation matrix projecting from frame ``b`` to frame ``a`` is denoted as ``mat_ab``.

The following one-letter notation for the frames of reference is used:

    - n - North-East-Down local horizon frame
    - b - frame associated with IMU axes also known as "body frame"

Units of measurement
--------------------
All parameters are measured in International System of Units. All angles
(latitude, longitude, roll, pitch, heading) are measured in radians.

A continuous white noise intensity is expressed as root of power spectral density
(root PSD).

Modules
-------
.. autosummary::
   :toctree: generated/

   allan
   earth
   error_model
   errors
   filters
   inertial_sensor
   kalman
   measurements
   strapdown
   transform
   util

References
----------
.. [1] P. D. Groves, "Principles of GNSS, Inertial, and Multisensor Integrated
       Navigation Systems", 2nd edition
"""
from . import (allan, earth, error_model, errors, filters, inertial_sensor, kalman,
               measurements, strapdown, transform, util)

__version__ = "0.1"
