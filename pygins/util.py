"""Utility functions.

Functions
---------
.. autosummary::
    :toctree: generated

    skew_matrix
    to_pi_range
"""
import numpy as np
import pandas as pd


LLA_COLS = ['lat', 'lon', 'alt']
VEL_COLS = ['VN', 'VE', 'VD']
RPH_COLS = ['roll', 'pitch', 'heading']
GYRO_COLS = ['gyro_x', 'gyro_y', 'gyro_z']
ACCEL_COLS = ['accel_x', 'accel_y', 'accel_z']
THETA_COLS = ['theta_x', 'theta_y', 'theta_z']
DV_COLS = ['dv_x', 'dv_y', 'dv_z']
NED_COLS = ["north", "east", "down"]
BIAS_COLS = ['bias_x', 'bias_y', 'bias_z']
TRAJECTORY_COLS = LLA_COLS + VEL_COLS + RPH_COLS
TRAJECTORY_ERROR_COLS = NED_COLS + VEL_COLS + RPH_COLS


def skew_matrix(vec):
    """Create a skew matrix corresponding to a vector.

    Parameters
    ----------
    vec : array_like, shape (3,) or (n, 3)
        Vector.

    Returns
    -------
    ndarray, shape (3, 3) or (n, 3, 3)
        Corresponding skew matrix.
    """
    vec = np.asarray(vec)
    single = vec.ndim == 1
    n = 1 if single else len(vec)
    vec = np.atleast_2d(vec)
    result = np.zeros((n, 3, 3))
    result[:, 0, 1] = -vec[:, 2]
    result[:, 0, 2] = vec[:, 1]
    result[:, 1, 0] = vec[:, 2]
    result[:, 1, 2] = -vec[:, 0]
    result[:, 2, 0] = -vec[:, 1]
    result[:, 2, 1] = vec[:, 0]
    return result[0] if single else result


def to_pi_range(angle):
    """Reduce angle in radians to the range of [-pi, pi]."""
    is_pandas = isinstance(angle, (pd.Series, pd.DataFrame))
    if not is_pandas:
        angle = np.asarray(angle)
    return (angle + np.pi) % (2 * np.pi) - np.pi


class Bunch(dict):
    def __getattr__(self, name):
        try:
            return self[name]
        except KeyError:
            raise AttributeError(name)

    __setattr__ = dict.__setitem__
    __delattr__ = dict.__delitem__

    def __repr__(self):
        if self.keys():
            m = max(map(len, list(self.keys()))) + 1
            return '\n'.join(['{}: {}'.format(k.rjust(m), type(v))
                              for k, v in self.items()])
        else:
            return self.__class__.__name__ + "()"

    def __dir__(self):
        return list(self.keys())
