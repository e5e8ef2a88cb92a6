"""Attitude transformations and unit conversions.

Constants
----------
.. autosummary::
    :toctree: generated

    DEG_TO_RAD
    RAD_TO_DEG
    DH_TO_RS
    DRH_TO_RRS

Functions
---------
.. autosummary::
    :toctree: generated

    mat_from_rph
    mat_to_rph
    phi_to_delta_rph
"""
import numpy as np
from scipy.spatial.transform import Rotation

#: Degrees to radians.
DEG_TO_RAD = np.pi / 180
#: Radians to degrees.
RAD_TO_DEG = 1 / DEG_TO_RAD
#: Degrees per hour to radians per second.
DH_TO_RS = DEG_TO_RAD / 3600
#: Degrees per root-hour to radians per root-second.
DRH_TO_RRS = DEG_TO_RAD / 60


def mat_from_rph(rph):
    """Create a body-to-navigation rotation matrix from roll, pitch and heading.

    Parameters
    ----------
    rph : array_like, shape (3,) or (n, 3)
        Roll, pitch and heading in radians.

    Returns
    -------
    ndarray, shape (3, 3) or (n, 3, 3)
        Rotation matrices.
    """
    return Rotation.from_euler('xyz', rph).as_matrix()


def mat_to_rph(mat):
    """Convert a rotation matrix to roll, pitch and heading angles.

    Parameters
    ----------
    mat : array_like, shape (3, 3) or (n, 3, 3)
        Rotation matrices.

    Returns
    -------
    ndarray, with shape (3,) or (n, 3)
        Roll, pitch and heading angles in radians.
    """
    return Rotation.from_matrix(mat).as_euler('xyz')


def phi_to_delta_rph(rph):
    """Compute matrix relating attitude error vector to Euler angle errors.

    The attitude error vector ``psi`` is defined by
    ``mat_nb_computed = (I - [psi x]) @ mat_nb_true``, the returned matrix ``T``
    satisfies ``rph_computed - rph_true ~= T @ psi``.

    Parameters
    ----------
    rph : array_like, shape (3,) or (n, 3)
        Roll, pitch and heading in radians.

    Returns
    -------
    ndarray, shape (3, 3) or (n, 3, 3)
        Transformation matrices.
    """
    rph = np.asarray(rph)
    single = rph.ndim == 1
    rph = np.atleast_2d(rph)
    result = np.zeros((len(rph), 3, 3))

    sin = np.sin(rph)
    cos = np.cos(rph)

    result[:, 0, 0] = -cos[:, 2] / cos[:, 1]
    result[:, 0, 1] = -sin[:, 2] / cos[:, 1]
    result[:, 1, 0] = sin[:, 2]
    result[:, 1, 1] = -cos[:, 2]
    result[:, 2, 0] = -cos[:, 2] * sin[:, 1] / cos[:, 1]
    result[:, 2, 1] = -sin[:, 2] * sin[:, 1] / cos[:, 1]
    result[:, 2, 2] = -1

    return result[0] if single else result
