"""Earth geometry and gravity models.

This module defines constants and computation models for ellipsoidal Earth using
WGS84 parameters. The gravity model follows [1]_, radii of curvature are the
standard meridian and prime vertical radii of the ellipsoid.

All functions accept latitude in radians.

Constants
---------
.. autosummary::
    :toctree: generated

    RATE
    A
    E
    E2
    FLATTENING
    MU
    GE

Functions
---------
.. autosummary::
    :toctree: generated/

    radius
    gravity
    rate_n

Notes
-----
Navigation equations on the ellipsoid contain terms like ``1 / cos(lat)`` and
``tan(lat)``, which are singular at the poles. Functions of this module stay finite
for all latitudes, but the error model in `pygins.error_model` can't be evaluated
exactly at the poles.

References
----------
.. [1] P. D. Groves, "Principles of GNSS, Inertial, and Multisensor Integrated
       Navigation Systems", 2nd edition
"""
import numpy as np
from .errors import RangeError


#: Rotation rate of Earth in rad/s.
RATE = 7.292115e-5
#: Semi major axis of Earth ellipsoid.
A = 6378137.0
#: Eccentricity of Earth ellipsoid.
E = 0.0818191908425
#: Squared eccentricity of Earth ellipsoid.
E2 = E ** 2
#: Flattening of Earth ellipsoid.
FLATTENING = 1 / 298.257223563
#: Polar radius of Earth ellipsoid.
B = A * (1 - FLATTENING)
#: Earth gravitational constant in m^3/s^2.
MU = 3.986004418e14
#: Gravity at the equator.
GE = 9.7803253359
#: Somigliana constant.
K_SOMIGLIANA = 0.001931853


def _verify_latitude(lat):
    lat = np.asarray(lat, dtype=float)
    if not np.all(np.isfinite(lat)) or np.any(np.abs(lat) > 0.5 * np.pi):
        raise RangeError("Latitude must be finite and within [-pi/2, pi/2]", lat)
    return lat


def radius(lat):
    """Compute the principal radii of curvature of Earth ellipsoid.

    Parameters
    ----------
    lat : array_like
        Latitude in radians.

    Returns
    -------
    rm : float or ndarray
        Meridian radius of curvature (North direction).
    rn : float or ndarray
        Normal (prime vertical) radius of curvature (East direction).
    """
    lat = _verify_latitude(lat)
    x = 1 - E2 * np.sin(lat) ** 2
    rm = A * (1 - E2) / x ** 1.5
    rn = A / x ** 0.5
    return rm, rn


def gravity(lat, alt):
    """Compute gravity vector in NED frame.

    Somigliana model is used for the surface gravity, its variation with altitude
    and a small North component are computed as described in [1]_ (Sec. 2.4.7).

    Parameters
    ----------
    lat, alt : array_like
        Latitude and altitude.

    Returns
    -------
    g_n : ndarray, shape (3,) or (n, 3)
        Vector of the gravity.
    """
    lat = _verify_latitude(lat)
    alt = np.asarray(alt, dtype=float)
    lat, alt = np.broadcast_arrays(lat, alt)
    sin2 = np.sin(lat) ** 2

    g0 = GE * (1 + K_SOMIGLIANA * sin2) / (1 - E2 * sin2) ** 0.5
    k = 1 + FLATTENING * (1 - 2 * sin2) + RATE ** 2 * A ** 2 * B / MU

    result = np.zeros(lat.shape + (3,))
    result[..., 0] = -8.08e-9 * alt * np.sin(2 * lat)
    result[..., 2] = g0 * (1 - 2 / A * k * alt + 3 * alt ** 2 / A ** 2)
    return result


def rate_n(lat):
    """Compute Earth rate resolved in NED frame.

    Parameters
    ----------
    lat : array_like
        Latitude.

    Returns
    -------
    earth_rate_n : ndarray, shape (3,) or (n, 3)
        NED components of Earth rate.
    """
    lat = _verify_latitude(lat)
    result = np.zeros(lat.shape + (3,))
    result[..., 0] = RATE * np.cos(lat)
    result[..., 2] = -RATE * np.sin(lat)
    return result
