"""Exceptions raised by navigation computations.

Pure computational functions raise these exceptions for out-of-domain input or
numerical failures. `pygins.filters.FeedbackFilter` attaches the IMU step index and
time to the exception before propagating it further.

Classes
-------
.. autosummary::
    :toctree: generated/

    FilterError
    ConfigurationError
    RangeError
    SingularityError
    DivergenceError
"""
import numpy as np


class FilterError(Exception):
    """Base class for navigation filter errors.

    Parameters
    ----------
    message : str
        Error description.
    quantity : object, optional
        Offending value or matrix.

    Attributes
    ----------
    quantity : object or None
        Offending value or matrix.
    step : int or None
        Index of IMU step at which the error occurred, if known.
    time : float or None
        Time at which the error occurred, if known.
    """
    def __init__(self, message, quantity=None):
        super().__init__(message)
        self.message = message
        self.quantity = quantity
        self.step = None
        self.time = None

    def __str__(self):
        if self.step is None:
            return self.message
        return f"{self.message} (step {self.step}, time {self.time})"


class ConfigurationError(FilterError, ValueError):
    """Inconsistent or invalid filter configuration."""


class RangeError(FilterError, ValueError):
    """Input value outside of its valid range."""


class SingularityError(FilterError, np.linalg.LinAlgError):
    """Matrix inversion or geometric singularity."""


class DivergenceError(FilterError, np.linalg.LinAlgError):
    """Covariance matrix lost symmetry or positive semi-definiteness."""
