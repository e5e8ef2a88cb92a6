import numpy as np
import pytest
from numpy.testing import assert_allclose
from pygins import allan
from pygins.errors import ConfigurationError, RangeError


def test_get_random_walk_exact_sample():
    with pytest.warns(UserWarning, match="slope"):
        value = allan.get_random_walk([0.5, 1.0, 2.0], [0.1, 0.2, 0.4], 0.1)
    assert value == 0.2


def test_get_random_walk_interpolation():
    tau = [0.5, 0.8, 1.2, 2.0]
    avar = [0.1, 0.16, 0.22, 0.4]
    with pytest.warns(UserWarning):
        value = allan.get_random_walk(tau, avar, 0.1)
    assert_allclose(value, np.interp(1.0, tau, avar))
    assert_allclose(value, 0.19)


def test_get_random_walk_grid_misses_one_second():
    # The grid 0.5, 0.7, 0.9, 1.1, ... never contains 1 second.
    with pytest.warns(UserWarning):
        with pytest.raises(RangeError):
            allan.get_random_walk([0.5, 0.8, 1.2, 2.0], [0.1, 0.16, 0.22, 0.4], 0.2)


def test_get_random_walk_out_of_range():
    with pytest.warns(UserWarning):
        with pytest.raises(RangeError):
            allan.get_random_walk([0.01, 0.1, 0.2, 5, 10], [1, 2, 3, 4, 5], 0.01)


def test_get_random_walk_invalid_input():
    with pytest.warns(UserWarning):
        with pytest.raises(ConfigurationError):
            allan.get_random_walk([0.5, 1.0], [0.1, 0.2, 0.3], 0.1)
    with pytest.warns(UserWarning):
        with pytest.raises(ConfigurationError):
            allan.get_random_walk([1.0, 0.5], [0.1, 0.2], 0.1)
    with pytest.warns(UserWarning):
        with pytest.raises(ConfigurationError):
            allan.get_random_walk([0.5, 1.0], [0.1, 0.2], 0)


def test_compute_allan_variance_white_noise():
    rng = np.random.RandomState(0)
    dt = 0.01
    noise = 0.05
    signal = noise / dt ** 0.5 * rng.randn(1000000)

    tau, avar = allan.compute_allan_variance(signal, dt, [0.1, 1.0, 10.0])
    assert_allclose(tau, [0.1, 1.0, 10.0])
    # White noise with root PSD q gives Allan variance q^2 / tau.
    assert_allclose(avar[:2], noise ** 2 / tau[:2], rtol=0.05)
    assert_allclose(avar[2], noise ** 2 / tau[2], rtol=0.15)

    with pytest.warns(UserWarning):
        value = allan.get_random_walk(tau, avar, dt)
    assert_allclose(value ** 0.5, noise, rtol=0.05)


def test_compute_allan_variance_multiple_axes():
    rng = np.random.RandomState(1)
    signal = rng.randn(1000, 3)
    tau, avar = allan.compute_allan_variance(signal, 0.1)
    assert avar.shape == (len(tau), 3)
    assert np.all(np.diff(tau) > 0)
    assert tau[0] == 0.1
    assert tau[-1] <= 0.5 * 1000 * 0.1


def test_compute_allan_variance_short_signal():
    with pytest.raises(RangeError):
        allan.compute_allan_variance([1.0, 2.0], 0.1)
    with pytest.raises(RangeError):
        allan.compute_allan_variance(np.ones(10), 0.1, [100.0])


def test_compute_allan_variance_linear_drift():
    # Second differences of the integrated ramp are m^2, so the variance is m^2 / 2
    # in units of the ramp slope squared.
    dt = 0.1
    ramp = np.arange(2000, dtype=float)
    signal = np.column_stack([ramp, 2 * ramp])
    tau, avar = allan.compute_allan_variance(signal, dt, [0.1, 0.5, 1.0])
    m = np.array([1, 5, 10])
    assert_allclose(tau, m * dt)
    assert_allclose(avar[:, 0], m ** 2 / 2, rtol=1e-10)
    assert_allclose(avar[:, 1], 4 * m ** 2 / 2, rtol=1e-10)
