import numpy as np
import pytest
from numpy.testing import assert_allclose, assert_equal
from pygins.errors import ConfigurationError
from pygins.inertial_sensor import RandomWalk, GaussMarkov, bias_model, SensorModel


def test_bias_model():
    assert bias_model(np.inf) == RandomWalk()
    assert bias_model(100.0) == GaussMarkov(100.0)
    assert bias_model(100.0) != GaussMarkov(200.0)
    assert RandomWalk().feedback == 0
    assert_allclose(GaussMarkov(50).feedback, -0.02)

    model = GaussMarkov(10)
    assert bias_model(model) is model


@pytest.mark.parametrize("correlation_time", [0, -1.0, np.nan, np.inf])
def test_gauss_markov_invalid(correlation_time):
    with pytest.raises(ConfigurationError):
        GaussMarkov(correlation_time)


def test_SensorModel():
    model = SensorModel()
    assert_equal(model.bias_sd, np.zeros(3))
    assert_equal(model.noise, np.zeros(3))
    assert_equal(model.bias_walk, np.zeros(3))
    assert_equal(model.bias_models, [RandomWalk()] * 3)
    assert_equal(model.feedback, np.zeros(3))
    assert_equal(model.bias, np.zeros(3))

    model = SensorModel(bias_sd=0.1, noise=[0.01, 0.02, 0.03], bias_walk=1e-3,
                        correlation_time=[100.0, np.inf, 300.0])
    assert_allclose(model.bias_sd, [0.1, 0.1, 0.1])
    assert_allclose(model.noise, [0.01, 0.02, 0.03])
    assert_allclose(model.bias_walk, [1e-3, 1e-3, 1e-3])
    assert_equal(model.bias_models, [GaussMarkov(100), RandomWalk(), GaussMarkov(300)])
    assert_allclose(model.feedback, [-0.01, 0, -1 / 300])

    model = SensorModel(correlation_time=1000)
    assert_allclose(model.feedback, [-1e-3] * 3)


def test_SensorModel_invalid():
    with pytest.raises(ConfigurationError):
        SensorModel(noise=[0.1, 0.2])
    with pytest.raises(ConfigurationError):
        SensorModel(bias_sd=-1.0)
    with pytest.raises(ConfigurationError):
        SensorModel(bias_walk=np.nan)
    with pytest.raises(ConfigurationError):
        SensorModel(correlation_time=[100, 200])
    with pytest.raises(ConfigurationError):
        SensorModel(correlation_time=[100, 0, 200])


def test_estimates():
    model = SensorModel()
    model.update_estimates([0.1, -0.2, 0.3])
    model.update_estimates([0.1, 0.0, 0.0])
    assert_allclose(model.bias, [0.2, -0.2, 0.3])

    dt = 0.1
    increments = np.array([[1.0, 2.0, 3.0], [0.0, 0.0, 0.0]])
    assert_allclose(model.correct_increments(dt, increments),
                    [[0.98, 2.02, 2.97], [-0.02, 0.02, -0.03]])

    model.reset_estimates()
    assert_equal(model.bias, np.zeros(3))


def test_from_allan_variance():
    tau = [0.5, 1.0, 2.0]
    avar = [[4e-4, 1e-4, 9e-4],
            [2e-4, 4e-4, 4e-4],
            [1e-4, 2e-4, 2e-4]]
    with pytest.warns(UserWarning):
        model = SensorModel.from_allan_variance(tau, avar, 0.01, bias_sd=0.1,
                                                correlation_time=60)
    assert_allclose(model.noise, [2e-4 ** 0.5, 2e-2, 2e-2])
    assert_allclose(model.bias_sd, 0.1)
    assert_equal(model.bias_models, [GaussMarkov(60)] * 3)

    with pytest.warns(UserWarning):
        model = SensorModel.from_allan_variance(tau, [4e-4, 1e-4, 0.25e-4], 0.01)
    assert_allclose(model.noise, [1e-2, 1e-2, 1e-2])
