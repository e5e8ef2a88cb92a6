import numpy as np
import pandas as pd
import pytest
from numpy.testing import assert_allclose
from pygins import util


def test_skew_matrix():
    vec = np.array([
        [0, 1, 2],
        [-2, 3, 5]
    ])
    check = np.array([
        [-2, 3, 6],
        [0, -2, 3]
    ])
    assert_allclose(util.skew_matrix(vec[0]) @ check[0],
                    np.cross(vec[0], check[0]))
    assert_allclose(util.skew_matrix(vec[1]) @ check[1],
                    np.cross(vec[1], check[1]))
    assert_allclose(np.einsum('nij,nj->ni', util.skew_matrix(vec), check),
                    np.cross(vec, check))


def test_to_pi_range():
    assert_allclose(util.to_pi_range(1.0), 1.0)
    data = [-3 * np.pi / 2, 0.0, 0.5, 2 * np.pi + 0.1]
    correct_result = np.array([np.pi / 2, 0.0, 0.5, 0.1])
    assert_allclose(util.to_pi_range(data), correct_result, atol=1e-15)

    result_series = util.to_pi_range(pd.Series(data))
    assert isinstance(result_series, pd.Series)
    assert_allclose(result_series, correct_result, atol=1e-15)


def test_bunch():
    bunch = util.Bunch(a=1)
    bunch.b = 2
    assert bunch.a == 1
    assert bunch['b'] == 2
    assert sorted(dir(bunch)) == ['a', 'b']
    with pytest.raises(AttributeError):
        bunch.c
