import numpy as np
from numpy.testing import assert_allclose
from scipy.spatial.transform import Rotation
from pygins import earth
from pygins._numba_integrate import gravity, mat_from_rotvec
import pytest


def test_gravity():
    np.random.seed(0)
    for i in range(10):
        lat, alt = [np.pi, 1000] * np.random.rand(2) - [0.5 * np.pi, 500]
        g_north, g_down = gravity(lat, alt)
        assert_allclose([g_north, 0, g_down], earth.gravity(lat, alt), atol=1e-15)


@pytest.mark.parametrize("sd", [1.0, 0.01])
def test_mat_from_rotvec(sd):
    mat_test = np.zeros((3, 3))
    mat_from_rotvec(np.zeros(3), mat_test)
    assert_allclose(mat_test, np.eye(3))

    np.random.seed(0)
    for i in range(10):
        rv = sd * np.random.randn(3)
        mat_ref = Rotation.from_rotvec(rv).as_matrix()
        mat_test = np.zeros((3, 3))
        mat_from_rotvec(rv, mat_test)
        assert_allclose(mat_test, mat_ref)
