import numpy as np
from numpy.testing import assert_allclose
from scipy.spatial.transform import Rotation
from pygins import transform


def test_mat_from_rph():
    assert_allclose(transform.mat_from_rph([0, 0, 0]), np.eye(3))

    rph1 = [0.5 * np.pi, 0, 0]
    mat1 = [[1, 0, 0], [0, 0, -1], [0, 1, 0]]
    assert_allclose(transform.mat_from_rph(rph1), mat1, atol=1e-15)

    rph2 = [0, -0.5 * np.pi, 0]
    mat2 = [[0, 0, -1], [0, 1, 0], [1, 0, 0]]
    assert_allclose(transform.mat_from_rph(rph2), mat2, atol=1e-15)

    rph3 = [0, 0, np.pi]
    mat3 = [[-1, 0, 0], [0, -1, 0], [0, 0, 1]]
    assert_allclose(transform.mat_from_rph(rph3), mat3, atol=1e-15)

    rph = np.asarray([rph1, rph2, rph3])
    mat = np.asarray([mat1, mat2, mat3])
    assert_allclose(transform.mat_from_rph(rph), mat, atol=1e-15)


def test_mat_to_rph():
    assert_allclose(transform.mat_to_rph(np.eye(3)), 0)

    np.random.seed(0)
    for i in range(10):
        rph = 0.5 * np.random.randn(3)
        mat = Rotation.from_euler('xyz', rph).as_matrix()
        assert_allclose(transform.mat_to_rph(mat), rph)

    rph = 0.5 * np.random.randn(10, 3)
    mat = Rotation.from_euler('xyz', rph).as_matrix()
    assert_allclose(transform.mat_to_rph(mat), rph)


def test_phi_to_delta_rph():
    rph = np.array([0.2, -0.3, 0.5])
    mat = transform.mat_from_rph(rph)
    phi = np.array([-2e-4, 1e-4, -3e-4])
    mat_perturbed = Rotation.from_rotvec(-phi).as_matrix() @ mat

    delta_rph_true = transform.mat_to_rph(mat_perturbed) - rph
    delta_rph_linear = transform.phi_to_delta_rph(rph) @ phi
    assert_allclose(delta_rph_linear, delta_rph_true, rtol=1e-2)

    T = transform.phi_to_delta_rph(np.vstack([rph, rph]))
    assert T.shape == (2, 3, 3)
    assert_allclose(T[1], transform.phi_to_delta_rph(rph))


def test_unit_constants():
    assert_allclose(transform.DEG_TO_RAD * transform.RAD_TO_DEG, 1)
    assert_allclose(transform.DH_TO_RS, np.pi / 180 / 3600)
    assert_allclose(transform.DRH_TO_RRS, np.pi / 180 / 60)
