import numpy as np
import pytest

from body_ik.error_handling import (
    IKInputError,
    check_singularity,
    is_valid_SE3,
    validate_screw_axes,
    validate_thetalist,
    validate_tolerances,
    validate_transform,
)


def test_se3_validation(M, T_sd):
    assert is_valid_SE3(M)
    assert is_valid_SE3(T_sd)

    T_bad = T_sd.copy()
    T_bad[0, 1] += 1e-4
    assert not is_valid_SE3(T_bad)

    reflection = np.diag([1.0, 1.0, -1.0, 1.0])
    assert not is_valid_SE3(reflection)

    bottom = np.eye(4)
    bottom[3, 0] = 1.0
    assert not is_valid_SE3(bottom)


def test_validate_transform_rejects_non_numeric():
    with pytest.raises(IKInputError):
        validate_transform([["a", 0, 0, 0]] * 4, "T")


def test_validate_tolerances():
    validate_tolerances(0.01, 0.001)
    with pytest.raises(IKInputError, match="eomg"):
        validate_tolerances(0.0, 0.001)
    with pytest.raises(IKInputError, match="ev"):
        validate_tolerances(0.01, -0.001)


def test_validate_screw_axes_shape():
    assert validate_screw_axes(np.zeros((6, 2))).shape == (6, 2)
    with pytest.raises(IKInputError):
        validate_screw_axes(np.zeros((6, 0)))
    with pytest.raises(IKInputError):
        validate_screw_axes(np.zeros(6))


def test_validate_thetalist():
    np.testing.assert_array_equal(validate_thetalist([1, 2], 2), [1.0, 2.0])
    with pytest.raises(IKInputError):
        validate_thetalist([[1, 2]], 2)
    with pytest.raises(IKInputError):
        validate_thetalist([1, np.inf], 2)


def test_check_singularity():
    near, sigma = check_singularity(np.array([[1.0, 1.0], [1.0, 1.0]]))
    assert near
    assert sigma == pytest.approx(0.0, abs=1e-12)

    near, sigma = check_singularity(np.eye(3))
    assert not near
    assert sigma == pytest.approx(1.0)
