# body_ik/error_handling.py
"""
Input validation and result codes for the body-frame IK solver.

Non-convergence is reported through ``IKErrorCode``, never raised. Malformed
inputs raise ``IKInputError`` before the first iteration.
"""

from enum import Enum
from typing import Tuple

import numpy as np

SE3_TOLERANCE = 1e-6


class IKInputError(ValueError):
    """Precondition violation on solver inputs."""
    pass


class IKErrorCode(Enum):
    SUCCESS = 0
    MAX_ITERATIONS_EXCEEDED = 1


def check_singularity(J: np.ndarray, threshold: float = 1e-3) -> Tuple[bool, float]:
    """Check if the Jacobian is near a singularity."""
    svals = np.linalg.svd(J, compute_uv=False)
    min_singular_value = float(np.min(svals))
    return min_singular_value < threshold, min_singular_value


def is_valid_rotation(R: np.ndarray, tolerance: float = SE3_TOLERANCE) -> bool:
    """Check if matrix is a valid rotation matrix."""
    # R^T * R = I
    if not np.allclose(R.T @ R, np.eye(3), atol=tolerance):
        return False
    # det(R) = 1
    return bool(np.isclose(np.linalg.det(R), 1.0, atol=tolerance))


def is_valid_SE3(T: np.ndarray, tolerance: float = SE3_TOLERANCE) -> bool:
    T = np.asarray(T)
    if T.shape != (4, 4) or not np.all(np.isfinite(T)):
        return False
    if not np.allclose(T[3], [0.0, 0.0, 0.0, 1.0], atol=tolerance):
        return False
    return is_valid_rotation(T[:3, :3], tolerance)


def validate_tolerances(eomg: float, ev: float):
    for name, tol in (('eomg', eomg), ('ev', ev)):
        if not np.isfinite(tol) or tol <= 0:
            raise IKInputError(f"Tolerance {name} must be a finite positive number, got {tol}")


def validate_max_iterations(max_iterations: int):
    if (isinstance(max_iterations, bool) or not isinstance(max_iterations, (int, np.integer))
            or max_iterations < 0):
        raise IKInputError(f"max_iterations must be a non-negative integer, got {max_iterations}")


def validate_screw_axes(Blist: np.ndarray) -> np.ndarray:
    """Check a 6xn screw axis matrix and return it as float."""
    Blist = np.asarray(Blist, dtype=float)
    if Blist.ndim != 2 or Blist.shape[0] != 6 or Blist.shape[1] == 0:
        raise IKInputError(f"Screw axes must form a 6xn matrix with n >= 1, got shape {Blist.shape}")
    if not np.all(np.isfinite(Blist)):
        raise IKInputError("Screw axes contain non-finite values")
    return Blist


def validate_thetalist(thetalist, n_joints: int) -> np.ndarray:
    thetalist = np.asarray(thetalist, dtype=float)
    if thetalist.ndim != 1 or thetalist.shape[0] != n_joints:
        raise IKInputError(
            f"Initial guess must be a vector of {n_joints} joint values, got shape {thetalist.shape}")
    if not np.all(np.isfinite(thetalist)):
        raise IKInputError("Initial guess contains non-finite values")
    return thetalist


def validate_transform(T, name: str) -> np.ndarray:
    try:
        T = np.asarray(T, dtype=float)
    except (TypeError, ValueError) as e:
        raise IKInputError(f"{name} is not a numeric matrix: {e}")
    if T.shape != (4, 4):
        raise IKInputError(f"{name} must be a 4x4 homogeneous transform, got shape {T.shape}")
    if not is_valid_SE3(T):
        raise IKInputError(f"{name} is not a valid SE(3) transform")
    return T
