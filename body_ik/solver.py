# body_ik/solver.py
"""
Newton-Raphson inverse kinematics in the end-effector (body) frame.

Each iteration takes the full step

    theta <- theta + pinv(J_b(theta)) @ V_b

where V_b is the body twist that carries the current end-effector pose onto
the desired one. No damping, step limiting or line search is applied, so a
poor initial guess can diverge or oscillate; ``max_iterations`` bounds the run.
Every iterate, including the initial guess, is kept in the returned history.
"""

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

import numpy as np
from numpy.linalg import norm

from .error_handling import (
    IKErrorCode,
    IKInputError,
    validate_max_iterations,
    validate_screw_axes,
    validate_thetalist,
    validate_tolerances,
    validate_transform,
)
from .history import IterationHistory, IterationRecord
from .poe_kin import (
    as_screw_matrix,
    fk_body,
    jacobian_body,
    matrix_log6,
    pseudo_inverse,
    se3_to_vec,
    trans_inv,
)

logger = logging.getLogger(__name__)

MAX_ITERATIONS = 20

Observer = Callable[[IterationRecord], None]


@dataclass
class IKResult:
    thetalist: np.ndarray
    converged: bool
    history: IterationHistory
    iterations: int

    @property
    def code(self) -> IKErrorCode:
        return IKErrorCode.SUCCESS if self.converged else IKErrorCode.MAX_ITERATIONS_EXCEEDED

    @property
    def joint_history(self) -> np.ndarray:
        return self.history.joint_matrix()

    @property
    def final_record(self) -> IterationRecord:
        return self.history.last


def error_twist(M: np.ndarray, Blist: np.ndarray, T_sd: np.ndarray,
                thetalist: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """
    Current end-effector pose and the body twist V_b taking it to T_sd.

    Returns (Tsb, Vb); Vb is ordered [omega_b, v_b].
    """
    Tsb = fk_body(M, Blist, thetalist)
    Vb = se3_to_vec(matrix_log6(trans_inv(Tsb) @ T_sd))
    return Tsb, Vb


def is_error_above_tolerance(Vb: np.ndarray, eomg: float, ev: float) -> bool:
    """
    True while either half of the error twist is outside its tolerance.

    The angular and linear checks are independent: meeting one does not
    make up for missing the other. A NaN norm counts as outside tolerance.
    """
    return not (norm(Vb[:3]) <= eomg and norm(Vb[3:]) <= ev)


def _notify(observer: Optional[Observer], record: IterationRecord):
    if observer is None:
        return
    try:
        observer(record)
    except Exception as e:
        logger.warning(f"Iteration observer failed at iteration {record.index}: {e}")


def ik_body_iterates(
    Blist,
    M,
    T_sd,
    thetalist0,
    eomg: float,
    ev: float,
    max_iterations: int = MAX_ITERATIONS,
    observer: Optional[Observer] = None,
) -> IKResult:
    """
    Solve IK for T_sd from the initial guess thetalist0.

    Args:
        Blist: Body screw axes, 6xn array or sequence of n 6-vectors. A numpy
            array is always read as 6xn, so a 6x6 array holding axes as rows
            must be transposed by the caller.
        M: Home configuration of the end-effector (4x4)
        T_sd: Desired end-effector configuration (4x4)
        thetalist0: Initial guess of the n joint values
        eomg: Tolerance on the angular error norm ||omega_b||
        ev: Tolerance on the linear error norm ||v_b||
        max_iterations: Cap on corrective iterations
        observer: Called with each IterationRecord as it is recorded

    Returns:
        IKResult. When ``converged`` is False the returned angles are the last
        iterate reached, not a solution.

    Raises:
        IKInputError: if any input is malformed; raised before iterating.
    """
    try:
        Blist = as_screw_matrix(Blist)
    except (TypeError, ValueError) as e:
        raise IKInputError(f"Screw axes are not a numeric 6xn matrix: {e}")
    Blist = validate_screw_axes(Blist)
    M = validate_transform(M, "Home configuration M")
    T_sd = validate_transform(T_sd, "Desired configuration T_sd")
    thetalist = validate_thetalist(thetalist0, Blist.shape[1]).copy()
    validate_tolerances(eomg, ev)
    validate_max_iterations(max_iterations)

    history = IterationHistory()

    def record(i: int, Tsb: np.ndarray, Vb: np.ndarray):
        rec = IterationRecord(
            index=i,
            thetalist=thetalist,
            Tsb=Tsb,
            Vb=Vb,
            angular_error=norm(Vb[:3]),
            linear_error=norm(Vb[3:]),
        )
        history.append(rec)
        logger.debug(f"Iteration {i}: theta={np.round(thetalist, 6)}, "
                     f"||omega_b||={rec.angular_error:.3e}, ||v_b||={rec.linear_error:.3e}")
        _notify(observer, rec)

    i = 0
    Tsb, Vb = error_twist(M, Blist, T_sd, thetalist)
    err = is_error_above_tolerance(Vb, eomg, ev)
    record(i, Tsb, Vb)

    while err and i < max_iterations:
        Jb = jacobian_body(Blist, thetalist)
        thetalist = thetalist + pseudo_inverse(Jb) @ Vb
        Tsb, Vb = error_twist(M, Blist, T_sd, thetalist)
        err = is_error_above_tolerance(Vb, eomg, ev)
        i += 1
        record(i, Tsb, Vb)

    if err:
        logger.debug(f"No convergence after {i} iterations")
    else:
        logger.debug(f"Converged after {i} iterations")

    return IKResult(thetalist=thetalist, converged=not err, history=history, iterations=i)


def solve(
    Blist,
    M,
    T_sd,
    thetalist0,
    eomg: float,
    ev: float,
    max_iterations: int = MAX_ITERATIONS,
) -> Tuple[np.ndarray, bool, List[np.ndarray]]:
    """
    Tuple form of ``ik_body_iterates``: (thetalist, success, joint history).
    """
    result = ik_body_iterates(Blist, M, T_sd, thetalist0, eomg, ev, max_iterations)
    return result.thetalist, result.converged, [r.thetalist for r in result.history]
