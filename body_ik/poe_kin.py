# body_ik/poe_kin.py
import numpy as np
from numpy.linalg import norm

NEAR_ZERO = 1e-6

# ------------------------- Math helpers -------------------------

def near_zero(z: float) -> bool:
    return abs(z) < NEAR_ZERO

def skew(v: np.ndarray) -> np.ndarray:
    return np.array([[0.0, -v[2],  v[1]],
                     [v[2],  0.0, -v[0]],
                     [-v[1], v[0],  0.0]], dtype=float)

def unskew(so3mat: np.ndarray) -> np.ndarray:
    return np.array([so3mat[2, 1], so3mat[0, 2], so3mat[1, 0]], dtype=float)

def vec_to_se3(V: np.ndarray) -> np.ndarray:
    """
    6-vector twist [omega, v] -> 4x4 se(3) matrix.
    """
    se3mat = np.zeros((4, 4), dtype=float)
    se3mat[:3, :3] = skew(V[:3])
    se3mat[:3, 3] = V[3:]
    return se3mat

def se3_to_vec(se3mat: np.ndarray) -> np.ndarray:
    """
    4x4 se(3) matrix -> 6-vector twist, angular part first.
    """
    return np.hstack((unskew(se3mat[:3, :3]), se3mat[:3, 3]))

def adjoint(T: np.ndarray) -> np.ndarray:
    R, p = T[:3, :3], T[:3, 3]
    Ad = np.zeros((6, 6), dtype=float)
    Ad[:3, :3] = R
    Ad[3:, :3] = skew(p) @ R
    Ad[3:, 3:] = R
    return Ad

def trans_inv(T: np.ndarray) -> np.ndarray:
    """
    Closed-form inverse of a rigid transform.
    """
    R, p = T[:3, :3], T[:3, 3]
    T_inv = np.eye(4, dtype=float)
    T_inv[:3, :3] = R.T
    T_inv[:3, 3] = -R.T @ p
    return T_inv

def as_screw_matrix(Blist) -> np.ndarray:
    """
    Screw axes as a 6xn array (axes as columns).

    A numpy array is taken to already be 6xn; any other sequence is read as
    n screw axes of length 6 and transposed.
    """
    if isinstance(Blist, np.ndarray):
        return Blist.astype(float)
    return np.array(Blist, dtype=float).T

# ------------------------- Exponential / log maps -------------------------

def matrix_exp3(so3mat: np.ndarray) -> np.ndarray:
    omg_theta = unskew(so3mat)
    th = norm(omg_theta)
    if near_zero(th):
        return np.eye(3)
    w_hat = so3mat / th
    return np.eye(3) + np.sin(th) * w_hat + (1.0 - np.cos(th)) * (w_hat @ w_hat)

def matrix_log3(R: np.ndarray) -> np.ndarray:
    """
    Log map for SO(3), returning the 3x3 so(3) matrix [omega]*theta.
    """
    acos_input = (np.trace(R) - 1.0) / 2.0
    if acos_input >= 1.0:
        return np.zeros((3, 3))
    if acos_input <= -1.0:
        # theta = pi, axis from R + I
        if not near_zero(1.0 + R[2, 2]):
            w = np.array([R[0, 2], R[1, 2], 1.0 + R[2, 2]]) / np.sqrt(2.0 * (1.0 + R[2, 2]))
        elif not near_zero(1.0 + R[1, 1]):
            w = np.array([R[0, 1], 1.0 + R[1, 1], R[2, 1]]) / np.sqrt(2.0 * (1.0 + R[1, 1]))
        else:
            w = np.array([1.0 + R[0, 0], R[1, 0], R[2, 0]]) / np.sqrt(2.0 * (1.0 + R[0, 0]))
        return skew(np.pi * w)
    th = np.arccos(acos_input)
    return th / (2.0 * np.sin(th)) * (R - R.T)

def matrix_exp6(se3mat: np.ndarray) -> np.ndarray:
    """
    Exp map for SE(3) given the 4x4 se(3) matrix [V]*theta.
    Returns 4x4 T.
    """
    w_th_hat, v_th = se3mat[:3, :3], se3mat[:3, 3]
    th = norm(unskew(w_th_hat))
    T = np.eye(4, dtype=float)

    if near_zero(th):
        # Pure translation
        T[:3, 3] = v_th
        return T

    w_hat = w_th_hat / th
    w_hat2 = w_hat @ w_hat
    G = np.eye(3) * th + (1.0 - np.cos(th)) * w_hat + (th - np.sin(th)) * w_hat2

    T[:3, :3] = matrix_exp3(w_th_hat)
    T[:3, 3] = G @ (v_th / th)
    return T

def matrix_log6(T: np.ndarray) -> np.ndarray:
    """
    Log map for SE(3) returning the 4x4 se(3) matrix [V]*theta.
    """
    R, p = T[:3, :3], T[:3, 3]
    w_hat_th = matrix_log3(R)
    se3mat = np.zeros((4, 4), dtype=float)

    if not w_hat_th.any():
        # Pure translation: omega*theta = 0, v*theta = p
        se3mat[:3, 3] = p
        return se3mat

    th = float(np.arccos(np.clip((np.trace(R) - 1.0) / 2.0, -1.0, 1.0)))
    G_inv = (np.eye(3)
             - 0.5 * w_hat_th
             + (1.0 / th - 0.5 / np.tan(th / 2.0)) * (w_hat_th @ w_hat_th) / th)
    se3mat[:3, :3] = w_hat_th
    se3mat[:3, 3] = G_inv @ p
    return se3mat

# ------------------------- PoE kinematics (body frame) -------------------------

def fk_body(M: np.ndarray, Blist: np.ndarray, thetalist: np.ndarray) -> np.ndarray:
    """
    Forward kinematics in the end-effector frame.
    M: 4x4 home pose, Blist: 6xn body screw axes, thetalist: n
    """
    T = np.array(M, dtype=float)
    for i in range(len(thetalist)):
        T = T @ matrix_exp6(vec_to_se3(Blist[:, i] * thetalist[i]))
    return T

def jacobian_body(Blist: np.ndarray, thetalist: np.ndarray) -> np.ndarray:
    """
    Body Jacobian J_b(theta), 6xn.
    """
    Jb = np.array(Blist, dtype=float)
    T = np.eye(4)
    for i in range(len(thetalist) - 2, -1, -1):
        T = T @ matrix_exp6(vec_to_se3(-Blist[:, i + 1] * thetalist[i + 1]))
        Jb[:, i] = adjoint(T) @ Blist[:, i]
    return Jb

def pseudo_inverse(J: np.ndarray) -> np.ndarray:
    """
    Moore-Penrose pseudoinverse; gives the minimum-norm solution when J is
    rank deficient.
    """
    return np.linalg.pinv(J)
