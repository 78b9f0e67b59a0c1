import numpy as np
import pytest


@pytest.fixture
def Blist():
    # Screw axes as columns (6x3)
    return np.array([[0, 0, -1, 2, 0, 0],
                     [0, 0, 0, 0, 1, 0],
                     [0, 0, 1, 0, 0, 0.1]], dtype=float).T


@pytest.fixture
def M():
    return np.array([[-1, 0, 0, 0],
                     [0, 1, 0, 6],
                     [0, 0, -1, 2],
                     [0, 0, 0, 1]], dtype=float)


@pytest.fixture
def T_sd():
    return np.array([[0, 1, 0, -5],
                     [1, 0, 0, 4],
                     [0, 0, -1, 1.6858],
                     [0, 0, 0, 1]], dtype=float)


@pytest.fixture
def thetalist0():
    return np.array([1.5, 2.5, 3.0])


@pytest.fixture
def T_unreachable(M):
    # Tilts the tool z-axis by 0.3 rad; every joint of the arm rotates or
    # slides about/along the tool z-axis, so this orientation is never reached.
    c, s = np.cos(0.3), np.sin(0.3)
    Rx = np.array([[1, 0, 0], [0, c, -s], [0, s, c]])
    T = np.eye(4)
    T[:3, :3] = M[:3, :3] @ Rx
    T[:3, 3] = [-5, 4, 1.6858]
    return T


@pytest.fixture
def config_data():
    return {
        'robot': {
            'screw_axes': [[0, 0, -1, 2, 0, 0], [0, 0, 0, 0, 1, 0], [0, 0, 1, 0, 0, 0.1]],
            'home': [[-1, 0, 0, 0], [0, 1, 0, 6], [0, 0, -1, 2], [0, 0, 0, 1]],
        },
        'target': {
            'pose': [[0, 1, 0, -5], [1, 0, 0, 4], [0, 0, -1, 1.6858], [0, 0, 0, 1]],
            'initial_guess': [1.5, 2.5, 3],
        },
    }
