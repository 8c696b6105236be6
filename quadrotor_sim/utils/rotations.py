"""Rotation conversion utils module.

All rotation matrices map body frame vectors into the world frame. Euler angles follow the extrinsic
x-y-z convention, i.e. ``R = Rz(yaw) @ Ry(pitch) @ Rx(roll)``.
"""

from __future__ import annotations

import numpy as np
import numpy.typing as npt
from scipy.spatial.transform import Rotation as R


def rpy_to_matrix(roll: float, pitch: float, yaw: float) -> npt.NDArray[np.floating]:
    """Convert roll, pitch and yaw into a body-to-world rotation matrix."""
    return R.from_euler("xyz", [roll, pitch, yaw]).as_matrix()


def matrix_to_rpy(rot: npt.NDArray[np.floating]) -> npt.NDArray[np.floating]:
    """Convert a body-to-world rotation matrix into roll, pitch and yaw.

    Args:
        rot: Rotation matrix. Shape: (3, 3).

    Returns:
        The roll, pitch and yaw angles in radians. Shape: (3,).
    """
    return R.from_matrix(rot).as_euler("xyz")


def orthonormalize(rot: npt.NDArray[np.floating]) -> npt.NDArray[np.floating]:
    """Project a nearly orthonormal matrix onto the closest rotation matrix.

    We use the polar decomposition computed by the SVD. The sign correction keeps the determinant at
    +1 even if the input has drifted towards a reflection.

    Args:
        rot: Matrix to project. Shape: (3, 3).

    Returns:
        The closest rotation matrix in the Frobenius norm.
    """
    u, _, vt = np.linalg.svd(rot)
    if np.linalg.det(u @ vt) < 0:
        u[:, -1] = -u[:, -1]
    return u @ vt
