"""Physical state of the quadrotor.

A :class:`VehicleState` is a value object: the dynamics never modify a state in place but return a
new one. The body-frame acceleration is not part of the state. It is an output of the last force
computation and is cached by the simulator next to the state.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING

import numpy as np

from quadrotor_sim.utils.rotations import matrix_to_rpy, rpy_to_matrix

if TYPE_CHECKING:
    from numpy.typing import NDArray


POSE_FIELDS = (
    "g_x", "g_y", "g_z", "g_v_x", "g_v_y", "g_v_z", "w_x", "w_y", "w_z", "roll", "pitch", "yaw"
)  # fmt: skip


@dataclass(frozen=True, eq=False)
class VehicleState:
    """Position, velocities, rotor speeds, orientation and power of the quadrotor."""

    global_position: NDArray[np.floating] = field(default_factory=lambda: np.zeros(3))
    """Position in the world frame."""
    global_velocity: NDArray[np.floating] = field(default_factory=lambda: np.zeros(3))
    """Linear velocity in the world frame."""
    body_angular_velocity: NDArray[np.floating] = field(default_factory=lambda: np.zeros(3))
    """Angular velocity in the body frame."""
    propeller_angular_velocity: NDArray[np.floating] = field(default_factory=lambda: np.zeros(4))
    """Angular speed of each rotor. Never negative."""
    orientation: NDArray[np.floating] = field(default_factory=lambda: np.eye(3))
    """Rotation from the body frame into the world frame."""
    power: float = 0.0
    """Electrical power drawn by the motors during the last step."""

    def __post_init__(self):
        """Copy the arrays so that no two states share memory and check the state invariants.

        Raises:
            ValueError: If a rotor speed is negative or the orientation is not a rotation matrix.
        """
        for name, shape in (
            ("global_position", (3,)),
            ("global_velocity", (3,)),
            ("body_angular_velocity", (3,)),
            ("propeller_angular_velocity", (4,)),
            ("orientation", (3, 3)),
        ):
            value = np.array(getattr(self, name), dtype=np.float64)
            assert value.shape == shape, f"{name} must have shape {shape}, got {value.shape}"
            value.flags.writeable = False
            object.__setattr__(self, name, value)
        object.__setattr__(self, "power", float(self.power))
        if np.any(self.propeller_angular_velocity < 0):
            raise ValueError(f"Negative rotor speed: {self.propeller_angular_velocity}")
        rot = self.orientation
        if not np.allclose(rot.T @ rot, np.eye(3), atol=1e-6) or np.linalg.det(rot) <= 0:
            raise ValueError(f"Orientation is not a rotation matrix:\n{rot}")

    @staticmethod
    def from_pose(**kwargs: float) -> VehicleState:
        """Create a state from scalar position, velocity, angular velocity and attitude fields.

        Valid keys are listed in ``POSE_FIELDS``. Missing fields default to zero. Rotor speeds and
        power are zero.

        Raises:
            TypeError: If an unknown field is passed.
        """
        if unknown := set(kwargs) - set(POSE_FIELDS):
            raise TypeError(f"Unknown state fields: {sorted(unknown)}")
        v = {k: float(kwargs.get(k, 0.0)) for k in POSE_FIELDS}
        return VehicleState(
            global_position=np.array([v["g_x"], v["g_y"], v["g_z"]]),
            global_velocity=np.array([v["g_v_x"], v["g_v_y"], v["g_v_z"]]),
            body_angular_velocity=np.array([v["w_x"], v["w_y"], v["w_z"]]),
            orientation=rpy_to_matrix(v["roll"], v["pitch"], v["yaw"]),
        )

    @property
    def body_velocity(self) -> NDArray[np.floating]:
        """Linear velocity in the body frame."""
        return self.orientation.T @ self.global_velocity

    @property
    def rpy(self) -> NDArray[np.floating]:
        """Roll, pitch and yaw of the body frame."""
        return matrix_to_rpy(self.orientation)

    def replace(self, **changes) -> VehicleState:
        """Return a copy of the state with the given fields replaced."""
        return replace(self, **changes)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, VehicleState):
            return NotImplemented
        return self.power == other.power and all(
            np.array_equal(getattr(self, name), getattr(other, name))
            for name in (
                "global_position",
                "global_velocity",
                "body_angular_velocity",
                "propeller_angular_velocity",
                "orientation",
            )
        )

    __hash__ = None
