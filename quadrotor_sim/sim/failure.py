"""Status codes and failure detection.

Every simulator operation reports its outcome as a :class:`Status`. Physical failures are terminal
conditions of an episode. The simulator does not stop on a failure, the caller has to end the
episode. Failures are checked in a fixed order so that identical trajectories always report the
same reason.
"""

from __future__ import annotations

from enum import IntEnum
from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from quadrotor_sim.sim.params import QuadrotorParams
    from quadrotor_sim.sim.state import VehicleState


class Status(IntEnum):
    """Outcome of a simulator operation."""

    OK = 0
    VELOCITY_EXCEEDED = 1
    ANGULAR_VELOCITY_EXCEEDED = 2
    RANGE_EXCEEDED = 3
    NOT_CONFIGURED = 10
    CONFIGURATION_ERROR = 11
    INVALID_TIME_STEP = 20
    COMMAND_OUT_OF_RANGE = 21
    INVALID_COMMAND = 22
    INVALID_TASK = 23

    @property
    def is_failure(self) -> bool:
        """True if the status is a physical failure of the quadrotor."""
        return self in _FAILURES


_FAILURES = frozenset(
    {Status.VELOCITY_EXCEEDED, Status.ANGULAR_VELOCITY_EXCEEDED, Status.RANGE_EXCEEDED}
)


def check_failure(state: VehicleState, params: QuadrotorParams) -> Status:
    """Classify the state as safe or failed.

    Args:
        state: The state to check.
        params: The parameters with the failure thresholds.

    Returns:
        The first exceeded limit in the order velocity, angular velocity, range, or ``Status.OK``.
    """
    if np.linalg.norm(state.global_velocity) > params.max_velocity:
        return Status.VELOCITY_EXCEEDED
    if np.linalg.norm(state.body_angular_velocity) > params.max_angular_velocity:
        return Status.ANGULAR_VELOCITY_EXCEEDED
    if np.linalg.norm(state.global_position) > params.max_range:
        return Status.RANGE_EXCEEDED
    return Status.OK
