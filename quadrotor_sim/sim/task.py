"""Reference trajectories for scripted control tasks.

The velocity control task asks a controller to track a sequence of world-frame velocities. The
sequence is an Ornstein-Uhlenbeck random walk that starts at rest, reverts towards zero velocity and
is clipped per axis, so targets change smoothly from step to step and stay within a flyable range.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, NamedTuple

import numpy as np

from quadrotor_sim.constants import TASK_MAX_VELOCITY, TASK_REVERSION, TASK_VOLATILITY
from quadrotor_sim.sim.failure import Status

if TYPE_CHECKING:
    from numpy.typing import NDArray

logger = logging.getLogger(__name__)


class TaskResult(NamedTuple):
    """Status and target velocities of a generated task."""

    status: Status
    targets: NDArray[np.floating]


def velocity_control_task(
    dt: float,
    step_count: int,
    seed: int,
    max_velocity: float = TASK_MAX_VELOCITY,
    reversion: float = TASK_REVERSION,
    volatility: float = TASK_VOLATILITY,
) -> TaskResult:
    """Generate a sequence of target velocities.

    Args:
        dt: The duration of one step. Must be positive.
        step_count: The number of targets. Must be at least 1.
        seed: The non-negative seed of the random walk. Equal seeds produce equal sequences.
        max_velocity: The absolute limit of each velocity component.
        reversion: Rate at which the targets revert towards zero.
        volatility: Magnitude of the random velocity changes.

    Returns:
        The status and the targets. Shape: (step_count, 3). On invalid input the status is
        ``Status.INVALID_TASK`` and the targets are empty.
    """
    if not _valid_input(dt, step_count, seed):
        logger.error(f"Invalid velocity control task ({dt=}, {step_count=}, {seed=})")
        return TaskResult(Status.INVALID_TASK, np.zeros((0, 3)))
    rng = np.random.default_rng(seed)
    targets = np.zeros((step_count, 3))
    velocity = np.zeros(3)
    for i in range(step_count):
        shock = rng.normal(0.0, 1.0, size=3) * volatility * np.sqrt(dt)
        velocity = velocity - reversion * velocity * dt + shock
        velocity = np.clip(velocity, -max_velocity, max_velocity)
        targets[i] = velocity
    return TaskResult(Status.OK, targets)


def _is_int(value: object) -> bool:
    return isinstance(value, (int, np.integer)) and not isinstance(value, bool)


def _valid_input(dt: float, step_count: int, seed: int) -> bool:
    """Check for a finite positive step, at least one step and a non-negative integer seed."""
    if not isinstance(dt, (int, float, np.integer, np.floating)) or isinstance(dt, bool):
        return False
    if not np.isfinite(dt) or dt <= 0:
        return False
    return _is_int(step_count) and step_count >= 1 and _is_int(seed) and seed >= 0
