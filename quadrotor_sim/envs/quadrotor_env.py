"""Gymnasium environment for training flight controllers on the quadrotor simulator.

The environment wraps a single :class:`~.Simulator` and exposes rotor voltages as actions. Two tasks
are supported:

* ``hovering_control``: Keep the quadrotor at its start position. The reward is the negative
  distance to the start position.
* ``velocity_control``: Track a sequence of target velocities generated by
  :func:`~.velocity_control_task`. The current target is part of the observation and the reward is
  the negative distance between the world velocity and the target.

Episodes terminate when the simulator reports a physical failure and are truncated after
``max_steps`` steps.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

import gymnasium
import numpy as np
from gymnasium import spaces

from quadrotor_sim.sim import Simulator, Status, VehicleState
from quadrotor_sim.sim.params import DEFAULT_CONFIG
from quadrotor_sim.sim.physics import hover_rotor_speed
from quadrotor_sim.utils import ConfigurationError

if TYPE_CHECKING:
    from numpy.typing import NDArray

logger = logging.getLogger(__name__)

TASKS = ("hovering_control", "velocity_control")


class QuadrotorEnv(gymnasium.Env):
    """A Gymnasium environment for low-level quadrotor control.

    The observation space is a dictionary with the following keys:
    - "pos": Position in the world frame
    - "rpy": Roll, pitch and yaw
    - "vel": Linear velocity in the world frame
    - "ang_vel": Angular velocity in the body frame
    - "acc": Noisy accelerometer reading
    - "gyro": Noisy gyroscope reading
    - "vio": Noisy visual odometry velocity in the body frame
    - "target_vel": The current target velocity (only for the velocity control task)

    The action space consists of the voltages of the four rotors.
    """

    def __init__(
        self,
        task: str = "hovering_control",
        freq: int = 100,
        max_steps: int = 1000,
        config: Path | str | None = None,
    ):
        """Initialize the environment.

        Args:
            task: The control task, either "hovering_control" or "velocity_control".
            freq: The control frequency in Hz.
            max_steps: The number of steps after which an episode is truncated.
            config: Path to the simulator config file. Defaults to the bundled quadrotor.

        Raises:
            ConfigurationError: If the config file cannot be loaded.
        """
        super().__init__()
        if task not in TASKS:
            raise ValueError(f"Unknown task '{task}', expected one of {TASKS}")
        self.sim = Simulator()
        config = DEFAULT_CONFIG if config is None else Path(config)
        if (status := self.sim.get_config(config)) != Status.OK:
            raise ConfigurationError(f"Could not configure the simulator from {config} ({status})")
        self.task = task
        self.freq = freq
        self.dt = 1 / freq
        self.max_steps = max_steps
        params = self.sim.params

        self.action_space = spaces.Box(low=params.min_voltage, high=params.max_voltage, shape=(4,))
        obs_spaces = {
            k: spaces.Box(low=-np.inf, high=np.inf, shape=(3,))
            for k in ("pos", "rpy", "vel", "ang_vel", "acc", "gyro", "vio")
        }
        if task == "velocity_control":
            obs_spaces["target_vel"] = spaces.Box(low=-np.inf, high=np.inf, shape=(3,))
        self.observation_space = spaces.Dict(obs_spaces)

        self._steps = 0
        self._start_pos = np.zeros(3)
        self._targets = np.zeros((0, 3))

    def reset(
        self, *, seed: int | None = None, options: dict | None = None
    ) -> tuple[dict[str, NDArray[np.floating]], dict[str, Any]]:
        """Reset the quadrotor to a hovering start state.

        Args:
            seed: Seed for the sensor noise and the velocity targets.
            options: Optional ``pose`` dictionary with the scalar start pose fields accepted by
                :meth:`~.VehicleState.from_pose`.

        Returns:
            The initial observation and info.
        """
        super().reset(seed=seed)
        self.sim.seed(int(self.np_random.integers(2**31)))
        pose = {} if options is None else options.get("pose", {})
        rotor_speed = np.full(4, hover_rotor_speed(self.sim.params))
        state = VehicleState.from_pose(**pose).replace(propeller_angular_velocity=rotor_speed)
        self.sim.reset(state)
        self._start_pos = self.sim.state.global_position.copy()
        self._steps = 0
        if self.task == "velocity_control":
            task_seed = int(self.np_random.integers(2**31))
            self._targets = np.array(
                self.sim.define_velocity_control_task(self.dt, self.max_steps, task_seed)
            )
        return self.obs(), self.info(Status.OK)

    def step(
        self, action: NDArray[np.floating]
    ) -> tuple[dict[str, NDArray[np.floating]], float, bool, bool, dict[str, Any]]:
        """Apply the rotor voltages for one control step.

        Args:
            action: The voltage of each rotor.

        Returns:
            The observation, reward, terminated and truncated flags, and info.
        """
        target = self.target_vel
        status = self.sim.step(np.asarray(action, dtype=np.float64), self.dt)
        self._steps += 1
        state = self.sim.state
        if self.task == "velocity_control":
            reward = -float(np.linalg.norm(state.global_velocity - target))
        else:
            reward = -float(np.linalg.norm(state.global_position - self._start_pos))
        terminated = status.is_failure
        truncated = self._steps >= self.max_steps
        return self.obs(), reward, terminated, truncated, self.info(status)

    @property
    def target_vel(self) -> NDArray[np.floating]:
        """The target velocity of the current step, or zeros for the hovering task."""
        if len(self._targets) == 0:
            return np.zeros(3)
        return self._targets[min(self._steps, len(self._targets) - 1)]

    def obs(self) -> dict[str, NDArray[np.floating]]:
        """Return the observation of the current state."""
        state = self.sim.state
        sensors = self.sim.read_sensor()
        obs = {
            "pos": state.global_position,
            "rpy": state.rpy,
            "vel": state.global_velocity,
            "ang_vel": state.body_angular_velocity,
            "acc": sensors.imu_acc,
            "gyro": sensors.imu_gyro,
            "vio": sensors.vio,
        }
        if self.task == "velocity_control":
            obs["target_vel"] = self.target_vel
        return {k: np.asarray(v, dtype=np.float32) for k, v in obs.items()}

    def info(self, status: Status) -> dict[str, Any]:
        """Return the status of the last step and the power drawn by the motors."""
        return {"status": status, "power": self.sim.state.power, "steps": self._steps}
