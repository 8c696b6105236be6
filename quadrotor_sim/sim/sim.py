"""Quadrotor simulator.

The :class:`Simulator` owns exactly one quadrotor state, one parameter set and one sensor model with
its own random number generators. Independent instances share no mutable state and can run in
parallel, e.g. one per training episode. A single instance is not thread safe.

The simulator communicates the outcome of every operation through a :class:`~.Status` code instead
of raising. A physical failure does not stop the simulation, it is up to the caller to end the
episode.
"""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING

import numpy as np
from gymnasium.utils import seeding

from quadrotor_sim.sim import physics
from quadrotor_sim.sim.failure import Status, check_failure
from quadrotor_sim.sim.params import QuadrotorParams
from quadrotor_sim.sim.sensors import SensorModel, SensorOutput
from quadrotor_sim.sim.state import VehicleState
from quadrotor_sim.sim.task import velocity_control_task
from quadrotor_sim.utils import ConfigurationError, load_config

if TYPE_CHECKING:
    from pathlib import Path

    from numpy.typing import NDArray

logger = logging.getLogger(__name__)


class Simulator:
    """Rigid body simulation of a single quadrotor driven by rotor voltages."""

    def __init__(self, params: QuadrotorParams | None = None, sensors: SensorModel | None = None):
        """Create an unconfigured simulator, or a configured one if parameters are given.

        Args:
            params: The quadrotor parameters. If None, :meth:`get_config` or :meth:`configure` has
                to be called before the simulator can step.
            sensors: The sensor model. Defaults to a sensor model with the default noise levels.
        """
        self.params: QuadrotorParams | None = params
        self.sensors = SensorModel() if sensors is None else sensors
        self.task_settings: dict = {}
        self._state = VehicleState()
        self._body_acc = np.zeros(3)

    @property
    def configured(self) -> bool:
        """True if the simulator has a parameter set and can step."""
        return self.params is not None

    @property
    def state(self) -> VehicleState:
        """The current state of the quadrotor."""
        return self._state

    @property
    def body_acceleration(self) -> NDArray[np.floating]:
        """The body-frame acceleration of the last dynamics step."""
        return self._body_acc.copy()

    def get_config(self, path: Path | str) -> Status:
        """Load the parameters, and optionally the sensor noise and task settings, from a file.

        On failure the simulator keeps its previous configuration.

        Args:
            path: Path to the TOML config file.

        Returns:
            ``Status.OK`` or ``Status.CONFIGURATION_ERROR``.
        """
        try:
            config = load_config(path)
            params = QuadrotorParams.from_config(config)
            sensors = SensorModel(**config.get("sensor", {}))
            task_settings = dict(config.get("task", {}))
            velocity_control_task(0.01, 1, 0, **task_settings)  # Validate the task settings
        except ConfigurationError as e:
            logger.error(f"Failed to load the configuration: {e}")
            return Status.CONFIGURATION_ERROR
        except (TypeError, AssertionError) as e:
            logger.error(f"Invalid sensor or task settings in {path}: {e}")
            return Status.CONFIGURATION_ERROR
        self.configure(params)
        self.sensors = sensors
        self.task_settings = task_settings
        return Status.OK

    def configure(self, params: QuadrotorParams):
        """Replace the parameter set of the simulator."""
        self.params = params

    def reset(self, state: VehicleState | None = None, **kwargs: float):
        """Reset the quadrotor state.

        Without arguments, the quadrotor is reset to the origin at rest with identity orientation.

        Args:
            state: A fully specified state to reset to.
            **kwargs: Scalar pose fields ``g_x, g_y, g_z, g_v_x, g_v_y, g_v_z, w_x, w_y, w_z, roll,
                pitch, yaw`` to reset to. Missing fields are zero. Cannot be combined with `state`.
        """
        if state is not None and kwargs:
            raise TypeError("Reset either to a full state or to pose fields, not both.")
        if state is not None:
            self._state = state.replace()
        else:
            self._state = VehicleState.from_pose(**kwargs)
        self._body_acc = np.zeros(3)

    def step(self, command: NDArray[np.floating], dt: float) -> Status:
        """Advance the simulation by `dt` seconds with constant rotor voltages.

        The time step is split into equal integration steps no longer than the configured precision.

        Args:
            command: The voltage of each rotor. Out of range voltages are clipped. Shape: (4,).
            dt: The duration of the step.

        Returns:
            The failure classification of the new state. If the state is safe but the command had to
            be clipped, ``Status.COMMAND_OUT_OF_RANGE``. If the simulator is unconfigured or the
            input is invalid, the state is not changed.
        """
        if self.params is None:
            logger.error("Simulator is not configured. Load a configuration before stepping.")
            return Status.NOT_CONFIGURED
        if not np.isfinite(dt) or dt <= 0:
            logger.error(f"Time step must be positive, got {dt}")
            return Status.INVALID_TIME_STEP
        command = np.asarray(command, dtype=np.float64)
        if command.shape != (4,) or not np.all(np.isfinite(command)):
            logger.error(f"Expected four finite rotor voltages, got {command}")
            return Status.INVALID_COMMAND
        voltage, clipped = physics.clip_command(command, self.params)
        if clipped:
            logger.debug(f"Command {command} clipped to {voltage}")

        n_steps = max(1, math.ceil(round(dt / self.params.precision, 6)))
        h = dt / n_steps
        state, body_acc = self._state, self._body_acc
        for _ in range(n_steps):
            state, body_acc = physics.step(state, self.params, voltage, h)
        self._state, self._body_acc = state, body_acc

        status = self.check_failure()
        if status.is_failure:
            logger.debug(f"Quadrotor failure: {status.name}")
            return status
        return Status.COMMAND_OUT_OF_RANGE if clipped else Status.OK

    def check_failure(self) -> Status:
        """Check the current state against the failure thresholds."""
        if self.params is None:
            return Status.NOT_CONFIGURED
        return check_failure(self._state, self.params)

    def read_sensor(self) -> SensorOutput:
        """Sample the onboard sensors at the current state."""
        return self.sensors.read(self._state, self._body_acc)

    def get_sensor(self) -> dict[str, float]:
        """Sample the onboard sensors and return the reading as flat dictionary."""
        return self.read_sensor().to_dict()

    def get_state(self) -> dict[str, float]:
        """Return a flat snapshot of the current state.

        The keys are ``g_*`` for the world position, ``b_v_*`` and ``g_v_*`` for the body and world
        velocity, ``w_*`` for the body angular velocity, ``roll``, ``pitch``, ``yaw`` and ``power``.
        """
        s = self._state
        out = {}
        for prefix, value in (
            ("g", s.global_position),
            ("b_v", s.body_velocity),
            ("g_v", s.global_velocity),
            ("w", s.body_angular_velocity),
        ):
            out.update({f"{prefix}_{axis}": float(v) for axis, v in zip("xyz", value)})
        out.update({k: float(v) for k, v in zip(("roll", "pitch", "yaw"), s.rpy)})
        out["power"] = s.power
        return out

    def define_velocity_control_task(
        self, dt: float, step_count: int, seed: int
    ) -> list[NDArray[np.floating]]:
        """Generate target velocities for a velocity control task.

        The task does not depend on, nor change, the state of the simulator.

        Returns:
            One target world-frame velocity per step. Empty if the input is invalid.
        """
        status, targets = velocity_control_task(dt, step_count, seed, **self.task_settings)
        if status != Status.OK:
            return []
        return list(targets)

    def seed(self, seed: int | None = None) -> int:
        """Seed the sensor noise for reproducible readings.

        Args:
            seed: The seed. If None, a random seed is drawn.

        Returns:
            The seed that was used.
        """
        _, seed = seeding.np_random(seed)
        self.sensors.seed(seed)
        return seed
