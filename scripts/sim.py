"""Simulate the quadrotor with constant hover voltages.

Run as:

    $ python scripts/sim.py --steps 500 --dt 0.01

The quadrotor starts at rest with its rotors at hover speed. Without disturbances it should stay in
place. The final state and the simulator status are logged.
"""

from __future__ import annotations

import logging

import fire
import numpy as np

from quadrotor_sim.sim import Simulator, Status, VehicleState
from quadrotor_sim.sim.params import DEFAULT_CONFIG
from quadrotor_sim.sim.physics import hover_rotor_speed, hover_voltage

logger = logging.getLogger(__name__)


def simulate(
    config: str = str(DEFAULT_CONFIG),
    steps: int = 500,
    dt: float = 0.01,
    voltage_offset: float = 0.0,
    seed: int = 42,
) -> dict[str, float]:
    """Hold the hover voltage on all rotors and report the final state.

    Args:
        config: The path to the simulator configuration file.
        steps: The number of simulation steps.
        dt: The duration of a single step in seconds.
        voltage_offset: Offset added to the hover voltage of every rotor.
        seed: The seed of the sensor noise.

    Returns:
        The final state as flat dictionary.
    """
    sim = Simulator()
    if (status := sim.get_config(config)) != Status.OK:
        logger.error(f"Could not load {config}: {status.name}")
        return {}
    sim.seed(seed)
    rotor_speed = np.full(4, hover_rotor_speed(sim.params))
    sim.reset(VehicleState(propeller_angular_velocity=rotor_speed))
    command = np.full(4, hover_voltage(sim.params) + voltage_offset)
    logger.info(f"Hover voltage: {command[0]:.3f} V")

    status = Status.OK
    for i in range(steps):
        status = sim.step(command, dt)
        if status.is_failure:
            logger.warning(f"Quadrotor failed after {i + 1} steps: {status.name}")
            break
    state = sim.get_state()
    logger.info(f"Status: {status.name}\nFinal state: {state}\nSensors: {sim.get_sensor()}")
    return state


if __name__ == "__main__":
    logging.basicConfig()
    logging.getLogger("quadrotor_sim").setLevel(logging.INFO)
    logger.setLevel(logging.INFO)
    fire.Fire(simulate, serialize=lambda _: None)
