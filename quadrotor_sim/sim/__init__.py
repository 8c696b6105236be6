"""Quadrotor flight dynamics simulation.

This module provides the simulation backend for training and evaluating flight controllers. It
includes:

* The physical parameters and the state of the quadrotor
* An electromechanical motor model and rigid body dynamics with aerodynamic drag
* Noisy IMU and visual odometry sensors
* Failure detection for unsafe states
* Reference trajectories for scripted velocity control tasks

The :class:`~.Simulator` ties these components together. It owns one quadrotor state, advances it
with rotor voltage commands and reports the outcome of every step as a :class:`~.Status`.
"""

from quadrotor_sim.sim.failure import Status, check_failure
from quadrotor_sim.sim.params import QuadrotorParams
from quadrotor_sim.sim.sensors import SensorModel, SensorOutput
from quadrotor_sim.sim.sim import Simulator
from quadrotor_sim.sim.state import VehicleState
from quadrotor_sim.sim.task import velocity_control_task

__all__ = [
    "QuadrotorParams",
    "SensorModel",
    "SensorOutput",
    "Simulator",
    "Status",
    "VehicleState",
    "check_failure",
    "velocity_control_task",
]
