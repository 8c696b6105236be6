"""Quadrotor flight dynamics simulator for training and evaluating flight controllers."""

import quadrotor_sim.envs  # noqa: F401, register environments with gymnasium
from quadrotor_sim.sim import QuadrotorParams, Simulator, Status, VehicleState

__all__ = ["QuadrotorParams", "Simulator", "Status", "VehicleState"]
