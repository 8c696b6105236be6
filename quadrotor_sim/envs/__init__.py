"""Gymnasium environments for training flight controllers on the quadrotor simulator.

Note:
    The environments only provide the interface between a control policy and the simulator. Policy
    learning and rendering are not part of this package.
"""

from gymnasium import register

from quadrotor_sim.envs.quadrotor_env import QuadrotorEnv

__all__ = ["QuadrotorEnv"]

register(
    id="Quadrotor-v0",
    entry_point="quadrotor_sim.envs.quadrotor_env:QuadrotorEnv",
    disable_env_checker=True,
)
