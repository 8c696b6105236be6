from pathlib import Path

import gymnasium
import numpy as np
import pytest

import quadrotor_sim  # noqa: F401, register the environments
from quadrotor_sim.envs import QuadrotorEnv
from quadrotor_sim.sim import Status
from quadrotor_sim.sim.physics import hover_voltage
from quadrotor_sim.utils import ConfigurationError


@pytest.mark.parametrize("task", ["hovering_control", "velocity_control"])
@pytest.mark.unit
def test_make_env(task: str):
    env = gymnasium.make("Quadrotor-v0", task=task)
    obs, info = env.reset(seed=42)
    assert env.observation_space.contains(obs)
    assert ("target_vel" in obs) == (task == "velocity_control")
    assert info["status"] == Status.OK
    obs, reward, terminated, truncated, info = env.step(env.action_space.sample())
    assert env.observation_space.contains(obs)
    assert isinstance(reward, float)
    assert not terminated
    assert not truncated
    env.close()


@pytest.mark.unit
def test_hover_reward():
    env = QuadrotorEnv(task="hovering_control")
    env.reset(seed=0)
    action = np.full(4, hover_voltage(env.sim.params))
    for _ in range(10):
        _, reward, terminated, _, info = env.step(action)
        assert np.isclose(reward, 0.0, atol=1e-6)
        assert not terminated
        assert info["power"] > 0


@pytest.mark.unit
def test_velocity_targets():
    env = QuadrotorEnv(task="velocity_control", max_steps=50)
    obs, _ = env.reset(seed=1)
    assert np.allclose(obs["target_vel"], env.target_vel)
    targets = [env.target_vel.copy()]
    action = np.full(4, hover_voltage(env.sim.params))
    for _ in range(5):
        obs, reward, *_ = env.step(action)
        targets.append(obs["target_vel"])
        assert reward <= 0
    assert not np.allclose(targets[0], targets[-1])


@pytest.mark.unit
def test_env_determinism():
    env = QuadrotorEnv(task="velocity_control")
    action = np.array([7.2, 7.0, 7.1, 6.9])
    episodes = []
    for _ in range(2):
        obs, _ = env.reset(seed=5)
        trajectory = [obs]
        for _ in range(5):
            trajectory.append(env.step(action)[0])
        episodes.append(trajectory)
    for obs_1, obs_2 in zip(*episodes):
        assert all(np.array_equal(obs_1[k], obs_2[k]) for k in obs_1)


@pytest.mark.unit
def test_truncation():
    env = QuadrotorEnv(max_steps=3)
    env.reset(seed=0)
    action = np.full(4, hover_voltage(env.sim.params))
    truncated = [env.step(action)[3] for _ in range(3)]
    assert truncated == [False, False, True]


@pytest.mark.unit
def test_termination():
    env = QuadrotorEnv()
    env.reset(seed=0, options={"pose": {"g_v_x": 20.0}})
    _, _, terminated, _, info = env.step(np.full(4, hover_voltage(env.sim.params)))
    assert terminated
    assert info["status"] == Status.VELOCITY_EXCEEDED


@pytest.mark.unit
def test_invalid_env(tmp_path: Path):
    with pytest.raises(ValueError):
        QuadrotorEnv(task="racing")
    with pytest.raises(ConfigurationError):
        QuadrotorEnv(config=tmp_path / "missing.toml")
