from dataclasses import FrozenInstanceError
from pathlib import Path

import numpy as np
import pytest
import toml

from quadrotor_sim.sim.params import DEFAULT_CONFIG, QuadrotorParams
from quadrotor_sim.utils import ConfigurationError


def write_config(tmp_path: Path, modify=None) -> Path:
    """Write a copy of the default config, optionally modified, into a temporary directory."""
    config = toml.load(str(DEFAULT_CONFIG))
    if modify is not None:
        modify(config)
    path = tmp_path / "quadrotor.toml"
    with open(path, "w") as f:
        toml.dump(config, f)
    return path


@pytest.mark.unit
def test_load_default_params():
    params = QuadrotorParams.from_file(DEFAULT_CONFIG)
    assert params.mass == 1.35
    assert params.inertia.shape == (3, 3)
    assert np.allclose(params.inertia @ params.inverse_inertia, np.eye(3))
    assert params.propeller_coord.shape == (4, 3)
    assert np.array_equal(params.rotor_directions, [1.0, -1.0, 1.0, -1.0])
    assert params.min_voltage < params.max_voltage
    assert params.precision == 0.001


@pytest.mark.unit
def test_params_are_read_only():
    params = QuadrotorParams.from_file(DEFAULT_CONFIG)
    with pytest.raises(FrozenInstanceError):
        params.mass = 2.0
    with pytest.raises(ValueError):
        params.inertia[0, 0] = 1.0


@pytest.mark.unit
def test_optional_fields(tmp_path: Path):
    def remove_optional(config: dict):
        del config["sim"]
        del config["quadrotor"]["rotor_directions"]

    params = QuadrotorParams.from_file(write_config(tmp_path, remove_optional))
    assert np.array_equal(params.rotor_directions, [1.0, -1.0, 1.0, -1.0])
    assert params.precision == 0.001


@pytest.mark.unit
def test_missing_field(tmp_path: Path):
    def remove_mass(config: dict):
        del config["quadrotor"]["mass"]

    with pytest.raises(ConfigurationError, match="Missing"):
        QuadrotorParams.from_file(write_config(tmp_path, remove_mass))

    def remove_motor(config: dict):
        del config["quadrotor"]["motor"]

    with pytest.raises(ConfigurationError, match="Missing"):
        QuadrotorParams.from_file(write_config(tmp_path, remove_motor))


@pytest.mark.unit
def test_wrong_shape(tmp_path: Path):
    def flat_inertia(config: dict):
        config["quadrotor"]["inertia"] = [0.0119, 0.0119, 0.0223]

    with pytest.raises(ConfigurationError, match="inertia"):
        QuadrotorParams.from_file(write_config(tmp_path, flat_inertia))


@pytest.mark.unit
def test_invalid_values(tmp_path: Path):
    def negative_mass(config: dict):
        config["quadrotor"]["mass"] = -1.0

    with pytest.raises(ConfigurationError):
        QuadrotorParams.from_file(write_config(tmp_path, negative_mass))

    def swapped_voltages(config: dict):
        config["quadrotor"]["voltage"] = {"min": 12.0, "max": 0.0}

    with pytest.raises(ConfigurationError):
        QuadrotorParams.from_file(write_config(tmp_path, swapped_voltages))

    def singular_inertia(config: dict):
        config["quadrotor"]["inertia"] = [[0.0] * 3] * 3

    with pytest.raises(ConfigurationError):
        QuadrotorParams.from_file(write_config(tmp_path, singular_inertia))


@pytest.mark.unit
def test_invalid_file(tmp_path: Path):
    with pytest.raises(ConfigurationError):
        QuadrotorParams.from_file(tmp_path / "missing.toml")
    path = tmp_path / "quadrotor.yaml"
    path.write_text("mass: 1.0")
    with pytest.raises(ConfigurationError):
        QuadrotorParams.from_file(path)
    path = tmp_path / "broken.toml"
    path.write_text("[quadrotor\nmass = ")
    with pytest.raises(ConfigurationError):
        QuadrotorParams.from_file(path)
