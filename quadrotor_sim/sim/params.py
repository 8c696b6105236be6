"""Physical parameters of the simulated quadrotor.

The :class:`QuadrotorParams` dataclass bundles the mass and inertia properties, aerodynamic drag,
rotor geometry, the electromechanical motor model, voltage limits and the failure thresholds. An
instance is created once from the ``[sim]``, ``[quadrotor]`` and ``[failure]`` tables of a config
file and is read-only afterwards. Reconfiguring a simulator means loading a new instance.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields
from pathlib import Path
from typing import TYPE_CHECKING

import numpy as np

from quadrotor_sim.constants import PRECISION, ROTOR_DIRECTIONS
from quadrotor_sim.utils import ConfigurationError, load_config

if TYPE_CHECKING:
    from munch import Munch
    from numpy.typing import NDArray

logger = logging.getLogger(__name__)

DEFAULT_CONFIG = Path(__file__).resolve().parent / "assets/quadrotor.toml"


@dataclass(frozen=True)
class QuadrotorParams:
    """A collection of physical parameters of the quadrotor.

    The preferred way to create a `QuadrotorParams` object is to read the parameters from a config
    file with :meth:`from_file`.
    """

    mass: float
    inertia: NDArray[np.floating]
    inverse_inertia: NDArray[np.floating]
    drag_coeff_force: NDArray[np.floating]
    drag_coeff_moment: NDArray[np.floating]
    gravity_center: NDArray[np.floating]
    # Each row is the mount point of a propeller center relative to the body origin in body frame
    propeller_coord: NDArray[np.floating]
    rotor_directions: NDArray[np.floating]

    # Thrust polynomial ct_0 + ct_1 * w + ct_2 * w^2
    ct_0: float
    ct_1: float
    ct_2: float
    ra: float  # Armature resistance
    mm: float  # Propeller drag torque coefficient
    jm: float  # Rotor moment of inertia
    phi: float  # Motor back-EMF and torque constant

    min_voltage: float
    max_voltage: float

    max_velocity: float
    max_angular_velocity: float
    max_range: float

    precision: float = PRECISION

    def __post_init__(self):
        """Check the physical consistency of the parameters and freeze the arrays."""
        if self.mass <= 0:
            raise ConfigurationError(f"Mass must be positive, got {self.mass}")
        if min(self.ra, self.jm, self.phi) <= 0:
            raise ConfigurationError("Motor constants 'ra', 'jm' and 'phi' must be positive")
        if self.min_voltage > self.max_voltage:
            raise ConfigurationError(
                f"min_voltage ({self.min_voltage}) exceeds max_voltage ({self.max_voltage})"
            )
        if self.precision <= 0:
            raise ConfigurationError(f"Precision must be positive, got {self.precision}")
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, np.ndarray):
                value.flags.writeable = False

    @staticmethod
    def from_file(path: Path | str) -> QuadrotorParams:
        """Load the quadrotor parameters from a TOML config file.

        Raises:
            ConfigurationError: If the file is missing, malformed or incomplete.
        """
        return QuadrotorParams.from_config(load_config(path))

    @staticmethod
    def from_config(config: Munch) -> QuadrotorParams:
        """Create the parameters from a munchified config.

        Args:
            config: The config with the ``quadrotor`` and ``failure`` tables and an optional ``sim``
                table.

        Raises:
            ConfigurationError: If a required field is missing or has the wrong shape.
        """
        try:
            quad, failure = config.quadrotor, config.failure
            motor, voltage = quad.motor, quad.voltage
            inertia = _array(quad.inertia, (3, 3), "inertia")
            params = QuadrotorParams(
                mass=float(quad.mass),
                inertia=inertia,
                inverse_inertia=np.linalg.inv(inertia),
                drag_coeff_force=_array(quad.drag_coeff_force, (3, 3), "drag_coeff_force"),
                drag_coeff_moment=_array(quad.drag_coeff_moment, (3, 3), "drag_coeff_moment"),
                gravity_center=_array(quad.gravity_center, (3,), "gravity_center"),
                propeller_coord=_array(quad.propeller_coord, (4, 3), "propeller_coord"),
                rotor_directions=_array(
                    quad.get("rotor_directions", ROTOR_DIRECTIONS), (4,), "rotor_directions"
                ),
                ct_0=float(motor.ct_0),
                ct_1=float(motor.ct_1),
                ct_2=float(motor.ct_2),
                ra=float(motor.ra),
                mm=float(motor.mm),
                jm=float(motor.jm),
                phi=float(motor.phi),
                min_voltage=float(voltage.min),
                max_voltage=float(voltage.max),
                max_velocity=float(failure.max_velocity),
                max_angular_velocity=float(failure.max_angular_velocity),
                max_range=float(failure.max_range),
                precision=float(config.get("sim", {}).get("precision", PRECISION)),
            )
        except (AttributeError, KeyError) as e:
            raise ConfigurationError(f"Missing configuration field: {e}") from e
        except (TypeError, ValueError, np.linalg.LinAlgError) as e:
            raise ConfigurationError(f"Invalid configuration value: {e}") from e
        logger.debug(f"Loaded quadrotor parameters (mass={params.mass} kg)")
        return params


def _array(value: list, shape: tuple[int, ...], name: str) -> NDArray[np.floating]:
    arr = np.array(value, dtype=np.float64)
    if arr.shape != shape:
        raise ConfigurationError(f"'{name}' must have shape {shape}, got {arr.shape}")
    return arr
