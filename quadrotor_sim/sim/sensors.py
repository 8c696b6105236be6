"""Synthetic onboard sensors.

The :class:`SensorModel` produces an IMU reading (accelerometer and gyroscope) and a visual
odometry (VIO) velocity estimate from the true state of the quadrotor. The accelerometer reports the
body-frame acceleration of the last dynamics step, which is why the simulator caches it next to the
state. The VIO estimate degrades with the distance from the world origin, mimicking the drift of an
external localization system far away from its reference.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, NamedTuple

import numpy as np

from quadrotor_sim.constants import ACC_NOISE_STD, GYRO_NOISE_STD, VIO_NOISE_STD, VIO_RANGE_GAIN
from quadrotor_sim.sim.noise import GaussianNoise

if TYPE_CHECKING:
    from numpy.typing import NDArray

    from quadrotor_sim.sim.state import VehicleState


class SensorOutput(NamedTuple):
    """A single reading of all onboard sensors."""

    imu_acc: NDArray[np.floating]
    imu_gyro: NDArray[np.floating]
    vio: NDArray[np.floating]

    def to_dict(self) -> dict[str, float]:
        """Flatten the reading into a dictionary of scalar fields."""
        out = {}
        for prefix, value in (("acc", self.imu_acc), ("gyro", self.imu_gyro), ("vio", self.vio)):
            out.update({f"{prefix}_{axis}": float(v) for axis, v in zip("xyz", value)})
        return out


class SensorModel:
    """Noisy IMU and visual odometry sensors of a single quadrotor."""

    def __init__(
        self,
        acc_std: float = ACC_NOISE_STD,
        gyro_std: float = GYRO_NOISE_STD,
        vio_std: float = VIO_NOISE_STD,
        vio_range_gain: float = VIO_RANGE_GAIN,
    ):
        """Initialize the sensor noise.

        Args:
            acc_std: Standard deviation of the accelerometer noise.
            gyro_std: Standard deviation of the gyroscope noise.
            vio_std: Standard deviation of the VIO noise at the world origin.
            vio_range_gain: Relative increase of the VIO noise per meter distance from the origin.
        """
        self.acc_noise = GaussianNoise(3, std=acc_std)
        self.gyro_noise = GaussianNoise(3, std=gyro_std)
        self.vio_noise = GaussianNoise(3, std=vio_std)
        self.vio_range_gain = vio_range_gain

    def read(self, state: VehicleState, body_acc: NDArray[np.floating]) -> SensorOutput:
        """Sample the sensors.

        Args:
            state: The current state of the quadrotor.
            body_acc: The body-frame acceleration of the last dynamics step.
        """
        vio_scale = 1.0 + self.vio_range_gain * np.linalg.norm(state.global_position)
        return SensorOutput(
            imu_acc=self.acc_noise.apply(np.asarray(body_acc, dtype=np.float64)),
            imu_gyro=self.gyro_noise.apply(state.body_angular_velocity),
            vio=self.vio_noise.apply(state.body_velocity, scale=vio_scale),
        )

    def seed(self, seed: int | None = None):
        """Seed the noise of all sensors.

        Each sensor gets its own stream derived from the seed, so that equal noise parameters do
        not produce identical noise on different sensors.
        """
        seeds = np.random.SeedSequence(seed).spawn(3)
        for noise, s in zip((self.acc_noise, self.gyro_noise, self.vio_noise), seeds):
            noise.seed(s)
