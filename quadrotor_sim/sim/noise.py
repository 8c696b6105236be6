"""Seedable noise classes for the sensor model."""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from numpy.typing import NDArray


class Noise:
    """Base class for noise applied to sensor readings."""

    def __init__(self, dim: int):
        """Initialize basic parameters.

        Args:
            dim: The dimensionality of the noise.
        """
        self.dim = dim
        self.np_random = np.random.default_rng()

    def apply(self, target: NDArray[np.floating], scale: float = 1.0) -> NDArray[np.floating]:
        """Apply the noise to the target.

        Args:
            target: The target to apply the noise to. By default, no noise is applied.
            scale: Multiplier of the noise magnitude.

        Returns:
            The noisy target.
        """
        return target

    def seed(self, seed: int | np.random.SeedSequence | None = None):
        """Set the random number generator seed for the noise for deterministic behaviour.

        Args:
            seed: The seed or seed sequence to set the random number generator to. If None, the seed
                is random.
        """
        self.np_random = np.random.default_rng(seed)


class GaussianNoise(Noise):
    """I.i.d zero-mean Gaussian noise per reading."""

    def __init__(self, dim: int, std: float | NDArray[np.floating] = 1.0):
        """Initialize the Gaussian noise.

        Args:
            dim: The dimensionality of the noise.
            std: The standard deviation of the distribution.
        """
        super().__init__(dim)
        self.std = np.full(self.dim, std, dtype=np.float64) if np.isscalar(std) else np.asarray(std)
        assert self.dim == len(self.std), "std shape should be the same as dim."
        assert np.all(self.std >= 0), "std must not be negative."

    def apply(self, target: NDArray[np.floating], scale: float = 1.0) -> NDArray[np.floating]:
        """Apply the noise to the target.

        Args:
            target: The target to apply the noise to.
            scale: Multiplier of the standard deviation.

        Returns:
            The noisy target.
        """
        noise = self.np_random.normal(0, self.std * scale, size=self.dim)
        return target + noise
