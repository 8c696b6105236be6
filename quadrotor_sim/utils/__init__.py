"""Utility module."""

from quadrotor_sim.utils.utils import ConfigurationError, load_config

__all__ = ["ConfigurationError", "load_config"]
