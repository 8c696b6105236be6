"""Utility module."""

from __future__ import annotations

import logging
from pathlib import Path

import toml
from munch import Munch, munchify

logger = logging.getLogger(__name__)


class ConfigurationError(Exception):
    """The parameter file is missing, unparsable or incomplete."""


def load_config(path: Path | str) -> Munch:
    """Load a simulator config file.

    Args:
        path: Path to the TOML config file.

    Returns:
        The munchified config dict.

    Raises:
        ConfigurationError: If the file does not exist, is not a TOML file or cannot be parsed.
    """
    path = Path(path)
    if not path.is_file():
        raise ConfigurationError(f"Configuration file not found: {path}")
    if path.suffix != ".toml":
        raise ConfigurationError(f"Configuration file has to be a TOML file: {path}")
    try:
        with open(path, "r") as f:
            return munchify(toml.load(f))
    except toml.TomlDecodeError as e:
        raise ConfigurationError(f"Malformed configuration file {path}: {e}") from e
