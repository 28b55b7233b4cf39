"""Load release-link configuration from pyproject.toml."""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from release_link.config.models import ReleaseLinkConfig
from release_link.exceptions import ConfigError, ConfigNotFoundError, ConfigValidationError

TOOL_KEY = "release-link"


def find_pyproject_toml(start: Path | None = None) -> Path:
    """Find pyproject.toml in start or any of its parents.

    Raises:
        ConfigNotFoundError: If no pyproject.toml exists up to the root
    """
    current = (start or Path.cwd()).resolve()
    for directory in (current, *current.parents):
        candidate = directory / "pyproject.toml"
        if candidate.is_file():
            return candidate
    raise ConfigNotFoundError(f"No pyproject.toml found in {current} or its parents")


def load_pyproject_toml(path: Path) -> dict[str, Any]:
    """Read and parse a pyproject.toml file.

    Raises:
        ConfigNotFoundError: If the file does not exist
        ConfigError: If the file is not valid TOML
    """
    if not path.is_file():
        raise ConfigNotFoundError(f"Config file not found: {path}")

    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {path}: {e}") from e


def extract_release_link_config(pyproject: dict[str, Any]) -> dict[str, Any]:
    """Return the ``[tool.release-link]`` table, or an empty dict."""
    return pyproject.get("tool", {}).get(TOOL_KEY, {})


def load_config(path: Path | None = None) -> ReleaseLinkConfig:
    """Load configuration for a project directory.

    Defaults are used when there is no pyproject.toml or no
    ``[tool.release-link]`` table.

    Raises:
        ConfigValidationError: If the table contains invalid values
    """
    try:
        pyproject_path = find_pyproject_toml(path)
    except ConfigNotFoundError:
        return ReleaseLinkConfig()

    data = extract_release_link_config(load_pyproject_toml(pyproject_path))

    try:
        return ReleaseLinkConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigValidationError(f"Invalid [tool.{TOOL_KEY}] configuration: {e}") from e
