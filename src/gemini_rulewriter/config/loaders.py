"""Configuration loaders for environment and files.

Pure data loading: each loader returns a plain dictionary of raw values that
the resolver merges and validates.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
import tomllib
from typing import Any

from gemini_rulewriter.exceptions import ConfigFileError

from .schema import ENV_PREFIX, RulewriterSettings

log = logging.getLogger(__name__)

CONFIG_TOOL_NAME = "gemini_rulewriter"
HOME_CONFIG_NAME = "gemini_rulewriter.toml"

# Control variables that steer resolution but are not config fields
CONFIG_HOME_ENV = f"{ENV_PREFIX}CONFIG_HOME"
META_ENV_FIELDS = {"config_home", "telemetry"}


def load_env() -> dict[str, Any]:
    """Read ``GEMINI_RULEWRITER_*`` variables naming known fields."""
    config: dict[str, Any] = {}
    for key, value in os.environ.items():
        if not key.startswith(ENV_PREFIX):
            continue
        field_name = key[len(ENV_PREFIX) :].lower()
        if field_name in META_ENV_FIELDS:
            continue
        if field_name in RulewriterSettings.model_fields:
            config[field_name] = value
    return config


def _read_toml(path: Path) -> dict[str, Any]:
    try:
        with path.open(mode="rb") as f:
            return tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ConfigFileError(path, f"Failed to parse TOML: {e}", cause=e) from e


def find_pyproject(start_dir: Path | None = None) -> Path | None:
    """Find pyproject.toml by searching up the directory tree."""
    current = Path(start_dir or Path.cwd()).resolve()
    while True:
        candidate = current / "pyproject.toml"
        if candidate.is_file():
            return candidate
        if current == current.parent:
            return None
        current = current.parent


def load_pyproject(project_root: Path | None = None) -> dict[str, Any]:
    """Load ``[tool.gemini_rulewriter]`` from the nearest pyproject.toml.

    Raises:
        ConfigFileError: If the file exists but cannot be parsed, or the
            section is not a table.
    """
    path = find_pyproject(project_root)
    if path is None:
        return {}
    section = _read_toml(path).get("tool", {}).get(CONFIG_TOOL_NAME, {})
    if not isinstance(section, dict):
        raise ConfigFileError(path, f"[tool.{CONFIG_TOOL_NAME}] must be a table")
    return dict(section)


def home_config_path() -> Path:
    """``~/.config/gemini_rulewriter.toml`` unless the config home is overridden."""
    override = os.environ.get(CONFIG_HOME_ENV)
    base = Path(override).expanduser() if override else Path.home() / ".config"
    return base / HOME_CONFIG_NAME


def load_home() -> dict[str, Any]:
    """Load the user-level config file; a missing file yields ``{}``."""
    path = home_config_path()
    if not path.exists():
        return {}
    return _read_toml(path)
