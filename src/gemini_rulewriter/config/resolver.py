"""Configuration resolution with precedence handling.

Precedence: Programmatic > Environment > Project file > Home file > Defaults
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from gemini_rulewriter.exceptions import ConfigFileError

from . import loaders
from .schema import RulewriterSettings, default_values
from .types import ResolvedConfig

if TYPE_CHECKING:
    from .types import ConfigOrigin

log = logging.getLogger(__name__)


def _apply(
    merged: dict[str, Any],
    origins: dict[str, ConfigOrigin],
    values: dict[str, Any],
    origin: ConfigOrigin,
) -> None:
    for field, value in values.items():
        if field in merged:  # Only override known fields
            merged[field] = value
            origins[field] = origin


def resolve_config(
    programmatic: dict[str, Any] | None = None,
    *,
    project_root: str | Path | None = None,
) -> ResolvedConfig:
    """Resolve configuration from all sources with proper precedence.

    Args:
        programmatic: Overrides with the highest precedence; unknown keys are
            ignored.
        project_root: Directory to search (upwards) for pyproject.toml.
            Defaults to the current directory.

    Returns:
        ResolvedConfig with merged values and source tracking for audit.

    Raises:
        ConfigFileError: If the project configuration file is malformed.
        ValueError: If the merged values fail validation.
    """
    merged = default_values()
    origins: dict[str, ConfigOrigin] = dict.fromkeys(merged, "default")

    try:
        _apply(merged, origins, loaders.load_home(), "home")
    except ConfigFileError as e:
        # Home config errors are non-fatal
        log.warning("Ignoring home configuration: %s", e)

    root = Path(project_root) if project_root is not None else None
    _apply(merged, origins, loaders.load_pyproject(root), "file")
    _apply(merged, origins, loaders.load_env(), "env")
    if programmatic:
        _apply(merged, origins, programmatic, "programmatic")

    try:
        settings = RulewriterSettings(**merged)
    except ValidationError as e:
        raise ValueError(f"Configuration validation failed: {e}") from e

    values = settings.to_dict()
    resolved = ResolvedConfig(**values, origin=origins)
    log.debug("Resolved configuration: %s", resolved)
    return resolved
