"""Configuration management for gemini-rulewriter.

Resolve-once, freeze-then-flow:

- ResolvedConfig: post-resolution configuration with audit metadata
- FrozenConfig: immutable configuration handed to commands
- SourceMap: where each configuration value came from
"""

from gemini_rulewriter.exceptions import ConfigFileError

from .resolver import resolve_config
from .schema import RulewriterSettings
from .types import ConfigOrigin, FrozenConfig, ResolvedConfig, SourceMap

__all__ = [
    "ConfigFileError",
    "ConfigOrigin",
    "FrozenConfig",
    "ResolvedConfig",
    "RulewriterSettings",
    "SourceMap",
    "resolve_config",
]
