"""Configuration schema and validation using Pydantic.

This module defines the settings schema that validates and coerces configuration
values from environment, files and programmatic overrides into the correct
types with proper defaults.
"""

from typing import Annotated, Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from gemini_rulewriter.core.types import DEFAULT_MODE, OutputMode, resolve_mode

ENV_PREFIX = "GEMINI_RULEWRITER_"


class RulewriterSettings(BaseSettings):
    """Pydantic settings schema for gemini-rulewriter.

    Environment variables use the ``GEMINI_RULEWRITER_`` prefix.
    """

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        env_file=None,
        case_sensitive=False,
        extra="ignore",
    )

    api_key: str | None = Field(
        default=None,
        description="Google Gemini API key",
    )

    model: str = Field(
        default="gemini-2.0-flash",
        description="Gemini model identifier",
        min_length=1,
    )

    mode: OutputMode = Field(
        default=DEFAULT_MODE,
        description="Output mode for formatted rules",
    )

    instructions: Annotated[tuple[str, ...], NoDecode] = Field(
        default=("AGENTS.md",),
        description="Glob patterns naming the instruction files to discover",
    )

    @field_validator("mode", mode="before")
    @classmethod
    def parse_mode(cls, v: Any) -> OutputMode:
        """Unknown modes fall back to balanced rather than failing."""
        return resolve_mode(v.strip().lower() if isinstance(v, str) else v)

    @field_validator("instructions", mode="before")
    @classmethod
    def parse_instructions(cls, v: Any) -> Any:
        """Accept a comma-separated string as well as a list of patterns."""
        if isinstance(v, str):
            return tuple(p.strip() for p in v.split(",") if p.strip())
        return v

    def to_dict(self) -> dict[str, Any]:
        """Field values keyed by name, for merging and source tracking."""
        return {
            "api_key": self.api_key,
            "model": self.model,
            "mode": self.mode,
            "instructions": self.instructions,
        }


def default_values() -> dict[str, Any]:
    """Schema defaults, independent of the current environment."""
    return {
        name: info.get_default(call_default_factory=True)
        for name, info in RulewriterSettings.model_fields.items()
    }
