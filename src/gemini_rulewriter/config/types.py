"""Configuration data types, following the resolve-once, freeze-then-flow pattern."""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Literal, NamedTuple

from gemini_rulewriter.core.types import ModelRef, OutputMode

ConfigOrigin = Literal["programmatic", "env", "file", "home", "default"]
SourceMap = Mapping[str, ConfigOrigin]

PROVIDER_ID = "google"

_FIELD_ORDER = ("api_key", "model", "mode", "instructions")


def _display(value: object) -> str:
    if isinstance(value, OutputMode):
        return value.value
    if isinstance(value, tuple):
        return ",".join(str(v) for v in value)
    return str(value)


class ResolvedConfig(NamedTuple):
    """Configuration after resolution from all sources, before freezing.

    Carries the origin of every field for auditing.
    """

    api_key: str | None
    model: str
    mode: OutputMode
    instructions: tuple[str, ...]

    origin: SourceMap

    def __str__(self) -> str:
        """String representation with redacted API key for safe logging."""
        api_key_display = "[REDACTED]" if self.api_key else None
        return (
            f"ResolvedConfig(api_key={api_key_display!r}, model={self.model!r}, "
            f"mode={self.mode.value!r}, instructions={self.instructions!r}, "
            f"origin={dict(self.origin)!r})"
        )

    def __repr__(self) -> str:
        return self.__str__()

    def to_frozen(self) -> "FrozenConfig":
        """Drop the audit metadata and freeze the values."""
        return FrozenConfig(
            api_key=self.api_key,
            model=self.model,
            mode=self.mode,
            instructions=self.instructions,
        )

    def audit(self) -> str:
        """Redacted report of where each field value came from."""
        lines = []
        for field in _FIELD_ORDER:
            if field not in self.origin:
                continue
            origin = self.origin[field]
            value = getattr(self, field)
            if field == "api_key":
                shown = f"{origin}:None" if value is None else f"{origin}:<redacted>"
            elif origin == "env":
                shown = f"env:GEMINI_RULEWRITER_{field.upper()}={_display(value)}"
            else:
                shown = f"{origin}:{_display(value)}"
            lines.append(f"{field}: {shown}")
        return "\n".join(lines)


@dataclass(frozen=True)
class FrozenConfig:
    """Immutable configuration handed to commands."""

    api_key: str | None
    model: str
    mode: OutputMode
    instructions: tuple[str, ...]

    @property
    def model_ref(self) -> ModelRef:
        return ModelRef(PROVIDER_ID, self.model)

    def __str__(self) -> str:
        """String representation with redacted API key for safe logging."""
        api_key_display = "[REDACTED]" if self.api_key else None
        return (
            f"FrozenConfig(api_key={api_key_display!r}, model={self.model!r}, "
            f"mode={self.mode.value!r}, instructions={self.instructions!r})"
        )

    def __repr__(self) -> str:
        return self.__str__()
