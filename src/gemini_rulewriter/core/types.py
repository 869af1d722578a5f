"""Core data types that flow through the rule-writing pipeline.

This module defines the immutable values that describe a document as it
moves through structuring, formatting and persistence, plus the tagged
outcomes each stage can produce. Outcomes are closed unions of frozen
dataclasses so consumers can handle them exhaustively with ``match``.
"""

from __future__ import annotations

import dataclasses
from enum import Enum
from pathlib import Path
import typing

# --- Minimal guard helpers ---


def _is_tuple_of(value: object, typ: type | tuple[type, ...]) -> bool:
    return isinstance(value, tuple) and all(isinstance(v, typ) for v in value)


def _require(
    *,
    condition: bool,
    message: str,
    exc: type[Exception] = ValueError,
    field_name: str | None = None,
) -> None:
    """Centralized validation with optional field context for clearer errors."""
    if not condition:
        if field_name:
            raise exc(f"{field_name}: {message}")
        raise exc(message)


# --- Result type ---

TSuccess = typing.TypeVar("TSuccess")
TFailure = typing.TypeVar("TFailure")


@dataclasses.dataclass(frozen=True, slots=True)
class Success[TSuccess]:
    """A successful result."""

    value: TSuccess


@dataclasses.dataclass(frozen=True, slots=True)
class Failure[TFailure]:
    """A failed result, carrying the error."""

    error: TFailure


type Result[TSuccess, TFailure] = Success[TSuccess] | Failure[TFailure]

# A prompt exchange either yields a decoded value or a human-readable error.
type PromptOutcome[T] = Success[T] | Failure[str]


# --- Documents and modes ---


@dataclasses.dataclass(frozen=True, slots=True)
class Document:
    """An instruction file loaded for processing.

    ``error`` is set (and ``content`` left empty) when the file could not be
    read; such documents never reach the completion service.
    """

    path: Path
    content: str
    error: str | None = None

    def __post_init__(self) -> None:
        """Validate Document invariants."""
        _require(
            condition=isinstance(self.path, Path),
            message="must be a Path",
            field_name="path",
            exc=TypeError,
        )
        _require(
            condition=isinstance(self.content, str),
            message="must be a str",
            field_name="content",
            exc=TypeError,
        )
        _require(
            condition=self.error is None or isinstance(self.error, str),
            message="must be a str or None",
            field_name="error",
            exc=TypeError,
        )

    @classmethod
    def load(cls, path: str | Path) -> Document:
        """Read a UTF-8 document, capturing read failures instead of raising."""
        file_path = Path(path)
        try:
            return cls(
                path=file_path,
                content=file_path.read_text(encoding="utf-8", newline=""),
            )
        except (OSError, UnicodeDecodeError) as e:
            return cls(path=file_path, content="", error=str(e))

    @property
    def failed(self) -> bool:
        return self.error is not None


class OutputMode(str, Enum):
    """How much justification text the formatter renders."""

    VERBOSE = "verbose"  # Every rule carries a Rule:/Reason: pair
    BALANCED = "balanced"  # Reasons only where the rule is not self-evident
    CONCISE = "concise"  # Bullet list, no reasons


DEFAULT_MODE = OutputMode.BALANCED


def is_output_mode(value: object) -> bool:
    """Return True when ``value`` names one of the output modes."""
    if isinstance(value, OutputMode):
        return True
    return isinstance(value, str) and value in {m.value for m in OutputMode}


def resolve_mode(value: object) -> OutputMode:
    """Coerce a user-supplied mode, falling back to ``balanced``."""
    if isinstance(value, OutputMode):
        return value
    if is_output_mode(value):
        return OutputMode(typing.cast("str", value))
    return DEFAULT_MODE


# --- Byte accounting ---


@dataclasses.dataclass(frozen=True, slots=True)
class ComparisonRecord:
    """Byte-size before/after accounting for one written file."""

    file: str
    original_bytes: int
    generated_bytes: int
    difference: int
    percent_change: float

    def __post_init__(self) -> None:
        """Validate ComparisonRecord invariants."""
        _require(
            condition=isinstance(self.original_bytes, int) and self.original_bytes >= 0,
            message=f"must be an int >= 0, got {self.original_bytes}",
            field_name="original_bytes",
        )
        _require(
            condition=isinstance(self.generated_bytes, int)
            and self.generated_bytes >= 0,
            message=f"must be an int >= 0, got {self.generated_bytes}",
            field_name="generated_bytes",
        )
        _require(
            condition=self.difference == self.original_bytes - self.generated_bytes,
            message="must equal original_bytes - generated_bytes",
            field_name="difference",
        )


# --- Per-file outcomes ---
# Failure labels double as the user-visible stage names.

READ_FAILED = "Read failed"
PARSE_FAILED = "Parse failed"
FORMAT_FAILED = "Format failed"
WRITE_FAILED = "Write failed"


def _render(path: Path, label: str, detail: str | None = None) -> str:
    if detail is None:
        return f"**{path}**: {label}"
    return f"**{path}**: {label} — {detail}"


@dataclasses.dataclass(frozen=True, slots=True)
class ReadFailure:
    """The document could not be loaded; no service calls were made."""

    path: Path
    error: str
    label: typing.ClassVar[str] = READ_FAILED

    @property
    def message(self) -> str:
        return _render(self.path, self.label, self.error)


@dataclasses.dataclass(frozen=True, slots=True)
class StructuringFailure:
    """Structuring (unstructured text -> rules) failed."""

    path: Path
    error: str
    label: typing.ClassVar[str] = PARSE_FAILED

    @property
    def message(self) -> str:
        return _render(self.path, self.label, self.error)


@dataclasses.dataclass(frozen=True, slots=True)
class FormattingFailure:
    """Formatting (rules -> rendered text) failed."""

    path: Path
    error: str
    label: typing.ClassVar[str] = FORMAT_FAILED

    @property
    def message(self) -> str:
        return _render(self.path, self.label, self.error)


@dataclasses.dataclass(frozen=True, slots=True)
class WriteFailure:
    """Persisting the rendered rules failed; the file is unchanged."""

    path: Path
    error: str
    label: typing.ClassVar[str] = WRITE_FAILED

    @property
    def message(self) -> str:
        return _render(self.path, self.label, self.error)


@dataclasses.dataclass(frozen=True, slots=True)
class FileSuccess:
    """A rewrite completed and the file now holds the formatted rules."""

    path: Path
    rule_count: int
    comparison: ComparisonRecord

    @property
    def label(self) -> str:
        return f"{self.rule_count} rules written"

    @property
    def message(self) -> str:
        return _render(self.path, self.label)


@dataclasses.dataclass(frozen=True, slots=True)
class AppendSuccess:
    """New rules were appended to the end of the target file."""

    path: Path
    rule_count: int

    @property
    def label(self) -> str:
        return f"{self.rule_count} rule(s) appended"

    @property
    def message(self) -> str:
        return _render(self.path, self.label)


@dataclasses.dataclass(frozen=True, slots=True)
class Cancelled:
    """The run was cancelled before this document was started."""

    path: Path
    label: typing.ClassVar[str] = "Cancelled"

    @property
    def message(self) -> str:
        return _render(self.path, self.label)


type StageFailure = ReadFailure | StructuringFailure | FormattingFailure | WriteFailure
type FileOutcome = StageFailure | FileSuccess
type AppendOutcome = StageFailure | AppendSuccess
type RunEntry = FileOutcome | Cancelled


# --- Refinement outcomes ---


@dataclasses.dataclass(frozen=True, slots=True)
class RefineSuccess[TParsed]:
    """A refined prompt: the rendered markdown plus the decoded hierarchy."""

    formatted: str
    parsed: TParsed


@dataclasses.dataclass(frozen=True, slots=True)
class RefineFailure:
    """The refinement exchange failed."""

    error: str
    label: typing.ClassVar[str] = PARSE_FAILED

    @property
    def message(self) -> str:
        return f"{self.label} — {self.error}"


# --- Neutral completion payload types ---


@dataclasses.dataclass(frozen=True, slots=True)
class TextPart:
    """A minimal library-owned representation of a text part."""

    text: str

    def __post_init__(self) -> None:
        """Validate TextPart invariants."""
        _require(
            condition=isinstance(self.text, str),
            message="text must be a str",
            exc=TypeError,
        )


@dataclasses.dataclass(frozen=True, slots=True)
class CompletionResponse:
    """One reply from the completion service, free of provider SDK types.

    ``error`` is set when the service explicitly rejected the request.
    """

    parts: tuple[TextPart, ...] = ()
    error: str | None = None

    def __post_init__(self) -> None:
        """Validate CompletionResponse invariants."""
        _require(
            condition=_is_tuple_of(self.parts, TextPart),
            message="must be a tuple[TextPart, ...]",
            field_name="parts",
            exc=TypeError,
        )

    @classmethod
    def from_text(cls, text: str) -> CompletionResponse:
        return cls(parts=(TextPart(text),))

    @property
    def text(self) -> str:
        """Concatenated text of all non-empty parts."""
        return "".join(p.text for p in self.parts if p.text)


@dataclasses.dataclass(frozen=True, slots=True)
class ModelRef:
    """Identifies the completion endpoint a session is bound to."""

    provider_id: str
    model_id: str

    def __post_init__(self) -> None:
        """Validate ModelRef invariants."""
        _require(
            condition=isinstance(self.provider_id, str) and self.provider_id.strip() != "",
            message="must be a non-empty str",
            field_name="provider_id",
        )
        _require(
            condition=isinstance(self.model_id, str) and self.model_id.strip() != "",
            message="must be a non-empty str",
            field_name="model_id",
        )
