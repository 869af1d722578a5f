"""Two-phase validation of raw completion text.

Decoding and schema checking are kept apart because the two failure kinds
call for different correction prompts: a JSON syntax problem versus wrong
field content.
"""

from __future__ import annotations

import dataclasses
import json
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ValidationError

from .types import Failure, Result, Success

if TYPE_CHECKING:
    from collections.abc import Sequence


@dataclasses.dataclass(frozen=True, slots=True)
class ValidationIssue:
    """A single field-level violation."""

    path: str
    message: str


@dataclasses.dataclass(frozen=True, slots=True)
class JSONParseError:
    """The text was not valid JSON."""

    detail: str = ""


@dataclasses.dataclass(frozen=True, slots=True)
class SchemaMismatch:
    """The JSON decoded but did not match the expected shape."""

    issues: tuple[ValidationIssue, ...]


type ValidationFailure = JSONParseError | SchemaMismatch


def _issue_path(loc: Sequence[int | str]) -> str:
    return ".".join(str(part) for part in loc) or "(root)"


def _issues_from(error: ValidationError) -> tuple[ValidationIssue, ...]:
    return tuple(
        ValidationIssue(path=_issue_path(e["loc"]), message=e["msg"])
        for e in error.errors()
    )


def validate_json[M: BaseModel](
    text: str, schema: type[M]
) -> Result[M, ValidationFailure]:
    """Decode ``text`` as JSON, then check it against ``schema``.

    Returns:
        ``Success`` with the validated model, or ``Failure`` carrying either a
        ``JSONParseError`` (no schema check attempted) or a ``SchemaMismatch``.
    """
    try:
        data: Any = json.loads(text)
    except json.JSONDecodeError as e:
        return Failure(JSONParseError(detail=str(e)))

    try:
        return Success(schema.model_validate(data))
    except ValidationError as e:
        return Failure(SchemaMismatch(issues=_issues_from(e)))


def format_validation_error(error: ValidationFailure) -> str:
    """Render a failure as text that can be fed back to the service verbatim."""
    match error:
        case JSONParseError():
            return (
                "Invalid JSON. The response could not be decoded. "
                "Return ONLY a single valid JSON value with no surrounding text."
            )
        case SchemaMismatch(issues=issues):
            lines = [
                "Schema validation failed. Fix the issues below and return the corrected JSON:"
            ]
            lines.extend(f"  - {issue.path} — {issue.message}" for issue in issues)
            return "\n".join(lines)
