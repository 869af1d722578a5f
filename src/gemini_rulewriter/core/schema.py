"""Response schemas the completion service must satisfy.

Each model is the "expected shape" handed to the retry driver; the
validation layer checks decoded JSON against it with pydantic.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Strength(str, Enum):
    """Deontic strength of an extracted directive."""

    OBLIGATORY = "obligatory"
    PERMISSIBLE = "permissible"
    FORBIDDEN = "forbidden"
    OPTIONAL = "optional"
    SUPEREROGATORY = "supererogatory"
    INDIFFERENT = "indifferent"
    OMISSIBLE = "omissible"


STRENGTH_VALUES: tuple[str, ...] = tuple(s.value for s in Strength)


class _ResponseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)


class StructuredRule(_ResponseModel):
    """One extracted directive."""

    strength: Strength
    action: str
    target: str
    reason: str
    context: str | None = None


class StructuredRuleSet(_ResponseModel):
    """Rules in extraction order."""

    rules: list[StructuredRule]


class FormattedRuleSet(_ResponseModel):
    """Rendered rule strings, one per rule or per service-chosen group."""

    rules: list[str]


class ParsedTask(_ResponseModel):
    """A node in a refined prompt's task hierarchy."""

    intent: str
    targets: list[str] = Field(default_factory=list)
    constraints: list[str] = Field(default_factory=list)
    context: str | None = None
    subtasks: list[ParsedTask] = Field(default_factory=list)


class ParsedPrompt(_ResponseModel):
    """Top-level tasks decomposed from free-form user input."""

    tasks: list[ParsedTask]


# Shown to the service inside the structuring and refinement prompts.
STRUCTURED_RULES_EXAMPLE = """{
  "rules": [
    {
      "strength": "obligatory",
      "action": "use",
      "target": "return await",
      "context": "when returning promises from async functions",
      "reason": "keeps the async function in the stack trace"
    }
  ]
}"""

PARSED_PROMPT_EXAMPLE = """{
  "tasks": [
    {
      "intent": "Rename the config loader",
      "targets": ["config/loader.py"],
      "constraints": ["keep the public function names"],
      "context": "the old name collides with a stdlib module",
      "subtasks": []
    }
  ]
}"""
