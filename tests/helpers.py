"""Shared builders and stand-ins for the test suite."""

import json

from gemini_rulewriter.core.types import Failure, Success


def structured(**overrides) -> dict:
    """One structured rule as the service would return it."""
    rule = {
        "strength": "obligatory",
        "action": "use",
        "target": "pathlib",
        "reason": "consistent path handling",
    }
    rule.update(overrides)
    return rule


def structured_json(*rules: dict) -> str:
    return json.dumps({"rules": list(rules)})


def formatted_json(*lines: str) -> str:
    return json.dumps({"rules": list(lines)})


class FakeAsk:
    """Async ``ask`` stand-in returning queued outcomes and recording prompts.

    Queue entries: a ``str`` is returned as ``Failure(str)``; a ``Success`` or
    ``Failure`` is returned as-is; anything else is validated against the
    requested schema and wrapped in ``Success``.
    """

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.calls: list[tuple[str, type]] = []

    async def __call__(self, prompt, schema):
        self.calls.append((prompt, schema))
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, str):
            return Failure(outcome)
        if isinstance(outcome, Success | Failure):
            return outcome
        return Success(schema.model_validate(outcome))
