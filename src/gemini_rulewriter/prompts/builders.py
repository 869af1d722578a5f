"""Prompt text for each pipeline stage.

Every builder is a pure function of its inputs. The prompts always demand a
bare JSON reply because the retry driver validates the response verbatim.
"""

from __future__ import annotations

from gemini_rulewriter.core.schema import (
    PARSED_PROMPT_EXAMPLE,
    STRENGTH_VALUES,
    STRUCTURED_RULES_EXAMPLE,
)
from gemini_rulewriter.core.types import OutputMode, resolve_mode

JSON_ONLY = "Return ONLY valid JSON."
NO_FENCES = "Do not wrap the response in markdown code fences."

_STRENGTH_GLOSSARY = {
    "obligatory": "must be done",
    "permissible": "may be done",
    "forbidden": "must not be done",
    "optional": "may be done or skipped freely",
    "supererogatory": "praiseworthy beyond what is required",
    "indifferent": "neither encouraged nor discouraged",
    "omissible": "may be left undone",
}


def build_structure_prompt(text: str) -> str:
    """Ask the service to decompose instruction text into structured rules."""
    prompt_parts = [
        "You are a rule structuring system.",
        "Decompose the instruction text below into a list of individual rules.",
        "",
        "Each rule has these fields:",
        "- strength: how binding the rule is (exactly one of the values listed below)",
        "- action: the verb of the directive (for example: use, avoid, prefer, write)",
        "- target: what the action applies to",
        "- context: optional conditions under which the rule applies",
        "- reason: why the rule exists; infer a short one when the text gives none",
        "",
        "Valid strength values:",
    ]
    prompt_parts.extend(
        f"- {value}: {_STRENGTH_GLOSSARY[value]}" for value in STRENGTH_VALUES
    )
    prompt_parts += [
        "",
        "Guidelines:",
        "- Split compound sentences into separate rules.",
        "- Preserve file names, identifiers and technical terms exactly as written.",
        "- Omit the context field when a rule applies unconditionally.",
        "- Keep the order in which rules appear in the text.",
        "",
        "Return JSON matching this example:",
        STRUCTURED_RULES_EXAMPLE,
        "",
        JSON_ONLY,
        "Do not add commentary before or after the JSON.",
        NO_FENCES,
    ]
    return "\n".join([*prompt_parts, "---", "Instruction text:", text])


_MODE_INSTRUCTIONS: dict[OutputMode, tuple[str, ...]] = {
    OutputMode.VERBOSE: (
        "Render every rule as two lines:",
        "Rule: <the directive as one imperative sentence>",
        "Reason: <why the rule exists>",
        "Every rule MUST contain both a Rule: line and a Reason: line.",
    ),
    OutputMode.BALANCED: (
        "Render every rule as a Rule: line, optionally followed by a Reason: line.",
        "Use judgment about the reason:",
        "- Omit the Reason: line when the rule is self-explanatory.",
        "- Include the Reason: line when the rule is non-obvious or counterintuitive.",
    ),
    OutputMode.CONCISE: (
        "Render every rule as a single bullet list item: - <the directive>",
        "Do NOT include reasons of any kind.",
        "Do NOT use Rule: or Reason: prefixes.",
    ),
}


def build_format_prompt(rules_json: str, mode: OutputMode | str | None = None) -> str:
    """Ask the service to render structured rules as human-readable text.

    Args:
        rules_json: The JSON-encoded structured rule set, embedded verbatim.
        mode: Output mode; unrecognized or missing values fall back to balanced.
    """
    resolved = resolve_mode(mode)
    prompt_parts = [
        "You are a rule formatting system.",
        "Turn the structured rules below into concise, human-readable instructions.",
        "Write each directive as an imperative sentence that folds in its target and context.",
        "Rules that say the same thing may be merged.",
        "",
        *_MODE_INSTRUCTIONS[resolved],
        "",
        'Return JSON of the form {"rules": ["<rendered rule>", ...]}, one string per rendered rule.',
        JSON_ONLY,
        NO_FENCES,
    ]
    return "\n".join([*prompt_parts, "---", "Structured rules:", rules_json])


def build_retry_prompt(error_message: str) -> str:
    """Ask the service to correct its previous, invalid response."""
    return "\n".join(
        [
            "Your previous response was invalid.",
            "Return ONLY valid JSON matching the requested schema.",
            NO_FENCES,
            "",
            "Validation error:",
            error_message,
        ]
    )


def build_refine_prompt(text: str) -> str:
    """Ask the service to decompose messy user input into a task hierarchy."""
    prompt_parts = [
        "You are a prompt structuring system.",
        "Take the raw, unstructured user input below and decompose it into a task hierarchy.",
        "The input may come from voice transcription, contain filler words,",
        "or mix several requests together.",
        "",
        "Each task has:",
        "- intent: a clear imperative directive (start with a verb)",
        "- targets: files, systems or things involved (array, may be empty)",
        "- constraints: conditions, preferences or requirements (array, may be empty)",
        "- context: optional background or rationale",
        "- subtasks: child tasks with the same shape (empty for a leaf task)",
        "",
        "Guidelines:",
        "- Capture the intent behind the words, not the words themselves.",
        "- Separate compound requests into multiple top-level tasks.",
        "- Preserve file names, variable names and technical terms exactly.",
        "- Drop filler words, false starts and verbal noise.",
        "",
        "Return JSON matching this example:",
        PARSED_PROMPT_EXAMPLE,
        "",
        JSON_ONLY,
        NO_FENCES,
    ]
    return "\n".join([*prompt_parts, "---", "User input:", text])
