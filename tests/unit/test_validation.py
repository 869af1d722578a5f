import pytest

from gemini_rulewriter.core.schema import FormattedRuleSet, StructuredRuleSet
from gemini_rulewriter.core.types import Failure, Success
from gemini_rulewriter.core.validation import (
    JSONParseError,
    SchemaMismatch,
    ValidationIssue,
    format_validation_error,
    validate_json,
)

pytestmark = pytest.mark.unit


def test_valid_json_matching_schema_returns_model():
    result = validate_json('{"rules": ["- a", "- b"]}', FormattedRuleSet)
    assert isinstance(result, Success)
    assert result.value.rules == ["- a", "- b"]


def test_malformed_json_is_a_parse_failure():
    result = validate_json("{not json", FormattedRuleSet)
    assert isinstance(result, Failure)
    assert isinstance(result.error, JSONParseError)
    assert result.error.detail


def test_wrong_shape_is_a_schema_failure_with_field_paths():
    text = '{"rules": [{"strength": "sometimes", "action": "use", "target": "x", "reason": "r"}]}'
    result = validate_json(text, StructuredRuleSet)
    assert isinstance(result, Failure)
    assert isinstance(result.error, SchemaMismatch)
    paths = [issue.path for issue in result.error.issues]
    assert "rules.0.strength" in paths


def test_missing_top_level_field_is_reported():
    result = validate_json("{}", FormattedRuleSet)
    assert isinstance(result, Failure)
    assert isinstance(result.error, SchemaMismatch)
    assert result.error.issues[0].path == "rules"


def test_non_object_root_uses_root_path():
    result = validate_json("[1, 2]", FormattedRuleSet)
    assert isinstance(result, Failure)
    assert isinstance(result.error, SchemaMismatch)
    assert result.error.issues[0].path == "(root)"


def test_parse_failure_message_is_generic_invalid_json():
    message = format_validation_error(JSONParseError("Expecting value"))
    assert "Invalid JSON" in message
    assert "Expecting value" not in message


def test_schema_failure_message_lists_issues():
    error = SchemaMismatch(
        issues=(
            ValidationIssue("rules.0.strength", "Input should be 'obligatory'"),
            ValidationIssue("rules.1.reason", "Field required"),
        )
    )
    message = format_validation_error(error)
    lines = message.splitlines()
    assert "Schema validation failed" in lines[0]
    assert "Fix the issues" in lines[0]
    assert lines[1] == "  - rules.0.strength — Input should be 'obligatory'"
    assert lines[2] == "  - rules.1.reason — Field required"
