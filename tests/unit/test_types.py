from pathlib import Path

import pytest

from gemini_rulewriter.core.types import (
    ComparisonRecord,
    CompletionResponse,
    Document,
    FileSuccess,
    ModelRef,
    OutputMode,
    ReadFailure,
    TextPart,
    is_output_mode,
    resolve_mode,
)

pytestmark = pytest.mark.unit


class TestDocument:
    def test_load_reads_utf8_without_newline_translation(self, write_file):
        path = write_file("a.md", "line\r\nnext")
        assert Document.load(path).content == "line\r\nnext"

    def test_load_captures_missing_file(self, tmp_path):
        doc = Document.load(tmp_path / "nope.md")
        assert doc.failed
        assert doc.content == ""

    def test_load_captures_invalid_utf8(self, tmp_path):
        path = tmp_path / "bin.md"
        path.write_bytes(b"\xff\xfe\xfa")
        assert Document.load(path).failed

    def test_path_must_be_a_path(self):
        with pytest.raises(TypeError, match="path"):
            Document("a.md", "")  # type: ignore[arg-type]


class TestModes:
    @pytest.mark.parametrize("value", ["verbose", "balanced", "concise", OutputMode.CONCISE])
    def test_known_modes(self, value):
        assert is_output_mode(value)
        assert resolve_mode(value) is OutputMode(value)

    @pytest.mark.parametrize("value", [None, "", "Verbose", "loud", 1])
    def test_unknown_modes_fall_back_to_balanced(self, value):
        assert not is_output_mode(value)
        assert resolve_mode(value) is OutputMode.BALANCED


def test_comparison_record_difference_must_be_consistent():
    with pytest.raises(ValueError, match="difference"):
        ComparisonRecord("f", 10, 4, 5, 50.0)


def test_outcome_messages_carry_path_label_and_detail():
    path = Path("AGENTS.md")
    assert ReadFailure(path, "ENOENT").message == "**AGENTS.md**: Read failed — ENOENT"
    record = ComparisonRecord("AGENTS.md", 10, 4, 6, 60.0)
    assert FileSuccess(path, 3, record).message == "**AGENTS.md**: 3 rules written"


def test_completion_response_text_joins_parts():
    response = CompletionResponse(parts=(TextPart("a"), TextPart(""), TextPart("b")))
    assert response.text == "ab"
    assert CompletionResponse().text == ""
    with pytest.raises(TypeError):
        CompletionResponse(parts=["a"])  # type: ignore[arg-type]


def test_model_ref_requires_ids():
    with pytest.raises(ValueError, match="model_id"):
        ModelRef("google", " ")
