from pathlib import Path

import pytest

from gemini_rulewriter.core.types import (
    AppendSuccess,
    Cancelled,
    FileSuccess,
    ReadFailure,
    WriteFailure,
)
from gemini_rulewriter.report import (
    HEADERS,
    MINUS,
    RULE,
    TableRow,
    build_comparison_section,
    build_table,
    compare_bytes,
    format_change,
    format_file_result,
    row_for,
    summarize,
)

pytestmark = pytest.mark.unit


def written(name: str, original: int, generated: int, rules: int = 1) -> FileSuccess:
    return FileSuccess(
        path=Path(name),
        rule_count=rules,
        comparison=compare_bytes(name, "o" * original, "g" * generated),
    )


class TestCompareBytes:
    def test_exact_difference(self):
        record = compare_bytes("AGENTS.md", "x" * 100, "y" * 26)
        assert record.original_bytes == 100
        assert record.generated_bytes == 26
        assert record.difference == 74
        assert record.percent_change == pytest.approx(74.0)

    def test_growth_is_negative(self):
        record = compare_bytes("f", "x" * 10, "y" * 15)
        assert record.difference == -5
        assert record.percent_change == pytest.approx(-50.0)

    def test_empty_original_has_zero_percent(self):
        record = compare_bytes("f", "", "abc")
        assert record.difference == -3
        assert record.percent_change == 0.0

    def test_counts_utf8_bytes(self):
        assert compare_bytes("f", "ééé", "e").original_bytes == 6


class TestSummarize:
    def test_sums_and_zero_guard(self):
        summary = summarize(
            [compare_bytes("a", "x" * 100, "y" * 26), compare_bytes("b", "x" * 10, "y" * 20)]
        )
        assert summary.total_original == 110
        assert summary.total_generated == 46
        assert summary.total_difference == 64
        assert summary.total_percent_change == pytest.approx(64 / 110 * 100)
        assert summarize([]).total_percent_change == 0.0


class TestFormatChange:
    def test_saved_uses_unicode_minus(self):
        assert format_change(74, 74.0) == f"{MINUS}74.0%"

    def test_growth_uses_plus(self):
        assert format_change(-10, -100.0) == "+100.0%"
        assert format_change(0, 0.0) == "+0.0%"


class TestBuildTable:
    def test_layout_ordering_and_summary(self):
        rows = [
            row_for(written("b.md", 10, 20)),
            row_for(written("a.md", 100, 26, rules=2)),
        ]
        lines = build_table(rows).split("\n")

        assert lines[0].split() == list(HEADERS)
        assert set(lines[1]) == {RULE}
        assert lines[2].split() == ["a.md", "written", "2", "100", "26", "74", f"{MINUS}74.0%"]
        assert lines[3].split() == ["b.md", "written", "1", "10", "20", "-10", "+100.0%"]
        assert set(lines[4]) == {RULE}
        assert lines[5].split() == ["TOTAL", "3", "110", "46", "64", f"{MINUS}58.2%"]
        assert lines[6] == ""
        assert lines[7] == "SAVED 64 bytes (58.2%)"
        # Numeric columns are right-aligned, so full rows end together.
        assert len(lines[0]) == len(lines[2]) == len(lines[3]) == len(lines[5])

    def test_growth_is_reported_as_increased(self):
        table = build_table([row_for(written("a.md", 10, 30))])
        assert table.endswith("INCREASED 20 bytes (200.0%)")

    def test_larger_growth_sorts_before_smaller_saving(self):
        rows = [row_for(written("saved.md", 100, 95)), row_for(written("grew.md", 10, 60))]
        lines = build_table(rows).split("\n")
        assert lines[2].startswith("grew.md")
        assert lines[3].startswith("saved.md")

    def test_rows_without_comparison_keep_order_and_blank_totals(self):
        rows = [
            TableRow("x.md", "read failed"),
            TableRow("y.md", "cancelled"),
        ]
        lines = build_table(rows).split("\n")
        assert lines[2].split() == ["x.md", "read", "failed"]
        assert lines[3].split() == ["y.md", "cancelled"]
        assert lines[-1] == "TOTAL"
        assert "SAVED" not in "\n".join(lines)

    def test_empty(self):
        assert build_table([]) == ""


def test_row_for_each_variant():
    path = Path("dir/AGENTS.md")
    assert row_for(ReadFailure(path, "ENOENT")) == TableRow("AGENTS.md", "read failed")
    assert row_for(WriteFailure(path, "EACCES")).status == "write failed"
    assert row_for(Cancelled(path)) == TableRow("AGENTS.md", "cancelled")
    assert row_for(AppendSuccess(path, 3)) == TableRow("AGENTS.md", "appended", 3)
    assert row_for(written("a.md", 5, 1)).status == "written"


def test_comparison_section_is_fenced_and_empty_without_writes():
    assert build_comparison_section([ReadFailure(Path("a.md"), "ENOENT")]) == []
    section = build_comparison_section([written("a.md", 10, 5)])
    assert section[0] == "```"
    assert section[-1] == "```"
    assert "TOTAL" in section[1]


def test_format_file_result_includes_path_label_and_detail():
    line = format_file_result(ReadFailure(Path("AGENTS.md"), "ENOENT"))
    assert line == "**AGENTS.md**: Read failed — ENOENT"
    assert format_file_result(AppendSuccess(Path("a.md"), 2)) == "**a.md**: 2 rule(s) appended"


def test_rows_are_labelled_relative_to_the_root():
    root = Path("/project")
    top = Cancelled(root / "AGENTS.md")
    nested = ReadFailure(root / "docs" / "AGENTS.md", "ENOENT")
    outside = Cancelled(Path("/elsewhere/AGENTS.md"))

    assert row_for(top, root).file == "AGENTS.md"
    assert row_for(nested, root).file == "docs/AGENTS.md"
    assert row_for(outside, root).file == "AGENTS.md"
    assert row_for(nested).file == "AGENTS.md"
