"""Byte-size comparison records and the plain-text results table."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
import dataclasses
from pathlib import Path

from gemini_rulewriter.core.types import (
    AppendSuccess,
    Cancelled,
    ComparisonRecord,
    FileSuccess,
    FormattingFailure,
    ReadFailure,
    RunEntry,
    StructuringFailure,
    WriteFailure,
)
from gemini_rulewriter.utils import byte_length

MINUS = "−"
RULE = "─"
HEADERS = ("File", "Status", "Rules", "Original", "Generated", "Diff", "Change")
_LEFT_ALIGNED = 2  # File and Status; the numeric columns are right-aligned
_GAP = "  "


def _percent(difference: int, original: int) -> float:
    return 0.0 if original == 0 else (difference / original) * 100


def compare_bytes(file: str, original: str, generated: str) -> ComparisonRecord:
    """Compare the UTF-8 sizes of two texts."""
    original_bytes = byte_length(original)
    generated_bytes = byte_length(generated)
    difference = original_bytes - generated_bytes
    return ComparisonRecord(
        file=file,
        original_bytes=original_bytes,
        generated_bytes=generated_bytes,
        difference=difference,
        percent_change=_percent(difference, original_bytes),
    )


@dataclasses.dataclass(frozen=True, slots=True)
class ComparisonSummary:
    total_original: int
    total_generated: int
    total_difference: int
    total_percent_change: float


def summarize(records: Iterable[ComparisonRecord]) -> ComparisonSummary:
    """Aggregate byte totals across comparison records."""
    records = list(records)
    total_original = sum(r.original_bytes for r in records)
    total_generated = sum(r.generated_bytes for r in records)
    total_difference = total_original - total_generated
    return ComparisonSummary(
        total_original=total_original,
        total_generated=total_generated,
        total_difference=total_difference,
        total_percent_change=_percent(total_difference, total_original),
    )


def format_change(difference: int, percent_change: float) -> str:
    """Signed percent string; a minus sign means bytes were saved."""
    prefix = MINUS if difference > 0 else "+"
    return f"{prefix}{abs(percent_change):.1f}%"


@dataclasses.dataclass(frozen=True, slots=True)
class TableRow:
    file: str
    status: str
    rules: int | None = None
    comparison: ComparisonRecord | None = None


def file_label(path: Path, root: Path | None = None) -> str:
    """``path`` relative to ``root`` when it lies inside it, else the file name."""
    if root is not None:
        try:
            return path.relative_to(root).as_posix()
        except ValueError:
            pass
    return path.name


def row_for(entry: RunEntry | AppendSuccess, root: Path | None = None) -> TableRow:
    """Build the table row for one run entry."""
    label = file_label(entry.path, root)
    match entry:
        case FileSuccess(rule_count=count, comparison=comparison):
            return TableRow(label, "written", count, comparison)
        case AppendSuccess(rule_count=count):
            return TableRow(label, "appended", count)
        case ReadFailure() | StructuringFailure() | FormattingFailure() | WriteFailure():
            return TableRow(label, entry.label.lower())
        case Cancelled():
            return TableRow(label, "cancelled")


def _cells(row: TableRow) -> list[str]:
    c = row.comparison
    return [
        row.file,
        row.status,
        str(row.rules) if row.rules is not None else "",
        str(c.original_bytes) if c else "",
        str(c.generated_bytes) if c else "",
        str(c.difference) if c else "",
        format_change(c.difference, c.percent_change) if c else "",
    ]


def _render_line(cells: Sequence[str], widths: Sequence[int]) -> str:
    rendered = [
        cell.ljust(width) if i < _LEFT_ALIGNED else cell.rjust(width)
        for i, (cell, width) in enumerate(zip(cells, widths, strict=True))
    ]
    return _GAP.join(rendered).rstrip()


def build_table(rows: Sequence[TableRow]) -> str:
    """Render rows as a borderless table with a TOTAL row and summary line.

    Rows are ordered by descending absolute byte difference; rows without a
    comparison sort last in their original order.
    """
    if not rows:
        return ""

    ordered = sorted(
        rows,
        key=lambda r: abs(r.comparison.difference) if r.comparison else 0,
        reverse=True,
    )
    totals = summarize(r.comparison for r in rows if r.comparison is not None)
    total_rules = sum(r.rules for r in rows if r.rules is not None)
    total_cells = [
        "TOTAL",
        "",
        str(total_rules) if total_rules > 0 else "",
        str(totals.total_original) if totals.total_original > 0 else "",
        str(totals.total_generated) if totals.total_generated > 0 else "",
        str(totals.total_difference) if totals.total_difference != 0 else "",
        format_change(totals.total_difference, totals.total_percent_change)
        if totals.total_original > 0
        else "",
    ]

    body = [_cells(r) for r in ordered]
    grid = [list(HEADERS), *body, total_cells]
    widths = [max(len(line[i]) for line in grid) for i in range(len(HEADERS))]
    lines = [_render_line(cells, widths) for cells in grid]

    separator = RULE * max(len(line) for line in lines)
    lines.insert(1, separator)
    lines.insert(len(lines) - 1, separator)

    if totals.total_original == 0:
        return "\n".join(lines)

    verb = "SAVED" if totals.total_difference > 0 else "INCREASED"
    summary = (
        f"{verb} {abs(totals.total_difference)} bytes "
        f"({abs(totals.total_percent_change):.1f}%)"
    )
    return "\n".join(lines) + "\n\n" + summary


def build_comparison_section(
    entries: Iterable[RunEntry], root: Path | None = None
) -> list[str]:
    """Fenced table lines for a chat surface; empty when nothing was written.

    Files are labelled relative to ``root`` when given.
    """
    entries = list(entries)
    if not any(isinstance(e, FileSuccess) for e in entries):
        return []
    table = build_table([row_for(e, root) for e in entries])
    return ["```", table, "```"]


def format_file_result(entry: RunEntry | AppendSuccess) -> str:
    """One user-visible line for a per-file outcome."""
    return entry.message
