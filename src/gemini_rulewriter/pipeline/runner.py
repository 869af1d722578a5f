"""Sequential batch orchestration for rewrite runs.

All exchanges in a run share one conversational session, so documents are
processed strictly one after another. A cancellation signal is honored
between documents, never mid-document.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
import dataclasses
import logging
from typing import TYPE_CHECKING

from gemini_rulewriter.core.types import (
    DEFAULT_MODE,
    Cancelled,
    ComparisonRecord,
    Document,
    FileSuccess,
    OutputMode,
    RunEntry,
    resolve_mode,
)
from gemini_rulewriter.pipeline.rewrite import process_file
from gemini_rulewriter.report import build_comparison_section, format_file_result
from gemini_rulewriter.telemetry import TelemetryContext

if TYPE_CHECKING:
    from pathlib import Path

    from gemini_rulewriter.pipeline.retry import AskFn
    from gemini_rulewriter.telemetry import TelemetryContextProtocol

log = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True, slots=True)
class RunReport:
    """Ordered per-document entries of one rewrite run."""

    entries: tuple[RunEntry, ...]

    @property
    def comparisons(self) -> list[ComparisonRecord]:
        return [e.comparison for e in self.entries if isinstance(e, FileSuccess)]

    @property
    def succeeded(self) -> int:
        return sum(1 for e in self.entries if isinstance(e, FileSuccess))

    @property
    def cancelled(self) -> bool:
        return any(isinstance(e, Cancelled) for e in self.entries)

    def messages(self) -> list[str]:
        return [format_file_result(e) for e in self.entries]

    def render(self, root: Path | None = None) -> str:
        """Outcome lines followed by the fenced comparison table, if any."""
        lines = self.messages()
        section = build_comparison_section(self.entries, root)
        if section:
            lines = [*lines, "", *section]
        return "\n".join(lines)


async def run_rewrite(
    documents: Sequence[Document],
    ask: AskFn,
    mode: OutputMode | str | None = DEFAULT_MODE,
    *,
    cancel: asyncio.Event | None = None,
    telemetry: TelemetryContextProtocol | None = None,
) -> RunReport:
    """Rewrite each document in order and collect one entry per document.

    Args:
        documents: Documents in processing order.
        ask: Prompt capability bound to the run's session.
        mode: Output mode for every document in the run.
        cancel: Checked before each document; once set, the rest of the
            batch is marked cancelled.
        telemetry: Optional telemetry context.
    """
    tele = telemetry or TelemetryContext()
    resolved_mode = resolve_mode(mode)
    entries: list[RunEntry] = []

    with tele("run", documents=len(documents)):
        for i, document in enumerate(documents):
            if cancel is not None and cancel.is_set():
                remaining = documents[i:]
                log.info("Run cancelled; %d document(s) not started", len(remaining))
                entries.extend(Cancelled(d.path) for d in remaining)
                break
            entries.append(
                await process_file(document, ask, resolved_mode, telemetry=tele)
            )

    report = RunReport(entries=tuple(entries))
    tele.metric("run.succeeded", report.succeeded)
    return report
