"""Delivery of the final report text to wherever the user reads it."""

from __future__ import annotations

import sys
from typing import Protocol, TextIO, runtime_checkable


@runtime_checkable
class ResultSink(Protocol):
    async def deliver(self, text: str) -> None: ...


class StreamSink:
    """Writes each report to a text stream, stdout unless told otherwise."""

    def __init__(self, stream: TextIO | None = None):
        self._stream = stream

    async def deliver(self, text: str) -> None:
        stream = self._stream or sys.stdout
        stream.write(text if text.endswith("\n") else text + "\n")
        stream.flush()
