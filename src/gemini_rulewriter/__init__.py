"""Turn free-form coding instructions into validated, formatted rules."""

import importlib.metadata
import logging

from gemini_rulewriter.adapters import GeminiSessionProvider, ScriptedSessionProvider
from gemini_rulewriter.config import FrozenConfig, ResolvedConfig, resolve_config
from gemini_rulewriter.core.types import (
    AppendSuccess,
    Cancelled,
    ComparisonRecord,
    CompletionResponse,
    Document,
    Failure,
    FileSuccess,
    FormattingFailure,
    ModelRef,
    OutputMode,
    ReadFailure,
    RefineFailure,
    RefineSuccess,
    Result,
    StructuringFailure,
    Success,
    WriteFailure,
)
from gemini_rulewriter.exceptions import (
    ConfigFileError,
    MissingKeyError,
    RulewriterError,
    SessionError,
)
from gemini_rulewriter.files.discovery import resolve_files
from gemini_rulewriter.notify import ResultSink, StreamSink
from gemini_rulewriter.pipeline.append import append_rules
from gemini_rulewriter.pipeline.refine import format_prompt, process_prompt
from gemini_rulewriter.pipeline.retry import PromptRetryDriver
from gemini_rulewriter.pipeline.rewrite import process_file
from gemini_rulewriter.pipeline.runner import RunReport, run_rewrite
from gemini_rulewriter.session import bind_ask, open_session
from gemini_rulewriter.telemetry import TelemetryContext, TelemetryReporter

try:
    __version__ = importlib.metadata.version("gemini-rulewriter")
except importlib.metadata.PackageNotFoundError:
    __version__ = "development"

# Library code never configures handlers.
logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [  # noqa: RUF022
    # Pipelines
    "process_file",
    "append_rules",
    "run_rewrite",
    "RunReport",
    "process_prompt",
    "format_prompt",
    "PromptRetryDriver",
    "resolve_files",
    # Sessions
    "open_session",
    "bind_ask",
    "GeminiSessionProvider",
    "ScriptedSessionProvider",
    "ResultSink",
    "StreamSink",
    # Configuration
    "resolve_config",
    "ResolvedConfig",
    "FrozenConfig",
    # Types
    "Document",
    "OutputMode",
    "ModelRef",
    "CompletionResponse",
    "ComparisonRecord",
    "Result",
    "Success",
    "Failure",
    "ReadFailure",
    "StructuringFailure",
    "FormattingFailure",
    "WriteFailure",
    "FileSuccess",
    "AppendSuccess",
    "Cancelled",
    "RefineSuccess",
    "RefineFailure",
    # Errors
    "RulewriterError",
    "MissingKeyError",
    "SessionError",
    "ConfigFileError",
    # Telemetry
    "TelemetryContext",
    "TelemetryReporter",
]
