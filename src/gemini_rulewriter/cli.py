"""Command-line surface: rewrite, add, learn and refine.

Every command resolves configuration, opens one scratch session, runs its
pipeline inside it and hands the report text to a result sink. Exceptions
are reserved for setup problems and are reported at this boundary as
``<command> error: <message>``.
"""

from __future__ import annotations

import argparse
import asyncio
from collections.abc import Callable, Iterator, Sequence
from contextlib import contextmanager
import logging
from pathlib import Path
import signal
import sys

from gemini_rulewriter.adapters.gemini import GeminiSessionProvider
from gemini_rulewriter.config import FrozenConfig, resolve_config
from gemini_rulewriter.core.types import (
    AppendSuccess,
    Failure,
    OutputMode,
    RefineSuccess,
    resolve_mode,
)
from gemini_rulewriter.files.discovery import resolve_files
from gemini_rulewriter.notify import ResultSink, StreamSink
from gemini_rulewriter.pipeline.append import append_rules
from gemini_rulewriter.pipeline.refine import process_prompt
from gemini_rulewriter.pipeline.runner import run_rewrite
from gemini_rulewriter.session import SessionProvider, bind_ask, open_session

log = logging.getLogger(__name__)

# ruff: noqa: T201

type ProviderFactory = Callable[[FrozenConfig], SessionProvider]

SESSION_TITLES = {
    "rewrite": "Rulewriter Rewrite",
    "add": "Rulewriter Add",
    "learn": "Rulewriter Learn",
    "refine": "Rulewriter Refine",
}


def _gemini_provider(config: FrozenConfig) -> SessionProvider:
    return GeminiSessionProvider(config.api_key)


@contextmanager
def _interrupt_sets(cancel: asyncio.Event) -> Iterator[None]:
    """Route SIGINT to ``cancel`` while the block runs, where the loop allows it."""
    loop = asyncio.get_running_loop()
    try:
        loop.add_signal_handler(signal.SIGINT, cancel.set)
    except (NotImplementedError, RuntimeError):
        # Windows loops and non-main threads keep the default KeyboardInterrupt.
        yield
        return
    try:
        yield
    finally:
        loop.remove_signal_handler(signal.SIGINT)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Rewrite coding-instruction files as structured, validated rules",
        prog="python -m gemini_rulewriter",
    )
    parser.add_argument(
        "-C",
        "--directory",
        type=Path,
        default=None,
        help="Project directory (default: current directory)",
    )
    parser.add_argument("--model", help="Override the configured Gemini model")
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )
    parser.add_argument(
        "--show-config",
        action="store_true",
        help="Print where each configuration value came from before running",
    )

    commands = parser.add_subparsers(dest="command", required=True)
    mode_help = "Output format: verbose, balanced or concise (default: configured mode)"

    rewrite = commands.add_parser(
        "rewrite", help="Rewrite instruction files as formatted rules"
    )
    rewrite.add_argument("--mode", help=mode_help)
    rewrite.add_argument(
        "--files", help="Comma-separated paths to process instead of discovery"
    )

    add = commands.add_parser("add", help="Append rules parsed from text to a file")
    add.add_argument("input", help="Unstructured text describing the rule(s) to add")
    add.add_argument(
        "--file", help="File to append to (default: first discovered instruction file)"
    )
    add.add_argument("--mode", help=mode_help)

    learn = commands.add_parser(
        "learn", help="Append the rule implied by a user correction"
    )
    learn.add_argument("input", help="The correction or stated preference")
    learn.add_argument(
        "--file", help="File to append to (default: first discovered instruction file)"
    )

    refine = commands.add_parser(
        "refine", help="Restructure a messy prompt into a task hierarchy"
    )
    refine.add_argument("input", help="The raw prompt text")
    return parser


def _mode(args: argparse.Namespace, config: FrozenConfig) -> OutputMode:
    requested = getattr(args, "mode", None)
    return config.mode if requested is None else resolve_mode(requested)


def _target_file(
    args: argparse.Namespace, directory: Path, config: FrozenConfig
) -> Path | str:
    """Explicit ``--file`` or the first discovered file; a str is an error."""
    if args.file:
        return Path(args.file)
    resolved = resolve_files(directory, patterns=config.instructions)
    if isinstance(resolved, Failure):
        return resolved.error
    return resolved.value[0].path


async def _rewrite(
    args: argparse.Namespace,
    directory: Path,
    config: FrozenConfig,
    provider: SessionProvider,
    cancel: asyncio.Event | None,
) -> tuple[str, bool]:
    resolved = resolve_files(directory, args.files, config.instructions)
    if isinstance(resolved, Failure):
        return resolved.error, False

    cancel = cancel if cancel is not None else asyncio.Event()
    async with open_session(
        provider, model=config.model_ref, title=SESSION_TITLES["rewrite"]
    ) as session:
        with _interrupt_sets(cancel):
            report = await run_rewrite(
                resolved.value, bind_ask(session), _mode(args, config), cancel=cancel
            )
    return report.render(directory), report.succeeded > 0


async def _append(
    args: argparse.Namespace,
    directory: Path,
    config: FrozenConfig,
    provider: SessionProvider,
    *,
    mode: OutputMode,
    verb: str,
) -> tuple[str, bool]:
    target = _target_file(args, directory, config)
    if isinstance(target, str):
        return target, False

    async with open_session(
        provider, model=config.model_ref, title=SESSION_TITLES[args.command]
    ) as session:
        outcome = await append_rules(
            args.input, target, bind_ask(session), mode, directory=directory
        )

    if isinstance(outcome, AppendSuccess):
        return f"{verb} {outcome.rule_count} rule(s) to {outcome.path}", True
    return outcome.message, False


async def _refine(
    args: argparse.Namespace, config: FrozenConfig, provider: SessionProvider
) -> tuple[str, bool]:
    async with open_session(
        provider, model=config.model_ref, title=SESSION_TITLES["refine"]
    ) as session:
        outcome = await process_prompt(args.input, bind_ask(session))

    if isinstance(outcome, RefineSuccess):
        return outcome.formatted, True
    return outcome.message, False


async def run_command(
    args: argparse.Namespace,
    *,
    provider_factory: ProviderFactory = _gemini_provider,
    sink: ResultSink | None = None,
    cancel: asyncio.Event | None = None,
) -> int:
    """Run one parsed command and deliver its report; returns the exit status.

    ``cancel`` stops a rewrite batch between files. When omitted, SIGINT sets
    an internal event instead.
    """
    out = sink or StreamSink()
    directory = (args.directory or Path.cwd()).resolve()

    try:
        overrides = {"model": args.model} if args.model else None
        resolved = resolve_config(overrides, project_root=directory)
        if args.show_config:
            print(resolved.audit(), file=sys.stderr)
        config = resolved.to_frozen()
        provider = provider_factory(config)

        match args.command:
            case "rewrite":
                text, ok = await _rewrite(
                    args, directory, config, provider, cancel
                )
            case "add":
                text, ok = await _append(
                    args,
                    directory,
                    config,
                    provider,
                    mode=_mode(args, config),
                    verb="Added",
                )
            case "learn":
                text, ok = await _append(
                    args,
                    directory,
                    config,
                    provider,
                    mode=OutputMode.BALANCED,
                    verb="Learned",
                )
            case "refine":
                text, ok = await _refine(args, config, provider)
            case _:
                raise ValueError(f"Unknown command: {args.command}")
    except Exception as e:
        log.debug("%s failed", args.command, exc_info=True)
        await out.deliver(f"{args.command} error: {e}")
        return 1

    await out.deliver(text)
    return 0 if ok else 1


def main(argv: Sequence[str] | None = None) -> int:
    """CLI entry point."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    return asyncio.run(run_command(args))


if __name__ == "__main__":
    sys.exit(main())
