#!/usr/bin/env python3  # noqa: EXE001
"""
Scripted Rewrite Demo: the full pipeline without network access

Runs the two-stage rewrite over a throwaway AGENTS.md using a scripted
session provider, so the structuring call, the formatting call and the
size comparison table can be seen end to end without an API key.

Swap ScriptedSessionProvider for GeminiSessionProvider(api_key) to run the
same flow against Gemini.
"""  # noqa: D212, D415

import asyncio
import json
from pathlib import Path
import tempfile

from gemini_rulewriter import (
    Document,
    ModelRef,
    OutputMode,
    ScriptedSessionProvider,
    bind_ask,
    open_session,
    run_rewrite,
)

INSTRUCTIONS = """\
Please always use pathlib for paths, os.path is really inconsistent across our
codebase and we keep getting bugs from it. Also you should probably prefer
f-strings. And never commit secrets!!
"""

STRUCTURED = {
    "rules": [
        {
            "strength": "obligatory",
            "action": "use",
            "target": "pathlib for filesystem paths",
            "reason": "os.path usage is inconsistent and causes bugs",
        },
        {
            "strength": "optional",
            "action": "use",
            "target": "f-strings",
            "reason": "stated as a soft preference",
        },
        {
            "strength": "forbidden",
            "action": "commit",
            "target": "secrets",
            "reason": "leaked credentials",
        },
    ]
}

FORMATTED = {
    "rules": [
        "- Always use pathlib for filesystem paths.",
        "- Prefer f-strings.",
        "- Never commit secrets.",
    ]
}


async def main() -> None:  # noqa: D103
    provider = ScriptedSessionProvider(
        [json.dumps(STRUCTURED), json.dumps(FORMATTED)]
    )

    with tempfile.TemporaryDirectory() as tmp:
        path = Path(tmp) / "AGENTS.md"
        path.write_text(INSTRUCTIONS, encoding="utf-8")

        async with open_session(
            provider, model=ModelRef("google", "gemini-2.0-flash")
        ) as session:
            report = await run_rewrite(
                [Document.load(path)], bind_ask(session), OutputMode.CONCISE
            )

        print(report.render())
        print("\n--- rewritten file ---")
        print(path.read_text(encoding="utf-8"))


if __name__ == "__main__":
    asyncio.run(main())
