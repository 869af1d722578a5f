"""Entry point for ``python -m gemini_rulewriter``."""

import sys

from .cli import main

if __name__ == "__main__":
    sys.exit(main())
