"""Command-line interface for covsubmit."""

from __future__ import annotations

import sys
from typing import Iterable, Optional

from covsubmit.cli.runner import CLIRunner

__all__ = ["CLIRunner", "main"]


def main(argv: Optional[Iterable[str]] = None) -> int:
    """Entry point for the ``covsubmit`` console script."""
    return CLIRunner().run(argv)


if __name__ == "__main__":
    sys.exit(main())
