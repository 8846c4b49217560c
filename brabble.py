#!/usr/bin/env python3
"""Entry-point script for the brabble launcher when run from a checkout."""
from __future__ import annotations

from pathlib import Path
import sys

_ROOT = Path(__file__).resolve().parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

from brabble_launcher.cli import main as cli_main


def main() -> int:
    """Delegate to the launcher CLI entry point."""
    return cli_main(sys.argv[1:])


if __name__ == "__main__":  # pragma: no cover - exercised via integration tests
    raise SystemExit(main())
