"""
Console output handler for launcher diagnostics.
"""
import sys
from typing import TextIO


class Console:
    """Levelled diagnostic output written to stderr.

    Levels: none < error < info < debug
    Default: 'info' (build announcements are shown)

    Diagnostics never go to stdout, which belongs to the delegate. Fatal
    errors are not levelled: the CLI always prints them as ``Error: ...``.
    """

    LEVELS = {
        "none": 0,
        "error": 1,
        "info": 2,
        "debug": 3,
    }

    def __init__(self, level: str = "info", dry_run: bool = False, stream: TextIO | None = None):
        if level not in self.LEVELS:
            choices = ", ".join(self.LEVELS)
            raise ValueError(f"Unknown log level '{level}'. Expected one of: {choices}")
        self.level = self.LEVELS[level]
        self.dry_run = dry_run
        self._stream = stream

    @property
    def stream(self) -> TextIO:
        # Resolved lazily so redirect_stderr in tests is honoured.
        return self._stream if self._stream is not None else sys.stderr

    def info(self, message: str) -> None:
        if self.level >= self.LEVELS["info"]:
            print(f"[INFO] {message}", file=self.stream)

    def dry(self, message: str) -> None:
        if self.dry_run:
            print(f"[DRY] {message}", file=self.stream)

    def debug(self, message: str) -> None:
        if self.level >= self.LEVELS["debug"]:
            print(f"[DEBUG] {message}", file=self.stream)
