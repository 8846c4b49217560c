"""Spawning the brabble binary with the routed arguments."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Sequence

from core.command_runner import CommandRunner

from .console import Console


class IOMode(str, Enum):
    INHERITED = "inherited"
    CAPTURED = "captured"


@dataclass(frozen=True, slots=True)
class DelegateOutcome:
    exit_code: int | None
    signal: int | None = None
    stdout: str = ""
    stderr: str = ""
    spawn_error: str | None = None

    @property
    def spawned(self) -> bool:
        return self.spawn_error is None

    @property
    def succeeded(self) -> bool:
        return self.spawned and self.exit_code == 0

    def launcher_exit_code(self) -> int:
        """Exit status for the launcher; 0 when the delegate left no code."""

        return self.exit_code if self.exit_code is not None else 0


class ProcessDelegate:
    def __init__(self, *, artifact: Path, runner: CommandRunner, console: Console) -> None:
        self._artifact = artifact
        self._runner = runner
        self._console = console

    def spawn(self, args: Sequence[str], mode: IOMode = IOMode.INHERITED) -> DelegateOutcome:
        command = [str(self._artifact), *args]
        self._console.debug(f"Delegating ({mode.value}): {self._runner.format_command(command)}")
        try:
            result = self._runner.run(
                command,
                check=False,
                note="Run brabble",
                stream=mode is IOMode.INHERITED,
            )
        except OSError as exc:
            return DelegateOutcome(
                exit_code=None,
                spawn_error=f"could not run {self._artifact}: {exc}",
            )

        signal = result.signal
        if signal is not None:
            self._console.debug(f"brabble terminated by signal {signal}")
        return DelegateOutcome(
            exit_code=None if signal is not None else result.returncode,
            signal=signal,
            stdout=result.stdout,
            stderr=result.stderr,
        )


__all__ = ["DelegateOutcome", "IOMode", "ProcessDelegate"]
