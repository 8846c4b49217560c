"""Utilities for executing external commands in streamed or captured mode."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Sequence
import os
import shlex
import subprocess


@dataclass
class CommandResult:
    """Represents the outcome of an executed command."""

    command: Sequence[str]
    returncode: int
    stdout: str
    stderr: str
    streamed: bool = False

    @property
    def signal(self) -> int | None:
        """Signal number that terminated the process, if any (POSIX only)."""

        if self.returncode < 0:
            return -self.returncode
        return None


class CommandError(RuntimeError):
    """Raised when a checked command exits with a non-zero status."""

    def __init__(self, result: CommandResult):
        message = f"Command failed with exit code {result.returncode}: {format_command(result.command)}"
        if result.streamed:
            message = f"{message}\nstdout/stderr already streamed above."
        elif result.stderr.strip():
            message = f"{message}\nstderr: {result.stderr.strip()}"
        super().__init__(message)
        self.result = result


def format_command(command: Sequence[str]) -> str:
    return " ".join(shlex.quote(str(part)) for part in command)


class CommandRunner:
    """Abstract command runner interface.

    ``stream=True`` connects the child to the parent's stdin/stdout/stderr;
    otherwise stdout and stderr are captured as text.
    """

    def run(
        self,
        command: Sequence[str],
        *,
        cwd: Path | None = None,
        env: Mapping[str, str] | None = None,
        check: bool = True,
        note: str | None = None,
        stream: bool = False,
    ) -> CommandResult:
        raise NotImplementedError

    def format_command(self, command: Sequence[str]) -> str:
        return format_command(command)


class SubprocessCommandRunner(CommandRunner):
    """Command runner that executes commands via :mod:`subprocess`.

    ``OSError`` from a process that cannot be started is not caught here.
    """

    @staticmethod
    def _merge_environment(env: Mapping[str, str] | None) -> Dict[str, str] | None:
        if env is None:
            return None
        merged = os.environ.copy()
        merged.update(env)
        return merged

    @staticmethod
    def _wait_through_interrupts(process: subprocess.Popen) -> int:
        """Wait for ``process``, riding out Ctrl-C in the parent.

        A streamed child shares the terminal's process group, so it receives
        the same SIGINT and decides on its own when to exit.
        """

        while True:
            try:
                return process.wait()
            except KeyboardInterrupt:
                continue

    def _finalize(self, result: CommandResult, *, check: bool) -> CommandResult:
        if check and result.returncode != 0:
            raise CommandError(result)
        return result

    def run(
        self,
        command: Sequence[str],
        *,
        cwd: Path | None = None,
        env: Mapping[str, str] | None = None,
        check: bool = True,
        note: str | None = None,
        stream: bool = False,
    ) -> CommandResult:
        argv = [str(part) for part in command]
        merged_env = self._merge_environment(env)
        if stream:
            with subprocess.Popen(argv, cwd=str(cwd) if cwd else None, env=merged_env) as process:
                returncode = self._wait_through_interrupts(process)
            return self._finalize(
                CommandResult(
                    command=argv,
                    returncode=returncode,
                    stdout="",
                    stderr="",
                    streamed=True,
                ),
                check=check,
            )

        process = subprocess.run(
            argv,
            cwd=str(cwd) if cwd else None,
            env=merged_env,
            capture_output=True,
            text=True,
            check=False,
        )
        return self._finalize(
            CommandResult(
                command=argv,
                returncode=process.returncode,
                stdout=process.stdout or "",
                stderr=process.stderr or "",
            ),
            check=check,
        )


@dataclass(slots=True)
class RecordedCommand:
    command: List[str]
    cwd: str | None
    env: Dict[str, str]
    note: str | None
    stream: bool


@dataclass(slots=True)
class ScriptedResult:
    """Canned result handed out by :class:`RecordingCommandRunner`."""

    returncode: int = 0
    stdout: str = ""
    stderr: str = ""


class RecordingCommandRunner(CommandRunner):
    """Command runner that records commands instead of executing them.

    Results are taken from ``results`` in call order; once exhausted every
    command reports success with empty output.
    """

    def __init__(self, results: Iterable[ScriptedResult] | None = None) -> None:
        self.commands: List[RecordedCommand] = []
        self._results: List[ScriptedResult] = list(results or [])

    @staticmethod
    def _record_entry(
        *,
        command: Sequence[str],
        cwd: Path | None,
        env: Mapping[str, str] | None,
        note: str | None,
        stream: bool,
    ) -> RecordedCommand:
        return RecordedCommand(
            command=[str(part) for part in command],
            cwd=str(cwd) if cwd else None,
            env=dict(env) if env else {},
            note=note,
            stream=stream,
        )

    def run(
        self,
        command: Sequence[str],
        *,
        cwd: Path | None = None,
        env: Mapping[str, str] | None = None,
        check: bool = True,
        note: str | None = None,
        stream: bool = False,
    ) -> CommandResult:
        record = self._record_entry(command=command, cwd=cwd, env=env, note=note, stream=stream)
        self.commands.append(record)
        scripted = self._results.pop(0) if self._results else ScriptedResult()
        result = CommandResult(
            command=record.command,
            returncode=scripted.returncode,
            stdout="" if stream else scripted.stdout,
            stderr="" if stream else scripted.stderr,
            streamed=stream,
        )
        if check and result.returncode != 0:
            raise CommandError(result)
        return result

    def iter_formatted(self, *, workspace: Path | None = None) -> Iterable[str]:
        default_cwd = str(workspace) if workspace else None
        for record in self.commands:
            cmd = self.format_command(record.command)
            cwd = record.cwd or default_cwd
            parts: List[str] = ["[dry-run]"]
            if record.note:
                parts.append(record.note)
            if cwd:
                parts.append(f"(cwd={cwd})")
            if record.env:
                assignments = " ".join(f"{key}={value}" for key, value in sorted(record.env.items()))
                parts.append(f"(env: {assignments})")
            parts.append(cmd)
            yield " ".join(parts)


__all__ = [
    "CommandError",
    "CommandResult",
    "CommandRunner",
    "RecordedCommand",
    "RecordingCommandRunner",
    "ScriptedResult",
    "SubprocessCommandRunner",
    "format_command",
]
