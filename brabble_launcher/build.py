"""Build-if-missing step for the brabble binary."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from core.command_runner import CommandError, CommandRunner

from .config import BuildSettings
from .console import Console


class BuildStatus(str, Enum):
    SKIPPED = "skipped"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class BuildOutcome:
    status: BuildStatus
    detail: str | None = None
    returncode: int | None = None

    @property
    def ok(self) -> bool:
        return self.status is not BuildStatus.FAILED


class BuildOrchestrator:
    """Runs the external build at most once, and only when the artifact is absent."""

    def __init__(
        self,
        *,
        artifact: Path,
        settings: BuildSettings,
        runner: CommandRunner,
        console: Console,
    ) -> None:
        self._artifact = artifact
        self._settings = settings
        self._runner = runner
        self._console = console
        self._outcome: BuildOutcome | None = None

    def ensure_artifact(self) -> BuildOutcome:
        if self._outcome is None:
            self._outcome = self._ensure()
        return self._outcome

    def _ensure(self) -> BuildOutcome:
        if self._artifact.exists():
            self._console.debug(f"Using existing binary: {self._artifact}")
            return BuildOutcome(BuildStatus.SKIPPED)

        command = self._settings.command(self._artifact)
        self._console.info("Building brabble binary...")
        self._console.debug(
            f"{self._runner.format_command(command)} (cwd={self._settings.source_dir})"
        )
        try:
            self._runner.run(
                command,
                cwd=self._settings.source_dir,
                env=self._settings.env or None,
                note="Build brabble",
                stream=True,
            )
        except CommandError as exc:
            code = exc.result.returncode
            return BuildOutcome(
                BuildStatus.FAILED,
                detail=f"build failed with exit code {code}: {self._runner.format_command(command)}",
                returncode=code,
            )
        except OSError as exc:
            return BuildOutcome(
                BuildStatus.FAILED,
                detail=f"could not start build toolchain '{self._settings.toolchain}': {exc}",
            )
        return BuildOutcome(BuildStatus.SUCCEEDED)


__all__ = ["BuildOrchestrator", "BuildOutcome", "BuildStatus"]
