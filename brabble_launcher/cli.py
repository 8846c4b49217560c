"""Command line entry point: build brabble if needed, then hand over to it."""
from __future__ import annotations

from pathlib import Path
from typing import Iterable, List, Mapping, Sequence
import os
import sys

from core.command_runner import CommandRunner, RecordingCommandRunner, SubprocessCommandRunner

from .artifact import artifact_path
from .build import BuildOrchestrator
from .config import load_settings
from .console import Console
from .delegate import IOMode, ProcessDelegate
from .routing import VERSION_QUERY, HelpRequest, PassThrough, VersionRequest, route

HELP_TEXT = """\
Brabble launcher
Builds the Go binary if needed, then runs it.

Usage
  brabble                   build + serve in foreground
  brabble <args...>         build + run ./bin/brabble <args>
  brabble --help            show this help
  brabble --version         show brabble version

Key commands
  start | stop | restart          daemon lifecycle
  status --json                   uptime + last transcripts
  mic list | mic set              select input device (whisper build)
  doctor                          check model/hook/portaudio
  setup                           download default whisper model
  models list|download|set        manage whisper.cpp models
  service install --env KEY=VAL   write launchd plist (macOS)
  reload                          reload hook/wake config live
  health                          control-socket liveness ping

Launcher environment
  BRABBLE_LAUNCHER_CONFIG=<path>  settings file (default ./brabble-launcher.toml)
  BRABBLE_LAUNCHER_LOG=debug      none | error | info | debug
  BRABBLE_LAUNCHER_DRY_RUN=1      print build/run commands instead of executing
  BRABBLE_BUILD_TAGS=whisper      go build tags (comma-separated)

Examples
  brabble start --metrics-addr 127.0.0.1:9317
  brabble mic list
  brabble models download ggml-medium-q5_1.bin
  brabble models set ggml-medium-q5_1.bin
  brabble service install --env BRABBLE_METRICS_ADDR=127.0.0.1:9317"""


def print_help() -> None:
    print(HELP_TEXT)


def report_error(message: str | None) -> None:
    print(f"Error: {message or 'unknown failure'}", file=sys.stderr)


def _make_runner(dry_run: bool) -> SubprocessCommandRunner | RecordingCommandRunner:
    return RecordingCommandRunner() if dry_run else SubprocessCommandRunner()


def _emit_dry_run_output(runner: RecordingCommandRunner, *, workspace: Path) -> None:
    for line in runner.iter_formatted(workspace=workspace):
        print(line)


def _handle_version(builder: BuildOrchestrator, delegate: ProcessDelegate) -> int:
    build = builder.ensure_artifact()
    if not build.ok:
        report_error(build.detail)
        return 1

    outcome = delegate.spawn(VERSION_QUERY, IOMode.CAPTURED)
    if not outcome.spawned:
        report_error(outcome.spawn_error)
        return 1

    text = outcome.stdout.strip()
    if text:
        print(text)
    if outcome.succeeded:
        return 0
    if outcome.stderr.strip():
        print(outcome.stderr.strip(), file=sys.stderr)
    return outcome.launcher_exit_code()


def _handle_pass_through(
    command: PassThrough, builder: BuildOrchestrator, delegate: ProcessDelegate
) -> int:
    build = builder.ensure_artifact()
    if not build.ok:
        report_error(build.detail)
        return 1

    outcome = delegate.spawn(command.args, IOMode.INHERITED)
    if not outcome.spawned:
        report_error(outcome.spawn_error)
        return 1
    return outcome.launcher_exit_code()


def run(
    args: Sequence[str],
    *,
    workdir: Path,
    environ: Mapping[str, str],
    runner: CommandRunner | None = None,
) -> int:
    """Route ``args`` and carry out the request, returning the exit status."""

    command = route(args)
    if isinstance(command, HelpRequest):
        print_help()
        return 0

    settings = load_settings(workdir, environ)
    console = Console(level=settings.log_level, dry_run=settings.dry_run)
    if settings.source is not None:
        console.debug(f"Loaded launcher settings from {settings.source}")
    console.dry("Recording build and run commands instead of executing them")
    if runner is None:
        runner = _make_runner(settings.dry_run)

    artifact = artifact_path(workdir, settings.artifact)
    builder = BuildOrchestrator(
        artifact=artifact,
        settings=settings.build,
        runner=runner,
        console=console,
    )
    delegate = ProcessDelegate(artifact=artifact, runner=runner, console=console)

    try:
        if isinstance(command, VersionRequest):
            return _handle_version(builder, delegate)
        return _handle_pass_through(command, builder, delegate)
    finally:
        if settings.dry_run and isinstance(runner, RecordingCommandRunner):
            _emit_dry_run_output(runner, workspace=workdir)


def main(argv: Iterable[str] | None = None) -> int:
    args: List[str] = list(sys.argv[1:] if argv is None else argv)
    try:
        return run(args, workdir=Path.cwd(), environ=os.environ)
    except KeyboardInterrupt:
        return 130
    except Exception as exc:
        report_error(str(exc) or exc.__class__.__name__)
        return 1


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
