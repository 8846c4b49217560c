"""Brabble launcher: builds the brabble binary when missing, then runs it."""

from .artifact import artifact_path
from .build import BuildOrchestrator, BuildOutcome, BuildStatus
from .cli import main, run
from .delegate import DelegateOutcome, IOMode, ProcessDelegate
from .routing import HelpRequest, PassThrough, VersionRequest, route

__all__ = [
    "BuildOrchestrator",
    "BuildOutcome",
    "BuildStatus",
    "DelegateOutcome",
    "HelpRequest",
    "IOMode",
    "PassThrough",
    "ProcessDelegate",
    "VersionRequest",
    "artifact_path",
    "main",
    "route",
    "run",
]
