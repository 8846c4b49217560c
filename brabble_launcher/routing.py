"""Classification of the launcher's argument vector."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, Tuple, Union

HELP_FLAGS = frozenset({"--help", "-h"})
VERSION_FLAGS = frozenset({"--version", "-v"})
DEFAULT_SUBCOMMAND = "serve"
VERSION_QUERY: Tuple[str, ...] = ("--version",)


@dataclass(frozen=True, slots=True)
class HelpRequest:
    pass


@dataclass(frozen=True, slots=True)
class VersionRequest:
    pass


@dataclass(frozen=True, slots=True)
class PassThrough:
    args: Tuple[str, ...]


RoutedCommand = Union[HelpRequest, VersionRequest, PassThrough]


def route(args: Sequence[str]) -> RoutedCommand:
    """Classify ``args`` into a help, version or pass-through request.

    Help wins over version wherever either flag appears. Anything else is
    forwarded untouched; an empty vector runs the foreground ``serve``
    subcommand.
    """

    argv = tuple(args)
    if any(arg in HELP_FLAGS for arg in argv):
        return HelpRequest()
    if any(arg in VERSION_FLAGS for arg in argv):
        return VersionRequest()
    if not argv:
        return PassThrough((DEFAULT_SUBCOMMAND,))
    return PassThrough(argv)


__all__ = [
    "DEFAULT_SUBCOMMAND",
    "HELP_FLAGS",
    "HelpRequest",
    "PassThrough",
    "RoutedCommand",
    "VERSION_FLAGS",
    "VERSION_QUERY",
    "VersionRequest",
    "route",
]
