"""Launcher settings resolved from an optional config file and the environment."""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, List, Mapping

from core.config_loader import (
    find_config_file,
    load_config_file,
    merge_mappings,
    normalize_string_list,
    normalize_string_mapping,
)

from .artifact import DEFAULT_ARTIFACT
from .console import Console

CONFIG_STEM = "brabble-launcher"
CONFIG_ENV = "BRABBLE_LAUNCHER_CONFIG"
LOG_ENV = "BRABBLE_LAUNCHER_LOG"
DRY_RUN_ENV = "BRABBLE_LAUNCHER_DRY_RUN"
TAGS_ENV = "BRABBLE_BUILD_TAGS"

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"", "0", "false", "no", "off"}

DEFAULTS: Dict[str, Any] = {
    "launcher": {
        "artifact": str(DEFAULT_ARTIFACT),
        "log_level": "info",
    },
    "build": {
        "toolchain": "go",
        "package": "./cmd/brabble",
        "source_dir": ".",
        "tags": [],
        "flags": [],
        "env": {},
    },
}


@dataclass(frozen=True, slots=True)
class BuildSettings:
    toolchain: str = "go"
    package: str = "./cmd/brabble"
    source_dir: Path = Path(".")
    tags: List[str] = field(default_factory=list)
    flags: List[str] = field(default_factory=list)
    env: Dict[str, str] = field(default_factory=dict)

    def command(self, artifact: Path) -> List[str]:
        """Return the ``go build`` invocation producing ``artifact``."""

        command = [self.toolchain, "build"]
        if self.tags:
            command.extend(["-tags", ",".join(self.tags)])
        command.extend(self.flags)
        command.extend(["-o", str(artifact), self.package])
        return command


@dataclass(frozen=True, slots=True)
class LauncherSettings:
    artifact: Path = DEFAULT_ARTIFACT
    log_level: str = "info"
    dry_run: bool = False
    build: BuildSettings = field(default_factory=BuildSettings)
    source: Path | None = None


def _parse_bool(value: str, *, name: str) -> bool:
    text = value.strip().lower()
    if text in _TRUTHY:
        return True
    if text in _FALSY:
        return False
    raise ValueError(f"{name} must be a boolean flag, got '{value}'")


def _require_string(section: Mapping[str, Any], key: str, *, section_name: str) -> str:
    value = section.get(key)
    if not isinstance(value, str) or not value.strip():
        raise TypeError(f"[{section_name}] {key} must be a non-empty string")
    return value.strip()


def _section(data: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    value = data.get(name, {})
    if not isinstance(value, Mapping):
        raise TypeError(f"[{name}] must be a table/mapping")
    return value


def locate_config(workdir: Path, environ: Mapping[str, str]) -> Path | None:
    explicit = environ.get(CONFIG_ENV)
    if explicit:
        path = Path(explicit).expanduser()
        if not path.is_absolute():
            path = workdir / path
        if not path.is_file():
            raise ValueError(f"{CONFIG_ENV} points to a missing file: {path}")
        return path
    return find_config_file(workdir, CONFIG_STEM)


def settings_from_mapping(data: Mapping[str, Any], *, workdir: Path, source: Path | None = None) -> LauncherSettings:
    merged = merge_mappings(DEFAULTS, data)
    launcher = _section(merged, "launcher")
    build = _section(merged, "build")

    log_level = _require_string(launcher, "log_level", section_name="launcher").lower()
    if log_level not in Console.LEVELS:
        choices = ", ".join(Console.LEVELS)
        raise ValueError(f"[launcher] log_level must be one of: {choices}")

    source_dir = Path(_require_string(build, "source_dir", section_name="build")).expanduser()
    if not source_dir.is_absolute():
        source_dir = workdir / source_dir

    return LauncherSettings(
        artifact=Path(_require_string(launcher, "artifact", section_name="launcher")),
        log_level=log_level,
        build=BuildSettings(
            toolchain=_require_string(build, "toolchain", section_name="build"),
            package=_require_string(build, "package", section_name="build"),
            source_dir=source_dir,
            tags=normalize_string_list(build.get("tags"), field_name="[build] tags"),
            flags=normalize_string_list(build.get("flags"), field_name="[build] flags"),
            env=normalize_string_mapping(build.get("env"), field_name="[build] env"),
        ),
        source=source,
    )


def apply_environment(settings: LauncherSettings, environ: Mapping[str, str]) -> LauncherSettings:
    updated = settings
    level = environ.get(LOG_ENV)
    if level:
        normalized = level.strip().lower()
        if normalized not in Console.LEVELS:
            choices = ", ".join(Console.LEVELS)
            raise ValueError(f"{LOG_ENV} must be one of: {choices}")
        updated = replace(updated, log_level=normalized)

    dry_run = environ.get(DRY_RUN_ENV)
    if dry_run is not None:
        updated = replace(updated, dry_run=_parse_bool(dry_run, name=DRY_RUN_ENV))

    tags = environ.get(TAGS_ENV)
    if tags is not None:
        parsed = [part.strip() for part in tags.split(",") if part.strip()]
        updated = replace(updated, build=replace(updated.build, tags=parsed))
    return updated


def load_settings(workdir: Path, environ: Mapping[str, str]) -> LauncherSettings:
    """Resolve launcher settings for ``workdir``.

    Precedence: environment overrides > config file > built-in defaults.
    """

    path = locate_config(workdir, environ)
    data: Mapping[str, Any] = load_config_file(path) if path is not None else {}
    settings = settings_from_mapping(data, workdir=workdir, source=path)
    return apply_environment(settings, environ)


__all__ = [
    "BuildSettings",
    "CONFIG_ENV",
    "CONFIG_STEM",
    "DRY_RUN_ENV",
    "LOG_ENV",
    "LauncherSettings",
    "TAGS_ENV",
    "apply_environment",
    "load_settings",
    "locate_config",
    "settings_from_mapping",
]
