"""Location of the compiled brabble binary."""
from __future__ import annotations

from pathlib import Path

DEFAULT_ARTIFACT = Path("bin") / "brabble"


def artifact_path(workdir: Path, relative: Path | str = DEFAULT_ARTIFACT) -> Path:
    """Return the artifact path for ``workdir``.

    Pure path arithmetic: nothing is resolved against the filesystem, so the
    same inputs always give the same path. An absolute ``relative`` wins.
    """

    return Path(workdir) / Path(relative)


__all__ = ["DEFAULT_ARTIFACT", "artifact_path"]
