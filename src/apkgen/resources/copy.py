"""Directory copy helpers for resource aggregation."""

from __future__ import annotations

import os
import shutil
from collections.abc import Sequence
from fnmatch import fnmatch
from pathlib import Path

from apkgen.errors import GenerationIOError

# Name patterns for version-control metadata, editor backups and temp files.
DEFAULT_EXCLUDES = (
    "*~",
    "#*#",
    ".#*",
    "%*%",
    "._*",
    "*.tmp",
    "*.swp",
    "CVS",
    ".cvsignore",
    "RCS",
    "SCCS",
    "vssver.scc",
    "project.pj",
    ".svn",
    ".arch-ids",
    ".bzr",
    ".bzrignore",
    ".MySCMServerInfo",
    ".DS_Store",
    ".metadata",
    ".hg",
    ".hgignore",
    ".hgsub",
    ".hgsubstate",
    ".hgtags",
    ".git",
    ".gitignore",
    ".gitattributes",
    ".gitmodules",
    "BitKeeper",
    "ChangeSet",
    "_darcs",
    ".darcsrepo",
)


def is_excluded(name: str, excludes: Sequence[str]) -> bool:
    return any(fnmatch(name, pattern) for pattern in excludes)


def ensure_directory(path: Path, *, operation: str) -> Path:
    """Create *path* and its parents, raising GenerationIOError on failure."""
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise GenerationIOError(
            f"Cannot create directory {path}.",
            context={"operation": operation, "path": str(path), "error": str(exc)},
        ) from exc
    return path


def copy_tree(
    source: Path,
    destination: Path,
    *,
    overwrite: bool,
    excludes: Sequence[str] = (),
) -> list[Path]:
    """Copy *source* into *destination* and return the files written.

    With ``overwrite=False`` a file already present at the destination is
    kept, so the first tree copied into a destination wins per relative path.
    """
    written: list[Path] = []
    for current, dirnames, filenames in os.walk(source):
        dirnames[:] = sorted(name for name in dirnames if not is_excluded(name, excludes))
        relative = Path(current).relative_to(source)
        target_dir = destination / relative
        target_dir.mkdir(parents=True, exist_ok=True)
        for filename in sorted(filenames):
            if is_excluded(filename, excludes):
                continue
            target = target_dir / filename
            if target.exists() and not overwrite:
                continue
            shutil.copy2(Path(current) / filename, target)
            written.append(target)
    return written
