"""Pipeline policy configuration and enforcement helpers."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from apkgen.observability import LogLevel

IDENTIFIER_CLASS_FILE = "R.class"


@dataclass(frozen=True, slots=True)
class Policy:
    merge_manifests: bool = False
    reuse_libraries: bool = False
    release: bool = False
    force_extract: bool = False
    log_level: LogLevel = "info"


def should_generate_library_ids(*, policy: Policy, package: str | None, output_dir: Path) -> bool:
    """Return False when a compiled identifier class for *package* may be reused.

    The check is keyed by package name only. A class left over from an earlier
    build is reused even if the library resources changed since.
    """
    if not policy.reuse_libraries:
        return True
    if not package:
        return True
    return not compiled_identifier_class(output_dir, package).exists()


def compiled_identifier_class(output_dir: Path, package: str) -> Path:
    return output_dir.joinpath(*package.split("."), IDENTIFIER_CLASS_FILE)
