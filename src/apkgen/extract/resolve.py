"""Artifact to archive-file resolution."""

from __future__ import annotations

from pathlib import Path

from apkgen.errors import ExtractionError
from apkgen.models import DependencyArtifact


def resolve_archive_file(artifact: DependencyArtifact) -> Path:
    """Return the archive file to unpack for *artifact*.

    The repository copy is preferred. When it is missing or is a directory
    placeholder (an IDE workspace resolution), the in-progress build output of
    the sibling module is used instead. The returned path may still be a
    directory; callers decide how to treat it.
    """
    primary = artifact.file
    fallback = artifact.reactor_file
    if primary is not None and primary.is_file():
        return primary
    if fallback is not None and fallback.exists():
        return fallback
    if primary is not None and primary.exists():
        return primary
    raise ExtractionError(
        "Dependency archive could not be located.",
        hint="Make sure the dependency was resolved or built before generate-sources.",
        context={
            "operation": "resolve",
            "artifact": artifact.identity,
            "file": str(primary) if primary is not None else "",
            "reactor_file": str(fallback) if fallback is not None else "",
        },
    )
