"""Dependency archive extraction into per-artifact unpack directories."""

from __future__ import annotations

import os
import shutil
import tempfile
import warnings
import zipfile
from dataclasses import dataclass, field
from pathlib import Path

from apkgen.errors import ExtractionError
from apkgen.extract.resolve import resolve_archive_file
from apkgen.models import ArchiveKind, DependencyArtifact, LibraryUnit
from apkgen.observability import DirectoryArtifactWarning, StructuredLogger
from apkgen.roots import BuildRoots, ProjectBuildRoots

STAGE = "extract"
UNPACK_MODE = 0o755


@dataclass(slots=True)
class ArchiveExtractor:
    unpack_dir: Path
    roots: BuildRoots = field(default_factory=ProjectBuildRoots)
    logger: StructuredLogger = field(default_factory=StructuredLogger)
    force: bool = False

    def unit_root(self, artifact: DependencyArtifact) -> Path:
        return self.unpack_dir / artifact.unpack_name

    def extract(self, artifact: DependencyArtifact) -> LibraryUnit:
        archive = resolve_archive_file(artifact)
        root = self.unit_root(artifact)

        if archive.is_dir():
            message = (
                f"The {artifact.kind} artifact points to '{archive}' which is a directory; "
                "skipping unpacking it."
            )
            warnings.warn(message, DirectoryArtifactWarning, stacklevel=2)
            self.logger.log(
                operation="extract",
                stage=STAGE,
                artifact=artifact.identity,
                message=message,
                level="warn",
            )
            return LibraryUnit(artifact=artifact, root=root, extracted=False)

        if root.exists() and not self.force:
            self.logger.log(
                operation="extract",
                stage=STAGE,
                artifact=artifact.identity,
                message=f"Reusing existing unpack directory {root}.",
                level="debug",
            )
        else:
            self.logger.log(
                operation="extract",
                stage=STAGE,
                artifact=artifact.identity,
                message=f"Extracting {archive}...",
                level="debug",
            )
            unzip_archive(archive, root, artifact=artifact)

        unit = LibraryUnit(artifact=artifact, root=root)
        self._register_roots(unit)
        return unit

    def _register_roots(self, unit: LibraryUnit) -> None:
        if unit.kind is ArchiveKind.MERGED_SOURCE_BUNDLE:
            if unit.java_resources is not None:
                self.roots.add_resource_root(unit.java_resources)
            if unit.src is not None:
                self.roots.add_compile_source_root(unit.src)
        elif unit.kind is ArchiveKind.LIBRARY_SOURCE:
            if unit.src is not None:
                self.roots.add_compile_source_root(unit.src)
        elif unit.kind is ArchiveKind.LIBRARY_BUNDLE:
            if unit.src is not None:
                self.roots.add_resource_root(unit.src, excludes=("**/*.java", "**/*.aidl"))
                self.roots.add_compile_source_root(unit.src)
        elif unit.kind is ArchiveKind.LIBRARY_WITH_RESOURCES:
            if unit.src is not None:
                self.roots.add_resource_root(unit.src, excludes=("**/*.aidl",))


def unzip_archive(archive: Path, destination: Path, *, artifact: DependencyArtifact) -> None:
    """Unpack *archive* into *destination*, replacing any previous content.

    Members are written to a temporary sibling directory first and moved into
    place only once the whole archive has been read, so a corrupt archive
    never leaves a partially populated unpack directory behind.
    """
    destination.parent.mkdir(parents=True, exist_ok=True)
    temp_root = Path(tempfile.mkdtemp(prefix=".apkgen-unpack-", dir=str(destination.parent)))
    try:
        with zipfile.ZipFile(archive) as bundle:
            base = temp_root.resolve()
            for member in bundle.namelist():
                target = (temp_root / member).resolve()
                if target != base and base not in target.parents:
                    raise ExtractionError(
                        "Archive member escapes the unpack directory.",
                        hint="The dependency archive is malformed or hostile.",
                        context={
                            "operation": "extract",
                            "artifact": artifact.identity,
                            "archive": str(archive),
                            "member": member,
                        },
                    )
            bundle.extractall(temp_root)
        os.chmod(temp_root, UNPACK_MODE)
        if destination.exists():
            shutil.rmtree(destination)
        shutil.move(str(temp_root), destination)
    except (zipfile.BadZipFile, OSError) as exc:
        raise ExtractionError(
            f"Failed to extract {archive}.",
            hint="The archive may be corrupt; delete it from the local repository and rebuild.",
            context={
                "operation": "extract",
                "artifact": artifact.identity,
                "archive": str(archive),
                "destination": str(destination),
                "error": str(exc),
            },
        ) from exc
    finally:
        if temp_root.exists():
            shutil.rmtree(temp_root, ignore_errors=True)
