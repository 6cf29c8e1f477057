"""Read-only lookup of unpacked dependency libraries."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from enum import StrEnum
from pathlib import Path
from types import MappingProxyType

from apkgen.errors import ValidationError
from apkgen.models import ArchiveKind, DependencyArtifact, LibraryUnit


class LibraryPath(StrEnum):
    MANIFEST = "manifest"
    RES = "res"
    ASSETS = "assets"
    SRC = "src"


class LibraryRegistry:
    """Immutable ``identity -> LibraryUnit`` map in dependency order.

    Built once by the extraction stage and shared with every later stage.
    """

    __slots__ = ("_units",)

    def __init__(self, units: Mapping[str, LibraryUnit]) -> None:
        self._units: Mapping[str, LibraryUnit] = MappingProxyType(dict(units))

    @classmethod
    def from_units(cls, units: Iterable[LibraryUnit]) -> LibraryRegistry:
        ordered: dict[str, LibraryUnit] = {}
        for unit in units:
            ordered.setdefault(unit.artifact.identity, unit)
        return cls(ordered)

    def __len__(self) -> int:
        return len(self._units)

    def __iter__(self) -> Iterator[LibraryUnit]:
        return iter(self._units.values())

    def __contains__(self, artifact: object) -> bool:
        if isinstance(artifact, DependencyArtifact):
            return artifact.identity in self._units
        return artifact in self._units

    def unit_for(self, artifact: DependencyArtifact) -> LibraryUnit:
        unit = self._units.get(artifact.identity)
        if unit is None:
            raise ValidationError(
                "Artifact was not extracted.",
                context={"operation": "registry_lookup", "artifact": artifact.identity},
            )
        return unit

    def path_for(self, artifact: DependencyArtifact, which: LibraryPath) -> Path:
        unit = self.unit_for(artifact)
        path: Path | None = getattr(unit, which.value)
        if path is None:
            raise ValidationError(
                f"{artifact.kind} archives do not provide a {which.value} path.",
                context={
                    "operation": "registry_lookup",
                    "artifact": artifact.identity,
                    "path": which.value,
                },
            )
        return path

    def units_of(self, *kinds: ArchiveKind) -> list[LibraryUnit]:
        return [unit for unit in self._units.values() if unit.kind in kinds]
