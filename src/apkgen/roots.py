"""Registration of compile and resource roots with the surrounding build."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol


@dataclass(frozen=True, slots=True)
class ResourceRoot:
    path: Path
    target_path: str | None = None
    includes: tuple[str, ...] = ()
    excludes: tuple[str, ...] = ()


class BuildRoots(Protocol):
    def add_compile_source_root(self, path: Path) -> None:
        """Expose *path* to the compiler as an additional source root."""

    def add_resource_root(
        self,
        path: Path,
        target_path: str | None = None,
        includes: tuple[str, ...] = (),
        excludes: tuple[str, ...] = (),
    ) -> None:
        """Expose *path* to the build as an additional resource root."""


@dataclass(slots=True)
class ProjectBuildRoots:
    """Records registered roots; each root is kept once, in first-seen order."""

    compile_source_roots: list[Path] = field(default_factory=list)
    resource_roots: list[ResourceRoot] = field(default_factory=list)

    def add_compile_source_root(self, path: Path) -> None:
        resolved = path.absolute()
        if resolved not in self.compile_source_roots:
            self.compile_source_roots.append(resolved)

    def add_resource_root(
        self,
        path: Path,
        target_path: str | None = None,
        includes: tuple[str, ...] = (),
        excludes: tuple[str, ...] = (),
    ) -> None:
        resolved = path.absolute()
        if any(root.path == resolved for root in self.resource_roots):
            return
        self.resource_roots.append(
            ResourceRoot(
                path=resolved,
                target_path=target_path,
                includes=tuple(includes),
                excludes=tuple(excludes),
            )
        )

    def to_payload(self) -> dict[str, object]:
        return {
            "compile_source_roots": [str(path) for path in self.compile_source_roots],
            "resource_roots": [
                {
                    "path": str(root.path),
                    "target_path": root.target_path,
                    "includes": list(root.includes),
                    "excludes": list(root.excludes),
                }
                for root in self.resource_roots
            ],
        }
