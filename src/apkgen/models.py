"""Core typed dataclasses for projects, dependencies and generated output."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path

MANIFEST_FILENAME = "AndroidManifest.xml"
ANDROID_PACKAGINGS = ("apk", "apklib", "aar", "apksources")


class ArchiveKind(StrEnum):
    """Dependency package formats the pipeline knows how to unpack."""

    MERGED_SOURCE_BUNDLE = "apksources"
    LIBRARY_SOURCE = "sources"
    LIBRARY_BUNDLE = "apklib"
    LIBRARY_WITH_RESOURCES = "aar"

    @property
    def is_source_bearing(self) -> bool:
        return self in (ArchiveKind.MERGED_SOURCE_BUNDLE, ArchiveKind.LIBRARY_SOURCE)

    @property
    def has_manifest(self) -> bool:
        return self in (ArchiveKind.LIBRARY_BUNDLE, ArchiveKind.LIBRARY_WITH_RESOURCES)


# Relative layout of an unpacked archive, per kind. None means "not provided".
_LAYOUTS: dict[ArchiveKind, dict[str, str | None]] = {
    ArchiveKind.MERGED_SOURCE_BUNDLE: {
        "manifest": None,
        "res": "res",
        "assets": "assets",
        "src": "src/main/java",
        "resources": "src/main/resources",
    },
    ArchiveKind.LIBRARY_SOURCE: {
        "manifest": None,
        "res": None,
        "assets": None,
        "src": ".",
        "resources": None,
    },
    ArchiveKind.LIBRARY_BUNDLE: {
        "manifest": MANIFEST_FILENAME,
        "res": "res",
        "assets": "assets",
        "src": "src",
        "resources": None,
    },
    ArchiveKind.LIBRARY_WITH_RESOURCES: {
        "manifest": MANIFEST_FILENAME,
        "res": "res",
        "assets": "assets",
        "src": "src",
        "resources": None,
    },
}


@dataclass(frozen=True, slots=True)
class DependencyArtifact:
    group: str
    name: str
    version: str
    kind: ArchiveKind
    file: Path | None = None
    reactor_file: Path | None = None

    @property
    def identity(self) -> str:
        return f"{self.group}:{self.name}:{self.kind}:{self.version}"

    @property
    def unpack_name(self) -> str:
        return self.identity.replace(":", "_").replace("/", "_").replace("\\", "_")

    def __str__(self) -> str:
        return self.identity


@dataclass(frozen=True, slots=True)
class LibraryUnit:
    artifact: DependencyArtifact
    root: Path
    extracted: bool = True

    @property
    def kind(self) -> ArchiveKind:
        return self.artifact.kind

    @property
    def manifest(self) -> Path | None:
        return self._relative("manifest")

    @property
    def res(self) -> Path | None:
        return self._relative("res")

    @property
    def assets(self) -> Path | None:
        return self._relative("assets")

    @property
    def src(self) -> Path | None:
        return self._relative("src")

    @property
    def java_resources(self) -> Path | None:
        return self._relative("resources")

    def _relative(self, key: str) -> Path | None:
        rel = _LAYOUTS[self.artifact.kind][key]
        if rel is None:
            return None
        return self.root if rel == "." else self.root / rel


@dataclass(frozen=True, slots=True)
class OverlayChain:
    """Resource search directories, highest priority first."""

    directories: tuple[Path, ...] = ()

    @classmethod
    def of_existing(cls, candidates: Iterable[Path | None]) -> OverlayChain:
        ordered: list[Path] = []
        for candidate in candidates:
            if candidate is None or not candidate.is_dir():
                continue
            if candidate not in ordered:
                ordered.append(candidate)
        return cls(directories=tuple(ordered))

    def __iter__(self) -> Iterator[Path]:
        return iter(self.directories)

    def __len__(self) -> int:
        return len(self.directories)


@dataclass(slots=True)
class GeneratedSourceSet:
    roots: dict[Path, list[Path]] = field(default_factory=dict)

    def add_root(self, root: Path) -> None:
        self.roots.setdefault(root, [])

    def record(self, root: Path, path: Path) -> None:
        files = self.roots.setdefault(root, [])
        if path not in files:
            files.append(path)

    def files_under(self, root: Path) -> tuple[Path, ...]:
        return tuple(self.roots.get(root, ()))


@dataclass(frozen=True, slots=True)
class BuildConfigConstant:
    name: str
    type: str
    value: str

    def render_value(self) -> str:
        if self.type == "String":
            return f'"{self.value}"'
        return self.value


@dataclass(frozen=True, slots=True)
class AndroidSdk:
    aapt: Path
    aidl: Path
    android_jar: Path
    framework_aidl: Path

    @classmethod
    def from_platform_dir(cls, sdk_root: Path, platform: str) -> AndroidSdk:
        platform_dir = sdk_root / "platforms" / platform
        tools_dir = sdk_root / "platform-tools"
        return cls(
            aapt=tools_dir / "aapt",
            aidl=tools_dir / "aidl",
            android_jar=platform_dir / "android.jar",
            framework_aidl=platform_dir / "framework.aidl",
        )


@dataclass(frozen=True, slots=True)
class AaptOptions:
    custom_package: str | None = None
    configurations: str | None = None
    extra_args: tuple[str, ...] = ()
    proguard_file: Path | None = None


@dataclass(frozen=True, slots=True)
class AndroidProject:
    base_dir: Path
    packaging: str = "apk"
    manifest: Path | None = None
    source_dir: Path | None = None
    resource_dir: Path | None = None
    assets_dir: Path | None = None
    build_dir: Path | None = None
    output_dir: Path | None = None
    resource_overlay_dirs: tuple[Path, ...] = ()

    @property
    def is_android(self) -> bool:
        return self.packaging in ANDROID_PACKAGINGS

    @property
    def manifest_file(self) -> Path:
        return self.manifest or self.base_dir / MANIFEST_FILENAME

    @property
    def sources(self) -> Path:
        return self.source_dir or self.base_dir / "src" / "main" / "java"

    @property
    def resources(self) -> Path:
        return self.resource_dir or self.base_dir / "res"

    @property
    def assets(self) -> Path:
        return self.assets_dir or self.base_dir / "assets"

    @property
    def target(self) -> Path:
        return self.build_dir or self.base_dir / "target"

    @property
    def classes(self) -> Path:
        return self.output_dir or self.target / "classes"

    @property
    def unpack_dir(self) -> Path:
        return self.target / "unpacked-libs"

    @property
    def gen_dir(self) -> Path:
        return self.target / "generated-sources" / "r"

    @property
    def aidl_gen_dir(self) -> Path:
        return self.target / "generated-sources" / "aidl"

    @property
    def combined_res_dir(self) -> Path:
        return self.target / "generated-sources" / "combined-resources" / "res"


__all__ = [
    "ANDROID_PACKAGINGS",
    "AaptOptions",
    "AndroidProject",
    "AndroidSdk",
    "ArchiveKind",
    "BuildConfigConstant",
    "DependencyArtifact",
    "GeneratedSourceSet",
    "LibraryUnit",
    "MANIFEST_FILENAME",
    "OverlayChain",
]
