"""Manifest merging: service protocol, default merger and the pipeline adapter."""

from __future__ import annotations

import copy
import os
import re
import xml.etree.ElementTree as ET
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

from apkgen.errors import GenerationIOError, MergeFailure, MissingManifestError
from apkgen.manifest.descriptor import android_attr
from apkgen.observability import StructuredLogger
from apkgen.registry import LibraryRegistry

STAGE = "merge"
MERGED_MANIFEST_NAME = "AndroidManifest-merged.xml"

PlaceholderResolver = Callable[[str], str | None]

ROOT_MERGE_TAGS = ("uses-permission", "permission", "uses-feature")
APPLICATION_MERGE_TAGS = (
    "activity",
    "activity-alias",
    "service",
    "receiver",
    "provider",
    "uses-library",
    "meta-data",
)
PLACEHOLDER_PATTERN = re.compile(r"\$\{([^}]+)\}")


class ManifestMergeService(Protocol):
    def merge(
        self,
        output: Path,
        base: Path,
        overlays: Sequence[Path],
        libraries: Sequence[Path],
        resolvers: Sequence[PlaceholderResolver],
    ) -> bool:
        """Write the merge of *base* with *overlays* and *libraries* to *output*."""


@dataclass(slots=True)
class ElementTreeManifestMerger:
    """Additive merge of library declarations into the base manifest.

    Declarations already present in the base (matched by tag and
    ``android:name``) win; library entries are appended in argument order.
    Relative component names (``.Foo``) are qualified with the declaring
    library's package.
    """

    logger: StructuredLogger | None = None

    def merge(
        self,
        output: Path,
        base: Path,
        overlays: Sequence[Path],
        libraries: Sequence[Path],
        resolvers: Sequence[PlaceholderResolver],
    ) -> bool:
        try:
            tree = ET.parse(base)
            root = tree.getroot()
            application = root.find("application")
            if application is None:
                self._report(f"{base} has no <application> element.")
                return False
            for path in [*overlays, *libraries]:
                self._merge_one(root, application, ET.parse(path).getroot())
            if resolvers:
                _apply_placeholders(root, resolvers)
            tree.write(output, encoding="utf-8", xml_declaration=True)
        except (ET.ParseError, OSError) as exc:
            self._report(f"Manifest merge failed: {exc}")
            return False
        return True

    def _merge_one(self, root: ET.Element, application: ET.Element, library: ET.Element) -> None:
        package = library.get("package", "")
        insert_at = list(root).index(application)
        for tag in ROOT_MERGE_TAGS:
            for element in library.findall(tag):
                if _declared(root, element):
                    continue
                root.insert(insert_at, copy.deepcopy(element))
                insert_at += 1

        library_application = library.find("application")
        if library_application is None:
            return
        for element in library_application:
            if element.tag not in APPLICATION_MERGE_TAGS:
                continue
            merged = copy.deepcopy(element)
            name = merged.get(android_attr("name"))
            if name and name.startswith(".") and package:
                merged.set(android_attr("name"), f"{package}{name}")
            if _declared(application, merged):
                continue
            application.append(merged)

    def _report(self, message: str) -> None:
        if self.logger is not None:
            self.logger.log(
                operation="merge_manifest",
                stage=STAGE,
                artifact=None,
                message=message,
                level="error",
            )


def _declared(parent: ET.Element, element: ET.Element) -> bool:
    name = element.get(android_attr("name"))
    if name is None:
        return False
    return any(child.get(android_attr("name")) == name for child in parent.findall(element.tag))


def _apply_placeholders(root: ET.Element, resolvers: Sequence[PlaceholderResolver]) -> None:
    def substitute(match: re.Match[str]) -> str:
        for resolver in resolvers:
            value = resolver(match.group(1))
            if value is not None:
                return value
        return match.group(0)

    for element in root.iter():
        for key, value in list(element.attrib.items()):
            if "${" in value:
                element.set(key, PLACEHOLDER_PATTERN.sub(substitute, value))


def collect_library_manifests(registry: LibraryRegistry) -> list[Path]:
    """Return manifests of manifest-bearing libraries in dependency order."""
    manifests: list[Path] = []
    for unit in registry:
        if not unit.kind.has_manifest:
            continue
        manifest = unit.manifest
        if manifest is None or not manifest.is_file():
            raise MissingManifestError(
                f"{unit.artifact.name} is missing AndroidManifest.xml",
                hint="Library archives must ship a manifest at their root.",
                context={
                    "operation": "merge_manifest",
                    "artifact": unit.artifact.identity,
                    "path": str(manifest) if manifest is not None else str(unit.root),
                },
            )
        manifests.append(manifest)
    return manifests


@dataclass(slots=True)
class ManifestMergerAdapter:
    service: ManifestMergeService = field(default_factory=ElementTreeManifestMerger)
    logger: StructuredLogger = field(default_factory=StructuredLogger)
    resolvers: tuple[PlaceholderResolver, ...] = ()

    def merge(self, primary: Path, library_manifests: Sequence[Path]) -> Path | None:
        """Merge *library_manifests* into *primary* in place.

        Returns the primary manifest path when a merge happened and ``None``
        when there was nothing to merge.
        """
        if not library_manifests:
            self.logger.log(
                operation="merge_manifest",
                stage=STAGE,
                artifact=None,
                message="No library manifests found. Using project manifest only.",
            )
            return None

        merged = primary.parent / MERGED_MANIFEST_NAME
        self.logger.log(
            operation="merge_manifest",
            stage=STAGE,
            artifact=None,
            message=f"Merging {len(library_manifests)} library manifest(s) into {primary}.",
        )
        success = self.service.merge(merged, primary, (), list(library_manifests), self.resolvers)
        if not success or not merged.is_file():
            if merged.exists():
                merged.unlink()
            raise MergeFailure(
                "Manifests were not merged!",
                hint="Inspect the library manifests for conflicting or malformed declarations.",
                context={
                    "operation": "merge_manifest",
                    "primary": str(primary),
                    "libraries": ", ".join(str(path) for path in library_manifests),
                },
            )
        try:
            os.replace(merged, primary)
        except OSError as exc:
            raise GenerationIOError(
                "Could not replace the project manifest with the merged manifest.",
                context={
                    "operation": "merge_manifest",
                    "path": str(primary),
                    "merged": str(merged),
                    "error": str(exc),
                },
            ) from exc
        self.logger.log(
            operation="merge_manifest",
            stage=STAGE,
            artifact=None,
            message="Done merging library manifests.",
        )
        return primary
