"""Generate-sources pipeline orchestration."""

from __future__ import annotations

import json
import warnings
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from pathlib import Path

from .errors import ApkgenError, GenerationIOError, MissingManifestError
from .extract import ArchiveExtractor
from .generators import AidlCompiler, BuildConfigGenerator, ResourceIdGenerator, find_aidl_files
from .manifest import (
    ElementTreeManifestMerger,
    ManifestDescriptor,
    ManifestMergerAdapter,
    ManifestMergeService,
    collect_library_manifests,
    read_package_name,
)
from .models import (
    AaptOptions,
    AndroidProject,
    AndroidSdk,
    ArchiveKind,
    BuildConfigConstant,
    DependencyArtifact,
    GeneratedSourceSet,
    LibraryUnit,
    OverlayChain,
)
from .observability import IdentifierReuseWarning, StructuredLogger
from .policy import Policy, should_generate_library_ids
from .registry import LibraryRegistry
from .resources import OverlayResolver
from .roots import ProjectBuildRoots
from .tools import LocalToolRunner, ToolRunner

REPORT_FILENAME = "apkgen-report.json"

# Extraction order by kind; dependency order is kept within each kind.
EXTRACTION_ORDER = (
    (ArchiveKind.MERGED_SOURCE_BUNDLE, ArchiveKind.LIBRARY_SOURCE),
    (ArchiveKind.LIBRARY_BUNDLE,),
    (ArchiveKind.LIBRARY_WITH_RESOURCES,),
)


@dataclass(slots=True)
class GenerationResult:
    registry: LibraryRegistry
    chain: OverlayChain
    generated: GeneratedSourceSet
    roots: ProjectBuildRoots
    package: str | None = None
    report_path: Path | None = None


@dataclass(slots=True)
class GenerateSourcesPipeline:
    """Runs extraction, manifest merging and source generation for one project.

    ``logger`` is optional; without one, records are collected at the policy's
    log level. Either way the active logger is ``events``.
    """

    project: AndroidProject
    sdk: AndroidSdk
    dependencies: Sequence[DependencyArtifact] = ()
    policy: Policy = field(default_factory=Policy)
    options: AaptOptions = field(default_factory=AaptOptions)
    constants: tuple[BuildConfigConstant, ...] = ()
    runner: ToolRunner = field(default_factory=LocalToolRunner)
    merge_service: ManifestMergeService | None = None
    roots: ProjectBuildRoots = field(default_factory=ProjectBuildRoots)
    logger: StructuredLogger | None = None
    events: StructuredLogger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        if self.logger is not None:
            self.events = self.logger
        else:
            self.events = StructuredLogger(min_level=self.policy.log_level)

    def run(self) -> GenerationResult:
        generated = GeneratedSourceSet()
        if not self.project.is_android:
            self.events.log(
                operation="generate_sources",
                stage=None,
                artifact=None,
                message=f"Packaging '{self.project.packaging}' is not an Android project; skipping.",
            )
            return GenerationResult(
                registry=LibraryRegistry.from_units(()),
                chain=OverlayChain(),
                generated=generated,
                roots=self.roots,
            )

        stage = "extract"
        try:
            registry = self.extract_dependencies()
            aidl_files = self.collect_aidl_files(registry)

            stage = "merge"
            manifest = self.merge_manifests(registry)

            stage = "resource_ids"
            chain = self.resolve_overlays(registry)
            resource_ids = ResourceIdGenerator(
                project=self.project,
                sdk=self.sdk,
                runner=self.runner,
                options=self.options,
                roots=self.roots,
                generated=generated,
                logger=self.events,
            )
            resource_ids.generate_main(manifest, chain, assets=self._main_assets(registry))
            self.generate_library_identifiers(registry, resource_ids, manifest.path, chain)

            stage = "build_config"
            package = self.generate_build_configs(registry, manifest, generated)

            stage = "aidl"
            AidlCompiler(
                sdk=self.sdk,
                runner=self.runner,
                output_dir=self.project.aidl_gen_dir,
                cwd=self.project.base_dir,
                roots=self.roots,
                generated=generated,
                logger=self.events,
            ).compile(aidl_files)

            stage = "report"
            result = GenerationResult(
                registry=registry,
                chain=chain,
                generated=generated,
                roots=self.roots,
                package=package,
            )
            result.report_path = self._write_report(result)
        except ApkgenError as exc:
            self._log_failure(stage, exc)
            raise
        except OSError as exc:
            error = GenerationIOError(
                f"Unexpected I/O failure during {stage}.",
                context={"stage": stage, "path": str(exc.filename or ""), "error": str(exc)},
            )
            self._log_failure(stage, error)
            raise error from exc
        return result

    def extract_dependencies(self) -> LibraryRegistry:
        extractor = ArchiveExtractor(
            unpack_dir=self.project.unpack_dir,
            roots=self.roots,
            logger=self.events,
            force=self.policy.force_extract,
        )
        units: dict[str, LibraryUnit] = {}
        for kinds in EXTRACTION_ORDER:
            for artifact in self.dependencies:
                if artifact.kind not in kinds or artifact.identity in units:
                    continue
                units[artifact.identity] = extractor.extract(artifact)
        ordered = [units[a.identity] for a in self.dependencies if a.identity in units]
        return LibraryRegistry.from_units(ordered)

    def collect_aidl_files(self, registry: LibraryRegistry) -> dict[Path, list[str]]:
        # aar archives ship compiled classes; only their resources are used.
        source_roots = [self.project.sources]
        for unit in registry:
            if not (unit.kind.is_source_bearing or unit.kind is ArchiveKind.LIBRARY_BUNDLE):
                continue
            if unit.src is not None:
                source_roots.append(unit.src)
        files: dict[Path, list[str]] = {}
        for root in source_roots:
            files.setdefault(root, find_aidl_files(root))
        return files

    def merge_manifests(self, registry: LibraryRegistry) -> ManifestDescriptor:
        descriptor = ManifestDescriptor(self.project.manifest_file)
        if not descriptor.exists():
            raise MissingManifestError(
                "Project manifest does not exist.",
                hint="Set the project manifest path or create AndroidManifest.xml.",
                context={"operation": "merge_manifest", "path": str(descriptor.path)},
            )
        if not self.policy.merge_manifests:
            self.events.log(
                operation="merge_manifest",
                stage="merge",
                artifact=None,
                message="Manifest merging disabled. Using project manifest only.",
            )
            return descriptor

        service = self.merge_service or ElementTreeManifestMerger(logger=self.events)
        adapter = ManifestMergerAdapter(service=service, logger=self.events)
        if adapter.merge(descriptor.path, collect_library_manifests(registry)) is not None:
            descriptor.invalidate()
        return descriptor

    def resolve_overlays(self, registry: LibraryRegistry) -> OverlayChain:
        resolver = OverlayResolver(combined_dir=self.project.combined_res_dir, logger=self.events)
        return resolver.resolve(
            self.project.resource_overlay_dirs,
            self.project.resources,
            _paths(unit.res for unit in registry if unit.kind.has_manifest),
            combined_sources=_paths(
                unit.res for unit in registry.units_of(ArchiveKind.MERGED_SOURCE_BUNDLE)
            ),
        )

    def generate_library_identifiers(
        self,
        registry: LibraryRegistry,
        generator: ResourceIdGenerator,
        manifest: Path,
        chain: OverlayChain,
    ) -> None:
        assets = [
            self.project.assets,
            *_paths(unit.assets for unit in registry.units_of(ArchiveKind.LIBRARY_BUNDLE)),
        ]
        for unit in registry.units_of(ArchiveKind.LIBRARY_BUNDLE):
            package = self._library_package(unit)
            if not should_generate_library_ids(
                policy=self.policy,
                package=package,
                output_dir=self.project.classes,
            ):
                message = f"R found for {unit.artifact.identity}, so it won't be regenerated."
                warnings.warn(message, IdentifierReuseWarning, stacklevel=2)
                self.events.log(
                    operation="generate_library_ids",
                    stage="resource_ids",
                    artifact=unit.artifact.identity,
                    message=message,
                    level="warn",
                )
                continue
            generator.generate_for_library(
                unit,
                package=package,
                manifest=manifest,
                chain=chain,
                assets=assets,
            )

    def generate_build_configs(
        self,
        registry: LibraryRegistry,
        manifest: ManifestDescriptor,
        generated: GeneratedSourceSet,
    ) -> str:
        generator = BuildConfigGenerator(
            gen_dir=self.project.gen_dir,
            release=self.policy.release,
            generated=generated,
            logger=self.events,
        )
        package = self.options.custom_package or manifest.package
        generator.generate_for_package(package, self.constants)
        for unit in registry.units_of(ArchiveKind.LIBRARY_BUNDLE):
            generator.generate_for_package(self._library_package(unit), self.constants)
        return package

    def _library_package(self, unit: LibraryUnit) -> str:
        manifest = unit.manifest
        if manifest is None or not manifest.is_file():
            raise MissingManifestError(
                f"{unit.artifact.name} is missing AndroidManifest.xml",
                hint="Library archives must ship a manifest at their root.",
                context={
                    "operation": "read_package",
                    "artifact": unit.artifact.identity,
                    "path": str(manifest) if manifest is not None else str(unit.root),
                },
            )
        return read_package_name(manifest)

    def _main_assets(self, registry: LibraryRegistry) -> list[Path]:
        return [
            self.project.assets,
            *_paths(unit.assets for unit in registry.units_of(ArchiveKind.MERGED_SOURCE_BUNDLE)),
        ]

    def _log_failure(self, stage: str, exc: ApkgenError) -> None:
        self.events.log(
            operation="generate_sources",
            stage=stage,
            artifact=exc.artifact,
            message="Error when generating sources.",
            level="error",
            extra=exc.to_dict(),
        )

    def _write_report(self, result: GenerationResult) -> Path:
        report_path = self.project.target / REPORT_FILENAME
        payload = {
            "package": result.package,
            "libraries": [unit.artifact.identity for unit in result.registry],
            "overlay_chain": [str(path) for path in result.chain],
            "generated": {
                str(root): [str(path) for path in files]
                for root, files in result.generated.roots.items()
            },
            "roots": result.roots.to_payload(),
            "logs": self.events.records,
        }
        try:
            report_path.parent.mkdir(parents=True, exist_ok=True)
            report_path.write_text(
                json.dumps(payload, indent=2, sort_keys=True) + "\n",
                encoding="utf-8",
            )
        except OSError as exc:
            raise GenerationIOError(
                "Could not write the generation report.",
                context={"operation": "write_report", "path": str(report_path), "error": str(exc)},
            ) from exc
        return report_path


def _paths(candidates: Iterable[Path | None]) -> list[Path]:
    return [path for path in candidates if path is not None]
