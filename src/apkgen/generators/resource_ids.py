"""Resource identifier class generation via ``aapt package``."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path

from apkgen.manifest.descriptor import ManifestDescriptor
from apkgen.models import (
    AaptOptions,
    AndroidProject,
    AndroidSdk,
    GeneratedSourceSet,
    LibraryUnit,
    OverlayChain,
)
from apkgen.observability import StructuredLogger
from apkgen.resources.copy import ensure_directory
from apkgen.roots import BuildRoots, ProjectBuildRoots
from apkgen.tools.base import ToolRunner, run_tool

STAGE = "resource_ids"
IDENTIFIER_SOURCE = "R.java"


@dataclass(slots=True)
class ResourceIdGenerator:
    project: AndroidProject
    sdk: AndroidSdk
    runner: ToolRunner
    options: AaptOptions = field(default_factory=AaptOptions)
    roots: BuildRoots = field(default_factory=ProjectBuildRoots)
    generated: GeneratedSourceSet = field(default_factory=GeneratedSourceSet)
    logger: StructuredLogger = field(default_factory=StructuredLogger)

    @property
    def gen_dir(self) -> Path:
        return self.project.gen_dir

    def generate_main(
        self,
        manifest: ManifestDescriptor,
        chain: OverlayChain,
        *,
        assets: Sequence[Path] = (),
    ) -> Path:
        """Generate the project identifier class and return its expected path."""
        ensure_directory(self.gen_dir, operation="generate_resource_ids")
        package_override = self.options.custom_package or None

        args = ["package"]
        if self.project.packaging == "apklib":
            args.append("--non-constant-id")
        args.extend(["-m", "-J", str(self.gen_dir.absolute()), "-M", str(manifest.path.absolute())])
        if package_override:
            args.extend(["--custom-package", package_override])
        args.extend(self._search_args(chain, assets))

        if self.options.proguard_file is not None:
            ensure_directory(self.options.proguard_file.parent, operation="generate_resource_ids")
            args.extend(["-G", str(self.options.proguard_file.absolute())])

        run_tool(
            self.runner,
            self.sdk.aapt,
            args,
            cwd=self.project.base_dir,
            stage=STAGE,
            logger=self.logger,
        )
        self.roots.add_compile_source_root(self.gen_dir)
        return self._record(package_override or manifest.package)

    def generate_for_library(
        self,
        unit: LibraryUnit,
        *,
        package: str,
        manifest: Path,
        chain: OverlayChain,
        assets: Sequence[Path] = (),
    ) -> Path:
        """Generate an identifier class for a library under its own package.

        *manifest* is the project manifest; identifiers are non-constant so
        the library code compiled against them stays valid after merging.
        """
        ensure_directory(self.gen_dir, operation="generate_resource_ids")
        args = [
            "package",
            "--non-constant-id",
            "-m",
            "-J",
            str(self.gen_dir.absolute()),
            "--custom-package",
            package,
            "-M",
            str(manifest.absolute()),
        ]
        args.extend(self._search_args(chain, assets))
        run_tool(
            self.runner,
            self.sdk.aapt,
            args,
            cwd=self.project.base_dir,
            stage=STAGE,
            artifact=unit.artifact.identity,
            logger=self.logger,
        )
        self.roots.add_compile_source_root(self.gen_dir)
        return self._record(package)

    def _search_args(self, chain: OverlayChain, assets: Sequence[Path]) -> list[str]:
        args: list[str] = []
        for res_dir in chain:
            args.extend(["-S", str(res_dir.absolute())])
        args.append("--auto-add-overlay")
        for assets_dir in assets:
            if assets_dir.is_dir():
                args.extend(["-A", str(assets_dir.absolute())])
        args.extend(["-I", str(self.sdk.android_jar.absolute())])
        if self.options.configurations:
            args.extend(["-c", self.options.configurations])
        args.extend(self.options.extra_args)
        return args

    def _record(self, package: str) -> Path:
        path = self.gen_dir.joinpath(*package.split("."), IDENTIFIER_SOURCE)
        self.generated.add_root(self.gen_dir)
        if path.is_file():
            self.generated.record(self.gen_dir, path)
        return path
