"""Interface-definition (AIDL) compilation across every source root."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath

from apkgen.models import AndroidSdk, GeneratedSourceSet
from apkgen.observability import StructuredLogger
from apkgen.resources.copy import ensure_directory
from apkgen.roots import BuildRoots, ProjectBuildRoots
from apkgen.tools.base import ToolRunner, run_tool

STAGE = "aidl"
AIDL_PATTERN = "*.aidl"
GENERATED_SUFFIX = ".java"


def find_aidl_files(root: Path) -> list[str]:
    """Return sorted POSIX paths of every ``.aidl`` file under *root*."""
    if not root.is_dir():
        return []
    return sorted(path.relative_to(root).as_posix() for path in root.rglob(AIDL_PATTERN))


@dataclass(slots=True)
class AidlCompiler:
    sdk: AndroidSdk
    runner: ToolRunner
    output_dir: Path
    cwd: Path
    roots: BuildRoots = field(default_factory=ProjectBuildRoots)
    generated: GeneratedSourceSet = field(default_factory=GeneratedSourceSet)
    logger: StructuredLogger = field(default_factory=StructuredLogger)

    def shared_args(self, source_roots: Sequence[Path]) -> list[str]:
        args = [f"-p{self.sdk.framework_aidl}"]
        for root in source_roots:
            args.append(f"-I{root}")
        return args

    def output_path(self, relative_file: str) -> Path:
        relative = PurePosixPath(relative_file)
        return (self.output_dir / relative.parent / f"{relative.stem}{GENERATED_SUFFIX}").absolute()

    def compile(self, files: Mapping[Path, Sequence[str]]) -> list[Path]:
        """Compile every (root, relative file) pair with all roots on the include path.

        Each root sees every other root's declarations. The first failing file
        aborts the stage with ToolError.
        """
        ensure_directory(self.output_dir, operation="compile_aidl")
        self.roots.add_compile_source_root(self.output_dir)
        self.generated.add_root(self.output_dir)

        shared = self.shared_args(list(files))
        self.logger.log(
            operation="compile_aidl",
            stage=STAGE,
            artifact=None,
            message=f"Found aidl files: Count = {sum(len(names) for names in files.values())}",
        )

        outputs: list[Path] = []
        for source_root, relative_files in files.items():
            for relative_file in relative_files:
                output = self.output_path(relative_file)
                ensure_directory(output.parent, operation="compile_aidl")
                args = [*shared, str((source_root / relative_file).absolute()), str(output)]
                run_tool(
                    self.runner,
                    self.sdk.aidl,
                    args,
                    cwd=self.cwd,
                    stage=STAGE,
                    logger=self.logger,
                )
                self.generated.record(self.output_dir, output)
                outputs.append(output)
        return outputs
