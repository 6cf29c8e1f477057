"""Resource overlay resolution and combined resource tree construction."""

from __future__ import annotations

import shutil
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path

from apkgen.errors import GenerationIOError
from apkgen.models import OverlayChain
from apkgen.observability import StructuredLogger
from apkgen.resources.copy import DEFAULT_EXCLUDES, copy_tree

STAGE = "overlay"


@dataclass(slots=True)
class OverlayResolver:
    combined_dir: Path
    logger: StructuredLogger = field(default_factory=StructuredLogger)
    excludes: tuple[str, ...] = DEFAULT_EXCLUDES

    def resolve(
        self,
        explicit_overlays: Sequence[Path],
        project_res: Path,
        dependency_res_dirs: Sequence[Path],
        *,
        combined_sources: Sequence[Path] = (),
    ) -> OverlayChain:
        """Return the resource search path for the resource compiler.

        Order: explicit overlays, then the combined tree (or the raw project
        resources when no combined tree is built), then each dependency's own
        resource directory. Directories that do not exist are dropped.
        """
        combined = self.build_combined(project_res, combined_sources)
        for res_dir in dependency_res_dirs:
            if not res_dir.is_dir():
                self.logger.log(
                    operation="resolve_overlays",
                    stage=STAGE,
                    artifact=None,
                    message=f"Dependency resource directory {res_dir} does not exist.",
                    level="warn",
                )
        return OverlayChain.of_existing(
            [*explicit_overlays, combined or project_res, *dependency_res_dirs]
        )

    def build_combined(self, project_res: Path, combined_sources: Sequence[Path]) -> Path | None:
        """Rebuild the combined tree from dependency sources and local resources.

        Dependency trees are copied first, in order, without overwriting, so
        the earliest dependency wins on a shared relative path. Local project
        resources are copied last with overwrite and take final precedence.
        """
        sources = [source for source in combined_sources if source.is_dir()]
        if not sources:
            return None
        try:
            if self.combined_dir.exists():
                shutil.rmtree(self.combined_dir)
            self.combined_dir.mkdir(parents=True)
            self.logger.log(
                operation="combine_resources",
                stage=STAGE,
                artifact=None,
                message="Copying dependency resource files to combined resource directory.",
            )
            for source in sources:
                copy_tree(source, self.combined_dir, overwrite=False)
            if project_res.is_dir():
                self.logger.log(
                    operation="combine_resources",
                    stage=STAGE,
                    artifact=None,
                    message="Copying local resource files to combined resource directory.",
                )
                copy_tree(project_res, self.combined_dir, overwrite=True, excludes=self.excludes)
        except OSError as exc:
            raise GenerationIOError(
                "Could not build the combined resource directory.",
                context={
                    "operation": "combine_resources",
                    "path": str(self.combined_dir),
                    "error": str(exc),
                },
            ) from exc
        return self.combined_dir
