"""BuildConfig source generation."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path

from apkgen.errors import GenerationIOError
from apkgen.models import BuildConfigConstant, GeneratedSourceSet
from apkgen.observability import StructuredLogger

STAGE = "build_config"
BUILD_CONFIG_SOURCE = "BuildConfig.java"


def render_build_config(package: str, *, debug: bool, constants: Sequence[BuildConfigConstant]) -> str:
    lines = [
        f"package {package};",
        "",
        "public final class BuildConfig {",
        f"  public static final boolean DEBUG = {'true' if debug else 'false'};",
    ]
    for constant in constants:
        lines.append(
            f"  public static final {constant.type} {constant.name} = {constant.render_value()};"
        )
    lines.append("}")
    return "\n".join(lines) + "\n"


@dataclass(slots=True)
class BuildConfigGenerator:
    gen_dir: Path
    release: bool = False
    generated: GeneratedSourceSet = field(default_factory=GeneratedSourceSet)
    logger: StructuredLogger = field(default_factory=StructuredLogger)

    def generate_for_package(
        self,
        package: str,
        constants: Sequence[BuildConfigConstant] = (),
    ) -> Path:
        output_dir = self.gen_dir.joinpath(*package.split("."))
        output_path = output_dir / BUILD_CONFIG_SOURCE
        content = render_build_config(package, debug=not self.release, constants=constants)
        try:
            output_dir.mkdir(parents=True, exist_ok=True)
            output_path.write_text(content, encoding="utf-8")
        except OSError as exc:
            raise GenerationIOError(
                "Error generating BuildConfig.",
                context={
                    "operation": "generate_build_config",
                    "package": package,
                    "path": str(output_path),
                    "error": str(exc),
                },
            ) from exc
        self.logger.log(
            operation="generate_build_config",
            stage=STAGE,
            artifact=None,
            message=f"Wrote {output_path}.",
            level="debug",
        )
        self.generated.record(self.gen_dir, output_path)
        return output_path
