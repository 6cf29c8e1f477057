"""Host subprocess execution of the SDK compilers.

The runner blocks until the tool exits. There is no timeout: a hung compiler
hangs the generate-sources phase, the same way it would hang the build.
"""

from __future__ import annotations

import subprocess
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from apkgen.errors import ToolError
from apkgen.tools.base import ToolResult


@dataclass(slots=True)
class LocalToolRunner:
    name: str = "local"
    env: dict[str, str] | None = None

    def run(
        self,
        executable: Path,
        args: Sequence[str],
        *,
        cwd: Path,
        merge_stderr: bool = False,
    ) -> ToolResult:
        cmd = [str(executable), *args]
        try:
            result = subprocess.run(
                cmd,
                cwd=str(cwd),
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT if merge_stderr else subprocess.PIPE,
                text=True,
                check=False,
                env=self.env,
            )
        except OSError as exc:
            raise ToolError(
                f"Unable to start {executable.name}.",
                hint="Check that the Android SDK path points to an installed build tool.",
                context={
                    "runner": self.name,
                    "command": " ".join(cmd),
                    "stderr": str(exc),
                },
            ) from exc
        return ToolResult(
            returncode=result.returncode,
            stdout=result.stdout or "",
            stderr=result.stderr or "",
        )
