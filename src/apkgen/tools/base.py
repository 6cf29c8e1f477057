"""Protocol and shared helpers for external compiler invocation."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from apkgen.errors import ToolError
from apkgen.observability import StructuredLogger

STDERR_LIMIT = 2000


@dataclass(frozen=True, slots=True)
class ToolResult:
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class ToolRunner(Protocol):
    name: str

    def run(
        self,
        executable: Path,
        args: Sequence[str],
        *,
        cwd: Path,
        merge_stderr: bool = False,
    ) -> ToolResult:
        """Run *executable* with *args* and block until it exits."""


def command_line(executable: Path, args: Sequence[str]) -> str:
    return " ".join([str(executable), *args])


def run_tool(
    runner: ToolRunner,
    executable: Path,
    args: Sequence[str],
    *,
    cwd: Path,
    stage: str,
    artifact: str | None = None,
    logger: StructuredLogger | None = None,
) -> ToolResult:
    """Run an external tool and raise ToolError on a non-zero exit."""
    command = command_line(executable, args)
    if logger is not None:
        logger.log(
            operation="run_tool",
            stage=stage,
            artifact=artifact,
            message=command,
        )
    result = runner.run(executable, list(args), cwd=cwd, merge_stderr=False)
    if not result.ok:
        raise ToolError(
            f"{executable.name} exited with status {result.returncode}.",
            hint="Check the tool output below for details.",
            context={
                "runner": runner.name,
                "stage": stage,
                "artifact": artifact or "",
                "returncode": str(result.returncode),
                "command": command,
                "stderr": result.stderr[-STDERR_LIMIT:] if result.stderr else "",
            },
        )
    return result
