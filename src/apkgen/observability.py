"""Structured logging and observability helpers."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal

LogLevel = Literal["debug", "info", "warn", "error"]

_LEVEL_ORDER: dict[str, int] = {"debug": 0, "info": 1, "warn": 2, "error": 3}


class DirectoryArtifactWarning(UserWarning):
    """Warning raised when a dependency archive resolves to a directory."""


class IdentifierReuseWarning(UserWarning):
    """Warning raised when a library identifier class is reused instead of regenerated."""


@dataclass(slots=True)
class StructuredLogger:
    min_level: LogLevel = "debug"
    records: list[dict[str, Any]] = field(default_factory=list)

    def log(
        self,
        *,
        operation: str,
        stage: str | None,
        artifact: str | None,
        message: str,
        level: LogLevel = "info",
        extra: dict[str, Any] | None = None,
    ) -> None:
        if _LEVEL_ORDER[level] < _LEVEL_ORDER[self.min_level]:
            return
        record: dict[str, Any] = {
            "level": level,
            "operation": operation,
            "stage": stage,
            "artifact": artifact,
            "message": message,
        }
        if extra is not None:
            record["extra"] = extra
        self.records.append(record)

    def records_for_stage(self, stage: str) -> list[dict[str, Any]]:
        return [record for record in self.records if record.get("stage") == stage]

    def records_for_artifact(self, artifact: str) -> list[dict[str, Any]]:
        return [record for record in self.records if record.get("artifact") == artifact]

    def to_json_lines(self, path: str | Path) -> Path:
        output_path = Path(path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        lines = [json.dumps(record, sort_keys=True) for record in self.records]
        output_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return output_path
