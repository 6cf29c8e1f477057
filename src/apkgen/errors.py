"""Typed pipeline error model with stable, machine-readable error codes."""

from __future__ import annotations

from collections.abc import Mapping
from enum import StrEnum


class ErrorCode(StrEnum):
    """Stable error identifiers used across pipeline stages."""

    VALIDATION = "E_VALIDATION"
    EXTRACTION = "E_EXTRACTION"
    MISSING_MANIFEST = "E_MISSING_MANIFEST"
    MERGE = "E_MERGE"
    TOOL = "E_TOOL"
    IO = "E_IO"


# Context keys rendered first, in this order; remaining keys follow as given.
LEADING_CONTEXT_KEYS = ("stage", "operation", "artifact", "path", "command", "returncode")


class ApkgenError(Exception):
    """Failure of one generate-sources stage.

    ``context`` holds string diagnostics keyed by what failed: the dependency
    ``artifact`` identity, the file ``path`` involved, and for external
    compilers the ``command`` line, ``returncode`` and captured ``stderr``.
    """

    code: str
    hint: str | None
    context: Mapping[str, str]

    def __init__(
        self,
        message: str,
        *,
        code: ErrorCode,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code.value
        self.hint = hint
        self.context = dict(context or {})

    @property
    def artifact(self) -> str | None:
        return self.context.get("artifact") or None

    @property
    def operation(self) -> str | None:
        return self.context.get("operation") or None

    def __str__(self) -> str:
        lines = [super().__str__()]
        if self.hint:
            lines.append(f"Hint: {self.hint}")
        ordered = [key for key in LEADING_CONTEXT_KEYS if key in self.context]
        ordered += [key for key in self.context if key not in LEADING_CONTEXT_KEYS]
        for key in ordered:
            value = self.context[key]
            if value:
                lines.append(f"  {key}: {value}")
        return "\n".join(lines)

    def to_dict(self) -> dict[str, object]:
        payload: dict[str, object] = {
            "code": self.code,
            "message": self.args[0] if self.args else "",
            "context": dict(self.context),
        }
        if self.artifact is not None:
            payload["artifact"] = self.artifact
        if self.hint is not None:
            payload["hint"] = self.hint
        return payload


class ValidationError(ApkgenError):
    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message, code=ErrorCode.VALIDATION, hint=hint, context=context)


class ExtractionError(ApkgenError):
    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message, code=ErrorCode.EXTRACTION, hint=hint, context=context)


class MissingManifestError(ApkgenError):
    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message, code=ErrorCode.MISSING_MANIFEST, hint=hint, context=context)


class MergeFailure(ApkgenError):
    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message, code=ErrorCode.MERGE, hint=hint, context=context)


class ToolError(ApkgenError):
    """External compiler exited non-zero; context carries command and stderr."""

    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message, code=ErrorCode.TOOL, hint=hint, context=context)

    @property
    def stderr(self) -> str:
        return self.context.get("stderr", "")


class GenerationIOError(ApkgenError):
    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message, code=ErrorCode.IO, hint=hint, context=context)


__all__ = [
    "ApkgenError",
    "ErrorCode",
    "ExtractionError",
    "GenerationIOError",
    "MergeFailure",
    "MissingManifestError",
    "ToolError",
    "ValidationError",
]
