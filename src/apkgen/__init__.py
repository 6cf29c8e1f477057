"""Public package entrypoint for the Android generate-sources pipeline."""

from .errors import (
    ApkgenError,
    ExtractionError,
    GenerationIOError,
    MergeFailure,
    MissingManifestError,
    ToolError,
    ValidationError,
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
from .observability import StructuredLogger
from .pipeline import GenerateSourcesPipeline, GenerationResult
from .policy import Policy
from .registry import LibraryPath, LibraryRegistry

__all__ = [
    "AaptOptions",
    "AndroidProject",
    "AndroidSdk",
    "ApkgenError",
    "ArchiveKind",
    "BuildConfigConstant",
    "DependencyArtifact",
    "ExtractionError",
    "GenerateSourcesPipeline",
    "GeneratedSourceSet",
    "GenerationIOError",
    "GenerationResult",
    "LibraryPath",
    "LibraryRegistry",
    "LibraryUnit",
    "MergeFailure",
    "MissingManifestError",
    "OverlayChain",
    "Policy",
    "StructuredLogger",
    "ToolError",
    "ValidationError",
]
