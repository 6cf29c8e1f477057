"""Generated-source producers driven by the pipeline."""

from .aidl import AidlCompiler, find_aidl_files
from .build_config import BuildConfigGenerator, render_build_config
from .resource_ids import ResourceIdGenerator

__all__ = [
    "AidlCompiler",
    "BuildConfigGenerator",
    "ResourceIdGenerator",
    "find_aidl_files",
    "render_build_config",
]
