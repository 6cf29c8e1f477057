"""Manifest descriptors and merging."""

from .descriptor import ANDROID_NS, ManifestDescriptor, read_package_name
from .merge import (
    ElementTreeManifestMerger,
    ManifestMergeService,
    ManifestMergerAdapter,
    collect_library_manifests,
)

__all__ = [
    "ANDROID_NS",
    "ElementTreeManifestMerger",
    "ManifestDescriptor",
    "ManifestMergeService",
    "ManifestMergerAdapter",
    "collect_library_manifests",
    "read_package_name",
]
