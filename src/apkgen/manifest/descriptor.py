"""Manifest descriptors and package-name extraction."""

from __future__ import annotations

import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from pathlib import Path

from apkgen.errors import ValidationError

ANDROID_NS = "http://schemas.android.com/apk/res/android"

ET.register_namespace("android", ANDROID_NS)


def android_attr(name: str) -> str:
    return f"{{{ANDROID_NS}}}{name}"


def read_package_name(path: Path) -> str:
    try:
        root = ET.parse(path).getroot()
    except (ET.ParseError, OSError) as exc:
        raise ValidationError(
            "Unable to read manifest.",
            hint="Check that the manifest exists and is well-formed XML.",
            context={"operation": "read_package", "path": str(path), "error": str(exc)},
        ) from exc
    package = root.get("package")
    if not package:
        raise ValidationError(
            "Manifest does not declare a package.",
            hint="Add a package attribute to the <manifest> element.",
            context={"operation": "read_package", "path": str(path)},
        )
    return package


@dataclass(slots=True)
class ManifestDescriptor:
    path: Path
    _package: str | None = field(init=False, default=None, repr=False)

    @property
    def package(self) -> str:
        if self._package is None:
            self._package = read_package_name(self.path)
        return self._package

    def exists(self) -> bool:
        return self.path.is_file()

    def invalidate(self) -> None:
        """Drop the cached package name after the file was rewritten."""
        self._package = None
