"""Shared test fixtures."""

from __future__ import annotations

import re
import zipfile
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path

import pytest

from apkgen.models import AndroidProject, AndroidSdk
from apkgen.tools.base import ToolResult

IMPORT_PATTERN = re.compile(r"^\s*import\s+([\w.]+)\s*;", re.MULTILINE)


@dataclass(slots=True)
class FakeToolRunner:
    """Stands in for aapt and aidl.

    aapt writes an ``R.java`` for the package given by ``--custom-package`` or
    the ``-M`` manifest. aidl resolves ``import`` lines against the ``-I``
    roots and fails like the real compiler when a type cannot be found.
    """

    name: str = "fake"
    calls: list[tuple[Path, list[str], Path]] = field(default_factory=list)
    failures: dict[str, ToolResult] = field(default_factory=dict)

    def run(
        self,
        executable: Path,
        args: Sequence[str],
        *,
        cwd: Path,
        merge_stderr: bool = False,
    ) -> ToolResult:
        self.calls.append((executable, list(args), cwd))
        if executable.name in self.failures:
            return self.failures[executable.name]
        if executable.name == "aapt":
            return self._aapt(list(args))
        if executable.name == "aidl":
            return self._aidl(list(args))
        return ToolResult(returncode=0)

    def calls_for(self, tool: str) -> list[list[str]]:
        return [args for executable, args, _ in self.calls if executable.name == tool]

    def _aapt(self, args: list[str]) -> ToolResult:
        gen_dir = Path(args[args.index("-J") + 1])
        if "--custom-package" in args:
            package = args[args.index("--custom-package") + 1]
        else:
            manifest = Path(args[args.index("-M") + 1])
            match = re.search(r'package="([^"]+)"', manifest.read_text(encoding="utf-8"))
            assert match is not None
            package = match.group(1)
        target = gen_dir.joinpath(*package.split("."), "R.java")
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(f"package {package};\n\npublic final class R {{}}\n", encoding="utf-8")
        return ToolResult(returncode=0)

    def _aidl(self, args: list[str]) -> ToolResult:
        includes = [Path(arg[2:]) for arg in args if arg.startswith("-I")]
        source, output = Path(args[-2]), Path(args[-1])
        for imported in IMPORT_PATTERN.findall(source.read_text(encoding="utf-8")):
            relative = Path(*imported.split(".")).with_suffix(".aidl")
            if not any((root / relative).is_file() for root in includes):
                return ToolResult(
                    returncode=1,
                    stderr=f"{source}:1: couldn't find import for class {imported}\n",
                )
        output.write_text(f"// generated from {source.name}\n", encoding="utf-8")
        return ToolResult(returncode=0)


@pytest.fixture
def runner() -> FakeToolRunner:
    return FakeToolRunner()


@pytest.fixture
def sdk(tmp_path: Path) -> AndroidSdk:
    return AndroidSdk.from_platform_dir(tmp_path / "sdk", "android-19")


@pytest.fixture
def make_zip() -> Callable[[Path, Mapping[str, str]], Path]:
    def _make_zip(path: Path, files: Mapping[str, str]) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        with zipfile.ZipFile(path, "w") as bundle:
            for name, content in files.items():
                bundle.writestr(name, content)
        return path

    return _make_zip


@pytest.fixture
def manifest_xml() -> Callable[..., str]:
    def _manifest_xml(package: str, *components: str, permissions: Sequence[str] = ()) -> str:
        permission_lines = "".join(
            f'  <uses-permission android:name="{name}" />\n' for name in permissions
        )
        component_lines = "".join(
            f'    <activity android:name="{name}" />\n' for name in components
        )
        return (
            '<?xml version="1.0" encoding="utf-8"?>\n'
            '<manifest xmlns:android="http://schemas.android.com/apk/res/android" '
            f'package="{package}">\n'
            f"{permission_lines}"
            "  <application>\n"
            f"{component_lines}"
            "  </application>\n"
            "</manifest>\n"
        )

    return _manifest_xml


@pytest.fixture
def project(tmp_path: Path, manifest_xml: Callable[..., str]) -> AndroidProject:
    base = tmp_path / "app"
    (base / "res" / "values").mkdir(parents=True)
    (base / "res" / "values" / "strings.xml").write_text("<resources/>\n", encoding="utf-8")
    (base / "src" / "main" / "java").mkdir(parents=True)
    (base / "AndroidManifest.xml").write_text(
        manifest_xml("com.example.app", ".MainActivity"),
        encoding="utf-8",
    )
    return AndroidProject(base_dir=base)
