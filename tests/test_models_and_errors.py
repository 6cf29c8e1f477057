from pathlib import Path

from apkgen.errors import (
    ErrorCode,
    ExtractionError,
    GenerationIOError,
    MergeFailure,
    MissingManifestError,
    ToolError,
    ValidationError,
)
from apkgen.models import (
    AndroidProject,
    ArchiveKind,
    BuildConfigConstant,
    DependencyArtifact,
    GeneratedSourceSet,
    LibraryUnit,
    OverlayChain,
)


def test_error_codes_are_stable_and_machine_readable() -> None:
    errors = [
        ValidationError("bad input"),
        ExtractionError("corrupt archive"),
        MissingManifestError("no manifest"),
        MergeFailure("merge failed"),
        ToolError("aapt failed"),
        GenerationIOError("disk full"),
    ]
    assert [error.code for error in errors] == [
        ErrorCode.VALIDATION.value,
        ErrorCode.EXTRACTION.value,
        ErrorCode.MISSING_MANIFEST.value,
        ErrorCode.MERGE.value,
        ErrorCode.TOOL.value,
        ErrorCode.IO.value,
    ]


def test_error_string_includes_hint_and_non_empty_context() -> None:
    error = ToolError(
        "aapt exited with status 1.",
        hint="Check the tool output.",
        context={"command": "aapt package", "stderr": "boom", "artifact": ""},
    )

    rendered = str(error)
    assert "Hint: Check the tool output." in rendered
    assert "command: aapt package" in rendered
    assert "artifact" not in rendered
    assert error.stderr == "boom"
    assert error.to_dict()["code"] == "E_TOOL"


def test_error_renders_leading_context_first_and_exposes_artifact() -> None:
    error = ExtractionError(
        "Could not unpack archive.",
        context={
            "error": "Bad magic number",
            "path": "/deps/lib.apklib",
            "artifact": "com.example:lib:apklib:1.0",
            "operation": "extract",
        },
    )

    lines = str(error).splitlines()
    assert lines == [
        "Could not unpack archive.",
        "  operation: extract",
        "  artifact: com.example:lib:apklib:1.0",
        "  path: /deps/lib.apklib",
        "  error: Bad magic number",
    ]
    assert error.artifact == "com.example:lib:apklib:1.0"
    assert error.operation == "extract"
    payload = error.to_dict()
    assert payload["message"] == "Could not unpack archive."
    assert payload["artifact"] == "com.example:lib:apklib:1.0"
    assert "hint" not in payload
    assert GenerationIOError("disk full").artifact is None


def test_archive_kind_helpers() -> None:
    assert [kind.value for kind in ArchiveKind if kind.is_source_bearing] == ["apksources", "sources"]
    assert [kind.value for kind in ArchiveKind if kind.has_manifest] == ["apklib", "aar"]


def test_library_unit_paths_follow_archive_kind(tmp_path: Path) -> None:
    def unit(kind: ArchiveKind) -> LibraryUnit:
        artifact = DependencyArtifact(group="com.example", name="lib", version="1.0", kind=kind)
        return LibraryUnit(artifact=artifact, root=tmp_path / kind.value)

    apklib = unit(ArchiveKind.LIBRARY_BUNDLE)
    assert apklib.manifest == tmp_path / "apklib" / "AndroidManifest.xml"
    assert apklib.src == tmp_path / "apklib" / "src"

    apksources = unit(ArchiveKind.MERGED_SOURCE_BUNDLE)
    assert apksources.manifest is None
    assert apksources.src == tmp_path / "apksources" / "src" / "main" / "java"

    sources = unit(ArchiveKind.LIBRARY_SOURCE)
    assert sources.src == tmp_path / "sources"
    assert sources.res is None


def test_artifact_identity_and_unpack_name() -> None:
    artifact = DependencyArtifact(
        group="com.example",
        name="widgets",
        version="2.1",
        kind=ArchiveKind.LIBRARY_WITH_RESOURCES,
    )
    assert artifact.identity == "com.example:widgets:aar:2.1"
    assert artifact.unpack_name == "com.example_widgets_aar_2.1"


def test_overlay_chain_drops_missing_and_duplicate_directories(tmp_path: Path) -> None:
    first = tmp_path / "first"
    second = tmp_path / "second"
    first.mkdir()
    second.mkdir()

    chain = OverlayChain.of_existing([first, tmp_path / "missing", None, second, first])

    assert list(chain) == [first, second]
    assert len(chain) == 2


def test_build_config_constant_quotes_only_strings() -> None:
    assert BuildConfigConstant(name="URL", type="String", value="http://x").render_value() == (
        '"http://x"'
    )
    assert BuildConfigConstant(name="LEVEL", type="int", value="3").render_value() == "3"


def test_generated_source_set_records_each_file_once(tmp_path: Path) -> None:
    generated = GeneratedSourceSet()
    root = tmp_path / "gen"
    generated.add_root(root)
    generated.record(root, root / "R.java")
    generated.record(root, root / "R.java")
    generated.add_root(root)

    assert generated.files_under(root) == (root / "R.java",)
    assert list(generated.roots) == [root]


def test_project_derives_build_layout_from_base_dir(tmp_path: Path) -> None:
    project = AndroidProject(base_dir=tmp_path)

    assert project.manifest_file == tmp_path / "AndroidManifest.xml"
    assert project.gen_dir == tmp_path / "target" / "generated-sources" / "r"
    assert project.classes == tmp_path / "target" / "classes"
    assert project.is_android
    assert not AndroidProject(base_dir=tmp_path, packaging="jar").is_android
