from pathlib import Path

from apkgen.observability import StructuredLogger
from apkgen.resources import OverlayResolver, copy_tree


def _write(path: Path, content: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


def _res(root: Path, files: dict[str, str]) -> Path:
    for relative, content in files.items():
        _write(root / relative, content)
    return root


def test_chain_orders_overlays_project_then_dependencies(tmp_path: Path) -> None:
    overlay = _res(tmp_path / "overlay", {"values/strings.xml": "overlay"})
    project_res = _res(tmp_path / "app" / "res", {"values/strings.xml": "app"})
    dep_one = _res(tmp_path / "dep1" / "res", {"values/a.xml": "a"})
    dep_two = _res(tmp_path / "dep2" / "res", {"values/b.xml": "b"})
    logger = StructuredLogger()
    resolver = OverlayResolver(combined_dir=tmp_path / "combined", logger=logger)

    chain = resolver.resolve(
        [overlay, tmp_path / "missing-overlay"],
        project_res,
        [dep_one, tmp_path / "dep3" / "res", dep_two],
    )

    assert list(chain) == [overlay, project_res, dep_one, dep_two]
    assert not (tmp_path / "combined").exists()
    warnings = [record for record in logger.records if record["level"] == "warn"]
    assert len(warnings) == 1
    assert "dep3" in warnings[0]["message"]


def test_combined_tree_prefers_local_then_first_dependency(tmp_path: Path) -> None:
    project_res = _res(
        tmp_path / "app" / "res",
        {"values/strings.xml": "app strings", "layout/main.xml": "app layout"},
    )
    first = _res(
        tmp_path / "first" / "res",
        {"values/strings.xml": "first strings", "values/colors.xml": "first colors"},
    )
    second = _res(
        tmp_path / "second" / "res",
        {"values/colors.xml": "second colors", "drawable/icon.xml": "second icon"},
    )
    combined_dir = tmp_path / "combined" / "res"
    resolver = OverlayResolver(combined_dir=combined_dir)

    chain = resolver.resolve([], project_res, [], combined_sources=[first, second])

    assert list(chain) == [combined_dir]
    assert (combined_dir / "values" / "strings.xml").read_text(encoding="utf-8") == "app strings"
    assert (combined_dir / "values" / "colors.xml").read_text(encoding="utf-8") == "first colors"
    assert (combined_dir / "drawable" / "icon.xml").read_text(encoding="utf-8") == "second icon"
    assert (combined_dir / "layout" / "main.xml").read_text(encoding="utf-8") == "app layout"


def test_combined_tree_is_rebuilt_deterministically(tmp_path: Path) -> None:
    project_res = _res(tmp_path / "app" / "res", {"values/strings.xml": "app"})
    bundle = _res(tmp_path / "bundle" / "res", {"values/bundle.xml": "bundle"})
    combined_dir = tmp_path / "combined" / "res"
    resolver = OverlayResolver(combined_dir=combined_dir)

    first = resolver.resolve([], project_res, [], combined_sources=[bundle])
    _write(combined_dir / "values" / "stale.xml", "left over")
    second = resolver.resolve([], project_res, [], combined_sources=[bundle])

    assert first == second
    assert sorted(p.name for p in (combined_dir / "values").iterdir()) == ["bundle.xml", "strings.xml"]


def test_local_copy_skips_scm_and_editor_files(tmp_path: Path) -> None:
    project_res = _res(
        tmp_path / "app" / "res",
        {
            "values/strings.xml": "app",
            "values/strings.xml~": "backup",
            "values/.gitignore": "*",
            ".git/HEAD": "ref",
            "layout/main.xml.swp": "swap",
        },
    )
    bundle = _res(tmp_path / "bundle" / "res", {"values/bundle.xml": "bundle"})
    combined_dir = tmp_path / "combined"

    OverlayResolver(combined_dir=combined_dir).resolve([], project_res, [], combined_sources=[bundle])

    copied = sorted(p.relative_to(combined_dir).as_posix() for p in combined_dir.rglob("*") if p.is_file())
    assert copied == ["values/bundle.xml", "values/strings.xml"]


def test_copy_tree_without_overwrite_keeps_existing_files(tmp_path: Path) -> None:
    source = _res(tmp_path / "source", {"values/a.xml": "new", "values/b.xml": "new"})
    destination = _res(tmp_path / "destination", {"values/a.xml": "old"})

    written = copy_tree(source, destination, overwrite=False)

    assert written == [destination / "values" / "b.xml"]
    assert (destination / "values" / "a.xml").read_text(encoding="utf-8") == "old"
