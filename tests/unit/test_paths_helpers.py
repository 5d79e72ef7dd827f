from pathlib import Path

from vision_overlay.shared.paths import ensure_path_first, list_files_with_extensions, resolve_against


def test_list_files_with_extensions(tmp_path: Path) -> None:
    (tmp_path / "first.pt").write_text("data")
    (tmp_path / "second.ONNX").write_text("data")
    (tmp_path / "ignore.txt").write_text("nope")

    results = list_files_with_extensions(tmp_path, (".pt", "onnx"))
    assert [path.name for path in results] == ["first.pt", "second.ONNX"]


def test_list_files_with_missing_directory(tmp_path: Path) -> None:
    assert list_files_with_extensions(tmp_path / "missing", (".pt",)) == []


def test_ensure_path_first_inserts() -> None:
    base = ["a.pt", "b.pt"]
    ensured = ensure_path_first(base, "c.pt")
    assert ensured == ["c.pt", "a.pt", "b.pt"]
    assert base == ["a.pt", "b.pt"]
    assert ensure_path_first(base, "b.pt") == ["b.pt", "a.pt"]
    assert ensure_path_first(base, None) == base


def test_resolve_against(tmp_path: Path) -> None:
    assert resolve_against(tmp_path, "models/best.pt") == (tmp_path / "models" / "best.pt").resolve()
    absolute = tmp_path / "elsewhere.pt"
    assert resolve_against(Path("/unused"), absolute) == absolute.resolve()
